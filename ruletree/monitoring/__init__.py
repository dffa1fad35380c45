"""
Logging and metrics integration for ruletree.
"""

from .logging import get_logger, setup_structured_logging
from .metrics import (
    OUTCOME_INVALID,
    OUTCOME_MISCONFIGURED,
    OUTCOME_SUCCESS,
    constraint_failure_counter,
    record_validation,
    validation_counter,
)

__all__ = [
    'get_logger',
    'setup_structured_logging',
    'record_validation',
    'validation_counter',
    'constraint_failure_counter',
    'OUTCOME_SUCCESS',
    'OUTCOME_INVALID',
    'OUTCOME_MISCONFIGURED',
]

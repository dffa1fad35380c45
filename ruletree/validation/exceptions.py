"""
Exception classes for rule tree validation.

This module provides the exception hierarchy raised by the rule engine and
its collaborators. Two families are kept strictly apart:

- Validation errors: the data does not satisfy the rules. These are expected
  outcomes, carry the path of the offending node plus a human-readable
  reason, and abort the call on the first violation.
- Configuration errors: the rule tree or the call setup is wrong (unknown
  format, unknown condition, malformed options). These are always fatal and
  never share a base class with validation errors below ``RuleTreeError``.

Converters report value problems by raising ``ConversionError``; the engine
wraps those into validation errors and lets every other exception propagate.

Classes:
    RuleTreeError: Base class carrying error code, severity and category
    RuleValidationError: Data violates a constraint
    ConfigurationError: Rule tree, options or settings are invalid
    ConversionError: Converter rejected a value with a descriptive reason
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

import structlog

# Structured logger for the exception audit trail
logger = structlog.get_logger("ruletree.exceptions")


class ErrorSeverity(Enum):
    """
    Error severity classification for rule tree exceptions.

    Determines the log level used when an exception is raised.
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error category classification for rule tree exception types."""
    DATA_VALIDATION = "data_validation"
    DATA_PROCESSING = "data_processing"
    CONFIGURATION = "configuration"


class RuleTreeError(Exception):
    """
    Base exception class for all rule tree failures.

    Attributes:
        message (str): Human-readable error message
        error_code (str): Unique error identifier for programmatic handling
        severity (ErrorSeverity): Error severity level, drives the log level
        category (ErrorCategory): Error category for classification
        context (Dict[str, Any]): Additional error context
        cause (Optional[Exception]): Underlying exception, if any
        timestamp (datetime): Error occurrence timestamp

    Example:
        try:
            validate(document, rules)
        except RuleTreeError as e:
            logger.error("Document rejected", error=e.to_dict())
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.DATA_VALIDATION,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ) -> None:
        """
        Initialize base rule tree exception.

        Args:
            message: Human-readable error message
            error_code: Unique error identifier
            severity: Error severity level for logging
            category: Error category for classification
            context: Additional error context
            cause: Original exception that caused this one
        """
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        self._log_exception()

    def _log_exception(self) -> None:
        """Emit a structured log entry at a level matching the severity."""
        log_data = {
            'event_type': 'rule_tree_exception',
            'exception_class': self.__class__.__name__,
            'error_code': self.error_code,
            'severity': self.severity.value,
            'category': self.category.value,
            'context': self.context,
        }
        if self.cause is not None:
            log_data['cause_type'] = type(self.cause).__name__

        if self.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL):
            logger.error(self.message, **log_data)
        elif self.severity == ErrorSeverity.MEDIUM:
            logger.warning(self.message, **log_data)
        else:
            logger.info(self.message, **log_data)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the error
        """
        return {
            'error': {
                'message': self.message,
                'code': self.error_code,
                'severity': self.severity.value,
                'category': self.category.value,
                'timestamp': self.timestamp.isoformat(),
                'context': self.context,
            }
        }

    def __str__(self) -> str:
        return self.message


class RuleValidationError(RuleTreeError):
    """
    Exception for data that violates a rule constraint.

    Raised on the first violated constraint encountered during the
    depth-first traversal. The ``path`` locates the offending node using
    dotted keys for mappings and ``[index]`` or ``[index,rule=name]`` for
    sequences.

    Example:
        raise RuleValidationError(
            path="vehicle.wheels",
            reason="not defined but required",
            constraint="required"
        )
    """

    def __init__(
        self,
        path: str,
        reason: str,
        constraint: str,
        **kwargs
    ) -> None:
        """
        Initialize rule validation exception.

        Args:
            path: Descriptive path of the offending value
            reason: Human-readable description of the violation
            constraint: Name of the violated constraint (e.g. ``range``)
            **kwargs: Additional arguments passed to RuleTreeError
        """
        kwargs.setdefault('severity', ErrorSeverity.LOW)
        kwargs.setdefault('category', ErrorCategory.DATA_VALIDATION)

        context = kwargs.get('context', {})
        context['path'] = path
        context['constraint'] = constraint
        kwargs['context'] = context

        message = f"{path}: {reason}" if path else reason
        error_code = f"{_code_fragment(constraint)}_VIOLATION"

        super().__init__(message, error_code, **kwargs)

        self.path = path
        self.reason = reason
        self.constraint = constraint


class ConfigurationError(RuleTreeError):
    """
    Exception for rule tree and setup failures.

    Raised when a rule names an unregistered format or condition, when the
    rule tree is structurally malformed, or when options or settings carry
    invalid values. These are schema-authoring or programming mistakes and
    are never reported as data validation failures.

    Example:
        raise ConfigurationError(
            message="kg is not a valid format at location vehicle.weight",
            error_code="UNKNOWN_FORMAT",
            config_key="kg"
        )
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        config_key: Optional[str] = None,
        config_source: Optional[str] = None,
        **kwargs
    ) -> None:
        """
        Initialize configuration exception.

        Args:
            message: Error message describing the configuration failure
            error_code: Unique error identifier
            config_key: Name of the offending format, condition or setting
            config_source: Where the configuration came from (rules, options, environment)
            **kwargs: Additional arguments passed to RuleTreeError
        """
        kwargs.setdefault('severity', ErrorSeverity.CRITICAL)
        kwargs.setdefault('category', ErrorCategory.CONFIGURATION)

        context = kwargs.get('context', {})
        if config_key:
            context['config_key'] = config_key
        if config_source:
            context['config_source'] = config_source
        kwargs['context'] = context

        super().__init__(message, error_code, **kwargs)

        self.config_key = config_key
        self.config_source = config_source


class ConversionError(ValueError):
    """Raised by format converters when a value cannot be converted."""
    pass


def _code_fragment(name: str) -> str:
    """Turn a camelCase constraint name into an UPPER_SNAKE error code fragment."""
    fragment = []
    for char in name:
        if char.isupper() and fragment:
            fragment.append('_')
        fragment.append(char.upper())
    return ''.join(fragment)

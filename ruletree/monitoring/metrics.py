"""
Prometheus metrics for rule tree validation.

Counts every ``validate`` call by outcome and every violated constraint by
name. Recording is skipped when metrics are disabled in the settings.
"""

from prometheus_client import Counter

from ..config.settings import get_settings

OUTCOME_SUCCESS = 'success'
OUTCOME_INVALID = 'invalid'
OUTCOME_MISCONFIGURED = 'misconfigured'

validation_counter = Counter(
    'ruletree_validations_total',
    'Total number of rule tree validations by outcome',
    ['outcome']
)

constraint_failure_counter = Counter(
    'ruletree_constraint_failures_total',
    'Total number of violated constraints by constraint name',
    ['constraint']
)


def record_validation(outcome: str, constraint: str = None) -> None:
    """Record one validation outcome and, for failures, the violated constraint."""
    if not get_settings().metrics_enabled:
        return
    validation_counter.labels(outcome=outcome).inc()
    if constraint:
        constraint_failure_counter.labels(constraint=constraint).inc()

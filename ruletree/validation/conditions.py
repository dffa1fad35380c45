"""
Conditional rule selection.

A rule map entry may be a list of alternative rule nodes instead of a single
node. Entries carrying a ``condition`` name are guarded by a predicate looked
up in the ``ConditionRegistry``; entries without one are "else" fallbacks.
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, Optional

import structlog

from .exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

Condition = Callable[[Any, Any], Any]

# Rule applied when no alternative matches and no fallback exists
EMPTY_RULE: Mapping = {}


class ConditionRegistry(Mapping):
    """
    Named predicates ``(parent_value, value) -> bool`` used by conditional rules.

    Behaves as a read-only mapping; ``lookup`` is the engine's entry point and
    treats unknown names as a configuration error.
    """

    def __init__(self, conditions: Optional[Mapping] = None):
        self._conditions: Dict[str, Condition] = {}
        for name, predicate in (conditions or {}).items():
            self.register(name, predicate)

    def register(self, name: str, predicate: Condition) -> None:
        if not callable(predicate):
            raise ConfigurationError(
                message=f"condition {name} must be callable",
                error_code="INVALID_CONDITION",
                config_key=name,
                config_source="options"
            )
        self._conditions[name] = predicate

    def lookup(self, name: str, path: str = '') -> Condition:
        """
        Return the predicate registered under ``name``.

        Raises:
            ConfigurationError: If no predicate is registered under that name
        """
        try:
            return self._conditions[name]
        except KeyError:
            raise ConfigurationError(
                message=f"invalid condition name {name} at {path}",
                error_code="UNKNOWN_CONDITION",
                config_key=name,
                config_source="rules",
                context={'path': path}
            ) from None

    def __getitem__(self, name: str) -> Condition:
        return self._conditions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._conditions)

    def __len__(self) -> int:
        return len(self._conditions)

    def __repr__(self) -> str:
        return f"ConditionRegistry({sorted(self._conditions)!r})"


def is_alternative_list(rule: Any) -> bool:
    return isinstance(rule, (list, tuple))


def select_conditional_rule(
    rule: Any,
    value: Any,
    parent_value: Any,
    path: str,
    conditions: ConditionRegistry
) -> Mapping:
    """
    Collapse a rule node or alternative list into one concrete rule node.

    A single rule node is returned unchanged. For an alternative list the
    first entry whose condition predicate is truthy for
    ``(parent_value, value)`` wins; otherwise the first entry without a
    condition is used, or an empty rule node when there is none.

    Raises:
        ConfigurationError: If an entry names an unregistered condition
    """
    if not is_alternative_list(rule):
        return rule

    fallback = None
    for alternative in rule:
        if not isinstance(alternative, Mapping):
            raise ConfigurationError(
                message=f"conditional rule alternatives at {path} must be rule objects",
                error_code="MALFORMED_RULE",
                config_source="rules",
                context={'path': path}
            )
        condition_name = alternative.get('condition')
        if condition_name is None:
            if fallback is None:
                fallback = alternative
            continue
        predicate = conditions.lookup(condition_name, path)
        if predicate(parent_value, value):
            logger.debug("Conditional rule selected", path=path, condition=condition_name)
            return alternative

    if fallback is None:
        return EMPTY_RULE
    return fallback

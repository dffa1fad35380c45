"""
Rule tree validation engine.

Validates arbitrarily nested data (mappings, sequences, scalars) against a
declarative rule tree in a single depth-first pass. The first violated
constraint aborts the call with a ``RuleValidationError``; with the
``convert`` and ``filter`` options the data is normalized and pruned in
place as a side effect of the same traversal.

Rule DSL:
    The root value is a mapping (or sequence). For every child you want to
    check, the rule map carries an entry with the same name whose value is a
    rule node, i.e. a mapping of constraints:

        required         value must be present
        format           named format from the format registry
        allowedValues    value must equal one of the listed values
        range            [min, max], inclusive
        minLength, maxLength, length
                         element or character count
        childRules       nested rule map for a mapping or sequence value
        ascending, descending, noRepeat
                         ordering against the previous value matched by the
                         same rule name one level up, i.e. across the
                         elements of the enclosing container
        fixedChildLength siblings share one length

    The reserved ``'*'`` entry governs keys or positions not named
    explicitly. In sequences, entries before ``'*'`` anchor to the front and
    entries after it to the back. A rule map entry may also be a list of
    alternatives guarded by ``condition`` names, see ``conditions``.

Example:
    rules = {
        'coordinates': {
            'required': True,
            'format': 'array',
            'minLength': 1,
            'childRules': {
                '*': {
                    'format': 'array',
                    'length': 2,
                    'childRules': {'dimension': {'format': 'number', 'required': True}}
                }
            }
        },
        'vehicle': {
            'format': 'object',
            'childRules': {
                'energysource': {'allowedValues': ['muscle', 'fossilfuel', 'electricity']},
                'wheels': {'format': 'number', 'required': True}
            }
        }
    }
    validate(document, rules, {'convert': True})
"""

from collections.abc import Mapping, MutableMapping, MutableSequence
from typing import Any

import structlog

from ..monitoring.metrics import (
    OUTCOME_INVALID,
    OUTCOME_MISCONFIGURED,
    OUTCOME_SUCCESS,
    record_validation,
)
from .conditions import select_conditional_rule
from .constraints import VALUE_CHECKS, check_format, check_required
from .exceptions import ConfigurationError, RuleValidationError
from .iteration import IterationStrategy, iterate_children, select_strategy
from .models import (
    MISSING,
    format_child_path,
    is_container,
    is_missing,
    summarize_rule,
)
from .options import ValidationOptions, resolve_options
from .siblings import SiblingStateStack

logger = structlog.get_logger(__name__)

SEQUENCE_STRATEGIES = (IterationStrategy.SEQUENCE, IterationStrategy.SEQUENCE_WILDCARD)


class RuleEngine:
    """
    Recursive rule tree evaluator.

    The engine holds only its options; all traversal state lives in a
    ``SiblingStateStack`` created per ``validate`` call, so one engine can
    serve any number of sequential or concurrent calls on distinct data.

    Example:
        engine = RuleEngine({'filter': True, 'conditions': {'isBig': is_big}})
        engine.validate(payload, rules)
    """

    def __init__(self, options: Any = None, **overrides):
        """
        Initialize the engine.

        Args:
            options: Mapping of options or a ``ValidationOptions`` instance
            **overrides: Individual options overriding ``options``

        Raises:
            ConfigurationError: If the options are invalid
        """
        try:
            self.options: ValidationOptions = resolve_options(options, **overrides)
        except ConfigurationError:
            record_validation(OUTCOME_MISCONFIGURED)
            raise

    def validate(self, data: Any, rules: Mapping) -> None:
        """
        Validate ``data`` against ``rules``.

        Returns normally when every constraint holds. Mutations made under
        ``convert``/``filter`` are not rolled back when a later check fails.

        Raises:
            RuleValidationError: On the first violated constraint
            ConfigurationError: On unknown formats or conditions, or a malformed rule tree
        """
        stack = SiblingStateStack()
        try:
            if not is_container(data):
                raise RuleValidationError(
                    path='',
                    reason="is expected to be an object or array",
                    constraint="childRules"
                )
            self.process_child_rules('', rules, data, stack)
        except RuleValidationError as e:
            record_validation(OUTCOME_INVALID, e.constraint)
            raise
        except ConfigurationError:
            record_validation(OUTCOME_MISCONFIGURED)
            raise

        record_validation(OUTCOME_SUCCESS)
        logger.debug(
            "Rule tree validation succeeded",
            convert=self.options.convert,
            filter=self.options.filter
        )

    def process_child_rules(
        self,
        parent_path: str,
        rule_map: Mapping,
        parent_value: Any,
        stack: SiblingStateStack,
        fixed_child_length: bool = False
    ) -> None:
        """
        Apply a rule map to the children of ``parent_value``.

        Args:
            parent_path: Descriptive path of the parent value
            rule_map: Rule map governing the children
            parent_value: Mapping or sequence being iterated
            stack: Sibling state stack for this validation call
            fixed_child_length: Whether all children must share one length
        """
        if not isinstance(rule_map, Mapping):
            raise ConfigurationError(
                message=f"rules at {parent_path or 'root'} must be a mapping of rule names",
                error_code="MALFORMED_RULE",
                config_source="rules",
                context={'path': parent_path}
            )

        strategy = select_strategy(parent_value, rule_map)
        in_sequence = strategy in SEQUENCE_STRATEGIES
        multiple_rules = len(rule_map) > 1

        stack.push(fixed_child_length)
        try:
            for value, rule_name, position in iterate_children(strategy, parent_value, rule_map):
                path = format_child_path(parent_path, position, rule_name, in_sequence, multiple_rules)
                rule = select_conditional_rule(
                    rule_map[rule_name], value, parent_value, path, self.options.conditions
                )
                converted = self.process_rule(path, rule, rule_name, value, stack)
                if self.options.convert and not is_missing(converted) and converted is not value:
                    self.write_back(path, parent_value, position, converted)

            if self.options.filter and strategy is IterationStrategy.MAPPING:
                self.apply_filter(parent_path, parent_value, rule_map)
        finally:
            stack.pop()

    def process_rule(
        self,
        path: str,
        rule: Mapping,
        rule_name: str,
        value: Any,
        stack: SiblingStateStack
    ) -> Any:
        """
        Check every constraint of ``rule`` against ``value`` and descend into
        ``childRules``.

        Returns:
            The (possibly converted) value, or MISSING when the value is
            absent and not required
        """
        if not isinstance(rule, Mapping):
            raise ConfigurationError(
                message=f"rule at {path} must be a mapping of constraints",
                error_code="MALFORMED_RULE",
                config_source="rules",
                context={'path': path}
            )

        if self.options.debug:
            logger.info("Processing rule", path=path, rule=summarize_rule(rule))

        if rule.get('required'):
            check_required(path, rule, value)
        # remaining checks are meaningless for absent values
        if is_missing(value):
            return MISSING

        if rule.get('format') is not None:
            value = check_format(path, rule, value, self.options.formats, self.options.convert)

        for constraint, check in VALUE_CHECKS:
            if rule.get(constraint) is not None:
                check(path, rule, value)

        stack.process_sibling_rules(path, rule, rule_name, value)

        child_rules = rule.get('childRules')
        if child_rules is not None:
            if not is_container(value):
                raise RuleValidationError(
                    path=path,
                    reason="is expected to be an object or array",
                    constraint="childRules"
                )
            self.process_child_rules(
                path, child_rules, value, stack,
                fixed_child_length=bool(rule.get('fixedChildLength'))
            )

        return value

    def write_back(self, path: str, parent_value: Any, position: Any, converted: Any) -> None:
        """
        Store a converted value at its position in the parent container.

        Immutable containers (tuples, read-only mappings) keep their original
        values; later checks have already seen the converted value.
        """
        if not isinstance(parent_value, (MutableMapping, MutableSequence)):
            logger.debug("Skipped write-back into immutable container", path=path)
            return
        parent_value[position] = converted

    def apply_filter(self, parent_path: str, parent_value: Any, rule_map: Mapping) -> None:
        """Delete keys of a mapping value that the rule map does not name."""
        unknown_keys = [key for key in parent_value if key not in rule_map]
        if unknown_keys and not isinstance(parent_value, MutableMapping):
            logger.debug("Skipped filtering of immutable mapping", path=parent_path)
            return
        for key in unknown_keys:
            logger.debug(
                "Filtered unknown field",
                path=format_child_path(parent_path, key, key, False, False)
            )
            del parent_value[key]


def validate(data: Any, rules: Mapping, options: Any = None, **overrides) -> None:
    """
    Validate ``data`` against ``rules`` in a single call.

    Args:
        data: Mapping (or sequence) to validate, mutated in place under
            ``convert``/``filter``
        rules: Root rule map
        options: Mapping of options or a ``ValidationOptions`` instance;
            recognized keys are ``filter``, ``debug``, ``convert``,
            ``conditions`` and ``formats``
        **overrides: Individual options overriding ``options``

    Raises:
        RuleValidationError: On the first violated constraint
        ConfigurationError: On invalid options, unknown formats or conditions
    """
    RuleEngine(options, **overrides).validate(data, rules)

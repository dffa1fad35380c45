"""
Iteration strategies pairing child values with the rule that governs them.

One strategy is selected per rule map application from two facts: whether
the parent value is a sequence, and whether the rule map has a wildcard
entry. Each strategy yields ``(value, rule_name, position)`` triples in the
order the constraints must be evaluated.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Iterator, List, Tuple

from .models import WILDCARD, child_value, is_sequence

ChildBinding = Tuple[Any, str, Any]


class IterationStrategy(Enum):
    MAPPING = "mapping"
    MAPPING_WILDCARD = "mapping_wildcard"
    SEQUENCE = "sequence"
    SEQUENCE_WILDCARD = "sequence_wildcard"


def select_strategy(parent_value: Any, rule_map: Mapping) -> IterationStrategy:
    has_wildcard = WILDCARD in rule_map
    if is_sequence(parent_value):
        return IterationStrategy.SEQUENCE_WILDCARD if has_wildcard else IterationStrategy.SEQUENCE
    return IterationStrategy.MAPPING_WILDCARD if has_wildcard else IterationStrategy.MAPPING


def iterate_mapping(parent: Mapping, rule_map: Mapping) -> Iterator[ChildBinding]:
    """One binding per rule name, in declaration order; absent keys yield MISSING."""
    for rule_name in list(rule_map):
        yield child_value(parent, rule_name), rule_name, rule_name


def iterate_mapping_wildcard(parent: Mapping, rule_map: Mapping) -> Iterator[ChildBinding]:
    """
    Explicit rule names first (declaration order), then every remaining key
    of the value (in the value's own order) bound to the wildcard rule.
    """
    explicit_names = [name for name in rule_map if name != WILDCARD]
    for rule_name in explicit_names:
        yield child_value(parent, rule_name), rule_name, rule_name

    explicit = set(explicit_names)
    implicit_names = [key for key in list(parent) if key not in explicit]
    for key in implicit_names:
        yield child_value(parent, key), WILDCARD, key


def iterate_sequence(parent: List, rule_map: Mapping) -> Iterator[ChildBinding]:
    """
    Rule names cycle over the sequence. Iteration continues up to
    ``max(len(sequence), len(rule names))`` so rules past the end are still
    checked against MISSING.
    """
    rule_names = list(rule_map)
    if not rule_names:
        return
    total = max(len(parent), len(rule_names))
    for index in range(total):
        rule_name = rule_names[index % len(rule_names)]
        yield child_value(parent, index), rule_name, index


def wildcard_layout(rule_map: Mapping) -> Tuple[List[str], int, int, int]:
    """
    Describe head/tail anchoring around the wildcard entry.

    Returns:
        Tuple of (rule names, head count, tail count, minimum position count)
    """
    rule_names = list(rule_map)
    head = rule_names.index(WILDCARD)
    tail = len(rule_names) - head - 1
    wildcard_rule = rule_map[WILDCARD]
    wildcard_required = isinstance(wildcard_rule, Mapping) and bool(wildcard_rule.get('required'))
    minimum = head + tail + (1 if wildcard_required else 0)
    return rule_names, head, tail, minimum


def iterate_sequence_wildcard(parent: List, rule_map: Mapping) -> Iterator[ChildBinding]:
    """
    Head rules bind 1:1 to the front, tail rules 1:1 to the back, and every
    position in between uses the wildcard rule.
    """
    rule_names, head, tail, minimum = wildcard_layout(rule_map)
    total = max(len(parent), minimum)
    tail_start = total - tail

    for index in range(total):
        if index < head:
            rule_name = rule_names[index]
        elif index >= tail_start:
            rule_name = rule_names[head + 1 + index - tail_start]
        else:
            rule_name = WILDCARD
        yield child_value(parent, index), rule_name, index


STRATEGIES = {
    IterationStrategy.MAPPING: iterate_mapping,
    IterationStrategy.MAPPING_WILDCARD: iterate_mapping_wildcard,
    IterationStrategy.SEQUENCE: iterate_sequence,
    IterationStrategy.SEQUENCE_WILDCARD: iterate_sequence_wildcard,
}


def iterate_children(strategy: IterationStrategy, parent_value: Any,
                     rule_map: Mapping) -> Iterator[ChildBinding]:
    return STRATEGIES[strategy](parent_value, rule_map)

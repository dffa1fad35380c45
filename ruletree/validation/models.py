"""
Core value and rule-tree primitives shared by the validation engine.

Provides the MISSING sentinel used for absent keys and positions, the
reserved wildcard rule name, shape helpers distinguishing mappings from
sequences, and the path formatting used in validation error messages.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Union

# Reserved rule name matching any key or position not named explicitly
WILDCARD = '*'

Position = Union[str, int]


class _Missing:
    """Marker for a value that is not present in the tree (distinct from None)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return '<missing>'

    def __reduce__(self):
        return (_Missing, ())


MISSING = _Missing()


def is_missing(value: Any) -> bool:
    return value is MISSING


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_sequence(value: Any) -> bool:
    """True for ordered sequences, excluding text and byte strings."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_container(value: Any) -> bool:
    return is_mapping(value) or is_sequence(value)


def child_value(parent: Any, position: Position) -> Any:
    """Look up a child by key or index, returning MISSING when absent."""
    if is_sequence(parent):
        if 0 <= position < len(parent):
            return parent[position]
        return MISSING
    return parent.get(position, MISSING)


def format_child_path(parent_path: str, position: Position, rule_name: str,
                      in_sequence: bool, multiple_rules: bool) -> str:
    """
    Build the descriptive path of a child value.

    Mapping traversal joins keys with dots; sequence traversal appends
    ``[index]``, or ``[index,rule=name]`` when more than one rule name is
    active at that level.
    """
    if in_sequence:
        if multiple_rules:
            return f"{parent_path}[{position},rule={rule_name}]"
        return f"{parent_path}[{position}]"
    if parent_path:
        return f"{parent_path}.{position}"
    return str(position)


def summarize_rule(rule: Mapping) -> dict:
    """Copy a rule node for tracing with nested child rules abbreviated."""
    summary = dict(rule)
    if 'childRules' in summary:
        summary['childRules'] = '...'
    return summary

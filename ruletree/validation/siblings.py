"""
Sibling state tracking for cross-sibling constraints.

The engine pushes one ``SiblingFrame`` for every container whose rule map it
iterates and pops it when that iteration ends. A processed value sees two
frames: its own level (the top frame, pushed for the container holding it)
and the parent level one below it.

Length baselines (``fixedChildLength``) live in the value's own level, so
the children of one container share one length. Ordering state
(``ascending``, ``descending``, ``noRepeat``) lives in the parent level and
is keyed by rule name: a rule applied inside every element of a sequence
forms one run across those elements (e.g. ascending timestamps across all
track points). Values at the root have no parent level and are not subject
to sibling checks.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import RuleValidationError

# Fixed child length states
FIXED_LENGTH_UNSET = None
FIXED_LENGTH_PENDING = -1


@dataclass
class SiblingFrame:
    """
    State of one rule map level: the length baseline of the values iterated
    at this level and the ordering runs of the values one level below.
    """
    fixed_child_length: Optional[int] = FIXED_LENGTH_UNSET
    enforce_fixed_length: bool = False
    prev_child_values: Dict[str, Any] = field(default_factory=dict)

    @property
    def fixed_length_sealed(self) -> bool:
        return self.fixed_child_length not in (FIXED_LENGTH_UNSET, FIXED_LENGTH_PENDING)


class SiblingStateStack:
    """
    Explicit stack of sibling frames, one per active rule map level.

    Created by the engine for each ``validate`` call and passed down the
    recursion; frames are owned by the call that pushed them.
    """

    def __init__(self):
        self._frames: List[SiblingFrame] = []

    def push(self, fixed_child_length: bool = False) -> SiblingFrame:
        """
        Enter a rule map level.

        Args:
            fixed_child_length: Whether the container's own rule requires all
                of its children to share one length
        """
        frame = SiblingFrame(
            fixed_child_length=FIXED_LENGTH_PENDING if fixed_child_length else FIXED_LENGTH_UNSET,
            enforce_fixed_length=bool(fixed_child_length)
        )
        self._frames.append(frame)
        return frame

    def pop(self) -> SiblingFrame:
        return self._frames.pop()

    def peek(self, offset: int = 0) -> Optional[SiblingFrame]:
        index = len(self._frames) - 1 - offset
        if index < 0:
            return None
        return self._frames[index]

    def __len__(self) -> int:
        return len(self._frames)

    def process_sibling_rules(self, path: str, rule: Mapping, rule_name: str, value: Any) -> None:
        """
        Apply the fixed-length and ordering checks for one processed value.

        Lengths are compared within the value's own level, ordering within
        the parent level. Nothing is checked for root values.
        """
        parent_frame = self.peek(1)
        if parent_frame is None:
            return
        self.check_fixed_length(self.peek(), path, rule, value)
        self.check_ordering(parent_frame, path, rule, rule_name, value)

    def check_fixed_length(self, frame: SiblingFrame, path: str, rule: Mapping, value: Any) -> None:
        """
        Seal the baseline to the first participating sibling's length and
        require every later participating sibling to match it.

        All siblings participate when the container's rule carries the flag.
        Otherwise a sibling participates when its own leaf rule (one without
        ``childRules``) carries it; on a rule with ``childRules`` the flag
        applies to that value's children instead.
        """
        leaf_flag = bool(rule.get('fixedChildLength')) and 'childRules' not in rule
        if not (frame.enforce_fixed_length or leaf_flag):
            return

        try:
            length = len(value)
        except TypeError:
            raise RuleValidationError(
                path=path,
                reason="has no length",
                constraint="fixedChildLength"
            ) from None

        if not frame.fixed_length_sealed:
            frame.fixed_child_length = length
        elif frame.fixed_child_length != length:
            raise RuleValidationError(
                path=path,
                reason=(
                    f"has a different length ({length}) than the previous sibling "
                    f"({frame.fixed_child_length})"
                ),
                constraint="fixedChildLength"
            )

    def check_ordering(self, frame: SiblingFrame, path: str, rule: Mapping,
                       rule_name: str, value: Any) -> None:
        """Compare against the last value recorded for ``rule_name`` in the parent level."""
        checks = [
            ('ascending', lambda prev: prev > value, "breaks ascending order"),
            ('descending', lambda prev: prev < value, "breaks descending order"),
            ('noRepeat', lambda prev: prev == value, "repeats the value from its previous sibling"),
        ]
        active = [check for check in checks if rule.get(check[0])]
        if not active:
            return

        if rule_name in frame.prev_child_values:
            previous = frame.prev_child_values[rule_name]
            for constraint, violates, reason in active:
                try:
                    violated = violates(previous)
                except TypeError:
                    raise RuleValidationError(
                        path=path,
                        reason="cannot be compared with its previous sibling",
                        constraint=constraint
                    ) from None
                if violated:
                    raise RuleValidationError(path=path, reason=reason, constraint=constraint)
        frame.prev_child_values[rule_name] = value

"""
Unit tests for the sibling state stack.
"""

import pytest

from ruletree.validation.exceptions import RuleValidationError
from ruletree.validation.siblings import (
    FIXED_LENGTH_PENDING,
    FIXED_LENGTH_UNSET,
    SiblingStateStack,
)

pytestmark = pytest.mark.unit


class TestFrames:
    """Frame lifecycle."""

    def test_push_and_pop(self):
        stack = SiblingStateStack()

        outer = stack.push()
        inner = stack.push(fixed_child_length=True)

        assert len(stack) == 2
        assert stack.peek() is inner
        assert stack.peek(1) is outer
        assert stack.peek(2) is None
        assert outer.fixed_child_length is FIXED_LENGTH_UNSET
        assert inner.fixed_child_length == FIXED_LENGTH_PENDING
        assert inner.enforce_fixed_length is True
        assert stack.pop() is inner
        assert len(stack) == 1

    def test_no_frame_is_a_no_op(self):
        SiblingStateStack().process_sibling_rules('a', {'ascending': True}, 'a', 1)

    def test_root_level_values_are_not_checked(self):
        stack = SiblingStateStack()
        frame = stack.push(fixed_child_length=True)

        stack.process_sibling_rules('[0]', {'ascending': True}, '*', [1, 2])
        stack.process_sibling_rules('[1]', {'ascending': True}, '*', [0])

        assert frame.fixed_child_length == FIXED_LENGTH_PENDING
        assert frame.prev_child_values == {}


class TestFixedLength:
    """Shared length enforcement within one level."""

    @pytest.fixture
    def stack(self):
        stack = SiblingStateStack()
        stack.push()
        return stack

    def test_first_participant_seals_the_baseline(self, stack):
        frame = stack.push(fixed_child_length=True)

        stack.process_sibling_rules('m[0]', {}, '*', [1, 2])

        assert frame.fixed_child_length == 2
        assert frame.fixed_length_sealed

    def test_empty_first_sibling_seals_zero(self, stack):
        stack.push(fixed_child_length=True)
        stack.process_sibling_rules('m[0]', {}, '*', [])

        with pytest.raises(RuleValidationError) as exc_info:
            stack.process_sibling_rules('m[1]', {}, '*', [1])

        assert exc_info.value.reason == 'has a different length (1) than the previous sibling (0)'

    def test_leaf_flag_participates_without_container_flag(self, stack):
        stack.push()
        stack.process_sibling_rules('o.a', {'fixedChildLength': True}, 'a', 'abc')
        stack.process_sibling_rules('o.b', {}, 'b', 'a much longer value')

        with pytest.raises(RuleValidationError):
            stack.process_sibling_rules('o.c', {'fixedChildLength': True}, 'c', 'ab')

    def test_flag_on_container_rule_does_not_join_parent_baseline(self, stack):
        frame = stack.push()

        stack.process_sibling_rules('o.a', {'fixedChildLength': True, 'childRules': {}}, 'a', [1, 2, 3])

        assert frame.fixed_child_length is FIXED_LENGTH_UNSET

    def test_baseline_is_per_container(self, stack):
        stack.push(fixed_child_length=True)
        stack.process_sibling_rules('m[0]', {}, '*', [1, 2])
        stack.pop()
        stack.push(fixed_child_length=True)

        stack.process_sibling_rules('n[0]', {}, '*', [1, 2, 3])


class TestOrdering:
    """Ordering state kept one level up, keyed by rule name."""

    @pytest.fixture
    def stack(self):
        stack = SiblingStateStack()
        stack.push()
        return stack

    def test_runs_are_per_rule_name(self, stack):
        stack.push()

        stack.process_sibling_rules('s[0,rule=x]', {'ascending': True}, 'x', 5)
        stack.process_sibling_rules('s[1,rule=y]', {'ascending': True}, 'y', 1)
        stack.process_sibling_rules('s[2,rule=x]', {'ascending': True}, 'x', 6)

        with pytest.raises(RuleValidationError) as exc_info:
            stack.process_sibling_rules('s[3,rule=y]', {'ascending': True}, 'y', 0)

        assert exc_info.value.path == 's[3,rule=y]'

    def test_multiple_ordering_flags(self, stack):
        stack.push()
        rule = {'ascending': True, 'noRepeat': True}
        stack.process_sibling_rules('s[0]', rule, '*', 1)

        with pytest.raises(RuleValidationError) as exc_info:
            stack.process_sibling_rules('s[1]', rule, '*', 1)

        assert exc_info.value.constraint == 'noRepeat'

    def test_run_spans_sibling_containers(self, stack):
        stack.push()
        stack.process_sibling_rules('points[0].at', {'ascending': True}, 'at', 100)
        stack.pop()
        stack.push()

        with pytest.raises(RuleValidationError) as exc_info:
            stack.process_sibling_rules('points[1].at', {'ascending': True}, 'at', 50)

        assert exc_info.value.path == 'points[1].at'

    def test_run_is_recorded_in_parent_level(self, stack):
        parent = stack.peek()
        stack.push()

        stack.process_sibling_rules('points[0].at', {'ascending': True}, 'at', 100)

        assert parent.prev_child_values == {'at': 100}
        assert stack.peek().prev_child_values == {}

    def test_unrelated_parents_do_not_share_runs(self, stack):
        stack.push()
        stack.push()
        stack.process_sibling_rules('a[0][0]', {'ascending': True}, '*', 10)
        stack.pop()
        stack.pop()
        stack.push()
        stack.push()

        stack.process_sibling_rules('b[0][0]', {'ascending': True}, '*', 1)

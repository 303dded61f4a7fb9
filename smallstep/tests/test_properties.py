"""
Property-based tests for the evaluator.

Uses Hypothesis to generate random terms and environments and checks the
behaviour that must hold for all of them: values are normal forms,
addition trees sum, evaluation is deterministic, and nothing mutates the
environment it was given.

Run with: pytest smallstep/tests/test_properties.py --hypothesis-show-statistics -v
"""

import pytest

# Skip all tests if hypothesis is not installed
hypothesis = pytest.importorskip("hypothesis", reason="hypothesis required for property tests")

from hypothesis import given, settings, strategies as st
from hypothesis.strategies import composite

from smallstep import (
    BUILTIN_SEMANTICS, EMPTY, IDENTITY, Add, Environment, Null, Number, Program,
    ReadVariable, Sequence, WriteVariable, evaluate, step,
)


# =============================================================================
# Strategies
# =============================================================================

names = st.sampled_from(["a", "b", "c", "x", "y"])
numbers = st.integers(min_value=-(2**31), max_value=2**31).map(Number)
values = st.one_of(numbers, st.just(Null()))

sums = st.recursive(
    numbers,
    lambda children: st.builds(Add, children, children),
    max_leaves=12,
)


# Stored values never read, so a read can not loop back on itself
closed = st.recursive(
    numbers,
    lambda children: st.one_of(
        st.builds(Add, children, children),
        st.builds(WriteVariable, names, children),
        st.builds(Sequence, children, children),
    ),
    max_leaves=4,
)


@composite
def programs(draw, max_leaves=10):
    """Generate arbitrary terms over a small set of names."""
    term = draw(st.recursive(
        st.one_of(numbers, names.map(ReadVariable)),
        lambda children: st.one_of(
            st.builds(Add, children, children),
            st.builds(WriteVariable, names, closed),
            st.builds(Sequence, children, children),
        ),
        max_leaves=max_leaves,
    ))
    bindings = draw(st.dictionaries(names, numbers, max_size=3))
    return Program(term, Environment(bindings))


def literal_sum(term):
    if isinstance(term, Number):
        return term.value
    return literal_sum(term.left) + literal_sum(term.right)


def count_adds(term):
    if isinstance(term, Add):
        return 1 + count_adds(term.left) + count_adds(term.right)
    return 0


# =============================================================================
# Properties
# =============================================================================

class TestValues:
    """Values are normal forms under every built-in semantics."""

    @given(values, st.sampled_from(sorted(BUILTIN_SEMANTICS)))
    def test_single_identity_step(self, value, semantics_name):
        result = evaluate(value, semantics=BUILTIN_SEMANTICS[semantics_name])
        assert result.ok
        assert len(result.trace) == 1
        assert result.trace[0].rule is IDENTITY
        assert result.program == Program(value)

    @given(values, st.dictionaries(names, numbers, max_size=3))
    def test_step_keeps_environment(self, value, bindings):
        program = Program(value, bindings)
        assert step(program).after == program


class TestSums:
    """Closed addition trees."""

    @given(sums)
    def test_evaluates_to_literal_sum(self, term):
        result = evaluate(term)
        assert result.ok
        assert result.term == Number(literal_sum(term))
        assert result.environment == EMPTY

    @given(sums)
    def test_one_addition_per_step(self, term):
        result = evaluate(term)
        adds = count_adds(term)
        assert len(result.trace) == adds + 1
        assert result.trace.rule_counts().get("add-values", 0) == adds

    @given(sums)
    def test_left_to_right_and_right_to_left_agree(self, term):
        left = evaluate(term)
        right = evaluate(term, semantics=BUILTIN_SEMANTICS["right-to-left"])
        assert left.program == right.program


class TestArbitraryPrograms:
    """Programs with reads and writes."""

    @settings(max_examples=200)
    @given(programs())
    def test_deterministic(self, program):
        first = evaluate(program)
        second = evaluate(program)
        assert first.program == second.program
        assert first.trace.rules_applied() == second.trace.rules_applied()
        assert type(first.error) is type(second.error)

    @given(programs())
    def test_normal_form_is_idempotent(self, program):
        result = evaluate(program)
        if result.ok:
            again = evaluate(result.program)
            assert again.program == result.program
            assert len(again.trace) == 1

    @given(programs())
    def test_initial_environment_unchanged(self, program):
        before = program.environment.to_dict()
        evaluate(program)
        assert program.environment.to_dict() == before

    @given(programs())
    def test_steps_chain(self, program):
        result = evaluate(program)
        previous = program
        for reduction in result.trace:
            assert reduction.before == previous
            previous = reduction.after
        assert result.program == previous

    @given(programs())
    def test_rows_start_at_top_level(self, program):
        result = evaluate(program)
        rows = result.rows()
        assert rows[0].depth == 0
        assert rows[0].program == program
        assert all(row.depth >= 0 for row in rows)


class TestWriteRead:
    """A write is visible to the next statement."""

    @given(names, numbers)
    def test_write_then_read(self, name, number):
        result = evaluate(Sequence(WriteVariable(name, number), ReadVariable(name)))
        assert result.term == number
        assert result.environment == {name: number}

    @given(names, numbers, numbers)
    def test_rebinding_shadows(self, name, first, second):
        term = Sequence(WriteVariable(name, first),
                        Sequence(WriteVariable(name, second), ReadVariable(name)))
        result = evaluate(term)
        assert result.term == second
        assert result.environment == {name: second}

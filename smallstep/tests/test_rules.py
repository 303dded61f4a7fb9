"""Tests for individual rules and their notation."""

import pytest
from smallstep import (
    EMPTY, IDENTITY, Add, AddValues, DEFAULT_SEMANTICS, Environment, Null, Number,
    Program, ReadFromEnv, ReadVariable, ReduceChild, ReduceChildWithEnv,
    ReduceConstant, SelectChild, Sequence, TypeMismatch, UndefinedVariable,
    WritePolicy, WriteToEnv, WriteVariable, format_rule, format_rule_vertical,
)
from smallstep.engine import Evaluator


class TestNotation:
    """format_rule() reproduces the horizontal notation exactly."""

    def test_add_values(self):
        assert format_rule(AddValues(Add)) == \
            "<x + y, σ> → <z, σ> if z is the sum of x and y"

    def test_reduce_child(self):
        assert format_rule(ReduceChild(Add, 1)) == \
            "<y, σ> → <y', σ> : <x + y, σ> → <x + y', σ> "

    def test_reduce_child_with_env(self):
        assert format_rule(ReduceChildWithEnv(Add, 0)) == \
            "<x, σ> → <x', σ'> : <x + y, σ> → <x' + y, σ'> "

    def test_read(self):
        assert format_rule(ReadFromEnv(ReadVariable)) == \
            "<x, σ> → <σ(x), σ> if x ∈ dom(σ)"

    def test_guarded_read(self):
        assert format_rule(ReadFromEnv(ReadVariable, guarded=True)) == \
            "x ∈ dom(σ) : <x, σ> → <σ(x), σ> "

    def test_write_value(self):
        assert format_rule(WriteToEnv(WriteVariable)) == \
            "<x = v, σ> → <v, σ[x ↦ v]> "

    def test_write_null(self):
        assert format_rule(WriteToEnv(WriteVariable, WritePolicy.NULL)) == \
            "<x = v, σ> → <∅, σ[x ↦ v]> "

    def test_select(self):
        assert format_rule(SelectChild(Sequence, 1)) == "<x; y, σ> → <y, σ> "

    def test_constant(self):
        assert format_rule(ReduceConstant(ReadVariable, Number(0))) == "<x, σ> → <0, σ> "

    def test_identity_fragments_blank(self):
        assert IDENTITY.antecedent == IDENTITY.transition == IDENTITY.clause == ""

    def test_str_is_format_rule(self):
        rule = AddValues(Add)
        assert str(rule) == format_rule(rule)

    def test_vertical(self):
        text = format_rule_vertical(ReduceChild(Add, 0))
        lines = text.split("\n")
        assert lines[0] == "<x, σ> → <x', σ>"
        assert lines[1] == "―" * len("<x + y, σ> → <x' + y, σ>") + " "
        assert lines[2] == "<x + y, σ> → <x' + y, σ>"

    def test_vertical_clause_beside_bar(self):
        lines = format_rule_vertical(AddValues(Add)).split("\n")
        assert lines[0] == ""
        assert lines[1].endswith(" if z is the sum of x and y")


class TestApplicability:
    """applies() checks."""

    def test_reduce_child_needs_reducible_child(self):
        rule = ReduceChild(Add, 0)
        assert rule.applies(Add(ReadVariable("a"), Number(1)), EMPTY)
        assert not rule.applies(Add(Number(1), ReadVariable("a")), EMPTY)

    def test_add_values_needs_two_values(self):
        rule = AddValues(Add)
        assert rule.applies(Add(Number(1), Number(2)), EMPTY)
        assert rule.applies(Add(Null(), Number(2)), EMPTY)
        assert not rule.applies(Add(Number(1), ReadVariable("a")), EMPTY)

    def test_guarded_read(self):
        rule = ReadFromEnv(ReadVariable, guarded=True)
        assert rule.applies(ReadVariable("a"), Environment(a=Number(1)))
        assert not rule.applies(ReadVariable("a"), EMPTY)

    def test_unguarded_read_always_applies(self):
        assert ReadFromEnv(ReadVariable).applies(ReadVariable("a"), EMPTY)

    def test_bad_child_position(self):
        with pytest.raises(ValueError):
            ReduceChild(ReadVariable, 0)
        with pytest.raises(ValueError):
            SelectChild(Add, 2)


class TestApplication:
    """apply() results."""

    def setup_method(self):
        self.step = Evaluator(DEFAULT_SEMANTICS).step

    def test_add_values(self):
        program, children = AddValues(Add).apply(Add(Number(1), Number(2)), EMPTY, self.step)
        assert program == Program(Number(3))
        assert children == []

    def test_add_values_type_mismatch(self):
        with pytest.raises(TypeMismatch) as excinfo:
            AddValues(Add).apply(Add(Null(), Number(2)), EMPTY, self.step)
        assert excinfo.value.actual == Null()
        assert isinstance(excinfo.value, TypeError)

    @pytest.mark.parametrize("payload", ["1", 1.5, True, None])
    def test_add_values_rejects_non_integer_literals(self, payload):
        """Number payloads other than int are never coerced."""
        with pytest.raises(TypeMismatch) as excinfo:
            AddValues(Add).apply(Add(Number(payload), Number(2)), EMPTY, self.step)
        assert excinfo.value.actual == Number(payload)

    def test_string_literals_do_not_concatenate(self):
        result = Evaluator().evaluate(Add(Number("1"), Number("2")))
        assert not result.ok
        assert isinstance(result.error, TypeMismatch)
        assert len(result.trace) == 0

    def test_read(self):
        env = Environment(a=Number(4))
        program, _ = ReadFromEnv(ReadVariable).apply(ReadVariable("a"), env, self.step)
        assert program == Program(Number(4), env)

    def test_read_missing(self):
        with pytest.raises(UndefinedVariable):
            ReadFromEnv(ReadVariable).apply(ReadVariable("a"), EMPTY, self.step)

    def test_write_value(self):
        program, _ = WriteToEnv(WriteVariable).apply(
            WriteVariable("a", Number(3)), EMPTY, self.step)
        assert program == Program(Number(3), {"a": Number(3)})

    def test_write_null(self):
        program, _ = WriteToEnv(WriteVariable, WritePolicy.NULL).apply(
            WriteVariable("a", Number(3)), EMPTY, self.step)
        assert program == Program(Null(), {"a": Number(3)})

    def test_write_stores_unreduced_value(self):
        value = Add(Number(1), Number(2))
        program, _ = WriteToEnv(WriteVariable).apply(WriteVariable("a", value), EMPTY, self.step)
        assert program.environment.lookup("a") == value

    def test_write_leaves_old_environment(self):
        env = Environment(b=Number(1))
        WriteToEnv(WriteVariable).apply(WriteVariable("a", Number(3)), env, self.step)
        assert "a" not in env

    def test_reduce_child_keeps_parent_environment(self):
        term = Add(WriteVariable("a", Number(3)), Number(2))
        program, children = ReduceChild(Add, 0).apply(term, EMPTY, self.step)
        assert program == Program(Add(Number(3), Number(2)), EMPTY)
        assert len(children) == 1
        assert children[0].after.environment == {"a": Number(3)}

    def test_reduce_child_with_env_propagates(self):
        term = Add(WriteVariable("a", Number(3)), Number(2))
        program, children = ReduceChildWithEnv(Add, 0).apply(term, EMPTY, self.step)
        assert program == Program(Add(Number(3), Number(2)), {"a": Number(3)})
        assert children[0].rule == WriteToEnv(WriteVariable)

    def test_reduce_child_takes_a_single_step(self):
        term = Add(Add(Add(Number(1), Number(2)), Number(3)), Number(4))
        program, children = ReduceChildWithEnv(Add, 0).apply(term, EMPTY, self.step)
        assert program.term == Add(Add(Number(3), Number(3)), Number(4))
        assert len(children) == 1
        assert len(children[0].children) == 1

    def test_reduce_child_rebuilds_around_non_child_fields(self):
        """Only the value of a write is a child; the name is carried over."""
        term = WriteVariable("a", Add(Number(1), Number(2)))
        program, children = ReduceChildWithEnv(WriteVariable, 1).apply(term, EMPTY, self.step)
        assert program == Program(WriteVariable("a", Number(3)))
        assert children[0].rule == AddValues(Add)

    def test_select(self):
        term = Sequence(Null(), ReadVariable("a"))
        program, _ = SelectChild(Sequence, 1).apply(term, EMPTY, self.step)
        assert program == Program(ReadVariable("a"))

    def test_constant(self):
        program, _ = ReduceConstant(ReadVariable, Number(0)).apply(
            ReadVariable("z"), EMPTY, self.step)
        assert program == Program(Number(0))

    def test_identity(self):
        program, children = IDENTITY.apply(Number(1), EMPTY, self.step)
        assert program == Program(Number(1))
        assert children == []


class TestRuleValues:
    """Rules compare by shape."""

    def test_equality(self):
        assert ReduceChild(Add, 0) == ReduceChild(Add, 0)
        assert ReduceChild(Add, 0) != ReduceChild(Add, 1)
        assert ReduceChild(Add, 0) != ReduceChildWithEnv(Add, 0)
        assert WriteToEnv(WriteVariable) != WriteToEnv(WriteVariable, WritePolicy.NULL)

    def test_names(self):
        assert ReduceChild(Add, 1).name == "reduce-arg[1]"
        assert ReduceChildWithEnv(Add, 0).name == "reduce-arg-env[0]"
        assert AddValues(Add).name == "add-values"
        assert IDENTITY.name == "identity"

    def test_kind(self):
        assert AddValues(Add).kind is Add.kind
        assert IDENTITY.kind is None

    def test_repr(self):
        assert repr(ReduceChild(Add, 0)) == "ReduceChild(Add, 0)"
        assert repr(IDENTITY) == "IDENTITY"

"""Tests for RuleEngine sync rules and execution."""

import re

import pytest

from snapvalidate.domain.errors import UnsafePatternError
from snapvalidate.domain.result import Result
from snapvalidate.services.engine import RuleEngine, resolve_engine


class TestBuilder:
    def test_methods_chain(self) -> None:
        engine = RuleEngine("x")
        assert engine.required().min(1).max(5) is engine
        assert len(engine.rules) == 3

    def test_no_rules_is_valid(self) -> None:
        assert RuleEngine(None).validate().valid is True

    def test_configuration_setters(self) -> None:
        engine = (
            RuleEngine("x").set_field_name("name").set_regex_timeout(50).set_max_input_length(20)
        )
        assert engine.field_name == "name"
        assert engine.regex_timeout_ms == 50
        assert engine.regex_max_length == 20

    def test_has_async_rules(self) -> None:
        engine = RuleEngine("x").required()
        assert engine.has_async_rules is False
        engine.custom_async(lambda v: True)
        assert engine.has_async_rules is True

    def test_repr(self) -> None:
        assert repr(RuleEngine("x").required()) == "RuleEngine(value='x', rules=1, async_rules=0)"


class TestRequired:
    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_fails(self, value: object) -> None:
        result = RuleEngine(value).required().validate()
        assert result.valid is False
        assert result.errors == ["This field is required"]

    @pytest.mark.parametrize("value", [0, False, [], " "])
    def test_falsy_but_present_passes(self, value: object) -> None:
        assert RuleEngine(value).required().validate().valid is True

    def test_custom_message(self) -> None:
        assert RuleEngine(None).required("Need it").validate().errors == ["Need it"]


class TestMinMax:
    def test_string_length(self) -> None:
        assert RuleEngine("ab").min(3).validate().errors == ["Minimum length is 3"]
        assert RuleEngine("abcdef").max(5).validate().errors == ["Maximum length is 5"]
        assert RuleEngine("abc").min(3).max(3).validate().valid is True

    def test_array_length(self) -> None:
        assert RuleEngine([1, 2]).min(3).validate().valid is False
        assert RuleEngine([1, 2, 3]).max(3).validate().valid is True

    def test_number_magnitude(self) -> None:
        assert RuleEngine(5).min(10).validate().valid is False
        assert RuleEngine(15).max(10).validate().valid is False
        assert RuleEngine(10).min(10).max(10).validate().valid is True

    def test_empty_passes(self) -> None:
        assert RuleEngine("").min(3).validate().valid is True
        assert RuleEngine(None).max(3).validate().valid is True

    def test_not_comparable(self) -> None:
        result = RuleEngine({"a": 1}).min(1).validate()
        assert result.errors == ["Value must be a string, array, or number"]

    def test_custom_message(self) -> None:
        assert RuleEngine("a").min(2, "Too short").validate().errors == ["Too short"]


class TestPattern:
    def test_match(self) -> None:
        assert RuleEngine("abc123").pattern(r"^[a-z0-9]+$").validate().valid is True

    def test_mismatch(self) -> None:
        assert RuleEngine("abc!").pattern(r"^[a-z0-9]+$").validate().errors == ["Invalid format"]

    def test_compiled_pattern_flags_kept(self) -> None:
        engine = RuleEngine("ABC").pattern(re.compile(r"^[a-z]+$", re.IGNORECASE))
        assert engine.validate().valid is True

    def test_empty_passes(self) -> None:
        assert RuleEngine("").pattern(r"^\d+$").validate().valid is True

    def test_non_string_coerced(self) -> None:
        assert RuleEngine(12345).pattern(r"^\d{5}$").validate().valid is True

    def test_unsafe_raises_at_registration(self) -> None:
        engine = RuleEngine("aaaa")
        with pytest.raises(UnsafePatternError, match="unsafe regex"):
            engine.pattern(r"(a+)+$")
        assert engine.rules == []

    def test_input_too_long(self) -> None:
        result = RuleEngine("a" * 10_001).pattern(r"^a+$").validate()
        assert result.errors == ["Input exceeds maximum length of 10000 characters"]

    def test_input_at_cap_matches(self) -> None:
        assert RuleEngine("a" * 10_000).pattern(r"^a+$").validate().valid is True

    def test_custom_cap(self) -> None:
        result = RuleEngine("abcdef").set_max_input_length(5).pattern(r"^[a-z]+$").validate()
        assert result.errors == ["Input exceeds maximum length of 5 characters"]

    def test_cap_read_at_validation_time(self) -> None:
        engine = RuleEngine("abcdef").pattern(r"^[a-z]+$")
        engine.set_max_input_length(3)
        assert engine.validate().valid is False


class TestComparisons:
    def test_equals(self) -> None:
        assert RuleEngine("secret").equals("secret").validate().valid is True
        assert RuleEngine("other").equals("secret").validate().errors == [
            "Value must equal secret"
        ]

    def test_one_of(self) -> None:
        engine = RuleEngine("superuser").one_of(["admin", "user", "guest"])
        result = engine.validate()
        assert result.valid is False
        assert "admin, user, guest" in result.errors[0]
        assert RuleEngine("user").one_of(["admin", "user"]).validate().valid is True

    def test_between_numbers_and_strings(self) -> None:
        assert RuleEngine(25).between(18, 120).validate().valid is True
        assert RuleEngine("25").between(18, 120).validate().valid is True
        assert RuleEngine(18).between(18, 120).validate().valid is True
        assert RuleEngine(200).between(18, 120).validate().errors == [
            "Value must be between 18 and 120"
        ]

    @pytest.mark.parametrize("value", ["abc", None, True])
    def test_between_not_numeric(self, value: object) -> None:
        assert RuleEngine(value).between(0, 10).validate().errors == ["Value must be a number"]


class TestOptional:
    @pytest.mark.parametrize("value", [None, ""])
    def test_rules_skipped_on_empty(self, value: object) -> None:
        engine = RuleEngine(value).optional().required().min(3).pattern(r"^\d+$")
        assert engine.validate().valid is True

    def test_rules_run_on_present_value(self) -> None:
        result = RuleEngine("ab").optional().min(3).validate()
        assert result.errors == ["Minimum length is 3"]

    def test_optional_order_independent(self) -> None:
        assert RuleEngine(None).required().optional().validate().valid is True

    def test_transform_still_runs(self) -> None:
        engine = RuleEngine(None).optional().transform(lambda v: "filled")
        assert engine.validate().valid is True
        assert engine.value == "filled"


class TestTransform:
    def test_later_rules_see_transformed_value(self) -> None:
        engine = RuleEngine("  HELLO  ").transform(str.strip).transform(str.lower).equals("hello")
        assert engine.validate().valid is True
        assert engine.value == "hello"

    def test_earlier_rules_see_original(self) -> None:
        engine = RuleEngine("ab").min(3).transform(lambda v: v * 3)
        assert engine.validate().valid is False

    def test_exception_becomes_error(self) -> None:
        def explode(value: object) -> object:
            raise ValueError("boom")

        result = RuleEngine("x").transform(explode).validate()
        assert result.errors == ["Transform failed: boom"]

    def test_type_error_in_transform(self) -> None:
        result = RuleEngine(None).transform(str.upper).validate()
        assert result.valid is False
        assert "Transform" in result.errors[0]


class TestArray:
    def test_array(self) -> None:
        assert RuleEngine([1, 2]).array().validate().valid is True
        assert RuleEngine((1,)).array().validate().valid is True
        assert RuleEngine("no").array().validate().errors == ["Value must be an array"]

    def test_array_of_all_valid(self) -> None:
        engine = RuleEngine(["good", "fine"]).array_of(lambda item: RuleEngine(item).min(3))
        assert engine.validate().valid is True

    def test_array_of_reports_failing_indexes(self) -> None:
        engine = RuleEngine(["good", "ab", "fine", "x"]).array_of(
            lambda item: RuleEngine(item).min(3)
        )
        result = engine.validate()
        assert result.valid is False
        assert len(result.errors) == 1
        assert result.errors[0] == (
            "Array validation failed: [1]: Minimum length is 3; [3]: Minimum length is 3"
        )

    def test_array_of_not_array(self) -> None:
        result = RuleEngine("abc").array_of(lambda item: RuleEngine(item)).validate()
        assert result.errors == ["Value must be an array"]

    def test_array_of_empty_array(self) -> None:
        assert RuleEngine([]).array_of(lambda item: RuleEngine(item).required()).validate().valid

    def test_array_of_factory_error_isolated(self) -> None:
        def factory(item: object) -> RuleEngine:
            if item == 2:
                raise RuntimeError("cannot build")
            return RuleEngine(item)

        result = RuleEngine([1, 2, 3]).array_of(factory).validate()
        assert result.errors == [
            "Array validation failed: [1]: Validation setup error: cannot build"
        ]


class TestObject:
    def test_nested_schema(self) -> None:
        schema = {
            "street": lambda v: RuleEngine(v).required().min(3),
            "city": lambda v: RuleEngine(v).required(),
        }
        assert RuleEngine({"street": "Main", "city": "X"}).object(schema).validate().valid is True

    def test_nested_failure_collapsed(self) -> None:
        schema = {
            "street": lambda v: RuleEngine(v).min(3),
            "city": lambda v: RuleEngine(v).required(),
        }
        result = RuleEngine({"street": "ab"}).object(schema).validate()
        assert result.errors == [
            "Object validation failed: street: Minimum length is 3; city: This field is required"
        ]

    def test_not_mapping(self) -> None:
        result = RuleEngine([1]).object({"a": lambda v: RuleEngine(v)}).validate()
        assert result.errors == ["Value must be an object"]


class TestWhen:
    def test_condition_value(self) -> None:
        engine = RuleEngine("ab").when(True, lambda v: RuleEngine(v).min(3))
        assert engine.validate().valid is False
        engine = RuleEngine("ab").when(False, lambda v: RuleEngine(v).min(3))
        assert engine.validate().valid is True

    def test_condition_predicate(self) -> None:
        def starts_with_a(value: str) -> bool:
            return value.startswith("a")

        rule = lambda v: RuleEngine(v).min(5)  # noqa: E731
        assert RuleEngine("abc").when(starts_with_a, rule).validate().valid is False
        assert RuleEngine("xyz").when(starts_with_a, rule).validate().valid is True

    def test_engine_instance(self) -> None:
        inner = RuleEngine("fixed").equals("other")
        assert RuleEngine("x").when(True, inner).validate().valid is False


class TestCustom:
    def test_bool_outcomes(self) -> None:
        assert RuleEngine(4).custom(lambda v: v % 2 == 0).validate().valid is True
        result = RuleEngine(3).custom(lambda v: v % 2 == 0, "Must be even").validate()
        assert result.errors == ["Must be even"]

    def test_string_outcome(self) -> None:
        result = RuleEngine("x").custom(lambda v: "Nope").validate()
        assert result.errors == ["Nope"]

    def test_result_outcome(self) -> None:
        result = RuleEngine("x").custom(lambda v: Result.failed("from result")).validate()
        assert result.errors == ["from result"]

    def test_none_passes(self) -> None:
        assert RuleEngine("x").custom(lambda v: None).validate().valid is True

    def test_exception_becomes_error(self) -> None:
        def explode(value: object) -> bool:
            raise KeyError("missing")

        result = RuleEngine("x").custom(explode).validate()
        assert result.errors == ["Custom validation error: 'missing'"]

    def test_default_message(self) -> None:
        assert RuleEngine("x").custom(lambda v: False).validate().errors == [
            "Custom validation failed"
        ]


class TestAddRule:
    def test_rule_exception_contained(self) -> None:
        def broken() -> Result:
            raise RuntimeError("kaput")

        result = RuleEngine("x").add_rule(broken).required().validate()
        assert result.errors == ["Validation error: kaput"]

    def test_validate_is_repeatable(self) -> None:
        engine = RuleEngine("ab").required().min(3)
        first = engine.validate()
        second = engine.validate()
        assert first == second
        assert first is not second

    def test_all_rules_run_and_errors_accumulate(self) -> None:
        result = RuleEngine("a").min(3).pattern(r"^\d+$").equals("b").validate()
        assert result.errors == ["Minimum length is 3", "Invalid format", "Value must equal b"]


class TestFieldName:
    def test_prefix_added(self) -> None:
        result = RuleEngine("ab").set_field_name("username").min(3).validate()
        assert result.errors == ["username: Minimum length is 3"]

    def test_prefix_skipped_when_mentioned(self) -> None:
        result = RuleEngine(None).set_field_name("email").required("Email is required").validate()
        assert result.errors == ["Email is required"]

    def test_no_field_name(self) -> None:
        assert RuleEngine(None).required().validate().errors == ["This field is required"]

    def test_labels_every_message_of_a_rule(self) -> None:
        engine = RuleEngine("x").set_field_name("code")
        engine.add_rule(lambda: Result.failed("too short", "bad Code"))
        assert engine.validate().errors == ["code: too short", "bad Code"]

    def test_invalid_outcome_without_messages_fails(self) -> None:
        engine = RuleEngine("x").set_field_name("code")
        engine.add_rule(lambda: Result(valid=False))
        result = engine.validate()
        assert result.valid is False
        assert result.errors == []


class TestResolveEngine:
    def test_instance_returned(self) -> None:
        engine = RuleEngine("x")
        assert resolve_engine(engine, "ignored") is engine

    def test_factory_called_with_value(self) -> None:
        engine = resolve_engine(lambda v: RuleEngine(v), "value")
        assert engine.value == "value"

    def test_not_callable(self) -> None:
        with pytest.raises(TypeError, match="Expected a RuleEngine"):
            resolve_engine("nope", 1)  # type: ignore[arg-type]

    def test_factory_wrong_return(self) -> None:
        with pytest.raises(TypeError, match="expected RuleEngine"):
            resolve_engine(lambda v: "nope", 1)  # type: ignore[arg-type,return-value]

"""Tests for blocwatch.describer: payload descriptions and field extraction."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

import pytest
from hypothesis import given
from hypothesis import strategies as st

from blocwatch._errors import DescriptionError
from blocwatch.describer import (
    describe,
    extract_fields,
    looks_structured,
    scan_fields,
    truncate,
)
from blocwatch.records import ErrorEvent

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class Textual:
    """Value whose textual form is exactly ``text``."""

    def __init__(self, text: str) -> None:
        self.text = text

    def __str__(self) -> str:
        return self.text


class Plain:
    pass


class Exploding:
    def __str__(self) -> str:
        raise RuntimeError("boom")


@dataclass
class Counter:
    count: int
    label: str = "main"


class Profile:
    def describe_fields(self) -> Mapping[str, object]:
        return {"name": "Ada", "age": 36}

    def __str__(self) -> str:
        return "Profile(...)"


# ---------------------------------------------------------------------------
# describe()
# ---------------------------------------------------------------------------


class TestDescribePrimitives:
    """Primitives render as ``<type>: <value>``."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("click", "str: click"),
            (3, "int: 3"),
            (1.5, "float: 1.5"),
            (True, "bool: True"),
        ],
    )
    def test_primitive(self, value: object, expected: str) -> None:
        assert describe(value) == expected

    def test_none(self) -> None:
        assert describe(None) == "None"


class TestDescribeObjects:
    """Objects render from their textual form."""

    def test_default_text_falls_back_to_type_name(self) -> None:
        assert describe(Plain()) == "Plain"

    def test_placeholder_text_falls_back_to_type_name(self) -> None:
        assert describe(Textual("<app.Bloc object at 0x7f3a2c>")) == "Textual"

    def test_short_custom_text_verbatim(self) -> None:
        assert describe(Textual("CounterState(count: 3)")) == "CounterState(count: 3)"

    def test_dataclass_repr_verbatim(self) -> None:
        assert describe(Counter(3)) == "Counter(count=3, label='main')"

    def test_structured_text_up_to_200_verbatim(self) -> None:
        text = "UserLoadedState(name: " + "x" * 160 + ")"
        assert 150 < len(text) <= 200
        assert describe(Textual(text)) == text

    def test_long_text_without_fields_is_type_name(self) -> None:
        assert describe(Textual("x" * 160)) == "Textual"

    def test_long_text_condensed_to_three_fields(self) -> None:
        text = "Profile(name: Ada, age: 36, city: London, bio: " + "y" * 200 + ")"
        assert describe(Textual(text)) == "Profile(name: Ada, age: 36, city: London)"

    def test_long_text_without_class_name(self) -> None:
        text = "  name: Ada, age: 36, city: London, bio: " + "y" * 200
        assert describe(Textual(text)) == "name: Ada, age: 36, city: London"

    def test_class_name_fallback_allows_space(self) -> None:
        text = "LoginEvent (user: ada, remember: true, " + "z" * 200 + ")"
        assert describe(Textual(text)) == "LoginEvent(user: ada, remember: true)"

    def test_class_name_fallback_rejects_short_names(self) -> None:
        text = "Ab (user: ada, " + "z" * 200 + ")"
        assert describe(Textual(text)).startswith("user: ada")

    def test_error_event(self) -> None:
        assert describe(ErrorEvent(ValueError("bad"))) == "ErrorEvent: ValueError"


class TestDescribeFailures:
    """describe() never raises."""

    def test_failing_str_returns_type_name(self) -> None:
        assert describe(Exploding()) == "Exploding"

    def test_failure_is_reported(self) -> None:
        failures: list[DescriptionError] = []
        describe(Exploding(), on_failure=failures.append)

        assert len(failures) == 1
        assert isinstance(failures[0], DescriptionError)
        assert isinstance(failures[0].cause, RuntimeError)

    @pytest.mark.parametrize(
        "text",
        [
            "(" * 10_000,
            ")" * 10_000,
            "a: " * 5_000,
            "Foo(a: (b: [c: {d: " * 500,
            "ÉtatCompteur(nombre: 3, état: ✓, 名前: 値)" * 20,
            "\n".join(["Foo(a: 1"] * 100),
        ],
    )
    def test_adversarial_text(self, text: str) -> None:
        assert isinstance(describe(Textual(text)), str)

    @given(st.text(max_size=3_000))
    def test_any_text_never_raises(self, text: str) -> None:
        assert isinstance(describe(Textual(text)), str)

    @given(st.one_of(st.none(), st.integers(), st.floats(), st.text(), st.binary()))
    def test_any_scalar_never_raises(self, value: object) -> None:
        assert isinstance(describe(value), str)


# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------


class TestExtractFields:
    """Structural sources win over the textual heuristic."""

    def test_describable(self) -> None:
        assert extract_fields(Profile()) == {"name": "Ada", "age": "36"}

    def test_dataclass(self) -> None:
        assert extract_fields(Counter(2)) == {"count": "2", "label": "main"}

    def test_mapping(self) -> None:
        assert extract_fields({"a": 1, "b": [1, 2]}) == {"a": "1", "b": "[1, 2]"}

    def test_text_fallback(self) -> None:
        assert extract_fields("Foo(a: 1, b: 2)") == {"a": "1", "b": "2"}

    def test_values_truncated(self) -> None:
        fields = extract_fields({"blob": "x" * 100}, limit=10)
        assert fields == {"blob": "xxxxxxxxxx..."}


class TestScanFields:
    def test_colon_and_equals(self) -> None:
        assert scan_fields("Foo(a: 1, b=two)") == {"a": "1", "b": "two"}

    def test_later_keys_overwrite(self) -> None:
        assert scan_fields("a: 1, a: 2") == {"a": "2"}

    def test_no_fields(self) -> None:
        assert scan_fields("just text") == {}

    def test_values_stop_at_brackets(self) -> None:
        assert scan_fields("S(items: [1, 2], n: 3)") == {"items": "[1", "n": "3"}


class TestHelpers:
    def test_truncate(self) -> None:
        assert truncate("abc", 2) == "ab..."
        assert truncate("abc", 3) == "abc"

    @pytest.mark.parametrize(
        "text",
        [
            "CounterEventIncrement(by: 1)",
            "AuthState(user: ada)",
            "HomeModel(a: 1)",
            "UserProfile(name: Ada)",
            "UserProfile(name=Ada)",
        ],
    )
    def test_structured_shapes(self, text: str) -> None:
        assert looks_structured(text)

    @pytest.mark.parametrize("text", ["plain text", "Foo(a: 1)", "AuthState(unclosed"])
    def test_unstructured_shapes(self, text: str) -> None:
        assert not looks_structured(text)

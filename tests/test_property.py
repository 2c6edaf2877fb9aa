"""Property-based tests using Hypothesis.

Random Value trees are rendered to PHP source by a small test-only printer
and parsed back; random text must either parse or raise ParseError.
"""

import math

import pytest
from hypothesis import HealthCheck
from hypothesis import given
from hypothesis import settings
from hypothesis import strategies as st

import phplit
from phplit import Array
from phplit import Bool
from phplit import Float
from phplit import Int
from phplit import Null
from phplit import String
from phplit import Value

# Mark all tests in this module as hypothesis tests
pytestmark = pytest.mark.hypothesis

INT64 = st.integers(min_value=-(2**63), max_value=2**63 - 1)


def render_string(text: str, quote: str) -> str:
    if quote == "'":
        return "'" + text.replace("\\", "\\\\").replace("'", "\\'") + "'"
    escaped = (
        text.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    )
    return f'"{escaped}"'


def render(value: Value, style: int = 0) -> str:
    """Renders a Value as PHP source; style varies quotes and array syntax."""
    if isinstance(value, Null):
        return ("null", "NULL")[style % 2]
    if isinstance(value, Bool):
        text = "true" if value.value else "false"
        return text.upper() if style % 2 else text
    if isinstance(value, Int):
        return str(value.value)
    if isinstance(value, Float):
        return repr(value.value)
    if isinstance(value, String):
        return render_string(value.value, "'\""[style % 2])
    assert isinstance(value, Array)
    body = ", ".join(
        f"{render(String(key) if isinstance(key, str) else Int(key), style)}"
        f" => {render(item, style + 1)}"
        for key, item in value.items()
    )
    if style % 2:
        return f"array({body})"
    return f"[{body}]"


scalars = st.one_of(
    st.just(Null()),
    st.builds(Bool, st.booleans()),
    st.builds(Int, INT64),
    st.builds(Float, st.floats(allow_nan=False, allow_infinity=False)),
    st.builds(String, st.text(max_size=20)),
)
keys = st.one_of(INT64, st.text(max_size=10))
values = st.recursive(
    scalars,
    lambda children: st.builds(
        Array, st.dictionaries(keys, children, max_size=5)
    ),
    max_leaves=30,
)


class TestRoundtrip:
    """Rendered trees parse back to equal trees."""

    @given(values, st.integers(min_value=0, max_value=1))
    @settings(max_examples=300, suppress_health_check=[HealthCheck.too_slow])
    def test_value_roundtrip(self, value: Value, style: int) -> None:
        assert phplit.parse(render(value, style)) == value

    @given(INT64)
    def test_integer_roundtrip(self, n: int) -> None:
        assert phplit.parse(str(n)) == Int(n)
        assert phplit.parse(hex(n)) == Int(n)
        assert phplit.parse(oct(n)) == Int(n)
        assert phplit.parse(bin(n)) == Int(n)

    @given(st.floats(allow_nan=False, allow_infinity=False))
    def test_float_roundtrip(self, x: float) -> None:
        parsed = phplit.parse(repr(x))
        assert parsed.is_float()
        assert parsed.as_float() == x
        assert math.copysign(1, parsed.as_float()) == math.copysign(1, x)

    @given(st.text(max_size=50))
    def test_string_roundtrip(self, text: str) -> None:
        assert phplit.loads(render_string(text, "'")) == text
        assert phplit.loads(render_string(text, '"')) == text


class TestArraySemantics:
    """Key ordering and automatic indices follow PHP."""

    @given(st.lists(scalars, max_size=20))
    def test_implicit_keys_are_sequential(self, items: list[Value]) -> None:
        source = "[" + ", ".join(render(item) for item in items) + "]"
        array = phplit.parse(source).as_array()
        assert list(array.keys()) == list(range(len(items)))
        assert array.is_list()

    @given(st.lists(st.integers(min_value=-1000, max_value=1000), max_size=10))
    def test_automatic_key_follows_largest(self, explicit: list[int]) -> None:
        source = "[" + "".join(f"{k} => {k}, " for k in explicit) + "'tail']"
        array = phplit.parse(source).as_array()
        expected = max(k + 1 for k in explicit) if explicit else 0
        assert array[expected] == "tail"
        assert list(array.keys())[-1] == expected

    @given(st.lists(st.tuples(st.sampled_from("abc"), INT64), max_size=10))
    def test_last_write_wins(self, pairs: list[tuple[str, int]]) -> None:
        source = "[" + ", ".join(f"'{k}' => {v}" for k, v in pairs) + "]"
        array = phplit.parse(source).as_array()
        expected: dict[str, int] = {}
        for key, number in pairs:
            expected[key] = number
        assert list(array.keys()) == list(expected)
        assert array == expected

    @given(INT64)
    def test_canonical_string_keys_become_ints(self, n: int) -> None:
        array = phplit.parse(f"['{n}' => 1]").as_array()
        assert list(array.keys()) == [n]


class TestNeverCrashes:
    """The parser only ever raises ParseError on bad input."""

    @given(st.text(max_size=200))
    @settings(max_examples=500, suppress_health_check=[HealthCheck.too_slow])
    def test_random_text_never_crash(self, text: str) -> None:
        try:
            phplit.parse(text)
        except phplit.ParseError:
            pass

    @given(
        st.text(
            alphabet=st.sampled_from(list("[](),=>'\"\\0123456789.-_exabn ")),
            max_size=60,
        )
    )
    @settings(max_examples=500)
    def test_grammar_soup_never_crash(self, text: str) -> None:
        try:
            phplit.parse(text)
        except phplit.ParseError as e:
            assert 0 <= e.pos <= len(text)
            assert e.snippet()

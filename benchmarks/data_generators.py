"""
Test data generators for PHP literal parsing benchmarks.

Creates the same data twice, as PHP literal source and as JSON, so phplit can
be measured against JSON parsers on documents of equal content:
- Different sizes (small/large)
- Different complexity levels (flat/nested/mixed)
- String-heavy content with escape sequences
"""

import json
import random
import string
from dataclasses import dataclass
from typing import Any

# Constants for random data generation
_INT_TYPE = 1
_FLOAT_TYPE = 2
_STRING_TYPE = 3
_BOOL_TYPE = 4
_NULL_TYPE = 5
_ESCAPE_PROBABILITY = 0.3

_DOUBLE_QUOTE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "$": "\\$",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\f": "\\f",
    "\v": "\\v",
}


@dataclass(frozen=True)
class BenchmarkDocument:
    """One generated document in both notations."""

    php: str
    json: str


def generate_test_data(data_type: str, seed: int = 1234) -> BenchmarkDocument:
    """Generates benchmark data based on specified type."""
    generators = {
        "small_object": (_generate_small_object, False),
        "large_object": (_generate_large_object, False),
        "mixed_array": (_generate_mixed_array, False),
        "nested_structure": (_generate_nested_structure, False),
        "string_heavy": (_generate_string_heavy, True),
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    generator, double_quoted = generators[data_type]
    random.seed(seed)
    data = generator()
    return BenchmarkDocument(
        php=to_php_literal(data, double_quoted=double_quoted),
        json=json.dumps(data),
    )


def to_php_literal(
    data: Any, indent: int = 0, double_quoted: bool = False
) -> str:
    """
    Renders plain data as PHP literal source in ``var_export`` layout.

    Dicts become ``array ( 'k' => v, )`` blocks and lists short ``[...]``
    arrays, so both array syntaxes are exercised.
    """
    pad = "  " * indent
    if data is None:
        return "NULL"
    if isinstance(data, bool):
        return "true" if data else "false"
    if isinstance(data, int | float):
        return repr(data)
    if isinstance(data, str):
        return _php_string(data, double_quoted)
    if isinstance(data, dict):
        lines = [
            f"{pad}  {_php_string(key, double_quoted)} => "
            f"{to_php_literal(value, indent + 1, double_quoted)},"
            for key, value in data.items()
        ]
        return "array (\n" + "\n".join(lines) + f"\n{pad})"
    if isinstance(data, list):
        items = ", ".join(
            to_php_literal(value, indent + 1, double_quoted) for value in data
        )
        return f"[{items}]"
    raise TypeError(f"Cannot render {type(data).__name__}")


def _php_string(text: str, double_quoted: bool) -> str:
    if not double_quoted:
        return "'" + text.replace("\\", "\\\\").replace("'", "\\'") + "'"

    chars = []
    for char in text:
        if char in _DOUBLE_QUOTE_ESCAPES:
            chars.append(_DOUBLE_QUOTE_ESCAPES[char])
        elif ord(char) > 0x7E:
            chars.append(f"\\u{{{ord(char):x}}}")
        else:
            chars.append(char)
    return '"' + "".join(chars) + '"'


def _generate_small_object() -> dict[str, Any]:
    """Generates a small object (< 1KB) with basic key-value pairs."""
    return {
        "id": 12345,
        "name": "Alice Johnson",
        "email": "alice@example.com",
        "active": True,
        "balance": 1234.56,
        "metadata": {"created": "2024-01-15T10:30:00Z", "source": "api"},
    }


def _generate_large_object() -> dict[str, Any]:
    """Generates a large object (> 10KB) with many fields."""
    # Generate a user profile with extensive data
    return {
        "user_id": random.randint(1000000, 9999999),
        "profile": {
            "personal": {
                "first_name": _random_string(10),
                "last_name": _random_string(12),
                "email": f"{_random_string(8)}@{_random_string(6)}.com",
                "phone": f"+1-{random.randint(100, 999)}-{random.randint(1000, 9999)}",
                "address": {
                    "street": f"{random.randint(1, 9999)} {_random_string(8)} St",
                    "city": _random_string(12),
                    "zip": f"{random.randint(10000, 99999)}",
                    "country": "US",
                },
            },
            "preferences": {
                "language": random.choice(["en", "es", "fr", "de", "zh"]),
                "notifications": {
                    "email": random.choice([True, False]),
                    "sms": random.choice([True, False]),
                    "push": random.choice([True, False]),
                },
            },
        },
        # Generate transaction history
        "transactions": [
            {
                "id": f"txn_{i:06d}",
                "amount": round(random.uniform(1.0, 1000.0), 2),
                "currency": random.choice(["USD", "EUR", "GBP", "JPY"]),
                "description": f"Payment for {_random_string(20)}",
                "status": random.choice(["completed", "pending", "failed"]),
            }
            for i in range(50)  # 50 transactions
        ],
        # Generate activity log
        "activity_log": [
            {
                "action": random.choice(
                    ["login", "logout", "purchase", "view", "update"]
                ),
                "ip_address": ".".join(
                    str(random.randint(1, 255)) for _ in range(4)
                ),
                "user_agent": f"Mozilla/5.0 ({_random_string(20)})",
            }
            for _ in range(30)  # 30 log entries
        ],
    }


def _generate_mixed_array() -> list[Any]:
    """Generates a large array with mixed data types."""
    array: list[Any] = []

    # Add various data types
    for i in range(200):
        choice = random.randint(1, 6)
        if choice == _INT_TYPE:
            array.append(random.randint(-1000, 1000))
        elif choice == _FLOAT_TYPE:
            array.append(round(random.uniform(-100.0, 100.0), 3))
        elif choice == _STRING_TYPE:
            array.append(_random_string(random.randint(5, 30)))
        elif choice == _BOOL_TYPE:
            array.append(random.choice([True, False]))
        elif choice == _NULL_TYPE:
            array.append(None)
        else:
            # Nested array
            array.append(
                {
                    "index": i,
                    "value": _random_string(10),
                    "score": round(random.uniform(0, 100), 2),
                }
            )

    return array


def _generate_nested_structure() -> dict[str, Any]:
    """Generates deeply nested structure."""

    def create_nested_dict(depth: int) -> dict[str, Any]:
        if depth <= 0:
            return {"value": _random_string(10)}

        return {
            "level": depth,
            "data": _random_string(15),
            "items": [create_nested_dict(depth - 1) for _ in range(3)],
            "nested": create_nested_dict(depth - 1),
        }

    return create_nested_dict(6)  # 6 levels deep


def _generate_string_heavy() -> dict[str, Any]:
    """Generates strings that need many escape sequences in PHP source."""

    def create_escaped_string() -> str:
        chars = []
        for _ in range(50):
            if random.random() < _ESCAPE_PROBABILITY:
                chars.append(random.choice(['"', "\\", "$", "\n", "\t", "é"]))
            else:
                chars.append(
                    random.choice(string.ascii_letters + string.digits + " ")
                )
        return "".join(chars)

    return {
        "strings": [create_escaped_string() for _ in range(100)],
        "unicode": [
            f"Unicode: {chr(random.randint(0x00A1, 0x2FFF))}" for _ in range(50)
        ],
        "mixed_content": {
            f"key_{i}": {
                "description": create_escaped_string(),
                "content": 'Content with \n newlines \t tabs and " quotes',
                "path": f"C:\\Users\\{_random_string(8)}\\Documents\\file_{i}.txt",
            }
            for i in range(20)
        },
    }


def _random_string(length: int) -> str:
    """Generates a random string of specified length."""
    return "".join(random.choices(string.ascii_letters, k=length))

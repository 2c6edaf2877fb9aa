"""
Pytest configuration and shared fixtures for phplit tests.

Provides immutable test data fixtures so literal corpora are declared once
and shared between the pass, fail and deserialization suites.
"""

from dataclasses import dataclass
from typing import Any

import pytest

import phplit


@dataclass(frozen=True)
class PhpTestCase:
    """
    Immutable container for PHP literal test case data.

    Holds test input and expected behavior for consistent test execution.
    """

    description: str
    input_data: str
    should_fail: bool = False
    expected_output: Any = None
    expected_kind: phplit.ErrorKind | None = None


@pytest.fixture
def php_fail_cases() -> list[PhpTestCase]:
    """
    Provides PHP literal strings that must fail parsing.

    Each case names the error category the parser is expected to report.
    """
    kind = phplit.ErrorKind
    fail_docs = [
        ("empty input", "", kind.UNEXPECTED_EOF),
        ("only whitespace", "  \n\t ", kind.UNEXPECTED_EOF),
        ("unclosed square array", "[1, 2", kind.UNTERMINATED_ARRAY),
        ("unclosed long array", "array(1, 2", kind.UNTERMINATED_ARRAY),
        ("leading comma", "[, 1]", kind.UNEXPECTED_TOKEN),
        ("double comma", "[1,, 2]", kind.UNEXPECTED_TOKEN),
        ("lone comma", "[,]", kind.UNEXPECTED_TOKEN),
        ("missing comma", "[1 2]", kind.UNEXPECTED_TOKEN),
        ("mismatched paren", "[1, 2)", kind.MISMATCHED_BRACKET),
        ("mismatched square", "array(1, 2]", kind.MISMATCHED_BRACKET),
        ("extra close", "[1]]", kind.TRAILING_CHARACTERS),
        ("two values", "1 2", kind.TRAILING_CHARACTERS),
        ("two semicolons", "1;;", kind.TRAILING_CHARACTERS),
        ("bare identifier", "foo", kind.UNEXPECTED_CHARACTER),
        ("constant", "[PHP_EOL]", kind.UNEXPECTED_CHARACTER),
        ("variable", "[$foo]", kind.UNEXPECTED_CHARACTER),
        ("function call", "strlen('a')", kind.UNEXPECTED_CHARACTER),
        ("addition", "1 + 2", kind.UNEXPECTED_CHARACTER),
        ("lone equals", "['a' = 1]", kind.UNEXPECTED_CHARACTER),
        ("json object", '{"a": 1}', kind.UNEXPECTED_CHARACTER),
        ("curly braces", "{1: 2}", kind.UNEXPECTED_CHARACTER),
        ("array keyword alone", "array", kind.UNEXPECTED_EOF),
        ("array with square", "array[1]", kind.UNEXPECTED_TOKEN),
        ("missing value after arrow", "['a' =>]", kind.UNEXPECTED_TOKEN),
        ("missing key before arrow", "[=> 1]", kind.UNEXPECTED_TOKEN),
        ("chained arrows", "[1 => 2 => 3]", kind.UNEXPECTED_TOKEN),
        ("unterminated single", "'abc", kind.UNTERMINATED_STRING),
        ("unterminated double", '["abc', kind.UNTERMINATED_STRING),
        ("escaped closing quote", "'abc\\'", kind.UNTERMINATED_STRING),
        ("unterminated comment", "[1, /* 2", kind.UNTERMINATED_COMMENT),
        ("invalid octal", "08", kind.INVALID_NUMBER),
        ("dangling separator", "1_", kind.INVALID_NUMBER),
        ("double separator", "1__0", kind.INVALID_NUMBER),
        ("empty exponent", "1e", kind.INVALID_NUMBER),
        ("two dots", "1.2.3", kind.INVALID_NUMBER),
        ("empty hex", "0x", kind.INVALID_NUMBER),
        ("integer overflow", "9223372036854775808", kind.INVALID_NUMBER),
        ("bad unicode escape", '"\\u{110000}"', kind.INVALID_ESCAPE),
        ("unclosed unicode escape", '"\\u{41"', kind.INVALID_ESCAPE),
        ("array as key", "[[1] => 2]", kind.INVALID_ARRAY_KEY),
        ("infinite float key", "[1e999 => 2]", kind.INVALID_ARRAY_KEY),
        (
            "auto key overflow",
            "[9223372036854775807 => 'a', 'b']",
            kind.ARRAY_KEY_OVERFLOW,
        ),
    ]

    return [
        PhpTestCase(
            description=description,
            input_data=doc,
            should_fail=True,
            expected_kind=expected_kind,
        )
        for description, doc, expected_kind in fail_docs
    ]


@pytest.fixture
def php_pass_cases() -> list[PhpTestCase]:
    """
    Provides PHP literal strings that must parse successfully.

    Covers the shapes produced by ``var_export`` and hand-written configs.
    """
    return [
        PhpTestCase(
            description="var_export output",
            input_data="""array (
  'name' => 'phplit',
  'version' => '1.0.0',
  'require' =>
  array (
    'php' => '>=8.1',
    'ext-json' => '*',
  ),
  'keywords' =>
  array (
    0 => 'php',
    1 => 'parser',
  ),
  'stable' => true,
  'ratio' => 0.75,
  'homepage' => NULL,
)""",
            expected_output={
                "name": "phplit",
                "version": "1.0.0",
                "require": {"php": ">=8.1", "ext-json": "*"},
                "keywords": ["php", "parser"],
                "stable": True,
                "ratio": 0.75,
                "homepage": None,
            },
        ),
        PhpTestCase(
            description="config file with comments",
            input_data="""[
    // database settings
    'db' => [
        'host' => "localhost", # default host
        'port' => 5432,
        /* credentials live elsewhere */
    ],
    'debug' => false,
];""",
            expected_output={
                "db": {"host": "localhost", "port": 5432},
                "debug": False,
            },
        ),
        PhpTestCase(
            description="deep nesting",
            input_data="[[[[[[[[[[[[[[[[[[['Not too deep']]]]]]]]]]]]]]]]]]]",
            expected_output=[[[[[[[[[[[[[[[[[[["Not too deep"]]]]]]]]]]]]]]]]]]],
        ),
        PhpTestCase(
            description="mixed keys",
            input_data="[1, 'a' => 2, 3, 10 => 4, 5]",
            expected_output={0: 1, "a": 2, 1: 3, 10: 4, 11: 5},
        ),
    ]


@pytest.fixture
def basic_php_values() -> list[PhpTestCase]:
    """
    Provides basic PHP literal test cases for fundamental parsing.

    Covers every scalar kind and basic array structures.
    """
    return [
        PhpTestCase("null value", "null", False, None),
        PhpTestCase("uppercase null", "NULL", False, None),
        PhpTestCase("true boolean", "true", False, True),
        PhpTestCase("mixed case boolean", "True", False, True),
        PhpTestCase("false boolean", "FALSE", False, False),
        PhpTestCase("integer", "42", False, 42),
        PhpTestCase("negative integer", "-17", False, -17),
        PhpTestCase("float", "3.14", False, 3.14),
        PhpTestCase("leading dot float", ".12", False, 0.12),
        PhpTestCase("exponent float", "1e3", False, 1000.0),
        PhpTestCase("empty single string", "''", False, ""),
        PhpTestCase("empty double string", '""', False, ""),
        PhpTestCase("simple string", "'hello'", False, "hello"),
        PhpTestCase("empty array", "[]", False, []),
        PhpTestCase("empty long array", "array()", False, []),
        PhpTestCase("simple array", "[1, 2, 3]", False, [1, 2, 3]),
        PhpTestCase("trailing comma", "[1, 2, 3,]", False, [1, 2, 3]),
        PhpTestCase(
            "simple map", "['key' => 'value']", False, {"key": "value"}
        ),
        PhpTestCase("trailing semicolon", "12;", False, 12),
    ]

# -*- coding: utf-8 -*-

import unittest
from typing import Iterator, List, Optional

from chunkparse.parser import NoParseError
from . import json


def split_every(s: str, n: int) -> List[str]:
    return [s[i : i + n] for i in range(0, len(s), n)]


def all_splits(s: str) -> Iterator[List[str]]:
    for i in range(1, len(s)):
        for j in range(i, len(s)):
            yield [s[:i], s[i:j], s[j:]]


class JsonTest(unittest.TestCase):
    def t(self, data: str, expected: Optional[object] = None) -> None:
        self.assertEqual(json.loads(data), expected)
        self.assertEqual(json.loads_chunks([data]), expected)
        for n in (1, 2, 3, 7):
            self.assertEqual(json.loads_chunks(split_every(data, n)), expected)

    def test_1_array(self) -> None:
        self.t("[1]", [1])

    def test_1_object(self) -> None:
        self.t('{"foo": "bar"}', {"foo": "bar"})

    def test_bool_and_null(self) -> None:
        self.t("[null, true, false]", [None, True, False])

    def test_empty_array(self) -> None:
        self.t("[]", [])

    def test_empty_object(self) -> None:
        self.t("{}", {})

    def test_many_array(self) -> None:
        self.t("[1, 2, [3, 4, 5], 6]", [1, 2, [3, 4, 5], 6])

    def test_many_object(self) -> None:
        # noinspection SpellCheckingInspection
        self.t(
            """
            {
                "foo": 1,
                "bar":
                {
                    "baz": 2,
                    "quux": [true, false],
                    "{}": {}
                },
                "spam": "eggs"
            }
        """,
            {
                "foo": 1,
                "bar": {
                    "baz": 2,
                    "quux": [True, False],
                    "{}": {},
                },
                "spam": "eggs",
            },
        )

    def test_null(self) -> None:
        with self.assertRaises(NoParseError):
            json.loads("")
        with self.assertRaises(NoParseError):
            json.loads_chunks([])

    def test_numbers(self) -> None:
        self.t(
            """\
            [
                0, 1, -1, 14, -14, 65536,
                0.0, 3.14, -3.14, -123.456,
                6.67428e-11, -1.602176e-19, 6.67428E-11
            ]
        """,
            [
                0,
                1,
                -1,
                14,
                -14,
                65536,
                0.0,
                3.14,
                -3.14,
                -123.456,
                6.67428e-11,
                -1.602176e-19,
                6.67428e-11,
            ],
        )

    def test_strings(self) -> None:
        # noinspection SpellCheckingInspection
        self.t(
            r"""
            [
                ["", "hello", "hello world!"],
                ["привет, мир!", "λx.x"],
                ["\"", "\\", "\/", "\b", "\f", "\n", "\r", "\t"],
                ["\u0000", "\u03bb", "\uffff", "\uFFFF"],
                ["вот функция идентичности:\nλx.x\nили так:\n\u03bbx.x"]
            ]
        """,
            [
                ["", "hello", "hello world!"],
                ["привет, мир!", "λx.x"],
                ['"', "\\", "/", "\x08", "\x0c", "\n", "\r", "\t"],
                ["\u0000", "\u03bb", "\uffff", "\uffff"],
                ["вот функция идентичности:\nλx.x\nили так:\n\u03bbx.x"],
            ],
        )

    def test_toplevel_string(self) -> None:
        with self.assertRaises(NoParseError):
            json.loads("неправильно")

    def test_every_three_way_split(self) -> None:
        data = '{"a": [1, -2.5e3, "x\\ny"], "b": null}'
        expected = {"a": [1, -2500.0, "x\ny"], "b": None}
        for chunks in all_splits(data):
            self.assertEqual(json.loads_chunks(chunks), expected, chunks)

    def test_trailing_comma_fails_in_chunks(self) -> None:
        with self.assertRaises(NoParseError):
            json.loads_chunks(["[1,", " 2,", "]"])

    def test_truncated_input_fails_on_finish(self) -> None:
        with self.assertRaises(NoParseError):
            json.loads_chunks(['{"foo": [1, 2'])

    def test_long_array_one_char_per_chunk(self) -> None:
        data = "[%s]" % ", ".join(["1"] * 2000)
        self.assertEqual(json.loads_chunks(data), [1] * 2000)

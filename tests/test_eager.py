# -*- coding: utf-8 -*-

import unittest

from chunkparse import eager
from chunkparse.parser import NoParseError, a, many, sequence, some
from chunkparse.stream import as_stream


class EagerTest(unittest.TestCase):
    def test_sequence(self) -> None:
        expr = eager.sequence(a("x"), a("y"), a("z"))
        self.assertEqual(expr.parse("xyz"), ["x", "y", "z"])
        self.assertEqual(eager.sequence().parse(""), [])

    def test_many(self) -> None:
        expr = eager.many(a("x"))
        self.assertEqual(expr.parse("xxxy"), ["x", "x", "x"])
        self.assertEqual(expr.parse(""), [])

    def test_oneplus(self) -> None:
        expr = eager.oneplus(a("x"))
        self.assertEqual(expr.parse("xx"), ["x", "x"])
        with self.assertRaises(NoParseError):
            expr.parse("y")

    def test_times(self) -> None:
        expr = eager.times(2, a("x"))
        self.assertEqual(expr.parse("xxx"), ["x", "x"])
        self.assertEqual(eager.times(0, a("x")).parse("y"), [])
        with self.assertRaises(NoParseError):
            expr.parse("xy")

    def test_between_times(self) -> None:
        expr = eager.between_times(1, 3, a("x"))
        self.assertEqual(expr.parse("x"), ["x"])
        self.assertEqual(expr.parse("xxxxx"), ["x", "x", "x"])
        with self.assertRaises(NoParseError):
            expr.parse("")

    def test_between_times_unbounded(self) -> None:
        expr = eager.between_times(2, None, a("x"))
        self.assertEqual(expr.parse("xxxx"), ["x", "x", "x", "x"])
        with self.assertRaises(NoParseError):
            expr.parse("xy")

    def test_sep_by(self) -> None:
        expr = eager.sep_by(some(str.isdigit), a(","))
        self.assertEqual(expr.parse("1,2,3"), ["1", "2", "3"])
        self.assertEqual(expr.parse(""), [])

    def test_sep_by1(self) -> None:
        expr = eager.sep_by1(some(str.isdigit), a(","))
        self.assertEqual(expr.parse("1"), ["1"])
        with self.assertRaises(NoParseError):
            expr.parse("")
        with self.assertRaises(NoParseError):
            expr.parse("1,")

    def test_optional(self) -> None:
        expr = eager.optional(sequence(a("x"), a("y")))
        self.assertEqual(expr.parse("xy"), ["x", "y"])
        self.assertEqual(expr.parse("z"), [])
        with self.assertRaises(NoParseError):
            expr.parse("xz")

    def test_optional_default(self) -> None:
        expr = eager.optional(many(a("x")) + -a("!"), as_stream(["none"]))
        self.assertEqual(expr.parse("xx!"), ["x", "x"])
        self.assertEqual(expr.parse("y"), ["none"])

    def test_names(self) -> None:
        self.assertEqual(eager.many(a("x")).name, "{ 'x' }")
        self.assertEqual(eager.optional(many(a("x"))).name, "[ { 'x' } ]")

# -*- coding: utf-8 -*-

import unittest
from typing import Any, List, Optional, Tuple

from chunkparse import eager
from chunkparse.parser import (
    GrammarError,
    NoParseError,
    Outcome,
    Parser,
    Reply,
    State,
    _Ignored,  # noqa
    a,
    attempt,
    fail,
    finished,
    forward_decl,
    many,
    maybe,
    oneplus,
    pure,
    run,
    run_state,
    sequence,
    skip,
    some,
)
from chunkparse.stream import NIL, SequenceStream
from chunkparse.util import Tail


def replies(p: Parser[Any, Any], tokens: str) -> Reply:
    return run_state(_reply_of(p), State(SequenceStream(tokens)))


def _reply_of(p: Parser[Any, Any]) -> Parser[Any, Reply]:
    @Parser
    def _reply(s: Any, k: Any) -> Any:
        return Tail(p.run, s, lambda r: Tail(k, Reply(Outcome.EMPTY_OK, r, r.state)))

    return _reply


class ParsingTest(unittest.TestCase):
    def test_oneplus(self) -> None:
        x = a("x")
        y = a("y")
        expr = oneplus(x + y)
        # noinspection SpellCheckingInspection
        self.assertEqual(
            list(expr.parse("xyxyxy")), [("x", "y"), ("x", "y"), ("x", "y")]
        )

    # Issue 31
    def test_many_backtracking(self) -> None:
        x = a("x")
        y = a("y")
        expr = eager.many(attempt(x + y)) + x + x
        # noinspection SpellCheckingInspection
        self.assertEqual(expr.parse("xyxyxx"), ([("x", "y"), ("x", "y")], "x", "x"))

    def test_many_without_backtracking_fails(self) -> None:
        x = a("x")
        y = a("y")
        expr = many(x + y) + x + x
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("xyxyxx")
        self.assertEqual(str(ctx.exception), "got unexpected token: 'x', expected: 'y'")
        self.assertEqual(ctx.exception.state.position, 5)

    def test_ok_ignored(self) -> None:
        x = a("x")
        y = a("y")
        expr: Parser[str, str] = -x + y
        self.assertEqual(expr.parse("xy"), "y")

    def test_ignored_ok(self) -> None:
        x = a("x")
        y = a("y")
        expr: Parser[str, str] = x + -y
        self.assertEqual(expr.parse("xy"), "x")

    def test_ignored_ok_ok(self) -> None:
        x = a("x")
        y = a("y")
        expr: Parser[str, Tuple[str, str]] = -x + y + x
        self.assertEqual(expr.parse("xyx"), ("y", "x"))

    def test_ok_ignored_ok(self) -> None:
        x = a("x")
        y = a("y")
        expr: Parser[str, Tuple[str, str]] = x + -y + x
        self.assertEqual(expr.parse("xyx"), ("x", "x"))

    def test_ok_ok_ok(self) -> None:
        x = a("x")
        y = a("y")
        expr: Parser[str, Tuple[str, str, str]] = x + y + x
        self.assertEqual(expr.parse("xyx"), ("x", "y", "x"))

    def test_ok_ok_ignored(self) -> None:
        x = a("x")
        y = a("y")
        expr: Parser[str, Tuple[str, str]] = x + y + -x
        self.assertEqual(expr.parse("xyx"), ("x", "y"))

    def test_ignored_ignored_ok(self) -> None:
        x = a("x")
        y = a("y")
        expr: Parser[str, str] = -x + -x + y
        self.assertEqual(expr.parse("xxy"), "y")

    def test_ok_ignored_ignored(self) -> None:
        x = a("x")
        y = a("y")
        expr: Parser[str, str] = x + -y + -y
        self.assertEqual(expr.parse("xyy"), "x")

    def test_ignored_ignored(self) -> None:
        x = a("x")
        y = a("y")
        expr: Parser[str, _Ignored] = -x + -y
        self.assertEqual(expr.parse("xy"), _Ignored("y"))

    def test_ignored_ignored_ignored(self) -> None:
        x = a("x")
        y = a("y")
        z = a("z")
        expr: Parser[str, _Ignored] = -x + -y + skip(z)
        self.assertEqual(expr.parse("xyz"), _Ignored("z"))

    def test_ignored_maybe(self) -> None:
        x = a("x")
        y = a("y")
        expr: Parser[str, str] = -maybe(x) + y
        self.assertEqual(expr.parse("xy"), "y")
        self.assertEqual(expr.parse("y"), "y")

    def test_maybe_ignored(self) -> None:
        x = a("x")
        y = a("y")
        expr: Parser[str, Tuple[Optional[_Ignored], str]] = maybe(-x) + y
        self.assertEqual(expr.parse("xy"), (_Ignored("x"), "y"))
        self.assertEqual(expr.parse("y"), (None, "y"))

    def test_ignored_maybe_ignored(self) -> None:
        x = a("x")
        y = a("y")
        expr: Parser[str, Optional[str]] = -x + maybe(y) + -x
        self.assertEqual(expr.parse("xyx"), "y")
        self.assertEqual(expr.parse("xx"), None)

    def test_seq_parse_error(self) -> None:
        expr = a("x") + a("y")
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("xz")
        self.assertEqual(ctx.exception.msg, "got unexpected token: 'z'")
        self.assertEqual(str(ctx.exception), "got unexpected token: 'z', expected: 'y'")

    def test_alt_2_parse_error(self) -> None:
        expr = a("x") + (a("x") | a("y"))
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("xz")
        self.assertEqual(
            str(ctx.exception), "got unexpected token: 'z', expected: 'x' or 'y'"
        )

    def test_alt_3_parse_error(self) -> None:
        expr = a("x") + (a("x") | a("y") | a("z"))
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("xa")
        self.assertEqual(
            str(ctx.exception),
            "got unexpected token: 'a', expected: 'x' or 'y' or 'z'",
        )

    def test_alt_3_two_steps_parse_error(self) -> None:
        expr = a("x") + (a("x") | (a("y") + a("a")))
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("xyz")
        self.assertEqual(str(ctx.exception), "got unexpected token: 'z', expected: 'a'")

    def test_expected_eof_error(self) -> None:
        expr = a("x") + finished
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("xy")
        self.assertEqual(
            str(ctx.exception),
            "got unexpected token: 'y', expected: end of input",
        )

    def test_forward_decl_nested_matching_error(self) -> None:
        expr = forward_decl()
        expr.define(a("x") + maybe(expr) + a("y"))
        self.assertEqual(expr.parse("xxyy"), ("x", ("x", None, "y"), "y"))
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("xxy")
        self.assertEqual(
            str(ctx.exception), "got unexpected end of input, expected: 'y'"
        )

    def test_undefined_forward_decl(self) -> None:
        expr = forward_decl()
        with self.assertRaises(NotImplementedError):
            expr.parse("x")

    def test_unexpected_eof(self) -> None:
        expr = (a("x") + a("y")) | a("z")
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("x")
        self.assertEqual(
            str(ctx.exception), "got unexpected end of input, expected: 'y'"
        )

    def test_expected_transform_parsing_results_error(self) -> None:
        expr = (a("1") >> int) | a("2")
        self.assertEqual(expr.parse("1"), 1)
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("x")
        self.assertEqual(
            str(ctx.exception), "got unexpected token: 'x', expected: '1' or '2'"
        )

    def test_expected_some_without_name(self) -> None:
        def lowercase(t: str) -> bool:
            return t.islower()

        expr = some(lowercase)
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("A")
        self.assertEqual(
            str(ctx.exception), "got unexpected token: 'A', expected: some(...)"
        )

    def test_expected_forward_decl_alternatives(self) -> None:
        nested = forward_decl().named("nested")
        nested.define(-a("a") + maybe(nested) + -a("z"))
        expr = nested | a("x")
        self.assertIsNone(expr.parse("aazz"))
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("y")
        self.assertEqual(
            str(ctx.exception), "got unexpected token: 'y', expected: 'a' or 'x'"
        )

    def test_end_of_input_after_many_alternatives(self) -> None:
        brackets = a("[") + a("]")
        expr = many(a("x") | brackets) + finished
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("[")
        self.assertEqual(
            str(ctx.exception), "got unexpected end of input, expected: ']'"
        )

    def test_parse_one_more_then_rollback_to_single(self) -> None:
        mul = a("x") + many(a("*") + a("y"))
        add = mul + many(a("+") + mul)
        expr = add + finished
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("x*")
        self.assertEqual(
            str(ctx.exception), "got unexpected end of input, expected: 'y'"
        )

    def test_parse_one_more_then_rollback_to_alternative(self) -> None:
        mul = a("x") + many(a("*") + a("y"))
        addsub = mul + many((a("+") | a("-")) + mul)
        expr = addsub + finished
        with self.assertRaises(NoParseError) as ctx:
            expr.parse("x*")
        self.assertEqual(
            str(ctx.exception), "got unexpected end of input, expected: 'y'"
        )

    def test_attempt_backtracks(self) -> None:
        expr = attempt(a("x") + a("y")) | a("x") + a("z")
        self.assertEqual(expr.parse("xz"), ("x", "z"))
        no_attempt = (a("x") + a("y")) | a("x") + a("z")
        with self.assertRaises(NoParseError):
            no_attempt.parse("xz")

    def test_many_of_empty_parser(self) -> None:
        with self.assertRaises(GrammarError):
            many(maybe(a("x"))).parse("")
        with self.assertRaises(GrammarError):
            many(pure(1)).parse("xyz")

    def test_many_returns_stream(self) -> None:
        self.assertIs(many(a("x")).parse("y"), NIL)
        self.assertEqual(list(many(a("x")).parse("xxy")), ["x", "x"])

    def test_pure_and_fail(self) -> None:
        self.assertEqual(pure(42).parse(""), 42)
        with self.assertRaises(NoParseError) as ctx:
            (a("x") + fail("no way")).parse("xy")
        self.assertEqual(str(ctx.exception), "no way")

    def test_bind(self) -> None:
        def repeat(c: str) -> Parser[str, List[str]]:
            return eager.times(2, a(c))

        expr = some(str.isalpha).bind(repeat)
        self.assertEqual(expr.parse("xxx"), ["x", "x"])
        with self.assertRaises(NoParseError):
            expr.parse("xyy")

    def test_named(self) -> None:
        expr = (a("x") + a("y")).named("expr")
        self.assertEqual(expr.name, "expr")
        self.assertEqual((a("x") + a("y")).name, "('x', 'y')")
        self.assertEqual(maybe(a("x")).name, "[ 'x' ]")
        self.assertEqual(many(a("x")).name, "{ 'x' }")

    def test_sequence(self) -> None:
        expr = sequence(a("x"), a("y"), a("z"))
        self.assertEqual(list(expr.parse("xyz")), ["x", "y", "z"])

    def test_run_with_iterable_and_user_state(self) -> None:
        @Parser
        def user_state(s: Any, k: Any) -> Any:
            return Tail(k, Reply(Outcome.EMPTY_OK, s.user_state, s))

        expr = a(1) + user_state
        self.assertEqual(run(expr, iter([1, 2]), "data"), (1, "data"))


class ReplyTest(unittest.TestCase):
    def test_consumed_ok(self) -> None:
        r = replies(a("x"), "xy")
        self.assertIs(r.outcome, Outcome.CONSUMED_OK)
        self.assertEqual(r.value, "x")
        self.assertEqual(r.state.position, 1)

    def test_empty_ok(self) -> None:
        r = replies(maybe(a("x")), "y")
        self.assertIs(r.outcome, Outcome.EMPTY_OK)
        self.assertEqual(r.state.position, 0)

    def test_consumed_err(self) -> None:
        r = replies(a("x") + a("y"), "xz")
        self.assertIs(r.outcome, Outcome.CONSUMED_ERR)
        self.assertIsInstance(r.value, NoParseError)

    def test_empty_err(self) -> None:
        r = replies(a("x"), "y")
        self.assertIs(r.outcome, Outcome.EMPTY_ERR)

    def test_attempt_turns_consumed_err_into_empty_err(self) -> None:
        r = replies(attempt(a("x") + a("y")), "xz")
        self.assertIs(r.outcome, Outcome.EMPTY_ERR)
        self.assertEqual(r.state.position, 0)

    def test_match(self) -> None:
        r = Reply(Outcome.CONSUMED_ERR, "e", None)
        result = r.match(
            consumed_ok=lambda v, s: "cok",
            empty_ok=lambda v, s: "eok",
            consumed_err=lambda v, s: "cerr %s" % v,
            empty_err=lambda v, s: "eerr",
        )
        self.assertEqual(result, "cerr e")

    def test_outcome_consume(self) -> None:
        self.assertIs(Outcome.EMPTY_OK.consume(), Outcome.CONSUMED_OK)
        self.assertIs(Outcome.EMPTY_ERR.consume(), Outcome.CONSUMED_ERR)
        self.assertIs(Outcome.CONSUMED_OK.consume(), Outcome.CONSUMED_OK)
        self.assertTrue(Outcome.EMPTY_OK.ok)
        self.assertFalse(Outcome.EMPTY_OK.consumed)


class StateTest(unittest.TestCase):
    def test_equality(self) -> None:
        tokens = "xy"
        s = State(SequenceStream(tokens), 0, None)
        self.assertEqual(s, State(SequenceStream(tokens), 0, None))
        self.assertNotEqual(s, s.set_position(1))
        self.assertNotEqual(s, s.set_user_state("u"))
        self.assertNotEqual(s, s.set_input(SequenceStream(tokens, 1)))

    def test_next(self) -> None:
        s = State(SequenceStream("xy"))
        s2 = run_state(s.next("x"), s)
        self.assertEqual(s2.position, 1)
        self.assertEqual(s2.first(), "y")
        self.assertFalse(s2.is_empty())

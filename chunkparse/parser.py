# Copyright © 2024 The chunkparse authors
#
# Permission is hereby granted, free of charge, to any person obtaining a copy of this
# software and associated documentation files (the "Software"), to deal in the Software
# without restriction, including without limitation the rights to use, copy, modify,
# merge, publish, distribute, sublicense, and/or sell copies of the Software, and to
# permit persons to whom the Software is furnished to do so, subject to the following
# conditions:
#
# The above copyright notice and this permission notice shall be included in all copies
# or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR IMPLIED,
# INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY, FITNESS FOR A
# PARTICULAR PURPOSE AND NON-INFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT
# HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION OF
# CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE
# OR THE USE OR OTHER DEALINGS IN THE SOFTWARE.

"""Functional parsing combinators in continuation-passing style.

Parsing combinators define an internal domain-specific language (DSL) for describing
the parsing rules of a grammar. You start with a few primitive parsers, then combine
your parsers to get more complex ones, and finally cover the whole grammar you want to
parse.

The structure of the language:

* Class `Parser`
    * All the primitives and combinators of the language return `Parser` objects
    * It defines the main `Parser.parse(tokens)` method
* Primitive parsers
    * `some(pred)`, `a(value)`, `pure(x)`, `fail(msg)`, `forward_decl()`, `finished`
* Parser combinators
    * `p1 + p2`, `p1 | p2`, `p >> f`, `-p`, `attempt(p)`, `maybe(p)`, `optional(p)`,
      `many(p)`, `oneplus(p)`, `times(n, p)`, `between_times(lo, hi, p)`,
      `sep_by(p, sep)`, `sep_by1(p, sep)`, `sequence(*ps)`, `skip(p)`

Unlike a parser that returns its result to the caller, a parser object here never
returns a parsed value. It passes a `Reply` to its continuation and returns a `Tail`
call that the `trampoline()` evaluates. A `Reply` tells one of four outcomes: whether
the parser succeeded or failed, and whether it consumed any input. This is what lets
`chunkparse.incremental` stop a parse in the middle when the input runs out and
resume it later.

Choice `p1 | p2` tries `p2` only if `p1` failed without consuming input. Use
`attempt(p1) | p2` when `p1` may fail after consuming something.
"""

__all__ = [
    "Outcome",
    "Reply",
    "State",
    "Parser",
    "NoParseError",
    "GrammarError",
    "some",
    "a",
    "pure",
    "fail",
    "finished",
    "attempt",
    "optional",
    "maybe",
    "skip",
    "many",
    "oneplus",
    "times",
    "between_times",
    "sep_by",
    "sep_by1",
    "sequence",
    "forward_decl",
    "parse_state",
    "run_state",
    "run_stream",
    "run",
]

import enum
import logging
from typing import (
    Any,
    Callable,
    Generic,
    Iterable,
    NamedTuple,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

from chunkparse.stream import NIL, Cons, Stream, append, as_stream
from chunkparse.util import Tail, trampoline

log = logging.getLogger("chunkparse")

debug = False

_A = TypeVar("_A")
_B = TypeVar("_B")
_C = TypeVar("_C")


class Outcome(enum.Enum):
    """The four ways a parser can finish."""

    CONSUMED_OK = "consumed-ok"
    EMPTY_OK = "empty-ok"
    CONSUMED_ERR = "consumed-err"
    EMPTY_ERR = "empty-err"

    @property
    def ok(self) -> bool:
        return self is Outcome.CONSUMED_OK or self is Outcome.EMPTY_OK

    @property
    def consumed(self) -> bool:
        return self is Outcome.CONSUMED_OK or self is Outcome.CONSUMED_ERR

    def consume(self) -> "Outcome":
        """Return the outcome as seen by a parser that consumed input before."""
        if self is Outcome.EMPTY_OK:
            return Outcome.CONSUMED_OK
        elif self is Outcome.EMPTY_ERR:
            return Outcome.CONSUMED_ERR
        else:
            return self


class Reply(NamedTuple):
    """The outcome of running a parser, its value (or error) and the new state."""

    outcome: Outcome
    value: Any
    state: Any

    def match(
        self,
        consumed_ok: Callable[[Any, Any], _C],
        empty_ok: Callable[[Any, Any], _C],
        consumed_err: Callable[[Any, Any], _C],
        empty_err: Callable[[Any, Any], _C],
    ) -> _C:
        """Call the handler for the outcome of the reply with `(value, state)`."""
        if self.outcome is Outcome.CONSUMED_OK:
            return consumed_ok(self.value, self.state)
        elif self.outcome is Outcome.EMPTY_OK:
            return empty_ok(self.value, self.state)
        elif self.outcome is Outcome.CONSUMED_ERR:
            return consumed_err(self.value, self.state)
        else:
            return empty_err(self.value, self.state)


Continuation = Callable[[Reply], Any]


class Parser(Generic[_A, _B]):
    """A parser object that can parse a sequence of tokens or can be combined with
    other parsers using `+`, `|`, `>>`, `many()`, and other parsing combinators.

    Type: `Parser[A, B]`

    The generic variables in the type are: `A` is the type of the tokens in the
    sequence to parse, `B` is the type of the parsed value.

    !!! Note

        The constructor `Parser.__init__()` is considered **internal**. It takes a
        function `(state, k) -> Tail` that passes a `Reply` to the continuation `k`.
        Use primitive parsers and parsing combinators to construct new parsers.
    """

    def __init__(
        self,
        p: Union["Parser[_A, _B]", Callable[[Any, Continuation], Any]],
    ) -> None:
        """Wrap the parser function `p` into a `Parser` object."""
        self.name = ""
        self.define(p)

    def named(self, name: str) -> "Parser[_A, _B]":
        """Specify the name of the parser for easier debugging.

        Type: `(str) -> Parser[A, B]`

        This name is used in the debug-level parsing log and in the "expected: ..."
        part of error messages.

        Examples:

        ```pycon
        >>> expr = (a("x") + a("y")).named("expr")
        >>> expr.name
        'expr'
        >>> expr = a("x") + a("y")
        >>> expr.name
        "('x', 'y')"

        ```
        """
        self.name = name
        return self

    def define(
        self,
        p: Union["Parser[_A, _B]", Callable[[Any, Continuation], Any]],
    ) -> None:
        """Define the parser created earlier as a forward declaration.

        Type: `(Parser[A, B]) -> None`

        See the examples in the docs for `forward_decl()`.
        """
        f = getattr(p, "run", p)
        if debug:
            setattr(self, "_run", f)
        else:
            setattr(self, "run", f)
        name = getattr(p, "name", p.__doc__)
        if name is not None:
            self.named(name)

    def run(self, s: Any, k: Continuation) -> Any:
        """Run the parser in the state `s`, passing its `Reply` to `k`.

        Type: `(State, Callable[[Reply], Any]) -> Any`

        The return value is a `Tail` call (or the final value of the whole parse) to be
        evaluated by `trampoline()`.

        !!! Warning

            This method is **internal**. Use `Parser.parse(tokens)`, `run()` or the
            functions of `chunkparse.incremental` instead.
        """
        if debug:
            log.debug("trying %s" % self.name)
        return self._run(s, k)

    def _run(self, s: Any, k: Continuation) -> Any:
        raise NotImplementedError("you must define() a parser")

    def parse(self, tokens: Union[Sequence[_A], Iterable[_A]]) -> _B:
        """Parse the sequence of tokens and return the parsed value.

        Type: `(Sequence[A]) -> B`

        If the parser fails to parse the tokens, it raises `NoParseError`. The parser
        does not have to consume all the tokens, use `finished` for that.
        """
        return run(self, tokens)

    def __add__(self, other: "Parser[_A, _C]") -> "Parser[_A, Any]":
        """Sequential combination of parsers. It runs this parser, then the other
        parser.

        The return value of the resulting parser is a tuple of each parsed value in
        the sum of parsers. We merge all parsing results of `p1 + p2 + ... + pN` into a
        single tuple. You can skip some parsing results by using `-p` or `skip(p)`.

        Examples:

        ```pycon
        >>> expr = a("x") + a("y")
        >>> expr.parse("xy")
        ('x', 'y')
        >>> expr = a("x") + a("y") + a("z")
        >>> expr.parse("xyz")
        ('x', 'y', 'z')

        ```
        """

        def magic(v1: Any, v2: Any) -> _Tuple:
            if isinstance(v1, _Tuple):
                return _Tuple(v1 + (v2,))
            else:
                return _Tuple((v1, v2))

        name = "(%s, %s)" % (self.name, other.name)
        if isinstance(other, _IgnoredParser):
            return _seq(self, other, lambda v1, _: v1).named(name)
        else:
            return _seq(self, other, magic).named(name)

    def __or__(self, other: "Parser[_A, _C]") -> "Parser[_A, Union[_B, _C]]":
        """Choice combination of parsers.

        It runs this parser and returns its result. If the parser fails without
        consuming any tokens, it runs the other parser.

        Examples:

        ```pycon
        >>> expr = a("x") | a("y")
        >>> expr.parse("x")
        'x'
        >>> expr.parse("y")
        'y'

        ```
        """

        @Parser
        def _or(s: Any, k: Continuation) -> Any:
            def on_first(r1: Reply) -> Any:
                if r1.outcome is not Outcome.EMPTY_ERR:
                    return Tail(k, r1)

                def on_second(r2: Reply) -> Any:
                    if r2.outcome is Outcome.EMPTY_ERR:
                        e = r1.value.merge(r2.value)
                        return Tail(k, Reply(Outcome.EMPTY_ERR, e, r2.state))
                    return Tail(k, r2)

                return Tail(other.run, s, on_second)

            return Tail(self.run, s, on_first)

        _or.name = "%s or %s" % (self.name, other.name)
        return _or

    def __rshift__(self, f: Callable[[_B], _C]) -> "Parser[_A, _C]":
        """Transform the parsing result by applying the specified function.

        Type: `(Callable[[B], C]) -> Parser[A, C]`

        Examples:

        ```pycon
        >>> expr = (a("D") | a("d")) >> str.lower
        >>> expr.parse("D")
        'd'

        ```
        """

        @Parser
        def _shift(s: Any, k: Continuation) -> Any:
            def on_reply(r: Reply) -> Any:
                if r.outcome.ok:
                    return Tail(k, r._replace(value=f(r.value)))
                return Tail(k, r)

            return Tail(self.run, s, on_reply)

        return _shift.named(self.name)

    def bind(self, f: Callable[[_B], "Parser[_A, _C]"]) -> "Parser[_A, _C]":
        """Bind the parser to a monadic function that returns a new parser.

        Type: `(Callable[[B], Parser[A, C]]) -> Parser[A, C]`

        Also known as `>>=` in Haskell. If this parser consumed input, the result of
        the whole parser counts as consuming input too.
        """

        @Parser
        def _bind(s: Any, k: Continuation) -> Any:
            def on_first(r1: Reply) -> Any:
                if not r1.outcome.ok:
                    return Tail(k, r1)
                q = f(r1.value)
                if not r1.outcome.consumed:
                    return Tail(q.run, r1.state, k)

                def on_second(r2: Reply) -> Any:
                    return Tail(k, r2._replace(outcome=r2.outcome.consume()))

                return Tail(q.run, r1.state, on_second)

            return Tail(self.run, s, on_first)

        _bind.name = "(%s >>=)" % (self.name,)
        return _bind

    def __neg__(self) -> "_IgnoredParser[_A]":
        """Return a parser that parses the same tokens, but its parsing result is
        ignored by the sequential `+` combinator.

        Type: `(Parser[A, B]) -> _IgnoredParser[A]`

        Examples:

        ```pycon
        >>> expr = -a("x") + a("y")
        >>> expr.parse("xy")
        'y'
        >>> expr = a("x") + -a("y") + a("z")
        >>> expr.parse("xyz")
        ('x', 'z')

        ```
        """
        return _IgnoredParser(self)

    def __repr__(self) -> str:
        return "<Parser %s>" % (self.name,)


def _seq(
    p: Parser[Any, Any],
    q: Parser[Any, Any],
    combine: Callable[[Any, Any], Any],
) -> Parser[Any, Any]:
    @Parser
    def _sequence(s: Any, k: Continuation) -> Any:
        def on_first(r1: Reply) -> Any:
            if not r1.outcome.ok:
                return Tail(k, r1)

            def on_second(r2: Reply) -> Any:
                outcome = r2.outcome
                if r1.outcome.consumed:
                    outcome = outcome.consume()
                if outcome.ok:
                    return Tail(k, Reply(outcome, combine(r1.value, r2.value), r2.state))
                return Tail(k, Reply(outcome, r2.value, r2.state))

            return Tail(q.run, r1.state, on_second)

        return Tail(p.run, s, on_first)

    return _sequence


class State:
    """Parsing state: the rest of the input, the position and the user state.

    `position` is the number of tokens consumed since the beginning of the input. The
    state is immutable, every `set_*()` method returns a new state.
    """

    __slots__ = ("input", "position", "user_state")

    def __init__(self, input: Stream[Any], position: int = 0, user_state: Any = None):
        self.input = input
        self.position = position
        self.user_state = user_state

    def is_empty(self) -> bool:
        return self.input.is_empty()

    def first(self) -> Any:
        return self.input.first()

    def next(self, x: Any) -> Parser[Any, Any]:
        """Return a parser that moves to the state after the token `x`."""
        return _set_state(self.advance())

    def advance(self) -> "State":
        """Return the state after the first token of the input."""
        return State(self.input.rest(), self.position + 1, self.user_state)

    def set_input(self, input: Stream[Any]) -> "State":
        return State(input, self.position, self.user_state)

    def set_position(self, position: int) -> "State":
        return State(self.input, position, self.user_state)

    def set_user_state(self, user_state: Any) -> "State":
        return State(self.input, self.position, user_state)

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, State)
            and self.input == other.input
            and self.position == other.position
            and self.user_state == other.user_state
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return str(self.position)

    def __repr__(self) -> str:
        return "State(%r, %r)" % (self.position, self.user_state)


class NoParseError(Exception):
    """A parse failure: the message, the state where it happened and the parsers that
    were expected there."""

    def __init__(
        self,
        msg: str,
        state: Any,
        expected: Sequence[Parser[Any, Any]] = (),
    ) -> None:
        self.msg = msg
        self.state = state
        self.expected = tuple(expected)

    def merge(self, other: "NoParseError") -> "NoParseError":
        """Combine the expected parsers of two failures at the same position."""
        if self.state.position != other.state.position:
            return other
        return NoParseError(other.msg, other.state, self.expected + other.expected)

    def __str__(self) -> str:
        names = [p.name for p in self.expected if p.name]
        if names:
            return "%s, expected: %s" % (self.msg, " or ".join(names))
        return self.msg


class GrammarError(Exception):
    """Raised when the grammar definition itself contains errors."""

    pass


class _Tuple(tuple):
    pass


class _Ignored:
    def __init__(self, value: Any) -> None:
        self.value = value

    def __repr__(self) -> str:
        return "_Ignored(%s)" % repr(self.value)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Ignored) and self.value == other.value


class _IgnoredParser(Parser[_A, Any]):
    def __init__(
        self,
        p: Union[Parser[_A, Any], Callable[[Any, Continuation], Any]],
    ) -> None:
        super(_IgnoredParser, self).__init__(p)
        run = self._run if debug else self.run

        def ignored(s: Any, k: Continuation) -> Any:
            def on_reply(r: Reply) -> Any:
                if r.outcome.ok and not isinstance(r.value, _Ignored):
                    return Tail(k, r._replace(value=_Ignored(r.value)))
                return Tail(k, r)

            return Tail(run, s, on_reply)

        self.define(ignored)
        name = getattr(p, "name", p.__doc__)
        if name is not None:
            self.name = name

    def __add__(self, other: Parser[_A, _C]) -> Parser[_A, Any]:
        name = "(%s, %s)" % (self.name, other.name)
        if isinstance(other, _IgnoredParser):
            return _IgnoredParser(_seq(self, other, lambda _, v: v)).named(name)
        else:
            return _seq(self, other, lambda _, v: v).named(name)


def _set_state(s: Any) -> Parser[Any, Any]:
    @Parser
    def _set(_: Any, k: Continuation) -> Any:
        return Tail(k, Reply(Outcome.EMPTY_OK, s, s))

    _set.name = "(set state)"
    return _set


def some(pred: Callable[[_A], bool]) -> Parser[_A, _A]:
    """Return a parser that parses a token if it satisfies the predicate `pred`.

    Type: `(Callable[[A], bool]) -> Parser[A, A]`

    Examples:

    ```pycon
    >>> expr = some(lambda s: s.isalpha()).named("alpha")
    >>> expr.parse("x")
    'x'
    >>> expr.parse("y")
    'y'

    ```
    """

    @Parser
    def _some(s: Any, k: Continuation) -> Any:
        if s.is_empty():
            e = NoParseError("got unexpected end of input", s, [_some])
            return Tail(k, Reply(Outcome.EMPTY_ERR, e, s))
        t = s.first()
        if pred(t):

            def on_next(r: Reply) -> Any:
                if debug:
                    log.debug("*matched* %r, new state = %s" % (t, r.state))
                return Tail(k, Reply(Outcome.CONSUMED_OK, t, r.state))

            return Tail(s.next(t).run, s, on_next)
        else:
            if debug:
                log.debug("failed %r, state = %s, expected = %s" % (t, s, _some.name))
            e = NoParseError("got unexpected token: %r" % (t,), s, [_some])
            return Tail(k, Reply(Outcome.EMPTY_ERR, e, s))

    _some.name = "some(...)"
    return _some


def a(value: _A) -> Parser[_A, _A]:
    """Return a parser that parses a token if it's equal to `value`.

    Type: `(A) -> Parser[A, A]`

    Examples:

    ```pycon
    >>> expr = a("x")
    >>> expr.parse("x")
    'x'

    ```
    """
    name = getattr(value, "name", value)

    def eq_value(t: _A) -> bool:
        return t == value

    return some(eq_value).named(repr(name))


def pure(x: _A) -> Parser[Any, _A]:
    """Wrap any object into a parser.

    Type: `(A) -> Parser[Any, A]`

    A pure parser doesn't touch the tokens, it just returns its pure `x` value.
    """

    @Parser
    def _pure(s: Any, k: Continuation) -> Any:
        return Tail(k, Reply(Outcome.EMPTY_OK, x, s))

    _pure.name = "(pure %r)" % (x,)
    return _pure


def fail(msg: str) -> Parser[Any, Any]:
    """Return a parser that always fails with the message `msg`."""

    @Parser
    def _fail(s: Any, k: Continuation) -> Any:
        return Tail(k, Reply(Outcome.EMPTY_ERR, NoParseError(msg, s), s))

    _fail.name = "(fail %r)" % (msg,)
    return _fail


@Parser
def finished(s: Any, k: Continuation) -> Any:
    """A parser that fails if there are any unparsed tokens left in the input."""
    if s.is_empty():
        return Tail(k, Reply(Outcome.EMPTY_OK, None, s))
    e = NoParseError("got unexpected token: %r" % (s.first(),), s, [finished])
    return Tail(k, Reply(Outcome.EMPTY_ERR, e, s))


finished.name = "end of input"


def attempt(p: Parser[_A, _B]) -> Parser[_A, _B]:
    """Return a parser that backtracks to its starting state if `p` fails.

    Type: `(Parser[A, B]) -> Parser[A, B]`

    A failure of `p` after consuming tokens is reported as a failure without consuming
    anything, so the alternative of `attempt(p) | q` is tried.

    Examples:

    ```pycon
    >>> expr = attempt(a("x") + a("y")) | a("x") + a("z")
    >>> expr.parse("xz")
    ('x', 'z')

    ```
    """

    @Parser
    def _attempt(s: Any, k: Continuation) -> Any:
        def on_reply(r: Reply) -> Any:
            if r.outcome is Outcome.CONSUMED_ERR:
                return Tail(k, Reply(Outcome.EMPTY_ERR, r.value, s))
            return Tail(k, r)

        return Tail(p.run, s, on_reply)

    return _attempt.named(p.name)


def optional(p: Parser[_A, _B], default: Any = None) -> Parser[_A, Any]:
    """Return a parser that returns `default` if `p` fails without consuming tokens.

    Type: `(Parser[A, B], C) -> Parser[A, Union[B, C]]`
    """
    return (p | pure(default)).named("[ %s ]" % (p.name,))


def maybe(p: Parser[_A, _B]) -> Parser[_A, Optional[_B]]:
    """Return a parser that returns `None` if the parser `p` fails.

    Examples:

    ```pycon
    >>> expr = maybe(a("x"))
    >>> expr.parse("x")
    'x'
    >>> expr.parse("y") is None
    True

    ```
    """
    return optional(p, None)


def skip(p: Parser[_A, Any]) -> "_IgnoredParser[_A]":
    """An alias for `-p`.

    See also the docs for `Parser.__neg__()`.
    """
    return -p


def _cons(x: Any, xs: Stream[Any]) -> Stream[Any]:
    return Cons(x, xs)


def many(p: Parser[_A, _B]) -> Parser[_A, Stream[_B]]:
    """Return a parser that applies the parser `p` as many times as it succeeds at
    parsing the tokens.

    Type: `(Parser[A, B]) -> Parser[A, Stream[B]]`

    The parsed value is a stream of the sequentially parsed values. See
    `chunkparse.eager.many()` for a version that returns a list.

    If `p` succeeds without consuming any tokens, the repetition would never end, so
    `GrammarError` is raised.

    Examples:

    ```pycon
    >>> expr = many(a("x"))
    >>> list(expr.parse("xxxy"))
    ['x', 'x', 'x']
    >>> list(expr.parse("y"))
    []

    ```
    """

    @Parser
    def _many(s: Any, k: Continuation) -> Any:
        def on_item(r: Reply) -> Any:
            if r.outcome is Outcome.EMPTY_ERR:
                return Tail(k, Reply(Outcome.EMPTY_OK, NIL, s))
            elif r.outcome is Outcome.CONSUMED_ERR:
                return Tail(k, r)
            elif r.outcome is Outcome.EMPTY_OK:
                raise GrammarError(
                    "%s is applied to a parser that accepts an empty input"
                    % _many.name
                )
            x = r.value

            def on_rest(r2: Reply) -> Any:
                outcome = r2.outcome.consume()
                if outcome.ok:
                    return Tail(k, Reply(outcome, Cons(x, r2.value), r2.state))
                return Tail(k, Reply(outcome, r2.value, r2.state))

            return Tail(_many.run, r.state, on_rest)

        return Tail(p.run, s, on_item)

    _many.name = "{ %s }" % p.name
    return _many


def oneplus(p: Parser[_A, _B]) -> Parser[_A, Stream[_B]]:
    """Return a parser that applies the parser `p` one or more times.

    Examples:

    ```pycon
    >>> expr = oneplus(a("x"))
    >>> list(expr.parse("xx"))
    ['x', 'x']

    ```
    """
    return _seq(p, many(p), _cons).named("(%s, { %s })" % (p.name, p.name))


def times(n: int, p: Parser[_A, _B]) -> Parser[_A, Stream[_B]]:
    """Return a parser that applies the parser `p` exactly `n` times."""
    q: Parser[_A, Stream[_B]] = pure(NIL)
    for _ in range(n):
        q = _seq(p, q, _cons)
    return q.named("%d * %s" % (n, p.name))


def between_times(
    lo: int,
    hi: Optional[int],
    p: Parser[_A, _B],
) -> Parser[_A, Stream[_B]]:
    """Return a parser that applies `p` at least `lo` and at most `hi` times.

    Type: `(int, Optional[int], Parser[A, B]) -> Parser[A, Stream[B]]`

    If `hi` is `None`, there is no upper bound.
    """
    if hi is None:
        extra: Parser[_A, Stream[_B]] = many(p)
    else:
        extra = pure(NIL)
        for _ in range(hi - lo):
            extra = optional(_seq(p, extra, _cons), NIL)
    name = "%d..%s * %s" % (lo, "" if hi is None else hi, p.name)
    return _seq(times(lo, p), extra, append).named(name)


def sep_by1(p: Parser[_A, _B], sep: Parser[_A, Any]) -> Parser[_A, Stream[_B]]:
    """Return a parser that parses one or more `p` separated by `sep`.

    Examples:

    ```pycon
    >>> expr = sep_by1(a("x"), a(","))
    >>> list(expr.parse("x,x,x"))
    ['x', 'x', 'x']

    ```
    """
    rest = many(_seq(sep, p, lambda _, v: v))
    return _seq(p, rest, _cons).named("%s / %s" % (p.name, sep.name))


def sep_by(p: Parser[_A, _B], sep: Parser[_A, Any]) -> Parser[_A, Stream[_B]]:
    """Return a parser that parses zero or more `p` separated by `sep`."""
    return optional(sep_by1(p, sep), NIL)


def sequence(*ps: Parser[_A, Any]) -> Parser[_A, Stream[Any]]:
    """Return a parser that runs the parsers `ps` one after another and returns the
    stream of their results."""
    q: Parser[_A, Stream[Any]] = pure(NIL)
    for p in reversed(ps):
        q = _seq(p, q, _cons)
    return q.named("(%s)" % ", ".join(p.name for p in ps))


def forward_decl() -> Parser[Any, Any]:
    """Return an undefined parser that can be used as a forward declaration.

    Type: `Parser[Any, Any]`

    Use `p = forward_decl()` in combination with `p.define(...)` to define recursive
    parsers.

    Examples:

    ```pycon
    >>> expr = forward_decl()
    >>> expr.define(a("x") + maybe(expr) + a("y"))
    >>> expr.parse("xxyy")  # noqa
    ('x', ('x', None, 'y'), 'y')

    ```
    """

    @Parser
    def f(_s: Any, _k: Any) -> Any:
        raise NotImplementedError("you must define() a forward_decl somewhere")

    f.name = "forward_decl()"
    return f


def parse_state(
    p: Parser[Any, _B],
    state: Any,
    ok: Callable[[_B, Any], _C],
    err: Callable[[NoParseError, Any], _C],
) -> _C:
    """Run the parser `p` in `state`, then call `ok(value, state)` or
    `err(error, state)`."""

    def done(r: Reply) -> Any:
        if r.outcome.ok:
            return ok(r.value, r.state)
        return err(r.value, r.state)

    return trampoline(p.run(state, done))


def _raise(e: NoParseError, _: Any) -> Any:
    raise e


def run_state(p: Parser[Any, _B], state: Any) -> _B:
    """Run the parser `p` in `state` and return the parsed value.

    If the parser fails, it raises `NoParseError`.
    """
    return parse_state(p, state, lambda x, _: x, _raise)


def run_stream(p: Parser[Any, _B], s: Stream[Any], user_state: Any = None) -> _B:
    """Run the parser `p` against the stream `s`."""
    return run_state(p, State(s, 0, user_state))


def run(p: Parser[_A, _B], input: Iterable[_A], user_state: Any = None) -> _B:
    """Run the parser `p` against a sequence or an iterable of tokens.

    Examples:

    ```pycon
    >>> run(a("x") + a("y"), "xy")
    ('x', 'y')

    ```
    """
    return run_stream(p, as_stream(input), user_state)


if __name__ == "__main__":
    import doctest

    doctest.testmod()

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

"""Incremental parsing: feed the input to a parser chunk by chunk.

Any parser built with `chunkparse.parser` can be run incrementally. You start a
session with `parse_inc()` or `run_inc()`, feed it chunks of tokens with `provide()`
as they become available (from a socket, a file, a user typing, ...), and call
`finish()` when there is no more input:

```pycon
>>> from chunkparse.parser import a
>>> session = run_inc(a("x") + a("y") + a("z"))
>>> session = provide("x", session)
>>> session = provide("yz", session)
>>> finish(session)
('x', 'y', 'z')

```

A session is an immutable value. `provide()` and `finish()` never change the session
they are given, they return a new one. When the parser reaches the end of the current
chunk, the parse is suspended as a `Request` for the next chunk and control returns to
the caller. No thread is blocked while the session waits for more input.
"""

__all__ = [
    "IncrementalState",
    "Request",
    "Session",
    "ChunkHistory",
    "force_provide",
    "provide",
    "provide_string",
    "finish",
    "parse_inc_state",
    "parse_inc",
    "run_inc_state",
    "run_inc",
]

import logging
from typing import (
    Any,
    Callable,
    Iterable,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

from chunkparse import parser
from chunkparse.parser import NoParseError, Outcome, Parser, Reply, State
from chunkparse.stream import NIL, SequenceStream, Stream, as_stream
from chunkparse.util import Memo, Tail, trampoline

log = logging.getLogger("chunkparse")

_A = TypeVar("_A")
_B = TypeVar("_B")

Chunk = Union[Stream[Any], Iterable[Any], None]


class Request(NamedTuple):
    """A parse suspended until the chunk number `chunk` is available.

    `k(stream)` resumes the parse with that chunk and returns the next step for the
    trampoline.
    """

    chunk: int
    k: Callable[..., Any]


class ChunkHistory:
    """The append-only list of chunks a session has received.

    Appending returns a new history. Histories created from the same parent share their
    storage as long as they do not diverge, so keeping older sessions around is cheap.
    """

    __slots__ = ("_buffer", "_size")

    def __init__(self, buffer: Optional[List[Stream[Any]]] = None, size: int = 0):
        self._buffer: List[Stream[Any]] = [] if buffer is None else buffer
        self._size = size

    def append(self, chunk: Stream[Any]) -> "ChunkHistory":
        if self._size == len(self._buffer):
            buffer = self._buffer
        else:
            buffer = self._buffer[: self._size]
        buffer.append(chunk)
        return ChunkHistory(buffer, self._size + 1)

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, i: int) -> Stream[Any]:
        if not 0 <= i < self._size:
            raise IndexError("chunk index out of range: %d" % i)
        return self._buffer[i]

    def __iter__(self) -> Iterator[Stream[Any]]:
        return iter(self._buffer[: self._size])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChunkHistory) or len(self) != len(other):
            return False
        return all(c1 is c2 or c1 == c2 for c1, c2 in zip(self, other))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "ChunkHistory(%r)" % (list(self),)


class Session(NamedTuple):
    """A handle of an incremental parse.

    A suspended session (`done` is false) holds in `k` the continuation waiting for
    the next chunk. A completed session holds in `k` a function that returns the result
    of the parse. `chunks` is the history of all the chunks provided so far.
    """

    done: bool
    k: Callable[..., Any]
    chunks: ChunkHistory

    def add_chunk(self, c: Stream[Any]) -> "Session":
        return self._replace(chunks=self.chunks.append(c))

    def has_chunk(self, i: int) -> bool:
        return i < len(self.chunks)


class IncrementalState:
    """A parser state that reads its input chunk by chunk.

    It wraps an inner state (usually `chunkparse.parser.State`) whose input is the
    rest of the current chunk, and adds the index of this chunk. Reading operations
    are forwarded to the inner state. Consuming the last token of a chunk suspends the
    parse until the next chunk is provided.

    Two incremental states are equal only if both their chunk indices and their inner
    states are equal.
    """

    __slots__ = ("chunk", "state", "_next", "_after", "_exhausted")

    def __init__(self, chunk: int, state: Any) -> None:
        self.chunk = chunk
        self.state = state
        self._next: Optional[_Advance] = None
        self._after: Any = None
        self._exhausted = False

    @property
    def input(self) -> Stream[Any]:
        return self.state.input

    @property
    def position(self) -> int:
        return self.state.position

    @property
    def user_state(self) -> Any:
        return self.state.user_state

    def is_empty(self) -> bool:
        return self.state.is_empty()

    def first(self) -> Any:
        return self.state.first()

    def next(self, x: Any) -> Parser[Any, Any]:
        """Return a parser that moves past the token `x`.

        If the chunk still has tokens left, the parser replies with the next state
        right away. Otherwise it returns a `Request` for the next chunk.
        """
        if self._next is None:
            self._next = _Advance(self, x)
        return self._next

    def _set_after(self, inner: Any) -> None:
        # The state after the first token is computed once per state
        if inner.is_empty():
            self._exhausted = True
            self._after = inner
        else:
            self._after = IncrementalState(self.chunk, inner)

    def _step(self, k: parser.Continuation) -> Any:
        s = self._after
        if not self._exhausted:
            return Tail(k, Reply(Outcome.EMPTY_OK, s, s))
        chunk = self.chunk + 1

        def resume(i: Chunk = None) -> Any:
            s2 = IncrementalState(chunk, s.set_input(as_stream(i)))
            return Tail(k, Reply(Outcome.EMPTY_OK, s2, s2))

        return Request(chunk, resume)

    def set_input(self, input: Stream[Any]) -> "IncrementalState":
        return IncrementalState(self.chunk, self.state.set_input(input))

    def set_position(self, position: int) -> "IncrementalState":
        return IncrementalState(self.chunk, self.state.set_position(position))

    def set_user_state(self, user_state: Any) -> "IncrementalState":
        return IncrementalState(self.chunk, self.state.set_user_state(user_state))

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, IncrementalState)
            and self.chunk == other.chunk
            and self.state == other.state
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return "%d:%s" % (self.chunk, self.state)

    def __repr__(self) -> str:
        return "IncrementalState(%d, %r)" % (self.chunk, self.state)


class _Advance(Parser[Any, Any]):
    """The parser returned by `IncrementalState.next()`."""

    def __init__(self, state: IncrementalState, x: Any) -> None:
        self.state = state
        self.x = x

    @property  # type: ignore[override]
    def name(self) -> str:
        return "(next %r)" % (self.x,)

    def run(self, _: Any, k: parser.Continuation) -> Any:
        s = self.state
        if s._after is not None:
            return s._step(k)
        inner = s.state
        if type(inner) is State:
            s._set_after(inner.advance())
            return s._step(k)

        def on_inner(r: Reply) -> Any:
            s._set_after(r.state)
            return s._step(k)

        return Tail(inner.next(self.x).run, inner, on_inner)


def force_provide(c: Chunk, r: Session) -> Session:
    """Feed the chunk `c` to the session `r` even if `c` is empty.

    Type: `(Stream[A], Session) -> Session`

    The parse goes on until it either needs a chunk that hasn't been provided yet (the
    new session is suspended) or finishes (the new session is done). A completed
    session is returned unchanged.
    """
    if r.done:
        return r
    c = as_stream(c)
    r2 = r.add_chunk(c)
    result = trampoline(r2.k(c))
    while isinstance(result, Request) and r2.has_chunk(result.chunk):
        result = trampoline(result.k(r2.chunks[result.chunk]))
    if isinstance(result, Request):
        if parser.debug:
            log.debug("suspended, waiting for chunk %d" % result.chunk)
        return Session(False, result.k, r2.chunks)
    if parser.debug:
        log.debug("completed after %d chunks" % len(r2.chunks))
    return Session(True, result.k, r2.chunks)


def provide(c: Chunk, r: Session) -> Session:
    """Feed the chunk `c` to the session `r`.

    Type: `(Union[Stream[A], Iterable[A]], Session) -> Session`

    An empty chunk changes nothing: the same session is returned.
    """
    c = as_stream(c)
    if c.is_empty():
        return r
    return force_provide(c, r)


def provide_string(input: Sequence[Any], r: Session) -> Session:
    """Feed a string (or any other sequence) of tokens to the session `r`."""
    return provide(SequenceStream(input), r)


def finish(r: Session) -> Any:
    """Signal the end of input to the session `r` and return the result of the parse.

    Parsers that can stop where the input ended succeed, those that need more tokens
    fail. Finishing a completed session returns its result again without calling the
    `ok`/`err` handlers once more.
    """
    complete = force_provide(NIL, r)
    while not complete.done:
        complete = force_provide(NIL, complete)
    return complete.k()


def _handle(f: Callable[[Any, Any], Any]) -> Callable[[Any, Any], Callable[[], Any]]:
    def bind(value: Any, state: Any) -> Callable[[], Any]:
        return lambda: f(value, state)

    return bind


def parse_inc_state(
    p: Parser[Any, _A],
    state: Any,
    ok: Callable[[_A, Any], _B],
    err: Callable[[NoParseError, Any], _B],
) -> Session:
    """Start an incremental parse of `p` from `state`.

    Type: `(Parser[A, B], State, Callable[[B, State], C], Callable[[NoParseError,
    State], C]) -> Session`

    When the parse is over, the session is done. The first `finish()` then calls
    `ok(value, state)` or `err(error, state)` and returns its result, later calls
    return the same result. If the handler raises, nothing is cached and the next
    `finish()` calls it again. The input already present in `state` is provided as
    the first chunk.
    """

    def done(reply: Reply) -> Session:
        on_ok, on_err = _handle(ok), _handle(err)
        handler = reply.match(
            consumed_ok=on_ok, empty_ok=on_ok, consumed_err=on_err, empty_err=on_err
        )
        # The handler runs on the first `finish()`, not while chunks are provided
        return Session(True, Memo(handler).get, ChunkHistory())

    def start(i: Chunk = None) -> Any:
        s = IncrementalState(0, state.set_input(as_stream(i)))
        return Tail(p.run, s, done)

    return provide(state.input, Session(False, start, ChunkHistory()))


def parse_inc(
    p: Parser[Any, _A],
    user_state: Any,
    ok: Callable[[_A, Any], _B],
    err: Callable[[NoParseError, Any], _B],
) -> Session:
    """Start an incremental parse of `p` with the user state `user_state`."""
    return parse_inc_state(p, State(NIL, 0, user_state), ok, err)


def _throw(e: NoParseError, _: Any) -> Any:
    raise e


def run_inc_state(p: Parser[Any, _A], state: Any) -> Session:
    """Start an incremental parse of `p` from `state`.

    `finish()` returns the parsed value. A parse failure is raised as `NoParseError`
    by every `finish()` of the session, never by `provide()`.
    """
    return parse_inc_state(p, state, lambda x, _: x, _throw)


def run_inc(p: Parser[Any, _A], user_state: Any = None) -> Session:
    """Start an incremental parse of `p`, raising `NoParseError` on failure.

    Examples:

    ```pycon
    >>> from chunkparse.parser import a, many
    >>> session = run_inc(many(a("x")))
    >>> session = provide("xx", session)
    >>> session = provide("x", session)
    >>> list(finish(session))
    ['x', 'x', 'x']

    ```
    """
    return run_inc_state(p, State(NIL, 0, user_state))

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

"""Persistent streams of input elements and parsing results.

A stream is an immutable linked sequence with three operations: `is_empty()`,
`first()` and `rest()`. Parser states hold streams as their input, so moving forward
never destroys the part of the input a backtracking parser may come back to. The
results of repetition combinators are streams as well.

* `NIL` is the empty stream
* `Cons(head, tail)` is a cell whose tail is either a stream or a function computing
  it; a computed tail is evaluated at most once
* `SequenceStream(seq)` views a `str`, `list` or `tuple` without copying it
* `from_iterable(iterable)` pulls elements from an iterator on demand
"""

__all__ = [
    "Stream",
    "NIL",
    "Cons",
    "SequenceStream",
    "from_iterable",
    "as_stream",
    "append",
    "to_list",
]

import functools
from typing import (
    Any,
    Callable,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

from chunkparse.util import Memo

_A = TypeVar("_A")


class Stream(Generic[_A]):
    """Base class of persistent streams.

    Type: `Stream[A]`

    Iterating over a stream walks it with a loop, so very long and infinite streams
    are fine as long as you stop consuming them.
    """

    def is_empty(self) -> bool:
        raise NotImplementedError()

    def first(self) -> _A:
        raise NotImplementedError()

    def rest(self) -> "Stream[_A]":
        raise NotImplementedError()

    def __iter__(self) -> Iterator[_A]:
        s: Stream[_A] = self
        while not s.is_empty():
            yield s.first()
            s = s.rest()

    def __bool__(self) -> bool:
        return not self.is_empty()


class _Nil(Stream[Any]):
    def is_empty(self) -> bool:
        return True

    def first(self) -> Any:
        raise IndexError("first() of an empty stream")

    def rest(self) -> Stream[Any]:
        return self

    def __repr__(self) -> str:
        return "NIL"


NIL: Stream[Any] = _Nil()


class Cons(Stream[_A]):
    """A stream cell with a `head` element and a `tail` stream.

    Type: `(A, Union[Stream[A], Callable[[], Stream[A]]]) -> Stream[A]`

    The tail may be given as a function of no arguments. It is called the first time
    `rest()` is requested and its result is cached.

    Examples:

    ```pycon
    >>> s = Cons(1, lambda: Cons(2, NIL))
    >>> list(s)
    [1, 2]
    >>> s.rest() is s.rest()
    True

    ```
    """

    __slots__ = ("head", "_tail")

    def __init__(
        self,
        head: _A,
        tail: Union[Stream[_A], Callable[[], Stream[_A]]],
    ) -> None:
        self.head = head
        if isinstance(tail, Stream):
            self._tail: Union[Stream[_A], Memo[Stream[_A]]] = tail
        else:
            self._tail = Memo(tail)

    def is_empty(self) -> bool:
        return False

    def first(self) -> _A:
        return self.head

    def rest(self) -> Stream[_A]:
        tail = self._tail
        if isinstance(tail, Memo):
            return tail.get()
        return tail

    @property
    def forced(self) -> bool:
        """Tell whether the tail of the cell has already been computed."""
        tail = self._tail
        return not isinstance(tail, Memo) or tail.evaluated

    def __repr__(self) -> str:
        return "Cons(%r, ...)" % (self.head,)


class SequenceStream(Stream[_A]):
    """A stream view of a sequence starting at `index`.

    Type: `(Sequence[A], int) -> Stream[A]`
    """

    __slots__ = ("seq", "index")

    def __init__(self, seq: Sequence[_A], index: int = 0) -> None:
        self.seq = seq
        self.index = index

    def is_empty(self) -> bool:
        return self.index >= len(self.seq)

    def first(self) -> _A:
        if self.index >= len(self.seq):
            raise IndexError("first() of an empty stream")
        return self.seq[self.index]

    def rest(self) -> Stream[_A]:
        if self.index >= len(self.seq):
            return self
        return SequenceStream(self.seq, self.index + 1)

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, SequenceStream)
            and self.seq is other.seq
            and self.index == other.index
        )

    def __hash__(self) -> int:
        return hash((id(self.seq), self.index))

    def __repr__(self) -> str:
        return "SequenceStream(%r, %d)" % (self.seq, self.index)


def _pull(it: Iterator[_A]) -> Optional[Tuple[_A, "_IteratorStream[_A]"]]:
    try:
        x = next(it)
    except StopIteration:
        return None
    return x, _IteratorStream(it)


class _IteratorStream(Stream[_A]):
    __slots__ = ("_cell",)

    def __init__(self, it: Iterator[_A]) -> None:
        self._cell: Memo[Optional[Tuple[_A, _IteratorStream[_A]]]] = Memo(
            functools.partial(_pull, it)
        )

    def is_empty(self) -> bool:
        return self._cell.get() is None

    def first(self) -> _A:
        cell = self._cell.get()
        if cell is None:
            raise IndexError("first() of an empty stream")
        return cell[0]

    def rest(self) -> Stream[_A]:
        cell = self._cell.get()
        if cell is None:
            return NIL
        return cell[1]

    def __repr__(self) -> str:
        return "<stream of %r>" % (self._cell,)


def from_iterable(iterable: Iterable[_A]) -> Stream[_A]:
    """Return a stream that pulls elements from `iterable` on demand.

    Type: `(Iterable[A]) -> Stream[A]`

    Each element is taken from the underlying iterator once, when the stream cell that
    holds it is inspected for the first time.

    Examples:

    ```pycon
    >>> import itertools
    >>> s = from_iterable(itertools.count())
    >>> s.first(), s.rest().rest().first()
    (0, 2)

    ```
    """
    return _IteratorStream(iter(iterable))


def as_stream(x: Union[None, Stream[_A], Iterable[_A]]) -> Stream[_A]:
    """Convert `x` into a stream.

    Type: `(Union[None, Stream[A], Iterable[A]]) -> Stream[A]`

    `None` is the empty stream, sequences become `SequenceStream` views, other
    iterables are read lazily.
    """
    if x is None:
        return NIL
    elif isinstance(x, Stream):
        return x
    elif isinstance(x, (str, bytes, list, tuple, range)):
        return SequenceStream(x)
    else:
        return from_iterable(x)


def append(a: Stream[_A], b: Stream[_A]) -> Stream[_A]:
    """Return the lazy concatenation of two streams.

    Type: `(Stream[A], Stream[A]) -> Stream[A]`
    """
    if a.is_empty():
        return b
    return Cons(a.first(), lambda: append(a.rest(), b))


def to_list(s: Iterable[_A]) -> List[_A]:
    """Materialize a finite stream as a list.

    Type: `(Stream[A]) -> List[A]`
    """
    return list(s)

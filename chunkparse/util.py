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

"""Evaluation helpers shared by the parser engine and the incremental driver."""

__all__ = ["Tail", "trampoline", "Memo"]

from typing import Any, Callable, Generic, TypeVar

_A = TypeVar("_A")


class Tail:
    """A suspended call `f(*args)`.

    Parsers and continuations return `Tail` objects instead of calling each other
    directly, so that `trampoline()` can run a parse of any length in constant stack
    space.
    """

    __slots__ = ("f", "args")

    def __init__(self, f: Callable[..., Any], *args: Any) -> None:
        self.f = f
        self.args = args

    def __repr__(self) -> str:
        return "Tail(%r)" % (getattr(self.f, "__name__", self.f),)


def trampoline(step: Any) -> Any:
    """Evaluate chained `Tail` calls until a non-`Tail` value is produced.

    Type: `(Any) -> Any`

    Examples:

    ```pycon
    >>> def countdown(n):
    ...     return n if n == 0 else Tail(countdown, n - 1)
    >>> trampoline(countdown(100000))
    0

    ```
    """
    while isinstance(step, Tail):
        step = step.f(*step.args)
    return step


_UNSET: Any = object()
_BUSY: Any = object()


class Memo(Generic[_A]):
    """A slot that computes its value on the first `get()` and caches it.

    Type: `Memo[A]`

    Evaluation is not re-entrant: calling `get()` from inside the function being
    evaluated raises `RuntimeError`. If the function raises, the slot stays unset and
    the next `get()` tries again.

    Examples:

    ```pycon
    >>> calls = []
    >>> m = Memo(lambda: calls.append(1) or len(calls))
    >>> m.get(), m.get(), len(calls)
    (1, 1, 1)

    ```
    """

    __slots__ = ("_f", "_value")

    def __init__(self, f: Callable[[], _A]) -> None:
        self._f = f
        self._value = _UNSET

    @property
    def evaluated(self) -> bool:
        return self._value is not _UNSET and self._value is not _BUSY

    def get(self) -> _A:
        value = self._value
        if value is _BUSY:
            raise RuntimeError("re-entrant evaluation of a lazy value")
        if value is _UNSET:
            self._value = _BUSY
            try:
                value = self._f()
            except BaseException:
                self._value = _UNSET
                raise
            self._value = value
            self._f = None
        return value

    def __repr__(self) -> str:
        if self.evaluated:
            return "Memo(%r)" % (self._value,)
        return "Memo(<pending>)"

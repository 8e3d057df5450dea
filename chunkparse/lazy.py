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

"""Lazy repeated application of a parser.

`run_many(p, input)` applies the parser `p` again and again to the input and returns a
stream of the results. Nothing past the first result is parsed until you ask for the
next element of the stream, so the input may be endless:

```pycon
>>> import itertools
>>> from chunkparse.parser import some
>>> from chunkparse.stream import from_iterable
>>> digit = some(lambda n: n < 10)
>>> results = run_many_stream(digit, from_iterable(itertools.count()))
>>> list(itertools.islice(results, 5))
[0, 1, 2, 3, 4]

```

The stream ends where `p` fails without consuming any tokens. If `p` fails after
consuming tokens, forcing the cell that reaches this failure raises `NoParseError`.
"""

__all__ = ["run_many_state", "run_many_stream", "run_many"]

from typing import Any, Iterable, TypeVar

from chunkparse.parser import (
    Outcome,
    Parser,
    Reply,
    State,
    forward_decl,
    optional,
    run_state,
)
from chunkparse.stream import NIL, Cons, Stream, as_stream
from chunkparse.util import Tail

_A = TypeVar("_A")
_B = TypeVar("_B")


def run_many_state(p: Parser[_A, _B], state: Any) -> Stream[_B]:
    """Return the lazy stream of results of applying `p` repeatedly from `state`.

    Type: `(Parser[A, B], State) -> Stream[B]`

    Each cell of the stream holds one result. Its tail runs `p` once more from the
    state where the previous application stopped, the first time the tail is needed.
    """

    many_p = forward_decl()

    def cell(x: _B) -> Parser[_A, Stream[_B]]:
        # Empty reply: `bind` turns it into a consumed one if `p` consumed tokens
        @Parser
        def _cell(s: Any, k: Any) -> Any:
            tail = Cons(x, lambda: run_state(many_p, s))
            return Tail(k, Reply(Outcome.EMPTY_OK, tail, s))

        return _cell

    many_p.define(optional(p.bind(cell), NIL))
    many_p.named("{ %s }*" % (p.name,))
    return run_state(many_p, state)


def run_many_stream(
    p: Parser[_A, _B],
    s: Stream[_A],
    user_state: Any = None,
) -> Stream[_B]:
    """Apply `p` repeatedly to the stream of tokens `s`."""
    return run_many_state(p, State(s, 0, user_state))


def run_many(
    p: Parser[_A, _B],
    input: Iterable[_A],
    user_state: Any = None,
) -> Stream[_B]:
    """Apply `p` repeatedly to a sequence or an iterable of tokens.

    Examples:

    ```pycon
    >>> from chunkparse.parser import a
    >>> list(run_many(a("x") + a("y"), "xyxyz"))
    [('x', 'y'), ('x', 'y')]

    ```
    """
    return run_many_stream(p, as_stream(input), user_state)

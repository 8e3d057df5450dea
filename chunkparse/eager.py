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

"""Repetition combinators that return lists instead of streams.

The combinators in `chunkparse.parser` return their repeated results as streams.
The ones here parse the same tokens and convert the stream into a list:

```pycon
>>> from chunkparse.parser import a
>>> many(a("x")).parse("xxy")
['x', 'x']

```
"""

__all__ = [
    "sequence",
    "many",
    "oneplus",
    "times",
    "optional",
    "between_times",
    "sep_by1",
    "sep_by",
]

import functools
from typing import Any, Callable, List, TypeVar

from chunkparse import parser
from chunkparse.parser import Parser
from chunkparse.stream import NIL, Stream, to_list

_A = TypeVar("_A")
_B = TypeVar("_B")


def _to_list_parser(
    f: Callable[..., Parser[Any, Any]]
) -> Callable[..., Parser[Any, List[Any]]]:
    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Parser[Any, List[Any]]:
        p = f(*args, **kwargs)
        return (p >> to_list).named(p.name)

    return wrapper


sequence = _to_list_parser(parser.sequence)
many = _to_list_parser(parser.many)
oneplus = _to_list_parser(parser.oneplus)
times = _to_list_parser(parser.times)
between_times = _to_list_parser(parser.between_times)
sep_by1 = _to_list_parser(parser.sep_by1)
sep_by = _to_list_parser(parser.sep_by)


@_to_list_parser
def optional(
    p: Parser[_A, Stream[_B]],
    default: Stream[_B] = NIL,
) -> Parser[_A, Stream[_B]]:
    """Return a parser that parses the stream-valued `p`, or returns `default` if `p`
    fails without consuming tokens.

    Type: `(Parser[A, Stream[B]], Stream[B]) -> Parser[A, List[B]]`

    Examples:

    ```pycon
    >>> from chunkparse.parser import a
    >>> optional(parser.sequence(a("x"), a("y"))).parse("xy")
    ['x', 'y']
    >>> optional(parser.sequence(a("x"), a("y"))).parse("z")
    []

    ```
    """
    return parser.optional(p, default)

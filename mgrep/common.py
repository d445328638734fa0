import string

from dataclasses import dataclass
from typing import Optional, Tuple, Union

########################################
# character sets

DIGIT = frozenset(string.digits)
ALPHANUMERIC = frozenset(string.ascii_letters + string.digits + '_')

########################################
# Tokens

r"""
A parsed pattern is a tuple of tokens. The tokens form a closed set of
variants, all of them frozen dataclasses, so a token tree is immutable, can be
hashed, and two parses of the same pattern string compare equal.

How regex parts map to tokens:
- 'c' (a non-special character) or r'\c' (an escape which is not one of the
  ones below) -> Literal('c')
- r'\d' -> Digit()
- r'\w' -> Alphanumeric()
- '.' -> Wildcard()
- '[abc]', '[^abc]' -> CharClass(frozenset('abc'), negated)
- '$' -> EndAnchor()
- '*', '+', '?', '{n}', '{n,}', '{n,m}' -> Quantifier(<previous token>, low, high)
- '(a|b|c)' -> Group((Alternation((Alternation(a, b),), c),), id)
- '(abc)' -> Group(abc, id)
- r'\<digit>' -> Backreference(int(<digit>))
"""

@dataclass(frozen=True)
class Literal:
    char: str

    def test(self, ch):
        return ch == self.char

    def __repr__(self):
        return f"Literal({self.char!r})"

@dataclass(frozen=True)
class Digit:
    def test(self, ch):
        return ch in DIGIT

    def __repr__(self):
        return r"\d"

@dataclass(frozen=True)
class Alphanumeric:
    def test(self, ch):
        return ch in ALPHANUMERIC

    def __repr__(self):
        return r"\w"

@dataclass(frozen=True)
class Wildcard:
    def test(self, ch):
        return True

    def __repr__(self):
        return "Wildcard"

@dataclass(frozen=True)
class CharClass:
    """Members are taken verbatim, there are no ranges."""
    members: frozenset
    negated: bool = False

    def test(self, ch):
        return (ch in self.members) != self.negated

    def __repr__(self):
        neg = "^" if self.negated else ""
        return f"CharClass({neg}{''.join(sorted(self.members))!r})"

@dataclass(frozen=True)
class EndAnchor:
    def __repr__(self):
        return "$"

@dataclass(frozen=True)
class Quantifier:
    """Greedy repetition of (inner). (high is None) means unbounded."""
    inner: 'Token'
    low: int
    high: Optional[int]

    def __repr__(self):
        if self.low == 0 and self.high == 1:
            q = "?"
        elif self.low == 0 and self.high is None:
            q = "*"
        elif self.low == 1 and self.high is None:
            q = "+"
        elif self.low == self.high:
            q = f"{{{self.low}}}"
        elif self.high is None:
            q = f"{{{self.low},}}"
        else:
            q = f"{{{self.low},{self.high}}}"
        return f"Quantifier({self.inner!r}, {q})"

@dataclass(frozen=True)
class Alternation:
    left: Tuple['Token', ...]
    right: Tuple['Token', ...]

    def __repr__(self):
        return f"Alt({list(self.left)}, {list(self.right)})"

@dataclass(frozen=True)
class Group:
    body: Tuple['Token', ...]
    id: int

    def __repr__(self):
        return f"Group({self.id}, {list(self.body)})"

@dataclass(frozen=True)
class Backreference:
    id: int

    def __repr__(self):
        return f"\\{self.id}"

Token = Union[
    Literal, Digit, Alphanumeric, Wildcard, CharClass, EndAnchor,
    Quantifier, Alternation, Group, Backreference
]

# Tokens which consume exactly one character when (test) accepts it.
PREDICATES = (Literal, Digit, Alphanumeric, Wildcard, CharClass)

########################################
# Groups

class Groups:
    """The captures of a single top-level match attempt. Maps a group id to
    the span (start, end) of the text the group last captured within
    (string). Spans rather than substrings are kept so that (Match.span) can
    report group boundaries; the captured substring is always
    (string[start:end]).

    Speculative branches of the matcher work on a (copy) and, if the branch
    fails, the state from before it is put back with (restore). This is what
    keeps a failed alternative from leaking its captures into a sibling
    attempt."""

    def __init__(self, string, spans=None):
        self.string = string
        self._spans = {} if spans is None else spans

    def __contains__(self, i):
        return i in self._spans

    def latest(self, i, hint='str'):
        """Returns the string (when (hint == 'str')) or the span (when (hint
        == 'span')) captured by group (i). If nothing was captured by (i),
        None is returned."""
        assert hint in ('str', 'span')
        span = self._spans.get(i)
        if span is None:
            return None
        if hint == 'span':
            return span
        start, end = span
        return self.string[start:end]

    def add(self, i, start, end):
        self._spans[i] = (start, end)

    def copy(self):
        return Groups(self.string, dict(self._spans))

    def restore(self, other):
        """Makes (self) hold exactly the captures of (other). Used both to
        commit a successful branch and to roll back a failed one."""
        self._spans = dict(other._spans)

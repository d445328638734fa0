import string

from pyllist import dllist

from .common import (
    Literal, Digit, Alphanumeric, Wildcard, CharClass, EndAnchor,
    Quantifier, Alternation, Group, Backreference
)

########################################
# Parsing

"""
Parsing is a single left-to-right pass over the pattern string. There are no
syntax errors: everything that is malformed degrades to some token tree.
- A backslash at the end of the pattern is dropped.
- An unterminated '[', '(' or '{' consumes the rest of the pattern.
- A quantifier with nothing before it is dropped.
- Integers inside '{}' which cannot be parsed default to 0 (lower bound) or to
  unbounded (upper bound).

A leading '^' is not the parser's business. Callers strip it with
(split_anchor) and remember that the pattern is anchored.
"""

SIMPLE_QUANTS = {'+': (1, None), '?': (0, 1), '*': (0, None)}

def parse(regstr):
    """Transforms (regstr) into a tuple of tokens."""
    return Parsing(regstr).run()

def split_anchor(regstr):
    """Returns (body, anchored) where (body) is (regstr) without a leading
    '^'."""
    if regstr.startswith('^'):
        return regstr[1:], True
    return regstr, False

class _Cursor:
    """A position within the string being parsed."""

    def __init__(self, regstr):
        self.regstr = regstr
        self.pos = 0

    def is_exhausted(self):
        return self.pos == len(self.regstr)

    def takech(self, inc=False):
        if self.is_exhausted():
            return None
        ch = self.regstr[self.pos]
        if inc:
            self.pos += 1
        return ch

    def take_until(self, closing):
        """Consumes characters up to and including the first (closing), and
        returns the consumed characters without it. If (closing) never shows
        up, the rest of the string is consumed and returned."""
        endi = self.regstr.find(closing, self.pos)
        if endi == -1:
            endi = len(self.regstr)
            result = self.regstr[self.pos:]
            self.pos = endi
        else:
            result = self.regstr[self.pos:endi]
            self.pos = endi + 1
        return result

class Parsing:
    """Holds the state shared by all of the recursive calls which parse a
    single pattern. At the moment this is only the group counter (numgrps):
    group ids are assigned in the order of the opening parenthesis across the
    whole pattern, so nested and sibling groups all draw from it."""

    def __init__(self, regstr):
        self.regstr = regstr
        self.numgrps = 0
        self.handlers = {
            '\\': self.escape,
            '$': self.end_anchor,
            '[': self.char_class,
            '(': self.group,
            '{': self.braces,
            '+': self.simple_quant,
            '?': self.simple_quant,
            '*': self.simple_quant,
            '.': self.wildcard,
        }

    def run(self):
        return self._parse(self.regstr)

    def _parse(self, regstr):
        # Quantifiers pop the previously emitted token, so the tokens are kept
        # in a linked list until the whole string is consumed.
        tokens = dllist()
        cursor = _Cursor(regstr)
        while not cursor.is_exhausted():
            ch = cursor.takech(inc=True)
            handler = self.handlers.get(ch)
            if handler is None:
                tokens.append(Literal(ch))
            else:
                handler(ch, cursor, tokens)
        return tuple(tokens)

    def escape(self, ch, cursor, tokens):
        nxt = cursor.takech(inc=True)
        if nxt is None:
            return
        if nxt == 'd':
            tokens.append(Digit())
        elif nxt == 'w':
            tokens.append(Alphanumeric())
        elif nxt in string.digits:
            tokens.append(Backreference(int(nxt)))
        else:
            tokens.append(Literal(nxt))

    def end_anchor(self, ch, cursor, tokens):
        tokens.append(EndAnchor())

    def wildcard(self, ch, cursor, tokens):
        tokens.append(Wildcard())

    def char_class(self, ch, cursor, tokens):
        negated = cursor.takech() == '^'
        if negated:
            cursor.pos += 1
        members = cursor.take_until(']')
        tokens.append(CharClass(frozenset(members), negated))

    def group(self, ch, cursor, tokens):
        self.numgrps += 1
        grpi = self.numgrps
        body = self._group_body(cursor)
        parts = _split_alternatives(body)
        if len(parts) > 1:
            alt = Alternation(self._parse(parts[0]), self._parse(parts[1]))
            for part in parts[2:]:
                alt = Alternation((alt,), self._parse(part))
            tokens.append(Group((alt,), grpi))
        else:
            tokens.append(Group(self._parse(body), grpi))

    def _group_body(self, cursor):
        """An opening parenthesis was just consumed. Consumes up to and
        including the matching closing parenthesis and returns what is in
        between. Parenthesis are simply counted; escapes and classes are not
        taken into account."""
        start = cursor.pos
        depth = 1
        while not cursor.is_exhausted():
            ch = cursor.takech(inc=True)
            if ch == '(':
                depth += 1
            elif ch == ')':
                depth -= 1
                if depth == 0:
                    return cursor.regstr[start:cursor.pos-1]
        return cursor.regstr[start:]

    def braces(self, ch, cursor, tokens):
        spec = cursor.take_until('}')
        bounds = spec.split(',')
        low = _to_int(bounds[0], 0)
        if len(bounds) == 1:
            high = low
        else:
            high = _to_int(bounds[1], None)
        self._quantify(tokens, low, high)

    def simple_quant(self, ch, cursor, tokens):
        self._quantify(tokens, *SIMPLE_QUANTS[ch])

    def _quantify(self, tokens, low, high):
        if not len(tokens):
            return
        tokens.append(Quantifier(tokens.pop(), low, high))

def _split_alternatives(body):
    """Splits (body) on the '|' characters which are not nested within
    parenthesis."""
    parts = []
    current = []
    depth = 0
    for ch in body:
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth -= 1
        if ch == '|' and depth == 0:
            parts.append(''.join(current))
            current = []
        else:
            current.append(ch)
    parts.append(''.join(current))
    return parts

def _to_int(text, default):
    """Parses a non-negative decimal integer, allowing surrounding whitespace
    and a leading '+'. Returns (default) for anything else."""
    text = text.strip()
    if text.startswith('+'):
        text = text[1:]
    if text.isascii() and text.isdigit():
        return int(text)
    return default

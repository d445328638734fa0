from .common import (
    PREDICATES, EndAnchor, Quantifier, Alternation, Group, Backreference,
    Groups
)

########################################
# Matching

def match_at(tokens, text, pos=0):
    """If (tokens) match a substring of (text) starting exactly at (pos), the
    length of that substring is returned. Otherwise, None."""
    result = _attempt(tokens, text, pos)
    if result is None:
        return None
    end, _ = result
    return end - pos

def match_anywhere(tokens, text, anchored=False, pos=0):
    """Returns the span (start, end) of the leftmost match of (tokens) in
    (text) starting at (pos) or later, or None. When (anchored), only (pos)
    itself is tried. The position right after the last character is tried
    too, so patterns which match the empty string always find a match."""
    last = pos if anchored else len(text)
    for i in range(pos, last + 1):
        result = _attempt(tokens, text, i)
        if result is not None:
            return i, result[0]
    return None

def _attempt(tokens, text, pos):
    """A single top-level attempt at (pos), with fresh captures. Returns the
    pair (end, groups) or None."""
    assert 0 <= pos <= len(text)
    groups = Groups(text)
    end = Matching(text).here(tuple(tokens), pos, len(text), groups)
    if end is None:
        return None
    return end, groups

class Matching:
    """Backtracking matcher for a token tree against (string).

    The matching logic lives in (here). It walks the token sequence left to
    right, and every token which can match in more than one way (alternations,
    groups and quantifiers) tries its possibilities in priority order, each
    followed by the rest of the sequence. The first possibility for which the
    rest of the sequence also matches wins, there is no search for a best
    match.

    Captures are a (Groups) instance passed down the recursion. A speculative
    branch works on a copy, which is written back only when the whole
    continuation succeeded. Quantifiers snapshot the captures before their
    greedy attempt and restore the snapshot before falling back.

    Positions are indexes into (string). Each call also receives (end): the
    text visible to the tokens is (string[:end]). It is less than
    len(string) only within the body of a group, whose possible lengths are
    tried one at a time."""

    def __init__(self, string):
        self.string = string

    def here(self, tokens, i, end, groups):
        """If (tokens) match a substring of (string[:end]) starting at (i),
        returns the position where the match ends and leaves the captures of
        the match in (groups). Otherwise returns None."""
        if not tokens:
            return i
        token, rest = tokens[0], tokens[1:]
        if isinstance(token, EndAnchor):
            return i if i == end else None
        elif isinstance(token, PREDICATES):
            if i < end and token.test(self.string[i]):
                return self.here(rest, i + 1, end, groups)
            return None
        elif isinstance(token, Alternation):
            return self._alternation(token, rest, i, end, groups)
        elif isinstance(token, Group):
            return self._group(token, rest, i, end, groups)
        elif isinstance(token, Backreference):
            if token.id not in groups:
                return None
            captured = groups.latest(token.id)
            if not self.string.startswith(captured, i, end):
                return None
            return self.here(rest, i + len(captured), end, groups)
        elif isinstance(token, Quantifier):
            return self._quantifier(token, rest, i, end, groups)
        else:
            raise AssertionError(f'Unknown token: {token!r}')

    def _alternation(self, token, rest, i, end, groups):
        for branch in (token.left, token.right):
            branch_groups = groups.copy()
            j = self.here(branch, i, end, branch_groups)
            if j is None:
                continue
            k = self.here(rest, j, end, branch_groups)
            if k is not None:
                groups.restore(branch_groups)
                return k
        return None

    def _group(self, token, rest, i, end, groups):
        # Longest first: the body has to match exactly (try_end - i)
        # characters, and the rest has to match after that.
        for try_end in range(end, i - 1, -1):
            inner_groups = groups.copy()
            j = self.here(token.body, i, try_end, inner_groups)
            if j != try_end:
                continue
            inner_groups.add(token.id, i, j)
            k = self.here(rest, j, end, inner_groups)
            if k is not None:
                groups.restore(inner_groups)
                return k
        return None

    def _quantifier(self, token, rest, i, end, groups):
        low, high = token.low, token.high
        if high == 0:
            return self.here(rest, i, end, groups)
        saved = groups.copy()
        j = self.here((token.inner,), i, end, groups)
        # An empty occurrence only counts when it is needed for (low);
        # otherwise an inner pattern like r'a*' would repeat forever.
        if j is not None and (j > i or low > 0):
            again = Quantifier(token.inner,
                               max(low - 1, 0),
                               None if high is None else high - 1)
            k = self.here((again,) + rest, j, end, groups)
            if k is not None:
                return k
        groups.restore(saved)
        if low == 0:
            return self.here(rest, i, end, groups)
        return None

########################################
# Patterns & Matches

class Match:
    """The result of a successful match.
    Attributes:
    - string: the string on which the match was made.
    - pattern: the Pattern which produced the match.
    - _start, _end: the span of the matched substring within (string).
    - _groups: the Groups instance holding the captures of the match.
    """

    def __init__(self, pattern, string, start, end, groups):
        self.pattern = pattern
        self.string = string
        self._start = start
        self._end = end
        self._groups = groups

    def __bool__(self):
        return True

    def __getitem__(self, i):
        return self.group(i)

    def __repr__(self):
        return (f"<{self.__class__.__name__} span={self.span()!r} "
                f"match={self.group()!r}>")

    def _check_index(self, i):
        """A helper for the functions which make use of groups."""
        if type(i) is not int:
            raise TypeError(f'Index must be an int, not {type(i)}: {i}')
        if not 0 <= i <= self.pattern.groups:
            raise IndexError(f'No such group: {i}')

    def group(self, *indices):
        """If (not indices), equivalent to group(0). If (len(indices) == 1), let
        (i = indices[0]). If (i > N or i < 0), where (N) is the number of
        groups, an IndexError is raised. Otherwise, the matched string of the
        ith group is returned, or None if the group did not capture anything.
        If (len(indices) > 1), a tuple T is returned, where (T[k] ==
        group(indices[k]))."""
        def extract(i):
            self._check_index(i)
            if i == 0:
                return self.string[self._start:self._end]
            return self._groups.latest(i)
        if len(indices) == 0:
            return extract(0)
        elif len(indices) == 1:
            return extract(indices[0])
        else:
            return tuple(extract(i) for i in indices)

    def groups(self, default=None):
        """Mostly equivalent to (self.group(1, 2, ..., N)) where (N) is the
        number of groups. The difference is that if (group(k) is None), then
        (result[k] is default)."""
        mstrs = (self.group(i) for i in range(1, self.pattern.groups + 1))
        return tuple(default if mstr is None else mstr for mstr in mstrs)

    def span(self, i=0):
        """Returns (start, end) of group (i), or (-1, -1) if the group did not
        capture anything."""
        self._check_index(i)
        if i == 0:
            return self._start, self._end
        span = self._groups.latest(i, hint='span')
        return (-1, -1) if span is None else span

    def start(self, i=0):
        return self.span(i)[0]

    def end(self, i=0):
        return self.span(i)[1]


class Pattern:
    """A compiled pattern.
    Attributes:
    - pattern: the pattern string, including a leading '^' if there is one.
    - tokens: the parsed pattern, without the leading '^'.
    - anchored: whether the pattern started with '^'. An anchored pattern is
      only ever tried at the position where a search starts.
    - groups: the number of capturing groups.
    """

    def __init__(self, pattern, tokens, anchored, groups):
        self.pattern = pattern
        self.tokens = tokens
        self.anchored = anchored
        self.groups = groups

    def __repr__(self):
        return f"{self.__class__.__name__}({self.pattern!r})"

    def _match(self, astr, i):
        result = _attempt(self.tokens, astr, i)
        if result is None:
            return None
        end, groups = result
        return Match(self, astr, i, end, groups)

    def match(self, astr, start=0):
        """If (self) matches a substring of (astr) beginning at (start), the
        corresponding match object is returned. Otherwise, None. A (start)
        outside of [0, len(astr)] never matches."""
        if not 0 <= start <= len(astr):
            return None
        return self._match(astr, start)

    def search(self, astr, start=0, end=None):
        """Tries to match (self) at indexes [start, ..., end], leftmost
        first. If unsuccessful, None is returned."""
        if end is None:
            end = len(astr)
        if start > end:
            raise ValueError(f'(start <= end) must hold. Given {start},{end}')
        if self.anchored:
            end = start
        for i in range(start, min(end, len(astr)) + 1):
            m = self._match(astr, i)
            if m:
                return m
        return None

    def findall(self, astr):
        """Returns a list of all non-overlapping substrings of (astr) which
        match (self), from left to right."""
        return [m.group(0) for m in self.finditer(astr)]

    def finditer(self, astr):
        """Returns an iterator of all non-overlapping matches of (self) in
        (astr), from left to right. After an empty match the search goes on
        one character further. An anchored pattern is only tried at 0."""
        i, len_astr = 0, len(astr) # current position within (astr)
        while i <= len_astr:
            m = self._match(astr, i)
            if m:
                yield m
                if self.anchored:
                    return
                start, end = m.span()
                if start == end:
                    # empty match
                    i += 1
                else:
                    i = end
            elif self.anchored:
                return
            else:
                i += 1

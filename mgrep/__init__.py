"""
    mgrep
    ~~~~~

    A small grep built on its own backtracking regular expression engine.

    The dialect: literals, '.', r'\\d', r'\\w', '[abc]', '[^abc]', '$', a
    leading '^', greedy '*', '+', '?', '{n}', '{n,}', '{n,m}', capturing groups
    with '|' inside them, and backreferences r'\\1' to r'\\9'.

    The engine is two stages. (parse) turns a pattern string into a tuple of
    tokens, and (match_at) / (match_anywhere) run those tokens against text.
    (compile) wraps both in a Pattern object.
"""
from collections import OrderedDict

from .parser import Parsing, parse, split_anchor
from .patterns import Pattern, Match, match_at, match_anywhere

########################################
# public API

_cache = OrderedDict()
_CACHE_MAXSIZE = 100

def compile(regstr):
    pattern = _cache.get(regstr)
    if pattern is not None:
        _cache.move_to_end(regstr)
        return pattern
    body, anchored = split_anchor(regstr)
    parsing = Parsing(body)
    tokens = parsing.run()
    pattern = Pattern(regstr, tokens, anchored, parsing.numgrps)
    if len(_cache) == _CACHE_MAXSIZE:
        _cache.popitem(last=False)
    _cache[regstr] = pattern
    return pattern

def purge():
    _cache.clear()

def match(regstr, string):
    p = compile(regstr)
    return p.match(string)

def search(regstr, string):
    p = compile(regstr)
    return p.search(string)

def findall(regstr, string):
    p = compile(regstr)
    return p.findall(string)

def finditer(regstr, string):
    p = compile(regstr)
    return p.finditer(string)

"""
    mgrep.scan
    ~~~~~~~~~~

    Feeds input to a compiled pattern line by line and writes out what
    matched, the way grep does.
"""
import logging

logger = logging.getLogger(__name__)

COLOR_START = '\x1b[01;31m'
COLOR_RESET = '\x1b[m'

def colorize(text, use_color):
    if use_color:
        return f'{COLOR_START}{text}{COLOR_RESET}'
    return text

def iter_lines(content):
    """Yields the lines of (content) without their line terminators. Lines are
    terminated by '\\n' or '\\r\\n'; a final line terminator does not start a
    new, empty line."""
    lines = content.split('\n')
    last = lines.pop() # unterminated, or '' after a final terminator
    for line in lines:
        yield line[:-1] if line.endswith('\r') else line
    if last:
        yield last

def scan_line(pattern, line):
    """Yields the spans (start, end) of the successive matches of (pattern)
    within (line). After each match the search continues where the match
    ended, or one character further if the match was empty. An anchored
    pattern is only tried at the start of the line."""
    for m in pattern.finditer(line):
        yield m.span()

def process_input(content, pattern, out, filename=None, only_matching=False,
                  use_color=False, show_filename=False):
    """Writes the matching lines of (content) to (out). With (only_matching),
    each match is written on its own line instead of the whole line. A line
    which is too long for the matcher's recursion is skipped with a warning.
    Returns True if at least one line matched."""
    prefix = f'{filename}:' if show_filename and filename is not None else ''
    matched = False
    for lineno, line in enumerate(iter_lines(content), 1):
        try:
            spans = list(scan_line(pattern, line))
        except RecursionError:
            logger.warning('Skipping line %d of %s: too deep to match',
                           lineno, filename or '(standard input)')
            continue
        if not spans:
            continue
        matched = True
        if only_matching:
            for start, end in spans:
                print(prefix + colorize(line[start:end], use_color), file=out)
        else:
            print(prefix + highlight(line, spans, use_color), file=out)
    return matched

def highlight(line, spans, use_color):
    """Returns (line) with the text at each of (spans) colorized."""
    parts = []
    last_end = 0
    for start, end in spans:
        parts.append(line[last_end:start])
        parts.append(colorize(line[start:end], use_color))
        last_end = end
    parts.append(line[last_end:])
    return ''.join(parts)

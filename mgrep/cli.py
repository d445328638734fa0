import enum
import logging
import sys

from docopt import docopt

import mgrep
from mgrep.files import collect_files
from mgrep.scan import process_input

logger = logging.getLogger(__name__)

# The matcher recurses once or twice per consumed character.
RECURSION_LIMIT = 20000

USAGE = """
Usage:
  mgrep [-o] [-r] [--color=<when>] [--debug] -E <pattern> [<path>...]
  mgrep -h | --help

Search for lines matching <pattern> in each <path>, or in the standard input
if no path is given. A pattern starting with '^' only matches at the start of
a line.

Options:
  -h --help         Show this.
  -E <pattern>      The pattern to search for.
  -o                Print only the matched parts, each on its own line.
  -r                Search directories recursively.
  --color=<when>    Highlight matches: always, never or auto [default: never].
  --debug           Log what is going on to the standard error.
"""

class ColorWhen(enum.Enum):
    ALWAYS = 'always'
    NEVER = 'never'
    AUTO = 'auto'

class Config:
    """What a single run of mgrep should do.
    Attributes:
    - pattern: the pattern string, as given.
    - anchored: whether (pattern) starts with '^'.
    - only_matching: print the matches rather than the matching lines.
    - recursive: walk directories.
    - color: a ColorWhen.
    - paths: the files and directories to search. Empty means the standard
      input.
    - debug: log at the DEBUG level.
    """

    def __init__(self, pattern, only_matching=False, recursive=False,
                 color=ColorWhen.NEVER, paths=(), debug=False):
        self.pattern = pattern
        self.anchored = pattern.startswith('^')
        self.only_matching = only_matching
        self.recursive = recursive
        self.color = color
        self.paths = list(paths)
        self.debug = debug

    def __repr__(self):
        return (f"{self.__class__.__name__}({self.pattern!r}, "
                f"only_matching={self.only_matching!r}, "
                f"recursive={self.recursive!r}, color={self.color!r}, "
                f"paths={self.paths!r}, debug={self.debug!r})")

def parse_args(argv):
    """(argv) are the arguments without the program name. Raises DocoptExit
    on a usage error."""
    return config_from_arguments(docopt(USAGE, argv, help=True))

def config_from_arguments(arguments):
    """Builds a Config out of the dictionary returned by docopt."""
    return Config(
        arguments['-E'],
        only_matching=arguments['-o'],
        recursive=arguments['-r'],
        color=_color_when(arguments['--color']),
        paths=arguments['<path>'],
        debug=arguments['--debug'],
    )

def _color_when(value):
    try:
        return ColorWhen(value)
    except ValueError:
        logger.warning('Unknown --color value %r, using "never"', value)
        return ColorWhen.NEVER

def resolve_use_color(color, stream):
    if color is ColorWhen.ALWAYS:
        return True
    elif color is ColorWhen.NEVER:
        return False
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())

def run(config, stdin=None, stdout=None):
    """Runs the search described by (config). Returns the exit status: 0 if
    anything matched, 1 otherwise."""
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    use_color = resolve_use_color(config.color, stdout)
    pattern = mgrep.compile(config.pattern)
    logger.debug('Compiled %r to %r (anchored: %s)',
                 config.pattern, pattern.tokens, pattern.anchored)

    if not config.paths:
        matched = process_input(stdin.read(), pattern, stdout,
                                only_matching=config.only_matching,
                                use_color=use_color)
        return 0 if matched else 1

    files = []
    for path in config.paths:
        files.extend(collect_files(path, config.recursive))
    show_filename = config.recursive or len(files) > 1

    matched = False
    for path in files:
        try:
            with open(path, encoding='utf-8', newline='') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug('Skipping %s: %s', path, e)
            continue
        if process_input(content, pattern, stdout, filename=path,
                         only_matching=config.only_matching,
                         use_color=use_color, show_filename=show_filename):
            matched = True
    return 0 if matched else 1

def main(argv=sys.argv):
    arguments = docopt(USAGE, argv[1:], help=True)
    logging.basicConfig(
        level=logging.DEBUG if arguments['--debug'] else logging.WARNING,
        format='%(name)s: %(levelname)s: %(message)s',
    )
    config = config_from_arguments(arguments)
    if sys.getrecursionlimit() < RECURSION_LIMIT:
        sys.setrecursionlimit(RECURSION_LIMIT)
    sys.exit(run(config))

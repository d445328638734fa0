import logging
import os

from pathlib import Path

logger = logging.getLogger(__name__)

def collect_files(path, recursive=False):
    """Expands (path) into a list of file paths. A file is returned as is. A
    directory is walked depth first when (recursive), with the entries of each
    directory in name order, and ignored otherwise. Anything else, like a
    missing path, results in an empty list.

    The returned paths are strings which start with (path) exactly as given,
    so walking '.' yields './sub/b.txt' rather than 'sub/b.txt'."""
    path = os.fspath(path)
    if recursive and Path(path).is_dir():
        out = []
        _collect_recursive(path, out)
        return out
    elif Path(path).is_file():
        return [path]
    logger.debug('Skipping %s: not a file', path)
    return []

def _collect_recursive(directory, out):
    try:
        names = sorted(entry.name for entry in Path(directory).iterdir())
    except OSError as e:
        logger.debug('Cannot list %s: %s', directory, e)
        return
    for name in names:
        entry = os.path.join(directory, name)
        if Path(entry).is_dir():
            _collect_recursive(entry, out)
        elif Path(entry).is_file():
            out.append(entry)

# jobs/paths.py
import os
from typing import Optional

DEFAULT_FILE_NAME = 'GoogleMapsList'

# Union of what Windows and POSIX refuse in a file name
INVALID_FILE_NAME_CHARS = frozenset('<>:"/\\|?*\0')


def sanitize_file_name(name: str) -> str:
    if not name or not name.strip():
        return DEFAULT_FILE_NAME

    sanitized = ''.join(
        '_' if ch in INVALID_FILE_NAME_CHARS or not ch.isprintable() else ch
        for ch in name
    ).strip('_ ')
    return sanitized or DEFAULT_FILE_NAME


def resolve_output_path(
    requested: Optional[str],
    list_name: str,
    suffix: str = '.kml',
    directory: Optional[str] = None,
) -> str:
    """
    Absolute path for an export file. Without an explicit path the
    sanitized list name is used, inside `directory` when given.
    """
    if requested and requested.strip():
        return os.path.abspath(requested)

    file_name = sanitize_file_name(list_name)
    if not file_name.lower().endswith(suffix.lower()):
        file_name += suffix

    return os.path.abspath(os.path.join(directory or os.getcwd(), file_name))


def sibling_path(path: str, suffix: str) -> str:
    """Same location and stem as `path` with a different extension."""
    return os.path.splitext(path)[0] + suffix

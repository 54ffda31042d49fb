# scraper/payload.py
from typing import Optional

import structlog
from bs4 import BeautifulSoup

from ..errors import PayloadExtractionFailed, ScriptNotFound
from ..settings import INIT_STATE_ASSIGNMENT, INIT_STATE_MARKER

log = structlog.get_logger()


def find_initialization_script(html: str) -> str:
    """
    Return the text of the first <script> that mentions
    window.APP_INITIALIZATION_STATE.
    """
    soup = BeautifulSoup(html, 'html.parser')

    for script in soup.find_all('script'):
        text = script.string or ''
        if not text.strip():
            continue
        if INIT_STATE_MARKER in text:
            log.debug('payload.script_found', chars=len(text))
            return text

    raise ScriptNotFound()


def extract_balanced(
    text: str,
    marker: str,
    open_char: str = '[',
    close_char: str = ']',
) -> Optional[str]:
    """
    Slice the bracketed expression that follows `marker` in `text`.

    The surrounding text is not JSON, so this only scans characters:
    brackets inside double-quoted strings are ignored and a backslash
    inside a string escapes the next character. Returns None when the
    marker or the opening bracket is missing, or when the text ends
    before the brackets balance.
    """
    marker_index = text.find(marker)
    if marker_index < 0:
        return None

    start = text.find(open_char, marker_index + len(marker))
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]

        if in_string:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return text[start:index + 1]

    return None


def extract_payload(script_text: str) -> str:
    """The JSON array assigned to window.APP_INITIALIZATION_STATE."""
    if INIT_STATE_ASSIGNMENT not in script_text:
        raise PayloadExtractionFailed(
            f'The script does not contain {INIT_STATE_ASSIGNMENT!r}.'
        )

    payload = extract_balanced(script_text, INIT_STATE_ASSIGNMENT)
    if payload is None:
        raise PayloadExtractionFailed(
            'No complete bracketed array follows the assignment.'
        )

    log.debug('payload.extracted', chars=len(payload))
    return payload

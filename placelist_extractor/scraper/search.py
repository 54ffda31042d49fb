# scraper/search.py
"""
Locate the place-list array inside the initialization payload.

Nothing in the payload is named. The one reliable anchor, taken from
captured pages, is that the list array holds a sub-array at offset 2
whose own offset-2 element is the list's share URL. Treat a change to
those offsets as a new payload version, not a bug.
"""
from typing import Iterator, Optional

import structlog

from ..errors import PayloadParseFailed, StructureTooDeep
from ..settings import MAX_TREE_DEPTH, SHARE_URL_PREFIX
from .payload import extract_balanced
from .tree import (
    JArray,
    JBool,
    JNull,
    JNumber,
    JObject,
    JString,
    Node,
    children,
    parse_tree,
)

log = structlog.get_logger()

SIGNATURE_OFFSET = 2
SIGNATURE_URL_OFFSET = 2

# Older captures carry the list as a JSON-encoded string
EMBEDDED_PAYLOAD_MARKER = '[[["'


def matches_signature(node: JArray, marker: str = SHARE_URL_PREFIX) -> bool:
    if len(node.items) <= SIGNATURE_OFFSET:
        return False
    candidate = node.items[SIGNATURE_OFFSET]
    if not isinstance(candidate, JArray) or len(candidate.items) <= SIGNATURE_URL_OFFSET:
        return False
    url = candidate.items[SIGNATURE_URL_OFFSET]
    return isinstance(url, JString) and marker in url.value


def _search(node: Node, marker: str, max_depth: int, depth: int) -> Optional[JArray]:
    if depth > max_depth:
        raise StructureTooDeep(max_depth)

    if isinstance(node, JArray):
        if matches_signature(node, marker):
            return node
        for item in node.items:
            found = _search(item, marker, max_depth, depth + 1)
            if found is not None:
                return found
        return None

    if isinstance(node, JObject):
        for value in node.members.values():
            found = _search(value, marker, max_depth, depth + 1)
            if found is not None:
                return found
        return None

    if isinstance(node, (JString, JNumber, JBool, JNull)):
        return None

    raise TypeError(f'Not a tree node: {type(node).__name__}')


def _strings(node: Node, max_depth: int, depth: int = 0) -> Iterator[str]:
    if depth > max_depth:
        raise StructureTooDeep(max_depth)

    if isinstance(node, JString):
        yield node.value
        return
    for child in children(node):
        yield from _strings(child, max_depth, depth + 1)


def _search_embedded(root: Node, marker: str, max_depth: int) -> Optional[JArray]:
    for text in _strings(root, max_depth):
        if marker not in text:
            continue

        start = text.find(EMBEDDED_PAYLOAD_MARKER)
        if start < 0:
            continue

        # The slice has to begin at the marker's own first bracket
        embedded = extract_balanced(text[start:], '')
        if embedded is None:
            continue

        try:
            subtree = parse_tree(embedded, max_depth)
        except PayloadParseFailed as e:
            log.debug('search.embedded_unparseable', error=str(e)[:80])
            continue

        found = _search(subtree, marker, max_depth, 0)
        if found is not None:
            log.debug('search.embedded_match', chars=len(embedded))
            return found

    return None


def find_signature_match(
    root: Node,
    marker: str = SHARE_URL_PREFIX,
    max_depth: int = MAX_TREE_DEPTH,
) -> Optional[JArray]:
    """
    Depth-first, left-to-right search for the first array whose offset-2
    sub-array holds a string containing `marker` at offset 2.

    The signature is checked on an array before its children. When the
    tree has no such array, strings that embed a JSON-encoded payload
    are decoded and searched the same way. Returns None on no match.
    """
    found = _search(root, marker, max_depth, 0)
    if found is not None:
        return found
    return _search_embedded(root, marker, max_depth)

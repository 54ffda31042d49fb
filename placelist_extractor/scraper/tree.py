# scraper/tree.py
"""
Immutable value model for the parsed-but-unschematized payload.

The initialization payload has no field names, so nothing about it is
typed until the decoder reads it. Every node is one of JArray, JObject,
JString, JNumber, JBool or JNull; traversal sites dispatch on exactly
these six and nothing else.
"""
import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Tuple, Union

from ..errors import PayloadParseFailed, StructureTooDeep
from ..settings import MAX_TREE_DEPTH


@dataclass(frozen=True)
class JArray:
    items: Tuple['Node', ...]

    def __len__(self):
        return len(self.items)


@dataclass(frozen=True)
class JObject:
    members: Mapping[str, 'Node']


@dataclass(frozen=True)
class JString:
    value: str


@dataclass(frozen=True)
class JNumber:
    value: float


@dataclass(frozen=True)
class JBool:
    value: bool


@dataclass(frozen=True)
class JNull:
    pass


NULL = JNull()

Node = Union[JArray, JObject, JString, JNumber, JBool, JNull]


def from_python(value: Any, max_depth: int = MAX_TREE_DEPTH, _depth: int = 0) -> Node:
    """Convert the output of json.loads into tree nodes."""
    if _depth > max_depth:
        raise StructureTooDeep(max_depth)

    if value is None:
        return NULL
    # bool first: it is an int subclass
    if isinstance(value, bool):
        return JBool(value)
    if isinstance(value, (int, float)):
        try:
            return JNumber(float(value))
        except OverflowError as e:
            raise PayloadParseFailed('number out of range') from e
    if isinstance(value, str):
        return JString(value)
    if isinstance(value, list):
        return JArray(tuple(
            from_python(item, max_depth, _depth + 1) for item in value
        ))
    if isinstance(value, dict):
        return JObject(MappingProxyType({
            key: from_python(item, max_depth, _depth + 1)
            for key, item in value.items()
        }))
    raise TypeError(f'Unsupported JSON value: {type(value).__name__}')


def _reject_constant(name: str):
    raise ValueError(f'{name} is not valid JSON')


def parse_tree(text: str, max_depth: int = MAX_TREE_DEPTH) -> Node:
    # integer literals too large for a float read as inf
    try:
        data = json.loads(text, parse_int=float, parse_constant=_reject_constant)
    except ValueError as e:
        raise PayloadParseFailed(str(e)) from e
    except RecursionError as e:
        raise StructureTooDeep(max_depth) from e
    return from_python(data, max_depth)


def children(node: Node) -> Tuple[Node, ...]:
    """Direct children: array elements, or object values in enumeration order."""
    if isinstance(node, JArray):
        return node.items
    if isinstance(node, JObject):
        return tuple(node.members.values())
    if isinstance(node, (JString, JNumber, JBool, JNull)):
        return ()
    raise TypeError(f'Not a tree node: {type(node).__name__}')

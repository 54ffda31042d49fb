"""Tests for the signature-matching tree search."""

import json

import pytest

from placelist_extractor.errors import StructureTooDeep
from placelist_extractor.scraper.search import find_signature_match, matches_signature
from placelist_extractor.scraper.tree import JArray, from_python

from payloads import SHARE_URL, list_array


def decoy(inner):
    # Has a sub-array at offset 2, but no share URL in it
    return [0, 'x', [0, 0, 'https://www.google.com/maps/place/other'], inner]


def test_matches_signature():
    assert matches_signature(from_python(list_array()))

def test_signature_needs_url_at_offset_two():
    assert not matches_signature(from_python([0, 0, [SHARE_URL, 0, 0]]))
    assert not matches_signature(from_python([0, 0, [0, 0]]))
    assert not matches_signature(from_python([0, 0, [0, 0, 42]]))
    assert not matches_signature(from_python([0, [0, 0, SHARE_URL]]))

def test_signature_accepts_url_with_suffix():
    assert matches_signature(from_python([0, 0, [0, 0, SHARE_URL + '?g_ep=xyz']]))

def test_finds_depth_five_under_decoys():
    target = list_array(name='Deep')
    tree = from_python(decoy(decoy(decoy(decoy(target)))))
    found = find_signature_match(tree)
    assert found is not None
    assert found == from_python(target)

def test_returns_reference_into_tree():
    tree = from_python([[list_array()]])
    assert find_signature_match(tree) is tree.items[0].items[0]

def test_not_found():
    assert find_signature_match(from_python(decoy(decoy([1, 2, 3])))) is None

def test_first_match_wins_depth_first():
    first = list_array(name='First')
    second = list_array(name='Second')
    tree = from_python([[0, [first]], second])
    assert find_signature_match(tree).items[4].value == 'First'

def test_outer_array_checked_before_children():
    outer = list_array(name='Outer', places=[list_array(name='Inner')])
    assert find_signature_match(from_python(outer)).items[4].value == 'Outer'

def test_searches_object_values():
    tree = from_python({'a': [1], 'b': {'c': list_array(name='Obj')}})
    assert find_signature_match(tree).items[4].value == 'Obj'

def test_scalar_root():
    assert find_signature_match(from_python('just a string')) is None

def test_depth_limit():
    node = list_array()
    for _ in range(10):
        node = [node]
    with pytest.raises(StructureTooDeep):
        find_signature_match(from_python(node), max_depth=5)
    assert isinstance(find_signature_match(from_python(node), max_depth=50), JArray)

def test_finds_list_embedded_in_string():
    array = list_array(name='Embedded')
    array[0] = 'list-id'
    embedded = json.dumps([[array]])
    assert embedded.startswith('[[["')
    tree = from_python([0, [None, 'prefix ' + SHARE_URL + ' ' + embedded + '"']])
    found = find_signature_match(tree)
    assert found is not None
    assert found.items[4].value == 'Embedded'

def test_direct_match_preferred_over_embedded():
    embedded = json.dumps([[list_array(name='Embedded')]])
    tree = from_python([SHARE_URL + embedded, list_array(name='Direct')])
    assert find_signature_match(tree).items[4].value == 'Direct'

def test_unparseable_embedded_string_is_skipped():
    tree = from_python([SHARE_URL + '[[["broken",]]]'])
    assert find_signature_match(tree) is None

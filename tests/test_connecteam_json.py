"""Tests for absent-safe JSON navigation."""

import subprocess
import sys
from pathlib import Path

import pytest

from connecteam_errors import SchemaError
from connecteam_json import (ABSENT, as_int, as_list, decode_json, get_path, is_number,
                             is_present_text, string_or_empty, text_of)

DOCUMENT = {
    'data': {
        'items': [{'name': 'first'}, {'name': None}],
        'count': 2,
        'label': 'text',
    }
}


def test_get_path_walks_keys_and_indices():
    assert get_path(DOCUMENT, 'data', 'items', 0, 'name') == 'first'
    assert get_path(DOCUMENT, 'data', 'count') == 2
    assert get_path(DOCUMENT) is DOCUMENT


def test_get_path_keeps_json_null_distinct_from_absent():
    assert get_path(DOCUMENT, 'data', 'items', 1, 'name') is None
    assert get_path(DOCUMENT, 'data', 'items', 1, 'other') is ABSENT


@pytest.mark.parametrize('path', [
    ('missing',),
    ('data', 'missing', 'deeper'),
    ('data', 'items', 5),
    ('data', 'items', -1),
    ('data', 'items', 'name'),
    ('data', 0),
    ('data', 'count', 'x'),
    ('data', 'label', 0),
    ('data', 'items', 1, 'name', 'x'),
    ('data', 'items', True),
])
def test_get_path_returns_absent_instead_of_raising(path):
    assert get_path(DOCUMENT, *path) is ABSENT


def test_get_path_from_absent_or_scalar():
    assert get_path(ABSENT, 'a') is ABSENT
    assert get_path(None, 'a') is ABSENT
    assert get_path(3, 0) is ABSENT


def test_absent_is_falsy_singleton():
    assert not ABSENT
    assert repr(ABSENT) == 'ABSENT'
    assert type(ABSENT)() is ABSENT


def test_as_list():
    assert as_list([1, 2]) == [1, 2]
    assert as_list(ABSENT) == []
    assert as_list(None) == []
    assert as_list({'a': 1}) == []
    assert as_list('abc') == []


def test_text_of_tri_state():
    assert text_of('Lunch') == 'Lunch'
    assert text_of(None) == 'null'
    assert text_of('null') == 'null'
    assert text_of(ABSENT) == ''
    assert text_of('') == ''
    assert text_of(12) == '12'
    assert text_of(True) == 'true'


def test_is_present_text():
    assert is_present_text('Lunch')
    assert not is_present_text('')
    assert not is_present_text('null')
    assert is_present_text('Null')


def test_string_or_empty():
    assert string_or_empty('Store') == 'Store'
    assert string_or_empty(None) == ''
    assert string_or_empty(ABSENT) == ''
    assert string_or_empty(7) == '7'


def test_as_int():
    assert as_int(42) == 42
    assert as_int(42.0) == 42
    assert isinstance(as_int(42.0), int)
    assert as_int(42.5) is ABSENT
    assert as_int(True) is ABSENT
    assert as_int('42') is ABSENT
    assert as_int(ABSENT) is ABSENT


def test_is_number():
    assert is_number(1)
    assert is_number(1.5)
    assert not is_number(False)
    assert not is_number('1')
    assert not is_number(None)


def test_decode_json():
    assert decode_json('{"a": [1, null]}') == {'a': [1, None]}
    for text in ('', 'not json', '{"a": ', None):
        with pytest.raises(SchemaError):
            decode_json(text)


def test_parser_does_not_pull_in_http():
    project_root = Path(__file__).parent.parent
    result = subprocess.run(
        [sys.executable, '-c',
         'import sys, timesheet; print("connecteam" in sys.modules, "requests" in sys.modules)'],
        cwd=project_root, capture_output=True, text=True, check=True)
    assert result.stdout.split() == ['False', 'False']

"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path
from unittest import mock

import pytest

# Add the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from session_info import SessionInfo  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / 'fixtures'


class FakeHTTP:
    """Stands in for `requests.Session`, replaying canned responses in order."""

    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def request(self, method, uri, **kwargs):
        self.calls.append((method, uri, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_response(text='', status_code=200, reason='OK'):
    return mock.Mock(ok=status_code < 400, status_code=status_code, reason=reason, text=text)


def load_fixture(name):
    return (FIXTURES_DIR / name).read_text(encoding='utf-8')


@pytest.fixture
def session_info():
    return SessionInfo(session='s3ss10n', spirit='sp1r1t')


@pytest.fixture
def settings_file(tmp_path):
    """A settings path that does not exist, so defaults apply."""
    return str(tmp_path / 'connecteam.ini')


@pytest.fixture
def content_structure():
    return load_fixture('content_structure.json')


@pytest.fixture
def timesheet_text():
    return load_fixture('timesheet.json')


@pytest.fixture
def punchclock_text():
    return load_fixture('punchclock.json')

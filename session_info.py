# -*- coding: utf-8 -*-
# SPDX-License-Identifier: FAFOL
# pylint: disable=logging-fstring-interpolation

"""Connecteam session cookies: loading, prompting for, and persisting them"""

import json
import logging
import os
from dataclasses import asdict, dataclass
from os.path import dirname, expanduser, isfile, join
from typing import Callable, Dict

from rich import print

from connecteam_errors import InputError

SESSION_INFO_FILE = join(expanduser('~'), '.config', 'connectteam.json')
DASHBOARD_URL = 'https://app.connecteam.com/'


@dataclass(frozen=True)
class SessionInfo:
    """The two cookies the dashboard API wants on every request."""
    session: str
    spirit: str

    def cookie_header(self) -> str:
        return f'session={self.session}; _spirit={self.spirit}; '

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def parse_cookie_header(raw: str) -> SessionInfo:
    """Pull `session` and `_spirit` out of a pasted cookie header.

    Args:
        raw (str): the header value as copied from the browser, optionally
                   wrapped in single quotes

    Raises:
        InputError: if either cookie is missing

    Returns:
        SessionInfo: the extracted cookies
    """
    raw = raw.strip()
    if raw.startswith("'"):
        raw = raw[1:]
    if raw.endswith("'"):
        raw = raw[:-1]

    cookies = {}
    for part in raw.split(';'):
        if '=' not in part:
            continue
        key, value = part.split('=', 1)
        key = key.strip()
        if key and key not in cookies:
            cookies[key] = value.strip()

    missing = [key for key in ('session', '_spirit') if not cookies.get(key)]
    if missing:
        raise InputError(f'Cookie header is missing {", ".join(missing)}')
    return SessionInfo(session=cookies['session'], spirit=cookies['_spirit'])


def save_session_info(session_info: SessionInfo, path: str = SESSION_INFO_FILE) -> None:
    """Write a session to the store, pretty-printed.

    Raises:
        InputError: if the file cannot be written
    """
    try:
        if dirname(path):
            os.makedirs(dirname(path), exist_ok=True)
        with open(path, encoding='utf-8', mode='w') as info_file:
            json.dump(session_info.to_dict(), info_file, indent=' '*4)
    except OSError as e:
        raise InputError(f'Cannot save session to {path}: {e}') from e


def load_session_info(path: str = SESSION_INFO_FILE) -> SessionInfo:
    """Read a stored session.

    Raises:
        InputError: if the file cannot be read, is not JSON, or lacks either
                    cookie as a string
    """
    try:
        with open(path, encoding='utf-8') as info_file:
            stored = json.load(info_file)
    except json.JSONDecodeError as e:
        raise InputError(f'{path} is not valid JSON: {e}') from e
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f'Cannot read {path}: {e}') from e
    if not isinstance(stored, dict):
        raise InputError(f'{path} does not hold a session object')
    for key in ('session', 'spirit'):
        if key not in stored:
            raise InputError(f'{path} is missing {key!r}')
        if not isinstance(stored[key], str):
            raise InputError(f'{path} has a non-string {key!r}: {stored[key]!r}')
    return SessionInfo(session=stored['session'], spirit=stored['spirit'])


class MemorySessionProvider:
    """Hands back a fixed session; for tests and scripted use."""

    def __init__(self, session_info: SessionInfo) -> None:
        self.session_info = session_info

    def get(self) -> SessionInfo:
        return self.session_info


class FileSessionProvider:
    """Reads the session from the per-user store."""

    def __init__(self, path: str = SESSION_INFO_FILE) -> None:
        self.path = path
        self.logger = logging.getLogger('FileSessionProvider')

    def exists(self) -> bool:
        return isfile(self.path)

    def get(self) -> SessionInfo:
        self.logger.debug(f'Loading session from {self.path}')
        return load_session_info(self.path)


class PromptSessionProvider:
    """Asks the user to paste the cookie header from their browser."""

    def __init__(self, path: str = SESSION_INFO_FILE,
                 ask: Callable[[str], str] = None) -> None:
        self.path = path
        self.ask = ask if ask is not None else input

    def get(self) -> SessionInfo:
        print(f'Session information is not stored in {self.path}. '
              f'Please go to {DASHBOARD_URL}, log in, open the developer console '
              '(ctrl+shift+c in most browsers), go to network, open the time clock page, '
              'select the Timesheet request, copy the cookie value from the request headers '
              'and paste it here:')
        try:
            raw = self.ask('')
        except EOFError as e:
            raise InputError('No cookie header given') from e
        return parse_cookie_header(raw)


class StoredSessionProvider:
    """Use the stored session if there is one, otherwise prompt and store it."""

    def __init__(self, path: str = SESSION_INFO_FILE,
                 ask: Callable[[str], str] = None) -> None:
        self.stored = FileSessionProvider(path)
        self.prompt = PromptSessionProvider(path, ask)
        self.logger = logging.getLogger('StoredSessionProvider')

    def get(self) -> SessionInfo:
        if self.stored.exists():
            return self.stored.get()
        session_info = self.prompt.get()
        save_session_info(session_info, self.stored.path)
        self.logger.info(f'Saved session to {self.stored.path}')
        return session_info

# -*- coding: utf-8 -*-
# SPDX-License-Identifier: FAFOL
# pylint: disable=logging-fstring-interpolation

"""Wrapper for the undocumented dashboard API behind Connecteam"""

import configparser
import logging
from datetime import date
from os.path import expanduser, join
from typing import Any, List, Union

import arrow
import requests

from connecteam_errors import NotFoundError, SchemaError, TransportError
from connecteam_json import ABSENT, as_int, as_list, decode_json, get_path, is_number
from session_info import SessionInfo

SETTINGS_FILE = join(expanduser('~'), '.config', 'connecteam.ini')
PARAM_DATE_FORMAT = 'YYYY-MM-DD'

DEFAULT_SETTINGS = {
    'uri': {
        'host': 'app.connecteam.com',
    },
    'timesheet': {
        'timezone': 'Europe/Warsaw',
        'timeout': '30',
    },
}

CONTAINER_NAME = 'Operations'
DASHBOARD_TYPE = 'punchclock'


def find_object_ids(document: Any) -> List[Any]:
    """Collect the ids of every punch clock object in a content structure.

    Walks containers named "Operations", their assets with a "punchclock"
    dashboard type, and every object under their courses and sections.
    Only numeric ids are kept, in document order.

    Args:
        document: the decoded ContentStructure response

    Returns:
        list: the raw numeric ids
    """
    ids = []
    for container in as_list(get_path(document, 'data', 'containers')):
        if get_path(container, 'name') != CONTAINER_NAME:
            continue
        for asset in as_list(get_path(container, 'assets')):
            if get_path(asset, 'dashboardType') != DASHBOARD_TYPE:
                continue
            for course in as_list(get_path(asset, 'courses')):
                for section in as_list(get_path(course, 'sections')):
                    for obj in as_list(get_path(section, 'objects')):
                        object_id = get_path(obj, 'id')
                        if is_number(object_id):
                            ids.append(object_id)
    return ids


def format_param_date(day: Union[date, arrow.arrow.Arrow]) -> str:
    """Format a calendar date the way the dashboard expects it"""
    return arrow.get(day).format(PARAM_DATE_FORMAT)


class ConnecTeam:
    """Wrapper for the dashboard API behind Connecteam"""

    def __init__(self, session_info: SessionInfo,
                 settings_file: str = SETTINGS_FILE,
                 http: requests.Session = None):
        self.logger = logging.getLogger('ConnecTeam')
        self.session_info = session_info

        self._settings = configparser.ConfigParser()
        self._settings.read_dict(DEFAULT_SETTINGS)
        if self._settings.read(settings_file):
            self.logger.debug(f'Loaded settings from {settings_file}')
        self.host = self._settings['uri']['host']
        self.timezone = self._settings['timesheet']['timezone']
        self.timeout = self._settings['timesheet'].getfloat('timeout')
        self.api_url = f'https://{self.host}/api/UserDashboard'
        self.logger.debug(f'API URI: {self.api_url}')

        self._session = http if http is not None else requests.Session()
        self._session.headers.update({
            'accept': 'application/json, text/plain, */*',
            'cookie': self.session_info.cookie_header(),
        })

    def _request(self, method: str, uri: str, **kwargs) -> str:
        """Send one request and hand back the body text.

        Raises:
            TransportError: when the request fails or the status is not 2xx
        """
        self.logger.debug(f'{method} {uri}')
        try:
            response = self._session.request(method, uri, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f'{method} {uri} failed: {e}') from e
        if not response.ok:
            raise TransportError(
                f'Bad response: {response.status_code} - {response.reason}')
        return response.text

    def _params(self, object_id: int, **params) -> dict:
        # _spirit rides along in the body as well as the cookie
        params.update({
            'objectId': object_id,
            'defaultTimezone': self.timezone,
            '_spirit': self.session_info.spirit,
        })
        return params

    def get_object_id(self) -> int:
        """Find the id of the punch clock object for this account.

        Raises:
            TransportError: on request failure
            SchemaError: when the response has no `data.containers`, or the id
                         is not a non-negative whole number
            NotFoundError: when no punch clock object exists

        Returns:
            int: the punch clock object id
        """
        text = self._request('GET', f'{self.api_url}/ContentStructure/')
        document = decode_json(text)
        if get_path(document, 'data', 'containers') is ABSENT:
            raise SchemaError('ContentStructure response has no data.containers')

        object_ids = find_object_ids(document)
        if not object_ids:
            raise NotFoundError(
                f'No "{DASHBOARD_TYPE}" object found under "{CONTAINER_NAME}"')
        if len(object_ids) > 1:
            self.logger.warning(f'Found more than one matching object id: {object_ids}, '
                                f'using {object_ids[0]}')

        object_id = as_int(object_ids[0])
        if object_id is ABSENT or object_id < 0:
            raise SchemaError(f'Object id {object_ids[0]} is not a whole number')
        self.logger.debug(f'Punch clock object id: {object_id}')
        return object_id

    def get_timesheet(self, object_id: int,
                      start_date: Union[date, arrow.arrow.Arrow],
                      end_date: Union[date, arrow.arrow.Arrow]) -> str:
        """Download the raw timesheet for a date range.

        Args:
            object_id (int): the punch clock object id
            start_date (date): first day of the range
            end_date (date): last day of the range

        Returns:
            str: the response body, unparsed
        """
        parameters = self._params(object_id,
                                  startDate=format_param_date(start_date),
                                  endDate=format_param_date(end_date))
        self.logger.debug(f'Getting timesheet {parameters["startDate"]}'
                          f'--{parameters["endDate"]}')
        return self._request('POST', f'{self.api_url}/PunchClock/Timesheet/',
                             json=parameters)

    def get_punchclock_data(self, object_id: int) -> str:
        """Download the raw punch clock settings (tags and shift attachments)"""
        return self._request('POST', f'{self.api_url}/PunchClock/Data/',
                             json=self._params(object_id))

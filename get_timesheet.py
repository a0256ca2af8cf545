# -*- coding: utf-8 -*-
# SPDX-License-Identifier: FAFOL
# pylint: disable=logging-fstring-interpolation

"""Get a Connecteam timesheet and print it as a table"""

import argparse
import json
import logging
import os
import sys
from datetime import date
from os.path import join

import arrow
import requests
from rich.console import Console
from rich.logging import RichHandler

from connecteam import ConnecTeam, SETTINGS_FILE
from connecteam_errors import ConnecTeamError, InputError
from session_info import SESSION_INFO_FILE, StoredSessionProvider
from timesheet import Timesheet, parse_punchclock, parse_timesheet, tags_table

FORMAT = "%(message)s"
RELATIVE_DAYS = {
    'today': 0,
    'now': 0,
    'yesterday': -1,
    'tomorrow': 1,
}

logger = logging.getLogger('get_timesheet')


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level="DEBUG" if verbose else "INFO",
        format=FORMAT,
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True,
                              tracebacks_suppress=[requests])]
    )
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def parse_cli_date(text: str, now: arrow.arrow.Arrow = None) -> date:
    """Turn a loose date like "today", "2023-02-01" or "7 days ago" into a date.

    Args:
        text (str): what the user typed
        now (arrow): the reference point for relative dates (default: now)

    Raises:
        InputError: if nothing can make sense of `text`

    Returns:
        date: the calendar date
    """
    now = now if now is not None else arrow.now()
    phrase = text.strip().lower()
    if not phrase:
        raise InputError('Empty date')
    if phrase in RELATIVE_DAYS:
        return now.shift(days=RELATIVE_DAYS[phrase]).date()
    try:
        return arrow.get(text.strip()).date()
    except (arrow.ParserError, ValueError, TypeError):
        pass
    try:
        return now.dehumanize(phrase).date()
    except ValueError as e:
        raise InputError(f'Cannot understand date "{text}"') from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Print your Connecteam punch clock timesheet')
    parser.add_argument('--start', '-s', default='7 days ago',
                        help='first day, e.g. "2023-02-01" or "2 weeks ago" (default: %(default)s)')
    parser.add_argument('--end', '-e', default='today',
                        help='last day (default: %(default)s)')
    parser.add_argument('--tags', action='store_true',
                        help='also list the projects and shift attachments you can book against')
    parser.add_argument('--dump', metavar='DIR',
                        help='write the raw timesheet JSON into DIR')
    parser.add_argument('--skip-invalid', action='store_true',
                        help='skip shifts with broken timestamps instead of failing')
    parser.add_argument('--session-file', default=SESSION_INFO_FILE,
                        help='where the session cookies are kept (default: %(default)s)')
    parser.add_argument('--settings-file', default=SETTINGS_FILE,
                        help='optional settings file (default: %(default)s)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='debug logging')
    return parser


def dump_timesheet(text: str, directory: str, start_date: date, end_date: date) -> str:
    """Write the raw timesheet response into `directory`, pretty-printed

    Raises:
        InputError: if the directory or file cannot be written
    """
    path = join(directory, f'{start_date}--{end_date}.json')
    try:
        os.makedirs(directory, exist_ok=True)
        with open(path, encoding='utf-8', mode='w') as times:
            json.dump(json.loads(text), times, indent=' '*4)
    except OSError as e:
        raise InputError(f'Cannot write {path}: {e}') from e
    return path


def run(args: argparse.Namespace, provider=None, http: requests.Session = None,
        console: Console = None) -> None:
    """Run the pipeline, raising the first `ConnecTeamError` with its stage attached"""
    stage = 'parsing CLI dates'
    try:
        start_date = parse_cli_date(args.start)
        end_date = parse_cli_date(args.end)
        if start_date > end_date:
            raise InputError(f'Start {start_date} is after end {end_date}')

        stage = 'loading session'
        provider = provider if provider is not None else StoredSessionProvider(args.session_file)
        session_info = provider.get()
        connecteam = ConnecTeam(session_info, settings_file=args.settings_file, http=http)

        stage = 'resolving object id'
        object_id = connecteam.get_object_id()

        stage = 'fetching timesheet'
        raw_timesheet = connecteam.get_timesheet(object_id, start_date, end_date)

        stage = 'parsing response'
        entries = parse_timesheet(raw_timesheet, skip_invalid=args.skip_invalid)
        if args.dump:
            stage = 'writing dump'
            logger.info(f'Wrote {dump_timesheet(raw_timesheet, args.dump, start_date, end_date)}')

        console = console if console is not None else Console()
        logger.debug(f'Timesheet from {start_date} to {end_date}: {len(entries)} shifts')
        Timesheet(entries).draw(console)

        if args.tags:
            stage = 'fetching punch clock data'
            attachments, tags = parse_punchclock(connecteam.get_punchclock_data(object_id))
            console.print(tags_table(attachments, tags))
    except ConnecTeamError as e:
        e.stage = stage
        raise


def main(argv=None) -> int:
    """Main function"""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    try:
        run(args)
    except ConnecTeamError as e:
        logger.error(f'{e.stage} failed: {e}')
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())

# -*- coding: utf-8 -*-
# SPDX-License-Identifier: FAFOL
# pylint: disable=logging-fstring-interpolation

"""Parse a Connecteam timesheet and lay it out as a day-grouped table"""

import itertools
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterator, List, Tuple, Union

import arrow
from rich import box
from rich.console import Console, ConsoleOptions, RenderResult
from rich.table import Table
from rich.text import Text

from connecteam_errors import SchemaError
from connecteam_json import (ABSENT, as_int, as_list, decode_json, get_path,
                             is_present_text, string_or_empty, text_of)

PUNCH_TIME_FORMAT = 'HH:mm'
DAY_FORMAT = 'YYYY-MM-DD'
HEADER = ('Start', 'End', 'Description', 'Project', 'Subproject')
MAX_COLUMN_WIDTH = 120

logger = logging.getLogger('Timesheet')


@dataclass(frozen=True)
class TimesheetEntry:
    """One shift from a Connecteam timesheet."""
    start: arrow.arrow.Arrow
    end: arrow.arrow.Arrow
    desc: str = ''
    project: str = ''
    subproject: str = ''

    def day(self) -> Tuple[int, int, int]:
        return (self.start.year, self.start.month, self.start.day)

    def cells(self) -> Tuple[str, str, str, str, str]:
        return (self.start.format(PUNCH_TIME_FORMAT),
                self.end.format(PUNCH_TIME_FORMAT),
                self.desc,
                self.project,
                self.subproject)


@dataclass(frozen=True)
class DayHeader:
    """A row naming the day the following entries belong to."""
    day: date

    def __str__(self) -> str:
        return arrow.get(self.day).format(DAY_FORMAT)


@dataclass
class ShiftAttachment:
    """A custom field the punch clock asks for on each shift."""
    id: str
    name: str
    type: str


@dataclass
class PunchTag:
    """A project ("tag") shifts can be booked against, with its sub-items."""
    name: str
    sub_items: List[str] = field(default_factory=list)

    def pairs(self) -> List[Tuple[str, str]]:
        if not self.sub_items:
            return [(self.name, '')]
        return [(self.name, sub_item) for sub_item in self.sub_items]


def parse_timestamp(punch: Any) -> arrow.arrow.Arrow:
    """Turn a punchIn/punchOut node into a UTC instant.

    Raises:
        SchemaError: if the epoch seconds are missing or not a whole number
    """
    seconds = as_int(get_path(punch, 'timestampWithTimezone', 'timestamp'))
    if seconds is ABSENT:
        raise SchemaError(f'Punch has no usable timestampWithTimezone.timestamp: {punch!r}')
    try:
        return arrow.Arrow.utcfromtimestamp(seconds)
    except (OverflowError, OSError, ValueError) as e:
        raise SchemaError(f'Punch timestamp {seconds} is out of range') from e


def merge_description(free_text: str, notes: str) -> str:
    """Combine the first attachment's free text with the employee notes"""
    has_free_text = is_present_text(free_text)
    has_notes = is_present_text(notes)
    if has_free_text and has_notes:
        return f'{free_text} / {notes}'
    if has_free_text:
        return free_text
    if has_notes:
        return notes
    return ''


def parse_shift(shift: Any) -> TimesheetEntry:
    free_text = text_of(get_path(shift, 'shiftAttachments', 0, 'freeText'))
    notes = text_of(get_path(shift, 'employeeNotes'))
    return TimesheetEntry(
        start=parse_timestamp(get_path(shift, 'punchIn')),
        end=parse_timestamp(get_path(shift, 'punchOut')),
        desc=merge_description(free_text, notes),
        project=string_or_empty(get_path(shift, 'punchTag', 'name')),
        subproject=string_or_empty(get_path(shift, 'punchTag', 'subItems', 0, 'name')),
    )


def iter_shifts(time_sheet_entries: Any) -> Iterator[Any]:
    for day_entries in as_list(time_sheet_entries):
        for day_entry in as_list(get_path(day_entries, 'timeSheetDayEntries')):
            yield from as_list(get_path(day_entry, 'shifts'))


def parse_timesheet(text: str, skip_invalid: bool = False) -> List[TimesheetEntry]:
    """Parse a Timesheet response into entries, in the order they appear.

    Args:
        text (str): the raw response body
        skip_invalid (bool): log and drop shifts with broken timestamps
                             instead of failing (default False)

    Raises:
        SchemaError: if the body is not JSON, has no
                     data.userTimeSheets.timeSheetEntries, or (unless
                     `skip_invalid`) a shift has no usable timestamps

    Returns:
        List[TimesheetEntry]: one entry per shift
    """
    document = decode_json(text)
    time_sheet_entries = get_path(document, 'data', 'userTimeSheets', 'timeSheetEntries')
    if time_sheet_entries is ABSENT:
        raise SchemaError('Timesheet response has no data.userTimeSheets.timeSheetEntries')

    entries = []
    for shift in iter_shifts(time_sheet_entries):
        try:
            entries.append(parse_shift(shift))
        except SchemaError as e:
            if not skip_invalid:
                raise
            logger.warning(f'Skipping shift: {e}')
    logger.debug(f'Parsed {len(entries)} shifts')
    return entries


def parse_punchclock(text: str) -> Tuple[List[ShiftAttachment], List[PunchTag]]:
    """Parse a punch clock Data response into its shift attachments and tags.

    Raises:
        SchemaError: if the body is not JSON or has no `data`
    """
    document = decode_json(text)
    data = get_path(document, 'data')
    if data is ABSENT:
        raise SchemaError('Punch clock response has no data')

    attachments = [
        ShiftAttachment(id=string_or_empty(get_path(attachment, 'id')),
                        name=string_or_empty(get_path(attachment, 'name')),
                        type=string_or_empty(get_path(attachment, 'type')))
        for attachment in as_list(get_path(data, 'punchClockSettings', 'shiftAttachments'))
    ]
    tags = [
        PunchTag(name=string_or_empty(get_path(tag, 'name')),
                 sub_items=[string_or_empty(get_path(sub_item, 'name'))
                            for sub_item in as_list(get_path(tag, 'subItems'))])
        for tag in as_list(get_path(data, 'availableTags'))
    ]
    return attachments, tags


def sort_entries(entries: List[TimesheetEntry]) -> List[TimesheetEntry]:
    """Sort in place by start, then reverse: newest first.

    Entries with the same start come out in the reverse of their input order.
    """
    entries.sort(key=lambda entry: entry.start)
    entries.reverse()
    return entries


def group_by_day(entries: List[TimesheetEntry]) -> List[List[TimesheetEntry]]:
    """Group runs of adjacent entries that start on the same UTC day"""
    return [list(group) for _, group in itertools.groupby(entries, key=TimesheetEntry.day)]


class Timesheet:
    """A set of shifts, newest first, ready to print."""

    def __init__(self, entries: List[TimesheetEntry]):
        self.entries = sort_entries(entries)
        self.days = group_by_day(self.entries)

    def rows(self) -> List[Union[Tuple[str, ...], DayHeader]]:
        """The header row, then a `DayHeader` and the entry rows for each day"""
        rows = [HEADER]
        for day in self.days:
            rows.append(DayHeader(day[0].start.date()))
            rows.extend(entry.cells() for entry in day)
        return rows

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        # pylint: disable=unused-argument
        rows = self.rows()
        my_table = Table(box=box.DOUBLE_EDGE, show_lines=False)
        for title in rows[0]:
            my_table.add_column(title, max_width=MAX_COLUMN_WIDTH)
        for row in rows[1:]:
            if isinstance(row, DayHeader):
                if my_table.row_count:
                    my_table.add_section()
                my_table.add_row(Text(str(row), style='bold', justify='center'),
                                 *([''] * (len(HEADER) - 1)), end_section=True)
            else:
                my_table.add_row(*row)
        yield my_table

    def draw(self, console: Console = None) -> None:
        console = console if console is not None else Console()
        console.print(self)


def tags_table(attachments: List[ShiftAttachment], tags: List[PunchTag]) -> Table:
    """A table of the bookable project/subproject pairs and shift attachments"""
    my_table = Table('Project', 'Subproject', box=box.DOUBLE_EDGE,
                     title='Available tags')
    for tag in tags:
        for name, sub_item in tag.pairs():
            my_table.add_row(name, sub_item)
    if attachments:
        my_table.add_section()
        for attachment in attachments:
            my_table.add_row(f'[i]{attachment.name}[/i]', f'{attachment.type} ({attachment.id})')
    return my_table

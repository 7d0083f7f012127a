# Copyright 2018 Brian T. Park
#
# MIT License

"""
Parsers for the year, day and time fields of the RULE and ZONE lines of the TZ
Database files. All parsers raise TzdbSyntaxError on malformed input.
"""

import re
from typing import Optional
from typing import Sequence
from typing import Tuple

from tzdbtools.data_types.errors import TzdbSyntaxError
from tzdbtools.data_types.tz_types import DateSpec
from tzdbtools.data_types.tz_types import MAX_YEAR
from tzdbtools.data_types.tz_types import MILLIS_PER_HOUR
from tzdbtools.data_types.tz_types import MILLIS_PER_MINUTE
from tzdbtools.data_types.tz_types import MILLIS_PER_SECOND
from tzdbtools.data_types.tz_types import MIN_YEAR
from tzdbtools.data_types.tz_types import START_OF_YEAR
from tzdbtools.data_types.tz_types import SUFFIX_STANDARD
from tzdbtools.data_types.tz_types import SUFFIX_UTC
from tzdbtools.data_types.tz_types import SUFFIX_WALL
from tzdbtools.extractor.calendar import month_to_index
from tzdbtools.extractor.calendar import weekday_to_index

# H[:MM[:SS[.fff]]], followed by at most one suffix letter.
TIME_PATTERN = re.compile(
    r'(\d+)(?::(\d{1,2})(?::(\d{1,2})(?:\.(\d{1,3}))?)?)?([A-Za-z]?)$'
)


def parse_optional(field: str) -> Optional[str]:
    """The TYPE and LETTER columns use '-' to mean 'not set'."""
    return None if field == '-' else field


def parse_year(year_string: str, default: int) -> int:
    """Parse the FROM or TO year field. The 'only' keyword returns the
    'default' (the FROM year when parsing the TO year).
    """
    year_string = year_string.lower()
    if year_string in ('minimum', 'min'):
        return MIN_YEAR
    if year_string in ('maximum', 'max'):
        return MAX_YEAR
    if year_string == 'only':
        return default
    try:
        return int(year_string)
    except ValueError:
        raise TzdbSyntaxError(f'Invalid year "{year_string}"') from None


def parse_time(time_string: str) -> int:
    """Convert '[-]H[:MM[:SS[.fff]]]' into signed milliseconds from 00:00. A
    single trailing suffix letter (e.g. '2:00s') is ignored. The sign is
    handled by parsing the magnitude and negating it.
    """
    negative = time_string.startswith('-')
    magnitude = time_string[1:] if negative else time_string

    match = TIME_PATTERN.match(magnitude)
    if not match:
        raise TzdbSyntaxError(f'Invalid time "{time_string}"')
    hours, minutes, seconds, fraction, _ = match.groups()
    minute = int(minutes) if minutes else 0
    second = int(seconds) if seconds else 0
    if minute > 59 or second > 59:
        raise TzdbSyntaxError(f'Invalid time "{time_string}"')
    millis = int(fraction.ljust(3, '0')) if fraction else 0

    total = (
        int(hours) * MILLIS_PER_HOUR
        + minute * MILLIS_PER_MINUTE
        + second * MILLIS_PER_SECOND
        + millis
    )
    return -total if negative else total


def parse_time_suffix(time_string: str) -> str:
    """Normalize the last character of the AT or UNTIL time into 's'
    (standard), 'u' (UTC) or 'w' (wall, the default).
    """
    suffix = time_string[-1:]
    if suffix in ('s', 'S'):
        return SUFFIX_STANDARD
    if suffix in ('u', 'U', 'g', 'G', 'z', 'Z'):
        return SUFFIX_UTC
    return SUFFIX_WALL


def parse_day_spec(on_string: str) -> Tuple[int, int, bool]:
    """Parse things like '20', 'lastSun', 'Sun>=8', 'Fri<=25'.
    Returns (day, weekday, advance) where
        (day, 0, False) = exact match on day
        (-1, weekday, False) = matches last weekday of the month
        (day, weekday, True) = matches weekday>=day
        (day, weekday, False) = matches weekday<=day
    """
    if on_string.isdecimal():
        return (int(on_string), 0, False)

    if on_string.startswith('last'):
        return (-1, weekday_to_index(on_string[4:]), False)

    for operator, advance in (('>=', True), ('<=', False)):
        index = on_string.find(operator)
        if index > 0:
            day_string = on_string[index + 2:]
            if not day_string.isdecimal():
                raise TzdbSyntaxError(f'Invalid day spec "{on_string}"')
            weekday = weekday_to_index(on_string[:index])
            return (int(day_string), weekday, advance)

    raise TzdbSyntaxError(f'Invalid day spec "{on_string}"')


def parse_date_spec(tokens: Sequence[str]) -> DateSpec:
    """Convert the (month, day, time) tokens into a DateSpec. Each token is
    optional from the right, so [] is the start of the year, ['Mar'] is
    'Mar 1 00:00', and so on.
    """
    if len(tokens) == 0:
        return START_OF_YEAR
    if len(tokens) > 3:
        raise TzdbSyntaxError(f'Too many date fields {list(tokens)}')

    month = month_to_index(tokens[0])
    day = 1
    weekday = 0
    advance = False
    time_millis = 0
    time_suffix = SUFFIX_WALL

    if len(tokens) > 1:
        day, weekday, advance = parse_day_spec(tokens[1])
    if len(tokens) > 2:
        time_suffix = parse_time_suffix(tokens[2])
        time_millis = parse_time(tokens[2])

    return DateSpec(
        month=month,
        day=day,
        weekday=weekday,
        advance=advance,
        time_millis=time_millis,
        time_suffix=time_suffix,
    )

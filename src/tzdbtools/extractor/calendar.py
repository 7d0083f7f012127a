# Copyright 2018 Brian T. Park
#
# MIT License

"""
English month and weekday names used by the TZ Database files.
"""

from typing import Dict
from typing import List

from tzdbtools.data_types.errors import TzdbSyntaxError

MONTH_NAMES: List[str] = [
    'January', 'February', 'March', 'April', 'May', 'June', 'July',
    'August', 'September', 'October', 'November', 'December',
]

# ISO-8601 specifies Monday=1, Sunday=7
WEEKDAY_NAMES: List[str] = [
    'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday',
    'Sunday',
]


def _create_name_index(names: List[str]) -> Dict[str, int]:
    """Map the lower-cased full name and its 3-letter abbreviation to the
    1-based index.
    """
    index_map: Dict[str, int] = {}
    for i, name in enumerate(names):
        index_map[name.lower()] = i + 1
        index_map[name[:3].lower()] = i + 1
    return index_map


MONTH_TO_MONTH_INDEX = _create_name_index(MONTH_NAMES)
WEEKDAY_TO_WEEKDAY_INDEX = _create_name_index(WEEKDAY_NAMES)


def month_to_index(month: str) -> int:
    """Convert 'Jan', 'jan' or 'January' to 1, and so on up to 12."""
    index = MONTH_TO_MONTH_INDEX.get(month.lower())
    if index is None:
        raise TzdbSyntaxError(f'Invalid month "{month}"')
    return index


def weekday_to_index(weekday: str) -> int:
    """Convert 'Mon', 'mon' or 'Monday' to 1, and so on up to Sunday=7."""
    index = WEEKDAY_TO_WEEKDAY_INDEX.get(weekday.lower())
    if index is None:
        raise TzdbSyntaxError(f'Invalid weekday "{weekday}"')
    return index

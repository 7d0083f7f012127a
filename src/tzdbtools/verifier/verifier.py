# Copyright 2019 Brian T. Park
#
# MIT License

"""
Sanity checks of a CompiledZone, performed before the zone is accepted into
the compiled database. The transitions are walked forward and backward over a
fixed window of years instead of the validity range of each zone.
"""

import datetime
from typing import List

from tzdbtools.builder.zone_builder import CompiledZone
from tzdbtools.builder.zone_builder import days_from_epoch
from tzdbtools.data_types.errors import VerificationFailure
from tzdbtools.data_types.tz_types import MILLIS_PER_DAY

# Window of the transition walk, [1850-01-01T00:00Z, 2050-01-01T00:00Z].
VERIFY_START_YEAR = 1850
VERIFY_END_YEAR = 2050

# Placeholder abbreviation for unknown local time.
UNKNOWN_NAME_KEY = '??'


def _year_start_millis(year: int) -> int:
    return days_from_epoch(year, 1, 1) * MILLIS_PER_DAY


def _format_millis(millis: int) -> str:
    """Render the instant as an ISO 8601 UTC string for diagnostics."""
    epoch = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)
    return (epoch + datetime.timedelta(milliseconds=millis)).isoformat()


def verify_zone(zone_id: str, tz: CompiledZone) -> None:
    """Raise VerificationFailure if the compiled zone is not usable:

    * *i* the compiled zone reports a different id,
    * *d* two adjacent transitions have the same offset and name key,
    * *s* a name key is empty or shorter than 3 characters (except '??'),
    * *r* walking the transitions backward does not land exactly 1 millisecond
      before each forward transition.
    """
    if zone_id != tz.zone_id:
        raise VerificationFailure(
            f"*i* Error in {zone_id}: compiled zone reports id {tz.zone_id}")

    millis = _year_start_millis(VERIFY_START_YEAR)
    end = _year_start_millis(VERIFY_END_YEAR)

    offset = tz.offset_at(millis)
    key = tz.name_key_at(millis)
    transitions: List[int] = []

    while True:
        next_millis = tz.next_transition(millis)
        if next_millis == millis or next_millis > end:
            break
        millis = next_millis

        next_offset = tz.offset_at(millis)
        next_key = tz.name_key_at(millis)

        if offset == next_offset and key == next_key:
            raise VerificationFailure(
                f"*d* Error in {zone_id} {_format_millis(millis)}")

        if not next_key or (
            len(next_key) < 3 and next_key != UNKNOWN_NAME_KEY
        ):
            raise VerificationFailure(
                f"*s* Error in {zone_id} {_format_millis(millis)}"
                f", nameKey={next_key}")

        transitions.append(millis)
        offset = next_offset
        key = next_key

    # Now verify that reverse transitions match up.
    millis = end
    start = _year_start_millis(VERIFY_START_YEAR)
    for trans in reversed(transitions):
        prev = tz.previous_transition(millis)
        if prev == millis or prev < start:
            break
        millis = prev

        if trans - 1 != millis:
            raise VerificationFailure(
                f"*r* Error in {zone_id} {_format_millis(millis)} != "
                f"{_format_millis(trans - 1)}")

# Copyright 2018 Brian T. Park
#
# MIT License

"""
Builder which accumulates the eras of a zone (standard offset, fixed or
recurring savings, cutover into the next era) and turns them into a
CompiledZone, a sorted list of transitions. Transitions are precomputed from
the first rule year (but not before MIN_COMPUTE_YEAR) through 'max_year'.
After the last transition, the offset of the zone stays constant.
"""

from bisect import bisect_right
from dataclasses import dataclass
from dataclasses import field
from typing import BinaryIO
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Tuple
from typing_extensions import Protocol

from tzdbtools.data_types.errors import CorruptDataError
from tzdbtools.data_types.tz_types import DateSpec
from tzdbtools.data_types.tz_types import MILLIS_PER_DAY
from tzdbtools.data_types.tz_types import SUFFIX_STANDARD
from tzdbtools.data_types.tz_types import SUFFIX_UTC
from tzdbtools.generator.byteutils import ByteReader
from tzdbtools.generator.byteutils import write_i32
from tzdbtools.generator.byteutils import write_i64
from tzdbtools.generator.byteutils import write_u32
from tzdbtools.generator.byteutils import write_utf

# Earliest year for which recurring rules are expanded into transitions.
MIN_COMPUTE_YEAR = 1800

# Default last year for which recurring rules are expanded into transitions.
DEFAULT_MAX_YEAR = 2100

# Identifies the format of a compiled zone file.
ZONE_FILE_MAGIC = b'TZC1'


class Transition(NamedTuple):
    """The offsets and abbreviation in effect starting at 'millis' (UTC)."""
    millis: int
    wall_offset: int  # standard offset + savings
    standard_offset: int
    name_key: str


@dataclass(frozen=True)
class CompiledZone:
    """The compiled transition history of a single zone. 'initial' holds the
    state before the first transition (its 'millis' is unused and set to 0).
    """
    zone_id: str
    initial: Transition
    transitions: Tuple[Transition, ...]
    _millis: Tuple[int, ...] = field(
        init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, '_millis', tuple(t.millis for t in self.transitions))

    def _state_at(self, instant: int) -> Transition:
        i = bisect_right(self._millis, instant)
        return self.transitions[i - 1] if i > 0 else self.initial

    def offset_at(self, instant: int) -> int:
        return self._state_at(instant).wall_offset

    def standard_offset_at(self, instant: int) -> int:
        return self._state_at(instant).standard_offset

    def name_key_at(self, instant: int) -> str:
        return self._state_at(instant).name_key

    def next_transition(self, instant: int) -> int:
        """Return the first transition after 'instant', or 'instant' itself
        if there are no more transitions.
        """
        i = bisect_right(self._millis, instant)
        if i < len(self._millis):
            return self._millis[i]
        return instant

    def previous_transition(self, instant: int) -> int:
        """Return the millisecond just before the last transition at or before
        'instant', or 'instant' itself if there is none.
        """
        i = bisect_right(self._millis, instant)
        if i > 0:
            return self._millis[i - 1] - 1
        return instant


class TransitionBuilder(Protocol):
    """Define an interface of the transition builder for mypy type checking.
    The zone_model classes feed the eras of a zone through this interface.
    """
    def set_standard_offset(self, std_offset_millis: int) -> None:
        ...

    def set_fixed_savings(self, name_key: str, save_millis: int) -> None:
        ...

    def add_recurring_savings(
        self,
        name_key: str,
        save_millis: int,
        from_year: int,
        to_year: int,
        time_suffix: str,
        month: int,
        day: int,
        weekday: int,
        advance: bool,
        time_millis: int,
    ) -> None:
        ...

    def add_cutover(
        self,
        year: int,
        time_suffix: str,
        month: int,
        day: int,
        weekday: int,
        advance: bool,
        time_millis: int,
    ) -> None:
        ...

    def to_compiled_zone(self, zone_id: str) -> CompiledZone:
        ...


class _Recurrence(NamedTuple):
    name_key: str
    save_millis: int
    from_year: int
    to_year: int
    date_spec: DateSpec


class _Event(NamedTuple):
    millis: int
    save_millis: int
    name_key: str


class _Era:
    """Mutable accumulator of one era of a zone."""
    def __init__(self) -> None:
        self.std_offset = 0
        self.fixed: Optional[Tuple[str, int]] = None
        self.recurrences: List[_Recurrence] = []
        self.until: Optional[Tuple[int, DateSpec]] = None


class ZoneBuilder:
    """Accumulates eras and converts them into a CompiledZone."""

    def __init__(self, max_year: int = DEFAULT_MAX_YEAR):
        self.max_year = max_year
        self.eras: List[_Era] = [_Era()]

    def set_standard_offset(self, std_offset_millis: int) -> None:
        self.eras[-1].std_offset = std_offset_millis

    def set_fixed_savings(self, name_key: str, save_millis: int) -> None:
        self.eras[-1].fixed = (name_key, save_millis)

    def add_recurring_savings(
        self,
        name_key: str,
        save_millis: int,
        from_year: int,
        to_year: int,
        time_suffix: str,
        month: int,
        day: int,
        weekday: int,
        advance: bool,
        time_millis: int,
    ) -> None:
        spec = DateSpec(month, day, weekday, advance, time_millis, time_suffix)
        self.eras[-1].recurrences.append(
            _Recurrence(name_key, save_millis, from_year, to_year, spec))

    def add_cutover(
        self,
        year: int,
        time_suffix: str,
        month: int,
        day: int,
        weekday: int,
        advance: bool,
        time_millis: int,
    ) -> None:
        """Close the current era at the given time, and open a new one."""
        spec = DateSpec(month, day, weekday, advance, time_millis, time_suffix)
        self.eras[-1].until = (year, spec)
        self.eras.append(_Era())

    def to_compiled_zone(self, zone_id: str) -> CompiledZone:
        initial: Optional[Transition] = None
        transitions: List[Transition] = []
        start: Optional[int] = None  # None means -Infinity

        for era in self.eras:
            std = era.std_offset
            events = self._expand_recurrences(era, start)
            save, name = _state_before(era, events, start)

            if start is None:
                initial = Transition(0, std + save, std, name)
            else:
                _add_transition(
                    transitions, initial,
                    Transition(start, std + save, std, name))

            end: Optional[int] = None
            if era.until is not None:
                end = _cutover_instant(era, events, start)

            for event in events:
                if start is not None and event.millis <= start:
                    continue
                if end is not None and event.millis >= end:
                    break
                _add_transition(
                    transitions, initial,
                    Transition(
                        event.millis, std + event.save_millis, std,
                        event.name_key))

            if end is None:
                break
            start = end

        assert initial is not None
        return CompiledZone(zone_id, initial, tuple(transitions))

    def persist(self, output: BinaryIO, zone_id: str) -> None:
        """Write the compiled zone to the binary stream."""
        data = bytearray()
        write_compiled_zone(data, self.to_compiled_zone(zone_id))
        output.write(data)

    @staticmethod
    def load_from(stream: BinaryIO, zone_id: str) -> CompiledZone:
        """Read a compiled zone written by persist()."""
        return read_compiled_zone(stream.read(), zone_id)

    def _expand_recurrences(
        self,
        era: _Era,
        start: Optional[int],
    ) -> List[_Event]:
        """Expand the recurring rules of the era into events, sorted by
        instant. Rules within a year are applied in the order of their local
        date and time, ties broken by the order the rules were added, because
        the 'w' suffix depends on the savings of the previous rule.
        """
        if not era.recurrences:
            return []

        first_year = max(
            min(r.from_year for r in era.recurrences), MIN_COMPUTE_YEAR)
        if start is not None:
            first_year = max(first_year, _year_of(start) - 1)
        last_year = min(
            max(r.to_year for r in era.recurrences), self.max_year)
        if era.until is not None:
            last_year = min(last_year, era.until[0])

        std = era.std_offset
        running_save = era.fixed[1] if era.fixed else 0
        events: List[_Event] = []
        for year in range(first_year, last_year + 1):
            occurrences = [
                (local_millis(r.date_spec, year), index, r)
                for index, r in enumerate(era.recurrences)
                if r.from_year <= year <= r.to_year
            ]
            occurrences.sort(key=lambda o: (o[0], o[1]))
            for local, _, r in occurrences:
                offset = _suffix_offset(
                    r.date_spec.time_suffix, std, running_save)
                events.append(_Event(local - offset, r.save_millis, r.name_key))
                running_save = r.save_millis

        events.sort(key=lambda e: e.millis)
        return events


def format_fixed_name(name_format: str, save_millis: int) -> str:
    """Resolve the FORMAT of an era with fixed savings. There is no LETTER, so
    '%s' is removed.
    """
    index = name_format.find('/')
    if index > 0:
        if save_millis == 0:
            return name_format[:index]
        return name_format[index + 1:]
    return name_format.replace('%s', '')


def _state_before(
    era: _Era,
    events: List[_Event],
    start: Optional[int],
) -> Tuple[int, str]:
    """Return the (save, name_key) in effect at the start of the era."""
    if era.fixed is not None and not era.recurrences:
        name_format, save = era.fixed
        return save, format_fixed_name(name_format, save)

    if start is not None:
        latest: Optional[_Event] = None
        for event in events:
            if event.millis > start:
                break
            latest = event
        if latest is not None:
            return latest.save_millis, latest.name_key

    # Use the first standard time rule, before any rule has taken effect.
    for r in era.recurrences:
        if r.save_millis == 0:
            return 0, r.name_key
    if era.fixed is not None:
        name_format, save = era.fixed
        return save, format_fixed_name(name_format, save)
    return 0, ''


def _cutover_instant(
    era: _Era,
    events: List[_Event],
    start: Optional[int],
) -> int:
    """Convert the UNTIL of the era into UTC milliseconds, using the savings
    in effect just before the cutover for the 'w' suffix.
    """
    assert era.until is not None
    year, spec = era.until
    local = local_millis(spec, year)
    std = era.std_offset
    if spec.time_suffix != SUFFIX_UTC and spec.time_suffix != SUFFIX_STANDARD:
        guess = local - std
        save, _ = _state_before(era, events, start)
        for event in events:
            if event.millis >= guess:
                break
            save = event.save_millis
        return local - std - save
    return local - _suffix_offset(spec.time_suffix, std, 0)


def _suffix_offset(suffix: str, std_offset: int, save_millis: int) -> int:
    """Offset from UTC of the local time with the given suffix."""
    if suffix == SUFFIX_UTC:
        return 0
    if suffix == SUFFIX_STANDARD:
        return std_offset
    return std_offset + save_millis


def _add_transition(
    transitions: List[Transition],
    initial: Optional[Transition],
    transition: Transition,
) -> None:
    """Append the transition, replacing any transitions at or after its
    instant, and dropping it if nothing visible changes.
    """
    while transitions and transition.millis <= transitions[-1].millis:
        transitions.pop()
    previous = transitions[-1] if transitions else initial
    if (
        previous is not None
        and previous.wall_offset == transition.wall_offset
        and previous.name_key == transition.name_key
    ):
        return
    transitions.append(transition)


# -----------------------------------------------------------------------------
# Calendar arithmetic on the proleptic Gregorian calendar.
# -----------------------------------------------------------------------------

def days_in_month(year: int, month: int) -> int:
    """Return the number of days in the given (year, month)."""
    DAYS_IN_MONTH = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]
    is_leap = (year % 4 == 0) and ((year % 100 != 0) or (year % 400) == 0)
    days = DAYS_IN_MONTH[month - 1]
    if month == 2:
        days += is_leap
    return days


def days_from_epoch(year: int, month: int, day: int) -> int:
    """Number of days from 1970-01-01 to the given date. Days beyond the end
    of the month roll into the following month.
    """
    y = year - 1 if month <= 2 else year
    era = y // 400
    yoe = y - era * 400
    mp = (month + 9) % 12  # March=0
    doy = (153 * mp + 2) // 5 + day - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * 146097 + doe - 719468


def iso_weekday(days: int) -> int:
    """ISO weekday (Monday=1, Sunday=7) of days since 1970-01-01, which was a
    Thursday.
    """
    return (days + 3) % 7 + 1


def _year_of(millis: int) -> int:
    """Return the UTC year of the instant."""
    z = millis // MILLIS_PER_DAY + 719468
    era = z // 146097
    doe = z - era * 146097
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp = (5 * doy + 2) // 153
    month = mp + 3 if mp < 10 else mp - 9
    return yoe + era * 400 + (1 if month <= 2 else 0)


def local_millis(spec: DateSpec, year: int) -> int:
    """Resolve the DateSpec in the given year, and return the local date-time
    as milliseconds from 1970-01-01T00:00 (in the same local time).
    """
    day = spec.day
    if day == -1:
        day = days_in_month(year, spec.month)
    days = days_from_epoch(year, spec.month, day)

    if spec.weekday != 0:
        weekday = iso_weekday(days)
        if spec.advance:
            days += (spec.weekday - weekday) % 7
        else:
            days -= (weekday - spec.weekday) % 7

    return days * MILLIS_PER_DAY + spec.time_millis


# -----------------------------------------------------------------------------
# Binary format of a compiled zone file.
# -----------------------------------------------------------------------------

def write_compiled_zone(data: bytearray, zone: CompiledZone) -> None:
    data.extend(ZONE_FILE_MAGIC)
    write_utf(data, zone.zone_id)
    write_i32(data, zone.initial.wall_offset)
    write_i32(data, zone.initial.standard_offset)
    write_utf(data, zone.initial.name_key)
    write_u32(data, len(zone.transitions))
    for t in zone.transitions:
        write_i64(data, t.millis)
        write_i32(data, t.wall_offset)
        write_i32(data, t.standard_offset)
        write_utf(data, t.name_key)


def read_compiled_zone(data: bytes, zone_id: str) -> CompiledZone:
    reader = ByteReader(data)
    if reader.read_bytes(len(ZONE_FILE_MAGIC)) != ZONE_FILE_MAGIC:
        raise CorruptDataError(f'{zone_id}: Not a compiled zone file')
    stored_id = reader.read_utf()
    if stored_id != zone_id:
        raise CorruptDataError(
            f'{zone_id}: Compiled zone file contains "{stored_id}"')

    wall_offset = reader.read_i32()
    standard_offset = reader.read_i32()
    initial = Transition(0, wall_offset, standard_offset, reader.read_utf())

    transitions: List[Transition] = []
    for _ in range(reader.read_u32()):
        millis = reader.read_i64()
        wall_offset = reader.read_i32()
        standard_offset = reader.read_i32()
        transitions.append(Transition(
            millis, wall_offset, standard_offset, reader.read_utf()))
    if not reader.at_end():
        raise CorruptDataError(
            f'{zone_id}: {len(data) - reader.offset} trailing bytes in '
            'compiled zone file')
    return CompiledZone(zone_id, initial, tuple(transitions))

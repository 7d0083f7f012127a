# Copyright 2018 Brian T. Park
#
# MIT License

from collections import OrderedDict
from typing import Collection
from typing import Dict
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Set
from typing import Union
from typing import cast
from typing_extensions import TypedDict

"""
Data types created or consumed by the extractor, zone_model, builder and
generator packages, along with global constants used by multiple packages.
"""

# -----------------------------------------------------------------------------
# Constants used by various modules.
# -----------------------------------------------------------------------------

# Smallest year, represented by 'minimum' or 'min' in the FROM or TO field.
MIN_YEAR: int = -(1 << 31)

# Largest year, represented by 'maximum' or 'max' in the FROM or TO field.
MAX_YEAR: int = (1 << 31) - 1

# Suffix of an AT or UNTIL time, after normalization.
SUFFIX_WALL: str = 'w'
SUFFIX_STANDARD: str = 's'
SUFFIX_UTC: str = 'u'

MILLIS_PER_SECOND: int = 1000
MILLIS_PER_MINUTE: int = 60 * MILLIS_PER_SECOND
MILLIS_PER_HOUR: int = 60 * MILLIS_PER_MINUTE
MILLIS_PER_DAY: int = 24 * MILLIS_PER_HOUR

# Max number of entries in the string pool, and max number of mappings, of
# the alias index. Both counts are written as uint16.
MAX_ALIAS_INDEX_ENTRIES: int = 65535

# Name of the alias index file in the output directory.
ALIAS_INDEX_FILE: str = 'ZoneInfoMap'


# -----------------------------------------------------------------------------
# Data types produced by the extractor package.
# -----------------------------------------------------------------------------

class DateSpec(NamedTuple):
    """The (IN, ON, AT) fields of a RULE line, or the month, day and time
    fields of the UNTIL column of a ZONE line:

    # Rule  NAME    FROM    TO    TYPE IN   ON      AT      SAVE    LETTER
    Rule    US      2007    max   -    Mar  Sun>=8  2:00    1:00    D

    The ON field is normalized into (day, weekday, advance):
        '20'      -> (20, 0, False)
        'lastSun' -> (-1, 7, False)
        'Sun>=8'  -> (8, 7, True)
        'Sun<=25' -> (25, 7, False)
    """
    month: int  # 1-12
    day: int  # 1-31, or -1 for 'last'
    weekday: int  # 1=Monday, 7=Sunday, 0={exact day match}
    advance: bool  # round forward (True) or backward (False) to weekday
    time_millis: int  # signed offset from 00:00 of the day
    time_suffix: str  # 'w', 's', 'u'


# Default DateSpec when the month, day and time fields are omitted.
START_OF_YEAR = DateSpec(1, 1, 0, False, 0, SUFFIX_WALL)


class Until(NamedTuple):
    """The UNTIL column of a ZONE line, e.g. '1883 Nov 18 12:09:24'."""
    year: int
    date_spec: DateSpec


class NoSavings(NamedTuple):
    """RULES column is '-'."""
    pass


class FixedSavings(NamedTuple):
    """RULES column is a signed time, e.g. '1:00'."""
    save_millis: int


class NamedRuleSet(NamedTuple):
    """RULES column names a RuleSet, e.g. 'US'."""
    name: str


# The RULES column of a ZONE line, decided once when the line is parsed.
EraRules = Union[NoSavings, FixedSavings, NamedRuleSet]


class Link(NamedTuple):
    """A LINK line:

    # Link  TARGET          LINK-NAME
    Link    Europe/London   Europe/Belfast
    """
    target: str
    alias: str


# Map of aliasName -> targetName, with zones mapping to themselves.
LinksMap = Dict[str, str]

# Map of {name -> Set[reason]} used by the compiler to collect de-duped error
# messages or warnings about zones and links.
CommentsMap = Dict[str, Collection[str]]


def add_comment(comments: CommentsMap, name: str, reason: str) -> None:
    """Add the human readable 'reason' to the 'comments' CommentsMap.
    """
    reasons = cast(Optional[Set[str]], comments.get(name))
    if not reasons:
        reasons = set()
        comments[name] = reasons
    reasons.add(reason)


def sort_comments(comments: CommentsMap) -> CommentsMap:
    """Sort and convert {name -> Set(str)} to {name -> List(str)} to provide
    deterministic ordering.
    """
    return OrderedDict(
        (k, list(sorted(v)))
        for k, v in sorted(comments.items())
    )


# -----------------------------------------------------------------------------
# Summary of a compilation run, rendered by jsongenerator.py.
# -----------------------------------------------------------------------------

class ZoneInfoDatabase(TypedDict):
    """JSON-serializable summary of a compilation run."""

    # Context data.
    tz_version: str
    tz_files: List[str]
    max_year: int
    num_zones: int
    num_links: int
    num_rule_sets: int

    # Data from the compiler.
    zone_ids: List[str]  # canonical zone ids, sorted
    links_map: LinksMap  # {aliasName -> zoneName}
    transition_counts: Dict[str, int]  # {zoneName -> num transitions}
    removed_zones: CommentsMap
    removed_links: CommentsMap
    notable_zones: CommentsMap

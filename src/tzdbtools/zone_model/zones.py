# Copyright 2018 Brian T. Park
#
# MIT License

import logging
from typing import Dict
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Sequence

from tzdbtools.builder.zone_builder import TransitionBuilder
from tzdbtools.data_types.errors import TzdbSyntaxError
from tzdbtools.data_types.errors import UnresolvedReferenceError
from tzdbtools.data_types.tz_types import EraRules
from tzdbtools.data_types.tz_types import FixedSavings
from tzdbtools.data_types.tz_types import NamedRuleSet
from tzdbtools.data_types.tz_types import NoSavings
from tzdbtools.data_types.tz_types import Until
from tzdbtools.extractor.datespec import parse_date_spec
from tzdbtools.extractor.datespec import parse_time
from tzdbtools.zone_model.rules import RuleSet

# Map of ruleSetName -> RuleSet.
RuleSetsMap = Dict[str, RuleSet]


def parse_era_rules(rules_string: str) -> EraRules:
    """Decide what the RULES column means. A signed time is always taken as a
    fixed savings, even if a RuleSet of the same name exists.
    """
    if rules_string == '-':
        return NoSavings()
    try:
        return FixedSavings(parse_time(rules_string))
    except TzdbSyntaxError:
        return NamedRuleSet(rules_string)


class ZoneEra(NamedTuple):
    """Represents a ZONE line, or its continuation line, in a TZ database
    file:

    # Zone  NAME                STDOFF      RULES   FORMAT  [UNTIL]
    Zone    America/Chicago     -5:50:36    -       LMT     1883 Nov 18 12:09:24
                                -6:00       US      C%sT    1920
                                ...
                                -6:00       US      C%sT
    """
    std_offset_millis: int
    rules: EraRules
    format: str
    until: Optional[Until]  # None means +Infinity
    raw_line: str = ''

    @staticmethod
    def parse(tokens: Sequence[str], raw_line: str = '') -> 'ZoneEra':
        """Create a ZoneEra from the STDOFF, RULES, FORMAT and optional UNTIL
        tokens.
        """
        if len(tokens) < 3:
            raise TzdbSyntaxError(
                f'Expected at least 3 zone fields but got {len(tokens)}: '
                f'{raw_line}')

        until: Optional[Until] = None
        if len(tokens) > 3:
            try:
                year = int(tokens[3])
            except ValueError:
                raise TzdbSyntaxError(
                    f'Invalid UNTIL year "{tokens[3]}": {raw_line}'
                ) from None
            until = Until(year, parse_date_spec(tokens[4:]))

        return ZoneEra(
            std_offset_millis=parse_time(tokens[0]),
            rules=parse_era_rules(tokens[1]),
            format=tokens[2],
            until=until,
            raw_line=raw_line,
        )


class Zone:
    """A ZONE and its continuation lines, as an ordered list of ZoneEras."""
    def __init__(self, name: str, era: ZoneEra):
        self.name = name
        self.eras: List[ZoneEra] = [era]

    def chain(self, era: ZoneEra) -> None:
        """Append the era of a continuation line."""
        self.eras.append(era)

    def add_to_builder(
        self,
        builder: TransitionBuilder,
        rule_sets: RuleSetsMap,
    ) -> None:
        add_zone_to_builder(self, builder, rule_sets)

    def __repr__(self) -> str:
        return f'Zone({self.name!r}, eras={len(self.eras)})'


def add_zone_to_builder(
    zone: Zone,
    builder: TransitionBuilder,
    rule_sets: RuleSetsMap,
) -> None:
    """Feed the eras of the zone to the builder in chronological order. Each
    era sets the standard offset, then the savings (fixed or from a RuleSet),
    then the cutover into the next era. The first era without an UNTIL ends
    the zone. Raises UnresolvedReferenceError if a RuleSet is missing.
    """
    for index, era in enumerate(zone.eras):
        builder.set_standard_offset(era.std_offset_millis)

        rules = era.rules
        if isinstance(rules, NoSavings):
            builder.set_fixed_savings(era.format, 0)
        elif isinstance(rules, FixedSavings):
            builder.set_fixed_savings(era.format, rules.save_millis)
        else:
            rule_set = rule_sets.get(rules.name)
            if rule_set is None:
                raise UnresolvedReferenceError(
                    f'{zone.name}: Rules not found: {rules.name}')
            rule_set.add_recurring(builder, era.format)

        until = era.until
        if until is None:
            ignored = len(zone.eras) - index - 1
            if ignored:
                logging.warning(
                    '%s: Ignoring %d era(s) after the era without UNTIL',
                    zone.name, ignored)
            break

        spec = until.date_spec
        builder.add_cutover(
            year=until.year,
            time_suffix=spec.time_suffix,
            month=spec.month,
            day=spec.day,
            weekday=spec.weekday,
            advance=spec.advance,
            time_millis=spec.time_millis,
        )

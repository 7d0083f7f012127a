# Copyright 2018 Brian T. Park
#
# MIT License

from dataclasses import dataclass
from typing import List
from typing import Optional
from typing import Sequence

from tzdbtools.builder.zone_builder import TransitionBuilder
from tzdbtools.data_types.errors import ModelError
from tzdbtools.data_types.errors import TzdbSyntaxError
from tzdbtools.data_types.tz_types import DateSpec
from tzdbtools.extractor.datespec import parse_date_spec
from tzdbtools.extractor.datespec import parse_optional
from tzdbtools.extractor.datespec import parse_time
from tzdbtools.extractor.datespec import parse_year


@dataclass(frozen=True)
class Rule:
    """Represents a single RULE line in a TZ database file:

    # Rule  NAME    FROM    TO    TYPE IN   ON      AT      SAVE    LETTER
    Rule    US      2007    max   -    Mar  Sun>=8  2:00    1:00    D
    Rule    US      2007    max   -    Nov  Sun>=1  2:00    0       S
    """
    name: str
    from_year: int
    to_year: int
    type: Optional[str]
    date_spec: DateSpec
    save_millis: int
    letter: Optional[str]
    raw_line: str = ''

    @staticmethod
    def parse(tokens: Sequence[str], raw_line: str = '') -> 'Rule':
        """Create a Rule from the tokens which follow the 'Rule' keyword."""
        if len(tokens) != 9:
            raise TzdbSyntaxError(
                f'Expected 9 fields after "Rule" but got {len(tokens)}: '
                f'{raw_line}')

        name = tokens[0]
        from_year = parse_year(tokens[1], 0)
        to_year = parse_year(tokens[2], from_year)
        if to_year < from_year:
            raise ModelError(
                f'Rule {name}: TO year {to_year} is before FROM year '
                f'{from_year}: {raw_line}')

        return Rule(
            name=name,
            from_year=from_year,
            to_year=to_year,
            type=parse_optional(tokens[3]),
            date_spec=parse_date_spec(tokens[4:7]),
            save_millis=parse_time(tokens[7]),
            letter=parse_optional(tokens[8]),
            raw_line=raw_line,
        )

    def format_name(self, name_format: str) -> str:
        """Convert the FORMAT of the zone era into the abbreviation used by
        this rule. 'GMT/BST' selects the left side when the rule is standard
        time, the right side otherwise. 'E%sT' substitutes the LETTER.
        """
        index = name_format.find('/')
        if index > 0:
            if self.save_millis == 0:
                return name_format[:index]
            return name_format[index + 1:]

        index = name_format.find('%s')
        if index < 0:
            return name_format
        letter = self.letter or ''
        return name_format[:index] + letter + name_format[index + 2:]

    def add_recurring(
        self,
        builder: TransitionBuilder,
        name_format: str,
    ) -> None:
        """Register this rule as a recurring savings rule with the builder."""
        spec = self.date_spec
        builder.add_recurring_savings(
            name_key=self.format_name(name_format),
            save_millis=self.save_millis,
            from_year=self.from_year,
            to_year=self.to_year,
            time_suffix=spec.time_suffix,
            month=spec.month,
            day=spec.day,
            weekday=spec.weekday,
            advance=spec.advance,
            time_millis=spec.time_millis,
        )


class RuleSet:
    """All the Rules sharing the same NAME, in the order they appear in the
    TZ database files.
    """
    def __init__(self, rule: Rule):
        self.name = rule.name
        self.rules: List[Rule] = [rule]

    def add_rule(self, rule: Rule) -> None:
        if rule.name != self.name:
            raise ModelError(
                f'Rule name mismatch: "{rule.name}" added to RuleSet '
                f'"{self.name}"')
        self.rules.append(rule)

    def add_recurring(
        self,
        builder: TransitionBuilder,
        name_format: str,
    ) -> None:
        """Register every rule with the builder. The file order is preserved
        because rules with the same effective date are resolved by the
        builder in the order they were added.
        """
        for rule in self.rules:
            rule.add_recurring(builder, name_format)

    def __len__(self) -> int:
        return len(self.rules)

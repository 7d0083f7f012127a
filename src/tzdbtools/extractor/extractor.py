# Copyright 2018 Brian T. Park
#
# MIT License

"""
Parses the raw TZ Database files into RuleSets, Zones and Links, accumulated
in a CompilationSession:

    # Rule  NAME    FROM    TO    TYPE IN   ON      AT      SAVE    LETTER
    Rule    US      2007    max   -    Mar  Sun>=8  2:00    1:00    D

    # Zone  NAME                STDOFF      RULES   FORMAT  [UNTIL]
    Zone    America/Chicago     -5:50:36    -       LMT     1883 Nov 18 12:09:24
                                -6:00       US      C%sT

    # Link  TARGET          LINK-NAME
    Link    Europe/London   Europe/Belfast

A line starting with whitespace continues the most recent Zone. Any other line
closes it.
"""

import logging
import os
from dataclasses import dataclass
from dataclasses import field
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional

from tzdbtools.data_types.errors import TzdbError
from tzdbtools.data_types.errors import TzdbSyntaxError
from tzdbtools.data_types.tz_types import Link
from tzdbtools.zone_model.rules import Rule
from tzdbtools.zone_model.rules import RuleSet
from tzdbtools.zone_model.zones import Zone
from tzdbtools.zone_model.zones import ZoneEra


@dataclass
class CompilationSession:
    """Everything parsed from the TZ Database files of one compilation. A
    session is owned by a single compilation, and is never shared.
    """
    rule_sets: Dict[str, RuleSet] = field(default_factory=dict)
    zones: List[Zone] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    files: List[str] = field(default_factory=list)


def strip_comment(line: str) -> str:
    index = line.find('#')
    if index >= 0:
        return line[:index]
    return line


def parse_lines(
    lines: Iterable[str],
    session: CompilationSession,
    source: str = '<string>',
) -> None:
    """Parse the lines of one TZ Database file into the session. Raises
    TzdbSyntaxError or ModelError, prefixed with the source and the line
    number, on the first invalid line.
    """
    zone: Optional[Zone] = None
    for line_number, raw_line in enumerate(lines, start=1):
        raw_line = raw_line.rstrip('\n')
        line = strip_comment(raw_line)
        tokens = line.split()
        if not tokens:
            continue

        try:
            if line[0].isspace():
                if zone is not None:
                    zone.chain(ZoneEra.parse(tokens, raw_line))
                else:
                    logging.warning(
                        '%s:%d: Continuation line without Zone: %s',
                        source, line_number, raw_line)
                continue

            if zone is not None:
                session.zones.append(zone)
                zone = None

            zone = _parse_record(tokens, raw_line, session)
        except TzdbError as e:
            raise type(e)(f'{source}:{line_number}: {e}') from e

    if zone is not None:
        session.zones.append(zone)


def _parse_record(
    tokens: List[str],
    raw_line: str,
    session: CompilationSession,
) -> Optional[Zone]:
    """Dispatch a RULE, ZONE or LINK line. Returns the newly opened Zone for
    a ZONE line, None otherwise.
    """
    keyword = tokens[0].lower()
    if keyword == 'rule':
        rule = Rule.parse(tokens[1:], raw_line)
        rule_set = session.rule_sets.get(rule.name)
        if rule_set is None:
            session.rule_sets[rule.name] = RuleSet(rule)
        else:
            rule_set.add_rule(rule)
    elif keyword == 'zone':
        if len(tokens) < 2:
            raise TzdbSyntaxError(f'Missing zone name: {raw_line}')
        return Zone(tokens[1], ZoneEra.parse(tokens[2:], raw_line))
    elif keyword == 'link':
        if len(tokens) < 3:
            raise TzdbSyntaxError(f'Missing link target or name: {raw_line}')
        session.links.append(Link(target=tokens[1], alias=tokens[2]))
    else:
        logging.warning('Unknown line: %s', raw_line)
    return None


class Extractor:
    """Read the raw TZ Database files, either the standard ZONE_FILES under
    'input_dir', or explicitly given files.
    """

    # List of TZ files to process.
    ZONE_FILES = [
        'africa',
        'antarctica',
        'asia',
        'australasia',
        'backward',
        'etcetera',
        'europe',
        'northamerica',
        'southamerica',
    ]

    def __init__(
        self,
        input_dir: str = '',
        session: Optional[CompilationSession] = None,
    ):
        self.input_dir = input_dir
        self.session = session if session is not None else CompilationSession()

    def parse(self) -> None:
        """Parse every ZONE_FILES file which exists in the input_dir."""
        for file_name in self.ZONE_FILES:
            full_filename = os.path.join(self.input_dir, file_name)
            if not os.path.exists(full_filename):
                logging.warning('Skipping missing file %s', full_filename)
                continue
            self.parse_file(full_filename)

    def parse_file(self, file_name: str) -> None:
        logging.info('Processing %s', file_name)
        with open(file_name, 'r', encoding='utf-8') as f:
            parse_lines(f, self.session, file_name)
        self.session.files.append(file_name)

    def parse_text(self, text: str, source: str = '<string>') -> None:
        parse_lines(text.splitlines(), self.session, source)

    def get_data(self) -> CompilationSession:
        return self.session

    def print_summary(self) -> None:
        num_rules = sum(len(r) for r in self.session.rule_sets.values())
        num_eras = sum(len(z.eras) for z in self.session.zones)
        logging.info(
            'Summary: Rules: %d in %d rule sets; Zones: %d with %d eras; '
            'Links: %d',
            num_rules, len(self.session.rule_sets),
            len(self.session.zones), num_eras, len(self.session.links))

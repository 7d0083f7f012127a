# Copyright 2018 Brian T. Park
#
# MIT License

"""
Compiles the Zones of a CompilationSession into CompiledZones, resolves the
Links, and optionally writes the compiled zone files and the alias index:

* Each Zone is fed into a fresh ZoneBuilder, then verified. Zones with a
  missing RuleSet, or which fail verification, are removed.
* Links are resolved in 2 passes, so that a Link may refer to a Zone (or
  another Link) defined later in the files. Links which still cannot be
  resolved in the second pass are removed.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from dataclasses import field
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional

from tzdbtools.builder.zone_builder import CompiledZone
from tzdbtools.builder.zone_builder import DEFAULT_MAX_YEAR
from tzdbtools.builder.zone_builder import ZoneBuilder
from tzdbtools.data_types.errors import UnresolvedReferenceError
from tzdbtools.data_types.errors import VerificationFailure
from tzdbtools.data_types.tz_types import CommentsMap
from tzdbtools.data_types.tz_types import Link
from tzdbtools.data_types.tz_types import LinksMap
from tzdbtools.data_types.tz_types import add_comment
from tzdbtools.extractor.extractor import CompilationSession
from tzdbtools.extractor.extractor import Extractor
from tzdbtools.generator.zonefilegenerator import ZoneFileGenerator
from tzdbtools.generator.zonefilegenerator import check_output_dir
from tzdbtools.verifier.verifier import verify_zone

# Map of name -> CompiledZone, where name is a zone id or a link name.
ZonesMap = Dict[str, CompiledZone]


@dataclass
class CompileResult:
    """Result type of ZoneInfoCompiler.compile()."""

    zones_map: ZonesMap  # {name -> CompiledZone}, zones and links, sorted
    compiled_zones: ZonesMap  # {zoneId -> CompiledZone}, zones only, sorted
    links_map: LinksMap  # {linkName -> zoneId}
    removed_zones: CommentsMap = field(default_factory=dict)
    removed_links: CommentsMap = field(default_factory=dict)
    notable_zones: CommentsMap = field(default_factory=dict)


class ZoneInfoCompiler:
    """Compiles a CompilationSession. The compiler itself holds no state
    across compilations, so independent sessions can be compiled by the same
    instance.
    """
    def __init__(self, max_year: int = DEFAULT_MAX_YEAR):
        """
        Args:
            max_year: last year for which recurring rules are expanded
        """
        self.max_year = max_year

    def compile_files(
        self,
        sources: Iterable[str],
        output_dir: Optional[str] = None,
    ) -> CompileResult:
        """Parse the given TZ files into a new session, then compile it."""
        extractor = Extractor()
        for source in sources:
            extractor.parse_file(source)
        extractor.print_summary()
        return self.compile(extractor.get_data(), output_dir)

    def compile(
        self,
        session: CompilationSession,
        output_dir: Optional[str] = None,
    ) -> CompileResult:
        """Compile the zones and links of the session. If 'output_dir' is
        given, it must exist, and the compiled files are written into it.
        """
        if output_dir:
            check_output_dir(output_dir)

        result = CompileResult(zones_map={}, compiled_zones={}, links_map={})
        builders = self._compile_zones(session, result)
        self._resolve_links(session.links, result)

        if output_dir:
            logging.info('==== Writing compiled zone files')
            generator = ZoneFileGenerator(
                builders=builders,
                compiled_zones=result.compiled_zones,
                zones_map=result.zones_map,
                notable_zones=result.notable_zones,
            )
            generator.generate_files(output_dir)

        return result

    def _compile_zones(
        self,
        session: CompilationSession,
        result: CompileResult,
    ) -> Dict[str, ZoneBuilder]:
        """Build and verify each zone. Returns the builders of the zones which
        passed, for writing the compiled zone files.
        """
        compiled: ZonesMap = {}
        builders: Dict[str, ZoneBuilder] = {}
        for zone in session.zones:
            builder = ZoneBuilder(self.max_year)
            try:
                zone.add_to_builder(builder, session.rule_sets)
            except UnresolvedReferenceError as e:
                logging.error('%s', e)
                add_comment(result.removed_zones, zone.name, str(e))
                continue

            tz = builder.to_compiled_zone(zone.name)
            try:
                verify_zone(zone.name, tz)
            except VerificationFailure as e:
                logging.error('%s', e)
                add_comment(result.removed_zones, zone.name, str(e))
                continue

            if tz.zone_id in compiled:
                logging.warning('Duplicate zone %s replaced', tz.zone_id)
            compiled[tz.zone_id] = tz
            builders[tz.zone_id] = builder

        result.compiled_zones = OrderedDict(sorted(compiled.items()))
        result.zones_map = OrderedDict(result.compiled_zones)
        return builders

    def _resolve_links(self, links: List[Link], result: CompileResult) -> None:
        """Resolve the links in 2 sequential scans. Each scan reads a snapshot
        of the zones_map, and its new aliases are merged after the scan. Only
        the second scan reports links which cannot be resolved.
        """
        resolved: ZonesMap = dict(result.zones_map)
        for scan in range(2):
            snapshot: ZonesMap = dict(resolved)
            patch: ZonesMap = OrderedDict()
            for link in links:
                tz = snapshot.get(link.target)
                if tz is None:
                    if scan > 0:
                        logging.warning(
                            "Cannot find time zone '%s' to link alias '%s' to",
                            link.target, link.alias)
                        add_comment(
                            result.removed_links, link.alias,
                            f"Cannot find time zone '{link.target}'")
                    continue
                patch[link.alias] = tz
            resolved.update(patch)

        result.zones_map = OrderedDict(sorted(resolved.items()))
        result.links_map = OrderedDict(
            (link.alias, resolved[link.alias].zone_id)
            for link in sorted(links, key=lambda x: x.alias)
            if link.alias in resolved
        )

    def print_summary(self, result: CompileResult) -> None:
        logging.info(
            f"Summary: Zones: compiled={len(result.compiled_zones)}"
            f"; removed={len(result.removed_zones)}"
            f"; noted={len(result.notable_zones)}")
        logging.info(
            f"Summary: Links: resolved={len(result.links_map)}"
            f"; removed={len(result.removed_links)}")
        print_comments_map('Removed %s zones', result.removed_zones)
        print_comments_map('Removed %s links', result.removed_links)
        print_comments_map('Noted %s zones', result.notable_zones)


def print_comments_map(
    label: str,
    comments: CommentsMap,
    max_comments: int = 5,
) -> None:
    """Helper routine that prints the 'Removed' or 'Noted' zones or links
    along with the reason why it was removed or noted. Print up to a maximum
    of max_comments entries.
    """
    if len(comments) == 0:
        return

    logging.info(label, len(comments))

    # Print all lines if len() <= max_comments. Otherwise, print top half of
    # max_comments and bottom half of max_comments.
    sorted_comments = sorted(comments.items())
    num_items = len(sorted_comments)
    if num_items <= max_comments:
        for name, reasons in sorted_comments:
            logging.info(f'- {name} ({sorted(reasons)})')
        return

    limit = (max_comments - 1) // 2
    for name, reasons in sorted_comments[:limit]:
        logging.info(f'- {name} ({sorted(reasons)})')
    logging.info('- [...]')
    for name, reasons in sorted_comments[num_items - limit:]:
        logging.info(f'- {name} ({sorted(reasons)})')

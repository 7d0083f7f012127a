# Copyright 2018 Brian T. Park
#
# MIT License

import logging
import os
from typing import Dict

from tzdbtools.builder.zone_builder import CompiledZone
from tzdbtools.builder.zone_builder import ZoneBuilder
from tzdbtools.data_types.tz_types import ALIAS_INDEX_FILE
from tzdbtools.data_types.tz_types import CommentsMap
from tzdbtools.data_types.tz_types import LinksMap
from tzdbtools.data_types.tz_types import add_comment
from tzdbtools.generator.aliasindex import dedupe_case_insensitive
from tzdbtools.generator.aliasindex import encode_alias_index


def check_output_dir(output_dir: str) -> None:
    """The output directory must already exist."""
    if not os.path.exists(output_dir):
        raise FileNotFoundError(
            f"Destination directory doesn't exist: {output_dir}")
    if not os.path.isdir(output_dir):
        raise NotADirectoryError(
            f"Destination is not a directory: {output_dir}")


class ZoneFileGenerator:
    """Write one compiled zone file per zone, named by the zone id (e.g.
    'America/Chicago' is written to 'America/Chicago' under the output_dir),
    and the alias index file which maps every zone and link name to a zone id.
    """
    def __init__(
        self,
        builders: Dict[str, ZoneBuilder],
        compiled_zones: Dict[str, CompiledZone],
        zones_map: Dict[str, CompiledZone],
        notable_zones: CommentsMap,
    ):
        """
        Args:
            builders: {zoneId -> ZoneBuilder} of the verified zones
            compiled_zones: {zoneId -> CompiledZone} of the verified zones
            zones_map: {name -> CompiledZone} of zones and links
            notable_zones: receives read-back mismatches
        """
        self.builders = builders
        self.compiled_zones = compiled_zones
        self.zones_map = zones_map
        self.notable_zones = notable_zones

    def generate_files(self, output_dir: str) -> None:
        check_output_dir(output_dir)
        for zone_id, builder in self.builders.items():
            self._write_zone_file(output_dir, zone_id, builder)
        self._write_alias_index(output_dir)

    def _write_zone_file(
        self,
        output_dir: str,
        zone_id: str,
        builder: ZoneBuilder,
    ) -> None:
        """Write the zone, then read it back to make sure that it survives
        the round trip. A mismatch is reported, but is not fatal.
        """
        full_filename = os.path.join(output_dir, zone_id)
        parent_dir = os.path.dirname(full_filename)
        if parent_dir:
            os.makedirs(parent_dir, exist_ok=True)
        logging.debug('Writing %s', zone_id)
        with open(full_filename, 'wb') as output_file:
            builder.persist(output_file, zone_id)

        with open(full_filename, 'rb') as input_file:
            reloaded = ZoneBuilder.load_from(input_file, zone_id)
        if reloaded != self.compiled_zones[zone_id]:
            logging.error(
                "*e* Error in %s: Didn't read properly from file", zone_id)
            add_comment(
                self.notable_zones, zone_id,
                "Compiled zone file did not read back identically")

    def _write_alias_index(self, output_dir: str) -> None:
        mapping: LinksMap = {
            name: tz.zone_id for name, tz in self.zones_map.items()
        }
        mapping = dedupe_case_insensitive(mapping)
        full_filename = os.path.join(output_dir, ALIAS_INDEX_FILE)
        with open(full_filename, 'wb') as output_file:
            output_file.write(encode_alias_index(mapping))
        logging.info("Created %s", full_filename)

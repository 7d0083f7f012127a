# Copyright 2020 Brian T. Park
#
# MIT License

from typing import Any
from typing import List
import os
import logging
import json

from tzdbtools.compiler import CompileResult
from tzdbtools.data_types.tz_types import ZoneInfoDatabase
from tzdbtools.data_types.tz_types import sort_comments
from tzdbtools.extractor.extractor import CompilationSession


# Serializer for Set(). See
# https://researchdatapod.com/how-to-solve-python-typeerror-object-of-type-set-is-not-json-serializable/
def serialize_sets(obj: Any) -> List[Any]:
    if isinstance(obj, set):
        return sorted(obj)
    raise TypeError("Type %s is not serializable" % type(obj))


def create_zone_info_database(
    tz_version: str,
    max_year: int,
    session: CompilationSession,
    result: CompileResult,
) -> ZoneInfoDatabase:
    """Return the JSON-serializable summary of a compilation."""
    return {
        # Context data.
        'tz_version': tz_version,
        'tz_files': list(session.files),
        'max_year': max_year,
        'num_zones': len(result.compiled_zones),
        'num_links': len(result.links_map),
        'num_rule_sets': len(session.rule_sets),

        # Data from the compiler.
        'zone_ids': list(result.compiled_zones.keys()),
        'links_map': dict(result.links_map),
        'transition_counts': {
            zone_id: len(tz.transitions)
            for zone_id, tz in result.compiled_zones.items()
        },
        'removed_zones': sort_comments(result.removed_zones),
        'removed_links': sort_comments(result.removed_links),
        'notable_zones': sort_comments(result.notable_zones),
    }


class JsonGenerator:
    """Generate the JSON summary of a compilation (ZoneInfoDatabase) to the
    given 'json_file'.
    """
    def __init__(
        self,
        zidb: ZoneInfoDatabase,
        json_file: str
    ):
        self.zidb = zidb
        self.json_file = json_file

    def generate_files(self, output_dir: str) -> None:
        """Serialize ZoneInfoDatabase to the specified file. The 'json_file'
        may also be an absolute path, which ignores the output_dir.
        """
        full_filename = os.path.join(output_dir, self.json_file)
        with open(full_filename, 'w', encoding='utf-8') as output_file:
            json.dump(self.zidb, output_file, indent=2, default=serialize_sets)
            print(file=output_file)  # add terminating newline
        logging.info(
            "Created %s: %d zones, %d links",
            full_filename, self.zidb['num_zones'], self.zidb['num_links'])

#!/usr/bin/env python3
#
# Copyright 2018 Brian T. Park
#
# MIT License.

"""
Read the raw TZ Database files, either the standard files at the location
specified by `--input_dir`, or the files given on the command line, compile
every Zone into a transition history, and resolve every Link.

The compiler has a number of stages implemented by various helper classes:

* Extractor
    * Parse the raw TZDB files into RuleSets, Zones and Links, accumulated in
      a CompilationSession.
* ZoneInfoCompiler
    * Feed each Zone into a ZoneBuilder, verify the CompiledZone, and resolve
      the Links in 2 passes.
* Generator
    * ZoneFileGenerator writes one compiled zone file per zone, plus the
      'ZoneInfoMap' alias index, into `--output_dir`.
    * JsonGenerator writes a summary of the compilation into `--json_file`.

Flags:

* `--input_dir`
    * Location of the raw TZDB files (africa, asia, europe, ...).
* `sources`
    * Additional TZDB files, parsed after the files in `--input_dir`.
* `--output_dir`, `-d`
    * Existing directory where the compiled files are written. If empty, the
      zones are compiled and verified, but nothing is written.
* `--json_file`
    * If given, write a JSON summary of the compilation to this file
      (relative to `--output_dir` if that is given).
* `--max_year`
    * Last year for which recurring rules are expanded (default: 2100).
* `--tz_version`
    * Pass through flag to identify the TZDB version.

Examples:

    $ tzcompiler.py --input_dir ../tz --output_dir zoneinfo --tz_version 2023c
    $ tzcompiler.py -d zoneinfo northamerica europe
"""

import argparse
import logging
import sys

from tzdbtools.builder.zone_builder import DEFAULT_MAX_YEAR
from tzdbtools.compiler import ZoneInfoCompiler
from tzdbtools.extractor.extractor import Extractor
from tzdbtools.generator.jsongenerator import JsonGenerator
from tzdbtools.generator.jsongenerator import create_zone_info_database


def main() -> None:
    """
    Main driver for TZ Database compiler which parses the IANA TZ Database files
    and writes the compiled zone files to --output_dir.

    Usage:
        tzcompiler.py [flags...] [sources...]
    """
    # Configure command line flags.
    parser = argparse.ArgumentParser(description='Compile Zone Info.')

    # Extractor flags.
    parser.add_argument(
        '--input_dir',
        help='Location of the directory of standard TZ files',
        default='',
    )
    parser.add_argument(
        'sources',
        help='TZ files to compile, after those in --input_dir',
        nargs='*',
    )

    # Compiler flags.
    parser.add_argument(
        '--max_year',
        help=f'Last year of expanded rules (default: {DEFAULT_MAX_YEAR})',
        type=int,
        default=DEFAULT_MAX_YEAR,
    )

    # The tz_version does not affect any data processing. Its value is
    # copied into the JSON summary to describe the source of the data.
    parser.add_argument(
        '--tz_version',
        help='Version string of the TZ files',
        default='',
    )

    # Target location of the generated files.
    parser.add_argument(
        '--output_dir', '-d',
        help='Location of the output directory',
        default='',
    )
    parser.add_argument(
        '--json_file',
        help='Write a JSON summary of the compilation to this file',
        default='',
    )
    parser.add_argument(
        '--verbose',
        help='Log every compiled zone file',
        action='store_true',
    )

    # Parse the command line arguments
    args = parser.parse_args()
    if not args.input_dir and not args.sources:
        parser.print_usage()
        print('Either --input_dir or sources must be given')
        sys.exit(1)

    # Configure logging. This should normally be executed after the
    # parser.parse_args() because it allows us set the logging.level using a
    # flag.
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO)

    logging.info('======== TZ Compiler settings')
    logging.info(f'Input dir: {args.input_dir}')
    logging.info(f'Sources: {args.sources}')
    logging.info(f'Output dir: {args.output_dir}')
    logging.info(f'Max year: {args.max_year}')
    logging.info(f'TZ Version: {args.tz_version}')

    # Extract the TZ files
    logging.info('======== Extracting TZ Data files')
    extractor = Extractor(args.input_dir)
    if args.input_dir:
        extractor.parse()
    for source in args.sources:
        extractor.parse_file(source)
    extractor.print_summary()
    session = extractor.get_data()

    # Compile the zones and links, and write the compiled files.
    logging.info('======== Compiling Zones and Links')
    compiler = ZoneInfoCompiler(max_year=args.max_year)
    result = compiler.compile(session, args.output_dir or None)
    compiler.print_summary(result)

    if args.json_file:
        logging.info('==== Creating JSON summary file')
        zidb = create_zone_info_database(
            tz_version=args.tz_version,
            max_year=args.max_year,
            session=session,
            result=result,
        )
        generator = JsonGenerator(zidb=zidb, json_file=args.json_file)
        generator.generate_files(args.output_dir)

    logging.info('======== Finished processing TZ Data files.')


if __name__ == '__main__':
    main()

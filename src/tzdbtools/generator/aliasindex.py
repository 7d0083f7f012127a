# Copyright 2023 Brian T. Park
#
# MIT License
"""
Encoder and decoder of the alias index file, which maps every zone and link
name to the id of its compiled zone. Layout, all integers big endian:

    u16 pool_size
    pool_size x (u16 byte_length, UTF-8 bytes)
    u16 mapping_count
    mapping_count x (u16 alias_index, u16 target_index)

The string pool is in first-seen order, scanning the alias then the target of
each mapping in order.
"""

import logging
from collections import OrderedDict
from typing import Dict
from typing import List
from typing import Tuple

from tzdbtools.data_types.errors import CapacityError
from tzdbtools.data_types.errors import CorruptDataError
from tzdbtools.data_types.tz_types import LinksMap
from tzdbtools.data_types.tz_types import MAX_ALIAS_INDEX_ENTRIES
from tzdbtools.generator.byteutils import ByteReader
from tzdbtools.generator.byteutils import write_u16
from tzdbtools.generator.byteutils import write_utf


def add_string(strings: 'OrderedDict[str, int]', name: str) -> int:
    """Add the 'name' to the strings, and return its index into the string
    pool. If the 'name' already exists, then return the previous index.
    Raises CapacityError if the new index does not fit in a uint16 count.
    """
    index = strings.get(name)
    if index is None:
        index = len(strings)
        if index >= MAX_ALIAS_INDEX_ENTRIES:
            raise CapacityError(
                f"Too many time zone ids, string pool exceeds "
                f"{MAX_ALIAS_INDEX_ENTRIES} at '{name}'")
        strings[name] = index
    return index


def build_string_pool(mapping: LinksMap) -> 'OrderedDict[str, int]':
    """Return the {name -> index} string pool of the mapping."""
    strings: 'OrderedDict[str, int]' = OrderedDict()
    for alias, target in mapping.items():
        add_string(strings, alias)
        add_string(strings, target)
    return strings


def write_alias_index(data: bytearray, mapping: LinksMap) -> None:
    """Append the alias index of {aliasName -> targetName} to 'data'."""
    if len(mapping) > MAX_ALIAS_INDEX_ENTRIES:
        raise CapacityError(
            f"Too many mappings {len(mapping)}, exceeds "
            f"{MAX_ALIAS_INDEX_ENTRIES}")
    strings = build_string_pool(mapping)

    # Write the string pool, ordered by index.
    write_u16(data, len(strings))
    for name in strings.keys():
        write_utf(data, name)

    # Write the mappings.
    write_u16(data, len(mapping))
    for alias, target in mapping.items():
        write_u16(data, strings[alias])
        write_u16(data, strings[target])

    logging.info(
        "Alias index: %d strings; %d mappings", len(strings), len(mapping))


def dedupe_case_insensitive(mapping: LinksMap) -> LinksMap:
    """Sort the mapping ignoring case, and keep only one of the names which
    differ only by case. The name inserted last wins.
    """
    deduped: Dict[str, Tuple[str, str]] = {}
    for alias, target in mapping.items():
        key = alias.lower()
        if key in deduped:
            logging.warning(
                "Alias '%s' replaces '%s', differing only by case",
                alias, deduped[key][0])
        deduped[key] = (alias, target)
    return OrderedDict(item for _, item in sorted(deduped.items()))


def encode_alias_index(mapping: LinksMap) -> bytes:
    data = bytearray()
    write_alias_index(data, mapping)
    return bytes(data)


def read_alias_index(data: bytes) -> Dict[str, str]:
    """Decode the alias index into {aliasName -> targetName}. Raises
    CorruptDataError on truncated data, trailing bytes, or an out of range
    string index.
    """
    reader = ByteReader(data)

    # Read the string pool.
    size = reader.read_u16()
    pool: List[str] = [reader.read_utf() for _ in range(size)]

    # Read the mappings.
    mapping: Dict[str, str] = OrderedDict()
    count = reader.read_u16()
    for _ in range(count):
        alias_index = reader.read_u16()
        target_index = reader.read_u16()
        if alias_index >= size or target_index >= size:
            raise CorruptDataError(
                f"Corrupt zone info map: index ({alias_index}, "
                f"{target_index}) out of range of pool size {size}")
        mapping[pool[alias_index]] = pool[target_index]
    if not reader.at_end():
        raise CorruptDataError(
            f"Corrupt zone info map: {len(data) - reader.offset} trailing "
            "bytes")
    return mapping

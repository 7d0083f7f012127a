# Copyright 2023 Brian T. Park
#
# MIT License
"""
Utils for writing and reading integers and strings in byte arrays in big
endian (network) order. For negative integers, use 2's complement. Strings are
written as a uint16 byte length followed by the UTF-8 bytes.
"""

from tzdbtools.data_types.errors import CorruptDataError


def write_u16(data: bytearray, x: int) -> None:
    if x > 65535:
        raise ValueError(f"x={x} > 65535, cannot write into uint16")
    if x < 0:
        raise ValueError(f"x={x} < 0, cannot write into uint16")

    data.append((x >> 8) & 0xff)
    data.append(x & 0xff)


def write_u32(data: bytearray, x: int) -> None:
    if x > 4294967295:
        raise ValueError(f"x={x} > 4294967295, cannot write into uint32")
    if x < 0:
        raise ValueError(f"x={x} < 0, cannot write into uint32")

    data.extend(x.to_bytes(4, 'big'))


def write_i32(data: bytearray, x: int) -> None:
    if x > (1 << 31) - 1:
        raise ValueError(f"x={x} > {(1 << 31) - 1}, cannot write into int32")
    if x < -(1 << 31):
        raise ValueError(f"x={x} < {-(1 << 31)}, cannot write into int32")
    if x < 0:
        x += (1 << 32)
    write_u32(data, x)


def write_i64(data: bytearray, x: int) -> None:
    if x > (1 << 63) - 1:
        raise ValueError(f"x={x} > {(1 << 63) - 1}, cannot write into int64")
    if x < -(1 << 63):
        raise ValueError(f"x={x} < {-(1 << 63)}, cannot write into int64")
    data.extend(x.to_bytes(8, 'big', signed=True))


def write_utf(data: bytearray, s: str) -> None:
    """Write the uint16 length of the UTF-8 encoding of 's', then the
    encoding itself.
    """
    encoded = s.encode('utf-8')
    if len(encoded) > 65535:
        raise ValueError(
            f"len={len(encoded)} > 65535, cannot write string '{s[:20]}...'")
    write_u16(data, len(encoded))
    data.extend(encoded)


class ByteReader:
    """Sequential reader of the values written by the write_xxx() functions.
    Reading past the end of the data raises CorruptDataError.
    """
    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def read_bytes(self, n: int) -> bytes:
        end = self.offset + n
        if end > len(self.data):
            raise CorruptDataError(
                f"Unexpected end of data at offset {self.offset}, "
                f"needed {n} bytes, have {len(self.data) - self.offset}")
        b = self.data[self.offset:end]
        self.offset = end
        return b

    def read_u16(self) -> int:
        return int.from_bytes(self.read_bytes(2), 'big')

    def read_u32(self) -> int:
        return int.from_bytes(self.read_bytes(4), 'big')

    def read_i32(self) -> int:
        return int.from_bytes(self.read_bytes(4), 'big', signed=True)

    def read_i64(self) -> int:
        return int.from_bytes(self.read_bytes(8), 'big', signed=True)

    def read_utf(self) -> str:
        n = self.read_u16()
        try:
            return self.read_bytes(n).decode('utf-8')
        except UnicodeDecodeError as e:
            raise CorruptDataError(f"Invalid UTF-8 string: {e}") from None

    def at_end(self) -> bool:
        return self.offset >= len(self.data)

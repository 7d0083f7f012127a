import unittest
from tzdbtools.data_types.errors import CorruptDataError
from tzdbtools.generator.byteutils import ByteReader
from tzdbtools.generator.byteutils import write_i32
from tzdbtools.generator.byteutils import write_i64
from tzdbtools.generator.byteutils import write_u16
from tzdbtools.generator.byteutils import write_u32
from tzdbtools.generator.byteutils import write_utf


class TestByteUtils(unittest.TestCase):

    def test_write_invalid_integer_throws_exception(self) -> None:
        data = bytearray()
        with self.assertRaises(ValueError):
            write_u16(data, -1)
        with self.assertRaises(ValueError):
            write_u16(data, 100000)

        with self.assertRaises(ValueError):
            write_u32(data, -1)
        with self.assertRaises(ValueError):
            write_u32(data, 5 * 1000 * 1000 * 1000)

        with self.assertRaises(ValueError):
            write_i32(data, -3 * 1000 * 1000 * 1000)
        with self.assertRaises(ValueError):
            write_i32(data, 3 * 1000 * 1000 * 1000)

        with self.assertRaises(ValueError):
            write_i64(data, 1 << 63)

        with self.assertRaises(ValueError):
            write_utf(data, 'x' * 65536)

    def test_write_big_endian_integers(self) -> None:
        data = bytearray()
        write_u16(data, 1)
        write_u32(data, 0x01020304)
        self.assertEqual(b'\x00\x01\x01\x02\x03\x04', bytes(data))

    def test_write_negative_integers(self) -> None:
        data = bytearray()
        write_i32(data, -3)
        write_i64(data, -2)

        expected = (
            b'\xff\xff\xff\xfd'
            b'\xff\xff\xff\xff\xff\xff\xff\xfe'
        )
        self.assertEqual(expected, bytes(data))

    def test_write_utf(self) -> None:
        data = bytearray()
        write_utf(data, 'Europe/London')
        self.assertEqual(b'\x00\x0dEurope/London', bytes(data))

        data = bytearray()
        write_utf(data, '')
        self.assertEqual(b'\x00\x00', bytes(data))

    def test_byte_reader(self) -> None:
        data = bytearray()
        write_u16(data, 65535)
        write_u32(data, 4000000000)
        write_i32(data, -7200000)
        write_i64(data, -1234567890123)
        write_utf(data, 'Amérique')

        reader = ByteReader(bytes(data))
        self.assertEqual(65535, reader.read_u16())
        self.assertEqual(4000000000, reader.read_u32())
        self.assertEqual(-7200000, reader.read_i32())
        self.assertEqual(-1234567890123, reader.read_i64())
        self.assertEqual('Amérique', reader.read_utf())
        self.assertTrue(reader.at_end())

    def test_byte_reader_truncated(self) -> None:
        reader = ByteReader(b'\x00\x05abc')
        with self.assertRaises(CorruptDataError):
            reader.read_utf()

        reader = ByteReader(b'\x00')
        with self.assertRaises(CorruptDataError):
            reader.read_u16()

    def test_byte_reader_invalid_utf8(self) -> None:
        reader = ByteReader(b'\x00\x01\xff')
        with self.assertRaises(CorruptDataError):
            reader.read_utf()

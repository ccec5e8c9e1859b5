import struct
import unittest
from datetime import datetime

from dmap_db.errors import ArchiveError
from dmap_db.export import binary_records as records


class BinaryRecordsTestCase(unittest.TestCase):

    def test_local_header_layout(self):
        name = "a.jpg".encode("utf-8")
        data = records.local_file_header(name, 0x12345678, 10, 0x1111, 0x2222)

        self.assertEqual(records.LOCAL_HEADER_SIZE, 30)
        self.assertEqual(len(data), 30 + len(name))
        fields = struct.unpack("<IHHHHHIIIHH", data[:30])
        self.assertEqual(fields[0], records.LOCAL_FILE_HEADER_SIGNATURE)
        self.assertEqual(fields[1], 20)
        self.assertEqual(fields[2], records.FLAG_UTF8)
        self.assertEqual(fields[3], records.METHOD_STORED)
        self.assertEqual(fields[4:6], (0x1111, 0x2222))
        self.assertEqual(fields[6], 0x12345678)
        self.assertEqual(fields[7:9], (10, 10))
        self.assertEqual(fields[9:], (len(name), 0))
        self.assertEqual(data[30:], name)

    def test_central_header_layout(self):
        name = "메모.json".encode("utf-8")
        data = records.central_directory_header(name, 7, 3, 1, 2, offset=99)

        self.assertEqual(records.CENTRAL_HEADER_SIZE, 46)
        self.assertEqual(len(data), 46 + len(name))
        fields = struct.unpack("<IHHHHHHIIIHHHHHII", data[:46])
        self.assertEqual(fields[0], records.CENTRAL_DIRECTORY_SIGNATURE)
        self.assertEqual(fields[1:3], (20, 20))
        self.assertEqual(fields[3], 0x0800)
        self.assertEqual(fields[4], 0)
        self.assertEqual(fields[7], 7)
        self.assertEqual(fields[8:10], (3, 3))
        self.assertEqual(fields[10], len(name))
        self.assertEqual(fields[11:16], (0, 0, 0, 0, 0))
        self.assertEqual(fields[16], 99)

    def test_end_record_layout(self):
        data = records.end_of_central_directory(3, 150, 1000)

        self.assertEqual(len(data), records.END_RECORD_SIZE)
        self.assertEqual(len(data), 22)
        fields = struct.unpack("<IHHHHIIH", data)
        self.assertEqual(fields, (records.END_OF_CENTRAL_DIRECTORY_SIGNATURE, 0, 0, 3, 3, 150, 1000, 0))

    def test_dos_datetime_packing(self):
        dos_time, dos_date = records.to_dos_datetime(datetime(2024, 5, 17, 13, 45, 31))

        self.assertEqual(dos_time, (13 << 11) | (45 << 5) | 15)
        self.assertEqual(dos_date, ((2024 - 1980) << 9) | (5 << 5) | 17)

    def test_dos_year_clamps_to_1980(self):
        _, dos_date = records.to_dos_datetime(datetime(1975, 3, 4, 0, 0, 0))
        self.assertEqual(dos_date >> 9, 0)
        self.assertEqual((dos_date >> 5) & 0x0F, 3)
        self.assertEqual(dos_date & 0x1F, 4)

    def test_dos_year_past_2107_raises(self):
        _, dos_date = records.to_dos_datetime(datetime(2107, 12, 31, 23, 59, 58))
        self.assertEqual(dos_date >> 9, 127)
        with self.assertRaises(ArchiveError):
            records.to_dos_datetime(datetime(2108, 1, 1))

    def test_oversized_fields_raise(self):
        with self.assertRaises(ArchiveError):
            records.local_file_header(b"x", 0, 0x1_0000_0000, 0, 0)
        with self.assertRaises(ArchiveError):
            records.central_directory_header(b"x", 0, 1, 0, 0, offset=0x1_0000_0000)
        with self.assertRaises(ArchiveError):
            records.end_of_central_directory(0x1_0000, 0, 0)
        with self.assertRaises(ArchiveError):
            records.local_file_header(b"x" * 0x1_0000, 0, 0, 0, 0)


if __name__ == "__main__":
    unittest.main()

import io
import tempfile
import unittest
import zipfile
import zlib
from datetime import datetime
from pathlib import Path

from dmap_db.errors import ArchiveError
from dmap_db.export import ArchiveEntry, ZipStreamWriter, create_zip


class CreateZipTestCase(unittest.TestCase):

    def _open(self, data: bytes) -> zipfile.ZipFile:
        return zipfile.ZipFile(io.BytesIO(data))

    def test_entries_read_back_in_order(self):
        entries = [
            ArchiveEntry("site_metadata.json", b'{"a": 1}'),
            ArchiveEntry("one.jpg", b"\xff\xd8\xff" + b"1" * 500),
            ArchiveEntry("two.png", b"\x89PNG" + b"2" * 300),
        ]
        archive = create_zip(entries)

        with self._open(archive) as zf:
            self.assertIsNone(zf.testzip())
            infos = zf.infolist()
            self.assertEqual([i.filename for i in infos], [e.name for e in entries])
            for info, entry in zip(infos, entries):
                self.assertEqual(info.compress_type, zipfile.ZIP_STORED)
                self.assertEqual(info.CRC, zlib.crc32(entry.payload) & 0xFFFFFFFF)
                self.assertEqual(zf.read(info), entry.payload)

    def test_utf8_names(self):
        archive = create_zip([ArchiveEntry("현장_사진 1.jpg", b"data")])

        with self._open(archive) as zf:
            info = zf.infolist()[0]
            self.assertEqual(info.filename, "현장_사진 1.jpg")
            self.assertTrue(info.flag_bits & 0x0800)
            self.assertEqual(zf.read(info), b"data")

    def test_empty_archive_is_valid(self):
        archive = create_zip([])

        self.assertEqual(len(archive), 22)
        with self._open(archive) as zf:
            self.assertEqual(zf.namelist(), [])

    def test_modified_at_is_recorded(self):
        archive = create_zip([ArchiveEntry("a.txt", b"x", modified_at=datetime(2023, 8, 9, 10, 20, 30))])

        with self._open(archive) as zf:
            self.assertEqual(zf.infolist()[0].date_time, (2023, 8, 9, 10, 20, 30))

    def test_payload_kinds(self):
        archive = create_zip([
            ArchiveEntry("bytes.bin", bytearray(b"abc")),
            ArchiveEntry("file.bin", io.BytesIO(b"def")),
            ArchiveEntry("callable.bin", lambda: b"ghi"),
        ])

        with self._open(archive) as zf:
            self.assertEqual(zf.read("bytes.bin"), b"abc")
            self.assertEqual(zf.read("file.bin"), b"def")
            self.assertEqual(zf.read("callable.bin"), b"ghi")

    def test_duplicate_names_rejected(self):
        with self.assertRaises(ArchiveError):
            create_zip([ArchiveEntry("a.jpg", b"1"), ArchiveEntry("a.jpg", b"2")])

    def test_empty_name_rejected(self):
        with self.assertRaises(ArchiveError):
            create_zip([ArchiveEntry("", b"1")])

    def test_unreadable_payload_fails_whole_archive(self):
        def broken():
            raise OSError("disk gone")

        with self.assertRaises(ArchiveError) as ctx:
            create_zip([ArchiveEntry("ok.jpg", b"1"), ArchiveEntry("bad.jpg", broken)])
        self.assertIn("bad.jpg", str(ctx.exception))

    def test_timestamp_beyond_dos_range_rejected(self):
        with self.assertRaises(ArchiveError):
            create_zip([ArchiveEntry("a.txt", b"x", modified_at=datetime(2200, 1, 1))])

    def test_non_bytes_payload_rejected(self):
        with self.assertRaises(ArchiveError):
            create_zip([ArchiveEntry("a.txt", lambda: "text")])


class ZipStreamWriterTestCase(unittest.TestCase):

    def test_write_to_path(self):
        writer = ZipStreamWriter()
        writer.add("a.txt", b"alpha")
        writer.add("b.txt", b"beta")

        with tempfile.TemporaryDirectory() as tmp:
            path = writer.write_to_path(Path(tmp) / "out" / "x.zip")
            self.assertTrue(path.exists())
            with zipfile.ZipFile(path) as zf:
                self.assertEqual(zf.namelist(), ["a.txt", "b.txt"])

    def test_failed_build_leaves_no_file(self):
        writer = ZipStreamWriter([ArchiveEntry("a", b"1"), ArchiveEntry("a", b"2")])

        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "x.zip"
            with self.assertRaises(ArchiveError):
                writer.write_to_path(target)
            self.assertFalse(target.exists())

    def test_write_to_fileobj(self):
        writer = ZipStreamWriter([ArchiveEntry("a.txt", b"alpha", modified_at=datetime(2024, 1, 2, 3, 4, 6))])
        buf = io.BytesIO()
        writer.write_to_fileobj(buf)

        self.assertEqual(buf.getvalue(), writer.to_bytes())


if __name__ == "__main__":
    unittest.main()

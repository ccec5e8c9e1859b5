import unittest
import zlib

from dmap_db.hashing import crc32, crc32_update


class Crc32TestCase(unittest.TestCase):

    def test_empty_input(self):
        self.assertEqual(crc32(b""), 0)

    def test_check_value(self):
        self.assertEqual(crc32(b"123456789"), 0xCBF43926)

    def test_matches_zlib(self):
        samples = [
            b"a",
            b"hello world",
            bytes(range(256)),
            "사진 메모".encode("utf-8"),
            b"\x00" * 1000,
        ]
        for data in samples:
            with self.subTest(data=data[:16]):
                self.assertEqual(crc32(data), zlib.crc32(data) & 0xFFFFFFFF)

    def test_incremental_update(self):
        a, b = b"photo-", b"payload"
        self.assertEqual(crc32_update(crc32_update(0, a), b), crc32(a + b))

    def test_result_is_unsigned(self):
        value = crc32(b"\xff" * 64)
        self.assertGreaterEqual(value, 0)
        self.assertLessEqual(value, 0xFFFFFFFF)


if __name__ == "__main__":
    unittest.main()

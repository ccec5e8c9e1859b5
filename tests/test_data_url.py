import unittest

from dmap_db.errors import InvalidDataURLError
from dmap_db.utils import decode_data_url, encode_data_url


class DataURLTestCase(unittest.TestCase):

    def test_decode(self):
        data, mime = decode_data_url("data:image/jpeg;base64,/9j/4A==")
        self.assertEqual(data, b"\xff\xd8\xff\xe0")
        self.assertEqual(mime, "image/jpeg")

    def test_decode_without_mime(self):
        data, mime = decode_data_url("data:;base64,YWJj")
        self.assertEqual(data, b"abc")
        self.assertEqual(mime, "application/octet-stream")

    def test_decode_ignores_whitespace_in_payload(self):
        data, _ = decode_data_url("data:image/png;base64,YW\nJj")
        self.assertEqual(data, b"abc")

    def test_invalid(self):
        for url in ("no comma here", "data:image/png,abc", "data:image/png;base64,***", "http://x,y"):
            with self.subTest(url=url):
                with self.assertRaises(InvalidDataURLError):
                    decode_data_url(url)

    def test_invalid_is_value_error(self):
        with self.assertRaises(ValueError):
            decode_data_url("garbage")

    def test_encode(self):
        self.assertEqual(encode_data_url(b"abc", "text/plain"), "data:text/plain;base64,YWJj")
        self.assertEqual(encode_data_url(b"", ""), "data:application/octet-stream;base64,")


if __name__ == "__main__":
    unittest.main()

import io
import os
import shutil
import tempfile
import unittest
import zipfile

from fastapi.testclient import TestClient

from dmap_db import DmapDBConfig
from dmap_db.app import create_app
from dmap_db.core import create_dmap_db

PNG_URL = "data:image/png;base64,iVBORw=="


class AppTestCase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.export_dir = os.path.join(self.tmpdir, "exports")
        self.db = create_dmap_db(
            DmapDBConfig(
                db_uri=os.path.join(self.tmpdir, "dmap.db"),
                export_dir=self.export_dir,
                delivery_pause=0,
            )
        )
        self.client = TestClient(create_app(self.db))
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        self.db.close()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _post_photo(self, key="site.dxf", **body):
        payload = {"id": "p1", "fileName": "p1.png", "dataUrl": PNG_URL}
        payload.update(body)
        return self.client.post(f"/api/v1/projects/{key}/photos", json=payload)

    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "ok")

    def test_project_round_trip(self):
        self.assertEqual(self.client.get("/api/v1/projects/site.dxf").status_code, 404)

        resp = self.client.put(
            "/api/v1/projects/site.dxf",
            json={"texts": [{"text": "A"}], "lastModified": "2024-01-01T00:00:00Z"},
        )
        self.assertEqual(resp.status_code, 200)

        body = self.client.get("/api/v1/projects/site.dxf").json()
        self.assertEqual(body["texts"], [{"text": "A"}])
        self.assertEqual(body["lastModified"], "2024-01-01T00:00:00.000Z")

    def test_photo_lifecycle(self):
        resp = self._post_photo(memo="first", createdAt="2024-01-02T00:00:00.000Z")
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual(body["mimeType"], "image/png")
        self.assertEqual(body["bytes"], 4)
        self.assertNotIn("blob", body)

        listing = self.client.get("/api/v1/projects/site.dxf/photos").json()["photos"]
        self.assertEqual([p["id"] for p in listing], ["p1"])

        self.assertEqual(
            self.client.get("/api/v1/photos/p1/data_url").json()["dataUrl"],
            PNG_URL,
        )

        resp = self.client.patch("/api/v1/photos/p1/memo", json={"memo": "second"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["memo"], "second")
        self.assertEqual(
            self.client.patch("/api/v1/photos/ghost/memo", json={"memo": "x"}).status_code,
            404,
        )

        self.assertEqual(self.client.delete("/api/v1/photos/p1").status_code, 200)
        self.assertEqual(self.client.get("/api/v1/photos/p1").status_code, 404)
        self.assertEqual(self.client.delete("/api/v1/photos/p1").status_code, 200)

    def test_invalid_data_url(self):
        resp = self._post_photo(dataUrl="not a data url")
        self.assertEqual(resp.status_code, 400)

    def test_delete_by_date_range(self):
        self._post_photo(id="old", createdAt="2024-01-01T00:00:00.000Z")
        self._post_photo(id="new", createdAt="2024-03-01T00:00:00.000Z")

        resp = self.client.delete(
            "/api/v1/projects/site.dxf/photos",
            params={"start_ms": 1704067200000, "end_ms": 1704067200000},
        )
        self.assertEqual(resp.json(), {"deleted": ["old"]})

    def test_export_bundled(self):
        self._post_photo()

        resp = self.client.post("/api/v1/projects/site.dxf/export")
        self.assertEqual(resp.status_code, 200)
        result = resp.json()
        self.assertTrue(result["success"])
        self.assertEqual(result["type"], "bundled")
        self.assertEqual(result["fileName"], "site_export.zip")

        with open(os.path.join(self.export_dir, "site_export.zip"), "rb") as f:
            with zipfile.ZipFile(io.BytesIO(f.read())) as zf:
                self.assertEqual(zf.namelist(), ["site_metadata.json", "p1.png"])

    def test_export_sequential_and_bad_mode(self):
        self._post_photo()

        result = self.client.post(
            "/api/v1/projects/site.dxf/export", params={"mode": "sequential"}
        ).json()
        self.assertEqual(result["type"], "sequential")
        self.assertEqual(sorted(os.listdir(self.export_dir)), ["p1.png", "site_metadata.json"])

        resp = self.client.post("/api/v1/projects/site.dxf/export", params={"mode": "rar"})
        self.assertEqual(resp.status_code, 400)


if __name__ == "__main__":
    unittest.main()

import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep API tests deterministic and fast by default.
os.environ.setdefault("TOOLS_LLM_ENABLED", "0")

from fastapi.testclient import TestClient  # noqa: E402

from app.ai.factory import get_analysis_provider  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.core.rate_limit import limiter, route_limit  # noqa: E402
from app.main import app  # noqa: E402

CV_TEXT = (
    "EXPERIENCE\n"
    "Senior Software Engineer\n"
    "Jan 2020 - Present\n"
    "Built Python services on Docker for payments and reporting teams.\n"
    "- Reduced latency by 40%\n"
)
JOB_DESCRIPTION = "We need a Python engineer with Docker and Kubernetes experience. Python and Docker daily."


class CvApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        os.environ["TOOLS_LLM_ENABLED"] = "0"
        get_analysis_provider.cache_clear()
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls):
        get_analysis_provider.cache_clear()

    def setUp(self):
        limiter.reset()

    def _upload(self, filename="cv.txt", content=CV_TEXT.encode("utf-8"), content_type="text/plain"):
        return self.client.post("/v1/cv/upload", files={"file": (filename, content, content_type)})

    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_routes_are_registered(self):
        paths = {route.path for route in app.routes}
        for path in (
            "/v1/cv/preview",
            "/v1/cv/upload",
            "/v1/analyze",
            "/v1/optimize",
            "/v1/match",
            "/v1/highlight",
            "/v1/render",
            "/v1/cv/download/{optimized_id}",
        ):
            self.assertIn(path, paths)

    def test_preview_text_file(self):
        response = self.client.post(
            "/v1/cv/preview",
            files={"file": ("cv.txt", CV_TEXT.encode("utf-8"), "text/plain")},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["is_valid"])
        self.assertIsNone(body["error_message"])
        self.assertIn("Senior Software Engineer", body["extracted_text"])

    def test_preview_unreadable_pdf_returns_guidance(self):
        response = self.client.post(
            "/v1/cv/preview",
            files={"file": ("cv.pdf", b"%PDF-1.4\n%%EOF", "application/pdf")},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertFalse(body["is_valid"])
        self.assertIn("scanned images", body["error_message"])

    def test_unsupported_file_type(self):
        response = self.client.post(
            "/v1/cv/preview",
            files={"file": ("photo.png", b"\x89PNG\r\n\x1a\n", "image/png")},
        )
        self.assertEqual(response.status_code, 400)

    def test_signature_mismatch(self):
        response = self.client.post(
            "/v1/cv/preview",
            files={"file": ("cv.pdf", b"plain text pretending", "application/pdf")},
        )
        self.assertEqual(response.status_code, 400)

    def test_upload_too_large(self):
        with patch("app.api.v1.cv.MAX_UPLOAD_BYTES", 10):
            response = self._upload()
        self.assertEqual(response.status_code, 413)

    def test_upload_returns_truncated_preview(self):
        long_text = CV_TEXT + ("Additional achievements across platform teams. " * 10)
        response = self._upload(content=long_text.encode("utf-8"))
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body["id"])
        self.assertEqual(body["file_name"], "cv.txt")
        self.assertTrue(body["extracted_text"].endswith("..."))
        self.assertEqual(len(body["extracted_text"]), 203)

    def test_analyze_optimize_download_flow(self):
        cv_id = self._upload().json()["id"]

        analyze = self.client.post("/v1/analyze", json={"job_description": JOB_DESCRIPTION, "cv_id": cv_id})
        self.assertEqual(analyze.status_code, 200)
        analysis = analyze.json()
        self.assertIn("python", analysis["keywords"])
        self.assertEqual(analysis["content"], JOB_DESCRIPTION)

        payload = {"cv_id": cv_id, "job_description_id": analysis["id"]}
        created = self.client.post("/v1/optimize", json=payload)
        self.assertEqual(created.status_code, 201)
        optimized = created.json()
        self.assertIn("python", optimized["matching_keywords"])
        self.assertIn("kubernetes", optimized["missing_keywords"])
        self.assertIn('<div class="resume-content">', optimized["optimized_content"])
        self.assertEqual(
            len(optimized["matching_keywords"]) + len(optimized["missing_keywords"]),
            len(analysis["keywords"]),
        )

        reused = self.client.post("/v1/optimize", json=payload)
        self.assertEqual(reused.status_code, 200)
        self.assertEqual(reused.json()["id"], optimized["id"])
        self.assertEqual(reused.json()["match_rate"], optimized["match_rate"])

        download = self.client.get(f"/v1/cv/download/{optimized['id']}", params={"format": "latex"})
        self.assertEqual(download.status_code, 200)
        self.assertEqual(download.headers["content-type"], "application/pdf")
        self.assertIn("optimized-cv-", download.headers["content-disposition"])
        self.assertTrue(download.content.startswith(b"%PDF"))

    def test_optimize_missing_records(self):
        response = self.client.post("/v1/optimize", json={"cv_id": "missing", "job_description_id": "missing"})
        self.assertEqual(response.status_code, 404)

    def test_download_missing_record(self):
        response = self.client.get("/v1/cv/download/missing")
        self.assertEqual(response.status_code, 404)

    def test_match_endpoint(self):
        response = self.client.post(
            "/v1/match",
            json={
                "keywords": ["Go", "Kubernetes", "Rust", "PostgreSQL"],
                "corpus_text": "Experienced Go engineer with Kubernetes and PostgreSQL background",
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"matching": ["Go", "Kubernetes", "PostgreSQL"], "missing": ["Rust"], "match_rate": 75},
        )

    def test_highlight_endpoint(self):
        response = self.client.post("/v1/highlight", json={"text": "Java and JavaScript", "keywords": ["Java"]})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["text"], '<span class="bg-green-100 px-1">Java</span> and JavaScript')

    def test_render_endpoint(self):
        response = self.client.post(
            "/v1/render",
            params={"format": "latex"},
            json={"markup": "<h2>Skills</h2><ul><li>Python</li></ul>"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.content.startswith(b"%PDF"))

        invalid = self.client.post("/v1/render", params={"format": "docx"}, json={"markup": ""})
        self.assertEqual(invalid.status_code, 422)

    def test_unreadable_cv_scores_no_keywords(self):
        upload = self._upload(filename="cv.pdf", content=b"%PDF-1.4\n%%EOF", content_type="application/pdf")
        self.assertEqual(upload.status_code, 201)
        self.assertFalse(upload.json()["is_valid"])

        analyze = self.client.post(
            "/v1/analyze",
            json={"job_description": "PDF text fonts Kubernetes", "cv_id": upload.json()["id"]},
        )
        keywords = analyze.json()["keywords"]
        self.assertIn("fonts", keywords)

        response = self.client.post(
            "/v1/optimize",
            json={"cv_id": upload.json()["id"], "job_description_id": analyze.json()["id"]},
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["match_rate"], 0)
        self.assertEqual(body["matching_keywords"], [])
        self.assertEqual(body["missing_keywords"], keywords)
        self.assertIn("Error Processing Your Resume", body["optimized_content"])

    def test_match_endpoint_blank_keyword_is_missing(self):
        response = self.client.post("/v1/match", json={"keywords": ["  ", "Rust"], "corpus_text": "Go developer"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"matching": [], "missing": ["  ", "Rust"], "match_rate": 0})

    @unittest.skipUnless(settings.rate_limit_enabled, "rate limiting disabled")
    def test_route_rate_limit_returns_429(self):
        allowed = int(route_limit("highlight").split("/")[0])
        payload = {"text": "Go", "keywords": ["Go"]}
        statuses = [self.client.post("/v1/highlight", json=payload).status_code for _ in range(allowed + 1)]
        self.assertEqual(statuses[:-1], [200] * allowed)
        self.assertEqual(statuses[-1], 429)

        other_route = self.client.post("/v1/match", json={"keywords": ["Go"], "corpus_text": "Go"})
        self.assertEqual(other_route.status_code, 200)


if __name__ == "__main__":
    unittest.main()

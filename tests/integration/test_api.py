"""
Integration tests for API endpoints (api/main.py)
"""
import base64
import inspect
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

from api.main import app
from config.settings import settings

BASE = "/api/templates"


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


@pytest.fixture
def invalid_document():
    return {
        "meta": {"title": "Broken"},
        "blocks": [{
            "id": "p1",
            "type": "paragraph",
            "text": "Some paragraph text",
            "annotations": [{"type": "highlight", "span": [10, 5]}],
        }],
    }


class TestAPIBasics:

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"]
        assert set(data["imageCache"]) >= {"hits", "misses", "size"}

    def test_themes(self, client):
        response = client.get(f"{BASE}/themes")
        assert response.status_code == 200
        data = response.json()
        ids = [t["id"] for t in data["themes"]]
        assert "modern-card" in ids and "classic-report" in ids
        assert data["total"] == len(ids)


class TestValidateEndpoint:

    def test_valid_document(self, client, sample_document):
        response = client.post(f"{BASE}/validate", json={"document": sample_document})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["violations"] == []
        assert data["metadata"]["totalBlocks"] == 10
        assert data["metadata"]["pageCount"] >= 1
        assert data["metadata"]["tocEntries"] == 2

    def test_invalid_document(self, client, invalid_document):
        response = client.post(f"{BASE}/validate", json={"document": invalid_document})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert data["violations"][0]["path"] == "blocks[0].annotations[0].span"

    def test_invalid_layout_config(self, client, sample_document):
        response = client.post(
            f"{BASE}/validate",
            json={"document": sample_document, "layoutConfig": {"lineHeight": 0}},
        )
        assert response.status_code == 422


class TestRenderEndpoints:

    def test_render_pdf(self, client, sample_document):
        response = client.post(
            f"{BASE}/render",
            json={"document": sample_document, "format": "pdf", "colorScheme": "green"},
        )
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="Photosynthesis_Notes.pdf"' in response.headers["content-disposition"]
        assert int(response.headers["x-render-warnings"]) > 0
        assert response.headers["x-document-checksum"]
        assert response.content.startswith(b"%PDF-")

    def test_render_docx(self, client, sample_document):
        response = client.post(f"{BASE}/render", json={"document": sample_document, "format": "flow-document"})
        assert response.status_code == 200
        assert response.content[:2] == b"PK"
        assert response.headers["content-disposition"].endswith('.docx"')

    def test_preview_is_markup(self, client, sample_document):
        response = client.post(f"{BASE}/preview", json={"document": sample_document, "format": "pdf"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "<title>Photosynthesis Notes</title>" in response.text

    def test_invalid_document_returns_violations(self, client, invalid_document):
        response = client.post(f"{BASE}/render", json={"document": invalid_document})
        assert response.status_code == 422
        data = response.json()
        assert data["violations"][0]["code"] == "span"

    def test_unknown_format(self, client, sample_document):
        response = client.post(f"{BASE}/render", json={"document": sample_document, "format": "rtf"})
        assert response.status_code == 422
        assert "unknown format" in response.json()["error"]

    def test_too_many_blocks(self, client, sample_document, monkeypatch):
        monkeypatch.setattr(settings, "max_document_blocks", 3)
        response = client.post(f"{BASE}/render", json={"document": sample_document})
        assert response.status_code == 413


class TestExportEndpoint:

    def test_export_all_formats(self, client, sample_document):
        response = client.post(f"{BASE}/export", json={"document": sample_document})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["formats"] == ["print-paginated", "markup", "flow-document"]
        assert base64.b64decode(data["data"]["print-paginated"]).startswith(b"%PDF-")
        assert base64.b64decode(data["data"]["markup"]).startswith(b"<!DOCTYPE html>")
        assert "flow-document" in data["warnings"]

    def test_export_deduplicates_aliases(self, client, minimal_document):
        response = client.post(
            f"{BASE}/export",
            json={"document": minimal_document, "formats": ["html", "markup"]},
        )
        assert response.status_code == 200
        assert response.json()["formats"] == ["markup"]

    def test_export_unknown_format(self, client, minimal_document):
        response = client.post(f"{BASE}/export", json={"document": minimal_document, "formats": ["odt"]})
        assert response.status_code == 422

    def test_export_invalid_document(self, client, invalid_document):
        response = client.post(f"{BASE}/export", json={"document": invalid_document})
        assert response.status_code == 422
        assert response.json()["violations"]


@pytest.mark.parametrize("endpoint", ["preview", "render", "export", "validate"])
def test_rendering_endpoints_run_in_threadpool(endpoint):
    from api import render_router

    assert not inspect.iscoroutinefunction(getattr(render_router, endpoint))


def test_concurrent_renders(client, sample_document):
    with ThreadPoolExecutor(max_workers=4) as pool:
        responses = list(pool.map(
            lambda fmt: client.post(f"{BASE}/render", json={"document": sample_document, "format": fmt}),
            ["pdf", "html", "docx", "pdf"],
        ))

    assert [r.status_code for r in responses] == [200, 200, 200, 200]
    assert responses[0].content == responses[3].content


def test_backend_failure_is_500(client, sample_document, monkeypatch):
    from core.layout import DocxRenderer

    def broken(self, doc, ctx, block, box, style):
        raise RuntimeError("table style missing")

    monkeypatch.setattr(DocxRenderer, "_render_table", broken)
    response = client.post(f"{BASE}/render", json={"document": sample_document, "format": "docx"})

    assert response.status_code == 500
    data = response.json()
    assert data["block_id"] == "t1"
    assert "table style missing" in data["error"]

"""Tests for scenekit.services.export_jobs — ExportJobClient, ExportStatus."""

import pytest
import requests
from unittest.mock import patch, MagicMock

from scenekit.core.errors import NotFound, ValidationError
from scenekit.services.export_jobs import ExportJobClient, ExportStatus


@pytest.fixture
def client():
    return ExportJobClient("https://render.example.com/api/", api_key="secret", timeout=12)


def _response(payload, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


# ── ExportStatus ────────────────────────────────────────────────────────

class TestExportStatus:
    def test_defaults(self):
        s = ExportStatus(status="processing")
        assert s.progress == 0
        assert s.download_url is None
        assert not s.finished

    def test_finished(self):
        assert ExportStatus(status="completed", progress=100).finished
        assert ExportStatus(status="failed").finished


# ── enqueue_export_job ──────────────────────────────────────────────────

class TestEnqueue:
    def test_requires_url(self):
        with pytest.raises(ValidationError):
            ExportJobClient("")

    @patch("scenekit.services.export_jobs.requests.post")
    def test_posts_job(self, mock_post, client):
        mock_post.return_value = _response({"id": "job_42", "format": "mp4", "quality": "high",
                                            "status": "processing"})
        job_id = client.enqueue_export_job({"scenes": []}, {"e1": {"content": "Hi"}}, "mp4", "high")

        assert job_id == "job_42"
        args, kwargs = mock_post.call_args
        assert args[0] == "https://render.example.com/api/exports"
        assert kwargs["json"]["customizations"] == {"e1": {"content": "Hi"}}
        assert kwargs["json"]["format"] == "mp4"
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["timeout"] == 12

    @patch("scenekit.services.export_jobs.requests.post")
    def test_bad_format(self, mock_post, client):
        with pytest.raises(ValidationError):
            client.enqueue_export_job({}, format="gif")
        mock_post.assert_not_called()

    @patch("scenekit.services.export_jobs.requests.post")
    def test_bad_quality(self, mock_post, client):
        with pytest.raises(ValidationError):
            client.enqueue_export_job({}, quality="ultra")
        mock_post.assert_not_called()

    @patch("scenekit.services.export_jobs.requests.post")
    def test_bad_customization(self, mock_post, client):
        with pytest.raises(ValidationError):
            client.enqueue_export_job({}, {"e1": {"fontSize": 1000}})
        mock_post.assert_not_called()

    @patch("scenekit.services.export_jobs.requests.post")
    def test_http_error_propagates(self, mock_post, client):
        resp = _response({}, status_code=500)
        resp.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        mock_post.return_value = resp
        with pytest.raises(requests.HTTPError):
            client.enqueue_export_job({})

    @patch("scenekit.services.export_jobs.requests.post")
    def test_no_api_key_no_auth_header(self, mock_post):
        mock_post.return_value = _response({"id": 7})
        job_id = ExportJobClient("https://render.example.com").enqueue_export_job({})
        assert job_id == "7"
        assert "Authorization" not in mock_post.call_args.kwargs["headers"]


# ── get_export_status ───────────────────────────────────────────────────

class TestStatus:
    @patch("scenekit.services.export_jobs.requests.get")
    def test_parse(self, mock_get, client):
        mock_get.return_value = _response({"status": "completed", "progress": 100,
                                           "download_url": "https://dl.example.com/v.mp4"})
        status = client.get_export_status("job_42")
        assert status.status == "completed"
        assert status.progress == 100
        assert status.download_url == "https://dl.example.com/v.mp4"
        assert mock_get.call_args[0][0] == "https://render.example.com/api/exports/job_42"

    @patch("scenekit.services.export_jobs.requests.get")
    def test_in_progress(self, mock_get, client):
        mock_get.return_value = _response({"status": "processing", "progress": 45})
        status = client.get_export_status("job_1")
        assert status.progress == 45
        assert status.download_url is None
        assert not status.finished

    @patch("scenekit.services.export_jobs.requests.get")
    def test_unknown_job(self, mock_get, client):
        mock_get.return_value = _response({}, status_code=404)
        with pytest.raises(NotFound):
            client.get_export_status("ghost")

"""HTTP client for the external video export (render job) service."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from scenekit.core.customization import validate_customizations
from scenekit.core.errors import NotFound, ValidationError

logger = logging.getLogger("SceneKit.services.export_jobs")

EXPORT_FORMATS = ("mp4", "webm")
EXPORT_QUALITIES = ("low", "medium", "high")


@dataclass
class ExportStatus:
    """Progress of an export job as reported by the service."""
    status: str
    progress: int = 0
    download_url: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.status in ("completed", "failed")


class ExportJobClient:
    """Submits templates for rendering and polls job status."""

    def __init__(self, base_url: str, api_key: str = "", timeout: int = 30):
        if not base_url:
            raise ValidationError("Export service URL is not configured")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def enqueue_export_job(self, blob: dict, customizations: Optional[dict] = None,
                           format: str = "mp4", quality: str = "high") -> str:
        """Queue a render of ``blob`` with its customizations. Returns the job id."""
        if format not in EXPORT_FORMATS:
            raise ValidationError(f"Export format must be one of {', '.join(EXPORT_FORMATS)}")
        if quality not in EXPORT_QUALITIES:
            raise ValidationError(f"Export quality must be one of {', '.join(EXPORT_QUALITIES)}")
        cleaned = validate_customizations(customizations or {})

        payload: dict[str, Any] = {
            "template": blob,
            "customizations": cleaned,
            "format": format,
            "quality": quality,
        }
        resp = requests.post(
            f"{self.base_url}/exports",
            json=payload,
            headers=self._headers(),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        job_id = str(data["id"])
        logger.info(f"Queued export job {job_id} ({format}, {quality})")
        return job_id

    def get_export_status(self, job_id: str) -> ExportStatus:
        resp = requests.get(
            f"{self.base_url}/exports/{job_id}",
            headers=self._headers(),
            timeout=self.timeout,
        )
        if resp.status_code == 404:
            raise NotFound(f"Export job '{job_id}' not found")
        resp.raise_for_status()
        data = resp.json()
        return ExportStatus(
            status=data.get("status", "processing"),
            progress=int(data.get("progress", 0)),
            download_url=data.get("download_url"),
        )

"""Project workspace: template store and asset registry."""

import json
import logging
import re
from pathlib import Path
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from .errors import NotFound, ValidationError

logger = logging.getLogger("SceneKit.core.workspace")

_PASSTHROUGH_SCHEMES = ("http://", "https://", "data:")
_TEMPLATE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class AssetMetadata(BaseModel):
    """Metadata for a registered project asset."""
    asset_id: str
    filename: str
    type: str  # "image", "audio", "video", "lottie"
    source: str = ""  # e.g. "upload", "stock", "local"
    dimensions: Optional[tuple[int, int]] = None


class Workspace(BaseModel):
    """Manages a project directory holding templates and an asset manifest."""
    project_name: str
    root_path: Path
    assets: dict[str, AssetMetadata] = Field(default_factory=dict)
    asset_base_url: str = ""

    model_config = {"arbitrary_types_allowed": True}

    @property
    def templates_dir(self) -> Path:
        return self.root_path / "templates"

    @property
    def assets_dir(self) -> Path:
        return self.root_path / "assets"

    @property
    def images_dir(self) -> Path:
        return self.assets_dir / "images"

    @property
    def audio_dir(self) -> Path:
        return self.assets_dir / "audio"

    @property
    def video_dir(self) -> Path:
        return self.assets_dir / "video"

    @property
    def manifest_path(self) -> Path:
        return self.root_path / "project.json"

    def initialize(self) -> "Workspace":
        """Create the project directory structure."""
        for d in [self.templates_dir, self.images_dir, self.audio_dir, self.video_dir]:
            d.mkdir(parents=True, exist_ok=True)
        self.save_manifest()
        logger.info(f"Initialized workspace '{self.project_name}' at {self.root_path}")
        return self

    def save_manifest(self):
        """Save the project manifest to disk."""
        data = {
            "project_name": self.project_name,
            "assets": {k: v.model_dump() for k, v in self.assets.items()},
        }
        self.manifest_path.write_text(json.dumps(data, indent=2, default=str))

    @classmethod
    def load(cls, project_path: Path, asset_base_url: str = "") -> "Workspace":
        """Load a workspace from an existing project directory."""
        manifest_path = project_path / "project.json"
        if not manifest_path.exists():
            raise NotFound(f"No project.json found in {project_path}")

        data = json.loads(manifest_path.read_text())
        assets = {
            k: AssetMetadata(**v) for k, v in data.get("assets", {}).items()
        }
        return cls(
            project_name=data["project_name"],
            root_path=project_path,
            assets=assets,
            asset_base_url=asset_base_url,
        )

    # ── Templates ───────────────────────────────────────────────────────

    def _template_path(self, template_id: str) -> Path:
        if not _TEMPLATE_ID.match(template_id or ""):
            raise ValidationError(f"Invalid template id '{template_id}'")
        return self.templates_dir / f"{template_id}.json"

    def save_template(self, blob: dict, template_id: Optional[str] = None) -> str:
        """Store an exported template blob. Returns its id (new if not given)."""
        template_id = template_id or f"tpl-{uuid4().hex[:12]}"
        path = self._template_path(template_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(blob, indent=2, ensure_ascii=False))
        logger.info(f"Saved template {template_id} to {path}")
        return template_id

    def load_template(self, template_id: str) -> dict:
        path = self._template_path(template_id)
        if not path.exists():
            raise NotFound(f"Template '{template_id}' not found in {self.templates_dir}")
        return json.loads(path.read_text())

    def list_templates(self) -> list[str]:
        if not self.templates_dir.exists():
            return []
        return sorted(p.stem for p in self.templates_dir.glob("*.json"))

    def delete_template(self, template_id: str):
        path = self._template_path(template_id)
        if not path.exists():
            raise NotFound(f"Template '{template_id}' not found in {self.templates_dir}")
        path.unlink()

    # ── Assets ──────────────────────────────────────────────────────────

    def register_asset(self, asset: AssetMetadata) -> AssetMetadata:
        """Register an asset in the workspace manifest."""
        self.assets[asset.asset_id] = asset
        self.save_manifest()
        return asset

    def get_asset_path(self, asset_id: str) -> Optional[Path]:
        """Get the full path to an asset file."""
        asset = self.assets.get(asset_id)
        if not asset:
            return None
        type_dirs = {
            "image": self.images_dir,
            "audio": self.audio_dir,
            "video": self.video_dir,
        }
        base_dir = type_dirs.get(asset.type, self.assets_dir)
        return base_dir / asset.filename

    def resolve_asset_url(self, ref: str) -> Optional[str]:
        """Turn an element ``src`` into a loadable URL, or None if unknown.

        Absolute http(s) and data URLs pass through; registered asset ids map
        to ``asset_base_url`` when set, else to a file:// URI.
        """
        if not ref:
            return None
        if ref.startswith(_PASSTHROUGH_SCHEMES):
            return ref
        path = self.get_asset_path(ref)
        if path is None:
            return None
        if self.asset_base_url:
            relative = path.relative_to(self.root_path).as_posix()
            return f"{self.asset_base_url.rstrip('/')}/{relative}"
        return path.resolve().as_uri()

"""
Configuration module for campreview.

Holds the capture request, snapshot policy and overlay styling, with support
for environment-based overrides and YAML config files.
"""

import os
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

import cv2
import yaml

from campreview.utils.logging_config import setup_logger

logger = setup_logger(__name__)

DEFAULT_WIDTH = 1280
DEFAULT_HEIGHT = 720


class Backend(Enum):
    """Capture backends selectable from the command line."""

    ANY = "any"
    MSMF = "msmf"
    DSHOW = "dshow"
    FFMPEG = "ffmpeg"
    V4L2 = "v4l2"
    GSTREAMER = "gstreamer"

    @classmethod
    def from_name(cls, name: str) -> Optional["Backend"]:
        """Look up a backend by (case-insensitive) name, None if unknown."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(b.value for b in cls)

    @property
    def api_preference(self) -> int:
        """OpenCV ``CAP_*`` constant; CAP_ANY when this build lacks the API."""
        return getattr(cv2, f"CAP_{self.name}", cv2.CAP_ANY)


class SnapshotNaming(Enum):
    """How saved frames are named."""

    TIMESTAMP = "timestamp"  # frame-YYYYMMDD_HHMMSS.png, never overwrites
    FIXED = "fixed"  # frame.png, overwritten on every save


def _backend_from_env() -> Backend:
    name = os.getenv("CAMPREVIEW_BACKEND", "any")
    backend = Backend.from_name(name)
    if backend is None:
        logger.warning(f"Unknown backend '{name}' in CAMPREVIEW_BACKEND, falling back to 'any'")
        return Backend.ANY
    return backend


@dataclass
class OverlayConfig:
    """On-frame status text styling."""

    origin: Tuple[int, int] = (10, 30)
    font_scale: float = 0.8
    color: Tuple[int, int, int] = (0, 255, 0)  # BGR
    thickness: int = 2
    fps_decimals: int = 1


@dataclass
class SnapshotConfig:
    """Where and how snapshots are written."""

    directory: Path = field(default_factory=Path.cwd)
    naming: SnapshotNaming = SnapshotNaming.TIMESTAMP
    prefix: str = "frame"
    extension: str = ".png"

    def __post_init__(self):
        self.directory = Path(self.directory)
        if not isinstance(self.naming, SnapshotNaming):
            self.naming = SnapshotNaming(str(self.naming).lower())
        if not self.extension.startswith("."):
            self.extension = f".{self.extension}"

    @classmethod
    def from_env(cls) -> "SnapshotConfig":
        """Create snapshot config from environment variables."""
        return cls(
            directory=Path(os.getenv("CAMPREVIEW_SNAPSHOT_DIR", ".")),
            naming=SnapshotNaming(os.getenv("CAMPREVIEW_SNAPSHOT_NAMING", "timestamp").lower()),
        )


@dataclass
class PreviewConfig:
    """Main preview configuration container."""

    cam: Optional[int] = None
    source: Optional[str] = None
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    backend: Backend = Backend.ANY
    window_name: str = "Preview"
    max_frames: Optional[int] = None
    verbose: bool = False

    snapshot: SnapshotConfig = field(default_factory=SnapshotConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)

    def __post_init__(self):
        if not isinstance(self.backend, Backend):
            backend = Backend.from_name(str(self.backend))
            if backend is None:
                raise ValueError(
                    f"Unknown backend '{self.backend}' (expected one of {', '.join(Backend.names())})"
                )
            self.backend = backend
        if isinstance(self.snapshot, dict):
            self.snapshot = SnapshotConfig(**self.snapshot)
        if isinstance(self.overlay, dict):
            overlay = dict(self.overlay)
            for key in ("origin", "color"):
                if key in overlay:
                    overlay[key] = tuple(overlay[key])
            self.overlay = OverlayConfig(**overlay)
        for name in ("width", "height"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

    @property
    def capture_target(self):
        """Camera index or source string to open, in priority order."""
        if self.cam is not None and self.cam >= 0:
            return self.cam
        if self.source:
            return self.source
        return 0

    @classmethod
    def from_yaml(cls, config_path: Path) -> "PreviewConfig":
        """Load configuration from YAML file."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            config_dict = yaml.safe_load(f) or {}

        if not isinstance(config_dict, dict):
            raise ValueError(f"Config file must contain a mapping: {config_path}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise ValueError(f"Unknown config keys in {config_path}: {', '.join(unknown)}")

        return cls(**config_dict)

    @classmethod
    def from_env(cls) -> "PreviewConfig":
        """Create config from environment variables."""
        return cls(
            width=int(os.getenv("CAMPREVIEW_WIDTH", str(DEFAULT_WIDTH))),
            height=int(os.getenv("CAMPREVIEW_HEIGHT", str(DEFAULT_HEIGHT))),
            backend=_backend_from_env(),
            snapshot=SnapshotConfig.from_env(),
        )

    def to_dict(self) -> dict:
        """Convert config to dictionary for logging."""
        return {
            "cam": self.cam,
            "source": self.source,
            "width": self.width,
            "height": self.height,
            "backend": self.backend.value,
            "window_name": self.window_name,
            "max_frames": self.max_frames,
            "snapshot": {
                "directory": str(self.snapshot.directory),
                "naming": self.snapshot.naming.value,
            },
        }

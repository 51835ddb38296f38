"""Still-frame snapshots written on request."""

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Set

import cv2

from campreview.config import SnapshotConfig, SnapshotNaming
from campreview.types import Frame
from campreview.utils.logging_config import setup_logger
from campreview.utils.path_utils import ensure_dir, unique_path

logger = setup_logger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


class SnapshotWriter:
    """
    Encode frames to image files in the snapshot directory.

    With ``SnapshotNaming.TIMESTAMP`` each save gets
    ``<prefix>-<YYYYMMDD_HHMMSS><ext>``; a ``-<n>`` suffix is added when a
    second save lands in the same second. ``SnapshotNaming.FIXED`` always
    writes ``<prefix><ext>`` and overwrites the previous snapshot.
    """

    def __init__(
        self,
        config: Optional[SnapshotConfig] = None,
        now: Callable[[], datetime] = datetime.now,
        imwrite: Optional[Callable[[str, Frame], bool]] = None,
    ):
        self.config = config or SnapshotConfig()
        self._now = now
        self._imwrite = imwrite or cv2.imwrite
        self._written: Set[Path] = set()

    def next_path(self) -> Path:
        """Path the next snapshot will be written to."""
        cfg = self.config
        if cfg.naming is SnapshotNaming.FIXED:
            return cfg.directory / f"{cfg.prefix}{cfg.extension}"

        stamp = self._now().strftime(TIMESTAMP_FORMAT)
        return unique_path(cfg.directory / f"{cfg.prefix}-{stamp}{cfg.extension}", self._written)

    def save(self, frame: Frame) -> Optional[Path]:
        """
        Write ``frame`` to disk.

        Args:
            frame: BGR image to save

        Returns:
            The written path, or None if encoding or writing failed
        """
        try:
            ensure_dir(self.config.directory)
            path = self.next_path()
            ok = self._imwrite(str(path), frame)
        except (cv2.error, OSError) as e:
            logger.error(f"Failed to save frame: {e}")
            return None

        if not ok:
            logger.error(f"Failed to save frame to {path}")
            return None

        self._written.add(path)
        logger.info(f"Saved: {path}")
        return path

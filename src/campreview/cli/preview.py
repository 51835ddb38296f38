"""CLI entry point: open a source and preview it."""

import sys
from typing import Optional, Sequence

import cv2

from campreview.capture import CaptureOpenError, open_session
from campreview.cli.options import format_usage, log_config, resolve_options
from campreview.display import PreviewWindow
from campreview.pipelines.render_loop import RenderLoop
from campreview.snapshot import SnapshotWriter
from campreview.utils.logging_config import set_package_level, setup_logger

logger = setup_logger(__name__)


def quiet_opencv() -> None:
    """Limit OpenCV's own console logging to warnings and errors."""
    cv_logging = getattr(getattr(cv2, "utils", None), "logging", None)
    if cv_logging is not None:
        cv_logging.setLogLevel(cv_logging.LOG_LEVEL_WARNING)


def main(
    argv: Optional[Sequence[str]] = None,
    capture_factory=None,
    window_factory=PreviewWindow,
    snapshot_writer_factory=SnapshotWriter,
) -> int:
    """
    Preview entry point.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:])
        capture_factory: ``(target, api_preference) -> VideoCapture`` override
        window_factory: ``(name) -> window`` override
        snapshot_writer_factory: ``(SnapshotConfig) -> SnapshotWriter`` override

    Returns:
        Process exit status
    """
    if argv is None:
        argv = sys.argv[1:]

    resolved = resolve_options(argv)
    if resolved.show_help:
        print(format_usage())
        return 0

    config = resolved.config
    set_package_level(config.verbose)
    log_config(config)
    quiet_opencv()

    try:
        session = open_session(config, capture_factory=capture_factory)
    except CaptureOpenError as e:
        logger.error(f"ERROR: {e}")
        return 1

    window = None
    try:
        window = window_factory(config.window_name)
        window.open()
        loop = RenderLoop(
            session=session,
            window=window,
            snapshots=snapshot_writer_factory(config.snapshot),
            overlay=config.overlay,
            max_frames=config.max_frames,
        )
        loop.run()
    finally:
        session.release()
        if window is not None:
            window.close()

    return 0


def run() -> None:
    """Console-script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()

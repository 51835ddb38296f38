"""
Render loop: grab, measure, annotate, show, poll.

States: RUNNING -> STOPPED (quit key, window closed, grab failure, frame limit)
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

import cv2

from campreview.config import OverlayConfig
from campreview.display import NO_KEY
from campreview.snapshot import SnapshotWriter
from campreview.types import ExitReason, Frame, LoopResult
from campreview.utils.logging_config import setup_logger

logger = setup_logger(__name__)

ESC_KEY = 27
QUIT_KEYS = frozenset({ESC_KEY, ord("q")})
SAVE_KEY = ord("s")


class FpsEstimator:
    """
    Frame rate averaged over fixed wall-clock windows.

    The estimate only changes when a window closes, so the overlay does not
    flicker between per-frame values.
    """

    def __init__(self, start: float, window: float = 1.0):
        self.window = window
        self.window_start = start
        self.frames = 0
        self.fps = 0.0

    def tick(self, now: float) -> float:
        """Count one frame at time ``now`` and return the current estimate."""
        self.frames += 1
        elapsed = now - self.window_start
        if elapsed >= self.window:
            self.fps = self.frames / elapsed
            self.frames = 0
            self.window_start = now
        return self.fps


@dataclass
class LoopState:
    """Everything the loop mutates between iterations."""
    fps: FpsEstimator
    frames: int = 0
    saved: int = 0
    last_frame: Optional[Frame] = field(default=None, repr=False)
    exit_reason: Optional[ExitReason] = None


def format_status(fps: float, size: Tuple[int, int], saved: int, decimals: int = 1) -> str:
    """Overlay text for one frame."""
    return f"FPS: {fps:.{decimals}f} | {size[0]}x{size[1]} | Saved: {saved} (press 's')"


def draw_overlay(frame: Frame, text: str, style: OverlayConfig) -> Frame:
    """Draw ``text`` onto ``frame`` in place and return it."""
    cv2.putText(
        frame,
        text,
        style.origin,
        cv2.FONT_HERSHEY_SIMPLEX,
        style.font_scale,
        style.color,
        style.thickness,
        cv2.LINE_AA,
    )
    return frame


class RenderLoop:
    """
    Drive one capture session into one preview window.

    Attributes:
        session: Open capture session (``read()``, ``frame_size()``)
        window: Display surface (``show()``, ``is_visible()``, ``poll_key()``)
        snapshots: Writer used on the save key
    """

    def __init__(
        self,
        session,
        window,
        snapshots: SnapshotWriter,
        overlay: Optional[OverlayConfig] = None,
        clock: Callable[[], float] = time.perf_counter,
        max_frames: Optional[int] = None,
        key_delay_ms: int = 1,
    ):
        self.session = session
        self.window = window
        self.snapshots = snapshots
        self.overlay = overlay or OverlayConfig()
        self.clock = clock
        self.max_frames = max_frames
        self.key_delay_ms = key_delay_ms

    def run(self) -> LoopResult:
        """
        Run until the user quits, the window closes or the source ends.

        Returns:
            LoopResult with frame and snapshot counts
        """
        state = LoopState(fps=FpsEstimator(start=self.clock()))
        logger.info("Preview running. Press 'q' or ESC to quit, 's' to save a frame.")

        try:
            while state.exit_reason is None:
                state.exit_reason = self.step(state)
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            state.exit_reason = ExitReason.INTERRUPTED

        logger.info(
            f"Preview stopped ({state.exit_reason.value}) after {state.frames} frames, "
            f"{state.saved} saved"
        )
        return LoopResult(
            frames=state.frames,
            saved=state.saved,
            exit_reason=state.exit_reason,
            last_fps=state.fps.fps,
        )

    def step(self, state: LoopState) -> Optional[ExitReason]:
        """
        Process one frame.

        Returns:
            None to keep running, otherwise the reason to stop
        """
        if self.max_frames is not None and state.frames >= self.max_frames:
            return ExitReason.FRAME_LIMIT

        frame = self.session.read()
        if frame is None:
            logger.warning("Failed to grab frame, stopping preview")
            return ExitReason.GRAB_FAILED

        state.frames += 1
        fps = state.fps.tick(self.clock())

        text = format_status(fps, self.session.frame_size(), state.saved, self.overlay.fps_decimals)
        draw_overlay(frame, text, self.overlay)
        state.last_frame = frame

        self.window.show(frame)
        if not self.window.is_visible():
            logger.info("Window closed")
            return ExitReason.WINDOW_CLOSED

        key = self.window.poll_key(self.key_delay_ms)
        if key == NO_KEY:
            return None
        if key in QUIT_KEYS:
            return ExitReason.QUIT_KEY
        if key == SAVE_KEY:
            if self.snapshots.save(state.last_frame) is not None:
                state.saved += 1
        return None

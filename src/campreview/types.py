"""
Shared types for the preview pipeline.

Kept separate so the CLI, render loop and tests can import them without
pulling in each other.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np

Frame = np.ndarray


class ExitReason(Enum):
    """Why the render loop stopped."""
    QUIT_KEY = "quit_key"  # 'q' or ESC
    WINDOW_CLOSED = "window_closed"
    GRAB_FAILED = "grab_failed"  # end of stream or device error
    FRAME_LIMIT = "frame_limit"
    INTERRUPTED = "interrupted"  # Ctrl+C


@dataclass
class LoopResult:
    """Summary returned by the render loop."""
    frames: int  # Frames successfully grabbed and shown
    saved: int  # Successful snapshots
    exit_reason: ExitReason
    last_fps: float = 0.0

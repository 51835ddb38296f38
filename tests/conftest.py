"""Test configuration and fixtures."""

from pathlib import Path
from typing import List, Optional, Sequence

import cv2
import numpy as np
import pytest

from campreview.display import NO_KEY


class FakeCapture:
    """Stand-in for cv2.VideoCapture yielding a fixed number of frames."""

    def __init__(
        self,
        frames: int = 30,
        opened: bool = True,
        native_size=(640, 480),
        honors_resolution: bool = True,
    ):
        self.remaining = frames
        self.opened = opened
        self.width, self.height = native_size
        self.honors_resolution = honors_resolution
        self.reads = 0
        self.release_calls = 0
        self.set_calls = []

    def isOpened(self) -> bool:
        return self.opened

    def read(self):
        self.reads += 1
        if not self.opened or self.remaining <= 0:
            return False, None
        self.remaining -= 1
        return True, np.zeros((self.height, self.width, 3), dtype=np.uint8)

    def set(self, prop, value) -> bool:
        self.set_calls.append((prop, value))
        if not self.honors_resolution:
            return False
        if prop == cv2.CAP_PROP_FRAME_WIDTH:
            self.width = int(value)
        elif prop == cv2.CAP_PROP_FRAME_HEIGHT:
            self.height = int(value)
        return True

    def get(self, prop) -> float:
        if prop == cv2.CAP_PROP_FRAME_WIDTH:
            return float(self.width)
        if prop == cv2.CAP_PROP_FRAME_HEIGHT:
            return float(self.height)
        return 0.0

    def release(self) -> None:
        self.release_calls += 1
        self.opened = False


class CaptureFactory:
    """Records open attempts; opens only for the listed api preferences."""

    def __init__(self, working_apis: Optional[Sequence[int]] = None, frames: int = 30, **capture_kwargs):
        self.working_apis = working_apis
        self.frames = frames
        self.capture_kwargs = capture_kwargs
        self.calls: List[tuple] = []
        self.captures: List[FakeCapture] = []

    def __call__(self, target, api_preference):
        self.calls.append((target, api_preference))
        opened = self.working_apis is None or api_preference in self.working_apis
        capture = FakeCapture(frames=self.frames, opened=opened, **self.capture_kwargs)
        self.captures.append(capture)
        return capture


class FakeWindow:
    """Display surface that replays scripted keys."""

    def __init__(self, name: str = "Preview", keys: Sequence[int] = (), close_after: Optional[int] = None):
        self.name = name
        self.keys = list(keys)
        self.close_after = close_after
        self.shown = []
        self.open_calls = 0
        self.close_calls = 0

    def open(self) -> None:
        self.open_calls += 1

    def show(self, frame) -> None:
        self.shown.append(frame)

    def is_visible(self) -> bool:
        return self.close_after is None or len(self.shown) < self.close_after

    def poll_key(self, delay_ms: int = 1) -> int:
        return self.keys.pop(0) if self.keys else NO_KEY

    def close(self) -> None:
        self.close_calls += 1


class FakeClock:
    """Clock advancing by ``step`` seconds on every call."""

    def __init__(self, step: float = 0.125, start: float = 0.0):
        self.step = step
        self.start = start
        self.calls = 0

    def __call__(self) -> float:
        now = self.start + self.calls * self.step
        self.calls += 1
        return now


@pytest.fixture
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def capture_factory() -> CaptureFactory:
    return CaptureFactory()


@pytest.fixture
def fake_window() -> FakeWindow:
    return FakeWindow()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove CAMPREVIEW_* overrides from the environment."""
    for name in (
        "CAMPREVIEW_WIDTH",
        "CAMPREVIEW_HEIGHT",
        "CAMPREVIEW_BACKEND",
        "CAMPREVIEW_SNAPSHOT_DIR",
        "CAMPREVIEW_SNAPSHOT_NAMING",
    ):
        monkeypatch.delenv(name, raising=False)

"""Tests for the capture session."""

import cv2
import pytest

from campreview.capture import CaptureOpenError, CaptureSession, open_session
from campreview.config import Backend, PreviewConfig
from conftest import CaptureFactory, FakeCapture


class TestOpenSession:
    """Test source opening and backend fallback."""

    def test_open_default_camera(self, capture_factory: CaptureFactory):
        session = open_session(PreviewConfig(), capture_factory=capture_factory)

        assert session.is_open
        assert capture_factory.calls == [(0, cv2.CAP_ANY)]
        assert session.backend is Backend.ANY

    def test_open_source_string(self, capture_factory: CaptureFactory):
        open_session(PreviewConfig(source="clip.mp4"), capture_factory=capture_factory)

        assert capture_factory.calls[0][0] == "clip.mp4"

    def test_fallback_to_automatic_backend(self, caplog):
        factory = CaptureFactory(working_apis=[cv2.CAP_ANY])
        config = PreviewConfig(cam=1, backend=Backend.FFMPEG)

        session = open_session(config, capture_factory=factory)

        assert session.is_open
        assert session.backend is Backend.ANY
        assert factory.calls == [(1, cv2.CAP_FFMPEG), (1, cv2.CAP_ANY)]
        assert factory.captures[0].release_calls == 1
        assert "retrying with 'any'" in caplog.text

    def test_both_backends_fail(self):
        factory = CaptureFactory(working_apis=[])
        config = PreviewConfig(source="missing.mp4", backend=Backend.FFMPEG)

        with pytest.raises(CaptureOpenError) as excinfo:
            open_session(config, capture_factory=factory)

        assert len(factory.calls) == 2
        assert excinfo.value.backends == (Backend.FFMPEG, Backend.ANY)
        assert "missing.mp4" in str(excinfo.value)

    def test_automatic_backend_not_retried(self):
        factory = CaptureFactory(working_apis=[])

        with pytest.raises(CaptureOpenError):
            open_session(PreviewConfig(), capture_factory=factory)

        assert len(factory.calls) == 1

    def test_requested_resolution_applied(self, capture_factory: CaptureFactory):
        session = open_session(PreviewConfig(width=800, height=600), capture_factory=capture_factory)

        assert (cv2.CAP_PROP_FRAME_WIDTH, 800) in capture_factory.captures[0].set_calls
        assert (cv2.CAP_PROP_FRAME_HEIGHT, 600) in capture_factory.captures[0].set_calls
        assert session.frame_size() == (800, 600)

    def test_negotiated_resolution_read_back(self):
        factory = CaptureFactory(native_size=(640, 480), honors_resolution=False)

        session = open_session(PreviewConfig(width=1920, height=1080), capture_factory=factory)

        assert session.frame_size() == (640, 480)


class TestCaptureSession:
    """Test the session handle."""

    def test_read_until_exhausted(self):
        session = CaptureSession(FakeCapture(frames=2), 0, Backend.ANY)

        assert session.read() is not None
        assert session.read() is not None
        assert session.read() is None

    def test_release_once(self):
        capture = FakeCapture()
        session = CaptureSession(capture, 0, Backend.ANY)

        session.release()
        session.release()

        assert capture.release_calls == 1
        assert not session.is_open

    def test_context_manager(self):
        capture = FakeCapture()

        with CaptureSession(capture, 0, Backend.ANY) as session:
            assert session.is_open

        assert capture.release_calls == 1

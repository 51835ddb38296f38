"""Capture session: one open OpenCV video source."""

from typing import Callable, Optional, Tuple, Union

import cv2

from campreview.config import Backend, PreviewConfig
from campreview.types import Frame
from campreview.utils.logging_config import setup_logger

logger = setup_logger(__name__)

CaptureTarget = Union[int, str]
CaptureFactory = Callable[[CaptureTarget, int], "cv2.VideoCapture"]


class CaptureOpenError(RuntimeError):
    """Raised when a source cannot be opened with any backend."""

    def __init__(self, target: CaptureTarget, backends: Tuple[Backend, ...]):
        self.target = target
        self.backends = backends
        tried = ", ".join(b.value for b in backends)
        super().__init__(f"Could not open source {target!r} (backends tried: {tried})")


class CaptureSession:
    """
    Wrapper around an opened ``cv2.VideoCapture``.

    Attributes:
        target: Camera index or path/URL that was opened
        backend: Backend the source was actually opened with
    """

    def __init__(self, capture, target: CaptureTarget, backend: Backend):
        self._capture = capture
        self.target = target
        self.backend = backend
        self._released = False

    @property
    def is_open(self) -> bool:
        return not self._released and bool(self._capture.isOpened())

    def apply_resolution(self, width: int, height: int) -> Tuple[int, int]:
        """
        Request a frame size from the device.

        Devices are free to pick the closest mode they support, so the
        negotiated size is read back and returned.
        """
        self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        actual = self.frame_size()
        if actual != (width, height):
            logger.info(f"Requested {width}x{height}, device negotiated {actual[0]}x{actual[1]}")
        return actual

    def frame_size(self) -> Tuple[int, int]:
        """Current frame width and height as reported by the backend."""
        width = int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        return width, height

    def read(self) -> Optional[Frame]:
        """Grab and decode the next frame, None on failure."""
        ok, frame = self._capture.read()
        if not ok or frame is None:
            return None
        return frame

    def release(self) -> None:
        """Release the device. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        self._capture.release()
        logger.debug(f"Released capture {self.target!r}")

    def __enter__(self) -> "CaptureSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def _try_open(
    factory: CaptureFactory, target: CaptureTarget, backend: Backend
):
    logger.debug(f"Opening {target!r} with backend '{backend.value}'")
    capture = factory(target, backend.api_preference)
    if capture.isOpened():
        return capture
    capture.release()
    return None


def open_session(
    config: PreviewConfig,
    capture_factory: Optional[CaptureFactory] = None,
) -> CaptureSession:
    """
    Open the source described by ``config``.

    The configured backend is tried first; if it fails and is not already
    the automatic backend, one retry is made with ``Backend.ANY``.

    Args:
        config: Resolved preview configuration
        capture_factory: Callable ``(target, api_preference) -> VideoCapture``
            (default: ``cv2.VideoCapture``)

    Returns:
        An open CaptureSession with the requested resolution applied

    Raises:
        CaptureOpenError: If no backend could open the source
    """
    factory = capture_factory or cv2.VideoCapture
    target = config.capture_target
    tried = [config.backend]

    capture = _try_open(factory, target, config.backend)
    backend = config.backend
    if capture is None and config.backend is not Backend.ANY:
        logger.warning(
            f"Backend '{config.backend.value}' failed to open {target!r}, retrying with 'any'"
        )
        tried.append(Backend.ANY)
        capture = _try_open(factory, target, Backend.ANY)
        backend = Backend.ANY

    if capture is None:
        raise CaptureOpenError(target, tuple(tried))

    session = CaptureSession(capture, target, backend)
    width, height = session.apply_resolution(config.width, config.height)
    logger.info(f"Opened {target!r} via '{backend.value}' at {width}x{height}")
    return session

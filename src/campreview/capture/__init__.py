"""Video source handling."""

from .session import CaptureOpenError, CaptureSession, open_session

__all__ = ["CaptureOpenError", "CaptureSession", "open_session"]

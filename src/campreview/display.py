"""OpenCV HighGUI display window."""

import cv2

from campreview.types import Frame
from campreview.utils.logging_config import setup_logger

logger = setup_logger(__name__)

NO_KEY = -1


class PreviewWindow:
    """A single named HighGUI window."""

    def __init__(self, name: str = "Preview"):
        self.name = name
        self._created = False

    def open(self) -> None:
        cv2.namedWindow(self.name, cv2.WINDOW_AUTOSIZE)
        self._created = True
        logger.debug(f"Created window '{self.name}'")

    def show(self, frame: Frame) -> None:
        cv2.imshow(self.name, frame)

    def is_visible(self) -> bool:
        """False once the user closed the window."""
        return cv2.getWindowProperty(self.name, cv2.WND_PROP_VISIBLE) >= 1

    def poll_key(self, delay_ms: int = 1) -> int:
        """Wait up to ``delay_ms`` for a key; NO_KEY if none was pressed."""
        key = cv2.waitKey(delay_ms)
        if key == NO_KEY:
            return NO_KEY
        return key & 0xFF

    def close(self) -> None:
        """Destroy display resources. Safe to call more than once."""
        if not self._created:
            return
        self._created = False
        cv2.destroyAllWindows()
        logger.debug(f"Destroyed window '{self.name}'")

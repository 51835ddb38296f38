"""
campreview: webcam and video-file preview with an FPS overlay.

Opens a camera, file or stream URL with OpenCV, shows it in a window with
frame-rate and resolution text, and saves snapshots on request.
"""

__version__ = "1.0.0"
__description__ = "Camera and video preview with FPS overlay and snapshots"

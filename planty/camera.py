# planty/camera.py
# OpenCV webcam capture for the command line client.
# CAMERA_INDEX env var (default 0) selects the device; point it at the
# environment-facing camera on machines that have more than one.

from __future__ import annotations

import logging

import cv2

from planty.errors import CaptureError
from planty.settings import get_settings

logger = logging.getLogger(__name__)

CAPTURE_NAME = "captured_image.jpg"
CAPTURE_MIME = "image/jpeg"
JPEG_QUALITY = 85


class CameraCapture:
    def __init__(self, index: int | None = None):
        self._index = index if index is not None else get_settings().CAMERA_INDEX
        self._cap = None

    @property
    def streaming(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def start(self) -> None:
        """Open the stream. Raises CaptureError if the device cannot be opened."""
        if self.streaming:
            return
        self._cap = cv2.VideoCapture(self._index)
        if not self._cap.isOpened():
            self._cap = None
            raise CaptureError(f"failed to open camera device {self._index}")
        logger.info("camera %d streaming", self._index)

    def capture(self) -> bytes | None:
        """
        Grab the current frame as JPEG bytes and stop the stream.
        Returns None (and leaves the stream alone) if no frame is available yet.
        """
        if not self.streaming:
            return None
        ret, frame = self._cap.read()
        if not ret or frame is None:
            logger.debug("camera %d: no frame yet", self._index)
            return None
        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, JPEG_QUALITY])
        if not ok:
            return None
        self.stop()
        return bytes(buf)

    def stop(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None

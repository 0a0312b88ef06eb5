# planty/client.py
# Capture/upload client: takes an image from a file or the camera, posts it to the
# identification service and keeps exactly one UI state (idle, loading, failed, identified).
# CLI:
#   python -m planty.client photo.jpg
#   python -m planty.client --camera --url http://127.0.0.1:8000

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import httpx
from pydantic import ValidationError

from planty.camera import CAPTURE_MIME, CAPTURE_NAME, CameraCapture
from planty.errors import CaptureError
from planty.schemas import ErrorResponse, PlantInfo
from planty.settings import get_settings

logger = logging.getLogger(__name__)

IDENTIFY_PATH = "/api/identify-plant"
IMAGE_FIELD = "image"
IDENTIFY_FAILED = "Failed to identify plant"
CAMERA_FAILED = "Failed to access camera"
REQUIRED_KEYS = {"name", "nativeTo"}


@dataclass(frozen=True)
class ImageSubmission:
    data: bytes
    mime_type: str
    filename: str = "image"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageSubmission":
        p = Path(path)
        mime, _ = mimetypes.guess_type(p.name)
        return cls(data=p.read_bytes(), mime_type=mime or "application/octet-stream", filename=p.name)


# -----------------------------------------------------------------------------
# UI state: one of these at a time
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Failed:
    error: ErrorResponse


@dataclass(frozen=True)
class Identified:
    plant: PlantInfo


ClientState = Union[Idle, Loading, Failed, Identified]


def state_from_response(resp: httpx.Response) -> ClientState:
    """
    2xx with a PlantInfo body -> Identified; anything else -> Failed.
    Error bodies are kept when they have the ErrorResponse shape.
    """
    try:
        body = resp.json()
    except ValueError:
        body = None

    if resp.is_success:
        unexpected = Failed(ErrorResponse(error=IDENTIFY_FAILED, details="Unexpected response from server"))
        # every PlantInfo field has a default, so check the keys the server always sends
        if not isinstance(body, dict) or not REQUIRED_KEYS.issubset(body):
            return unexpected
        try:
            return Identified(PlantInfo.model_validate(body))
        except ValidationError:
            return unexpected

    try:
        return Failed(ErrorResponse.model_validate(body))
    except ValidationError:
        return Failed(ErrorResponse(error=IDENTIFY_FAILED, details=f"HTTP {resp.status_code}"))


class PlantIdentifierClient:
    """
    Drives one request/response cycle per submission. No retries and no timeout;
    concurrent submissions on one instance simply overwrite each other's state.
    """

    def __init__(self, base_url: Optional[str] = None, http: Optional[httpx.Client] = None):
        self.base_url = (base_url or get_settings().PLANTY_URL).rstrip("/")
        self._http = http or httpx.Client(timeout=None)
        self.state: ClientState = Idle()
        self.preview: Optional[ImageSubmission] = None

    def submit(self, image: ImageSubmission) -> ClientState:
        self.preview = image
        self.state = Loading()
        try:
            resp = self._http.post(
                self.base_url + IDENTIFY_PATH,
                files={IMAGE_FIELD: (image.filename, image.data, image.mime_type)},
            )
        except httpx.HTTPError as e:
            logger.error("Error identifying plant: %s", e)
            self.state = Failed(ErrorResponse(error=IDENTIFY_FAILED, details=str(e)))
            return self.state

        self.state = state_from_response(resp)
        if isinstance(self.state, Failed):
            logger.error("Error identifying plant: %s", self.state.error.to_json())
        return self.state

    def submit_file(self, path: Union[str, Path]) -> ClientState:
        return self.submit(ImageSubmission.from_path(path))

    def start_camera(self, camera: CameraCapture) -> bool:
        try:
            camera.start()
        except CaptureError as e:
            logger.error("Error accessing camera: %s", e)
            self.state = Failed(ErrorResponse(error=CAMERA_FAILED))
            return False
        return True

    def capture_and_submit(self, camera: CameraCapture) -> ClientState:
        """Submit the current camera frame; a no-op while no frame is available."""
        data = camera.capture()
        if data is None:
            return self.state
        return self.submit(ImageSubmission(data=data, mime_type=CAPTURE_MIME, filename=CAPTURE_NAME))

    def close(self) -> None:
        self._http.close()


# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------
def table_rows(plant: PlantInfo) -> List[Tuple[str, str]]:
    rows = [
        ("Scientific Name", plant.scientific_name),
        ("Family", plant.family),
        ("Native To", ", ".join(plant.native_to)),
    ]
    for label, value in (
        ("Sunlight Needs", plant.sunlight),
        ("Watering Needs", plant.watering),
        ("Soil Type", plant.soil),
    ):
        if value:
            rows.append((label, value))
    return rows


def render(state: ClientState, preview: Optional[ImageSubmission] = None, show_stack: bool = False) -> str:
    lines: List[str] = []

    if isinstance(state, Loading):
        return "Identifying plant..."

    if isinstance(state, Failed):
        lines.append(state.error.error)
        if state.error.details:
            lines.append(f"Details: {state.error.details}")
        if state.error.stack and show_stack:
            lines.append("Error Stack:")
            lines.append(state.error.stack)
        return "\n".join(lines)

    if preview is not None:
        lines.append(f"Captured Image: {preview.filename} ({preview.mime_type}, {len(preview.data)} bytes)")

    if isinstance(state, Identified):
        plant = state.plant
        rows = table_rows(plant)
        width = max(len("Characteristic"), *(len(k) for k, _ in rows))
        lines += ["", plant.name, plant.description, "", "Plant Information"]
        lines.append(f"{'Characteristic'.ljust(width)}  Details")
        lines.append(f"{'-' * width}  {'-' * 7}")
        lines += [f"{k.ljust(width)}  {v}" for k, v in rows]

    return "\n".join(lines)


# -----------------------------------------------------------------------------
# Optional CLI
# -----------------------------------------------------------------------------
def _capture_loop(client: PlantIdentifierClient, camera: CameraCapture) -> ClientState:
    if not client.start_camera(camera):
        return client.state
    try:
        while True:
            input("Camera ready. Press Enter to capture...")
            state = client.capture_and_submit(camera)
            if not isinstance(state, Idle):
                return state
            print("No frame available yet.")
    finally:
        camera.stop()


if __name__ == "__main__":
    import argparse, json, sys

    parser = argparse.ArgumentParser(description="Identify a plant from a photo.")
    parser.add_argument("image", nargs="?", help="Path to an image file")
    parser.add_argument("--camera", action="store_true", help="Capture a frame from the webcam instead")
    parser.add_argument("--url", default=None, help="Service base URL (default: PLANTY_URL)")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON result")
    parser.add_argument("--show-stack", action="store_true", help="Include server stack traces in errors")
    args = parser.parse_args()

    if not args.image and not args.camera:
        parser.error("give an image path or --camera")

    logging.basicConfig(level=get_settings().LOG_LEVEL)
    client = PlantIdentifierClient(base_url=args.url)
    try:
        state = _capture_loop(client, CameraCapture()) if args.camera else client.submit_file(args.image)
    finally:
        client.close()

    if args.json:
        payload = state.plant.to_json() if isinstance(state, Identified) else state.error.to_json()
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(render(state, client.preview, show_stack=args.show_stack))
    sys.exit(0 if isinstance(state, Identified) else 1)

import httpx
import pytest

from conftest import ALL_LABELS_TEXT
from app import app
from fastapi.testclient import TestClient
from planty.client import (
    Failed,
    Identified,
    Idle,
    ImageSubmission,
    Loading,
    PlantIdentifierClient,
    render,
    table_rows,
)
from planty.errors import CaptureError
from planty.schemas import ErrorResponse, PlantInfo

JPEG = ImageSubmission(data=b"\xff\xd8\xff\xe0fake", mime_type="image/jpeg", filename="leaf.jpg")

ROSE = {
    "name": "Rose",
    "scientificName": "Rosa",
    "family": "Rosaceae",
    "description": "No description available.",
    "nativeTo": ["Asia", "Europe"],
    "sunlight": "Full sun",
}


def _client(handler):
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return PlantIdentifierClient(base_url="http://planty.test/", http=http)


class FakeCamera:
    def __init__(self, frame=None, fail=False):
        self.frame = frame
        self.fail = fail
        self.started = False

    def start(self):
        if self.fail:
            raise CaptureError("permission denied")
        self.started = True

    def capture(self):
        return self.frame

    def stop(self):
        self.started = False


def test_starts_idle():
    client = _client(lambda request: httpx.Response(200, json=ROSE))
    assert client.state == Idle()
    assert client.preview is None


def test_posts_multipart_image_field():
    seen = {}

    def handler(request):
        request.read()
        seen["url"] = str(request.url)
        seen["body"] = request.content
        return httpx.Response(200, json=ROSE)

    _client(handler).submit(JPEG)
    assert seen["url"] == "http://planty.test/api/identify-plant"
    assert b'name="image"; filename="leaf.jpg"' in seen["body"]
    assert b"Content-Type: image/jpeg" in seen["body"]
    assert JPEG.data in seen["body"]


def test_success_sets_identified():
    client = _client(lambda request: httpx.Response(200, json=ROSE))
    state = client.submit(JPEG)
    assert isinstance(state, Identified)
    assert state.plant.native_to == ["Asia", "Europe"]
    assert state.plant.watering is None
    assert client.preview == JPEG


@pytest.mark.parametrize("body", [{}, {"error": "Failed to identify plant"}, ["Rose"], {"name": "Rose"}])
def test_malformed_success_body_is_failed(body):
    client = _client(lambda request: httpx.Response(200, json=body))
    state = client.submit(JPEG)
    assert state == Failed(ErrorResponse(error="Failed to identify plant", details="Unexpected response from server"))


def test_success_body_that_is_not_json_is_failed():
    client = _client(lambda request: httpx.Response(200, text="<html>ok</html>"))
    assert isinstance(client.submit(JPEG), Failed)


def test_shaped_error_body_is_kept():
    body = {"error": "Failed to identify plant", "details": "quota", "stack": "Traceback..."}
    client = _client(lambda request: httpx.Response(500, json=body))
    state = client.submit(JPEG)
    assert state == Failed(ErrorResponse(**body))


def test_unshaped_error_is_synthesized():
    client = _client(lambda request: httpx.Response(502, text="Bad Gateway"))
    state = client.submit(JPEG)
    assert state == Failed(ErrorResponse(error="Failed to identify plant", details="HTTP 502"))


def test_transport_failure_is_captured():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    state = _client(handler).submit(JPEG)
    assert isinstance(state, Failed)
    assert state.error.error == "Failed to identify plant"
    assert state.error.details == "connection refused"


def test_error_replaces_previous_result():
    responses = iter([httpx.Response(200, json=ROSE), httpx.Response(400, json={"error": "No image provided"})])
    client = _client(lambda request: next(responses))
    client.submit(JPEG)
    state = client.submit(JPEG)
    assert state == Failed(ErrorResponse(error="No image provided"))


def test_submit_file_guesses_mime(tmp_path):
    path = tmp_path / "fern.png"
    path.write_bytes(b"png-bytes")
    client = _client(lambda request: httpx.Response(200, json=ROSE))
    client.submit_file(path)
    assert client.preview == ImageSubmission(data=b"png-bytes", mime_type="image/png", filename="fern.png")


def test_camera_failure_sets_error_without_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=ROSE)

    client = _client(handler)
    assert client.start_camera(FakeCamera(fail=True)) is False
    assert client.state == Failed(ErrorResponse(error="Failed to access camera"))
    assert calls == []


def test_capture_without_frame_is_noop():
    client = _client(lambda request: httpx.Response(200, json=ROSE))
    camera = FakeCamera(frame=None)
    assert client.start_camera(camera) is True
    assert client.capture_and_submit(camera) == Idle()
    assert client.preview is None


def test_capture_submits_jpeg_frame():
    client = _client(lambda request: httpx.Response(200, json=ROSE))
    state = client.capture_and_submit(FakeCamera(frame=b"jpeg-bytes"))
    assert isinstance(state, Identified)
    assert client.preview == ImageSubmission(data=b"jpeg-bytes", mime_type="image/jpeg", filename="captured_image.jpg")


def test_end_to_end_against_service(fake_gemini):
    fake_gemini(text=ALL_LABELS_TEXT)
    with TestClient(app) as http:
        client = PlantIdentifierClient(base_url="http://testserver", http=http)
        state = client.submit(JPEG)
    assert isinstance(state, Identified)
    assert state.plant.soil == "Well-draining peat mix"
    assert state.plant.scientific_name == "Monstera deliciosa"


def test_table_rows_skip_missing_care_fields():
    plant = PlantInfo.model_validate(ROSE)
    assert table_rows(plant) == [
        ("Scientific Name", "Rosa"),
        ("Family", "Rosaceae"),
        ("Native To", "Asia, Europe"),
        ("Sunlight Needs", "Full sun"),
    ]


def test_render_states():
    assert render(Loading()) == "Identifying plant..."
    assert render(Idle()) == ""

    out = render(Identified(PlantInfo.model_validate(ROSE)), preview=JPEG)
    assert out.startswith("Captured Image: leaf.jpg (image/jpeg")
    assert "Rose" in out
    assert "Watering Needs" not in out


@pytest.mark.parametrize("show_stack", [False, True])
def test_render_error_stack_only_on_request(show_stack):
    state = Failed(ErrorResponse(error="Failed to identify plant", details="quota", stack="Traceback: boom"))
    out = render(state, show_stack=show_stack)
    assert out.splitlines()[:2] == ["Failed to identify plant", "Details: quota"]
    assert ("Traceback: boom" in out) is show_stack

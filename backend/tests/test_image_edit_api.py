"""
Integration tests for POST /api/process-image using FastAPI's TestClient.

The Gemini call is patched at GeminiService.generate; everything else
(validation, decoding, normalization, error mapping) runs for real.
"""
import base64
import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch

from services.gemini_service import GeminiService
from services.response_normalizer import SingleShotResponse, StreamedResponse
from conftest import data_url_for, image_part, response_with, stream_of, text_part


@pytest.fixture
def client():
    """Provide FastAPI test client"""
    from main import app
    return TestClient(app)


def patch_generate(respond=None, error=None):
    mock = AsyncMock()
    if error:
        mock.side_effect = error
    else:
        mock.side_effect = lambda request: respond()
    return patch.object(GeminiService, "generate", new=mock)


@pytest.mark.integration
class TestProcessImageEndpoint:
    """Tests for POST /api/process-image"""

    def test_edit_success(self, client, valid_payload):
        """A 2MB image with a valid key comes back as one edited image"""
        valid_payload["imageData"] = data_url_for(b"\x89PNG" + b"\x01" * (2 * 1024 * 1024))
        edited = b"edited-image-bytes"

        with patch_generate(lambda: StreamedResponse(chunks=stream_of(
            response_with(image_part(edited)),
        ))) as mock_generate:
            response = client.post("/api/process-image", json=valid_payload)

        assert response.status_code == 200
        data = response.json()
        expected_url = "data:image/png;base64," + base64.b64encode(edited).decode("ascii")
        assert data["success"] is True
        assert data["images"] == [expected_url]
        assert data["editedImage"] == expected_url
        assert data["text"] == ""
        mock_generate.assert_called_once()

    def test_images_keep_arrival_order(self, client, valid_payload):
        with patch_generate(lambda: StreamedResponse(chunks=stream_of(
            response_with(image_part(b"A")),
            response_with(text_part("hello")),
            response_with(image_part(b"B", "image/jpeg")),
        ))):
            response = client.post("/api/process-image", json=valid_payload)

        data = response.json()
        assert data["images"] == [data_url_for(b"A"), data_url_for(b"B", "image/jpeg")]
        assert data["editedImage"] == data["images"][0]
        assert data["text"] == "hello"

    def test_single_shot_response(self, client, valid_payload):
        with patch_generate(lambda: SingleShotResponse(response=response_with(image_part(b"A")))):
            response = client.post("/api/process-image", json=valid_payload)

        assert response.status_code == 200
        assert response.json()["images"] == [data_url_for(b"A")]

    def test_text_only_response(self, client, valid_payload):
        with patch_generate(lambda: StreamedResponse(chunks=stream_of(
            response_with(text_part("Which part ")),
            response_with(text_part("of the sky?")),
        ))):
            response = client.post("/api/process-image", json=valid_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["images"] == []
        assert "editedImage" not in data
        assert data["text"] == "Which part of the sky?"
        assert "No images were generated" in data["message"]

    def test_empty_response(self, client, valid_payload):
        with patch_generate(lambda: StreamedResponse(chunks=stream_of())):
            response = client.post("/api/process-image", json=valid_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["images"] == []
        assert data["text"] == ""
        assert data["message"] == "The AI returned no content."

    @pytest.mark.parametrize("field,error", [
        ("apiKey", "API key is required"),
        ("imageData", "Image data is required"),
        ("instructions", "Instructions are required"),
    ])
    def test_missing_field(self, client, valid_payload, field, error):
        del valid_payload[field]

        with patch_generate(lambda: StreamedResponse(chunks=stream_of())) as mock_generate:
            response = client.post("/api/process-image", json=valid_payload)

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"] == error
        mock_generate.assert_not_called()

    def test_malformed_data_url(self, client, valid_payload):
        valid_payload["imageData"] = "data:image/png;base64"

        response = client.post("/api/process-image", json=valid_payload)

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["errorKind"] == "InvalidImage"

    @pytest.mark.parametrize("message,status,kind", [
        ("API key not valid. Please pass a valid API key.", 401, "InvalidCredential"),
        ("429 RESOURCE_EXHAUSTED: Quota exceeded", 429, "QuotaExceeded"),
        ("403 PERMISSION_DENIED", 500, "PermissionDenied"),
        ("models/gemini-x is not found", 500, "ModelUnavailable"),
        ("blocked by SAFETY", 500, "ContentBlocked"),
        ("socket closed", 500, "UpstreamError"),
    ])
    def test_upstream_error(self, client, valid_payload, message, status, kind):
        with patch_generate(error=RuntimeError(message)):
            response = client.post("/api/process-image", json=valid_payload)

        assert response.status_code == status
        data = response.json()
        assert data["success"] is False
        assert data["errorKind"] == kind
        assert data["details"] == message
        assert "images" not in data

    def test_invalid_json_body(self, client):
        response = client.post(
            "/api/process-image",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_get_not_allowed(self, client):
        response = client.get("/api/process-image")

        assert response.status_code == 405
        assert response.json() == {"success": False, "error": "Method not allowed"}


@pytest.mark.integration
class TestCors:
    """Preflight and CORS headers"""

    def test_options_returns_200_with_cors_headers(self, client):
        response = client.options("/api/process-image")

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "GET,OPTIONS,PATCH,DELETE,POST,PUT"

    def test_browser_preflight(self, client):
        response = client.options("/api/process-image", headers={
            "Origin": "http://example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        })

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]

    def test_simple_request_gets_allow_origin(self, client, valid_payload):
        del valid_payload["apiKey"]

        response = client.post("/api/process-image", json=valid_payload, headers={"Origin": "http://example.com"})

        assert response.headers["access-control-allow-origin"] == "*"

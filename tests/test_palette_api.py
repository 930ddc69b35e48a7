"""
API integration tests for palette endpoints.

Tests the complete palette API:
- /palette extraction with formatting modes
- /palette/swatch PNG rendering
- error kinds mapped to HTTP status codes
- metrics endpoint
"""

import io

from PIL import Image

from conftest import RED, png_bytes


def _upload(data: bytes):
    return {"file": ("image.png", data, "image/png")}


class TestPaletteEndpoint:
    """Test the /palette endpoint"""

    def test_two_by_two(self, test_client, two_by_two_rows):
        response = test_client.post(
            "/palette",
            params={"size": 2, "tolerance": 0},
            files=_upload(png_bytes(two_by_two_rows))
        )

        assert response.status_code == 200
        data = response.json()

        assert data["width"] == 2
        assert data["height"] == 2
        assert data["size"] == 2
        assert [c["hex"] for c in data["palette"]] == ["#00FF00", "#0000FF"]
        assert data["palette"][0]["rgb"] == [0, 255, 0]
        assert data["palette"][0]["hsv"] == [120.0, 1.0, 1.0]
        assert data["formatted"] == ["R: 000 | G: 255 | B: 000", "R: 000 | G: 000 | B: 255"]
        assert data["request_id"].startswith("pal-")

        debug = data["debug"]
        assert debug["mode"] == "direct"
        assert debug["attempts"] == 1
        assert debug["effective_tolerance"] == 0.0
        assert debug["distinct_colors"] == 3

    def test_hex_formatting(self, test_client, two_by_two_rows):
        response = test_client.post(
            "/palette",
            params={"size": 2, "tolerance": 0, "formatting": "HEX"},
            files=_upload(png_bytes(two_by_two_rows))
        )
        assert response.status_code == 200
        assert response.json()["formatted"] == ["#00FF00", "#0000FF"]

    def test_size_zero_rejected(self, test_client, two_by_two_rows):
        response = test_client.post(
            "/palette",
            params={"size": 0},
            files=_upload(png_bytes(two_by_two_rows))
        )
        assert response.status_code == 422

    def test_transparent_image(self, test_client):
        response = test_client.post(
            "/palette",
            params={"size": 1},
            files=_upload(png_bytes([[RED]], alpha=[[0]]))
        )

        assert response.status_code == 422
        assert response.json()["kind"] == "size_too_large"

    def test_strict_oversized_request(self, test_client, two_by_two_rows):
        response = test_client.post(
            "/palette",
            params={"size": 5, "tolerance": 0, "strict": True},
            files=_upload(png_bytes(two_by_two_rows))
        )

        assert response.status_code == 422
        data = response.json()
        assert data["kind"] == "size_too_large"
        assert "5" in data["detail"]

    def test_loose_oversized_request_is_clamped(self, test_client, two_by_two_rows):
        response = test_client.post(
            "/palette",
            params={"size": 5, "tolerance": 0},
            files=_upload(png_bytes(two_by_two_rows))
        )

        assert response.status_code == 200
        data = response.json()
        assert data["size"] == 3
        assert data["debug"]["requested_size"] == 5

    def test_invalid_image(self, test_client):
        response = test_client.post(
            "/palette",
            params={"size": 2},
            files=_upload(b"definitely not an image")
        )
        assert response.status_code == 400

    def test_tolerance_out_of_range(self, test_client, two_by_two_rows):
        response = test_client.post(
            "/palette",
            params={"size": 2, "tolerance": 500},
            files=_upload(png_bytes(two_by_two_rows))
        )
        assert response.status_code == 422


class TestSwatchEndpoint:
    """Test the /palette/swatch endpoint"""

    def test_swatch_png(self, test_client, two_by_two_rows):
        response = test_client.post(
            "/palette/swatch",
            params={"size": 2, "tolerance": 0, "stripe_width": 3, "height": 2},
            files=_upload(png_bytes(two_by_two_rows))
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.headers["x-palette-colors"] == "#00FF00,#0000FF"

        image = Image.open(io.BytesIO(response.content)).convert("RGB")
        assert image.size == (6, 2)
        assert image.getpixel((0, 0)) == (0, 255, 0)
        assert image.getpixel((5, 1)) == (0, 0, 255)

    def test_swatch_failure_has_kind(self, test_client):
        response = test_client.post(
            "/palette/swatch",
            params={"size": 2},
            files=_upload(png_bytes([[RED]], alpha=[[0]]))
        )
        assert response.status_code == 422
        assert response.json()["kind"] == "size_too_large"


class TestServiceEndpoints:

    def test_metrics_count_requests_and_failures(self, test_client, two_by_two_rows):
        test_client.post("/palette", params={"size": 2, "tolerance": 0},
                         files=_upload(png_bytes(two_by_two_rows)))
        test_client.post("/palette", params={"size": 1},
                         files=_upload(png_bytes([[RED]], alpha=[[0]])))

        counters = test_client.get("/metrics").json()["counters"]
        assert counters["palette_requests_total"] == 2
        assert counters["palette_mode_used_total_direct"] == 1
        assert counters["palette_failed_total_size_too_large"] == 1

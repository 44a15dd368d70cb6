import base64
import io
import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from PIL import Image

from myumc.services import edge_image_handler as edge


def _jpeg(size=(400, 300)):
    out = io.BytesIO()
    Image.new("RGB", size, (10, 120, 60)).save(out, format="JPEG", quality=95)
    return out.getvalue()


def _event(body=b"", status="200", content_type="image/jpeg", querystring="w=100"):
    return {
        "Records": [{
            "cf": {
                "request": {
                    "uri": "/profiles/some%20photo.jpg",
                    "querystring": querystring,
                    "headers": {"host": [{"key": "Host", "value": "cdn.example.org"}]},
                },
                "response": {
                    "status": status,
                    "headers": {"content-type": [{"key": "Content-Type", "value": content_type}]},
                    "body": base64.b64encode(body).decode("ascii"),
                },
            }
        }]
    }


@pytest.fixture
def table(monkeypatch):
    table = MagicMock()
    monkeypatch.setattr(edge, "_metadata_table", lambda: table)
    return table


def test_parse_options():
    assert edge.parse_options("w=300&h=200&q=55") == (300, 200, 55)
    assert edge.parse_options("w=abc&h=-4") == (None, None, edge.DEFAULT_QUALITY)
    assert edge.parse_options("") == (None, None, edge.DEFAULT_QUALITY)


class TestResizeCover:
    def test_width_only_keeps_aspect(self):
        image = Image.new("RGB", (400, 200))
        assert edge.resize_cover(image, 100, None).size == (100, 50)

    def test_height_only(self):
        image = Image.new("RGB", (400, 200))
        assert edge.resize_cover(image, None, 100).size == (200, 100)

    def test_cover_crops_to_box(self):
        image = Image.new("RGB", (400, 200))
        assert edge.resize_cover(image, 150, 150).size == (150, 150)

    def test_never_enlarges(self):
        image = Image.new("RGB", (100, 80))
        assert edge.resize_cover(image, 500, None).size == (100, 80)
        assert edge.resize_cover(image, 120, 40).size == (100, 80)


def test_encode_unsupported_type_returns_none():
    assert edge.encode(Image.new("RGB", (4, 4)), "image/gif", 80) is None


def test_passes_through_errors_and_non_images(table):
    not_found = _event(status="404")
    assert edge.handler(not_found) is not_found["Records"][0]["cf"]["response"]

    css = _event(body=b"body{}", content_type="text/css")
    response = edge.handler(css)
    assert "x-image-processed" not in response["headers"]
    table.put_item.assert_not_called()


def test_optimizes_image_and_records_metadata(table):
    response = edge.handler(_event(body=_jpeg()))

    assert response["bodyEncoding"] == "base64"
    optimized = base64.b64decode(response["body"])
    assert Image.open(io.BytesIO(optimized)).size == (100, 75)
    headers = response["headers"]
    assert headers["x-image-processed"][0]["value"] == "true"
    assert headers["cache-control"][0]["value"] == edge.CACHE_CONTROL
    assert headers["content-length"][0]["value"] == str(len(optimized))
    assert json.loads(headers["x-image-metadata"][0]["value"])["dimensions"] == "400x300"

    item = table.put_item.call_args.kwargs["Item"]
    assert item["id"] == edge.image_id("profiles/some photo.jpg")
    assert item["fileName"] == "some photo.jpg"
    assert item["url"] == "https://cdn.example.org/profiles/some%20photo.jpg"
    assert item["compressionStats"]["isOptimized"] is True


def test_metadata_failure_still_returns_optimized_image(table):
    table.put_item.side_effect = ClientError({"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow"}}, "PutItem")
    response = edge.handler(_event(body=_jpeg()))
    assert response["headers"]["x-image-processed"][0]["value"] == "true"


def test_corrupt_body_returns_origin_response(table):
    event = _event(body=b"not really a jpeg")
    original_body = event["Records"][0]["cf"]["response"]["body"]
    response = edge.handler(event)
    assert response["body"] == original_body
    assert "x-image-processed" not in response["headers"]

"""
CloudFront origin-response handler that optimizes images at the edge.

Deployed as a Lambda@Edge function (``handler``). For successful image
responses it resizes according to the ``w``/``h``/``q`` query parameters,
re-encodes the body, records image metadata in DynamoDB and marks the
response as processed. Any failure returns the origin response untouched.
"""
import base64
import hashlib
import io
import json
import logging
import os
import time
from datetime import datetime, UTC
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, unquote

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from PIL import ExifTags, Image, ImageOps

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 80
CACHE_CONTROL = "public, max-age=31536000"
EXIF_TAGS = (
    "Make", "Model", "DateTimeOriginal", "ExposureTime", "FNumber",
    "ISOSpeedRatings", "FocalLength", "GPSLatitude", "GPSLongitude", "Software",
)
_EXIF_IFD = 0x8769
_GPS_IFD = 0x8825
_ORIENTATION = 0x0112

_table = None


def _metadata_table():
    global _table
    if _table is None:
        _table = boto3.resource("dynamodb").Table(os.environ["METADATA_TABLE_NAME"])
    return _table


def _header(headers: Dict[str, Any], name: str) -> Optional[str]:
    values = headers.get(name) or []
    return values[0].get("value") if values else None


def _set_header(headers: Dict[str, Any], key: str, value: str) -> None:
    headers[key.lower()] = [{"key": key, "value": value}]


def _int_param(params: Dict[str, list], name: str) -> Optional[int]:
    try:
        value = int(params.get(name, [""])[0])
    except ValueError:
        return None
    return value if value > 0 else None


def parse_options(querystring: str) -> Tuple[Optional[int], Optional[int], int]:
    """Return (width, height, quality) from the request query string."""
    params = parse_qs(querystring or "")
    return _int_param(params, "w"), _int_param(params, "h"), _int_param(params, "q") or DEFAULT_QUALITY


def extract_exif(image: Image.Image) -> Dict[str, str]:
    exif = image.getexif()
    if not exif:
        return {}
    found = {}
    sources = [
        (exif, ExifTags.TAGS),
        (exif.get_ifd(_EXIF_IFD), ExifTags.TAGS),
        (exif.get_ifd(_GPS_IFD), ExifTags.GPSTAGS),
    ]
    for ifd, names in sources:
        for tag_id, value in ifd.items():
            name = names.get(tag_id)
            if name in EXIF_TAGS:
                found[name] = str(value).strip()
    return found


def describe(image: Image.Image, original_size: int) -> Dict[str, Any]:
    exif = image.getexif()
    return {
        "originalSize": original_size,
        "format": (image.format or "").lower(),
        "width": image.width,
        "height": image.height,
        "space": image.mode,
        "channels": len(image.getbands()),
        "density": image.info.get("dpi", [None])[0],
        "hasAlpha": "A" in image.getbands() or "transparency" in image.info,
        "orientation": exif.get(_ORIENTATION) if exif else None,
        "exif": extract_exif(image),
    }


def resize_cover(image: Image.Image, width: Optional[int], height: Optional[int]) -> Image.Image:
    """Cover-fit resize that never enlarges the source."""
    if width and height:
        if width > image.width or height > image.height:
            return image
        return ImageOps.fit(image, (width, height), Image.Resampling.LANCZOS)
    if width and width < image.width:
        return image.resize((width, max(1, round(image.height * width / image.width))), Image.Resampling.LANCZOS)
    if height and height < image.height:
        return image.resize((max(1, round(image.width * height / image.height)), height), Image.Resampling.LANCZOS)
    return image


def encode(image: Image.Image, content_type: str, quality: int) -> Optional[bytes]:
    out = io.BytesIO()
    if content_type == "image/jpeg":
        if image.mode not in ("RGB", "L", "CMYK"):
            image = image.convert("RGB")
        image.save(out, format="JPEG", quality=quality, progressive=True, optimize=True)
    elif content_type == "image/png":
        image.save(out, format="PNG", optimize=True)
    elif content_type == "image/webp":
        image.save(out, format="WEBP", quality=quality)
    else:
        return None
    return out.getvalue()


def image_id(key: str) -> str:
    return hashlib.md5(key.encode("utf-8")).hexdigest()


def store_metadata(item: Dict[str, Any]) -> None:
    """Write metadata to DynamoDB; failures are logged, never raised."""
    # DynamoDB rejects floats
    payload = json.loads(json.dumps(item, default=str), parse_float=Decimal)
    try:
        _metadata_table().put_item(Item=payload)
    except (BotoCoreError, ClientError, KeyError):
        logger.exception("Error storing metadata for %s", item.get("id"))


def handler(event, context=None):
    cf = event["Records"][0]["cf"]
    request, response = cf["request"], cf["response"]
    content_type = _header(response.get("headers", {}), "content-type") or ""

    if not str(response.get("status", "")).startswith("2") or not content_type.startswith("image/"):
        return response

    try:
        started = time.perf_counter()
        width, height, quality = parse_options(request.get("querystring", ""))

        data = base64.b64decode(response["body"])
        original_size = len(data)
        image = Image.open(io.BytesIO(data))
        stats = describe(image, original_size)

        optimized = encode(resize_cover(image, width, height), content_type, quality)
        if optimized is None:
            return response

        settings = {"quality": quality, "progressive": True}
        compression = {
            "originalSize": original_size,
            "compressedSize": len(optimized),
            "compressionRatio": round(len(optimized) / original_size, 4) if original_size else None,
            "quality": quality,
            "format": content_type.split("/")[1],
            "processingTime": round((time.perf_counter() - started) * 1000, 3),
            "isOptimized": True,
            "optimizationSettings": settings,
        }

        key = unquote(request["uri"][1:])
        host = _header(request.get("headers", {}), "host")
        store_metadata({
            "id": image_id(key),
            "fileName": key.split("/")[-1],
            "contentType": content_type,
            **stats,
            "compressionStats": compression,
            "url": f"https://{host}{request['uri']}",
            "thumbnailUrl": f"https://{host}{request['uri']}?w=200&q=60",
            "uploadedAt": datetime.now(UTC).isoformat(),
        })

        headers = response.setdefault("headers", {})
        response["body"] = base64.b64encode(optimized).decode("ascii")
        response["bodyEncoding"] = "base64"
        _set_header(headers, "Content-Length", str(len(optimized)))
        _set_header(headers, "Cache-Control", CACHE_CONTROL)
        _set_header(headers, "X-Image-Processed", "true")
        _set_header(headers, "X-Image-Metadata", json.dumps({
            "dimensions": f"{stats['width']}x{stats['height']}",
            "format": stats["format"],
            "size": len(optimized),
        }))
        return response
    except Exception:
        logger.exception("Error processing image %s", request.get("uri"))
        return response

"""Fetching and decoding screenshot imagery."""

from __future__ import annotations

import base64
import binascii
import logging
from io import BytesIO
from pathlib import Path
from threading import Lock
from urllib.parse import unquote, unquote_to_bytes, urlparse

import requests
from requests import Session
from PIL import Image, UnidentifiedImageError
from PIL.Image import DecompressionBombError

from ..errors import ImageLoadError

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10.0
_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

_session_lock = Lock()
_session: Session | None = None


def _get_session() -> Session:
    """Return a shared requests session configured with image headers."""
    global _session
    if _session is None:
        with _session_lock:
            if _session is None:
                session = requests.Session()
                session.headers.update(
                    {
                        "User-Agent": _USER_AGENT,
                        "Accept": "image/avif,image/webp,image/png,image/*,*/*;q=0.8",
                    }
                )
                _session = session
    return _session


def fetch_image_bytes(url: str) -> bytes:
    """Return the raw bytes behind *url*.

    Supports ``http(s)`` URLs, ``data:`` URIs, ``file://`` URLs and plain local
    paths. Failures raise :class:`ImageLoadError`; nothing is retried here.
    """
    if not isinstance(url, str) or not url.strip():
        raise ImageLoadError(str(url), "empty image URL")

    value = url.strip()
    if value.startswith("data:"):
        payload = _decode_data_uri(value)
    else:
        parsed = urlparse(value)
        if parsed.scheme in {"http", "https"}:
            payload = _download(value)
        elif parsed.scheme == "file":
            payload = _read_file(value, Path(unquote(parsed.path)))
        elif parsed.scheme and len(parsed.scheme) > 1:
            raise ImageLoadError(value, f"unsupported URL scheme '{parsed.scheme}'")
        else:
            payload = _read_file(value, Path(value))

    if not payload:
        raise ImageLoadError(value, "empty image payload")
    return payload


def load_image(url: str) -> Image.Image:
    """Fetch and fully decode *url* into an RGBA Pillow image."""
    data = fetch_image_bytes(url)
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            return img.convert("RGBA")
    except (UnidentifiedImageError, DecompressionBombError, OSError) as exc:
        raise ImageLoadError(url, f"not a decodable image ({exc})") from exc


def open_image(source: str | Image.Image) -> Image.Image:
    """Return *source* as an RGBA image, loading it first when it is a URL."""
    if isinstance(source, Image.Image):
        return source if source.mode == "RGBA" else source.convert("RGBA")
    return load_image(source)


def resize_image(img: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Return *img* bilinearly resized to *size*."""
    width, height = size
    if width <= 0 or height <= 0:
        raise ValueError("Size must contain positive integers")
    return img.resize((width, height), Image.Resampling.BILINEAR)


def _download(url: str) -> bytes:
    session = _get_session()
    try:
        response = session.get(url, timeout=_DEFAULT_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.debug("Failed to fetch image bytes from %s", url, exc_info=True)
        raise ImageLoadError(url, str(exc)) from exc
    content_type = response.headers.get("Content-Type", "")
    if content_type.startswith("text/"):
        raise ImageLoadError(url, f"unexpected content type {content_type}")
    return response.content


def _read_file(url: str, path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ImageLoadError(url, f"cannot read file ({exc.strerror or exc})") from exc


def _decode_data_uri(uri: str) -> bytes:
    try:
        header, data = uri.split(",", 1)
    except ValueError as exc:
        raise ImageLoadError(uri, "malformed data URI") from exc
    if ";base64" in header:
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ImageLoadError(uri, "invalid base64 payload") from exc
    return unquote_to_bytes(data)

"""
Asset Image Embedding
Fetches and decodes collectible images for the packet. Every failure returns
None; callers draw the text fallback instead.
"""
import base64
import binascii
import contextvars
import io
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from urllib.parse import parse_qs, unquote_to_bytes, urlsplit

import requests
from PIL import Image
from reportlab.lib.utils import ImageReader

from intent_packet import config

logger = logging.getLogger(__name__)

DECODE_ORDER = ("PNG", "JPEG")


@dataclass
class EmbeddedImage:
    reader: ImageReader
    width: int
    height: int
    source_format: str


def resolve_image_url(url):
    """Candidate HTTP(S) or data: URLs for an image reference, in fetch order."""
    if not url:
        return []
    url = url.strip()
    if url.startswith("data:"):
        return [url]
    if url.startswith("ipfs://"):
        path = url[len("ipfs://"):]
        if path.startswith("ipfs/"):
            path = path[len("ipfs/"):]
        return [config.IPFS_GATEWAY + path]
    if url.startswith("ipfs/"):
        return [config.IPFS_GATEWAY + url[len("ipfs/"):]]
    if url.startswith("ar://"):
        return [config.ARWEAVE_GATEWAY + url[len("ar://"):]]
    if config.ORDINAL_PROXY_PATH in url:
        inscription_id = parse_qs(urlsplit(url).query).get("id", [None])[0]
        if not inscription_id:
            logger.warning("Ordinal image URL without an inscription id: %s", url)
            return []
        return [src.format(id=inscription_id) for src in config.ORDINAL_CONTENT_SOURCES]
    if url.startswith(("http://", "https://")):
        return [url]
    logger.warning("Unsupported image URL scheme: %s", url)
    return []


def decode_image(data):
    """Decode raw bytes as PNG, then JPEG. Returns None if neither works."""
    if not data:
        return None
    for fmt in DECODE_ORDER:
        try:
            img = Image.open(io.BytesIO(data), formats=[fmt])
            img.load()
        except (OSError, SyntaxError, ValueError):
            continue
        if img.mode not in ("RGB", "RGBA", "L"):
            img = img.convert("RGBA")
        return EmbeddedImage(reader=ImageReader(img), width=img.width,
                             height=img.height, source_format=fmt)
    return None


def _decode_data_url(url):
    header, _, payload = url.partition(",")
    try:
        if header.endswith(";base64"):
            return base64.b64decode(payload, validate=True)
        return unquote_to_bytes(payload)
    except (binascii.Error, ValueError) as exc:
        logger.warning("Malformed data: URL: %s", exc)
        return None


def _transfer(url, timeout, session, max_bytes, deadline):
    getter = session.get if session is not None else requests.get
    try:
        response = getter(url, headers={'Accept': 'image/*'}, timeout=timeout, stream=True)
    except requests.RequestException as exc:
        logger.warning("Failed to fetch image from %s: %s", url, exc)
        return None
    with response:
        if not response.ok:
            logger.warning("Failed to fetch image from %s: HTTP %s", url, response.status_code)
            return None
        content_type = response.headers.get('Content-Type', '')
        if content_type and not content_type.lower().startswith('image/'):
            logger.warning("Not an image at %s (content-type %s)", url, content_type)
            return None
        declared = response.headers.get('Content-Length', '')
        if declared.isdigit() and int(declared) > max_bytes:
            logger.warning("Image at %s is %s bytes, over the %d byte limit", url, declared, max_bytes)
            return None

        body = bytearray()
        try:
            for chunk in response.iter_content(chunk_size=config.IMAGE_CHUNK_SIZE):
                body.extend(chunk)
                if len(body) > max_bytes:
                    logger.warning("Image at %s exceeds %d bytes; abandoning", url, max_bytes)
                    return None
                if time.monotonic() > deadline:
                    logger.warning("Image transfer from %s exceeded %ss; abandoning", url, timeout)
                    return None
        except requests.RequestException as exc:
            logger.warning("Image transfer from %s failed: %s", url, exc)
            return None
        return bytes(body)


def _download(url, timeout, session=None, max_bytes=config.IMAGE_MAX_BYTES):
    """
    GET an image body within `timeout` seconds in total.

    The transfer runs on a daemon thread so a server trickling bytes cannot
    hold the caller past the deadline; the thread stops at its next chunk.
    """
    deadline = time.monotonic() + timeout
    result = {}

    def run():
        try:
            result["data"] = _transfer(url, timeout, session, max_bytes, deadline)
        except Exception as exc:
            logger.warning("Error fetching image from %s: %s", url, exc)

    worker = threading.Thread(target=run, name="image-fetch", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        logger.warning("Image fetch from %s exceeded %ss; using fallback", url, timeout)
        return None
    return result.get("data")


def fetch_image(url, timeout=config.IMAGE_FETCH_TIMEOUT, session=None,
                max_bytes=config.IMAGE_MAX_BYTES):
    """
    Fetch and decode one image, trying each candidate URL in turn.

    Never raises: fetch, timeout, size, content-type and decode failures all
    return None. Each candidate gets `timeout` seconds end to end.
    """
    try:
        for candidate in resolve_image_url(url):
            if candidate.startswith("data:"):
                data = _decode_data_url(candidate)
            else:
                data = _download(candidate, timeout, session, max_bytes)
            if data is None:
                continue
            image = decode_image(data)
            if image is not None:
                return image
            logger.warning("Could not decode image from %s as PNG or JPEG", candidate)
    except Exception as exc:
        logger.warning("Error embedding image from %s: %s", url, exc)
    return None


def prefetch_images(assets, fetcher=fetch_image, max_workers=config.IMAGE_FETCH_WORKERS):
    """
    Resolve images for every non-fungible asset that has an image URL.

    Fetches run concurrently, at most `max_workers` at a time; the returned
    mapping (asset id -> EmbeddedImage or None) is complete when this returns.
    """
    targets = [a for a in assets if a.is_non_fungible and a.image_url]
    if not targets:
        return {}

    def load(asset):
        try:
            return fetcher(asset.image_url)
        except Exception as exc:
            logger.warning("Image fetch for asset %s failed: %s", asset.id, exc)
            return None

    workers = max(1, min(max_workers, len(targets)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        # each fetch runs in a copy of the caller's context so its log records
        # carry the same document stamp
        contexts = [contextvars.copy_context() for _ in targets]
        results = list(pool.map(lambda ctx, asset: ctx.run(load, asset), contexts, targets))

    images = {asset.id: image for asset, image in zip(targets, results)}
    logger.info("Prefetched images: %d of %d embedded",
                sum(1 for img in images.values() if img is not None), len(targets))
    return images

# src/core/media/probe.py
"""
Image load probes.

A probe answers one question: does this URL actually load and decode as an
image? The wizard runs at most one probe at a time (see validation.py).

- `ImageProbe` Protocol: what the pipeline awaits.
- `HttpImageProbe`: downloads with requests and decodes with Pillow, off the
  event loop via `asyncio.to_thread`.
"""

from __future__ import annotations

import asyncio
import io
from typing import Protocol, runtime_checkable

import requests
from PIL import Image

from src.core.diagnostics import get_logger

_DEFAULT_UA = "FlatmateWizard/1.0 (+image-probe)"
_MAX_IMAGE_BYTES = 15 * 1024 * 1024  # 15 MiB
_STREAM_CHUNK = 256 * 1024

log = get_logger()


@runtime_checkable
class ImageProbe(Protocol):
    """Asynchronous load check for a candidate image URL."""

    async def check(self, url: str) -> bool:
        """Return True when the URL loads and decodes as an image, False otherwise."""
        ...


def _with_scheme(url: str) -> str:
    return url if url.lower().startswith(("http://", "https://")) else f"https://{url}"


class HttpImageProbe:
    def __init__(self, *, user_agent: str = _DEFAULT_UA, timeout_s: float = 10.0, max_bytes: int = _MAX_IMAGE_BYTES) -> None:
        self.user_agent = user_agent
        self.timeout_s = timeout_s
        self.max_bytes = max_bytes

    async def check(self, url: str) -> bool:
        return await asyncio.to_thread(self._check_sync, url)

    def _check_sync(self, url: str) -> bool:
        target = _with_scheme(url)
        try:
            resp = requests.get(
                target,
                headers={"User-Agent": self.user_agent, "Accept": "image/*", "Connection": "close"},
                timeout=self.timeout_s,
                stream=True,
            )
        except requests.RequestException as e:
            log.debug("image probe transport error for %s: %s", target, e)
            return False

        try:
            if resp.status_code >= 400:
                log.debug("image probe HTTP %s for %s", resp.status_code, target)
                return False

            buf = io.BytesIO()
            for chunk in resp.iter_content(chunk_size=_STREAM_CHUNK):
                if chunk:
                    buf.write(chunk)
                if buf.tell() > self.max_bytes:
                    log.debug("image probe aborted, %s exceeds %d bytes", target, self.max_bytes)
                    return False
        except requests.RequestException as e:
            log.debug("image probe read error for %s: %s", target, e)
            return False
        finally:
            resp.close()

        if not buf.tell():
            return False

        buf.seek(0)
        try:
            with Image.open(buf) as im:
                im.verify()
        except Exception as e:  # noqa: BLE001
            log.debug("image probe decode error for %s: %s", target, type(e).__name__)
            return False
        return True

    def __repr__(self) -> str:
        return f"HttpImageProbe(timeout_s={self.timeout_s}, max_bytes={self.max_bytes})"

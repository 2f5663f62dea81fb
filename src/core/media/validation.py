# src/core/media/validation.py
"""
Bounded, validated list of listing image URLs.

Rules
-----
- At most 5 committed images; at least 3 validated ones to submit.
- Candidates pass a URL shape check, then an async load probe.
- Only one candidate may be probing at a time (the `validating` slot).
- With no probe configured the shape check alone admits a candidate.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from src.core.diagnostics import get_logger
from src.core.media.probe import ImageProbe
from src.core.wizard.errors import ValidationError
from src.schemas.models import ImageRef

MAX_IMAGES = 5
MIN_VALIDATED_IMAGES = 3

# Optional scheme, domain or IPv4, optional port/path/query/fragment
_IMAGE_URL_RE = re.compile(
    r"^(https?://)?"
    r"((([a-z\d](?:[a-z\d-]*[a-z\d])?)\.)*[a-z]{2,}|"
    r"((\d{1,3}\.){3}\d{1,3}))"
    r"(:\d+)?(/[-a-z\d%@_.~+]*)*"
    r"(\?[;&a-z\d%@_.,~+=-]*)?"
    r"(#[-a-z\d_]*)?$",
    re.IGNORECASE,
)

log = get_logger()


def is_valid_image_url(url: str) -> bool:
    return bool(url) and bool(_IMAGE_URL_RE.match(url))


class ImageValidationPipeline:
    def __init__(self, probe: ImageProbe | None = None) -> None:
        self.probe = probe
        self._images: list[ImageRef] = []
        self._validating: str | None = None
        self._closed = False

    # ---- queries ----

    @property
    def images(self) -> tuple[ImageRef, ...]:
        return tuple(self._images)

    @property
    def validating(self) -> str | None:
        """URL currently being probed, if any."""
        return self._validating

    @property
    def is_probing(self) -> bool:
        return self._validating is not None

    def validated_urls(self) -> list[str]:
        return [img.url for img in self._images if img.validated]

    def is_submittable(self) -> bool:
        return len(self.validated_urls()) >= MIN_VALIDATED_IMAGES

    def __len__(self) -> int:
        return len(self._images)

    # ---- commands ----

    async def submit_candidate(self, url: str) -> ImageRef | None:
        """
        Validate and commit one image URL.

        Raises ValidationError with kind ProbeInProgress, InvalidFormat,
        LimitReached or LoadFailed. Returns the committed ImageRef, or None
        when the pipeline was closed while the probe ran.
        """
        if self._validating is not None:
            raise ValidationError("ProbeInProgress", f"ProbeInProgress: still checking {self._validating}")

        candidate = (url or "").strip()
        if not is_valid_image_url(candidate):
            raise ValidationError("InvalidFormat", f"InvalidFormat: {candidate!r} is not a valid image URL", field="url")
        if len(self._images) >= MAX_IMAGES:
            raise ValidationError("LimitReached", f"LimitReached: maximum {MAX_IMAGES} images allowed")

        if self.probe is None:
            return self._commit(candidate)

        self._validating = candidate
        log.debug("image probe started: %s", candidate)
        try:
            ok = await self.probe.check(candidate)
        finally:
            self._validating = None

        if self._closed:
            log.debug("image probe for %s resolved after close; discarded", candidate)
            return None
        if not ok:
            raise ValidationError("LoadFailed", f"LoadFailed: unable to load image from {candidate}", field="url")
        # The list may have been replaced while the probe ran
        if len(self._images) >= MAX_IMAGES:
            raise ValidationError("LimitReached", f"LimitReached: maximum {MAX_IMAGES} images allowed")
        return self._commit(candidate)

    def _commit(self, url: str) -> ImageRef:
        ref = ImageRef(url=url, validated=True)
        self._images.append(ref)
        log.debug("image committed (%d/%d): %s", len(self._images), MAX_IMAGES, url)
        return ref

    def remove_image(self, url: str) -> None:
        for i, img in enumerate(self._images):
            if img.url == url:
                del self._images[i]
                return

    def hydrate(self, urls: Iterable[str]) -> int:
        """
        Replace the list with persisted URLs, trusted as already validated.

        Returns how many URLs were dropped to stay within the limit.
        """
        clean = [u.strip() for u in urls if u and u.strip()]
        dropped = max(len(clean) - MAX_IMAGES, 0)
        if dropped:
            log.warning("hydrate: %d images persisted, keeping first %d", len(clean), MAX_IMAGES)
            clean = clean[:MAX_IMAGES]
        self._images = [ImageRef(url=u, validated=True) for u in clean]
        return dropped

    def reset(self) -> None:
        self._images = []
        self._validating = None

    def close(self) -> None:
        """Host teardown: any probe still running will not write its result."""
        self._closed = True

    def __repr__(self) -> str:
        return f"ImageValidationPipeline(images={len(self._images)}, validating={self._validating!r})"

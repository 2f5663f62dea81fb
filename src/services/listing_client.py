# src/services/listing_client.py
"""
Listing service contract and its HTTP implementation.

- `ListingService` Protocol: the three async calls the wizard depends on.
- `HttpListingService`: JSON over HTTP with requests, run off the event loop
  via `asyncio.to_thread`.

Endpoints
---------
- POST {base}/flatmate/listing                 -> {"id": "..."}
- PUT  {base}/flatmate/listing/update/{id}
- GET  {base}/flatmate/listing/{id}            -> listing record (flat or nested)

Non-2xx responses raise RemoteError carrying the status and the server's
`message`/`error`, or the first 100 characters of a non-JSON body.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import requests

from src.core.diagnostics import get_logger
from src.core.wizard.errors import RemoteError, remote_error_guard
from src.schemas.models import ListingPayload

_DEFAULT_UA = "FlatmateWizard/1.0"
_BODY_PREVIEW = 100

log = get_logger()


@runtime_checkable
class ListingService(Protocol):
    async def create_listing(self, payload: ListingPayload) -> str | None:
        """Persist a new listing and return its identifier."""
        ...

    async def update_listing(self, listing_id: str, payload: ListingPayload) -> None:
        """Replace an existing listing."""
        ...

    async def fetch_listing(self, listing_id: str) -> Mapping[str, Any]:
        """Return the persisted record for a listing."""
        ...


def _error_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        text = resp.text or ""
        return f"non-JSON response: {text[:_BODY_PREVIEW]}"
    if isinstance(body, Mapping):
        detail = body.get("message") or body.get("error")
        if detail:
            return str(detail)
    return resp.reason or "Unknown error occurred on server."


def _raise_for_status(resp: requests.Response, operation: str) -> None:
    if 200 <= resp.status_code < 300:
        return
    detail = _error_detail(resp)
    raise RemoteError(
        f"{operation} failed ({resp.status_code}): {detail}",
        status_code=resp.status_code,
        operation=operation,
    )


def _json_or_empty(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return {}


class HttpListingService:
    def __init__(self, base_url: str, *, timeout_s: float = 15.0, user_agent: str = _DEFAULT_UA) -> None:
        if not base_url or not base_url.strip():
            raise ValueError("base_url must be non-empty")
        self.base_url = base_url.strip().rstrip("/")
        self.timeout_s = timeout_s
        self.user_agent = user_agent

    # ---- endpoints ----

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url, "flatmate", "listing", *parts])

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": "application/json", "Content-Type": "application/json"}

    # ---- sync bodies ----

    def _create_sync(self, body: dict[str, Any]) -> str | None:
        with remote_error_guard("create_listing"):
            resp = requests.post(self._url(), json=body, headers=self._headers(), timeout=self.timeout_s)
            _raise_for_status(resp, "create_listing")
            data = _json_or_empty(resp)
        rid = None
        if isinstance(data, Mapping):
            rid = data.get("id") or data.get("listing_id") or data.get("_id")
        log.debug("create_listing -> %s", rid)
        return str(rid) if rid is not None else None

    def _update_sync(self, listing_id: str, body: dict[str, Any]) -> None:
        with remote_error_guard("update_listing"):
            resp = requests.put(self._url("update", listing_id), json=body, headers=self._headers(), timeout=self.timeout_s)
            _raise_for_status(resp, "update_listing")
        log.debug("update_listing %s ok", listing_id)

    def _fetch_sync(self, listing_id: str) -> Mapping[str, Any]:
        with remote_error_guard("fetch_listing"):
            resp = requests.get(self._url(listing_id), headers=self._headers(), timeout=self.timeout_s)
            _raise_for_status(resp, "fetch_listing")
            try:
                data = resp.json()
            except ValueError as e:
                raise RemoteError(
                    f"fetch_listing returned non-JSON body: {(resp.text or '')[:_BODY_PREVIEW]}",
                    status_code=resp.status_code,
                    operation="fetch_listing",
                ) from e
        if not isinstance(data, Mapping):
            raise RemoteError("fetch_listing returned a non-object body", status_code=resp.status_code, operation="fetch_listing")
        return data

    # ---- async API ----

    async def create_listing(self, payload: ListingPayload) -> str | None:
        return await asyncio.to_thread(self._create_sync, payload.to_wire())

    async def update_listing(self, listing_id: str, payload: ListingPayload) -> None:
        await asyncio.to_thread(self._update_sync, listing_id, payload.to_wire())

    async def fetch_listing(self, listing_id: str) -> Mapping[str, Any]:
        return await asyncio.to_thread(self._fetch_sync, listing_id)

    def __repr__(self) -> str:
        return f"HttpListingService(base_url={self.base_url!r}, timeout_s={self.timeout_s})"

"""put.io v2 client for the file operations the browser needs."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

import httpx

from .browser.entries import Entry
from .errors import ServiceError, TransportError

logger = logging.getLogger(__name__)

API_BASE = "https://api.put.io/v2"
REQUEST_TIMEOUT_SECONDS = 30.0
DOWNLOAD_TIMEOUT = httpx.Timeout(30.0, read=60.0)


@dataclass(frozen=True)
class ZipStatus:
    """Server-side bundle state. ``url`` stays empty until the zip is ready."""

    zip_id: int
    url: str = ""
    size: int = 0

    @property
    def ready(self) -> bool:
        return bool(self.url)


def _join_ids(ids: Iterable[int]) -> str:
    return ",".join(str(int(file_id)) for file_id in ids)


def _error_detail(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(data, dict):
        for key in ("error_message", "error", "message"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return resp.text[:200]


class PutioClient:
    """HTTP client for the put.io v2 API.

    Every method either returns parsed data or raises ``TransportError`` /
    ``ServiceError``. Safe to share between worker threads.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = API_BASE,
        transport: httpx.BaseTransport | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )
        # Download URLs point at storage hosts; never forward the bearer token there.
        self._download_client = httpx.Client(
            timeout=DOWNLOAD_TIMEOUT,
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()
        self._download_client.close()

    def __enter__(self) -> PutioClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path}: {exc}") from exc

        if not resp.is_success:
            raise ServiceError(
                f"{method} {path} failed with HTTP {resp.status_code}: {_error_detail(resp)}",
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise ServiceError(f"{method} {path}: response is not JSON", resp.status_code) from exc
        if not isinstance(data, dict):
            raise ServiceError(f"{method} {path}: unexpected response payload", resp.status_code)
        return data

    def list_files(self, parent_id: int) -> list[Entry]:
        data = self._request("GET", "/files/list", params={"parent_id": parent_id})
        files = data.get("files")
        if not isinstance(files, list):
            raise ServiceError("GET /files/list: missing 'files' array")
        entries = [Entry.from_payload(item) for item in files if isinstance(item, dict) and "id" in item]
        logger.debug("Listed %d entries under %d", len(entries), parent_id)
        return entries

    def get_file(self, file_id: int) -> Entry:
        data = self._request("GET", f"/files/{file_id}")
        payload = data.get("file")
        if not isinstance(payload, dict) or "id" not in payload:
            raise ServiceError(f"GET /files/{file_id}: missing 'file' object")
        return Entry.from_payload(payload)

    def file_url(self, file_id: int) -> str:
        data = self._request("GET", f"/files/{file_id}/url")
        url = data.get("url")
        if not isinstance(url, str) or not url:
            raise ServiceError(f"GET /files/{file_id}/url: no download URL returned")
        return url

    def delete_files(self, file_ids: Iterable[int]) -> None:
        self._request("POST", "/files/delete", data={"file_ids": _join_ids(file_ids)})

    def rename_file(self, file_id: int, name: str) -> None:
        self._request("POST", "/files/rename", data={"file_id": str(file_id), "name": name})

    def create_zip(self, file_ids: Iterable[int]) -> int:
        data = self._request("POST", "/zips/create", data={"file_ids": _join_ids(file_ids)})
        zip_id = data.get("zip_id")
        if isinstance(zip_id, bool) or not isinstance(zip_id, int):
            raise ServiceError("POST /zips/create: missing 'zip_id'")
        return zip_id

    def get_zip(self, zip_id: int) -> ZipStatus:
        data = self._request("GET", f"/zips/{zip_id}")
        url = data.get("url")
        size = data.get("size")
        return ZipStatus(
            zip_id=zip_id,
            url=url if isinstance(url, str) else "",
            size=size if isinstance(size, int) and not isinstance(size, bool) else 0,
        )

    @contextlib.contextmanager
    def stream_download(self, url: str) -> Iterator[httpx.Response]:
        """Open a streaming GET for a download URL; the body is closed on exit."""
        try:
            with self._download_client.stream("GET", url) as resp:
                if resp.status_code != 200:
                    raise ServiceError(f"download failed: HTTP {resp.status_code}", resp.status_code)
                yield resp
        except httpx.HTTPError as exc:
            raise TransportError(f"downloading: {exc}") from exc

"""Object listing against the Google Cloud Storage JSON API."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from swatchbook.domain.errors import StorageUnavailable
from swatchbook.domain.model import StorageObject

from .schema import ListObjectsResponse, ObjectResource

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from swatchbook.adapters.http_resilience import ResilientClient
    from swatchbook.config.gcs import GcsConfig
    from swatchbook.domain.ports.storage import ObjectLister

log = getLogger(__name__)


def _to_storage_object(resource: ObjectResource) -> StorageObject:
    return StorageObject(
        path=resource.name,
        size_bytes=resource.size,
        last_modified=resource.updated,
    )


@dataclass(slots=True)
class GcsObjectLister:
    """Paged ``objects.list`` calls exposed as a lazy async stream.

    The client is owned by the caller; retries and rate limiting come from its
    ``ResilienceConfig``.
    """

    config: GcsConfig
    client: ResilientClient

    async def list(self, prefix: str) -> AsyncIterator[StorageObject]:
        page_token: str | None = None
        pages = 0
        while True:
            page = await self._fetch_page(prefix, page_token)
            pages += 1
            for resource in page.items:
                if resource.is_folder_placeholder:
                    log.debug(
                        "Skipping folder placeholder gs://%s/%s", self.config.bucket, resource.name
                    )
                    continue
                yield _to_storage_object(resource)
            page_token = page.next_page_token
            if not page_token:
                break
        log.debug("Listed gs://%s/%s in %s page(s)", self.config.bucket, prefix, pages)

    async def _fetch_page(self, prefix: str, page_token: str | None) -> ListObjectsResponse:
        params: dict[str, str | int] = {
            "prefix": prefix,
            "maxResults": self.config.page_size,
            "fields": "items(name,size,updated),nextPageToken",
        }
        if page_token:
            params["pageToken"] = page_token
        headers: dict[str, str] = {}
        if self.config.access_token:
            headers["Authorization"] = f"Bearer {self.config.access_token}"

        url = f"b/{quote(self.config.bucket, safe='')}/o"
        try:
            response = await self.client.get(url, params=params, headers=headers)
            response.raise_for_status()
            return ListObjectsResponse.model_validate(response.json())
        except httpx.HTTPError as exc:
            raise StorageUnavailable(
                f"Listing gs://{self.config.bucket}/{prefix} failed: {exc}"
            ) from exc
        except (ValidationError, ValueError) as exc:
            raise StorageUnavailable(
                f"Unexpected listing payload for gs://{self.config.bucket}/{prefix}"
            ) from exc


if TYPE_CHECKING:
    _lister_check: type[ObjectLister] = GcsObjectLister

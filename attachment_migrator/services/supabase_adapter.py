"""Typed adapter for the Supabase REST and Storage APIs.

Wraps the PostgREST table endpoints and the Storage object endpoints the
migrator needs behind explicit methods that are easy to mock and test.
Every failure, whether a transport error or a non-2xx response, is
translated into the migrator's exception hierarchy. The adapter does **not**
retry.
"""

from __future__ import annotations

from typing import Any

import requests
from requests.adapters import DEFAULT_POOLSIZE, HTTPAdapter

from attachment_migrator.constants import (
    ATTACHMENTS_ORDER_COLUMN,
    HTTP_MULTIPLE_CHOICES,
    HTTP_OK,
    METADATA_PAGE_SIZE,
    STORAGE_OBJECTS_TABLE,
    STORAGE_SCHEMA,
)
from attachment_migrator.core.config import SupabaseProject
from attachment_migrator.exceptions import (
    FetchError,
    QueryError,
    SupabaseError,
    TransferError,
)
from attachment_migrator.types import AttachmentRecord, StorageObjectRecord
from attachment_migrator.utils.logging import log_api_request, log_api_response


def _error_message(response: requests.Response) -> str:
    """Extract the most useful error text from a Supabase error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("message", "error_description", "error", "msg"):
            if body.get(key):
                return str(body[key])
    return str(body)


class SupabaseAdapter:
    """Thin typed wrapper around one Supabase project's HTTP APIs."""

    def __init__(
        self,
        project: SupabaseProject,
        timeout: float,
        session: requests.Session | None = None,
        pool_size: int = DEFAULT_POOLSIZE,
    ) -> None:
        self.project = project
        self.timeout = timeout
        self._session = session or requests.Session()
        # Batch workers share this session, one connection each
        pool = HTTPAdapter(pool_maxsize=max(pool_size, DEFAULT_POOLSIZE))
        self._session.mount("https://", pool)
        self._session.mount("http://", pool)
        self._session.headers.update(
            {
                "apikey": project.service_role_key,
                "Authorization": f"Bearer {project.service_role_key}",
            }
        )

    @property
    def rest_url(self) -> str:
        return f"{self.project.url}/rest/v1"

    @property
    def storage_url(self) -> str:
        return f"{self.project.url}/storage/v1"

    def close(self) -> None:
        self._session.close()

    def _request(
        self,
        method: str,
        url: str,
        error_cls: type[SupabaseError],
        **kwargs: Any,
    ) -> requests.Response:
        """Send a request, raising ``error_cls`` on any failure."""
        log_api_request(
            method,
            url,
            {
                **dict(self._session.headers),
                **kwargs.get("headers", {}),
                **kwargs.get("params", {}),
                **kwargs.get("json", {}),
            },
        )
        try:
            response = self._session.request(
                method, url, timeout=self.timeout, **kwargs
            )
        except requests.exceptions.RequestException as e:
            raise error_cls(f"{method} {url} failed: {e}") from e

        log_api_response(response.status_code, url, response.text)

        if not HTTP_OK <= response.status_code < HTTP_MULTIPLE_CHOICES:
            raise error_cls(
                f"{_error_message(response)} (HTTP {response.status_code})",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: requests.Response, error_cls: type[SupabaseError]) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise error_cls(f"Invalid JSON in response from {response.url}") from e

    # -- Tables ---------------------------------------------------------------

    def select_rows(
        self,
        table: str,
        *,
        filters: dict[str, str] | None = None,
        columns: str = "*",
        schema: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order: str | None = None,
        error_cls: type[SupabaseError] = QueryError,
    ) -> list[dict[str, Any]]:
        """Select rows from a PostgREST-exposed table.

        Args:
            table: Table name.
            filters: Column name to PostgREST filter expression, e.g.
                ``{"bucket_id": "eq.app_private"}``.
            columns: The ``select`` column list.
            schema: Non-public schema to read from (``Accept-Profile``).
            limit: Maximum rows to return.
            offset: Rows to skip.
            order: PostgREST ordering, e.g. ``"id.asc"``.
            error_cls: Exception type raised on failure.

        Returns:
            The decoded rows.
        """
        params: dict[str, Any] = {"select": columns}
        if filters:
            params.update(filters)
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset
        if order is not None:
            params["order"] = order
        headers = {"Accept-Profile": schema} if schema else {}

        response = self._request(
            "GET",
            f"{self.rest_url}/{table}",
            error_cls,
            params=params,
            headers=headers,
        )
        rows = self._json(response, error_cls)
        if not isinstance(rows, list):
            raise error_cls(f"Expected a list of rows from {table}, got {type(rows).__name__}")
        return rows

    def list_attachments(
        self,
        table: str,
        page_size: int = METADATA_PAGE_SIZE,
        order_by: str = ATTACHMENTS_ORDER_COLUMN,
    ) -> list[AttachmentRecord]:
        """Fetch every row of the attachments table.

        PostgREST caps the rows returned by a single request, so rows are read
        page by page until a short page comes back. Pages are ordered by
        ``order_by`` so that offsets never skip or repeat a row.

        Raises:
            FetchError: If any page cannot be fetched.
        """
        records: list[AttachmentRecord] = []
        offset = 0
        while True:
            page = self.select_rows(
                table,
                limit=page_size,
                offset=offset,
                order=f"{order_by}.asc",
                error_cls=FetchError,
            )
            records.extend(page)  # type: ignore[arg-type]
            if len(page) < page_size:
                return records
            offset += page_size

    def find_objects(self, bucket_id: str, name: str) -> list[StorageObjectRecord]:
        """Look up ``storage.objects`` rows matching a bucket and object name.

        Raises:
            QueryError: If the index query fails.
        """
        rows = self.select_rows(
            STORAGE_OBJECTS_TABLE,
            filters={"bucket_id": f"eq.{bucket_id}", "name": f"eq.{name}"},
            columns="id,bucket_id,name",
            schema=STORAGE_SCHEMA,
            error_cls=QueryError,
        )
        return rows  # type: ignore[return-value]

    # -- Storage --------------------------------------------------------------

    def copy_within_bucket(
        self, bucket_id: str, source_path: str, dest_path: str
    ) -> None:
        """Copy an object to a new key inside the same bucket.

        Raises:
            TransferError: If the source is missing or the copy fails.
        """
        self._request(
            "POST",
            f"{self.storage_url}/object/copy",
            TransferError,
            json={
                "bucketId": bucket_id,
                "sourceKey": source_path,
                "destinationKey": dest_path,
            },
        )

    def get_bucket(self, bucket_id: str) -> dict[str, Any]:
        """Return the bucket's metadata.

        Raises:
            TransferError: If the bucket does not exist or the storage API is
                unreachable.
        """
        response = self._request(
            "GET", f"{self.storage_url}/bucket/{bucket_id}", TransferError
        )
        return self._json(response, TransferError)

    def list_buckets(self) -> list[dict[str, Any]]:
        """Return every bucket of the project.

        Raises:
            TransferError: If the storage API is unreachable or rejects the
                credentials.
        """
        response = self._request("GET", f"{self.storage_url}/bucket", TransferError)
        return self._json(response, TransferError)

"""
Remote Record Store

Talks to the REST service over HTTP. Each entity kind lives under its own
base path (/api/transactions, /api/categories, /api/budgets) and exposes
GET list, POST create, PUT update and DELETE.

Any transport error, timeout or non-2xx status is raised as
RemoteUnavailableError. A 2xx response whose body can't be decoded or
validated is raised as RemoteProtocolError: the server has already acted,
so the gateway must not repeat the operation locally. Nothing is retried
here; the resource gateway decides what happens next.
"""

from typing import Any, Optional
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from finance_tracker.config.settings import ApiSettings
from finance_tracker.models.finance import EntityKind
from finance_tracker.services.storage.interface import (
    RecordStoreInterface,
    RemoteProtocolError,
    RemoteUnavailableError,
)


def create_http_client(
    settings: Optional[ApiSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """One shared async client for all three entity kinds."""
    settings = settings or ApiSettings()
    return httpx.AsyncClient(
        base_url=settings.url,
        timeout=settings.timeout_seconds,
        transport=transport,
    )


class RemoteRecordStore(RecordStoreInterface):
    """REST implementation of one entity kind's record set."""

    def __init__(self, kind: EntityKind, client: httpx.AsyncClient):
        self.kind = kind
        self._client = client
        self._logger = structlog.get_logger(__name__)

    def _item_path(self, entity_id: str) -> str:
        return f"{self.kind.path}/{quote(entity_id, safe='')}"

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise RemoteUnavailableError(f"{method} {path} failed: {e!r}") from e

        if not response.is_success:
            raise RemoteUnavailableError(
                f"{method} {path} returned HTTP {response.status_code}"
            )
        return response

    def _decode(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise RemoteProtocolError(
                f"{response.request.method} {response.request.url.path} returned invalid JSON: {e}"
            ) from e

    async def list_all(self) -> list[Any]:
        response = await self._request("GET", self.kind.path)
        payload = self._decode(response)
        if not isinstance(payload, list):
            raise RemoteProtocolError(
                f"Expected a list of {self.kind.value}, got {type(payload).__name__}"
            )

        entities = []
        for document in payload:
            try:
                entities.append(self.kind.model.model_validate(document))
            except ValidationError as e:
                # One bad document shouldn't hide the rest
                self._logger.warning(
                    "remote_record_skipped",
                    kind=self.kind.value,
                    record_id=document.get("id") if isinstance(document, dict) else None,
                    error=str(e),
                )
        return entities

    async def create(self, draft: BaseModel) -> Any:
        response = await self._request("POST", self.kind.path, json=draft.to_wire())
        try:
            return self.kind.model.model_validate(self._decode(response))
        except ValidationError as e:
            raise RemoteProtocolError(
                f"Server returned an invalid {self.kind.label}: {e}"
            ) from e

    async def update(self, entity: Any) -> Any:
        await self._request("PUT", self._item_path(entity.id), json=entity.to_wire())
        return entity

    async def delete(self, entity_id: str) -> None:
        await self._request("DELETE", self._item_path(entity_id))

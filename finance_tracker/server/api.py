"""
REST service for the finance record store.

Each entity kind gets the same four routes under /api/<kind>:
GET (list), POST (create, 201), PUT /<id> (update, echoes the body)
and DELETE /<id> (204). Storage failures become 500 {"error": ...}.

Run with:
    uvicorn finance_tracker.server.api:app --port 5000
"""

from typing import Optional

import structlog
from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from finance_tracker.audit import configure_logging
from finance_tracker.config.settings import AppSettings, ServerSettings
from finance_tracker.models.finance import EntityKind
from finance_tracker.server.store import DocumentStore
from finance_tracker.services.storage.interface import StorageError

logger = structlog.get_logger(__name__)


def _resource_router(kind: EntityKind, store: DocumentStore) -> APIRouter:
    router = APIRouter(prefix=f"/api{kind.path}", tags=[kind.value])
    collection = store.collection(kind.value)
    draft_model = kind.draft_model
    entity_model = kind.model

    @router.get("")
    def list_records() -> list[dict]:
        return collection.find_all()

    @router.post("", status_code=201)
    def create_record(draft: draft_model) -> dict:
        document = collection.insert_one(draft.to_wire())
        logger.info("record_created", kind=kind.value, record_id=document["id"])
        return document

    @router.put("/{record_id}")
    def update_record(record_id: str, entity: entity_model) -> dict:
        document = entity.to_wire()
        matched = collection.update_one(record_id, document)
        logger.info("record_updated", kind=kind.value, record_id=record_id, matched=matched)
        return document

    @router.delete("/{record_id}", status_code=204)
    def delete_record(record_id: str) -> Response:
        removed = collection.delete_one(record_id)
        logger.info("record_deleted", kind=kind.value, record_id=record_id, removed=removed)
        return Response(status_code=204)

    return router


def create_app(
    settings: Optional[ServerSettings] = None,
    store: Optional[DocumentStore] = None,
) -> FastAPI:
    """Build the REST service over a document store."""
    settings = settings or ServerSettings()
    store = store or DocumentStore.from_settings(settings)

    app = FastAPI(title="Personal Finance Tracker API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("storage_error", method=request.method, path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"error": f"Storage failure: {exc}"})

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    for kind in EntityKind:
        app.include_router(_resource_router(kind, store))

    return app


configure_logging(AppSettings().log_level)
app = create_app()

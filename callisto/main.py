"""
main.py

establishes fastapi routes for the ui: one route per config mutation, the http
relay, and a websocket that streams callisto-config events.

no socket can be connected while startup runs, so the startup document reaches
observers as the first /events message rather than through the notifier.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .config_store import ConfigStore
from .errors import NotFoundError, RelayError, StoreError
from .http_relay import send_http_request
from .models import (
    AddWorkspaceRequest,
    CallistoConfig,
    CollectionNameRequest,
    EnvironmentRequest,
    HttpRequest,
    HttpResponse,
    RequestFieldsRequest,
)
from .notifier import ChangeNotifier
from .settings import CONFIG_EVENT, CONFIG_PATH, CORS_ORIGINS, LOG_LEVEL, SERIALIZE_WRITES

logger = logging.getLogger(__name__)


def create_app(config_path: Path | None = None, store: ConfigStore | None = None) -> FastAPI:
    path = Path(config_path) if config_path else CONFIG_PATH
    if store is None:
        store = ConfigStore(ChangeNotifier(), serialize_writes=SERIALIZE_WRITES)
    if store.notifier is None:
        store.notifier = ChangeNotifier()
    notifier = store.notifier

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(level=LOG_LEVEL)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            config = store.initialize_or_load(path)
        except StoreError as e:
            logger.error("Failed to load config: %s", e)
            raise
        logger.info("Config loaded successfully: %d workspaces", len(config.workspaces))
        if notifier.has_listeners:
            notifier.publish(CONFIG_EVENT, config)
        else:
            logger.debug("No observer yet; /events sends the startup document on connect")
        yield
        notifier.close()

    app = FastAPI(title="callisto config store", version="0.1.0", lifespan=lifespan)
    app.state.store = store
    app.state.config_path = path

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFoundError)
    async def not_found(_: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RelayError)
    async def relay_failed(_: Request, exc: RelayError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(StoreError)
    async def store_failed(_: Request, exc: StoreError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/config")
    def get_config() -> CallistoConfig:
        return store.get_config(path)

    @app.post("/workspaces")
    def add_workspace(req: AddWorkspaceRequest) -> CallistoConfig:
        return store.add_workspace(path, req.name)

    @app.delete("/workspaces/{workspace_id}")
    def delete_workspace(workspace_id: str) -> CallistoConfig:
        return store.delete_workspace(path, workspace_id)

    @app.post("/workspaces/{workspace_id}/collections")
    def create_collection(workspace_id: str, req: CollectionNameRequest) -> CallistoConfig:
        return store.create_collection(path, workspace_id, req.name)

    @app.patch("/workspaces/{workspace_id}/collections/{collection_id}")
    def rename_collection(workspace_id: str, collection_id: str, req: CollectionNameRequest) -> CallistoConfig:
        return store.rename_collection(path, workspace_id, collection_id, req.name)

    @app.delete("/workspaces/{workspace_id}/collections/{collection_id}")
    def delete_collection(workspace_id: str, collection_id: str) -> CallistoConfig:
        return store.delete_collection(path, workspace_id, collection_id)

    @app.post("/workspaces/{workspace_id}/collections/{collection_id}/requests")
    def create_request(workspace_id: str, collection_id: str, req: RequestFieldsRequest) -> CallistoConfig:
        return store.create_request(
            path, workspace_id, collection_id,
            req.name, req.req_type, req.method, req.curl,
        )

    @app.put("/workspaces/{workspace_id}/collections/{collection_id}/requests/{request_id}")
    def update_request(
        workspace_id: str, collection_id: str, request_id: str, req: RequestFieldsRequest
    ) -> CallistoConfig:
        return store.update_request(
            path, workspace_id, collection_id, request_id,
            req.name, req.req_type, req.method, req.curl,
        )

    @app.delete("/workspaces/{workspace_id}/collections/{collection_id}/requests/{request_id}")
    def delete_request(workspace_id: str, collection_id: str, request_id: str) -> CallistoConfig:
        return store.delete_request(path, workspace_id, collection_id, request_id)

    @app.post("/environments")
    def create_environment(req: EnvironmentRequest) -> CallistoConfig:
        return store.create_environment(path, req.name, req.variables)

    @app.put("/environments/{environment_id}")
    def update_environment(environment_id: str, req: EnvironmentRequest) -> CallistoConfig:
        return store.update_environment(path, environment_id, req.name, req.variables)

    @app.delete("/environments/{environment_id}")
    def delete_environment(environment_id: str) -> CallistoConfig:
        return store.delete_environment(path, environment_id)

    @app.post("/http/send")
    def send(req: HttpRequest) -> HttpResponse:
        return send_http_request(req)

    @app.websocket("/events")
    async def events(ws: WebSocket):
        await ws.accept()
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[dict] = asyncio.Queue()

        # publish runs in the threadpool; hop back onto this socket's loop
        def forward(event: str, config: CallistoConfig) -> None:
            payload = {"event": event, "payload": config.model_dump(mode="json")}
            loop.call_soon_threadsafe(queue.put_nowait, payload)

        unsubscribe = notifier.subscribe(forward)
        receiver = getter = None
        try:
            current = await run_in_threadpool(store.get_config, path)
            await ws.send_json({"event": CONFIG_EVENT, "payload": current.model_dump(mode="json")})

            receiver = asyncio.ensure_future(ws.receive())
            getter = asyncio.ensure_future(queue.get())
            while True:
                done, _ = await asyncio.wait({receiver, getter}, return_when=asyncio.FIRST_COMPLETED)
                if getter in done:
                    await ws.send_json(getter.result())
                    getter = asyncio.ensure_future(queue.get())
                if receiver in done:
                    if receiver.result()["type"] == "websocket.disconnect":
                        break
                    receiver = asyncio.ensure_future(ws.receive())
        except WebSocketDisconnect:
            logger.debug("config observer disconnected")
        finally:
            unsubscribe()
            for task in (receiver, getter):
                if task is not None:
                    task.cancel()

    return app


app = create_app()

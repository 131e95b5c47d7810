"""HTTP and WebSocket surface for the kiosk, admin and display pages."""

from __future__ import annotations

import json
import logging
from typing import Any

import aiohttp
from aiohttp import web

from skillsqueue._constants import QUEUE_DATA_FILENAME, SETTINGS_FILENAME
from skillsqueue.config import AppConfig, AutoDequeueConfig
from skillsqueue.engine import AutoDequeueEngine
from skillsqueue.exceptions import InvalidRequestError, QueueOperationError
from skillsqueue.service import QueueService
from skillsqueue.store.queue_store import QueueStore
from skillsqueue.store.settings_store import SettingsStore

_logger = logging.getLogger(__name__)

HEARTBEAT_S = 30.0


class BroadcastHub:
    """Connected display clients and fan-out of queue snapshots."""

    def __init__(self) -> None:
        self._clients: set[web.WebSocketResponse] = set()

    def __len__(self) -> int:
        return len(self._clients)

    def add(self, ws: web.WebSocketResponse) -> None:
        self._clients.add(ws)
        _logger.debug("WebSocket client connected (total %d)", len(self._clients))

    def discard(self, ws: web.WebSocketResponse) -> None:
        self._clients.discard(ws)
        _logger.debug("WebSocket client disconnected (total %d)", len(self._clients))

    async def send(self, payload: dict[str, Any]) -> int:
        """Send *payload* to every open client; returns how many received it."""
        data = json.dumps(payload)
        sent = 0
        for ws in list(self._clients):
            if ws.closed:
                self._clients.discard(ws)
                continue
            try:
                await ws.send_str(data)
            except (ConnectionError, aiohttp.ClientError):
                _logger.debug("Dropping unreachable WebSocket client", exc_info=True)
                self._clients.discard(ws)
                continue
            sent += 1
        _logger.debug("Broadcast to %d client(s)", sent)
        return sent

    async def close_all(self) -> None:
        for ws in list(self._clients):
            await ws.close(code=aiohttp.WSCloseCode.GOING_AWAY, message=b"Server shutdown")
        self._clients.clear()


SERVICE_KEY = web.AppKey("service", QueueService)
ENGINE_KEY = web.AppKey("engine", AutoDequeueEngine)
HUB_KEY = web.AppKey("hub", BroadcastHub)
ENGINE_CONFIG_KEY = web.AppKey("engine_config", AutoDequeueConfig)


async def _read_body(request: web.Request) -> dict[str, Any]:
    """JSON object body; an empty body reads as ``{}``."""
    if not request.can_read_body:
        return {}
    text = await request.text()
    if not text.strip():
        return {}
    try:
        body = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidRequestError(f"Invalid JSON body: {exc.msg}") from exc
    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    return body


def _team_from(body: dict[str, Any]) -> str:
    team = body.get("team")
    if isinstance(team, int) and not isinstance(team, bool):
        team = str(team)
    if not isinstance(team, str) or not team.strip():
        raise InvalidRequestError("Missing team")
    return team.strip()


def _optional_int(body: dict[str, Any], key: str) -> int | None:
    value = body.get(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError(f"{key} must be an integer") from exc


@web.middleware
async def error_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
    try:
        return await handler(request)
    except QueueOperationError as exc:
        _logger.debug("%s %s rejected: %s", request.method, request.path, exc)
        return web.json_response({"error": str(exc)}, status=exc.http_status)


async def add_team(request: web.Request) -> web.Response:
    team = _team_from(await _read_body(request))
    await request.app[SERVICE_KEY].add_team(team)
    return web.json_response({"team": team})


async def serve_next(request: web.Request) -> web.Response:
    field = _optional_int(await _read_body(request), "field")
    entry = await request.app[SERVICE_KEY].serve_next(field)
    return web.json_response({"team": entry.to_wire()})


async def unserve(request: web.Request) -> web.Response:
    body = await _read_body(request)
    team = _team_from(body)
    entry = await request.app[SERVICE_KEY].unserve(team, _optional_int(body, "amount"))
    return web.json_response({"team": entry.number})


async def remove_team(request: web.Request) -> web.Response:
    team = _team_from(await _read_body(request))
    await request.app[SERVICE_KEY].remove_team(team)
    return web.json_response({"team": team})


async def get_settings(request: web.Request) -> web.Response:
    return web.json_response(request.app[SERVICE_KEY].settings_store.get_settings().to_wire())


async def update_settings(request: web.Request) -> web.Response:
    settings = await request.app[SERVICE_KEY].update_settings(await _read_body(request))
    return web.json_response(settings.to_wire())


async def queue_status(request: web.Request) -> web.Response:
    return web.json_response(request.app[SERVICE_KEY].queue_status().to_wire())


async def auto_dequeue_status(request: web.Request) -> web.Response:
    return web.json_response(request.app[ENGINE_KEY].status().to_wire())


async def websocket(request: web.Request) -> web.WebSocketResponse:
    ws = web.WebSocketResponse(heartbeat=HEARTBEAT_S)
    await ws.prepare(request)

    hub = request.app[HUB_KEY]
    hub.add(ws)
    try:
        await ws.send_json(request.app[SERVICE_KEY].snapshot())
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.ERROR:
                _logger.warning("WebSocket client error: %s", ws.exception())
    finally:
        hub.discard(ws)
    return ws


async def _on_startup(app: web.Application) -> None:
    app[ENGINE_KEY].initialize(app[ENGINE_CONFIG_KEY])


async def _on_shutdown(app: web.Application) -> None:
    await app[HUB_KEY].close_all()


async def _on_cleanup(app: web.Application) -> None:
    await app[ENGINE_KEY].shutdown()


def create_app(
    service: QueueService,
    engine: AutoDequeueEngine,
    engine_config: AutoDequeueConfig,
) -> web.Application:
    """Wire routes, the broadcast hub and the engine lifecycle."""
    app = web.Application(middlewares=[error_middleware])
    hub = BroadcastHub()
    app[SERVICE_KEY] = service
    app[ENGINE_KEY] = engine
    app[HUB_KEY] = hub
    app[ENGINE_CONFIG_KEY] = engine_config

    async def _broadcast_snapshot() -> None:
        await hub.send(service.snapshot())

    service.queue_store.add_listener(_broadcast_snapshot)

    app.add_routes(
        [
            web.post("/api/add", add_team),
            web.post("/api/serve", serve_next),
            web.post("/api/unserve", unserve),
            web.post("/api/remove", remove_team),
            web.get("/api/queue/settings", get_settings),
            web.post("/api/queue/settings", update_settings),
            web.get("/api/queue/status", queue_status),
            web.get("/api/auto-dequeue/status", auto_dequeue_status),
            web.get("/ws", websocket),
        ]
    )
    app.on_startup.append(_on_startup)
    app.on_shutdown.append(_on_shutdown)
    app.on_cleanup.append(_on_cleanup)
    return app


def build_app(config: AppConfig) -> web.Application:
    """Load the stores from ``config.data_dir`` and build the application."""
    queue_store = QueueStore.load(config.data_dir / QUEUE_DATA_FILENAME)
    settings_store = SettingsStore.load(config.data_dir / SETTINGS_FILENAME)
    service = QueueService(queue_store, settings_store)
    engine = AutoDequeueEngine(queue_store)
    return create_app(service, engine, config.auto_dequeue)

# server.py
# Description: aiohttp transport for the channel router of the store-owning process
#
# Imports
import asyncio
from typing import Any, Dict, Optional
#
# Third-Party Imports
from aiohttp import web
from loguru import logger
#
# Local Imports
from .channels import IPC_PATH_PREFIX
from .handlers import ChannelRouter, register_ipc_handlers
from ..DB.groups_store import GroupsStore
from ..DB.store_errors import (
    BadRequestError,
    NotFoundError,
    StorageUnavailableError,
    StoreError,
    UnknownChannelError,
)
from ..Windows.window_manager import StickyNoteWindowManager
#
#######################################################################################################################
#
# Functions:

ROUTER_KEY = web.AppKey("router", ChannelRouter)

ERROR_STATUS = {
    NotFoundError: 404,
    UnknownChannelError: 404,
    BadRequestError: 400,
    StorageUnavailableError: 503,
}

log = logger.bind(module="IPCServer")


def error_status(error: StoreError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 500


def error_body(kind: str, message: str) -> Dict[str, Any]:
    return {"ok": False, "error": {"kind": kind, "message": message}}


async def handle_channel(request: web.Request) -> web.Response:
    """POST /ipc/{channel} with a JSON object payload (or no body)."""
    router = request.app[ROUTER_KEY]
    channel = request.match_info["channel"]

    payload: Optional[Dict[str, Any]] = None
    if request.can_read_body:
        try:
            payload = await request.json()
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError alike
            return web.json_response(error_body(BadRequestError.kind, f"Body is not valid JSON: {e}"), status=400)

    try:
        result = await router.dispatch(channel, payload)
    except StoreError as e:
        status = error_status(e)
        if status >= 500:
            log.error(f"{channel} failed: {e}")
        else:
            log.info(f"{channel} rejected ({e.kind}): {e}")
        return web.json_response(error_body(e.kind, str(e)), status=status)

    return web.json_response({"ok": True, "result": result})


async def handle_health(request: web.Request) -> web.Response:
    return web.json_response({"ok": True, "result": {"channels": request.app[ROUTER_KEY].channels}})


def create_app(router: ChannelRouter) -> web.Application:
    app = web.Application()
    app[ROUTER_KEY] = router
    app.router.add_post(f"{IPC_PATH_PREFIX}/{{channel}}", handle_channel)
    app.router.add_get("/health", handle_health)
    return app


def create_store_app(store: GroupsStore, window_manager: StickyNoteWindowManager) -> web.Application:
    router = register_ipc_handlers(ChannelRouter(), store, window_manager)
    app = create_app(router)

    async def _close_windows(app: web.Application) -> None:
        await window_manager.close_all()
        store.close()

    app.on_shutdown.append(_close_windows)
    return app


async def run_store_server(store: GroupsStore, window_manager: StickyNoteWindowManager,
                           host: str, port: int, stop_event: Optional[asyncio.Event] = None) -> None:
    """Serve until ``stop_event`` is set (or forever) and then clean up."""
    app = create_store_app(store, window_manager)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    log.info(f"Store server listening on http://{host}:{port}")
    try:
        await (stop_event or asyncio.Event()).wait()
    finally:
        log.info("Store server shutting down")
        await runner.cleanup()

#
# End of server.py
#######################################################################################################################

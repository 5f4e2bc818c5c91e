"""
HTTP server for the browser sync coordinator
"""
import json
import logging
from typing import Any, Dict, Optional
from aiohttp import web

from ..core.config import Config
from ..core.coordinator import SyncCoordinator
from ..core.exceptions import InternalFault, ValidationError
from ..core.sweeper import PresenceSweeper
from ..utils.helpers import get_process_info

SERVER_NAME = "TradingView Sync Server"

ENDPOINTS = [
    'GET /health',
    'GET /sync-state',
    'POST /sync-state',
    'POST /claim-leader',
    'POST /heartbeat',
    'GET /browsers',
    'POST /reset',
]

CORS_HEADERS = {
    'Access-Control-Allow-Methods': 'GET,HEAD,PUT,PATCH,POST,DELETE',
    'Access-Control-Allow-Headers': 'Content-Type',
}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() in ('1', 'true', 'yes')
    return bool(value)


class SyncServer:
    """
    aiohttp front end: JSON framing, CORS and status codes around a SyncCoordinator
    """

    def __init__(self, config: Config = None, coordinator: SyncCoordinator = None,
                 enable_sweeper: bool = True):
        self.config = config or Config()
        self.coordinator = coordinator or SyncCoordinator(self.config.coordinator)
        self.sweeper = PresenceSweeper(self.coordinator) if enable_sweeper else None
        self.logger = logging.getLogger("SyncServer")
        self.runner: Optional[web.AppRunner] = None

        self.app = web.Application(
            middlewares=[self.cors_middleware, self.error_middleware],
            client_max_size=self.config.server.max_payload_mb * 1024 * 1024,
        )
        self.setup_routes()
        self.app.on_startup.append(self._on_startup)
        self.app.on_cleanup.append(self._on_cleanup)

    def setup_routes(self):
        """Setup HTTP routes"""
        self.app.router.add_get('/', self.server_info)
        self.app.router.add_get('/health', self.health_check)
        self.app.router.add_get('/sync-state', self.get_sync_state)
        self.app.router.add_post('/sync-state', self.post_sync_state)
        self.app.router.add_post('/claim-leader', self.claim_leader)
        self.app.router.add_post('/heartbeat', self.heartbeat)
        self.app.router.add_get('/browsers', self.list_browsers)
        self.app.router.add_post('/reset', self.reset)

    # ------------------------------------------------------------------
    # Middlewares
    # ------------------------------------------------------------------

    @web.middleware
    async def cors_middleware(self, request, handler):
        headers = dict(CORS_HEADERS)
        headers['Access-Control-Allow-Origin'] = self.config.server.cors_origin

        if request.method == 'OPTIONS':
            return web.Response(status=204, headers=headers)
        try:
            response = await handler(request)
        except web.HTTPException as e:
            e.headers.update(headers)
            raise
        response.headers.update(headers)
        return response

    @web.middleware
    async def error_middleware(self, request, handler):
        try:
            return await handler(request)
        except ValidationError as e:
            return web.json_response({"success": False, "error": str(e)}, status=400)
        except web.HTTPNotFound:
            return web.json_response({"error": "Not found"}, status=404)
        except web.HTTPException:
            raise
        except InternalFault as e:
            self.logger.error(f"Error handling {request.method} {request.path}: {e}")
            return web.json_response({"error": "Internal server error"}, status=500)
        except Exception:
            self.logger.exception(f"Error handling {request.method} {request.path}")
            return web.json_response({"error": "Internal server error"}, status=500)

    async def _read_json(self, request) -> Dict[str, Any]:
        try:
            data = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationError("invalid JSON body")
        if not isinstance(data, dict):
            raise ValidationError("payload must be a JSON object")
        return data

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def server_info(self, request):
        """Server name, endpoints and current leader"""
        result = {
            'name': SERVER_NAME,
            'version': self.coordinator.version,
            'endpoints': ENDPOINTS,
        }
        result.update(self.coordinator.info())
        return web.json_response(result)

    async def health_check(self, request):
        """Health check endpoint"""
        result = self.coordinator.health_check()
        process = get_process_info()
        result['memory_usage'] = process['memory_usage']
        result['process'] = process
        return web.json_response(result)

    async def get_sync_state(self, request):
        browser_id = request.query.get('browserId')
        tf = request.query.get('tf')
        return web.json_response(self.coordinator.get_state(browser_id, tf))

    async def post_sync_state(self, request):
        data = await self._read_json(request)
        return web.json_response(self.coordinator.post_state(data))

    async def claim_leader(self, request):
        data = await self._read_json(request)
        result = self.coordinator.claim_leader(
            data.get('browserId'),
            timestamp=data.get('timestamp'),
            force=_as_bool(data.get('force', False)),
            tag=data.get('tf'),
        )
        return web.json_response(result)

    async def heartbeat(self, request):
        data = await self._read_json(request)
        result = self.coordinator.heartbeat(
            data.get('browserId'),
            tag=data.get('tf'),
            is_leader_claim=_as_bool(data.get('isLeader', False)),
        )
        return web.json_response(result)

    async def list_browsers(self, request):
        return web.json_response(self.coordinator.get_browsers())

    async def reset(self, request):
        return web.json_response(self.coordinator.reset())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def _on_startup(self, app):
        if self.sweeper:
            self.sweeper.start()

    async def _on_cleanup(self, app):
        if self.sweeper:
            await self.sweeper.stop()

    async def start(self):
        """Start the sync server"""
        host, port = self.config.server.host, self.config.server.port
        self.logger.info(f"Starting sync server on {host}:{port}")

        self.runner = web.AppRunner(self.app)
        await self.runner.setup()

        site = web.TCPSite(self.runner, host, port)
        await site.start()

        self.logger.info(f"✅ {SERVER_NAME} v{self.coordinator.version} running on port {port}")
        self.logger.info(f"📡 Health: http://localhost:{port}/health")

    async def stop(self):
        """Stop the sync server"""
        self.logger.info("Stopping sync server")
        if self.runner is not None:
            await self.runner.cleanup()
            self.runner = None

"""
Client for the browser sync coordinator HTTP API
"""
import logging
from typing import Any, Dict, Optional
import aiohttp


class SyncClientError(Exception):
    """Non-2xx response from the coordinator"""

    def __init__(self, status: int, body: Any):
        self.status = status
        self.body = body
        super().__init__(f"Request failed with status {status}: {body}")


class SyncClient:
    """
    Thin async wrapper over the coordinator endpoints
    """

    def __init__(self, base_url: str, browser_id: Optional[str] = None, tf: Optional[str] = None,
                 timeout: float = 10):
        self.base_url = base_url.rstrip('/')
        self.browser_id = browser_id
        self.tf = tf
        self.timeout = timeout
        self.logger = logging.getLogger("SyncClient")

    async def _request(self, method: str, path: str, json: Dict[str, Any] = None,
                       params: Dict[str, Any] = None) -> Dict[str, Any]:
        try:
            async with aiohttp.ClientSession() as session:
                async with session.request(
                    method,
                    f"{self.base_url}{path}",
                    json=json,
                    params=params,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    data = await response.json(content_type=None)
                    if response.status >= 400:
                        raise SyncClientError(response.status, data)
                    return data

        except aiohttp.ClientError as e:
            self.logger.error(f"Error calling {method} {path}: {e}")
            raise

    def _identity(self, browser_id: Optional[str]) -> Dict[str, Any]:
        body = {'browserId': browser_id or self.browser_id}
        if self.tf:
            body['tf'] = self.tf
        return body

    async def health(self) -> Dict[str, Any]:
        return await self._request('GET', '/health')

    async def get_state(self) -> Dict[str, Any]:
        """Read shared state; registers this browser when it has an id"""
        params = {}
        if self.browser_id:
            params['browserId'] = self.browser_id
        if self.tf:
            params['tf'] = self.tf
        return await self._request('GET', '/sync-state', params=params)

    async def post_state(self, updates: Dict[str, Any],
                         heartbeat_ts: Optional[int] = None) -> Dict[str, Any]:
        """Push payload fields; as leader this also renews the heartbeat"""
        body = dict(updates)
        if self.browser_id:
            body['leaderId'] = self.browser_id
        if heartbeat_ts is not None:
            body['leaderHeartbeat'] = heartbeat_ts
        if self.tf:
            body.setdefault('tf', self.tf)
        return await self._request('POST', '/sync-state', json=body)

    async def claim_leader(self, force: bool = False, timestamp: Optional[int] = None,
                           browser_id: Optional[str] = None) -> Dict[str, Any]:
        body = self._identity(browser_id)
        body['force'] = force
        if timestamp is not None:
            body['timestamp'] = timestamp
        return await self._request('POST', '/claim-leader', json=body)

    async def heartbeat(self, is_leader: bool = False,
                        browser_id: Optional[str] = None) -> Dict[str, Any]:
        body = self._identity(browser_id)
        body['isLeader'] = is_leader
        return await self._request('POST', '/heartbeat', json=body)

    async def get_browsers(self) -> Dict[str, Any]:
        return await self._request('GET', '/browsers')

    async def reset(self) -> Dict[str, Any]:
        return await self._request('POST', '/reset')

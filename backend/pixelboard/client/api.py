import logging
from typing import NamedTuple, Optional

import requests

_log = logging.getLogger(__name__)


class TransientNetworkFailure(Exception):
    """The server could not be reached or answered with a 5xx / non-JSON body."""


class Identity(NamedTuple):
    id: str
    username: str


class CanvasApi:
    """Blocking HTTP client for the canvas endpoints.

    Expected rejections (cooldown, bad coordinates, ...) come back as the
    decoded JSON body with ``success: False``; only transport problems raise.
    """

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.http = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = self.base_url + path
        try:
            resp = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise TransientNetworkFailure(f"{method} {path}: {exc}") from exc
        if resp.status_code >= 500:
            raise TransientNetworkFailure(f"{method} {path}: HTTP {resp.status_code}")
        try:
            return resp.json()
        except ValueError as exc:
            raise TransientNetworkFailure(f"{method} {path}: invalid JSON body") from exc

    def login(self, username: str, password: str) -> Optional[Identity]:
        data = self._request('POST', '/login', json={'username': username, 'password': password})
        user = data.get('user')
        if not user:
            _log.info(f"Login failed for {username}: {data.get('error')}")
            return None
        return Identity(id=str(user['id']), username=user['username'])

    def get_grid(self) -> dict:
        return self._request('GET', '/api/pixel-canvas')

    def get_cooldown(self, user_id: str) -> dict:
        return self._request('GET', '/api/pixel-canvas/cooldown', params={'userId': user_id})

    def place(self, x: int, y: int, color: str, identity: Identity) -> dict:
        return self._request('POST', '/api/pixel-canvas/place', json={
            'x': x,
            'y': y,
            'color': color,
            'userId': identity.id,
            'username': identity.username,
        })

    def get_snapshot(self) -> dict:
        return self._request('GET', '/api/pixel-canvas/snapshot')

from __future__ import annotations

import json as jsonlib
from typing import Any, Dict, Optional, Type
from types import TracebackType

import httpx
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ...crypto.keys import public_key_of, public_key_to_string, sign_bytes


class AsyncHttpClient:
    """Thin asynchronous HTTP client wrapper around httpx.AsyncClient.

    - Normalizes base URLs and paths.
    - Applies a default timeout.
    - Raises for non-successful responses.
    - Signs every request body with the application identity.
    """

    def __init__(
        self,
        base_url: str,
        identity: Ed25519PrivateKey,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._identity = identity
        self._app_public_key = public_key_to_string(public_key_of(identity))
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    def _auth_headers(self, body: bytes) -> Dict[str, str]:
        return {
            "X-App-Public-Key": self._app_public_key,
            "X-Signature": sign_bytes(self._identity, body),
            "Accept": "application/json",
        }

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        resp = await self._client.get(
            self._url(path), headers=self._auth_headers(b""), **kwargs
        )
        resp.raise_for_status()
        return resp

    async def post(
        self,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        if json is None:
            body = b""
        else:
            body = jsonlib.dumps(
                json, separators=(",", ":"), ensure_ascii=False
            ).encode("utf-8")
        headers = {**self._auth_headers(body), "Content-Type": "application/json"}
        resp = await self._client.post(
            self._url(path), content=body, headers=headers, **kwargs
        )
        resp.raise_for_status()
        return resp

    async def stream_get(self, path: str) -> httpx.Response:
        """Open a streamed GET. The caller must ``aclose()`` the response."""
        request = self._client.build_request(
            "GET", self._url(path), headers=self._auth_headers(b"")
        )
        resp = await self._client.send(request, stream=True)
        if resp.is_error:
            await resp.aclose()
        resp.raise_for_status()
        return resp

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()

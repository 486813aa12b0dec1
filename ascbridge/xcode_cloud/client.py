"""Authenticated HTTP client for the App Store Connect API."""

import json
import logging
from collections.abc import Mapping

import aiohttp

from ascbridge.xcode_cloud.auth import TokenSigner
from ascbridge.xcode_cloud.errors import BackendError, InvalidResponseError
from ascbridge.xcode_cloud.models.config import AppStoreConnectConfig

logger = logging.getLogger(__name__)

QueryParams = Mapping[str, str | int]


class AppStoreConnectClient:
    """Issue authenticated GET, POST and DELETE requests.

    Every request carries a freshly signed token. Non-2xx responses raise
    BackendError built from the API's error envelope, and a 2xx body that is
    not a JSON object raises InvalidResponseError. Transport failures
    (aiohttp.ClientError, asyncio.TimeoutError) propagate unchanged. No
    request is ever retried here.
    """

    def __init__(
        self, config: AppStoreConnectConfig, signer: TokenSigner | None = None
    ) -> None:
        """Initialize client with configuration and a token signer."""
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.signer = signer if signer is not None else TokenSigner(config)
        self.timeout = aiohttp.ClientTimeout(total=config.request_timeout or None)

    async def get(
        self, path: str, params: QueryParams | None = None
    ) -> dict[str, object]:
        """GET a resource or collection document."""
        return await self._request("GET", path, params=params) or {}

    async def post(self, path: str, body: Mapping[str, object]) -> dict[str, object]:
        """POST a JSON:API document and return the created resource document."""
        return await self._request("POST", path, body=body) or {}

    async def delete(self, path: str) -> None:
        """DELETE a resource."""
        await self._request("DELETE", path)

    async def _request(
        self,
        method: str,
        path: str,
        params: QueryParams | None = None,
        body: Mapping[str, object] | None = None,
    ) -> dict[str, object] | None:
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {path} params={dict(params) if params else {}}")

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.request(
                method,
                url,
                headers=self._headers(),
                params=dict(params) if params else None,
                json=body,
            ) as response:
                if not 200 <= response.status < 300:
                    text = await response.text()
                    logger.warning(
                        f"App Store Connect {method} {path} failed: {response.status}"
                    )
                    raise BackendError(response.status, parse_error_messages(text))

                if response.status == 204:
                    return None

                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise InvalidResponseError(path, f"body is not JSON: {e}") from e

        if data is None:
            return None
        if not isinstance(data, dict):
            raise InvalidResponseError(
                path, f"expected a JSON object, got {type(data).__name__}"
            )
        return data

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.signer.get_token()}",
            "Accept": "application/json",
        }


def parse_error_messages(text: str) -> list[str]:
    """Extract detail messages from an App Store Connect error envelope.

    Each entry of ``errors`` contributes its ``detail``, or its ``title``
    when there is no detail. A body that is not an error envelope is
    returned verbatim as the only message.
    """
    body = text.strip()
    try:
        payload = json.loads(body)
    except ValueError:
        return [body] if body else []

    errors = payload.get("errors") if isinstance(payload, dict) else None
    if not isinstance(errors, list):
        return [body] if body else []

    messages: list[str] = []
    for error in errors:
        if not isinstance(error, dict):
            continue
        message = error.get("detail") or error.get("title")
        if message:
            messages.append(str(message))
    return messages

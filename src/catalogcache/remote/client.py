import asyncio
import json
import logging
from typing import Any, Optional
from urllib.error import HTTPError
from urllib.request import Request, urlopen

from catalogcache.config.settings import config
from catalogcache.exceptions import RemoteError

logger = logging.getLogger(__name__)


class RemoteCatalogClient:
    """Single-attempt JSON client for the public catalog API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.timeout_seconds = timeout_seconds or config.http_timeout_seconds

    async def fetch(self, path: str) -> Any:
        return await asyncio.to_thread(self.fetch_sync, path)

    def fetch_sync(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        request = Request(url, headers={"Accept": "application/json"})
        logger.debug(f"GET {url}")
        try:
            with urlopen(request, timeout=self.timeout_seconds) as response:
                status = getattr(response, "status", 200)
                if status < 200 or status >= 300:
                    raise RemoteError(status, url)
                payload = response.read().decode("utf-8")
        except HTTPError as exc:
            raise RemoteError(exc.code, url) from exc
        return json.loads(payload)

"""Pass-through proxy to a caller-chosen upstream URL."""

import logging
from typing import Optional

import httpx

from ..config import settings
from ..models import ProxyResult

logger = logging.getLogger(__name__)

# Request headers copied to the upstream request when present
PROXY_HEADERS = [
    "Content-Type",
    "x-ms-version",
    "x-ms-date",
    "x-ms-blob-type",
    "x-hardware-target",
]

# Framing headers the server recomputes for the relayed body
EXCLUDED_RESPONSE_HEADERS = {"content-length", "transfer-encoding"}

SUPPORTED_METHODS = ("GET", "POST", "PUT")


class ProxyService:
    """Forwards whitelisted headers and the raw body to an upstream URL."""

    def __init__(self, timeout: float = 60.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport

    async def forward(self, method: str, target: str, headers, body: bytes) -> ProxyResult:
        """Send the request upstream and collect its undecoded response.

        Raises httpx.HTTPError (or httpx.InvalidURL) when the
        upstream cannot be reached.
        """
        forwarded = [(name, headers[name]) for name in PROXY_HEADERS if headers.get(name)]
        logger.info("Proxying %s to %s", method, target)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            request = client.build_request(method, target, headers=forwarded, content=body or None)
            response = await client.send(request, stream=True)
            try:
                if response.is_stream_consumed:
                    # In-memory transports hand back an already-read body
                    content = response.content
                else:
                    # Raw bytes keep content-encoding valid for the caller
                    content = b"".join([chunk async for chunk in response.aiter_raw()])
            finally:
                await response.aclose()

        relayed = [
            (k, v) for k, v in response.headers.multi_items()
            if k.lower() not in EXCLUDED_RESPONSE_HEADERS
        ]
        return ProxyResult(status_code=response.status_code, body=content, headers=relayed)


# Global singleton
_proxy: Optional[ProxyService] = None


def get_proxy() -> ProxyService:
    """Get the global proxy service instance."""
    global _proxy
    if _proxy is None:
        _proxy = ProxyService(timeout=settings.proxy_timeout)
    return _proxy

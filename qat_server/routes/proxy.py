"""Proxy endpoint."""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Header, Request, Response
from fastapi.responses import PlainTextResponse

from ..services.proxy import SUPPORTED_METHODS, get_proxy

logger = logging.getLogger(__name__)

router = APIRouter()


@router.api_route("/proxy", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def proxy_request(
    request: Request,
    x_proxy_to: Optional[str] = Header(None),
):
    """Relay a request to the URL named in the x-proxy-to header.

    GET|POST|PUT /proxy - forwards whitelisted headers and the raw body
    """
    if request.method not in SUPPORTED_METHODS:
        return PlainTextResponse("Only GET, POST, and PUT are supported", status_code=400)
    if not x_proxy_to:
        return PlainTextResponse("x-proxy-to header is missing", status_code=400)

    body = await request.body()
    try:
        result = await get_proxy().forward(request.method, x_proxy_to, request.headers, body)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error("Fetch from %s failed: %s", x_proxy_to, e)
        return PlainTextResponse(f"Fetch from {x_proxy_to} failed with {e!r}", status_code=500)

    response = Response(content=result.body, status_code=result.status_code)
    for name, value in result.headers:
        response.headers.append(name, value)
    return response

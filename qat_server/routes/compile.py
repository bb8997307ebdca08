"""Compile endpoint."""

from typing import Optional

from fastapi import APIRouter, Header, Request, Response
from fastapi.responses import PlainTextResponse

from ..models import CompileFailure, CompileRequest, HardwareTarget
from ..services.compiler import get_compiler

router = APIRouter()


@router.post("/compile")
async def compile_qir(
    request: Request,
    x_hardware_target: Optional[str] = Header(None),
):
    """Compile a QIR program to bitcode for a hardware target.

    POST /compile - raw QIR body, optional x-hardware-target header
    """
    body = await request.body()
    compiler = get_compiler()
    result = await compiler.compile(
        CompileRequest(body=body, hardware_target=HardwareTarget.from_header(x_hardware_target))
    )

    if isinstance(result, CompileFailure):
        return PlainTextResponse(result.message, status_code=result.status_code)

    return Response(content=result.artifact, media_type="application/octet-stream")

from .schemas import (
    CompileErrorKind,
    CompileFailure,
    CompileRequest,
    CompileResult,
    CompileSuccess,
    HardwareTarget,
    HealthResponse,
    ProxyResult,
)

__all__ = [
    "CompileErrorKind",
    "CompileFailure",
    "CompileRequest",
    "CompileResult",
    "CompileSuccess",
    "HardwareTarget",
    "HealthResponse",
    "ProxyResult",
]

from enum import Enum
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class HardwareTarget(str, Enum):
    """Hardware backend a compiled artifact is destined for."""
    rigetti = "rigetti"        # default target
    quantinuum = "quantinuum"

    @classmethod
    def from_header(cls, value: Optional[str]) -> "HardwareTarget":
        """Map the x-hardware-target header to a target.

        Only the exact value "quantinuum" selects the alternate target;
        anything else (including a missing header) is the default.
        """
        if value == cls.quantinuum.value:
            return cls.quantinuum
        return cls.rigetti


# Compile models

class CompileRequest(BaseModel):
    """A single compilation request."""
    model_config = ConfigDict(frozen=True)

    body: bytes
    hardware_target: HardwareTarget = HardwareTarget.rigetti


class CompileErrorKind(str, Enum):
    """Failure classes of the compile path."""
    no_body = "no_body"
    staging = "staging"
    tool_invocation = "tool_invocation"
    artifact_read = "artifact_read"

    @property
    def status_code(self) -> int:
        if self is CompileErrorKind.no_body:
            return 400
        return 500


class CompileSuccess(BaseModel):
    """Compiled artifact produced by the tool."""
    model_config = ConfigDict(frozen=True)

    ok: Literal[True] = True
    artifact: bytes


class CompileFailure(BaseModel):
    """Failure descriptor with a human-readable message."""
    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    kind: CompileErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return self.kind.status_code


CompileResult = Union[CompileSuccess, CompileFailure]


# Proxy models

class ProxyResult(BaseModel):
    """Upstream response as relayed to the caller."""
    model_config = ConfigDict(frozen=True)

    status_code: int
    body: bytes
    headers: List[Tuple[str, str]] = Field(default_factory=list)


# Health models

class HealthResponse(BaseModel):
    """Health check response."""
    status: Literal["healthy", "degraded"]
    tool_path: str
    missing: List[str] = Field(default_factory=list)

"""Toolchain layout: the QAT binary and its per-target decomposition profiles.

Resolved once at startup from settings and the host platform, then passed
into the compiler service as an immutable value.
"""

import platform
import sys
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from ..config import Settings
from ..models import HardwareTarget

# Decomposition profile shipped alongside the binary, one per target
PROFILE_FILES: Dict[HardwareTarget, str] = {
    HardwareTarget.rigetti: "decomp_b340.ll",
    HardwareTarget.quantinuum: "decomp_7ee0.ll",
}

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "armv7l": "arm",
}


def host_platform() -> str:
    """Platform directory name: linux, darwin or win32."""
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def host_arch(machine: Optional[str] = None) -> str:
    """Normalized architecture directory name (x64, arm64, ...)."""
    machine = (machine or platform.machine()).lower()
    return _ARCH_ALIASES.get(machine, machine)


def default_bin_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "bin" / host_platform() / host_arch()


class Toolchain(BaseModel):
    """Paths needed to run QAT."""

    model_config = ConfigDict(frozen=True)

    tool_path: Path
    profiles: Dict[HardwareTarget, Path]
    temp_dir: Path
    timeout: Optional[float] = None

    @classmethod
    def from_bin_dir(
        cls,
        bin_dir: Path,
        tool_path: Optional[Path] = None,
        temp_dir: Optional[Path] = None,
        timeout: Optional[float] = None,
    ) -> "Toolchain":
        """Build a toolchain from a directory holding qat and the profiles."""
        exe = "qat.exe" if host_platform() == "win32" else "qat"
        return cls(
            tool_path=tool_path or bin_dir / exe,
            profiles={target: bin_dir / name for target, name in PROFILE_FILES.items()},
            temp_dir=temp_dir or Path(tempfile.gettempdir()),
            timeout=timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Toolchain":
        return cls.from_bin_dir(
            settings.bin_dir or default_bin_dir(),
            tool_path=settings.tool_path,
            temp_dir=settings.temp_dir,
            timeout=settings.tool_timeout,
        )

    def profile_for(self, target: HardwareTarget) -> Path:
        """Decomposition profile for a hardware target."""
        return self.profiles[target]

    def missing(self) -> List[Path]:
        """Toolchain files that are not present on disk."""
        paths = [self.tool_path, *self.profiles.values()]
        return [p for p in paths if not p.is_file()]

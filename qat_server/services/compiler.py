"""Compiler service: runs QAT over a submitted QIR program.

Each request stages its body to a private temp file, runs the tool into a
second temp file, reads the bitcode back and removes both files whatever
happened in between.
"""

import asyncio
import logging
import secrets
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from ..config import settings
from ..models import (
    CompileErrorKind,
    CompileFailure,
    CompileRequest,
    CompileResult,
    CompileSuccess,
)
from .toolchain import Toolchain

logger = logging.getLogger(__name__)

TEMP_PREFIX = "qsc-"


def _decode(stream: Optional[bytes]) -> str:
    return (stream or b"").decode("utf-8", errors="replace").strip()


class CompilerService:
    """Service for compiling QIR to target-specific bitcode with QAT."""

    def __init__(self, toolchain: Toolchain):
        self.toolchain = toolchain

    def build_args(self, input_path: Path, output_path: Path, profile_path: Path) -> List[str]:
        """Fixed QAT command line."""
        return [
            str(self.toolchain.tool_path),
            "--apply",
            "--always-inline",
            "--no-disable-record-output-support",
            "--entry-point-attr",
            "entry_point",
            "--output",
            str(output_path),
            str(input_path),
            str(profile_path),
        ]

    async def compile(self, request: CompileRequest) -> CompileResult:
        """Compile a QIR program for the requested hardware target."""
        if not request.body:
            return CompileFailure(kind=CompileErrorKind.no_body, message="No source code provided")

        logger.info("Got a request with body length: %d", len(request.body))
        logger.info("Setting hardware target to: %s", request.hardware_target.value)
        profile_path = self.toolchain.profile_for(request.hardware_target)

        with ExitStack() as stack:
            try:
                input_path, output_path = stack.enter_context(self._temp_files(request.body))
            except OSError as e:
                logger.error("Failed to stage input file: %s", e)
                return CompileFailure(
                    kind=CompileErrorKind.staging,
                    message=f"Failed to stage input file: {e}",
                )
            logger.debug("Input file written to: %s", input_path)

            args = self.build_args(input_path, output_path, profile_path)
            failure = await self._run(args)
            if failure is not None:
                return failure

            try:
                artifact = output_path.read_bytes()
            except OSError as e:
                logger.error("QAT reported success but output is unreadable: %s", e)
                return CompileFailure(
                    kind=CompileErrorKind.artifact_read,
                    message=f"QAT produced no readable output: {e}",
                )

        logger.info("Output bitcode size: %d", len(artifact))
        return CompileSuccess(artifact=artifact)

    async def _run(self, args: List[str]) -> Optional[CompileFailure]:
        """Run QAT. Returns a failure descriptor, or None on exit code 0."""
        logger.debug("Running QAT with args: %s", ", ".join(args[1:]))
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("QAT failed to start: %s", e)
            return CompileFailure(
                kind=CompileErrorKind.tool_invocation,
                message=f"QAT failed with: {e}",
            )

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self.toolchain.timeout
            )
        except asyncio.TimeoutError:
            await self._kill(proc)
            logger.error("QAT timed out after %s seconds", self.toolchain.timeout)
            return CompileFailure(
                kind=CompileErrorKind.tool_invocation,
                message=f"QAT failed with: timed out after {self.toolchain.timeout} seconds",
            )
        except asyncio.CancelledError:
            await self._kill(proc)
            raise

        err_text, out_text = _decode(stderr), _decode(stdout)
        if proc.returncode != 0:
            logger.error("QAT exited with code %d: %s", proc.returncode, err_text)
            diagnostics = "\n".join(t for t in (err_text, out_text) if t)
            return CompileFailure(
                kind=CompileErrorKind.tool_invocation,
                message=f"QAT failed with exit code {proc.returncode}: {diagnostics}",
            )

        if err_text:
            logger.info("QAT stderr: %s", err_text)
        logger.debug("QAT stdout: %s", out_text)
        return None

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()

    @contextmanager
    def _temp_files(self, body: bytes) -> Iterator[Tuple[Path, Path]]:
        """Stage body under a unique input path and name a unique output path.

        Both files are removed on exit. A failed exclusive create raises
        before anything is registered for removal, so a clashing file that
        belongs to another request is left alone.
        """
        temp_dir = self.toolchain.temp_dir
        input_path = temp_dir / f"{TEMP_PREFIX}{secrets.token_hex(16)}.ll"
        output_path = temp_dir / f"{TEMP_PREFIX}{secrets.token_hex(16)}.bc"
        f = open(input_path, "xb")
        try:
            with f:
                f.write(body)
            yield input_path, output_path
        finally:
            for path in (input_path, output_path):
                try:
                    path.unlink(missing_ok=True)
                except OSError as e:
                    logger.warning("Failed to clean up temporary file %s: %s", path, e)


# Global singleton
_compiler: Optional[CompilerService] = None


def get_compiler() -> CompilerService:
    """Get the global compiler service instance."""
    global _compiler
    if _compiler is None:
        _compiler = CompilerService(Toolchain.from_settings(settings))
    return _compiler

"""MCP server for the QAT relay.

Exposes QIR compilation as MCP tools for use with MCP clients working on
local files. Uses STDIO transport.
"""

from pathlib import Path

from mcp.server.fastmcp import FastMCP

from qat_server.models import CompileFailure, CompileRequest, HardwareTarget
from qat_server.services.compiler import get_compiler

mcp = FastMCP("qat")


@mcp.tool()
async def compile_qir(input_path: str, output_path: str, hardware_target: str = "rigetti") -> str:
    """Compile a QIR (.ll) file to target-specific bitcode with QAT.

    Args:
        input_path: Path to the QIR program in LLVM textual IR.
        output_path: Where to write the compiled bitcode (.bc).
        hardware_target: "quantinuum", or anything else for the default
            rigetti profile.
    """
    source = Path(input_path)
    if not source.is_file():
        return f"Input file not found: {input_path}"

    target = HardwareTarget.from_header(hardware_target)
    result = await get_compiler().compile(
        CompileRequest(body=source.read_bytes(), hardware_target=target)
    )
    if isinstance(result, CompileFailure):
        return f"Compilation failed ({result.kind.value}): {result.message}"

    dest = Path(output_path)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(result.artifact)
    return f"Compiled {input_path} for {target.value}: {len(result.artifact)} bytes written to {output_path}"


@mcp.tool()
def toolchain_status() -> str:
    """Report the QAT binary and decomposition profiles in use."""
    toolchain = get_compiler().toolchain
    missing = set(toolchain.missing())

    def line(label: str, path: Path) -> str:
        state = "MISSING" if path in missing else "ok"
        return f"  {label}: {path} [{state}]"

    lines = ["QAT toolchain:", line("tool", toolchain.tool_path)]
    for target, path in toolchain.profiles.items():
        lines.append(line(f"profile ({target.value})", path))
    lines.append(f"  temp dir: {toolchain.temp_dir}")
    return "\n".join(lines)


def main():
    """Run the QAT MCP server on STDIO transport."""
    get_compiler()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()

import sys

import httpx
import pytest
from fastapi.testclient import TestClient

import qat_server.services.compiler as compiler_module
import qat_server.services.proxy as proxy_module
from qat_server.services.compiler import CompilerService
from qat_server.services.proxy import ProxyService
from qat_server.services.toolchain import PROFILE_FILES, Toolchain
from qat_server.main import app

# Stand-in for the QAT binary. Writes the input followed by the profile
# name to the output path; markers in the input select failure modes.
FAKE_QAT = """#!@PYTHON@
import os
import sys
import time

args = sys.argv[1:]
output = args[args.index("--output") + 1]
source, profile = args[-2], args[-1]
with open(source, "rb") as f:
    data = f.read()

if b"FAIL" in data:
    sys.stdout.write("partial progress\\n")
    sys.stderr.write("error: invalid QIR: missing entry point\\n")
    sys.exit(3)
if b"SLEEP" in data:
    time.sleep(30)
if b"NOOUT" in data:
    sys.exit(0)

with open(output, "wb") as f:
    f.write(data + b"|" + os.path.basename(profile).encode())
"""


def _reset_singletons():
    """Reset all service singletons."""
    compiler_module._compiler = None
    proxy_module._proxy = None


@pytest.fixture
def toolchain(tmp_path):
    """Toolchain with a fake qat and both profiles in an isolated bin dir."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    tool = bin_dir / "qat"
    tool.write_text(FAKE_QAT.replace("@PYTHON@", sys.executable))
    tool.chmod(0o755)
    for name in PROFILE_FILES.values():
        (bin_dir / name).write_text("; decomposition profile\n")

    work_dir = tmp_path / "work"
    work_dir.mkdir()
    return Toolchain.from_bin_dir(bin_dir, temp_dir=work_dir, timeout=10.0)


@pytest.fixture
def compiler(toolchain):
    return CompilerService(toolchain)


class Upstream(httpx.AsyncBaseTransport):
    """Records proxied requests and answers with a canned, unread response."""

    def __init__(self):
        self.requests = []
        self.error = None
        self.status_code = 201
        self.content = b"upstream-body"
        self.headers = {"content-type": "text/plain", "x-upstream": "yes"}

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code,
            headers=self.headers,
            stream=httpx.ByteStream(self.content),
        )


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def client(compiler, upstream):
    """Test client wired to the fake toolchain and a mock upstream."""
    _reset_singletons()
    compiler_module._compiler = compiler
    proxy_module._proxy = ProxyService(transport=upstream)

    with TestClient(app) as c:
        yield c

    _reset_singletons()


@pytest.fixture
def leftovers(toolchain):
    """Callable listing temp files that match the compiler's naming pattern."""
    def _list():
        return sorted(toolchain.temp_dir.glob(f"{compiler_module.TEMP_PREFIX}*"))
    return _list

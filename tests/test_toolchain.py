from pathlib import Path

import pytest
from pydantic import ValidationError

from qat_server.config import Settings
from qat_server.models import HardwareTarget
from qat_server.services.toolchain import Toolchain, default_bin_dir, host_arch


@pytest.mark.parametrize(
    "value,expected",
    [
        ("quantinuum", HardwareTarget.quantinuum),
        ("rigetti", HardwareTarget.rigetti),
        (None, HardwareTarget.rigetti),
        ("", HardwareTarget.rigetti),
        ("Quantinuum", HardwareTarget.rigetti),
        ("ionq", HardwareTarget.rigetti),
    ],
)
def test_hardware_target_from_header(value, expected):
    assert HardwareTarget.from_header(value) is expected


def test_profile_mapping(tmp_path):
    """Each target resolves to its own fixed profile file."""
    toolchain = Toolchain.from_bin_dir(tmp_path)
    assert toolchain.profile_for(HardwareTarget.rigetti) == tmp_path / "decomp_b340.ll"
    assert toolchain.profile_for(HardwareTarget.quantinuum) == tmp_path / "decomp_7ee0.ll"


@pytest.mark.parametrize(
    "machine,expected",
    [("x86_64", "x64"), ("AMD64", "x64"), ("aarch64", "arm64"), ("arm64", "arm64"), ("riscv64", "riscv64")],
)
def test_host_arch(machine, expected):
    assert host_arch(machine) == expected


def test_default_bin_dir_is_inside_package():
    bin_dir = default_bin_dir()
    assert bin_dir.parent.parent.name == "bin"
    assert bin_dir.parent.parent.parent.name == "qat_server"


def test_missing_lists_absent_files(tmp_path):
    toolchain = Toolchain.from_bin_dir(tmp_path)
    assert set(toolchain.missing()) == {
        toolchain.tool_path,
        tmp_path / "decomp_b340.ll",
        tmp_path / "decomp_7ee0.ll",
    }

    for path in toolchain.missing():
        path.write_text("")
    assert toolchain.missing() == []


def test_from_settings(tmp_path):
    settings = Settings(
        bin_dir=tmp_path / "bin",
        temp_dir=tmp_path / "work",
        tool_timeout=30,
    )
    toolchain = Toolchain.from_settings(settings)
    assert toolchain.tool_path.parent == tmp_path / "bin"
    assert toolchain.temp_dir == tmp_path / "work"
    assert toolchain.timeout == 30


def test_tool_path_override(tmp_path):
    settings = Settings(bin_dir=tmp_path, tool_path=Path("/opt/qat/bin/qat"))
    toolchain = Toolchain.from_settings(settings)
    assert toolchain.tool_path == Path("/opt/qat/bin/qat")
    assert toolchain.profile_for(HardwareTarget.rigetti) == tmp_path / "decomp_b340.ll"


def test_toolchain_is_immutable(tmp_path):
    toolchain = Toolchain.from_bin_dir(tmp_path)
    with pytest.raises(ValidationError):
        toolchain.timeout = 5

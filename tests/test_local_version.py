import os
import subprocess
import sys

import pytest

import geforce_driver_check as gdc

SMI_OUTPUT = """\
Mon Oct 19 13:37:00 2026
+-----------------------------------------------------------------------------+
| NVIDIA-SMI 123.45       Driver Version: 123.45       CUDA Version: 12.4     |
|-------------------------------+----------------------+----------------------+
"""


def make_layout(tmp_path, name, current=True, legacy=True):
    """Create windir/ProgramFiles trees holding the requested tool copies."""
    windir = tmp_path / "Windows"
    program_files = tmp_path / "Program Files"
    (windir / "System32").mkdir(parents=True)
    (program_files / "NVIDIA Corporation" / "NVSMI").mkdir(parents=True)
    if current:
        (windir / "System32" / name).write_text("current")
    if legacy:
        (program_files / "NVIDIA Corporation" / "NVSMI" / name).write_text("legacy")
    return {"windir": str(windir), "ProgramFiles": str(program_files)}


def candidates(config):
    return config.settings["probe"]["candidates"]


def test_locate_prefers_system32(tmp_path, config):
    environ = make_layout(tmp_path, "nvidia-smi.exe")
    path = gdc.locate_executable("nvidia-smi.exe", candidates(config), environ)
    assert path.read_text() == "current"


def test_locate_falls_back_to_legacy_nvsmi(tmp_path, config):
    environ = make_layout(tmp_path, "nvidia-smi.exe", current=False)
    path = gdc.locate_executable("nvidia-smi.exe", candidates(config), environ)
    assert path.read_text() == "legacy"


def test_locate_not_found(tmp_path, config):
    environ = make_layout(tmp_path, "nvidia-smi.exe", current=False, legacy=False)
    with pytest.raises(gdc.ToolNotFoundError):
        gdc.locate_executable("nvidia-smi.exe", candidates(config), environ)


def test_locate_missing_windir(tmp_path, config):
    with pytest.raises(gdc.MissingEnvironmentError, match="windir"):
        gdc.locate_executable("nvidia-smi.exe", candidates(config), {"ProgramFiles": str(tmp_path)})


def test_locate_missing_program_files_only_matters_as_fallback(tmp_path, config):
    environ = make_layout(tmp_path, "nvidia-smi.exe", legacy=False)
    del environ["ProgramFiles"]
    assert gdc.locate_executable("nvidia-smi.exe", candidates(config), environ).exists()

    environ = {"windir": str(tmp_path / "empty")}
    with pytest.raises(gdc.MissingEnvironmentError, match="ProgramFiles"):
        gdc.locate_executable("nvidia-smi.exe", candidates(config), environ)


@pytest.mark.parametrize(
    "output",
    [
        SMI_OUTPUT,
        "Driver Version: 123.45",
        "garbage\x00\n\tDriver Version: 123.45 more garbage Driver Version: 999.99",
    ],
)
def test_extract_installed_version_ignores_noise(config, output):
    pattern = config.settings["probe"]["pattern"]
    assert gdc.extract_installed_version(output, pattern) == "123.45"


@pytest.mark.parametrize("output", ["", "Driver Version: 123", "driver version: 123.45", "NVIDIA-SMI has failed"])
def test_extract_installed_version_pattern_not_found(config, output):
    with pytest.raises(gdc.PatternNotFoundError):
        gdc.extract_installed_version(output, config.settings["probe"]["pattern"])


def test_run_probe_decodes_lossily(monkeypatch, tmp_path):
    def fake_run(cmd, **kwargs):
        assert cmd == [str(tmp_path / "tool.exe")]
        assert kwargs["capture_output"] is True
        return subprocess.CompletedProcess(cmd, 9, stdout=b"\xffDriver Version: 1.2\xfe", stderr=b"")

    monkeypatch.setattr(gdc.subprocess, "run", fake_run)
    output = gdc.run_probe(tmp_path / "tool.exe", timeout=5)
    assert "Driver Version: 1.2" in output
    assert "�" in output


def test_run_probe_start_failure(monkeypatch, tmp_path):
    def fake_run(cmd, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(gdc.subprocess, "run", fake_run)
    with pytest.raises(gdc.ExecutionError):
        gdc.run_probe(tmp_path / "tool.exe")


def test_run_probe_timeout(monkeypatch, tmp_path):
    def fake_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(gdc.subprocess, "run", fake_run)
    with pytest.raises(gdc.ExecutionError):
        gdc.run_probe(tmp_path / "tool.exe", timeout=1)


@pytest.mark.skipif(sys.platform == "win32", reason="stub tool is a POSIX shell script")
def test_installed_version_from_stub_tool(tmp_path, config):
    environ = make_layout(tmp_path, "smi-stub.sh", current=False, legacy=False)
    stub = tmp_path / "Windows" / "System32" / "smi-stub.sh"
    stub.write_text("#!/bin/sh\necho 'Fan  Temp  Perf'\necho 'Driver Version: 123.45'\nexit 3\n")
    os.chmod(stub, 0o755)

    assert gdc.get_installed_version("smi-stub.sh", config, environ) == "123.45"


@pytest.mark.skipif(sys.platform == "win32", reason="stub tool is a POSIX shell script")
def test_installed_version_from_non_executable_file(tmp_path, config):
    environ = make_layout(tmp_path, "smi-stub.sh", legacy=False)
    with pytest.raises(gdc.ExecutionError):
        gdc.get_installed_version("smi-stub.sh", config, environ)

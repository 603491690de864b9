import os
import subprocess

import pytest

from cdlocal.sysinstall import (
    FileInstaller,
    InitSystem,
    ServiceController,
    file_hash,
    files_match,
    is_service_enabled,
    is_service_running,
)

TOOLS = ("systemctl", "chkconfig", "service")


@pytest.fixture
def fake_tools(tmp_path, monkeypatch):
    """Install stand-in service tools on PATH that log their arguments."""

    def install(exit_code=0):
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir(exist_ok=True)
        log = tmp_path / "calls.log"
        for tool in TOOLS:
            script = bin_dir / tool
            script.write_text(
                "#!/bin/sh\n"
                f'echo "${{0##*/}} $*" >> "{log}"\n'
                f"exit {exit_code}\n"
            )
            script.chmod(0o755)
        monkeypatch.setenv("PATH", str(bin_dir))
        return log

    return install


def _calls(log):
    if not log.exists():
        return []
    return log.read_text().splitlines()


def test_file_hash_of_empty_file(tmp_path):
    path = tmp_path / "empty"
    path.write_bytes(b"")
    assert file_hash(path).hex() == (
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


def test_file_hash_is_sha256_sized_and_content_dependent(tmp_path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.write_bytes(b"hello")
    b.write_bytes(b"world")
    assert len(file_hash(a)) == 32
    assert file_hash(a) != file_hash(b)
    assert file_hash(a) == file_hash(a)


def test_file_hash_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        file_hash(tmp_path / "missing")


def test_files_match_identical_content(tmp_path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.write_bytes(b"binary" * 50000)
    b.write_bytes(b"binary" * 50000)
    assert files_match(a, b) is True


def test_files_match_different_content(tmp_path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.write_bytes(b"one")
    b.write_bytes(b"two")
    assert files_match(a, b) is False


def test_files_match_missing_file_is_false(tmp_path):
    a = tmp_path / "a"
    a.write_bytes(b"data")
    assert files_match(a, tmp_path / "missing") is False


def test_mkdir_all_creates_nested_and_is_idempotent(tmp_path):
    target = tmp_path / "x" / "y" / "z"
    installer = FileInstaller()
    installer.mkdir_all(target)
    installer.mkdir_all(target)
    assert target.is_dir()


def test_write_file_writes_data_with_mode(tmp_path):
    path = tmp_path / "config.yml"
    FileInstaller().write_file(path, b"root_dir: /tmp\n", 0o600)
    assert path.read_bytes() == b"root_dir: /tmp\n"
    assert os.stat(path).st_mode & 0o777 == 0o600


def test_write_file_truncates_existing(tmp_path):
    path = tmp_path / "file"
    path.write_bytes(b"a much longer original content")
    FileInstaller().write_file(path, b"short", 0o644)
    assert path.read_bytes() == b"short"


def test_copy_file_round_trip(tmp_path):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    src.write_bytes(b"\x00\x01payload" * 1000)
    FileInstaller().copy_file(src, dst, 0o755)
    assert dst.read_bytes() == src.read_bytes()
    assert files_match(src, dst) is True
    assert os.stat(dst).st_mode & 0o700 == 0o700


def test_copy_file_missing_source_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        FileInstaller().copy_file(tmp_path / "nope", tmp_path / "dst", 0o644)
    assert not (tmp_path / "dst").exists()


def test_rename_moves_and_replaces(tmp_path):
    old = tmp_path / "old"
    new = tmp_path / "new"
    old.write_bytes(b"fresh")
    new.write_bytes(b"stale")
    FileInstaller().rename(old, new)
    assert not old.exists()
    assert new.read_bytes() == b"fresh"


@pytest.mark.parametrize(
    "init_system, expected",
    [
        (InitSystem.SYSTEMD, "systemctl is-enabled --quiet agent"),
        (InitSystem.SYSV, "chkconfig --list agent"),
    ],
)
def test_is_service_enabled_commands(fake_tools, init_system, expected):
    log = fake_tools(0)
    assert is_service_enabled("agent", init_system) is True
    assert _calls(log) == [expected]


@pytest.mark.parametrize(
    "init_system, expected",
    [
        (InitSystem.SYSTEMD, "systemctl is-active --quiet agent"),
        (InitSystem.SYSV, "service agent status"),
    ],
)
def test_is_service_running_commands(fake_tools, init_system, expected):
    log = fake_tools(0)
    assert is_service_running("agent", init_system) is True
    assert _calls(log) == [expected]


def test_service_checks_false_on_nonzero_exit(fake_tools):
    fake_tools(3)
    assert is_service_enabled("agent", InitSystem.SYSTEMD) is False
    assert is_service_running("agent", InitSystem.SYSV) is False


def test_service_checks_false_when_tool_missing(tmp_path, monkeypatch):
    empty = tmp_path / "empty-bin"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
    assert is_service_enabled("agent", InitSystem.SYSTEMD) is False
    assert is_service_running("agent", InitSystem.SYSTEMD) is False


def test_service_checks_unknown_init_system_runs_nothing(fake_tools):
    log = fake_tools(0)
    assert is_service_enabled("agent", InitSystem.UNKNOWN) is False
    assert is_service_running("agent", InitSystem.UNKNOWN) is False
    assert _calls(log) == []


@pytest.mark.parametrize(
    "init_system, expected",
    [
        (InitSystem.SYSTEMD, "systemctl enable agent"),
        (InitSystem.SYSV, "chkconfig agent on"),
    ],
)
def test_enable_commands(fake_tools, init_system, expected):
    log = fake_tools(0)
    result = ServiceController(init_system).enable("agent")
    assert (result, _calls(log)) == (None, [expected])


@pytest.mark.parametrize(
    "init_system, expected",
    [
        (InitSystem.SYSTEMD, "systemctl start agent"),
        (InitSystem.SYSV, "service agent start"),
    ],
)
def test_start_commands(fake_tools, init_system, expected):
    log = fake_tools(0)
    result = ServiceController(init_system).start("agent")
    assert (result, _calls(log)) == (None, [expected])


def test_daemon_reload_systemd(fake_tools):
    log = fake_tools(0)
    result = ServiceController(InitSystem.SYSTEMD).daemon_reload()
    assert (result, _calls(log)) == (None, ["systemctl daemon-reload"])


def test_daemon_reload_sysv_is_noop(fake_tools):
    log = fake_tools(0)
    result = ServiceController(InitSystem.SYSV).daemon_reload()
    assert (result, _calls(log)) == (None, [])


def test_unknown_init_system_raises(fake_tools):
    log = fake_tools(0)
    controller = ServiceController(InitSystem.UNKNOWN)
    with pytest.raises(ValueError, match="unknown init system"):
        controller.enable("agent")
    with pytest.raises(ValueError, match="unknown init system"):
        controller.start("agent")
    assert _calls(log) == []


def test_failing_command_propagates(fake_tools):
    log = fake_tools(1)
    with pytest.raises(subprocess.CalledProcessError) as info:
        ServiceController(InitSystem.SYSTEMD).start("agent")
    assert info.value.returncode == 1
    assert _calls(log) == ["systemctl start agent"]
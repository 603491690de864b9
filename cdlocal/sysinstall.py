"""System-level helpers for installing the agent as a service.

Covers file hashing, plain file installation and talking to the init
system (systemd or SysV) through its command-line tools.
"""

from __future__ import annotations

import hashlib
import os
import shutil
import subprocess
from enum import Enum

_CHUNK_SIZE = 64 * 1024


class InitSystem(str, Enum):
    """The init system that manages the agent's service."""

    SYSTEMD = "systemd"
    SYSV = "sysv"
    UNKNOWN = "unknown"


def file_hash(path: str | os.PathLike[str]) -> bytes:
    """Return the SHA-256 digest of a file's content."""
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.digest()


def files_match(path_a: str | os.PathLike[str], path_b: str | os.PathLike[str]) -> bool:
    """Return True when both files can be read and have identical content hashes."""
    try:
        return file_hash(path_a) == file_hash(path_b)
    except OSError:
        return False


def _succeeds(command: list[str]) -> bool:
    try:
        completed = subprocess.run(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError:
        return False
    return completed.returncode == 0


def is_service_enabled(name: str, init_system: InitSystem) -> bool:
    """Report whether the service is enabled; False when it cannot be determined."""
    if init_system is InitSystem.SYSTEMD:
        return _succeeds(["systemctl", "is-enabled", "--quiet", name])
    if init_system is InitSystem.SYSV:
        return _succeeds(["chkconfig", "--list", name])
    return False


def is_service_running(name: str, init_system: InitSystem) -> bool:
    """Report whether the service is running; False when it cannot be determined."""
    if init_system is InitSystem.SYSTEMD:
        return _succeeds(["systemctl", "is-active", "--quiet", name])
    if init_system is InitSystem.SYSV:
        return _succeeds(["service", name, "status"])
    return False


class FileInstaller:
    """Creates directories and writes, copies and renames files on disk."""

    def mkdir_all(self, path: str | os.PathLike[str]) -> None:
        """Create a directory and any missing parents."""
        os.makedirs(path, mode=0o755, exist_ok=True)

    def write_file(self, path: str | os.PathLike[str], data: bytes, mode: int) -> None:
        """Write data to a file, creating it with the given mode if it is new."""
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)

    def copy_file(
        self, src: str | os.PathLike[str], dst: str | os.PathLike[str], mode: int
    ) -> None:
        """Copy a file's content, creating the destination with the given mode if new."""
        with open(src, "rb") as source:
            fd = os.open(dst, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
            with os.fdopen(fd, "wb") as target:
                shutil.copyfileobj(source, target, _CHUNK_SIZE)

    def rename(self, old_path: str | os.PathLike[str], new_path: str | os.PathLike[str]) -> None:
        """Move a file to a new path, replacing any file already there."""
        os.replace(old_path, new_path)


class ServiceController:
    """Enables and starts services through the detected init system's tools.

    Failing commands raise :class:`subprocess.CalledProcessError`; a missing
    tool raises :class:`FileNotFoundError`.
    """

    def __init__(self, init_system: InitSystem) -> None:
        self.init_system = init_system

    def _run(self, command: list[str]) -> None:
        subprocess.run(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=True,
        )

    def enable(self, name: str) -> None:
        """Enable the service so that it starts at boot."""
        if self.init_system is InitSystem.SYSTEMD:
            self._run(["systemctl", "enable", name])
        elif self.init_system is InitSystem.SYSV:
            self._run(["chkconfig", name, "on"])
        else:
            raise ValueError("unknown init system")

    def start(self, name: str) -> None:
        """Start the service now."""
        if self.init_system is InitSystem.SYSTEMD:
            self._run(["systemctl", "start", name])
        elif self.init_system is InitSystem.SYSV:
            self._run(["service", name, "start"])
        else:
            raise ValueError("unknown init system")

    def daemon_reload(self) -> None:
        """Ask systemd to reload unit files; nothing to do for other init systems."""
        if self.init_system is InitSystem.SYSTEMD:
            self._run(["systemctl", "daemon-reload"])
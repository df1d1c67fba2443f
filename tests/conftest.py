"""
Pytest configuration and shared fixtures for mbusb tests.

This module provides common fixtures and utilities used across all test modules.
"""

import io
import subprocess
import sys
import tarfile
from pathlib import Path
from typing import List
from unittest.mock import Mock

import pytest
from loguru import logger

from mbusb.config import settings


MEMDISK_MEMBER = "syslinux-6.03/bios/memdisk/memdisk"
MEMDISK_PAYLOAD = b"\x7fELF fake memdisk payload"


def make_completed_process(returncode: int = 0, stdout: str = "", stderr: str = "") -> Mock:
    result = Mock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


def build_syslinux_archive(member: str = MEMDISK_MEMBER, payload: bytes = MEMDISK_PAYLOAD) -> bytes:
    """Build an in-memory tar.gz shaped like the syslinux release archive."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for directory in ("syslinux-6.03", "syslinux-6.03/bios", "syslinux-6.03/bios/memdisk"):
            info = tarfile.TarInfo(directory)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        info = tarfile.TarInfo(member)
        info.size = len(payload)
        info.mode = 0o644
        info.uid = 4242
        tar.addfile(info, io.BytesIO(payload))
        readme = b"syslinux\n"
        info = tarfile.TarInfo("syslinux-6.03/README")
        info.size = len(readme)
        tar.addfile(info, io.BytesIO(readme))
    return buffer.getvalue()


# ==============================================================================
# Local Input Fixtures
# ==============================================================================


@pytest.fixture
def source_dir(tmp_path) -> Path:
    """
    Fixture providing a directory with the local configuration inputs.

    Returns:
        Path holding mbusb.cfg, mbusb.d/ and grub.cfg.example.
    """
    directory = tmp_path / "source"
    fragments = directory / "mbusb.d"
    (fragments / "debian.d").mkdir(parents=True)
    (directory / "mbusb.cfg").write_text("for cfgfile in $prefix/mbusb.d/*.d/*.cfg; do\n")
    (fragments / "debian.d" / "generic.cfg").write_text("menuentry 'Debian' {}\n")
    (fragments / "README").write_text("menu fragments\n")
    (directory / "grub.cfg.example").write_text("source $prefix/mbusb.cfg\n")
    return directory


@pytest.fixture
def syslinux_archive() -> bytes:
    """Fixture providing the bytes of a fake syslinux release tarball."""
    return build_syslinux_archive()


@pytest.fixture
def memdisk_member() -> str:
    return MEMDISK_MEMBER


@pytest.fixture
def memdisk_payload() -> bytes:
    return MEMDISK_PAYLOAD


# ==============================================================================
# Subprocess Mock Fixtures
# ==============================================================================


@pytest.fixture
def mock_subprocess_success(mocker) -> Mock:
    """
    Fixture providing a mock subprocess.run that always succeeds.

    Returns:
        Mock object for subprocess.run.
    """
    return mocker.patch("subprocess.run", return_value=make_completed_process())


@pytest.fixture
def mock_subprocess_failure(mocker) -> Mock:
    """
    Fixture providing a mock subprocess.run that always fails.

    Returns:
        Mock object for subprocess.run that raises CalledProcessError.
    """

    def raise_error(*args, **kwargs):
        raise subprocess.CalledProcessError(1, args[0], stderr="Mock error")

    return mocker.patch("subprocess.run", side_effect=raise_error)


@pytest.fixture
def capture_subprocess_calls(mocker) -> List[List]:
    """
    Fixture that captures all subprocess.run calls for inspection.

    Returns:
        List that will contain all subprocess command arguments.
    """
    calls = []

    def track_call(cmd, **kwargs):
        calls.append(cmd)
        return make_completed_process()

    mocker.patch("subprocess.run", side_effect=track_call)
    return calls


# ==============================================================================
# Global State Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def default_settings(tmp_path):
    """
    Auto-use fixture that runs every test against default settings.

    A settings file in the developer's home directory must not leak into tests.
    """
    settings.load_settings(tmp_path / "no-settings.json")
    yield
    settings.load_settings(tmp_path / "no-settings.json")


@pytest.fixture(autouse=True)
def reset_logging():
    """
    Auto-use fixture that drops sinks added by a test.

    File sinks point into tmp_path, which is removed after the test.
    """
    yield
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")

"""Download a release archive and extract a single member from it.

Used to pull ``memdisk`` out of the syslinux release tarball: one GET with
aiohttp, no retries, the body spooled to a temporary file, then one tar member
written into the destination directory with leading path components
stripped. The extracted file is created by this process, so it does not carry
the archive's recorded owner.
"""

from __future__ import annotations

import asyncio
import shutil
import tarfile
import tempfile
from pathlib import Path, PurePosixPath
from typing import BinaryIO

import aiohttp

from mbusb.exceptions import FetchError
from mbusb.logging import LoggerFactory

log = LoggerFactory.for_fetch()

CHUNK_SIZE = 64 * 1024


async def download_archive(
    url: str, destination: BinaryIO, timeout_seconds: int = 300
) -> int:
    """Stream ``url`` into ``destination``.

    Args:
        url: Archive URL
        destination: Writable binary file object
        timeout_seconds: Total request timeout

    Returns:
        Number of bytes written

    Raises:
        FetchError: Network error, timeout, non-2xx status or failed write
    """
    timeout = aiohttp.ClientTimeout(total=timeout_seconds)
    written = 0
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url) as resp:
                if resp.status != 200:
                    raise FetchError(f"Download of {url} failed with status {resp.status}", url)
                async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                    destination.write(chunk)
                    written += len(chunk)
    except aiohttp.ClientError as e:
        log.debug(f"Network error while downloading {url}: {e}")
        raise FetchError(f"Network error: {e}", url) from e
    except asyncio.TimeoutError as e:
        raise FetchError(f"Download of {url} timed out after {timeout_seconds}s", url) from e
    except OSError as e:
        raise FetchError(f"Could not save download of {url}: {e}", url) from e
    log.debug(f"Downloaded {written} bytes from {url}")
    return written


def strip_components(member: str, count: int) -> PurePosixPath:
    """Drop the first ``count`` path components, like ``tar --strip-components``."""
    parts = PurePosixPath(member).parts[count:]
    if not parts:
        raise FetchError(f"Nothing left of {member} after stripping {count} components")
    return PurePosixPath(*parts)


def extract_member(
    archive: BinaryIO,
    member: str,
    destination_dir: Path,
    strip: int = 0,
) -> Path:
    """Write one regular-file member of a tar archive into ``destination_dir``.

    Raises:
        FetchError: Corrupt archive, missing member, or write failure
    """
    relative = strip_components(member, strip)
    target = destination_dir / Path(*relative.parts)
    try:
        with tarfile.open(fileobj=archive, mode="r:*") as tar:
            try:
                info = tar.getmember(member)
            except KeyError as e:
                raise FetchError(f"{member} not found in archive") from e
            if not info.isfile():
                raise FetchError(f"{member} is not a regular file in the archive")
            source = tar.extractfile(info)
            if source is None:
                raise FetchError(f"{member} could not be read from the archive")
            target.parent.mkdir(parents=True, exist_ok=True)
            with source, open(target, "wb") as output:
                shutil.copyfileobj(source, output)
    except tarfile.TarError as e:
        raise FetchError(f"Could not read archive: {e}") from e
    except OSError as e:
        raise FetchError(f"Could not write {target}: {e}") from e
    return target


def fetch_archive_member(
    url: str,
    member: str,
    destination_dir: Path,
    *,
    strip: int = 0,
    timeout_seconds: int = 300,
) -> Path:
    """Download the archive at ``url`` and extract ``member`` from it.

    Returns:
        Path of the extracted file
    """
    log.info(f"Fetching {member} from {url}")
    try:
        with tempfile.TemporaryFile() as archive:
            asyncio.run(download_archive(url, archive, timeout_seconds))
            archive.seek(0)
            target = extract_member(archive, member, destination_dir, strip)
    except OSError as e:
        raise FetchError(f"Could not spool download of {url}: {e}", url) from e
    log.info(f"Extracted {target}")
    return target

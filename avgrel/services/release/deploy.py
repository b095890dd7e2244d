"""Upload of the browser bundle to the live-player host.

Deployments replace the remote ``<root>/engine/<version>`` directory as a
whole; files from an earlier upload of the same version never survive.
"""

from __future__ import annotations

import contextlib
import os
import posixpath
import stat
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from avgrel.core.config import RemoteConfig
from avgrel.core.result import Err, Ok, Result
from avgrel.output.console import ConsoleProtocol
from avgrel.services.release.errors import (
    ReleaseError,
    RemoteConnectFailed,
    RemoteOperationFailed,
)
from avgrel.services.release.model import Platform, StagingTree

if TYPE_CHECKING:
    import paramiko

CONNECT_TIMEOUT_SECONDS = 30.0


class RemoteError(Exception):
    """A remote transport operation failed."""


class RemoteClient(Protocol):
    """Operations the deployer needs from a remote file transport.

    Implementations raise ``RemoteError`` (or ``OSError``) on failure.
    """

    @property
    def host(self) -> str: ...

    def connect(self) -> None: ...

    def exists(self, path: str) -> bool: ...

    def remove(self, path: str) -> None:
        """Remove ``path`` and everything below it."""
        ...

    def upload_dir(self, local: Path, remote: str) -> None: ...

    def close(self) -> None:
        """Release the connection. Safe to call when not connected."""
        ...


class SftpClient:
    """RemoteClient over SFTP, authenticated with a private key file."""

    def __init__(self, remote: RemoteConfig) -> None:
        self._remote = remote
        self._ssh: paramiko.SSHClient | None = None
        self._sftp: paramiko.SFTPClient | None = None

    @property
    def host(self) -> str:
        return f"{self._remote.host}:{self._remote.port}"

    def connect(self) -> None:
        import paramiko

        key = self._remote.private_key_path()
        ssh = paramiko.SSHClient()
        ssh.load_system_host_keys()
        try:
            ssh.connect(
                hostname=self._remote.host or "",
                port=self._remote.port,
                username=self._remote.username,
                key_filename=str(key) if key is not None else None,
                timeout=CONNECT_TIMEOUT_SECONDS,
            )
            self._sftp = ssh.open_sftp()
        except (paramiko.SSHException, OSError) as e:
            ssh.close()
            raise RemoteError(str(e) or type(e).__name__) from e
        self._ssh = ssh

    @contextlib.contextmanager
    def _translate_errors(self) -> Iterator[None]:
        import paramiko

        try:
            yield
        except paramiko.SSHException as e:
            raise RemoteError(str(e) or type(e).__name__) from e

    def _client(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            raise RemoteError("not connected")
        return self._sftp

    def exists(self, path: str) -> bool:
        try:
            with self._translate_errors():
                self._client().stat(path)
        except FileNotFoundError:
            return False
        return True

    def remove(self, path: str) -> None:
        with self._translate_errors():
            self._remove(path)

    def _remove(self, path: str) -> None:
        sftp = self._client()
        for entry in sftp.listdir_attr(path):
            child = posixpath.join(path, entry.filename)
            if entry.st_mode is not None and stat.S_ISDIR(entry.st_mode):
                self._remove(child)
            else:
                sftp.remove(child)
        sftp.rmdir(path)

    def _makedirs(self, path: str) -> None:
        sftp = self._client()
        current = "/" if path.startswith("/") else ""
        for part in path.strip("/").split("/"):
            current = posixpath.join(current, part) if current else part
            if not self.exists(current):
                sftp.mkdir(current)

    def upload_dir(self, local: Path, remote: str) -> None:
        with self._translate_errors():
            self._upload_dir(local, remote)

    def _upload_dir(self, local: Path, remote: str) -> None:
        sftp = self._client()
        self._makedirs(remote)
        for dirpath, dirnames, filenames in os.walk(local):
            dirnames.sort()
            rel = Path(dirpath).relative_to(local).as_posix()
            remote_dir = remote if rel == "." else posixpath.join(remote, rel)
            for name in dirnames:
                sftp.mkdir(posixpath.join(remote_dir, name))
            for name in sorted(filenames):
                sftp.put(os.path.join(dirpath, name), posixpath.join(remote_dir, name))

    def close(self) -> None:
        if self._sftp is not None:
            self._sftp.close()
            self._sftp = None
        if self._ssh is not None:
            self._ssh.close()
            self._ssh = None


def remote_destination(remote_root: str, version: str) -> str:
    return posixpath.join(remote_root, "engine", version)


class Deployer:
    def __init__(self, client: RemoteClient, *, remote_root: str, console: ConsoleProtocol) -> None:
        self._client = client
        self._remote_root = remote_root
        self._console = console

    def deploy(self, staging: StagingTree, version: str) -> Result[str, ReleaseError]:
        """Replace the remote directory for ``version`` with the staged browser bundle.

        Returns the remote destination path. The connection is closed on every
        path once it has been opened.
        """
        src = staging.platform_dir(Platform.BROWSER)
        dest = remote_destination(self._remote_root, version)
        if not src.is_dir():
            return Err(
                RemoteOperationFailed(op="upload", path=dest, reason=f"nothing staged at {src}")
            )

        self._console.step(f"connecting to {self._client.host} ...")
        try:
            self._client.connect()
        except (RemoteError, OSError) as e:
            return Err(RemoteConnectFailed(host=self._client.host, reason=str(e)))

        try:
            return self._replace(src, dest)
        finally:
            self._client.close()

    def _replace(self, src: Path, dest: str) -> Result[str, ReleaseError]:
        op = "exists"
        try:
            if self._client.exists(dest):
                op = "remove"
                self._console.info(f"removing previous upload {dest}")
                self._client.remove(dest)
            op = "upload"
            self._console.step(f"uploading {src} -> {dest}")
            self._client.upload_dir(src, dest)
        except (RemoteError, OSError) as e:
            return Err(RemoteOperationFailed(op=op, path=dest, reason=str(e)))

        self._console.success(f"uploaded: {dest}")
        return Ok(dest)

"""Remote command channel: run a shell command, get trimmed stdout or an error."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Protocol

from fabric import Connection
from invoke.exceptions import UnexpectedExit
from paramiko.ssh_exception import SSHException

from mp_common.errors import RemoteCommandError

logger = logging.getLogger(__name__)


class SSHCommander(Protocol):
    """Anything able to execute a command on the provisioned machine."""

    def ssh_command(self, command: str) -> str:
        """Run ``command`` remotely and return its trimmed standard output.

        Raises RemoteCommandError on non-zero exit or transport failure.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Drop the underlying connection, if any."""
        raise NotImplementedError


class FabricCommander:
    """SSH command channel backed by a Fabric connection.

    The connection is opened on first use and reused for every command. There
    is no retry at this layer.
    """

    def __init__(
        self,
        host: str,
        *,
        user: str = "root",
        port: int = 22,
        key_filename: Optional[str] = None,
        connect_timeout: float = 30.0,
        connection_factory: Callable[..., Connection] = Connection,
    ) -> None:
        self.host = host
        self.user = user
        self.port = port
        self.key_filename = key_filename
        self.connect_timeout = connect_timeout
        self._connection_factory = connection_factory
        self._conn: Connection | None = None

    def _get_connection(self) -> Connection:
        if self._conn is None:
            connect_kwargs: dict[str, object] = {"banner_timeout": 30}
            if self.key_filename:
                connect_kwargs["key_filename"] = str(Path(self.key_filename).expanduser())
            self._conn = self._connection_factory(
                host=self.host,
                user=self.user,
                port=self.port,
                connect_timeout=self.connect_timeout,
                connect_kwargs=connect_kwargs,
            )
        return self._conn

    def ssh_command(self, command: str) -> str:
        conn = self._get_connection()
        logger.debug("SSH cmd on %s: %s", self.host, command)
        try:
            result = conn.run(command, hide=True, in_stream=False)
        except UnexpectedExit as exc:
            failed = exc.result
            raise RemoteCommandError(
                f"Remote command exited with status {failed.exited}: {command}",
                command=command,
                exit_code=failed.exited,
                stdout=failed.stdout,
                stderr=failed.stderr,
            ) from exc
        except (SSHException, OSError) as exc:
            raise RemoteCommandError(
                f"Could not run remote command on {self.host}: {exc}",
                command=command,
            ) from exc
        return result.stdout.strip()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "FabricCommander":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

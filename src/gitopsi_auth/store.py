"""Credential storage backends.

This module provides the Store protocol and two implementations: an
in-memory store for tests and ephemeral use, and a file-backed store that
rewrites the whole YAML credentials file on every mutation.

Both stores guard their map with a read/write lock. Reads run
concurrently; a save or delete is exclusive for the mutation and, for the
file store, the full serialize-and-write that follows it. Write throughput
is therefore bounded by file I/O, which is fine for tens to low hundreds
of credentials.
"""

import contextlib
import os
import tempfile
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Protocol

import yaml
from icecream import ic

from gitopsi_auth.exceptions import CredentialNotFoundError, SerializationError, StorageIOError
from gitopsi_auth.models import Credential, CredentialType

_FILE_MODE = 0o600
_DIR_MODE = 0o700


class Store(Protocol):
    """Persistence interface for credentials, keyed by name."""

    def save(self, credential: Credential) -> None:
        """Insert or replace a credential."""
        ...

    def get(self, name: str) -> Credential:
        """Return a credential or raise CredentialNotFoundError."""
        ...

    def list(self, cred_type: CredentialType | str | None = None) -> list[Credential]:
        """Return credentials of a type, or all of them when no type is given."""
        ...

    def delete(self, name: str) -> None:
        """Remove a credential or raise CredentialNotFoundError."""
        ...

    def exists(self, name: str) -> bool:
        """Return True if a credential with this name is stored."""
        ...


class ReadWriteLock:
    """A lock allowing many concurrent readers or a single writer.

    Waiting writers block new readers so a steady stream of reads cannot
    starve a save.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextlib.contextmanager
    def read(self) -> Iterator[None]:
        """Hold the lock in shared mode."""
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextlib.contextmanager
    def write(self) -> Iterator[None]:
        """Hold the lock in exclusive mode."""
        with self._cond:
            self._waiting_writers += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class MemoryStore:
    """In-memory credential store with no persistence."""

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._credentials: dict[str, Credential] = {}

    def save(self, credential: Credential) -> None:
        """Insert or replace a credential."""
        with self._lock.write():
            self._credentials[credential.name] = credential

    def get(self, name: str) -> Credential:
        """Return a credential by name.

        Raises:
            CredentialNotFoundError: If no credential has this name.

        """
        with self._lock.read():
            try:
                return self._credentials[name]
            except KeyError:
                raise CredentialNotFoundError(name) from None

    def list(self, cred_type: CredentialType | str | None = None) -> list[Credential]:
        """Return credentials sorted by name; an empty or None type returns all of them."""
        with self._lock.read():
            return _select(self._credentials, cred_type)

    def delete(self, name: str) -> None:
        """Remove a credential.

        Raises:
            CredentialNotFoundError: If no credential has this name.

        """
        with self._lock.write():
            if name not in self._credentials:
                raise CredentialNotFoundError(name)
            del self._credentials[name]

    def exists(self, name: str) -> bool:
        """Return True if a credential with this name is stored."""
        with self._lock.read():
            return name in self._credentials

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._credentials)


class FileStore(MemoryStore):
    """Credential store persisted to a YAML file.

    The file holds a single ``credentials`` list. Every save or delete
    rewrites the whole file. If the write fails the in-memory map keeps
    the change and differs from the file until the next successful write.

    Attributes:
        path: Location of the credentials file.

    """

    def __init__(self, path: str | Path) -> None:
        """Open a store, loading the file if it exists.

        Args:
            path: Location of the credentials file. A missing file means
                an empty store.

        Raises:
            StorageIOError: If the file exists but cannot be read.
            SerializationError: If the file is not a valid credentials document.

        """
        super().__init__()
        self.path: Path = Path(path)
        if self.path.exists():
            self._load()
        ic(self.path, len(self._credentials))

    def save(self, credential: Credential) -> None:
        """Insert or replace a credential and rewrite the file.

        Raises:
            StorageIOError: If the file cannot be written.
            SerializationError: If the credentials cannot be rendered as YAML.

        """
        with self._lock.write():
            self._credentials[credential.name] = credential
            self._persist()

    def delete(self, name: str) -> None:
        """Remove a credential and rewrite the file.

        Raises:
            CredentialNotFoundError: If no credential has this name; the
                file is left untouched.
            StorageIOError: If the file cannot be written.

        """
        with self._lock.write():
            if name not in self._credentials:
                raise CredentialNotFoundError(name)
            del self._credentials[name]
            self._persist()

    def _load(self) -> None:
        try:
            with self.path.open() as stream:
                document = yaml.safe_load(stream)
        except OSError as err:
            raise StorageIOError(f"Cannot read credentials file '{self.path}': {err.strerror}") from err
        except yaml.YAMLError as err:
            raise SerializationError(f"Credentials file '{self.path}' contains malformed YAML: {err}") from err

        if document is None:
            return
        if not isinstance(document, dict) or not isinstance(document.get("credentials") or [], list):
            raise SerializationError(
                f"Credentials file '{self.path}' must be a mapping with a 'credentials' list"
            )

        for entry in document.get("credentials") or []:
            if not isinstance(entry, dict):
                raise SerializationError(f"Credentials file '{self.path}' has a non-mapping entry: {entry!r}")
            credential = Credential.from_dict(entry)
            self._credentials[credential.name] = credential

    def _persist(self) -> None:
        """Write the whole collection to disk. Caller holds the write lock."""
        document: dict[str, Any] = {
            "credentials": [credential.to_dict() for credential in _select(self._credentials, None)]
        }
        try:
            payload = yaml.safe_dump(document, sort_keys=False, default_flow_style=False)
        except yaml.YAMLError as err:
            raise SerializationError(f"Failed to serialize credentials: {err}") from err

        directory = self.path.parent
        # Every directory created here is owner-only, not just the last one
        missing = [path for path in (directory, *directory.parents) if not path.is_dir()]
        try:
            for path in reversed(missing):
                path.mkdir(mode=_DIR_MODE, exist_ok=True)
        except OSError as err:
            raise StorageIOError(f"Cannot create directory '{directory}': {err.strerror}") from err

        # mkstemp creates the file with mode 0600
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
        except OSError as err:
            raise StorageIOError(f"Cannot write credentials file '{self.path}': {err.strerror}") from err

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w") as stream:
                stream.write(payload)
            os.chmod(tmp_path, _FILE_MODE)
            os.replace(tmp_path, self.path)
        except OSError as err:
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            raise StorageIOError(f"Cannot write credentials file '{self.path}': {err.strerror}") from err

        ic(f"persisted {len(self._credentials)} credential(s) to {self.path}")


def _select(credentials: dict[str, Credential], cred_type: CredentialType | str | None) -> list[Credential]:
    return [
        credentials[name]
        for name in sorted(credentials)
        if not cred_type or credentials[name].type == cred_type
    ]

"""
Directory of ``.maFile`` credential records.

Files are read and written off the event loop. Saves go through a temporary
file that is fsynced and then renamed over the target, so a crash never
leaves a half-written record behind.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from ..core import diagnostics
from ..core.errors import CredentialStoreError
from ..models.account import CredentialRecord
from .serialization import deserialize_account, serialize_account

MAFILE_SUFFIX = ".maFile"


def record_file_name(record: CredentialRecord) -> str:
    """``<steamid>.maFile``, falling back to ``<account_name>.maFile``."""
    if record.steam_id:
        return f"{record.steam_id}{MAFILE_SUFFIX}"
    if record.account_name:
        return f"{record.account_name}{MAFILE_SUFFIX}"
    raise CredentialStoreError("record has neither a steam id nor an account name")


class MaFileStore:
    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, name: str) -> Path:
        file_name = name if name.endswith(MAFILE_SUFFIX) else f"{name}{MAFILE_SUFFIX}"
        return self._directory / file_name

    async def load(self, name: str) -> CredentialRecord:
        path = self.path_for(name)
        try:
            raw = await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as exc:
            raise CredentialStoreError(
                f"no credential record named {name!r}", cause=exc, path=str(path)
            ) from exc
        except OSError as exc:
            raise CredentialStoreError(
                f"could not read {path}: {exc}", cause=exc, path=str(path)
            ) from exc
        try:
            return deserialize_account(raw)
        except CredentialStoreError:
            diagnostics.warn("storage", "credential record is corrupt", path=str(path))
            raise

    async def save(self, record: CredentialRecord) -> Path:
        """Atomically write ``record``; returns the file path."""
        path = self._directory / record_file_name(record)
        payload = serialize_account(record)
        temp_path = path.with_suffix(".tmp")

        def _write_atomic() -> None:
            self._directory.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, path)

        try:
            await asyncio.to_thread(_write_atomic)
        except OSError as exc:
            raise CredentialStoreError(
                f"could not write {path}: {exc}", cause=exc, path=str(path)
            ) from exc
        return path

    async def list_accounts(self) -> list[str]:
        """Names (file stems) of the stored records, sorted."""

        def _scan() -> list[str]:
            if not self._directory.is_dir():
                return []
            return sorted(
                p.stem for p in self._directory.iterdir() if p.suffix == MAFILE_SUFFIX
            )

        return await asyncio.to_thread(_scan)

"""flatstore.store

A flat key/value record store held in memory and backed by one file.

Persistence never writes the backing file directly from the encoder:
- the whole mapping is encoded first (an encode failure touches nothing)
- the bytes go to a uniquely named side file next to the backing file
- only a fully written side file replaces the backing file, either by an
  atomic rename ("rename") or by truncate-and-copy ("copy")
"""

from __future__ import annotations

import copy
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, BinaryIO, Iterator, TypeVar

from pydantic import BaseModel

from .codecs import get_codec
from .config import StoreConfig
from .errors import NoRecord, StoreClosed
from .interfaces import Codec

M = TypeVar("M", bound=BaseModel)


def _fsync_dir(directory: Path) -> None:
    # Directory handles cannot be opened for fsync on Windows.
    if os.name == "nt":
        return
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


class RecordStore:
    """
    In-memory mapping of string keys to JSON/YAML-shaped values, persisted to a single file.

    - Not thread-safe; exactly one store should own a given file at a time.
    - Reads hand out deep copies, so callers cannot mutate the store through them.
    - delete() never flushes; flush_on_write applies to write() only.
    """

    def __init__(
        self,
        path: Path,
        handle: BinaryIO,
        codec: Codec,
        config: StoreConfig,
        records: dict[str, Any],
    ):
        self._path = path
        self._handle: BinaryIO | None = handle
        self._codec = codec
        self._config = config
        self._records = records
        self._name = config.resolved_name(path)
        self._log = config.resolved_logger()

    @classmethod
    def open(cls, path: str | Path, config: StoreConfig | None = None, **overrides: Any) -> "RecordStore":
        """
        Open (creating if needed) the store file at `path` and load its records.

        Raises UnsupportedFormat before touching the filesystem, OSError if the
        file cannot be opened, and DecodeError if its content is malformed.
        """
        if config is None:
            config = StoreConfig.model_validate(overrides)
        elif overrides:
            config = StoreConfig.model_validate({**dict(config), **overrides})

        p = Path(path)
        name = config.resolved_name(p)
        codec = get_codec(config.resolved_format(p), indent=config.indent, sort_keys=config.sort_keys)

        fd = os.open(p, os.O_RDWR | os.O_CREAT, 0o644)
        handle = os.fdopen(fd, "r+b")
        try:
            records = codec.decode(handle.read(), store_name=name)
        except Exception:
            handle.close()
            raise

        store = cls(p, handle, codec, config, records)
        store._log.debug("%s: opened %s (%s, %d records)", name, p, codec.name, len(records))
        return store

    @property
    def path(self) -> Path:
        return self._path

    @property
    def name(self) -> str:
        return self._name

    @property
    def codec(self) -> Codec:
        return self._codec

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._handle is None

    def _check_open(self) -> None:
        if self._handle is None:
            raise StoreClosed(self._name)

    # Records
    def read(self, key: str, model: type[M] | None = None) -> Any:
        self._check_open()
        try:
            value = self._records[key]
        except KeyError:
            raise NoRecord(key, self._name) from None
        value = copy.deepcopy(value)
        if model is not None:
            return model.model_validate(value)
        return value

    def read_all(self, model: type[M] | None = None) -> dict[str, Any]:
        self._check_open()
        snapshot = copy.deepcopy(self._records)
        if model is not None:
            return {k: model.model_validate(v) for k, v in snapshot.items()}
        return snapshot

    def write(self, key: str, value: Any) -> None:
        """
        Insert or overwrite `key`.

        With flush_on_write the store is persisted before returning and a
        persistence failure is raised here; the in-memory write is kept either way.
        """
        self._check_open()
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")
        self._records[key] = value
        if self._config.flush_on_write:
            self._save()

    def delete(self, key: str) -> None:
        self._check_open()
        if key not in self._records:
            raise NoRecord(key, self._name)
        del self._records[key]

    def keys(self) -> list[str]:
        self._check_open()
        return list(self._records)

    def __contains__(self, key: object) -> bool:
        return self._handle is not None and key in self._records

    def __len__(self) -> int:
        self._check_open()
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    # Lifecycle
    def flush(self) -> None:
        self._check_open()
        self._save()

    def close(self) -> None:
        """Persist once, then release the file handle even if persisting failed."""
        if self._handle is None:
            return
        try:
            self._save()
        finally:
            handle, self._handle = self._handle, None
            handle.close()
            self._log.debug("%s: closed", self._name)

    def __enter__(self) -> "RecordStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else f"{len(self._records)} records"
        return f"<RecordStore {self._name!r} {self._codec.name} {state}>"

    # Persistence
    def _save(self) -> None:
        self._check_open()
        payload = self._codec.encode(self._records, store_name=self._name)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            dir=str(self._path.parent),
        )
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w+b") as side:
                side.write(payload)
                side.flush()
                if self._config.fsync:
                    os.fsync(side.fileno())
                if self._config.replace_strategy == "copy":
                    self._copy_into_backing(side)
            if self._config.replace_strategy == "rename":
                self._rename_into_backing(tmp)
        finally:
            self._discard(tmp)

        self._log.debug("%s: flushed %d records to %s", self._name, len(self._records), self._path)

    def _copy_into_backing(self, side: BinaryIO) -> None:
        self._check_open()
        f = self._handle
        try:
            f.truncate(0)
            f.seek(0)
            side.seek(0)
            shutil.copyfileobj(side, f)
            f.flush()
            if self._config.fsync:
                os.fsync(f.fileno())
        except OSError as e:
            self._log.error("%s: copy into %s failed, file may be partially written: %r", self._name, self._path, e)
            raise

    def _rename_into_backing(self, tmp: Path) -> None:
        # mkstemp creates 0600 files; keep the backing file's permissions.
        shutil.copymode(self._path, tmp)
        os.replace(tmp, self._path)
        if self._config.fsync:
            _fsync_dir(self._path.parent)

        # The old handle still points at the replaced inode.
        fresh = open(self._path, "r+b")
        old, self._handle = self._handle, fresh
        if old is not None:
            old.close()

    def _discard(self, tmp: Path) -> None:
        try:
            tmp.unlink(missing_ok=True)
        except OSError as e:
            self._log.warning("%s: failed to remove side file %s: %r", self._name, tmp, e)


def open_store(path: str | Path, config: StoreConfig | None = None, **overrides: Any) -> RecordStore:
    return RecordStore.open(path, config, **overrides)

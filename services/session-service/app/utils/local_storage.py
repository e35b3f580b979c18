"""
Local Storage
Synchronous key-value storage holding the active user record

Backends:
- MemoryStorage: process-local dict
- FileStorage: JSON object file on disk, survives restarts
- RedisStorage: shared redis instance
"""

import os
import json
import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

import redis

from shared.utils.redis_client import RedisClient

logger = logging.getLogger(__name__)


class LocalStorageError(Exception):
    """Stored value unreadable or storage backend failure"""
    pass


class CorruptStorageFileError(LocalStorageError):
    """Storage file exists but does not hold a JSON object"""
    pass


class LocalStorage(ABC):
    """String key-value storage interface"""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None"""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one"""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key; no-op when absent"""


class MemoryStorage(LocalStorage):
    """In-memory storage"""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __len__(self):
        return len(self._items)


class FileStorage(LocalStorage):
    """JSON file storage, one object mapping keys to string values"""

    def __init__(self, path: str):
        self.path = Path(os.path.expanduser(path))

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                content = f.read()
        except OSError as e:
            raise LocalStorageError(f"Cannot read local storage file {self.path}: {e}") from e

        if not content.strip():
            return {}
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise CorruptStorageFileError(f"Local storage file {self.path} is corrupt: {e}") from e
        if not isinstance(data, dict):
            raise CorruptStorageFileError(f"Local storage file {self.path} does not hold a JSON object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(data, f)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise LocalStorageError(f"Cannot write local storage file {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        try:
            data = self._read()
        except CorruptStorageFileError as e:
            logger.warning(f"Resetting unreadable local storage file: {e}")
            self._write({})
            return
        if key in data:
            del data[key]
            self._write(data)


class RedisStorage(LocalStorage):
    """Redis-backed storage"""

    def __init__(self, redis_client: RedisClient, prefix: str = "local_storage"):
        self.redis_client = redis_client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}" if self.prefix else key

    def get_item(self, key: str) -> Optional[str]:
        try:
            return self.redis_client.get(self._key(key))
        except redis.RedisError as e:
            raise LocalStorageError(f"Redis read failed for {key}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        try:
            self.redis_client.set(self._key(key), value)
        except redis.RedisError as e:
            raise LocalStorageError(f"Redis write failed for {key}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self.redis_client.delete(self._key(key))
        except redis.RedisError as e:
            raise LocalStorageError(f"Redis delete failed for {key}: {e}") from e


def create_storage(config) -> LocalStorage:
    """
    Build the storage backend named in configuration

    Args:
        config: SessionConfig

    Returns:
        LocalStorage: Configured backend
    """
    backend = config.storage_backend
    if backend == "memory":
        storage = MemoryStorage()
    elif backend == "file":
        storage = FileStorage(config.storage_path)
    elif backend == "redis":
        storage = RedisStorage(RedisClient(redis_url=config.redis_url))
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    logger.info(f"Local storage backend: {backend}")
    return storage

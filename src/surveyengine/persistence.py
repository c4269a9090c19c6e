"""
Persistence adapters: durable mapping from a collection name to a list of records.

Contract:
    load(name)  -> last saved list, or [] when nothing was saved
    save(name, records) -> whole-collection overwrite, never a delta

Records are JSON-compatible dicts (see serialization.py). Adapters know
nothing about surveys; they only move lists of dicts.

A file that cannot be decoded is treated as absent: load returns [] and
logs a warning. The next save overwrites it.
"""

import copy
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List

import yaml

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class PersistenceAdapter(ABC):
    """Load-all / save-all store of named collections."""

    @abstractmethod
    def load(self, collection: str) -> List[Record]:
        ...

    @abstractmethod
    def save(self, collection: str, records: List[Record]) -> None:
        ...


class MemoryAdapter(PersistenceAdapter):
    """
    Process-local adapter.

    Saves and loads deep copies so callers never share structure with
    what is "on disk".
    """

    def __init__(self, initial: Dict[str, List[Record]] = None):
        self._collections: Dict[str, List[Record]] = copy.deepcopy(initial or {})

    def load(self, collection: str) -> List[Record]:
        return copy.deepcopy(self._collections.get(collection, []))

    def save(self, collection: str, records: List[Record]) -> None:
        self._collections[collection] = copy.deepcopy(list(records))

    def raw(self, collection: str) -> Any:
        """Stored value as-is, for inspection."""
        return self._collections.get(collection)


class FileAdapter(PersistenceAdapter):
    """
    One file per collection inside ``directory``.

    Subclasses supply the extension and the encode/decode pair.
    """

    extension = ""

    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, collection: str) -> str:
        return os.path.join(self.directory, f"{collection}.{self.extension}")

    @abstractmethod
    def _encode(self, records: List[Record]) -> str:
        ...

    @abstractmethod
    def _decode(self, text: str) -> Any:
        ...

    def load(self, collection: str) -> List[Record]:
        path = self.path_for(collection)
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = self._decode(f.read())
        except (ValueError, yaml.YAMLError, OSError) as exc:
            logger.warning("Discarding unreadable collection %s (%s): %s", collection, path, exc)
            return []
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning("Discarding collection %s: expected a list, got %s", collection, type(data).__name__)
            return []
        return data

    def save(self, collection: str, records: List[Record]) -> None:
        os.makedirs(self.directory, exist_ok=True)
        path = self.path_for(collection)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self._encode(list(records)))
        logger.debug("Saved %d record(s) to %s", len(records), path)


class JsonFileAdapter(FileAdapter):
    extension = "json"

    def _encode(self, records: List[Record]) -> str:
        return json.dumps(records, ensure_ascii=False, indent=2)

    def _decode(self, text: str) -> Any:
        return json.loads(text)


class YamlFileAdapter(FileAdapter):
    extension = "yaml"

    def _encode(self, records: List[Record]) -> str:
        return yaml.safe_dump(records, allow_unicode=True, sort_keys=False)

    def _decode(self, text: str) -> Any:
        return yaml.safe_load(text)

from typing import Callable

from loguru import logger

from clinic.config import AppConfig, StorageAdapter
from clinic.storage.adapters.json_file import JsonFileRosterStorage
from clinic.storage.adapters.memory import InMemoryRosterStorage
from clinic.storage.ports import AbstractRosterStorage


def _build_json(config: AppConfig) -> AbstractRosterStorage:
    return JsonFileRosterStorage(config.data_file)


def _build_memory(config: AppConfig) -> AbstractRosterStorage:
    return InMemoryRosterStorage()


_BUILDERS: dict[StorageAdapter, Callable[[AppConfig], AbstractRosterStorage]] = {
    StorageAdapter.JSON: _build_json,
    StorageAdapter.MEMORY: _build_memory,
}


def build_storage(config: AppConfig) -> AbstractRosterStorage:
    """Build the roster storage selected in config."""
    adapter = config.storage
    logger.info("Building roster storage with adapter: {}", adapter.value)
    return _BUILDERS[adapter](config)

# -*- coding: utf-8 -*-
"""
Глобальные pytest-настройки для тестового контура Morabot.

Зачем:
- Подавляем известный внешний DeprecationWarning из pyrogram, который не относится
  к коду проекта.
- Общие фабрики хранилищ поверх tmp_path.
"""

import os
import sys
import warnings

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from morabot.core.feature_toggles import FeatureFlags  # noqa: E402
from morabot.core.history_store import ConversationStore  # noqa: E402
from morabot.core.json_store import JsonFileBackend  # noqa: E402

warnings.filterwarnings(
    "ignore",
    message="There is no current event loop",
    category=DeprecationWarning,
)


@pytest.fixture
def history_path(tmp_path):
    return str(tmp_path / "otak.json")


@pytest.fixture
def store(history_path):
    conversation_store = ConversationStore(JsonFileBackend(history_path))
    conversation_store.load()
    return conversation_store


@pytest.fixture
def flags(tmp_path):
    feature_flags = FeatureFlags.from_dir(str(tmp_path))
    feature_flags.load()
    return feature_flags

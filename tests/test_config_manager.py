# -*- coding: utf-8 -*-
"""Тесты YAML-профиля бота."""

import yaml

from morabot.core.config_manager import DEFAULTS, ConfigManager, format_message


def test_profile_created_from_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    cfg = ConfigManager(str(path))

    assert path.exists()
    with open(path, encoding="utf-8") as f:
        assert yaml.safe_load(f)["bot"]["name"] == DEFAULTS["bot"]["name"]
    assert cfg.get("bot.name") == "Mora Bot"


def test_malformed_profile_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("bot: [unclosed", encoding="utf-8")
    cfg = ConfigManager(str(path))

    assert cfg.data == {}
    assert cfg.get("bot.version") == DEFAULTS["bot"]["version"]


def test_file_values_override_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("bot:\n  name: Custom\n", encoding="utf-8")
    cfg = ConfigManager(str(path))

    assert cfg.bot_name() == "Custom"
    assert cfg.get("bot.version") == DEFAULTS["bot"]["version"]
    assert cfg.get("missing.key", "fallback") == "fallback"


def test_message_substitutes_placeholders(tmp_path):
    cfg = ConfigManager(str(tmp_path / "config.yaml"))
    text = cfg.message("group.welcome", name="Alice", group_name="Dev Chat")
    assert text == "🎉 Добро пожаловать в **Dev Chat**, Alice!"


def test_format_message_defaults_and_unknown_placeholders():
    text = format_message("{name}/{botName}/{userId}/{other}")
    assert text == "Пользователь/Bot AI/N/A/{other}"
    assert format_message("id={userId}", user_id=42) == "id=42"

# -*- coding: utf-8 -*-
"""Тесты флагов AI/Upload."""

import json

from morabot.core.feature_toggles import FeatureFlags


def test_defaults_to_enabled_without_files(flags):
    assert flags.ai.enabled is True
    assert flags.upload.enabled is True


def test_flip_persists_and_survives_reload(tmp_path, flags):
    assert flags.ai.flip() is False

    with open(tmp_path / "ai_status.json", encoding="utf-8") as f:
        assert json.load(f) == {"aiEnabled": False}

    reloaded = FeatureFlags.from_dir(str(tmp_path))
    reloaded.load()
    assert reloaded.ai.enabled is False
    assert reloaded.upload.enabled is True


def test_toggles_are_independent(tmp_path, flags):
    flags.upload.flip()
    reloaded = FeatureFlags.from_dir(str(tmp_path))
    reloaded.load()
    assert reloaded.upload.enabled is False
    assert reloaded.ai.enabled is True


def test_malformed_record_keeps_default(tmp_path):
    (tmp_path / "upload_status.json").write_text('{"uploadEnabled": "yes"}', encoding="utf-8")
    (tmp_path / "ai_status.json").write_text("{broken", encoding="utf-8")
    flags = FeatureFlags.from_dir(str(tmp_path))
    flags.load()
    assert flags.upload.enabled is True
    assert flags.ai.enabled is True


def test_missing_key_keeps_default(tmp_path):
    (tmp_path / "ai_status.json").write_text("{}", encoding="utf-8")
    flags = FeatureFlags.from_dir(str(tmp_path))
    flags.load()
    assert bool(flags.ai) is True


def test_undecodable_record_keeps_default(tmp_path):
    (tmp_path / "ai_status.json").write_bytes(b'{"aiEnabled": "\xff\xfe"}')
    flags = FeatureFlags.from_dir(str(tmp_path))
    flags.load()
    assert flags.ai.enabled is True
    assert flags.upload.enabled is True

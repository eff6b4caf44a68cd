import json
from pathlib import Path

import pytest

from config.llm import load_config, load_route, resolve_route
from config.registry import EVALUATION_KEY, QUESTION_KEY, bind_model, get_model, has_model
from config.settings import Settings

ROOT = Path(__file__).resolve().parents[2]


def test_settings_defaults():
    settings = Settings(_env_file=None)
    assert settings.DB_PATH.endswith(".db")
    assert settings.DEFAULT_QUESTIONS == 5
    assert (settings.MIN_QUESTIONS, settings.MAX_QUESTIONS) == (1, 20)
    assert settings.MAX_ANSWER_LENGTH == 5000


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("MAX_QUESTIONS", "10")
    assert Settings(_env_file=None).MAX_QUESTIONS == 10


def test_registry_bind_and_retrieve():
    marker = object()
    assert not has_model(QUESTION_KEY)
    bind_model(QUESTION_KEY, marker)
    assert get_model(QUESTION_KEY) is marker
    with pytest.raises(KeyError):
        get_model(EVALUATION_KEY)


def test_shipped_config_routes_both_components():
    cfg = load_config(ROOT / "app_config.json")
    assert resolve_route(cfg, QUESTION_KEY).model
    assert resolve_route(cfg, EVALUATION_KEY).model


def test_missing_registry_entry(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(
        json.dumps(
            {
                "llm_routes": {"only": {"name": "only", "base_url": "http://x", "model": "m"}},
                "registry": {QUESTION_KEY: "only", EVALUATION_KEY: "absent"},
            }
        ),
        encoding="utf-8",
    )
    assert load_route(path, QUESTION_KEY).name == "only"
    with pytest.raises(KeyError):
        load_route(path, EVALUATION_KEY)
    with pytest.raises(KeyError):
        load_route(path, "unknown_component")

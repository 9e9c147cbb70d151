import pytest

from manuscripts.readalong.engines import Voice
from manuscripts.readalong.playback import PlaybackSynchronizer
from manuscripts.utils.config import Config, config


@pytest.fixture
def custom_config(tmp_path, monkeypatch):
    settings = tmp_path / "settings.yaml"
    settings.write_text(
        "languages:\n"
        "  primary: en-GB\n"
        "speech:\n"
        "  rate: 1.5\n"
        "  voices:\n"
        "    el-GR: v-el-alt\n"
        "practice:\n"
        "  store_path: /tmp/elsewhere/practice.json\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("MANUSCRIPTS_CONFIG", str(settings))
    config.reload()
    yield config
    monkeypatch.delenv("MANUSCRIPTS_CONFIG")
    config.reload()


def test_singleton():
    assert Config() is config


def test_defaults():
    assert config.primary_language == "en-US"
    assert config.secondary_language == "el-GR"
    assert config.speech_rates == [0.5, 1.0, 1.5]
    assert config.auto_continue is False
    assert config.voice_for("en-US") is None


def test_relative_paths_resolve_against_project_root():
    assert config.corpus_path == config.project_root / "data" / "aligned_kjv_greek.csv"
    assert (config.project_root / "manuscripts").is_dir()


def test_get_missing_key_returns_default():
    assert config.get("speech", "nope", default=3) == 3
    assert config.get("speech", "rate", "deeper", default="x") == "x"


def test_override_file(custom_config):
    assert custom_config.primary_language == "en-GB"
    # Keys absent from the file fall back to property defaults
    assert custom_config.secondary_language == "el-GR"
    assert custom_config.speech_rate == 1.5
    assert str(custom_config.practice_store_path) == "/tmp/elsewhere/practice.json"


def test_configured_voice_wins(custom_config, synthesizer):
    synthesizer._voices.append(Voice("v-el-alt", "Alt", "el-GR"))
    player = PlaybackSynchronizer(synthesizer)
    assert player.rate == 1.5

    player.speak("ὁ λόγος", "el-GR", "the Word")
    assert synthesizer.last.request.voice.id == "v-el-alt"

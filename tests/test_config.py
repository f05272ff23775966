import pytest

from realtime_voice.config import DEFAULT_INSTRUCTIONS, DEFAULT_REALTIME_URL, AppConfig

ENV_VARS = [
    "OPENAI_API_KEY",
    "OPENAI_PROJECT",
    "PROJECT",
    "REALTIME_URL",
    "REALTIME_INSTRUCTIONS",
    "REALTIME_RECORDING_DIR",
    "REALTIME_RECORD_SAMPLE_RATE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = AppConfig.from_env()
    assert config.api_key is None
    assert config.project is None
    assert config.realtime_url == DEFAULT_REALTIME_URL
    assert config.instructions == DEFAULT_INSTRUCTIONS
    assert config.recording_dir == "recording"
    assert config.record_sample_rate == 24000


def test_credentials_and_overrides(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("PROJECT", "proj_legacy")
    monkeypatch.setenv("REALTIME_RECORD_SAMPLE_RATE", "16000")
    monkeypatch.setenv("REALTIME_INSTRUCTIONS", "Answer in French.")

    config = AppConfig.from_env()

    assert config.api_key == "sk-test"
    assert config.project == "proj_legacy"
    assert config.record_sample_rate == 16000
    assert config.instructions == "Answer in French."


def test_openai_project_takes_precedence(monkeypatch):
    monkeypatch.setenv("OPENAI_PROJECT", "proj_new")
    monkeypatch.setenv("PROJECT", "proj_legacy")
    assert AppConfig.from_env().project == "proj_new"


def test_invalid_sample_rate(monkeypatch):
    monkeypatch.setenv("REALTIME_RECORD_SAMPLE_RATE", "fast")
    with pytest.raises(ValueError, match="REALTIME_RECORD_SAMPLE_RATE"):
        AppConfig.from_env()

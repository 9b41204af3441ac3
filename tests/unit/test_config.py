import pytest

from receiptbot.config import DEFAULT_OCR_SPACE_URL, Settings
from receiptbot.exceptions import ConfigurationError


def test_defaults_without_environment():
    settings = Settings.from_env(environ={})

    assert settings.ocr_space_api_key == "helloworld"
    assert settings.ocr_space_url == DEFAULT_OCR_SPACE_URL
    assert settings.openai_api_key is None
    assert settings.provider_timeout_seconds == 30.0
    assert settings.ocr_min_text_length == 10
    assert settings.analysis_min_text_length == 10


def test_values_are_read_and_blanks_ignored():
    settings = Settings.from_env(
        environ={
            "OPENAI_API_KEY": "sk-test",
            "GEMINI_API_KEY": "   ",
            "PROVIDER_TIMEOUT_SECONDS": "12.5",
            "OCR_MIN_TEXT_LENGTH": "5",
            "RECEIPTBOT_LOG_DIR": "/tmp/receipt-logs",
        }
    )

    assert settings.openai_api_key == "sk-test"
    assert settings.gemini_api_key is None
    assert settings.provider_timeout_seconds == 12.5
    assert settings.ocr_min_text_length == 5
    assert settings.log_dir == "/tmp/receipt-logs"


@pytest.mark.parametrize("timeout", ["0", "-1", "soon"])
def test_invalid_timeout_is_a_configuration_error(timeout):
    with pytest.raises(ConfigurationError):
        Settings.from_env(environ={"PROVIDER_TIMEOUT_SECONDS": timeout})


def test_process_environment_is_used_by_default(monkeypatch):
    monkeypatch.setenv("GEMINI_MODEL", "gemini-1.5-pro")

    assert Settings.from_env(load_env_file=False).gemini_model == "gemini-1.5-pro"

import pytest

from aitable_mcp.config import DEFAULT_BASE_URL, DEFAULT_V2_BASE_URL, Settings
from aitable_mcp.exceptions import ConfigurationError


def test_missing_variables_are_all_reported():
    with pytest.raises(ConfigurationError, match="Missing required environment variables: AITABLE_API_TOKEN, SPACE_ID"):
        Settings.from_env({})


def test_blank_variable_counts_as_missing():
    with pytest.raises(ConfigurationError, match="SPACE_ID"):
        Settings.from_env({"AITABLE_API_TOKEN": "usk123", "SPACE_ID": "   "})


def test_defaults():
    settings = Settings.from_env({"AITABLE_API_TOKEN": "usk123", "SPACE_ID": "spc1"})

    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.v2_base_url == DEFAULT_V2_BASE_URL
    assert settings.timeout == 30.0
    assert settings.host == "127.0.0.1"
    assert settings.port == 3000
    assert settings.log_level == "INFO"


def test_overrides_are_parsed():
    settings = Settings.from_env(
        {
            "AITABLE_API_TOKEN": " usk123 ",
            "SPACE_ID": "spc1",
            "AITABLE_BASE_URL": "https://example.test/fusion/v1/",
            "AITABLE_TIMEOUT": "5",
            "PORT": "8080",
            "LOG_LEVEL": "debug",
        }
    )

    assert settings.api_token == "usk123"
    assert settings.base_url == "https://example.test/fusion/v1"
    assert settings.timeout == 5.0
    assert settings.port == 8080
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "var, value",
    [("PORT", "not-a-port"), ("PORT", "70000"), ("AITABLE_TIMEOUT", "0"), ("LOG_LEVEL", "verbose")],
)
def test_invalid_values(var, value):
    env = {"AITABLE_API_TOKEN": "usk123", "SPACE_ID": "spc1", var: value}

    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        Settings.from_env(env)


def test_masked_token():
    assert Settings(api_token="usk1234567890abcdef", space_id="spc1").masked_token() == "usk12...bcdef"
    assert Settings(api_token="short", space_id="spc1").masked_token() == "[SET]"

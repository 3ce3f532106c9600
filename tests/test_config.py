import pytest
from pydantic import ValidationError

from radiko_cli.exceptions import ConfigurationError
from radiko_cli.models.config import DEFAULT_OUTPUT_TEMPLATE, AppConfig
from radiko_cli.storage.config_manager import ConfigManager


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "radiko-cli" / "config.ini"


def test_defaults():
    config = AppConfig()

    assert config.output_template == DEFAULT_OUTPUT_TEMPLATE
    assert config.extension == "m4a"
    assert config.reauthentication_interval == 3600.0
    assert not config.has_credentials


def test_mail_requires_password():
    with pytest.raises(ValidationError):
        AppConfig(mail="user@example.com")


@pytest.mark.parametrize(
    "field, value",
    [
        ("output_template", "../{title}.{ext}"),
        ("output_template", "{station_id}.{ext}"),
        ("extension", "m 4a"),
        ("http_timeout", 0),
        ("row_limit", 51),
    ],
)
def test_invalid_values(field, value):
    with pytest.raises(ValidationError):
        AppConfig(**{field: value})


def test_extension_is_normalised():
    assert AppConfig(extension=".AAC").extension == "aac"


def test_load_missing_file(config_file):
    with pytest.raises(ConfigurationError, match="radiko-cli init"):
        ConfigManager(config_file).load_config()


def test_save_and_load_round_trip(config_file):
    manager = ConfigManager(config_file)
    manager.save_new_config(
        {"mail": "user@example.com", "password": "p%ss", "ffmpeg_dir": "/opt/ffmpeg"}
    )

    config = ConfigManager(config_file).load_config()

    assert config.mail == "user@example.com"
    assert config.password == "p%ss"
    assert config.ffmpeg_dir == "/opt/ffmpeg"
    assert config.embed_cover is True
    assert config.row_limit == 12
    assert config.config_path == str(config_file.parent)


def test_cli_options_override_file(config_file):
    ConfigManager(config_file).save_new_config({})

    config = ConfigManager(config_file).load_config({"row_limit": 30, "all_regions": True})

    assert config.row_limit == 30
    assert config.all_regions is True


def test_missing_keys_are_migrated(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text("[DEFAULT]\nextension = aac\n", encoding="utf-8")

    config = ConfigManager(config_file).load_config()

    assert config.extension == "aac"
    assert "verify_output = true" in config_file.read_text(encoding="utf-8")


def test_invalid_value_in_file(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text("[DEFAULT]\nrow_limit = many\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ConfigManager(config_file).load_config()

"""Unit tests for application settings."""

from zibaldone.application.config import Settings


def test_settings_defaults():
    """Test settings defaults when no environment is set."""
    config = Settings(_env_file=None)

    assert config.app_name == "zibaldone"
    assert config.repo_root == "../books"
    assert config.manuscript_dir == "manuscript"
    assert config.render_dir == "render"
    assert config.allowed_extensions == ["txt", "md"]
    assert config.sentinel_filename == "Book.txt"
    assert config.render_timestamp_format == "%a, %Y-%m-%d %H:%M:%S"
    assert config.record_store_type == "local"
    assert config.log_level == "INFO"


def test_settings_from_environment(monkeypatch):
    """Test settings are read from case-insensitive environment variables."""
    monkeypatch.setenv("REPO_ROOT", "/srv/books")
    monkeypatch.setenv("record_store_type", "dynamodb")
    monkeypatch.setenv("ALLOWED_EXTENSIONS", '["md"]')
    monkeypatch.setenv("FRAGMENTS_TABLE_NAME", "zibaldone-fragments")

    config = Settings(_env_file=None)

    assert config.repo_root == "/srv/books"
    assert config.record_store_type == "dynamodb"
    assert config.allowed_extensions == ["md"]
    assert config.fragments_table_name == "zibaldone-fragments"


def test_settings_explicit_values():
    config = Settings(_env_file=None, repo_root="/tmp/books", debug=True)

    assert config.repo_root == "/tmp/books"
    assert config.debug is True

import pytest

from config import load_settings, parse_bool


@pytest.mark.parametrize("raw", ["1", "true", "TRUE", "yes", "On", " true "])
def test_parse_bool_on(raw):
    assert parse_bool(raw) is True


@pytest.mark.parametrize("raw", ["0", "false", "no", "off", ""])
def test_parse_bool_off(raw):
    assert parse_bool(raw) is False


def test_load_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CLEANUP_ORPHANS", "yes")
    monkeypatch.setenv("MAX_FILE_SIZE", "2KB")
    monkeypatch.setenv("PORT", "8080")

    settings = load_settings()
    assert settings.cleanup_orphans is True
    assert settings.max_file_size == 2048
    assert settings.port == 8080
    assert settings.files_dir == tmp_path / "files"
    assert settings.db_url == f"sqlite:///{tmp_path / 'linkdrop.db'}"


def test_cleanup_orphans_can_be_switched_off(monkeypatch):
    monkeypatch.setenv("CLEANUP_ORPHANS", "0")
    assert load_settings().cleanup_orphans is False

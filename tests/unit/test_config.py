"""Unit tests for config.py"""

import pytest

from mdguide.config import load_config


CONFIG_YAML = """\
app_name: En-ROADS User Guide
version: 25.1.0
langs:
  - [de, 25.1.0]
  - code: pt
    version: 24.6.0
pages:
  - index.md
  - "-"
  - guide.md
untranslated:
  - changelog.md
"""


def test_load_config_defaults(tmp_path, monkeypatch):
    """Settings defaults are used when no config.yaml, env var, or CLI override exists."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MDGUIDE_MODE", raising=False)
    settings = load_config()
    assert settings.mode == "production"
    assert settings.out_dir == "public"
    assert settings.parser_config == "gfm-like"
    assert settings.langs == []


def test_load_config_reads_config_yaml(tmp_path):
    """config.yaml fields are loaded; langs accept [code, version] pairs and mappings."""
    (tmp_path / "config.yaml").write_text(CONFIG_YAML)
    settings = load_config(tmp_path)
    assert settings.app_name == "En-ROADS User Guide"
    assert settings.version == "25.1.0"
    assert [(lang.code, lang.version) for lang in settings.langs] == [("de", "25.1.0"), ("pt", "24.6.0")]
    assert settings.lang_codes == ["de", "pt"]
    assert settings.pages == ["index.md", "-", "guide.md"]
    assert settings.untranslated == ["changelog.md"]


def test_load_config_numeric_version(tmp_path):
    """A version YAML reads as a number is kept as a string."""
    (tmp_path / "config.yaml").write_text("version: 2.5\nlangs:\n  - [de, 2.4]\n")
    settings = load_config(tmp_path)
    assert settings.version == "2.5"
    assert settings.langs[0].version == "2.4"


def test_load_config_env_mode(monkeypatch):
    """MDGUIDE_MODE env var is picked up by load_config."""
    monkeypatch.setenv("MDGUIDE_MODE", "development")
    settings = load_config()
    assert settings.mode == "development"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """MDGUIDE_OUT_DIR takes precedence over config.yaml out_dir."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("out_dir: site\n")
    monkeypatch.setenv("MDGUIDE_OUT_DIR", "build")
    settings = load_config()
    assert settings.out_dir == "build"


def test_load_config_env_coerces_types(monkeypatch):
    """Scalar env vars are coerced to the field type."""
    monkeypatch.setenv("MDGUIDE_WARN_ON_MISSING_DEF", "true")
    monkeypatch.setenv("MDGUIDE_HEADING_BOOST", "3.5")
    settings = load_config()
    assert settings.warn_on_missing_def is True
    assert settings.heading_boost == 3.5


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("MDGUIDE_OUT_DIR", "build")
    settings = load_config(overrides={"out_dir": "cli", "mode": None})
    assert settings.out_dir == "cli"
    assert settings.mode == "production"


def test_load_config_invalid_yaml(tmp_path, monkeypatch):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_not_a_mapping(tmp_path):
    """A config.yaml that is not a mapping is rejected."""
    (tmp_path / "config.yaml").write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config(tmp_path)


def test_load_config_invalid_mode(tmp_path):
    """Only production and development modes are accepted."""
    (tmp_path / "config.yaml").write_text("mode: staging\n")
    with pytest.raises(ValueError):
        load_config(tmp_path)

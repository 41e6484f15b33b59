"""Tests for the settings loader (omcisight.settings)."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from omcisight.settings import (
    ParserSettings,
    Settings,
    get_defaults,
    load_settings,
    reset_to_defaults,
    save_settings,
)


def _write_temp(content: bytes) -> str:
    with tempfile.NamedTemporaryFile(suffix=".toml", delete=False) as f:
        f.write(content)
        return f.name


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


def test_defaults_no_file():
    """load_settings(None) returns built-in defaults."""
    settings = load_settings(None)
    p = settings.parser
    assert p.protocol_keyword == "OMCI"
    assert p.success_results == [
        "success",
        "processed successfully",
        "00",
        "0x00",
        "command processed successfully",
    ]
    assert p.reference_keywords == ["pointer", "t-cont", "gem", "ani-g", "uni", "bridge", "tp", "iw"]
    assert p.link_message_types == ["Create", "Set"]
    assert p.topology_root_name == "GPON OLT"
    assert settings.settings_path is None


def test_defaults_missing_file():
    """A nonexistent path returns defaults without error."""
    settings = load_settings("/nonexistent/path/settings.toml")
    assert settings.parser.protocol_keyword == "OMCI"
    assert settings.settings_path is None


def test_default_lists_are_not_shared():
    a = ParserSettings()
    b = ParserSettings()
    a.success_results.append("ok")
    assert "ok" not in b.success_results


# ---------------------------------------------------------------------------
# Overrides
# ---------------------------------------------------------------------------


def test_partial_override():
    """Only specified keys are overridden; others keep defaults."""
    path = _write_temp(b"""\
[parser]
success_results = ["ok", "done"]
topology_root_name = "Lab OLT"
""")
    settings = load_settings(path)

    assert settings.parser.success_results == ["ok", "done"]
    assert settings.parser.topology_root_name == "Lab OLT"
    # Defaults preserved
    assert settings.parser.protocol_keyword == "OMCI"
    assert settings.parser.link_message_types == ["Create", "Set"]
    assert settings.settings_path == path
    os.remove(path)


def test_unknown_key_ignored():
    """Unknown keys produce a warning but don't crash."""
    path = _write_temp(b"""\
[parser]
protocol_keyword = "PLOAM"
nonexistent_key = 42
""")
    settings = load_settings(path)
    assert settings.parser.protocol_keyword == "PLOAM"
    os.remove(path)


def test_wrong_type_uses_default():
    """A value of the wrong type falls back to the default."""
    path = _write_temp(b"""\
[parser]
protocol_keyword = 12
success_results = "ok"
reference_keywords = ["pointer", 3]
link_message_types = ["Create"]
""")
    settings = load_settings(path)
    assert settings.parser.protocol_keyword == "OMCI"
    assert settings.parser.success_results[0] == "success"
    assert "gem" in settings.parser.reference_keywords
    assert settings.parser.link_message_types == ["Create"]  # overridden
    os.remove(path)


def test_blank_keyword_uses_default():
    path = _write_temp(b'[parser]\nprotocol_keyword = "  "\n')
    assert load_settings(path).parser.protocol_keyword == "OMCI"
    os.remove(path)


def test_empty_file():
    """An empty TOML file returns all defaults."""
    path = _write_temp(b"")
    assert load_settings(path).parser.protocol_keyword == "OMCI"
    os.remove(path)


def test_malformed_toml():
    """A malformed TOML file returns defaults without crashing."""
    path = _write_temp(b"[invalid toml {{{{")
    settings = load_settings(path)
    assert settings.parser.protocol_keyword == "OMCI"
    assert settings.settings_path is None
    os.remove(path)


# ---------------------------------------------------------------------------
# get_defaults
# ---------------------------------------------------------------------------


def test_get_defaults():
    defaults = get_defaults()
    assert isinstance(defaults, ParserSettings)
    assert defaults.protocol_keyword == "OMCI"
    assert defaults.link_message_types == ["Create", "Set"]


def test_get_defaults_reads_default_settings_file(tmp_path, monkeypatch):
    """get_defaults reads from settings_default.toml when it exists."""
    import omcisight.settings as _mod

    default_file = tmp_path / "settings_default.toml"
    default_file.write_text('[parser]\ntopology_root_name = "Shipped OLT"\n')
    monkeypatch.setattr(_mod, "_DEFAULT_SETTINGS_PATH", default_file)

    assert get_defaults().topology_root_name == "Shipped OLT"


def test_get_defaults_fallback_no_file(tmp_path, monkeypatch):
    """get_defaults falls back to dataclass defaults if file missing."""
    import omcisight.settings as _mod

    monkeypatch.setattr(_mod, "_DEFAULT_SETTINGS_PATH", tmp_path / "nonexistent.toml")
    assert get_defaults().topology_root_name == "GPON OLT"


# ---------------------------------------------------------------------------
# save_settings round-trip
# ---------------------------------------------------------------------------


def test_save_and_reload(tmp_path):
    """Settings saved to a file can be loaded back identically."""
    settings = load_settings(None)
    settings.parser.success_results = ["ok", 'say "done"']
    settings.parser.protocol_keyword = "OMCI"

    out_path = tmp_path / "settings.toml"
    save_settings(settings, out_path)

    reloaded = load_settings(out_path)
    assert reloaded.parser.success_results == ["ok", 'say "done"']
    assert reloaded.parser.to_dict() == settings.parser.to_dict()


def test_save_creates_readable_toml(tmp_path):
    """Saved file should be valid TOML with comments."""
    out_path = tmp_path / "settings.toml"
    save_settings(load_settings(None), out_path)

    content = out_path.read_text()
    assert "[parser]" in content
    assert 'protocol_keyword = "OMCI"' in content
    assert 'link_message_types = ["Create", "Set"]' in content
    assert "# default:" not in content


def test_save_marks_non_default_values(tmp_path):
    """Non-default values should have a '# default:' comment."""
    settings = load_settings(None)
    settings.parser.link_message_types = ["Create"]

    out_path = tmp_path / "settings.toml"
    save_settings(settings, out_path)

    content = out_path.read_text()
    assert '# default: ["Create", "Set"]' in content
    assert 'link_message_types = ["Create"]' in content


def test_save_uses_settings_path_if_set(tmp_path):
    """save_settings with no explicit path uses settings.settings_path."""
    out_path = tmp_path / "settings.toml"
    settings = Settings(settings_path=str(out_path))

    result_path = save_settings(settings)
    assert result_path == out_path
    assert Path(out_path).exists()


# ---------------------------------------------------------------------------
# reset_to_defaults
# ---------------------------------------------------------------------------


def test_reset_to_defaults(tmp_path, monkeypatch):
    """reset_to_defaults copies settings_default.toml into settings_user.toml."""
    import omcisight.settings as _mod

    default_file = tmp_path / "settings_default.toml"
    user_file = tmp_path / "settings_user.toml"
    default_file.write_text('[parser]\nsuccess_results = ["success"]\n')
    user_file.write_text('[parser]\nsuccess_results = ["anything"]\n')

    monkeypatch.setattr(_mod, "_DEFAULT_SETTINGS_PATH", default_file)
    monkeypatch.setattr(_mod, "_USER_SETTINGS_PATH", user_file)

    result = reset_to_defaults()
    assert result.parser.success_results == ["success"]

    reloaded = load_settings(user_file)
    assert reloaded.parser.success_results == ["success"]


def test_shipped_default_file_matches_builtins():
    """settings_default.toml at the project root holds the built-in values."""
    import omcisight.settings as _mod

    shipped = load_settings(_mod._DEFAULT_SETTINGS_PATH)
    assert shipped.parser.to_dict() == ParserSettings().to_dict()

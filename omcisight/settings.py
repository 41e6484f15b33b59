"""Settings loader — two-file architecture (user + defaults).

OMCISight reads its parser vocabulary from two files at the project root:

- ``settings_user.toml``    — active settings the CLI reads from. Edit it to
  adapt the parser to a different capture tool or vendor wording.
- ``settings_default.toml`` — immutable reference of built-in defaults. Used
  only when the user resets to defaults.

Usage::

    from omcisight.settings import load_settings, save_settings, reset_to_defaults

    settings = load_settings()                          # reads settings_user.toml
    settings = load_settings("custom.toml")            # explicit path
    settings = load_settings(None)                      # pure defaults (no file)

    result = parse(text, settings.parser)

    # Modify and persist
    settings.parser.success_results.append("ok")
    save_settings(settings)                              # writes settings_user.toml

    # Reset to defaults
    settings = reset_to_defaults()                       # copies default → user
"""

from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

# Project root: two levels up from this file (omcisight/settings.py → repo root)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_USER_SETTINGS_PATH = _PROJECT_ROOT / "settings_user.toml"
_DEFAULT_SETTINGS_PATH = _PROJECT_ROOT / "settings_default.toml"


# ---------------------------------------------------------------------------
# Defaults — mirror ParserSettings field defaults
# ---------------------------------------------------------------------------

_PARSER_DEFAULTS: dict[str, str | list[str]] = {
    "protocol_keyword": "OMCI",
    "success_results": [
        "success",
        "processed successfully",
        "00",
        "0x00",
        "command processed successfully",
    ],
    "reference_keywords": ["pointer", "t-cont", "gem", "ani-g", "uni", "bridge", "tp", "iw"],
    "link_message_types": ["Create", "Set"],
    "topology_root_name": "GPON OLT",
}


def _default_list(key: str) -> list[str]:
    return list(_PARSER_DEFAULTS[key])


@dataclass
class ParserSettings:
    """Vocabulary the log parser matches against."""

    protocol_keyword: str = "OMCI"
    success_results: list[str] = field(default_factory=lambda: _default_list("success_results"))
    reference_keywords: list[str] = field(
        default_factory=lambda: _default_list("reference_keywords")
    )
    link_message_types: list[str] = field(
        default_factory=lambda: _default_list("link_message_types")
    )
    topology_root_name: str = "GPON OLT"

    def to_dict(self) -> dict[str, str | list[str]]:
        return {
            "protocol_keyword": self.protocol_keyword,
            "success_results": list(self.success_results),
            "reference_keywords": list(self.reference_keywords),
            "link_message_types": list(self.link_message_types),
            "topology_root_name": self.topology_root_name,
        }


@dataclass
class Settings:
    """Top-level settings container."""

    parser: ParserSettings = field(default_factory=ParserSettings)
    settings_path: str | None = None  # path that was loaded, for diagnostics


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def _coerce(key: str, value: object) -> str | list[str] | None:
    """Return ``value`` if it has the same shape as the default, else None."""
    default = _PARSER_DEFAULTS[key]
    if isinstance(default, str):
        return value if isinstance(value, str) and value.strip() else None
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    return None


def load_settings(path: str | Path | None = _USER_SETTINGS_PATH) -> Settings:
    """Load settings from a TOML file, falling back to defaults.

    Args:
        path: Path to settings file. Defaults to ``settings_user.toml``
              in the project root. If ``None``, returns pure defaults
              without reading any file. If the file doesn't exist, logs
              a debug message and returns defaults.

    Returns:
        A ``Settings`` instance with all values populated.
    """
    settings = Settings()

    if path is None:
        logger.debug("Settings: using built-in defaults (no file specified)")
        return settings

    toml_path = Path(path)
    if not toml_path.is_file():
        logger.debug("Settings: %s not found, using built-in defaults", toml_path)
        return settings

    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        logger.warning("Settings: failed to parse %s, using defaults", toml_path, exc_info=True)
        return settings

    settings.settings_path = str(toml_path)

    parser_data = data.get("parser", {})
    for key, value in parser_data.items():
        if key not in _PARSER_DEFAULTS:
            logger.warning("Settings: unknown key 'parser.%s' — ignored", key)
            continue

        coerced = _coerce(key, value)
        if coerced is None:
            logger.warning(
                "Settings: parser.%s expected %s, got %r — using default",
                key,
                type(_PARSER_DEFAULTS[key]).__name__,
                value,
            )
            continue

        setattr(settings.parser, key, coerced)

    logger.info("Settings: loaded from %s", toml_path)
    return settings


def get_defaults() -> ParserSettings:
    """Return a fresh ``ParserSettings`` with built-in defaults.

    If ``settings_default.toml`` exists, reads values from it so that
    the single source of truth for defaults is the file.  Falls back
    to the dataclass defaults if the file is missing.
    """
    if _DEFAULT_SETTINGS_PATH.is_file():
        return load_settings(_DEFAULT_SETTINGS_PATH).parser
    return ParserSettings()


def reset_to_defaults() -> Settings:
    """Reset user settings to defaults.

    Reads ``settings_default.toml``, writes its contents to
    ``settings_user.toml``, and returns the resulting ``Settings``.
    """
    settings = Settings(parser=get_defaults(), settings_path=str(_USER_SETTINGS_PATH))
    save_settings(settings, _USER_SETTINGS_PATH)
    return settings


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------

_PARSER_DESCRIPTIONS: dict[str, str] = {
    "protocol_keyword": (
        "Protocol name every retained record must mention. Also forms the\n"
        "banner line the parser looks for (\"<keyword> Protocol\")."
    ),
    "success_results": "Result phrases (case-insensitive, whole words) that mark a success.",
    "reference_keywords": (
        "Attribute-name fragments that mark a pointer to another managed entity.\n"
        "Matched as case-insensitive substrings."
    ),
    "link_message_types": "Message types whose pointers can become service links.",
    "topology_root_name": "Name of the placeholder topology root node.",
}

_PARSER_GROUPS: list[tuple[str, list[str]]] = [
    ("Segmentation", ["protocol_keyword"]),
    ("Result Classification", ["success_results"]),
    ("Service Model", ["reference_keywords", "link_message_types"]),
    ("Topology", ["topology_root_name"]),
]


def _format_value(value: str | list[str]) -> str:
    """Format a value for TOML output (JSON string syntax is valid TOML)."""
    if isinstance(value, list):
        return "[" + ", ".join(json.dumps(v) for v in value) + "]"
    return json.dumps(value)


def save_settings(settings: Settings, path: str | Path | None = None) -> Path:
    """Write the current settings to a TOML file.

    Generates a commented, human-readable TOML file grouped by category.

    Args:
        settings: The ``Settings`` instance to persist.
        path: Destination path. Falls back to ``settings.settings_path``,
              then to ``settings_user.toml`` in the project root.

    Returns:
        The ``Path`` that was written to.

    Raises:
        OSError: If the file cannot be written.
    """
    if path is not None:
        out = Path(path)
    elif settings.settings_path:
        out = Path(settings.settings_path)
    else:
        out = _USER_SETTINGS_PATH

    values = settings.parser.to_dict()

    lines: list[str] = [
        "# " + "─" * 68,
        "# OMCISight — User Settings",
        "# " + "─" * 68,
        "# Vocabulary used to segment and classify OMCI text exports.",
        "#",
        "# To restore defaults, copy settings_default.toml over this file.",
        "# " + "─" * 68,
        "",
        "[parser]",
    ]

    for group_name, keys in _PARSER_GROUPS:
        lines.append("")
        lines.append(f"# ── {group_name} " + "─" * max(1, 58 - len(group_name)))
        lines.append("")
        for key in keys:
            desc = _PARSER_DESCRIPTIONS.get(key, "")
            if desc:
                for desc_line in desc.split("\n"):
                    lines.append(f"# {desc_line}")
            val = values.get(key, _PARSER_DEFAULTS[key])
            default_val = _PARSER_DEFAULTS[key]
            if val != default_val:
                lines.append(f"# default: {_format_value(default_val)}")
            lines.append(f"{key} = {_format_value(val)}")
            lines.append("")

    out.write_text("\n".join(lines), encoding="utf-8")
    settings.settings_path = str(out)
    logger.info("Settings: saved to %s", out)
    return out

"""Configuration management for ghnotify."""

import os
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


def get_config_path() -> Path:
    """Get the path to the ghnotify config file."""
    xdg_config = Path.home() / ".config"
    return xdg_config / "ghnotify" / "config.toml"


def get_default_config() -> str:
    """Return the default config file contents."""
    return """\
# ghnotify configuration

# Log resolver lookups and fail loudly when a release or discussion
# can't be resolved. GHNOTIFY_DEBUG=1 does the same for a single run.
debug = false

[tui]
# Start with the preview pane open (same as -w)
preview = false

[tui.keybindings]
# Comma separated Textual key names; the first one is shown in the footer.
# reload = "ctrl+r,F5"
"""


@dataclass
class KeybindingsConfig:
    """Configuration for TUI keybindings.

    Each field is a comma separated list of Textual key names bound to the
    action, e.g. mark_read="ctrl+t,m". The first key is the one shown in the
    footer; the rest are hidden aliases. Empty string means unbound.
    """

    quit: str = "q"
    view: str = ""  # Additional keys for viewing (Enter always works)
    toggle_preview: str = "ctrl+o"
    reload: str = "ctrl+r"
    mark_read: str = "ctrl+t"
    mark_done: str = "ctrl+w"
    mark_all_read: str = "ctrl+a"
    open_browser: str = "ctrl+b"
    view_diff: str = "ctrl+d"
    view_patch: str = "ctrl+p"
    comment: str = "ctrl+x"
    toggle: str = "ctrl+y"
    select_all: str = "ctrl+s"
    query: str = "slash"
    help: str = "question_mark"
    up_down: str = ""  # 2-char string: up, down (e.g., "kj" for vim)


@dataclass
class TuiConfig:
    """Configuration for the TUI."""

    transparent: bool = False  # Use ANSI colors for terminal transparency
    preview: bool = False  # Start with the preview pane visible
    keybindings: KeybindingsConfig = field(default_factory=KeybindingsConfig)


@dataclass
class Config:
    """ghnotify configuration."""

    debug: bool = False
    tui: TuiConfig = field(default_factory=TuiConfig)


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from file, or return defaults."""
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return Config()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        # Warn but return defaults
        print(f"Warning: Could not load config from {config_path}: {e}", file=sys.stderr)
        return Config()

    return _parse_config(data)


def _parse_config(data: dict[str, Any]) -> Config:
    """Parse config dict into Config object."""
    tui_data = data.get("tui", {})
    keybindings_data = tui_data.get("keybindings", {})
    # Use dataclass defaults for any unspecified keybindings
    defaults = KeybindingsConfig()
    keybindings = KeybindingsConfig(
        **{
            field: keybindings_data.get(field, getattr(defaults, field))
            for field in defaults.__dataclass_fields__
        }
    )
    tui = TuiConfig(
        transparent=tui_data.get("transparent", False),
        preview=tui_data.get("preview", False),
        keybindings=keybindings,
    )

    return Config(debug=data.get("debug", False), tui=tui)


def ensure_config_exists() -> Path:
    """Ensure the config file exists, creating with defaults if needed."""
    config_path = get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(get_default_config())

    return config_path


def debug_from_env() -> bool:
    return os.environ.get("GHNOTIFY_DEBUG", "").lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Options:
    """Everything a run needs, fixed at startup and passed around explicitly.

    Built from the command line flags and the loaded Config.
    """

    exclude: str | None = None  # regex; None matches nothing
    include: str | None = None  # regex; None matches everything
    max_count: int = 0  # 0 means no limit
    participating: bool = False
    include_all: bool = False
    debug: bool = False
    preview: bool = False
    tui: TuiConfig = field(default_factory=TuiConfig)

    @property
    def has_patterns(self) -> bool:
        return bool(self.exclude or self.include)

"""
extension_api.py

Defines the base class for all editor extensions.
Every extension .py file placed in the extensions/ directory must define
a class that inherits from BaseExtension.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    import tkinter as tk

log = logging.getLogger("tabjump.extensions")


def _config_dir() -> Path:
    """Per-user directory for settings and extension state.

    ``TABJUMP_CONFIG_DIR`` wins, then ``$XDG_CONFIG_HOME/tabjump``, then
    ``~/.config/tabjump``.
    """
    override = os.environ.get("TABJUMP_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "tabjump"


CONFIG_DIR = _config_dir()
# Settings are stored per-extension under <config dir>/settings/
_SETTINGS_DIR = CONFIG_DIR / "settings"


class BaseExtension:
    """Abstract base class for editor extensions.

    Subclasses MUST set the class-level metadata attributes and override
    ``activate`` / ``deactivate`` at minimum.
    """

    # ── Metadata (override in subclass) ──────────────────────────────
    name: str = "Unnamed Extension"
    version: str = "0.1.0"
    description: str = ""
    author: str = "Unknown"
    category: str = "Other"  # Editing | Languages | Tools | Other
    tags: Tuple[str, ...] = ()

    def __init__(self):
        self._key_handlers: List[Any] = []
        self._settings_cache: Dict[str, Any] = {}

    # ── Lifecycle ────────────────────────────────────────────────────
    def activate(self, editor: Any) -> None:
        """Called when the extension is switched on for every document.

        *editor* is the ``TabEditorApp`` instance.
        """

    def deactivate(self, editor: Any) -> None:
        """Called when the extension is switched off globally.

        Key handlers registered via ``register_key_handler`` are removed
        automatically.
        """

    def on_shutdown(self, editor: Any) -> None:
        """Called once when the application is closing (after ``deactivate``)."""

    # ── Event hooks (optional overrides) ─────────────────────────────
    def on_key(self, editor: Any, event: "tk.Event") -> Optional[str]:
        """Called on every key press in any document.

        Return ``"break"`` to swallow the event, or ``None`` to let it
        propagate normally.
        """
        return None

    def on_document_open(self, editor: Any, document: Any) -> None:
        """Called after a document tab is created (new or loaded from disk)."""

    def on_document_close(self, editor: Any, document: Any) -> None:
        """Called just before a document tab is closed."""

    def on_file_save(self, editor: Any, document: Any) -> None:
        """Called after a document is written to disk."""

    def contribute_menu(self, editor: Any, menubar: "tk.Menu") -> None:
        """Called once during activation so the extension can add menus."""

    def withdraw_menu(self, editor: Any, menubar: "tk.Menu") -> None:
        """Called on deactivation to remove what ``contribute_menu`` added."""

    # ── Settings ─────────────────────────────────────────────────────
    def default_settings(self) -> Dict[str, Any]:
        """Override to declare configurable settings with defaults.

        Example::

            def default_settings(self):
                return {"jump_chars": "])}", "priority": 100}
        """
        return {}

    def get_setting(self, key: str) -> Any:
        """Read a persisted setting value (falls back to default)."""
        if not self._settings_cache:
            self._settings_cache = self._load_settings()
        defaults = self.default_settings()
        return self._settings_cache.get(key, defaults.get(key))

    def set_setting(self, key: str, value: Any) -> None:
        """Persist a setting value."""
        if not self._settings_cache:
            self._settings_cache = self._load_settings()
        self._settings_cache[key] = value
        self._save_settings()

    def settings(self) -> Dict[str, Any]:
        """All settings, persisted values layered over the defaults."""
        merged = dict(self.default_settings())
        for key in merged:
            merged[key] = self.get_setting(key)
        return merged

    def _settings_path(self) -> Path:
        _SETTINGS_DIR.mkdir(parents=True, exist_ok=True)
        safe_name = self.__class__.__name__.lower()
        return _SETTINGS_DIR / f"{safe_name}.json"

    def _load_settings(self) -> Dict[str, Any]:
        p = self._settings_path()
        if p.exists():
            try:
                return json.loads(p.read_text())
            except (OSError, ValueError):
                log.warning("Unreadable settings file %s, using defaults", p)
        return dict(self.default_settings())

    def _save_settings(self) -> None:
        p = self._settings_path()
        try:
            p.write_text(json.dumps(self._settings_cache, indent=2))
        except OSError:
            log.exception("Could not write settings for %s", self.name)

    # ── Key handler helpers ──────────────────────────────────────────
    def register_key_handler(
        self,
        editor: Any,
        key: str,
        callback: Callable[[Any, "tk.Event"], Optional[str]],
        priority: int = 0,
    ) -> None:
        """Put *callback* on the editor's handler chain for *key* (e.g. ``"<Tab>"``).

        *callback* receives ``(document, event)``.  Higher priorities run
        first; returning ``None`` passes the key on to the next handler.
        Handlers are removed automatically on ``deactivate``.
        """
        handler = editor.key_handlers.add(key, callback, priority=priority, owner=self)
        self._key_handlers.append(handler)

    def unregister_all_key_handlers(self, editor: Any) -> None:
        """Remove all key handlers registered by this extension."""
        for handler in self._key_handlers:
            editor.key_handlers.remove(handler)
        self._key_handlers.clear()

    # ── Notification helper ──────────────────────────────────────────
    @staticmethod
    def set_status(editor: Any, msg: str) -> None:
        """Update the status bar."""
        editor.status_var.set(msg)

    # ── Convenience helpers ──────────────────────────────────────────
    @staticmethod
    def get_text(document: Any) -> str:
        """Return the full text of *document*."""
        return document.text.get("1.0", "end-1c")

"""
extension_manager.py

Handles discovery, loading, enabling/disabling of .py extension files from
the ``extensions/`` directory, and the priority-ordered key handler chain
extensions use to claim keys without hiding them from each other.
"""
from __future__ import annotations

import importlib.util
import itertools
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from extension_api import CONFIG_DIR, BaseExtension

log = logging.getLogger("tabjump.extensions")
keylog = logging.getLogger("tabjump.keys")

# ── Paths ────────────────────────────────────────────────────────────
# Bundled with the modules; user state lives in the config directory.
EXTENSIONS_DIR = Path(__file__).parent / "extensions"
STATE_FILE = CONFIG_DIR / "extensions.json"


class KeyHandler:
    """One entry on the handler chain for a key."""

    __slots__ = ("key", "callback", "priority", "owner", "seq")

    def __init__(self, key: str, callback: Callable, priority: int, owner: Any, seq: int):
        self.key = key
        self.callback = callback
        self.priority = priority
        self.owner = owner
        self.seq = seq

    def __repr__(self) -> str:
        owner = getattr(self.owner, "name", self.owner)
        return f"<KeyHandler {self.key} priority={self.priority} owner={owner!r}>"


class KeyHandlerChain:
    """Priority-ordered handlers per key.

    ``dispatch`` calls handlers from the highest priority down (ties in
    registration order) until one returns ``"break"``; if none does, the
    caller's default action runs.
    """

    def __init__(self):
        self._handlers: Dict[str, List[KeyHandler]] = {}
        self._counter = itertools.count()

    def add(self, key: str, callback: Callable, priority: int = 0, owner: Any = None) -> KeyHandler:
        handler = KeyHandler(key, callback, priority, owner, next(self._counter))
        chain = self._handlers.setdefault(key, [])
        chain.append(handler)
        chain.sort(key=lambda h: (-h.priority, h.seq))
        keylog.debug("Added %r", handler)
        return handler

    def remove(self, handler: KeyHandler) -> None:
        chain = self._handlers.get(handler.key, [])
        if handler in chain:
            chain.remove(handler)
            keylog.debug("Removed %r", handler)

    def handlers_for(self, key: str) -> List[KeyHandler]:
        return list(self._handlers.get(key, []))

    def dispatch(
        self,
        key: str,
        document: Any,
        event: Any,
        default: Optional[Callable[[Any, Any], Optional[str]]] = None,
    ) -> Optional[str]:
        for handler in self.handlers_for(key):
            try:
                result = handler.callback(document, event)
            except Exception:
                keylog.exception("Handler %r failed, passing %s on", handler, key)
                continue
            if result == "break":
                return "break"
        if default is not None:
            return default(document, event)
        return None


class ExtensionInfo:
    """Lightweight record that tracks a loaded extension module."""

    def __init__(
        self,
        module_name: str,
        file_path: Path,
        module: Any = None,
        instance: Optional[BaseExtension] = None,
        enabled: bool = True,
        error: Optional[str] = None,
    ):
        self.module_name = module_name
        self.file_path = file_path
        self.module = module
        self.instance = instance
        self.enabled = enabled
        self.error = error  # traceback string if load/activate failed

    @property
    def name(self) -> str:
        return getattr(self.instance, "name", self.module_name) if self.instance else self.module_name

    @property
    def version(self) -> str:
        return getattr(self.instance, "version", "?") if self.instance else "?"

    @property
    def description(self) -> str:
        return getattr(self.instance, "description", "") if self.instance else ""


class ExtensionManager:
    """Central controller for the extension subsystem."""

    def __init__(
        self,
        editor: Any,
        extensions_dir: Path = EXTENSIONS_DIR,
        state_file: Optional[Path] = None,
    ):
        self.editor = editor
        self.extensions_dir = Path(extensions_dir)
        self.state_file = Path(state_file) if state_file else STATE_FILE
        self.extensions: Dict[str, ExtensionInfo] = {}
        self._shutting_down = False
        log.info("Initialising extension subsystem…")
        self._load_state()
        self.discover_and_load()
        loaded = [n for n, i in self.extensions.items() if i.enabled]
        log.info("Extension subsystem ready — %d extension(s) active: %s",
                 len(loaded), ", ".join(loaded) or "(none)")

    # ── State ────────────────────────────────────────────────────────
    def _load_state(self):
        """Load persisted enabled/disabled flags."""
        self._state: Dict[str, bool] = {}
        if self.state_file.exists():
            try:
                with open(self.state_file, "r") as f:
                    self._state = json.load(f)
            except (OSError, ValueError):
                log.warning("Ignoring unreadable extension state in %s", self.state_file)
                self._state = {}

    def _save_state(self):
        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.state_file, "w") as f:
                json.dump(
                    {name: info.enabled for name, info in self.extensions.items()},
                    f,
                    indent=2,
                )
        except OSError:
            log.exception("Could not save extension state to %s", self.state_file)

    # ── Discovery & loading ──────────────────────────────────────────
    def discover_and_load(self):
        """Scan the extensions directory for .py files, load & activate enabled ones."""
        for py_file in sorted(self.extensions_dir.glob("*.py")):
            mod_name = py_file.stem
            if mod_name.startswith("_"):
                continue
            if mod_name not in self.extensions:
                log.debug("Discovered extension file: %s", py_file.name)
                self._load_extension(py_file)

    def _load_extension(self, path: Path) -> Optional[ExtensionInfo]:
        mod_name = path.stem
        try:
            spec = importlib.util.spec_from_file_location(
                f"ext_{mod_name}", str(path)
            )
            if spec is None or spec.loader is None:
                return None
            module = importlib.util.module_from_spec(spec)
            sys.modules[spec.name] = module
            spec.loader.exec_module(module)

            ext_cls = self._find_extension_class(module)
            if ext_cls is None:
                log.debug("%s defines no extension class, skipped", path.name)
                return None

            instance = ext_cls()
            enabled = self._state.get(mod_name, True)
            info = ExtensionInfo(mod_name, path, module, instance, enabled)
            self.extensions[mod_name] = info

            if enabled:
                self._activate(info)
            return info
        except Exception:
            tb = traceback.format_exc()
            info = ExtensionInfo(mod_name, path, enabled=False, error=tb)
            self.extensions[mod_name] = info
            log.error("Failed to load %s:\n%s", mod_name, tb)
            return info

    @staticmethod
    def _find_extension_class(module: Any):
        """Return the first BaseExtension subclass defined in *module*."""
        for attr_name in dir(module):
            obj = getattr(module, attr_name)
            if (
                isinstance(obj, type)
                and issubclass(obj, BaseExtension)
                and obj is not BaseExtension
                and obj.__module__ == module.__name__
            ):
                return obj
        return None

    # ── Activation / deactivation ────────────────────────────────────
    def _get_menubar(self):
        """Resolve the actual tk.Menu widget from the editor root."""
        root = getattr(self.editor, "root", None)
        if root is None:
            return None
        menu_path = root.cget("menu")
        if menu_path:
            return root.nametowidget(menu_path)
        return None

    def _activate(self, info: ExtensionInfo):
        try:
            if info.instance:
                log.info("Activating extension: %s", info.name)
                info.instance.activate(self.editor)
                menubar = self._get_menubar()
                if menubar:
                    info.instance.contribute_menu(self.editor, menubar)
                info.error = None
        except Exception:
            info.error = traceback.format_exc()
            log.error("Activate failed for %s:\n%s", info.module_name, info.error)

    def _deactivate(self, info: ExtensionInfo):
        try:
            if info.instance:
                log.info("Deactivating extension: %s", info.name)
                info.instance.unregister_all_key_handlers(self.editor)
                menubar = self._get_menubar()
                if menubar:
                    info.instance.withdraw_menu(self.editor, menubar)
                info.instance.deactivate(self.editor)
        except Exception:
            log.exception("Deactivate failed for %s", info.module_name)

    def is_enabled(self, mod_name: str) -> bool:
        info = self.extensions.get(mod_name)
        return bool(info and info.enabled)

    def enable(self, mod_name: str):
        info = self.extensions.get(mod_name)
        if info and info.instance and not info.enabled:
            info.enabled = True
            self._activate(info)
            self._save_state()

    def disable(self, mod_name: str):
        info = self.extensions.get(mod_name)
        if info and info.enabled:
            self._deactivate(info)
            info.enabled = False
            self._save_state()

    def set_enabled(self, mod_name: str, enabled: bool):
        if enabled:
            self.enable(mod_name)
        else:
            self.disable(mod_name)

    # ── Shutdown ─────────────────────────────────────────────────────
    def shutdown_all(self):
        """Deactivate every extension, call on_shutdown, and save state.

        Safe to call multiple times.
        """
        if self._shutting_down:
            return
        self._shutting_down = True
        log.info("Shutting down %d extension(s)…", len(self.extensions))
        for mod_name, info in list(self.extensions.items()):
            if info.enabled and info.instance:
                self._deactivate(info)
            if info.instance:
                try:
                    info.instance.on_shutdown(self.editor)
                except Exception:
                    log.exception("on_shutdown failed for %s", mod_name)
        self._save_state()
        log.info("All extensions shut down.")

    # ── Event dispatch ───────────────────────────────────────────────
    def _active(self):
        for info in list(self.extensions.values()):
            if info.enabled and info.instance:
                yield info

    def dispatch_key(self, event) -> Optional[str]:
        for info in self._active():
            try:
                result = info.instance.on_key(self.editor, event)
                if result == "break":
                    return "break"
            except Exception:
                log.exception("on_key failed for %s", info.module_name)
        return None

    def dispatch_document_open(self, document):
        for info in self._active():
            try:
                info.instance.on_document_open(self.editor, document)
            except Exception:
                log.exception("on_document_open failed for %s", info.module_name)

    def dispatch_document_close(self, document):
        for info in self._active():
            try:
                info.instance.on_document_close(self.editor, document)
            except Exception:
                log.exception("on_document_close failed for %s", info.module_name)

    def dispatch_file_save(self, document):
        for info in self._active():
            try:
                info.instance.on_file_save(self.editor, document)
            except Exception:
                log.exception("on_file_save failed for %s", info.module_name)

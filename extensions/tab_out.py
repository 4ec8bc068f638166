"""
Tab Out — Extension for Tabjump Editor

Press Tab right before a closing bracket, quote or punctuation mark to step
over it.  Anywhere else Tab keeps doing what it did before (snippets,
indentation, ...).

Quotes are only stepped over when they close a string.  An opening quote,
for example at the start of a line, leaves Tab free to re-indent.
"""
import logging

from extension_api import BaseExtension
from jump_over import (
    DEFAULT_CONFIG,
    DEFAULT_JUMP_CHARS,
    DEFAULT_QUOTE_CHARS,
    JumpConfig,
    should_jump_over,
)
from syntax_context import syntax_context_for

log = logging.getLogger("tabjump.extensions.tab_out")

_MENU_LABEL = "Tab Out"


class TabOutExtension(BaseExtension):
    name = "Tab Out"
    version = "1.0.0"
    description = "Tab jumps over closing brackets, quotes and punctuation."
    author = "Tabjump Team"
    category = "Editing"
    tags = ("brackets", "quotes", "navigation", "productivity")

    def __init__(self):
        super().__init__()
        self.config = DEFAULT_CONFIG
        self._disabled_docs = set()
        self._menu = None

    def default_settings(self):
        return {
            "jump_chars": DEFAULT_JUMP_CHARS,
            "quote_chars": DEFAULT_QUOTE_CHARS,
            "priority": 100,
        }

    def activate(self, editor):
        self.config = self._load_config()
        self.register_key_handler(editor, "<Tab>", self._on_tab,
                                  priority=self._load_priority())
        log.debug("Tab Out active with %r", self.config)

    def deactivate(self, editor):
        self._disabled_docs.clear()

    def _load_config(self):
        try:
            return JumpConfig.from_settings(self.settings())
        except (TypeError, ValueError) as exc:
            log.warning("Invalid Tab Out settings (%s), using defaults", exc)
            return DEFAULT_CONFIG

    def _load_priority(self):
        value = self.get_setting("priority")
        try:
            return int(value)
        except (TypeError, ValueError):
            default = self.default_settings()["priority"]
            log.warning("Invalid Tab Out priority %r, using %d", value, default)
            return default

    # ── Per-document toggle ──────────────────────────────────────────
    def is_active_for(self, document) -> bool:
        return document is not None and document.doc_id not in self._disabled_docs

    def set_document_enabled(self, document, enabled: bool) -> None:
        if enabled:
            self._disabled_docs.discard(document.doc_id)
        else:
            self._disabled_docs.add(document.doc_id)

    def toggle_document(self, editor, document) -> None:
        if document is None:
            return
        enabled = not self.is_active_for(document)
        self.set_document_enabled(document, enabled)
        state = "on" if enabled else "off"
        self.set_status(editor, f"Tab Out {state} for {document.title}")

    def on_document_close(self, editor, document):
        self._disabled_docs.discard(document.doc_id)

    def contribute_menu(self, editor, menubar):
        import tkinter as tk
        self._menu = tk.Menu(menubar, tearoff=False)
        self._menu.add_command(
            label="Toggle for Current Document",
            command=lambda: self.toggle_document(editor, editor.current_document()),
        )
        menubar.add_cascade(label=_MENU_LABEL, menu=self._menu)

    def withdraw_menu(self, editor, menubar):
        if self._menu is not None:
            menubar.delete(_MENU_LABEL)
            self._menu.destroy()
            self._menu = None

    # ── Tab handling ─────────────────────────────────────────────────
    def should_jump(self, document) -> bool:
        widget = document.text
        ch = widget.get("insert")
        position = len(widget.get("1.0", "insert"))
        context = syntax_context_for(self.get_text(document), document.language)
        return should_jump_over(ch, position, context, self.config)

    def _on_tab(self, document, event):
        if not self.is_active_for(document):
            return None
        if self.should_jump(document):
            document.text.mark_set("insert", "insert+1c")
            return "break"
        return None

"""Shared fixtures and Tk-free stand-ins for editor widgets."""

from __future__ import annotations

import importlib.util
import itertools
import re
import sys
from pathlib import Path

import pytest

import extension_api
import extension_manager
from extension_manager import KeyHandlerChain

PROJECT_DIR = Path(__file__).resolve().parent.parent
EXTENSIONS_DIR = PROJECT_DIR / "extensions"

_INDEX = re.compile(r"^(insert|end|1\.0)(?:([+-])(\d+)c)?$")


class FakeText:
    """The slice of ``tk.Text`` extensions use, over a flat string.

    Indices understood: ``1.0``, ``insert``, ``end`` with an optional
    ``+Nc`` / ``-Nc`` offset.
    """

    def __init__(self, content: str = "", cursor: int | None = None):
        self.content = content
        self.cursor = len(content) if cursor is None else cursor

    @classmethod
    def with_cursor(cls, marked: str) -> "FakeText":
        """Build from text where ``|`` marks the cursor."""
        pos = marked.index("|")
        return cls(marked[:pos] + marked[pos + 1:], pos)

    def _offset(self, index: str) -> int:
        match = _INDEX.match(index.replace(" ", "").replace("chars", "c"))
        if not match:
            raise ValueError(f"unsupported index {index!r}")
        base, sign, count = match.groups()
        pos = {"insert": self.cursor, "end": len(self.content) + 1, "1.0": 0}[base]
        if count:
            pos += int(count) if sign == "+" else -int(count)
        return max(0, min(pos, len(self.content) + 1))

    def get(self, index1: str, index2: str | None = None) -> str:
        text = self.content + "\n"
        start = self._offset(index1)
        if index2 is None:
            return text[start:start + 1]
        return text[start:self._offset(index2)]

    def insert(self, index: str, chars: str) -> None:
        pos = min(self._offset(index), len(self.content))
        self.content = self.content[:pos] + chars + self.content[pos:]
        if pos <= self.cursor:
            self.cursor += len(chars)

    def mark_set(self, mark: str, index: str) -> None:
        assert mark == "insert"
        self.cursor = min(self._offset(index), len(self.content))

    def after(self, ms, func):
        func()

    @property
    def marked(self) -> str:
        return self.content[:self.cursor] + "|" + self.content[self.cursor:]


_doc_ids = itertools.count(1)


class FakeDocument:
    def __init__(self, marked: str = "|", language: str = "python"):
        self.doc_id = next(_doc_ids)
        self.text = FakeText.with_cursor(marked)
        self.language = language
        self.path = None

    @property
    def title(self) -> str:
        return f"Untitled-{self.doc_id}"


class FakeStatus:
    def __init__(self):
        self.value = ""

    def set(self, value: str) -> None:
        self.value = value


class FakeEditor:
    def __init__(self):
        self.key_handlers = KeyHandlerChain()
        self.status_var = FakeStatus()
        self.documents: list[FakeDocument] = []

    def current_document(self):
        return self.documents[-1] if self.documents else None

    def press_tab(self, document: FakeDocument, default=None):
        return self.key_handlers.dispatch("<Tab>", document, None, default=default)


class FakeKeyEvent:
    def __init__(self, char: str, widget: FakeText):
        self.char = char
        self.widget = widget


@pytest.fixture(autouse=True)
def settings_dir(tmp_path, monkeypatch):
    """Keep extension settings out of the user config directory."""
    path = tmp_path / "settings"
    monkeypatch.setattr(extension_api, "_SETTINGS_DIR", path)
    return path


@pytest.fixture(autouse=True)
def state_file(tmp_path, monkeypatch):
    """Keep the enabled/disabled flags out of the user config directory."""
    path = tmp_path / "state" / "extensions.json"
    monkeypatch.setattr(extension_manager, "STATE_FILE", path)
    return path


@pytest.fixture
def editor():
    return FakeEditor()


def load_extension_module(name: str):
    """Import ``extensions/<name>.py`` the way the extension manager does."""
    spec = importlib.util.spec_from_file_location(f"ext_{name}", str(EXTENSIONS_DIR / f"{name}.py"))
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module

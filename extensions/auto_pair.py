"""
Auto Pair — Extension for Tabjump Editor

Automatically closes brackets, braces, parentheses, and quotes
when the opening character is typed.  Pairs well with Tab Out.
"""
from extension_api import BaseExtension


_PAIRS = {
    "(": ")",
    "{": "}",
    "[": "]",
    '"': '"',
    "'": "'",
}


class AutoPairExtension(BaseExtension):
    name = "Auto Pair"
    version = "1.1.0"
    description = "Auto-closes (), {}, [], and quotes when you type the opener."
    author = "Tabjump Team"
    category = "Editing"
    tags = ("brackets", "auto-close", "productivity")

    def __init__(self):
        super().__init__()
        self._pairs = dict(_PAIRS)

    def default_settings(self):
        return {"pairs": dict(_PAIRS)}

    def activate(self, editor):
        pairs = self.get_setting("pairs")
        if isinstance(pairs, dict):
            self._pairs = {k: v for k, v in pairs.items() if len(k) == 1 and v}

    def on_key(self, editor, event):
        closer = self._pairs.get(event.char)
        if closer:
            widget = event.widget
            # the typed opener is inserted after this handler returns
            widget.after(1, lambda: self._insert_closer(widget, closer))
        return None

    @staticmethod
    def _insert_closer(widget, closer):
        widget.insert("insert", closer)
        widget.mark_set("insert", f"insert-{len(closer)}c")

#!/usr/bin/env python3
"""
A lightweight multi-document text editor in Python (Tkinter) that hosts
Tabjump extensions.

Features:
- New/Open/Save/Save As/Close, one notebook tab per document
- Pygments syntax highlighting, language picked from the file name
- Tab re-indents the line (or pads to the next tab stop) when no
  extension claims the key
- Extensions menu to switch each extension on or off for all documents
"""
import itertools
import logging
import os
import sys
import tkinter as tk
from tkinter import filedialog, messagebox
from tkinter import ttk
from typing import Dict, Optional

from extension_manager import ExtensionManager, KeyHandlerChain
from indentation import TAB_WIDTH, plan_tab
from syntax_context import language_for_filename
from syntax_highlighter import SyntaxHighlighter

log = logging.getLogger('tabjump.editor')

LANGUAGES = ['text', 'python', 'c', 'cpp', 'java', 'javascript', 'json', 'go', 'rust']

_doc_ids = itertools.count(1)


class Document:
    """One open buffer: its Text widget, file path and language mode."""

    def __init__(self, frame, text, path=None, language='text'):
        self.doc_id = next(_doc_ids)
        self.frame = frame
        self.text = text
        self.path = path
        self.language = language
        self.dirty = False
        self.highlighter = SyntaxHighlighter(text)
        self.highlight_timer = None

    @property
    def title(self):
        return os.path.basename(self.path) if self.path else f'Untitled-{self.doc_id}'


class TabEditorApp:
    def __init__(self, root):
        self.root = root
        self.root.title('Tabjump Editor')
        # notebook tab id -> document
        self.documents: Dict[str, Document] = {}
        self.key_handlers = KeyHandlerChain()
        self._build_ui()
        self._bind_events()
        self.extensions = ExtensionManager(self)
        self._build_extensions_menu()

    def _build_ui(self):
        self.menubar = tk.Menu(self.root)
        filemenu = tk.Menu(self.menubar, tearoff=False)
        filemenu.add_command(label='New', command=self.new_file)
        filemenu.add_command(label='Open', command=self.open_file)
        filemenu.add_command(label='Save', command=lambda: self.save_file(self.current_document()))
        filemenu.add_command(label='Save As', command=lambda: self.save_file_as(self.current_document()))
        filemenu.add_command(label='Close', command=lambda: self.close_document(self.current_document()))
        filemenu.add_separator()
        filemenu.add_command(label='Exit', command=self.on_close)
        self.menubar.add_cascade(label='File', menu=filemenu)
        self.extmenu = tk.Menu(self.menubar, tearoff=False)
        self.menubar.add_cascade(label='Extensions', menu=self.extmenu)
        self.root.config(menu=self.menubar)

        self.notebook = ttk.Notebook(self.root)
        self.notebook.pack(fill='both', expand=True)

        side_frame = tk.Frame(self.root)
        side_frame.pack(fill='x')
        lang_label = tk.Label(side_frame, text='Language:')
        lang_label.pack(side='left', padx=(6, 4), pady=4)
        self.lang_var = tk.StringVar(value='text')
        self.lang_combo = ttk.Combobox(side_frame, values=LANGUAGES, width=12, textvariable=self.lang_var)
        self.lang_combo.pack(side='left')

        self.status_var = tk.StringVar()
        self.status_var.set('Ready')
        status = tk.Label(self.root, textvariable=self.status_var, relief='sunken', anchor='w')
        status.pack(side='bottom', fill='x')

    def _bind_events(self):
        self.lang_combo.bind('<<ComboboxSelected>>', lambda e: self.set_language(self.lang_var.get()))
        self.notebook.bind('<<NotebookTabChanged>>', lambda e: self._on_tab_changed())
        self.root.protocol('WM_DELETE_WINDOW', self.on_close)

    def _build_extensions_menu(self):
        self._ext_vars = {}
        for mod_name, info in sorted(self.extensions.extensions.items()):
            var = tk.BooleanVar(value=info.enabled)
            self._ext_vars[mod_name] = var
            self.extmenu.add_checkbutton(
                label=info.name, variable=var,
                state='normal' if info.instance else 'disabled',
                command=lambda m=mod_name, v=var: self._toggle_extension(m, v.get()),
            )

    def _toggle_extension(self, mod_name, enabled):
        self.extensions.set_enabled(mod_name, enabled)
        info = self.extensions.extensions[mod_name]
        self.status_var.set(f"{info.name} {'enabled' if info.enabled else 'disabled'} for all documents")

    # ── Documents ────────────────────────────────────────────────────
    def current_document(self) -> Optional[Document]:
        tab = self.notebook.select()
        return self.documents.get(str(tab)) if tab else None

    def new_document(self, content='', path=None, language=None):
        frame = tk.Frame(self.notebook)
        text = tk.Text(frame, wrap='none', undo=True, font=('Consolas', 12))
        yscroll = tk.Scrollbar(frame, orient='vertical', command=text.yview)
        text.configure(yscrollcommand=yscroll.set)
        yscroll.pack(side='right', fill='y')
        text.pack(side='left', fill='both', expand=True)

        if language is None:
            language = language_for_filename(path) if path else 'text'
        doc = Document(frame, text, path, language)
        doc.highlighter.create_tags()
        text.insert('1.0', content)
        text.edit_reset()
        text.edit_modified(False)

        self.documents[str(frame)] = doc
        self.notebook.add(frame, text=doc.title)
        self._bind_document(doc)
        self.notebook.select(frame)
        self.schedule_highlight(doc)
        log.debug('Opened document %d (%s, %s)', doc.doc_id, doc.title, doc.language)
        self.extensions.dispatch_document_open(doc)
        return doc

    def _bind_document(self, doc):
        text = doc.text
        text.bind('<Tab>', lambda e: self.key_handlers.dispatch('<Tab>', doc, e, default=self.indent_for_tab))
        text.bind('<KeyPress>', lambda e: self.extensions.dispatch_key(e))
        text.bind('<KeyRelease>', lambda e: self.schedule_highlight(doc))
        text.bind('<<Modified>>', lambda e: self._on_modified(doc))

    def _on_modified(self, doc):
        if doc.text.edit_modified() and not doc.dirty:
            doc.dirty = True
            self.notebook.tab(doc.frame, text=f'{doc.title} *')

    def set_clean(self, doc):
        doc.dirty = False
        doc.text.edit_modified(False)
        self.notebook.tab(doc.frame, text=doc.title)

    def _on_tab_changed(self):
        doc = self.current_document()
        if doc:
            self.lang_var.set(doc.language)
            self.status_var.set(doc.path or doc.title)
            doc.text.focus_set()

    def set_language(self, language):
        doc = self.current_document()
        if doc:
            doc.language = language
            self.schedule_highlight(doc)
            self.status_var.set(f'{doc.title}: {language}')

    def new_file(self):
        return self.new_document()

    def open_file(self):
        paths = filedialog.askopenfilenames(title='Open files')
        for path in paths:
            self.open_path(path)

    def open_path(self, path):
        for doc in self.documents.values():
            if doc.path and os.path.abspath(doc.path) == os.path.abspath(path):
                self.notebook.select(doc.frame)
                return doc
        try:
            with open(path, 'r', encoding='utf-8', errors='ignore') as f:
                content = f.read()
        except OSError as e:
            messagebox.showerror('Open failed', f'Could not open {path}:\n{e}')
            log.warning('Could not open %s: %s', path, e)
            return None
        doc = self.new_document(content, path)
        self.status_var.set(f'Opened {os.path.basename(path)}')
        return doc

    def save_file(self, doc):
        if doc is None:
            return False
        if doc.path is None:
            return self.save_file_as(doc)
        try:
            with open(doc.path, 'w', encoding='utf-8') as f:
                f.write(doc.text.get('1.0', 'end-1c'))
        except OSError as e:
            messagebox.showerror('Save failed', f'Could not save {doc.path}:\n{e}')
            log.warning('Could not save %s: %s', doc.path, e)
            return False
        self.set_clean(doc)
        self.status_var.set(f'Saved {doc.title}')
        self.extensions.dispatch_file_save(doc)
        return True

    def save_file_as(self, doc):
        if doc is None:
            return False
        path = filedialog.asksaveasfilename(initialfile=doc.title)
        if not path:
            return False
        doc.path = path
        if doc.language == 'text':
            doc.language = language_for_filename(path)
            self.lang_var.set(doc.language)
        return self.save_file(doc)

    def confirm_discard(self, doc):
        if not doc.dirty:
            return True
        resp = messagebox.askyesnocancel('Unsaved changes', f'{doc.title} has unsaved changes. Save before closing?')
        if resp is None:
            return False
        if resp is True:
            return self.save_file(doc)
        return True

    def close_document(self, doc):
        if doc is None or not self.confirm_discard(doc):
            return False
        self.extensions.dispatch_document_close(doc)
        if doc.highlight_timer:
            self.root.after_cancel(doc.highlight_timer)
        self.notebook.forget(doc.frame)
        del self.documents[str(doc.frame)]
        doc.frame.destroy()
        return True

    # ── Highlighting ─────────────────────────────────────────────────
    def schedule_highlight(self, doc):
        if doc.highlight_timer:
            self.root.after_cancel(doc.highlight_timer)
        doc.highlight_timer = self.root.after(150, lambda: self._highlight(doc))

    def _highlight(self, doc):
        doc.highlight_timer = None
        doc.highlighter.highlight_all(language=doc.language)

    # ── Default Tab action ───────────────────────────────────────────
    def indent_for_tab(self, doc, event=None):
        widget = doc.text
        line_no, column = map(int, widget.index('insert').split('.'))
        line = widget.get(f'{line_no}.0', f'{line_no}.end')
        previous = (widget.get(f'{n}.0', f'{n}.end') for n in range(line_no - 1, 0, -1))
        new_line, new_column = plan_tab(line, column, previous, TAB_WIDTH)
        if new_line != line:
            widget.edit_separator()
            widget.delete(f'{line_no}.0', f'{line_no}.end')
            widget.insert(f'{line_no}.0', new_line)
        widget.mark_set('insert', f'{line_no}.{new_column}')
        widget.see('insert')
        return 'break'

    def on_close(self):
        for doc in list(self.documents.values()):
            if not self.confirm_discard(doc):
                return
        self.extensions.shutdown_all()
        try:
            self.root.destroy()
        except tk.TclError:
            self.root.quit()


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    level_name = os.environ.get('TABJUMP_LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format='%(asctime)s %(levelname)-7s %(name)s: %(message)s',
    )
    root = tk.Tk()
    app = TabEditorApp(root)
    for path in argv:
        app.open_path(path)
    if not app.documents:
        app.new_file()
    root.minsize(640, 480)
    root.mainloop()


if __name__ == '__main__':
    main()

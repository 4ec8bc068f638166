"""
syntax_highlighter.py

Use Pygments to perform syntax highlighting for a Tkinter Text widget.
Tokens come from ``syntax_context.iter_tokens`` so highlighting and Tab Out
see the same strings and comments.
"""
from syntax_context import iter_tokens


class SyntaxHighlighter:
    # Checked in order; the first matching token family wins.
    TOKEN_TAGS = (
        ('Token.Literal.String', 'string'),
        ('Token.Comment', 'comment'),
        ('Token.Keyword', 'keyword'),
        ('Token.Literal.Number', 'number'),
        ('Token.Name.Function', 'function'),
        ('Token.Name.Class', 'class'),
        ('Token.Name.Builtin', 'builtin'),
    )

    def __init__(self, text_widget):
        self.text = text_widget

    def create_tags(self):
        self.text.tag_configure('keyword', foreground='blue')
        self.text.tag_configure('builtin', foreground='#6b6')
        self.text.tag_configure('string', foreground='#d14')
        self.text.tag_configure('number', foreground='#b000b0')
        self.text.tag_configure('comment', foreground='#888')
        self.text.tag_configure('function', foreground='#6a5acd')
        self.text.tag_configure('class', foreground='#008fb3')

    @classmethod
    def tag_for_token(cls, ttype):
        name = str(ttype)
        for prefix, tag in cls.TOKEN_TAGS:
            if name.startswith(prefix):
                return tag
        return None

    def highlight_all(self, language='text'):
        """Re-tag the whole widget for *language*; plain text just clears tags."""
        for _, tag in self.TOKEN_TAGS:
            self.text.tag_remove(tag, '1.0', 'end')
        text = self.text.get('1.0', 'end-1c')
        for offset, ttype, value in iter_tokens(text, language):
            tag = self.tag_for_token(ttype)
            if not tag or not value:
                continue
            self.text.tag_add(tag, f'1.0+{offset}c', f'1.0+{offset + len(value)}c')

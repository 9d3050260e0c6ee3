"""Lexical analysis: source text -> tokens + lexical diagnostics."""

import logging
import re
from collections import namedtuple

from .diagnostics import LexicalError

log = logging.getLogger(__name__)

Token = namedtuple('Token', ['type', 'value', 'line', 'column'])

KEYWORDS = frozenset({
    'int', 'float', 'bool', 'void',
    'if', 'else', 'while', 'return',
    'true', 'false',
})

OPERATORS = {
    '+': 'PLUS',
    '-': 'MINUS',
    '*': 'MULTIPLY',
    '/': 'DIVIDE',
    '=': 'ASSIGN',
    '==': 'EQUAL',
    '!=': 'NOT_EQUAL',
    '<': 'LESS_THAN',
    '>': 'GREATER_THAN',
    '<=': 'LESS_EQUAL',
    '>=': 'GREATER_EQUAL',
    '&&': 'LOGICAL_AND',
    '||': 'LOGICAL_OR',
    '!': 'LOGICAL_NOT',
}

DELIMITERS = {
    '(': 'LEFT_PAREN',
    ')': 'RIGHT_PAREN',
    '{': 'LEFT_BRACE',
    '}': 'RIGHT_BRACE',
    ';': 'SEMICOLON',
    ',': 'COMMA',
}

OPERATOR_START = frozenset('+-*/=!<>&|')
WHITESPACE = frozenset(' \t\r\n')

IDENT_RE = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')
NUMBER_RE = re.compile(r'[0-9]+(\.[0-9]*)?')


class Lexer:
    def __init__(self, source):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens = []
        self.errors = []

    def tokenize(self):
        src = self.source
        while self.pos < len(src):
            ch = src[self.pos]
            if ch in WHITESPACE:
                self._skip(ch)
            elif ch.isascii() and (ch.isalpha() or ch == '_'):
                self._read_word()
            elif ch.isascii() and ch.isdigit():
                self._read_number()
            elif ch in OPERATOR_START:
                self._read_operator()
            elif ch in DELIMITERS:
                self._add(DELIMITERS[ch], ch)
                self._advance(1)
            else:
                self._error(f"Invalid character: {ch}")
                self._advance(1)
        self.tokens.append(Token('EOF', '', self.line, self.column))
        log.debug("lexed %d tokens, %d errors", len(self.tokens), len(self.errors))
        return self.tokens, self.errors

    def _skip(self, ch):
        if ch == '\n':
            self.line += 1
            self.column = 1
            self.pos += 1
        else:
            self._advance(1)

    def _read_word(self):
        word = IDENT_RE.match(self.source, self.pos).group()
        ttype = 'KEYWORD' if word in KEYWORDS else 'IDENTIFIER'
        self._add(ttype, word)
        self._advance(len(word))

    def _read_number(self):
        mo = NUMBER_RE.match(self.source, self.pos)
        text = mo.group()
        self._add('FLOAT_LITERAL' if mo.group(1) is not None else 'INT_LITERAL', text)
        self._advance(len(text))

    def _read_operator(self):
        two = self.source[self.pos:self.pos + 2]
        if len(two) == 2 and two in OPERATORS:
            self._add(OPERATORS[two], two)
            self._advance(2)
            return
        ch = self.source[self.pos]
        if ch in OPERATORS:
            self._add(OPERATORS[ch], ch)
        else:
            # lone '&' or '|'
            self._error(f"Invalid operator: {ch}")
        self._advance(1)

    def _advance(self, n):
        self.pos += n
        self.column += n

    def _add(self, ttype, value):
        self.tokens.append(Token(ttype, value, self.line, self.column))

    def _error(self, msg):
        self.errors.append(LexicalError(msg, self.line, self.column))


def tokenize(source):
    """Tokenize ``source``; returns ``(tokens, errors)``. Always ends with an EOF token."""
    return Lexer(source).tokenize()

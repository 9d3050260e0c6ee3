"""minitac: lexer, parser, semantic analyzer and three-address code generator."""

from .compiler import PipelineResult, ast_to_dict, compile_source
from .diagnostics import Diagnostic, LexicalError, ParseError, SemanticError
from .irgen import IRGenerator
from .lexer import Lexer, Token, tokenize
from .parser import Parser, parse
from .semantic import SemanticAnalyzer, Scope, Symbol, SymbolTable, analyze, type_compatible

__all__ = [
    "PipelineResult", "ast_to_dict", "compile_source",
    "Diagnostic", "LexicalError", "ParseError", "SemanticError",
    "IRGenerator", "Lexer", "Token", "tokenize", "Parser", "parse",
    "SemanticAnalyzer", "Scope", "Symbol", "SymbolTable", "analyze", "type_compatible",
]

"""Compiler driver: lexer -> parser -> semantic analysis -> TAC.

Each phase runs only when the one before it reported no diagnostics.
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import List, Optional

from .diagnostics import SemanticError
from .irgen import IRGenerator
from .lexer import Lexer
from .parser import Parser
from .semantic import SemanticAnalyzer, SymbolTable
from .nodes import Program

log = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    tokens: list = field(default_factory=list)
    lexical_errors: list = field(default_factory=list)
    ast: Optional[Program] = None
    parse_errors: list = field(default_factory=list)
    symbol_table: Optional[SymbolTable] = None
    semantic_errors: list = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)

    @property
    def errors(self):
        return self.lexical_errors + self.parse_errors + self.semantic_errors

    @property
    def succeeded(self):
        return not self.errors and self.ast is not None

    def to_dict(self):
        return {
            "tokens": [t._asdict() for t in self.tokens],
            "lexicalErrors": [e.to_dict() for e in self.lexical_errors],
            "ast": ast_to_dict(self.ast),
            "parseErrors": [e.to_dict() for e in self.parse_errors],
            "symbolTable": self.symbol_table.to_dict() if self.symbol_table is not None else None,
            "semanticErrors": [e.to_dict() for e in self.semantic_errors],
            "instructions": list(self.instructions),
        }


def ast_to_dict(node):
    """
    Serialize AST to dict recursively
    """
    if node is None:
        return None
    d = {"type": node.kind}
    if node.value is not None:
        d["value"] = node.value
    if node.data_type is not None:
        d["dataType"] = node.data_type
    d["children"] = [ast_to_dict(c) for c in node.children]
    d["line"] = node.line
    d["column"] = node.column
    return d


def compile_source(code, verbose=False):
    result = PipelineResult()

    tokens, lex_errors = Lexer(code).tokenize()
    result.tokens = tokens
    result.lexical_errors = lex_errors
    _report(verbose, "lexer", len(tokens), "tokens", lex_errors)
    if lex_errors:
        return result

    ast, parse_errors = Parser(tokens).parse()
    result.ast = ast
    result.parse_errors = parse_errors
    _report(verbose, "parser", len(ast.functions), "functions", parse_errors)
    if parse_errors:
        return result

    analyzer = SemanticAnalyzer()
    try:
        symbol_table, sem_errors = analyzer.analyze(ast)
    except RecursionError:
        symbol_table, sem_errors = analyzer.symbol_table, [_too_deep(ast)]
    result.symbol_table = symbol_table
    result.semantic_errors = sem_errors
    _report(verbose, "semantic", len(symbol_table.scopes), "scopes", sem_errors)
    if sem_errors:
        return result

    try:
        result.instructions = IRGenerator().generate(ast)
    except RecursionError:
        result.semantic_errors = [_too_deep(ast)]
        return result
    if verbose:
        log.info("irgen: %d instructions", len(result.instructions))
        for instr in result.instructions:
            log.info("    %s", instr)
    return result


def _too_deep(ast):
    return SemanticError("Program nested too deeply", ast.line, ast.column)


def _report(verbose, phase, count, what, errors):
    if not verbose:
        return
    log.info("%s: %d %s, %d errors", phase, count, what, len(errors))
    for e in errors:
        log.info("    %s", e)


# =====================================================
# COMMAND LINE
# =====================================================
def build_arg_parser():
    ap = argparse.ArgumentParser(
        prog="minitac",
        description="Compile a source file to three-address code.")
    ap.add_argument("file", nargs="?", help="source file (default: stdin)")
    ap.add_argument("--tokens", action="store_true", help="print the token stream")
    ap.add_argument("--ast", action="store_true", help="print the syntax tree")
    ap.add_argument("--symbols", action="store_true", help="print the symbol table")
    ap.add_argument("-v", "--verbose", action="store_true", help="log every phase")
    return ap


def print_ast(node, out, depth=0):
    label = node.kind
    if node.value is not None:
        label += f" ({node.value})"
    if node.data_type is not None:
        label += f" : {node.data_type}"
    print("  " * depth + label, file=out)
    for child in node.children:
        print_ast(child, out, depth + 1)


def print_symbols(table, out):
    for scope in table.scopes.values():
        parent = f" (parent: {scope.parent.name})" if scope.parent is not None else ""
        print(f"[{scope.name}]{parent}", file=out)
        for sym in scope.symbols.values():
            line = f"  {sym.name:<12} {sym.kind:<10} {sym.type}"
            if sym.kind == 'function':
                line += f" ({', '.join(sym.param_types)})"
            print(line, file=out)


def main(argv=None, stdout=None, stderr=None):
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format="%(levelname)s:%(name)s: %(message)s")

    try:
        if args.file:
            with open(args.file, encoding="utf-8") as f:
                code = f.read()
        else:
            code = sys.stdin.read()
    except (OSError, UnicodeDecodeError) as e:
        print(f"minitac: cannot read input: {e}", file=stderr)
        return 2

    result = compile_source(code, verbose=args.verbose)

    if args.tokens:
        for t in result.tokens:
            print(f"{t.line}:{t.column}\t{t.type}\t{t.value}", file=stdout)
    if args.ast and result.ast is not None:
        print_ast(result.ast, stdout)
    if args.symbols and result.symbol_table is not None:
        print_symbols(result.symbol_table, stdout)

    for e in result.errors:
        print(e, file=stderr)
    if result.errors:
        return 1
    for instr in result.instructions:
        print(instr, file=stdout)
    return 0

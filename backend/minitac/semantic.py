"""Semantic analysis: scopes, symbol table and type checking.

Scoping is two-level. The global scope holds the function symbols; every
function gets exactly one scope (parent: global) that holds its parameters and
every local declared anywhere in its body.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .diagnostics import SemanticError
from .nodes import (
    Assignment, BinaryExpression, Block, BooleanLiteral, CallExpression,
    ExpressionStatement, FloatLiteral, FunctionDeclaration, Identifier,
    IfStatement, IntegerLiteral, Program, ReturnStatement, UnaryExpression,
    VariableDeclaration, WhileStatement,
)

log = logging.getLogger(__name__)

INT = 'int'
FLOAT = 'float'
BOOL = 'bool'
VOID = 'void'
UNKNOWN = 'unknown'  # type of anything that failed to resolve

GLOBAL_SCOPE = 'global'

ARITHMETIC_OPS = ('+', '-', '*', '/')
EQUALITY_OPS = ('==', '!=')
RELATIONAL_OPS = ('<', '>', '<=', '>=')
LOGICAL_OPS = ('&&', '||')


@dataclass
class Symbol:
    name: str
    type: str
    kind: str  # 'variable' | 'parameter' | 'function'
    line: int = 0
    column: int = 0
    parameters: Optional[List['Symbol']] = None
    return_type: Optional[str] = None

    @property
    def param_types(self):
        return [p.type for p in self.parameters or ()]

    def to_dict(self):
        d = {
            "name": self.name,
            "type": self.type,
            "kind": self.kind,
            "line": self.line,
            "column": self.column,
        }
        if self.kind == 'function':
            d["parameters"] = [p.to_dict() for p in self.parameters or ()]
            d["returnType"] = self.return_type
        return d


@dataclass
class Scope:
    name: str
    symbols: Dict[str, Symbol] = field(default_factory=dict)
    parent: Optional['Scope'] = field(default=None, repr=False, compare=False)

    def to_dict(self):
        return {
            "name": self.name,
            "symbols": {n: s.to_dict() for n, s in self.symbols.items()},
            "parent": self.parent.name if self.parent is not None else None,
        }


@dataclass
class SymbolTable:
    scopes: Dict[str, Scope] = field(default_factory=lambda: {GLOBAL_SCOPE: Scope(GLOBAL_SCOPE)})
    current_scope: str = GLOBAL_SCOPE

    @property
    def global_scope(self):
        return self.scopes[GLOBAL_SCOPE]

    @property
    def current(self):
        return self.scopes[self.current_scope]

    def lookup(self, name):
        """Current scope first, then global."""
        sym = self.current.symbols.get(name)
        if sym is None:
            sym = self.global_scope.symbols.get(name)
        return sym

    def to_dict(self):
        return {
            "scopes": {n: s.to_dict() for n, s in self.scopes.items()},
            "currentScope": self.current_scope,
        }


def type_compatible(expected, actual):
    """Equal types, or an int widened to float. Nothing else converts."""
    if expected == actual:
        return True
    if expected == FLOAT and actual == INT:
        return True
    return False


def is_numeric(typ):
    return typ in (INT, FLOAT)


def arithmetic_result(lt, rt):
    if lt == FLOAT or rt == FLOAT:
        return FLOAT
    return INT


class SemanticAnalyzer:
    def __init__(self):
        self.symbol_table = SymbolTable()
        self.errors = []
        # declared return type of the function being walked
        self.return_type = None
        self._duplicates = {}

    def analyze(self, node):
        self.visit(node)
        log.debug("analyzed %d scopes, %d errors", len(self.symbol_table.scopes), len(self.errors))
        return self.symbol_table, self.errors

    def error(self, msg, node):
        self.errors.append(SemanticError(msg, node.line, node.column))

    def check_assignable(self, expected, actual):
        """type_compatible, except that ``unknown`` never raises a second diagnostic."""
        return UNKNOWN in (expected, actual) or type_compatible(expected, actual)

    # ------------------------------------------------------------------
    # declarations and statements
    # ------------------------------------------------------------------
    def visit(self, node):
        if isinstance(node, Program):
            for fn in node.functions:
                self.visit(fn)
            return VOID
        if isinstance(node, FunctionDeclaration):
            self.visit_function(node)
            return VOID
        if isinstance(node, Block):
            for s in node.statements:
                self.visit(s)
            return VOID
        if isinstance(node, VariableDeclaration):
            self.declare(node.name, node.var_type, 'variable', node)
            if node.init_expr is not None:
                rtype = self.infer_expr_type(node.init_expr)
                if not self.check_assignable(node.var_type, rtype):
                    self.error(f"Cannot assign {rtype} to {node.var_type}", node)
            return VOID
        if isinstance(node, IfStatement):
            ct = self.infer_expr_type(node.cond)
            if ct not in (BOOL, UNKNOWN):
                self.error("If condition must be boolean", node.cond)
            self.visit(node.then_block)
            if node.else_block is not None:
                self.visit(node.else_block)
            return VOID
        if isinstance(node, WhileStatement):
            ct = self.infer_expr_type(node.cond)
            if ct not in (BOOL, UNKNOWN):
                self.error("While condition must be boolean", node.cond)
            self.visit(node.body)
            return VOID
        if isinstance(node, ReturnStatement):
            self.visit_return(node)
            return VOID
        if isinstance(node, ExpressionStatement):
            self.infer_expr_type(node.expr)
            return VOID
        return self.infer_expr_type(node)

    def visit_function(self, node):
        table = self.symbol_table
        params = [Symbol(p.name, p.param_type, 'parameter', p.line, p.column) for p in node.params]

        if node.name in table.global_scope.symbols:
            self.error(f"Function '{node.name}' already declared", node)
            n = self._duplicates.get(node.name, 1) + 1
            self._duplicates[node.name] = n
            scope_name = f"function_{node.name}#{n}"
        else:
            scope_name = f"function_{node.name}"
            table.global_scope.symbols[node.name] = Symbol(
                node.name, node.return_type, 'function', node.line, node.column,
                parameters=params, return_type=node.return_type)

        table.scopes[scope_name] = Scope(scope_name, parent=table.global_scope)

        prev_scope, prev_return = table.current_scope, self.return_type
        table.current_scope = scope_name
        self.return_type = node.return_type
        try:
            for p in node.params:
                self.declare(p.name, p.param_type, 'parameter', p)
            self.visit(node.body)
        finally:
            table.current_scope = prev_scope
            self.return_type = prev_return

    def declare(self, name, typ, kind, node):
        scope = self.symbol_table.current
        if name in scope.symbols:
            if kind == 'parameter':
                self.error(f"Parameter '{name}' already declared", node)
            else:
                self.error(f"Variable '{name}' already declared in this scope", node)
            return
        scope.symbols[name] = Symbol(name, typ, kind, node.line, node.column)

    def visit_return(self, node):
        if self.return_type is None:
            self.error("Return statement outside function", node)
            if node.expr is not None:
                self.infer_expr_type(node.expr)
            return
        expected = self.return_type
        if node.expr is not None:
            rtype = self.infer_expr_type(node.expr)
            if not self.check_assignable(expected, rtype):
                self.error(f"Function must return {expected}, got {rtype}", node)
        elif expected != VOID:
            self.error(f"Function must return {expected}", node)

    # ------------------------------------------------------------------
    # expressions
    # ------------------------------------------------------------------
    def infer_expr_type(self, expr):
        if isinstance(expr, IntegerLiteral):
            return INT
        if isinstance(expr, FloatLiteral):
            return FLOAT
        if isinstance(expr, BooleanLiteral):
            return BOOL
        if isinstance(expr, Identifier):
            sym = self.symbol_table.lookup(expr.name)
            if sym is None:
                self.error(f"Undefined identifier: {expr.name}", expr)
                return UNKNOWN
            if sym.kind == 'function':
                self.error(f"'{expr.name}' is a function, not a variable", expr)
                return UNKNOWN
            return sym.type
        if isinstance(expr, UnaryExpression):
            return self.infer_unary(expr)
        if isinstance(expr, BinaryExpression):
            return self.infer_binary(expr)
        if isinstance(expr, CallExpression):
            return self.infer_call(expr)
        if isinstance(expr, Assignment):
            return self.infer_assignment(expr)
        raise TypeError(f"cannot type-check {type(expr).__name__}")

    def infer_unary(self, expr):
        t = self.infer_expr_type(expr.operand)
        if expr.op == '-':
            if not is_numeric(t) and t != UNKNOWN:
                self.error(f"Unary minus requires numeric type, got {t}", expr)
            return t
        if expr.op == '!':
            if t not in (BOOL, UNKNOWN):
                self.error(f"Logical not requires boolean type, got {t}", expr)
            return BOOL
        self.error(f"Unknown unary operator: {expr.op}", expr)
        return UNKNOWN

    def infer_binary(self, expr):
        lt = self.infer_expr_type(expr.left)
        rt = self.infer_expr_type(expr.right)
        op = expr.op
        unresolved = UNKNOWN in (lt, rt)

        if op in ARITHMETIC_OPS:
            if unresolved:
                return UNKNOWN
            if not (is_numeric(lt) and is_numeric(rt)):
                self.error(f"Arithmetic operation requires numeric types, got {lt} and {rt}", expr)
            return arithmetic_result(lt, rt)
        if op in EQUALITY_OPS:
            if not unresolved and not (type_compatible(lt, rt) or type_compatible(rt, lt)):
                self.error(f"Comparison requires compatible types, got {lt} and {rt}", expr)
            return BOOL
        if op in RELATIONAL_OPS:
            if not unresolved and not (is_numeric(lt) and is_numeric(rt)):
                self.error(f"Comparison requires numeric types, got {lt} and {rt}", expr)
            return BOOL
        if op in LOGICAL_OPS:
            if not unresolved and not (lt == BOOL and rt == BOOL):
                self.error(f"Logical operation requires boolean types, got {lt} and {rt}", expr)
            return BOOL
        self.error(f"Unknown binary operator: {op}", expr)
        return UNKNOWN

    def infer_call(self, expr):
        callee = expr.callee
        sym = None
        if not isinstance(callee, Identifier):
            self.error("Can only call functions", expr)
        else:
            sym = self.symbol_table.lookup(callee.name)
            if sym is None:
                self.error(f"Undefined function: {callee.name}", callee)
            elif sym.kind != 'function':
                self.error(f"'{callee.name}' is not a function", callee)
                sym = None

        arg_types = [self.infer_expr_type(a) for a in expr.args]
        if sym is None:
            return UNKNOWN

        expected = sym.param_types
        if len(arg_types) != len(expected):
            self.error(f"Function '{sym.name}' expects {len(expected)} arguments, got {len(arg_types)}", expr)
        else:
            for i, (arg, want, got) in enumerate(zip(expr.args, expected, arg_types)):
                if not self.check_assignable(want, got):
                    self.error(f"Argument {i + 1} to '{sym.name}' must be {want}, got {got}", arg)
        return sym.return_type

    def infer_assignment(self, expr):
        name = expr.target.name
        sym = self.symbol_table.lookup(name)
        if sym is None:
            self.error(f"Undefined identifier: {name}", expr.target)
            ttype = UNKNOWN
        elif sym.kind == 'function':
            self.error(f"Cannot assign to function '{name}'", expr.target)
            ttype = UNKNOWN
        else:
            ttype = sym.type
        vtype = self.infer_expr_type(expr.expr)
        if not self.check_assignable(ttype, vtype):
            self.error(f"Cannot assign {vtype} to {ttype}", expr)
        return ttype


def analyze(program):
    """Walk ``program`` once; returns ``(symbol_table, errors)``."""
    return SemanticAnalyzer().analyze(program)

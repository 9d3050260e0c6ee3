"""Linearize a checked AST into three-address code.

Output is a list of instruction strings:

    FUNCTION <name>:            END_FUNCTION <name>
    <name> = <value>            DECLARE <name>
    IF_FALSE <value> GOTO <L>   GOTO <L>            <L>:
    RETURN [<value>]            PARAM <value>
    t<N> = <value> <op> <value> t<N> = <op><value>  t<N> = CALL <name>, <argc>
"""

import logging

from .nodes import (
    Assignment, BinaryExpression, Block, BooleanLiteral, CallExpression,
    ExpressionStatement, FloatLiteral, FunctionDeclaration, Identifier,
    IfStatement, IntegerLiteral, Program, ReturnStatement, UnaryExpression,
    VariableDeclaration, WhileStatement,
)

log = logging.getLogger(__name__)


class IRGenerator:
    """Only run over programs that passed every earlier phase without diagnostics."""

    def __init__(self):
        self.tac = []
        self.temp_count = 0
        self.label_count = 0

    def generate(self, program):
        self.tac = []
        self.temp_count = 0
        self.label_count = 0
        self.gen(program)
        log.debug("emitted %d instructions", len(self.tac))
        return self.tac

    def emit(self, instr):
        self.tac.append(instr)

    def new_temp(self):
        t = f"t{self.temp_count}"
        self.temp_count += 1
        return t

    def new_label(self):
        label = f"L{self.label_count}"
        self.label_count += 1
        return label

    def gen(self, node):
        if isinstance(node, Program):
            for fn in node.functions:
                self.gen(fn)
            return
        if isinstance(node, FunctionDeclaration):
            self.emit(f"FUNCTION {node.name}:")
            self.gen(node.body)
            self.emit(f"END_FUNCTION {node.name}")
            return
        if isinstance(node, Block):
            for s in node.statements:
                self.gen(s)
            return
        if isinstance(node, VariableDeclaration):
            if node.init_expr is not None:
                value = self.gen_expr(node.init_expr)
                self.emit(f"{node.name} = {value}")
            else:
                self.emit(f"DECLARE {node.name}")
            return
        if isinstance(node, IfStatement):
            cond = self.gen_expr(node.cond)
            if node.else_block is None:
                l_end = self.new_label()
                self.emit(f"IF_FALSE {cond} GOTO {l_end}")
                self.gen(node.then_block)
                self.emit(f"{l_end}:")
                return
            l_else = self.new_label()
            l_end = self.new_label()
            self.emit(f"IF_FALSE {cond} GOTO {l_else}")
            self.gen(node.then_block)
            self.emit(f"GOTO {l_end}")
            self.emit(f"{l_else}:")
            self.gen(node.else_block)
            self.emit(f"{l_end}:")
            return
        if isinstance(node, WhileStatement):
            l_start = self.new_label()
            l_end = self.new_label()
            self.emit(f"{l_start}:")
            cond = self.gen_expr(node.cond)
            self.emit(f"IF_FALSE {cond} GOTO {l_end}")
            self.gen(node.body)
            self.emit(f"GOTO {l_start}")
            self.emit(f"{l_end}:")
            return
        if isinstance(node, ReturnStatement):
            if node.expr is not None:
                self.emit(f"RETURN {self.gen_expr(node.expr)}")
            else:
                self.emit("RETURN")
            return
        if isinstance(node, ExpressionStatement):
            self.gen_expr(node.expr)
            return
        raise TypeError(f"no TAC lowering for {type(node).__name__}")

    def gen_expr(self, expr):
        """Emit code for ``expr``; returns the name or literal holding its value."""
        if isinstance(expr, (IntegerLiteral, FloatLiteral, BooleanLiteral)):
            return expr.value
        if isinstance(expr, Identifier):
            return expr.name
        if isinstance(expr, UnaryExpression):
            operand = self.gen_expr(expr.operand)
            dest = self.new_temp()
            self.emit(f"{dest} = {expr.op}{operand}")
            return dest
        if isinstance(expr, BinaryExpression):
            a = self.gen_expr(expr.left)
            b = self.gen_expr(expr.right)
            dest = self.new_temp()
            self.emit(f"{dest} = {a} {expr.op} {b}")
            return dest
        if isinstance(expr, CallExpression):
            args = [self.gen_expr(a) for a in expr.args]
            for a in args:
                self.emit(f"PARAM {a}")
            dest = self.new_temp()
            self.emit(f"{dest} = CALL {expr.callee.name}, {len(args)}")
            return dest
        if isinstance(expr, Assignment):
            value = self.gen_expr(expr.expr)
            self.emit(f"{expr.target.name} = {value}")
            return expr.target.name
        raise TypeError(f"no TAC lowering for {type(expr).__name__}")


def generate(program):
    return IRGenerator().generate(program)

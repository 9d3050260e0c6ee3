"""Recursive-descent parser with panic-mode recovery.

Expressions use one method per precedence level, loosest first:
assignment, ||, &&, equality, relational, additive, multiplicative,
unary, call, primary.
"""

import logging
from contextlib import contextmanager

from .diagnostics import ParseError
from .lexer import Token
from .nodes import (
    Assignment, BinaryExpression, Block, BooleanLiteral, CallExpression,
    ExpressionStatement, FloatLiteral, FunctionDeclaration, Identifier,
    IfStatement, IntegerLiteral, Parameter, Program, ReturnStatement,
    UnaryExpression, VariableDeclaration, WhileStatement,
)

log = logging.getLogger(__name__)

RETURN_TYPES = ('int', 'float', 'bool', 'void')
VALUE_TYPES = ('int', 'float', 'bool')
# keywords that may begin a statement, declaration or function
SYNC_KEYWORDS = ('int', 'float', 'bool', 'void', 'if', 'while', 'return')

# Keep the parser and the recursive tree walks after it inside the default
# recursion limit.
MAX_NESTING = 50
MAX_EXPRESSION_DEPTH = 200


class ParseFailure(Exception):
    """Unwinds to the nearest function or statement boundary."""


class Parser:
    def __init__(self, tokens):
        self.tokens = list(tokens)
        self.pos = 0
        self.errors = []
        self.nesting = 0
        self.depths = {}  # id(node) -> (node, depth) for compound expressions

    # ------------------------------------------------------------------
    # token helpers
    # ------------------------------------------------------------------
    def peek(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return Token('EOF', '', 0, 0)

    def previous(self):
        return self.tokens[self.pos - 1]

    def at_end(self):
        return self.peek().type == 'EOF'

    def advance(self):
        if not self.at_end():
            self.pos += 1
        return self.previous()

    def check(self, ttype):
        return not self.at_end() and self.peek().type == ttype

    def check_keyword(self, *words):
        tok = self.peek()
        return tok.type == 'KEYWORD' and tok.value in words

    def match(self, *ttypes):
        for ttype in ttypes:
            if self.check(ttype):
                self.advance()
                return True
        return False

    def expect(self, ttype, msg):
        if self.check(ttype):
            return self.advance()
        self.fail(msg, self.peek())

    def expect_keyword(self, words, msg):
        if self.check_keyword(*words):
            return self.advance()
        self.fail(msg, self.peek())

    def error(self, msg, tok):
        self.errors.append(ParseError(msg, tok.line, tok.column))

    def fail(self, msg, tok):
        self.error(msg, tok)
        raise ParseFailure(msg)

    def synchronize(self):
        self.advance()
        while not self.at_end():
            if self.previous().type == 'SEMICOLON':
                return
            if self.check_keyword(*SYNC_KEYWORDS):
                return
            self.advance()

    @contextmanager
    def nested(self, tok, what="Expression"):
        self.nesting += 1
        try:
            if self.nesting > MAX_NESTING:
                self.fail(f"{what} nested too deeply", tok)
            yield
        finally:
            self.nesting -= 1

    def nest(self, node, tok):
        """Record the depth of a new compound expression node."""
        depth = 1 + max((self.depths[id(c)][1] for c in node.children if id(c) in self.depths),
                        default=0)
        if depth > MAX_EXPRESSION_DEPTH:
            self.fail("Expression nested too deeply", tok)
        self.depths[id(node)] = (node, depth)
        return node

    # ------------------------------------------------------------------
    # declarations and statements
    # ------------------------------------------------------------------
    def parse(self):
        program = self.program()
        log.debug("parsed %d functions, %d errors", len(program.functions), len(self.errors))
        return program, self.errors

    def program(self):
        first = self.peek()
        functions = []
        while not self.at_end():
            try:
                functions.append(self.function())
            except ParseFailure:
                self.synchronize()
        return Program(tuple(functions), first.line, first.column)

    def function(self):
        type_tok = self.expect_keyword(RETURN_TYPES, "Expected return type")
        name_tok = self.expect('IDENTIFIER', "Expected function name")
        self.expect('LEFT_PAREN', 'Expected "(" after function name')
        params = self.parameters()
        self.expect('RIGHT_PAREN', 'Expected ")" after parameters')
        body = self.block()
        return FunctionDeclaration(type_tok.value, name_tok.value, params, body,
                                   type_tok.line, type_tok.column)

    def parameters(self):
        params = []
        if self.check('RIGHT_PAREN'):
            return ()
        while True:
            type_tok = self.expect_keyword(VALUE_TYPES, "Expected parameter type")
            name_tok = self.expect('IDENTIFIER', "Expected parameter name")
            params.append(Parameter(type_tok.value, name_tok.value, type_tok.line, type_tok.column))
            if not self.match('COMMA'):
                return tuple(params)

    def block(self):
        lbrace = self.expect('LEFT_BRACE', 'Expected "{"')
        stmts = []
        with self.nested(lbrace, "Block"):
            while not self.check('RIGHT_BRACE') and not self.at_end():
                try:
                    s = self.statement()
                except ParseFailure:
                    self.synchronize()
                    continue
                if s is not None:
                    stmts.append(s)
        self.expect('RIGHT_BRACE', 'Expected "}"')
        return Block(tuple(stmts), lbrace.line, lbrace.column)

    def statement(self):
        tok = self.peek()
        if tok.type == 'KEYWORD' and tok.value not in ('true', 'false'):
            self.advance()
            if tok.value in VALUE_TYPES:
                return self.var_decl(tok)
            if tok.value == 'if':
                return self.if_statement(tok)
            if tok.value == 'while':
                return self.while_statement(tok)
            if tok.value == 'return':
                return self.return_statement(tok)
            self.error(f"Unexpected keyword: {tok.value}", tok)
            return None
        expr = self.expression()
        self.expect('SEMICOLON', 'Expected ";" after expression')
        return ExpressionStatement(expr, tok.line, tok.column)

    def var_decl(self, type_tok):
        name_tok = self.expect('IDENTIFIER', "Expected variable name")
        init_expr = None
        if self.match('ASSIGN'):
            init_expr = self.expression()
        self.expect('SEMICOLON', 'Expected ";" after variable declaration')
        return VariableDeclaration(type_tok.value, name_tok.value, init_expr,
                                   type_tok.line, type_tok.column)

    def if_statement(self, kw):
        self.expect('LEFT_PAREN', 'Expected "(" after "if"')
        cond = self.expression()
        self.expect('RIGHT_PAREN', 'Expected ")" after if condition')
        then_block = self.block()
        else_block = None
        if self.check_keyword('else'):
            self.advance()
            else_block = self.block()
        return IfStatement(cond, then_block, else_block, kw.line, kw.column)

    def while_statement(self, kw):
        self.expect('LEFT_PAREN', 'Expected "(" after "while"')
        cond = self.expression()
        self.expect('RIGHT_PAREN', 'Expected ")" after while condition')
        body = self.block()
        return WhileStatement(cond, body, kw.line, kw.column)

    def return_statement(self, kw):
        expr = None
        if not self.check('SEMICOLON'):
            expr = self.expression()
        self.expect('SEMICOLON', 'Expected ";" after return value')
        return ReturnStatement(expr, kw.line, kw.column)

    # ------------------------------------------------------------------
    # expressions
    # ------------------------------------------------------------------
    def expression(self):
        return self.assignment()

    def assignment(self):
        node = self.logical_or()
        if self.match('ASSIGN'):
            eq = self.previous()
            with self.nested(eq):
                value = self.assignment()
            if not isinstance(node, Identifier):
                self.fail("Invalid assignment target", eq)
            return self.nest(Assignment(node, value, node.line, node.column), eq)
        return node

    def logical_or(self):
        node = self.logical_and()
        while self.match('LOGICAL_OR'):
            op = self.previous()
            right = self.logical_and()
            node = self.nest(BinaryExpression(op.value, node, right, op.line, op.column), op)
        return node

    def logical_and(self):
        node = self.equality()
        while self.match('LOGICAL_AND'):
            op = self.previous()
            right = self.equality()
            node = self.nest(BinaryExpression(op.value, node, right, op.line, op.column), op)
        return node

    def equality(self):
        node = self.relation()
        while self.match('EQUAL', 'NOT_EQUAL'):
            op = self.previous()
            right = self.relation()
            node = self.nest(BinaryExpression(op.value, node, right, op.line, op.column), op)
        return node

    def relation(self):
        node = self.additive()
        while self.match('LESS_THAN', 'GREATER_THAN', 'LESS_EQUAL', 'GREATER_EQUAL'):
            op = self.previous()
            right = self.additive()
            node = self.nest(BinaryExpression(op.value, node, right, op.line, op.column), op)
        return node

    def additive(self):
        node = self.multiplicative()
        while self.match('PLUS', 'MINUS'):
            op = self.previous()
            right = self.multiplicative()
            node = self.nest(BinaryExpression(op.value, node, right, op.line, op.column), op)
        return node

    def multiplicative(self):
        node = self.unary()
        while self.match('MULTIPLY', 'DIVIDE'):
            op = self.previous()
            right = self.unary()
            node = self.nest(BinaryExpression(op.value, node, right, op.line, op.column), op)
        return node

    def unary(self):
        # prefix operators are right-nested: -!x is -(!x)
        ops = []
        while self.match('LOGICAL_NOT', 'MINUS'):
            ops.append(self.previous())
        node = self.call()
        for op in reversed(ops):
            node = self.nest(UnaryExpression(op.value, node, op.line, op.column), op)
        return node

    def call(self):
        node = self.primary()
        while self.match('LEFT_PAREN'):
            node = self.finish_call(node, self.previous())
        return node

    def finish_call(self, callee, lparen):
        args = []
        with self.nested(lparen):
            if not self.check('RIGHT_PAREN'):
                args.append(self.expression())
                while self.match('COMMA'):
                    args.append(self.expression())
        self.expect('RIGHT_PAREN', 'Expected ")" after arguments')
        return self.nest(CallExpression(callee, tuple(args), callee.line, callee.column), lparen)

    def primary(self):
        tok = self.peek()
        if self.check_keyword('true', 'false'):
            self.advance()
            return BooleanLiteral(tok.value, tok.line, tok.column)
        if self.match('INT_LITERAL'):
            return IntegerLiteral(tok.value, tok.line, tok.column)
        if self.match('FLOAT_LITERAL'):
            return FloatLiteral(tok.value, tok.line, tok.column)
        if self.match('IDENTIFIER'):
            return Identifier(tok.value, tok.line, tok.column)
        if self.match('LEFT_PAREN'):
            with self.nested(tok):
                node = self.expression()
            self.expect('RIGHT_PAREN', 'Expected ")" after expression')
            return node
        self.fail("Expected expression", tok)


def parse(tokens):
    """Parse a token list; returns ``(program, errors)``."""
    return Parser(tokens).parse()

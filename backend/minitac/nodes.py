"""AST node kinds.

One frozen dataclass per kind. Besides its named fields every node answers the
generic view used by the presentation layer: ``kind``, ``value``, ``data_type``
and ``children`` (in the per-kind order the later phases rely on).
"""

from dataclasses import dataclass
from typing import Optional, Tuple


class Node:
    value = None
    data_type = None

    @property
    def kind(self):
        return type(self).__name__

    @property
    def children(self):
        return ()


@dataclass(frozen=True)
class Identifier(Node):
    name: str
    line: int = 0
    column: int = 0

    @property
    def value(self):
        return self.name


@dataclass(frozen=True)
class IntegerLiteral(Node):
    value: str
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class FloatLiteral(Node):
    value: str
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class BooleanLiteral(Node):
    value: str  # 'true' | 'false'
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class UnaryExpression(Node):
    op: str
    operand: Node
    line: int = 0
    column: int = 0

    @property
    def value(self):
        return self.op

    @property
    def children(self):
        return (self.operand,)


@dataclass(frozen=True)
class BinaryExpression(Node):
    op: str
    left: Node
    right: Node
    line: int = 0
    column: int = 0

    @property
    def value(self):
        return self.op

    @property
    def children(self):
        return (self.left, self.right)


@dataclass(frozen=True)
class CallExpression(Node):
    callee: Node
    args: Tuple[Node, ...]
    line: int = 0
    column: int = 0

    @property
    def children(self):
        return (self.callee,) + self.args


@dataclass(frozen=True)
class Assignment(Node):
    target: Identifier
    expr: Node
    line: int = 0
    column: int = 0

    @property
    def value(self):
        return self.target.name

    @property
    def children(self):
        return (self.target, self.expr)


@dataclass(frozen=True)
class ExpressionStatement(Node):
    expr: Node
    line: int = 0
    column: int = 0

    @property
    def children(self):
        return (self.expr,)


@dataclass(frozen=True)
class VariableDeclaration(Node):
    var_type: str
    name: str
    init_expr: Optional[Node] = None
    line: int = 0
    column: int = 0

    @property
    def value(self):
        return self.name

    @property
    def data_type(self):
        return self.var_type

    @property
    def children(self):
        return (self.init_expr,) if self.init_expr is not None else ()


@dataclass(frozen=True)
class Block(Node):
    statements: Tuple[Node, ...]
    line: int = 0
    column: int = 0

    @property
    def children(self):
        return self.statements


@dataclass(frozen=True)
class IfStatement(Node):
    cond: Node
    then_block: Block
    else_block: Optional[Block] = None
    line: int = 0
    column: int = 0

    @property
    def children(self):
        if self.else_block is None:
            return (self.cond, self.then_block)
        return (self.cond, self.then_block, self.else_block)


@dataclass(frozen=True)
class WhileStatement(Node):
    cond: Node
    body: Block
    line: int = 0
    column: int = 0

    @property
    def children(self):
        return (self.cond, self.body)


@dataclass(frozen=True)
class ReturnStatement(Node):
    expr: Optional[Node] = None
    line: int = 0
    column: int = 0

    @property
    def children(self):
        return (self.expr,) if self.expr is not None else ()


@dataclass(frozen=True)
class Parameter(Node):
    param_type: str
    name: str
    line: int = 0
    column: int = 0

    @property
    def value(self):
        return self.name

    @property
    def data_type(self):
        return self.param_type


@dataclass(frozen=True)
class ParameterList(Node):
    params: Tuple[Parameter, ...]
    line: int = 0
    column: int = 0

    @property
    def children(self):
        return self.params


@dataclass(frozen=True)
class FunctionDeclaration(Node):
    return_type: str
    name: str
    params: Tuple[Parameter, ...]
    body: Block
    line: int = 0
    column: int = 0

    @property
    def value(self):
        return self.name

    @property
    def data_type(self):
        return self.return_type

    @property
    def children(self):
        return (ParameterList(self.params, self.line, self.column), self.body)


@dataclass(frozen=True)
class Program(Node):
    functions: Tuple[FunctionDeclaration, ...]
    line: int = 0
    column: int = 0

    @property
    def children(self):
        return self.functions

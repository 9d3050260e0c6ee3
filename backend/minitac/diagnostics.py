"""Diagnostic records shared by the lexer, parser and semantic analyzer.

Diagnostics are plain data: every phase collects them in a list and hands the
list back to the caller instead of raising.
"""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Diagnostic:
    message: str
    line: int
    column: int

    phase = "Compile"

    def to_dict(self):
        d = asdict(self)
        d["phase"] = self.phase
        return d

    def __str__(self):
        return f"{self.phase} error (line {self.line}, column {self.column}): {self.message}"


@dataclass(frozen=True)
class LexicalError(Diagnostic):
    phase = "Lexical"


@dataclass(frozen=True)
class ParseError(Diagnostic):
    phase = "Syntax"


@dataclass(frozen=True)
class SemanticError(Diagnostic):
    phase = "Semantic"

"""End-to-end tests for compile_source and its phase gating."""

import json
import logging

import pytest

from minitac import compile_source
from minitac.compiler import PipelineResult
from minitac.diagnostics import ParseError, SemanticError
from minitac.irgen import IRGenerator
from minitac.semantic import SemanticAnalyzer

PROGRAMS = [
    "",
    "int main() { return 0; }",
    "int f(int a, int b){ return a+b; }",
    "int main() { int i = 0; while (i < 10) { if (i == 5) { i = i + 2; } else { i = i + 1; } } return i; }",
    "bool even(int n) { if (n == 0) { return true; } return !even(n - 1); }"
    "void tick() { return; }"
    "int main() { float x = 1; while (x < 100.0 && even(3)) { x = x * 2; tick(); } return 0; }",
    "int main() { int a; int b = -a; if (!(a != b) || a >= b) { a = b = 7; } return a / 2; }",
]

BROKEN = [
    "int main() { return 0 @ }",
    "int main() { return 0 }",
    "int main() { return x; }",
    "\n\n   #",
]


def jump_targets(instructions):
    return [i.split()[-1] for i in instructions if i.startswith(("GOTO ", "IF_FALSE "))]


def label_defs(instructions):
    return [i[:-1] for i in instructions if i.endswith(":") and not i.startswith("FUNCTION ")]


def test_scenario_a_clean_program():
    result = compile_source("int main() { return 0; }")
    assert result.lexical_errors == []
    assert result.parse_errors == []
    assert result.semantic_errors == []
    assert result.instructions == ["FUNCTION main:", "RETURN 0", "END_FUNCTION main"]
    assert result.succeeded


def test_scenario_b_undefined_identifier_blocks_ir():
    result = compile_source("int main(){ return x; }")
    assert result.semantic_errors == [SemanticError("Undefined identifier: x", 1, 20)]
    assert result.instructions == []
    assert result.symbol_table is not None
    assert not result.succeeded


def test_scenario_c_binary_add():
    result = compile_source("int f(int a, int b){ return a+b; }")
    assert result.errors == []
    i = result.instructions.index("t0 = a + b")
    assert result.instructions[i + 1] == "RETURN t0"


def test_scenario_d_redeclaration():
    result = compile_source("int main(){ int x = 1; int x = 2; return 0; }")
    assert len(result.semantic_errors) == 1
    assert "x" in result.semantic_errors[0].message
    assert result.symbol_table.scopes["function_main"].symbols["x"].type == "int"
    assert result.instructions == []


@pytest.mark.parametrize("source,count", [
    ("int main() { if (true) { } return 0; }", 1),
    ("int main() { if (true) { } else { } return 0; }", 2),
])
def test_scenario_e_label_count(source, count):
    result = compile_source(source)
    assert len(label_defs(result.instructions)) == count


def test_lexical_error_skips_later_phases():
    result = compile_source("int main() { return 0 @ }")
    assert [e.message for e in result.lexical_errors] == ["Invalid character: @"]
    assert result.tokens[-1].type == "EOF"
    assert result.ast is None
    assert result.parse_errors == []
    assert result.symbol_table is None
    assert result.semantic_errors == []
    assert result.instructions == []


def test_parse_error_skips_later_phases():
    result = compile_source("int main() { return 0 }")
    assert result.parse_errors
    assert result.ast is not None
    assert result.symbol_table is None
    assert result.instructions == []


def test_errors_are_listed_in_phase_order():
    result = compile_source("int main() { int x = true; return y; }")
    assert [str(e) for e in result.errors] == [
        "Semantic error (line 1, column 14): Cannot assign bool to int",
        "Semantic error (line 1, column 35): Undefined identifier: y",
    ]


@pytest.mark.parametrize("source", PROGRAMS + BROKEN)
def test_token_stream_always_ends_with_eof(source):
    tokens = compile_source(source).tokens
    assert tokens
    assert tokens[-1].type == "EOF"
    assert [t.type for t in tokens].count("EOF") == 1


@pytest.mark.parametrize("source", PROGRAMS)
def test_well_formed_output_is_balanced(source):
    result = compile_source(source)
    assert result.errors == []
    instrs = result.instructions
    starts = [i for i in instrs if i.startswith("FUNCTION ")]
    ends = [i for i in instrs if i.startswith("END_FUNCTION ")]
    assert len(starts) == len(ends)
    defs = label_defs(instrs)
    for target in jump_targets(instrs):
        assert defs.count(target) == 1


@pytest.mark.parametrize("source", PROGRAMS + BROKEN)
def test_two_compilations_are_identical(source):
    first = compile_source(source)
    second = compile_source(source)
    assert first.tokens == second.tokens
    assert first.ast == second.ast
    assert first.instructions == second.instructions
    assert first.errors == second.errors
    assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())


def test_numbering_restarts_for_every_compilation():
    src = "int f(int a) { while (a > 0) { a = a - 1; } return a; }"
    compile_source("int g(int b) { if (b < 1) { } else { } return b * b; }")
    result = compile_source(src)
    assert result.instructions[1] == "L0:"
    assert result.instructions[2] == "t0 = a > 0"


def test_to_dict_is_json_safe():
    result = compile_source("int f(int a) { return a; } int main() { return f(2); }")
    d = json.loads(json.dumps(result.to_dict()))
    assert d["tokens"][0] == {"type": "KEYWORD", "value": "int", "line": 1, "column": 1}
    assert d["ast"]["type"] == "Program"
    fn = d["ast"]["children"][0]
    assert fn["value"] == "f" and fn["dataType"] == "int"
    assert fn["children"][0]["type"] == "ParameterList"
    assert (fn["children"][0]["line"], fn["children"][0]["column"]) == (1, 1)
    assert d["symbolTable"]["scopes"]["global"]["symbols"]["main"]["kind"] == "function"
    assert d["instructions"][-1] == "END_FUNCTION main"


def test_to_dict_for_skipped_phases():
    d = compile_source("$").to_dict()
    assert d["ast"] is None
    assert d["symbolTable"] is None
    assert d["lexicalErrors"] == [
        {"message": "Invalid character: $", "line": 1, "column": 1, "phase": "Lexical"}]


def test_verbose_logs_each_phase(caplog):
    with caplog.at_level(logging.INFO, logger="minitac.compiler"):
        compile_source("int main() { return 0; }", verbose=True)
    text = caplog.text
    assert "lexer: 10 tokens" in text
    assert "parser: 1 functions" in text
    assert "irgen: 3 instructions" in text


def test_quiet_by_default(caplog):
    with caplog.at_level(logging.INFO, logger="minitac.compiler"):
        compile_source("int main() { return 0; }")
    assert caplog.records == []


def deep_return(expr):
    return "int main() { return " + expr + "; }"


PATHOLOGICAL = [
    deep_return("(" * 40 + "1" + ")" * 40),
    deep_return("(" * 120 + "1" + ")" * 120),
    deep_return("+".join(["1"] * 150)),
    deep_return("+".join(["1"] * 600)),
    deep_return("-".join(["1"] * 5000)),
    deep_return("-" * 100 + "1"),
    deep_return("-" * 3000 + "1"),
    "bool main() { return " + "!" * 400 + "true; }",
    "int main() { int a; " + "a = " * 300 + "1; return a; }",
    "int main() { " + "if (true) { " * 80 + "}" * 80 + " return 0; }",
    "int f(int a) { return a; } int main() { return " + "f(" * 100 + "1" + ")" * 100 + "; }",
]


@pytest.mark.parametrize("source", PATHOLOGICAL)
def test_deep_input_still_yields_a_result(source):
    result = compile_source(source)
    assert isinstance(result, PipelineResult)
    if result.errors:
        assert result.instructions == []
    else:
        assert result.instructions[-1] == "END_FUNCTION main"
    json.dumps(result.to_dict())


def test_long_sum_within_limit_compiles():
    result = compile_source(deep_return("+".join(["1"] * 150)))
    assert result.errors == []
    assert result.instructions[-2:] == ["RETURN t148", "END_FUNCTION main"]


def test_long_sum_past_limit_is_a_parse_error():
    result = compile_source(deep_return("+".join(["1"] * 600)))
    assert result.parse_errors == [ParseError("Expression nested too deeply", 1, 422)]
    assert result.symbol_table is None


def test_deep_parentheses_are_a_parse_error():
    result = compile_source(deep_return("(" * 120 + "1" + ")" * 120))
    assert result.parse_errors == [ParseError("Expression nested too deeply", 1, 70)]


def test_recursion_in_analyzer_becomes_a_diagnostic(monkeypatch):
    def overflow(self, node):
        raise RecursionError("maximum recursion depth exceeded")

    monkeypatch.setattr(SemanticAnalyzer, "analyze", overflow)
    result = compile_source("int main() { return 0; }")
    assert result.semantic_errors == [SemanticError("Program nested too deeply", 1, 1)]
    assert result.symbol_table is not None
    assert result.instructions == []


def test_recursion_in_generator_becomes_a_diagnostic(monkeypatch):
    def overflow(self, program):
        raise RecursionError("maximum recursion depth exceeded")

    monkeypatch.setattr(IRGenerator, "generate", overflow)
    result = compile_source("int main() { return 0; }")
    assert result.semantic_errors == [SemanticError("Program nested too deeply", 1, 1)]
    assert result.instructions == []

"""Tests for the command line entry point."""

import io

from minitac.compiler import main


def run(argv, stdin=None, monkeypatch=None):
    out, err = io.StringIO(), io.StringIO()
    if stdin is not None:
        monkeypatch.setattr("sys.stdin", io.StringIO(stdin))
    code = main(argv, stdout=out, stderr=err)
    return code, out.getvalue(), err.getvalue()


def test_compiles_file(tmp_path):
    src = tmp_path / "prog.mc"
    src.write_text("int main() { return 0; }", encoding="utf-8")
    code, out, err = run([str(src)])
    assert code == 0
    assert out.splitlines() == ["FUNCTION main:", "RETURN 0", "END_FUNCTION main"]
    assert err == ""


def test_reads_stdin(monkeypatch):
    code, out, _ = run([], stdin="int f(int a, int b){ return a+b; }", monkeypatch=monkeypatch)
    assert code == 0
    assert "t0 = a + b" in out.splitlines()


def test_diagnostics_go_to_stderr(tmp_path):
    src = tmp_path / "bad.mc"
    src.write_text("int main(){ return x; }", encoding="utf-8")
    code, out, err = run([str(src)])
    assert code == 1
    assert out == ""
    assert err.strip() == "Semantic error (line 1, column 20): Undefined identifier: x"


def test_missing_file(tmp_path):
    code, _, err = run([str(tmp_path / "nope.mc")])
    assert code == 2
    assert "cannot read input" in err


def test_dump_options(tmp_path):
    src = tmp_path / "prog.mc"
    src.write_text("int add(int a, int b) { return a + b; }", encoding="utf-8")
    code, out, _ = run([str(src), "--tokens", "--ast", "--symbols"])
    assert code == 0
    lines = out.splitlines()
    assert lines[0] == "1:1\tKEYWORD\tint"
    assert "FunctionDeclaration (add) : int" in [l.strip() for l in lines]
    assert "[function_add] (parent: global)" in lines
    assert any(l.split() == ["add", "function", "int", "(int,", "int)"] for l in lines)
    assert lines[-1] == "END_FUNCTION add"

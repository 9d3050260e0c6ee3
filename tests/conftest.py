"""Shared fixtures for the minitac test suite."""

import pytest

from minitac.lexer import tokenize
from minitac.parser import parse
from minitac.semantic import analyze


def parse_src(source):
    tokens, lex_errors = tokenize(source)
    assert lex_errors == []
    return parse(tokens)


def analyze_src(source):
    program, parse_errors = parse_src(source)
    assert parse_errors == []
    return analyze(program)


def messages(errors):
    return [e.message for e in errors]


@pytest.fixture
def client():
    from minitac.app import app

    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c

"""Tests for the command-line driver."""

import pytest

from symkernel.cli import list_builtins, main


def run_main(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def test_evaluates_expression(capsys):
    assert run_main(['-e', '1 + 2 * 3']) == 0
    assert capsys.readouterr().out == "7\n"


def test_evaluates_file(tmp_path, capsys):
    source = tmp_path / "program.ys"
    source.write_text('x := 2;\nWriteString("x is ");\nx ^ 3\n')
    assert run_main([str(source)]) == 0
    assert capsys.readouterr().out == "x is 8\n"


def test_tokens(capsys):
    assert run_main(['--tokens', '-e', 'a+1']) == 0
    out = capsys.readouterr().out
    assert "Token(ATOM, 'a', 1:1)" in out
    assert "Token(OPERATOR, '+', 1:2)" in out
    assert "Token(EOF" in out


def test_parse(capsys):
    assert run_main(['--parse', '-e', '(a+b)*c; f(1)']) == 0
    assert capsys.readouterr().out == "(a + b) * c\nf(1)\n"


def test_list_builtins(capsys):
    assert run_main(['--list-builtins']) == 0
    out = capsys.readouterr().out
    assert out.splitlines()[0].startswith("MathAdd")
    assert "Prog" in out


def test_syntax_error_reports_location(capsys):
    assert run_main(['-e', '1 +']) == 1
    err = capsys.readouterr().err
    assert "Error: <expression>:1:4: Unexpected end of input" in err


def test_evaluation_error_is_reported(capsys):
    assert run_main(['-e', 'Sub(1, 2)']) == 1
    assert "no such operation: 'Sub'" in capsys.readouterr().err


def test_power_without_real_value_is_reported(capsys):
    assert run_main(['-e', '(-8) ^ 0.5']) == 1
    assert "no real value" in capsys.readouterr().err


def test_missing_input():
    assert run_main([]) == 2


def test_list_builtins_marks_variadic_and_macro(registry):
    lines = {line.split()[0]: line for line in list_builtins(registry).splitlines()}
    assert lines['MathAdd'].split()[1:] == ['2']
    assert lines['Prog'].split()[1:] == ['0+', 'macro']
    assert lines['If'].split()[1:] == ['2-3', 'macro']

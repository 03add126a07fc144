"""
Evaluator and end-to-end tests for StrLang
"""

import pytest
from parsing import tokenize, parse, Declaration, Print
from interpreter import (
  Environment, Evaluator, run, create_interpreter, create_debug_interpreter
)
from error_handling import LexError, ParseError, UndefinedVariable


class TestEnvironment:
  """Test the run-scoped variable store"""

  def test_set_then_get(self):
    """Test set then get"""
    env = Environment()
    env.set("a", "x")
    assert env.get("a") == "x"
    assert "a" in env
    assert len(env) == 1

  def test_last_write_wins(self):
    """Test last write wins"""
    env = Environment()
    env.set("a", "x")
    env.set("a", "y")
    assert env.get("a") == "y"
    assert len(env) == 1

  def test_get_missing_name(self):
    """Test get missing name"""
    with pytest.raises(UndefinedVariable) as exc_info:
      Environment().get("nope")
    assert exc_info.value.name == "nope"

  def test_lookup_is_exact(self):
    """Test lookup is exact"""
    env = Environment()
    env.set("Name", "x")
    with pytest.raises(UndefinedVariable):
      env.get("name")

  def test_items_snapshot(self):
    """Test items snapshot"""
    env = Environment()
    env.set("b", "2")
    env.set("a", "1")
    assert env.items() == [("a", "1"), ("b", "2")]
    assert env.names() == ["a", "b"]
    assert sorted(env) == ["a", "b"]


class TestEvaluator:
  """Test statement execution"""

  def test_declaration_only_mutates_environment(self):
    """Test declaration only mutates environment"""
    evaluator = create_interpreter()
    assert evaluator.run([Declaration("a", "x")]) == []
    assert evaluator.env.get("a") == "x"

  def test_print_emits_value_not_name(self):
    """Test print emits value not name"""
    evaluator = create_interpreter()
    assert evaluator.run([Declaration("my_var", "hello"), Print("my_var")]) == ["hello"]

  def test_write_callback_sees_lines_in_order(self):
    """Test write callback sees lines in order"""
    written = []
    Evaluator(write=written.append).run(
      [Declaration("a", "1"), Print("a"), Declaration("a", "2"), Print("a")]
    )
    assert written == ["1", "2"]

  def test_environment_is_passed_in(self):
    """Test environment is passed in"""
    env = Environment()
    env.set("a", "preset")
    assert Evaluator(env).run([Print("a")]) == ["preset"]

  def test_undefined_variable_stops_the_run(self):
    """Test undefined variable stops the run"""
    written = []
    program = parse(tokenize(
      'a = string("one"); print(a); print(b); print(a);'
    ))
    with pytest.raises(UndefinedVariable) as exc_info:
      Evaluator(write=written.append).run(program)
    assert exc_info.value.name == "b"
    assert exc_info.value.output == ["one"]
    assert exc_info.value.span.column == 36
    assert written == ["one"]

  def test_statements_after_failure_do_not_run(self):
    """Test statements after failure do not run"""
    evaluator = create_interpreter()
    with pytest.raises(UndefinedVariable):
      evaluator.run([Print("missing"), Declaration("a", "x")])
    assert "a" not in evaluator.env

  def test_unknown_statement(self):
    """Test unknown statement"""
    with pytest.raises(TypeError):
      create_interpreter().run(["not a statement"])

  def test_debug_trace_goes_to_stderr(self, capsys):
    """Test debug trace goes to stderr"""
    create_debug_interpreter().run([Declaration("a", "x"), Print("a")])
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[eval]" in captured.err


class TestRun:
  """Whole pipeline: source text in, printed lines out"""

  def test_hello_world(self):
    """Test hello world"""
    source = 'greeting = string("hello world"); print(greeting);'
    assert run(source) == ["hello world"]

  def test_two_variables(self):
    """Test two variables"""
    source = 'a = string("one"); b = string("two"); print(a); print(b); print(a);'
    assert run(source) == ["one", "two", "one"]

  def test_redeclaration(self):
    """Test redeclaration"""
    assert run('a = string("x"); a = string("y"); print(a);') == ["y"]

  def test_print_sees_value_at_that_point(self):
    """Test print sees value at that point"""
    source = 'a = string("x"); print(a); a = string("y"); print(a);'
    assert run(source) == ["x", "y"]

  def test_original_example(self):
    """Test original example"""
    source = 'my_var = string("this is a string");\nprint(my_var);\n'
    assert run(source) == ["this is a string"]

  def test_empty_program(self):
    """Test empty program"""
    assert run("") == []

  def test_undeclared_first_statement(self):
    """Test undeclared first statement"""
    written = []
    with pytest.raises(UndefinedVariable) as exc_info:
      run("print(a);", write=written.append)
    assert exc_info.value.output == []
    assert written == []

  def test_parse_error_never_reaches_evaluator(self):
    """Test parse error never reaches evaluator"""
    written = []
    with pytest.raises(ParseError):
      run('a = string("x"); print(a); a = string("x";', write=written.append)
    assert written == []

  def test_lex_error_before_parsing(self):
    """Test lex error before parsing"""
    with pytest.raises(LexError):
      run('a = string("x);')

  def test_lex_error_wins_over_later_parse_error(self):
    """Test lex error wins over later parse error"""
    with pytest.raises(LexError):
      run('print a; "unterminated')

  def test_runs_are_independent(self):
    """Test runs are independent"""
    source = 'a = string("x"); print(a);'
    assert run(source) == run(source) == ["x"]
    with pytest.raises(UndefinedVariable):
      run("print(a);")

  def test_shared_environment_when_given(self):
    """Test shared environment when given"""
    env = Environment()
    run('a = string("kept");', env=env)
    assert run("print(a);", env=env) == ["kept"]

  def test_filename_in_error_span(self):
    """Test filename in error span"""
    with pytest.raises(UndefinedVariable) as exc_info:
      run("print(a);", filename="prog.str")
    assert str(exc_info.value.span) == "prog.str:1:7"

"""
StrLang Interpreter
Walks the statement list once, threading a single Environment through it
"""

from typing import Callable, Dict, Iterator, List, Optional, Tuple
import sys

from error_handling import UndefinedVariable
from parsing import Declaration, Print, Statement, create_parser, tokenize


# ============================================================================
# ENVIRONMENT
# ============================================================================

class Environment:
  """Variable name -> string value for one run (or one REPL session)"""

  def __init__(self):
    self._bindings: Dict[str, str] = {}

  def set(self, name: str, value: str) -> None:
    self._bindings[name] = value

  def get(self, name: str) -> str:
    try:
      return self._bindings[name]
    except KeyError:
      raise UndefinedVariable(name) from None

  def __contains__(self, name: str) -> bool:
    return name in self._bindings

  def __len__(self) -> int:
    return len(self._bindings)

  def __iter__(self) -> Iterator[str]:
    return iter(self._bindings)

  def names(self) -> List[str]:
    """Snapshot of the declared names, sorted"""
    return sorted(self._bindings)

  def items(self) -> List[Tuple[str, str]]:
    """Snapshot of the bindings, sorted by name"""
    return sorted(self._bindings.items())


# ============================================================================
# EVALUATOR
# ============================================================================

class Evaluator:
  """
  Executes statements strictly in order.
  Output lines are passed to `write` as they are produced and also returned.
  The first UndefinedVariable stops the run; it carries the lines printed so far.
  """

  def __init__(self, env: Optional[Environment] = None,
               write: Optional[Callable[[str], None]] = None,
               debug: bool = False):
    self.env = env if env is not None else Environment()
    self.write = write
    self.debug = debug

  def run(self, program: List[Statement]) -> List[str]:
    output: List[str] = []

    for stmt in program:
      if isinstance(stmt, Declaration):
        self.env.set(stmt.name, stmt.literal)
        if self.debug:
          print(f"[eval] {stmt.name} := {stmt.literal!r}", file=sys.stderr)
      elif isinstance(stmt, Print):
        try:
          value = self.env.get(stmt.name)
        except UndefinedVariable as e:
          raise UndefinedVariable(e.name, stmt.span, output) from None
        if self.debug:
          print(f"[eval] print {stmt.name}", file=sys.stderr)
        output.append(value)
        if self.write is not None:
          self.write(value)
      else:
        raise TypeError(f"Unknown statement: {stmt!r}")

    return output


# ============================================================================
# PIPELINE
# ============================================================================

def run(source: str, filename: str = "<input>",
        write: Optional[Callable[[str], None]] = None,
        env: Optional[Environment] = None,
        debug: bool = False) -> List[str]:
  """
  Lex, parse and evaluate `source`, returning the printed lines.
  A fresh Environment is used unless one is passed in.
  """
  if debug:
    print(f"[run] tokenizing {filename}", file=sys.stderr)
  tokens = tokenize(source, filename)

  if debug:
    print(f"[run] parsing {len(tokens)} tokens", file=sys.stderr)
  program = create_parser(debug).parse(tokens)

  if debug:
    print(f"[run] evaluating {len(program)} statements", file=sys.stderr)
  return Evaluator(env, write, debug).run(program)


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(write: Optional[Callable[[str], None]] = None,
                       debug: bool = False) -> Evaluator:
  """Factory function returning an evaluator with a fresh environment"""
  return Evaluator(Environment(), write, debug)


def create_debug_interpreter(write: Optional[Callable[[str], None]] = None) -> Evaluator:
  """Factory function returning a debug evaluator"""
  return create_interpreter(write, debug=True)

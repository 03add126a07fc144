"""
StrLang - Main Entry Point
A minimal string-only language: declare with string("..."), output with print(...)
"""

import sys
import argparse
import os
from typing import List, Optional

# Readline support for history
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from error_handling import StrLangError, StrLangErrorHandler
from parsing import create_parser, pretty_print_program, tokenize
from interpreter import Environment, Evaluator, run

VERSION = "StrLang v0.1.0"
PROMPT = "str> "


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='strlang',
      description='StrLang - a minimal string-only interpreted language',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.str            # Run a StrLang script
  %(prog)s -i                    # Interactive mode
  %(prog)s --tokens script.str   # Tokenize file and show tokens
  %(prog)s --parse script.str    # Parse file and show statements
  %(prog)s --debug script.str    # Run with stage tracing on stderr
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='StrLang script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--tokens',
      action='store_true',
      help='Tokenize file and show tokens (for debugging)'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show statements (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def read_source(script_path: str) -> str:
  """Read a whole script file, exiting with status 1 if it cannot be read"""
  try:
    with open(script_path, 'r', encoding='utf-8') as f:
      return f.read()
  except FileNotFoundError:
    print(f"Failed to open the file '{script_path}'", file=sys.stderr)
    print(f"  Hint: Check the file path and make sure the file exists", file=sys.stderr)
  except PermissionError:
    print(f"Failed to open the file '{script_path}': permission denied", file=sys.stderr)
  except IsADirectoryError:
    print(f"Failed to open the file '{script_path}': is a directory", file=sys.stderr)
  except UnicodeDecodeError as e:
    print(f"Failed to read the file '{script_path}': {e}", file=sys.stderr)
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding", file=sys.stderr)
  except OSError as e:
    print(f"Failed to read the file '{script_path}': {e.strerror}", file=sys.stderr)
  sys.exit(1)


def report_error(error: StrLangError, source: str, script_path: str) -> None:
  handler = StrLangErrorHandler(source, script_path)
  print(handler.format(error), file=sys.stderr)


def tokens_file(script_path: str) -> None:
  """Tokenize a script file and show the tokens"""
  source = read_source(script_path)
  try:
    tokens = tokenize(source, script_path)
  except StrLangError as e:
    report_error(e, source, script_path)
    sys.exit(1)

  for token in tokens:
    print(f"{str(token.span):<24} {token}")


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse a script file and show the statements"""
  source = read_source(script_path)
  try:
    program = create_parser(debug).parse(tokenize(source, script_path))
  except StrLangError as e:
    report_error(e, source, script_path)
    sys.exit(1)

  print(f"Parsed {len(program)} statements:")
  print("=" * 50)
  print(pretty_print_program(program), end='')


def run_script_file(script_path: str, debug: bool = False) -> None:
  """Run a script file, printing each output line as it is produced"""
  source = read_source(script_path)
  try:
    run(source, script_path, write=print, debug=debug)
  except StrLangError as e:
    report_error(e, source, script_path)
    sys.exit(1)
  except Exception as e:
    print(f"Unexpected error while executing '{script_path}': {e}", file=sys.stderr)
    if debug:
      import traceback
      traceback.print_exc()
    sys.exit(1)


# ============================================================================
# INTERACTIVE MODE
# ============================================================================

class ReplSession:
  """State of one interactive session; owns the session environment"""

  def __init__(self, debug: bool = False):
    self.debug = debug
    self.env = Environment()

  def reset(self) -> None:
    self.env = Environment()

  def execute(self, code: str) -> bool:
    """Handle one line of input. Returns False when the session should end"""
    code = code.strip()

    if code == "exit":
      return False

    if not code:
      return True

    if code.startswith(":tokens "):
      try:
        for token in tokenize(code[8:]):
          print(f"  {token}")
      except StrLangError as e:
        print(StrLangErrorHandler(code[8:]).format(e))
      return True

    if code.startswith(":parse "):
      src = code[7:]
      try:
        program = create_parser(self.debug).parse(tokenize(src))
        print(pretty_print_program(program), end='')
      except StrLangError as e:
        print(StrLangErrorHandler(src).format(e))
      return True

    if code == ":env":
      print("Current environment:")
      if len(self.env):
        for name, value in self.env.items():
          print(f"  {name} = {value!r}")
      else:
        print("  (no bindings)")
      return True

    if code == ":reset":
      self.reset()
      print("Environment cleared")
      return True

    if code == ":help":
      print("REPL Commands:")
      print("  :tokens <src>     - Show tokens")
      print("  :parse <src>      - Show parsed statements")
      print("  :env              - Show current environment")
      print("  :reset            - Discard all variables")
      print("  :help             - Show this help")
      print("  exit              - Exit REPL")
      print()
      print("Language:")
      print('  name = string("text");    - Declare or overwrite a variable')
      print("  print(name);              - Print a variable's value")
      return True

    try:
      tokens = tokenize(code)
      program = create_parser(self.debug).parse(tokens)
      Evaluator(self.env, print, self.debug).run(program)
    except StrLangError as e:
      print(StrLangErrorHandler(code).format(e))
    return True


def setup_readline() -> None:
  """Setup readline history"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser("~/.strlang_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First run, no history yet

  readline.set_history_length(1000)

  import atexit
  atexit.register(readline.write_history_file, history_file)


def run_interactive_mode(debug: bool = False) -> None:
  """Run StrLang in interactive mode"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()
  session = ReplSession(debug)

  while True:
    try:
      code = input(PROMPT)
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    if not session.execute(code):
      break


def show_language_info() -> None:
  """Show StrLang language information"""
  print("StrLang Programming Language")
  print("=" * 50)
  print("A minimal strongly-typed language with one type: string")
  print()
  print('  greeting = string("hello world");')
  print("  print(greeting);")
  print()


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for StrLang"""
  if argv is None:
    argv = sys.argv[1:]

  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  # No arguments - show info and start interactive mode
  if not argv:
    show_language_info()
    run_interactive_mode(debug=False)
    return

  if args.script:
    if args.tokens:
      tokens_file(args.script)
    elif args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, debug=args.debug)

  elif args.interactive:
    run_interactive_mode(debug=args.debug)

  else:
    arg_parser.print_help()
    print()
    show_language_info()
    sys.exit(1)


if __name__ == "__main__":
  main()

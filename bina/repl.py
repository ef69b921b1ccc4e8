"""
Bina REPL
=========
Interactive Read-Eval-Print Loop for Bina.
Each entry is a complete program run against the environment left by the
previous entries. An entry with unclosed braces continues on the next lines.
"""
from typing import Callable

from .lexer import Lexer, LexError
from .parser import Parser, ParseError
from .interpreter import Interpreter, EvalError
from .values import Environment, format_value


BANNER = """
Bina interactive interpreter
Type 'help' for the language reference, 'exit' or Ctrl+C to quit.
"""

HELP_TEXT = """
Statements
  let x := expr;            declare (same as plain assignment)
  x := expr;                assign
  print expr;               write a value on its own line
  if expr { ... }           run the block when expr is true
  while expr { ... }        loop while expr is true

Expressions hold at most one operator between two terms:
  a + b   a * b   a == b   a != b   a < b   a in b
Terms: 42  "text"  true  false  name  name[index]

A block may span several lines: input is collected until every '{'
is closed. An empty line abandons an unfinished block.

Commands: help, env, clear, exit
"""

PROMPT = "bina> "
CONTINUATION_PROMPT = "  ... "


def _is_incomplete(source: str) -> bool:
    """True while a '{' or a string literal is still open."""
    depth = 0
    in_string = False
    for ch in source:
        if ch == '"':
            in_string = not in_string
        elif in_string:
            continue
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
    return in_string or depth > 0


class Repl:
    """Holds the session environment and any unfinished input between lines."""

    def __init__(self, output_fn: Callable[[str], None] | None = None):
        self.output_fn = output_fn or (lambda s: print(s))
        self.interp = Interpreter(output_fn=self.output_fn)
        self.env: Environment = {}
        self.pending: list[str] = []

    @property
    def prompt(self) -> str:
        return CONTINUATION_PROMPT if self.pending else PROMPT

    def handle(self, line: str) -> bool:
        """Process one input line. Returns False when the session should end."""
        if self.pending:
            if not line.strip():
                self.pending = []
                self.output_fn("  Incomplete input discarded.")
                return True
            self.pending.append(line)
            source = "\n".join(self.pending)
            if _is_incomplete(source):
                return True
            self.pending = []
            self._execute(source)
            return True

        line = line.strip()
        if not line:
            return True

        command = line.lower()
        if command in ("exit", "quit"):
            return False

        if command == "help":
            self.output_fn(HELP_TEXT)
            return True

        if command == "env":
            if self.env:
                for name, value in self.env.items():
                    self.output_fn(f"  {name} = {format_value(value)}")
            else:
                self.output_fn("  (no bindings)")
            return True

        if command == "clear":
            self.env = {}
            self.output_fn("  State cleared.")
            return True

        if _is_incomplete(line):
            self.pending = [line]
            return True

        self._execute(line)
        return True

    def _execute(self, source: str) -> None:
        # Tokenize → Parse → Execute
        try:
            tokens = Lexer(source).tokenize()
            program = Parser(tokens).parse()
            self.env = self.interp.run(program, self.env)
        except LexError as e:
            self.output_fn(f"  Syntax error: {e}")
        except ParseError as e:
            self.output_fn(f"  Parse error: {e}")
        except EvalError as e:
            self.output_fn(f"  Runtime error: {e}")


def run_repl(input_fn: Callable[[str], str] = input) -> None:
    """Run the interactive Bina REPL."""
    print(BANNER)
    repl = Repl()

    while True:
        try:
            line = input_fn(repl.prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not repl.handle(line):
            break


def main() -> None:
    run_repl()


if __name__ == "__main__":
    main()

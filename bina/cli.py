"""
Bina File Runner
================
Execute .bina source files from the command line.

Usage:
    bina <filename.bina>
    bina -vv examples/digits.bina
    python -m bina examples/hello.bina

Options:
  -v    Increase log verbosity on stderr (-v INFO, -vv DEBUG)
"""
import argparse
import logging
import os
import sys

from .lexer import Lexer, LexError
from .parser import Parser, ParseError
from .interpreter import Interpreter, EvalError

logger = logging.getLogger(__name__)


def configure_logging(verbosity: int) -> None:
    """Route package logs to stderr at a level picked by -v count."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def run_file(filepath: str) -> int:
    """
    Execute a .bina source file.

    Args:
        filepath: Path to the .bina file

    Returns:
        0 on success, 1 on error
    """
    if not os.path.exists(filepath):
        print(f"Error: file not found: {filepath}", file=sys.stderr)
        return 1

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            source = f.read()
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read {filepath}: {e}", file=sys.stderr)
        return 1

    logger.info("running %s", filepath)

    try:
        tokens = Lexer(source).tokenize()
        logger.info("lexed %d token(s)", len(tokens))

        program = Parser(tokens).parse()
        logger.info("parsed %d statement(s)", len(program.statements))

        env = Interpreter().run(program)
        logger.info("finished with %d variable(s) bound", len(env))
        return 0

    except LexError as e:
        print(f"Syntax error: {e}", file=sys.stderr)
        return 1
    except ParseError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return 1
    except EvalError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        return 1


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="bina", description="Bina language interpreter")
    parser.add_argument("-v", action="count", default=0, help="increase log verbosity (can be repeated)")
    parser.add_argument("program", help="Bina source file to execute")
    args = parser.parse_args(argv)

    configure_logging(args.v)
    sys.exit(run_file(args.program))


if __name__ == "__main__":
    main()

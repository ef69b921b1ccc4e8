"""
Bina Interpreter
================
Tree-walking interpreter that executes the AST produced by the Parser.

The environment is threaded through evaluation as a value: every
statement takes the current environment and returns a new one, leaving
the caller's mapping untouched. There is a single flat scope for the
whole program.
"""
import logging
import re
from typing import Callable

from .lexer import tokenize, wrap_int64
from .parser import (
    ASTNode, ProgramNode, BlockNode, IfNode, WhileNode, AssignmentNode,
    PrintNode, BinaryOp, BinaryOpNode, TermNode, IntegerNode, StringNode,
    BooleanNode, VariableNode, IndexNode, Expr, Term, parse,
)
from .values import Number, Boolean, String, Value, Environment, format_value

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1

TRUE = Boolean(True)


class EvalError(Exception):
    """Runtime error during Bina execution."""
    pass


class NumericParseError(EvalError):
    """A string operand of + or * does not hold an integer."""
    pass


def _coerce_number(value: String) -> int:
    """Parse a string operand of + or * as a 64-bit integer."""
    text = value.value
    if not _INTEGER_RE.fullmatch(text):
        raise NumericParseError(f"cannot parse {text!r} as an integer")
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise NumericParseError(f"integer {text!r} out of 64-bit range")
    return number


class Interpreter:
    """
    Tree-walking interpreter for Bina programs.

    Usage:
        interp = Interpreter()
        env = interp.run(ast)
    """

    def __init__(self, output_fn: Callable[[str], None] | None = None):
        self.output_fn = output_fn or (lambda s: print(s))

    def run(self, program: ProgramNode, env: Environment | None = None) -> Environment:
        """Execute all statements in a program and return the final environment."""
        env = {} if env is None else env
        for stmt in program.statements:
            env = self.evaluate(env, stmt)
        return env

    def evaluate(self, env: Environment, node: ASTNode) -> Environment:
        """Execute one statement against env and return the resulting environment."""
        node_type = getattr(node, "node_type", "") or type(node).__name__
        executor = getattr(self, f"_exec_{node_type.lower()}", None)
        if executor is None:
            raise EvalError(f"Unknown node type: {node_type}")
        return executor(env, node)

    # ─────────────────────────────────────────────────────────
    #  Statements
    # ─────────────────────────────────────────────────────────

    def _exec_program(self, env: Environment, node: ProgramNode) -> Environment:
        return self.run(node, env)

    def _exec_assignment(self, env: Environment, node: AssignmentNode) -> Environment:
        """name := expr; `let` and plain assignment behave identically."""
        value = self.eval_expr(env, node.expression)
        logger.debug("assign %s = %r", node.name, value)
        new_env = dict(env)
        new_env[node.name] = value
        return new_env

    def _exec_print(self, env: Environment, node: PrintNode) -> Environment:
        value = self.eval_expr(env, node.expression)
        self.output_fn(format_value(value))
        return env

    def _exec_if(self, env: Environment, node: IfNode) -> Environment:
        """Run the body only when the predicate is exactly true."""
        if self.eval_expr(env, node.predicate) == TRUE:
            return self.evaluate(env, node.body)
        return env

    def _exec_while(self, env: Environment, node: WhileNode) -> Environment:
        """Loop while the predicate is exactly true; any other value stops it."""
        iterations = 0
        while self.eval_expr(env, node.predicate) == TRUE:
            env = self.evaluate(env, node.body)
            iterations += 1
        logger.debug("while loop finished after %d iteration(s)", iterations)
        return env

    def _exec_block(self, env: Environment, node: BlockNode) -> Environment:
        for stmt in node.statements:
            env = self.evaluate(env, stmt)
        return env

    # ─────────────────────────────────────────────────────────
    #  Terms
    # ─────────────────────────────────────────────────────────

    def eval_term(self, env: Environment, term: Term) -> Value:
        """Evaluate a literal, a variable or an indexed variable."""
        match term:
            case IntegerNode(value):
                return Number(value)
            case StringNode(value):
                return String(value)
            case BooleanNode(value):
                return Boolean(value)
            case VariableNode(name):
                return self._lookup(env, name)
            case IndexNode(name, index):
                return self._eval_index(env, name, index)
            case _:
                raise EvalError(f"Unknown term: {term!r}")

    def _lookup(self, env: Environment, name: str) -> Value:
        if name not in env:
            raise EvalError(f"variable not found: {name!r}")
        logger.debug("lookup %s -> %r", name, env[name])
        return env[name]

    def _eval_index(self, env: Environment, name: str, index_expr: Expr) -> Value:
        """name[index] on a string yields a one-character string."""
        base = self._lookup(env, name)
        index = self.eval_expr(env, index_expr)
        match (base, index):
            case (String(text), Number(n)):
                if not 0 <= n < len(text):
                    raise EvalError(
                        f"index out of range: {name}[{n}] on a string of length {len(text)}"
                    )
                return String(text[n])
            case _:
                raise EvalError(
                    f"cannot index {name}: base {base!r} is not a string "
                    f"or index {index!r} is not a number"
                )

    # ─────────────────────────────────────────────────────────
    #  Expressions
    # ─────────────────────────────────────────────────────────

    def eval_expr(self, env: Environment, expr: Expr) -> Value:
        """Evaluate a bare term or a single binary relation between two terms."""
        match expr:
            case TermNode(term):
                return self.eval_term(env, term)
            case BinaryOpNode(op, left, right):
                return self._apply(op, self.eval_term(env, left), self.eval_term(env, right))
            case _:
                raise EvalError(f"Unknown expression: {expr!r}")

    def _apply(self, op: BinaryOp, left: Value, right: Value) -> Value:
        match op:
            case BinaryOp.ADD:
                return self._arithmetic(op, left, right, lambda a, b: a + b)
            case BinaryOp.MULTIPLY:
                return self._arithmetic(op, left, right, lambda a, b: a * b)
            case BinaryOp.EQUALITY:
                match (left, right):
                    case (Number(a), Number(b)) | (Boolean(a), Boolean(b)):
                        return Boolean(a == b)
            case BinaryOp.DISEQUALITY:
                match (left, right):
                    case (Number(a), Number(b)) | (Boolean(a), Boolean(b)) | (String(a), String(b)):
                        return Boolean(a != b)
            case BinaryOp.LESS_THAN:
                match (left, right):
                    case (Number(a), Number(b)):
                        return Boolean(a < b)
            case BinaryOp.CONTAINED_IN:
                match (left, right):
                    case (String(a), String(b)):
                        return Boolean(a in b)
            case _:
                raise EvalError(f"operator not implemented: {op.name}")
        raise EvalError(f"{op.name} not supported for {left!r}, {right!r}")

    def _arithmetic(self, op: BinaryOp, left: Value, right: Value,
                    fn: Callable[[int, int], int]) -> Number:
        """+ and * on numbers; a string on either side is parsed as an integer."""
        match (left, right):
            case (Number(a), Number(b)):
                pass
            case (String(), Number(b)):
                a = _coerce_number(left)
            case (Number(a), String()):
                b = _coerce_number(right)
            case _:
                raise EvalError(f"{op.name} of non-numbers: {left!r}, {right!r}")
        return Number(wrap_int64(fn(a, b)))


def run(program: ProgramNode, output_fn: Callable[[str], None] | None = None) -> Environment:
    """Run a parsed program and return its final environment."""
    return Interpreter(output_fn=output_fn).run(program)


def run_source(source: str, output_fn: Callable[[str], None] | None = None) -> Environment:
    """Lex, parse and run source text in one go."""
    return run(parse(tokenize(source)), output_fn=output_fn)

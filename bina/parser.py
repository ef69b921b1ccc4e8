"""
Bina Parser
===========
Recursive-descent parser that builds an Abstract Syntax Tree (AST)
from the token stream produced by the Lexer.

Grammar:
  program    := statement*
  statement  := "while" expr block
              | "if" expr block
              | "let" IDENT ":=" expr ";"
              | IDENT ":=" expr ";"
              | "print" expr ";"
  block      := "{" statement* "}"
  expr       := term (op term)?          op in  * + == != < in
  term       := INTEGER | STRING | BOOLEAN | IDENT | IDENT "[" expr "]"

An expression holds at most one operator: ``a + b + c`` stops after
``a + b`` and leaves ``+ c`` for the caller. Parsing is fail-fast; the
first error aborts.
"""
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar

from .lexer import Token, TokenType

logger = logging.getLogger(__name__)


class ParseError(SyntaxError):
    """Raised when the token stream does not match the grammar."""
    pass


# ─────────────────────────────────────────────────────────────
#  AST Node Types
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes."""
    node_type: ClassVar[str] = ""


# Terms

@dataclass(frozen=True)
class IntegerNode(ASTNode):
    """An integer literal."""
    value: int
    node_type: ClassVar[str] = "Integer"


@dataclass(frozen=True)
class StringNode(ASTNode):
    """A string literal."""
    value: str
    node_type: ClassVar[str] = "String"


@dataclass(frozen=True)
class BooleanNode(ASTNode):
    """A boolean literal."""
    value: bool
    node_type: ClassVar[str] = "Boolean"


@dataclass(frozen=True)
class VariableNode(ASTNode):
    """A reference to a variable."""
    name: str
    node_type: ClassVar[str] = "Variable"


@dataclass(frozen=True)
class IndexNode(ASTNode):
    """A single-character index into a string variable: name[index]."""
    name: str
    index: "Expr"
    node_type: ClassVar[str] = "Index"


Term = IntegerNode | StringNode | BooleanNode | VariableNode | IndexNode


# Expressions

class BinaryOp(Enum):
    """The binary relations an expression may hold between two terms."""
    ADD          = auto()
    MULTIPLY     = auto()
    EQUALITY     = auto()
    DISEQUALITY  = auto()
    LESS_THAN    = auto()
    CONTAINED_IN = auto()
    LOGICAL_OR   = auto()   # lexed as ||, never produced by the grammar


BINARY_OPERATORS = {
    TokenType.STAR: BinaryOp.MULTIPLY,
    TokenType.PLUS: BinaryOp.ADD,
    TokenType.EQ: BinaryOp.EQUALITY,
    TokenType.NEQ: BinaryOp.DISEQUALITY,
    TokenType.LT: BinaryOp.LESS_THAN,
    TokenType.IN: BinaryOp.CONTAINED_IN,
}


@dataclass(frozen=True)
class BinaryOpNode(ASTNode):
    """A binary relation between two terms: left op right."""
    op: BinaryOp
    left: Term
    right: Term
    node_type: ClassVar[str] = "BinaryOp"


@dataclass(frozen=True)
class TermNode(ASTNode):
    """A bare term used as an expression."""
    term: Term
    node_type: ClassVar[str] = "Term"


Expr = BinaryOpNode | TermNode


# Statements

@dataclass(frozen=True)
class BlockNode(ASTNode):
    """A brace-delimited sequence of statements. Introduces no scope."""
    statements: tuple[ASTNode, ...] = ()
    node_type: ClassVar[str] = "Block"


@dataclass(frozen=True)
class IfNode(ASTNode):
    """A one-armed conditional: if predicate { body }."""
    predicate: Expr
    body: BlockNode
    node_type: ClassVar[str] = "If"


@dataclass(frozen=True)
class WhileNode(ASTNode):
    """A loop: while predicate { body }."""
    predicate: Expr
    body: BlockNode
    node_type: ClassVar[str] = "While"


@dataclass(frozen=True)
class AssignmentNode(ASTNode):
    """name := expression; is_declaration is True for the `let` form."""
    name: str
    expression: Expr
    is_declaration: bool = False
    node_type: ClassVar[str] = "Assignment"


@dataclass(frozen=True)
class PrintNode(ASTNode):
    """print expression;"""
    expression: Expr
    node_type: ClassVar[str] = "Print"


@dataclass(frozen=True)
class ProgramNode(ASTNode):
    """Root node containing all top-level statements."""
    statements: tuple[ASTNode, ...] = ()
    node_type: ClassVar[str] = "Program"


# ─────────────────────────────────────────────────────────────
#  Parser
# ─────────────────────────────────────────────────────────────

_EOF = Token(TokenType.EOF)


def _describe(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of input"
    return f"{token.type.name} ({token.value!r})"


class Parser:
    """
    Recursive-descent parser for Bina source.

    Usage:
        parser = Parser(tokens)
        ast = parser.parse()

    A trailing EOF token is optional; running off the end of the
    list reads as EOF.
    """

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    def _current(self) -> Token:
        if self.pos >= len(self.tokens):
            return _EOF
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self._current()
        if self.pos < len(self.tokens):
            self.pos += 1
        return token

    def _expect(self, token_type: TokenType) -> Token:
        token = self._current()
        if token.type != token_type:
            if token.type == TokenType.EOF:
                raise ParseError(f"Unexpected end of input: expected {token_type.name}")
            raise ParseError(f"Expected {token_type.name}, got {_describe(token)}")
        return self._advance()

    # ─────────────────────────────────────────────────────────
    #  Statements
    # ─────────────────────────────────────────────────────────

    def parse(self) -> ProgramNode:
        """Parse the token stream into a ProgramNode."""
        statements = []
        while self._current().type != TokenType.EOF:
            statements.append(self._parse_statement())
        return ProgramNode(statements=tuple(statements))

    def _parse_statement(self) -> ASTNode:
        """Parse a single statement, dispatching on its leading token."""
        token = self._current()
        logger.debug("statement starting at %r", token)

        match token.type:
            case TokenType.WHILE:
                self._advance()
                predicate = self._parse_expression()
                return WhileNode(predicate, self._parse_block())
            case TokenType.IF:
                self._advance()
                predicate = self._parse_expression()
                return IfNode(predicate, self._parse_block())
            case TokenType.IDENTIFIER:
                return self._parse_assignment(is_declaration=False)
            case TokenType.LET:
                self._advance()
                return self._parse_assignment(is_declaration=True)
            case TokenType.PRINT:
                self._advance()
                expr = self._parse_expression()
                self._expect(TokenType.SEMICOLON)
                return PrintNode(expr)
            case TokenType.EOF:
                raise ParseError("Unexpected end of input: expected a statement")
            case _:
                raise ParseError(f"Unexpected token {_describe(token)} at start of statement")

    def _parse_assignment(self, is_declaration: bool) -> AssignmentNode:
        """Parse: name := expression ;"""
        name_token = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.ASSIGN)
        expr = self._parse_expression()
        self._expect(TokenType.SEMICOLON)
        return AssignmentNode(name_token.value, expr, is_declaration)

    def _parse_block(self) -> BlockNode:
        """Parse: { statement* }"""
        self._expect(TokenType.LBRACE)
        statements = []
        while self._current().type != TokenType.RBRACE:
            statements.append(self._parse_statement())
        self._advance()  # consume }
        return BlockNode(tuple(statements))

    # ─────────────────────────────────────────────────────────
    #  Expressions and Terms
    # ─────────────────────────────────────────────────────────

    def _parse_expression(self) -> Expr:
        """Parse a term optionally followed by exactly one operator and term."""
        left = self._parse_term()
        op = BINARY_OPERATORS.get(self._current().type)
        if op is None:
            return TermNode(left)
        self._advance()
        right = self._parse_term()
        return BinaryOpNode(op, left, right)

    def _parse_term(self) -> Term:
        token = self._advance()

        match token.type:
            case TokenType.INTEGER:
                return IntegerNode(token.value)
            case TokenType.STRING:
                return StringNode(token.value)
            case TokenType.BOOLEAN:
                return BooleanNode(token.value)
            case TokenType.IDENTIFIER:
                if self._current().type == TokenType.LBRACKET:
                    return self._parse_index(token.value)
                return VariableNode(token.value)
            case TokenType.EOF:
                raise ParseError("Unexpected end of input: expected a term")
            case _:
                raise ParseError(f"Unexpected token {_describe(token)}, expected a term")

    def _parse_index(self, name: str) -> IndexNode:
        """Parse name[expr]; whatever token follows the index closes it."""
        self._advance()  # consume [
        index = self._parse_expression()
        closer = self._current()
        if closer.type == TokenType.EOF:
            raise ParseError(f"Unexpected end of input: expected RBRACKET after {name}[...")
        if closer.type != TokenType.RBRACKET:
            logger.warning("index into %r closed by %s instead of ']'", name, _describe(closer))
        self._advance()
        return IndexNode(name, index)


def parse(tokens: list[Token]) -> ProgramNode:
    """Parse a token list into a ProgramNode; raises ParseError."""
    return Parser(tokens).parse()

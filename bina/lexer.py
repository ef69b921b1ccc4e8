"""
Bina Lexer
==========
Tokenizes Bina source code into a flat list of typed tokens.
Handles integer/string/boolean literals, identifiers, keywords,
punctuation and the handful of one- and two-character operators.
"""
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Iterator

logger = logging.getLogger(__name__)


class LexError(SyntaxError):
    """Raised when the source text cannot be tokenized."""
    pass


class TokenType(Enum):
    """All token types in the Bina language."""
    # Literals
    INTEGER     = auto()   # 42
    STRING      = auto()   # "..."
    BOOLEAN     = auto()   # true, false
    IDENTIFIER  = auto()   # variable names

    # Keywords
    WHILE       = auto()
    IF          = auto()
    ELSE        = auto()
    LET         = auto()
    IN          = auto()
    PRINT       = auto()

    # Punctuation
    LPAREN      = auto()   # (
    RPAREN      = auto()   # )
    LBRACE      = auto()   # {
    RBRACE      = auto()   # }
    LBRACKET    = auto()   # [
    RBRACKET    = auto()   # ]
    SEMICOLON   = auto()   # ;

    # Operators
    ASSIGN      = auto()   # :=
    EQ          = auto()   # ==
    NEQ         = auto()   # !=
    LT          = auto()   # <
    PLUS        = auto()   # +
    STAR        = auto()   # *
    BANG        = auto()   # ! (reserved, never emitted)
    OR          = auto()   # ||

    # Special
    EOF         = auto()


@dataclass(frozen=True)
class Token:
    """A single token from the Bina source."""
    type: TokenType
    value: Any = None

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r})"


SINGLE_CHAR_TOKENS = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ";": TokenType.SEMICOLON,
    "+": TokenType.PLUS,
    "*": TokenType.STAR,
    "<": TokenType.LT,
}

# First char -> (required second char, token type)
TWO_CHAR_TOKENS = {
    ":": ("=", TokenType.ASSIGN),
    "=": ("=", TokenType.EQ),
    "!": ("=", TokenType.NEQ),
    "|": ("|", TokenType.OR),
}

KEYWORDS = {
    "while": TokenType.WHILE,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "let": TokenType.LET,
    "in": TokenType.IN,
    "print": TokenType.PRINT,
}

BOOLEANS = {"true": True, "false": False}

WHITESPACE = (" ", "\t", "\n", "\r")

_INT64_MIN = -(1 << 63)
_UINT64_RANGE = 1 << 64


def wrap_int64(value: int) -> int:
    """Wrap an arbitrary Python int into the signed 64-bit range."""
    value = (value - _INT64_MIN) % _UINT64_RANGE
    return value + _INT64_MIN


def _is_digit(ch: str | None) -> bool:
    return ch is not None and "0" <= ch <= "9"


def _is_ident_start(ch: str | None) -> bool:
    return ch is not None and (ch.isascii() and ch.isalpha() or ch == "_")


class Lexer:
    """
    Tokenizes Bina source code.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1

    def _current(self) -> str | None:
        if self.pos >= len(self.source):
            return None
        return self.source[self.pos]

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
        return ch

    def _error(self, message: str) -> LexError:
        # self.line counts "\n" only; splitlines() would also break on \r, \x0c, ...
        lines = self.source.split("\n")
        text = lines[self.line - 1] if self.line <= len(lines) else ""
        return LexError(f"{message} on line {self.line}: {text.strip()!r}")

    def _read_number(self) -> Token:
        """Read a run of decimal digits as a 64-bit integer."""
        number = 0
        while _is_digit(self._current()):
            number = number * 10 + int(self._advance())
        return Token(TokenType.INTEGER, wrap_int64(number))

    def _read_string(self) -> Token:
        """Read a double-quoted string literal; only \\n is an escape."""
        start_line = self.line
        self._advance()  # consume opening "
        chars = []
        while self.pos < len(self.source):
            ch = self._advance()
            if ch == '"':
                return Token(TokenType.STRING, "".join(chars).replace("\\n", "\n"))
            chars.append(ch)
        self.line = start_line
        raise self._error("Unterminated string literal")

    def _read_identifier(self) -> Token:
        """Read an identifier, keyword or boolean literal."""
        chars = []
        while self.pos < len(self.source):
            ch = self._current()
            if ch.isalnum() or ch == "_":
                chars.append(self._advance())
            else:
                break
        word = "".join(chars)
        if word in BOOLEANS:
            return Token(TokenType.BOOLEAN, BOOLEANS[word])
        return Token(KEYWORDS.get(word, TokenType.IDENTIFIER), word)

    def _read_operator(self) -> Token:
        """Read one of the two-character operators."""
        first = self._advance()
        second, token_type = TWO_CHAR_TOKENS[first]
        if self._current() != second:
            raise self._error(f"Expected {second!r} after {first!r}")
        self._advance()
        return Token(token_type, first + second)

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source into a list of tokens ending in EOF."""
        tokens = list(self._iter_tokens())
        tokens.append(Token(TokenType.EOF))
        return tokens

    def _iter_tokens(self) -> Iterator[Token]:
        """Generate tokens one at a time."""
        while self.pos < len(self.source):
            ch = self._current()

            if ch in WHITESPACE:
                self._advance()
                continue

            if _is_digit(ch):
                token = self._read_number()
            elif ch == '"':
                token = self._read_string()
            elif _is_ident_start(ch):
                token = self._read_identifier()
            elif ch in TWO_CHAR_TOKENS:
                token = self._read_operator()
            elif ch in SINGLE_CHAR_TOKENS:
                self._advance()
                token = Token(SINGLE_CHAR_TOKENS[ch], ch)
            else:
                raise self._error(f"Unrecognized character {ch!r}")

            logger.debug("lexed %r", token)
            yield token


def tokenize(source: str) -> list[Token]:
    """Tokenize source text; raises LexError on the first bad character."""
    return Lexer(source).tokenize()

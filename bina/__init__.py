# Bina — a minimal imperative scripting language
"""
Bina: a small imperative scripting language for text and number processing.
Lexer → recursive-descent Parser → tree-walking Interpreter.
"""
import logging

from .lexer import Lexer, Token, TokenType, LexError, tokenize
from .parser import (
    Parser, ParseError, parse, BinaryOp,
    ASTNode, ProgramNode, BlockNode, IfNode, WhileNode, AssignmentNode, PrintNode,
    BinaryOpNode, TermNode, IntegerNode, StringNode, BooleanNode, VariableNode, IndexNode,
)
from .values import Number, Boolean, String, Value, format_value
from .interpreter import Interpreter, EvalError, NumericParseError, run, run_source

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "Lexer", "Token", "TokenType", "LexError", "tokenize",
    "Parser", "ParseError", "parse", "BinaryOp",
    "ASTNode", "ProgramNode", "BlockNode", "IfNode", "WhileNode",
    "AssignmentNode", "PrintNode", "BinaryOpNode", "TermNode",
    "IntegerNode", "StringNode", "BooleanNode", "VariableNode", "IndexNode",
    "Number", "Boolean", "String", "Value", "format_value",
    "Interpreter", "EvalError", "NumericParseError", "run", "run_source",
]

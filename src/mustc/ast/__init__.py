"""Mustache syntax tree, lexer and parser."""

from mustc.ast.lexer import Lexer, Token, TokenType
from mustc.ast.node import (
    InvertedSection,
    Literal,
    Name,
    Node,
    Partial,
    Root,
    Section,
    SyntaxTree,
    Variable,
)
from mustc.ast.parser import Parser, parse

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "Parser",
    "parse",
    "Name",
    "Node",
    "Literal",
    "Variable",
    "Section",
    "InvertedSection",
    "Partial",
    "Root",
    "SyntaxTree",
]

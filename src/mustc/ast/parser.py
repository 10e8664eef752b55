"""Parser - turns template source plus named partials into a SyntaxTree."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional, Set, Tuple, Union

from mustc.ast.lexer import STANDALONE_TYPES, Lexer, Token, TokenType
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
from mustc.config import CompileOptions, WhitespaceMode
from mustc.exceptions import TemplateSyntaxError

log = logging.getLogger(__name__)

WHITESPACE_RUN = re.compile(r"\s+")
VALID_NAME = re.compile(r"^[^\s.]+(\.[^\s.]+)*$")
LINE_BREAK = re.compile(r"(?<=\n)")


@dataclass
class ParseContext:
    """State shared by one top-level parse and every partial it expands.

    - trees: partial key -> parsed partial body
    - active: (name, key) chain of partials currently being expanded
    - recursive: keys that take part in a reference cycle
    """

    sources: Mapping[str, str]
    options: CompileOptions
    trees: Dict[str, Root] = field(default_factory=dict)
    active: List[Tuple[str, str]] = field(default_factory=list)
    recursive: Set[str] = field(default_factory=set)


@dataclass
class _Frame:
    token: Optional[Token]
    children: List[Union[Node, str]] = field(default_factory=list)


class Parser:
    """Parses Mustache source into a SyntaxTree."""

    def __init__(
        self,
        partials: Optional[Mapping[str, str]] = None,
        options: Optional[CompileOptions] = None,
    ):
        self.partials: Mapping[str, str] = partials or {}
        self.options = options or CompileOptions()

    def parse(self, source: str) -> SyntaxTree:
        """Parse a template and every partial it references.

        Args:
            source: Template source text.

        Returns:
            SyntaxTree with the root and the partial table.

        Raises:
            TemplateSyntaxError: On malformed tags, mismatched sections or
                unknown partials.
        """
        ctx = ParseContext(sources=self.partials, options=self.options)
        root = self._parse_source(source, None, ctx)

        if ctx.recursive:
            log.debug("Recursive partials: %s", ", ".join(sorted(ctx.recursive)))

        return SyntaxTree(
            root=root,
            partials=dict(ctx.trees),
            recursive=frozenset(ctx.recursive),
            options=self.options,
        )

    def _parse_source(
        self, source: str, template_name: Optional[str], ctx: ParseContext
    ) -> Root:
        lexer = Lexer(source, template_name)
        tokens = lexer.tokenize()

        indents: Dict[int, str] = {}
        if ctx.options.whitespace_mode is WhitespaceMode.STANDALONE:
            tokens, indents = strip_standalone(tokens)

        stack = [_Frame(token=None)]

        for index, token in enumerate(tokens):
            kind = token.type

            if kind is TokenType.TEXT:
                stack[-1].children.append(token.value)
            elif kind in (TokenType.VARIABLE, TokenType.UNESCAPED):
                name = self._name(token, template_name)
                stack[-1].children.append(
                    Variable(name=name, escape=kind is TokenType.VARIABLE)
                )
            elif kind in (TokenType.SECTION, TokenType.INVERTED):
                self._name(token, template_name)
                stack.append(_Frame(token=token))
            elif kind is TokenType.CLOSE:
                self._close(stack, token, template_name, ctx)
            elif kind is TokenType.PARTIAL:
                stack[-1].children.append(
                    self._partial(token, indents.get(index, ""), template_name, ctx)
                )
            # comments and delimiter changes produce no nodes

        if len(stack) > 1:
            opener = stack[-1].token
            assert opener is not None
            raise _error(
                f"Unclosed section '{opener.value}'", opener, template_name
            )

        return Root(children=self._finish(stack[0].children, ctx))

    def _close(
        self,
        stack: List[_Frame],
        token: Token,
        template_name: Optional[str],
        ctx: ParseContext,
    ) -> None:
        if len(stack) == 1:
            raise _error(
                f"Unexpected closing tag '{token.value}'", token, template_name
            )

        frame = stack.pop()
        opener = frame.token
        assert opener is not None
        if opener.value != token.value:
            raise _error(
                f"Mismatched closing tag '{token.value}', expected '{opener.value}'",
                token,
                template_name,
            )

        children = self._finish(frame.children, ctx)
        name = Name.parse(opener.value)
        if opener.type is TokenType.INVERTED:
            node: Node = InvertedSection(name=name, children=children)
        else:
            node = Section(name=name, children=children)
        stack[-1].children.append(node)

    def _partial(
        self,
        token: Token,
        indent: str,
        template_name: Optional[str],
        ctx: ParseContext,
    ) -> Partial:
        name = token.value
        if name not in ctx.sources:
            raise _error(f"Unknown partial '{name}'", token, template_name)
        if any(ch.isspace() for ch in name):
            raise _error(f"Invalid partial name '{name}'", token, template_name)

        for i, (active_name, active_key) in enumerate(ctx.active):
            if active_name == name:
                cycle = [key for _, key in ctx.active[i:]]
                ctx.recursive.update(cycle)
                log.debug("Partial '%s' includes itself via %s", name, " -> ".join(cycle))
                return Partial(name=Name((name,)), key=active_key, indent=indent)

        key = partial_key(name, indent)
        if key not in ctx.trees:
            log.debug("Expanding partial '%s'", key)
            ctx.active.append((name, key))
            try:
                source = indent_source(ctx.sources[name], indent)
                ctx.trees[key] = self._parse_source(source, name, ctx)
            finally:
                ctx.active.pop()

        return Partial(name=Name((name,)), key=key, indent=indent)

    def _name(self, token: Token, template_name: Optional[str]) -> Name:
        text = token.value
        if text != "." and not VALID_NAME.match(text):
            raise _error(f"Invalid tag name '{text}'", token, template_name)
        return Name.parse(text)

    def _finish(
        self, children: List[Union[Node, str]], ctx: ParseContext
    ) -> Tuple[Node, ...]:
        """Merge adjacent text, normalize whitespace and drop empty literals."""
        nodes: List[Node] = []
        pending: List[str] = []

        def flush() -> None:
            if not pending:
                return
            text = "".join(pending)
            pending.clear()
            if ctx.options.whitespace_mode is WhitespaceMode.COLLAPSE:
                text = WHITESPACE_RUN.sub(" ", text)
            if text:
                nodes.append(Literal(text=text))

        for child in children:
            if isinstance(child, str):
                pending.append(child)
            else:
                flush()
                nodes.append(child)
        flush()

        return tuple(nodes)


def parse(
    source: str,
    partials: Optional[Mapping[str, str]] = None,
    options: Optional[CompileOptions] = None,
) -> SyntaxTree:
    """Parse template source into a SyntaxTree."""
    return Parser(partials=partials, options=options).parse(source)


def partial_key(name: str, indent: str) -> str:
    """Key of a partial body in the tree's partial table.

    Standalone partials are parsed once per distinct indentation.
    """
    return name if not indent else f"{name}:{indent}"


def indent_source(source: str, indent: str) -> str:
    """Prefix every line of a partial's source with indent."""
    if not indent:
        return source
    return "".join(indent + line for line in LINE_BREAK.split(source) if line)


def strip_standalone(tokens: List[Token]) -> Tuple[List[Token], Dict[int, str]]:
    """Remove the lines of standalone tags.

    A tag is standalone when it is the only tag on its line and everything
    else on the line is whitespace. The whitespace before it and the line
    ending after it are removed. Returns the rewritten tokens and, for
    standalone partials, the indentation they stood at (by token index).

    Decisions are made on the untrimmed text; trims are applied afterwards.
    """
    head_trim: Set[int] = set()
    tail_trim: Set[int] = set()
    indents: Dict[int, str] = {}
    last = len(tokens) - 1

    for i, token in enumerate(tokens):
        if token.type not in STANDALONE_TYPES:
            continue

        prev = tokens[i - 1] if i > 0 else None
        nxt = tokens[i + 1] if i < last else None

        if prev is None:
            indent = ""
        elif prev.type is TokenType.TEXT and (i - 1 == 0 or "\n" in prev.value):
            indent = prev.value[prev.value.rfind("\n") + 1 :]
            if indent.strip():
                continue
        else:
            continue

        if nxt is not None:
            if nxt.type is not TokenType.TEXT:
                continue
            newline = nxt.value.find("\n")
            if newline == -1 and i + 1 != last:
                continue
            line_rest = nxt.value if newline == -1 else nxt.value[:newline]
            if line_rest.strip():
                continue
            head_trim.add(i + 1)

        if prev is not None:
            tail_trim.add(i - 1)
        if token.type is TokenType.PARTIAL:
            indents[i] = indent

    if not head_trim and not tail_trim:
        return tokens, indents

    result: List[Token] = []
    for i, token in enumerate(tokens):
        if i not in head_trim and i not in tail_trim:
            result.append(token)
            continue

        text = token.value
        start, end = 0, len(text)
        if i in head_trim:
            newline = text.find("\n")
            start = len(text) if newline == -1 else newline + 1
        if i in tail_trim:
            end = text.rfind("\n") + 1
        result.append(replace(token, value=text[start:max(start, end)]))

    return result, indents


def _error(message: str, token: Token, template_name: Optional[str]) -> TemplateSyntaxError:
    return TemplateSyntaxError(
        message,
        fragment=token.raw or token.value,
        template=template_name,
        line=token.line,
        column=token.column,
        offset=token.offset,
    )

"""Compiler - transforms a SyntaxTree into backend-neutral Program IR."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Set

from mustc.ast.node import (
    InvertedSection,
    Literal,
    Node,
    Partial,
    Root,
    Section,
    SyntaxTree,
    Variable,
)
from mustc.compiler.spec import (
    AppendText,
    AppendValue,
    EnterSection,
    Function,
    Instruction,
    InvokePartial,
    Program,
)

log = logging.getLogger(__name__)

ENTRY_NAME = "_root"


@dataclass
class CompileContext:
    """State shared by one top-level compile and every partial it compiles.

    - registered: recursive partial keys whose body was already registered
    - inlining: keys of non-recursive partials currently being inlined
    """

    tree: SyntaxTree
    extended: bool = False
    registered: Set[str] = field(default_factory=set)
    partials: Dict[str, Function] = field(default_factory=dict)
    sections: Dict[str, Function] = field(default_factory=dict)
    inlining: List[str] = field(default_factory=list)
    _ids: Iterator[int] = field(default_factory=lambda: itertools.count(1))

    def function(self, prefix: str) -> Function:
        return Function(name=f"{prefix}{next(self._ids)}")


class Compiler:
    """Compiles a SyntaxTree to a Program."""

    def compile(self, tree: SyntaxTree, extended: bool = False) -> Program:
        """Compile a SyntaxTree into Program IR.

        Non-recursive partials are inlined at their call sites. Recursive
        partials are compiled once into a registered body and invoked by key
        everywhere they are referenced.

        Args:
            tree: Parsed template.
            extended: Also build per-section entry points.

        Returns:
            Program IR ready for a backend Renderer.
        """
        ctx = CompileContext(tree=tree, extended=extended)
        entry = Function(name=ENTRY_NAME, body=self._compile_nodes([tree.root], ctx))

        return Program(
            entry=entry,
            partials=ctx.partials,
            sections=ctx.sections,
            extended=extended,
            compact=tree.options.compact_literals,
        )

    def _compile_nodes(
        self, nodes: Iterable[Node], ctx: CompileContext
    ) -> List[Instruction]:
        instructions: List[Instruction] = []
        for node in nodes:
            for instruction in self._compile_node(node, ctx):
                # Neighbouring text (e.g. around an inlined partial) becomes one append
                if (
                    isinstance(instruction, AppendText)
                    and instructions
                    and isinstance(instructions[-1], AppendText)
                ):
                    instructions[-1] = AppendText(instructions[-1].text + instruction.text)
                else:
                    instructions.append(instruction)
        return instructions

    def _compile_node(self, node: Node, ctx: CompileContext) -> List[Instruction]:
        if isinstance(node, Root):
            return self._compile_nodes(node.children, ctx)
        if isinstance(node, Literal):
            return [AppendText(node.text)] if node.text else []
        if isinstance(node, Variable):
            return [AppendValue(name=node.name, escape=node.escape)]
        if isinstance(node, (Section, InvertedSection)):
            return [self._compile_section(node, ctx)]
        if isinstance(node, Partial):
            return self._compile_partial(node, ctx)

        raise TypeError(f"Unknown node type: {type(node).__name__}")

    def _compile_section(
        self, node: Section | InvertedSection, ctx: CompileContext
    ) -> EnterSection:
        entry = None
        if ctx.extended and node.name.text not in ctx.sections:
            entry = ctx.sections[node.name.text] = ctx.function("_e")

        body = ctx.function("_s")
        body.body = self._compile_nodes(node.children, ctx)
        instruction = EnterSection(
            inverted=isinstance(node, InvertedSection), name=node.name, body=body
        )

        if entry is not None:
            entry.body.append(instruction)
        return instruction

    def _compile_partial(self, node: Partial, ctx: CompileContext) -> List[Instruction]:
        tree = ctx.tree
        key = node.key

        if tree.is_recursive(key):
            self._register_partial(key, ctx)
            return [InvokePartial(key)]

        if key in ctx.inlining:
            raise RuntimeError(f"Partial '{key}' is cyclic but not marked recursive")

        ctx.inlining.append(key)
        try:
            return self._compile_nodes(tree.partials[key].children, ctx)
        finally:
            ctx.inlining.pop()

    def _register_partial(self, key: str, ctx: CompileContext) -> None:
        if key in ctx.registered:
            return
        ctx.registered.add(key)
        log.debug("Registering recursive partial '%s'", key)

        fn = ctx.partials[key] = ctx.function("_p")
        fn.body = self._compile_nodes(ctx.tree.partials[key].children, ctx)

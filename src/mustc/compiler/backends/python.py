"""Native backend - emits a Python render function."""

from __future__ import annotations

from typing import Set

from mustc.ast.node import Name
from mustc.compiler.renderer import CodeWriter, Renderer
from mustc.compiler.spec import Program

ESCAPES = {
    "\\": "\\\\",
    "\r": "\\r",
    "\n": "\\n",
    "\t": "\\t",
    "\0": "\\x00",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
}


def quote(text: str, compact: bool = False) -> str:
    """Quote text as a Python string literal.

    The safe form always uses double quotes. The compact form picks whichever
    quote character needs fewer escapes.
    """
    delimiter = '"'
    if compact and text.count('"') > text.count("'"):
        delimiter = "'"

    out = []
    for ch in text:
        if ch in ESCAPES:
            out.append(ESCAPES[ch])
        elif ch == delimiter:
            out.append("\\" + ch)
        elif ord(ch) < 0x20 or 0x7F <= ord(ch) <= 0x9F:
            out.append(f"\\x{ord(ch):02x}")
        elif ch in "\u2028\u2029" or 0xD800 <= ord(ch) <= 0xDFFF:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    return delimiter + "".join(out) + delimiter


class PythonRenderer(Renderer):
    """Renders Program IR as a Python function definition.

    Simple form: ``def render(_c)``. Extended form: ``def render(_c, _root=None)``.
    Section bodies are defined once, directly inside the render function, and
    close over the runtime. Python limits indentation depth, so they are
    never nested.
    """

    name = "native"
    runtime_file = "mustache_runtime.py"
    nested_bodies = False

    def writer(self, program: Program) -> CodeWriter:
        return CodeWriter(indent="    ", separator="\n")

    def quote(self, text: str, compact: bool = False) -> str:
        return quote(text, compact)

    def quote_name(self, name: Name, compact: bool = False) -> str:
        if not name.is_dotted:
            return quote(name.text, compact)
        return "(" + ", ".join(quote(s, compact) for s in name.segments) + ")"

    def _render_program(self, w: CodeWriter, program: Program) -> None:
        compact = program.compact
        params = "_c, _root=None" if program.extended else "_c"

        w.line(f"def {self.function_name}({params}):")
        with w.block():
            w.line(f"r = {self.runtime_class}(_c)")

            seen: Set[str] = set()
            for fn in program.partials.values():
                self.render_section_bodies(w, fn.body, compact, seen)
            self.render_section_bodies(w, program.entry.body, compact, seen)
            self.render_registrations(w, program)

            if program.extended:
                w.line("if _root is None:")
                with w.block():
                    self.render_block(w, program.entry.body, compact)
                w.line("else:")
                with w.block():
                    for fn in program.sections.values():
                        self.render_function(w, fn, compact)
                    table = ", ".join(
                        f"{quote(name, compact)}: {fn.name}"
                        for name, fn in program.sections.items()
                    )
                    w.line(f"_t = {{{table}}}")
                    w.line("_f = _t.get(_root)")
                    w.line("if _f is not None:")
                    with w.block():
                        w.line("_f()")
            else:
                self.render_block(w, program.entry.body, compact)

            w.line("return r.get()")

    def append_text(self, quoted: str) -> str:
        return f"r.l({quoted})"

    def append_value(self, quoted_name: str, escape: bool) -> str:
        return f"r.v({quoted_name})" if escape else f"r.v({quoted_name}, 1)"

    def enter_section(self, inverted: bool, quoted_name: str, body: str) -> str:
        return f"r.s({int(inverted)}, {quoted_name}, {body})"

    def register_partial(self, quoted_key: str, body: str) -> str:
        return f"r.d({quoted_key}, {body})"

    def invoke_partial(self, quoted_key: str) -> str:
        return f"r.p({quoted_key})"

    def function_header(self, name: str) -> str:
        return f"def {name}():"

    def empty_statement(self) -> str:
        return "pass"

"""Script backend - emits a browser JavaScript render function."""

from __future__ import annotations

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
    "\v": "\\x0B",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

# Escaped in the safe form so a literal can never close a <script> element
# or open an HTML comment.
MARKUP_ESCAPES = {
    "<": "\\x3C",
    ">": "\\x3E",
}


def quote(text: str, compact: bool = False) -> str:
    """Quote text as a JavaScript string literal.

    The safe form uses double quotes and also escapes markup characters.
    The compact form picks the quote character needing fewer escapes and
    leaves markup characters alone: valid JavaScript, but not safe to paste
    verbatim into an HTML page.
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
        elif not compact and ch in MARKUP_ESCAPES:
            out.append(MARKUP_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\x{ord(ch):02X}")
        elif 0xD800 <= ord(ch) <= 0xDFFF:
            out.append(f"\\u{ord(ch):04X}")
        else:
            out.append(ch)
    return delimiter + "".join(out) + delimiter


class JavaScriptRenderer(Renderer):
    """Renders Program IR as a JavaScript function expression.

    Simple form: ``function(_c){...}``. Extended form: ``function(_c,_root){...}``.
    Compact programs are emitted on a single line.
    """

    name = "script"
    runtime_file = "mustache_runtime.js"

    def writer(self, program: Program) -> CodeWriter:
        if program.compact:
            return CodeWriter(indent="", separator="")
        return CodeWriter(indent="  ", separator="\n")

    def quote(self, text: str, compact: bool = False) -> str:
        return quote(text, compact)

    def quote_name(self, name: Name, compact: bool = False) -> str:
        if not name.is_dotted:
            return quote(name.text, compact)
        return "[" + ",".join(quote(s, compact) for s in name.segments) + "]"

    def _render_program(self, w: CodeWriter, program: Program) -> None:
        compact = program.compact
        params = "_c,_root" if program.extended else "_c"

        w.line(f"function({params}){{")
        with w.block():
            w.line(f"var r=new {self.runtime_class}(_c);")
            self.render_registrations(w, program)

            if program.extended:
                w.line("if(_root==null){")
                with w.block():
                    self.render_block(w, program.entry.body, compact)
                w.line("}else{")
                with w.block():
                    for fn in program.sections.values():
                        self.render_function(w, fn, compact)
                    table = ",".join(
                        f"{quote(name, compact)}:{fn.name}"
                        for name, fn in program.sections.items()
                    )
                    w.line(f"var _t={{{table}}};")
                    w.line("if(Object.prototype.hasOwnProperty.call(_t,_root)){")
                    with w.block():
                        w.line("_t[_root]();")
                    w.line("}")
                w.line("}")
            else:
                self.render_block(w, program.entry.body, compact)

            w.line("return r.get();")
        w.line("}")

    def append_text(self, quoted: str) -> str:
        return f"r.l({quoted});"

    def append_value(self, quoted_name: str, escape: bool) -> str:
        return f"r.v({quoted_name});" if escape else f"r.v({quoted_name},1);"

    def enter_section(self, inverted: bool, quoted_name: str, body: str) -> str:
        return f"r.s({int(inverted)},{quoted_name},{body});"

    def register_partial(self, quoted_key: str, body: str) -> str:
        return f"r.d({quoted_key},{body});"

    def invoke_partial(self, quoted_key: str) -> str:
        return f"r.p({quoted_key});"

    def function_header(self, name: str) -> str:
        return f"var {name}=function(){{"

    def function_footer(self) -> str:
        return "};"

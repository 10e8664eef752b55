from textwrap import dedent

from mustc.ast.parser import parse
from mustc.compiler.backends import PythonRenderer, get_backend
from mustc.compiler.backends.python import quote
from mustc.compiler.compiler import Compiler
from mustc.exceptions import UnknownBackendError
import pytest


def render(source, partials=None, extended=False, function_name="render"):
    program = Compiler().compile(parse(source, partials), extended=extended)
    return PythonRenderer(function_name=function_name).render(program)


def test_quote_escapes():
    assert quote('say "hi"\n') == '"say \\"hi\\"\\n"'
    assert quote("a\\b\t\r") == '"a\\\\b\\t\\r"'
    assert quote("\x00\x01\x7f\x85") == '"\\x00\\x01\\x7f\\x85"'
    assert quote("\u2028\u2029") == '"\\u2028\\u2029"'
    assert quote("a\ud800b\udfff") == '"a\\ud800b\\udfff"'
    assert quote("café") == '"café"'


def test_quote_compact_picks_cheaper_delimiter():
    assert quote('say "hi"', compact=True) == "'say \"hi\"'"
    assert quote("it's", compact=True) == '"it\'s"'
    assert quote('say "hi"') == '"say \\"hi\\""'


def test_render_section():
    assert render("{{#p}}Hi {{name}}{{/p}}") == dedent(
        """\
        def render(_c):
            r = MustacheRuntime(_c)
            def _s1():
                r.l("Hi ")
                r.v("name")
            r.s(0, "p", _s1)
            return r.get()"""
    )


def test_render_dotted_raw_and_inverted():
    assert render("{{{a.b}}}{{^x}}{{/x}}") == dedent(
        """\
        def render(_c):
            r = MustacheRuntime(_c)
            def _s1():
                pass
            r.v(("a", "b"), 1)
            r.s(1, "x", _s1)
            return r.get()"""
    )


def test_render_recursive_partial_registration():
    code = render("{{>node}}", {"node": "<{{#kids}}{{>node}}{{/kids}}>"})
    assert code == dedent(
        """\
        def render(_c):
            r = MustacheRuntime(_c)
            def _s2():
                r.p("node")
            def _p1():
                r.l("<")
                r.s(0, "kids", _s2)
                r.l(">")
            r.d("node", _p1)
            r.p("node")
            return r.get()"""
    )


def test_render_extended_form():
    assert render("{{#p}}x{{/p}}", extended=True) == dedent(
        """\
        def render(_c, _root=None):
            r = MustacheRuntime(_c)
            def _s2():
                r.l("x")
            if _root is None:
                r.s(0, "p", _s2)
            else:
                def _e1():
                    r.s(0, "p", _s2)
                _t = {"p": _e1}
                _f = _t.get(_root)
                if _f is not None:
                    _f()
            return r.get()"""
    )


def test_nested_sections_are_defined_flat():
    code = render("{{#a}}{{#b}}{{#c}}x{{/c}}{{/b}}{{/a}}")
    assert code == dedent(
        """\
        def render(_c):
            r = MustacheRuntime(_c)
            def _s3():
                r.l("x")
            def _s2():
                r.s(0, "c", _s3)
            def _s1():
                r.s(0, "b", _s2)
            r.s(0, "a", _s1)
            return r.get()"""
    )


def test_indentation_does_not_grow_with_nesting():
    depth = 150
    code = render("{{#a}}" * depth + "x" + "{{/a}}" * depth)
    deepest = max(len(line) - len(line.lstrip(" ")) for line in code.splitlines())
    assert deepest == 8
    assert code.count("def _s") == depth


def test_custom_function_name():
    assert render("x", function_name="page").startswith("def page(_c):")


def test_get_backend_aliases():
    assert isinstance(get_backend("native"), PythonRenderer)
    assert isinstance(get_backend("Python"), PythonRenderer)
    renderer = PythonRenderer()
    assert get_backend(renderer) is renderer


def test_get_backend_unknown():
    with pytest.raises(UnknownBackendError, match="cobol"):
        get_backend("cobol")

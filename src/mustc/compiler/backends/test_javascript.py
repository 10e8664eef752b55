from textwrap import dedent

from mustc.ast.parser import parse
from mustc.compiler.backends import JavaScriptRenderer, get_backend
from mustc.compiler.backends.javascript import quote
from mustc.compiler.compiler import Compiler
from mustc.config import CompileOptions


def render(source, partials=None, extended=False, compact=False):
    options = CompileOptions(compact_literals=compact)
    program = Compiler().compile(parse(source, partials, options), extended=extended)
    return JavaScriptRenderer().render(program)


def test_quote_escapes():
    assert quote('a "b"\n') == '"a \\"b\\"\\n"'
    assert quote("\x00\x01\x0b\x7f") == '"\\x00\\x01\\x0B\\x7F"'
    assert quote("\u2028\u2029") == '"\\u2028\\u2029"'
    assert quote("a\ud800b\udfff") == '"a\\uD800b\\uDFFF"'


def test_safe_quote_escapes_markup():
    assert quote("</script><!--") == '"\\x3C/script\\x3E\\x3C!--"'


def test_compact_quote():
    assert quote("</b>", compact=True) == '"</b>"'
    assert quote('say "hi"', compact=True) == "'say \"hi\"'"


def test_render_pretty():
    assert render("{{#p}}Hi {{name}}{{/p}}") == dedent(
        """\
        function(_c){
          var r=new MustacheRuntime(_c);
          var _s1=function(){
            r.l("Hi ");
            r.v("name");
          };
          r.s(0,"p",_s1);
          return r.get();
        }"""
    )


def test_render_compact_is_one_line():
    code = render("{{#p}}Hi {{name}}{{/p}}", compact=True)
    assert code == (
        "function(_c){var r=new MustacheRuntime(_c);"
        'var _s1=function(){r.l("Hi ");r.v("name");};'
        'r.s(0,"p",_s1);return r.get();}'
    )


def test_render_dotted_raw_inverted_and_partials():
    code = render(
        "{{{a.b}}}{{^x}}{{/x}}{{>node}}",
        {"node": "{{#kids}}{{>node}}{{/kids}}"},
        compact=True,
    )
    assert code == (
        "function(_c){var r=new MustacheRuntime(_c);"
        'var _p2=function(){var _s3=function(){r.p("node");};r.s(0,"kids",_s3);};'
        'r.d("node",_p2);'
        'r.v(["a","b"],1);'
        'var _s1=function(){};r.s(1,"x",_s1);'
        'r.p("node");return r.get();}'
    )


def test_render_extended_form():
    code = render("{{#p}}x{{/p}}", extended=True, compact=True)
    assert code.startswith("function(_c,_root){")
    assert "if(_root==null){" in code
    assert 'var _t={"p":_e1};' in code
    assert "_t[_root]();" in code


def test_get_backend_aliases():
    for name in ("script", "javascript", "js"):
        assert isinstance(get_backend(name), JavaScriptRenderer)

"""End-to-end rendering through the native backend."""

import mustc
from mustc import CompileOptions, WhitespaceMode, render_template
import pytest


class Item:
    def __init__(self, name, price):
        self.name = name
        self.price = price


def render(source, data, partials=None, **options):
    return render_template(source, data, partials, CompileOptions(**options))


def test_section_over_list():
    tree = mustc.compile("{{#p}}Hi {{name}}{{/p}}")
    fn = mustc.load(mustc.generate(tree, "native"))
    assert fn({"p": [{"name": "A"}, {"name": "B"}]}) == "Hi AHi B"


def test_escaping():
    data = {"x": '<b>&"x"</b>'}
    assert render("{{x}}", data) == "&lt;b&gt;&amp;&quot;x&quot;&lt;/b&gt;"
    assert render("{{{x}}}|{{&x}}", data) == '<b>&"x"</b>|<b>&"x"</b>'


@pytest.mark.parametrize("value", [None, False, 0, "", []])
def test_falsey_section_values(value):
    data = {"v": value}
    assert render("{{#v}}yes{{/v}}", data) == ""
    assert render("{{^v}}no{{/v}}", data) == "no"


def test_missing_value_is_falsey():
    assert render("[{{v}}]{{#v}}yes{{/v}}{{^v}}no{{/v}}", {}) == "[]no"


def test_zero_renders():
    assert render("{{n}} items", {"n": 0}) == "0 items"


def test_truthy_scalar_pushes_itself():
    assert render("{{#n}}<{{.}}>{{/n}}", {"n": 7}) == "<7>"


def test_empty_mapping_is_truthy():
    assert render("{{#m}}yes{{/m}}", {"m": {}}) == "yes"


def test_iteration_order_and_implicit_iterator():
    assert render("{{#items}}{{.}},{{/items}}", {"items": [1, 2, 3]}) == "1,2,3,"


def test_context_stack_fallback():
    data = {"a": {"x": 1}, "b": "outer"}
    assert render("{{#a}}{{x}}{{b}}{{/a}}", data) == "1outer"


def test_dotted_names():
    data = {"a": {"b": {"c": 5}}, "d": "no"}
    assert render("{{a.b.c}}", data) == "5"
    assert render("[{{a.x.c}}]", data) == "[]"
    assert render("[{{a.d}}]", data) == "[]"


def test_objects_expose_attributes():
    data = {"items": [Item("tea", 3), Item("cake", 0)]}
    source = "{{#items}}{{name}}={{price}};{{/items}}"
    assert render(source, data) == "tea=3;cake=0;"


@pytest.mark.parametrize("compact", [False, True])
def test_literal_text_is_reproduced_exactly(compact):
    text = 'He said "hi" and \'bye\'\\n\ttab\r\n\x00\x0b\x0c\x08 \u2028\u2029 caf\u00e9 </script> \ud800\udfff'
    assert render(text, {}, compact_literals=compact) == text


def test_recursive_partial_renders_tree():
    partials = {"node": "{{name}}({{#kids}}{{>node}}{{/kids}})"}
    data = {
        "name": "root",
        "kids": [
            {"name": "a", "kids": []},
            {"name": "b", "kids": [{"name": "c", "kids": []}]},
        ],
    }
    assert render("{{>node}}", data, partials) == "root(a()b(c()))"


def test_mutually_recursive_partials_terminate():
    partials = {"even": "E{{#next}}{{>odd}}{{/next}}", "odd": "O{{#next}}{{>even}}{{/next}}"}
    data = {"next": {"next": {"next": None}}}
    assert render("{{>even}}", data, partials) == "EOE"


def test_partial_inside_skipped_section_still_registers():
    partials = {"node": "[{{#kids}}{{>node}}{{/kids}}]"}
    source = "{{#never}}{{>node}}{{/never}}{{#kids}}{{>node}}{{/kids}}"
    assert render(source, {"kids": [{"kids": []}]}, partials) == "[]"


def test_extended_form_renders_named_section():
    tree = mustc.compile("head{{#p}}{{name}};{{/p}}{{#q.r}}Q{{/q.r}}tail")
    fn = mustc.load(mustc.generate(tree, "native", extended=True))
    data = {"p": [{"name": "a"}, {"name": "b"}], "q": {"r": True}}

    assert fn(data) == "heada;b;Qtail"
    assert fn(data, "p") == "a;b;"
    assert fn(data, "q.r") == "Q"
    assert fn(data, "missing") == ""


def test_collapse_whitespace():
    source = "<ul>\n    {{#items}}\n    <li>{{.}}</li>\n    {{/items}}\n</ul>"
    result = render(source, {"items": ["a"]}, whitespace_mode=WhitespaceMode.COLLAPSE)
    assert result == "<ul>  <li>a</li>  </ul>"


def test_standalone_lines():
    source = "<ul>\n  {{#items}}\n  <li>{{.}}</li>\n  {{/items}}\n</ul>\n"
    result = render(source, {"items": ["a", "b"]}, whitespace_mode=WhitespaceMode.STANDALONE)
    assert result == "<ul>\n  <li>a</li>\n  <li>b</li>\n</ul>\n"


def test_custom_function_name():
    tree = mustc.compile("{{x}}")
    fn = mustc.load(mustc.generate(tree, function_name="page"), function_name="page")
    assert fn({"x": "ok"}) == "ok"


def test_syntax_errors_surface():
    with pytest.raises(mustc.TemplateSyntaxError) as excinfo:
        mustc.compile("line one\n{{#a}}{{/b}}")
    assert excinfo.value.line == 2
    assert isinstance(excinfo.value, mustc.MustcError)


def test_unknown_backend():
    with pytest.raises(mustc.UnknownBackendError):
        mustc.generate(mustc.compile("x"), "cobol")


def test_deeply_nested_sections():
    depth = 120
    source = "{{#a}}" * depth + "x" + "{{/a}}" * depth
    assert render(source, {"a": True}) == "x"
    assert render(source, {"a": False}) == ""


def test_standalone_partial_indents_only_after_newlines():
    result = render(
        "  {{>p}}\n",
        {},
        {"p": "a\x0cb\x0bc\x1cd\x85e\u2028f\nnext\n"},
        whitespace_mode=WhitespaceMode.STANDALONE,
    )
    assert result == "  a\x0cb\x0bc\x1cd\x85e\u2028f\n  next\n"

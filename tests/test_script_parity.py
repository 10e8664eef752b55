"""The script backend renders exactly what the native backend renders.

Script bundles are evaluated in V8 through mini-racer.
"""

import json

from py_mini_racer import MiniRacer

import mustc
from mustc import CompileOptions, WhitespaceMode
from mustc.bundle import bundle
import pytest

CASES = [
    ("section", "{{#p}}Hi {{name}}{{/p}}", {"p": [{"name": "A"}, {"name": "B"}]}, {}),
    ("escaping", "{{x}}|{{{x}}}|{{&x}}", {"x": '<b>&"x"</b>'}, {}),
    ("falsey", "{{#a}}A{{/a}}{{#b}}B{{/b}}{{#c}}C{{/c}}{{^d}}D{{/d}}", {"a": None, "b": False, "c": [], "d": ""}, {}),
    ("zero", "{{n}} items{{#n}}!{{/n}}", {"n": 0}, {}),
    ("scalar section", "{{#n}}<{{.}}>{{/n}}", {"n": 7}, {}),
    ("empty mapping", "{{#m}}yes{{/m}}", {"m": {}}, {}),
    ("iteration", "{{#items}}{{.}},{{/items}}", {"items": [1, 2, 3]}, {}),
    ("stack fallback", "{{#a}}{{x}}{{b}}{{/a}}", {"a": {"x": 1}, "b": "outer"}, {}),
    ("dotted", "{{a.b.c}}[{{a.x.c}}][{{a.d}}]", {"a": {"b": {"c": 5}, "d": "no"}}, {}),
    ("missing", "[{{v}}]{{#v}}yes{{/v}}{{^v}}no{{/v}}", {}, {}),
    (
        "recursive partial",
        "{{>node}}",
        {"name": "root", "kids": [{"name": "a", "kids": []}, {"name": "b", "kids": [{"name": "c", "kids": []}]}]},
        {"node": "{{name}}({{#kids}}{{>node}}{{/kids}})"},
    ),
    (
        "mutual recursion",
        "{{>even}}",
        {"next": {"next": {"next": None}}},
        {"even": "E{{#next}}{{>odd}}{{/next}}", "odd": "O{{#next}}{{>even}}{{/next}}"},
    ),
    (
        "literals",
        "He said \"hi\" and 'bye'\\n\ttab\r\n\x00\x0b caf\u00e9 </script> \u2028\u2029{{x}}",
        {"x": "</script>"},
        {},
    ),
]


def render_script(code, *args):
    source = bundle(code, "script")
    call = ", ".join(json.dumps(arg) for arg in args)
    return MiniRacer().eval(f"{source}\nrender({call})")


@pytest.mark.parametrize("compact", [False, True])
@pytest.mark.parametrize("source,data,partials", [c[1:] for c in CASES], ids=[c[0] for c in CASES])
def test_script_matches_native(source, data, partials, compact):
    options = CompileOptions(compact_literals=compact)
    expected = mustc.render_template(source, data, partials, options)
    code = mustc.compile_to_code(source, partials, options, backend="script")
    assert render_script(code, data) == expected


def test_extended_form_matches_native():
    tree = mustc.compile("head{{#p}}{{name}};{{/p}}{{#q.r}}Q{{/q.r}}tail")
    native = mustc.load(mustc.generate(tree, "native", extended=True))
    script = mustc.generate(tree, "script", extended=True)
    data = {"p": [{"name": "a"}, {"name": "b"}], "q": {"r": True}}

    for name in (None, "p", "q.r", "missing"):
        args = (data,) if name is None else (data, name)
        assert render_script(script, *args) == native(*args)


def test_standalone_whitespace_matches_native():
    options = CompileOptions(whitespace_mode=WhitespaceMode.STANDALONE)
    source = "<ul>\n  {{#items}}\n  {{>item}}\n  {{/items}}\n</ul>\n"
    partials = {"item": "<li>{{.}}</li>\n"}
    data = {"items": ["a", "b"]}
    code = mustc.compile_to_code(source, partials, options, backend="script")
    assert render_script(code, data) == mustc.render_template(source, data, partials, options)


def test_deeply_nested_sections_match_native():
    depth = 120
    source = "{{#a}}" * depth + "x" + "{{/a}}" * depth
    code = mustc.compile_to_code(source, backend="script")
    assert render_script(code, {"a": True}) == "x"
    assert render_script(code, {"a": False}) == ""

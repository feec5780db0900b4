import io
from dataclasses import dataclass

import pytest

from herdweb.render.engine import (
    Engine,
    html,
    javascript,
    markdown_engine,
    plain,
    string,
    template,
)
from herdweb.render.options import Options
from herdweb.render.renderer import RenderError
from herdweb.render.template import jinja_engine

HTML_LAYOUT = "layout.html"
HTML_ALT_LAYOUT = "alt_layout.plush.html"
HTML_TEMPLATE = "my-template.html"
JS_LAYOUT = "layout.js"
JS_ALT_LAYOUT = "alt_layout.plush.js"
JS_TEMPLATE = "my-template.js"
MD_TEMPLATE = "my-template.md"


@dataclass
class Widget:
    name: str = ""


@dataclass
class FakeResponse:
    headers: dict


@dataclass
class FakeContext:
    response: FakeResponse


def new_engine():
    return Engine(Options(templates_fs={}, assets_fs={}))


def rendered(renderer, data):
    buf = io.BytesIO()
    renderer.render(buf, data)
    return buf.getvalue().decode("utf-8")


def test_engine_defaults():
    e = Engine()
    assert e.default_content_type == "text/html; charset=utf-8"
    assert set(e.template_engines) >= {"html", "plush", "text", "txt", "js", "md", "tmpl"}
    assert e.template_engines["md"] is markdown_engine
    assert e.template_engines["html"] is jinja_engine


def test_engine_keeps_custom_template_engine():
    def shout(source, data, helpers):
        return source.upper()

    e = Engine(Options(template_engines={"html": shout}))
    assert e.template_engines["html"] is shout
    assert e.template_engines["txt"] is jinja_engine


def test_default_raw_helper():
    assert rendered(Engine().string("{{ raw('<b>') }}"), {}) == "<b>"


def test_html_without_layout():
    e = new_engine()
    e.templates_fs = {HTML_TEMPLATE: "{{ name }}"}
    h = e.html(HTML_TEMPLATE)
    assert h.content_type == "text/html; charset=utf-8"
    assert rendered(h, {"name": "Mark"}).strip() == "Mark"


def test_html_with_layout():
    e = new_engine()
    e.templates_fs = {HTML_TEMPLATE: "{{ name }}", HTML_LAYOUT: "<body>{{ yield }}</body>"}
    e.html_layout = HTML_LAYOUT
    h = e.html(HTML_TEMPLATE)
    assert rendered(h, {"name": "Mark"}).strip() == "<body>Mark</body>"


def test_html_with_layout_override():
    e = new_engine()
    e.templates_fs = {
        HTML_TEMPLATE: "{{ name }}",
        HTML_LAYOUT: "<body>{{ yield }}</body>",
        HTML_ALT_LAYOUT: "<html>{{ yield }}</html>",
    }
    e.html_layout = HTML_LAYOUT
    h = e.html(HTML_TEMPLATE, HTML_ALT_LAYOUT)
    assert rendered(h, {"name": "Mark"}).strip() == "<html>Mark</html>"


def test_html_leading_slash():
    e = new_engine()
    e.templates_fs = {HTML_TEMPLATE: "{{ name }}", HTML_LAYOUT: "<body>{{ yield }}</body>"}
    e.html_layout = HTML_LAYOUT
    h = e.html("/my-template.html")
    assert rendered(h, {"name": "Mark"}).strip() == "<body>Mark</body>"


def test_html_missing_template():
    e = new_engine()
    with pytest.raises(RenderError):
        rendered(e.html("missing.html"), {})


def test_javascript_without_layout():
    e = new_engine()
    e.templates_fs = {JS_TEMPLATE: "alert({{ name }})"}
    h = e.javascript(JS_TEMPLATE)
    assert h.content_type == "application/javascript"
    assert rendered(h, {"name": "Mark"}).strip() == "alert(Mark)"


def test_javascript_with_layout():
    e = new_engine()
    e.templates_fs = {JS_TEMPLATE: "alert({{ name }})", JS_LAYOUT: "$({{ yield }})"}
    e.javascript_layout = JS_LAYOUT
    h = e.javascript(JS_TEMPLATE)
    assert rendered(h, {"name": "Mark"}).strip() == "$(alert(Mark))"


def test_javascript_with_layout_override():
    e = new_engine()
    e.templates_fs = {
        JS_TEMPLATE: "alert({{ name }})",
        JS_LAYOUT: "$({{ yield }})",
        JS_ALT_LAYOUT: "_({{ yield }})",
    }
    e.javascript_layout = JS_LAYOUT
    h = e.javascript(JS_TEMPLATE, JS_ALT_LAYOUT)
    assert rendered(h, {"name": "Mark"}).strip() == "_(alert(Mark))"


@pytest.mark.parametrize("partial_name", ["part", "part.js"])
def test_javascript_partial(partial_name):
    e = new_engine()
    e.templates_fs = {
        JS_TEMPLATE: "let a = 1;\n{{ partial('%s') }}" % partial_name,
        "_part.js": "alert('Hi {{ name }}!');",
    }
    h = e.javascript(JS_TEMPLATE)
    assert rendered(h, {"name": "Yonghwan"}) == "let a = 1;\nalert('Hi Yonghwan!');"


def test_markdown_without_layout():
    e = new_engine()
    e.templates_fs = {MD_TEMPLATE: "{{ name }}"}
    h = e.html(MD_TEMPLATE)
    assert h.content_type == "text/html; charset=utf-8"
    assert rendered(h, {"name": "Mark"}).strip() == "<p>Mark</p>"


def test_markdown_with_layout():
    e = new_engine()
    e.templates_fs = {MD_TEMPLATE: "{{ name }}", HTML_LAYOUT: "<body>{{ yield }}</body>"}
    e.html_layout = HTML_LAYOUT
    h = e.html(MD_TEMPLATE)
    assert rendered(h, {"name": "Mark"}).strip() == "<body><p>Mark</p>\n</body>"


def test_markdown_engine_formats():
    out = markdown_engine("**hi** {{ name }}", {"name": "x"}, {})
    assert out == "<p><strong>hi</strong> x</p>\n"


def test_markdown_engine_plain_text_skips_markdown():
    assert markdown_engine("**hi**", {"contentType": "text/plain"}, {}) == "**hi**"


@pytest.mark.parametrize("example", ["Mark", "Jém"])
def test_plain(example):
    e = new_engine()
    e.templates_fs = {"test.txt": "{{ name }}"}
    re = e.plain("test.txt")
    assert re.content_type == "text/plain; charset=utf-8"
    assert rendered(re, {"name": example}) == example


@pytest.mark.parametrize("example", ["Mark", "Jém"])
def test_string(example):
    re = Engine(Options()).string("{{ name }}")
    assert re.content_type == "text/plain; charset=utf-8"
    assert rendered(re, {"name": example}) == example


def test_string_with_format_args():
    assert rendered(Engine().string("%s and %d", "hi", 3), None) == "hi and 3"


def test_string_without_text_engine():
    e = Engine()
    del e.template_engines["text"]
    with pytest.raises(RenderError):
        rendered(e.string("x"), {})


def test_template_partial():
    e = new_engine()
    e.templates_fs = {HTML_TEMPLATE: "Foo > {{ name }}", "_foo.html": "{{ partial('foo.html') }}"}
    re = e.template("foo/bar", HTML_TEMPLATE)
    assert re.content_type == "foo/bar"
    assert rendered(re, {"name": "Mark"}).strip() == "Foo > Mark"


def test_template_partial_custom_feeder():
    e = new_engine()
    e.templates_fs = {
        "base.plush.html": "{{ partial('foo.plush.html') }}",
        "_foo.plush.html": "other",
    }
    e.helpers["partialFeeder"] = lambda path: "custom"
    assert rendered(e.html("base.plush.html"), {}).strip() == "custom"

    e.helpers["partialFeeder"] = None
    assert rendered(e.html("base.plush.html"), {}).strip() == "other"


def test_template_partial_with_for_and_local():
    e = new_engine()
    e.templates_fs = {
        "for.html": "{% for user in users %}{{ partial('row', {'say': 'Hi', 'user': user}) }}{% endfor %}",
        "_row.html": "{{ say }} {{ user.name }}, ",
    }
    re = e.template("text/html; charset=utf-8", "for.html")
    assert re.content_type == "text/html; charset=utf-8"
    out = rendered(re, {"users": [Widget(name="Mark"), Widget(name="Yonghwan")]})
    assert out.strip() == "Hi Mark, Hi Yonghwan,"


def test_template_partial_with_global_and_local_context():
    e = new_engine()
    e.templates_fs = {
        "index.html": "{{ partial('foo.html', {'other': 'Other'}) }}",
        "_foo.html": "{{ other }}|{{ name }}",
    }
    re = e.template("foo/bar", "index.html")
    assert rendered(re, {"name": "Mark"}).strip() == "Other|Mark"


def test_template_partial_with_layout():
    e = new_engine()
    e.templates_fs = {
        "index.html": "{{ partial('foo.html', {'layout': 'layout.html'}) }}",
        "_layout.html": "Layout > {{ yield }}",
        "_foo.html": "Foo > {{ name }}",
    }
    re = e.template("foo/bar", "index.html")
    assert rendered(re, {"name": "Mark"}).strip() == "Layout > Foo > Mark"


def test_engine_func():
    def fn(w, data):
        w.write(data["name"].encode("utf-8"))

    re = Engine().func("foo/bar", fn)
    assert re.content_type == "foo/bar"
    assert rendered(re, {"name": "Mark"}) == "Mark"


def test_engine_json_and_xml():
    e = Engine()
    assert rendered(e.json({"hello": "world"}), None).strip() == '{"hello":"world"}'
    assert rendered(e.xml(Widget(name="Mark")), None).strip() == (
        '<?xml version="1.0" encoding="UTF-8"?>\n<Widget>\n  <name>Mark</name>\n</Widget>'
    )


def test_engine_download():
    ctx = FakeContext(FakeResponse({}))
    re = Engine().download(ctx, "filename.pdf", io.BytesIO(b"data"))
    assert rendered(re, None) == "data"
    assert re.content_type == "application/pdf"
    assert ctx.response.headers["Content-Length"] == "4"
    assert ctx.response.headers["Content-Disposition"] == "attachment; filename=filename.pdf"


def test_module_level_builders_content_types():
    assert html("a.html").content_type == "text/html; charset=utf-8"
    assert javascript("a.js").content_type == "application/javascript"
    assert plain("a.txt").content_type == "text/plain; charset=utf-8"
    assert template("foo/bar", "a").content_type == "foo/bar"


def test_module_level_string():
    assert rendered(string("{{ name }}!"), {"name": "Mark"}) == "Mark!"
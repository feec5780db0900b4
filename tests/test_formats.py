import io
from dataclasses import dataclass

import pytest

from herdweb.render.formats import JSONRenderer, XMLRenderer, json, xml
from herdweb.render.renderer import RenderError


@dataclass
class User:
    xml_name = "user"
    Name: str


@dataclass
class Car:
    ID: int
    Name: str


def _render(renderer):
    bb = io.BytesIO()
    renderer.render(bb, None)
    return bb.getvalue().decode("utf-8")


def test_json():
    re = json({"hello": "world"})
    assert re.content_type == "application/json; charset=utf-8"
    assert _render(re).strip() == '{"hello":"world"}'


def test_json_list():
    re = json(["Honda", "Toyota", "Ford", "Chevy"])
    assert _render(re).strip() == '["Honda","Toyota","Ford","Chevy"]'


def test_json_ends_with_newline():
    assert _render(JSONRenderer({"a": 1})).endswith("\n")


def test_json_dataclass_round_trip():
    import json as stdjson

    out = _render(json(Car(ID=1, Name="Honda")))
    assert stdjson.loads(out) == {"ID": 1, "Name": "Honda"}


def test_json_escapes_html_characters():
    import json as stdjson

    out = _render(json({"tag": "<b>&</b>"}))
    assert "<" not in out and ">" not in out and "&" not in out
    assert stdjson.loads(out) == {"tag": "<b>&</b>"}


def test_json_unsupported_value():
    with pytest.raises(RenderError):
        _render(json({"x": object()}))


def test_xml():
    re = xml(User(Name="Mark"))
    assert re.content_type == "application/xml; charset=utf-8"
    assert _render(re).strip() == (
        '<?xml version="1.0" encoding="UTF-8"?>\n<user>\n  <Name>Mark</Name>\n</user>'
    )


def test_xml_list_of_strings():
    out = _render(XMLRenderer(["Honda", "Toyota", "Ford", "Chevy"]))
    assert out.strip() == (
        '<?xml version="1.0" encoding="UTF-8"?>\n<string>Honda</string>\n'
        "<string>Toyota</string>\n<string>Ford</string>\n<string>Chevy</string>"
    )


def test_xml_uses_class_name():
    out = _render(xml(Car(ID=1, Name="Honda")))
    assert out.splitlines()[1] == "<Car>"
    assert "  <ID>1</ID>" in out.splitlines()
    assert out.splitlines()[-1] == "</Car>"


def test_xml_escapes_text():
    out = _render(xml(User(Name="a<b")))
    assert "<Name>a&lt;b</Name>" in out


def test_xml_mapping_unsupported():
    with pytest.raises(RenderError):
        _render(xml({"hello": "world"}))
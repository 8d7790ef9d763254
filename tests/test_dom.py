import pytest

from fragment_engine.dom import (
    Element,
    HTMLParser,
    Text,
    detach,
    find_by_id,
    insert_adjacent,
    to_html,
)


def test_parse_fragment_returns_detached_roots():
    nodes = HTMLParser.parse_fragment('<li id="x"><a href="#x">X</a></li><li id="y"></li>')

    assert [node.id for node in nodes] == ["x", "y"]
    assert all(node.parent is None for node in nodes)
    assert isinstance(nodes[0].children[0].children[0], Text)


def test_script_body_is_raw_text():
    nodes = HTMLParser.parse_fragment('<script>if (a < b) { go("<div>"); }</script>')

    assert nodes[0].tag == "script"
    assert nodes[0].children[0].text == 'if (a < b) { go("<div>"); }'


def test_entities_are_unescaped_and_reescaped():
    nodes = HTMLParser.parse_fragment('<p title="a &amp; b">1 &lt; 2</p>')

    assert nodes[0].attributes["title"] == "a & b"
    assert nodes[0].children[0].text == "1 < 2"
    assert to_html(nodes[0]) == '<p title="a &amp; b">1 &lt; 2</p>'


def test_insert_adjacent_and_detach():
    parent = HTMLParser.parse_fragment('<ul><li id="a"></li><li id="b"></li></ul>')[0]
    anchor = find_by_id(parent, "a")
    new = [Element("li", {"id": "n"}, None)]

    insert_adjacent(anchor, new, "after")
    assert [child.id for child in parent.children] == ["a", "n", "b"]
    assert new[0].parent is parent

    detach(new[0])
    assert [child.id for child in parent.children] == ["a", "b"]

    with pytest.raises(ValueError):
        insert_adjacent(anchor, new, "inside")


def test_style_helpers_keep_other_declarations():
    element = Element("div", {"style": "width: 1%;height:2px"}, None)

    element.set_style("width", "50%")

    assert element.attributes["style"] == "width: 50%; height: 2px"
    assert element.get_style("height") == "2px"


def test_class_helpers():
    element = Element("div", {"class": "tab-pane active"}, None)

    element.add_class("show")
    element.add_class("show")
    element.remove_class("active")

    assert element.classes() == ["tab-pane", "show"]

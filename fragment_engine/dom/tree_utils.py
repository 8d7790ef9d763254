"""DOM Tree utilities"""
import html

from .element import Element
from .text import Text

VOID_TAGS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}
RAW_TEXT_TAGS = {"script", "style"}


def tree_to_list(tree, result_list):
    """DOM 트리를 flat list로 변환"""
    result_list.append(tree)
    for child in tree.children:
        tree_to_list(child, result_list)
    return result_list


def find_by_id(root, element_id):
    """id 속성으로 요소 검색 (없으면 None)"""
    for node in tree_to_list(root, []):
        if isinstance(node, Element) and node.attributes.get("id") == element_id:
            return node
    return None


def find_all(root, predicate):
    return [node for node in tree_to_list(root, [])
            if isinstance(node, Element) and predicate(node)]


def collect_ids(nodes):
    """노드 목록(하위 포함)에 등장하는 모든 id"""
    ids = []
    for node in nodes:
        for elt in tree_to_list(node, []):
            if isinstance(elt, Element) and elt.attributes.get("id"):
                ids.append(elt.attributes["id"])
    return ids


def element_siblings(node):
    """같은 부모를 가진 Element 목록 (자신 포함, 문서 순서)"""
    if node.parent is None:
        return [node]
    return [child for child in node.parent.children if isinstance(child, Element)]


def insert_adjacent(anchor, nodes, position):
    """anchor의 앞(before) 또는 뒤(after)에 nodes를 순서대로 삽입"""
    parent = anchor.parent
    if parent is None:
        raise ValueError(f"{anchor!r} has no parent")

    index = parent.children.index(anchor)
    if position == "after":
        index += 1
    elif position != "before":
        raise ValueError(f"Unknown position: {position!r}")

    parent.children[index:index] = nodes
    for node in nodes:
        node.parent = parent


def detach(node):
    """노드를 부모에서 분리"""
    if node.parent is not None:
        node.parent.children.remove(node)
        node.parent = None


def to_html(node):
    """라이브 트리를 HTML 마크업으로 직렬화"""
    if isinstance(node, Text):
        if node.parent is not None and node.parent.tag in RAW_TEXT_TAGS:
            return node.text
        return html.escape(node.text, quote=False)

    attrs = ""
    for key, value in node.attributes.items():
        if value == "":
            attrs += f" {key}"
        else:
            attrs += f' {key}="{html.escape(value, quote=True)}"'

    if node.tag in VOID_TAGS:
        return f"<{node.tag}{attrs}>"

    inner = "".join(to_html(child) for child in node.children)
    return f"<{node.tag}{attrs}>{inner}</{node.tag}>"

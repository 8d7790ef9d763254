# DOM (Document Object Model) components
from .element import Element, parse_style, format_style
from .text import Text
from .html_parser import HTMLParser
from .tree_utils import (
    tree_to_list,
    find_by_id,
    find_all,
    collect_ids,
    element_siblings,
    insert_adjacent,
    detach,
    to_html,
)

__all__ = [
    'Element',
    'Text',
    'HTMLParser',
    'parse_style',
    'format_style',
    'tree_to_list',
    'find_by_id',
    'find_all',
    'collect_ids',
    'element_siblings',
    'insert_adjacent',
    'detach',
    'to_html',
]

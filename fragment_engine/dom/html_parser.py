import html
from typing import List

from .element import Element
from .text import Text


class HTMLParser:
    SELF_CLOSING_TAGS = [
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "param", "source", "track", "wbr"
    ]
    HEAD_TAGS = [
        "base", "basefont", "bgsound", "noscript",
        "link", "meta", "title", "style", "script",
    ]
    # 내용을 태그로 해석하지 않는 요소
    RAW_TEXT_TAGS = ["script", "style"]

    def __init__(self, body):
        self.body = body
        self.unfinished: List[Element] = []

    @classmethod
    def parse_fragment(cls, markup: str) -> list:
        """문서 조각을 파싱하여 최상위 노드 목록 반환 (부모 연결 해제됨)"""
        doc = cls("<html><body>" + markup + "</body></html>").parse()
        body = doc.children[-1]
        nodes = body.children
        for node in nodes:
            node.parent = None
        return nodes

    def parse(self):
        text = ""
        in_tag = False
        i = 0
        while i < len(self.body):
            c = self.body[i]
            if c == "<" and not in_tag:
                in_tag = True
                if text: self.add_text(text)
                text = ""
            elif c == ">" and in_tag:
                in_tag = False
                tag = self.add_tag(text)
                text = ""
                if tag in self.RAW_TEXT_TAGS and self.unfinished \
                        and self.unfinished[-1].tag == tag:
                    i = self.read_raw_text(tag, i + 1)
                    continue
            else:
                text += c
            i += 1
        if not in_tag and text:
            self.add_text(text)
        return self.finish()

    def read_raw_text(self, tag, start):
        """</script> 같은 닫는 태그까지 그대로 텍스트로 읽음"""
        end_marker = "</" + tag
        end = self.body.casefold().find(end_marker, start)
        if end == -1:
            end = len(self.body)
        raw = self.body[start:end]
        if raw:
            parent = self.unfinished[-1]
            parent.children.append(Text(raw, parent))
        return end

    def implicit_tags(self, tag):
        while True:
            open_tags = [node.tag for node in self.unfinished]

            if open_tags == [] and tag != "html":
                self.add_tag("html")

            elif open_tags == ["html"] \
                and tag not in ["head", "body", "/html"]:
                if tag in self.HEAD_TAGS:
                    self.add_tag("head")
                else:
                    self.add_tag("body")

            elif open_tags == ["html", "head"] and \
                tag not in ["/head"] + self.HEAD_TAGS:
                self.add_tag("/head")

            else:
                break

    def add_text(self, text: str):
        if text.isspace(): return
        self.implicit_tags(None)
        parent = self.unfinished[-1]
        node = Text(html.unescape(text), parent)
        parent.children.append(node)

    def add_tag(self, text: str):
        tag, attributes = self.get_attributes(text)
        if not tag or tag.startswith("!"): return None

        self.implicit_tags(tag)
        if tag.startswith("/"):
            if len(self.unfinished) == 1: return tag
            node = self.unfinished.pop()
            parent = self.unfinished[-1]
            parent.children.append(node)

        elif tag in self.SELF_CLOSING_TAGS or text.rstrip().endswith("/"):
            parent = self.unfinished[-1]
            node = Element(tag, attributes, parent)
            parent.children.append(node)

        else:
            parent = self.unfinished[-1] if self.unfinished else None
            node = Element(tag, attributes, parent)
            self.unfinished.append(node)
        return tag

    def finish(self):
        if not self.unfinished:
            self.implicit_tags(None)

        while len(self.unfinished) > 1:
            node = self.unfinished.pop()
            parent = self.unfinished[-1]
            parent.children.append(node)
        return self.unfinished.pop()

    def get_attributes(self, text: str):
        text = text.strip()
        if text.endswith("/"):
            text = text[:-1]
        parts = text.split(None, 1)  # 태그와 나머지를 분리
        tag = parts[0].casefold() if parts else ""
        attributes = {}

        if len(parts) > 1:
            rest = parts[1]
            i = 0
            while i < len(rest):
                # 공백 건너뛰기
                while i < len(rest) and rest[i].isspace():
                    i += 1
                if i >= len(rest):
                    break

                # 속성 이름 찾기
                key_start = i
                while i < len(rest) and rest[i] != "=" and not rest[i].isspace():
                    i += 1
                key = rest[key_start:i].casefold()

                if not key:
                    break

                while i < len(rest) and rest[i].isspace():
                    i += 1

                if i >= len(rest) or rest[i] != "=":
                    attributes[key] = ""
                    continue

                i += 1  # '=' 건너뛰기
                while i < len(rest) and rest[i].isspace():
                    i += 1

                # 값 파싱 (따옴표 처리)
                if i < len(rest) and rest[i] in ["'", "\""]:
                    quote = rest[i]
                    i += 1
                    value_start = i
                    while i < len(rest) and rest[i] != quote:
                        i += 1
                    value = rest[value_start:i]
                    i += 1  # 닫는 따옴표 건너뛰기
                else:
                    value_start = i
                    while i < len(rest) and not rest[i].isspace():
                        i += 1
                    value = rest[value_start:i]

                attributes[key] = html.unescape(value)

        return tag, attributes

"""
Tag - 서버 측 UI 트리 노드

Serializer의 입력으로 쓰이는 최소한의 태그 객체입니다.
자식으로 Tag, 문자열, AssetRef(의존성)를 받습니다.
"""
from dataclasses import dataclass
from typing import List

from ..assets import AssetRef


def _attr_name(name: str) -> str:
    # class_ -> class, data_target -> data-target
    return name.rstrip("_").replace("_", "-")


class Tag:
    def __init__(self, name, *children, **attrs):
        self.name = name
        self.attrs = {_attr_name(key): value for key, value in attrs.items()}
        self.children: list = []
        self.dependencies: List[AssetRef] = []
        for child in children:
            self.append(child)

    def append(self, child):
        if child is None:
            return self
        if isinstance(child, AssetRef):
            self.dependencies.append(child)
        elif isinstance(child, (list, tuple)):
            for item in child:
                self.append(item)
        else:
            self.children.append(child)
        return self

    def add_dependency(self, ref: AssetRef):
        self.dependencies.append(ref)
        return self

    def __repr__(self):
        return f"Tag({self.name!r}, id={self.attrs.get('id')!r})"


@dataclass
class TabPanel:
    """탭 하나 = 네비게이션 link + content pane"""
    value: str
    link: Tag
    content: Tag


def tab_panel(title, *children, value=None) -> TabPanel:
    """
    탭 패널 생성

    link는 data-target 속성으로 content pane의 id를 가리킵니다.
    """
    value = value or str(title)
    link = Tag(
        "li",
        Tag("a", title, class_="nav-link", href=f"#{value}",
            data_target=value, role="tab", aria_selected="false"),
        class_="nav-item", id=f"{value}-tab", role="presentation",
    )
    content = Tag("div", *children, class_="tab-pane", id=value, role="tabpanel")
    return TabPanel(value, link, content)

"""Fragment - 한 번 삽입되는 마크업 + 의존성 묶음 (불변 값 객체)"""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from ..assets import AssetRef
from ..common.errors import EnvelopeError
from ..dom import Element, HTMLParser


class FragmentKind(Enum):
    CONTENT = "content"
    LINK = "link"


@dataclass(frozen=True)
class Fragment:
    id: str
    markup: str
    dependencies: Tuple[AssetRef, ...] = ()
    kind: FragmentKind = FragmentKind.CONTENT

    def parse(self) -> list:
        """마크업을 새 DOM 노드 목록으로 파싱 (호출할 때마다 새 노드)"""
        return HTMLParser.parse_fragment(self.markup)

    def to_wire(self) -> dict:
        return {
            "html": self.markup,
            "deps": [dep.to_wire() for dep in self.dependencies],
        }

    @classmethod
    def from_wire(cls, data, kind: FragmentKind) -> "Fragment":
        """채널 메시지의 {html, deps}를 Fragment로 변환 (검증 포함)"""
        if not isinstance(data, dict):
            raise EnvelopeError(f"{kind.value} must be an object")
        markup = data.get("html")
        if not isinstance(markup, str):
            raise EnvelopeError(f"{kind.value}.html must be a string")
        deps = data.get("deps") or []
        if not isinstance(deps, list):
            raise EnvelopeError(f"{kind.value}.deps must be a list")

        return cls(
            id=root_id(markup, kind),
            markup=markup,
            dependencies=tuple(AssetRef.from_wire(dep) for dep in deps),
            kind=kind,
        )


def root_id(markup: str, kind: FragmentKind) -> str:
    """마크업 첫 번째 요소의 id"""
    for node in HTMLParser.parse_fragment(markup):
        if isinstance(node, Element):
            if not node.id:
                raise EnvelopeError(f"{kind.value} root <{node.tag}> has no id")
            return node.id
    raise EnvelopeError(f"{kind.value} markup has no root element")

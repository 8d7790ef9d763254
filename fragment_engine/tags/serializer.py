"""
FragmentSerializer - Tag 트리를 전송 가능한 Fragment로 변환

- 마크업: 텍스트/속성 값 이스케이프, void 요소는 닫는 태그 없음
- 의존성: 노드 자신의 의존성 → 자식 순서(pre-order)로 처음 등장한 순서 유지,
  name+version으로 중복 제거, 세션이 이미 가진 에셋은 제외
- 순환 참조가 있으면 SerializationError
"""
import html
import itertools
from typing import Iterable, List, Optional, Tuple

from ..assets import AssetRef
from ..common.errors import SerializationError
from ..dom.tree_utils import RAW_TEXT_TAGS, VOID_TAGS
from .fragment import Fragment, FragmentKind
from .tag import TabPanel, Tag


class FragmentSerializer:
    def __init__(self):
        self._ids = itertools.count(1)

    def serialize(self, node: Tag, kind: FragmentKind = FragmentKind.CONTENT,
                  known: Iterable[Tuple[str, str]] = ()) -> Fragment:
        """node를 Fragment로 변환 (known: 세션이 이미 가진 에셋 키)"""
        if not isinstance(node, Tag):
            raise SerializationError(f"Fragment root must be a Tag, got {type(node).__name__}")

        dependencies = self.collect_dependencies(node, known)

        fragment_id = node.attrs.get("id")
        if not fragment_id:
            fragment_id = f"fragment-{next(self._ids)}"

        markup = self.render(node, root_id=fragment_id)
        return Fragment(fragment_id, markup, tuple(dependencies), kind)

    def serialize_tab(self, panel: TabPanel,
                      known: Iterable[Tuple[str, str]] = ()) -> Tuple[Fragment, Fragment]:
        """(content, link) 쌍으로 변환 - link는 content가 가져올 에셋을 다시 싣지 않음"""
        content = self.serialize(panel.content, FragmentKind.CONTENT, known)
        seen = set(known) | {dep.key for dep in content.dependencies}
        link = self.serialize(panel.link, FragmentKind.LINK, seen)
        return content, link

    def collect_dependencies(self, node: Tag,
                             known: Iterable[Tuple[str, str]] = ()) -> List[AssetRef]:
        seen = set(known)
        result: List[AssetRef] = []
        self._walk(node, set(), seen, result)
        return result

    def _walk(self, node, path, seen, result):
        if not isinstance(node, Tag):
            return
        if id(node) in path:
            raise SerializationError(f"Cycle detected at {node!r}")

        for dep in node.dependencies:
            if dep.key not in seen:
                seen.add(dep.key)
                result.append(dep)

        path.add(id(node))
        for child in node.children:
            self._walk(child, path, seen, result)
        path.discard(id(node))

    def render(self, node, root_id: Optional[str] = None) -> str:
        if not isinstance(node, Tag):
            return html.escape(str(node), quote=False)

        attrs = dict(node.attrs)
        if root_id is not None:
            attrs["id"] = root_id

        out = f"<{node.name}"
        for key, value in attrs.items():
            if value is None or value is False:
                continue
            if value is True:
                out += f" {key}"
            else:
                out += f' {key}="{html.escape(str(value), quote=True)}"'
        out += ">"

        if node.name in VOID_TAGS:
            return out

        if node.name in RAW_TEXT_TAGS:
            out += "".join(str(child) for child in node.children)
        else:
            out += "".join(self.render(child) for child in node.children)
        return out + f"</{node.name}>"

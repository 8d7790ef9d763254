"""
FragmentInjector - 라이브 트리에 탭(content + link)을 삽입/제거

탭 마크업 규약:
- 탭 그룹의 네비게이션 컨테이너: id=inputId, class="nav"
- link: data-target 속성이 content pane의 id를 가리키는 요소
  (네비게이션 컨테이너의 직계 자식 항목 안에 위치)
- content pane: class="tab-pane", 같은 부모 아래 pane들이 하나의 그룹
- 활성 pane: class "active show", 해당 link: class "active", aria-selected="true"

삽입은 원자적입니다. 앵커 확인, id 충돌 확인, 의존성 로드가 모두
성공한 뒤에만 트리를 변경합니다.
"""
import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from ..common.constants import ACTIVE_CLASS, LINK_TARGET_ATTR, SHOW_CLASS, TAB_PANE_CLASS
from ..common.errors import (
    AnchorNotFoundError,
    AssetLoadError,
    DuplicateIdError,
    FragmentEngineError,
)
from ..dom import (
    Element,
    collect_ids,
    detach,
    element_siblings,
    find_all,
    find_by_id,
    insert_adjacent,
)
from ..profiling import MeasureTime

if TYPE_CHECKING:
    from ..channel.envelopes import InsertTab
    from ..session.session import Session

logger = logging.getLogger(__name__)


class FragmentState(Enum):
    PENDING = auto()
    DEPENDENCIES_LOADING = auto()
    INSERTED = auto()
    ACTIVE = auto()
    INACTIVE = auto()
    REMOVED = auto()
    FAILED = auto()


TRANSITIONS = {
    FragmentState.PENDING: {FragmentState.DEPENDENCIES_LOADING, FragmentState.FAILED},
    FragmentState.DEPENDENCIES_LOADING: {FragmentState.INSERTED, FragmentState.FAILED},
    FragmentState.INSERTED: {FragmentState.ACTIVE, FragmentState.INACTIVE},
    FragmentState.ACTIVE: {FragmentState.INACTIVE, FragmentState.REMOVED},
    FragmentState.INACTIVE: {FragmentState.ACTIVE, FragmentState.REMOVED},
    FragmentState.REMOVED: set(),
    FragmentState.FAILED: set(),
}
TERMINAL_STATES = {FragmentState.REMOVED, FragmentState.FAILED}


class TabLink:
    """pane 하나에 대응하는 link 요소들"""

    def __init__(self, element: Element, item: Element, nav: Optional[Element]):
        self.element = element  # data-target을 가진 요소
        self.item = item        # 네비게이션 컨테이너의 직계 자식
        self.nav = nav


class FragmentInjector:
    def __init__(self, session: "Session"):
        self.session = session
        self.states: Dict[str, FragmentState] = {}
        self._activation_callbacks: List[Callable[[Optional[str], Optional[str]], None]] = []

    def on_activate(self, callback: Callable[[Optional[str], Optional[str]], None]):
        """활성 pane 변경 시 callback(group_id, pane_id) 호출"""
        self._activation_callbacks.append(callback)

    def state_of(self, fragment_id: str) -> Optional[FragmentState]:
        return self.states.get(fragment_id)

    # === 삽입 ===

    def insert(self, envelope: "InsertTab") -> bool:
        """
        content/link 쌍 삽입

        Returns:
            트리가 실제로 변경되었으면 True (세션이 로드 도중 닫히면 False)

        Raises:
            AnchorNotFoundError, DuplicateIdError, AssetLoadError
        """
        content, link = envelope.content, envelope.link
        document = self.session.document

        with MeasureTime("insert_tab", "inject", {"id": content.id}):
            try:
                if document is None:
                    raise AnchorNotFoundError(envelope.target, "session has no document")
                anchor_pane, anchor_link = self._resolve_anchors(
                    document, envelope.input_id, envelope.target)

                content_nodes = content.parse()
                link_nodes = link.parse()
                self._check_ids(document, content_nodes + link_nodes)
            except FragmentEngineError:
                self._fail(content.id)
                raise

            self._start(content.id)
            try:
                self.session.loader.load_fragments(content.dependencies, link.dependencies)
            except AssetLoadError:
                self._set_state(content.id, FragmentState.FAILED)
                raise

            if self.session.closed or self.session.document is not document:
                logger.info("Session closed while loading %s, insertion skipped", content.id)
                self._set_state(content.id, FragmentState.FAILED)
                return False

            position = envelope.position.value
            insert_adjacent(anchor_link.item, link_nodes, position)
            insert_adjacent(anchor_pane, content_nodes, position)
            self._set_state(content.id, FragmentState.INSERTED)

            pane = find_by_id(document, content.id)
            if envelope.select:
                self._activate(pane)
            else:
                self._deactivate(pane, self._find_link(document, content.id))

        logger.info("Inserted tab %s %s %s in #%s",
                    content.id, position, envelope.target, envelope.input_id)
        return True

    def _resolve_anchors(self, document, input_id, target):
        nav = find_by_id(document, input_id)
        if nav is None:
            raise AnchorNotFoundError(input_id, "tab group")

        pane = find_by_id(document, target)
        if pane is None:
            raise AnchorNotFoundError(target)

        link = self._find_link(document, target)
        if link is None or link.nav is not nav:
            raise AnchorNotFoundError(target, f"no link for it in #{input_id}")
        return pane, link

    def _check_group(self, document, link, pane_id, input_id):
        if input_id is None:
            return
        nav = find_by_id(document, input_id)
        if nav is None:
            raise AnchorNotFoundError(input_id, "tab group")
        if link is None or link.nav is not nav:
            raise AnchorNotFoundError(pane_id, f"not a tab of #{input_id}")

    def _check_ids(self, document, nodes):
        existing = set(collect_ids([document]))
        seen = set()
        for element_id in collect_ids(nodes):
            if element_id in existing or element_id in seen:
                raise DuplicateIdError(element_id)
            seen.add(element_id)

    # === 제거 ===

    def remove(self, fragment_id: str, input_id: Optional[str] = None) -> bool:
        """
        pane과 짝이 되는 link를 분리

        input_id가 주어지면 그 탭 그룹에 속한 pane만 제거합니다.
        활성 pane을 제거하면 이전 형제 → 다음 형제 → 없음 순으로 대체 활성화
        """
        document = self.session.document
        pane = find_by_id(document, fragment_id) if document is not None else None
        if pane is None:
            raise AnchorNotFoundError(fragment_id)
        link = self._find_link(document, fragment_id)
        self._check_group(document, link, fragment_id, input_id)

        with MeasureTime("remove_tab", "inject", {"id": fragment_id}):
            group_id = self._group_id(pane, link)
            was_active = pane.has_class(ACTIVE_CLASS)

            panes = self._panes_of(pane)
            index = panes.index(pane)
            fallback = None
            if index > 0:
                fallback = panes[index - 1]
            elif index + 1 < len(panes):
                fallback = panes[index + 1]

            detach(pane)
            if link is not None:
                detach(link.item)
            self._set_state(fragment_id, FragmentState.REMOVED)

            if was_active:
                if fallback is not None:
                    self._activate(fallback)
                else:
                    self._notify(group_id, None)

        logger.info("Removed tab %s", fragment_id)
        return True

    # === 활성화 ===

    def select(self, pane_id: str, input_id: Optional[str] = None):
        document = self.session.document
        pane = find_by_id(document, pane_id) if document is not None else None
        if pane is None:
            raise AnchorNotFoundError(pane_id)
        self._check_group(document, self._find_link(document, pane_id), pane_id, input_id)
        self._activate(pane)

    def _activate(self, pane: Element):
        """pane을 그룹 내 유일한 활성 pane으로 만들고 콜백 호출"""
        document = self.session.document
        for sibling in self._panes_of(pane):
            if sibling is not pane:
                self._deactivate(sibling, self._find_link(document, sibling.id))

        pane.add_class(ACTIVE_CLASS)
        pane.add_class(SHOW_CLASS)
        link = self._find_link(document, pane.id)
        if link is not None:
            link.element.add_class(ACTIVE_CLASS)
            link.element.attributes["aria-selected"] = "true"
        self._set_state(pane.id, FragmentState.ACTIVE)

        self._notify(self._group_id(pane, link), pane.id)

    def _deactivate(self, pane: Element, link: Optional[TabLink]):
        pane.remove_class(ACTIVE_CLASS)
        pane.remove_class(SHOW_CLASS)
        if link is not None:
            link.element.remove_class(ACTIVE_CLASS)
            link.element.attributes["aria-selected"] = "false"
        self._set_state(pane.id, FragmentState.INACTIVE)

    def _notify(self, group_id, pane_id):
        for callback in self._activation_callbacks:
            try:
                callback(group_id, pane_id)
            except Exception:
                logger.exception("Activation callback %r failed", callback)

    # === 탐색 ===

    def _panes_of(self, pane: Element) -> List[Element]:
        return [p for p in element_siblings(pane)
                if p is pane or p.has_class(TAB_PANE_CLASS)]

    def _find_link(self, document, pane_id) -> Optional[TabLink]:
        if document is None or not pane_id:
            return None
        targets = (pane_id, "#" + pane_id)
        matches = find_all(document, lambda n: n.attributes.get(LINK_TARGET_ATTR) in targets)
        if not matches:
            return None

        element = matches[0]
        nav = element.parent
        while nav is not None and not (isinstance(nav, Element) and nav.has_class("nav")):
            nav = nav.parent

        item = element
        if nav is not None:
            while item.parent is not nav:
                item = item.parent
        return TabLink(element, item, nav)

    def _group_id(self, pane: Element, link: Optional[TabLink]):
        if link is not None and link.nav is not None and link.nav.id:
            return link.nav.id
        if pane.parent is not None:
            return pane.parent.attributes.get("id")
        return None

    # === 상태 기계 ===

    def _start(self, fragment_id):
        self.states[fragment_id] = FragmentState.PENDING
        self._set_state(fragment_id, FragmentState.DEPENDENCIES_LOADING)

    def _fail(self, fragment_id):
        # 이미 살아 있는 같은 id의 fragment 상태는 건드리지 않음
        current = self.states.get(fragment_id)
        if current is not None and current not in TERMINAL_STATES:
            return
        document = self.session.document
        if document is not None and find_by_id(document, fragment_id) is not None:
            return
        self.states[fragment_id] = FragmentState.FAILED

    def _set_state(self, fragment_id, new_state: FragmentState):
        current = self.states.get(fragment_id)
        if current is None:
            # 초기 문서에 있던 pane은 삽입 이력이 없으므로 활성 여부만 기록
            if new_state in (FragmentState.ACTIVE, FragmentState.INACTIVE):
                self.states[fragment_id] = new_state
            return
        if current is new_state:
            return
        if new_state not in TRANSITIONS[current]:
            logger.debug("Ignoring transition %s -> %s for %s",
                         current.name, new_state.name, fragment_id)
            return
        self.states[fragment_id] = new_state

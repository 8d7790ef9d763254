"""가져온 에셋을 세션에 적용"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Tuple

from .asset_ref import AssetKind, AssetRef

if TYPE_CHECKING:
    from ..session.session import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stylesheet:
    ref: AssetRef
    url: str
    body: str


class AssetMaterializer:
    """
    script는 세션의 JSContext에서 실행하고, style은 세션 스타일시트 목록에 추가.

    라이브 트리는 건드리지 않으므로 fragment 제거 시 트리가 원상 복구됩니다.
    """

    def __init__(self, session: "Session"):
        self.session = session

    def __call__(self, ref: AssetRef, bodies: List[Tuple[str, str]]):
        if self.session.closed:
            logger.debug("Session closed, skipping materialization of %s", ref)
            return

        if ref.kind is AssetKind.SCRIPT:
            for url, body in bodies:
                self.session.js_context.run(url, body)
        else:
            for url, body in bodies:
                self.session.stylesheets.append(Stylesheet(ref, url, body))
        logger.debug("Materialized %s (%d file(s))", ref, len(bodies))

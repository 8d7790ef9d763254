"""fragment_engine 예외 계층"""


class FragmentEngineError(Exception):
    """모든 런타임 예외의 기반 클래스"""


class SerializationError(FragmentEngineError):
    """Tag 트리를 Fragment로 변환할 수 없음 (개발자 오류, 치명적)"""


class AnchorNotFoundError(FragmentEngineError):
    """삽입/제거 기준이 되는 요소가 라이브 트리에 없음"""

    def __init__(self, anchor_id, detail=""):
        self.anchor_id = anchor_id
        message = f"Anchor not found: {anchor_id!r}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class AssetLoadError(FragmentEngineError):
    """재시도 후에도 에셋을 가져오지 못함"""

    def __init__(self, ref, reason):
        self.ref = ref
        self.reason = reason
        super().__init__(f"Failed to load {ref}: {reason}")


class DuplicateIdError(FragmentEngineError):
    """새 fragment의 id가 기존 요소와 충돌"""

    def __init__(self, element_id):
        self.element_id = element_id
        super().__init__(f"Duplicate element id: {element_id!r}")


class ChannelClosedError(FragmentEngineError):
    """닫힌 채널로 메시지를 보내려 함"""


class EnvelopeError(FragmentEngineError):
    """채널 경계에서 검증에 실패한 메시지"""


__all__ = [
    "FragmentEngineError",
    "SerializationError",
    "AnchorNotFoundError",
    "AssetLoadError",
    "DuplicateIdError",
    "ChannelClosedError",
    "EnvelopeError",
]

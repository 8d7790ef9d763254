"""
DependencyRegistry - 세션별 에셋 로드 기록

한 번 로드된 에셋은 세션이 끝날 때까지 기록이 유지됩니다 (append-only).
진행 중인 로드는 Future로 공유되어, 같은 에셋을 동시에 요청해도
네트워크 요청은 한 번만 일어납니다.
"""
import logging
import threading
from concurrent.futures import Future
from typing import Dict, FrozenSet, Tuple

from .asset_ref import AssetRef

logger = logging.getLogger(__name__)

AssetKey = Tuple[str, str]


class DependencyRegistry:
    def __init__(self):
        self._lock = threading.Lock()
        self._loaded: Dict[AssetKey, bool] = {}
        self._pending: Dict[AssetKey, Future] = {}

    def has(self, ref: AssetRef) -> bool:
        """로드 완료 여부"""
        with self._lock:
            return self._loaded.get(ref.key, False)

    def known(self) -> FrozenSet[AssetKey]:
        """로드 완료된 에셋 키 스냅샷"""
        with self._lock:
            return frozenset(key for key, loaded in self._loaded.items() if loaded)

    def claim(self, ref: AssetRef) -> Tuple[Future, bool]:
        """
        에셋 로드 권한 획득

        Returns:
            (future, owner): owner가 True인 호출자만 실제로 가져와야 함.
            이미 로드된 에셋은 완료된 future를 돌려줌.
        """
        with self._lock:
            if self._loaded.get(ref.key):
                future: Future = Future()
                future.set_result(ref)
                return future, False

            pending = self._pending.get(ref.key)
            if pending is not None:
                logger.debug("Joining in-flight load of %s", ref)
                return pending, False

            future = Future()
            self._pending[ref.key] = future
            return future, True

    def mark_loaded(self, ref: AssetRef):
        """로드 완료 기록 후 대기 중인 요청들 깨움"""
        with self._lock:
            self._loaded[ref.key] = True
            future = self._pending.pop(ref.key, None)
        if future is not None:
            future.set_result(ref)

    def release(self, ref: AssetRef, error: BaseException):
        """로드 실패: 기록하지 않고 대기 중인 요청들에 예외 전달"""
        with self._lock:
            future = self._pending.pop(ref.key, None)
        if future is not None:
            future.set_exception(error)

    def __len__(self):
        return len(self.known())

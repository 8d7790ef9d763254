import threading
import time


class CacheManager:
    """Cache-Control: max-age 기반 HTTP 응답 캐시 (세션 간 공유)"""

    def __init__(self):
        self._cache = {}
        self._lock = threading.Lock()

    def get(self, url_str):
        """캐시에서 조회"""
        with self._lock:
            if url_str not in self._cache:
                return None

            status, headers, body, expires_at = self._cache[url_str]

            # 만료 체크
            if time.time() >= expires_at:
                del self._cache[url_str]
                return None

        return status, headers, body

    def set(self, url_str, status, headers, body):
        """캐시 저장"""
        if status != 200:
            return

        cache_control = headers.get("cache-control", "").lower()

        # no-store면 저장 안 함
        if "no-store" in cache_control:
            return

        # max-age 파싱
        max_age = None
        for directive in cache_control.split(","):
            directive = directive.strip()
            if directive.startswith("max-age="):
                try:
                    max_age = int(directive.split("=", 1)[1])
                except ValueError:
                    return
                break

        # max-age가 없으면 저장 안 함
        if max_age is None:
            return

        with self._lock:
            self._cache[url_str] = (status, headers, body, time.time() + max_age)


# 전역 캐시 매니저
cache_manager = CacheManager()

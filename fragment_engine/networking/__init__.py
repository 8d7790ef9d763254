"""
Networking package for fragment engine

- protocols: 에셋 URL 프로토콜 (file, http, https)
- cache_manager: max-age 기반 응답 캐시
- network_thread: 스레드 풀 기반 비동기 요청
"""
from .protocols import URL, FileURL, HTTPURL, URLFactory, fetch_url
from .cache_manager import CacheManager, cache_manager
from .network_thread import (
    NetworkThread,
    NetworkRequest,
    NetworkResponse,
    RequestType,
)

__all__ = [
    # Protocols
    'URL',
    'FileURL',
    'HTTPURL',
    'URLFactory',
    'fetch_url',
    # Cache
    'CacheManager',
    'cache_manager',
    # Network thread
    'NetworkThread',
    'NetworkRequest',
    'NetworkResponse',
    'RequestType',
]

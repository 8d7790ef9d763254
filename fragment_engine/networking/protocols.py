"""
에셋 URL 프로토콜 구현 (file, http, https)

fetch_url()이 NetworkThread의 기본 fetch 함수입니다.
"""
import gzip
import os
import socket
import ssl
import urllib.parse
from abc import ABC, abstractmethod

from fake_useragent import UserAgent

from .cache_manager import cache_manager

_user_agent = None


def get_user_agent() -> str:
    """User-Agent 문자열 (프로세스당 한 번 생성)"""
    global _user_agent
    if _user_agent is None:
        _user_agent = UserAgent().random
    return _user_agent


class URL(ABC):
    def __init__(self, raw_schema, raw_url):
        self.schema = raw_schema
        self.raw_url = raw_url
        self.host = None
        self.path = "/"
        self.port = None

        self._parse_host_and_path(raw_url)

    def __str__(self):
        port_part = ":" + str(self.port)
        if self.schema == "https" and self.port == 443:
            port_part = ""
        elif self.schema == "http" and self.port == 80:
            port_part = ""
        elif self.schema == "file":
            return f"{self.schema}://{self.path}"
        return f"{self.schema}://{self.host}{port_part}{self.path}"

    def _parse_host_and_path(self, raw):
        if "/" not in raw:
            raw += "/"

        self.host, path = raw.split("/", 1)
        self.path = "/" + path

        if ":" in self.host:
            self.host, port = self.host.split(":", 1)
            self.port = int(port)

    @abstractmethod
    def request(self, timeout=None):
        """(status, headers, body) 반환"""


class FileURL(URL):
    def _parse_host_and_path(self, raw):
        # FileURL의 경우 raw_url이 바로 파일 경로
        self.host = None
        self.path = urllib.parse.unquote(raw)

    def request(self, timeout=None):
        if not os.path.exists(self.path):
            return 404, {}, ""
        with open(self.path, "r", encoding="utf-8") as f:
            return 200, {}, f.read()


class HTTPURL(URL):
    DEFAULT_PORTS = {"http": 80, "https": 443}

    def __init__(self, schema, raw_url):
        super().__init__(schema, raw_url)
        if self.port is None:
            self.port = self.DEFAULT_PORTS[schema]

    def _open_socket(self, timeout):
        s = socket.create_connection((self.host, self.port), timeout=timeout)
        if self.schema == "https":
            ctx = ssl.create_default_context()
            s = ctx.wrap_socket(s, server_hostname=self.host)
        return s

    def request(self, timeout=None):
        url_str = str(self)

        cached = cache_manager.get(url_str)
        if cached:
            return cached

        s = self._open_socket(timeout)
        try:
            req = (
                f"GET {self.path} HTTP/1.1\r\n"
                f"Host: {self.host}\r\n"
                f"User-Agent: {get_user_agent()}\r\n"
                f"Connection: close\r\n"
                f"Accept-Encoding: gzip\r\n"
                f"\r\n"
            )
            s.sendall(req.encode("utf-8"))
            status, headers, body = self._read_response(s.makefile("rb"))
        finally:
            s.close()

        cache_manager.set(url_str, status, headers, body)
        return status, headers, body

    def _read_response(self, response):
        status_line = response.readline().decode("utf-8")
        status_parts = status_line.split(" ", 2)
        if len(status_parts) < 2:
            raise ValueError(f"Invalid HTTP status line: {status_line!r}")
        status = int(status_parts[1])

        headers = {}
        while True:
            line = response.readline().decode("utf-8")
            if line in ("\r\n", "\n", ""):
                break
            h, v = line.split(":", 1)
            headers[h.casefold()] = v.strip()

        if headers.get("transfer-encoding", "").lower() == "chunked":
            body = b""
            while True:
                chunk_size = int(response.readline().decode("utf-8").strip(), 16)
                if chunk_size == 0:
                    response.readline()
                    break
                body += response.read(chunk_size)
                response.readline()  # \r\n
        elif "content-length" in headers:
            body = response.read(int(headers["content-length"]))
        else:
            body = response.read()
        response.close()

        if headers.get("content-encoding", "").lower() == "gzip":
            body = gzip.decompress(body)

        return status, headers, body.decode("utf-8", errors="ignore")


class URLFactory:
    @staticmethod
    def parse(url: str) -> URL:
        if "://" not in url:
            raise ValueError(f"Not an absolute URL: {url}")
        schema, rest = url.split("://", 1)

        if schema in HTTPURL.DEFAULT_PORTS:
            return HTTPURL(schema, rest)
        elif schema == "file":
            return FileURL(schema, rest)
        else:
            raise ValueError(f"Unsupported schema: {schema}")

    @staticmethod
    def resolve_str(base_url, url: str) -> str:
        """상대 경로를 세션 기준 URL로 변환"""
        if "://" in url or not base_url:
            return url
        return urllib.parse.urljoin(base_url, url)


def fetch_url(url: str, timeout=None):
    """NetworkThread 기본 fetch 함수"""
    return URLFactory.parse(url).request(timeout=timeout)

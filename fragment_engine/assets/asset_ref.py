"""AssetRef - 이름과 버전으로 식별되는 클라이언트 에셋"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from ..common.errors import EnvelopeError


class AssetKind(Enum):
    """에셋 종류"""
    SCRIPT = "script"
    STYLE = "style"


@dataclass(frozen=True)
class AssetRef:
    """
    네트워크로 가져올 에셋 참조

    동일성은 (name, version)만으로 결정됩니다.
    urls는 순서대로 모두 로드됩니다 (뒤 파일이 앞 파일에 의존할 수 있음).
    """
    name: str
    version: str
    urls: Tuple[str, ...] = field(default=(), compare=False)
    kind: AssetKind = field(default=AssetKind.SCRIPT, compare=False)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.name, self.version)

    def __str__(self):
        return f"{self.name}@{self.version}"

    def to_wire(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "urls": list(self.urls),
            "kind": self.kind.value,
        }

    @classmethod
    def from_wire(cls, data) -> "AssetRef":
        """채널 메시지의 deps 항목을 AssetRef로 변환 (검증 포함)"""
        if not isinstance(data, dict):
            raise EnvelopeError(f"Dependency must be an object, got {type(data).__name__}")
        try:
            name = data["name"]
            version = data["version"]
        except KeyError as e:
            raise EnvelopeError(f"Dependency missing field {e}") from None

        urls = data.get("urls", [])
        if isinstance(urls, str):
            urls = [urls]
        if not isinstance(urls, list) or not all(isinstance(u, str) for u in urls):
            raise EnvelopeError(f"Dependency {name} has invalid urls: {urls!r}")

        try:
            kind = AssetKind(data.get("kind", "script"))
        except ValueError:
            raise EnvelopeError(f"Dependency {name} has unknown kind: {data.get('kind')!r}") from None

        return cls(str(name), str(version), tuple(urls), kind)

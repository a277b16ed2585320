"""
blob_store.py

업로드된 명단 원본 파일(bytes)을 보관하는 blob 저장소.

데이터셋 활성화 시 원본 파일을 다시 읽어 파이프라인을 재실행하므로,
업로드 시점의 바이트를 그대로 보관한다.

인터페이스:
- put(name, data) -> url
- get(url) -> bytes        (없으면 BlobNotFoundError)
- delete(url) -> None      (없어도 오류 아님)

url은 호출 측에서 해석하지 않는 불투명 문자열이다.

"""

import re
import uuid
from pathlib import Path
from typing import Protocol

from app.core.exceptions import BlobNotFoundError
from app.core.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


class BlobStore(Protocol):
    def put(self, name: str, data: bytes) -> str: ...

    def get(self, url: str) -> bytes: ...

    def delete(self, url: str) -> None: ...


def _safe_name(name: str) -> str:
    base = Path(name or "upload").name
    return _UNSAFE_NAME_RE.sub("_", base) or "upload"


class LocalBlobStore:
    """로컬 디렉터리(BLOB_DIR)에 파일로 저장하는 BlobStore."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def _path(self, url: str) -> Path:
        path = (self._root / url).resolve()
        root = self._root.resolve()
        if root not in path.parents:
            raise BlobNotFoundError(url)
        return path

    def put(self, name: str, data: bytes) -> str:
        url = f"datasets/{uuid.uuid4().hex}/{_safe_name(name)}"
        path = self._root / url
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("blob stored url=%s bytes=%d", url, len(data))
        return url

    def get(self, url: str) -> bytes:
        path = self._path(url)
        if not path.is_file():
            raise BlobNotFoundError(url)
        return path.read_bytes()

    def delete(self, url: str) -> None:
        try:
            path = self._path(url)
        except BlobNotFoundError:
            logger.warning("blob delete skipped, url outside store url=%s", url)
            return
        path.unlink(missing_ok=True)
        # 업로드마다 만든 하위 디렉터리 정리
        if path.parent.is_dir() and not any(path.parent.iterdir()):
            path.parent.rmdir()
        logger.info("blob deleted url=%s", url)

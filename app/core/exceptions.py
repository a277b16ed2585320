"""
exceptions.py

명단(roster) 도메인에서 사용하는 예외 모음.

이 예외들은 서비스 계층 경계에서 status/message 결과로 변환되며,
최종 사용자에게 날것의 예외로 노출되지 않는다.

"""


class RosterError(Exception):
    """명단 처리 관련 예외의 공통 부모."""


class RosterFileError(RosterError):
    """업로드 파일을 읽거나 디코딩할 수 없을 때."""


class MissingHeadersError(RosterError):
    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Invalid file headers. Missing: {', '.join(self.missing)}")


class StorageNotConfiguredError(RosterError):
    def __init__(self, message: str = "Storage is not configured. Set DATABASE_URL to enable uploads."):
        super().__init__(message)


class DatasetNotFoundError(RosterError):
    def __init__(self, dataset_id: int):
        self.dataset_id = dataset_id
        super().__init__(f"Dataset {dataset_id} not found")


class BlobNotFoundError(RosterError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Stored file not found: {url}")

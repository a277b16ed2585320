"""
JSON 로거 설정 테스트.
- LOG_LEVEL 대소문자 무관, 알 수 없는 값은 INFO
"""

import json
import logging
import uuid

import pytest

from app.core.config import settings
from app.core.logging import get_logger


def _fresh_name() -> str:
    return f"test_logger_{uuid.uuid4().hex[:8]}"


@pytest.mark.parametrize(
    "level, expected",
    [
        ("info", logging.INFO),
        ("Debug", logging.DEBUG),
        ("WARNING", logging.WARNING),
        ("verbose", logging.INFO),
    ],
)
def test_log_level_from_settings(monkeypatch, level, expected):
    monkeypatch.setattr(settings, "LOG_LEVEL", level)
    assert get_logger(_fresh_name()).level == expected


def test_log_lines_are_json(monkeypatch, capsys):
    monkeypatch.setattr(settings, "LOG_LEVEL", "info")
    name = _fresh_name()

    get_logger(name).info("roster uploaded members=%d", 3)

    line = capsys.readouterr().out.strip()
    body = json.loads(line)
    assert body["level"] == "INFO"
    assert body["logger"] == name
    assert body["service"] == "member-validator"
    assert body["msg"] == "roster uploaded members=3"

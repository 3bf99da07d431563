"""
구조화 로깅 모듈입니다.

역할:
- python-json-logger를 사용한 JSON 포맷 로그 출력
- RotatingFileHandler로 평가 로그 파일 자동 순환 (10MB, 5개 보존)
- run_id, module, level 공통 필드 자동 추가
- 로그 레벨 및 포맷(json/text)을 설정에서 제어

사용 예시:
    >>> setup_logging(config)
    >>> logger = logging.getLogger(__name__)
    >>> logger.info("배치 평가 시작")
"""

from __future__ import annotations

import logging
import logging.handlers
import uuid
from pathlib import Path
from typing import Optional

from pythonjsonlogger import jsonlogger

from acoustic_eval.config.schema import AppConfig

# 평가 로그 파일 이름
LOG_FILENAME = "evaluation.log"

# 로그 파일 순환 기준
_MAX_LOG_BYTES = 10 * 1024 * 1024
_LOG_BACKUP_COUNT = 5


def setup_logging(config: AppConfig, run_id: Optional[str] = None) -> str:
    """
    평가 실행 전체의 로깅 설정을 초기화합니다.

    루트 로거의 기존 핸들러를 모두 제거한 뒤 콘솔 핸들러와
    <log_dir>/evaluation.log 순환 파일 핸들러를 붙입니다.

    파라미터:
        config: AppConfig 인스턴스
        run_id: 실행 식별자. None이면 config.system.run_id 또는 UUID 사용

    반환값:
        str: 실제로 사용된 run_id
    """
    run_id = run_id or config.system.run_id or str(uuid.uuid4())

    log_level = getattr(logging, config.system.log_level, logging.INFO)
    log_format = config.system.log_format

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    for handler in _build_handlers(Path(config.system.log_dir), log_level):
        handler.setFormatter(_make_formatter(log_format, run_id))
        root_logger.addHandler(handler)

    logging.getLogger(__name__).info(
        f"로깅 초기화: level={config.system.log_level}, "
        f"format={log_format}, run={run_id}"
    )
    return run_id


def _build_handlers(log_dir: Path, log_level: int) -> list[logging.Handler]:
    """콘솔 핸들러와 파일 핸들러를 만듭니다. 파일 핸들러 생성 실패는 경고 후 콘솔만 사용합니다."""
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    handlers: list[logging.Handler] = [console_handler]

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / LOG_FILENAME,
            maxBytes=_MAX_LOG_BYTES,
            backupCount=_LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        handlers.append(file_handler)
    except OSError as exc:
        logging.getLogger(__name__).warning(f"로그 파일 핸들러 생성 실패: {log_dir}, 오류: {exc}")

    return handlers


def _make_formatter(log_format: str, run_id: str) -> logging.Formatter:
    if log_format == "json":
        return _JsonFormatter(run_id=run_id)
    return _TextFormatter(run_id=run_id)


class _JsonFormatter(jsonlogger.JsonFormatter):
    """
    run_id, module, level 필드를 자동 추가하는 JSON 포맷터입니다.
    """

    def __init__(self, run_id: str = "") -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
        self._run_id = run_id

    def add_fields(
        self,
        log_record: dict,
        record: logging.LogRecord,
        message_dict: dict,
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["run_id"] = self._run_id
        log_record["module"] = record.name
        log_record["level"] = record.levelname


class _TextFormatter(logging.Formatter):
    """run_id 앞 8자리를 접두어로 붙이는 텍스트 포맷터입니다."""

    def __init__(self, run_id: str = "") -> None:
        prefix = run_id[:8] if run_id else "no-run"
        super().__init__(
            fmt=f"%(asctime)s [{prefix}] %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

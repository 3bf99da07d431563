"""
평가 로깅 모듈 단위 테스트

검증 조건:
- 루트 로거에 콘솔 + evaluation.log 순환 파일 핸들러 (10MB, 5개 보존)
- run_id 우선순위: 인자 > config.system.run_id > UUID
- 재설정 시 핸들러가 누적되지 않음
- JSON 로그에 run_id / level / module / message 필드
- 텍스트 로그에 run_id 앞 8자리 접두어

픽스처:
- eval_config: tmp_path 아래 로그 디렉토리를 쓰는 AppConfig
- capture: 지정 포맷터로 한 줄 로그를 문자열로 캡처하는 함수
"""

from __future__ import annotations

import json
import logging
import logging.handlers
from io import StringIO

import pytest

from acoustic_eval.config.schema import AppConfig
from acoustic_eval.logging import setup_logging
from acoustic_eval.logging.structured_logger import LOG_FILENAME, _JsonFormatter, _TextFormatter


@pytest.fixture(autouse=True)
def reset_root_logger():
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()


@pytest.fixture
def eval_config(tmp_path):
    config = AppConfig()
    config.system.log_level = "DEBUG"
    config.system.log_dir = str(tmp_path / "logs")
    config.system.run_id = "run-20240101-sps"
    return config


@pytest.fixture
def capture():
    def _capture(formatter: logging.Formatter, level: int, message: str, **extra) -> str:
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(formatter)
        logger = logging.getLogger("acoustic_eval.test.capture")
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        try:
            logger.log(level, message, extra=extra or None)
        finally:
            logger.removeHandler(handler)
        return stream.getvalue().strip()

    return _capture


def _rotating_handler() -> logging.handlers.RotatingFileHandler:
    return next(
        handler for handler in logging.getLogger().handlers
        if isinstance(handler, logging.handlers.RotatingFileHandler)
    )


# =========================================================================
# setup_logging
# =========================================================================

class TestSetupLogging:
    def test_evaluation_log_written(self, eval_config, tmp_path):
        setup_logging(eval_config)
        logging.getLogger("acoustic_eval.test").info("문장 평가 시작")
        log_file = tmp_path / "logs" / LOG_FILENAME
        assert log_file.exists()
        assert "문장 평가 시작" in log_file.read_text(encoding="utf-8")

    def test_rotation_policy(self, eval_config):
        setup_logging(eval_config)
        handler = _rotating_handler()
        assert handler.maxBytes == 10 * 1024 * 1024
        assert handler.backupCount == 5

    def test_run_id_argument_wins(self, eval_config, tmp_path):
        assert setup_logging(eval_config, run_id="cli-run") == "cli-run"
        logging.getLogger("acoustic_eval.test").info("run 확인")
        log_text = (tmp_path / "logs" / LOG_FILENAME).read_text(encoding="utf-8")
        assert "[cli-run]" in log_text

    def test_run_id_from_config(self, eval_config):
        assert setup_logging(eval_config) == "run-20240101-sps"

    def test_run_id_generated_when_empty(self, eval_config):
        eval_config.system.run_id = ""
        run_id = setup_logging(eval_config)
        assert len(run_id) == 36
        assert run_id.count("-") == 4

    def test_level_applied(self, eval_config):
        eval_config.system.log_level = "WARNING"
        setup_logging(eval_config)
        assert logging.getLogger().level == logging.WARNING

    def test_repeat_setup_replaces_handlers(self, eval_config):
        setup_logging(eval_config)
        first_count = len(logging.getLogger().handlers)
        setup_logging(eval_config)
        assert len(logging.getLogger().handlers) == first_count == 2

    def test_json_format_selected(self, eval_config):
        eval_config.system.log_format = "json"
        setup_logging(eval_config)
        assert isinstance(_rotating_handler().formatter, _JsonFormatter)


# =========================================================================
# 포맷터
# =========================================================================

class TestFormatters:
    def test_json_fields(self, capture):
        output = capture(_JsonFormatter(run_id="abc123"), logging.INFO, "F0 RMSE 계산")
        record = json.loads(output)
        assert record["run_id"] == "abc123"
        assert record["level"] == "INFO"
        assert record["module"] == "acoustic_eval.test.capture"
        assert record["message"] == "F0 RMSE 계산"

    def test_json_extra_field(self, capture):
        output = capture(_JsonFormatter(run_id="abc"), logging.INFO, "문장 완료", sentence=3)
        assert json.loads(output)["sentence"] == 3

    def test_text_prefix_is_run_id_head(self, capture):
        output = capture(_TextFormatter(run_id="run-20240101-sps"), logging.ERROR, "보고서 저장 실패")
        assert "[run-2024]" in output
        assert "ERROR" in output
        assert "보고서 저장 실패" in output

    def test_text_prefix_without_run_id(self, capture):
        assert "[no-run]" in capture(_TextFormatter(), logging.INFO, "x")

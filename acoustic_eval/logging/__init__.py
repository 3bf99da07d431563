"""
구조화 로깅 패키지

평가 실행 단위(run_id)로 묶이는 로그 설정을 제공합니다.
"""

from acoustic_eval.logging.structured_logger import setup_logging

__all__ = ["setup_logging"]

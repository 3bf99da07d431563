"""
음향 특징 파일 모듈 패키지

공통 데이터 타입:
- DataFiles: 한 문장의 Duration / F0 / LSP 파일 경로 묶음
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DataFiles:
    """
    한 문장의 음향 특징 파일 경로입니다.

    필드:
        duration_file: 상태별 프레임 수가 기록된 UTF-16 텍스트 파일
        f0_file: 프레임별 F0(Hz) float32 바이너리 파일
        lsp_file: 프레임별 LSP + log gain float32 바이너리 파일
    """
    duration_file: Path
    f0_file: Path
    lsp_file: Path

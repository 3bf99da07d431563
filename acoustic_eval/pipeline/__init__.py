"""
문장/코퍼스 평가 파이프라인 모듈 패키지

공통 데이터 타입:
- EvaluationSettings: 문장 평가에 필요한 수치 파라미터 묶음
- PhoneWordMap: 단어와 음소 수의 대응 정보 (SPS 음소 단위 결과용)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from acoustic_eval.features.loaders import DEFAULT_STATE_COUNT
from acoustic_eval.metrics.evaluators import FRAME_LENGTH_SEC, OUTLIER_F0_THRESHOLD


@dataclass(frozen=True)
class EvaluationSettings:
    """
    문장 평가 파라미터입니다. 배치 시작 시 한 번 만들어 모든 문장에 전달합니다.

    필드:
        reference_lpc_order / target_lpc_order: LSP 파일의 LPC 차수
        state_count: Duration 파일에서 음소당 읽을 상태 수
        voiced_unvoiced_threshold: 유/무성 판단 임계값 (Hz)
        lower_bound_frequency / upper_bound_frequency: 스펙트럼 비교 대역 (Hz)
        sample_frequency: 샘플링 주파수 (Hz)
        calculated_dimension: 가중 LSP 계산 차원 (None이면 원본 LPC 차수)
        frame_length: 프레임 길이 (초)
        outlier_f0_threshold: F0 이상치 임계값 (Hz)
        duration_lines_per_phone: Duration 파일에 음소당 기록된 줄 수
    """
    reference_lpc_order: int
    target_lpc_order: int
    state_count: int
    voiced_unvoiced_threshold: float
    lower_bound_frequency: float
    upper_bound_frequency: float
    sample_frequency: float
    calculated_dimension: Optional[int] = None
    frame_length: float = FRAME_LENGTH_SEC
    outlier_f0_threshold: float = OUTLIER_F0_THRESHOLD
    duration_lines_per_phone: int = DEFAULT_STATE_COUNT

    def __post_init__(self) -> None:
        if not 0 < self.state_count <= self.duration_lines_per_phone <= DEFAULT_STATE_COUNT:
            raise ValueError(
                f"1 <= state_count <= duration_lines_per_phone <= {DEFAULT_STATE_COUNT} "
                f"이어야 합니다: state_count={self.state_count}, "
                f"duration_lines_per_phone={self.duration_lines_per_phone}"
            )
        if self.reference_lpc_order <= 0 or self.target_lpc_order <= 0:
            raise ValueError(
                f"LPC 차수는 양수여야 합니다: "
                f"reference={self.reference_lpc_order}, target={self.target_lpc_order}"
            )

    @property
    def lpc_orders_match(self) -> bool:
        return self.reference_lpc_order == self.target_lpc_order

    @property
    def weighted_lsp_dimension(self) -> int:
        if self.calculated_dimension is None:
            return self.reference_lpc_order
        return self.calculated_dimension


@dataclass(frozen=True)
class PhoneWordMap:
    """
    원문 단어와 그 단어에 속한 음소 수입니다.

    필드:
        word_offset: 원문에서 단어 시작 위치
        word_length: 단어 길이 (0이면 무음 등 단어에 속하지 않은 음소)
        phoneme_count: 단어에 속한 음소 수
    """
    word_offset: int
    word_length: int
    phoneme_count: int

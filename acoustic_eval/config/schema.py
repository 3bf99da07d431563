"""
음향 객관 평가 설정 스키마 정의 모듈입니다.

역할:
- Pydantic v2 BaseModel 기반으로 config.yaml의 전체 구조를 타입 안전하게 정의
- 각 섹션(system, evaluation, data, report)을 독립적인 중첩 모델로 분리
- 필드별 기본값, 허용 범위, 유효성 검증(validator)을 포함

사용 예시:
    >>> from acoustic_eval.config.schema import AppConfig
    >>> config = AppConfig(**yaml_data)
    >>> print(config.evaluation.mode)
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from acoustic_eval.features.loaders import DEFAULT_STATE_COUNT, RUS_DURATION_STATE

# 모듈 로거 설정
logger = logging.getLogger(__name__)


# =============================================================================
# system 섹션: 시스템 전역 설정
# =============================================================================

class SystemConfig(BaseModel):
    """
    시스템 전역 설정을 정의하는 모델입니다.

    역할:
    - 로깅 레벨 및 포맷 지정
    - 평가 실행 식별자 관리
    """
    # 로그 출력 레벨
    log_level: str = Field(default="INFO", description="로그 레벨 (DEBUG | INFO | WARNING | ERROR)")
    # 로그 출력 포맷
    log_format: str = Field(default="text", description="로그 포맷 (json | text)")
    # 로그 파일 저장 디렉토리 경로
    log_dir: str = Field(default="output/logs", description="로그 저장 디렉토리")
    # 평가 실행 고유 식별자 (빈 문자열이면 UUID로 자동 생성)
    run_id: str = Field(default="", description="실행 ID (비어있으면 UUID 자동생성)")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """로그 레벨이 유효한 Python 로깅 레벨인지 검증합니다."""
        allowed_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        # 대소문자 구분 없이 비교 후 대문자로 정규화
        upper_value = value.upper()
        if upper_value not in allowed_levels:
            error_message = f"log_level은 {allowed_levels} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return upper_value

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        """로그 포맷이 지원되는 형식인지 검증합니다."""
        allowed_formats = ("json", "text")
        if value not in allowed_formats:
            error_message = f"log_format은 {allowed_formats} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return value


# =============================================================================
# evaluation 섹션: 평가 파라미터
# =============================================================================

class EvaluationConfig(BaseModel):
    """
    평가 모드와 특징별 계산 파라미터입니다.

    None 으로 둔 값은 배치 시작 시 결정됩니다.
    - state_count: sps는 5, rus는 2
    - reference_lpc_order / target_lpc_order: 첫 문장의 파일 크기로 추정
    - calculated_dimension: 원본 LPC 차수
    """
    # 평가 모드: "sps"는 통계적 파라메트릭 합성, "rus"는 유닛 선택 합성(최적 경로 포함)
    mode: str = Field(default="sps", description="평가 모드 (sps | rus)")
    # Duration 파일에서 음소당 읽을 상태 수
    state_count: Optional[int] = Field(default=None, description="음소당 상태 수 (1 ~ 5)")
    # Duration 파일에 음소당 기록된 줄 수
    duration_lines_per_phone: int = Field(
        default=DEFAULT_STATE_COUNT, ge=1, le=DEFAULT_STATE_COUNT,
        description="Duration 파일의 음소당 줄 수 (state_count 이상)",
    )
    # 분석 프레임 길이 (초)
    frame_length_sec: float = Field(default=0.005, gt=0, description="프레임 길이 (초)")
    # 원본 LSP의 LPC 차수
    reference_lpc_order: Optional[int] = Field(default=None, gt=0, description="원본 LPC 차수")
    # 합성 LSP의 LPC 차수
    target_lpc_order: Optional[int] = Field(default=None, gt=0, description="합성 LPC 차수")
    # 유/무성 판단 F0 임계값 (Hz)
    voiced_unvoiced_threshold: float = Field(default=10.0, ge=0, description="유/무성 임계값 (Hz)")
    # 스펙트럼 비교 대역 하한 (Hz)
    lower_bound_frequency: float = Field(default=0.0, ge=0, description="대역 하한 (Hz)")
    # 스펙트럼 비교 대역 상한 (Hz)
    upper_bound_frequency: float = Field(default=8000.0, gt=0, description="대역 상한 (Hz)")
    # 샘플링 주파수 (Hz)
    sample_frequency: float = Field(default=16000.0, gt=0, description="샘플링 주파수 (Hz)")
    # 가중 LSP 거리 계산 차원
    calculated_dimension: Optional[int] = Field(default=None, gt=0, description="가중 LSP 계산 차원")
    # F0 이상치 임계값 (Hz)
    outlier_f0_threshold: float = Field(default=10.0, ge=0, description="F0 이상치 임계값 (Hz)")

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, value: str) -> str:
        """평가 모드가 허용된 값인지 검증합니다."""
        allowed_modes = ("sps", "rus")
        lower_value = value.lower()
        if lower_value not in allowed_modes:
            error_message = f"mode는 {allowed_modes} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return lower_value

    @field_validator("state_count")
    @classmethod
    def validate_state_count(cls, value: Optional[int]) -> Optional[int]:
        """상태 수가 1 ~ DEFAULT_STATE_COUNT 범위인지 검증합니다."""
        if value is not None and not 1 <= value <= DEFAULT_STATE_COUNT:
            error_message = (
                f"state_count는 1~{DEFAULT_STATE_COUNT} 범위여야 합니다. 입력값: {value}"
            )
            raise ValueError(error_message)
        return value

    @model_validator(mode="after")
    def validate_frequency_band(self) -> "EvaluationConfig":
        """비교 대역이 나이퀴스트 주파수 안에 있는지 검증합니다."""
        if self.lower_bound_frequency >= self.upper_bound_frequency:
            raise ValueError(
                f"lower_bound_frequency({self.lower_bound_frequency})는 "
                f"upper_bound_frequency({self.upper_bound_frequency})보다 작아야 합니다"
            )
        if self.upper_bound_frequency * 2 > self.sample_frequency:
            raise ValueError(
                f"upper_bound_frequency({self.upper_bound_frequency})의 2배가 "
                f"sample_frequency({self.sample_frequency})를 넘습니다"
            )
        return self

    @model_validator(mode="after")
    def validate_duration_layout(self) -> "EvaluationConfig":
        """읽을 상태 수가 Duration 파일의 음소당 줄 수를 넘지 않는지 검증합니다."""
        if self.resolved_state_count() > self.duration_lines_per_phone:
            raise ValueError(
                f"state_count({self.resolved_state_count()})가 "
                f"duration_lines_per_phone({self.duration_lines_per_phone})보다 큽니다"
            )
        return self

    def resolved_state_count(self) -> int:
        """모드에 맞는 상태 수를 반환합니다."""
        if self.state_count is not None:
            return self.state_count
        return RUS_DURATION_STATE if self.mode == "rus" else DEFAULT_STATE_COUNT


# =============================================================================
# data 섹션: 입력 코퍼스 경로
# =============================================================================

class DataConfig(BaseModel):
    """
    원본/합성 코퍼스 경로입니다.

    각 디렉토리는 duration/, f0/, lsp/ 하위 디렉토리를 가집니다.
    """
    # 원본(녹음 또는 SPS 기준) 코퍼스 디렉토리
    reference_dir: str = Field(default="data/reference", description="원본 코퍼스 디렉토리")
    # 합성 코퍼스 디렉토리
    target_dir: str = Field(default="data/target", description="합성 코퍼스 디렉토리")
    # RUS 최적 경로 XML 파일 (rus 모드 전용)
    best_path_file: str = Field(default="", description="최적 경로 유닛 래티스 XML 파일")


# =============================================================================
# report 섹션: 보고서 출력
# =============================================================================

class ReportConfig(BaseModel):
    """보고서 출력 설정입니다."""
    # 보고서 저장 디렉토리
    output_dir: str = Field(default="output/report", description="보고서 저장 디렉토리")


# =============================================================================
# 최상위 AppConfig: 모든 섹션을 통합하는 루트 모델
# =============================================================================

class AppConfig(BaseModel):
    """
    애플리케이션 전체 설정을 통합하는 최상위 모델입니다.

    역할:
    - config.yaml의 모든 섹션을 하나의 타입 안전한 객체로 통합
    - 각 섹션이 누락된 경우 기본값으로 자동 생성

    사용 예시:
        >>> config = AppConfig(**raw)
        >>> print(config.evaluation.mode)
        'sps'
    """
    # 시스템 전역 설정
    system: SystemConfig = Field(default_factory=SystemConfig, description="시스템 설정")
    # 평가 파라미터
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig, description="평가 설정")
    # 입력 데이터 경로
    data: DataConfig = Field(default_factory=DataConfig, description="데이터 설정")
    # 보고서 출력 설정
    report: ReportConfig = Field(default_factory=ReportConfig, description="보고서 설정")

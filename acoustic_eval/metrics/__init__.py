"""
메트릭 모듈 패키지

공통 데이터 타입:
- EvaluationResult: 단일 특징에 대한 RMSE / 최대 거리 / 상관계수
- UVStatistic: 유성음/무성음 프레임 분할표
- OutlierF0Statistic: 임계값을 넘는 F0 이상치 프레임 통계
- ConcatenationCostInfo, ContinueUnitInfo: 최적 경로 연결 통계 (RUS)
- PhoneLevelResult: 음소 단위 거리
- FullEvaluationResult: 문장 단위 전체 평가 결과
- EvaluationSummary: 코퍼스 평균

"계산 불가" 상태는 NaN 대신 None으로 표현합니다.
"""

from dataclasses import dataclass, field
from typing import Optional

from acoustic_eval.features import DataFiles


@dataclass(frozen=True)
class EvaluationResult:
    """
    단일 음향 특징의 평가 결과입니다.

    필드:
        rmse: RMSE 거리 (None = 계산 불가)
        max_distance: 최대 거리 (None = 계산 불가)
        correlation_coefficient: 피어슨 상관계수 (None = 계산 불가)
        inused_frame_number: 계산에 사용된 프레임 수 (None = 해당 없음)
    """
    rmse: Optional[float] = None
    max_distance: Optional[float] = None
    correlation_coefficient: Optional[float] = None
    inused_frame_number: Optional[int] = None


# 모든 필드가 계산되지 않은 결과
NOT_COMPUTED = EvaluationResult()


@dataclass(frozen=True)
class UVStatistic:
    """
    유성음/무성음 프레임 분할표입니다.

    필드:
        voiced_in_reference / unvoiced_in_reference: 원본의 유성/무성 프레임 수
        voiced_in_target / unvoiced_in_target: 합성본의 유성/무성 프레임 수
        voiced_in_both / unvoiced_in_both: 양쪽 모두 유성/무성인 프레임 수
        unexpected_voiced: 원본은 무성인데 합성본이 유성인 프레임 수
        unexpected_unvoiced: 원본은 유성인데 합성본이 무성인 프레임 수
    """
    voiced_in_reference: int = 0
    unvoiced_in_reference: int = 0
    voiced_in_target: int = 0
    unvoiced_in_target: int = 0
    voiced_in_both: int = 0
    unvoiced_in_both: int = 0
    unexpected_voiced: int = 0
    unexpected_unvoiced: int = 0

    @property
    def total_reference(self) -> int:
        return self.voiced_in_reference + self.unvoiced_in_reference

    @property
    def mismatch_ratio(self) -> float:
        """유/무성 불일치 비율입니다. 프레임이 없으면 0.0을 반환합니다."""
        total = self.total_reference
        if total == 0:
            return 0.0
        return (self.unexpected_unvoiced + self.unexpected_voiced) / total


@dataclass(frozen=True)
class OutlierF0Statistic:
    """
    F0 이상치 통계입니다.

    필드:
        outlier_frame_number: |원본 - 합성| 이 임계값을 넘는 프레임 수
        total_frame_number: 비교 대상(마스크) 프레임 수
        outlier_ratio: 이상치 비율 (마스크가 비어 있으면 None)
    """
    outlier_frame_number: int = 0
    total_frame_number: int = 0
    outlier_ratio: Optional[float] = None


@dataclass(frozen=True)
class ConcatenationCostInfo:
    """최적 경로의 경계 수와 연결 비용 합계입니다."""
    boundary_number: int = 0
    total_concatenation_cost: float = 0.0

    @property
    def average(self) -> Optional[float]:
        if self.boundary_number == 0:
            return None
        return self.total_concatenation_cost / self.boundary_number


@dataclass(frozen=True)
class ContinueUnitInfo:
    """최적 경로의 경계 수와 녹음상 연속된 유닛 수입니다."""
    boundary_number: int = 0
    total_continue_unit_number: int = 0

    @property
    def ratio(self) -> Optional[float]:
        if self.boundary_number == 0:
            return None
        return self.total_continue_unit_number / self.boundary_number


@dataclass(frozen=True)
class PhoneLevelResult:
    """
    음소 단위 평가 결과입니다. 무음(sil) 음소는 포함하지 않습니다.

    필드:
        phone_string: 음소 텍스트
        word_offset / word_length: 음소가 속한 단어의 원문 위치 (SPS)
        start_frame / frame_length: 음소 구간 (RUS)
        duration_distance: |원본 - 합성| 음소 길이 (초)
        f0_distance / f0_correlation: 음소 구간 F0 RMSE / 상관계수
        f0_outlier_frame_number: 음소 구간 F0 이상치 수
        lsp_distance / weighted_lsp_distance: 음소 구간 LSP 거리
        uv_info: 음소 구간 유/무성 분할표
        log_spectrum_distance: 음소 구간 로그 스펙트럼 거리 (dB)
        gain_distance: 음소 구간 게인 거리 (dB)
        both_voiced: 음소 구간 내 양쪽 유성 프레임 인덱스 (구간 기준)
    """
    phone_string: str = ""
    word_offset: int = 0
    word_length: int = 0
    start_frame: int = 0
    frame_length: int = 0
    duration_distance: Optional[float] = None
    f0_distance: Optional[float] = None
    f0_correlation: Optional[float] = None
    f0_outlier_frame_number: Optional[int] = None
    lsp_distance: Optional[float] = None
    weighted_lsp_distance: Optional[float] = None
    uv_info: Optional[UVStatistic] = None
    log_spectrum_distance: Optional[float] = None
    gain_distance: Optional[float] = None
    both_voiced: tuple[int, ...] = ()


@dataclass(frozen=True)
class FullEvaluationResult:
    """
    한 문장의 전체 평가 결과입니다.

    SPS 모드는 duration / f0 / f0_state_level / lsp / log_spectrum /
    log_frequency / gain 을, RUS 모드는 추가로 outlier_f0 /
    log_frequency_voiced / cc_info / voiced_cc_info / continue_unit_info 를 채웁니다.
    """
    reference_files: DataFiles
    target_files: DataFiles
    uv_info: UVStatistic = field(default_factory=UVStatistic)
    uv_info_state_level: UVStatistic = field(default_factory=UVStatistic)
    duration: EvaluationResult = NOT_COMPUTED
    f0: EvaluationResult = NOT_COMPUTED
    f0_state_level: EvaluationResult = NOT_COMPUTED
    lsp: EvaluationResult = NOT_COMPUTED
    log_spectrum: EvaluationResult = NOT_COMPUTED
    log_frequency: EvaluationResult = NOT_COMPUTED
    log_frequency_voiced: EvaluationResult = NOT_COMPUTED
    gain: EvaluationResult = NOT_COMPUTED
    phone_level_results: tuple[PhoneLevelResult, ...] = ()
    outlier_f0: OutlierF0Statistic = field(default_factory=OutlierF0Statistic)
    cc_info: ConcatenationCostInfo = field(default_factory=ConcatenationCostInfo)
    voiced_cc_info: ConcatenationCostInfo = field(default_factory=ConcatenationCostInfo)
    continue_unit_info: ContinueUnitInfo = field(default_factory=ContinueUnitInfo)


@dataclass(frozen=True)
class EvaluationSummary:
    """
    코퍼스 단위 평균 결과입니다. 배치 평가가 끝난 뒤 한 번 생성됩니다.

    필드:
        sentence_count: 평균에 사용된 문장 수
        rmse_* / correlation_*: 문장별 값의 산술 평균 (하나라도 None이면 None)
        outlier_f0_ratio / uv_mismatch_ratio / vu_mismatch_ratio: 전체 프레임 합 기준 비율 (RUS)
        cc / voiced_cc / continue_unit_ratio: 전체 경계 합 기준 평균 (RUS)
    """
    sentence_count: int
    rmse_duration: Optional[float] = None
    rmse_f0: Optional[float] = None
    correlation_f0: Optional[float] = None
    rmse_f0_state_level: Optional[float] = None
    correlation_f0_state_level: Optional[float] = None
    rmse_lsp: Optional[float] = None
    rmse_log_spectrum_with_gain: Optional[float] = None
    rmse_log_spectrum_without_gain_voiced: Optional[float] = None
    rmse_log_spectrum_without_gain: Optional[float] = None
    rmse_gain: Optional[float] = None
    correlation_gain: Optional[float] = None
    outlier_f0_ratio: Optional[float] = None
    uv_mismatch_ratio: Optional[float] = None
    vu_mismatch_ratio: Optional[float] = None
    cc: Optional[float] = None
    voiced_cc: Optional[float] = None
    continue_unit_ratio: Optional[float] = None

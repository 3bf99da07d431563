"""
음향 특징별 평가 모듈입니다.

역할:
- Duration: 음소별 평균 상태 길이의 RMSE (초 단위)
- F0: 양쪽 유성 프레임 마스크 기준 RMSE / 상관계수 / 이상치
- 유/무성 분류: 프레임별 유성 판정과 분할표 (UVStatistic)
- LSP: 프레임별 RMSE의 평균, 인접 LSP 간격 가중 유클리드 거리
- 스펙트럼: 대역 필터 후 log10 스펙트럼 RMSE (dB)
- 게인: log10 게인 RMSE (dB) / 상관계수

모든 함수는 입력을 변경하지 않는 순수 함수입니다.

사용 예시:
    >>> uv_info, both_voiced = process_uv(ref_f0, tgt_f0, 40.0)
    >>> f0_result = process_f0(ref_f0, tgt_f0, both_voiced)
    >>> print(f0_result.rmse, f0_result.correlation_coefficient)
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np

from acoustic_eval.dsp.transforms import frequency_band_filter, remove_gain
from acoustic_eval.metrics import EvaluationResult, OutlierF0Statistic, UVStatistic
from acoustic_eval.metrics.kernels import (
    average,
    binary_vector_calculation,
    correlation_coefficient,
    filter_element_by_index,
    rmse,
    unary_matrix_calculation,
    unary_vector_calculation,
)

logger = logging.getLogger(__name__)

# 분석 프레임 길이 (초)
FRAME_LENGTH_SEC = 0.005

# F0 이상치 판정 임계값 (Hz)
OUTLIER_F0_THRESHOLD = 10.0

# 정규화 LSP 최댓값 (마지막 차원의 다음 값으로 사용)
MAX_LSP_VALUE = 0.5

# 진폭 → dB 변환 계수
_DECIBEL_SCALE = 20.0


def _scale(value: Optional[float], factor: float) -> Optional[float]:
    return None if value is None else value * factor


def _log10(value: float) -> float:
    """0 이하 입력도 IEEE 규칙(-inf / nan)으로 처리하는 log10 입니다."""
    if value > 0:
        return math.log10(value)
    if value == 0:
        return float("-inf")
    return float("nan")


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    """inf / nan 은 계산할 수 없는 값(None)으로 바꿉니다."""
    if value is None or not math.isfinite(value):
        return None
    return value


# =============================================================================
# Duration
# =============================================================================

def process_duration(
    reference_durations: Sequence[Sequence[int]],
    target_durations: Sequence[Sequence[int]],
    state_count: int,
    frame_length: float = FRAME_LENGTH_SEC,
) -> EvaluationResult:
    """
    음소별 평균 상태 프레임 수의 RMSE를 초 단위로 계산합니다.

    RMSE(음소별 평균 프레임 수) × state_count × frame_length

    파라미터:
        reference_durations: 원본 음소별 상태 프레임 수
        target_durations: 합성 음소별 상태 프레임 수
        state_count: 음소당 상태 수 (양수)
        frame_length: 프레임 길이 (초)

    반환값:
        EvaluationResult: rmse만 채워진 결과 (음소가 없으면 None)

    에러:
        ValueError: state_count가 양수가 아니거나 음소 수가 다를 때
    """
    if state_count <= 0:
        raise ValueError(f"state_count는 양수여야 합니다: {state_count}")

    reference_average = unary_vector_calculation(reference_durations, average)
    target_average = unary_vector_calculation(target_durations, average)
    distance = rmse(reference_average, target_average)
    return EvaluationResult(rmse=_scale(distance, state_count * frame_length))


# =============================================================================
# F0 / 유성음 판정
# =============================================================================

def filter_unvoiced_f0(
    reference_f0: Sequence[float],
    target_f0: Sequence[float],
    voiced_unvoiced_threshold: float,
) -> tuple[list[int], int, int]:
    """
    양쪽 모두 유성(F0 > 임계값)인 프레임 인덱스를 구합니다.

    반환값:
        tuple: (양쪽 유성 인덱스 목록, 원본 유성 프레임 수, 합성 유성 프레임 수)

    에러:
        ValueError: 프레임 수가 다를 때
    """
    if len(reference_f0) != len(target_f0):
        raise ValueError(
            f"원본과 합성본의 F0 프레임 수가 다릅니다: {len(reference_f0)} != {len(target_f0)}"
        )

    both_voiced: list[int] = []
    voiced_reference = 0
    voiced_target = 0
    for index, (reference, target) in enumerate(zip(reference_f0, target_f0)):
        reference_voiced = reference > voiced_unvoiced_threshold
        target_voiced = target > voiced_unvoiced_threshold
        if reference_voiced:
            voiced_reference += 1
        if target_voiced:
            voiced_target += 1
        if reference_voiced and target_voiced:
            both_voiced.append(index)
    return both_voiced, voiced_reference, voiced_target


def process_uv(
    reference_f0: Sequence[float],
    target_f0: Sequence[float],
    voiced_unvoiced_threshold: float,
) -> tuple[UVStatistic, list[int]]:
    """
    유성음/무성음 분할표와 양쪽 유성 프레임 마스크를 계산합니다.

    반환값:
        tuple[UVStatistic, list[int]]: (분할표, 양쪽 유성 인덱스 목록)
    """
    both_voiced, voiced_reference, voiced_target = filter_unvoiced_f0(
        reference_f0, target_f0, voiced_unvoiced_threshold
    )
    frame_count = len(reference_f0)
    voiced_both = len(both_voiced)
    unvoiced_reference = frame_count - voiced_reference
    uv_info = UVStatistic(
        voiced_in_reference=voiced_reference,
        unvoiced_in_reference=unvoiced_reference,
        voiced_in_target=voiced_target,
        unvoiced_in_target=len(target_f0) - voiced_target,
        voiced_in_both=voiced_both,
        unvoiced_in_both=frame_count - voiced_reference - voiced_target + voiced_both,
        unexpected_voiced=voiced_target - voiced_both,
        unexpected_unvoiced=len(target_f0) - unvoiced_reference - voiced_both,
    )
    return uv_info, both_voiced


def process_f0(
    reference_f0: Sequence[float],
    target_f0: Sequence[float],
    voiced_indices: Sequence[int],
) -> EvaluationResult:
    """
    마스크에 포함된 프레임만으로 F0 RMSE와 상관계수를 계산합니다.

    마스크 밖 프레임은 0으로 채우지 않고 완전히 제외합니다.
    """
    reference = filter_element_by_index(reference_f0, voiced_indices)
    target = filter_element_by_index(target_f0, voiced_indices)
    return EvaluationResult(
        rmse=rmse(reference, target),
        correlation_coefficient=correlation_coefficient(reference, target),
        inused_frame_number=len(voiced_indices),
    )


def process_f0_outlier(
    reference_f0: Sequence[float],
    target_f0: Sequence[float],
    voiced_indices: Sequence[int],
    outlier_threshold: float = OUTLIER_F0_THRESHOLD,
) -> OutlierF0Statistic:
    """
    마스크 프레임 중 |원본 - 합성| 이 임계값을 넘는 프레임 수와 비율을 계산합니다.

    마스크가 비어 있으면 비율은 None입니다.
    """
    reference = filter_element_by_index(reference_f0, voiced_indices)
    target = filter_element_by_index(target_f0, voiced_indices)
    outlier_count = sum(
        1 for ref_value, tgt_value in zip(reference, target)
        if abs(ref_value - tgt_value) > outlier_threshold
    )
    total = len(voiced_indices)
    return OutlierF0Statistic(
        outlier_frame_number=outlier_count,
        total_frame_number=total,
        outlier_ratio=outlier_count / total if total > 0 else None,
    )


# =============================================================================
# LSP
# =============================================================================

def process_lsp(
    reference_lsp: Sequence[Sequence[float]],
    target_lsp: Sequence[Sequence[float]],
) -> EvaluationResult:
    """
    게인을 제거한 LSP의 프레임별 RMSE를 구한 뒤 프레임 평균을 냅니다.

    모든 차원을 펼친 단일 RMSE가 아니라 프레임 내 오차와 프레임 간 평균을
    분리한 2단계 평균입니다.

    에러:
        ValueError: 프레임 수 또는 프레임 차원이 다를 때
    """
    reference = remove_gain(reference_lsp, normalize=False)
    target = remove_gain(target_lsp, normalize=False)
    frame_distances = binary_vector_calculation(reference, target, rmse)
    return EvaluationResult(
        rmse=average(frame_distances),
        inused_frame_number=len(reference_lsp),
    )


def weighted_lsp_euclidean_distance(
    reference: Sequence[float],
    target: Sequence[float],
    calculated_dimension: int,
) -> float:
    """
    인접 LSP 간격의 역수를 가중치로 하는 유클리드 거리를 계산합니다.

    weight(i) = 1 / |r(i) - r(i-1)| + 1 / |r(i+1) - r(i)|
    r(-1) = 0, 마지막 차원의 r(i+1) = MAX_LSP_VALUE 로 둡니다.
    distance = sqrt(Σ weight(i) · (r(i) - t(i))^2 / calculated_dimension)

    파라미터:
        reference: 게인을 제거한 원본 LSP 프레임
        target: 게인을 제거한 합성 LSP 프레임
        calculated_dimension: 계산에 사용할 앞쪽 차원 수

    에러:
        ValueError: 길이가 다르거나 비어 있을 때,
            calculated_dimension이 양수가 아니거나 프레임 차원보다 클 때
    """
    if reference is None or target is None:
        raise ValueError("reference와 target은 None일 수 없습니다")
    if len(reference) != len(target):
        raise ValueError(
            f"원본과 합성본의 LSP 차원이 다릅니다: {len(reference)} != {len(target)}"
        )
    if len(reference) == 0:
        raise ValueError("LSP 프레임이 비어 있습니다")
    if calculated_dimension <= 0:
        raise ValueError(f"calculated_dimension은 양수여야 합니다: {calculated_dimension}")
    if calculated_dimension > len(reference):
        raise ValueError(
            f"calculated_dimension({calculated_dimension})이 "
            f"LSP 차원({len(reference)})보다 큽니다"
        )

    full_reference = np.asarray(reference, dtype=np.float64)
    ref = full_reference[:calculated_dimension]
    tgt = np.asarray(target, dtype=np.float64)[:calculated_dimension]
    previous = np.concatenate(([0.0], full_reference[:-1]))[:calculated_dimension]
    following = np.concatenate((full_reference[1:], [MAX_LSP_VALUE]))[:calculated_dimension]

    # 인접 값이 같으면 가중치가 inf가 됨
    with np.errstate(divide="ignore", invalid="ignore"):
        weight = 1.0 / np.abs(ref - previous) + 1.0 / np.abs(following - ref)
        distance = np.sum(weight * (ref - tgt) ** 2)
    return float(np.sqrt(distance / calculated_dimension))


def process_weighted_lsp(
    reference_lsp: Sequence[Sequence[float]],
    target_lsp: Sequence[Sequence[float]],
    calculated_dimension: int,
) -> EvaluationResult:
    """
    프레임별 가중 LSP 거리의 평균(rmse)과 최댓값(max_distance)을 계산합니다.

    에러:
        ValueError: 프레임 수가 다르거나 비어 있을 때, 차원 조건 위반 시
    """
    if reference_lsp is None or target_lsp is None:
        raise ValueError("reference_lsp와 target_lsp는 None일 수 없습니다")
    if len(reference_lsp) != len(target_lsp):
        raise ValueError(
            f"원본과 합성본의 LSP 프레임 수가 다릅니다: {len(reference_lsp)} != {len(target_lsp)}"
        )
    if len(reference_lsp) == 0:
        raise ValueError("LSP 프레임 목록이 비어 있습니다")

    reference = remove_gain(reference_lsp, normalize=False)
    target = remove_gain(target_lsp, normalize=False)
    frame_distances = [
        weighted_lsp_euclidean_distance(ref_frame, tgt_frame, calculated_dimension)
        for ref_frame, tgt_frame in zip(reference, target)
    ]
    return EvaluationResult(
        rmse=average(frame_distances),
        max_distance=max(frame_distances),
        inused_frame_number=len(reference),
    )


# =============================================================================
# 스펙트럼 / 게인
# =============================================================================

def process_spectrum(
    reference_spectrum: Sequence[Sequence[float]],
    target_spectrum: Sequence[Sequence[float]],
    lower_bound_frequency: float,
    upper_bound_frequency: float,
    sample_frequency: float,
) -> EvaluationResult:
    """
    대역 필터 후 log10 스펙트럼의 프레임별 RMSE 평균을 dB로 계산합니다.

    rmse = 20 × mean_frame(RMSE(log10 S_ref, log10 S_tgt))

    0 이하 bin 때문에 거리가 inf / nan 인 프레임이 있으면 rmse는 None 입니다.

    에러:
        ValueError: 대역 조건 위반, 프레임 수 또는 bin 수가 다를 때
    """
    reference = frequency_band_filter(
        reference_spectrum, lower_bound_frequency, upper_bound_frequency, sample_frequency
    )
    target = frequency_band_filter(
        target_spectrum, lower_bound_frequency, upper_bound_frequency, sample_frequency
    )
    reference_log = unary_matrix_calculation(reference, _log10)
    target_log = unary_matrix_calculation(target, _log10)
    frame_distances = [
        _finite_or_none(distance)
        for distance in binary_vector_calculation(reference_log, target_log, rmse)
    ]
    return EvaluationResult(
        rmse=_scale(average(frame_distances), _DECIBEL_SCALE),
        inused_frame_number=len(reference_spectrum),
    )


def process_gain(
    reference_gain: Sequence[float],
    target_gain: Sequence[float],
    voiced_indices: Sequence[int],
) -> EvaluationResult:
    """
    마스크 프레임의 log10 게인으로 RMSE(dB)와 상관계수를 계산합니다.

    0 이하 게인이 있으면 rmse와 상관계수는 None 입니다.
    """
    reference = unary_vector_calculation(
        filter_element_by_index(reference_gain, voiced_indices), _log10
    )
    target = unary_vector_calculation(
        filter_element_by_index(target_gain, voiced_indices), _log10
    )
    distance = _finite_or_none(rmse(reference, target))
    if all(math.isfinite(value) for value in reference + target):
        correlation = correlation_coefficient(reference, target)
    else:
        correlation = None
    return EvaluationResult(
        rmse=_scale(distance, _DECIBEL_SCALE),
        correlation_coefficient=correlation,
        inused_frame_number=len(voiced_indices),
    )

"""
코퍼스 요약 모듈입니다.

역할:
- 문장별 FullEvaluationResult 목록을 특징별 산술 평균으로 요약 (SPS)
- RUS 모드는 이상치 / 유무성 불일치 / 연결 비용을 전체 합 기준 비율로 요약

사용 예시:
    >>> summary = calculate_summary(results)
    >>> print(summary.rmse_f0)
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from acoustic_eval.metrics import EvaluationSummary, FullEvaluationResult

logger = logging.getLogger(__name__)


def _check_results(results: Sequence[FullEvaluationResult]) -> None:
    if results is None:
        raise ValueError("평가 결과 목록은 None일 수 없습니다")
    if len(results) == 0:
        raise ValueError("평가 결과 목록이 비어 있습니다")


def _mean(
    results: Sequence[FullEvaluationResult],
    selector: Callable[[FullEvaluationResult], Optional[float]],
) -> Optional[float]:
    """선택한 값의 평균입니다. 하나라도 None이면 None을 반환합니다."""
    values = [selector(result) for result in results]
    if any(value is None for value in values):
        return None
    return sum(values) / len(values)


def _ratio(numerator: float, denominator: float) -> Optional[float]:
    if denominator == 0:
        return None
    return numerator / denominator


def calculate_summary(results: Sequence[FullEvaluationResult]) -> EvaluationSummary:
    """
    SPS 평가 결과를 특징별 산술 평균으로 요약합니다.

    파라미터:
        results: 문장별 평가 결과 (1개 이상)

    반환값:
        EvaluationSummary: 평균 결과

    에러:
        ValueError: 목록이 None이거나 비어 있을 때
    """
    _check_results(results)
    summary = EvaluationSummary(
        sentence_count=len(results),
        rmse_duration=_mean(results, lambda r: r.duration.rmse),
        rmse_f0=_mean(results, lambda r: r.f0.rmse),
        correlation_f0=_mean(results, lambda r: r.f0.correlation_coefficient),
        rmse_f0_state_level=_mean(results, lambda r: r.f0_state_level.rmse),
        correlation_f0_state_level=_mean(results, lambda r: r.f0_state_level.correlation_coefficient),
        rmse_lsp=_mean(results, lambda r: r.lsp.rmse),
        rmse_log_spectrum_with_gain=_mean(results, lambda r: r.log_spectrum.rmse),
        rmse_log_spectrum_without_gain=_mean(results, lambda r: r.log_frequency.rmse),
        rmse_gain=_mean(results, lambda r: r.gain.rmse),
        correlation_gain=_mean(results, lambda r: r.gain.correlation_coefficient),
    )
    logger.info(f"SPS 요약 완료: {summary.sentence_count}개 문장")
    return summary


def calculate_summary_rus(results: Sequence[FullEvaluationResult]) -> EvaluationSummary:
    """
    RUS 평가 결과를 요약합니다.

    RMSE / 상관계수는 문장 평균, 비율 값은 전체 문장의 합으로 계산합니다.
    - outlier_f0_ratio = Σ이상치 / Σ마스크 프레임
    - uv_mismatch_ratio = Σunexpected_voiced / Σ원본 프레임
    - vu_mismatch_ratio = Σunexpected_unvoiced / Σ원본 프레임
    - cc / voiced_cc / continue_unit_ratio = Σ합계 / Σ경계 수
    분모가 0이면 None입니다.

    에러:
        ValueError: 목록이 None이거나 비어 있을 때
    """
    _check_results(results)

    outlier_frames = sum(r.outlier_f0.outlier_frame_number for r in results)
    outlier_total = sum(r.outlier_f0.total_frame_number for r in results)
    unexpected_voiced = sum(r.uv_info.unexpected_voiced for r in results)
    unexpected_unvoiced = sum(r.uv_info.unexpected_unvoiced for r in results)
    reference_frames = sum(r.uv_info.total_reference for r in results)
    cc_total = sum(r.cc_info.total_concatenation_cost for r in results)
    cc_boundaries = sum(r.cc_info.boundary_number for r in results)
    voiced_cc_total = sum(r.voiced_cc_info.total_concatenation_cost for r in results)
    voiced_cc_boundaries = sum(r.voiced_cc_info.boundary_number for r in results)
    continue_units = sum(r.continue_unit_info.total_continue_unit_number for r in results)
    continue_boundaries = sum(r.continue_unit_info.boundary_number for r in results)

    summary = EvaluationSummary(
        sentence_count=len(results),
        rmse_duration=_mean(results, lambda r: r.duration.rmse),
        rmse_f0=_mean(results, lambda r: r.f0.rmse),
        correlation_f0=_mean(results, lambda r: r.f0.correlation_coefficient),
        rmse_lsp=_mean(results, lambda r: r.lsp.rmse),
        rmse_log_spectrum_without_gain_voiced=_mean(results, lambda r: r.log_frequency_voiced.rmse),
        rmse_log_spectrum_without_gain=_mean(results, lambda r: r.log_frequency.rmse),
        rmse_gain=_mean(results, lambda r: r.gain.rmse),
        correlation_gain=_mean(results, lambda r: r.gain.correlation_coefficient),
        outlier_f0_ratio=_ratio(outlier_frames, outlier_total),
        uv_mismatch_ratio=_ratio(unexpected_voiced, reference_frames),
        vu_mismatch_ratio=_ratio(unexpected_unvoiced, reference_frames),
        cc=_ratio(cc_total, cc_boundaries),
        voiced_cc=_ratio(voiced_cc_total, voiced_cc_boundaries),
        continue_unit_ratio=_ratio(continue_units, continue_boundaries),
    )
    logger.info(f"RUS 요약 완료: {summary.sentence_count}개 문장")
    return summary

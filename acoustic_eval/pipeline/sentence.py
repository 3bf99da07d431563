"""
문장 단위 평가 파이프라인 모듈입니다.

역할:
- 한 문장의 원본/합성 Duration, F0, LSP 파일을 읽어 전체 지표 계산
- SPS 모드: 단어-음소 대응 정보가 있으면 음소 단위 결과도 함께 계산
- RUS 모드: 최적 경로 기준 음소 단위 결과와 연결 비용 통계 계산

처리 흐름 (SPS):
    Duration → F0 / 유무성 → 상태 단위 F0 → LSP → 게인 → 스펙트럼

처리 흐름 (RUS):
    F0 / 유무성 / 이상치 → 가중 LSP → 스펙트럼 → 게인 → Duration → 연결 비용

사용 예시:
    >>> settings = EvaluationSettings(
    ...     reference_lpc_order=40, target_lpc_order=40, state_count=5,
    ...     voiced_unvoiced_threshold=50.0, lower_bound_frequency=0.0,
    ...     upper_bound_frequency=8000.0, sample_frequency=16000.0,
    ... )
    >>> result = process_sentence(reference_files, target_files, settings)
    >>> print(result.f0.rmse)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from acoustic_eval.dsp.transforms import (
    frequency_list_to_spectrum_list,
    get_gain,
    get_state_level_f0,
    lsp_list_to_frequency_list,
)
from acoustic_eval.features import DataFiles
from acoustic_eval.features.loaders import (
    DataMisalignedError,
    load_duration,
    load_f0,
    load_lsp,
)
from acoustic_eval.lattice import BestPath
from acoustic_eval.lattice.statistics import (
    generate_phone_level_info,
    process_cc,
    process_continue_unit_count,
    process_voiced_cc,
)
from acoustic_eval.metrics import (
    NOT_COMPUTED,
    EvaluationResult,
    FullEvaluationResult,
    PhoneLevelResult,
)
from acoustic_eval.metrics.evaluators import (
    process_duration,
    process_f0,
    process_f0_outlier,
    process_gain,
    process_lsp,
    process_spectrum,
    process_uv,
    process_weighted_lsp,
)
from acoustic_eval.metrics.kernels import filter_element_by_index
from acoustic_eval.pipeline import EvaluationSettings, PhoneWordMap

logger = logging.getLogger(__name__)


# =============================================================================
# 공통 헬퍼
# =============================================================================

def _check_phone_count(
    reference_durations: Sequence[Sequence[int]],
    target_durations: Sequence[Sequence[int]],
    reference_files: DataFiles,
) -> None:
    if len(reference_durations) != len(target_durations):
        raise DataMisalignedError(
            f"원본과 합성본의 음소 수가 다릅니다: "
            f"{len(reference_durations)} != {len(target_durations)} "
            f"({reference_files.duration_file.name})"
        )


def _check_frame_count(name: str, reference_count: int, target_count: int) -> None:
    if reference_count != target_count:
        raise DataMisalignedError(
            f"원본과 합성본의 {name} 프레임 수가 다릅니다: {reference_count} != {target_count}"
        )


def _phone_level_max(
    phones: Sequence[PhoneLevelResult],
    attribute: str,
) -> Optional[float]:
    """단어에 속한 음소(word_length > 0) 중 계산된 값의 최댓값입니다."""
    values = [
        getattr(phone, attribute)
        for phone in phones
        if phone.word_length > 0 and getattr(phone, attribute) is not None
    ]
    return max(values) if values else None


def _phone_spans(frame_counts: Sequence[int]) -> list[tuple[int, int]]:
    """음소별 (시작 프레임, 프레임 수) 목록입니다."""
    spans: list[tuple[int, int]] = []
    start = 0
    for count in frame_counts:
        spans.append((start, count))
        start += count
    return spans


def _resolve_frame_counts(
    reference_durations: Sequence[Sequence[int]],
    target_durations: Sequence[Sequence[int]],
    reference_f0_count: int,
    target_f0_count: int,
) -> tuple[list[int], Sequence[Sequence[int]]]:
    """
    F0 프레임 수와 맞는 쪽의 Duration으로 음소별 프레임 수를 정합니다.

    원본 Duration을 먼저 시도하고, 맞지 않으면 합성 Duration을 사용합니다.

    반환값:
        (음소별 프레임 수, 사용한 Duration)
    """
    for durations in (reference_durations, target_durations):
        frame_counts = [sum(phone) for phone in durations]
        total = sum(frame_counts)
        if total == reference_f0_count and total == target_f0_count:
            return frame_counts, durations
    raise DataMisalignedError(
        f"Duration 총 프레임 수가 F0 프레임 수와 맞지 않습니다: "
        f"reference F0={reference_f0_count}, target F0={target_f0_count}"
    )


# =============================================================================
# SPS
# =============================================================================

def process_sentence(
    reference_files: DataFiles,
    target_files: DataFiles,
    settings: EvaluationSettings,
    phone_word_maps: Sequence[PhoneWordMap] = (),
) -> FullEvaluationResult:
    """
    SPS(통계적 파라메트릭 합성) 문장 하나를 평가합니다.

    파라미터:
        reference_files: 원본 문장 파일 묶음
        target_files: 합성 문장 파일 묶음
        settings: 평가 파라미터
        phone_word_maps: 단어별 음소 수 (비어 있으면 음소 단위 결과 없음)

    반환값:
        FullEvaluationResult: 문장 평가 결과

    에러:
        DataMisalignedError: 음소 수 / 프레임 수가 서로 맞지 않을 때
        FileNotFoundError: 입력 파일이 없을 때
    """
    threshold = settings.voiced_unvoiced_threshold
    band = (
        settings.lower_bound_frequency,
        settings.upper_bound_frequency,
        settings.sample_frequency,
    )

    phones = [
        PhoneLevelResult(word_offset=word.word_offset, word_length=word.word_length)
        for word in phone_word_maps
        for _ in range(word.phoneme_count)
    ]

    # Duration
    reference_durations = load_duration(
        reference_files.duration_file, settings.state_count, settings.duration_lines_per_phone
    )
    target_durations = load_duration(
        target_files.duration_file, settings.state_count, settings.duration_lines_per_phone
    )
    _check_phone_count(reference_durations, target_durations, reference_files)
    if phones and len(phones) != len(reference_durations):
        raise DataMisalignedError(
            f"단어 대응 정보의 음소 수({len(phones)})가 Duration 음소 수"
            f"({len(reference_durations)})와 다릅니다"
        )
    for index, phone in enumerate(phones):
        distance = abs(sum(reference_durations[index]) - sum(target_durations[index]))
        phones[index] = replace(phone, duration_distance=distance * settings.frame_length)
    duration = replace(
        process_duration(
            reference_durations, target_durations, settings.state_count, settings.frame_length
        ),
        max_distance=_phone_level_max(phones, "duration_distance"),
    )

    # F0 / 유무성
    reference_f0 = load_f0(reference_files.f0_file)
    target_f0 = load_f0(target_files.f0_file)
    frame_counts, aligned_durations = _resolve_frame_counts(
        reference_durations, target_durations, len(reference_f0), len(target_f0)
    )
    spans = _phone_spans(frame_counts)

    for index, phone in enumerate(phones):
        start, length = spans[index]
        phone_reference = reference_f0[start:start + length]
        phone_target = target_f0[start:start + length]
        uv_info, voiced = process_uv(phone_reference, phone_target, threshold)
        phone_f0 = process_f0(phone_reference, phone_target, voiced)
        phones[index] = replace(
            phone,
            uv_info=uv_info,
            both_voiced=tuple(voiced),
            f0_distance=phone_f0.rmse,
            f0_correlation=phone_f0.correlation_coefficient,
        )

    uv_info, both_voiced = process_uv(reference_f0, target_f0, threshold)
    f0 = replace(
        process_f0(reference_f0, target_f0, both_voiced),
        max_distance=_phone_level_max(phones, "f0_distance"),
    )

    # 상태 단위 F0
    reference_state_f0 = get_state_level_f0(reference_f0, aligned_durations, threshold)
    target_state_f0 = get_state_level_f0(target_f0, aligned_durations, threshold)
    uv_info_state_level, state_voiced = process_uv(reference_state_f0, target_state_f0, threshold)
    f0_state_level = process_f0(reference_state_f0, target_state_f0, state_voiced)

    # LSP
    reference_lsp = load_lsp(reference_files.lsp_file, settings.reference_lpc_order)
    target_lsp = load_lsp(target_files.lsp_file, settings.target_lpc_order)
    _check_frame_count("LSP", len(reference_lsp), len(reference_f0))
    _check_frame_count("LSP", len(target_lsp), len(target_f0))

    if settings.lpc_orders_match:
        for index, phone in enumerate(phones):
            start, length = spans[index]
            voiced = list(phone.both_voiced)
            phone_lsp = process_lsp(
                filter_element_by_index(reference_lsp[start:start + length], voiced),
                filter_element_by_index(target_lsp[start:start + length], voiced),
            )
            phones[index] = replace(phone, lsp_distance=phone_lsp.rmse)
        lsp = replace(
            process_lsp(reference_lsp, target_lsp),
            max_distance=_phone_level_max(phones, "lsp_distance"),
        )
    else:
        logger.warning(
            f"LPC 차수가 달라 LSP / 스펙트럼 거리를 계산하지 않습니다: "
            f"reference={settings.reference_lpc_order}, target={settings.target_lpc_order}"
        )
        lsp = NOT_COMPUTED

    # 게인
    reference_gain = get_gain(reference_lsp)
    target_gain = get_gain(target_lsp)
    for index, phone in enumerate(phones):
        start, length = spans[index]
        phone_gain = process_gain(
            reference_gain[start:start + length],
            target_gain[start:start + length],
            list(phone.both_voiced),
        )
        phones[index] = replace(phone, gain_distance=phone_gain.rmse)
    gain = replace(
        process_gain(reference_gain, target_gain, both_voiced),
        max_distance=_phone_level_max(phones, "gain_distance"),
    )

    # 스펙트럼 (양쪽 유성 프레임만, LPC 차수가 같을 때)
    if settings.lpc_orders_match:
        reference_frequency = lsp_list_to_frequency_list(
            filter_element_by_index(reference_lsp, both_voiced), settings.reference_lpc_order
        )
        target_frequency = lsp_list_to_frequency_list(
            filter_element_by_index(target_lsp, both_voiced), settings.target_lpc_order
        )
        log_frequency = process_spectrum(reference_frequency, target_frequency, *band)

        reference_spectrum = frequency_list_to_spectrum_list(
            reference_frequency, filter_element_by_index(reference_gain, both_voiced)
        )
        target_spectrum = frequency_list_to_spectrum_list(
            target_frequency, filter_element_by_index(target_gain, both_voiced)
        )

        voiced_position = {frame: position for position, frame in enumerate(both_voiced)}
        for index, phone in enumerate(phones):
            start, _ = spans[index]
            positions = [voiced_position[start + offset] for offset in phone.both_voiced]
            phone_spectrum = process_spectrum(
                filter_element_by_index(reference_spectrum, positions),
                filter_element_by_index(target_spectrum, positions),
                *band,
            )
            phones[index] = replace(phone, log_spectrum_distance=phone_spectrum.rmse)
        log_spectrum = replace(
            process_spectrum(reference_spectrum, target_spectrum, *band),
            max_distance=_phone_level_max(phones, "log_spectrum_distance"),
        )
    else:
        log_frequency = NOT_COMPUTED
        log_spectrum = NOT_COMPUTED

    logger.debug(
        f"SPS 문장 평가 완료: {reference_files.f0_file.name}, "
        f"{len(reference_f0)} 프레임, 유성 {len(both_voiced)} 프레임"
    )
    return FullEvaluationResult(
        reference_files=reference_files,
        target_files=target_files,
        uv_info=uv_info,
        uv_info_state_level=uv_info_state_level,
        duration=duration,
        f0=f0,
        f0_state_level=f0_state_level,
        lsp=lsp,
        log_spectrum=log_spectrum,
        log_frequency=log_frequency,
        gain=gain,
        phone_level_results=tuple(phones),
    )


# =============================================================================
# RUS
# =============================================================================

def process_rus(
    reference_files: DataFiles,
    target_files: DataFiles,
    best_path: BestPath,
    settings: EvaluationSettings,
) -> FullEvaluationResult:
    """
    RUS(유닛 선택 합성) 문장 하나를 최적 경로와 함께 평가합니다.

    음소 구간은 최적 경로의 무음이 아닌 후보 위치(start_frame, frame_length)를 따릅니다.
    F0 범위를 넘는 구간은 범위 안쪽 프레임만 사용합니다.

    파라미터:
        reference_files: 원본 문장 파일 묶음
        target_files: 합성 문장 파일 묶음
        best_path: 합성에 사용된 최적 경로
        settings: 평가 파라미터 (state_count는 보통 RUS_DURATION_STATE)

    반환값:
        FullEvaluationResult: 문장 평가 결과

    에러:
        DataMisalignedError: 프레임 수 / 음소 수가 서로 맞지 않을 때
        FileNotFoundError: 입력 파일이 없을 때
    """
    threshold = settings.voiced_unvoiced_threshold
    band = (
        settings.lower_bound_frequency,
        settings.upper_bound_frequency,
        settings.sample_frequency,
    )
    phones = generate_phone_level_info(best_path)

    # F0 / 유무성 / 이상치
    reference_f0 = load_f0(reference_files.f0_file)
    target_f0 = load_f0(target_files.f0_file)
    _check_frame_count("F0", len(reference_f0), len(target_f0))

    uv_info, both_voiced = process_uv(reference_f0, target_f0, threshold)
    f0 = process_f0(reference_f0, target_f0, both_voiced)
    outlier_f0 = process_f0_outlier(
        reference_f0, target_f0, both_voiced, settings.outlier_f0_threshold
    )

    for index, phone in enumerate(phones):
        end = phone.start_frame + phone.frame_length
        phone_reference = reference_f0[phone.start_frame:end]
        phone_target = target_f0[phone.start_frame:end]
        phone_uv, voiced = process_uv(phone_reference, phone_target, threshold)
        phone_f0 = process_f0(phone_reference, phone_target, voiced)
        phone_outlier = process_f0_outlier(
            phone_reference, phone_target, voiced, settings.outlier_f0_threshold
        )
        phones[index] = replace(
            phone,
            uv_info=phone_uv,
            both_voiced=tuple(voiced),
            f0_distance=phone_f0.rmse,
            f0_correlation=phone_f0.correlation_coefficient,
            f0_outlier_frame_number=phone_outlier.outlier_frame_number,
        )

    # 가중 LSP
    reference_lsp = load_lsp(reference_files.lsp_file, settings.reference_lpc_order)
    target_lsp = load_lsp(target_files.lsp_file, settings.target_lpc_order)
    _check_frame_count("LSP", len(reference_lsp), len(reference_f0))
    _check_frame_count("LSP", len(target_lsp), len(target_f0))

    dimension = settings.weighted_lsp_dimension
    if settings.lpc_orders_match and reference_lsp:
        lsp = process_weighted_lsp(reference_lsp, target_lsp, dimension)
        for index, phone in enumerate(phones):
            end = phone.start_frame + phone.frame_length
            phone_reference = reference_lsp[phone.start_frame:end]
            if not phone_reference:
                continue
            phone_lsp = process_weighted_lsp(
                phone_reference, target_lsp[phone.start_frame:end], dimension
            )
            phones[index] = replace(phone, weighted_lsp_distance=phone_lsp.rmse)
    else:
        logger.warning(
            f"가중 LSP 거리를 계산하지 않습니다: "
            f"reference 차수={settings.reference_lpc_order}, "
            f"target 차수={settings.target_lpc_order}, 프레임 수={len(reference_lsp)}"
        )
        lsp = NOT_COMPUTED

    # 스펙트럼 (게인 제외, LPC 차수가 같을 때)
    if settings.lpc_orders_match:
        reference_frequency = lsp_list_to_frequency_list(reference_lsp, settings.reference_lpc_order)
        target_frequency = lsp_list_to_frequency_list(target_lsp, settings.target_lpc_order)
        log_frequency_voiced = process_spectrum(
            filter_element_by_index(reference_frequency, both_voiced),
            filter_element_by_index(target_frequency, both_voiced),
            *band,
        )
        log_frequency = process_spectrum(reference_frequency, target_frequency, *band)

        for index, phone in enumerate(phones):
            end = phone.start_frame + phone.frame_length
            phone_spectrum = process_spectrum(
                reference_frequency[phone.start_frame:end],
                target_frequency[phone.start_frame:end],
                *band,
            )
            phones[index] = replace(phone, log_spectrum_distance=phone_spectrum.rmse)
    else:
        logger.warning(
            f"LPC 차수가 달라 스펙트럼 거리를 계산하지 않습니다: "
            f"reference={settings.reference_lpc_order}, target={settings.target_lpc_order}"
        )
        log_frequency_voiced = NOT_COMPUTED
        log_frequency = NOT_COMPUTED

    # 게인
    reference_gain = get_gain(reference_lsp)
    target_gain = get_gain(target_lsp)
    gain = process_gain(reference_gain, target_gain, both_voiced)
    for index, phone in enumerate(phones):
        end = phone.start_frame + phone.frame_length
        phone_gain = process_gain(
            reference_gain[phone.start_frame:end],
            target_gain[phone.start_frame:end],
            list(phone.both_voiced),
        )
        phones[index] = replace(phone, gain_distance=phone_gain.rmse)

    # Duration
    reference_durations = load_duration(
        reference_files.duration_file, settings.state_count, settings.duration_lines_per_phone
    )
    target_durations = load_duration(
        target_files.duration_file, settings.state_count, settings.duration_lines_per_phone
    )
    _check_phone_count(reference_durations, target_durations, reference_files)
    duration: EvaluationResult = process_duration(
        reference_durations, target_durations, settings.state_count, settings.frame_length
    )

    # 최적 경로 통계
    cc_info = process_cc(best_path)
    voiced_cc_info = process_voiced_cc(best_path, target_f0, threshold)
    continue_unit_info = process_continue_unit_count(best_path)

    logger.debug(
        f"RUS 문장 평가 완료: {best_path.sentence_id}, "
        f"음소 {len(phones)}개, 경계 {cc_info.boundary_number}개"
    )
    return FullEvaluationResult(
        reference_files=reference_files,
        target_files=target_files,
        uv_info=uv_info,
        duration=duration,
        f0=f0,
        lsp=lsp,
        log_frequency=log_frequency,
        log_frequency_voiced=log_frequency_voiced,
        gain=gain,
        phone_level_results=tuple(phones),
        outlier_f0=outlier_f0,
        cc_info=cc_info,
        voiced_cc_info=voiced_cc_info,
        continue_unit_info=continue_unit_info,
    )

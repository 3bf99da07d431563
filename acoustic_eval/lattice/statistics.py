"""
최적 경로 통계 모듈입니다.

역할:
- 무음이 아닌 음소의 시작 프레임 / 길이로 음소 단위 결과 골격 생성
- 경계별 연결 비용(CC) 합계, 유성 경계 연결 비용 합계
- 녹음상 연속된 유닛 수 집계

사용 예시:
    >>> phones = generate_phone_level_info(best_path)
    >>> cc_info = process_cc(best_path)
    >>> print(cc_info.average)
"""

from __future__ import annotations

import logging
from typing import Sequence

from acoustic_eval.lattice import SILENCE_PHONE, BestPath
from acoustic_eval.metrics import ConcatenationCostInfo, ContinueUnitInfo, PhoneLevelResult

logger = logging.getLogger(__name__)


def generate_phone_level_info(best_path: BestPath) -> list[PhoneLevelResult]:
    """
    최적 경로에서 무음이 아닌 음소의 위치 정보를 추출합니다.

    시작 프레임은 무음을 포함한 앞선 모든 후보의 프레임 수 누적값입니다.

    반환값:
        list[PhoneLevelResult]: phone_string / start_frame / frame_length 만 채운 결과
    """
    results: list[PhoneLevelResult] = []
    start_frame = 0
    for phone in best_path.phones:
        candidate = phone.candidate
        if not phone.is_silence:
            results.append(
                PhoneLevelResult(
                    phone_string=candidate.text,
                    start_frame=start_frame,
                    frame_length=candidate.frame_length,
                )
            )
        start_frame += candidate.frame_length
    return results


def process_cc(best_path: BestPath) -> ConcatenationCostInfo:
    """
    두 번째 음소부터 각 후보의 연결 비용을 더합니다. 경계 수는 음소 수 - 1 입니다.
    """
    boundaries = best_path.phones[1:]
    return ConcatenationCostInfo(
        boundary_number=len(boundaries),
        total_concatenation_cost=sum(phone.candidate.concatenation_cost for phone in boundaries),
    )


def process_voiced_cc(
    best_path: BestPath,
    target_f0: Sequence[float],
    voiced_unvoiced_threshold: float,
) -> ConcatenationCostInfo:
    """
    유성 경계의 연결 비용만 집계합니다.

    경계 양쪽 음소가 모두 무음이 아니고, 경계 직전 프레임(앞 음소의 마지막 프레임)과
    직후 프레임(뒷 음소의 첫 프레임)의 합성 F0가 모두 임계값보다 클 때 유성 경계로 봅니다.
    F0 범위를 벗어나는 경계는 유성 경계로 세지 않습니다.

    파라미터:
        best_path: 최적 경로
        target_f0: 최적 경로로 합성한 음성의 프레임별 F0
        voiced_unvoiced_threshold: 유/무성 판단 임계값 (Hz)
    """
    boundary_number = 0
    total_cost = 0.0
    frame_count = len(target_f0)
    boundary_frame = 0
    phones = best_path.phones
    for index in range(1, len(phones)):
        boundary_frame += phones[index - 1].candidate.frame_length
        previous, current = phones[index - 1], phones[index]
        if previous.is_silence or current.candidate.text == SILENCE_PHONE:
            continue
        if boundary_frame < 1 or boundary_frame >= frame_count:
            logger.debug(f"F0 범위를 벗어난 경계 건너뜀: frame={boundary_frame}")
            continue
        if (target_f0[boundary_frame - 1] > voiced_unvoiced_threshold
                and target_f0[boundary_frame] > voiced_unvoiced_threshold):
            boundary_number += 1
            total_cost += current.candidate.concatenation_cost
    return ConcatenationCostInfo(boundary_number=boundary_number, total_concatenation_cost=total_cost)


def process_continue_unit_count(best_path: BestPath) -> ContinueUnitInfo:
    """두 번째 음소부터 녹음상 연속된 유닛 수를 셉니다."""
    boundaries = best_path.phones[1:]
    return ContinueUnitInfo(
        boundary_number=len(boundaries),
        total_continue_unit_number=sum(1 for phone in boundaries if phone.candidate.is_continue),
    )

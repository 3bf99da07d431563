"""
수치 계산 커널 모듈입니다.

역할:
- 두 수열 사이의 RMSE, 최대 거리, 피어슨 상관계수 계산
- 평균, 인덱스 필터링, 원소별 단항/이항 연산
- 계산할 수 없는 경우(빈 입력, 분산 0 등)는 예외 대신 None 반환

사용 예시:
    >>> rmse([1.0, 2.0], [1.0, 4.0])
    1.4142135623730951
    >>> correlation_coefficient([1, 2, 3], [2, 4, 6])
    1.0
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import Any, Callable, Optional, Sequence, TypeVar

import numpy as np

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


# =============================================================================
# 입력 검증
# =============================================================================

def _to_vector(values: Sequence[Any], name: str) -> np.ndarray:
    """
    수치 원소로만 이루어진 시퀀스를 float64 배열로 변환합니다.

    에러:
        TypeError: 원소가 수치형이 아닐 때 (bool 포함)
    """
    for index, value in enumerate(values):
        if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
            raise TypeError(
                f"{name}[{index}] 원소가 수치형이 아닙니다: {type(value).__name__}"
            )
    return np.asarray(values, dtype=np.float64)


def _to_pair(
    reference: Sequence[Any],
    target: Sequence[Any],
) -> tuple[np.ndarray, np.ndarray]:
    """원본/합성 시퀀스 쌍을 검증하고 배열로 변환합니다."""
    if reference is None or target is None:
        raise ValueError("reference와 target은 None일 수 없습니다")
    if len(reference) != len(target):
        raise ValueError(
            f"원본과 합성본의 원소 수가 다릅니다: {len(reference)} != {len(target)}"
        )
    return _to_vector(reference, "reference"), _to_vector(target, "target")


# =============================================================================
# 거리 / 통계
# =============================================================================

def rmse(reference: Sequence[float], target: Sequence[float]) -> Optional[float]:
    """
    두 수열의 RMSE(root-mean-square error)를 계산합니다.

    파라미터:
        reference: 원본 수열
        target: 합성 수열 (reference와 같은 길이)

    반환값:
        Optional[float]: sqrt(mean((r - t)^2)). 빈 입력이면 None

    에러:
        ValueError: 길이가 다를 때
        TypeError: 수치형이 아닌 원소가 있을 때
    """
    ref, tgt = _to_pair(reference, target)
    if ref.size == 0:
        return None
    return float(np.sqrt(np.mean((ref - tgt) ** 2)))


def max_distance(reference: Sequence[float], target: Sequence[float]) -> Optional[float]:
    """
    두 수열의 원소별 절대 차이 중 최댓값을 계산합니다.

    빈 입력은 rmse와 동일하게 None을 반환합니다.

    에러:
        ValueError: 길이가 다를 때
        TypeError: 수치형이 아닌 원소가 있을 때
    """
    ref, tgt = _to_pair(reference, target)
    if ref.size == 0:
        return None
    return float(np.max(np.abs(ref - tgt)))


def correlation_coefficient(
    reference: Sequence[float],
    target: Sequence[float],
) -> Optional[float]:
    """
    두 수열의 피어슨 상관계수를 계산합니다.

    반환값:
        Optional[float]: [-1, 1] 범위의 상관계수.
            원소가 2개 미만이거나 한쪽 분산이 0이면 None

    에러:
        ValueError: 길이가 다를 때
        TypeError: 수치형이 아닌 원소가 있을 때
    """
    ref, tgt = _to_pair(reference, target)
    if ref.size < 2:
        return None

    # 상수 수열은 분산 0
    if np.ptp(ref) == 0.0 or np.ptp(tgt) == 0.0:
        logger.debug("분산이 0인 수열이 있어 상관계수를 계산하지 않습니다")
        return None

    ref_centered = ref - ref.mean()
    tgt_centered = tgt - tgt.mean()
    sum_xy = float(np.dot(ref_centered, tgt_centered))
    sum_xx = float(np.dot(ref_centered, ref_centered))
    sum_yy = float(np.dot(tgt_centered, tgt_centered))
    if sum_xx == 0.0 or sum_yy == 0.0:
        return None

    coefficient = sum_xy / math.sqrt(sum_xx * sum_yy)
    return min(1.0, max(-1.0, coefficient))


def average(values: Sequence[Optional[float]]) -> Optional[float]:
    """
    산술 평균을 계산합니다.

    반환값:
        Optional[float]: 평균값. 빈 입력이거나 None 원소가 있으면 None

    에러:
        TypeError: None 이외의 비수치 원소가 있을 때
    """
    if values is None:
        raise ValueError("values는 None일 수 없습니다")
    if len(values) == 0:
        return None
    if any(value is None for value in values):
        return None
    vector = _to_vector(values, "values")
    return float(np.mean(vector))


# =============================================================================
# 시퀀스 연산
# =============================================================================

def filter_element_by_index(elements: Sequence[T], indices: Sequence[int]) -> list[T]:
    """
    인덱스 목록(마스크)에 해당하는 원소만 순서대로 추출합니다.

    에러:
        IndexError: 인덱스가 음수이거나 원소 수 이상일 때
    """
    element_count = len(elements)
    result: list[T] = []
    for index in indices:
        if index < 0 or index >= element_count:
            raise IndexError(
                f"인덱스가 범위를 벗어났습니다: {index} (원소 수 {element_count})"
            )
        result.append(elements[index])
    return result


def unary_vector_calculation(operands: Sequence[T], operator: Callable[[T], R]) -> list[R]:
    """각 원소에 단항 연산을 적용합니다."""
    if operands is None:
        raise ValueError("operands는 None일 수 없습니다")
    return [operator(operand) for operand in operands]


def binary_vector_calculation(
    operands1: Sequence[T],
    operands2: Sequence[Any],
    operator: Callable[[T, Any], R],
) -> list[R]:
    """
    두 시퀀스의 같은 위치 원소 쌍에 이항 연산을 적용합니다.

    에러:
        ValueError: 길이가 다를 때
    """
    if operands1 is None or operands2 is None:
        raise ValueError("operands는 None일 수 없습니다")
    if len(operands1) != len(operands2):
        raise ValueError(
            f"두 시퀀스의 원소 수가 다릅니다: {len(operands1)} != {len(operands2)}"
        )
    return [operator(first, second) for first, second in zip(operands1, operands2)]


def unary_matrix_calculation(
    matrix: Sequence[Sequence[T]],
    operator: Callable[[T], R],
) -> list[list[R]]:
    """2차원 시퀀스의 모든 원소에 단항 연산을 적용합니다."""
    if matrix is None:
        raise ValueError("matrix는 None일 수 없습니다")
    return [unary_vector_calculation(row, operator) for row in matrix]

"""
수치 계산 커널 단위 테스트

검증 조건:
- RMSE / 최대 거리 / 상관계수 기본값과 빈 입력 시 None
- 길이가 다른 입력은 ValueError, 비수치 원소는 TypeError
- 분산 0 또는 원소 2개 미만이면 상관계수 None
- 인덱스 필터링 범위 검사
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from acoustic_eval.metrics.kernels import (
    average,
    binary_vector_calculation,
    correlation_coefficient,
    filter_element_by_index,
    max_distance,
    rmse,
    unary_matrix_calculation,
    unary_vector_calculation,
)


# =========================================================================
# rmse / max_distance
# =========================================================================

class TestRmse:
    def test_identical_sequences_are_zero(self):
        assert rmse([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == 0.0

    def test_known_value(self):
        assert rmse([0.0, 0.0], [3.0, 4.0]) == pytest.approx(math.sqrt(12.5))

    def test_integer_input(self):
        assert rmse([1, 2], [1, 4]) == pytest.approx(math.sqrt(2.0))

    def test_empty_is_none(self):
        assert rmse([], []) is None

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            rmse([1.0, 2.0], [1.0])

    def test_none_input_raises(self):
        with pytest.raises(ValueError):
            rmse(None, [1.0])

    def test_non_numeric_raises(self):
        with pytest.raises(TypeError):
            rmse(["a"], [1.0])

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            rmse([True], [1.0])

    def test_numpy_scalars_accepted(self):
        assert rmse([np.float32(1.0)], [np.float64(2.0)]) == pytest.approx(1.0)


class TestMaxDistance:
    def test_known_value(self):
        assert max_distance([1.0, 5.0, 2.0], [1.5, 1.0, 2.0]) == pytest.approx(4.0)

    def test_empty_is_none(self):
        assert max_distance([], []) is None

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            max_distance([1.0], [])


# =========================================================================
# correlation_coefficient
# =========================================================================

class TestCorrelation:
    def test_perfect_positive(self):
        assert correlation_coefficient([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)

    def test_perfect_negative(self):
        assert correlation_coefficient([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)

    def test_single_element_is_none(self):
        assert correlation_coefficient([1.0], [2.0]) is None

    def test_zero_variance_is_none(self):
        assert correlation_coefficient([5.0, 5.0, 5.0], [1.0, 2.0, 3.0]) is None

    def test_result_in_range(self):
        value = correlation_coefficient([1.0, 3.0, 2.0, 5.0], [2.0, 1.0, 4.0, 3.0])
        assert -1.0 <= value <= 1.0

    def test_matches_numpy(self):
        x = [1.0, 2.5, 3.0, 7.0, 4.0]
        y = [2.0, 2.0, 5.0, 6.0, 1.0]
        assert correlation_coefficient(x, y) == pytest.approx(np.corrcoef(x, y)[0, 1])

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            correlation_coefficient([1, 2, 3], [1, 2, 3, 4])

    def test_non_numeric_raises(self):
        with pytest.raises(TypeError):
            correlation_coefficient([1.0, "2", 3.0], [1.0, 2.0, 3.0])


# =========================================================================
# average
# =========================================================================

class TestAverage:
    def test_mean(self):
        assert average([1.0, 2.0, 3.0]) == pytest.approx(2.0)

    def test_empty_is_none(self):
        assert average([]) is None

    def test_none_element_propagates(self):
        assert average([1.0, None]) is None

    def test_none_list_raises(self):
        with pytest.raises(ValueError):
            average(None)


# =========================================================================
# 시퀀스 연산
# =========================================================================

class TestFilterElementByIndex:
    def test_projects_in_order(self):
        assert filter_element_by_index(["a", "b", "c", "d"], [0, 2, 3]) == ["a", "c", "d"]

    def test_empty_indices(self):
        assert filter_element_by_index([1, 2], []) == []

    def test_index_too_large_raises(self):
        with pytest.raises(IndexError):
            filter_element_by_index([1, 2], [2])

    def test_negative_index_raises(self):
        with pytest.raises(IndexError):
            filter_element_by_index([1, 2], [-1])


class TestVectorCalculation:
    def test_unary(self):
        assert unary_vector_calculation([1, 2, 3], lambda x: x * 2) == [2, 4, 6]

    def test_binary(self):
        assert binary_vector_calculation([1, 2], [3, 4], lambda a, b: a + b) == [4, 6]

    def test_binary_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            binary_vector_calculation([1, 2], [3], lambda a, b: a + b)

    def test_matrix(self):
        assert unary_matrix_calculation([[1, 2], [3]], lambda x: -x) == [[-1, -2], [-3]]

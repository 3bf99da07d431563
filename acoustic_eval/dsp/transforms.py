"""
LSP 기반 신호 변환 모듈입니다.

역할:
- LSP 프레임에서 log gain 성분 분리/제거 (선택적으로 cos(2πx) 정규화)
- 체비셰프 재귀로 LSP → LPC 계수 합성
- LPC → 진폭 스펙트럼 (FFT 1024점, 앞쪽 512 bin)
- 주파수 대역 필터링
- 상태(state) 단위 평균 F0 계산

사용 예시:
    >>> frequency = lsp_list_to_frequency_list(lsp_frames, lpc_order=40)
    >>> spectrum = frequency_list_to_spectrum_list(frequency, get_gain(lsp_frames))
    >>> band = frequency_band_filter(spectrum, 0.0, 4000.0, 16000.0)
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

# LPC → 스펙트럼 변환 FFT 길이
FFT_DIM = 1024


# =============================================================================
# 게인 분리
# =============================================================================

def remove_gain(lsp_frames: Sequence[Sequence[float]], normalize: bool) -> list[list[float]]:
    """
    각 LSP 프레임의 마지막 성분(log gain)을 제거합니다.

    파라미터:
        lsp_frames: (order + 1) 차원 LSP 프레임 목록
        normalize: True이면 남은 성분을 cos(2π·x)로 변환

    반환값:
        list[list[float]]: order 차원 프레임 목록
    """
    result: list[list[float]] = []
    for frame in lsp_frames:
        body = list(frame[:-1])
        if normalize:
            body = [math.cos(value * 2.0 * math.pi) for value in body]
        else:
            body = [float(value) for value in body]
        result.append(body)
    return result


def get_gain(lsp_frames: Sequence[Sequence[float]]) -> list[float]:
    """
    각 LSP 프레임의 마지막 성분(log gain)에서 선형 게인 exp(x)를 추출합니다.

    에러:
        ValueError: 빈 프레임이 있을 때
    """
    gains: list[float] = []
    for index, frame in enumerate(lsp_frames):
        if len(frame) == 0:
            raise ValueError(f"{index}번째 LSP 프레임이 비어 있습니다")
        gains.append(math.exp(frame[-1]))
    return gains


# =============================================================================
# LSP → LPC → 스펙트럼
# =============================================================================

def lsp_to_lpc(lsp_frame: Sequence[float], lpc_order: int) -> list[float]:
    """
    정규화된(cos 영역) LSP 프레임에서 LPC 계수를 합성합니다.

    P(z), Q(z)를 (1 - 2·x·z^-1 + z^-2) 2차 구간의 곱으로 재구성한 뒤
    임펄스 응답을 order 샘플만큼 구해 A(z) = (P(z) + Q(z)) / 2 계수를 얻습니다.
    H(z) = 1 + A(z) 형태이므로 선행 계수 1은 결과에 포함하지 않습니다.

    파라미터:
        lsp_frame: cos(2πx) 정규화된 LSP 값 (최소 lpc_order개)
        lpc_order: LPC 차수 (양의 짝수)

    반환값:
        list[float]: lpc_order개의 LPC 계수

    에러:
        ValueError: 차수가 양의 짝수가 아니거나 LSP 값이 부족할 때
    """
    if lpc_order <= 0 or lpc_order % 2 != 0:
        raise ValueError(f"LPC 차수는 양의 짝수여야 합니다: {lpc_order}")
    if len(lsp_frame) < lpc_order:
        raise ValueError(
            f"LSP 프레임 차원({len(lsp_frame)})이 LPC 차수({lpc_order})보다 작습니다"
        )

    half_order = lpc_order // 2
    # 2차 구간마다 P/Q 지연 소자 2개씩, 마지막 2칸은 (1 ± z^-1) 인자용
    window = [0.0] * (lpc_order * 2 + 2)
    tail = lpc_order * 2

    def _step(x1: float, x2: float) -> tuple[float, float]:
        for j in range(half_order):
            n1 = j * 4
            out1 = x1 - 2.0 * lsp_frame[2 * j] * window[n1] + window[n1 + 1]
            out2 = x2 - 2.0 * lsp_frame[2 * j + 1] * window[n1 + 2] + window[n1 + 3]
            window[n1 + 1] = window[n1]
            window[n1 + 3] = window[n1 + 2]
            window[n1] = x1
            window[n1 + 2] = x2
            x1, x2 = out1, out2
        return x1, x2

    # 임펄스 입력으로 지연 소자 초기화
    x1, x2 = _step(1.0, 1.0)
    window[tail] = x1
    window[tail + 1] = x2

    lpc: list[float] = []
    for _ in range(lpc_order):
        x1, x2 = _step(0.0, 0.0)
        lpc.append((x1 + window[tail] + x2 - window[tail + 1]) * 0.5)
        window[tail] = x1
        window[tail + 1] = x2
    return lpc


def lpc_to_spectrum(lpc_frame: Sequence[float], lpc_order: int, gain: float) -> list[float]:
    """
    LPC 계수로부터 진폭 스펙트럼 gain / |A(e^jw)| 를 계산합니다.

    [1, a1, ..., a_order] 를 FFT_DIM 길이로 0 패딩하여 실수 FFT를 수행하고
    앞쪽 FFT_DIM / 2 개 bin만 반환합니다.

    파라미터:
        lpc_frame: LPC 계수 (최소 lpc_order개)
        lpc_order: LPC 차수
        gain: 선형 게인 (1.0이면 게인 미포함 스펙트럼)

    반환값:
        list[float]: FFT_DIM / 2 개의 진폭 값
    """
    if lpc_order < 0 or lpc_order >= FFT_DIM:
        raise ValueError(f"LPC 차수가 허용 범위를 벗어났습니다: {lpc_order}")
    if len(lpc_frame) < lpc_order:
        raise ValueError(
            f"LPC 프레임 차원({len(lpc_frame)})이 LPC 차수({lpc_order})보다 작습니다"
        )

    buffer = np.zeros(FFT_DIM, dtype=np.float64)
    buffer[0] = 1.0
    buffer[1:lpc_order + 1] = lpc_frame[:lpc_order]

    magnitude = np.abs(np.fft.rfft(buffer))[:FFT_DIM // 2]
    with np.errstate(divide="ignore"):
        spectrum = gain / magnitude
    return spectrum.tolist()


def lsp_list_to_frequency_list(
    lsp_frames: Sequence[Sequence[float]],
    lpc_order: int,
) -> list[list[float]]:
    """
    LSP 프레임 목록을 게인 없는 스펙트럼(frequency) 목록으로 변환합니다.

    처리 순서: 게인 제거 + cos 정규화 → LPC 합성 → 단위 게인 스펙트럼
    """
    normalized = remove_gain(lsp_frames, normalize=True)
    return [
        lpc_to_spectrum(lsp_to_lpc(frame, lpc_order), lpc_order, 1.0)
        for frame in normalized
    ]


def frequency_list_to_spectrum_list(
    frequency_frames: Sequence[Sequence[float]],
    gains: Sequence[float],
) -> list[list[float]]:
    """
    게인 없는 스펙트럼 프레임에 프레임별 선형 게인을 곱합니다.

    에러:
        ValueError: 프레임 수와 게인 수가 다를 때
    """
    if len(frequency_frames) != len(gains):
        raise ValueError(
            f"스펙트럼 프레임 수({len(frequency_frames)})와 "
            f"게인 수({len(gains)})가 다릅니다"
        )
    return [
        [value * gain for value in frame]
        for frame, gain in zip(frequency_frames, gains)
    ]


def frequency_band_filter(
    frames: Sequence[Sequence[float]],
    lower_bound_frequency: float,
    upper_bound_frequency: float,
    sample_frequency: float,
) -> list[list[float]]:
    """
    각 스펙트럼 프레임에서 [lower, upper) 대역에 해당하는 bin만 남깁니다.

    프레임 길이가 N이면 FFT 길이를 2N으로 보고
    int(lower / fs · 2N) 부터 int(upper / fs · 2N) - 1 까지의 bin을 취합니다.

    에러:
        ValueError: lower >= upper 이거나 upper · 2 > fs 일 때
    """
    if frames is None:
        raise ValueError("frames는 None일 수 없습니다")
    if lower_bound_frequency >= upper_bound_frequency:
        raise ValueError(
            f"하한 주파수({lower_bound_frequency})는 상한 주파수"
            f"({upper_bound_frequency})보다 작아야 합니다"
        )
    if upper_bound_frequency * 2 > sample_frequency:
        raise ValueError(
            f"상한 주파수의 2배({upper_bound_frequency * 2})가 "
            f"샘플링 주파수({sample_frequency})를 넘습니다"
        )

    filtered: list[list[float]] = []
    for frame in frames:
        fft_dimension = len(frame) * 2
        start = int(lower_bound_frequency / sample_frequency * fft_dimension)
        end = int(upper_bound_frequency / sample_frequency * fft_dimension) - 1
        filtered.append(list(frame[start:end + 1]))
    return filtered


# =============================================================================
# 상태 단위 F0
# =============================================================================

def get_state_level_f0(
    f0_values: Sequence[float],
    durations: Sequence[Sequence[int]],
    voiced_unvoiced_threshold: float,
) -> list[float]:
    """
    Duration 정보로 F0를 상태(state) 구간마다 평균냅니다.

    구간 안에 임계값 미만(무성) 프레임이 하나라도 있으면 그 상태의 값은 0.0입니다.
    길이가 0인 상태도 0.0으로 처리합니다.

    파라미터:
        f0_values: 프레임별 F0
        durations: 음소별 상태 프레임 수
        voiced_unvoiced_threshold: 유/무성 판단 임계값 (Hz)

    반환값:
        list[float]: 상태별 F0

    에러:
        ValueError: Duration 총합이 F0 프레임 수와 다를 때
    """
    total_frames = sum(sum(phone) for phone in durations)
    if total_frames != len(f0_values):
        raise ValueError(
            f"Duration 총 프레임 수({total_frames})가 "
            f"F0 프레임 수({len(f0_values)})와 다릅니다"
        )

    state_f0: list[float] = []
    frame_index = 0
    for phone in durations:
        for state_duration in phone:
            segment = f0_values[frame_index:frame_index + state_duration]
            frame_index += state_duration
            if state_duration == 0 or any(value < voiced_unvoiced_threshold for value in segment):
                state_f0.append(0.0)
            else:
                state_f0.append(float(sum(segment)) / state_duration)
    return state_f0

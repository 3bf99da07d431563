"""
음향 특징 파일 로더 모듈입니다.

역할:
- Duration 텍스트 파일(UTF-16)에서 음소별 상태 프레임 수 로드
- F0 / LSP 바이너리 파일(little-endian float32)을 프레임 목록으로 로드
- 코퍼스 디렉토리에서 문장별 Duration/F0/LSP 파일 묶음 수집
- 파일 크기로 LPC 차수 추정

파일 형식:
    duration/*.dur : 한 줄에 한 상태, 공백/탭 구분, 세 번째 필드가 프레임 수
    f0/*f0         : 프레임당 float32 1개
    lsp/*.lsp      : 프레임당 float32 (order + 1)개 (LSP order개 + log gain)

사용 예시:
    >>> durations = load_duration("ref/duration/0001.dur", state_count=5)
    >>> f0 = load_f0("ref/f0/0001.f0")
    >>> lsp = load_lsp("ref/lsp/0001.lsp", lpc_order=40)
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from acoustic_eval.features import DataFiles

logger = logging.getLogger(__name__)

# HMM 음소 모델의 기본 상태 수 (Duration 파일의 음소당 줄 수)
DEFAULT_STATE_COUNT = 5

# RUS 최적 경로 Duration 파일의 음소당 상태 수
RUS_DURATION_STATE = 2

# 바이너리 파일의 원소 형식
_FLOAT_DTYPE = np.dtype("<f4")


class DataMisalignedError(ValueError):
    """Duration / F0 / LSP 데이터의 음소 수나 프레임 수가 서로 맞지 않을 때 발생합니다."""
    pass


def _check_file_exists(filepath: Path) -> None:
    if not filepath.is_file():
        error_message = f"파일을 찾을 수 없습니다: {filepath}"
        logger.error(error_message)
        raise FileNotFoundError(error_message)


# =============================================================================
# Duration
# =============================================================================

def load_duration(
    filepath: str | Path,
    state_count: int,
    lines_per_phone: int = DEFAULT_STATE_COUNT,
) -> list[list[int]]:
    """
    Duration 파일에서 음소별 상태 프레임 수를 읽습니다.

    파일에는 음소마다 lines_per_phone 줄이 기록되어 있습니다.
    각 음소의 앞쪽 state_count 줄에서 세 번째 필드(프레임 수)를 읽고
    나머지 줄은 건너뜁니다.

    파라미터:
        filepath: UTF-16 Duration 파일 경로
        state_count: 음소당 읽을 상태 수 (1 ~ lines_per_phone)
        lines_per_phone: 음소당 기록된 줄 수 (state_count ~ DEFAULT_STATE_COUNT)

    반환값:
        list[list[int]]: 음소별 상태 프레임 수

    에러:
        ValueError: 상태 수가 범위를 벗어났거나, 줄 수가 lines_per_phone의
            배수가 아니거나, 줄 형식이 잘못되었을 때
        FileNotFoundError: 파일이 없을 때
    """
    if lines_per_phone <= 0 or lines_per_phone > DEFAULT_STATE_COUNT:
        raise ValueError(
            f"lines_per_phone은 1 ~ {DEFAULT_STATE_COUNT} 범위여야 합니다: {lines_per_phone}"
        )
    if state_count <= 0 or state_count > lines_per_phone:
        raise ValueError(
            f"state_count는 1 ~ {lines_per_phone} 범위여야 합니다: {state_count}"
        )

    filepath = Path(filepath)
    _check_file_exists(filepath)

    with open(filepath, "r", encoding="utf-16") as duration_file:
        lines = [line for line in duration_file.read().splitlines() if line.strip()]

    if len(lines) % lines_per_phone != 0:
        raise ValueError(
            f"Duration 파일의 줄 수({len(lines)})가 음소당 줄 수"
            f"({lines_per_phone})로 나누어떨어지지 않습니다: {filepath}"
        )

    durations: list[list[int]] = []
    for block_start in range(0, len(lines), lines_per_phone):
        phone_duration: list[int] = []
        for line_number in range(block_start, block_start + state_count):
            fields = lines[line_number].split()
            if len(fields) < 3:
                raise ValueError(
                    f"Duration 줄의 필드가 3개 미만입니다 ({filepath}:{line_number + 1}): "
                    f"'{lines[line_number]}'"
                )
            phone_duration.append(int(fields[2]))
        durations.append(phone_duration)

    logger.debug(f"Duration 로드 완료: {filepath.name}, 음소 {len(durations)}개")
    return durations


# =============================================================================
# F0 / LSP
# =============================================================================

def _read_float32(filepath: Path, values_per_frame: int) -> np.ndarray:
    """파일을 float32 배열로 읽고, 마지막 불완전 프레임은 버립니다."""
    _check_file_exists(filepath)
    raw = filepath.read_bytes()
    frame_bytes = values_per_frame * _FLOAT_DTYPE.itemsize
    frame_count = len(raw) // frame_bytes
    if len(raw) % frame_bytes != 0:
        logger.warning(
            f"파일 크기가 프레임 크기의 배수가 아니어서 마지막 프레임을 버립니다: "
            f"{filepath} ({len(raw)} bytes, 프레임당 {frame_bytes} bytes)"
        )
    values = np.frombuffer(raw[:frame_count * frame_bytes], dtype=_FLOAT_DTYPE)
    return values.astype(np.float64).reshape(frame_count, values_per_frame)


def load_f0(filepath: str | Path) -> list[float]:
    """
    F0 파일을 프레임별 F0(Hz) 목록으로 읽습니다.

    에러:
        FileNotFoundError: 파일이 없을 때
    """
    filepath = Path(filepath)
    values = _read_float32(filepath, 1)
    logger.debug(f"F0 로드 완료: {filepath.name}, {values.shape[0]} 프레임")
    return values[:, 0].tolist()


def load_lsp(filepath: str | Path, lpc_order: int) -> list[list[float]]:
    """
    LSP 파일을 프레임 목록으로 읽습니다. 각 프레임은 (lpc_order + 1) 차원입니다.

    에러:
        ValueError: lpc_order가 양수가 아닐 때
        FileNotFoundError: 파일이 없을 때
    """
    if lpc_order <= 0:
        raise ValueError(f"LPC 차수는 양수여야 합니다: {lpc_order}")
    filepath = Path(filepath)
    values = _read_float32(filepath, lpc_order + 1)
    logger.debug(f"LSP 로드 완료: {filepath.name}, {values.shape[0]} 프레임")
    return values.tolist()


# =============================================================================
# 코퍼스 탐색
# =============================================================================

def get_data_file_list(data_dir: str | Path) -> list[DataFiles]:
    """
    코퍼스 디렉토리에서 문장별 Duration/F0/LSP 파일 묶음을 수집합니다.

    duration/ 아래 *.dur, f0/ 아래 *f0, lsp/ 아래 *.lsp 를 하위 디렉토리까지
    찾아 경로 순으로 정렬한 뒤 같은 순번끼리 묶습니다.

    에러:
        FileNotFoundError: 하위 디렉토리가 없을 때
        DataMisalignedError: 세 종류의 파일 수가 다를 때
    """
    data_dir = Path(data_dir)
    patterns = {"duration": "*.dur", "f0": "*f0", "lsp": "*.lsp"}

    collected: dict[str, list[Path]] = {}
    for sub_dir, pattern in patterns.items():
        directory = data_dir / sub_dir
        if not directory.is_dir():
            error_message = f"데이터 디렉토리를 찾을 수 없습니다: {directory}"
            logger.error(error_message)
            raise FileNotFoundError(error_message)
        collected[sub_dir] = sorted(
            path for path in directory.rglob(pattern) if path.is_file()
        )

    counts = {name: len(paths) for name, paths in collected.items()}
    if len(set(counts.values())) != 1:
        raise DataMisalignedError(f"데이터 파일 수가 일치하지 않습니다: {data_dir} {counts}")

    data_files = [
        DataFiles(duration_file=duration, f0_file=f0, lsp_file=lsp)
        for duration, f0, lsp in zip(collected["duration"], collected["f0"], collected["lsp"])
    ]
    logger.info(f"데이터 파일 수집 완료: {data_dir}, {len(data_files)}개 문장")
    return data_files


def get_lpc_order(f0_file: str | Path, lsp_file: str | Path) -> int:
    """
    같은 문장의 F0 / LSP 파일 크기 비율로 LPC 차수를 추정합니다.

    반환값:
        int: lsp 크기 // f0 크기 - 1

    에러:
        FileNotFoundError: 파일이 없을 때
        ValueError: F0 파일이 비어 있을 때
    """
    f0_file = Path(f0_file)
    lsp_file = Path(lsp_file)
    _check_file_exists(f0_file)
    _check_file_exists(lsp_file)

    f0_size = f0_file.stat().st_size
    if f0_size == 0:
        raise ValueError(f"F0 파일이 비어 있어 LPC 차수를 추정할 수 없습니다: {f0_file}")
    return lsp_file.stat().st_size // f0_size - 1

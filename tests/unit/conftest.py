"""
단위 테스트 공용 픽스처

- Duration(UTF-16 텍스트), F0 / LSP(float32 바이너리) 파일 작성기
- duration/, f0/, lsp/ 구조의 코퍼스 디렉토리 작성기
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import numpy as np
import pytest

from acoustic_eval.features import DataFiles


def _write_duration(
    filepath: Path,
    durations: Sequence[Sequence[int]],
    lines_per_phone: int = 5,
) -> Path:
    """음소마다 lines_per_phone 줄을 쓰고, 남는 상태 줄은 0 프레임으로 채웁니다."""
    filepath.parent.mkdir(parents=True, exist_ok=True)
    lines = []
    start = 0
    for phone in durations:
        padded = list(phone) + [0] * (lines_per_phone - len(phone))
        for state_index, frames in enumerate(padded):
            lines.append(f"{start}\t{start + frames}\t{frames}\tstate{state_index + 2}")
            start += frames
    filepath.write_text("\n".join(lines) + "\n", encoding="utf-16")
    return filepath


def _write_float32(filepath: Path, values) -> Path:
    filepath.parent.mkdir(parents=True, exist_ok=True)
    np.asarray(values, dtype="<f4").tofile(filepath)
    return filepath


@pytest.fixture
def write_duration():
    return _write_duration


@pytest.fixture
def write_float32():
    return _write_float32


@pytest.fixture
def make_corpus(tmp_path):
    """
    코퍼스 디렉토리 하나에 문장 파일 묶음을 작성하는 팩토리입니다.

    사용 예시:
        files = make_corpus("ref", "0001", durations, f0, lsp)
    """

    def _make(
        corpus: str,
        name: str,
        durations: Sequence[Sequence[int]],
        f0: Sequence[float],
        lsp: Sequence[Sequence[float]],
        lines_per_phone: int = 5,
    ) -> DataFiles:
        root = tmp_path / corpus
        return DataFiles(
            duration_file=_write_duration(root / "duration" / f"{name}.dur", durations, lines_per_phone),
            f0_file=_write_float32(root / "f0" / f"{name}.f0", f0),
            lsp_file=_write_float32(root / "lsp" / f"{name}.lsp", lsp),
        )

    return _make


@pytest.fixture
def voiced_f0():
    """20 프레임, 앞 4 / 뒤 4 프레임은 무성(0)인 F0 곡선입니다."""
    return [0.0] * 4 + [100.0 + 5.0 * i for i in range(12)] + [0.0] * 4


@pytest.fixture
def lsp_frames():
    """LPC 차수 2, 20 프레임 LSP (마지막 성분은 log gain)."""
    return [[0.1 + 0.002 * i, 0.3 - 0.002 * i, 0.1 * (i % 3)] for i in range(20)]

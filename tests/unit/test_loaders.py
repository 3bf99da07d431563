"""
특징 파일 로더 단위 테스트

검증 조건:
- Duration: state_count 만큼 읽고 나머지 상태 줄은 건너뜀
- Duration: 음소당 줄 수(lines_per_phone)를 명시하며, 줄 수가 그 배수가 아니면 ValueError
- Duration: 2줄 블록 파일은 줄 수가 5의 배수여도 2줄 단위로 읽음
- F0 / LSP float32 로드, 불완전 마지막 프레임 버림
- 코퍼스 파일 목록 정렬 / 개수 불일치 시 DataMisalignedError
- 파일 크기로 LPC 차수 추정
"""

from __future__ import annotations

import pytest

from acoustic_eval.features.loaders import (
    DataMisalignedError,
    get_data_file_list,
    get_lpc_order,
    load_duration,
    load_f0,
    load_lsp,
)


# =========================================================================
# Duration
# =========================================================================

class TestLoadDuration:
    def test_reads_first_states_of_five_line_blocks(self, tmp_path, write_duration):
        path = write_duration(tmp_path / "a.dur", [[10, 5, 1, 1, 1], [8, 8, 2, 2, 2]])
        assert load_duration(path, 2) == [[10, 5], [8, 8]]

    def test_reads_all_five_states(self, tmp_path, write_duration):
        path = write_duration(tmp_path / "a.dur", [[1, 2, 3, 4, 5]])
        assert load_duration(path, 5) == [[1, 2, 3, 4, 5]]

    def test_reads_two_line_blocks(self, tmp_path, write_duration):
        path = write_duration(tmp_path / "a.dur", [[10, 5], [8, 8]], lines_per_phone=2)
        assert load_duration(path, 2, lines_per_phone=2) == [[10, 5], [8, 8]]

    def test_two_line_blocks_with_line_count_divisible_by_five(self, tmp_path, write_duration):
        # 5개 음소 × 2줄 = 10줄: 줄 수만으로는 5줄 블록과 구분되지 않음
        durations = [[1, 2], [3, 4], [5, 6], [7, 8], [9, 10]]
        path = write_duration(tmp_path / "a.dur", durations, lines_per_phone=2)
        assert load_duration(path, 2, lines_per_phone=2) == durations

    def test_reads_first_state_of_two_line_blocks(self, tmp_path, write_duration):
        path = write_duration(tmp_path / "a.dur", [[4, 1], [6, 2]], lines_per_phone=2)
        assert load_duration(path, 1, lines_per_phone=2) == [[4], [6]]

    def test_line_count_not_multiple_raises(self, tmp_path, write_duration):
        path = write_duration(tmp_path / "a.dur", [[1, 1], [2, 2], [3, 3]], lines_per_phone=2)
        with pytest.raises(ValueError):
            load_duration(path, 2)
        with pytest.raises(ValueError):
            load_duration(path, 2, lines_per_phone=4)

    def test_invalid_state_count_raises(self, tmp_path, write_duration):
        path = write_duration(tmp_path / "a.dur", [[1, 1, 1, 1, 1]])
        with pytest.raises(ValueError):
            load_duration(path, 0)
        with pytest.raises(ValueError):
            load_duration(path, 6)

    def test_state_count_above_lines_per_phone_raises(self, tmp_path, write_duration):
        path = write_duration(tmp_path / "a.dur", [[1, 1]], lines_per_phone=2)
        with pytest.raises(ValueError):
            load_duration(path, 3, lines_per_phone=2)
        with pytest.raises(ValueError):
            load_duration(path, 2, lines_per_phone=6)

    def test_short_line_raises(self, tmp_path):
        path = tmp_path / "bad.dur"
        path.write_text("0 10\n0 10\n", encoding="utf-16")
        with pytest.raises(ValueError):
            load_duration(path, 2, lines_per_phone=2)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_duration(tmp_path / "missing.dur", 5)


# =========================================================================
# F0 / LSP
# =========================================================================

class TestLoadBinary:
    def test_load_f0(self, tmp_path, write_float32):
        path = write_float32(tmp_path / "a.f0", [0.0, 100.5, 120.25])
        assert load_f0(path) == pytest.approx([0.0, 100.5, 120.25])

    def test_load_lsp_frames(self, tmp_path, write_float32):
        path = write_float32(tmp_path / "a.lsp", [0.1, 0.2, 0.5, 0.15, 0.25, 0.6])
        frames = load_lsp(path, 2)
        assert len(frames) == 2
        assert frames[1] == pytest.approx([0.15, 0.25, 0.6])

    def test_partial_frame_dropped(self, tmp_path, write_float32):
        path = write_float32(tmp_path / "a.lsp", [0.1, 0.2, 0.5, 0.15])
        assert len(load_lsp(path, 2)) == 1

    def test_invalid_order_raises(self, tmp_path, write_float32):
        path = write_float32(tmp_path / "a.lsp", [0.1])
        with pytest.raises(ValueError):
            load_lsp(path, 0)

    def test_missing_f0_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_f0(tmp_path / "missing.f0")


# =========================================================================
# 코퍼스 탐색
# =========================================================================

class TestDataFileList:
    def test_sorted_pairs(self, make_corpus, tmp_path):
        make_corpus("ref", "0002", [[1, 1, 1, 1, 1]], [0.0] * 5, [[0.1, 0.2, 0.0]] * 5)
        make_corpus("ref", "0001", [[1, 1, 1, 1, 1]], [0.0] * 5, [[0.1, 0.2, 0.0]] * 5)
        files = get_data_file_list(tmp_path / "ref")
        assert [item.f0_file.stem for item in files] == ["0001", "0002"]
        assert files[0].duration_file.name == "0001.dur"
        assert files[0].lsp_file.name == "0001.lsp"

    def test_count_mismatch_raises(self, make_corpus, tmp_path):
        make_corpus("ref", "0001", [[1, 1, 1, 1, 1]], [0.0] * 5, [[0.1, 0.2, 0.0]] * 5)
        (tmp_path / "ref" / "f0" / "0002.f0").write_bytes(b"")
        with pytest.raises(DataMisalignedError):
            get_data_file_list(tmp_path / "ref")

    def test_missing_sub_dir_raises(self, tmp_path):
        (tmp_path / "ref" / "duration").mkdir(parents=True)
        with pytest.raises(FileNotFoundError):
            get_data_file_list(tmp_path / "ref")


class TestLpcOrder:
    def test_order_from_file_sizes(self, tmp_path, write_float32):
        f0 = write_float32(tmp_path / "a.f0", [0.0] * 10)
        lsp = write_float32(tmp_path / "a.lsp", [0.0] * 10 * 41)
        assert get_lpc_order(f0, lsp) == 40

    def test_empty_f0_raises(self, tmp_path, write_float32):
        f0 = write_float32(tmp_path / "a.f0", [])
        lsp = write_float32(tmp_path / "a.lsp", [0.0] * 3)
        with pytest.raises(ValueError):
            get_lpc_order(f0, lsp)

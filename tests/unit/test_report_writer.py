"""
ReportWriter 단위 테스트

검증 조건:
- SPS / RUS 보고서 파일 생성과 UTF-16 인코딩
- 헤더 줄과 탭 구분 행
- 계산되지 않은 값은 "NaN" / "-1"
- SPS 음소 단위 결과는 PhoneLevelResult/<순번>.log (UTF-8)
- 저장 실패 시 OSError 전파

픽스처:
- sps_result / rus_result: 일부 값이 None인 평가 결과
"""

from __future__ import annotations

from pathlib import Path

import pytest

from acoustic_eval.features import DataFiles
from acoustic_eval.metrics import (
    NOT_COMPUTED,
    ConcatenationCostInfo,
    ContinueUnitInfo,
    EvaluationResult,
    EvaluationSummary,
    FullEvaluationResult,
    OutlierF0Statistic,
    PhoneLevelResult,
    UVStatistic,
)
from acoustic_eval.report.report_writer import (
    ReportWriter,
    format_count,
    format_fixed,
    format_value,
)

_FILES = DataFiles(
    duration_file=Path("0001.dur"), f0_file=Path("0001.f0"), lsp_file=Path("0001.lsp")
)


@pytest.fixture
def sps_result():
    return FullEvaluationResult(
        reference_files=_FILES,
        target_files=_FILES,
        uv_info=UVStatistic(voiced_in_reference=12, unvoiced_in_reference=8),
        duration=EvaluationResult(rmse=0.01, max_distance=0.02),
        f0=EvaluationResult(rmse=5.0, correlation_coefficient=0.5),
        lsp=NOT_COMPUTED,
        phone_level_results=(
            PhoneLevelResult(word_offset=0, word_length=3, duration_distance=0.01, f0_distance=2.0),
        ),
    )


@pytest.fixture
def rus_result():
    return FullEvaluationResult(
        reference_files=_FILES,
        target_files=_FILES,
        f0=EvaluationResult(rmse=5.12345),
        outlier_f0=OutlierF0Statistic(outlier_frame_number=2, total_frame_number=4, outlier_ratio=0.5),
        cc_info=ConcatenationCostInfo(boundary_number=2, total_concatenation_cost=3.0),
        continue_unit_info=ContinueUnitInfo(boundary_number=2, total_continue_unit_number=1),
        phone_level_results=(
            PhoneLevelResult(phone_string="a", start_frame=4, frame_length=6, f0_distance=1.23456),
        ),
    )


def _read_lines(path: Path) -> list[str]:
    return path.read_text(encoding="utf-16").splitlines()


class TestFormatters:
    def test_format_value(self):
        assert format_value(None) == "NaN"
        assert format_value(float("nan")) == "NaN"
        assert format_value(float("inf")) == "Infinity"
        assert format_value(float("-inf")) == "-Infinity"
        assert format_value(1.5) == "1.5"

    def test_format_fixed(self):
        assert format_fixed(1.23456) == "1.235"
        assert format_fixed(None) == "NaN"

    def test_format_count(self):
        assert format_count(None) == "-1"
        assert format_count(12) == "12"


class TestWriteResult:
    def test_creates_report_files(self, tmp_path, sps_result):
        ReportWriter().write_result([sps_result], EvaluationSummary(sentence_count=1), tmp_path)
        for name in (
            "Dur_EucDis.txt", "F0_EucDis.txt", "F0_EucDis_StateLevel.txt",
            "LSP_EucDis.txt", "LogSpe_EucDis.txt", "Final_Result.txt",
        ):
            assert (tmp_path / name).exists()

    def test_files_are_utf16_with_bom(self, tmp_path, sps_result):
        ReportWriter().write_result([sps_result], EvaluationSummary(sentence_count=1), tmp_path)
        assert (tmp_path / "Dur_EucDis.txt").read_bytes()[:2] in (b"\xff\xfe", b"\xfe\xff")

    def test_f0_header_and_row(self, tmp_path, sps_result):
        ReportWriter().write_result([sps_result], EvaluationSummary(sentence_count=1), tmp_path)
        lines = _read_lines(tmp_path / "F0_EucDis.txt")
        assert lines[0] == "Column  1 - the name of your original F0 file"
        assert lines[13] == ""
        columns = lines[14].split("\t")
        assert len(columns) == 13
        assert columns[1] == "12"
        assert columns[6] == "5.0"
        assert columns[7] == "NaN"

    def test_not_computed_lsp(self, tmp_path, sps_result):
        ReportWriter().write_result([sps_result], EvaluationSummary(sentence_count=1), tmp_path)
        columns = _read_lines(tmp_path / "LSP_EucDis.txt")[-1].split("\t")
        assert columns[2:] == ["NaN", "NaN", "-1"]

    def test_phone_level_log(self, tmp_path, sps_result):
        ReportWriter().write_result([sps_result], EvaluationSummary(sentence_count=1), tmp_path)
        log_file = tmp_path / "PhoneLevelResult" / "0000000000.log"
        assert log_file.read_text(encoding="utf-8").splitlines() == ["0\t3\t0.01\t2.0\tNaN\tNaN"]

    def test_summary_lines(self, tmp_path, sps_result):
        summary = EvaluationSummary(sentence_count=1, rmse_f0=5.0)
        ReportWriter().write_result([sps_result], summary, tmp_path)
        lines = _read_lines(tmp_path / "Final_Result.txt")
        assert lines[0] == "Average of 1 sentences:"
        assert "RMSE of F0:\t5.0 (Hz/frame)" in lines
        assert "RMSE of LSP:\tNaN (2pi rad/frame/dimension)" in lines

    def test_unwritable_dir_raises(self, tmp_path, sps_result):
        blocker = tmp_path / "blocker"
        blocker.write_text("file", encoding="utf-8")
        with pytest.raises(OSError):
            ReportWriter().write_result(
                [sps_result], EvaluationSummary(sentence_count=1), blocker / "report"
            )


class TestWriteResultRus:
    def test_creates_report_files(self, tmp_path, rus_result):
        ReportWriter().write_result_rus([rus_result], EvaluationSummary(sentence_count=1), tmp_path)
        for name in (
            "F0_EucDis.txt", "LSP_EucDis.txt", "LogSpe_EucDis.txt", "CC.txt",
            "Dur_EucDis.txt", "PhoneLevelResult.txt", "Final_Result.txt",
        ):
            assert (tmp_path / name).exists()

    def test_f0_row_with_outlier(self, tmp_path, rus_result):
        ReportWriter().write_result_rus([rus_result], EvaluationSummary(sentence_count=1), tmp_path)
        lines = _read_lines(tmp_path / "F0_EucDis.txt")
        assert lines[14] == "Column 15 - the outlier frame ratio"
        columns = lines[-1].split("\t")
        assert len(columns) == 15
        assert columns[6] == "5.123"
        assert columns[13:] == ["2", "0.5"]

    def test_cc_row(self, tmp_path, rus_result):
        ReportWriter().write_result_rus([rus_result], EvaluationSummary(sentence_count=1), tmp_path)
        columns = _read_lines(tmp_path / "CC.txt")[-1].split("\t")
        assert columns[1:] == ["1.5", "NaN", "0.5"]

    def test_phone_level_rows(self, tmp_path, rus_result):
        ReportWriter().write_result_rus([rus_result], EvaluationSummary(sentence_count=1), tmp_path)
        columns = _read_lines(tmp_path / "PhoneLevelResult.txt")[-1].split("\t")
        assert columns[1:5] == ["a", "4", "6", "1.235"]
        assert columns[6] == "-1"

    def test_summary_ends_with_continue_ratio(self, tmp_path, rus_result):
        summary = EvaluationSummary(sentence_count=1, continue_unit_ratio=0.5)
        ReportWriter().write_result_rus([rus_result], summary, tmp_path)
        assert _read_lines(tmp_path / "Final_Result.txt")[-1] == "Continue ratio:\t0.5"

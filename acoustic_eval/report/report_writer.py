"""
평가 보고서 작성 모듈입니다.

역할:
- 문장별 결과를 특징별 탭 구분 보고서(UTF-16)로 저장
- 코퍼스 요약을 Final_Result.txt 로 저장
- SPS 음소 단위 결과는 문장별 PhoneLevelResult/<순번>.log, RUS는 PhoneLevelResult.txt

계산되지 않은 값(None)은 실수 열에서 "NaN", 프레임 수 열에서 "-1" 로 기록합니다.

사용 예시:
    >>> writer = ReportWriter()
    >>> writer.write_result(results, summary, "output/report")
    >>> writer.write_result_rus(results, summary, "output/report_rus")
"""

from __future__ import annotations

import logging
import math
from contextlib import ExitStack
from pathlib import Path
from typing import Optional, Sequence, TextIO

from acoustic_eval.metrics import EvaluationSummary, FullEvaluationResult

logger = logging.getLogger(__name__)

# 보고서 파일 인코딩 (BOM 포함 UTF-16)
REPORT_ENCODING = "utf-16"

# SPS 문장별 음소 결과 파일 인코딩
PHONE_LOG_ENCODING = "utf-8"

PHONE_LEVEL_DIR = "PhoneLevelResult"
SUMMARY_FILE = "Final_Result.txt"


# =============================================================================
# 보고서 헤더
# =============================================================================

_DURATION_HEADER = (
    "Column 1 - the 1st duration file",
    "Column 2 - the 2nd duration file",
    "Column 3 - the value of RMSE of durations",
    "Column 4 - the value of maximum distance of durations",
    "",
)

_F0_HEADER = (
    "Column  1 - the name of your original F0 file",
    "Column  2 - the number of voiced frames in the original file",
    "Column  3 - the number of unvoiced frames in the original file",
    "Column  4 - the name of your predicted F0 file",
    "Column  5 - the number of voiced frames in the predicted file",
    "Column  6 - the number of unvoiced frames in the predicted file",
    "Column  7 - the RMSE of F0",
    "Column  8 - the maximum distance of F0",
    "Column  9 - the number of voiced frames which appear at the same time in the two files",
    "Column 10 - the number of unvoiced frames which appear at the same time in the two files",
    "Column 11 - the number of voiced frames which should be unvoiced in the predicted file",
    "Column 12 - the number of unvoiced frames which should be voiced in the predicted file",
    "Column 13 - the correlation coefficient of the two files",
)

_F0_RUS_HEADER = _F0_HEADER + (
    "Column 14 - the outlier frame number",
    "Column 15 - the outlier frame ratio",
    "",
)

_F0_STATE_LEVEL_HEADER = (
    "Column  1 - the name of your original F0 file",
    "Column  2 - the number of voiced frames in the original file",
    "Column  3 - the number of unvoiced frames in the original file",
    "Column  4 - the name of your predicted F0 file",
    "Column  5 - the number of voiced frames in the predicted file",
    "Column  6 - the number of unvoiced frames in the predicted file",
    "Column  7 - the RMSE of F0",
    "Column  8 - the number of voiced frames which appear at the same time in the two files",
    "Column  9 - the number of unvoiced frames which appear at the same time in the two files",
    "Column 10 - the number of voiced frames which should be unvoiced in the predicted file",
    "Column 11 - the number of unvoiced frames which should be voiced in the predicted file",
    "Column 12 - the correlation coefficient of the two files",
    "",
)

_LSP_HEADER = (
    "Column 1 - the 1st LSP file (reference)",
    "Column 2 - the 2nd LSP file (target)",
    "Column 3 - the value of RMSE of LSP",
    "Column 4 - maximum distance of LSP",
    "Column 5 - the number of frames used when calculating",
    "",
)

_LSP_RUS_HEADER = (
    "Column 1 - the 1st LSP file (reference)",
    "Column 2 - the 2nd LSP file (target)",
    "Column 3 - the value of Weighted Eulidean distance of LSP",
    "Column 4 - the value of maximum Weighted Eulidean distance of LSP",
    "Column 5 - the number of frames used when calculating",
    "",
)

_SPECTRUM_HEADER = (
    "Column  1: LSP file name (reference)",
    "Column  2: LSP file name (target)",
    "Column  3: log-spectral RMSE distance considering gains",
    "Column  4: log-spectral maximum distance considering gains",
    "Column  5: log-spectral RMSE distance ignoring gains",
    "Column  6: the number of voiced frames",
    "Column  7: RMSE of gains",
    "Column  8: maximum distance of gains",
    "Column  9: correlation coefficient of gains",
    "",
)

_SPECTRUM_RUS_HEADER = (
    "Column  1: LSP file name (reference)",
    "Column  2: LSP file name (target)",
    "Column  3: log-spectral RMSE distance in voiced part and without gains",
    "Column  4: log-spectral maximum distance voiced part and without gains",
    "Column  5: log-spectral RMSE distance in ignoring gains",
    "Column  6: log-spectral maximum distance ignoring gains",
    "Column  7: the number of voiced frames",
    "Column  8: RMSE of gains",
    "Column  9: maximum distance of gains",
    "Column 10: correlation coefficient of gains",
    "",
)

_CC_HEADER = (
    "Column 1 - the target F0 file",
    "Column 2 - the average CC of the sentence",
    "Column 3 - the average boundary CC of the sentence",
    "Column 4 - the continue unit ratio of the sentence",
)

_PHONE_LEVEL_RUS_HEADER = (
    "Column 1 - the target F0 file",
    "Column 2 - the phone string",
    "Column 3 - the phone's start frame index",
    "Column 4 - the phone's frame length",
    "Column 5 - the F0 distance",
    "Column 6 - the F0 corelation",
    "Column 7 - the F0 outlier frame number",
    "Column 8 - the weighted LSP distance",
    "Column 9 - the UV mismatch ratio",
    "Column 10 - the Log spectrum distance",
    "Column 11 - the Gain distance",
)


# =============================================================================
# 값 포맷
# =============================================================================

def format_value(value: Optional[float]) -> str:
    """실수 값을 문자열로 바꿉니다. None / nan 은 "NaN" 입니다."""
    if value is None:
        return "NaN"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
    return str(value)


def format_fixed(value: Optional[float], digits: int = 3) -> str:
    """소수점 이하 digits 자리로 고정해 기록합니다."""
    if value is None or (isinstance(value, float) and (math.isnan(value) or math.isinf(value))):
        return format_value(value)
    return f"{value:.{digits}f}"


def format_count(value: Optional[int]) -> str:
    """프레임 수를 기록합니다. 계산되지 않았으면 "-1" 입니다."""
    return "-1" if value is None else str(value)


def _write_lines(writer: TextIO, lines: Sequence[str]) -> None:
    for line in lines:
        writer.write(f"{line}\n")


def _write_row(writer: TextIO, *columns: object) -> None:
    writer.write("\t".join(str(column) for column in columns) + "\n")


class ReportWriter:
    """
    평가 결과를 보고서 디렉토리에 기록하는 클래스입니다.

    파일 저장 실패 시 OSError를 로그로 남기고 상위로 전파합니다.
    """

    def write_result(
        self,
        results: Sequence[FullEvaluationResult],
        summary: EvaluationSummary,
        report_dir: str | Path,
    ) -> None:
        """
        SPS 평가 결과를 저장합니다.

        생성 파일:
            Dur_EucDis.txt, F0_EucDis.txt, F0_EucDis_StateLevel.txt,
            LSP_EucDis.txt, LogSpe_EucDis.txt, Final_Result.txt,
            PhoneLevelResult/<순번 10자리>.log (음소 단위 결과가 있는 문장만)

        파라미터:
            results: 문장별 평가 결과
            summary: 코퍼스 요약
            report_dir: 보고서 디렉토리 (없으면 생성)
        """
        report_dir = Path(report_dir)
        report_dir.mkdir(parents=True, exist_ok=True)

        try:
            with ExitStack() as stack:
                duration_writer = self._open(stack, report_dir / "Dur_EucDis.txt")
                f0_writer = self._open(stack, report_dir / "F0_EucDis.txt")
                f0_state_writer = self._open(stack, report_dir / "F0_EucDis_StateLevel.txt")
                lsp_writer = self._open(stack, report_dir / "LSP_EucDis.txt")
                spectrum_writer = self._open(stack, report_dir / "LogSpe_EucDis.txt")

                _write_lines(duration_writer, _DURATION_HEADER)
                _write_lines(f0_writer, _F0_HEADER + ("",))
                _write_lines(f0_state_writer, _F0_STATE_LEVEL_HEADER)
                _write_lines(lsp_writer, _LSP_HEADER)
                _write_lines(spectrum_writer, _SPECTRUM_HEADER)

                for sentence_index, result in enumerate(results):
                    self._write_duration_row(duration_writer, result)
                    self._write_f0_row(f0_writer, result)

                    state_uv = result.uv_info_state_level
                    _write_row(
                        f0_state_writer,
                        result.reference_files.f0_file,
                        state_uv.voiced_in_reference,
                        state_uv.unvoiced_in_reference,
                        result.target_files.f0_file,
                        state_uv.voiced_in_target,
                        state_uv.unvoiced_in_target,
                        format_value(result.f0_state_level.rmse),
                        state_uv.voiced_in_both,
                        state_uv.unvoiced_in_both,
                        state_uv.unexpected_voiced,
                        state_uv.unexpected_unvoiced,
                        format_value(result.f0_state_level.correlation_coefficient),
                    )
                    _write_row(
                        lsp_writer,
                        result.reference_files.lsp_file,
                        result.target_files.lsp_file,
                        format_value(result.lsp.rmse),
                        format_value(result.lsp.max_distance),
                        format_count(result.lsp.inused_frame_number),
                    )
                    _write_row(
                        spectrum_writer,
                        result.reference_files.lsp_file,
                        result.target_files.lsp_file,
                        format_value(result.log_spectrum.rmse),
                        format_value(result.log_spectrum.max_distance),
                        format_value(result.log_frequency.rmse),
                        format_count(result.log_spectrum.inused_frame_number),
                        format_value(result.gain.rmse),
                        format_value(result.gain.max_distance),
                        format_value(result.gain.correlation_coefficient),
                    )

                    if result.phone_level_results:
                        self._write_phone_log(report_dir, sentence_index, result)

            self._write_summary(report_dir / SUMMARY_FILE, self._summary_lines(summary))
            logger.info(f"SPS 보고서 저장 완료: {report_dir} ({len(results)}개 문장)")

        except OSError as exc:
            logger.error(f"SPS 보고서 저장 실패: {report_dir}, 오류: {exc}")
            raise

    def write_result_rus(
        self,
        results: Sequence[FullEvaluationResult],
        summary: EvaluationSummary,
        report_dir: str | Path,
    ) -> None:
        """
        RUS 평가 결과를 저장합니다.

        생성 파일:
            F0_EucDis.txt, LSP_EucDis.txt, LogSpe_EucDis.txt, CC.txt,
            Dur_EucDis.txt, PhoneLevelResult.txt, Final_Result.txt

        F0 / LSP / 스펙트럼 / 음소 단위 실수 값은 소수점 3자리로 기록합니다.
        """
        report_dir = Path(report_dir)
        report_dir.mkdir(parents=True, exist_ok=True)

        try:
            with ExitStack() as stack:
                f0_writer = self._open(stack, report_dir / "F0_EucDis.txt")
                lsp_writer = self._open(stack, report_dir / "LSP_EucDis.txt")
                spectrum_writer = self._open(stack, report_dir / "LogSpe_EucDis.txt")
                cc_writer = self._open(stack, report_dir / "CC.txt")
                duration_writer = self._open(stack, report_dir / "Dur_EucDis.txt")
                phone_writer = self._open(stack, report_dir / f"{PHONE_LEVEL_DIR}.txt")

                _write_lines(f0_writer, _F0_RUS_HEADER)
                _write_lines(lsp_writer, _LSP_RUS_HEADER)
                _write_lines(spectrum_writer, _SPECTRUM_RUS_HEADER)
                _write_lines(duration_writer, _DURATION_HEADER)
                _write_lines(cc_writer, _CC_HEADER)
                _write_lines(phone_writer, _PHONE_LEVEL_RUS_HEADER)

                for result in results:
                    self._write_duration_row(duration_writer, result)
                    self._write_f0_row(
                        f0_writer,
                        result,
                        formatter=format_fixed,
                        extra=(
                            result.outlier_f0.outlier_frame_number,
                            format_value(result.outlier_f0.outlier_ratio),
                        ),
                    )
                    _write_row(
                        lsp_writer,
                        result.reference_files.lsp_file,
                        result.target_files.lsp_file,
                        format_fixed(result.lsp.rmse),
                        format_fixed(result.lsp.max_distance),
                        format_count(result.lsp.inused_frame_number),
                    )
                    _write_row(
                        spectrum_writer,
                        result.reference_files.lsp_file,
                        result.target_files.lsp_file,
                        format_fixed(result.log_frequency_voiced.rmse),
                        format_fixed(result.log_frequency_voiced.max_distance),
                        format_fixed(result.log_frequency.rmse),
                        format_fixed(result.log_frequency.max_distance),
                        format_count(result.log_frequency.inused_frame_number),
                        format_fixed(result.gain.rmse),
                        format_fixed(result.gain.max_distance),
                        format_fixed(result.gain.correlation_coefficient),
                    )
                    _write_row(
                        cc_writer,
                        result.reference_files.f0_file,
                        format_value(result.cc_info.average),
                        format_value(result.voiced_cc_info.average),
                        format_value(result.continue_unit_info.ratio),
                    )

                    for phone in result.phone_level_results:
                        mismatch_ratio = phone.uv_info.mismatch_ratio if phone.uv_info else None
                        _write_row(
                            phone_writer,
                            result.reference_files.f0_file,
                            phone.phone_string,
                            phone.start_frame,
                            phone.frame_length,
                            format_fixed(phone.f0_distance),
                            format_fixed(phone.f0_correlation),
                            format_count(phone.f0_outlier_frame_number),
                            format_fixed(phone.weighted_lsp_distance),
                            format_fixed(mismatch_ratio),
                            format_fixed(phone.log_spectrum_distance),
                            format_fixed(phone.gain_distance),
                        )

            self._write_summary(report_dir / SUMMARY_FILE, self._summary_lines_rus(summary))
            logger.info(f"RUS 보고서 저장 완료: {report_dir} ({len(results)}개 문장)")

        except OSError as exc:
            logger.error(f"RUS 보고서 저장 실패: {report_dir}, 오류: {exc}")
            raise

    # =========================================================================
    # 내부 헬퍼
    # =========================================================================

    @staticmethod
    def _open(stack: ExitStack, filepath: Path) -> TextIO:
        return stack.enter_context(open(filepath, "w", encoding=REPORT_ENCODING))

    @staticmethod
    def _write_duration_row(writer: TextIO, result: FullEvaluationResult) -> None:
        _write_row(
            writer,
            result.reference_files.duration_file,
            result.target_files.duration_file,
            format_value(result.duration.rmse),
            format_value(result.duration.max_distance),
        )

    @staticmethod
    def _write_f0_row(
        writer: TextIO,
        result: FullEvaluationResult,
        formatter=format_value,
        extra: tuple = (),
    ) -> None:
        uv = result.uv_info
        _write_row(
            writer,
            result.reference_files.f0_file,
            uv.voiced_in_reference,
            uv.unvoiced_in_reference,
            result.target_files.f0_file,
            uv.voiced_in_target,
            uv.unvoiced_in_target,
            formatter(result.f0.rmse),
            formatter(result.f0.max_distance),
            uv.voiced_in_both,
            uv.unvoiced_in_both,
            uv.unexpected_voiced,
            uv.unexpected_unvoiced,
            formatter(result.f0.correlation_coefficient),
            *extra,
        )

    @staticmethod
    def _write_phone_log(report_dir: Path, sentence_index: int, result: FullEvaluationResult) -> None:
        phone_dir = report_dir / PHONE_LEVEL_DIR
        phone_dir.mkdir(parents=True, exist_ok=True)
        filepath = phone_dir / f"{sentence_index:010d}.log"
        with open(filepath, "w", encoding=PHONE_LOG_ENCODING) as phone_writer:
            for phone in result.phone_level_results:
                _write_row(
                    phone_writer,
                    phone.word_offset,
                    phone.word_length,
                    format_value(phone.duration_distance),
                    format_value(phone.f0_distance),
                    format_value(phone.lsp_distance),
                    format_value(phone.gain_distance),
                )

    @staticmethod
    def _write_summary(filepath: Path, lines: Sequence[str]) -> None:
        with open(filepath, "w", encoding=REPORT_ENCODING) as summary_writer:
            _write_lines(summary_writer, lines)

    @staticmethod
    def _summary_lines(summary: EvaluationSummary) -> list[str]:
        return [
            f"Average of {summary.sentence_count} sentences:",
            "",
            "",
            f"RMSE of duration:\t{format_value(summary.rmse_duration)} (second/phone)",
            "",
            f"RMSE of F0:\t{format_value(summary.rmse_f0)} (Hz/frame)",
            f"CorrCoef of F0:\t{format_value(summary.correlation_f0)}",
            "",
            f"RMSE of F0 (StateLevel):\t{format_value(summary.rmse_f0_state_level)} (Hz/state)",
            f"CorrCoef of F0 (StateLevel):\t{format_value(summary.correlation_f0_state_level)}",
            "",
            f"RMSE of LSP:\t{format_value(summary.rmse_lsp)} (2pi rad/frame/dimension)",
            "",
            f"RMSE of log spectrum:\t{format_value(summary.rmse_log_spectrum_with_gain)} (dB)",
            "",
            f"RMSE of log frequency:\t{format_value(summary.rmse_log_spectrum_without_gain)} (dB)",
            "",
            f"RMSE of gain:\t{format_value(summary.rmse_gain)} (dB)",
            f"CorrCoef of gain:\t{format_value(summary.correlation_gain)}",
        ]

    @staticmethod
    def _summary_lines_rus(summary: EvaluationSummary) -> list[str]:
        return [
            f"Average of {summary.sentence_count} sentences:",
            "",
            "",
            f"RMSE of F0:\t{format_value(summary.rmse_f0)} (Hz/frame)",
            f"CorrCoef of F0:\t{format_value(summary.correlation_f0)}",
            f"Outlier F0 Ratio:\t{format_value(summary.outlier_f0_ratio)}",
            f"UV mismatch:\t{format_value(summary.uv_mismatch_ratio)}",
            f"VU mismatch:\t{format_value(summary.vu_mismatch_ratio)}",
            "",
            f"Weighted RMSE of LSP:\t{format_value(summary.rmse_lsp)} ",
            "",
            f"RMSE of log spectrum in voiced frame:\t"
            f"{format_value(summary.rmse_log_spectrum_without_gain_voiced)} (dB)",
            f"RMSE of log spectrum:\t{format_value(summary.rmse_log_spectrum_without_gain)} (dB)",
            "",
            f"RMSE of gain:\t{format_value(summary.rmse_gain)} (dB)",
            f"CorrCoef of gain:\t{format_value(summary.correlation_gain)}",
            "",
            f"RMSE of duration:\t{format_value(summary.rmse_duration)} (second/phone)",
            "",
            f"Average CC:\t{format_value(summary.cc)}",
            f"Average CC in voiced part:\t{format_value(summary.voiced_cc)}",
            f"Continue ratio:\t{format_value(summary.continue_unit_ratio)}",
        ]

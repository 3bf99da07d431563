"""
코퍼스 배치 평가 모듈입니다.

역할:
- 설정에서 평가 파라미터(EvaluationSettings)를 결정 (상태 수, LPC 차수 자동 추정)
- 원본/합성 코퍼스의 문장 파일 묶음을 순서대로 짝지어 평가
- RUS 모드에서는 최적 경로 XML을 읽어 문장 순서대로 짝지음
- 요약 계산 후 보고서 저장

SPS 배치는 단어-음소 대응 정보 없이 평가하므로 음소 단위 결과가 없습니다.
음소 단위 결과가 필요하면 process_sentence()에 PhoneWordMap 목록을 직접 넘깁니다.

사용 예시:
    >>> evaluator = BatchEvaluator(config)
    >>> summary = evaluator.run()
    >>> print(summary.rmse_f0)
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

from acoustic_eval.config.schema import AppConfig
from acoustic_eval.features import DataFiles
from acoustic_eval.features.loaders import (
    DataMisalignedError,
    get_data_file_list,
    get_lpc_order,
)
from acoustic_eval.lattice import BestPath
from acoustic_eval.lattice.loader import load_best_paths
from acoustic_eval.metrics import EvaluationSummary, FullEvaluationResult
from acoustic_eval.metrics.summary import calculate_summary, calculate_summary_rus
from acoustic_eval.pipeline import EvaluationSettings
from acoustic_eval.pipeline.sentence import process_rus, process_sentence
from acoustic_eval.report.report_writer import ReportWriter

logger = logging.getLogger(__name__)


class BatchEvaluator:
    """
    코퍼스 전체를 평가하고 보고서를 저장하는 클래스입니다.

    문장 평가 중 발생한 에러는 로그를 남기고 상위로 전파합니다.
    """

    def __init__(self, config: AppConfig, report_writer: Optional[ReportWriter] = None) -> None:
        """
        파라미터:
            config: 검증 완료된 AppConfig
            report_writer: 보고서 작성기 (None이면 기본 ReportWriter)
        """
        self._config = config
        self._report_writer = report_writer or ReportWriter()

    @property
    def mode(self) -> str:
        return self._config.evaluation.mode

    def collect_data_files(self) -> list[tuple[DataFiles, DataFiles]]:
        """
        원본/합성 코퍼스의 문장 파일 묶음을 순서대로 짝지어 반환합니다.

        에러:
            DataMisalignedError: 두 코퍼스의 문장 수가 다를 때
            ValueError: 평가할 문장이 없을 때
        """
        reference_list = get_data_file_list(self._config.data.reference_dir)
        target_list = get_data_file_list(self._config.data.target_dir)
        if len(reference_list) != len(target_list):
            raise DataMisalignedError(
                f"원본과 합성 코퍼스의 문장 수가 다릅니다: "
                f"{len(reference_list)} != {len(target_list)}"
            )
        if not reference_list:
            raise ValueError(f"평가할 문장이 없습니다: {self._config.data.reference_dir}")
        return list(zip(reference_list, target_list))

    def resolve_settings(self, first_pair: tuple[DataFiles, DataFiles]) -> EvaluationSettings:
        """
        설정값과 첫 문장의 파일 크기로 평가 파라미터를 결정합니다.

        LPC 차수가 설정에 없으면 F0 / LSP 파일 크기 비율로 추정합니다.
        """
        evaluation = self._config.evaluation
        reference_files, target_files = first_pair

        reference_lpc_order = evaluation.reference_lpc_order
        if reference_lpc_order is None:
            reference_lpc_order = get_lpc_order(reference_files.f0_file, reference_files.lsp_file)
            logger.info(f"원본 LPC 차수 추정: {reference_lpc_order}")

        target_lpc_order = evaluation.target_lpc_order
        if target_lpc_order is None:
            target_lpc_order = get_lpc_order(target_files.f0_file, target_files.lsp_file)
            logger.info(f"합성 LPC 차수 추정: {target_lpc_order}")

        return EvaluationSettings(
            reference_lpc_order=reference_lpc_order,
            target_lpc_order=target_lpc_order,
            state_count=evaluation.resolved_state_count(),
            duration_lines_per_phone=evaluation.duration_lines_per_phone,
            voiced_unvoiced_threshold=evaluation.voiced_unvoiced_threshold,
            lower_bound_frequency=evaluation.lower_bound_frequency,
            upper_bound_frequency=evaluation.upper_bound_frequency,
            sample_frequency=evaluation.sample_frequency,
            calculated_dimension=evaluation.calculated_dimension,
            frame_length=evaluation.frame_length_sec,
            outlier_f0_threshold=evaluation.outlier_f0_threshold,
        )

    def load_best_paths(self, sentence_count: int) -> list[BestPath]:
        """
        RUS 최적 경로를 읽고 문장 수와 맞는지 확인합니다.

        에러:
            ValueError: best_path_file이 설정되지 않았을 때
            DataMisalignedError: 최적 경로 수가 문장 수와 다를 때
        """
        best_path_file = self._config.data.best_path_file
        if not best_path_file:
            raise ValueError("rus 모드에는 data.best_path_file 설정이 필요합니다")

        best_paths = load_best_paths(best_path_file)
        if len(best_paths) != sentence_count:
            raise DataMisalignedError(
                f"최적 경로 수({len(best_paths)})가 문장 수({sentence_count})와 다릅니다"
            )
        return best_paths

    def evaluate(self) -> list[FullEvaluationResult]:
        """모든 문장을 순서대로 평가합니다."""
        pairs = self.collect_data_files()
        settings = self.resolve_settings(pairs[0])
        best_paths = self.load_best_paths(len(pairs)) if self.mode == "rus" else None

        logger.info(
            f"배치 평가 시작: mode={self.mode}, {len(pairs)}개 문장, "
            f"LPC 차수={settings.reference_lpc_order}/{settings.target_lpc_order}, "
            f"state_count={settings.state_count}/{settings.duration_lines_per_phone}"
        )

        results: list[FullEvaluationResult] = []
        for index, (reference_files, target_files) in enumerate(pairs):
            try:
                if best_paths is not None:
                    result = process_rus(reference_files, target_files, best_paths[index], settings)
                else:
                    result = process_sentence(reference_files, target_files, settings)
            except (ValueError, OSError) as exc:
                logger.error(
                    f"문장 평가 실패 [{index + 1}/{len(pairs)}]: "
                    f"{reference_files.f0_file.name}, 오류: {exc}"
                )
                raise
            results.append(result)
            logger.info(f"문장 평가 완료 [{index + 1}/{len(pairs)}]: {reference_files.f0_file.name}")

        return results

    def summarize(self, results: list[FullEvaluationResult]) -> EvaluationSummary:
        if self.mode == "rus":
            return calculate_summary_rus(results)
        return calculate_summary(results)

    def run(self) -> EvaluationSummary:
        """
        평가, 요약, 보고서 저장을 차례로 수행합니다.

        반환값:
            EvaluationSummary: 코퍼스 요약
        """
        start_time = time.perf_counter()
        results = self.evaluate()
        summary = self.summarize(results)

        output_dir = Path(self._config.report.output_dir)
        if self.mode == "rus":
            self._report_writer.write_result_rus(results, summary, output_dir)
        else:
            self._report_writer.write_result(results, summary, output_dir)

        elapsed = time.perf_counter() - start_time
        logger.info(
            f"배치 평가 종료: {summary.sentence_count}개 문장, "
            f"보고서={output_dir}, 소요 시간 {elapsed:.1f}초"
        )
        return summary

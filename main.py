"""
음향 객관 평가 배치 실행기

역할:
- config.yaml 로드 후 커맨드라인 인자로 일부 설정 오버라이드
- 구조화 로깅 초기화
- BatchEvaluator로 코퍼스 평가 및 보고서 저장
- 에러 발생 시 오류 로깅 후 종료 코드 1 반환

실행 예시:
    SPS 평가:
        python main.py --config config.yaml --reference data/natural --target data/sps

    RUS 평가 (최적 경로 포함):
        python main.py --mode rus --target data/rus --best-path data/rus/bestpath.xml
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from acoustic_eval.config.config_manager import ConfigLoadError, load_config
from acoustic_eval.config.schema import AppConfig
from acoustic_eval.lattice import LatticeError
from acoustic_eval.logging import setup_logging
from acoustic_eval.pipeline.batch import BatchEvaluator

logger = logging.getLogger(__name__)


# =============================================================================
# 진입점
# =============================================================================

def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """커맨드라인 인자를 파싱합니다."""
    parser = argparse.ArgumentParser(
        description="음향 객관 평가: 원본/합성 음성 파라미터의 RMSE / 상관계수 측정"
    )
    parser.add_argument(
        "--config", default="config.yaml", help="설정 파일 경로 (기본: config.yaml)"
    )
    parser.add_argument(
        "--mode", choices=["sps", "rus"], help="평가 모드 (config.yaml 오버라이드)"
    )
    parser.add_argument(
        "--reference", help="원본 코퍼스 디렉토리 (duration/, f0/, lsp/ 포함)"
    )
    parser.add_argument(
        "--target", help="합성 코퍼스 디렉토리 (duration/, f0/, lsp/ 포함)"
    )
    parser.add_argument(
        "--best-path", help="최적 경로 유닛 래티스 XML 파일 (rus 모드 전용)"
    )
    parser.add_argument(
        "--out-dir", help="보고서 저장 디렉토리"
    )
    return parser.parse_args(argv)


def _apply_cli_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """커맨드라인 인자로 설정을 덮어쓴 새 AppConfig를 만듭니다."""
    overrides = {
        ("evaluation", "mode"): args.mode,
        ("data", "reference_dir"): args.reference,
        ("data", "target_dir"): args.target,
        ("data", "best_path_file"): args.best_path,
        ("report", "output_dir"): args.out_dir,
    }
    if all(value is None for value in overrides.values()):
        return config

    config_dict = config.model_dump()
    for (section, field_name), value in overrides.items():
        if value is not None:
            config_dict[section][field_name] = value
    return AppConfig(**config_dict)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    평가를 실행하고 종료 코드를 반환합니다.

    반환값:
        int: 성공 0, 실패 1
    """
    args = _parse_args(argv)

    try:
        config = load_config(args.config)
        config = _apply_cli_overrides(config, args)
    except (ConfigLoadError, ValueError) as exc:
        logger.error(f"설정 로드 실패: {exc}")
        return 1

    run_id = setup_logging(config)
    logger.info(f"음향 객관 평가 시작: run_id={run_id}, mode={config.evaluation.mode}")

    try:
        summary = BatchEvaluator(config).run()
    except (ValueError, OSError, LatticeError) as exc:
        logger.error(f"평가 실패: {exc}", exc_info=True)
        return 1

    logger.info(
        f"음향 객관 평가 종료: {summary.sentence_count}개 문장, "
        f"F0 RMSE={summary.rmse_f0}, 보고서={config.report.output_dir}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

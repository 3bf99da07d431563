"""
설정 파일 로드 모듈입니다.

역할:
- config.yaml 을 읽어 AppConfig 로 검증
- AEV_<섹션>_<필드> 환경변수를 파일 값 위에 덮어씀
- 검증 실패 시 필드별 원인을 로그로 남기고 ConfigValidationError 발생

로드 순서:
    파일 확인 → YAML 파싱 → 환경변수 병합 → 스키마 검증

사용 예시:
    >>> config = load_config("config.yaml")
    >>> print(config.evaluation.mode)
    'sps'

    # 평가 모드만 바꿔서 실행
    $ AEV_EVALUATION_MODE=rus python main.py
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, ValidationError

from acoustic_eval.config.schema import (
    AppConfig,
    DataConfig,
    EvaluationConfig,
    ReportConfig,
    SystemConfig,
)

logger = logging.getLogger(__name__)

# 환경변수 오버라이드 접두사
ENV_PREFIX = "AEV_"

# 환경변수로 덮어쓸 수 있는 섹션
_SECTION_MODELS: dict[str, type[BaseModel]] = {
    "system": SystemConfig,
    "evaluation": EvaluationConfig,
    "data": DataConfig,
    "report": ReportConfig,
}


class ConfigLoadError(Exception):
    """설정 파일 로드 중 발생하는 에러의 기본 클래스입니다."""
    pass


class ConfigValidationError(ConfigLoadError):
    """설정 스키마 검증 실패 시 발생하는 에러입니다."""
    pass


class ConfigFileNotFoundError(ConfigLoadError):
    """설정 파일을 찾을 수 없을 때 발생하는 에러입니다."""
    pass


# =============================================================================
# 공개 함수
# =============================================================================

def load_config(
    filepath: str | Path,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    설정 파일을 읽고 환경변수 오버라이드를 적용해 검증된 AppConfig를 만듭니다.

    파라미터:
        filepath: YAML 설정 파일 경로
        environ: 오버라이드를 찾을 환경변수 매핑 (None이면 os.environ)

    반환값:
        AppConfig: 검증 완료된 설정

    에러:
        ConfigFileNotFoundError: 파일이 없을 때
        ConfigLoadError: YAML 파싱 실패, 최상위나 섹션이 매핑이 아닐 때
        ConfigValidationError: 스키마 검증 실패 시
    """
    filepath = Path(filepath)
    if not filepath.is_file():
        error_message = f"설정 파일을 찾을 수 없습니다: {filepath}"
        logger.error(error_message)
        raise ConfigFileNotFoundError(error_message)

    raw_config = read_config_file(filepath)
    overrides = collect_env_overrides(os.environ if environ is None else environ)
    config = validate_config(merge_overrides(raw_config, overrides))

    logger.info(
        f"설정 로드 완료: {filepath}, mode={config.evaluation.mode}, "
        f"환경변수 오버라이드 {sum(len(fields) for fields in overrides.values())}건"
    )
    return config


def read_config_file(filepath: Path) -> dict[str, Any]:
    """
    YAML 파일을 최상위 매핑으로 읽습니다. 빈 파일은 빈 매핑입니다.

    에러:
        ConfigLoadError: 읽기 / 파싱 실패 또는 최상위가 매핑이 아닐 때
    """
    try:
        with open(filepath, "r", encoding="utf-8") as config_file:
            raw_data = yaml.safe_load(config_file)
    except yaml.YAMLError as yaml_error:
        logger.error(f"YAML 파싱 실패: {filepath}", exc_info=True)
        raise ConfigLoadError(f"YAML 파싱 실패: {yaml_error}") from yaml_error
    except OSError as file_error:
        logger.error(f"설정 파일 읽기 실패: {filepath}", exc_info=True)
        raise ConfigLoadError(f"설정 파일 읽기 실패: {file_error}") from file_error

    if raw_data is None:
        logger.warning(f"설정 파일이 비어 있어 기본값을 사용합니다: {filepath}")
        return {}
    if not isinstance(raw_data, dict):
        raise ConfigLoadError(
            f"설정 파일의 최상위 구조가 매핑이 아닙니다: {type(raw_data).__name__}"
        )
    return raw_data


def collect_env_overrides(environ: Mapping[str, str]) -> dict[str, dict[str, Any]]:
    """
    AEV_ 환경변수를 섹션별 필드 값으로 모읍니다.

    AEV_ 뒤의 첫 단어가 섹션, 나머지가 필드입니다.
    (AEV_EVALUATION_SAMPLE_FREQUENCY → evaluation.sample_frequency)
    스키마에 없는 섹션이나 필드는 경고 후 무시합니다.

    반환값:
        dict[str, dict[str, Any]]: {섹션: {필드: 값}}
    """
    overrides: dict[str, dict[str, Any]] = {}
    for env_key in sorted(environ):
        if not env_key.startswith(ENV_PREFIX):
            continue

        section_name, _, field_name = env_key[len(ENV_PREFIX):].lower().partition("_")
        if not field_name:
            logger.debug(f"환경변수 무시 (필드 없음): {env_key}")
            continue

        section_model = _SECTION_MODELS.get(section_name)
        if section_model is None or field_name not in section_model.model_fields:
            logger.warning(f"환경변수 무시 (알 수 없는 설정 {section_name}.{field_name}): {env_key}")
            continue

        value = _parse_env_value(environ[env_key])
        overrides.setdefault(section_name, {})[field_name] = value
        logger.info(f"환경변수 오버라이드: {section_name}.{field_name} = {value!r}")
    return overrides


def merge_overrides(
    raw_config: Mapping[str, Any],
    overrides: Mapping[str, Mapping[str, Any]],
) -> dict[str, Any]:
    """
    파일 설정 위에 오버라이드를 덮어쓴 새 매핑을 반환합니다. 입력은 바꾸지 않습니다.

    에러:
        ConfigLoadError: 덮어쓸 섹션이 매핑이 아닐 때
    """
    merged = dict(raw_config)
    for section_name, fields in overrides.items():
        section = merged.get(section_name) or {}
        if not isinstance(section, dict):
            raise ConfigLoadError(
                f"'{section_name}' 섹션이 매핑이 아니어서 환경변수를 적용할 수 없습니다"
            )
        merged[section_name] = {**section, **fields}
    return merged


def validate_config(raw_config: Mapping[str, Any]) -> AppConfig:
    """
    매핑을 AppConfig로 검증합니다.

    에러:
        ConfigValidationError: 스키마 검증 실패 시 (필드별 원인은 ERROR 로그)
    """
    try:
        return AppConfig(**raw_config)
    except ValidationError as validation_error:
        error_details = validation_error.errors()
        for error_detail in error_details:
            field_path = ".".join(str(loc) for loc in error_detail["loc"])
            logger.error(
                f"설정 검증 실패 - 필드: {field_path or '(model)'}, "
                f"에러: {error_detail['msg']}, 입력값: {error_detail.get('input', 'N/A')}"
            )
        raise ConfigValidationError(
            f"설정 스키마 검증 실패: {len(error_details)}개 에러"
        ) from validation_error


# =============================================================================
# 내부 함수
# =============================================================================

def _parse_env_value(value: str) -> Any:
    """
    환경변수 문자열을 YAML 스칼라 규칙으로 해석합니다.

    true / false → bool, 정수 / 소수 → int / float, null → None.
    그 밖의 값(날짜, 목록, 해석 실패 포함)은 원래 문자열을 씁니다.
    """
    if not value.strip():
        return value
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        logger.debug(f"환경변수 값을 문자열로 사용합니다: {value!r}")
        return value
    if parsed is None or isinstance(parsed, (bool, int, float)):
        return parsed
    return value

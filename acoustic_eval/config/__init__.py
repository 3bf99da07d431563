"""
설정 모듈 패키지

- schema: Pydantic 설정 스키마 (AppConfig)
- config_manager: load_config (YAML 로드 → AEV_ 환경변수 병합 → 검증)
"""

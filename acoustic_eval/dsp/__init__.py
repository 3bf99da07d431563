"""
신호 변환 모듈 패키지

LSP/LPC/스펙트럼 변환과 게인 분리, 주파수 대역 필터를 제공합니다.
"""

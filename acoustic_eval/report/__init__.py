"""
평가 결과 보고서 모듈 패키지

보고서 파일은 모두 탭 구분 텍스트이며, 첫 부분에 열 설명 헤더를 기록합니다.
"""

"""
음성 합성 결과의 객관 음향 품질 평가 패키지

합성 음성 파라미터(Duration, F0, LSP)를 녹음 원본과 비교하여
RMSE, 최대 거리, 상관계수를 계산하고 탭 구분 리포트로 저장합니다.
"""

"""
최적 경로(best path) 유닛 래티스 모듈 패키지

공통 데이터 타입:
- PhoneCandidate: 음소에 선택된 녹음 유닛 후보
- BestPathPhone: 후보가 정확히 하나로 결정된 래티스 노드
- BestPath: 한 문장의 최적 경로

래티스 노드는 생성 시점에 후보가 하나인지 검증하므로
이후 소비자는 후보 수를 다시 확인하지 않습니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

# 무음 음소 텍스트
SILENCE_PHONE = "sil"


class LatticeError(RuntimeError):
    """최적 경로 래티스의 구조 불변식(노드당 후보 1개)이 깨졌을 때 발생합니다."""
    pass


@dataclass(frozen=True)
class PhoneCandidate:
    """
    최적 경로에서 음소에 선택된 유닛 후보입니다.

    필드:
        text: 후보 음소 텍스트
        frame_length: 합성 음성에서 차지하는 프레임 수
        concatenation_cost: 앞 유닛과의 연결 비용
        is_continue: 녹음상 앞 유닛과 연속된 유닛인지 여부
        sentence_id: 유닛이 속한 녹음 문장 ID
        start_frame: 녹음 문장 내 시작 프레임
    """
    text: str
    frame_length: int
    concatenation_cost: float = 0.0
    is_continue: bool = False
    sentence_id: str = ""
    start_frame: int = 0


@dataclass(frozen=True)
class BestPathPhone:
    """후보가 하나로 결정된 최적 경로 노드입니다."""
    text: str
    candidate: PhoneCandidate

    def __post_init__(self) -> None:
        if not isinstance(self.candidate, PhoneCandidate):
            raise LatticeError(
                f"최적 경로 노드 '{self.text}'의 후보는 PhoneCandidate 하나여야 합니다"
            )

    @classmethod
    def from_candidates(cls, text: str, candidates: Sequence[PhoneCandidate]) -> "BestPathPhone":
        """
        후보 목록으로 노드를 만듭니다.

        에러:
            LatticeError: 후보가 정확히 1개가 아닐 때
        """
        if len(candidates) != 1:
            raise LatticeError(
                f"최적 경로 노드 '{text}'의 후보 수가 1이 아닙니다: {len(candidates)}"
            )
        return cls(text=text, candidate=candidates[0])

    @property
    def is_silence(self) -> bool:
        return self.text == SILENCE_PHONE


@dataclass(frozen=True)
class BestPath:
    """
    한 문장의 최적 경로입니다.

    필드:
        sentence_id: 문장 ID
        text: 문장 텍스트
        phones: 순서대로 나열된 노드
    """
    sentence_id: str
    text: str
    phones: tuple[BestPathPhone, ...]

    @property
    def total_frames(self) -> int:
        return sum(phone.candidate.frame_length for phone in self.phones)

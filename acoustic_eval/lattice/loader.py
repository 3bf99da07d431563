"""
유닛 래티스 XML 로더 모듈입니다.

역할:
- sentences / sentence / phone / cand 구조의 래티스 XML 파싱
- 네임스페이스(http://schemas.microsoft.com/tts) 유무와 무관하게 태그 인식
- 노드마다 후보가 정확히 하나인 최적 경로(BestPath)로 변환

XML 예시:
    <sentences xmlns="http://schemas.microsoft.com/tts" lang="en-US">
      <sentence id="0001" txt="hello">
        <phone txt="sil" triphone="" log="">
          <cand txt="sil" idx="0" sentId="0100" frameLen="20" conCost="0.000" continue="False" />
        </phone>
      </sentence>
    </sentences>

사용 예시:
    >>> best_paths = load_best_paths("bestpath.xml")
    >>> print(best_paths[0].sentence_id, len(best_paths[0].phones))
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from acoustic_eval.lattice import BestPath, BestPathPhone, LatticeError, PhoneCandidate

logger = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    """'{namespace}name' 형태의 태그에서 name만 반환합니다."""
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local_name(child.tag) == name]


def _parse_bool(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


def _parse_candidate(element: ET.Element) -> PhoneCandidate:
    """
    cand 요소를 PhoneCandidate로 변환합니다.

    에러:
        LatticeError: frameLen이 없거나 숫자 형식이 잘못되었을 때
    """
    try:
        return PhoneCandidate(
            text=element.get("txt", ""),
            frame_length=int(element.get("frameLen", "")),
            concatenation_cost=float(element.get("conCost", "0")),
            is_continue=_parse_bool(element.get("continue")),
            sentence_id=element.get("sentId", ""),
            start_frame=int(element.get("startFrame", "0")),
        )
    except ValueError as parse_error:
        raise LatticeError(f"후보 속성 형식이 잘못되었습니다: {element.attrib}") from parse_error


def parse_best_paths(root: ET.Element) -> list[BestPath]:
    """
    래티스 XML 루트 요소에서 문장별 최적 경로를 만듭니다.

    에러:
        LatticeError: 노드의 후보가 하나가 아닐 때
    """
    if _local_name(root.tag) == "sentence":
        sentence_elements = [root]
    else:
        sentence_elements = _children(root, "sentence")

    best_paths: list[BestPath] = []
    for sentence_element in sentence_elements:
        sentence_id = sentence_element.get("id", "")
        phones = []
        for phone_element in _children(sentence_element, "phone"):
            candidates = [_parse_candidate(cand) for cand in _children(phone_element, "cand")]
            try:
                phones.append(BestPathPhone.from_candidates(phone_element.get("txt", ""), candidates))
            except LatticeError:
                logger.error(f"최적 경로 구조 오류: sentence={sentence_id}")
                raise
        best_paths.append(
            BestPath(sentence_id=sentence_id, text=sentence_element.get("txt", ""), phones=tuple(phones))
        )
    return best_paths


def load_best_paths(filepath: str | Path) -> list[BestPath]:
    """
    래티스 XML 파일을 읽어 문장별 최적 경로 목록을 반환합니다.

    에러:
        FileNotFoundError: 파일이 없을 때
        LatticeError: XML 파싱 실패 또는 구조 불변식 위반 시
    """
    filepath = Path(filepath)
    if not filepath.is_file():
        error_message = f"최적 경로 파일을 찾을 수 없습니다: {filepath}"
        logger.error(error_message)
        raise FileNotFoundError(error_message)

    try:
        root = ET.parse(filepath).getroot()
    except ET.ParseError as parse_error:
        error_message = f"최적 경로 XML 파싱 실패: {filepath}: {parse_error}"
        logger.error(error_message)
        raise LatticeError(error_message) from parse_error

    best_paths = parse_best_paths(root)
    logger.info(f"최적 경로 로드 완료: {filepath}, {len(best_paths)}개 문장")
    return best_paths

"""
최적 경로 래티스 단위 테스트

검증 조건:
- 네임스페이스 유무와 무관하게 XML 파싱
- 노드 후보가 1개가 아니면 LatticeError
- 무음 제외 음소 위치, 연결 비용 / 유성 경계 / 연속 유닛 통계

픽스처:
- bestpath_xml: sil(4) a(6) b(6) sil(4) 구조의 래티스 XML 파일
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from acoustic_eval.lattice import BestPathPhone, LatticeError, PhoneCandidate
from acoustic_eval.lattice.loader import load_best_paths, parse_best_paths
from acoustic_eval.lattice.statistics import (
    generate_phone_level_info,
    process_cc,
    process_continue_unit_count,
    process_voiced_cc,
)

_LATTICE_XML = """<?xml version="1.0" encoding="utf-8"?>
<sentences xmlns="http://schemas.microsoft.com/tts" lang="en-US">
  <sentence id="0001" txt="ab">
    <phone txt="sil">
      <cand txt="sil" sentId="0100" frameLen="4" conCost="0.000" continue="False" startFrame="0" />
    </phone>
    <phone txt="a">
      <cand txt="a" sentId="0100" frameLen="6" conCost="1.500" continue="True" startFrame="4" />
    </phone>
    <phone txt="b">
      <cand txt="b" sentId="0200" frameLen="6" conCost="2.500" continue="False" startFrame="30" />
    </phone>
    <phone txt="sil">
      <cand txt="sil" sentId="0200" frameLen="4" conCost="0.500" continue="True" startFrame="36" />
    </phone>
  </sentence>
</sentences>
"""


@pytest.fixture
def bestpath_xml(tmp_path):
    path = tmp_path / "bestpath.xml"
    path.write_text(_LATTICE_XML, encoding="utf-8")
    return path


@pytest.fixture
def best_path(bestpath_xml):
    return load_best_paths(bestpath_xml)[0]


# =========================================================================
# 로더
# =========================================================================

class TestLoader:
    def test_parses_namespaced_xml(self, best_path):
        assert best_path.sentence_id == "0001"
        assert best_path.text == "ab"
        assert [phone.text for phone in best_path.phones] == ["sil", "a", "b", "sil"]
        assert best_path.total_frames == 20

    def test_candidate_attributes(self, best_path):
        candidate = best_path.phones[1].candidate
        assert candidate.frame_length == 6
        assert candidate.concatenation_cost == pytest.approx(1.5)
        assert candidate.is_continue is True
        assert candidate.sentence_id == "0100"
        assert candidate.start_frame == 4

    def test_parses_without_namespace(self):
        root = ET.fromstring(
            '<sentences><sentence id="7" txt="x">'
            '<phone txt="x"><cand txt="x" frameLen="3" /></phone>'
            "</sentence></sentences>"
        )
        paths = parse_best_paths(root)
        assert paths[0].sentence_id == "7"
        assert paths[0].phones[0].candidate.frame_length == 3

    def test_multiple_candidates_raises(self):
        root = ET.fromstring(
            '<sentences><sentence id="1"><phone txt="a">'
            '<cand txt="a" frameLen="3" /><cand txt="a" frameLen="4" />'
            "</phone></sentence></sentences>"
        )
        with pytest.raises(LatticeError):
            parse_best_paths(root)

    def test_missing_candidate_raises(self):
        root = ET.fromstring('<sentences><sentence id="1"><phone txt="a" /></sentence></sentences>')
        with pytest.raises(LatticeError):
            parse_best_paths(root)

    def test_bad_frame_length_raises(self):
        root = ET.fromstring(
            '<sentences><sentence id="1"><phone txt="a">'
            '<cand txt="a" frameLen="abc" /></phone></sentence></sentences>'
        )
        with pytest.raises(LatticeError):
            parse_best_paths(root)

    def test_malformed_file_raises(self, tmp_path):
        path = tmp_path / "broken.xml"
        path.write_text("<sentences><sentence>", encoding="utf-8")
        with pytest.raises(LatticeError):
            load_best_paths(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_best_paths(tmp_path / "missing.xml")

    def test_from_candidates_requires_single(self):
        with pytest.raises(LatticeError):
            BestPathPhone.from_candidates("a", [])
        node = BestPathPhone.from_candidates("a", [PhoneCandidate(text="a", frame_length=2)])
        assert node.candidate.frame_length == 2


# =========================================================================
# 통계
# =========================================================================

class TestStatistics:
    def test_phone_level_info_skips_silence(self, best_path):
        phones = generate_phone_level_info(best_path)
        assert [phone.phone_string for phone in phones] == ["a", "b"]
        assert [phone.start_frame for phone in phones] == [4, 10]
        assert [phone.frame_length for phone in phones] == [6, 6]

    def test_concatenation_cost(self, best_path):
        cc_info = process_cc(best_path)
        assert cc_info.boundary_number == 3
        assert cc_info.total_concatenation_cost == pytest.approx(4.5)
        assert cc_info.average == pytest.approx(1.5)

    def test_voiced_concatenation_cost(self, best_path, voiced_f0):
        cc_info = process_voiced_cc(best_path, voiced_f0, 50.0)
        # a|b 경계(프레임 9, 10)만 양쪽 무음이 아닌 유성 경계
        assert cc_info.boundary_number == 1
        assert cc_info.total_concatenation_cost == pytest.approx(2.5)

    def test_voiced_cc_unvoiced_boundary(self, best_path):
        cc_info = process_voiced_cc(best_path, [0.0] * 20, 50.0)
        assert cc_info.boundary_number == 0
        assert cc_info.average is None

    def test_continue_units(self, best_path):
        continue_info = process_continue_unit_count(best_path)
        assert continue_info.boundary_number == 3
        assert continue_info.total_continue_unit_number == 1
        assert continue_info.ratio == pytest.approx(1 / 3)

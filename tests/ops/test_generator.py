"""Tests for metacat.ops.generator."""

from __future__ import annotations

from metacat.core.models import CatalogType
from metacat.ops.generator import generate_term_name, segment_term_name
from metacat.ops.requests import GenerateTermRequest
from tests._support import word


def test_generate_both_directions(ctx, standard_catalogs):
    forward = generate_term_name(ctx, GenerateTermRequest(term="사용자_이름_주소"))
    backward = generate_term_name(ctx, GenerateTermRequest(term="USER_NAME", direction="en-to-ko"))

    assert forward.data == {"term": "사용자_이름_주소", "direction": "ko-to-en", "result": "USER_NAME_##"}
    assert backward.data["result"] == "사용자_이름"


def test_generate_rejects_blank_term_and_unknown_direction(ctx):
    blank = generate_term_name(ctx, GenerateTermRequest(term="  "))
    assert blank.status == 400
    assert blank.error.message == "변환할 용어를 제공해야 합니다."

    sideways = generate_term_name(ctx, GenerateTermRequest(term="사용자", direction="ko-to-jp"))
    assert sideways.status == 400
    assert "ko-to-jp" in sideways.error.message


def test_segment_uses_named_file(ctx, seed, standard_catalogs):
    seed(CatalogType.VOCABULARY, [word("고객", "CUST"), word("번호", "NO")], "alt.json")

    result = segment_term_name(ctx, GenerateTermRequest(term="고객번호", filename="alt.json"))

    assert result.data["segments"] == ["고객_번호"]


def test_segment_blank_term(ctx):
    assert segment_term_name(ctx, GenerateTermRequest(term="")).error.message == "분석할 단어를 제공해야 합니다."

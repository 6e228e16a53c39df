"""Tests for metacat.core.xlsx — column definition workbook import/export."""

from __future__ import annotations

from io import BytesIO

import pytest
from openpyxl import Workbook, load_workbook

from metacat.core.errors import ParseError
from metacat.core.xlsx import (
    COLUMN_HEADERS,
    SHEET_TITLE,
    canonical_header,
    export_column_workbook,
    parse_column_workbook,
)


def _workbook(*sheets: tuple[str, list[list[object]]]) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets:
        ws = wb.create_sheet(title)
        for row in rows:
            ws.append(row)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class TestCanonicalHeader:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("컬럼\n영문명", "컬럼영문명"),
            (" PK 정보 ", "PK정보"),
            ("notnull", "NOTNULL여부"),
            ("Schema", "스키마명"),
            ("공개여부", "공개/비공개여부"),
            ("비고", None),
            (None, None),
        ],
    )
    def test_normalization(self, raw, expected):
        assert canonical_header(raw) == expected


class TestParseColumnWorkbook:
    def test_header_found_on_second_sheet(self):
        content = _workbook(
            ("표지", [["컬럼 정의서"], ["작성자", "홍길동"]]),
            (
                "정의서",
                [
                    ["컬럼 정의서 목록"],
                    [],
                    ["스키마명", "테이블\n영문명", "컬럼영문명", "컬럼한글명", "자료길이", "PK정보", "비고"],
                    ["SCH", "TB_USER", "USER_NAME", "사용자명", 100, "", "ignored"],
                    ["SCH", "TB_USER", "USER_ID", "사용자ID", 20.0, "Y", None],
                ],
            ),
        )
        entries = parse_column_workbook(content)

        assert [e["columnEnglishName"] for e in entries] == ["USER_NAME", "USER_ID"]
        first = entries[0]
        assert first["schemaName"] == "SCH"
        assert first["tableEnglishName"] == "TB_USER"
        assert first["dataLength"] == "100"
        assert first["pkInfo"] == ""
        assert first["indexName"] == ""
        assert "비고" not in first
        assert entries[1]["dataLength"] == "20"
        assert entries[1]["pkInfo"] == "Y"
        assert first["id"] != entries[1]["id"]
        assert first["createdAt"] == first["updatedAt"]

    def test_dash_means_absent(self):
        content = _workbook(
            ("s", [["컬럼영문명", "자료길이", "PK정보", "컬럼한글명"], ["A_B", "", "", "-"]]),
        )
        (entry,) = parse_column_workbook(content)
        assert "columnKoreanName" not in entry

    def test_duplicate_rows_skipped(self):
        content = _workbook(
            (
                "s",
                [
                    ["스키마명", "테이블영문명", "컬럼영문명", "자료길이", "PK정보"],
                    ["S", "T", "C", "1", ""],
                    ["S", "T", "C", "2", ""],
                    [None, None, None, None, None],
                ],
            ),
        )
        entries = parse_column_workbook(content)
        assert len(entries) == 1
        assert entries[0]["dataLength"] == "1"
        assert len(parse_column_workbook(content, skip_duplicates=False)) == 2

    def test_missing_required_headers(self):
        content = _workbook(("s", [["컬럼영문명", "자료길이"], ["A", "1"]]))
        with pytest.raises(ParseError, match="필수 헤더"):
            parse_column_workbook(content)

    def test_no_data_rows(self):
        content = _workbook(("s", [["컬럼영문명", "자료길이", "PK정보"]]))
        with pytest.raises(ParseError, match="유효한 컬럼 정의서"):
            parse_column_workbook(content)

    def test_not_a_workbook(self):
        with pytest.raises(ParseError, match="Excel 파일 파싱 실패"):
            parse_column_workbook(b"plain text, not xlsx")


class TestExportColumnWorkbook:
    def test_layout(self):
        content = export_column_workbook(
            [
                {"columnEnglishName": "USER_NAME", "dataLength": "100"},
                {"columnEnglishName": "USER_ID", "pkInfo": "Y"},
            ]
        )
        wb = load_workbook(BytesIO(content))
        ws = wb[SHEET_TITLE]
        rows = list(ws.iter_rows(values_only=True))

        assert list(rows[0]) == ["번호", *COLUMN_HEADERS]
        english = list(COLUMN_HEADERS).index("컬럼영문명") + 1
        assert rows[1][0] == 1
        assert rows[1][english] == "USER_NAME"
        assert rows[2][0] == 2
        assert ws["A1"].font.bold is True

    def test_export_parses_back(self):
        content = export_column_workbook([{"columnEnglishName": "C", "dataLength": "5", "pkInfo": "N"}])
        (entry,) = parse_column_workbook(content)
        assert entry["columnEnglishName"] == "C"
        assert entry["dataLength"] == "5"

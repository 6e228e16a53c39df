"""
Column definition workbooks (컬럼 정의서) — XLSX import and export.

Import scans every sheet, top to bottom, for the first row carrying the
required headers ``컬럼영문명``, ``자료길이`` and ``PK정보``. The first sheet
that has one is parsed; data rows are read by header name, so column
order in the workbook does not matter. Header cells are matched after
removing all whitespace (line breaks included).

Export writes one ``컬럼정의서`` sheet with a ``번호`` column followed by
the column headers in canonical order.
"""

from __future__ import annotations

import re
import zipfile
from collections.abc import Iterable, Sequence
from io import BytesIO
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils.exceptions import InvalidFileException

from metacat.core.errors import ParseError
from metacat.core.logging import get_logger
from metacat.core.models import new_id, now_iso

logger = get_logger(__name__)

SHEET_TITLE = "컬럼정의서"

# Canonical header → entry field, in export order.
COLUMN_HEADERS: dict[str, str] = {
    "사업범위여부": "scopeFlag",
    "주제영역": "subjectArea",
    "스키마명": "schemaName",
    "테이블영문명": "tableEnglishName",
    "컬럼영문명": "columnEnglishName",
    "컬럼한글명": "columnKoreanName",
    "컬럼설명": "columnDescription",
    "연관엔터티명": "relatedEntityName",
    "도메인명": "domainName",
    "자료타입": "dataType",
    "자료길이": "dataLength",
    "자료소수점길이": "dataDecimalLength",
    "자료형식": "dataFormat",
    "NOTNULL여부": "notNullFlag",
    "PK정보": "pkInfo",
    "FK정보": "fkInfo",
    "인덱스명": "indexName",
    "인덱스순번": "indexOrder",
    "AK정보": "akInfo",
    "제약조건": "constraint",
    "개인정보여부": "personalInfoFlag",
    "암호화여부": "encryptionFlag",
    "공개/비공개여부": "publicFlag",
}

HEADER_ALIASES: dict[str, str] = {
    "schema": "스키마명",
    "스키마": "스키마명",
    "notnull": "NOTNULL여부",
    "공개여부": "공개/비공개여부",
}

REQUIRED_HEADERS: tuple[str, ...] = ("컬럼영문명", "자료길이", "PK정보")

# Stored as "" when absent; every other field is dropped when absent.
TEXT_FIELDS = frozenset(
    {
        "dataLength",
        "dataDecimalLength",
        "dataFormat",
        "pkInfo",
        "indexName",
        "indexOrder",
        "akInfo",
        "constraint",
    }
)

_WS = re.compile(r"\s+")
_LOOKUP = {k.lower(): k for k in COLUMN_HEADERS}


def normalize_header(value: Any) -> str:
    """Remove every whitespace character from a header cell."""
    if value is None:
        return ""
    return _WS.sub("", str(value))


def canonical_header(value: Any) -> str | None:
    """Map a raw header cell to its canonical name, or ``None`` if unknown."""
    key = normalize_header(value).lower()
    if not key:
        return None
    if key in _LOOKUP:
        return _LOOKUP[key]
    alias = HEADER_ALIASES.get(key)
    return alias


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _optional(value: Any) -> str | None:
    text = _cell_text(value)
    return None if text in ("", "-") else text


def _locate_header(rows: Sequence[Sequence[Any]]) -> tuple[int, dict[int, str]] | None:
    for idx, row in enumerate(rows):
        mapping = {i: h for i, cell in enumerate(row) if (h := canonical_header(cell))}
        if all(r in mapping.values() for r in REQUIRED_HEADERS):
            return idx, mapping
    return None


def _open_workbook(content: bytes):
    try:
        return load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (zipfile.BadZipFile, InvalidFileException, KeyError, OSError) as exc:
        raise ParseError(f"Excel 파일 파싱 실패: {exc}", cause=exc) from exc


def parse_column_workbook(
    content: bytes,
    *,
    skip_duplicates: bool = True,
) -> list[dict[str, Any]]:
    """Parse a column definition workbook into column entry records.

    Raises:
        ParseError: invalid workbook, no sheet with the required headers,
            or no usable data rows.
    """
    workbook = _open_workbook(content)
    try:
        located = None
        sheet_title = ""
        rows: list[tuple[Any, ...]] = []
        for sheet in workbook.worksheets:
            rows = [tuple(r) for r in sheet.iter_rows(values_only=True)]
            located = _locate_header(rows)
            if located is not None:
                sheet_title = sheet.title
                break
    finally:
        workbook.close()

    if located is None:
        raise ParseError("필수 헤더(컬럼영문명, 자료길이, PK정보)를 포함한 시트를 찾을 수 없습니다.")

    header_idx, header_map = located
    logger.info("column_sheet_located", sheet=sheet_title, header_row=header_idx + 1)

    entries: list[dict[str, Any]] = []
    seen: set[str] = set()
    now = now_iso()
    for offset, row in enumerate(rows[header_idx + 1 :], start=header_idx + 2):
        if all(_cell_text(c) == "" for c in row):
            continue

        entry: dict[str, Any] = {"id": new_id()}
        for col, header in header_map.items():
            field = COLUMN_HEADERS[header]
            value = row[col] if col < len(row) else None
            if field in TEXT_FIELDS:
                entry[field] = _cell_text(value)
            else:
                parsed = _optional(value)
                if parsed is not None:
                    entry[field] = parsed
        for field in TEXT_FIELDS:
            entry.setdefault(field, "")

        if skip_duplicates:
            key = "|".join(
                entry.get(f) or "" for f in ("schemaName", "tableEnglishName", "columnEnglishName")
            )
            if key in seen:
                logger.warning("duplicate_row_skipped", row=offset, key=key)
                continue
            seen.add(key)

        entry["createdAt"] = now
        entry["updatedAt"] = now
        entries.append(entry)

    if not entries:
        raise ParseError("유효한 컬럼 정의서 데이터를 찾을 수 없습니다.")

    logger.info("column_workbook_parsed", sheet=sheet_title, rows=len(entries))
    return entries


# ── Export ───────────────────────────────────────────────────────────────

_HEADER_FONT = Font(bold=True, color="FFFFFF", size=11)
_HEADER_FILL = PatternFill(patternType="solid", fgColor="4472C4")
_THIN = Side(style="thin", color="000000")
_BORDER = Border(top=_THIN, bottom=_THIN, left=_THIN, right=_THIN)


def export_column_workbook(entries: Iterable[dict[str, Any]]) -> bytes:
    """Render column entries as an XLSX workbook."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE

    headers = ["번호", *COLUMN_HEADERS]
    sheet.append(headers)
    for cell in sheet[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.border = _BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    count = 0
    for number, entry in enumerate(entries, start=1):
        sheet.append([number, *(entry.get(f) or "" for f in COLUMN_HEADERS.values())])
        count = number

    for letter_idx in range(1, len(headers) + 1):
        sheet.column_dimensions[sheet.cell(row=1, column=letter_idx).column_letter].width = 14
    sheet.auto_filter.ref = sheet.dimensions

    buffer = BytesIO()
    workbook.save(buffer)
    logger.info("column_workbook_exported", rows=count)
    return buffer.getvalue()

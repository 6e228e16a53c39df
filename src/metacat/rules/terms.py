"""
Term validator.

Applies the term rule set to one entry against snapshots of the
vocabulary and domain catalogs. Rule violations are returned as values,
never raised.

Rules, highest priority first::

    1 TERM_NAME_LENGTH            termName has fewer than two parts
    2 TERM_NAME_DUPLICATE         another entry carries the same termName
    3 TERM_UNIQUENESS             another entry carries the same term/column/domain triple
    4 TERM_NAME_MAPPING           a termName part is not in the vocabulary
    5 COLUMN_NAME_MAPPING         a columnName part is not in the vocabulary
    6 TERM_COLUMN_ORDER_MISMATCH  column parts are known but out of term order
    7 TERM_NAME_SUFFIX            the last termName part is not a formal word
    8 DOMAIN_NAME_MAPPING         domainName is not in the domain catalog

Rules 2, 4, 6 and 7 need a decomposable name and are skipped when rule 1
fires. Rule 3 only runs when a domainName is given.

Example:
    >>> catalogs = TermCatalogs(vocabulary=[
    ...     {"id": "1", "standardName": "방문자", "abbreviation": "VSTR"},
    ...     {"id": "2", "standardName": "로그아웃", "abbreviation": "LGOT"},
    ...     {"id": "3", "standardName": "수", "abbreviation": "CNT", "isFormalWord": True},
    ... ], domains=[])
    >>> errors = validate_term({"termName": "방문자_로그아웃_수", "columnName": "LGOT_VSTR_CNT"}, catalogs)
    >>> [e.type for e in errors]
    ['TERM_COLUMN_ORDER_MISMATCH']
    >>> errors[0].details["correctedColumnName"]
    'VSTR_LGOT_CNT'
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from metacat.core.keys import split_parts, text
from metacat.rules.mapping import build_domain_map, build_vocabulary_map, unmapped_parts

# ── Rule table ───────────────────────────────────────────────────────────

TERM_NAME_LENGTH = "TERM_NAME_LENGTH"
TERM_NAME_DUPLICATE = "TERM_NAME_DUPLICATE"
TERM_UNIQUENESS = "TERM_UNIQUENESS"
TERM_NAME_MAPPING = "TERM_NAME_MAPPING"
COLUMN_NAME_MAPPING = "COLUMN_NAME_MAPPING"
TERM_COLUMN_ORDER_MISMATCH = "TERM_COLUMN_ORDER_MISMATCH"
TERM_NAME_SUFFIX = "TERM_NAME_SUFFIX"
DOMAIN_NAME_MAPPING = "DOMAIN_NAME_MAPPING"

TERM_ERROR_PRIORITY: dict[str, int] = {
    TERM_NAME_LENGTH: 1,
    TERM_NAME_DUPLICATE: 2,
    TERM_UNIQUENESS: 3,
    TERM_NAME_MAPPING: 4,
    COLUMN_NAME_MAPPING: 5,
    TERM_COLUMN_ORDER_MISMATCH: 6,
    TERM_NAME_SUFFIX: 7,
    DOMAIN_NAME_MAPPING: 8,
}

CONFLICT_TYPES = frozenset({TERM_NAME_DUPLICATE, TERM_UNIQUENESS})


@dataclass(frozen=True, slots=True)
class TermValidationError:
    """One rule violation."""

    type: str
    message: str
    field: str
    level: str = "error"
    details: dict[str, Any] | None = None

    @property
    def code(self) -> str:
        return self.type

    @property
    def priority(self) -> int:
        return TERM_ERROR_PRIORITY.get(self.type, 999)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.type,
            "code": self.code,
            "message": self.message,
            "field": self.field,
            "priority": self.priority,
            "level": self.level,
        }
        if self.details:
            result["details"] = self.details
        return result


@dataclass(slots=True)
class TermCatalogs:
    """Vocabulary and domain snapshots a term is validated against."""

    vocabulary: list[dict[str, Any]]
    domains: list[dict[str, Any]]
    vocabulary_filename: str = "vocabulary.json"
    domain_filename: str = "domain.json"
    vocabulary_map: dict[str, Mapping[str, Any]] = field(init=False)
    domain_map: dict[str, Mapping[str, Any]] = field(init=False)

    def __post_init__(self) -> None:
        self.vocabulary_map = build_vocabulary_map(self.vocabulary)
        self.domain_map = build_domain_map(self.domains)

    def words_named(self, standard_name: str) -> list[dict[str, Any]]:
        """Vocabulary entries whose standardName equals ``standard_name`` (case-insensitive)."""
        key = standard_name.strip().lower()
        return [v for v in self.vocabulary if text(v.get("standardName")).lower() == key]

    def abbreviation_of(self, part: str) -> str | None:
        word = self.vocabulary_map.get(part.lower())
        if word is None:
            return None
        return text(word.get("abbreviation")) or None


def is_formal_word(entry: Mapping[str, Any]) -> bool:
    value = entry.get("isFormalWord")
    if isinstance(value, str):
        return value.strip().upper() in ("Y", "TRUE")
    return value is True


def sort_errors(errors: Iterable[TermValidationError]) -> list[TermValidationError]:
    return sorted(errors, key=lambda e: e.priority)


# ── Individual rules ─────────────────────────────────────────────────────


def find_duplicates(
    entry: Mapping[str, Any],
    peers: Iterable[Mapping[str, Any]],
    *,
    triple: bool = False,
) -> list[Mapping[str, Any]]:
    """Peers (other ids) sharing the termName, or the whole triple when ``triple``."""
    fields = ("termName", "columnName", "domainName") if triple else ("termName",)
    key = tuple(text(entry.get(f)).lower() for f in fields)
    own_id = entry.get("id")
    return [
        p
        for p in peers
        if (own_id is None or p.get("id") != own_id)
        and tuple(text(p.get(f)).lower() for f in fields) == key
    ]


def check_column_order(
    term_parts: list[str],
    column_parts: list[str],
    catalogs: TermCatalogs,
) -> dict[str, Any] | None:
    """Compare column parts against the abbreviations of the term parts.

    Returns ``{"mismatches": [...], "correctedColumnName": ...}`` when the
    order differs, ``None`` when it aligns or cannot be compared.
    """
    if len(term_parts) != len(column_parts):
        return None
    expected = [catalogs.abbreviation_of(p) for p in term_parts]
    if any(e is None for e in expected):
        return None

    mismatches = [
        {"index": i, "expected": exp, "actual": col}
        for i, (exp, col) in enumerate(zip(expected, column_parts, strict=True))
        if exp.lower() != col.lower()
    ]
    if not mismatches:
        return None
    return {"mismatches": mismatches, "correctedColumnName": "_".join(expected)}


def check_suffix(term_parts: list[str], catalogs: TermCatalogs) -> str | None:
    """Message for a non-formal suffix word, ``None`` if the suffix is fine."""
    suffix = term_parts[-1]
    words = catalogs.words_named(suffix)
    if not words:
        return f"'{suffix}'은(는) 단어집에 등록되지 않은 단어입니다."
    if any(is_formal_word(w) for w in words):
        return None
    return f"'{suffix}'은(는) 형식단어가 아니므로 용어명의 접미사로 사용할 수 없습니다. (형식단어여부: N)"


# ── Validator ────────────────────────────────────────────────────────────


def validate_term(
    entry: Mapping[str, Any],
    catalogs: TermCatalogs,
    *,
    peers: Iterable[Mapping[str, Any]] = (),
    check_duplicates: bool = True,
) -> list[TermValidationError]:
    """Run every rule on ``entry`` and return the errors sorted by priority.

    Args:
        entry: Term record (camelCase keys).
        catalogs: Vocabulary and domain snapshots.
        peers: Entries checked for duplicates. The entry itself may be
            included; entries with the same id are ignored.
        check_duplicates: ``False`` in edit mode, skipping rules 2 and 3.
    """
    term_name = text(entry.get("termName"))
    column_name = text(entry.get("columnName"))
    domain_name = text(entry.get("domainName"))
    peers = list(peers)
    errors: list[TermValidationError] = []

    term_parts = split_parts(term_name)
    decomposable = len(term_parts) >= 2
    if not decomposable:
        errors.append(
            TermValidationError(TERM_NAME_LENGTH, "용어명은 2단어 이상의 조합이어야 합니다.", "termName")
        )

    if check_duplicates and decomposable and find_duplicates(entry, peers):
        errors.append(TermValidationError(TERM_NAME_DUPLICATE, "이미 존재하는 용어명입니다.", "termName"))

    if check_duplicates and term_name and column_name and domain_name:
        if find_duplicates(entry, peers, triple=True):
            errors.append(
                TermValidationError(
                    TERM_UNIQUENESS,
                    "동일한 용어명, 컬럼명, 도메인명 조합이 이미 존재합니다.",
                    "termName",
                )
            )

    term_unmapped: list[str] = []
    if decomposable:
        _, term_unmapped = unmapped_parts(term_name, catalogs.vocabulary_map)
        if term_unmapped:
            errors.append(
                TermValidationError(
                    TERM_NAME_MAPPING,
                    f"용어명의 다음 부분이 단어집에 등록되지 않았습니다: {', '.join(term_unmapped)}",
                    "termName",
                    details={"unmappedParts": term_unmapped},
                )
            )

    column_parts: list[str] = []
    column_unmapped: list[str] = []
    if column_name:
        column_parts, column_unmapped = unmapped_parts(column_name, catalogs.vocabulary_map)
        if column_unmapped:
            errors.append(
                TermValidationError(
                    COLUMN_NAME_MAPPING,
                    "컬럼명의 다음 부분이 단어집의 영문약어로 등록되지 않았습니다: "
                    f"{', '.join(column_unmapped)}",
                    "columnName",
                    details={"unmappedParts": column_unmapped},
                )
            )

    if decomposable and column_parts and not term_unmapped and not column_unmapped:
        order = check_column_order(term_parts, column_parts, catalogs)
        if order is not None:
            errors.append(
                TermValidationError(
                    TERM_COLUMN_ORDER_MISMATCH,
                    "용어명과 컬럼명의 단어 순서가 일치하지 않습니다. "
                    f"권장 컬럼명: {order['correctedColumnName']}",
                    "columnName",
                    details=order,
                )
            )

    if decomposable:
        suffix_message = check_suffix(term_parts, catalogs)
        if suffix_message:
            errors.append(TermValidationError(TERM_NAME_SUFFIX, suffix_message, "termName"))

    if domain_name and domain_name.lower() not in catalogs.domain_map:
        errors.append(
            TermValidationError(
                DOMAIN_NAME_MAPPING,
                f"도메인명 '{domain_name}'이(가) 도메인 목록에 존재하지 않습니다.",
                "domainName",
            )
        )

    return sort_errors(errors)


def status_for_errors(errors: list[TermValidationError]) -> int:
    """HTTP status of a failed single-entry validation (first error decides)."""
    if errors and errors[0].type in CONFLICT_TYPES:
        return 409
    return 400


def validate_all(
    entries: list[dict[str, Any]],
    catalogs: TermCatalogs,
) -> dict[str, Any]:
    """Validate every entry of one term file; duplicates are checked within the file."""
    from metacat.rules.autofix import suggest_fix

    failed: list[dict[str, Any]] = []
    for entry in entries:
        errors = validate_term(entry, catalogs, peers=entries)
        if not errors:
            continue
        result: dict[str, Any] = {"entry": entry, "errors": [e.to_dict() for e in errors]}
        suggestion = suggest_fix(entry, errors, catalogs, peers=entries)
        if suggestion is not None:
            result["suggestions"] = suggestion.to_dict()
        failed.append(result)

    return {
        "totalCount": len(entries),
        "passedCount": len(entries) - len(failed),
        "failedCount": len(failed),
        "failedEntries": failed,
    }

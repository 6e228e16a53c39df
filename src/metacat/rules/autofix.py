"""
Auto-fix suggestions for failed term validations.

``AUTO_FIX_RULES`` is an ordered list of ``(error type, rule)`` pairs. The
sorted errors of one entry are walked in priority order; each matching
rule may add reason text and may assign an action type. The walk stops at
the first error that assigned one, so a validation pass yields at most
one action.

Action types::

    DELETE_TERM            single-word term name
    DELETE_DUPLICATE       same term name / triple used by other entries
    SELECT_SYNONYM         unmapped word is a known synonym or forbidden word
    ADD_VOCABULARY         unmapped word should be registered
    FIX_COLUMN_NAME        column parts should use the term parts' abbreviations
    FIX_VOCABULARY_SUFFIX  suffix word exists but is not a formal word
    AUTO_FIX_TERM_EDITOR   domain name should be picked from the suffix category
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from metacat.core.keys import split_parts, text
from metacat.rules.terms import (
    COLUMN_NAME_MAPPING,
    DOMAIN_NAME_MAPPING,
    TERM_COLUMN_ORDER_MISMATCH,
    TERM_NAME_DUPLICATE,
    TERM_NAME_LENGTH,
    TERM_NAME_MAPPING,
    TERM_NAME_SUFFIX,
    TERM_UNIQUENESS,
    TermCatalogs,
    TermValidationError,
    find_duplicates,
    sort_errors,
)

_NON_ALNUM = re.compile(r"[^A-Z0-9]")


@dataclass(slots=True)
class AutoFixSuggestion:
    action_type: str | None = None
    reasons: list[str] = field(default_factory=list)
    column_name: str | None = None
    domain_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def reason(self) -> str:
        return "\n".join(self.reasons)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"reason": self.reason, "metadata": dict(self.metadata)}
        if self.action_type:
            result["actionType"] = self.action_type
        if self.column_name is not None:
            result["columnName"] = self.column_name
        if self.domain_name is not None:
            result["domainName"] = self.domain_name
        return result


@dataclass(frozen=True, slots=True)
class FixContext:
    """Everything a rule may look at besides the error itself."""

    entry: Mapping[str, Any]
    errors: list[TermValidationError]
    catalogs: TermCatalogs
    peers: list[Mapping[str, Any]]

    @property
    def term_name(self) -> str:
        return text(self.entry.get("termName"))

    @property
    def column_name(self) -> str:
        return text(self.entry.get("columnName"))

    @property
    def term_parts(self) -> list[str]:
        return split_parts(self.term_name)

    @property
    def column_parts(self) -> list[str]:
        return split_parts(self.column_name)

    def failed(self, error_type: str) -> bool:
        return any(e.type == error_type for e in self.errors)


FixRule = Callable[[FixContext, TermValidationError, AutoFixSuggestion], None]


def find_word_recommendations(word: str, vocabulary: Iterable[Mapping[str, Any]]) -> list[str]:
    """Standard names whose synonyms or forbidden words contain ``word``."""
    key = word.strip().lower()
    found: list[str] = []
    for entry in vocabulary:
        name = text(entry.get("standardName"))
        if not name:
            continue
        aliases = [*(entry.get("forbiddenWords") or []), *(entry.get("synonyms") or [])]
        if any(isinstance(a, str) and a.strip().lower() == key for a in aliases):
            if name not in found:
                found.append(name)
    return found


def find_domain_names_by_suffix(suffix: str, catalogs: TermCatalogs) -> list[str]:
    """Domain names whose category is the mapped category of the suffix word."""
    categories = {
        text(v.get("domainCategory")).lower()
        for v in catalogs.words_named(suffix)
        if text(v.get("domainCategory")) and v.get("isDomainCategoryMapped") is not False
    }
    names: list[str] = []
    for domain in catalogs.domains:
        category = text(domain.get("domainCategory")).lower()
        name = text(domain.get("standardDomainName"))
        if category in categories and name and name not in names:
            names.append(name)
    return names


# ── Rules ────────────────────────────────────────────────────────────────


def _delete_term(ctx: FixContext, error: TermValidationError, fix: AutoFixSuggestion) -> None:
    fix.reasons.append(
        f"용어명 '{ctx.term_name}'은(는) 2단어 이상의 조합이어야 합니다. "
        "현재 단일 단어로 등록되어 잘못된 등록으로 판별됩니다. 해당 항목을 삭제해주세요."
    )
    fix.action_type = "DELETE_TERM"


def _delete_duplicate(ctx: FixContext, error: TermValidationError, fix: AutoFixSuggestion) -> None:
    triple = error.type == TERM_UNIQUENESS
    duplicates = find_duplicates(ctx.entry, ctx.peers, triple=triple)
    if not duplicates:
        return
    ids = [str(d.get("id")) for d in duplicates]
    if triple:
        subject = (
            f"용어명 '{ctx.term_name}', 컬럼명 '{ctx.column_name}', "
            f"도메인명 '{text(ctx.entry.get('domainName'))}' 조합이"
        )
    else:
        subject = f"용어명 '{ctx.term_name}'은(는)"
    fix.reasons.append(
        f"{subject} 현재 파일 내에서 중복되어 사용되고 있습니다. "
        f"중복된 항목 ID: {', '.join(ids)}. 중복 항목 중 하나를 삭제해주세요."
    )
    fix.action_type = "DELETE_DUPLICATE"
    fix.metadata["duplicateEntryIds"] = [str(ctx.entry.get("id")), *ids]


def _map_term_parts(ctx: FixContext, error: TermValidationError, fix: AutoFixSuggestion) -> None:
    term_parts = ctx.term_parts
    column_parts = ctx.column_parts
    unmapped = [p for p in term_parts if p.lower() not in ctx.catalogs.vocabulary_map]
    if not unmapped:
        return

    with_synonyms: list[dict[str, Any]] = []
    advice: list[str] = []
    without: list[str] = []
    for part in unmapped:
        recommendations = find_word_recommendations(part, ctx.catalogs.vocabulary)
        if recommendations:
            with_synonyms.append({"part": part, "recommendations": recommendations})
            choices = "' 또는 '".join(recommendations)
            advice.append(f"'{part}' → 표준단어명 '{choices}'로 수정 권장")
        else:
            without.append(part)

    if with_synonyms:
        fix.reasons.extend(advice)
        fix.reasons.append(f"용어명의 다음 단어들이 단어집에 등록되지 않았습니다. {', '.join(advice)}.")
        fix.action_type = "SELECT_SYNONYM"
        fix.metadata["unmappedParts"] = with_synonyms
    if without:
        fix.reasons.append(
            f"용어명의 다음 단어들을 단어집에 표준단어명으로 추가해주세요: {', '.join(without)}."
        )
        if fix.action_type is None:
            to_add = []
            for part in without:
                idx = term_parts.index(part)
                abbreviation = (
                    column_parts[idx] if idx < len(column_parts) else _NON_ALNUM.sub("", part.upper())
                )
                to_add.append({"standardName": part, "abbreviation": abbreviation})
            fix.action_type = "ADD_VOCABULARY"
            fix.metadata["vocabularyFilename"] = ctx.catalogs.vocabulary_filename
            fix.metadata["vocabularyToAdd"] = to_add


def _map_column_parts(ctx: FixContext, error: TermValidationError, fix: AutoFixSuggestion) -> None:
    term_parts = ctx.term_parts
    column_parts = ctx.column_parts
    vmap = ctx.catalogs.vocabulary_map

    if len(term_parts) != len(column_parts):
        fix.reasons.append(
            f"용어명 '{ctx.term_name}'({len(term_parts)}개 단어)과 "
            f"컬럼명 '{ctx.column_name}'({len(column_parts)}개 단어)의 단어 개수가 일치하지 않습니다. "
            "용어명의 각 단어에 대응하는 영문약어로 컬럼명을 구성해야 합니다."
        )
        return

    if ctx.failed(TERM_NAME_MAPPING):
        unknown = [p for p in column_parts if p.lower() not in vmap]
        if unknown:
            fix.reasons.append(
                f"컬럼명의 다음 단어들을 단어집에 영문약어로 추가해주세요: {', '.join(unknown)}."
            )
        return

    fixes: list[dict[str, Any]] = []
    lines: list[str] = []
    for idx, part in enumerate(column_parts):
        if part.lower() in vmap:
            continue
        abbreviation = ctx.catalogs.abbreviation_of(term_parts[idx])
        if abbreviation is None:
            continue
        lines.append(
            f"컬럼명의 {idx + 1}번째 단어 '{part}' → 용어명의 {idx + 1}번째 단어 "
            f"'{term_parts[idx]}'에 해당하는 영문약어 '{abbreviation}'로 수정 권장"
        )
        fixes.append({"index": idx, "oldValue": part, "newValue": abbreviation})

    if fixes:
        fixed = list(column_parts)
        for item in fixes:
            fixed[item["index"]] = item["newValue"]
        fix.reasons.append(", ".join(lines))
        fix.action_type = "FIX_COLUMN_NAME"
        fix.metadata["columnNameFixes"] = fixes
        fix.column_name = "_".join(fixed)


def _reorder_column(ctx: FixContext, error: TermValidationError, fix: AutoFixSuggestion) -> None:
    details = error.details or {}
    corrected = details.get("correctedColumnName")
    if not corrected:
        return
    fix.reasons.append(
        f"컬럼명 '{ctx.column_name}'의 단어 순서가 용어명과 일치하지 않습니다. "
        f"'{corrected}'(으)로 수정 권장"
    )
    fix.action_type = "FIX_COLUMN_NAME"
    fix.metadata["columnNameFixes"] = [
        {"index": m["index"], "oldValue": m["actual"], "newValue": m["expected"]}
        for m in details.get("mismatches", [])
    ]
    fix.column_name = corrected


def _formal_suffix(ctx: FixContext, error: TermValidationError, fix: AutoFixSuggestion) -> None:
    suffix = ctx.term_parts[-1]
    words = ctx.catalogs.words_named(suffix)
    if not words:
        return
    word = words[0]
    if not ctx.failed(TERM_NAME_MAPPING) and not ctx.failed(COLUMN_NAME_MAPPING):
        fix.reasons.append(
            f"용어명의 접미사 '{suffix}'은(는) 단어집에 등록되어 있으며, 용어명 매핑과 컬럼명 매핑 검증을 "
            "통과했습니다. 그러나 형식단어여부가 N으로 설정되어 있어 접미사로 사용할 수 없습니다. "
            "형식단어여부를 Y로 변경해주세요."
        )
    else:
        fix.reasons.append(
            f"용어명의 접미사 '{suffix}'은(는) 형식단어여부가 N으로 설정되어 있어 사용할 수 없습니다. "
            "형식단어여부를 Y로 변경해주세요."
        )
    fix.action_type = "FIX_VOCABULARY_SUFFIX"
    fix.metadata.update(
        {
            "suffixWord": suffix,
            "vocabularyFilename": ctx.catalogs.vocabulary_filename,
            "vocabularyEntryId": word.get("id"),
            "vocabularyEntry": {
                "id": word.get("id"),
                "standardName": word.get("standardName"),
                "abbreviation": word.get("abbreviation"),
                "englishName": word.get("englishName"),
                "description": word.get("description") or "",
                "domainCategory": word.get("domainCategory"),
                "isFormalWord": word.get("isFormalWord"),
                "synonyms": word.get("synonyms"),
                "forbiddenWords": word.get("forbiddenWords"),
            },
        }
    )


def _pick_domain(ctx: FixContext, error: TermValidationError, fix: AutoFixSuggestion) -> None:
    parts = ctx.term_parts
    if not parts:
        return
    suffix = parts[-1]
    if not ctx.catalogs.words_named(suffix):
        return
    domain_name = text(ctx.entry.get("domainName"))
    names = find_domain_names_by_suffix(suffix, ctx.catalogs)
    lead = (
        f"용어명 접미사 '{suffix}'와(과) 매핑된 도메인명을 찾지 못했습니다. "
        f"혹은 도메인명 '{domain_name}'이(가) 존재하지 않습니다."
    )
    if names:
        fix.reasons.append(f"{lead} {', '.join(names)} 중 하나로 수정해주세요.")
        fix.metadata["recommendedDomainNames"] = names
        fix.domain_name = names[0]
    else:
        fix.reasons.append(f"{lead} 올바른 도메인명으로 수정해주세요.")
    fix.action_type = "AUTO_FIX_TERM_EDITOR"
    fix.metadata["suffixWord"] = suffix


AUTO_FIX_RULES: tuple[tuple[str, FixRule], ...] = (
    (TERM_NAME_LENGTH, _delete_term),
    (TERM_NAME_DUPLICATE, _delete_duplicate),
    (TERM_UNIQUENESS, _delete_duplicate),
    (TERM_NAME_MAPPING, _map_term_parts),
    (COLUMN_NAME_MAPPING, _map_column_parts),
    (TERM_COLUMN_ORDER_MISMATCH, _reorder_column),
    (TERM_NAME_SUFFIX, _formal_suffix),
    (DOMAIN_NAME_MAPPING, _pick_domain),
)


def suggest_fix(
    entry: Mapping[str, Any],
    errors: list[TermValidationError],
    catalogs: TermCatalogs,
    *,
    peers: Iterable[Mapping[str, Any]] = (),
) -> AutoFixSuggestion | None:
    """Walk the rules over the sorted errors; ``None`` when no reason was produced."""
    rules = dict(AUTO_FIX_RULES)
    ordered = sort_errors(errors)
    ctx = FixContext(entry=entry, errors=ordered, catalogs=catalogs, peers=list(peers))
    fix = AutoFixSuggestion()

    for error in ordered:
        if fix.action_type:
            break
        rule = rules.get(error.type)
        if rule is not None:
            rule(ctx, error, fix)

    return fix if fix.reasons else None

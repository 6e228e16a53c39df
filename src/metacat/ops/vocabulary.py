"""
Vocabulary operations: domain-group sync, duplicate detection and validation.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from metacat.core.errors import MetacatError
from metacat.core.keys import text
from metacat.core.logging import get_logger
from metacat.core.models import CatalogType, now_iso
from metacat.ops.context import OperationContext
from metacat.ops.requests import SyncVocabularyDomainRequest, ValidateVocabularyRequest
from metacat.ops.result import OperationResult, fail_from, start_timer
from metacat.rules.issues import others
from metacat.rules.sync import plan_vocabulary_domain_sync
from metacat.rules.vocabulary import CONFLICT_TYPES, WordIndex, validate_vocabulary, validate_word

logger = get_logger(__name__)

# fields compared when grouping duplicate words
DUPLICATE_FIELDS = ("standardName", "abbreviation", "englishName")


def sync_vocabulary_domain(
    ctx: OperationContext,
    request: SyncVocabularyDomainRequest,
) -> OperationResult[dict[str, Any]]:
    """Map each word's ``domainCategory`` to its domain group.

    On apply the vocabulary file is saved with ``mapping.domain`` pointing at
    the domain file used.
    """
    timer = start_timer()
    vocabulary_file = request.vocabulary_filename or "vocabulary.json"
    apply = request.apply and not ctx.dry_run

    try:
        domain_file = ctx.store.resolve_related(
            CatalogType.VOCABULARY, vocabulary_file, CatalogType.DOMAIN, request.domain_filename
        )
        domains = ctx.store.load_entries(CatalogType.DOMAIN, domain_file)
        applied = False
        with ctx.store.mutation(CatalogType.VOCABULARY, vocabulary_file):
            payload = ctx.store.load(CatalogType.VOCABULARY, vocabulary_file)
            plan = plan_vocabulary_domain_sync(payload.get("entries", []), domains, now=now_iso())
            if apply:
                mapping = {**(payload.get("mapping") or {}), "domain": domain_file}
                saved = {**payload, "entries": plan.entries, "mapping": mapping}
                ctx.store.save(CatalogType.VOCABULARY, saved, vocabulary_file)
                applied = True

        logger.info(
            "vocabulary_domain_synced",
            vocabulary=vocabulary_file,
            domain=domain_file,
            updated=plan.updated,
            applied=applied,
        )
        return OperationResult.ok(
            {
                "vocabularyFilename": vocabulary_file,
                "domainFilename": domain_file,
                **plan.summary(),
                "mode": "apply" if request.apply else "preview",
                "applied": applied,
            },
            elapsed_ms=timer.elapsed_ms,
            message=f"도메인 매핑 동기화 완료: 업데이트 {plan.updated}건",
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail(
            "INTERNAL", "단어집-도메인 동기화 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms
        )


def find_duplicate_vocabulary(
    ctx: OperationContext,
    filename: str | None = None,
) -> OperationResult[dict[str, Any]]:
    """Group words sharing a standardName, abbreviation or englishName (case-insensitive)."""
    timer = start_timer()

    try:
        entries = ctx.store.load_entries(CatalogType.VOCABULARY, filename)
        groups: list[dict[str, Any]] = []
        duplicate_ids: set[str] = set()
        for field in DUPLICATE_FIELDS:
            buckets: dict[str, list[dict[str, Any]]] = defaultdict(list)
            for entry in entries:
                value = text(entry.get(field)).lower()
                if value:
                    buckets[value].append(entry)
            for value, members in buckets.items():
                if len(members) < 2:
                    continue
                groups.append({"field": field, "value": value, "count": len(members), "entries": members})
                duplicate_ids.update(text(m.get("id")) for m in members)

        return OperationResult.ok(
            {
                "filename": filename or "vocabulary.json",
                "groups": groups,
                "groupCount": len(groups),
                "duplicateEntryCount": len(duplicate_ids),
            },
            elapsed_ms=timer.elapsed_ms,
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "중복 단어 조회 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


# ------------------------------------------------------------------ #
# Validation
# ------------------------------------------------------------------ #


def validate_vocabulary_entry(
    ctx: OperationContext,
    request: ValidateVocabularyRequest,
) -> OperationResult[dict[str, Any]]:
    """Validate one word before it is saved.

    Forbidden words and synonyms are checked across every vocabulary file,
    the abbreviation within ``filename`` only. The word being edited
    (``entry_id``) is excluded. Synonym and abbreviation clashes are 409,
    everything else 400.
    """
    timer = start_timer()

    standard_name = request.standard_name.strip()
    if not standard_name:
        return OperationResult.fail("VALIDATION_FAILED", "표준단어명이 필요합니다.", elapsed_ms=timer.elapsed_ms)

    draft: dict[str, Any] = {"standardName": standard_name, "abbreviation": request.abbreviation.strip()}
    if request.entry_id:
        draft["id"] = request.entry_id

    try:
        index = WordIndex.build(
            others(draft, ctx.store.load_entries(CatalogType.VOCABULARY, request.filename)),
            all_entries=others(draft, [e for _, e in ctx.store.load_all(CatalogType.VOCABULARY)]),
            forbidden_words=ctx.store.load_forbidden_words(),
        )
        issues = validate_word(draft, index, require_abbreviation=False)
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "Validation 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)

    if issues:
        first = issues[0]
        conflict = first.type in CONFLICT_TYPES
        logger.debug("word_validation_failed", word=standard_name, first=first.type, count=len(issues))
        return OperationResult.fail(
            "CONFLICT" if conflict else "VALIDATION_FAILED",
            first.message,
            details={"data": {"errors": [i.to_dict() for i in issues], "errorCount": len(issues)}},
            status=409 if conflict else 400,
            elapsed_ms=timer.elapsed_ms,
        )

    return OperationResult.ok(
        {"valid": True, "mode": "edit" if request.entry_id else "create"},
        elapsed_ms=timer.elapsed_ms,
        message="Validation passed",
    )


def validate_all_vocabulary(ctx: OperationContext, filename: str | None = None) -> OperationResult[dict[str, Any]]:
    """Validate every word of a vocabulary file against the file and the global forbidden list."""
    timer = start_timer()

    try:
        entries = ctx.store.load_entries(CatalogType.VOCABULARY, filename)
        result = validate_vocabulary(entries, ctx.store.load_forbidden_words())
        logger.info(
            "vocabulary_validated",
            filename=filename or "vocabulary.json",
            total=result["totalCount"],
            failed=result["failedCount"],
        )
        return OperationResult.ok(result, elapsed_ms=timer.elapsed_ms, message="Vocabulary validation completed")
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail(
            "INTERNAL", "단어집 유효성 검사 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms
        )

"""
Catalog entry operations.

Generic list/get/create/update/delete/upload for every catalog type.
Type-specific rules hook in at three points:

* uniqueness on create/update (abbreviation per vocabulary file, domain
  name across all domain files, term name/triple across all term files,
  merge key per design file);
* derived fields (domain ``standardDomainName``, term mapping flags);
* reference warnings on delete.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

import pydantic

from metacat.core.errors import MetacatError
from metacat.core.history import HistoryLog
from metacat.core.keys import split_parts, text
from metacat.core.logging import get_logger
from metacat.core.models import (
    DESIGN_TYPES,
    CatalogSpec,
    CatalogType,
    generate_domain_name,
    get_spec,
    new_id,
    now_iso,
)
from metacat.core.records import (
    SortKey,
    apply_filters,
    distinct_values,
    paginate,
    search,
    sort_records,
)
from metacat.ops.context import OperationContext
from metacat.ops.requests import ListEntriesRequest, UploadEntriesRequest
from metacat.ops.result import OperationResult, fail_from, start_timer
from metacat.rules.mapping import build_domain_map, build_vocabulary_map
from metacat.rules.sync import term_flags
from metacat.rules.terms import find_duplicates

logger = get_logger(__name__)


def _pydantic_errors(exc: pydantic.ValidationError) -> list[dict[str, Any]]:
    return [
        {
            "field": ".".join(str(p) for p in err.get("loc", ())),
            "message": err.get("msg", ""),
            "code": err.get("type", ""),
        }
        for err in exc.errors()
    ]


def _find(entries: Iterable[dict[str, Any]], entry_id: str) -> dict[str, Any] | None:
    for entry in entries:
        if entry.get("id") == entry_id:
            return entry
    return None


# ------------------------------------------------------------------ #
# List / get
# ------------------------------------------------------------------ #


def _sort_keys(sort_by: str | None, sort_order: str | None) -> list[SortKey]:
    fields = [f.strip() for f in (sort_by or "").split(",") if f.strip()]
    orders = [o.strip().lower() for o in (sort_order or "").split(",")]
    keys = []
    for idx, name in enumerate(fields):
        order = orders[idx] if idx < len(orders) and orders[idx] in ("asc", "desc") else "asc"
        keys.append(SortKey(name, order))
    return keys


def list_entries(ctx: OperationContext, request: ListEntriesRequest) -> OperationResult[dict[str, Any]]:
    """Search, filter, sort and page the entries of one catalog file."""
    timer = start_timer()

    try:
        spec = get_spec(request.catalog)
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)

    if request.page < 1:
        return OperationResult.fail(
            "VALIDATION_FAILED", "페이지 번호는 1 이상이어야 합니다.", elapsed_ms=timer.elapsed_ms
        )
    if not 1 <= request.limit <= spec.max_page_size:
        return OperationResult.fail(
            "VALIDATION_FAILED",
            f"페이지 크기는 1에서 {spec.max_page_size} 사이여야 합니다.",
            elapsed_ms=timer.elapsed_ms,
        )

    try:
        payload = ctx.store.load(spec.type, request.filename)
        entries = payload.get("entries", [])
        if spec.type is CatalogType.TERM:
            entries = _refresh_term_flags(ctx, entries, request.filename)
        records = search(
            entries,
            request.query,
            spec.search_fields,
            field=request.search_field,
            exact=request.exact,
        )
        records = apply_filters(records, request.filters)
        keys = _sort_keys(request.sort_by, request.sort_order)
        if keys:
            records = sort_records(records, keys)
        page = paginate(records, page=request.page, limit=request.limit)
        return OperationResult.ok(
            {
                "entries": page.items,
                "pagination": page.pagination(),
                "lastUpdated": payload.get("lastUpdated"),
            },
            elapsed_ms=timer.elapsed_ms,
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail(
            "INTERNAL", f"{spec.label} 데이터 조회 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms
        )


def get_entry(
    ctx: OperationContext,
    catalog: str,
    entry_id: str,
    *,
    filename: str | None = None,
) -> OperationResult[dict[str, Any]]:
    timer = start_timer()

    try:
        spec = get_spec(catalog)
        entry = _find(ctx.store.load_entries(spec.type, filename), entry_id)
        if entry is None:
            return OperationResult.fail(
                "NOT_FOUND", f"{spec.label} 항목을 찾을 수 없습니다.", elapsed_ms=timer.elapsed_ms
            )
        if spec.type is CatalogType.TERM:
            (entry,) = _refresh_term_flags(ctx, [entry], filename)
        return OperationResult.ok(entry, elapsed_ms=timer.elapsed_ms)
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "항목 조회 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def filter_options(
    ctx: OperationContext,
    catalog: str,
    *,
    filename: str | None = None,
) -> OperationResult[dict[str, list[str]]]:
    """Distinct values of every searchable field (column filter dropdowns)."""
    timer = start_timer()

    try:
        spec = get_spec(catalog)
        entries = ctx.store.load_entries(spec.type, filename)
        return OperationResult.ok(distinct_values(entries, spec.search_fields), elapsed_ms=timer.elapsed_ms)
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "필터 옵션 조회 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


# ------------------------------------------------------------------ #
# Type-specific hooks
# ------------------------------------------------------------------ #


def _conflict_message(
    ctx: OperationContext,
    spec: CatalogSpec,
    record: dict[str, Any],
    entries: list[dict[str, Any]],
    *,
    editing: bool,
) -> str | None:
    """Uniqueness violation message for ``record``, ``None`` when unique."""
    own_id = record.get("id")
    others = [e for e in entries if e.get("id") != own_id]

    if spec.type is CatalogType.VOCABULARY:
        key = text(record.get("abbreviation")).lower()
        if any(text(e.get("abbreviation")).lower() == key for e in others):
            return "이미 존재하는 영문약어입니다."
        return None

    if spec.type is CatalogType.DOMAIN:
        key = text(record.get("standardDomainName")).lower()
        for _, e in ctx.store.load_all(spec.type):
            if e.get("id") != own_id and text(e.get("standardDomainName")).lower() == key:
                return f"이미 존재하는 도메인명입니다: {record.get('standardDomainName')}"
        return None

    if spec.type is CatalogType.TERM:
        if editing:
            return None
        peers = [e for _, e in ctx.store.load_all(spec.type)]
        if len(split_parts(record.get("termName"))) >= 2 and find_duplicates(record, peers):
            return "이미 존재하는 용어명입니다."
        if text(record.get("domainName")) and find_duplicates(record, peers, triple=True):
            return "동일한 용어명, 컬럼명, 도메인명 조합이 이미 존재합니다."
        return None

    if spec.type in DESIGN_TYPES:
        key = spec.merge_key(record)
        if key.strip("|") and any(spec.merge_key(e) == key for e in others):
            return f"이미 존재하는 {spec.label} 항목입니다."
    return None


def _derive(ctx: OperationContext, spec: CatalogSpec, record: dict[str, Any], filename: str | None) -> None:
    if spec.type is CatalogType.DOMAIN:
        record["standardDomainName"] = generate_domain_name(
            record.get("domainCategory", ""),
            record.get("physicalDataType", ""),
            record.get("dataLength"),
            record.get("decimalPlaces"),
        )
    elif spec.type is CatalogType.TERM:
        vocabulary, domains = _term_references(ctx, filename)
        record.update(term_flags(record, build_vocabulary_map(vocabulary), build_domain_map(domains)))


def _term_references(
    ctx: OperationContext, filename: str | None
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    vocabulary_file = ctx.store.resolve_related(CatalogType.TERM, filename, CatalogType.VOCABULARY)
    domain_file = ctx.store.resolve_related(CatalogType.TERM, filename, CatalogType.DOMAIN)
    return (
        ctx.store.load_entries(CatalogType.VOCABULARY, vocabulary_file),
        ctx.store.load_entries(CatalogType.DOMAIN, domain_file),
    )


def _refresh_term_flags(
    ctx: OperationContext, entries: list[dict[str, Any]], filename: str | None
) -> list[dict[str, Any]]:
    """Term entries with mapping flags recomputed against the current vocabulary and domains."""
    vocabulary, domains = _term_references(ctx, filename)
    vocabulary_map, domain_map = build_vocabulary_map(vocabulary), build_domain_map(domains)
    return [{**e, **term_flags(e, vocabulary_map, domain_map)} for e in entries]


def _validate_model(spec: CatalogSpec, record: dict[str, Any]) -> dict[str, Any]:
    return spec.model.model_validate(record).to_record()


# ------------------------------------------------------------------ #
# Create / update / delete
# ------------------------------------------------------------------ #


def create_entry(
    ctx: OperationContext,
    catalog: str,
    data: dict[str, Any],
    *,
    filename: str | None = None,
) -> OperationResult[dict[str, Any]]:
    """Add one entry; the server assigns id and timestamps."""
    timer = start_timer()

    try:
        spec = get_spec(catalog)
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)

    now = now_iso()
    incoming = {k: v for k, v in data.items() if k not in ("id", "createdAt", "updatedAt")}
    try:
        record = _validate_model(spec, {**incoming, "id": new_id(), "createdAt": now, "updatedAt": now})
    except pydantic.ValidationError as exc:
        return OperationResult.fail(
            "VALIDATION_FAILED",
            "필수 항목이 누락되었거나 형식이 올바르지 않습니다.",
            details={"errors": _pydantic_errors(exc)},
            elapsed_ms=timer.elapsed_ms,
        )

    try:
        _derive(ctx, spec, record, filename)
        with ctx.store.mutation(spec.type, filename):
            payload = ctx.store.load(spec.type, filename)
            entries = list(payload.get("entries", []))
            conflict = _conflict_message(ctx, spec, record, entries, editing=False)
            if conflict:
                return OperationResult.fail("CONFLICT", conflict, elapsed_ms=timer.elapsed_ms)

            if ctx.dry_run:
                return OperationResult.ok(record, elapsed_ms=timer.elapsed_ms, metadata={"dry_run": True})

            ctx.store.save(spec.type, {**payload, "entries": [*entries, record]}, filename)
        ctx.history.record(spec.type, "add", record, filename=filename or spec.default_filename, after=record)
        logger.info("entry_created", catalog=spec.type.value, id=record["id"], request_id=ctx.request_id)
        return OperationResult.ok(
            record,
            elapsed_ms=timer.elapsed_ms,
            message=f"{spec.label} 항목이 추가되었습니다.",
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "항목 추가 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def update_entry(
    ctx: OperationContext,
    catalog: str,
    patch: dict[str, Any],
    *,
    filename: str | None = None,
) -> OperationResult[dict[str, Any]]:
    """Merge-patch one entry: absent or ``None`` fields keep their stored value."""
    timer = start_timer()

    entry_id = text(patch.get("id"))
    if not entry_id:
        return OperationResult.fail("VALIDATION_FAILED", "id가 필요합니다.", elapsed_ms=timer.elapsed_ms)

    try:
        spec = get_spec(catalog)
        with ctx.store.mutation(spec.type, filename):
            payload = ctx.store.load(spec.type, filename)
            entries = list(payload.get("entries", []))
            existing = _find(entries, entry_id)
            if existing is None:
                return OperationResult.fail(
                    "NOT_FOUND", f"{spec.label} 항목을 찾을 수 없습니다.", elapsed_ms=timer.elapsed_ms
                )

            changes = {k: v for k, v in patch.items() if v is not None and k not in ("id", "createdAt")}
            merged = {**existing, **changes, "updatedAt": now_iso()}
            try:
                record = _validate_model(spec, merged)
            except pydantic.ValidationError as exc:
                return OperationResult.fail(
                    "VALIDATION_FAILED",
                    "필수 항목이 누락되었거나 형식이 올바르지 않습니다.",
                    details={"errors": _pydantic_errors(exc)},
                    elapsed_ms=timer.elapsed_ms,
                )

            _derive(ctx, spec, record, filename)
            conflict = _conflict_message(ctx, spec, record, entries, editing=True)
            if conflict:
                return OperationResult.fail("CONFLICT", conflict, elapsed_ms=timer.elapsed_ms)

            if ctx.dry_run:
                return OperationResult.ok(record, elapsed_ms=timer.elapsed_ms, metadata={"dry_run": True})

            updated = [record if e.get("id") == entry_id else e for e in entries]
            ctx.store.save(spec.type, {**payload, "entries": updated}, filename)
        ctx.history.record(
            spec.type,
            "update",
            record,
            filename=filename or spec.default_filename,
            before=existing,
            after=record,
        )
        logger.info("entry_updated", catalog=spec.type.value, id=entry_id, request_id=ctx.request_id)
        return OperationResult.ok(
            record,
            elapsed_ms=timer.elapsed_ms,
            message=f"{spec.label} 항목이 수정되었습니다.",
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "항목 수정 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def delete_entry(
    ctx: OperationContext,
    catalog: str,
    entry_id: str | None,
    *,
    filename: str | None = None,
    force: bool = False,
) -> OperationResult[dict[str, Any]]:
    """Delete one entry. References from other catalogs are reported as warnings."""
    timer = start_timer()

    if not entry_id:
        return OperationResult.fail("VALIDATION_FAILED", "id가 필요합니다.", elapsed_ms=timer.elapsed_ms)

    try:
        spec = get_spec(catalog)
        with ctx.store.mutation(spec.type, filename):
            payload = ctx.store.load(spec.type, filename)
            entries = list(payload.get("entries", []))
            existing = _find(entries, entry_id)
            if existing is None:
                return OperationResult.fail(
                    "NOT_FOUND", f"{spec.label} 항목을 찾을 수 없습니다.", elapsed_ms=timer.elapsed_ms
                )

            references = [] if force else find_references(ctx, spec.type, existing)
            warnings = [
                f"{get_spec(r['type']).label} 파일 '{r['filename']}'의 '{r['label']}' 항목이 참조하고 있습니다."
                for r in references
            ]

            if ctx.dry_run:
                return OperationResult.ok(
                    {"deleted": existing, "references": references},
                    warnings=warnings,
                    elapsed_ms=timer.elapsed_ms,
                    metadata={"dry_run": True},
                )

            remaining = [e for e in entries if e.get("id") != entry_id]
            ctx.store.save(spec.type, {**payload, "entries": remaining}, filename)
        ctx.history.record(spec.type, "delete", existing, filename=filename or spec.default_filename, before=existing)
        logger.info(
            "entry_deleted",
            catalog=spec.type.value,
            id=entry_id,
            references=len(references),
            request_id=ctx.request_id,
        )
        return OperationResult.ok(
            {"deleted": existing, "references": references},
            warnings=warnings,
            elapsed_ms=timer.elapsed_ms,
            message=f"{spec.label} 항목이 삭제되었습니다.",
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "항목 삭제 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


# ------------------------------------------------------------------ #
# References
# ------------------------------------------------------------------ #


def _matching(
    ctx: OperationContext,
    catalog: CatalogType,
    label_field: str,
    predicate: Callable[[dict[str, Any]], bool],
) -> list[dict[str, Any]]:
    found = []
    for name, entry in ctx.store.load_all(catalog):
        if predicate(entry):
            found.append(
                {
                    "type": catalog.value,
                    "filename": name,
                    "id": entry.get("id"),
                    "label": text(entry.get(label_field)) or text(entry.get("id")),
                }
            )
    return found


def find_references(ctx: OperationContext, catalog: CatalogType, entry: dict[str, Any]) -> list[dict[str, Any]]:
    """Entries of other catalogs that point at ``entry``."""

    def same(a: Any, b: Any) -> bool:
        return bool(text(a)) and text(a).lower() == text(b).lower()

    if catalog is CatalogType.VOCABULARY:
        words = {text(entry.get("standardName")).lower(), text(entry.get("abbreviation")).lower()} - {""}

        def uses_word(term: dict[str, Any]) -> bool:
            parts = split_parts(term.get("termName")) + split_parts(term.get("columnName"))
            return any(p.lower() in words for p in parts)

        return _matching(ctx, CatalogType.TERM, "termName", uses_word)

    if catalog is CatalogType.DOMAIN:
        name = entry.get("standardDomainName")
        return _matching(ctx, CatalogType.TERM, "termName", lambda t: same(t.get("domainName"), name)) + _matching(
            ctx, CatalogType.COLUMN, "columnEnglishName", lambda c: same(c.get("domainName"), name)
        )

    if catalog is CatalogType.TERM:
        column = entry.get("columnName")
        return _matching(
            ctx, CatalogType.COLUMN, "columnEnglishName", lambda c: same(c.get("columnEnglishName"), column)
        )

    if catalog is CatalogType.DATABASE:
        logical, physical = entry.get("logicalDbName"), entry.get("physicalDbName")
        return _matching(
            ctx, CatalogType.ENTITY, "entityName", lambda e: same(e.get("logicalDbName"), logical)
        ) + _matching(ctx, CatalogType.TABLE, "tableEnglishName", lambda t: same(t.get("physicalDbName"), physical))

    if catalog is CatalogType.ENTITY:
        schema, name = entry.get("schemaName"), entry.get("entityName")
        return _matching(
            ctx,
            CatalogType.ATTRIBUTE,
            "attributeName",
            lambda a: same(a.get("schemaName"), schema) and same(a.get("entityName"), name),
        ) + _matching(
            ctx,
            CatalogType.TABLE,
            "tableEnglishName",
            lambda t: same(t.get("schemaName"), schema) and same(t.get("relatedEntityName"), name),
        )

    if catalog is CatalogType.TABLE:
        schema, name = entry.get("schemaName"), entry.get("tableEnglishName")
        return _matching(
            ctx,
            CatalogType.COLUMN,
            "columnEnglishName",
            lambda c: same(c.get("schemaName"), schema) and same(c.get("tableEnglishName"), name),
        )

    return []


# ------------------------------------------------------------------ #
# Upload
# ------------------------------------------------------------------ #


def prepare_entries(
    ctx: OperationContext,
    spec: CatalogSpec,
    raw: Iterable[dict[str, Any]],
    filename: str | None,
) -> tuple[list[dict[str, Any]], int]:
    """Validate uploaded records; returns ``(valid records, skipped count)``."""
    now = now_iso()
    prepared: list[dict[str, Any]] = []
    skipped = 0
    vocabulary_map = domain_map = None
    if spec.type is CatalogType.TERM:
        vocabulary, domains = _term_references(ctx, filename)
        vocabulary_map, domain_map = build_vocabulary_map(vocabulary), build_domain_map(domains)

    for item in raw:
        if not isinstance(item, dict):
            skipped += 1
            continue
        base = {"id": new_id(), "createdAt": now, "updatedAt": now}
        try:
            record = _validate_model(spec, {**base, **{k: v for k, v in item.items() if v is not None}})
        except pydantic.ValidationError:
            skipped += 1
            continue
        if spec.type is CatalogType.DOMAIN and not text(record.get("standardDomainName")):
            _derive(ctx, spec, record, filename)
        elif spec.type is CatalogType.TERM:
            record.update(term_flags(record, vocabulary_map, domain_map))
        prepared.append(record)
    return prepared, skipped


def upload_entries(ctx: OperationContext, request: UploadEntriesRequest) -> OperationResult[dict[str, Any]]:
    """Merge (or replace) a batch of entries into a catalog file."""
    timer = start_timer()

    try:
        spec = get_spec(request.catalog)
        entries, skipped = prepare_entries(ctx, spec, request.entries, request.filename)
        if not entries:
            return OperationResult.fail(
                "VALIDATION_FAILED",
                f"업로드할 유효한 {spec.label} 데이터가 없습니다.",
                details={"skipped": skipped},
                elapsed_ms=timer.elapsed_ms,
            )
        result = merge_prepared(ctx, spec, entries, skipped, filename=request.filename, replace=request.replace)
        result.elapsed_ms = timer.elapsed_ms
        return result
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "업로드 처리 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def merge_prepared(
    ctx: OperationContext,
    spec: CatalogSpec,
    entries: list[dict[str, Any]],
    skipped: int,
    *,
    filename: str | None,
    replace: bool,
) -> OperationResult[dict[str, Any]]:
    """Merge already validated entries and log one ``UPLOAD_MERGE`` history record.

    Store errors propagate to the calling operation.
    """
    name = filename or spec.default_filename
    if ctx.dry_run:
        return OperationResult.ok(
            {"filename": name, "uploaded": len(entries), "skipped": skipped, "replace": replace},
            metadata={"dry_run": True},
        )

    saved = ctx.store.merge(spec.type, entries, replace=replace, filename=filename)
    ctx.history.add(
        spec.type,
        HistoryLog(
            action="UPLOAD_MERGE",
            target_id=name,
            target_name=name,
            filename=name,
            details={"count": len(entries), "replace": replace},
        ),
    )
    logger.info("entries_uploaded", catalog=spec.type.value, filename=name, count=len(entries), skipped=skipped)
    warnings = [f"유효하지 않은 {skipped}개 항목을 건너뛰었습니다."] if skipped else []
    return OperationResult.ok(
        {
            "filename": name,
            "uploaded": len(entries),
            "skipped": skipped,
            "replace": replace,
            "totalCount": saved["totalCount"],
        },
        warnings=warnings,
        message=f"{len(entries)}개의 {spec.label} 항목이 업로드되었습니다.",
    )

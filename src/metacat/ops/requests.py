"""
Typed request objects for operations.

Each dataclass represents the *input* contract for a single operation
function. Requests carry only validated, transport-agnostic data: no raw
HTTP bodies, no typer params.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ------------------------------------------------------------------ #
# Catalog entries
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class ListEntriesRequest:
    """Request for :func:`metacat.ops.catalog.list_entries`.

    Attributes:
        catalog: Catalog type value (``"vocabulary"``, ``"term"``, …).
        filename: File to list; ``None`` → the type's default file.
        page: 1-based page number.
        limit: Page size (bounded per catalog type).
        sort_by: Comma-separated field names.
        sort_order: Comma-separated ``asc``/``desc`` values, one per field.
        query: Search text.
        search_field: Field to search; ``None`` or ``"all"`` → every searchable field.
        exact: Exact instead of substring match.
        filters: Column filters (``{field: contains-text}``).
    """

    catalog: str
    filename: str | None = None
    page: int = 1
    limit: int = 20
    sort_by: str | None = None
    sort_order: str | None = None
    query: str | None = None
    search_field: str | None = None
    exact: bool = False
    filters: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class UploadEntriesRequest:
    """Request for :func:`metacat.ops.catalog.upload_entries`."""

    catalog: str
    entries: list[dict[str, Any]] = field(default_factory=list)
    filename: str | None = None
    replace: bool = False


# ------------------------------------------------------------------ #
# Term validation / sync
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class ValidateTermRequest:
    """Request for :func:`metacat.ops.terms.validate_term_entry`.

    ``entry_id`` switches to edit mode (duplicate checks skipped).
    """

    term_name: str = ""
    column_name: str = ""
    domain_name: str = ""
    filename: str | None = None
    entry_id: str | None = None


@dataclass(frozen=True, slots=True)
class SyncTermsRequest:
    filename: str | None = None
    apply: bool = True


@dataclass(frozen=True, slots=True)
class SyncColumnsRequest:
    """Request for :func:`metacat.ops.columns.sync_column_terms`.

    Unset filenames resolve through the column file's mapping, then the
    term file's mapping, then the defaults.
    """

    column_filename: str | None = None
    term_filename: str | None = None
    domain_filename: str | None = None
    apply: bool = True


@dataclass(frozen=True, slots=True)
class SyncVocabularyDomainRequest:
    vocabulary_filename: str | None = None
    domain_filename: str | None = None
    apply: bool = True


# ------------------------------------------------------------------ #
# Vocabulary / domain validation, term generation
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class ValidateVocabularyRequest:
    """Request for :func:`metacat.ops.vocabulary.validate_vocabulary_entry`.

    ``entry_id`` excludes the word being edited from every check.
    """

    standard_name: str = ""
    abbreviation: str = ""
    filename: str | None = None
    entry_id: str | None = None


@dataclass(frozen=True, slots=True)
class ValidateDomainRequest:
    """Request for :func:`metacat.ops.domains.validate_domain_entry`."""

    domain_category: str = ""
    physical_data_type: str = ""
    data_length: str | None = None
    decimal_places: str | None = None
    entry_id: str | None = None


@dataclass(frozen=True, slots=True)
class GenerateTermRequest:
    """Request for :mod:`metacat.ops.generator`.

    ``direction`` is ``ko-to-en`` or ``en-to-ko``; ``filename`` names the
    vocabulary file the words come from.
    """

    term: str = ""
    direction: str = "ko-to-en"
    filename: str | None = None


@dataclass(frozen=True, slots=True)
class RecommendDomainRequest:
    term_name: str = ""
    filename: str | None = None


# ------------------------------------------------------------------ #
# Design relations
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class RelationFilesRequest:
    """Design files to check. Unset → first listed file of the type."""

    database_file: str | None = None
    entity_file: str | None = None
    attribute_file: str | None = None
    table_file: str | None = None
    column_file: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {
            "database": self.database_file,
            "entity": self.entity_file,
            "attribute": self.attribute_file,
            "table": self.table_file,
            "column": self.column_file,
        }


@dataclass(frozen=True, slots=True)
class SyncRelationsRequest:
    files: RelationFilesRequest = field(default_factory=RelationFilesRequest)
    apply: bool = False


# ------------------------------------------------------------------ #
# Report / alignment
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class ValidationReportRequest:
    term_file: str | None = None
    files: RelationFilesRequest = field(default_factory=RelationFilesRequest)


@dataclass(frozen=True, slots=True)
class AlignmentRequest:
    """Request for :func:`metacat.orchestration.alignment.run_alignment`."""

    apply: bool = True
    vocabulary_filename: str = "vocabulary.json"
    domain_filename: str = "domain.json"
    term_filename: str = "term.json"
    column_filename: str = "column.json"
    files: RelationFilesRequest = field(default_factory=RelationFilesRequest)

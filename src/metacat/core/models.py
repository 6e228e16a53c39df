"""
Catalog entry models and the per-type catalog registry.

Entries are persisted as camelCase JSON objects. In Python they are
validated through pydantic models whose attributes are snake_case with
camelCase aliases; unknown keys are preserved (``extra="allow"``) so a
round-trip through the API never drops data.

``CATALOGS`` maps every :class:`CatalogType` to a :class:`CatalogSpec`
describing its default file, required fields, merge identity, searchable
fields and the catalog types its files may point at through ``mapping``.

Examples:
    >>> spec = get_spec("vocabulary")
    >>> spec.default_filename
    'vocabulary.json'
    >>> spec.merge_key({"standardName": "사용자", "abbreviation": "USER", "englishName": "User"})
    '사용자|user|user'
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel


def now_iso() -> str:
    """UTC timestamp in ISO-8601 with millisecond precision and ``Z`` suffix."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_id() -> str:
    return str(uuid.uuid4())


class CatalogType(str, Enum):
    """Every catalog kind managed by metacat."""

    VOCABULARY = "vocabulary"
    DOMAIN = "domain"
    TERM = "term"
    DATABASE = "database"
    ENTITY = "entity"
    ATTRIBUTE = "attribute"
    TABLE = "table"
    COLUMN = "column"


DESIGN_TYPES: tuple[CatalogType, ...] = (
    CatalogType.DATABASE,
    CatalogType.ENTITY,
    CatalogType.ATTRIBUTE,
    CatalogType.TABLE,
    CatalogType.COLUMN,
)

HISTORY_FILENAME = "history.json"
BACKUP_MARKER = "_backup_"
# global forbidden-word list, kept beside the vocabulary files
FORBIDDEN_WORDS_FILENAME = "forbidden-words.json"

# ── Field types ──────────────────────────────────────────────────────────


def _stringify_number(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return str(value)
    return value


RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
LooseText = Annotated[str | None, BeforeValidator(_stringify_number)]


# ── Entry models ─────────────────────────────────────────────────────────


class CatalogEntry(BaseModel):
    """Fields shared by every catalog entry."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str = Field(default_factory=new_id)
    created_at: str | None = None
    updated_at: str | None = None

    def to_record(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase form, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class VocabularyEntry(CatalogEntry):
    standard_name: RequiredText
    abbreviation: RequiredText
    english_name: RequiredText
    description: str = ""
    domain_category: str | None = None
    domain_group: str | None = None
    is_domain_category_mapped: bool = False
    is_formal_word: bool | None = None
    synonyms: list[str] | None = None
    forbidden_words: list[str] | None = None


class DomainEntry(CatalogEntry):
    domain_group: RequiredText
    domain_category: RequiredText
    physical_data_type: RequiredText
    standard_domain_name: str | None = None
    data_length: LooseText = None
    decimal_places: LooseText = None
    measurement_unit: str | None = None
    revision: LooseText = None
    description: str | None = None
    storage_format: str | None = None
    display_format: str | None = None
    allowed_values: str | None = None


class TermEntry(CatalogEntry):
    term_name: RequiredText
    column_name: RequiredText
    domain_name: str = ""
    is_mapped_term: bool = False
    is_mapped_column: bool = False
    is_mapped_domain: bool = False
    unmapped_term_parts: list[str] | None = None
    unmapped_column_parts: list[str] | None = None


class DatabaseEntry(CatalogEntry):
    organization_name: RequiredText
    department_name: str | None = None
    applied_task: str | None = None
    related_law: str | None = None
    build_date: str | None = None
    os_info: str | None = None
    exclusion_reason: str | None = None
    logical_db_name: str | None = None
    physical_db_name: str | None = None
    db_description: str | None = None
    dbms_info: str | None = None


class EntityEntry(CatalogEntry):
    super_type_entity_name: str | None = None
    logical_db_name: str | None = None
    schema_name: str | None = None
    entity_name: str | None = None
    entity_description: str | None = None
    primary_identifier: str | None = None
    table_korean_name: str | None = None


class AttributeEntry(CatalogEntry):
    required_input: str | None = None
    ref_entity_name: str | None = None
    schema_name: str | None = None
    entity_name: str | None = None
    attribute_name: str | None = None
    attribute_type: str | None = None
    identifier_flag: str | None = None
    ref_attribute_name: str | None = None
    attribute_description: str | None = None


class TableEntry(CatalogEntry):
    business_classification: str | None = None
    table_volume: LooseText = None
    non_public_reason: str | None = None
    open_data_list: str | None = None
    physical_db_name: str | None = None
    table_owner: str | None = None
    subject_area: str | None = None
    schema_name: str | None = None
    table_english_name: str | None = None
    table_korean_name: str | None = None
    table_type: str | None = None
    related_entity_name: str | None = None
    table_description: str | None = None
    retention_period: str | None = None
    occurrence_cycle: str | None = None
    public_flag: str | None = None


class ColumnEntry(CatalogEntry):
    scope_flag: str | None = None
    subject_area: str | None = None
    schema_name: str | None = None
    table_english_name: str | None = None
    column_english_name: str | None = None
    column_korean_name: str | None = None
    column_description: str | None = None
    related_entity_name: str | None = None
    domain_name: str | None = None
    data_type: str | None = None
    data_length: LooseText = None
    data_decimal_length: LooseText = None
    data_format: str | None = None
    not_null_flag: str | None = None
    pk_info: str | None = None
    fk_info: str | None = None
    index_name: str | None = None
    index_order: LooseText = None
    ak_info: str | None = None
    constraint: str | None = None
    personal_info_flag: str | None = None
    encryption_flag: str | None = None
    public_flag: str | None = None


# ── Registry ─────────────────────────────────────────────────────────────


def _text(entry: Mapping[str, Any], key: str) -> str:
    value = entry.get(key)
    if value is None:
        return ""
    return str(value).strip()


@dataclass(frozen=True, slots=True)
class CatalogSpec:
    """Static description of one catalog type.

    Attributes:
        type: The catalog type.
        model: Pydantic model validating new entries.
        label: Korean display name used in messages.
        required: Field names that must be non-empty for a stored entry.
        merge_fields: Fields forming the lower-cased merge identity.
        search_fields: Fields searched when ``field`` is ``all``.
        name_field: Field used as ``targetName`` in history logs.
        related: Catalog types a file of this type may map to.
        unique_within_file: Fields whose (lower-cased) value must be unique in a file.
        max_page_size: Upper bound of ``limit`` on list endpoints.
    """

    type: CatalogType
    model: type[CatalogEntry]
    label: str
    required: tuple[str, ...]
    merge_fields: tuple[str, ...]
    search_fields: tuple[str, ...]
    name_field: str
    related: tuple[CatalogType, ...] = ()
    unique_within_file: tuple[str, ...] = ()
    max_page_size: int = 100

    @property
    def default_filename(self) -> str:
        return f"{self.type.value}.json"

    def merge_key(self, entry: Mapping[str, Any]) -> str:
        return "|".join(_text(entry, f).lower() for f in self.merge_fields)

    def is_valid(self, entry: Any) -> bool:
        if not isinstance(entry, Mapping):
            return False
        return all(_text(entry, f) for f in self.required)

    def default_mapping(self) -> dict[str, str]:
        return {t.value: f"{t.value}.json" for t in self.related}

    def create_default(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"entries": [], "lastUpdated": now_iso(), "totalCount": 0}
        if self.type in (CatalogType.VOCABULARY, CatalogType.TERM):
            payload["mapping"] = self.default_mapping()
        return payload

    def display_name(self, entry: Mapping[str, Any]) -> str:
        return _text(entry, self.name_field) or _text(entry, "id")


_COMMON_REQUIRED = ("id", "createdAt")

CATALOGS: dict[CatalogType, CatalogSpec] = {
    CatalogType.VOCABULARY: CatalogSpec(
        type=CatalogType.VOCABULARY,
        model=VocabularyEntry,
        label="단어집",
        required=("id", "standardName", "abbreviation", "englishName", "createdAt"),
        merge_fields=("standardName", "abbreviation", "englishName"),
        search_fields=("standardName", "abbreviation", "englishName", "description"),
        name_field="standardName",
        related=(CatalogType.DOMAIN,),
        unique_within_file=("abbreviation",),
        max_page_size=1000,
    ),
    CatalogType.DOMAIN: CatalogSpec(
        type=CatalogType.DOMAIN,
        model=DomainEntry,
        label="도메인",
        required=(
            "id",
            "domainGroup",
            "domainCategory",
            "standardDomainName",
            "physicalDataType",
            "createdAt",
        ),
        merge_fields=("domainGroup", "domainCategory", "standardDomainName"),
        search_fields=("domainGroup", "domainCategory", "standardDomainName", "physicalDataType"),
        name_field="standardDomainName",
    ),
    CatalogType.TERM: CatalogSpec(
        type=CatalogType.TERM,
        model=TermEntry,
        label="용어",
        required=("id", "termName", "columnName", "createdAt"),
        merge_fields=("termName", "columnName", "domainName"),
        search_fields=("termName", "columnName", "domainName"),
        name_field="termName",
        related=(CatalogType.VOCABULARY, CatalogType.DOMAIN),
    ),
    CatalogType.DATABASE: CatalogSpec(
        type=CatalogType.DATABASE,
        model=DatabaseEntry,
        label="데이터베이스 정의서",
        required=("id", "organizationName", "createdAt"),
        merge_fields=("organizationName", "logicalDbName"),
        search_fields=("organizationName", "departmentName", "logicalDbName", "physicalDbName"),
        name_field="logicalDbName",
    ),
    CatalogType.ENTITY: CatalogSpec(
        type=CatalogType.ENTITY,
        model=EntityEntry,
        label="엔터티 정의서",
        required=_COMMON_REQUIRED,
        merge_fields=("schemaName", "entityName"),
        search_fields=("logicalDbName", "schemaName", "entityName", "tableKoreanName"),
        name_field="entityName",
        related=(CatalogType.DATABASE,),
    ),
    CatalogType.ATTRIBUTE: CatalogSpec(
        type=CatalogType.ATTRIBUTE,
        model=AttributeEntry,
        label="속성 정의서",
        required=_COMMON_REQUIRED,
        merge_fields=("schemaName", "entityName", "attributeName"),
        search_fields=("schemaName", "entityName", "attributeName", "attributeType"),
        name_field="attributeName",
        related=(CatalogType.ENTITY,),
    ),
    CatalogType.TABLE: CatalogSpec(
        type=CatalogType.TABLE,
        model=TableEntry,
        label="테이블 정의서",
        required=_COMMON_REQUIRED,
        merge_fields=("schemaName", "tableEnglishName"),
        search_fields=("physicalDbName", "schemaName", "tableEnglishName", "tableKoreanName"),
        name_field="tableEnglishName",
        related=(CatalogType.DATABASE, CatalogType.ENTITY),
    ),
    CatalogType.COLUMN: CatalogSpec(
        type=CatalogType.COLUMN,
        model=ColumnEntry,
        label="컬럼 정의서",
        required=_COMMON_REQUIRED,
        merge_fields=("schemaName", "tableEnglishName", "columnEnglishName"),
        search_fields=(
            "schemaName",
            "tableEnglishName",
            "columnEnglishName",
            "columnKoreanName",
            "dataType",
        ),
        name_field="columnEnglishName",
        related=(CatalogType.TABLE, CatalogType.TERM, CatalogType.DOMAIN),
    ),
}

# Files that may never be renamed or deleted, regardless of type.
PROTECTED_FILENAMES = frozenset({"vocabulary.json", "domain.json", "term.json", HISTORY_FILENAME})


def get_spec(catalog: CatalogType | str) -> CatalogSpec:
    """Look up the spec for a catalog type (enum or its string value)."""
    try:
        return CATALOGS[CatalogType(catalog)]
    except ValueError as exc:
        from metacat.core.errors import ValidationError

        raise ValidationError(f"지원하지 않는 데이터 타입입니다: {catalog}") from exc


def generate_domain_name(
    category: str,
    physical_type: str,
    length: Any = None,
    decimal: Any = None,
) -> str:
    """Build ``{category}_{type}[({length})][.{decimal}]``.

    >>> generate_domain_name("명", "VARCHAR", 20)
    '명_VARCHAR(20)'
    >>> generate_domain_name("금액", "NUMBER", "15", "2")
    '금액_NUMBER(15).2'
    """
    name = f"{str(category).strip()}_{str(physical_type).strip()}"
    length_text = "" if length is None else str(length).strip()
    decimal_text = "" if decimal is None else str(decimal).strip()
    if length_text:
        name += f"({length_text})"
    if decimal_text:
        name += f".{decimal_text}"
    return name

"""
metacat.rules — pure rule engines over catalog snapshots.

- :mod:`~metacat.rules.mapping`: word-mapping of term/column/domain names
- :mod:`~metacat.rules.terms`: term validator (eight prioritized rules)
- :mod:`~metacat.rules.autofix`: ordered auto-fix rules
- :mod:`~metacat.rules.vocabulary`: vocabulary validator (required, forbidden, synonym, abbreviation)
- :mod:`~metacat.rules.domains`: domain validator (required, generated name, duplicate)
- :mod:`~metacat.rules.generator`: term conversion, word segmentation, domain recommendation
- :mod:`~metacat.rules.sync`: column, term and vocabulary→domain sync planners
- :mod:`~metacat.rules.relations`: design-relation validation and sync plan

Nothing here performs I/O.
"""

from metacat.rules.mapping import TermMappingResult, check_term_mapping
from metacat.rules.terms import TermCatalogs, TermValidationError, validate_all, validate_term

__all__ = [
    "TermCatalogs",
    "TermMappingResult",
    "TermValidationError",
    "check_term_mapping",
    "validate_all",
    "validate_term",
]

"""
metacat — metadata catalog manager.

Manages vocabulary, domain, term and database-design catalogs stored as
named JSON files, and keeps them consistent through validation and a
multi-stage synchronization pipeline.
"""

__version__ = "0.3.0"

"""API routers package.

Each router module owns one API concern (catalog entries, files, term
validation, sync, reports) and delegates to ``metacat.ops`` for the
business logic.
"""

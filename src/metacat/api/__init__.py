"""
metacat.api — FastAPI transport over the ops layer.

Usage::

    from metacat.api.app import create_app

    app = create_app()
"""

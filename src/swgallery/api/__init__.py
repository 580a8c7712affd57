"""swgallery HTTP layer.

Modules
-------
main
    FastAPI host application and the ``main()`` CLI entry point.
models
    Pydantic models for upload validation and response bodies.
"""

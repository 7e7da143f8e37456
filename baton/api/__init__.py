"""Application layer wiring pipelines into the HTTP router.

- **app**: ``App`` and ``Group``, route registration and serving
- **errors**: Default and JSON error renderers
- **middleware**: Built-in pipeline middleware
- **schemas**: Pydantic models for error bodies
"""

"""The per-request pipeline.

- **context**: Execution context and the ``next()`` pipeline executor
- **binding**: Field binder and the query/path/body binding engine
- **responses**: Response types and the status-observing writer
"""

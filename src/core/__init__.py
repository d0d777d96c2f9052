"""
Core components of the pass admin application.

- Configuration (config.py)
- Structured logging (logging_config.py)
- Typed JSON bags and request bodies (schemas.py)
- Database access (database/)
"""

"""Database module for the pass admin application.

Key components:
- db_config.py: DATABASE_URL parsing and connection string
- database_session.py: Engine and session management
- json_type.py: JSONB column type
- models.py: SQLAlchemy ORM models for all entities
"""

"""
The `config` package of the database layer.

Contents:
    - connection_engine: `create_connection_engine(url)`, shared MetaData and the declarative base for ORM models
"""

"""
The `database` package is responsible for the client's only durable state:
the bearer token.

Contents:
    - config:
        SQLAlchemy engine factory, shared MetaData and declarative base.

    - entities:
        `StoredCredential`, the key/value row holding the token.

    - daos:
        `CredentialDao`, fetch / upsert / delete operations.

    - helpers:
        `@transactional`, session lifecycle management.

    - core:
        `TokenStorage` contract with its in-memory and SQL implementations.
"""

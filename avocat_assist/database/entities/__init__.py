"""
Entities Package — SQLAlchemy 2.0 ORM Models

Contents
--------
- StoredCredential
    Key/value row persisting the bearer token.
    * Fields: `key` (PK), `value`, `updated_at` (UTC, tz-aware)
"""

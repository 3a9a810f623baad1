"""
DAOs Package — Data Access Layer (SQLAlchemy 2.0)

Conventions
-----------
- Session lifecycle (open/commit/rollback) is handled by callers
- DAOs surface exceptions so upper layers decide error policy

Contents
--------
- CredentialDao
    * fetchCredential(session, key)
    * upsertCredential(session, key, value)
    * deleteCredential(session, key)
"""

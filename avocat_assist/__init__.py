"""
AvocatAssist client library: session, role guards, conversation threads and
document attachments of the AvocatAssist legal platform.

Contents
--------
- app
    `AvocatAssist`, the composition root.
- api
    HTTP adapter (httpx), pydantic models, error taxonomy, resources.
- auth
    Session store, notifications and route guards.
- chat
    Thread reconciliation, message exchange and the chat workflow.
- documents
    Uploads with progress, downloads.
- database
    SQLAlchemy credential storage.
- config
    pydantic-settings configuration and logging setup.
"""

from avocat_assist.app import AvocatAssist

__all__ = ["AvocatAssist"]

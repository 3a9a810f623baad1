"""Typed wrappers around the project and legal-request endpoints."""

from typing import List

from avocat_assist.api.http_client import ApiClient
from avocat_assist.api.models import Document, LegalRequest, Project, Proposal


def _unwrap(payload, key: str):
    """Some endpoints wrap their result (`{"project": {...}}`), others do not."""
    if isinstance(payload, dict) and key in payload:
        return payload[key]
    return payload


class ProjectsApi:
    """`/projects` endpoints."""

    def __init__(self, api: ApiClient):
        self.api = api

    async def list(self) -> List[Project]:
        payload = await self.api.get("/projects", fallback="Impossible de charger les dossiers.")
        return [Project.model_validate(p) for p in _unwrap(payload, "projects") or []]

    async def get(self, project_id) -> Project:
        payload = await self.api.get(f"/projects/{project_id}", fallback="Dossier introuvable.")
        return Project.model_validate(_unwrap(payload, "project"))

    async def create(self, title: str, description: str = "") -> Project:
        payload = await self.api.post(
            "/projects",
            json={"title": title, "description": description},
            fallback="Impossible de créer le dossier.",
        )
        return Project.model_validate(_unwrap(payload, "project"))


class LegalRequestsApi:
    """`/legal-requests` endpoints."""

    def __init__(self, api: ApiClient):
        self.api = api

    async def list_for_client(self) -> List[LegalRequest]:
        payload = await self.api.get("/legal-requests/client", fallback="Impossible de charger les demandes.")
        return [LegalRequest.model_validate(r) for r in _unwrap(payload, "legalRequests") or []]

    async def get(self, legal_request_id) -> LegalRequest:
        payload = await self.api.get(f"/legal-requests/{legal_request_id}", fallback="Demande non trouvée")
        return LegalRequest.model_validate(_unwrap(payload, "legalRequest"))

    async def documents(self, legal_request_id) -> List[Document]:
        payload = await self.api.get(f"/legal-requests/{legal_request_id}/documents")
        return [Document.model_validate(d) for d in _unwrap(payload, "documents") or []]

    async def proposals(self, legal_request_id) -> List[Proposal]:
        payload = await self.api.get(f"/legal-requests/{legal_request_id}/proposals")
        return [Proposal.model_validate(p) for p in _unwrap(payload, "proposals") or []]

"""
Document Attachment Flow
========================

Purpose
-------
Documents of a project or a legal request:
- `load` lists the owner's documents.
- `upload` validates the selection, posts a multipart body (`file` plus the
  owner field), reports progress, prepends the new document and announces it
  in the attached chat.
- `download` saves a document's bytes under the download directory.

Error handling
--------------
- No file selected: `FormValidationError`, no request.
- The backend signals PDF problems only in free text. A successful upload
  whose message contains "PDF parsing error" keeps the document and sets a
  warning; a failure whose message contains "PDF" gets a friendlier wording.
  This substring match is a heuristic and breaks if the backend rewords it.
"""

import asyncio
import contextlib
import logging
import mimetypes
from pathlib import Path
from typing import List, Optional, Union

from avocat_assist.api.errors import (
    ApiError,
    FormValidationError,
    describe_error,
    is_pdf_error,
)
from avocat_assist.api.http_client import ApiClient
from avocat_assist.api.models import Document, OwnerRef, OwnerType, UploadResult
from avocat_assist.chat.exchange import MessageExchange
from avocat_assist.chat.scope import ViewScope
from avocat_assist.config.config import settings
from avocat_assist.documents.progress import ProgressBuffer, UploadProgress, simulate_progress

logger = logging.getLogger(__name__)

NO_FILE_MESSAGE = "Veuillez sélectionner un fichier."
UPLOAD_FAILED_MESSAGE = "Erreur lors de l'upload du document."
NOT_PROCESSED_MESSAGE = "Le document a été téléchargé mais n'a pas pu être traité correctement."
PDF_PARTIAL_MESSAGE = (
    "Le document a été téléchargé avec succès, mais le texte n'a pas pu être extrait "
    "en raison d'un problème de format PDF. Le document reste accessible."
)
PDF_CORRUPTED_MESSAGE = (
    "Le document PDF semble être corrompu ou dans un format non pris en charge. "
    "Essayez de le convertir en un autre format ou de le régénérer."
)
LOAD_FAILED_MESSAGE = "Erreur lors de la récupération des documents."

UPLOAD_ENDPOINTS = {
    OwnerType.PROJECT: ("/documents/upload", "projectId"),
    OwnerType.LEGAL_REQUEST: ("/legal-request-documents/upload", "legalRequestId"),
}

ATTACHED_TO = {
    OwnerType.PROJECT: "ajouté au dossier",
    OwnerType.LEGAL_REQUEST: "ajouté à la demande",
}


def format_file_size(size: Optional[int]) -> str:
    """Human readable size: `512 B`, `1.5 KB`, `2.0 MB`."""
    if size is None:
        return ""
    if size < 1024:
        return f"{size} B"
    if size < 1048576:
        return f"{size / 1024:.1f} KB"
    return f"{size / 1048576:.1f} MB"


def _documents_of(payload) -> list:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("documents"), list):
        return payload["documents"]
    return []


def _write_file(target: Path, content: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)


class DocumentAttachments:
    """
    Ordered documents of one owner entity, newest first.

    Parameters
    ----------
    api : ApiClient
        HTTP adapter.
    owner : OwnerRef
        Project or legal request owning the documents.
    scope : ViewScope, optional
        Lifetime of the owning view.
    exchange : MessageExchange, optional
        Chat receiving the "document attached" announcement.
    """

    def __init__(
        self,
        api: ApiClient,
        owner: OwnerRef,
        scope: Optional[ViewScope] = None,
        exchange: Optional[MessageExchange] = None,
        progress_interval: Optional[float] = None,
        progress_step: Optional[int] = None,
        progress_cap: Optional[int] = None,
        download_dir: Optional[Union[str, Path]] = None,
    ):
        self.api = api
        self.owner = owner
        self.scope = scope or ViewScope()
        self.exchange = exchange
        self.progress_interval = progress_interval if progress_interval is not None else settings.UPLOAD_PROGRESS_INTERVAL
        self.progress_step = progress_step if progress_step is not None else settings.UPLOAD_PROGRESS_STEP
        self.progress = UploadProgress(cap=progress_cap if progress_cap is not None else settings.UPLOAD_PROGRESS_CAP)
        self.download_dir = Path(download_dir if download_dir is not None else settings.DOWNLOAD_DIR)
        self.documents: List[Document] = []
        self.error: Optional[str] = None
        self.is_uploading = False
        self.loading = False

    @property
    def owner_id(self):
        return self.owner.owner_entity_id

    async def load(self) -> List[Document]:
        """Fetch the owner's documents. Failures leave the list unchanged."""
        if self.owner_id is None or self.owner.owner_entity_type not in UPLOAD_ENDPOINTS:
            return self.documents
        self.loading = True
        try:
            if self.owner.owner_entity_type == OwnerType.PROJECT:
                payload = await self.api.get("/documents", params={"projectId": self.owner_id}, fallback=LOAD_FAILED_MESSAGE)
            else:
                payload = await self.api.get(f"/legal-requests/{self.owner_id}/documents", fallback=LOAD_FAILED_MESSAGE)
            documents = [Document.model_validate(d) for d in _documents_of(payload)]
        except (ApiError, ValueError) as e:
            logger.warning("Error fetching documents of %s %s: %s", self.owner.owner_entity_type.value, self.owner_id, e)
            # a missing document list must not block a legal request page
            if self.owner.owner_entity_type == OwnerType.PROJECT and not self.scope.discard("document load failure"):
                self.error = describe_error(e, LOAD_FAILED_MESSAGE)
            return self.documents
        finally:
            self.loading = False

        if not self.scope.discard("document load"):
            self.documents = documents
        return self.documents

    async def upload(self, path: Optional[Union[str, Path]], content_type: Optional[str] = None) -> Optional[Document]:
        """
        Upload a file for the owner.

        Parameters
        ----------
        path : str | Path | None
            The selected file. None means nothing was selected.
        content_type : str, optional
            MIME type; guessed from the file name when omitted.

        Returns
        -------
        Document | None
            The new document, or None if the upload failed (`error` is set).

        Raises
        ------
        FormValidationError
            No file selected, unreadable file, or owner without documents.
        """
        if path is None:
            self.error = NO_FILE_MESSAGE
            raise FormValidationError({"file": NO_FILE_MESSAGE})
        if self.owner_id is None or self.owner.owner_entity_type not in UPLOAD_ENDPOINTS:
            raise FormValidationError({"owner": "Aucun dossier ou demande n'est associé à ce document."})
        file_path = Path(path)
        if not file_path.is_file():
            self.error = NO_FILE_MESSAGE
            raise FormValidationError({"file": NO_FILE_MESSAGE})

        endpoint, owner_field = UPLOAD_ENDPOINTS[self.owner.owner_entity_type]
        content_type = content_type or mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        data = await asyncio.to_thread(file_path.read_bytes)

        self.is_uploading = True
        self.error = None
        self.progress.reset()
        body = ProgressBuffer(data, self.progress)
        ramp = asyncio.create_task(simulate_progress(self.progress, self.progress_step, self.progress_interval))
        try:
            raw = await self.api.upload(
                endpoint,
                files={"file": (file_path.name, body, content_type)},
                data={owner_field: str(self.owner_id)},
                fallback=UPLOAD_FAILED_MESSAGE,
            )
            result = UploadResult.model_validate(raw or {})
        except (ApiError, ValueError) as e:
            if self.scope.discard("upload failure"):
                return None
            logger.warning("Error uploading %s: %s", file_path.name, e)
            message = describe_error(e, UPLOAD_FAILED_MESSAGE)
            self.error = PDF_CORRUPTED_MESSAGE if is_pdf_error(message) else message
            self.progress.reset()
            return None
        finally:
            ramp.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await ramp
            self.is_uploading = False

        if self.scope.discard("upload response"):
            return None
        self.progress.complete()

        if result.document is None or result.success is False:
            self.error = NOT_PROCESSED_MESSAGE
            return None

        document = result.document
        self.documents.insert(0, document)
        if result.message and "PDF parsing error" in result.message:
            self.error = PDF_PARTIAL_MESSAGE
        if self.exchange is not None:
            self.exchange.append_system_message(
                f'Document "{document.file_name}" {ATTACHED_TO[self.owner.owner_entity_type]}. '
                "L'IA peut maintenant l'utiliser comme contexte."
            )
        logger.info("Uploaded %s as document %s", document.file_name, document.id)
        return document

    async def download(self, document_id, file_name: str, destination: Optional[Union[str, Path]] = None) -> Path:
        """
        Save a document locally.

        Returns
        -------
        Path
            Where the file was written.

        Raises
        ------
        ApiError
            The download failed (`error` is set).
        """
        if self.owner.owner_entity_type == OwnerType.LEGAL_REQUEST:
            path = f"/legal-request-documents/document/{document_id}/download"
        else:
            path = f"/documents/{document_id}/download"
        fallback = f"Erreur lors du téléchargement de {file_name}."
        try:
            content = await self.api.download(path, fallback=fallback)
        except ApiError as e:
            self.error = describe_error(e, fallback)
            raise
        target = Path(destination) if destination else self.download_dir / Path(file_name).name
        await asyncio.to_thread(_write_file, target, content)
        logger.info("Downloaded document %s to %s", document_id, target)
        return target

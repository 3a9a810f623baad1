import httpx
import pytest

from avocat_assist.api.errors import FormValidationError, ThreadResolutionError
from avocat_assist.api.models import OwnerRef, OwnerType
from avocat_assist.chat.profiles import (
    CLIENT_DEFAULT_SUGGESTIONS,
    CLIENT_PROFILE,
    LAWYER_PROFILE,
    LAWYER_PROJECT_SUGGESTIONS,
)
from avocat_assist.chat.reconciliation import (
    RESOLUTION_FAILED_MESSAGE,
    ConversationDirectory,
    ConversationReconciler,
)


def thread_store(backend, collection="/chats", owner_field="projectId"):
    """Backend side of find-or-create: threads persisted across calls."""
    threads = []

    def list_threads(request):
        wanted = request.url.params.get(owner_field) if owner_field else None
        found = [t for t in threads if owner_field is None or str(t.get(owner_field)) == wanted]
        return httpx.Response(200, json=found)

    def create_thread(request):
        body = backend.body(request)
        thread = {"id": len(threads) + 100, **body}
        threads.append(thread)
        return httpx.Response(201, json=thread)

    backend.route("GET", collection, list_threads)
    backend.route("POST", collection, create_thread)
    return threads


async def test_project_thread_is_created_once(api, backend):
    threads = thread_store(backend)
    reconciler = ConversationReconciler(api, CLIENT_PROFILE)
    owner = OwnerRef.project(42, "Litige bail")

    first = await reconciler.resolve(owner)
    second = await reconciler.resolve(owner)

    assert first.created is True
    assert second.created is False
    assert first.thread.id == second.thread.id
    assert len(threads) == 1
    assert len(backend.calls("POST", "/chats")) == 1
    assert backend.body(backend.calls("POST", "/chats")[0]) == {"title": "Dossier Litige bail", "projectId": 42}
    assert first.thread.owner_entity_type == OwnerType.PROJECT
    assert first.thread.owner_entity_id == 42


async def test_lawyer_project_title_and_suggestions(api, backend):
    thread_store(backend)

    resolved = await ConversationReconciler(api, LAWYER_PROFILE).resolve(OwnerRef.project(42))

    assert resolved.thread.title == "Conversation Dossier 42"
    assert resolved.suggestions == list(LAWYER_PROJECT_SUGGESTIONS)


async def test_legal_request_thread(api, backend):
    thread_store(backend, owner_field="legalRequestId")

    resolved = await ConversationReconciler(api, CLIENT_PROFILE).resolve(OwnerRef.legal_request(9))

    request = backend.calls("GET", "/chats")[0]
    assert request.url.params["legalRequestId"] == "9"
    assert resolved.thread.title == "Demande juridique #9"
    assert resolved.thread.owner_entity_type == OwnerType.LEGAL_REQUEST


async def test_standalone_conversation(api, backend):
    thread_store(backend, collection="/conversations", owner_field=None)

    resolved = await ConversationReconciler(api, CLIENT_PROFILE).resolve(OwnerRef.standalone())

    assert backend.body(backend.calls("POST", "/conversations")[0]) == {"title": "Nouvelle conversation"}
    assert resolved.thread.owner_entity_id is None
    assert resolved.suggestions == list(CLIENT_DEFAULT_SUGGESTIONS)


async def test_existing_thread_keeps_first_and_its_suggestions(api, backend):
    backend.route("GET", "/chats", json=[
        {"id": 5, "title": "Ancien", "lastSuggestedQuestions": ["Et ensuite ?"]},
        {"id": 6, "title": "Doublon"},
    ])

    resolved = await ConversationReconciler(api, CLIENT_PROFILE).resolve(OwnerRef.project(42))

    assert resolved.thread.id == 5
    assert resolved.suggestions == ["Et ensuite ?"]
    assert backend.calls("POST", "/chats") == []


async def test_unfiltered_listing_never_binds_another_owners_thread(api, backend):
    # backend ignores ?legalRequestId= and answers with every chat of the user
    backend.route("GET", "/chats", json=[{"id": 11, "projectId": 9, "title": "Dossier Bail"}])
    backend.route("POST", "/chats", lambda request: httpx.Response(201, json={"id": 12, **backend.body(request)}))

    resolved = await ConversationReconciler(api, LAWYER_PROFILE).resolve(OwnerRef.legal_request(5))

    assert resolved.created is True
    assert resolved.thread.id == 12
    assert backend.body(backend.calls("POST", "/chats")[0])["legalRequestId"] == 5


async def test_listing_skips_threads_of_other_projects(api, backend):
    backend.route("GET", "/chats", json=[
        {"id": 11, "projectId": 9, "title": "Dossier Bail"},
        {"id": 14, "projectId": 42, "title": "Dossier Divorce"},
    ])

    resolved = await ConversationReconciler(api, CLIENT_PROFILE).resolve(OwnerRef.project(42))

    assert resolved.thread.id == 14
    assert resolved.created is False
    assert backend.calls("POST", "/chats") == []


@pytest.mark.parametrize("owner", [OwnerRef.project(None), OwnerRef.legal_request(None)])
async def test_missing_owner_id_fails_without_request(api, backend, owner):
    with pytest.raises(ThreadResolutionError):
        await ConversationReconciler(api, CLIENT_PROFILE).resolve(owner)

    assert backend.requests == []


async def test_backend_failure_becomes_resolution_error(api, backend):
    backend.route("GET", "/chats", status=500, json={})

    with pytest.raises(ThreadResolutionError) as excinfo:
        await ConversationReconciler(api, CLIENT_PROFILE).resolve(OwnerRef.project(42))

    assert str(excinfo.value) == RESOLUTION_FAILED_MESSAGE


async def test_create_without_id_is_a_failure(api, backend):
    backend.route("GET", "/chats", json=[])
    backend.route("POST", "/chats", json={"title": "Dossier 42"})

    with pytest.raises(ThreadResolutionError):
        await ConversationReconciler(api, CLIENT_PROFILE).resolve(OwnerRef.project(42))


async def test_directory_create_puts_conversation_first(api, backend):
    backend.route("GET", "/conversations", json=[{"id": 1, "title": "Bail"}])
    backend.route("POST", "/conversations", json={"id": 2, "title": "Licenciement"})
    directory = ConversationDirectory(api)

    await directory.list()
    created = await directory.create("Licenciement")

    assert [c.id for c in directory.conversations] == [2, 1]
    assert created.owner_entity_type == OwnerType.STANDALONE


async def test_directory_rejects_blank_title(api, backend):
    with pytest.raises(FormValidationError):
        await ConversationDirectory(api).create("   ")

    assert backend.requests == []

import httpx
import pytest

from avocat_assist.api.models import Message, Sender
from avocat_assist.chat.exchange import MessageExchange
from avocat_assist.chat.profiles import (
    CLIENT_FALLBACK_POOL,
    CLIENT_PROFILE,
    LAWYER_PROFILE,
    sample_suggestions,
)
from avocat_assist.chat.scope import ViewScope


def seeded_messages():
    return [
        Message(id=1, sender=Sender.USER, content="Bonjour"),
        Message(id=2, sender=Sender.AI, content="Bonjour, comment puis-je aider ?"),
        Message(id=3, sender=Sender.USER, content="Mon bail"),
    ]


@pytest.fixture
def exchange(api, project_thread, rng):
    return MessageExchange(api, project_thread, CLIENT_PROFILE, rng=rng)


async def test_load_uses_persisted_suggestions(exchange, backend):
    backend.route("GET", "/chats/7", json={
        "id": 7,
        "messages": [
            {"id": 1, "sender": "user", "content": "Bonjour", "createdAt": "2025-01-01T10:00:00Z"},
            {"id": 2, "sender": "assistant", "content": "Bonjour !"},
        ],
        "lastSuggestedQuestions": ["Quel délai ?"],
    })

    assert await exchange.load() is True

    assert [m.id for m in exchange.messages] == [1, 2]
    assert exchange.messages[1].sender == Sender.AI
    assert exchange.suggestions == ["Quel délai ?"]


async def test_load_without_persisted_suggestions_samples_fallback(exchange, backend):
    backend.route("GET", "/chats/7", json={"messages": [{"id": 1, "sender": "user", "content": "Bonjour"}]})

    await exchange.load()

    assert 0 < len(exchange.suggestions) <= 5
    assert set(exchange.suggestions) <= set(CLIENT_FALLBACK_POOL)


@pytest.mark.parametrize("content", ["", "   ", None])
async def test_blank_content_is_a_noop(exchange, backend, content):
    assert await exchange.send(content) is None

    assert exchange.messages == []
    assert backend.requests == []


async def test_send_without_thread_is_a_noop(api, backend):
    exchange = MessageExchange(api, None, CLIENT_PROFILE)

    assert await exchange.send("Bonjour") is None
    assert backend.requests == []


async def test_send_success_orders_user_then_ai(exchange, backend):
    backend.route("POST", "/ai/ask", json={
        "response": "Vous disposez de deux mois.",
        "messageId": 55,
        "suggestedQuestions": ["Comment contester ?"],
    })

    answer = await exchange.send("Quel est le délai ?")

    assert backend.body(backend.calls("POST", "/ai/ask")[0]) == {"question": "Quel est le délai ?", "chatId": 7}
    user, ai = exchange.messages
    assert user.sender == Sender.USER and user.content == "Quel est le délai ?"
    assert not user.is_temporary
    assert ai.id == 55 and ai.content == "Vous disposez de deux mois."
    assert answer == ai
    assert exchange.suggestions == ["Comment contester ?"]
    assert exchange.is_pending is False


async def test_send_without_suggestions_uses_fallback_pool(api, backend, project_thread, rng):
    backend.route("POST", "/ai/ask", json={"response": "Réponse"})
    exchange = MessageExchange(api, project_thread, LAWYER_PROFILE, rng=rng)

    await exchange.send("Question")

    assert exchange.messages[1].id.startswith("ai-")
    assert len(exchange.suggestions) == 5
    assert len(set(exchange.suggestions)) == 5
    assert set(exchange.suggestions) <= set(LAWYER_PROFILE.fallback_pool)


async def test_standalone_send_uses_conversation_id(api, backend, standalone_thread):
    backend.route("POST", "/ai/ask", json={"response": "ok"})
    exchange = MessageExchange(api, standalone_thread, CLIENT_PROFILE)

    await exchange.send("Bonjour")

    assert backend.body(backend.calls("POST", "/ai/ask")[0]) == {"question": "Bonjour", "conversationId": 3}


async def test_send_failure_keeps_user_message_and_adds_one_error(exchange, backend):
    backend.route("POST", "/ai/ask", status=503, json={"message": "Service IA indisponible"})

    reply = await exchange.send("Question")

    assert [m.sender for m in exchange.messages] == [Sender.USER, Sender.AI]
    assert exchange.messages[0].content == "Question"
    assert reply.is_error
    assert reply.content == "Désolé, une erreur s'est produite: Service IA indisponible"
    assert sum(m.is_error for m in exchange.messages) == 1
    assert exchange.error == "Service IA indisponible"


async def test_send_ignored_while_pending(exchange, backend):
    sends = []

    def ask(request):
        sends.append(request)
        return httpx.Response(200, json={"response": "ok"})

    backend.route("POST", "/ai/ask", ask)
    exchange.is_pending = True

    assert await exchange.send("Deuxième") is None
    assert sends == []


async def test_user_message_is_shown_while_answer_is_in_flight(exchange, backend):
    seen = []

    def ask(request):
        last = exchange.messages[-1]
        seen.append((last.is_temporary, exchange.is_pending, last.content))
        return httpx.Response(200, json={"response": "Réponse"})

    backend.route("POST", "/ai/ask", ask)

    await exchange.send("Question")

    assert seen == [(True, True, "Question")]
    assert exchange.is_pending is False
    assert not exchange.messages[0].is_temporary


async def test_second_send_during_inflight_answer_is_ignored(exchange, backend):
    nested = []

    async def ask(request):
        nested.append(await exchange.send("Deuxième"))
        return httpx.Response(200, json={"response": "ok"})

    backend.route("POST", "/ai/ask", ask)

    await exchange.send("Première")

    assert nested == [None]
    assert len(backend.calls("POST", "/ai/ask")) == 1
    assert [m.content for m in exchange.messages] == ["Première", "ok"]


async def test_explicit_suggestion_limit_is_honored(api, backend, project_thread, rng):
    backend.route("POST", "/ai/ask", json={"response": "ok"})
    exchange = MessageExchange(api, project_thread, CLIENT_PROFILE, rng=rng, suggestion_limit=2)

    await exchange.send("Question")

    assert len(exchange.suggestions) == 2


async def test_zero_suggestion_limit_is_not_replaced_by_default(api, project_thread):
    exchange = MessageExchange(api, project_thread, CLIENT_PROFILE, suggestion_limit=0)

    assert exchange.suggestion_limit == 0
    assert exchange.fallback_suggestions() == []


async def test_edit_failure_restores_original_content(exchange, backend):
    exchange.messages = seeded_messages()
    before = list(exchange.messages)
    backend.route("PUT", "/chats/7/messages/3", status=500, json={"message": "Refusé"})

    assert await exchange.edit(3, "Mon bail commercial") is False

    assert exchange.messages == before
    assert exchange.error == "Refusé"


async def test_edit_success_updates_content(exchange, backend):
    exchange.messages = seeded_messages()
    backend.route("PUT", "/chats/7/messages/3", json={"message": "ok"})

    assert await exchange.edit(3, "  Mon bail commercial ") is True

    assert exchange.messages[2].content == "Mon bail commercial"
    assert exchange.messages[2].updated_at is not None
    assert backend.body(backend.calls("PUT", "/chats/7/messages/3")[0]) == {"content": "Mon bail commercial"}


async def test_edit_with_blank_content_is_ignored(exchange, backend):
    exchange.messages = seeded_messages()

    assert await exchange.edit(3, "  ") is False
    assert backend.requests == []


async def test_delete_failure_restores_original_position(exchange, backend):
    exchange.messages = seeded_messages()
    backend.route("DELETE", "/chats/7/messages/2", status=500, json={})

    assert await exchange.delete(2) is False

    assert [m.id for m in exchange.messages] == [1, 2, 3]
    assert exchange.error is not None


async def test_failed_edit_keeps_messages_appended_meanwhile(exchange, backend):
    exchange.messages = seeded_messages()

    def refuse(request):
        exchange.append_system_message("Document bail.pdf ajouté")
        return httpx.Response(500, json={"message": "Refusé"})

    backend.route("PUT", "/chats/7/messages/3", refuse)

    assert await exchange.edit(3, "Mon bail commercial") is False

    assert [m.content for m in exchange.messages] == [
        "Bonjour",
        "Bonjour, comment puis-je aider ?",
        "Mon bail",
        "Document bail.pdf ajouté",
    ]
    assert exchange.messages[-1].is_system


async def test_failed_delete_keeps_messages_appended_meanwhile(exchange, backend):
    exchange.messages = seeded_messages()

    def refuse(request):
        exchange.append_system_message("Document bail.pdf ajouté")
        return httpx.Response(500, json={})

    backend.route("DELETE", "/chats/7/messages/2", refuse)

    assert await exchange.delete(2) is False

    assert [m.id for m in exchange.messages][:3] == [1, 2, 3]
    assert exchange.messages[-1].content == "Document bail.pdf ajouté"
    assert len(exchange.messages) == 4


async def test_delete_success_removes_message(api, backend, standalone_thread):
    standalone = MessageExchange(api, standalone_thread, CLIENT_PROFILE)
    standalone.messages = seeded_messages()
    backend.route("DELETE", "/conversations/3/messages/1", json={})

    assert await standalone.delete(1) is True
    assert [m.id for m in standalone.messages] == [2, 3]


async def test_response_after_close_is_discarded(api, backend, project_thread):
    scope = ViewScope("project:42")
    exchange = MessageExchange(api, project_thread, CLIENT_PROFILE, scope=scope)

    def ask(request):
        scope.close()
        return httpx.Response(200, json={"response": "trop tard", "suggestedQuestions": ["x"]})

    backend.route("POST", "/ai/ask", ask)
    suggestions_before = list(exchange.suggestions)

    assert await exchange.send("Question") is None

    assert all(m.content != "trop tard" for m in exchange.messages)
    assert exchange.suggestions == suggestions_before


def test_sample_suggestions_never_exceeds_limit_nor_repeats(rng):
    pool = CLIENT_FALLBACK_POOL + CLIENT_FALLBACK_POOL[:2]
    for _ in range(20):
        sample = sample_suggestions(pool, 5, rng)
        assert len(sample) == 5
        assert len(set(sample)) == 5
    assert len(sample_suggestions(["a", "b"], 5, rng)) == 2

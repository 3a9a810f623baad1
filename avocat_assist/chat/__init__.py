"""
The `chat` package implements the conversation side of the client.

Contents
--------
- profiles
    `RoleProfile` variants (client, lawyer) and suggestion sampling.
- scope
    `ViewScope`: drops results that arrive after a view is closed.
- reconciliation
    Find-or-create of the thread owned by a project, a legal request or
    nobody; `ConversationDirectory` for standalone conversations.
- exchange
    `MessageExchange`: optimistic send, edit and delete with rollback.
- workflow
    `ChatWorkflow`: the single chat page shared by every role.
"""

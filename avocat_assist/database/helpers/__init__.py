"""
The `helpers` package provides the `@transactional` decorator and the
`db_session_context` context variable used by the storage classes.
"""

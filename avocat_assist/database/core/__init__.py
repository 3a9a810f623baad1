"""
Core storage services built on top of the DAOs.

Contents
--------
- token_storage
    * TokenStorage (protocol), MemoryTokenStorage, SqlTokenStorage
"""

"""
The `config` package provides the configuration building blocks of the client.

Contents:
    - config: strongly typed settings loaded from environment variables (with .env support), exposed through a singleton Settings object
    - log_config: `configure_logging`, the logging bootstrap used by shells embedding the library
"""

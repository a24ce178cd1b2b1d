# ABOUTME: Lyyyra songbook library: song import, schema management, and search.
# ABOUTME: Exposes the package version used for status reporting and the CLI.

__version__ = "0.1.0"

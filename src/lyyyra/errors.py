# ABOUTME: Base exception for Lyyyra.
# ABOUTME: Concern-specific errors live next to the code that raises them.


class LyyyraError(Exception):
    """Base class for all errors raised by the songbook core."""

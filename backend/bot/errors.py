class ConsistencyError(Exception):
    """Data broke an invariant the bot relies on. Not recoverable."""


class DecodeError(ValueError):
    """Payload doesn't have expected shape."""

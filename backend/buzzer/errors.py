"""Exception hierarchy for the buzzer server."""


class BuzzerError(Exception):
    """Base exception for all buzzer errors."""
    pass


class RoomNotFound(BuzzerError):
    """Raised when a room code does not name an active room."""

    def __init__(self, code):
        self.code = code
        super().__init__(f"Room '{code}' does not exist")


class RoomCodeSpaceExhausted(BuzzerError):
    """Raised when every code of the configured alphabet and length is taken."""

    def __init__(self, alphabet, length):
        self.alphabet = alphabet
        self.length = length
        super().__init__(
            f"No free room code left for alphabet of {len(alphabet)} symbols and length {length}"
        )


class UnknownMessageKind(BuzzerError):
    """Raised when dispatch is handed a message kind it has no handler for."""

    def __init__(self, kind):
        self.kind = kind
        super().__init__(f"No handler for message kind {kind!r}")

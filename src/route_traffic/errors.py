class TrafficEngineError(Exception):
    """Base route traffic exception."""


class PartitionError(TrafficEngineError):
    """Raised when a route cannot be split into segments."""


class FetchError(TrafficEngineError):
    """Raised inside the traffic source when the provider call failed."""

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class ProviderNormalizationError(FetchError):
    """Raised when provider payload cannot be normalized into a sample."""

    def __init__(self, message: str) -> None:
        super().__init__("malformed_body", message)


class CircuitOpenError(FetchError):
    """Raised when provider calls are blocked by an open circuit."""

    def __init__(self) -> None:
        super().__init__("circuit_open", "circuit is open")

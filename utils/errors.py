#Description: Error taxonomy shared by the market data, oracle and store layers.


class SignalsError(Exception):
    """Base class for every failure surfaced by the signal pipeline."""


class DataUnavailableError(SignalsError):
    """Market data fetch failed or returned an empty series."""


class InsufficientDataError(DataUnavailableError):
    """Candle series is shorter than the configured indicator windows."""

    def __init__(self, got: int, required: int):
        super().__init__(f"Need at least {required} candles, got {got}")
        self.got = got
        self.required = required


class OracleUnavailableError(SignalsError):
    """Classifier unreachable, non-success status or malformed answer."""


class PersistenceError(SignalsError):
    """Store read or write failed."""


def error_payload(exc: Exception) -> dict:
    return {"error": str(exc), "type": type(exc).__name__}

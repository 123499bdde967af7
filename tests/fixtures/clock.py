from datetime import UTC, datetime, timedelta


class FakeClock:
    """Settable clock for TokenCodec; starts at a fixed instant."""

    def __init__(self, start: datetime = None):
        self.current = start or datetime(2025, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: int) -> None:
        self.current += timedelta(seconds=seconds)

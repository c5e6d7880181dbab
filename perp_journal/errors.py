class JournalError(Exception):
    """Base class for errors raised by the aggregation core."""


class FillStoreUnavailableError(JournalError):
    """Fills could not be loaded. Nothing can be aggregated."""


class DataIntegrityError(JournalError):
    """The fill history contradicts itself."""


class FlatPositionReductionError(DataIntegrityError):
    def __init__(self, symbol: str, fill_id=None):
        self.symbol = symbol
        self.fill_id = fill_id
        super().__init__(
            f"Reducing fill {fill_id!r} on {symbol!r} arrived against a flat position"
        )


class PositionNotFoundError(JournalError):
    def __init__(self, position_id: str):
        self.position_id = position_id
        super().__init__(f"Position {position_id!r} not found")


class MetadataUpdateError(JournalError):
    """Writing journal/category failed. The caller should keep the unsaved edit."""

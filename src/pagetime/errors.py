"""Exception types raised by pagetime."""


class PagetimeError(Exception):
    """Base class for pagetime errors."""


class InvalidPageTimeError(PagetimeError, ValueError):
    """A page number or a number of seconds was rejected at the call boundary."""


class LedgerStateError(PagetimeError):
    """A ledger operation was called out of order (e.g. hydrate after merge)."""


class PersistenceError(PagetimeError):
    """Loading or saving a ledger failed."""

    def __init__(self, message: str, document_id: str = ""):
        super().__init__(message)
        self.document_id = document_id

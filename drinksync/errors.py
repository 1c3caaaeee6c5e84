class DrinksyncError(Exception):
    pass


class MalformedPathError(DrinksyncError, ValueError):
    """The object key cannot be split into a bar name and a drink name"""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Malformed object key {path!r}: {reason}")
        self.path = path
        self.reason = reason


class StoreUnavailableError(DrinksyncError, ConnectionError):
    """Looking up a record failed because the store could not be reached or refused the request"""


class StoreWriteError(DrinksyncError):
    """Inserting or updating a record failed"""


class BootstrapError(DrinksyncError):
    """Settings or AWS clients could not be set up; nothing was processed"""

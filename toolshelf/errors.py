class StoreError(RuntimeError):
    """The remote document store could not complete a request."""


class EntryValidationError(ValueError):
    """A draft or change set was rejected before touching the catalog."""


class EntryNotFound(KeyError):
    def __init__(self, entry_id: str):
        super().__init__(entry_id)
        self.entry_id = entry_id

    def __str__(self) -> str:
        return f"No tool with id {self.entry_id!r}"

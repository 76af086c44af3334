"""Service-level exceptions.

Each failure class maps to one kind of user-visible notice; none of them is
fatal and every operation can simply be invoked again.
"""


class AssetSyncError(Exception):
    """Base exception for valuation and sync operations."""


class NotFoundError(AssetSyncError):
    """Entity not present in the local projection."""

    def __init__(self, entity_type: str, identifier: str | int):
        self.entity_type = entity_type
        self.identifier = identifier
        super().__init__(f"{entity_type} not found: {identifier}")


class DuplicateError(AssetSyncError):
    """Entity already exists (e.g. a sheet tab linked to two accounts)."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}={value} already exists")


class LookupFailure(AssetSyncError):
    """A single asset's price lookup failed."""

    def __init__(self, asset_id: int, reason: str):
        self.asset_id = asset_id
        self.reason = reason
        super().__init__(f"Price lookup failed for asset {asset_id}: {reason}")


class SheetSyncError(AssetSyncError):
    """Spreadsheet sync or export failed."""


class ValidationFailure(AssetSyncError):
    """Input rejected before any state mutation."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)

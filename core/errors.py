from __future__ import annotations


class PharmacyError(ValueError):
    """Base for user-recoverable rejections. Raised before any state change."""


class ValidationError(PharmacyError):
    pass


class SelectionError(PharmacyError):
    pass


class StockError(PharmacyError):
    pass


class EmptyBillError(PharmacyError):
    pass

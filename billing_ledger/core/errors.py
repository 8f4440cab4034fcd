# billing_ledger/core/errors.py
from __future__ import annotations


class LedgerError(Exception):
    """Base class for everything the ledger raises on purpose."""
    status_code = 400
    code = "LEDGER_ERROR"

    def __init__(self, msg: str, *, details=None):
        super().__init__(msg)
        self.msg = msg
        self.details = details


class InvalidPayment(LedgerError, ValueError):
    """Payment rejected before it reaches the log (amount <= 0, bad date, bad mode)."""
    status_code = 422
    code = "INVALID_PAYMENT"


class InvalidFeeItem(LedgerError, ValueError):
    status_code = 422
    code = "INVALID_FEE_ITEM"


class PatientNotFound(LedgerError):
    status_code = 404
    code = "PATIENT_NOT_FOUND"


class PaymentNotFound(LedgerError):
    status_code = 404
    code = "PAYMENT_NOT_FOUND"


class FeeItemNotFound(LedgerError):
    status_code = 404
    code = "FEE_ITEM_NOT_FOUND"


class UpstreamUnavailable(LedgerError):
    """
    The patient/payment store could not answer.
    Surfaced unchanged to the caller; no retry here.
    """
    status_code = 503
    code = "UPSTREAM_UNAVAILABLE"

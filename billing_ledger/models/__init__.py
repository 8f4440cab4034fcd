# billing_ledger/models/__init__.py
from .patient import Patient, PatientStatus
from .patient_payment import PatientPayment, PaymentMode
from .patient_fee_item import PatientFeeItem

__all__ = [
    "Patient",
    "PatientStatus",
    "PatientPayment",
    "PaymentMode",
    "PatientFeeItem",
]

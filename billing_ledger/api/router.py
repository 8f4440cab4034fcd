# billing_ledger/api/router.py
from fastapi import APIRouter
from billing_ledger.api import (
    routes_patient_ledger,
    routes_patient_payments,
    routes_patient_fees,
)

api_router = APIRouter()

api_router.include_router(routes_patient_ledger.router)
api_router.include_router(routes_patient_payments.router)
api_router.include_router(routes_patient_fees.router)

# billing_ledger/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """All ledger tables (patients, payments, fee items) inherit from this."""
    pass

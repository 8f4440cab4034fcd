# billing_ledger/db/init_db.py
from __future__ import annotations

import argparse
import logging

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from billing_ledger.db.base import Base
from billing_ledger.db.session import engine

# Import all models so metadata is complete
from billing_ledger.models import Patient, PatientPayment, PatientFeeItem  # noqa: F401

logger = logging.getLogger(__name__)


def create_tables(bind=None) -> list:
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    return sorted(inspect(bind).get_table_names())


def drop_tables(bind=None) -> None:
    Base.metadata.drop_all(bind=bind or engine)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create ledger tables")
    parser.add_argument("--drop", action="store_true", help="drop existing ledger tables first")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    try:
        if args.drop:
            drop_tables()
        tables = create_tables()
    except SQLAlchemyError:
        logger.exception("init_db failed")
        return 1
    print("Existing tables:", tables)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

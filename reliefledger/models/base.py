# reliefledger/models/base.py
import re

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase, declared_attr

# Constraint and index names match the alembic revisions
NAMING_CONVENTION = {
     "ix": "ix_%(column_0_label)s",
     "uq": "uq_%(table_name)s_%(column_0_name)s",
}


class Base(DeclarativeBase):
     """
     Base class for ledger models.

     Table names are the snake_case plural of the class name
     (PaymentEvent -> payment_events).
     """

     metadata = MetaData(naming_convention=NAMING_CONVENTION)

     @declared_attr.directive
     def __tablename__(cls) -> str:
          return re.sub(r'(?<!^)(?=[A-Z])', '_', cls.__name__).lower() + 's'

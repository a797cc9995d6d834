"""SQLAlchemy models for the duoledger database."""

from decimal import Decimal

from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    TypeDecorator,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class DecimalString(TypeDecorator):
    """Decimal stored as its exact string form.

    SQLite has no decimal type; NUMERIC columns come back as rounded floats.
    """

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(value if isinstance(value, Decimal) else Decimal(str(value)))

    def process_result_value(self, value, dialect):
        return None if value is None else Decimal(value)


# Amounts, rates and shares
MONEY = DecimalString()


class PartyRow(Base):
    """Display name for one of the two party slots."""

    __tablename__ = "parties"

    slot = Column(String(1), primary_key=True)
    name = Column(String, nullable=False)


class CounterpartyRow(Base):
    """Client registry entry."""

    __tablename__ = "counterparties"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    position = Column(Integer, nullable=False)


class SettingRow(Base):
    """Key/value ledger settings (default period, reporting currency, logo)."""

    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=True)


class TransactionRow(Base):
    """Income or expense row."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(String, nullable=False)
    kind = Column(String, nullable=False)
    position = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    currency = Column(String, nullable=False)
    amount = Column(MONEY, nullable=False)
    fx_rate = Column(MONEY, nullable=False)
    responsible_party = Column(String(1), nullable=False)
    split_mode = Column(String, nullable=False)
    party_a_share = Column(MONEY, nullable=True)
    party_b_share = Column(MONEY, nullable=True)
    counterparty_id = Column(String, nullable=True)
    invoice_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    description = Column(String, nullable=True)

    # Row ids are unique per kind
    __table_args__ = (UniqueConstraint("kind", "transaction_id", name="uq_kind_transaction_id"),)

    # Relationships
    adjustments = relationship(
        "AdjustmentRow",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="AdjustmentRow.position",
    )


class AdjustmentRow(Base):
    """Adjustment attached to a transaction row, applied in position order."""

    __tablename__ = "adjustments"

    id = Column(Integer, primary_key=True)
    transaction_pk = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    adjustment_id = Column(String, nullable=False)
    position = Column(Integer, nullable=False)
    label = Column(String, nullable=False)
    kind = Column(String, nullable=False)
    value = Column(MONEY, nullable=False)

    # Relationships
    transaction = relationship("TransactionRow", back_populates="adjustments")


class ChangeLogRow(Base):
    """Append-only change log entry."""

    __tablename__ = "change_log"

    sequence = Column(Integer, primary_key=True)
    entry_id = Column(String, unique=True, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    actor = Column(String, nullable=False)
    action = Column(String, nullable=False)
    payload = Column(JSON, nullable=False, default=dict)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)

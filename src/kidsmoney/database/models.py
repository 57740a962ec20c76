"""SQLAlchemy models for kidsmoney database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    Boolean,
    CheckConstraint,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session
from sqlalchemy.types import TypeDecorator

Base = declarative_base()

MONEY = Numeric(12, 2)
RATE = Numeric(9, 6)


class UTCDateTime(TypeDecorator):
    """DateTime that always round-trips as an aware UTC datetime.

    SQLite drops tzinfo, so values are stored as naive UTC and tagged on load.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime {value!r} cannot be stored")
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=UTC)


class Account(Base):
    """Child account model with one balance column per category."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    cash_balance = Column(MONEY, nullable=False, default=0)
    savings_balance = Column(MONEY, nullable=False, default=0)
    investments_balance = Column(MONEY, nullable=False, default=0)
    savings_rate = Column(RATE, nullable=True)
    investments_rate = Column(RATE, nullable=True)
    last_accrual_at = Column(UTCDateTime, nullable=False)
    created_at = Column(UTCDateTime, default=lambda: datetime.now(UTC), nullable=False)
    version = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("cash_balance >= 0", name="ck_cash_non_negative"),
        CheckConstraint("savings_balance >= 0", name="ck_savings_non_negative"),
        CheckConstraint("investments_balance >= 0", name="ck_investments_non_negative"),
    )

    # Optimistic locking: UPDATE ... WHERE version = <read version>
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    transactions = relationship(
        "Transaction", back_populates="account", cascade="all, delete-orphan"
    )


class Transaction(Base):
    """Ledger entry model. Rows are only ever inserted."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    occurred_at = Column(UTCDateTime, nullable=False)
    amount = Column(MONEY, nullable=False)
    direction = Column(String(6), nullable=False)
    category = Column(String(16), nullable=False)
    is_interest = Column(Boolean, default=False, nullable=False)
    description = Column(String, nullable=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_amount_positive"),
        CheckConstraint("direction IN ('credit', 'debit')", name="ck_direction"),
        CheckConstraint("category IN ('cash', 'savings', 'investments')", name="ck_category"),
        Index("ix_transactions_account_category", "account_id", "category"),
        Index("ix_transactions_occurred_at", "occurred_at"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)

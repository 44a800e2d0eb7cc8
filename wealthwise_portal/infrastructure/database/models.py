"""SQLAlchemy ORM models matching the platform's public schema"""

import uuid
from sqlalchemy import Column, BigInteger, Boolean, Float, DateTime, Date, Integer, ForeignKey, Text, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from wealthwise_portal.utils.money import from_cents

Base = declarative_base()


class Client(Base):
    """Portal client provisioned by an administrator"""

    __tablename__ = "clients"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=False, unique=True, index=True)
    full_name = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    created_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    balances = relationship("ClientBalance", back_populates="client", cascade="all, delete-orphan")
    transactions = relationship("FundTransaction", back_populates="client", cascade="all, delete-orphan")
    campaigns = relationship("Campaign", back_populates="client", cascade="all, delete-orphan")


class ClientBalance(Base):
    """Balance snapshot recorded by an administrator"""

    __tablename__ = "client_balances"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id = Column(Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=True, index=True)
    balance_cents = Column(BigInteger, nullable=False, default=0)
    description = Column(Text, nullable=True)
    created_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="balances")

    @property
    def balance(self) -> float:
        return from_cents(self.balance_cents)


class FundTransaction(Base):
    """Signed ledger row; a client's balance is the sum of its amounts"""

    __tablename__ = "fund_transactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id = Column(Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    transaction_type = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="transactions")

    @property
    def amount(self) -> float:
        return from_cents(self.amount_cents)


class Campaign(Base):
    """Client investment campaign"""

    __tablename__ = "campaigns"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id = Column(Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    investment_cents = Column(BigInteger, nullable=False)
    duration_days = Column(Integer, nullable=False)
    roi_percentage = Column(Float, nullable=False)
    status = Column(Text, nullable=False, default="active")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_roi_earned_cents = Column(BigInteger, nullable=False, default=0)
    last_roi_payment = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="campaigns")

    @property
    def investment_amount(self) -> float:
        return from_cents(self.investment_cents)

    @property
    def total_roi_earned(self) -> float:
        return from_cents(self.total_roi_earned_cents or 0)


class ClientAccessToken(Base):
    """Single-use, time-boxed login link token"""

    __tablename__ = "client_access_tokens"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id = Column(Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(Text, nullable=False, unique=True, index=True)
    used = Column(Boolean, nullable=False, default=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    client = relationship("Client")

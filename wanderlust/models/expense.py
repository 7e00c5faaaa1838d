from sqlalchemy import CheckConstraint, Column, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from wanderlust.core.enums import ExpenseCategory, SplitType
from wanderlust.core.utils import utcnow
from wanderlust.db.session import Base
from wanderlust.db.types import UTCDateTime


class Expense(Base):
    __tablename__ = "expenses"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_expense_amount_positive"),)

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    category = Column(Enum(ExpenseCategory, name="expense_category"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    split_type = Column(Enum(SplitType, name="split_type"), nullable=False)
    paid_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    paid_at = Column(UTCDateTime, nullable=False, default=utcnow)
    receipt_url = Column(String(1000), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    splits = relationship(
        "ExpenseSplit",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseSplit.id",
    )

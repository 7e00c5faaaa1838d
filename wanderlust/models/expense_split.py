from sqlalchemy import Boolean, Column, Enum, ForeignKey, Integer, Numeric
from sqlalchemy.orm import relationship

from wanderlust.core.enums import SplitType
from wanderlust.db.session import Base
from wanderlust.db.types import UTCDateTime


class ExpenseSplit(Base):
    __tablename__ = "expense_splits"

    id = Column(Integer, primary_key=True, index=True)
    expense_id = Column(Integer, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    split_type = Column(Enum(SplitType, name="split_type"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    is_paid = Column(Boolean, nullable=False, default=False)
    paid_at = Column(UTCDateTime, nullable=True)

    expense = relationship("Expense", back_populates="splits")

"""Per-day ticket counters."""

from datetime import date

from sqlalchemy import CheckConstraint, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ictdesk.db.session import Base


class TicketCounter(Base):
    """Last sequence issued for one (day, ticket type) bucket.

    Rows are created on the first allocation of the day and never deleted.
    """

    __tablename__ = "ticket_counter"
    __table_args__ = (
        CheckConstraint("last_sequence >= 0", name="ck_ticket_counter_non_negative"),
    )

    counter_date: Mapped[date] = mapped_column(Date, primary_key=True)
    ticket_type: Mapped[str] = mapped_column(String(8), primary_key=True)
    last_sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<TicketCounter(date={self.counter_date}, type={self.ticket_type}, "
            f"last_sequence={self.last_sequence})>"
        )

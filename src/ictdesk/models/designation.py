"""Job designations offered on the account request form."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ictdesk.db.session import Base


class Designation(Base):
    __tablename__ = "designation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    designation: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)

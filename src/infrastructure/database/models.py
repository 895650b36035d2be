"""Table definitions."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.base import Base


class UserRecord(Base):
    """Row of the ``users`` table.

    The primary key is a SERIAL column, so ids come from the database
    sequence and concurrent inserts never share one.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Auto-incrementing primary key",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        """Return a string representation of the row.

        Returns:
            str: The class name and ID
        """
        return f"<{self.__class__.__name__}(id={self.id})>"

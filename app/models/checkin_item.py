from sqlalchemy import String, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class CheckInItem(Base):
    """
    One row of the single check-in table.

    Check-in metadata, assignments and responses share a partition key
    (checkin#<id>) and are told apart by the sort key and the `type` column.
    `created_by` and `user_id` are the hash keys of the two secondary indexes;
    every other attribute lives in `data`.
    """
    __tablename__ = "checkins"
    __table_args__ = (
        Index("created-by-index", "created_by", "type"),
        Index("user-type-index", "user_id", "type"),
    )

    pk: Mapped[str] = mapped_column(String(100), primary_key=True)
    sk: Mapped[str] = mapped_column(String(100), primary_key=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)

    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

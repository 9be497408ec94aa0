from datetime import datetime
from sqlalchemy import Integer, ForeignKey, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from jagjar.db.database import Base


class TimeTracking(Base):
    """One session of time a user spent on a website. Written by the extension ingest."""

    __tablename__ = 'time_tracking'

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'))
    website_id: Mapped[int] = mapped_column(ForeignKey('websites.id', ondelete='CASCADE'))

    # Seconds
    duration: Mapped[int] = mapped_column(Integer)
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index('ix_time_tracking_date', 'date'),
        Index('ix_time_tracking_website_date', 'website_id', 'date'),
    )

from datetime import datetime
from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from jagjar.db.database import Base


class User(Base):
    """Platform account. Premium users are the ones with is_subscribed set."""

    __tablename__ = 'users'

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True)

    # Subscription
    is_subscribed: Mapped[bool] = mapped_column(Boolean, default=False)
    subscription_type: Mapped[str] = mapped_column(String(20), default='free')

    # Admin capability, checked uniformly by the admin router
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

from datetime import datetime
from sqlalchemy import String, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jagjar.db.database import Base


class Developer(Base):
    """Developer profile. Owns API keys, and through them websites."""

    __tablename__ = 'developers'

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey('users.id', ondelete='CASCADE'), unique=True, index=True
    )
    company_name: Mapped[str | None] = mapped_column(String(200))
    website: Mapped[str | None] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    api_keys: Mapped[list['ApiKey']] = relationship('ApiKey', back_populates='developer')


class ApiKey(Base):
    __tablename__ = 'api_keys'

    id: Mapped[int] = mapped_column(primary_key=True)
    developer_id: Mapped[int] = mapped_column(
        ForeignKey('developers.id', ondelete='CASCADE'), index=True
    )
    key: Mapped[str] = mapped_column(String(64), unique=True)
    name: Mapped[str] = mapped_column(String(100))
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    developer: Mapped['Developer'] = relationship('Developer', back_populates='api_keys')
    websites: Mapped[list['Website']] = relationship('Website', back_populates='api_key')


class Website(Base):
    """A tracked site. Ownership: website -> api key -> developer."""

    __tablename__ = 'websites'

    id: Mapped[int] = mapped_column(primary_key=True)
    api_key_id: Mapped[int] = mapped_column(
        ForeignKey('api_keys.id', ondelete='CASCADE'), index=True
    )
    url: Mapped[str] = mapped_column(String(500))
    name: Mapped[str] = mapped_column(String(200))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    api_key: Mapped['ApiKey'] = relationship('ApiKey', back_populates='websites')

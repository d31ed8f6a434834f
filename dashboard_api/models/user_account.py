"""Local user account model.

Credentials checked by the login endpoint before a bearer token is issued.
"""

import uuid

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from dashboard_api.models.base import Base, TimestampMixin


class UserAccount(Base, TimestampMixin):
    """Username/password account.

    Attributes:
        id: Unique account identifier (UUID)
        username: Login name, stored lower-cased (unique)
        hashed_password: Bcrypt-hashed password
    """

    __tablename__ = "user_accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<UserAccount(username={self.username!r})>"

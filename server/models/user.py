# server/models/user.py

from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String
from . import Base


# -------------------------------
# User Model
# -------------------------------

class User(Base):
    """
    Registered account. Stores the salted password hash, never the password.
    Username and email are unique among rows that are not soft-deleted.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False)
    email = Column(String(100), nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=False, default="")
    avatar = Column(String, nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
    deleted_at = Column(DateTime, nullable=True, index=True)

    __table_args__ = (
        Index(
            "uq_users_username_live", "username", unique=True,
            sqlite_where=deleted_at.is_(None), postgresql_where=deleted_at.is_(None),
        ),
        Index(
            "uq_users_email_live", "email", unique=True,
            sqlite_where=deleted_at.is_(None), postgresql_where=deleted_at.is_(None),
        ),
    )

"""ORM model for application users (auth and RBAC)."""

from sqlalchemy import Column, DateTime, String

from stargazers.models.base import Base


class User(Base):
    """
    User account for cookie-session authentication and role-based access control.

    role: 'admin' or 'user'
    """

    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user")
    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

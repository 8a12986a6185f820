"""
User model - registered learners
"""
from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, event, func
from sqlalchemy.orm import relationship, validates

from elearning.database import Base
from elearning.exceptions import BadRequestError
from elearning.models._validators import EMAIL_PATTERN, require, require_int
from elearning.utils.security import hash_password


class User(Base):
    """
    Users table - credentials and profile fields
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    age = Column(Integer)
    address = Column(Text)
    phone = Column(String(50))
    about = Column(Text)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    orders = relationship("Order", back_populates="user", cascade="all, delete-orphan")

    @validates("email")
    def validate_email(self, key, value):
        require(value, "Email is required", "Email cannot be empty")
        if not EMAIL_PATTERN.match(value):
            raise BadRequestError("Invalid email format")
        return value

    @validates("password")
    def validate_password(self, key, value):
        require(value, "Password is required", "Password cannot be empty")
        if len(value) < 5:
            raise BadRequestError("Password must be at least 5 characters long")
        return value

    @validates("full_name")
    def validate_full_name(self, key, value):
        return require(value, "Full name is required", "Full name cannot be empty")

    @validates("age")
    def validate_age(self, key, value):
        if value is None:
            return None
        return require_int(value, "Age is required", "Age cannot be empty", "Age must be an integer")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


@event.listens_for(User, "before_insert")
def hash_user_password(mapper, connection, target):
    target.password = hash_password(target.password)

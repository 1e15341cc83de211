"""
User Service
Registration and credential checks. Credentials are stored as salted
bcrypt hashes; authentication never compares raw values.
"""

import logging

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from campus_exchange.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from campus_exchange.extensions import db
from campus_exchange.models.user import User
from campus_exchange.validators import normalize_email

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "student"

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def find_user_by_email(email):
    return User.query.filter(func.lower(User.email) == email).first()


def register_user(full_name, email, password, role=None):
    """
    Create a user with a unique (case-insensitive) email.
    Returns the new User; raises ConflictError if the email is taken.
    """
    email = normalize_email(email)
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    if find_user_by_email(email):
        raise ConflictError("Email already exists")

    user = User(
        full_name=full_name.strip(),
        email=email,
        role=role or DEFAULT_ROLE,
    )
    user.set_password(password, rounds=current_app.config["BCRYPT_LOG_ROUNDS"])

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        db.session.rollback()
        raise ConflictError("Email already exists")
    except Exception:
        db.session.rollback()
        raise

    logger.info("Registered user %s", user.user_id)
    return user


def authenticate(email, password):
    """Return the user whose email and password match, else raise AuthenticationError."""
    try:
        email = normalize_email(email)
    except ValidationError:
        raise AuthenticationError("Invalid credentials")

    user = find_user_by_email(email)
    if (
        user is None
        or len(password.encode("utf-8")) > MAX_PASSWORD_BYTES
        or not user.check_password(password)
    ):
        raise AuthenticationError("Invalid credentials")
    return user


def get_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user

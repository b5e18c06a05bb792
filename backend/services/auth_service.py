"""
auth_service.py — Registration, login and token verification
Passwords are stored as bcrypt hashes; sessions are stateless JWTs.
"""

import logging
import re

from email_validator import validate_email, EmailNotValidError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth import hash_password, verify_password, create_token, verify_token
from errors import ValidationError, Conflict, Unauthorized, InvalidToken
from models.user import User

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
MIN_PASSWORD_LENGTH = 6

# Compared against when the email is unknown so both login failures cost a bcrypt check
_DUMMY_HASH = hash_password("notenova-dummy-password")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def public_user(user: User) -> dict:
    return {"id": user.id, "username": user.username, "email": user.email}


def _session_payload(user: User) -> dict:
    token = create_token({
        "user_id": user.id,
        "email": user.email,
        "username": user.username,
    })
    return {"token": token, "user": public_user(user)}


class AuthService:
    @staticmethod
    def validate_registration(username: str, email: str, password: str) -> list[str]:
        """Return every failed registration rule (empty when the input is valid)."""
        errors = []
        username = (username or "").strip()
        if not 3 <= len(username) <= 30:
            errors.append("Username must be between 3 and 30 characters")
        if username and not USERNAME_PATTERN.match(username):
            errors.append("Username can only contain letters, numbers, underscores and hyphens")
        try:
            validate_email(email or "", check_deliverability=False)
        except EmailNotValidError:
            errors.append("Please provide a valid email address")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return errors

    @staticmethod
    def register(db: Session, username: str, email: str, password: str) -> dict:
        errors = AuthService.validate_registration(username, email, password)
        if errors:
            raise ValidationError("Validation failed", errors)

        username = username.strip()
        email = normalize_email(email)

        if db.query(User).filter(User.email == email).first():
            raise Conflict("Email already in use")
        if db.query(User).filter(User.username == username).first():
            raise Conflict("Username already in use")

        user = User(username=username, email=email, password_hash=hash_password(password))
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            db.rollback()
            raise Conflict("Username or email already in use")
        db.refresh(user)
        logger.info("Registered user %s", user.id)
        return _session_payload(user)

    @staticmethod
    def login(db: Session, email: str, password: str) -> dict:
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = db.query(User).filter(User.email == email).first()
        if user is None:
            verify_password(password, _DUMMY_HASH)
            raise Unauthorized("Invalid email or password")
        if not verify_password(password, user.password_hash):
            raise Unauthorized("Invalid email or password")
        return _session_payload(user)

    @staticmethod
    def verify(db: Session, token: str) -> dict:
        payload = verify_token(token)
        if payload is None or payload.get("user_id") is None:
            raise InvalidToken("Invalid or expired token")

        user = db.get(User, payload["user_id"])
        if user is None:
            raise Unauthorized("User not found. Please log in again.")
        return public_user(user)

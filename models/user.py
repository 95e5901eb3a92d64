"""User model definition."""

from __future__ import annotations

from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from services.tokens import IssuedToken, utcnow

from . import db


class User(db.Model):
    """Represents a registered account and its pending token state."""

    __tablename__ = "users"
    __table_args__ = (
        db.CheckConstraint(
            "(verification_token IS NULL) = (verification_token_expires_at IS NULL)",
            name="ck_users_verification_token_pair",
        ),
        db.CheckConstraint(
            "(reset_password_token IS NULL) = (reset_password_expires_at IS NULL)",
            name="ck_users_reset_token_pair",
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    verification_token = db.Column(db.String(16), nullable=True, index=True)
    verification_token_expires_at = db.Column(db.DateTime, nullable=True)
    reset_password_token = db.Column(db.String(64), nullable=True, index=True)
    reset_password_expires_at = db.Column(db.DateTime, nullable=True)
    last_login = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password_hash(self.password_hash, password)

    @property
    def pending_verification(self) -> Optional[IssuedToken]:
        if self.verification_token is None:
            return None
        return IssuedToken(self.verification_token, self.verification_token_expires_at)

    @pending_verification.setter
    def pending_verification(self, token: Optional[IssuedToken]) -> None:
        self.verification_token = token.value if token else None
        self.verification_token_expires_at = token.expires_at if token else None

    @property
    def pending_reset(self) -> Optional[IssuedToken]:
        if self.reset_password_token is None:
            return None
        return IssuedToken(self.reset_password_token, self.reset_password_expires_at)

    @pending_reset.setter
    def pending_reset(self, token: Optional[IssuedToken]) -> None:
        self.reset_password_token = token.value if token else None
        self.reset_password_expires_at = token.expires_at if token else None

    def mark_verified(self) -> None:
        """Mark the email address as verified and drop the pending code."""

        self.is_verified = True
        self.pending_verification = None

    def to_dict(self) -> dict:
        """Serialize the user without the password hash or token values."""

        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "is_verified": self.is_verified,
            "last_login": self.last_login.isoformat() if self.last_login else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"

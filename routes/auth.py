"""Authentication blueprint: signup, email verification, login and password reset."""

from __future__ import annotations

from functools import wraps
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException, InternalServerError
from werkzeug.security import generate_password_hash

from mail import MailDispatcher
from models import db
from models.user import User
from services.session import clear_session, current_user_id, issue_session
from services.tokens import issue_reset_token, issue_verification_code, utcnow
from utils.errors import (
    EmailAlreadyRegistered,
    InvalidCredentials,
    InvalidToken,
    UserNotFound,
)
from utils.request_validation import normalize_email, parse_json_request

auth_bp = Blueprint("auth", __name__)
mail_dispatcher = MailDispatcher()


def _server_error(message: str):
    """Turn unexpected failures in a view into a 500 carrying ``message``."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except HTTPException:
                raise
            except Exception as error:
                db.session.rollback()
                current_app.logger.exception("Error in %s", view.__name__)
                raise InternalServerError(message) from error

        return wrapper

    return decorator


def _claim_token(token_column, expiry_column, user_id: int, value: str, changes: dict) -> bool:
    """Apply ``changes`` only if the user still holds ``value`` unexpired.

    The match and the write happen in a single UPDATE so a token can be
    consumed at most once.
    """

    now = utcnow()
    claimed = User.query.filter(
        User.id == user_id,
        token_column == value,
        expiry_column > now,
    ).update({**changes, User.updated_at: now}, synchronize_session=False)
    return claimed == 1


def _reset_url(token: str) -> str:
    base_url = current_app.config["CLIENT_URL"]
    if current_app.config.get("APP_ENV") == "development":
        base_url = request.headers.get("Origin") or base_url
    return f"{base_url.rstrip('/')}/reset-password/{token}"


@auth_bp.route("/signup", methods=["POST"])
@_server_error("Error signing up.")
def signup():
    """Create an unverified account, start a session and email a verification code."""

    payload = parse_json_request(request, required_keys=("email", "password", "name"))
    email = normalize_email(payload.get("email"))
    password = payload["password"]
    name = payload["name"].strip()

    if User.query.filter_by(email=email).first() is not None:
        raise EmailAlreadyRegistered()

    user = User(email=email, name=name)
    user.set_password(password)
    verification = issue_verification_code(current_app.config["VERIFICATION_TOKEN_TTL"])
    user.pending_verification = verification

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise EmailAlreadyRegistered()

    current_app.logger.info("User %s signed up", user.id)

    response = jsonify(
        {
            "success": True,
            "message": "User created successfully.",
            "user": user.to_dict(),
        }
    )
    response.status_code = HTTPStatus.CREATED
    issue_session(response, user.id)

    mail_dispatcher.send_verification_email(user.email, verification.value)
    return response


@auth_bp.route("/verify-email", methods=["POST"])
@_server_error("Server error.")
def verify_email():
    """Mark the account holding an unexpired verification code as verified."""

    payload = parse_json_request(request, required_keys=("code",), numeric_keys=("code",))
    code = str(payload["code"]).strip()

    user = User.query.filter(
        User.verification_token == code,
        User.verification_token_expires_at > utcnow(),
    ).first()
    if user is None:
        raise InvalidToken("Invalid or expired verification code.")

    claimed = _claim_token(
        User.verification_token,
        User.verification_token_expires_at,
        user.id,
        code,
        {
            User.is_verified: True,
            User.verification_token: None,
            User.verification_token_expires_at: None,
        },
    )
    if not claimed:
        db.session.rollback()
        raise InvalidToken("Invalid or expired verification code.")
    db.session.commit()

    current_app.logger.info("User %s verified their email", user.id)
    mail_dispatcher.send_welcome_email(user.email, user.name)

    return jsonify(
        {
            "success": True,
            "message": "Email verified successfully.",
            "user": user.to_dict(),
        }
    )


@auth_bp.route("/login", methods=["POST"])
@_server_error("Error logging in.")
def login():
    """Authenticate with email and password and start a session."""

    payload = parse_json_request(request, required_keys=("email", "password"))
    email = normalize_email(payload.get("email"))
    password = payload["password"]

    user = User.query.filter_by(email=email).first()
    if user is None or not user.check_password(password):
        raise InvalidCredentials()

    user.last_login = utcnow()
    db.session.commit()

    response = jsonify(
        {
            "success": True,
            "message": "Logged in successfully.",
            "user": user.to_dict(),
        }
    )
    issue_session(response, user.id)
    return response


@auth_bp.route("/logout", methods=["POST"])
def logout():
    """Drop the session cookie. Always succeeds."""

    response = jsonify({"success": True, "message": "Logged out successfully."})
    clear_session(response)
    return response


@auth_bp.route("/forgot-password", methods=["POST"])
@_server_error("Error sending password reset email.")
def forgot_password():
    """Issue a one-hour reset token and email a link to the reset page."""

    payload = parse_json_request(request, required_keys=("email",))
    email = normalize_email(payload.get("email"))

    user = User.query.filter_by(email=email).first()
    if user is None:
        raise UserNotFound()

    reset = issue_reset_token(current_app.config["RESET_TOKEN_TTL"])
    user.pending_reset = reset
    db.session.commit()

    reset_url = _reset_url(reset.value)
    current_app.logger.info("Password reset requested for user %s", user.id)
    mail_dispatcher.send_password_reset_email(user.email, reset_url)

    body = {"success": True, "message": "Password reset link sent to your email."}
    if current_app.config.get("APP_ENV") == "development":
        body["reset_url"] = reset_url
    return jsonify(body)


@auth_bp.route("/reset-password/<token>", methods=["POST"])
@_server_error("Error resetting password.")
def reset_password(token: str):
    """Set a new password for the holder of an unexpired reset token."""

    payload = parse_json_request(request, required_keys=("password",))
    password = payload["password"]

    user = User.query.filter(
        User.reset_password_token == token,
        User.reset_password_expires_at > utcnow(),
    ).first()
    if user is None:
        raise InvalidToken("Invalid or expired reset token.")

    claimed = _claim_token(
        User.reset_password_token,
        User.reset_password_expires_at,
        user.id,
        token,
        {
            User.password_hash: generate_password_hash(password),
            User.reset_password_token: None,
            User.reset_password_expires_at: None,
        },
    )
    if not claimed:
        db.session.rollback()
        raise InvalidToken("Invalid or expired reset token.")
    db.session.commit()

    current_app.logger.info("Password reset for user %s", user.id)
    mail_dispatcher.send_reset_success_email(user.email)

    return jsonify({"success": True, "message": "Password reset successful."})


@auth_bp.route("/check-auth", methods=["GET"])
@jwt_required()
@_server_error("Server error.")
def check_auth():
    """Return the user identified by the session cookie."""

    user_id = current_user_id()
    user = db.session.get(User, user_id) if user_id is not None else None
    if user is None:
        raise UserNotFound()

    return jsonify({"success": True, "user": user.to_dict()})

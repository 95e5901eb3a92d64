"""Plain-text bodies for account notification emails."""

from __future__ import annotations

from .abstract_mailer import OutgoingEmail

VERIFICATION = "verification"
WELCOME = "welcome"
PASSWORD_RESET = "password_reset"
RESET_SUCCESS = "reset_success"


def verification_email(to: str, code: str) -> OutgoingEmail:
    body = f"""Hello,

Thank you for signing up. Your verification code is:

    {code}

Enter this code on the verification page to finish creating your account.
The code expires in 24 hours.

If you did not create an account, you can ignore this email.
"""
    return OutgoingEmail(to=to, subject="Verify your email", body=body, category=VERIFICATION)


def welcome_email(to: str, name: str) -> OutgoingEmail:
    body = f"""Hello {name},

Your email address is verified and your account is ready to use.
"""
    return OutgoingEmail(to=to, subject="Welcome!", body=body, category=WELCOME)


def password_reset_email(to: str, reset_url: str) -> OutgoingEmail:
    body = f"""Hello,

We received a request to reset your password. Follow the link below to
choose a new one:

{reset_url}

The link expires in 1 hour. If you did not ask for a reset, you can ignore
this email and your password will stay the same.
"""
    return OutgoingEmail(
        to=to, subject="Reset your password", body=body, category=PASSWORD_RESET
    )


def reset_success_email(to: str) -> OutgoingEmail:
    body = """Hello,

Your password has been changed. If you did not make this change, reset your
password again straight away and contact support.
"""
    return OutgoingEmail(
        to=to, subject="Password reset successful", body=body, category=RESET_SUCCESS
    )

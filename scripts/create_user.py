"""Create or update a verified user account."""

import argparse

from app import create_app
from models import db
from models.user import User
from utils.request_validation import normalize_email


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--name", default="Admin")
    args = parser.parse_args()

    email = normalize_email(args.email)
    app = create_app()
    with app.app_context():
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email, name=args.name)
            db.session.add(user)
            action = "created"
        else:
            user.name = args.name
            action = "updated"
        user.set_password(args.password)
        user.mark_verified()
        db.session.commit()
        print(f"User {action}: {email}")


if __name__ == "__main__":
    main()

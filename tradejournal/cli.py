"""CLI tool for admin operations.

Usage:
    python -m tradejournal.cli create-user
    python -m tradejournal.cli analytics <email>
"""

import sys
import getpass

from sqlmodel import Session, select

from tradejournal.database import engine, create_db_and_tables
from tradejournal.models.user import User
from tradejournal.services.analytics import compute_analytics
from tradejournal.services.auth import hash_password, new_totp_secret, totp_uri
from tradejournal.services.trades import list_trades
from tradejournal.utils.logging import setup_logging


def create_user():
    """Create a journal user, optionally with TOTP two-factor login."""
    create_db_and_tables()

    email = input("Email: ").strip().lower()
    if not email or "@" not in email:
        print("A valid email is required.")
        sys.exit(1)

    with Session(engine) as session:
        existing = session.exec(select(User).where(User.email == email)).first()
        if existing:
            print(f"User '{email}' already exists.")
            sys.exit(1)

    password = getpass.getpass("Password: ")
    password_confirm = getpass.getpass("Confirm password: ")
    if password != password_confirm:
        print("Passwords do not match.")
        sys.exit(1)
    if len(password) < 8:
        print("Password must be at least 8 characters.")
        sys.exit(1)

    totp_secret = None
    if input("Enable TOTP two-factor login? [y/N]: ").strip().lower() == "y":
        totp_secret = new_totp_secret()

    user = User(
        email=email,
        hashed_password=hash_password(password),
        totp_secret=totp_secret,
    )

    with Session(engine) as session:
        session.add(user)
        session.commit()

    print(f"\nUser '{email}' created successfully.")
    if totp_secret:
        print(f"\nTOTP Secret: {totp_secret}")
        print(f"TOTP URI: {totp_uri(totp_secret, email)}")
        print("Add the secret or URI to your authenticator app.")


def show_analytics(email: str):
    """Print a user's analytics summary as JSON."""
    create_db_and_tables()

    with Session(engine) as session:
        user = session.exec(select(User).where(User.email == email.strip().lower())).first()
        if user is None:
            print(f"User '{email}' not found.")
            sys.exit(1)
        summary = compute_analytics(list_trades(session, user.id))

    print(summary.model_dump_json(by_alias=True, indent=2))


def main():
    setup_logging()
    if len(sys.argv) < 2:
        print("Usage: python -m tradejournal.cli <command>")
        print("Commands: create-user, analytics <email>")
        sys.exit(1)

    command = sys.argv[1]
    if command == "create-user":
        create_user()
    elif command == "analytics":
        if len(sys.argv) != 3:
            print("Usage: python -m tradejournal.cli analytics <email>")
            sys.exit(1)
        show_analytics(sys.argv[2])
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()

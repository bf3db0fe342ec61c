"""
Dev utility: register a user (with profile) and print a session token.

The token is printed once; only its hash is stored.
"""

import argparse

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from linkhub.core.config import settings
from linkhub.db.base import Base
from linkhub.services.auth_service import register


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--username", required=True)
    parser.add_argument("--display-name", default=None)
    args = parser.parse_args()

    engine = create_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    with Session(engine, expire_on_commit=False) as session:
        _, profile, token = register(
            session,
            {
                "email": args.email,
                "password": args.password,
                "username": args.username,
                "display_name": args.display_name,
            },
        )

    print(f"Created @{profile.username}")
    print("Session token (store this now; it will not be shown again):")
    print(token)


if __name__ == "__main__":
    main()

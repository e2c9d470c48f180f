"""Issue an API key for an existing user: ``python scripts/create_api_key.py <username>``."""
from __future__ import annotations

import argparse

from sqlalchemy import select

from eventflow.db import get_sessionmaker, init_engine
from eventflow.models.api_key import ApiKey
from eventflow.models.user import User
from eventflow.utils.apikey import gen_key


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("username")
    parser.add_argument("--name", default=None, help="key label (defaults to cli-<username>)")
    args = parser.parse_args()

    init_engine()
    db = get_sessionmaker()()
    try:
        user = db.scalars(select(User).where(User.username == args.username)).first()
        if user is None:
            raise SystemExit(f"No user named {args.username!r}")

        raw, prefix, key_hash = gen_key()
        api_key = ApiKey(
            name=args.name or f"cli-{user.username}",
            prefix=prefix,
            key_hash=key_hash,
            user_id=user.id,
            is_active=True,
        )
        db.add(api_key)
        db.commit()
        db.refresh(api_key)

        print("==========================================")
        print(f"API key created for {user.username} ({user.role.value})")
        print("Use this key in your Authorization header:")
        print(f"    Authorization: Bearer {raw}")
        print(f"(DB id: {api_key.id}, prefix: {api_key.prefix})")
        print("==========================================")
    finally:
        db.close()


if __name__ == "__main__":
    main()

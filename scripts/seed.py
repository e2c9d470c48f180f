"""Seed one user per role, a few venues and their API keys."""
from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

from eventflow import models  # noqa: E402
from eventflow.config import get_settings  # noqa: E402
from eventflow.db import create_all, get_sessionmaker, init_engine  # noqa: E402
from eventflow.utils.apikey import gen_key  # noqa: E402

DEPARTMENT = "Computer Science"
SEED_USERS = [
    ("coordinator", models.UserRole.COORDINATOR, DEPARTMENT),
    ("hod", models.UserRole.HOD, DEPARTMENT),
    ("dean", models.UserRole.DEAN, None),
    ("principal", models.UserRole.PRINCIPAL, None),
    ("admin", models.UserRole.ADMIN, None),
]
SEED_VENUES = [
    ("Main Auditorium", 600, "Block A"),
    ("Seminar Hall 1", 120, "Block B"),
    ("Conference Room", 30, "Admin Block"),
]


def main() -> None:
    settings = get_settings()
    print(f"Using database: {settings.database_url}")

    init_engine()
    create_all()
    session = get_sessionmaker()()

    try:
        tokens: list[tuple[str, str]] = []
        for username, role, department in SEED_USERS:
            user = models.User(
                username=username,
                email=f"{username}@example.edu",
                full_name=username.capitalize(),
                role=role,
                department=department,
            )
            session.add(user)
            session.flush()
            raw, prefix, key_hash = gen_key()
            session.add(
                models.ApiKey(name=f"seed-{username}", prefix=prefix, key_hash=key_hash, user_id=user.id)
            )
            tokens.append((username, raw))

        for name, capacity, location in SEED_VENUES:
            session.add(models.Venue(name=name, capacity=capacity, location=location))
        session.commit()

        print("Seed data inserted. API keys (shown once):")
        for username, raw in tokens:
            print(f"    {username:<12} Authorization: Bearer {raw}")
    finally:
        session.close()


if __name__ == "__main__":
    main()

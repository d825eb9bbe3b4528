"""Test fixtures package: factories and access checker stubs shared by the suite."""

import uuid

from app.models.organization import User


def make_user(**kwargs) -> User:
    defaults = {
        "id": uuid.uuid4(),
        "email": "analyst@test.com",
        "name": "Test Analyst",
    }
    defaults.update(kwargs)
    return User(**defaults)


async def allow_all(user, company_id) -> bool:
    return True


async def deny_all(user, company_id) -> bool:
    return False

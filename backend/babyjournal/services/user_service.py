"""
BabyJournal Backend — Account Service
======================================

What:  Registration, credential checks and user lookup.

Passwords:
    Hashed with werkzeug.security (salted PBKDF2/scrypt, algorithm chosen by
    werkzeug). Verification runs in a worker thread because hashing is
    deliberately slow.

Registration Rules:
    - refused (403) while SiteConfig.allow_new_registrations is false
    - duplicate email → Conflict (409)
    - the very first account becomes the site admin, so a fresh install
      can reach the admin settings
"""

import asyncio
import logging
from typing import Optional

from sqlalchemy import func, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from babyjournal.database import fetch_one, run_mutation
from babyjournal.exceptions import ConflictError, ForbiddenError, ValidationError
from babyjournal.models import SiteConfig, User
from babyjournal.schemas.auth import LoginRequest, RegisterRequest, UserResponse

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password."


class UserService:

    async def registrations_open(self, db: AsyncSession) -> bool:
        row = await fetch_one(
            db, select(SiteConfig.allow_new_registrations).where(SiteConfig.id == 1)
        )
        return bool(row and row.allow_new_registrations)

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> UserResponse:
        if not await self.registrations_open(db):
            raise ForbiddenError("New user registration is currently disabled.")

        existing = await fetch_one(db, select(User.id).where(User.email == payload.email))
        if existing is not None:
            raise ConflictError("That email is already registered.", context={"field": "email"})

        count_row = await fetch_one(db, select(func.count()).select_from(User))
        role = "admin" if count_row[0] == 0 else "user"
        password_hash = await asyncio.to_thread(generate_password_hash, payload.password)

        try:
            result = await run_mutation(
                db,
                insert(User.__table__).values(
                    name=payload.name,
                    email=payload.email,
                    password_hash=password_hash,
                    role=role,
                ),
            )
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same email
            await db.rollback()
            raise ConflictError("That email is already registered.", context={"field": "email"}) from e

        logger.info("User %s registered (role=%s)", result.inserted_id, role)
        user = await self.get_user(db, result.inserted_id)
        return UserResponse.model_validate(user)

    async def authenticate(self, db: AsyncSession, payload: LoginRequest) -> UserResponse:
        """Raises ValidationError (400) for an unknown email or a wrong password alike."""
        row = await fetch_one(db, select(User).where(User.email == payload.email))
        if row is None:
            raise ValidationError(INVALID_CREDENTIALS)
        user = row[0]
        if not await asyncio.to_thread(check_password_hash, user.password_hash, payload.password):
            logger.info("Failed login for user %s", user.id)
            raise ValidationError(INVALID_CREDENTIALS)
        return UserResponse.model_validate(user)

    async def get_user(self, db: AsyncSession, user_id: int) -> Optional[User]:
        row = await fetch_one(db, select(User).where(User.id == user_id))
        return row[0] if row else None


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()

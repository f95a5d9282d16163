"""
User CRUD operations.

This module owns user records: creation with uniqueness checks, lookups,
profile updates, password comparison and the embedded tracked-city list.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm.exc import StaleDataError

from weather_tracker.core.exceptions import (
    CityAlreadyTrackedError,
    DuplicateEmailError,
    DuplicateUsernameError,
    InternalError,
    NotFoundError,
)
from weather_tracker.core.security import hash_and_store, verify_password
from weather_tracker.crud.base import CRUDBase
from weather_tracker.models.user import User
from weather_tracker.schemas.auth import UserCreate, UserUpdate
from weather_tracker.schemas.cities import TrackedCityCreate
from weather_tracker.utils.logging_config import get_logger

logger = get_logger(__name__)

TrackedCityList = List[Dict[str, Any]]


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    """
    CRUD operations for User model.
    """

    # Attempts for a tracked-city read-modify-write that loses a version race
    MAX_WRITE_ATTEMPTS = 3

    async def create(self, db: AsyncSession, *, obj_in: UserCreate) -> User:
        """
        Create a new user with a hashed password and no tracked cities.

        Args:
            db: Database session
            obj_in: User registration data

        Returns:
            Created user instance

        Raises:
            DuplicateEmailError: If the email is already registered
            DuplicateUsernameError: If the username is already taken
        """
        email = obj_in.email.strip().lower()
        username = obj_in.username.strip()

        await self._ensure_unique(db, email=email, username=username)

        db_obj = User(email=email, username=username, tracked_cities=[])
        hash_and_store(db_obj, obj_in.password)
        db.add(db_obj)
        try:
            await db.commit()
        except IntegrityError:
            # Lost an insert race; the unique indexes decide
            await db.rollback()
            await self._ensure_unique(db, email=email, username=username)
            raise DuplicateEmailError()
        await db.refresh(db_obj)
        logger.info(f"Created user {db_obj.id} ({username})")
        return db_obj

    async def _ensure_unique(
        self,
        db: AsyncSession,
        *,
        email: Optional[str] = None,
        username: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> None:
        conditions = []
        if email is not None:
            conditions.append(User.email == email)
        if username is not None:
            conditions.append(User.username == username)
        if not conditions:
            return

        query = select(User.id, User.email, User.username).where(or_(*conditions))
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        rows = (await db.execute(query)).all()

        for row in rows:
            if email is not None and row.email == email:
                raise DuplicateEmailError()
        for row in rows:
            if username is not None and row.username == username:
                raise DuplicateUsernameError()

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[User]:
        """
        Get user by email address (case-insensitive).

        Args:
            db: Database session
            email: User email address

        Returns:
            User instance or None if not found
        """
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalars().first()

    async def get_by_username(self, db: AsyncSession, *, username: str) -> Optional[User]:
        """
        Get user by username.

        Args:
            db: Database session
            username: Username

        Returns:
            User instance or None if not found
        """
        result = await db.execute(select(User).where(User.username == username.strip()))
        return result.scalars().first()

    async def update(self, db: AsyncSession, *, db_obj: User, obj_in: UserUpdate) -> User:
        """
        Update profile fields. A new password is hashed before it is stored.

        Raises:
            DuplicateUsernameError: If the new username is taken by another user
        """
        update_data = obj_in.model_dump(exclude_unset=True, exclude_none=True)

        if "username" in update_data:
            username = update_data["username"].strip()
            await self._ensure_unique(db, username=username, exclude_id=db_obj.id)
            db_obj.username = username
        if "password" in update_data:
            hash_and_store(db_obj, update_data["password"])

        db.add(db_obj)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateUsernameError()
        await db.refresh(db_obj)
        return db_obj

    async def compare_password(self, user: User, candidate: str) -> bool:
        """
        Check a candidate password against the user's stored hash.

        Bcrypt is deliberately slow, so the comparison runs off the event loop.
        """
        return await asyncio.to_thread(verify_password, candidate, user.hashed_password)

    async def get_tracked_cities(self, db: AsyncSession, *, user_id: int) -> TrackedCityList:
        """
        Get the user's tracked cities in insertion order.

        Raises:
            NotFoundError: If the user does not exist
        """
        db_obj = await self.get(db, user_id)
        if db_obj is None:
            raise NotFoundError("User not found")
        return list(db_obj.tracked_cities or [])

    async def add_tracked_city(
        self, db: AsyncSession, *, user_id: int, city: TrackedCityCreate
    ) -> TrackedCityList:
        """
        Append a city to the user's tracked list.

        Returns:
            The updated tracked-city list

        Raises:
            NotFoundError: If the user does not exist
            CityAlreadyTrackedError: If a city with the same id is already tracked
        """

        def append(cities: TrackedCityList) -> TrackedCityList:
            if any(c.get("id") == city.id for c in cities):
                raise CityAlreadyTrackedError()
            entry = city.model_dump(by_alias=False)
            entry["added_at"] = datetime.now(timezone.utc).isoformat()
            return cities + [entry]

        return await self._modify_tracked_cities(db, user_id=user_id, mutate=append)

    async def remove_tracked_city(
        self, db: AsyncSession, *, user_id: int, city_id: str
    ) -> TrackedCityList:
        """
        Remove a city from the user's tracked list. Removing an id that is
        not tracked leaves the list unchanged.

        Raises:
            NotFoundError: If the user does not exist
        """
        return await self._modify_tracked_cities(
            db,
            user_id=user_id,
            mutate=lambda cities: [c for c in cities if c.get("id") != city_id],
        )

    async def _modify_tracked_cities(
        self,
        db: AsyncSession,
        *,
        user_id: int,
        mutate: Callable[[TrackedCityList], TrackedCityList],
    ) -> TrackedCityList:
        # The UPDATE only matches the version that was read, so a concurrent
        # writer makes it fail with StaleDataError and the whole
        # read-check-write is repeated against the fresh row.
        for attempt in range(1, self.MAX_WRITE_ATTEMPTS + 1):
            db_obj = await self.get(db, user_id, fresh=True)
            if db_obj is None:
                raise NotFoundError("User not found")

            current = list(db_obj.tracked_cities or [])
            updated = mutate(current)
            if updated == current:
                return current

            db_obj.tracked_cities = updated
            try:
                await db.commit()
            except StaleDataError:
                await db.rollback()
                logger.warning(
                    f"Concurrent update of tracked cities for user {user_id} "
                    f"(attempt {attempt}/{self.MAX_WRITE_ATTEMPTS})"
                )
                continue
            await db.refresh(db_obj)
            return list(db_obj.tracked_cities)

        raise InternalError("Tracked cities were modified concurrently")


# Create instance of CRUDUser
user = CRUDUser(User)

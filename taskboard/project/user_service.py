"""User registration and lookup."""

import logging
from typing import List, Optional

from .exceptions import UserNotFoundError
from .models import User
from .schemas import CreateUserRequest, UserResponse
from .storage import Database

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Database):
        self.db = db

    def create_user(self, request: CreateUserRequest) -> UserResponse:
        """Register a user.

        Raises:
            BusinessRuleError: If the email is already registered
        """
        user = User(name=request.name, email=request.email, role=request.role)
        with self.db.unit_of_work() as uow:
            uow.users.add(user)
            uow.commit()

        logger.info(f"Registered user {user.id} ({user.role})")
        return UserResponse.from_user(user)

    def list_users(self) -> List[UserResponse]:
        with self.db.unit_of_work() as uow:
            users = uow.users.list()
        return [UserResponse.from_user(u) for u in users]

    def get_user(self, user_id: str) -> Optional[UserResponse]:
        with self.db.unit_of_work() as uow:
            user = uow.users.get_by_id(user_id)
        return UserResponse.from_user(user) if user else None

    def delete_user(self, user_id: str) -> None:
        """Delete a user.

        Raises:
            UserNotFoundError: If the user does not exist
            BusinessRuleError: If the user still owns projects or authored task history
        """
        with self.db.unit_of_work() as uow:
            user = uow.users.get_by_id(user_id)
            if user is None:
                raise UserNotFoundError("User not found", user_id)

            uow.users.delete(user)
            uow.commit()

        logger.info(f"Deleted user {user_id}")

"""
User Accounts

Users own every other entity. A user's username is fixed at creation;
only the profile fields (name, email, avatar) can change.
"""

from typing import Any, Mapping, Optional

import structlog

from backoffice.errors import validate_payload
from backoffice.storage.models import User, UserCreate, UserUpdate
from backoffice.storage.store import EntityStore

logger = structlog.get_logger(__name__)


class UserService:
    """User CRUD on top of the entity store"""
    
    def __init__(self, store: EntityStore):
        self.store = store
    
    def create_user(self, data: Mapping[str, Any]) -> User:
        payload = validate_payload(UserCreate, data, "user")
        user = self.store.users.create(payload.model_dump())
        logger.info("User created", id=user.id, username=user.username)
        return user
    
    def get_user(self, user_id: int) -> Optional[User]:
        return self.store.users.get(user_id)
    
    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.store.users.find(lambda u: u.username == username)
    
    def update_user(self, user_id: int, data: Mapping[str, Any]) -> Optional[User]:
        changes = validate_payload(UserUpdate, data, "user").model_dump(exclude_unset=True)
        return self.store.users.update(user_id, changes)

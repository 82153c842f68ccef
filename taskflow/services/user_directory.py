# taskflow/services/user_directory.py
import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from taskflow.models.user import User, Role
from taskflow.utils.errors import ConflictError, InvalidCredentialsError, NotFoundError
from taskflow.utils.security import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)


class UserDirectory:
    """Registration, login and administration of user accounts"""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def register(self, name: str, email: str, password: str, role: Role = Role.EMPLOYEE) -> int:
        """Create a user and return its id; only a bcrypt hash of the password is stored"""
        existing_user = self.db.query(User).filter(User.email == email).first()
        if existing_user:
            raise ConflictError("User already exists")

        new_user = User(
            name=name,
            email=email,
            hashed_password=hash_password(password),
            role=role,
        )
        self.db.add(new_user)
        self.db.commit()
        self.db.refresh(new_user)

        logger.info("Registered user %s with role %s", new_user.id, new_user.role.value)
        return new_user.id

    def authenticate(self, email: str, password: str) -> Tuple[str, User]:
        """
        Check credentials and issue an access token embedding {id, role}

        Unknown email and wrong password fail with the same error.
        """
        user = self.db.query(User).filter(User.email == email).first()
        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Rejected login for %s", email)
            raise InvalidCredentialsError()

        token = create_access_token(data={"id": user.id, "role": user.role.value})
        logger.info("User %s logged in", user.id)
        return token, user

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

    def list_employees(self) -> List[User]:
        return self.db.query(User).filter(User.role == Role.EMPLOYEE).order_by(User.name).all()

    def delete_user(self, user_id: int) -> None:
        # Tasks and attachments referencing the user are kept; their references are cleared
        user = self.get_user(user_id)
        self.db.delete(user)
        self.db.commit()
        logger.info("Deleted user %s", user_id)

    def change_role(self, user_id: int, role: Role) -> User:
        user = self.get_user(user_id)
        user.role = role
        self.db.commit()
        self.db.refresh(user)
        logger.info("Changed role of user %s to %s", user_id, role.value)
        return user

# taskflow/routers/user.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from taskflow.database import get_db
from taskflow.schemas import (
    UserCreate, UserLogin, RoleUpdate, UserBrief, UserOut, RegisterOut, MessageOut, Token,
)
from taskflow.services.user_directory import UserDirectory
from taskflow.utils.permissions import Permission
from taskflow.utils.auth import require_permission

router = APIRouter()

@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, db: Session = Depends(get_db)):
    user_id = UserDirectory(db).register(user.name, user.email, user.password, user.role)
    return {"message": "User registered successfully", "user_id": user_id}

@router.post("/login", response_model=Token)
def login(user: UserLogin, db: Session = Depends(get_db)):
    token, db_user = UserDirectory(db).authenticate(user.email, user.password)
    return {"message": "Login successful", "token": token, "user": db_user}

@router.get("", response_model=List[UserOut], dependencies=[Depends(require_permission(Permission.LIST_USERS))])
def get_users(db: Session = Depends(get_db)):
    """All users, newest first; password hashes are never returned"""
    return UserDirectory(db).list_users()

@router.get(
    "/employees",
    response_model=List[UserBrief],
    dependencies=[Depends(require_permission(Permission.LIST_EMPLOYEES))],
)
def get_employees(db: Session = Depends(get_db)):
    return UserDirectory(db).list_employees()

@router.delete("/{user_id}", response_model=MessageOut, dependencies=[Depends(require_permission(Permission.DELETE_USER))])
def delete_user(user_id: int, db: Session = Depends(get_db)):
    UserDirectory(db).delete_user(user_id)
    return {"message": "User deleted"}

@router.patch("/{user_id}/role", response_model=UserOut, dependencies=[Depends(require_permission(Permission.CHANGE_ROLE))])
def update_user_role(user_id: int, role_update: RoleUpdate, db: Session = Depends(get_db)):
    return UserDirectory(db).change_role(user_id, role_update.role)

# storefront/api/auth.py
# Роуты для регистрации, получения JWT токена и выхода.
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from storefront.core import security
from storefront.core.config import settings
from storefront.db.session import get_db
from storefront.models.user import User, RoleEnum
from storefront.schemas.user import UserOut, UserRegister

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    """
    Регистрация пользователя: email + password.
    По умолчанию роль = user.
    """
    existing = db.query(User).filter(User.email == payload.email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    user = User(
        email=payload.email,
        hashed_password=security.get_password_hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        avatar_url=payload.avatar_url,
        role=RoleEnum.user,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return {"status": "success", "data": {"user": UserOut.model_validate(user).dump()}}

@router.post("/token")
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """
    Логин: возвращает access_token (JWT) и профиль для клиента.
    OAuth2PasswordRequestForm ожидает username и password, поэтому используем email как username.
    """
    user = db.query(User).filter(User.email == form_data.username).first()
    if not user or not security.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Incorrect credentials")
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    token = security.create_access_token(subject=str(user.id), expires_delta=access_token_expires)
    return {
        "access_token": token,
        "token_type": "bearer",
        "data": {"user": UserOut.model_validate(user).dump()},
    }

@router.get("/logout")
def logout(current_user: User = Depends(security.get_current_user)):
    """JWT не хранится на сервере: клиент просто забывает токен."""
    logger.info(f"User {current_user.id} logged out")
    return {"status": "success"}

@router.get("/me")
def me(current_user: User = Depends(security.get_current_user)):
    return {"status": "success", "data": {"user": UserOut.model_validate(current_user).dump()}}

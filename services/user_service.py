import logging
from typing import List, Optional

from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from models import User
from schemas import UserCreate, UserLogin
from security import get_password_hash, verify_password, create_access_token

logger = logging.getLogger(__name__)


def _normalize_email(value: str) -> str:
    return (value or "").strip().lower()


class UserService:
    def create_user(self, db: Session, user: UserCreate) -> User:
        email = _normalize_email(user.email)

        # Verificar se email já existe
        if db.query(User).filter(User.email == email).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email já cadastrado"
            )

        db_user = User(
            email=email,
            full_name=user.full_name.strip(),
            phone=user.phone,
            role=user.role,
            password_hash=get_password_hash(user.password)
        )

        db.add(db_user)
        db.commit()
        db.refresh(db_user)

        logger.info(f"Usuário {db_user.email} criado com perfil {db_user.role}")
        return db_user

    def login_user(self, db: Session, login_data: UserLogin):
        user = self.get_user_by_email(db, login_data.email)

        if not user or not verify_password(login_data.password, user.password_hash):
            logger.warning(f"Tentativa de login inválida para {login_data.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Credenciais inválidas"
            )

        access_token = create_access_token(user.email)

        return {
            "access_token": access_token,
            "token_type": "bearer",
            "user": user
        }

    def get_user_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(
            User.email == _normalize_email(email),
            User.is_active == True
        ).first()

    def get_user(self, db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Usuário não encontrado"
            )
        return user

    def get_users(self, db: Session) -> List[User]:
        return db.query(User).order_by(User.full_name).all()

    def deactivate_user(self, db: Session, user_id: int):
        db_user = self.get_user(db, user_id)
        db_user.is_active = False
        db.commit()
        logger.info(f"Usuário {db_user.email} desativado")

user_service = UserService()

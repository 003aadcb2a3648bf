from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config.database import get_db, get_settings
from app.config.settings import Settings
from app.core.auth.dependencies import get_current_user, require_admin
from app.core.auth.schemas import LoginRequest, LoginResponse, Principal
from app.shared.utils.pagination import Page, PageParams, get_page_params
from .service import UserService
from .schemas import (
    UserCreate, UserUpdate, UserResponse, UserDetail, UserCreatedResponse,
    UserMessage, RoleResponse
)

router = APIRouter(prefix="/usuarios", tags=["Usuarios"])


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Login de usuario

    Retorna un JWT con ``{id, usuario, rol}`` para usar como ``Authorization: Bearer <token>``
    """
    return UserService(db, settings).login(credentials)


@router.get("/perfil", response_model=UserDetail)
def get_profile(
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    return UserService(db, settings).get_profile(current_user)


@router.get("/roles/listar", response_model=List[RoleResponse])
def list_roles(
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    return UserService(db, settings).list_roles()


@router.get("", response_model=Page[UserResponse])
def list_users(
    activo: Optional[bool] = Query(None, description="Filtrar por estado activo"),
    rol: Optional[str] = Query(None, description="Filtrar por nombre de rol"),
    page_params: PageParams = Depends(get_page_params),
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    return UserService(db, settings).list_users(page_params, activo=activo, rol=rol)


@router.get("/{user_id}", response_model=UserDetail)
def get_user(
    user_id: int,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    return UserService(db, settings).get_user(user_id)


@router.post("", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Crear usuario (solo admin). Contraseña de al menos 6 caracteres."""
    return UserService(db, settings).create_user(user_data)


@router.put("/{user_id}", response_model=UserMessage)
def update_user(
    user_id: int,
    update_data: UserUpdate,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    return UserService(db, settings).update_user(user_id, update_data)


@router.delete("/{user_id}", response_model=UserMessage)
def delete_user(
    user_id: int,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Eliminar usuario (solo admin). No se puede eliminar el propio usuario."""
    return UserService(db, settings).delete_user(user_id, current_user)

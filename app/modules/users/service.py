import logging
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from app.config.settings import Settings
from app.core.auth.schemas import LoginRequest, LoginResponse, Principal
from app.core.auth.security import verify_password, get_password_hash, create_access_token
from app.core.exceptions import (
    ValidationError, ConflictError, NotFoundError, AuthError, ForbiddenError,
    NoFieldsToUpdate
)
from app.shared.utils.pagination import Page, PageParams
from .repository import UserRepository
from .schemas import UserCreate, UserUpdate, UserResponse, UserDetail, RoleResponse

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class UserService:
    """
    Servicio de usuarios: login, perfil y administración de cuentas
    """

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.repository = UserRepository(db)

    # ==================== AUTENTICACIÓN ====================

    def login(self, credentials: LoginRequest) -> LoginResponse:
        """
        Validar credenciales y emitir un JWT con ``{id, usuario, rol}``.

        El usuario inactivo se rechaza con 403 antes de comparar la contraseña.
        """
        if not credentials.usuario or not credentials.password:
            raise ValidationError("Usuario y contraseña son obligatorios")

        user = self.repository.get_by_username(credentials.usuario)
        if not user:
            raise AuthError("Credenciales inválidas")

        if not user.activo:
            raise ForbiddenError("Usuario inactivo. Contacte al administrador")

        if not verify_password(credentials.password, user.password):
            logger.warning(f"Intento de login fallido para '{credentials.usuario}'")
            raise AuthError("Credenciales inválidas")

        principal = Principal(id=user.id_usuario, usuario=user.usuario, rol=user.nombre_rol)
        token = create_access_token(principal.model_dump(), self.settings)

        logger.info(f"🔐 Login exitoso: {user.usuario} ({principal.rol})")
        return LoginResponse(mensaje="Login exitoso", token=token, usuario=principal)

    def get_profile(self, current_user: Principal) -> UserDetail:
        return self.get_user(current_user.id)

    # ==================== GESTIÓN DE USUARIOS ====================

    def list_users(
        self,
        params: PageParams,
        activo: Optional[bool] = None,
        rol: Optional[str] = None
    ) -> Page[UserResponse]:
        users, total = self.repository.list_users(params, activo=activo, rol=rol)
        return Page[UserResponse].build(
            [UserResponse.model_validate(u) for u in users], total, params
        )

    def get_user(self, user_id: int) -> UserDetail:
        user = self.repository.get_by_id(user_id)
        if not user:
            raise NotFoundError("Usuario no encontrado")
        return UserDetail.model_validate(user)

    def _check_password(self, password: str):
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres"
            )

    def _check_role(self, role_id: int):
        if not self.repository.role_exists(role_id):
            raise ValidationError("El rol especificado no existe")

    def create_user(self, data: UserCreate) -> Dict[str, Any]:
        if not data.usuario or not data.password or not data.id_rol:
            raise ValidationError("Usuario, contraseña y rol son obligatorios")

        self._check_password(data.password)
        self._check_role(data.id_rol)

        if self.repository.username_in_use(data.usuario):
            raise ConflictError("El usuario ya existe")

        try:
            user = self.repository.create({
                "usuario": data.usuario,
                "password": get_password_hash(data.password, self.settings.bcrypt_rounds),
                "id_rol": data.id_rol,
                "activo": data.activo
            })
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("El usuario ya existe") from e

        logger.info(f"Usuario creado: {user.usuario} (rol {user.id_rol})")
        return {
            "mensaje": "Usuario creado exitosamente",
            "id_usuario": user.id_usuario,
            "usuario": user.usuario,
            "id_rol": user.id_rol
        }

    def update_user(self, user_id: int, data: UserUpdate) -> Dict[str, Any]:
        if not self.repository.get_by_id(user_id):
            raise NotFoundError("Usuario no encontrado")

        patch: Dict[str, Any] = {}

        if data.usuario:
            if self.repository.username_in_use(data.usuario, exclude_id=user_id):
                raise ConflictError("El nombre de usuario ya está en uso")
            patch["usuario"] = data.usuario

        if data.password:
            self._check_password(data.password)
            patch["password"] = get_password_hash(data.password, self.settings.bcrypt_rounds)

        if data.id_rol:
            self._check_role(data.id_rol)
            patch["id_rol"] = data.id_rol

        if data.activo is not None:
            patch["activo"] = data.activo

        if not patch:
            raise NoFieldsToUpdate()

        self.repository.update(user_id, patch)
        return {"mensaje": "Usuario actualizado exitosamente", "id_usuario": user_id}

    def delete_user(self, user_id: int, current_user: Principal) -> Dict[str, Any]:
        if current_user.id == user_id:
            raise ValidationError("No puedes eliminar tu propio usuario")

        try:
            deleted = self.repository.delete(user_id)
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(
                "No se puede eliminar el usuario porque tiene cotizaciones asociadas",
                sugerencia="Considere desactivar el usuario en lugar de eliminarlo"
            ) from e

        if not deleted:
            raise NotFoundError("Usuario no encontrado")

        logger.info(f"Usuario {user_id} eliminado por {current_user.usuario}")
        return {"mensaje": "Usuario eliminado exitosamente", "id_usuario": user_id}

    def list_roles(self) -> List[RoleResponse]:
        return [RoleResponse.model_validate(r) for r in self.repository.list_roles()]

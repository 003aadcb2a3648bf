# app/core/auth/dependencies.py
"""
Proveedor único del contexto de autenticación.

Todas las rutas protegidas dependen de ``get_current_user`` (token válido) o de
``require_roles([...])`` (token válido + rol permitido).
"""
from typing import List, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError as PydanticValidationError

from app.config.database import get_settings
from app.config.settings import Settings
from app.core.exceptions import AuthError, ForbiddenError
from .schemas import Principal
from .security import decode_token

# auto_error=False: la ausencia de token se responde con 403 "Token requerido"
bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_ROLE = "admin"


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings)
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise ForbiddenError("Token requerido")

    payload = decode_token(credentials.credentials, settings)
    try:
        return Principal(
            id=payload.get("id"),
            usuario=payload.get("usuario") or "",
            rol=payload.get("rol")
        )
    except PydanticValidationError as e:
        raise AuthError("Token inválido: faltan datos del usuario") from e


def require_roles(roles: List[str]):
    """Dependency factory: exige que el usuario autenticado tenga uno de ``roles``"""

    async def role_checker(current_user: Principal = Depends(get_current_user)) -> Principal:
        if current_user.rol not in roles:
            raise ForbiddenError("Acceso denegado: se requiere rol administrador"
                                 if roles == [ADMIN_ROLE] else None)
        return current_user

    return role_checker


require_admin = require_roles([ADMIN_ROLE])

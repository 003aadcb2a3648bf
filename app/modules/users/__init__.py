"""
Módulo de Usuarios - Login JWT, perfil y gestión de cuentas
"""

from .router import router as users_router
from .service import UserService

__all__ = ["users_router", "UserService"]

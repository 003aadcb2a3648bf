# app/core/auth/security.py - Hash de contraseñas y tokens JWT

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config.settings import Settings
from app.core.exceptions import AuthError

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica una contraseña contra su hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Hash con formato desconocido
        return False


def get_password_hash(password: str, rounds: int = 10) -> str:
    return pwd_context.copy(bcrypt__rounds=rounds).hash(password)


def create_access_token(
    data: Dict[str, Any],
    settings: Settings,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Crea un JWT firmado con la clave de la configuración.

    Claims:
        - id, usuario, rol: identidad del usuario
        - exp: expiración (por defecto ``access_token_expire_minutes``)
        - iat: fecha de emisión
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire, "iat": now})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    """
    Decodifica y valida un JWT.

    Raises:
        AuthError (401) si el token es inválido o expiró
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        raise AuthError("Token inválido o expirado") from e

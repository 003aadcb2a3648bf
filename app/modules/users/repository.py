from typing import List, Optional, Tuple
from sqlalchemy.orm import Session, joinedload

from app.shared.database.models import User, Role
from app.shared.utils.pagination import PageParams, paginate


class UserRepository:
    """
    Repositorio de usuarios y roles
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_username(self, usuario: str) -> Optional[User]:
        return self.db.query(User).options(joinedload(User.rol)).filter(
            User.usuario == usuario
        ).first()

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).options(joinedload(User.rol)).filter(
            User.id_usuario == user_id
        ).first()

    def username_in_use(self, usuario: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(User.id_usuario).filter(User.usuario == usuario)
        if exclude_id is not None:
            query = query.filter(User.id_usuario != exclude_id)
        return query.first() is not None

    def role_exists(self, role_id: int) -> bool:
        return self.db.query(Role.id_rol).filter(Role.id_rol == role_id).first() is not None

    def list_users(
        self,
        params: PageParams,
        activo: Optional[bool] = None,
        rol: Optional[str] = None
    ) -> Tuple[List[User], int]:
        query = self.db.query(User).join(Role, User.id_rol == Role.id_rol).options(
            joinedload(User.rol)
        )
        if activo is not None:
            query = query.filter(User.activo == activo)
        if rol:
            query = query.filter(Role.nombre_rol == rol)

        total = query.count()
        query = query.order_by(User.created_at.desc(), User.id_usuario.desc())
        return paginate(query, params), total

    def list_roles(self) -> List[Role]:
        return self.db.query(Role).order_by(Role.nombre_rol).all()

    def create(self, user_data: dict) -> User:
        db_user = User(**user_data)
        self.db.add(db_user)
        self.db.commit()
        self.db.refresh(db_user)
        return db_user

    def update(self, user_id: int, patch: dict) -> Optional[User]:
        user = self.db.query(User).filter(User.id_usuario == user_id).first()
        if user:
            for key, value in patch.items():
                setattr(user, key, value)
            self.db.commit()
            self.db.refresh(user)
        return user

    def delete(self, user_id: int) -> bool:
        rows_deleted = self.db.query(User).filter(User.id_usuario == user_id).delete()
        self.db.commit()
        return rows_deleted > 0

from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func

from app.shared.database.models import Client, Quotation
from app.shared.utils.pagination import PageParams, paginate


class ClientRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, client_id: int) -> Optional[Client]:
        return self.db.query(Client).filter(Client.id_cliente == client_id).first()

    def rut_in_use(self, rut: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Client.id_cliente).filter(Client.rut == rut)
        if exclude_id is not None:
            query = query.filter(Client.id_cliente != exclude_id)
        return query.first() is not None

    def email_in_use(self, correo: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Client.id_cliente).filter(Client.correo == correo)
        if exclude_id is not None:
            query = query.filter(Client.id_cliente != exclude_id)
        return query.first() is not None

    def count_quotations(self, client_id: int) -> int:
        return self.db.query(func.count(Quotation.id_cotizacion)).filter(
            Quotation.id_cliente == client_id
        ).scalar() or 0

    def list_clients(
        self,
        params: PageParams,
        nombre: Optional[str] = None,
        rut: Optional[str] = None,
        correo: Optional[str] = None
    ) -> Tuple[List[Client], int]:
        query = self.db.query(Client)
        if nombre:
            query = query.filter(Client.nombre.ilike(f"%{nombre}%"))
        if rut:
            query = query.filter(Client.rut.ilike(f"%{rut}%"))
        if correo:
            query = query.filter(Client.correo.ilike(f"%{correo}%"))

        total = query.count()
        return paginate(query.order_by(Client.nombre), params), total

    def create(self, client_data: dict) -> Client:
        client = Client(**client_data)
        self.db.add(client)
        self.db.commit()
        self.db.refresh(client)
        return client

    def update(self, client_id: int, patch: dict) -> bool:
        rows_updated = self.db.query(Client).filter(
            Client.id_cliente == client_id
        ).update(patch, synchronize_session="fetch")
        self.db.commit()
        return rows_updated > 0

    def delete(self, client_id: int) -> bool:
        rows_deleted = self.db.query(Client).filter(Client.id_cliente == client_id).delete()
        self.db.commit()
        return rows_deleted > 0

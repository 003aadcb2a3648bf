from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import (
    ValidationError, ConflictError, NotFoundError, NoFieldsToUpdate
)
from app.shared.utils.pagination import Page, PageParams
from app.shared.utils.rut import validate_rut, format_rut
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate, ClientResponse


class ClientService:
    """Registro de clientes: RUT validado y único, correo único"""

    def __init__(self, db: Session):
        self.db = db
        self.repository = ClientRepository(db)

    def list_clients(
        self,
        params: PageParams,
        nombre: Optional[str] = None,
        rut: Optional[str] = None,
        correo: Optional[str] = None
    ) -> Page[ClientResponse]:
        clients, total = self.repository.list_clients(params, nombre=nombre, rut=rut, correo=correo)
        return Page[ClientResponse].build(
            [ClientResponse.model_validate(c) for c in clients], total, params
        )

    def get_client(self, client_id: int) -> ClientResponse:
        client = self.repository.get_by_id(client_id)
        if not client:
            raise NotFoundError("Cliente no encontrado")
        return ClientResponse.model_validate(client)

    def create_client(self, data: ClientCreate) -> Dict[str, Any]:
        if not validate_rut(data.rut):
            raise ValidationError("RUT inválido. Formato esperado: 12345678-9")

        rut = format_rut(data.rut)
        if self.repository.rut_in_use(rut):
            raise ConflictError("Ya existe un cliente con ese RUT")

        if data.correo and self.repository.email_in_use(data.correo):
            raise ConflictError("Ya existe un cliente con ese correo")

        try:
            client = self.repository.create({**data.model_dump(), "rut": rut})
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Ya existe un cliente con ese RUT o correo") from e

        return {
            "mensaje": "Cliente creado exitosamente",
            "id_cliente": client.id_cliente,
            "rut": client.rut,
            "nombre": client.nombre,
            "correo": client.correo
        }

    def update_client(self, client_id: int, data: ClientUpdate) -> Dict[str, Any]:
        if not self.repository.get_by_id(client_id):
            raise NotFoundError("Cliente no encontrado")

        patch = data.model_dump(exclude_unset=True)
        for field in ("rut", "nombre"):
            if field in patch and not patch[field]:
                patch.pop(field)

        if "rut" in patch:
            if not validate_rut(patch["rut"]):
                raise ValidationError("RUT inválido")
            patch["rut"] = format_rut(patch["rut"])
            if self.repository.rut_in_use(patch["rut"], exclude_id=client_id):
                raise ConflictError("El RUT ya está en uso por otro cliente")

        if patch.get("correo") and self.repository.email_in_use(patch["correo"], exclude_id=client_id):
            raise ConflictError("El correo ya está en uso por otro cliente")

        if not patch:
            raise NoFieldsToUpdate()

        try:
            self.repository.update(client_id, patch)
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("El RUT o correo ya está en uso por otro cliente") from e

        return {"mensaje": "Cliente actualizado exitosamente", "id_cliente": client_id}

    def delete_client(self, client_id: int) -> Dict[str, Any]:
        total = self.repository.count_quotations(client_id)
        if total > 0:
            raise ConflictError(
                "No se puede eliminar el cliente porque tiene cotizaciones asociadas",
                cotizaciones_asociadas=total
            )

        if not self.repository.delete(client_id):
            raise NotFoundError("Cliente no encontrado")

        return {"mensaje": "Cliente eliminado exitosamente", "id_cliente": client_id}

    @staticmethod
    def check_rut(rut: str) -> Dict[str, Any]:
        valido = validate_rut(rut)
        return {
            "valido": valido,
            "rut_formateado": format_rut(rut) if valido else None,
            "mensaje": "RUT válido" if valido else "RUT inválido"
        }

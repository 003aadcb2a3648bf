from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, require_admin
from app.core.auth.schemas import Principal
from app.shared.utils.pagination import Page, PageParams, get_page_params
from .service import ClientService
from .schemas import (
    ClientCreate, ClientUpdate, ClientResponse, ClientCreatedResponse,
    ClientMessage, RutValidationRequest, RutValidationResponse
)

router = APIRouter(prefix="/clientes", tags=["Clientes"])


@router.get("", response_model=Page[ClientResponse])
def list_clients(
    nombre: Optional[str] = Query(None, description="Filtrar por nombre (contiene)"),
    rut: Optional[str] = Query(None, description="Filtrar por RUT (contiene)"),
    correo: Optional[str] = Query(None, description="Filtrar por correo (contiene)"),
    page_params: PageParams = Depends(get_page_params),
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ClientService(db).list_clients(page_params, nombre=nombre, rut=rut, correo=correo)


@router.post("/validar-rut", response_model=RutValidationResponse)
def validate_rut_endpoint(payload: RutValidationRequest):
    """Validar RUT chileno (público, no requiere token)"""
    return ClientService.check_rut(payload.rut)


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: int,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ClientService(db).get_client(client_id)


@router.post("", response_model=ClientCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_client(
    client_data: ClientCreate,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Crear cliente (solo admin)

    - RUT obligatorio y válido; se guarda en formato 12345678-9
    - RUT y correo únicos
    """
    return ClientService(db).create_client(client_data)


@router.put("/{client_id}", response_model=ClientMessage)
def update_client(
    client_id: int,
    update_data: ClientUpdate,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return ClientService(db).update_client(client_id, update_data)


@router.delete("/{client_id}", response_model=ClientMessage)
def delete_client(
    client_id: int,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Eliminar cliente sin cotizaciones asociadas (solo admin)"""
    return ClientService(db).delete_client(client_id)

# tests/test_quotations.py
"""
Tests del motor de cotizaciones: creación atómica, estados y eliminación
"""

import time
from decimal import Decimal
from unittest.mock import patch

import anyio
import httpx
from sqlalchemy import func
from sqlalchemy.exc import OperationalError

from app.modules.quotations.repository import QuotationRepository
from app.shared.database.models import Quotation, QuotationItem, Shipment


def _count(session_factory, model):
    with session_factory() as db:
        return db.query(func.count()).select_from(model).scalar()


class TestCreateQuotation:

    def test_creates_header_and_line_items(self, client, seller_headers, quotation_payload, seed):
        response = client.post("/cotizaciones", json=quotation_payload, headers=seller_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["mensaje"] == "Cotización creada exitosamente"
        cotizacion = body["cotizacion"]
        assert cotizacion["estado"] == "pendiente"
        assert cotizacion["total"] == 2900
        assert cotizacion["id_cliente"] == seed["client_id"]
        assert cotizacion["id_usuario"] == seed["seller_id"]
        assert cotizacion["cliente_nombre"] == "Hospital Regional"

    def test_line_item_subtotal_and_price_snapshot(self, client, seller_headers, quotation_payload, session_factory):
        response = client.post("/cotizaciones", json=quotation_payload, headers=seller_headers)
        quotation_id = response.json()["cotizacion"]["id_cotizacion"]

        with session_factory() as db:
            items = db.query(QuotationItem).filter(QuotationItem.id_cotizacion == quotation_id).all()
            assert len(items) == 1
            assert items[0].cantidad == 3
            assert items[0].precio_unitario == Decimal("1000")
            assert items[0].descuento == Decimal("100")
            assert items[0].subtotal == Decimal("2900")

    def test_total_is_sum_of_subtotals(self, client, seller_headers, seed, session_factory):
        payload = {
            "id_cliente": seed["client_id"],
            "fecha_emision": "2024-05-10",
            "productos": [
                {"id_producto": seed["scalpel_id"], "cantidad": 2},
                {"id_producto": seed["scissors_id"], "cantidad": 1, "descuento": 500}
            ]
        }
        response = client.post("/cotizaciones", json=payload, headers=seller_headers)

        assert response.status_code == 201
        quotation_id = response.json()["cotizacion"]["id_cotizacion"]
        assert response.json()["cotizacion"]["total"] == 4000

        with session_factory() as db:
            quotation = db.get(Quotation, quotation_id)
            subtotal_sum = db.query(func.sum(QuotationItem.subtotal)).filter(
                QuotationItem.id_cotizacion == quotation_id
            ).scalar()
            assert quotation.total == Decimal(str(subtotal_sum))

    def test_price_change_does_not_affect_existing_quotation(
        self, client, seller_headers, admin_headers, quotation_payload, seed
    ):
        quotation_id = client.post(
            "/cotizaciones", json=quotation_payload, headers=seller_headers
        ).json()["cotizacion"]["id_cotizacion"]

        client.put(f"/productos/{seed['scalpel_id']}", json={"precio": 5000}, headers=admin_headers)

        detail = client.get(f"/cotizaciones/{quotation_id}", headers=seller_headers).json()
        assert detail["total"] == 2900
        assert detail["productos"][0]["precio_unitario"] == 1000

    def test_inactive_product_writes_nothing(self, client, seller_headers, seed, session_factory):
        payload = {
            "id_cliente": seed["client_id"],
            "fecha_emision": "2024-05-10",
            "productos": [
                {"id_producto": seed["scalpel_id"], "cantidad": 1},
                {"id_producto": seed["inactive_product_id"], "cantidad": 1}
            ]
        }
        response = client.post("/cotizaciones", json=payload, headers=seller_headers)

        assert response.status_code == 400
        assert response.json()["id_producto"] == seed["inactive_product_id"]
        assert "no está activo" in response.json()["mensaje"]
        assert _count(session_factory, Quotation) == 0
        assert _count(session_factory, QuotationItem) == 0

    def test_missing_product_writes_nothing(self, client, seller_headers, seed, session_factory):
        payload = {
            "id_cliente": seed["client_id"],
            "fecha_emision": "2024-05-10",
            "productos": [
                {"id_producto": seed["scalpel_id"], "cantidad": 1},
                {"id_producto": 9999, "cantidad": 1}
            ]
        }
        response = client.post("/cotizaciones", json=payload, headers=seller_headers)

        assert response.status_code == 404
        assert response.json() == {"mensaje": "Producto con ID 9999 no encontrado", "id_producto": 9999}
        assert _count(session_factory, Quotation) == 0
        assert _count(session_factory, QuotationItem) == 0

    def test_non_positive_quantity_writes_nothing(self, client, seller_headers, seed, session_factory):
        payload = {
            "id_cliente": seed["client_id"],
            "fecha_emision": "2024-05-10",
            "productos": [
                {"id_producto": seed["scalpel_id"], "cantidad": 2},
                {"id_producto": seed["scissors_id"], "cantidad": 0}
            ]
        }
        response = client.post("/cotizaciones", json=payload, headers=seller_headers)

        assert response.status_code == 400
        assert response.json()["mensaje"] == "La cantidad debe ser mayor a 0"
        assert _count(session_factory, Quotation) == 0
        assert _count(session_factory, QuotationItem) == 0

    def test_negative_discount_rejected(self, client, seller_headers, seed, session_factory):
        payload = {
            "id_cliente": seed["client_id"],
            "fecha_emision": "2024-05-10",
            "productos": [{"id_producto": seed["scalpel_id"], "cantidad": 1, "descuento": -5}]
        }
        response = client.post("/cotizaciones", json=payload, headers=seller_headers)

        assert response.status_code == 400
        assert response.json()["mensaje"] == "El descuento debe ser mayor o igual a 0"
        assert _count(session_factory, Quotation) == 0

    def test_invalid_date_format(self, client, seller_headers, quotation_payload, session_factory):
        quotation_payload["fecha_emision"] = "10/05/2024"
        response = client.post("/cotizaciones", json=quotation_payload, headers=seller_headers)

        assert response.status_code == 400
        assert response.json()["mensaje"] == "Formato de fecha inválido, use YYYY-MM-DD"
        assert _count(session_factory, Quotation) == 0

    def test_impossible_date_rejected(self, client, seller_headers, quotation_payload):
        quotation_payload["fecha_emision"] = "2024-02-30"
        response = client.post("/cotizaciones", json=quotation_payload, headers=seller_headers)

        assert response.status_code == 400
        assert response.json()["mensaje"] == "Formato de fecha inválido, use YYYY-MM-DD"

    def test_empty_line_items(self, client, seller_headers, quotation_payload):
        quotation_payload["productos"] = []
        response = client.post("/cotizaciones", json=quotation_payload, headers=seller_headers)

        assert response.status_code == 400
        assert response.json()["mensaje"] == "Debe incluir al menos un producto"

    def test_missing_required_fields(self, client, seller_headers, quotation_payload):
        del quotation_payload["fecha_emision"]
        response = client.post("/cotizaciones", json=quotation_payload, headers=seller_headers)

        assert response.status_code == 400
        assert response.json()["mensaje"] == "id_cliente y fecha_emision son obligatorios"

    def test_unknown_client(self, client, seller_headers, quotation_payload, session_factory):
        quotation_payload["id_cliente"] = 9999
        response = client.post("/cotizaciones", json=quotation_payload, headers=seller_headers)

        assert response.status_code == 404
        assert response.json()["mensaje"] == "Cliente no encontrado"
        assert _count(session_factory, Quotation) == 0

    def test_storage_failure_rolls_back(self, client, seller_headers, quotation_payload, session_factory):
        with patch.object(
            QuotationRepository,
            "recalculate_total",
            side_effect=OperationalError("UPDATE cotizaciones", {}, Exception("disk I/O error"))
        ):
            response = client.post("/cotizaciones", json=quotation_payload, headers=seller_headers)

        assert response.status_code == 500
        assert response.json() == {"mensaje": "Error al crear cotización"}
        assert _count(session_factory, Quotation) == 0
        assert _count(session_factory, QuotationItem) == 0

    def test_requires_token(self, client, quotation_payload):
        response = client.post("/cotizaciones", json=quotation_payload)

        assert response.status_code == 403
        assert response.json()["mensaje"] == "Token requerido"


class TestUpdateQuotation:

    def test_admin_changes_state(self, client, admin_headers, seller_headers, create_quotation):
        quotation_id = create_quotation()

        response = client.put(
            f"/cotizaciones/{quotation_id}",
            json={"estado": "aprobada", "observaciones": "OK gerencia"},
            headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json() == {
            "mensaje": "Cotización actualizada exitosamente",
            "id_cotizacion": quotation_id
        }
        detail = client.get(f"/cotizaciones/{quotation_id}", headers=seller_headers).json()
        assert detail["estado"] == "aprobada"
        assert detail["observaciones"] == "OK gerencia"

    def test_observations_only_keeps_state(self, client, admin_headers, create_quotation):
        quotation_id = create_quotation()

        response = client.put(
            f"/cotizaciones/{quotation_id}", json={"observaciones": "Nueva nota"}, headers=admin_headers
        )

        assert response.status_code == 200
        detail = client.get(f"/cotizaciones/{quotation_id}", headers=admin_headers).json()
        assert detail["estado"] == "pendiente"
        assert detail["observaciones"] == "Nueva nota"

    def test_invalid_state(self, client, admin_headers, create_quotation):
        quotation_id = create_quotation()

        response = client.put(
            f"/cotizaciones/{quotation_id}", json={"estado": "facturada"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["mensaje"] == "Estado inválido"
        assert response.json()["estados_validos"] == ["pendiente", "aprobada", "rechazada", "enviada"]

    def test_no_fields(self, client, admin_headers, create_quotation):
        quotation_id = create_quotation()

        response = client.put(f"/cotizaciones/{quotation_id}", json={}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["mensaje"] == "No hay campos para actualizar"

    def test_empty_state_is_ignored(self, client, admin_headers, create_quotation, session_factory):
        quotation_id = create_quotation()

        response = client.put(f"/cotizaciones/{quotation_id}", json={"estado": ""}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["mensaje"] == "No hay campos para actualizar"

        updated = client.put(
            f"/cotizaciones/{quotation_id}",
            json={"estado": "", "observaciones": "Revisar plazos"},
            headers=admin_headers
        )
        assert updated.status_code == 200
        with session_factory() as db:
            quotation = db.get(Quotation, quotation_id)
            assert quotation.estado == "pendiente"
            assert quotation.observaciones == "Revisar plazos"

    def test_not_found(self, client, admin_headers):
        response = client.put("/cotizaciones/9999", json={"estado": "aprobada"}, headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["mensaje"] == "Cotización no encontrada"

    def test_seller_cannot_change_state(self, client, seller_headers, create_quotation):
        quotation_id = create_quotation()

        response = client.put(
            f"/cotizaciones/{quotation_id}", json={"estado": "aprobada"}, headers=seller_headers
        )

        assert response.status_code == 403


class TestDeleteQuotation:

    def test_deletes_header_and_line_items(self, client, admin_headers, create_quotation, session_factory):
        quotation_id = create_quotation()

        response = client.delete(f"/cotizaciones/{quotation_id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["id_cotizacion"] == quotation_id
        assert _count(session_factory, Quotation) == 0
        assert _count(session_factory, QuotationItem) == 0

    def test_refused_with_shipment(self, client, admin_headers, approved_quotation, session_factory):
        shipment = client.post(
            "/despachos",
            json={
                "id_cotizacion": approved_quotation,
                "fecha_envio": "2024-05-12",
                "direccion_envio": "Av. Siempre Viva 123"
            },
            headers=admin_headers
        ).json()

        response = client.delete(f"/cotizaciones/{approved_quotation}", headers=admin_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["mensaje"] == "No se puede eliminar la cotización porque tiene un despacho asociado"
        assert body["id_despacho"] == shipment["id_despacho"]
        assert "sugerencia" in body
        assert _count(session_factory, Quotation) == 1
        assert _count(session_factory, Shipment) == 1

    def test_not_found(self, client, admin_headers):
        response = client.delete("/cotizaciones/9999", headers=admin_headers)

        assert response.status_code == 404


class TestQueryQuotations:

    def test_detail_includes_client_seller_and_items(self, client, seller_headers, create_quotation):
        quotation_id = create_quotation()

        response = client.get(f"/cotizaciones/{quotation_id}", headers=seller_headers)

        assert response.status_code == 200
        detail = response.json()
        assert detail["cliente_rut"] == "12345678-5"
        assert detail["vendedor"] == "vendedor"
        assert detail["despacho"] is None
        assert len(detail["productos"]) == 1
        item = detail["productos"][0]
        assert item["producto_codigo"] == "BIS-001"
        assert item["nombre_categoria"] == "Instrumental quirúrgico"
        assert item["subtotal"] == 2900

    def test_list_with_pagination_and_filters(self, client, seller_headers, admin_headers, create_quotation):
        first = create_quotation()
        create_quotation()
        client.put(f"/cotizaciones/{first}", json={"estado": "rechazada"}, headers=admin_headers)

        response = client.get("/cotizaciones", params={"limit": 1}, headers=seller_headers)
        assert response.status_code == 200
        page = response.json()
        assert page["page"] == 1
        assert page["limit"] == 1
        assert page["total"] == 2
        assert page["totalPages"] == 2
        assert len(page["data"]) == 1
        assert page["data"][0]["cantidad_productos"] == 1

        filtered = client.get("/cotizaciones", params={"estado": "rechazada"}, headers=seller_headers).json()
        assert filtered["total"] == 1
        assert filtered["data"][0]["id_cotizacion"] == first

    def test_list_rejects_unknown_state_filter(self, client, seller_headers):
        response = client.get("/cotizaciones", params={"estado": "facturada"}, headers=seller_headers)

        assert response.status_code == 400
        assert response.json()["mensaje"] == "Datos de entrada inválidos"

    def test_stats(self, client, seller_headers, admin_headers, create_quotation):
        first = create_quotation()
        create_quotation()
        client.put(f"/cotizaciones/{first}", json={"estado": "aprobada"}, headers=admin_headers)

        stats = client.get("/cotizaciones/estadisticas/resumen", headers=seller_headers).json()

        assert stats["total_cotizaciones"] == 2
        assert stats["pendientes"] == 1
        assert stats["aprobadas"] == 1
        assert stats["monto_total"] == 5800
        assert stats["monto_promedio"] == 2900


class TestConcurrentRequests:

    def test_slow_storage_call_does_not_block_other_requests(self, app, seller_headers, quotation_payload):
        original_get_client = QuotationRepository.get_client
        results = {}

        def slow_get_client(repository, client_id):
            time.sleep(1.0)
            return original_get_client(repository, client_id)

        async def create(http):
            response = await http.post("/cotizaciones", json=quotation_payload, headers=seller_headers)
            results["create"] = response.status_code

        async def health(http):
            await anyio.sleep(0.3)
            start = time.perf_counter()
            response = await http.get("/health")
            results["health"] = response.status_code
            results["health_latency"] = time.perf_counter() - start

        async def run():
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
                async with anyio.create_task_group() as tg:
                    tg.start_soon(create, http)
                    tg.start_soon(health, http)

        with patch.object(QuotationRepository, "get_client", slow_get_client):
            anyio.run(run)

        assert results["create"] == 201
        assert results["health"] == 200
        assert results["health_latency"] < 0.5

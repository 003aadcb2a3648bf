# tests/test_reports.py
"""
Tests de reportes (solo admin) y endpoints de servicio
"""

import pytest


@pytest.fixture
def sold_quotation(client, admin_headers, approved_quotation):
    response = client.post(
        "/despachos",
        json={
            "id_cotizacion": approved_quotation,
            "fecha_envio": "2024-05-12",
            "direccion_envio": "Av. Siempre Viva 123"
        },
        headers=admin_headers
    )
    assert response.status_code == 201, response.text
    return approved_quotation


class TestReports:

    def test_requires_admin(self, client, seller_headers):
        assert client.get("/reportes/dashboard", headers=seller_headers).status_code == 403

    def test_sales_by_month(self, client, admin_headers, create_quotation, quotation_payload):
        create_quotation()
        quotation_payload["fecha_emision"] = "2024-06-02"
        create_quotation(quotation_payload)

        response = client.get("/reportes/ventas", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [row["periodo"] for row in data] == ["2024-06", "2024-05"]
        assert data[0]["total_cotizaciones"] == 1
        assert data[0]["monto_total"] == 2900

    def test_sales_date_range(self, client, admin_headers, create_quotation, quotation_payload):
        create_quotation()
        quotation_payload["fecha_emision"] = "2024-06-02"
        create_quotation(quotation_payload)

        response = client.get(
            "/reportes/ventas", params={"fecha_desde": "2024-06-01"}, headers=admin_headers
        )

        body = response.json()
        assert body["periodo"] == {"desde": "2024-06-01", "hasta": None}
        assert [row["periodo"] for row in body["data"]] == ["2024-06"]

    def test_top_products_counts_sold_only(self, client, admin_headers, create_quotation, sold_quotation):
        create_quotation()

        response = client.get("/reportes/productos-mas-vendidos", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["codigo"] == "BIS-001"
        assert data[0]["cantidad_vendida"] == 3
        assert data[0]["veces_cotizado"] == 1
        assert data[0]["monto_total"] == 2900

    def test_top_clients(self, client, admin_headers, sold_quotation):
        data = client.get("/reportes/clientes-top", headers=admin_headers).json()["data"]

        assert data[0]["rut"] == "12345678-5"
        assert data[0]["total_cotizaciones"] == 1
        assert data[0]["ultima_cotizacion"] == "2024-05-10"

    def test_quotations_by_state(self, client, admin_headers, create_quotation, sold_quotation):
        create_quotation()

        data = client.get("/reportes/cotizaciones-por-estado", headers=admin_headers).json()["data"]

        assert {row["estado"]: row["cantidad"] for row in data} == {"pendiente": 1, "enviada": 1}

    def test_pending_shipments(self, client, admin_headers, sold_quotation):
        body = client.get("/reportes/despachos-pendientes", headers=admin_headers).json()

        assert body["total_pendientes"] == 1
        row = body["data"][0]
        assert row["cliente_nombre"] == "Hospital Regional"
        assert row["estado"] == "preparando"
        assert row["dias_desde_envio"] >= 0

    def test_dashboard(self, client, admin_headers, create_quotation, sold_quotation):
        create_quotation()

        body = client.get("/reportes/dashboard", headers=admin_headers).json()

        stats = body["estadisticas_generales"]
        assert stats["total_clientes"] == 1
        assert stats["productos_activos"] == 2
        assert stats["total_cotizaciones"] == 2
        assert stats["cotizaciones_pendientes"] == 1
        assert stats["despachos_pendientes"] == 1
        assert stats["ventas_totales"] == 2900
        assert stats["usuarios_activos"] == 2
        assert len(body["ultimas_cotizaciones"]) == 2


class TestServiceEndpoints:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["endpoints"]["cotizaciones"] == "/cotizaciones"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "OK"

    def test_unknown_route(self, client):
        response = client.get("/no-existe")

        assert response.status_code == 404
        assert response.json()["mensaje"] == "El endpoint solicitado no existe"
        assert response.json()["path"] == "/no-existe"

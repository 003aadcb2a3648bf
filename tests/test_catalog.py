# tests/test_catalog.py
"""
Tests del catálogo: productos y categorías
"""


class TestProducts:

    def test_create_product(self, client, admin_headers, seed):
        response = client.post(
            "/productos",
            json={
                "codigo": "SEP-010",
                "nombre": "Separador Farabeuf",
                "precio": 8990,
                "id_categoria": seed["category_id"],
                "stock": 5
            },
            headers=admin_headers
        )

        assert response.status_code == 201
        assert response.json()["codigo"] == "SEP-010"
        assert response.json()["precio"] == 8990

    def test_duplicate_code(self, client, admin_headers):
        response = client.post(
            "/productos", json={"codigo": "BIS-001", "nombre": "Otro", "precio": 10}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["mensaje"] == "Ya existe un producto con ese código"

    def test_unknown_category(self, client, admin_headers):
        response = client.post(
            "/productos",
            json={"codigo": "NEW-1", "nombre": "Nuevo", "precio": 10, "id_categoria": 999},
            headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["mensaje"] == "La categoría especificada no existe"

    def test_price_must_be_positive(self, client, admin_headers):
        response = client.post(
            "/productos", json={"codigo": "NEW-1", "nombre": "Nuevo", "precio": 0}, headers=admin_headers
        )

        assert response.status_code == 400

    def test_get_by_code(self, client, seller_headers, seed):
        response = client.get("/productos/codigo/BIS-001", headers=seller_headers)

        assert response.status_code == 200
        assert response.json()["id_producto"] == seed["scalpel_id"]
        assert response.json()["nombre_categoria"] == "Instrumental quirúrgico"

    def test_list_only_active(self, client, seller_headers):
        response = client.get("/productos", params={"activo": True}, headers=seller_headers)

        assert response.status_code == 200
        assert response.json()["total"] == 2
        assert all(p["activo"] for p in response.json()["data"])

    def test_update_stock_and_toggle_active(self, client, admin_headers, seed):
        product_id = seed["inactive_product_id"]

        stock = client.patch(f"/productos/{product_id}/stock", json={"stock": 12}, headers=admin_headers)
        assert stock.status_code == 200
        assert stock.json()["stock"] == 12

        active = client.patch(f"/productos/{product_id}/activar", json={"activo": True}, headers=admin_headers)
        assert active.status_code == 200
        assert active.json()["mensaje"] == "Producto activado exitosamente"

        detail = client.get(f"/productos/{product_id}", headers=admin_headers).json()
        assert detail["stock"] == 12
        assert detail["activo"] is True

    def test_negative_stock_rejected(self, client, admin_headers, seed):
        response = client.patch(
            f"/productos/{seed['scalpel_id']}/stock", json={"stock": -1}, headers=admin_headers
        )

        assert response.status_code == 400

    def test_delete_quoted_product_refused(self, client, admin_headers, seed, create_quotation):
        create_quotation()

        response = client.delete(f"/productos/{seed['scalpel_id']}", headers=admin_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["cotizaciones_asociadas"] == 1
        assert body["sugerencia"] == "Considere desactivar el producto en lugar de eliminarlo"

    def test_delete_product(self, client, admin_headers, seed):
        response = client.delete(f"/productos/{seed['scissors_id']}", headers=admin_headers)

        assert response.status_code == 200
        assert client.get(f"/productos/{seed['scissors_id']}", headers=admin_headers).status_code == 404

    def test_deactivated_product_cannot_be_quoted(self, client, admin_headers, seller_headers, quotation_payload, seed):
        client.patch(f"/productos/{seed['scalpel_id']}/activar", json={"activo": False}, headers=admin_headers)

        response = client.post("/cotizaciones", json=quotation_payload, headers=seller_headers)

        assert response.status_code == 400
        assert response.json()["id_producto"] == seed["scalpel_id"]


class TestCategories:

    def test_list_with_counts(self, client, seller_headers):
        response = client.get("/categorias", headers=seller_headers)

        assert response.status_code == 200
        assert response.json() == [{
            "id_categoria": 1,
            "nombre_categoria": "Instrumental quirúrgico",
            "descripcion": None,
            "total_productos": 3
        }]

    def test_detail_with_products(self, client, seller_headers, seed):
        response = client.get(f"/categorias/{seed['category_id']}", headers=seller_headers)

        assert response.status_code == 200
        assert {p["codigo"] for p in response.json()["productos"]} == {"BIS-001", "TIJ-003", "PIN-002"}

    def test_create_and_duplicate(self, client, admin_headers):
        created = client.post("/categorias", json={"nombre_categoria": "Suturas"}, headers=admin_headers)
        assert created.status_code == 201

        duplicate = client.post("/categorias", json={"nombre_categoria": "Suturas"}, headers=admin_headers)
        assert duplicate.status_code == 400
        assert duplicate.json()["mensaje"] == "Ya existe una categoría con ese nombre"

    def test_delete_with_products_refused(self, client, admin_headers, seed):
        response = client.delete(f"/categorias/{seed['category_id']}", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["productos_asociados"] == 3

    def test_delete_empty_category(self, client, admin_headers):
        category_id = client.post(
            "/categorias", json={"nombre_categoria": "Suturas"}, headers=admin_headers
        ).json()["id_categoria"]

        response = client.delete(f"/categorias/{category_id}", headers=admin_headers)

        assert response.status_code == 200

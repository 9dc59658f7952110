def test_public_receipt_needs_no_authentication(client, auth_client, book):
    appointment = book().json()
    auth_client.post(f"/appointments/{appointment['id']}/complete", json={"method": "pix"})

    response = client.get(f"/public/receipts/{appointment['id']}")

    assert response.status_code == 200
    receipt = response.json()
    assert receipt["client_name"] == "Maria Souza"
    assert receipt["attendant_name"] == "Ana Lima"
    assert receipt["date"] == "2024-01-01"
    assert receipt["start_time"] == "09:00:00"
    assert receipt["total"] == 30
    assert receipt["payment_method"] == "pix"
    assert receipt["receipt_number"] is not None
    assert {(i["name"], i["price"]) for i in receipt["items"]} == {("Corte", 10), ("Escova", 20)}


def test_receipt_shows_booked_prices_after_catalog_change(client, auth_client, salon, book):
    appointment = book().json()
    auth_client.put(f"/services/{salon.escova['id']}", json={"price": 99})

    receipt = client.get(f"/public/receipts/{appointment['id']}").json()

    assert {(i["name"], i["price"]) for i in receipt["items"]} == {("Corte", 10), ("Escova", 20)}
    assert receipt["total"] == 30
    assert receipt["payment_method"] is None


def test_receipt_for_unknown_appointment(client):
    assert client.get("/public/receipts/12345").status_code == 404


def test_asset_links_document(client):
    response = client.get("/.well-known/assetlinks.json")

    assert response.status_code == 200
    statement = response.json()[0]
    assert statement["relation"] == ["delegate_permission/common.handle_all_urls"]
    assert statement["target"]["namespace"] == "android_app"
    assert statement["target"]["package_name"]

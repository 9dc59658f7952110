def test_client_crud(auth_client):
    created = auth_client.post("/clients/", json={
        "name": "  Joana Prado ",
        "email": "Joana@Email.com",
        "phone": "81 98888-7777",
        "cpf_cnpj": "529.982.247-25",
        "birth_date": "1990-05-20",
    })
    assert created.status_code == 201
    client = created.json()
    assert client["name"] == "Joana Prado"
    assert client["email"] == "joana@email.com"
    assert client["cpf_cnpj"] == "52998224725"
    assert client["active"] is True

    updated = auth_client.put(f"/clients/{client['id']}", json={"notes": "Prefere manhã"}).json()
    assert updated["notes"] == "Prefere manhã"
    assert updated["name"] == "Joana Prado"

    assert auth_client.delete(f"/clients/{client['id']}").status_code == 200
    assert auth_client.get(f"/clients/{client['id']}").status_code == 404


def test_client_requires_name(auth_client):
    assert auth_client.post("/clients/", json={"phone": "81999998888"}).status_code == 422
    assert auth_client.post("/clients/", json={"name": ""}).status_code == 422


def test_client_rejects_invalid_tax_id_and_phone(auth_client):
    assert auth_client.post("/clients/", json={"name": "X", "cpf_cnpj": "111.111.111-11"}).status_code == 400
    assert auth_client.post("/clients/", json={"name": "X", "phone": "1234"}).status_code == 400


def test_client_list_filters(auth_client):
    auth_client.post("/clients/", json={"name": "Carla"})
    beatriz = auth_client.post("/clients/", json={"name": "Beatriz", "email": "bia@email.com"}).json()
    auth_client.post(f"/clients/{beatriz['id']}/deactivate")

    assert [c["name"] for c in auth_client.get("/clients/").json()] == ["Beatriz", "Carla"]
    assert [c["name"] for c in auth_client.get("/clients/", params={"status": "active"}).json()] == ["Carla"]
    assert [c["name"] for c in auth_client.get("/clients/", params={"status": "inactive"}).json()] == ["Beatriz"]
    assert [c["name"] for c in auth_client.get("/clients/", params={"search": "bia@"}).json()] == ["Beatriz"]


def test_client_deactivate_and_reactivate(auth_client):
    client = auth_client.post("/clients/", json={"name": "Paula"}).json()

    assert auth_client.post(f"/clients/{client['id']}/deactivate").json()["active"] is False
    assert auth_client.post(f"/clients/{client['id']}/deactivate").status_code == 400
    assert auth_client.post(f"/clients/{client['id']}/reactivate").json()["active"] is True


def test_client_with_appointments_cannot_be_deleted(auth_client, salon, book):
    book()

    response = auth_client.delete(f"/clients/{salon.client['id']}")

    assert response.status_code == 400


def test_service_crud_and_validation(auth_client):
    assert auth_client.post("/services/", json={"name": "Luzes", "price": -1}).status_code == 422
    assert auth_client.post("/services/", json={"name": "Luzes", "price": 100, "duration_minutes": 4}).status_code == 422

    service = auth_client.post("/services/", json={
        "name": "Luzes", "price": 180, "duration_minutes": 120, "category": "Coloração"
    }).json()
    assert service["active"] is True
    assert auth_client.post("/services/", json={"name": "luzes", "price": 1}).status_code == 400

    updated = auth_client.put(f"/services/{service['id']}", json={"active": False}).json()
    assert updated["active"] is False
    assert updated["price"] == 180

    assert auth_client.get("/services/", params={"active_only": True}).json() == []
    assert auth_client.delete(f"/services/{service['id']}").status_code == 200


def test_service_in_use_cannot_be_deleted(auth_client, salon, book):
    book()

    assert auth_client.delete(f"/services/{salon.corte['id']}").status_code == 400


def test_service_list_reflects_writes(auth_client):
    assert auth_client.get("/services/").json() == []

    auth_client.post("/services/", json={"name": "Hidratação", "price": 60})

    assert [s["name"] for s in auth_client.get("/services/").json()] == ["Hidratação"]


def test_attendant_defaults_and_validation(auth_client):
    attendant = auth_client.post("/attendants/", json={"name": "Rita"}).json()
    assert attendant["commission_rate"] == 0
    assert attendant["color"] == "#6366f1"
    assert attendant["work_days"] == [1, 2, 3, 4, 5, 6]
    assert attendant["work_hours"] == {"start": "09:00", "end": "18:00"}

    assert auth_client.post("/attendants/", json={"name": "X", "commission_rate": 101}).status_code == 422
    assert auth_client.post("/attendants/", json={"name": "X", "work_days": [7]}).status_code == 422
    assert auth_client.post("/attendants/", json={
        "name": "X", "work_hours": {"start": "18:00", "end": "09:00"}
    }).status_code == 422
    assert auth_client.post("/attendants/", json={"name": "X", "color": "azul"}).status_code == 422


def test_attendant_update(auth_client):
    attendant = auth_client.post("/attendants/", json={"name": "Rita"}).json()

    updated = auth_client.put(f"/attendants/{attendant['id']}", json={
        "commission_rate": 35,
        "work_days": [5, 1, 1],
        "work_hours": {"start": "10:00", "end": "19:00"},
    }).json()

    assert updated["commission_rate"] == 35
    assert updated["work_days"] == [1, 5]
    assert updated["work_hours"] == {"start": "10:00", "end": "19:00"}
    assert [a["name"] for a in auth_client.get("/attendants/", params={"active_only": True}).json()] == ["Rita"]


def test_attendant_with_appointments_cannot_be_deleted(auth_client, salon, book):
    book()

    assert auth_client.delete(f"/attendants/{salon.attendant['id']}").status_code == 400

import pytest


@pytest.fixture
def appointment(book):
    return book().json()


def test_start_scheduled_appointment(auth_client, appointment):
    response = auth_client.patch(f"/appointments/{appointment['id']}/status", json={"status": "in_progress"})

    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"


def test_cancel_in_progress_appointment(auth_client, appointment):
    auth_client.patch(f"/appointments/{appointment['id']}/status", json={"status": "in_progress"})

    response = auth_client.patch(f"/appointments/{appointment['id']}/status", json={"status": "canceled"})

    assert response.status_code == 200
    assert response.json()["status"] == "canceled"


def test_cannot_go_back_to_scheduled(auth_client, appointment):
    auth_client.patch(f"/appointments/{appointment['id']}/status", json={"status": "in_progress"})

    response = auth_client.patch(f"/appointments/{appointment['id']}/status", json={"status": "scheduled"})

    assert response.status_code == 400


def test_completion_requires_payment_route(auth_client, appointment):
    response = auth_client.patch(f"/appointments/{appointment['id']}/status", json={"status": "completed"})

    assert response.status_code == 400
    assert auth_client.get(f"/appointments/{appointment['id']}").json()["status"] == "scheduled"


def test_canceled_is_terminal(auth_client, appointment):
    auth_client.patch(f"/appointments/{appointment['id']}/status", json={"status": "canceled"})

    response = auth_client.patch(f"/appointments/{appointment['id']}/status", json={"status": "in_progress"})

    assert response.status_code == 400


def test_unknown_status_is_rejected(auth_client, appointment):
    response = auth_client.patch(f"/appointments/{appointment['id']}/status", json={"status": "waiting"})

    assert response.status_code == 422

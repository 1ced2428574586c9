"""End-to-end scenarios through the HTTP API."""

import pytest
from fastapi.testclient import TestClient


def animal_update(animal, **overrides):
    payload = {
        key: animal[key]
        for key in (
            "weight",
            "length",
            "height",
            "gender",
            "life_status",
            "chipper_id",
            "chipping_location_id",
        )
    }
    payload.update(overrides)
    return payload


@pytest.mark.integration
def test_visit_sequence_scenario(auth_client: TestClient, api):
    point_a = api.point(0, 0)
    point_b = api.point(5, 5)
    wolf = api.animal_type("wolf")
    animal = api.animal([wolf], point_a, weight=10, height=1, length=1)

    assert animal["life_status"] == "ALIVE"
    assert animal["visited_locations"] == []

    locations = f"/animals/{animal['id']}/locations"
    assert auth_client.post(f"{locations}/{point_a}").status_code == 409
    assert auth_client.post(f"{locations}/{point_b}").status_code == 201
    assert auth_client.post(f"{locations}/{point_b}").status_code == 409
    assert auth_client.post(f"{locations}/{point_a}").status_code == 201

    history = [v["location_point_id"] for v in auth_client.get(locations).json()]
    assert history == [point_b, point_a]


@pytest.mark.integration
def test_type_set_never_empties(auth_client: TestClient, api):
    point = api.point(0, 0)
    wolf = api.animal_type("wolf")
    fox = api.animal_type("fox")
    animal = api.animal([wolf], point)
    types = f"/animals/{animal['id']}/types"

    assert auth_client.delete(f"{types}/{wolf}").status_code == 409
    assert auth_client.post(f"{types}/{fox}").status_code == 201

    response = auth_client.delete(f"{types}/{wolf}")
    assert response.status_code == 200
    assert response.json()["animal_types"] == [fox]


@pytest.mark.integration
def test_referenced_point_deletion_scenario(auth_client: TestClient, api):
    point_a = api.point(0, 0)
    point_b = api.point(5, 5)
    point_c = api.point(9, 9)
    animal = api.animal([api.animal_type("wolf")], point_a)
    locations = f"/animals/{animal['id']}/locations"

    auth_client.post(f"{locations}/{point_b}")
    back_home = auth_client.post(f"{locations}/{point_a}").json()

    # Chipping location and a visit both reference A
    assert auth_client.delete(f"/locations/{point_a}").status_code == 409

    response = auth_client.put(
        f"/animals/{animal['id']}", json=animal_update(animal, chipping_location_id=point_c)
    )
    assert response.status_code == 200
    assert auth_client.delete(f"/locations/{point_a}").status_code == 409

    assert auth_client.delete(f"{locations}/{back_home['id']}").status_code == 200
    assert auth_client.delete(f"/locations/{point_a}").status_code == 200


@pytest.mark.integration
def test_round_trip_and_type_idempotence(auth_client: TestClient, api):
    wolf = api.animal_type("wolf")
    fox = api.animal_type("fox")
    animal = api.animal([wolf], api.point(0, 0))
    url = f"/animals/{animal['id']}"

    assert auth_client.put(url, json=animal_update(animal)).json() == animal

    for old, new in ((wolf, wolf), (fox, fox)):
        response = auth_client.put(f"{url}/types", json={"old_type_id": old, "new_type_id": new})
        assert response.status_code == 200
        assert response.json()["animal_types"] == [wolf]


@pytest.mark.integration
def test_death_is_final(auth_client: TestClient, api):
    point_a = api.point(0, 0)
    point_b = api.point(5, 5)
    animal = api.animal([api.animal_type("wolf")], point_a)
    url = f"/animals/{animal['id']}"
    auth_client.post(f"{url}/locations/{point_b}")

    dead = auth_client.put(url, json=animal_update(animal, life_status="DEAD")).json()
    assert dead["life_status"] == "DEAD"
    assert dead["death_date_time"] is not None

    assert auth_client.put(url, json=animal_update(animal, life_status="ALIVE")).status_code == 409
    assert auth_client.post(f"{url}/locations/{point_a}").status_code == 409

    again = auth_client.put(url, json=animal_update(animal, life_status="DEAD", weight=12))
    assert again.status_code == 200
    assert again.json()["death_date_time"] == dead["death_date_time"]

    assert auth_client.delete(url).status_code == 409


@pytest.mark.integration
def test_registration_to_tracking_flow(client: TestClient):
    registration = {
        "first_name": "Jane",
        "last_name": "Goodall",
        "email": "jane@example.com",
        "password": "chimps",
    }
    account = client.post("/registration", json=registration).json()
    client.auth = (registration["email"], registration["password"])

    point = client.post("/locations", json={"latitude": -4.6, "longitude": 29.6}).json()
    other = client.post("/locations", json={"latitude": -4.7, "longitude": 29.7}).json()
    chimp = client.post("/animals/types", json={"name": "chimpanzee"}).json()
    animal = client.post(
        "/animals",
        json={
            "animal_types": [chimp["id"]],
            "weight": 40,
            "length": 1.2,
            "height": 1.1,
            "gender": "FEMALE",
            "chipper_id": account["id"],
            "chipping_location_id": point["id"],
        },
    ).json()
    client.post(f"/animals/{animal['id']}/locations/{other['id']}")

    found = client.get("/animals/search", params={"chipper_id": account["id"]}).json()
    assert [a["id"] for a in found] == [animal["id"]]
    assert len(found[0]["visited_locations"]) == 1

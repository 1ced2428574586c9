"""Unit tests for the visited-location endpoints."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def tracked(api):
    """An animal chipped at ``home`` plus two further points."""

    class Tracked:
        home = api.point(0, 0)
        river = api.point(10, 10)
        ridge = api.point(20, 20)
        animal_id = api.animal([api.animal_type("wolf")], home)["id"]

    return Tracked


def visit(client: TestClient, animal_id: int, point_id: int):
    return client.post(f"/animals/{animal_id}/locations/{point_id}")


def naive(timestamp: str) -> str:
    """Drop the UTC designator from a serialized timestamp."""
    return timestamp.replace("Z", "").replace("+00:00", "")


@pytest.mark.unit
class TestAddVisit:
    def test_add_visit(self, auth_client: TestClient, tracked, clock):
        expected = clock.peek()
        response = visit(auth_client, tracked.animal_id, tracked.river)

        assert response.status_code == 201
        data = response.json()
        assert data["location_point_id"] == tracked.river
        assert data["visited_at"].startswith(expected.strftime("%Y-%m-%dT%H:%M:%S"))

        animal = auth_client.get(f"/animals/{tracked.animal_id}").json()
        assert animal["visited_locations"] == [data["id"]]

    def test_first_visit_at_chipping_point(self, auth_client: TestClient, tracked):
        assert visit(auth_client, tracked.animal_id, tracked.home).status_code == 409

    def test_repeat_point(self, auth_client: TestClient, tracked):
        visit(auth_client, tracked.animal_id, tracked.river)
        assert visit(auth_client, tracked.animal_id, tracked.river).status_code == 409

    def test_dead_animal(self, auth_client: TestClient, tracked):
        animal = auth_client.get(f"/animals/{tracked.animal_id}").json()
        payload = {
            key: animal[key]
            for key in ("weight", "length", "height", "gender", "chipper_id", "chipping_location_id")
        }
        payload["life_status"] = "DEAD"
        assert auth_client.put(f"/animals/{tracked.animal_id}", json=payload).status_code == 200

        assert visit(auth_client, tracked.animal_id, tracked.river).status_code == 409

    def test_unknown_animal_or_point(self, auth_client: TestClient, tracked):
        assert visit(auth_client, 9999, tracked.river).status_code == 404
        assert visit(auth_client, tracked.animal_id, 9999).status_code == 404


@pytest.mark.unit
class TestUpdateVisit:
    def test_move_visit(self, auth_client: TestClient, tracked):
        record = visit(auth_client, tracked.animal_id, tracked.river).json()
        response = auth_client.put(
            f"/animals/{tracked.animal_id}/locations",
            json={"visited_location_point_id": record["id"], "location_point_id": tracked.ridge},
        )
        assert response.status_code == 200
        assert response.json()["location_point_id"] == tracked.ridge
        assert response.json()["visited_at"] == record["visited_at"]

    def test_move_first_visit_to_chipping_point(self, auth_client: TestClient, tracked):
        record = visit(auth_client, tracked.animal_id, tracked.river).json()
        response = auth_client.put(
            f"/animals/{tracked.animal_id}/locations",
            json={"visited_location_point_id": record["id"], "location_point_id": tracked.home},
        )
        assert response.status_code == 409

    def test_move_onto_neighbour(self, auth_client: TestClient, tracked):
        first = visit(auth_client, tracked.animal_id, tracked.river).json()
        visit(auth_client, tracked.animal_id, tracked.ridge)
        response = auth_client.put(
            f"/animals/{tracked.animal_id}/locations",
            json={"visited_location_point_id": first["id"], "location_point_id": tracked.ridge},
        )
        assert response.status_code == 409

    def test_retime_visit(self, auth_client: TestClient, tracked, clock):
        record = visit(auth_client, tracked.animal_id, tracked.river).json()
        new_time = clock.peek() + timedelta(minutes=30)
        clock.set(new_time + timedelta(minutes=1))

        response = auth_client.put(
            f"/animals/{tracked.animal_id}/locations",
            json={
                "visited_location_point_id": record["id"],
                "location_point_id": tracked.river,
                "visited_at": new_time.isoformat(),
            },
        )
        assert response.status_code == 200
        assert response.json()["visited_at"].startswith(new_time.strftime("%Y-%m-%dT%H:%M:%S"))

    def test_visit_of_another_animal(self, auth_client: TestClient, api, tracked):
        record = visit(auth_client, tracked.animal_id, tracked.river).json()
        other = api.animal([api.animal_type("fox")], tracked.home)
        response = auth_client.put(
            f"/animals/{other['id']}/locations",
            json={"visited_location_point_id": record["id"], "location_point_id": tracked.ridge},
        )
        assert response.status_code == 404


@pytest.mark.unit
class TestListAndDelete:
    def test_list_with_filters(self, auth_client: TestClient, tracked):
        first = visit(auth_client, tracked.animal_id, tracked.river).json()
        second = visit(auth_client, tracked.animal_id, tracked.ridge).json()
        third = visit(auth_client, tracked.animal_id, tracked.river).json()
        url = f"/animals/{tracked.animal_id}/locations"

        assert [v["id"] for v in auth_client.get(url).json()] == [first["id"], second["id"], third["id"]]

        by_point = auth_client.get(url, params={"location_point_id": tracked.river}).json()
        assert [v["id"] for v in by_point] == [first["id"], third["id"]]

        window = auth_client.get(
            url,
            params={"start_date_time": second["visited_at"], "end_date_time": third["visited_at"]},
        ).json()
        assert [v["id"] for v in window] == [second["id"], third["id"]]

        paged = auth_client.get(url, params={"page": 1, "size": 2}).json()
        assert [v["id"] for v in paged] == [third["id"]]

    def test_list_window_without_timezone(self, auth_client: TestClient, tracked):
        first = visit(auth_client, tracked.animal_id, tracked.river).json()
        second = visit(auth_client, tracked.animal_id, tracked.ridge).json()

        response = auth_client.get(
            f"/animals/{tracked.animal_id}/locations",
            params={"start_date_time": naive(second["visited_at"])},
        )
        assert response.status_code == 200, response.text
        assert [v["id"] for v in response.json()] == [second["id"]]

        response = auth_client.get(
            f"/animals/{tracked.animal_id}/locations",
            params={
                "start_date_time": "2000-01-01T00:00:00",
                "end_date_time": naive(first["visited_at"]),
            },
        )
        assert response.status_code == 200, response.text
        assert [v["id"] for v in response.json()] == [first["id"]]

    def test_list_inverted_window(self, auth_client: TestClient, tracked):
        response = auth_client.get(
            f"/animals/{tracked.animal_id}/locations",
            params={
                "start_date_time": "2026-02-01T00:00:00Z",
                "end_date_time": "2026-01-01T00:00:00Z",
            },
        )
        assert response.status_code == 400

    def test_list_unknown_animal(self, auth_client: TestClient):
        assert auth_client.get("/animals/9999/locations").status_code == 404

    def test_delete_visit(self, auth_client: TestClient, tracked):
        record = visit(auth_client, tracked.animal_id, tracked.river).json()
        response = auth_client.delete(f"/animals/{tracked.animal_id}/locations/{record['id']}")

        assert response.status_code == 200
        assert auth_client.get(f"/animals/{tracked.animal_id}/locations").json() == []

    def test_delete_unknown_visit(self, auth_client: TestClient, tracked):
        response = auth_client.delete(f"/animals/{tracked.animal_id}/locations/4242")
        assert response.status_code == 404

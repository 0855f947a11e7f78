"""
Test hotel rooms and occupants.
"""

from bmvt.services.file_store import FileStore


def create_room(client, headers, **fields):
    body = {"hotel": "Hilton", "city": "La Mecque", **fields}
    response = client.post("/api/chambres", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestRooms:
    def test_create_with_defaults(self, client, agent_headers):
        room = create_room(client, agent_headers)

        assert room["type"] == "double"
        assert room["capacity"] == 1
        assert room["occupants"] == []

    def test_type_is_lower_cased(self, client, agent_headers):
        room = create_room(client, agent_headers, type="TRIPLE", capacity=3)

        assert room["type"] == "triple"
        assert room["capacity"] == 3

    def test_capacity_must_be_positive(self, client, agent_headers):
        response = client.post(
            "/api/chambres",
            json={"hotel": "Hilton", "city": "La Mecque", "capacity": 0},
            headers=agent_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "La capacité doit être au moins 1."

    def test_hotel_and_city_required(self, client, agent_headers):
        response = client.post("/api/chambres", json={"hotel": "Hilton"}, headers=agent_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Champs requis manquants (hotel, city)."

    def test_update_merges(self, client, agent_headers):
        room = create_room(client, agent_headers, capacity=2)

        response = client.put(
            f"/api/chambres/{room['id']}", json={"city": "Médine"}, headers=agent_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["city"] == "Médine"
        assert body["hotel"] == "Hilton"
        assert body["capacity"] == 2

    def test_get_missing_room(self, client, agent_headers):
        response = client.get("/api/chambres/999", headers=agent_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Chambre introuvable"


class TestOccupants:
    def test_room_fills_up(self, client, agent_headers):
        room = create_room(client, agent_headers, capacity=2)
        url = f"/api/chambres/{room['id']}/occupants"

        first = client.post(url, json={"name": "Awa", "passport": "a1234567"}, headers=agent_headers)
        second = client.post(url, json={"name": "Fatou"}, headers=agent_headers)
        third = client.post(url, json={"name": "Khady"}, headers=agent_headers)

        assert first.status_code == 201
        assert first.json()["passport"] == "A1234567"
        assert second.status_code == 201
        assert third.status_code == 409
        assert third.json()["message"] == "Chambre complète."
        occupants = client.get(f"/api/chambres/{room['id']}", headers=agent_headers).json()["occupants"]
        assert [o["name"] for o in occupants] == ["Awa", "Fatou"]

    def test_occupant_requires_name(self, client, agent_headers):
        room = create_room(client, agent_headers)

        response = client.post(
            f"/api/chambres/{room['id']}/occupants", json={}, headers=agent_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Nom requis"

    def test_remove_occupant_frees_a_place(self, client, agent_headers):
        room = create_room(client, agent_headers)
        url = f"/api/chambres/{room['id']}/occupants"
        awa = client.post(url, json={"name": "Awa"}, headers=agent_headers).json()

        removed = client.delete(f"{url}/{awa['id']}", headers=agent_headers)
        again = client.delete(f"{url}/{awa['id']}", headers=agent_headers)
        replacement = client.post(url, json={"name": "Fatou"}, headers=agent_headers)

        assert removed.status_code == 200
        assert again.status_code == 404
        assert again.json()["message"] == "Occupant introuvable"
        assert replacement.status_code == 201

    def test_delete_room_cascades(self, client, agent_headers):
        room = create_room(client, agent_headers, capacity=2)
        occupant = client.post(
            f"/api/chambres/{room['id']}/occupants",
            data={"name": "Awa"},
            files={"photo": ("awa.png", b"png", "image/png")},
            headers=agent_headers,
        ).json()
        photo = FileStore("chambres").resolve(occupant["photoUrl"])
        assert photo.exists()

        response = client.delete(f"/api/chambres/{room['id']}", headers=agent_headers)

        assert response.status_code == 200
        assert not photo.exists()
        assert client.get("/api/chambres", headers=agent_headers).json()["total"] == 0

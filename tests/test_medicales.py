"""
Test medical forms and their best-effort link to pilgrims.
"""

PELERIN = {
    "nom": "Diop",
    "prenoms": "Moussa",
    "dateNaissance": "1960-04-12",
    "sexe": "M",
    "contact": "771234567",
    "numPasseport": "A1234567",
    "anneeVoyage": "2025",
}


class TestMedicales:
    def test_create_links_pilgrim_by_passport(self, client, agent_headers):
        pelerin = client.post("/api/pelerins", data=PELERIN, headers=agent_headers).json()["item"]

        response = client.post(
            "/api/medicales",
            json={"passeport": "a1234567", "groupe_sanguin": "O+", "poids": 72},
            headers=agent_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["ok"] is True
        assert body["item"]["passeport"] == "A1234567"
        assert body["item"]["pelerin_id"] == pelerin["id"]
        assert body["item"]["poids"] == "72"

    def test_create_without_matching_pilgrim(self, client, agent_headers):
        response = client.post("/api/medicales", json={"passeport": "Z9999999"}, headers=agent_headers)

        assert response.status_code == 201
        assert response.json()["item"]["pelerin_id"] is None

    def test_create_requires_valid_passport(self, client, agent_headers):
        missing = client.post("/api/medicales", json={"nom": "Diop"}, headers=agent_headers)
        invalid = client.post("/api/medicales", json={"passeport": "12"}, headers=agent_headers)

        expected = "Le champ 'passeport' doit contenir 5 à 15 caractères alphanumériques."
        assert missing.status_code == 400
        assert missing.json()["message"] == expected
        assert invalid.status_code == 400
        assert invalid.json()["message"] == expected

    def test_update_relinks_when_passport_changes(self, client, agent_headers):
        created = client.post(
            "/api/medicales", json={"passeport": "Z9999999"}, headers=agent_headers
        ).json()["item"]
        pelerin = client.post("/api/pelerins", data=PELERIN, headers=agent_headers).json()["item"]

        response = client.put(
            f"/api/medicales/{created['id']}",
            json={"passeport": "A1234567", "tension": "12/8"},
            headers=agent_headers,
        )

        assert response.status_code == 200
        item = response.json()["item"]
        assert item["pelerin_id"] == pelerin["id"]
        assert item["tension"] == "12/8"

    def test_list_search_limit_and_by_passport(self, client, agent_headers):
        for passport in ("A1111111", "B2222222", "B2222222"):
            client.post("/api/medicales", json={"passeport": passport}, headers=agent_headers)

        limited = client.get("/api/medicales", params={"limit": 1}, headers=agent_headers).json()
        bogus_limit = client.get("/api/medicales", params={"limit": "abc"}, headers=agent_headers).json()
        search = client.get("/api/medicales", params={"search": "B222"}, headers=agent_headers).json()
        exact = client.get(
            "/api/medicales/by-passport", params={"passport": "b2222222"}, headers=agent_headers
        ).json()
        partial = client.get(
            "/api/medicales/by-passport", params={"passport": "B222"}, headers=agent_headers
        ).json()

        assert limited["total"] == 3
        assert len(limited["items"]) == 1
        assert len(bogus_limit["items"]) == 3
        assert search["total"] == 2
        assert len(exact["items"]) == 2
        assert partial["items"] == []

    def test_get_and_delete(self, client, agent_headers):
        created = client.post(
            "/api/medicales", json={"passeport": "A1234567"}, headers=agent_headers
        ).json()["item"]

        fetched = client.get(f"/api/medicales/{created['id']}", headers=agent_headers)
        deleted = client.delete(f"/api/medicales/{created['id']}", headers=agent_headers)
        missing = client.get(f"/api/medicales/{created['id']}", headers=agent_headers)

        assert fetched.json() == created
        assert deleted.status_code == 200
        assert missing.status_code == 404
        assert missing.json()["message"] == "Dossier médical introuvable"

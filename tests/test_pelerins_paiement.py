"""
Test the joined pilgrim + payment view.
"""

PELERIN = {
    "nom": "Diop",
    "prenoms": "Moussa",
    "dateNaissance": "1960-04-12",
    "sexe": "M",
    "contact": "771234567",
    "numPasseport": "A1234567",
    "offre": "Hajj Confort",
    "voyage": "HAJJ",
    "anneeVoyage": "2025",
}


def seed(client, headers):
    client.post(
        "/api/offres",
        json={
            "nom": "Hajj Confort",
            "prix": 3500000,
            "hotel": "Hilton",
            "dateDepart": "2025-06-01",
            "dateArrivee": "2025-06-25",
        },
        headers=headers,
    )
    client.post(
        "/api/pelerins",
        data=PELERIN,
        files={"photoPelerin": ("moussa.jpg", b"jpeg", "image/jpeg")},
        headers=headers,
    )
    client.post(
        "/api/pelerins",
        data={**PELERIN, "nom": "Fall", "numPasseport": "B7654321", "offre": "Oumrah Eco"},
        headers=headers,
    )
    client.post(
        "/api/paiements",
        json={"passeport": "A1234567", "nom": "Diop", "montant": 500000, "totalDu": 3500000},
        headers=headers,
    )


class TestOverview:
    def test_pilgrims_with_their_payments(self, client, agent_headers):
        seed(client, agent_headers)

        response = client.get("/api/pelerinspaiement", headers=agent_headers)

        assert response.status_code == 200
        body = response.json()
        assert [p["nom"] for p in body["pelerins"]] == ["Fall", "Diop"]
        diop = body["pelerins"][1]
        assert diop["passeport"] == "A1234567"
        assert diop["prixOffre"] == 3500000
        assert diop["photoPelerin"].startswith("http://testserver/uploads/pelerins/")
        assert diop["photoPasseport"] is None
        assert body["pelerins"][0]["prixOffre"] == 0
        assert [p["passeport"] for p in body["payments"]] == ["A1234567"]

    def test_offer_filter(self, client, agent_headers):
        seed(client, agent_headers)

        confort = client.get(
            "/api/pelerinspaiement", params={"offre": "Hajj Confort"}, headers=agent_headers
        ).json()
        every = client.get("/api/pelerinspaiement", params={"offre": "toutes"}, headers=agent_headers).json()

        assert [p["nom"] for p in confort["pelerins"]] == ["Diop"]
        assert len(every["pelerins"]) == 2

    def test_search_and_limit(self, client, agent_headers):
        seed(client, agent_headers)

        found = client.get("/api/pelerinspaiement", params={"search": "B765"}, headers=agent_headers).json()
        limited = client.get("/api/pelerinspaiement", params={"limit": 1}, headers=agent_headers).json()

        assert [p["nom"] for p in found["pelerins"]] == ["Fall"]
        assert found["payments"] == []
        assert len(limited["pelerins"]) == 1


class TestByPassport:
    def test_lookup(self, client, agent_headers):
        seed(client, agent_headers)

        response = client.get(
            "/api/pelerinspaiement/by-passport", params={"passport": "a1234567"}, headers=agent_headers
        )

        body = response.json()
        assert body["pelerin"]["nom"] == "Diop"
        assert len(body["payments"]) == 1

    def test_unknown_passport(self, client, agent_headers):
        response = client.get(
            "/api/pelerinspaiement/by-passport", params={"passport": "Z9999999"}, headers=agent_headers
        )

        assert response.status_code == 200
        assert response.json() == {"pelerin": None, "payments": []}

    def test_passport_required(self, client, agent_headers):
        response = client.get("/api/pelerinspaiement/by-passport", headers=agent_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Paramètre 'passport' requis."

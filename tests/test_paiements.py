"""
Test payments and installments.
"""

import re
from itertools import chain, repeat

from bmvt.services import paiement_service

PAYMENT = {
    "passeport": "a1234567",
    "nom": "Diop",
    "prenoms": "Moussa",
    "montant": 500000,
    "totalDu": 3500000,
    "date": "2025-03-10",
}


def create_payment(client, headers, **overrides):
    response = client.post("/api/paiements", json={**PAYMENT, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestPayments:
    def test_create_generates_reference(self, client, agent_headers):
        payment = create_payment(client, agent_headers)

        assert re.match(r"^PAY-\d{4}-\d{6}$", payment["ref"])
        assert payment["passeport"] == "A1234567"
        assert payment["totalDu"] == 3500000
        assert payment["reduction"] == 0
        assert payment["mode"] == "Espèces"
        assert payment["statut"] == "Partiel"

    def test_required_fields(self, client, agent_headers):
        response = client.post("/api/paiements", json={"nom": "Diop"}, headers=agent_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Champs requis manquants (passeport, nom)."

    def test_blank_amounts_become_zero(self, client, agent_headers):
        payment = create_payment(client, agent_headers, montant="", totalDu=None)

        assert payment["montant"] == 0
        assert payment["totalDu"] == 0

    def test_reference_collision_is_retried(self, client, agent_headers, monkeypatch):
        refs = iter(["PAY-2025-000001", "PAY-2025-000001", "PAY-2025-000002"])
        monkeypatch.setattr(paiement_service, "generate_ref", lambda: next(refs))

        first = create_payment(client, agent_headers)
        second = create_payment(client, agent_headers)

        assert first["ref"] == "PAY-2025-000001"
        assert second["ref"] == "PAY-2025-000002"

    def test_reference_attempts_exhausted(self, client, agent_headers, monkeypatch):
        refs = chain(["PAY-2025-000001"], repeat("PAY-2025-000001"))
        monkeypatch.setattr(paiement_service, "generate_ref", lambda: next(refs))
        create_payment(client, agent_headers)

        response = client.post("/api/paiements", json=PAYMENT, headers=agent_headers)

        assert response.status_code == 500
        assert response.json()["message"] == "Impossible de générer une référence de paiement unique."
        assert client.get("/api/paiements", headers=agent_headers).json()["total"] == 1

    def test_filters(self, client, agent_headers):
        create_payment(client, agent_headers, date="2025-01-15")
        create_payment(client, agent_headers, date="2025-03-01")
        create_payment(client, agent_headers, passeport="B7654321", date="2025-03-05")

        by_passport = client.get(
            "/api/paiements", params={"passeport": " a1234567 "}, headers=agent_headers
        ).json()
        by_dates = client.get(
            "/api/paiements", params={"du": "2025-02-01", "au": "2025-03-31"}, headers=agent_headers
        ).json()

        assert by_passport["total"] == 2
        assert {p["date"] for p in by_dates["items"]} == {"2025-03-01", "2025-03-05"}

    def test_newest_first(self, client, agent_headers):
        first = create_payment(client, agent_headers)
        second = create_payment(client, agent_headers)

        items = client.get("/api/paiements", headers=agent_headers).json()["items"]

        assert [p["id"] for p in items] == [second["id"], first["id"]]


class TestVersements:
    def test_lenient_create_from_payment_screen(self, client, agent_headers):
        response = client.post(
            "/api/paiements/versements",
            json={"passeport": "a1234567", "nom": "Diop", "verse": "", "restant": 200000},
            headers=agent_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["verse"] == 0
        assert body["restant"] == 200000
        assert body["statut"] == "En cours"
        assert body["echeance"]

    def test_strict_create_checks_amounts(self, client, agent_headers):
        base = {"passeport": "A1234567", "nom": "Diop"}

        missing = client.post("/api/versements", json={"nom": "Diop"}, headers=agent_headers)
        no_name = client.post("/api/versements", json={"passeport": "A1234567"}, headers=agent_headers)
        zero = client.post("/api/versements", json={**base, "verse": 0}, headers=agent_headers)
        negative = client.post(
            "/api/versements", json={**base, "verse": 100, "restant": -1}, headers=agent_headers
        )
        ok = client.post(
            "/api/versements", json={**base, "verse": 100, "restant": 0}, headers=agent_headers
        )

        assert missing.json()["message"] == "Le champ 'passeport' est obligatoire."
        assert no_name.json()["message"] == "Le champ 'nom' est obligatoire."
        assert zero.status_code == 400
        assert zero.json()["message"] == "Le champ 'verse' doit être un nombre > 0."
        assert negative.json()["message"] == "Le champ 'restant' doit être un nombre ≥ 0."
        assert ok.status_code == 201

    def test_both_routes_share_the_table(self, client, agent_headers):
        client.post(
            "/api/versements",
            json={"passeport": "A1234567", "nom": "Diop", "verse": 100, "echeance": "2025-04-01"},
            headers=agent_headers,
        )
        client.post(
            "/api/paiements/versements",
            json={"passeport": "B7654321", "nom": "Fall", "verse": 50, "echeance": "2025-05-01"},
            headers=agent_headers,
        )

        standalone = client.get("/api/versements", headers=agent_headers).json()
        screen = client.get(
            "/api/paiements/versements", params={"du": "2025-04-15"}, headers=agent_headers
        ).json()

        assert standalone["total"] == 2
        assert [v["nom"] for v in screen["items"]] == ["Fall"]

    def test_limit(self, client, agent_headers):
        for _ in range(3):
            client.post(
                "/api/versements",
                json={"passeport": "A1234567", "nom": "Diop", "verse": 10},
                headers=agent_headers,
            )

        limited = client.get("/api/versements", params={"limit": 2}, headers=agent_headers).json()
        fallback = client.get("/api/versements", params={"limit": "abc"}, headers=agent_headers).json()

        assert limited["total"] == 2
        assert fallback["total"] == 3

"""
Test authentication endpoints and the token guards.
"""

from datetime import timedelta

from bmvt.core.security import TOKEN_COOKIE_NAME, create_access_token, decode_access_token


class TestRegister:
    def test_register_creates_agent(self, client):
        response = client.post(
            "/api/auth/register",
            json={"name": "Awa", "email": "Awa@BMVT.sn", "password": "motdepasse123"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == "awa@bmvt.sn"
        assert body["user"]["role"] == "Agent"
        assert decode_access_token(body["token"]).email == "awa@bmvt.sn"
        assert TOKEN_COOKIE_NAME in response.cookies

    def test_register_duplicate_email(self, client):
        payload = {"name": "Awa", "email": "awa@bmvt.sn", "password": "motdepasse123"}
        client.post("/api/auth/register", json=payload)

        response = client.post("/api/auth/register", json={**payload, "email": "AWA@bmvt.sn"})

        assert response.status_code == 409
        assert response.json()["message"] == "Un compte existe déjà avec cet email"

    def test_register_short_password(self, client):
        response = client.post(
            "/api/auth/register",
            json={"name": "Awa", "email": "awa@bmvt.sn", "password": "court"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Mot de passe trop court (min 8 caractères)."

    def test_register_missing_fields(self, client):
        response = client.post("/api/auth/register", json={"email": "awa@bmvt.sn"})

        assert response.status_code == 400
        assert response.json()["message"] == "Champs requis manquants"

    def test_register_invalid_email(self, client):
        response = client.post(
            "/api/auth/register",
            json={"name": "Awa", "email": "pas-un-email", "password": "motdepasse123"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Email invalide"

    def test_privileged_role_requires_admin(self, client, agent_headers):
        payload = {"name": "Sup", "email": "sup@bmvt.sn", "password": "motdepasse123", "role": "Superviseur"}

        anonymous = client.post("/api/auth/register", json=payload)
        as_agent = client.post("/api/auth/register", json=payload, headers=agent_headers)

        assert anonymous.status_code == 403
        assert as_agent.status_code == 403

    def test_admin_can_register_privileged_role(self, client, admin_headers):
        response = client.post(
            "/api/auth/register",
            json={"name": "Sup", "email": "sup@bmvt.sn", "password": "motdepasse123", "role": "Superviseur"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["user"]["role"] == "Superviseur"


class TestLogin:
    def test_login_success_records_last_login(self, client, create_user):
        create_user("fatou@bmvt.sn", password="motdepasse123")

        response = client.post(
            "/api/auth/login", json={"email": "FATOU@bmvt.sn", "password": "motdepasse123"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["email"] == "fatou@bmvt.sn"
        assert body["token"]

        users = client.get("/api/users", headers={"Authorization": f"Bearer {body['token']}"})
        assert users.json()["items"][0]["lastLoginAt"] is not None

    def test_login_wrong_password(self, client, create_user):
        create_user("fatou@bmvt.sn", password="motdepasse123")

        response = client.post(
            "/api/auth/login", json={"email": "fatou@bmvt.sn", "password": "mauvais-mdp"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Identifiants invalides"

    def test_login_missing_fields(self, client):
        response = client.post("/api/auth/login", json={"email": "fatou@bmvt.sn"})

        assert response.status_code == 400
        assert response.json()["message"] == "Email et mot de passe requis"


class TestGuards:
    def test_missing_token(self, client):
        response = client.get("/api/users")

        assert response.status_code == 401
        assert response.json()["message"] == "Token manquant"

    def test_invalid_token(self, client):
        response = client.get("/api/users", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json()["message"] == "Token invalide ou expiré"

    def test_expired_token(self, client):
        token = create_access_token(
            {"id": 1, "email": "a@bmvt.sn", "role": "Agent"}, expires_delta=timedelta(minutes=-5)
        )

        response = client.get("/api/users", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Token invalide ou expiré"

    def test_access_token_header_and_cookie(self, client):
        token = create_access_token({"id": 7, "email": "a@bmvt.sn", "role": "Agent"})

        by_header = client.get("/api/auth/me", headers={"x-access-token": token})
        client.cookies.set(TOKEN_COOKIE_NAME, token)
        by_cookie = client.get("/api/auth/me")

        assert by_header.status_code == 200
        assert by_header.json() == {"id": 7, "email": "a@bmvt.sn", "role": "Agent"}
        assert by_cookie.status_code == 200

    def test_logout_clears_cookie(self, client):
        response = client.post("/api/auth/logout")

        assert response.status_code == 200
        assert TOKEN_COOKIE_NAME in response.headers.get("set-cookie", "")

    def test_me_requires_token(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["message"] == "Token manquant"

    def test_back_office_resources_open_without_token(self, client):
        for path in ("/api/pelerins", "/api/voyages", "/api/offres", "/api/chat/channels"):
            response = client.get(path)

            assert response.status_code == 200, path

"""
Test user account management and role restrictions.
"""


class TestUsers:
    def test_list_and_search(self, client, create_user, agent_headers):
        create_user("awa@bmvt.sn", name="Awa Ndiaye")
        create_user("moussa@bmvt.sn", name="Moussa Diop")

        everyone = client.get("/api/users", headers=agent_headers)
        filtered = client.get("/api/users", params={"search": "moussa"}, headers=agent_headers)

        assert everyone.json()["total"] == 2
        assert [u["email"] for u in filtered.json()["items"]] == ["moussa@bmvt.sn"]
        assert "password_hash" not in everyone.text
        assert "passwordHash" not in everyone.text

    def test_get_missing_user(self, client, agent_headers):
        response = client.get("/api/users/999", headers=agent_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Utilisateur introuvable"

    def test_agent_cannot_create_or_delete(self, client, create_user, agent_headers):
        user, _ = create_user("awa@bmvt.sn")

        created = client.post(
            "/api/users",
            json={"name": "X", "email": "x@bmvt.sn", "password": "motdepasse123"},
            headers=agent_headers,
        )
        deleted = client.delete(f"/api/users/{user['id']}", headers=agent_headers)

        assert created.status_code == 403
        assert created.json()["message"] == "Accès refusé : rôle non autorisé"
        assert deleted.status_code == 403

    def test_admin_update_and_delete(self, client, create_user, admin_headers):
        user, _ = create_user("awa@bmvt.sn")
        create_user("moussa@bmvt.sn")

        clash = client.put(
            f"/api/users/{user['id']}",
            json={"name": "Awa", "email": "moussa@bmvt.sn", "role": "Agent"},
            headers=admin_headers,
        )
        updated = client.put(
            f"/api/users/{user['id']}",
            json={"name": "Awa N.", "email": "awa.n@bmvt.sn", "role": "Superviseur"},
            headers=admin_headers,
        )
        deleted = client.delete(f"/api/users/{user['id']}", headers=admin_headers)
        missing = client.get(f"/api/users/{user['id']}", headers=admin_headers)

        assert clash.status_code == 409
        assert clash.json()["message"] == "Email déjà utilisé"
        assert updated.status_code == 200
        assert updated.json()["role"] == "Superviseur"
        assert updated.json()["email"] == "awa.n@bmvt.sn"
        assert deleted.status_code == 200
        assert missing.status_code == 404

    def test_superviseur_cannot_delete(self, client, create_user):
        user, _ = create_user("awa@bmvt.sn")
        _, sup_headers = create_user("sup@bmvt.sn", role="Superviseur")

        response = client.delete(f"/api/users/{user['id']}", headers=sup_headers)

        assert response.status_code == 403


class TestPasswordChange:
    def test_own_password_needs_old_password(self, client, create_user):
        user, headers = create_user("awa@bmvt.sn", password="motdepasse123")
        url = f"/api/users/{user['id']}/password"

        missing = client.put(url, json={"newPassword": "nouveau-mdp-123"}, headers=headers)
        wrong = client.put(
            url, json={"newPassword": "nouveau-mdp-123", "oldPassword": "faux-mdp-123"}, headers=headers
        )
        ok = client.put(
            url, json={"newPassword": "nouveau-mdp-123", "oldPassword": "motdepasse123"}, headers=headers
        )

        assert missing.status_code == 400
        assert missing.json()["message"] == "Ancien mot de passe requis."
        assert wrong.status_code == 400
        assert wrong.json()["message"] == "Ancien mot de passe incorrect."
        assert ok.status_code == 200

        login = client.post("/api/auth/login", json={"email": "awa@bmvt.sn", "password": "nouveau-mdp-123"})
        assert login.status_code == 200

    def test_agent_cannot_change_someone_else(self, client, create_user):
        other, _ = create_user("moussa@bmvt.sn")
        _, headers = create_user("awa@bmvt.sn")

        response = client.put(
            f"/api/users/{other['id']}/password",
            json={"newPassword": "nouveau-mdp-123", "oldPassword": "motdepasse123"},
            headers=headers,
        )

        assert response.status_code == 403

    def test_manager_resets_without_old_password(self, client, create_user, admin_headers):
        user, _ = create_user("awa@bmvt.sn")

        response = client.put(
            f"/api/users/{user['id']}/password",
            json={"newPassword": "nouveau-mdp-123"},
            headers=admin_headers,
        )

        assert response.status_code == 200

    def test_new_password_too_short(self, client, create_user, admin_headers):
        user, _ = create_user("awa@bmvt.sn")

        response = client.put(
            f"/api/users/{user['id']}/password", json={"newPassword": "court"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Nouveau mot de passe invalide (min 8 caractères)."

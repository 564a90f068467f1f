"""
Authentication, user administration and the self-delete guard
"""
import pytest



def _auth(token):
    return {"Authorization": f"Bearer {token}"}


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_login_returns_token(self, test_client, sales_user, user_password):
        response = await test_client.post(
            "/auth/login",
            data={"username": "alice", "password": user_password}
        )
        assert response.status_code == 200
        token = response.json()["access_token"]
        assert response.json()["token_type"] == "bearer"
        
        me = await test_client.get("/auth/me", headers=_auth(token))
        assert me.status_code == 200
        assert me.json()["username"] == "alice"
        assert me.json()["is_admin"] is False

    @pytest.mark.asyncio
    async def test_login_with_wrong_password(self, test_client, sales_user):
        response = await test_client.post(
            "/auth/login",
            data={"username": "alice", "password": "wrong"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self, test_client, expired_token):
        response = await test_client.get("/auth/me", headers=_auth(expired_token))
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_garbage_token_rejected(self, test_client, setup_db):
        response = await test_client.get("/auth/me", headers=_auth("not-a-jwt"))
        assert response.status_code == 401


class TestUserAdministration:

    @pytest.mark.asyncio
    async def test_admin_creates_user(self, test_client, admin_token):
        response = await test_client.post(
            "/users/",
            json={"username": "carol", "password": "pw", "first_name": "Carol", "is_admin": True},
            headers=_auth(admin_token)
        )
        assert response.status_code == 201
        assert response.json()["is_admin"] is True
        
        login = await test_client.post("/auth/login", data={"username": "carol", "password": "pw"})
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_duplicate_username_rejected(self, test_client, admin_token, sales_user):
        response = await test_client.post(
            "/users/",
            json={"username": "alice", "password": "pw"},
            headers=_auth(admin_token)
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_sales_cannot_list_users(self, test_client, sales_token):
        response = await test_client.get("/users/", headers=_auth(sales_token))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_promotes_user(self, test_client, admin_token, sales_user):
        response = await test_client.put(
            f"/users/{sales_user.id}",
            json={"is_admin": True, "email": "alice@example.com"},
            headers=_auth(admin_token)
        )
        assert response.status_code == 200
        assert response.json()["is_admin"] is True
        assert response.json()["email"] == "alice@example.com"

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_self(self, test_client, admin_user, admin_token):
        response = await test_client.delete(f"/users/{admin_user.id}", headers=_auth(admin_token))
        assert response.status_code == 400
        
        me = await test_client.get("/auth/me", headers=_auth(admin_token))
        assert me.status_code == 200

    @pytest.mark.asyncio
    async def test_admin_deletes_other_user(self, test_client, admin_token, sales_user):
        response = await test_client.delete(f"/users/{sales_user.id}", headers=_auth(admin_token))
        assert response.status_code == 200
        assert response.json() == {"deleted": True}
        
        response = await test_client.delete(f"/users/{sales_user.id}", headers=_auth(admin_token))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_admin_rename_carries_quote_ownership(
        self, test_client, admin_token, sales_user, sales_token, sales_token_2,
        create_project_type_factory, create_quote_factory
    ):
        project_type = await create_project_type_factory("Landing Page", 800.0)
        mine = await create_quote_factory(sales_token, project_type["id"])
        theirs = await create_quote_factory(sales_token_2, project_type["id"])
        
        response = await test_client.put(
            f"/users/{sales_user.id}",
            json={"username": "alice.w"},
            headers=_auth(admin_token)
        )
        assert response.status_code == 200
        
        response = await test_client.get(f"/quotes/{mine['id']}", headers=_auth(sales_token))
        assert response.status_code == 200
        assert response.json()["created_by"] == "alice.w"
        
        response = await test_client.get(f"/quotes/{theirs['id']}", headers=_auth(sales_token_2))
        assert response.json()["created_by"] == "bob"


class TestProfile:

    @pytest.mark.asyncio
    async def test_profile_update_requires_current_password(self, test_client, sales_token):
        response = await test_client.put(
            "/users/me/profile",
            json={"current_password": "wrong", "first_name": "Ally"},
            headers=_auth(sales_token)
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_profile_update(self, test_client, sales_token, user_password):
        response = await test_client.put(
            "/users/me/profile",
            json={"current_password": user_password, "first_name": "Ally", "password": "new-pass"},
            headers=_auth(sales_token)
        )
        assert response.status_code == 200
        assert response.json()["first_name"] == "Ally"
        
        login = await test_client.post("/auth/login", data={"username": "alice", "password": "new-pass"})
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_profile_username_must_be_free(self, test_client, sales_token, sales_user_2, user_password):
        response = await test_client.put(
            "/users/me/profile",
            json={"current_password": user_password, "username": "bob"},
            headers=_auth(sales_token)
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_renamed_user_keeps_own_quotes(
        self, test_client, sales_token, user_password, create_project_type_factory, create_quote_factory
    ):
        project_type = await create_project_type_factory("Landing Page", 800.0)
        created = await create_quote_factory(sales_token, project_type["id"])
        
        response = await test_client.put(
            "/users/me/profile",
            json={"current_password": user_password, "username": "alicia"},
            headers=_auth(sales_token)
        )
        assert response.status_code == 200
        assert response.json()["username"] == "alicia"
        
        response = await test_client.get(f"/quotes/{created['id']}", headers=_auth(sales_token))
        assert response.status_code == 200
        assert response.json()["created_by"] == "alicia"
        assert response.json()["updated_by"] == "alicia"
        
        response = await test_client.get("/quotes/", headers=_auth(sales_token))
        assert [q["id"] for q in response.json()] == [created["id"]]

"""
Idea Hub Backend — Platform Function Tests
===========================================

The function family answers `{data, ..., success}` on success and
`{error}` on failure, and each function accepts exactly one verb.
"""

from unittest.mock import AsyncMock, patch

import pytest

from ideahub.seed import seed_services
from ideahub.services.collaborator_service import collaborator_service
from ideahub.services.user_service import user_service


class TestMethodNotAllowed:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path",
        [
            ("post", "/functions/ideas-list"),
            ("post", "/functions/collaborators-list"),
            ("get", "/functions/auth-signout"),
            ("get", "/functions/auth-signin"),
            ("post", "/functions/users-update"),
            ("get", "/functions/users-follow"),
            ("post", "/functions/ideas-workspace"),
        ],
    )
    async def test_wrong_verb(self, client, method, path):
        response = await getattr(client, method)(path)

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}
        assert "allow" in response.headers


class TestIdeasList:

    @pytest.mark.asyncio
    async def test_paginates_public_ideas(self, client, make_user, make_idea):
        alice = await make_user("alice")
        for n in range(5):
            await make_idea(alice, f"idea {n}")
        await make_idea(alice, "hidden", visibility="PRIVATE")

        response = await client.get("/functions/ideas-list", params={"page": 2, "limit": 2})

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert len(body["data"]) == 2
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "totalPages": 3}

    @pytest.mark.asyncio
    async def test_page_past_the_end(self, client, make_user, make_idea):
        alice = await make_user("alice")
        await make_idea(alice, "only one")

        body = (await client.get("/functions/ideas-list", params={"page": 9})).json()

        assert body["data"] == []
        assert body["pagination"]["total"] == 1
        assert body["pagination"]["totalPages"] == 1

    @pytest.mark.asyncio
    async def test_query_searches_title_and_description(self, client, make_user, make_idea):
        alice = await make_user("alice")
        await make_idea(alice, "Rocket garden", description="plants")
        await make_idea(alice, "Bike", description="a ROCKET powered bike")
        await make_idea(alice, "Unrelated")

        body = (await client.get("/functions/ideas-list", params={"query": "rocket"})).json()
        assert sorted(i["title"] for i in body["data"]) == ["Bike", "Rocket garden"]


class TestCollaborators:

    @pytest.mark.asyncio
    async def test_missing_idea_id_is_rejected_before_query(self, client):
        with patch.object(collaborator_service, "list_collaborators", new_callable=AsyncMock) as listing:
            response = await client.get("/functions/collaborators-list")

        assert response.status_code == 400
        assert response.json() == {"error": "Idea ID is required"}
        listing.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_add_then_list(self, client, make_user, make_idea, auth_headers):
        alice = await make_user("alice")
        bob = await make_user("bob", bio="draws things")
        idea = await make_idea(alice, "Team idea")

        added = await client.post(
            "/functions/collaborators-add",
            json={"ideaId": idea.id, "userId": bob.id, "role": "editor"},
            headers=auth_headers(alice),
        )
        assert added.status_code == 201
        assert added.json()["collaboratorCount"] == 1
        assert added.json()["data"]["role"] == "EDITOR"

        body = (await client.get("/functions/collaborators-list", params={"ideaId": idea.id})).json()
        assert body["count"] == 1
        assert body["maxAllowed"] == 3
        assert body["data"][0]["user"] == {
            "id": bob.id,
            "username": "bob",
            "fullName": "Bob",
            "avatarUrl": None,
            "email": "bob@example.com",
            "bio": "draws things",
        }

    @pytest.mark.asyncio
    async def test_only_owner_may_add(self, client, make_user, make_idea, auth_headers):
        alice = await make_user("alice")
        bob = await make_user("bob")
        idea = await make_idea(alice, "Team idea")

        response = await client.post(
            "/functions/collaborators-add",
            json={"ideaId": idea.id, "userId": bob.id},
            headers=auth_headers(bob),
        )
        assert response.status_code == 403
        assert "error" in response.json()


class TestAuthFunctions:

    SIGNUP = {"email": "Carol@Example.com", "password": "hunter2!", "username": "carol"}

    @pytest.mark.asyncio
    async def test_signup_signin_and_current_user(self, client):
        signup = await client.post("/functions/auth-signup", json=self.SIGNUP)
        assert signup.status_code == 201
        assert signup.json()["user"]["email"] == "carol@example.com"
        assert "passwordHash" not in signup.json()["user"]

        signin = await client.post(
            "/functions/auth-signin", json={"email": "carol@example.com", "password": "hunter2!"}
        )
        assert signin.status_code == 200
        token = signin.json()["session"]["access_token"]

        me = await client.get("/functions/auth-user", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["user"]["username"] == "carol"

    @pytest.mark.asyncio
    async def test_wrong_password(self, client):
        await client.post("/functions/auth-signup", json=self.SIGNUP)

        response = await client.post(
            "/functions/auth-signin", json={"email": "carol@example.com", "password": "nope"}
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    @pytest.mark.asyncio
    async def test_duplicate_username(self, client):
        await client.post("/functions/auth-signup", json=self.SIGNUP)

        response = await client.post(
            "/functions/auth-signup", json=dict(self.SIGNUP, email="other@example.com")
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Username already taken"}

    @pytest.mark.asyncio
    async def test_signout(self, client):
        response = await client.post("/functions/auth-signout")
        assert response.json() == {"success": True, "message": "Signed out successfully"}



class TestUserFunctions:

    @pytest.mark.asyncio
    async def test_profile_by_username(self, client, make_user, make_idea):
        alice = await make_user("alice", bio="maker")
        await make_idea(alice, "First")

        response = await client.get("/functions/users-profile", params={"username": "alice"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == alice.id
        assert data["bio"] == "maker"
        assert data["publicRepos"] == 1
        assert data["isFollowing"] is False
        assert "passwordHash" not in data

    @pytest.mark.asyncio
    async def test_profile_needs_a_key(self, client):
        with patch.object(user_service, "get_profile", new_callable=AsyncMock) as lookup:
            response = await client.get("/functions/users-profile")

        assert response.status_code == 400
        assert response.json() == {"error": "User ID or username is required"}
        lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_profile_unknown(self, client):
        response = await client.get("/functions/users-profile", params={"userId": "ghost"})
        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    @pytest.mark.asyncio
    async def test_update_own_profile(self, client, make_user, auth_headers):
        alice = await make_user("alice")

        response = await client.put(
            "/functions/users-update",
            json={"fullName": "Alice L.", "website": "https://alice.dev"},
            headers=auth_headers(alice),
        )

        body = response.json()
        assert response.status_code == 200
        assert body["message"] == "Profile updated successfully"
        assert body["data"]["fullName"] == "Alice L."
        assert body["data"]["website"] == "https://alice.dev"

    @pytest.mark.asyncio
    async def test_update_needs_caller(self, client):
        with patch.object(user_service, "update_profile", new_callable=AsyncMock) as update:
            response = await client.put("/functions/users-update", json={"bio": "x"})

        assert response.status_code == 401
        update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_follow_round_trip(self, client, make_user, auth_headers):
        alice = await make_user("alice")
        bob = await make_user("bob")
        headers = auth_headers(bob)

        followed = await client.post(
            "/functions/users-follow", json={"userId": alice.id, "action": "follow"}, headers=headers
        )
        assert followed.json() == {
            "data": {"isFollowing": True},
            "success": True,
            "message": "User followed successfully",
        }

        profile = await client.get(
            "/functions/users-profile", params={"userId": alice.id}, headers=headers
        )
        assert profile.json()["data"]["followers"] == 1
        assert profile.json()["data"]["isFollowing"] is True

        unfollowed = await client.post(
            "/functions/users-follow", json={"userId": alice.id, "action": "unfollow"}, headers=headers
        )
        assert unfollowed.json()["data"] == {"isFollowing": False}
        assert unfollowed.json()["message"] == "User unfollowed successfully"

    @pytest.mark.asyncio
    async def test_follow_self(self, client, make_user, auth_headers):
        bob = await make_user("bob")
        response = await client.post(
            "/functions/users-follow", json={"userId": bob.id, "action": "follow"}, headers=auth_headers(bob)
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Cannot follow yourself"}


class TestWorkspaceAccessFunctions:

    @pytest.mark.asyncio
    async def test_permissions_for_owner(self, client, make_user, make_idea, auth_headers):
        alice = await make_user("alice")
        idea = await make_idea(alice, "Canvas")
        await client.post("/api/workspace", json={"ideaId": idea.id, "userId": alice.id})

        response = await client.get(
            "/functions/workspace-permissions", params={"ideaId": idea.id}, headers=auth_headers(alice)
        )

        body = response.json()
        assert response.status_code == 200
        assert body["message"] == "Permissions retrieved successfully"
        assert body["data"]["permissions"] == {
            "canView": True,
            "canEdit": True,
            "isOwner": True,
            "isCollaborator": False,
            "role": "OWNER",
        }
        assert body["data"]["workspace"]["name"] == "Untitled"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path", ["/functions/workspace-permissions", "/functions/workspaces-by-idea", "/functions/ideas-workspace"]
    )
    async def test_idea_id_required(self, client, path):
        response = await client.get(path)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: ideaId"}

    @pytest.mark.asyncio
    async def test_private_idea_anonymous_and_stranger(self, client, make_user, make_idea, auth_headers):
        alice = await make_user("alice")
        bob = await make_user("bob")
        idea = await make_idea(alice, "Hidden", visibility="PRIVATE")
        await client.post("/api/workspace", json={"ideaId": idea.id, "userId": alice.id})

        for path in ("/functions/workspaces-by-idea", "/functions/ideas-workspace"):
            anonymous = await client.get(path, params={"ideaId": idea.id})
            stranger = await client.get(path, params={"ideaId": idea.id}, headers=auth_headers(bob))
            assert anonymous.status_code == 401
            assert stranger.status_code == 403

    @pytest.mark.asyncio
    async def test_ideas_workspace(self, client, make_user, make_idea):
        alice = await make_user("alice")
        idea = await make_idea(alice, "Canvas", tags=["art"])
        created = (
            await client.post("/api/workspace", json={"ideaId": idea.id, "userId": alice.id})
        ).json()

        response = await client.get("/functions/ideas-workspace", params={"ideaId": idea.id})

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["workspaceId"] == created["id"]
        assert data["workspace"]["id"] == created["id"]
        assert data["idea"]["title"] == "Canvas"
        assert data["idea"]["tags"] == ["art"]
        assert data["idea"]["author"]["username"] == "alice"
        assert data["idea"]["collaborators"] == []

    @pytest.mark.asyncio
    async def test_ideas_workspace_without_workspace(self, client, make_user, make_idea):
        alice = await make_user("alice")
        idea = await make_idea(alice, "Bare")

        response = await client.get("/functions/ideas-workspace", params={"ideaId": idea.id})
        assert response.status_code == 404
        assert response.json() == {"error": "Workspace for this idea not found"}

@pytest.mark.asyncio
async def test_registry_lookup(client, db_manager):
    await seed_services(db_manager)

    listing = (await client.get("/functions/registry")).json()
    assert [s["name"] for s in listing["data"]] == ["main", "workspace"]

    main = (await client.get("/functions/registry", params={"name": "main"})).json()
    assert main["data"]["activeUrl"] == "http://localhost:8888"

    missing = await client.get("/functions/registry", params={"name": "billing"})
    assert missing.status_code == 404
    assert missing.json() == {"error": "Service not found"}

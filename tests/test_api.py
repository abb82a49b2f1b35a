import asyncio
import threading
import time
from datetime import timedelta

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from backend.main import app
from backend.app.core import transactions
from backend.app.core.config import settings
from backend.app.core.database import get_db
from backend.app.core.deps import get_notification_fanout, get_share_link_service
from backend.app.core.security import create_access_token
from backend.app.core.transactions import ConcurrentModificationError


@pytest.fixture
def client(engine, share_links, fanout):
    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_share_link_service] = lambda: share_links
    app.dependency_overrides[get_notification_fanout] = lambda: fanout
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(user):
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest.fixture
def token(client, group, admin):
    response = client.post(f"/api/v1/groups/{group.id}/share-link", json={}, headers=auth(admin))
    assert response.status_code == 200
    return response.json()["share_token"]


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["message"] == "Group Ledger API"


def test_requires_authentication(client, group):
    response = client.post(f"/api/v1/groups/{group.id}/share-link", json={})
    assert response.status_code in (401, 403)

    response = client.post(
        f"/api/v1/groups/{group.id}/share-link",
        json={},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401


class TestShareLinkRoutes:
    def test_create_share_link(self, client, group, admin, clock):
        response = client.post(
            f"/api/v1/groups/{group.id}/share-link", json={}, headers=auth(admin)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["shareable_path"] == f"/join?shareToken={data['share_token']}"
        assert data["expires_at"].startswith((clock() + timedelta(days=1)).date().isoformat())

    def test_create_share_link_without_body(self, client, group, admin, clock):
        response = client.post(f"/api/v1/groups/{group.id}/share-link", headers=auth(admin))

        assert response.status_code == 200
        assert response.json()["expires_at"].startswith(
            (clock() + timedelta(days=1)).date().isoformat()
        )

    def test_invalid_expiration(self, client, group, admin, clock):
        response = client.post(
            f"/api/v1/groups/{group.id}/share-link",
            json={"expires_at": (clock() - timedelta(hours=1)).isoformat()},
            headers=auth(admin),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_EXPIRATION"

    def test_non_member_forbidden(self, client, group, make_user):
        response = client.post(
            f"/api/v1/groups/{group.id}/share-link", json={}, headers=auth(make_user("Mallory"))
        )

        assert response.status_code == 403
        assert response.json() == {
            "detail": "Only group members can generate share links",
            "code": "NOT_GROUP_MEMBER",
        }

    def test_preview(self, client, token, group, make_user):
        response = client.post(
            "/api/v1/groups/share/preview",
            json={"share_token": token},
            headers=auth(make_user("Victor")),
        )

        assert response.status_code == 200
        assert response.json() == {
            "group_id": str(group.id),
            "group_name": "Trip",
            "group_description": "Shared costs",
            "member_count": 1,
            "is_already_member": False,
        }

    def test_preview_unknown_token(self, client, admin):
        response = client.post(
            "/api/v1/groups/share/preview", json={"share_token": "bogus"}, headers=auth(admin)
        )

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestJoinRoutes:
    def test_join_then_conflicting_name(self, client, token, group, admin, make_user):
        bob = make_user("Bob")

        response = client.post(
            "/api/v1/groups/share/join",
            json={"share_token": token, "group_display_name": "Bob"},
            headers=auth(bob),
        )

        assert response.status_code == 200
        assert response.json() == {
            "group_id": str(group.id),
            "group_name": "Trip",
            "success": True,
            "member_status": "active",
        }

        response = client.post(
            "/api/v1/groups/share/join",
            json={"share_token": token, "group_display_name": "bob"},
            headers=auth(make_user("Carl")),
        )

        assert response.status_code == 409
        assert response.json()["code"] == "DISPLAY_NAME_CONFLICT"

        feed = client.get("/api/v1/activity-feed", headers=auth(admin)).json()
        assert len(feed) == 1
        assert feed[0]["actor_id"] == str(bob.id)
        assert feed[0]["event_type"] == "member-joined"
        assert feed[0]["details"]["targetUserId"] == str(bob.id)

    def test_join_expired_link(self, client, token, make_user, clock):
        clock.advance(days=2)

        response = client.post(
            "/api/v1/groups/share/join",
            json={"share_token": token, "group_display_name": "Bob"},
            headers=auth(make_user("Bob")),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "LINK_EXPIRED"

    def test_join_twice(self, client, token, admin):
        response = client.post(
            "/api/v1/groups/share/join",
            json={"share_token": token, "group_display_name": "Alice"},
            headers=auth(admin),
        )

        assert response.status_code == 409
        assert response.json()["code"] == "ALREADY_MEMBER"

    def test_empty_display_name(self, client, token, make_user):
        response = client.post(
            "/api/v1/groups/share/join",
            json={"share_token": token, "group_display_name": "  "},
            headers=auth(make_user("Bob")),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_DISPLAY_NAME"


def test_retrying_join_does_not_block_other_requests(client, token, make_user, monkeypatch):
    monkeypatch.setattr(settings, "JOIN_RETRY_MIN_WAIT", 0.3)
    monkeypatch.setattr(settings, "JOIN_RETRY_MAX_WAIT", 0.3)
    real_bump = transactions.bump_membership_version
    conflicted = threading.Event()
    calls = []

    def conflicting_bump(session, group_id, expected_version):
        calls.append(expected_version)
        if len(calls) <= 2:
            conflicted.set()
            raise ConcurrentModificationError(f"Group {group_id} membership changed")
        return real_bump(session, group_id, expected_version)

    monkeypatch.setattr("backend.app.services.joins.bump_membership_version", conflicting_bump)
    headers = auth(make_user("Bob"))
    finished = {}

    async def join(http):
        response = await http.post(
            "/api/v1/groups/share/join",
            json={"share_token": token, "group_display_name": "Bob"},
            headers=headers,
        )
        finished["join"] = time.perf_counter()
        return response

    async def root_while_join_backs_off(http):
        await asyncio.to_thread(conflicted.wait, 5)
        response = await http.get("/")
        finished["root"] = time.perf_counter()
        return response

    async def run_both():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            return await asyncio.gather(join(http), root_while_join_backs_off(http))

    join_response, root_response = asyncio.run(run_both())

    assert join_response.status_code == 200
    assert root_response.status_code == 200
    assert len(calls) == 3
    # Root was answered during the join's retry sleep, not after it
    assert finished["root"] < finished["join"]


def test_activity_feed_limit_validated(client, admin):
    response = client.get("/api/v1/activity-feed?limit=0", headers=auth(admin))

    assert response.status_code == 422

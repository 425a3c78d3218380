"""
BabyJournal Backend — Sharing API Tests
========================================

What we test:
    ✅ Owner grants editor/reader roles; re-sharing replaces the role
    ✅ Editors may list collaborators but not share or unshare
    ✅ Self-share, unknown email and invalid role are rejected
    ✅ Revoking removes access; revoking a missing grant is a no-op
"""

import pytest


async def _share(owner, journal_id, email, role):
    return await owner.client.post(
        f"/api/journals/{journal_id}/share", json={"email": email, "role": role}
    )


class TestShare:

    @pytest.mark.asyncio
    async def test_share_and_list(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        eva = await signed_in("Eva")
        journal_id = await journal_of(ana)

        response = await _share(ana, journal_id, eva.email, "editor")
        assert response.status_code == 200
        assert response.json()["user_id"] == eva.id
        assert response.json()["role"] == "editor"

        response = await ana.client.get(f"/api/journals/{journal_id}/shared-users")
        assert response.status_code == 200
        users = response.json()["users"]
        assert [(u["email"], u["role"]) for u in users] == [(eva.email, "editor")]

    @pytest.mark.asyncio
    async def test_email_is_case_insensitive(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        eva = await signed_in("Eva")
        journal_id = await journal_of(ana)

        response = await _share(ana, journal_id, eva.email.upper(), "reader")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_reshare_replaces_role(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        eva = await signed_in("Eva")
        journal_id = await journal_of(ana)

        await _share(ana, journal_id, eva.email, "reader")
        await _share(ana, journal_id, eva.email, "editor")

        users = (await ana.client.get(f"/api/journals/{journal_id}/shared-users")).json()["users"]
        assert len(users) == 1
        assert users[0]["role"] == "editor"
        journal = (await eva.client.get(f"/api/journals/{journal_id}")).json()
        assert journal["user_role"] == "editor"

    @pytest.mark.asyncio
    async def test_share_with_self(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        journal_id = await journal_of(ana)

        response = await _share(ana, journal_id, ana.email, "editor")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_email(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        journal_id = await journal_of(ana)

        response = await _share(ana, journal_id, "nobody@example.com", "reader")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_owner_role_cannot_be_granted(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        eva = await signed_in("Eva")
        journal_id = await journal_of(ana)

        response = await _share(ana, journal_id, eva.email, "owner")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_editor_can_list_but_not_share(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        eva = await signed_in("Eva")
        rita = await signed_in("Rita")
        journal_id = await journal_of(ana)
        await _share(ana, journal_id, eva.email, "editor")

        assert (await eva.client.get(f"/api/journals/{journal_id}/shared-users")).status_code == 200
        assert (await _share(eva, journal_id, rita.email, "reader")).status_code == 403

    @pytest.mark.asyncio
    async def test_reader_cannot_list(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        rita = await signed_in("Rita")
        journal_id = await journal_of(ana)
        await _share(ana, journal_id, rita.email, "reader")

        response = await rita.client.get(f"/api/journals/{journal_id}/shared-users")
        assert response.status_code == 403


class TestUnshare:

    @pytest.mark.asyncio
    async def test_unshare_revokes_access(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        eva = await signed_in("Eva")
        journal_id = await journal_of(ana)
        await _share(ana, journal_id, eva.email, "editor")

        response = await ana.client.delete(f"/api/journals/{journal_id}/shared-users/{eva.id}")
        assert response.status_code == 200

        response = await eva.client.get(f"/api/journals/{journal_id}")
        assert response.status_code == 403
        assert (await eva.client.get("/api/journals")).json()["journals"] == []

    @pytest.mark.asyncio
    async def test_unshare_missing_grant_is_noop(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        eva = await signed_in("Eva")
        journal_id = await journal_of(ana)

        response = await ana.client.delete(f"/api/journals/{journal_id}/shared-users/{eva.id}")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_owner_cannot_unshare_self(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        journal_id = await journal_of(ana)

        response = await ana.client.delete(f"/api/journals/{journal_id}/shared-users/{ana.id}")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_editor_cannot_unshare(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        eva = await signed_in("Eva")
        rita = await signed_in("Rita")
        journal_id = await journal_of(ana)
        await _share(ana, journal_id, eva.email, "editor")
        await _share(ana, journal_id, rita.email, "reader")

        response = await eva.client.delete(f"/api/journals/{journal_id}/shared-users/{rita.id}")
        assert response.status_code == 403

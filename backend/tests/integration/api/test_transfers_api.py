"""
Integration tests for the transfer/approval protocol.

WHY: A transfer crosses three actors (owner, target, manager); these tests
walk the whole protocol over HTTP and check visibility moves with
ownership.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import TicketFactory, UserFactory
from ticketdesk.models.ticket import TicketStatus, TransferStatus


class TestTransferScenario:
    @pytest.mark.asyncio
    async def test_request_and_approve(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        manager = await UserFactory.create_manager(db_session)
        alice = await UserFactory.create(db_session, manager_id=manager.id)
        bob = await UserFactory.create(db_session, manager_id=manager.id)

        created = await client.post(
            "/tickets",
            headers=auth_headers(alice),
            json={"title": "Payroll", "description": "Wrong amount"},
        )
        ticket_id = created.json()["id"]
        too_early = await client.post(
            f"/tickets/{ticket_id}/transfer",
            headers=auth_headers(alice),
            json={"targetUserId": bob.id},
        )
        assert too_early.status_code == 400
        assert too_early.json()["code"] == "TransferNotAllowedError"

        await client.put(
            f"/tickets/{ticket_id}", headers=auth_headers(alice), json={"status": "IN_PROGRESS"}
        )

        requested = await client.post(
            f"/tickets/{ticket_id}/transfer",
            headers=auth_headers(alice),
            json={"targetUserId": bob.id},
        )
        assert requested.status_code == 200
        assert requested.json()["transferStatus"] == "PENDING"
        assert requested.json()["transferToId"] == bob.id

        approved = await client.post(
            f"/tickets/{ticket_id}/approve-transfer",
            headers=auth_headers(manager),
            json={"approve": True},
        )
        assert approved.status_code == 200
        data = approved.json()
        assert data["assignedToId"] == bob.id
        assert data["assignedTo"]["id"] == bob.id
        assert data["assignedTo"]["email"] == bob.email
        assert data["transferStatus"] == "APPROVED"
        assert data["transferToId"] is None
        assert data["status"] == "IN_PROGRESS"

        bob_list = await client.get("/tickets", headers=auth_headers(bob))
        alice_list = await client.get("/tickets", headers=auth_headers(alice))
        assert [t["id"] for t in bob_list.json()] == [ticket_id]
        assert alice_list.json() == []

        history = await client.get(f"/tickets/{ticket_id}/history", headers=auth_headers(bob))
        actions = [h["action"] for h in history.json()]
        assert actions == [
            "status changed from OPEN to IN_PROGRESS",
            "transfer requested, pending approval",
            f"transfer approved by manager {manager.id}",
        ]
        assert history.json()[2]["fromId"] == alice.id
        assert history.json()[2]["toId"] == bob.id

    @pytest.mark.asyncio
    async def test_request_and_reject(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        admin = await UserFactory.create_admin(db_session)
        alice = await UserFactory.create(db_session)
        bob = await UserFactory.create(db_session)
        ticket = await TicketFactory.create(
            db_session, assigned_to=alice, status=TicketStatus.IN_PROGRESS
        )

        await client.post(
            f"/tickets/{ticket.id}/transfer",
            headers=auth_headers(alice),
            json={"targetUserId": bob.id},
        )
        rejected = await client.post(
            f"/tickets/{ticket.id}/approve-transfer",
            headers=auth_headers(admin),
            json={"approve": False},
        )

        assert rejected.status_code == 200
        assert rejected.json()["assignedToId"] == alice.id
        assert rejected.json()["transferStatus"] == "REJECTED"
        assert rejected.json()["transferToId"] is None

    @pytest.mark.asyncio
    async def test_snake_case_body_accepted(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        alice = await UserFactory.create(db_session)
        bob = await UserFactory.create(db_session)
        ticket = await TicketFactory.create(
            db_session, assigned_to=alice, status=TicketStatus.IN_PROGRESS
        )

        response = await client.post(
            f"/tickets/{ticket.id}/transfer",
            headers=auth_headers(alice),
            json={"target_user_id": bob.id},
        )

        assert response.status_code == 200


class TestTransferErrors:
    @pytest.mark.asyncio
    async def test_request_from_open_ticket(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        alice = await UserFactory.create(db_session)
        bob = await UserFactory.create(db_session)
        ticket = await TicketFactory.create(db_session, assigned_to=alice)

        response = await client.post(
            f"/tickets/{ticket.id}/transfer",
            headers=auth_headers(alice),
            json={"targetUserId": bob.id},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "TransferNotAllowedError"

    @pytest.mark.asyncio
    async def test_request_by_manager(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        manager = await UserFactory.create_manager(db_session)
        alice = await UserFactory.create(db_session, manager_id=manager.id)
        bob = await UserFactory.create(db_session)
        ticket = await TicketFactory.create(
            db_session, assigned_to=alice, status=TicketStatus.IN_PROGRESS
        )

        response = await client.post(
            f"/tickets/{ticket.id}/transfer",
            headers=auth_headers(manager),
            json={"targetUserId": bob.id},
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_request_to_unknown_user(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        alice = await UserFactory.create(db_session)
        ticket = await TicketFactory.create(
            db_session, assigned_to=alice, status=TicketStatus.IN_PROGRESS
        )

        response = await client.post(
            f"/tickets/{ticket.id}/transfer",
            headers=auth_headers(alice),
            json={"targetUserId": 9999},
        )

        assert response.status_code == 404
        assert response.json()["code"] == "UserNotFoundError"

    @pytest.mark.asyncio
    async def test_request_missing_target(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        alice = await UserFactory.create(db_session)
        ticket = await TicketFactory.create(
            db_session, assigned_to=alice, status=TicketStatus.IN_PROGRESS
        )

        response = await client.post(
            f"/tickets/{ticket.id}/transfer", headers=auth_headers(alice), json={}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_approve_without_pending(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        manager = await UserFactory.create_manager(db_session)
        alice = await UserFactory.create(db_session)
        ticket = await TicketFactory.create(
            db_session, assigned_to=alice, status=TicketStatus.IN_PROGRESS
        )

        response = await client.post(
            f"/tickets/{ticket.id}/approve-transfer",
            headers=auth_headers(manager),
            json={"approve": True},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "NoPendingTransferError"
        follow_up = await client.get(f"/tickets/{ticket.id}", headers=auth_headers(manager))
        assert follow_up.json()["assignedToId"] == alice.id
        assert follow_up.json()["transferStatus"] is None

    @pytest.mark.asyncio
    async def test_user_cannot_approve(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        alice = await UserFactory.create(db_session)
        bob = await UserFactory.create(db_session)
        ticket = await TicketFactory.create(
            db_session,
            assigned_to=alice,
            status=TicketStatus.IN_PROGRESS,
            transfer_to_id=bob.id,
            transfer_status=TransferStatus.PENDING,
        )

        response = await client.post(
            f"/tickets/{ticket.id}/approve-transfer",
            headers=auth_headers(bob),
            json={"approve": True},
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_pending_without_target(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        manager = await UserFactory.create_manager(db_session)
        alice = await UserFactory.create(db_session)
        ticket = await TicketFactory.create(
            db_session,
            assigned_to=alice,
            status=TicketStatus.IN_PROGRESS,
            transfer_status=TransferStatus.PENDING,
        )

        response = await client.post(
            f"/tickets/{ticket.id}/approve-transfer",
            headers=auth_headers(manager),
            json={"approve": True},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "TransferDataError"

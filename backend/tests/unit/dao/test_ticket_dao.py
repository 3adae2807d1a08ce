"""
Tests for the ticket, comment and history DAOs.

WHY: The DAOs turn a TicketFilter into SQL; these tests check the SQL
agrees with the in-memory filter check and that orderings are stable.
"""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import AreaFactory, TicketFactory, UserFactory, ticket_matches
from ticketdesk.dao.ticket import TicketCommentDAO, TicketDAO, TicketFilter, TicketHistoryDAO
from ticketdesk.models.ticket import TicketStatus


class TestTicketDAO:
    @pytest.mark.asyncio
    async def test_create_ticket_defaults(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)

        ticket = await TicketDAO(db_session).create_ticket(
            title="Broken chair", description="Leg snapped", assigned_to_id=user.id
        )

        assert ticket.id is not None
        assert ticket.status == TicketStatus.OPEN
        assert ticket.transfer_status is None
        assert ticket.created_at == ticket.last_activity_at

    @pytest.mark.asyncio
    async def test_list_newest_first(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        older = await TicketFactory.create(db_session, assigned_to=user, title="older")
        newer = await TicketFactory.create(db_session, assigned_to=user, title="newer")
        older.created_at = newer.created_at - timedelta(minutes=5)
        await db_session.flush()

        tickets = await TicketDAO(db_session).list(TicketFilter())

        assert [t.id for t in tickets] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_list_by_assignees(self, db_session: AsyncSession):
        a = await UserFactory.create(db_session)
        b = await UserFactory.create(db_session)
        c = await UserFactory.create(db_session)
        ta = await TicketFactory.create(db_session, assigned_to=a)
        tb = await TicketFactory.create(db_session, assigned_to=b)
        await TicketFactory.create(db_session, assigned_to=c)

        tickets = await TicketDAO(db_session).list(
            TicketFilter(assigned_to_ids=frozenset({a.id, b.id}))
        )

        assert {t.id for t in tickets} == {ta.id, tb.id}

    @pytest.mark.asyncio
    async def test_list_by_area_and_status(self, db_session: AsyncSession):
        area = await AreaFactory.create(db_session)
        other_area = await AreaFactory.create(db_session)
        user = await UserFactory.create(db_session)
        match = await TicketFactory.create(
            db_session, assigned_to=user, area_id=area.id, status=TicketStatus.IN_PROGRESS
        )
        await TicketFactory.create(db_session, assigned_to=user, area_id=area.id)
        await TicketFactory.create(
            db_session, assigned_to=user, area_id=other_area.id, status=TicketStatus.IN_PROGRESS
        )

        ticket_filter = TicketFilter(area_id=area.id, status=TicketStatus.IN_PROGRESS)
        tickets = await TicketDAO(db_session).list(ticket_filter)

        assert [t.id for t in tickets] == [match.id]
        assert all(ticket_matches(ticket_filter, t) for t in tickets)

    @pytest.mark.asyncio
    async def test_list_nothing(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        await TicketFactory.create(db_session, assigned_to=user)

        assert await TicketDAO(db_session).list(TicketFilter.nothing()) == []

    @pytest.mark.asyncio
    async def test_list_pagination(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        for i in range(5):
            await TicketFactory.create(db_session, assigned_to=user, title=f"t{i}")

        page = await TicketDAO(db_session).list(TicketFilter(), skip=1, limit=2)

        assert len(page) == 2


class TestCommentAndHistoryDAO:
    @pytest.mark.asyncio
    async def test_comments_are_per_ticket(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        first = await TicketFactory.create(db_session, assigned_to=user)
        second = await TicketFactory.create(db_session, assigned_to=user)
        dao = TicketCommentDAO(db_session)
        await dao.add(first.id, user.id, "on first")
        await dao.add(second.id, user.id, "on second")

        comments = await dao.list_for_ticket(first.id)

        assert [c.content for c in comments] == ["on first"]

    @pytest.mark.asyncio
    async def test_history_oldest_first(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        ticket = await TicketFactory.create(db_session, assigned_to=user)
        dao = TicketHistoryDAO(db_session)
        await dao.record(ticket.id, "one", from_id=user.id)
        await dao.record(ticket.id, "two")

        history = await dao.list_for_ticket(ticket.id)

        assert [h.action for h in history] == ["one", "two"]
        assert history[1].from_id is None

"""
Audit rows are committed together with the change they describe
"""
import pytest
from sqlalchemy.future import select

from designquote.models.audit import Audit
from designquote.core.enums import AuditAction


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


async def _audit_actions(session, user_id):
    res = await session.execute(select(Audit).where(Audit.user_id == user_id).order_by(Audit.id))
    return [row.action for row in res.scalars().all()]


class TestAuditLogging:

    @pytest.mark.asyncio
    async def test_quote_lifecycle_is_audited(
        self, test_client, db_session, create_project_type_factory, create_quote_factory,
        sales_user, sales_token
    ):
        website = await create_project_type_factory("Website", 1000.0)
        quote = await create_quote_factory(sales_token, website["id"])
        await test_client.patch(
            f"/quotes/{quote['id']}",
            json={"lead_status": "Proposal Sent"},
            headers=_auth(sales_token)
        )
        await test_client.delete(f"/quotes/{quote['id']}", headers=_auth(sales_token))
        
        actions = await _audit_actions(db_session, sales_user.id)
        assert actions == [
            AuditAction.CREATE_QUOTE.value,
            AuditAction.UPDATE_QUOTE_STATUS.value,
            AuditAction.DELETE_QUOTE.value,
        ]
        
        res = await db_session.execute(select(Audit).where(Audit.action == AuditAction.DELETE_QUOTE.value))
        assert res.scalars().one().entity_id == quote["id"]

    @pytest.mark.asyncio
    async def test_rejected_change_leaves_no_audit(self, test_client, db_session, sales_user, sales_token):
        response = await test_client.post(
            "/quotes/",
            json={"quote": {"project_type_id": 404, "client_name": "Jane", "email": "j@x.io"}},
            headers=_auth(sales_token)
        )
        assert response.status_code == 404
        assert await _audit_actions(db_session, sales_user.id) == []

    @pytest.mark.asyncio
    async def test_payload_hash_recorded(
        self, test_client, db_session, admin_user, admin_token
    ):
        await test_client.put(
            "/settings/business-name",
            json={"business_name": "Pixel Studio"},
            headers=_auth(admin_token)
        )
        res = await db_session.execute(select(Audit).where(Audit.action == AuditAction.UPDATE_SETTINGS.value))
        row = res.scalars().one()
        assert row.user_id == admin_user.id
        assert len(row.payload_hash) == 64

"""Plan quota enforcement for note creation.

Flow for a create:
  1. Take the tenant's in-process lock (one per tenant id)
  2. In one DB transaction: lock the tenant row, read plan + note count
  3. Admit only if the count is below the plan limit
  4. Insert and commit, or roll back and raise QuotaExceeded

Step 1 serialises creators inside this process; step 2 serialises them
across processes on databases that honour ``FOR UPDATE``.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
import weakref

from app.core.errors import QuotaExceeded
from app.core.plans import can_create_note, note_limit
from app.models.note import Note
from app.models.tenant import Tenant, TenantPlan, TenantUsage
from app.services.principal import Principal
from app.services.store import SqlStore

logger = logging.getLogger(__name__)

QUOTA_MESSAGE = "Note limit reached. Upgrade to Pro plan for unlimited notes."


class QuotaEnforcer:
    """Admits or rejects note creation against the tenant's plan limit.

    One instance is shared by the whole application. Locks live only while
    some request holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, tenant_id: uuid.UUID) -> asyncio.Lock:
        lock = self._locks.get(tenant_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[tenant_id] = lock
        return lock

    @staticmethod
    def admit_create(plan: TenantPlan, current_count: int) -> bool:
        return can_create_note(plan, current_count)

    async def create_note(
        self,
        store: SqlStore,
        principal: Principal,
        title: str,
        content: str,
    ) -> Note:
        """Create a note in the principal's tenant if the plan allows it."""
        note = Note(
            tenant_id=principal.tenant_id,
            user_id=principal.principal_id,
            title=title,
            content=content,
        )

        async with self._lock_for(principal.tenant_id):
            created = await store.count_and_create_note(note, self.admit_create)

        if created is None:
            logger.warning(
                "Note quota reached for tenant %s (user %s)",
                principal.tenant_slug,
                principal.principal_id,
            )
            raise QuotaExceeded(QUOTA_MESSAGE)
        return created

    async def usage(self, store: SqlStore, tenant: Tenant) -> TenantUsage:
        count = await store.count_notes_by_tenant(tenant.id)
        plan = TenantPlan(tenant.plan)
        return TenantUsage(plan=plan, note_count=count, note_limit=note_limit(plan))

"""Plan tiers and the quotas they grant.

Single source of truth for per-plan note limits. ``None`` means unbounded.
"""

from app.models.tenant import TenantPlan

PLAN_NOTE_LIMITS: dict[TenantPlan, int | None] = {
    TenantPlan.FREE: 3,
    TenantPlan.PRO: None,
}


def note_limit(plan: TenantPlan) -> int | None:
    """Return the maximum number of notes a tenant on ``plan`` may hold."""
    return PLAN_NOTE_LIMITS[plan]


def can_create_note(plan: TenantPlan, current_count: int) -> bool:
    """True if one more note fits under the plan's limit."""
    limit = note_limit(plan)
    return limit is None or current_count < limit

"""
Market Registry Backend — Workflow Guard
==========================================

What:  Decides whether an actor may move a market or vendor record from its
       current status to a requested one, and what side effect comes with it.
How:   A fixed transition table keyed by entity. authorize_transition() is a
       pure function: no database access, no HTTP types, so the same rules
       apply to any caller and are unit-testable in isolation.
Who:   Called by MarketService / VendorService before a status write, and by
       the detail endpoints to list the actions available to the caller.

Transition table:
    market   manager     pending      → recommended
    market   director    recommended  → approved
    market   director    recommended  → rejected
    vendor   supervisor  pending      → verified
    vendor   manager     verified     → approved   (stall_no required)

Rejection order:
    1. (current → requested) absent for this entity      → InvalidTransitionError
    2. pair exists but belongs to another role            → PermissionDeniedError
    3. rule requires a stall number and none was given    → ValidationError
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from app.exceptions import InvalidTransitionError, PermissionDeniedError, ValidationError
from app.models.enums import MarketStatus, UserRole, VendorStatus

ENTITY_MARKET = "market"
ENTITY_VENDOR = "vendor"


@dataclass(frozen=True)
class TransitionRule:
    role: str
    from_status: str
    to_status: str
    requires_stall: bool = False


@dataclass(frozen=True)
class TransitionDecision:
    """What the caller should write once a transition is accepted."""
    entity: str
    from_status: str
    to_status: str
    stall_no: Optional[str] = None


TRANSITIONS: Dict[str, Tuple[TransitionRule, ...]] = {
    ENTITY_MARKET: (
        TransitionRule(UserRole.MANAGER.value, MarketStatus.PENDING.value, MarketStatus.RECOMMENDED.value),
        TransitionRule(UserRole.DIRECTOR.value, MarketStatus.RECOMMENDED.value, MarketStatus.APPROVED.value),
        TransitionRule(UserRole.DIRECTOR.value, MarketStatus.RECOMMENDED.value, MarketStatus.REJECTED.value),
    ),
    ENTITY_VENDOR: (
        TransitionRule(UserRole.SUPERVISOR.value, VendorStatus.PENDING.value, VendorStatus.VERIFIED.value),
        TransitionRule(
            UserRole.MANAGER.value,
            VendorStatus.VERIFIED.value,
            VendorStatus.APPROVED.value,
            requires_stall=True,
        ),
    ),
}


def _value(v) -> str:
    # Accept enum members or raw strings
    return getattr(v, "value", v)


def _rules_for(entity: str) -> Tuple[TransitionRule, ...]:
    try:
        return TRANSITIONS[entity]
    except KeyError:
        raise ValueError(f"Unknown workflow entity '{entity}'")


def allowed_transitions(role, entity: str, current_status) -> List[str]:
    """Statuses `role` may move a record of `entity` to from `current_status`."""
    role, current_status = _value(role), _value(current_status)
    return [
        rule.to_status
        for rule in _rules_for(entity)
        if rule.role == role and rule.from_status == current_status
    ]


def authorize_transition(
    role,
    entity: str,
    current_status,
    requested_status,
    stall_no: Optional[str] = None,
) -> TransitionDecision:
    """
    Validate a requested status change against the transition table.

    Args:
        role: Actor's role (UserRole or its string value)
        entity: ENTITY_MARKET or ENTITY_VENDOR
        current_status: Record's stored status
        requested_status: Status the actor asks for
        stall_no: Stall allocation, required when approving a vendor

    Returns:
        TransitionDecision with the normalized stall number (or None when the
        rule does not allocate a stall).

    Raises:
        InvalidTransitionError, PermissionDeniedError, ValidationError
    """
    role = _value(role)
    current_status = _value(current_status)
    requested_status = _value(requested_status)

    matching = [
        rule
        for rule in _rules_for(entity)
        if rule.from_status == current_status and rule.to_status == requested_status
    ]
    if not matching:
        raise InvalidTransitionError(
            entity=entity,
            current_status=current_status,
            requested_status=requested_status,
            allowed=allowed_transitions(role, entity, current_status),
        )

    rule = next((r for r in matching if r.role == role), None)
    if rule is None:
        raise PermissionDeniedError(
            role=role,
            action=f"move a {entity} from '{current_status}' to '{requested_status}'",
            context={"required_role": matching[0].role},
        )

    if rule.requires_stall:
        stall = (stall_no or "").strip()
        if not stall:
            raise ValidationError(
                message="A stall number is required to approve a vendor",
                field="stall_no",
            )
        return TransitionDecision(entity, current_status, requested_status, stall)

    return TransitionDecision(entity, current_status, requested_status)

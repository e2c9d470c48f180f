"""Approval chain transition table.

No status change is allowed outside ``TRANSITIONS`` and ``REVOCATIONS``.
The engine in ``eventflow.services.events`` looks rules up here and applies
them; this module never touches the database.
"""
from __future__ import annotations

from dataclasses import dataclass

from eventflow.models.event import EventStatus, TERMINAL_STATUSES
from eventflow.models.history import EventAction
from eventflow.models.user import UserRole
from eventflow.utils.errors import (
    InvalidTransitionError,
    RemarksRequiredError,
    UnauthorizedRoleError,
)

HOD_STAMP = "hod_approval_at"
DEAN_STAMP = "dean_approval_at"
PRINCIPAL_STAMP = "principal_approval_at"
ALL_STAMPS = (HOD_STAMP, DEAN_STAMP, PRINCIPAL_STAMP)

NON_TERMINAL_STATUSES = frozenset(set(EventStatus) - TERMINAL_STATUSES)


@dataclass(frozen=True)
class Actor:
    """Identity supplied by the caller for every core operation."""

    actor_id: int
    role: UserRole


@dataclass(frozen=True)
class TransitionRule:
    role: UserRole
    action: EventAction
    sources: frozenset[EventStatus]
    target: EventStatus
    sets_stamp: str | None = None
    clears_stamps: tuple[str, ...] = ()
    requires_remarks: bool = False
    admits_booking: bool = False
    owner_only: bool = False
    clears_remarks: bool = False


@dataclass(frozen=True)
class RevocationRule:
    role: UserRole
    stamp: str
    target: EventStatus
    clears_stamps: tuple[str, ...]


def _review_rules(
    role: UserRole,
    sources: frozenset[EventStatus],
    *,
    approve_to: EventStatus,
    stamp: str,
    return_to: EventStatus,
    return_clears: tuple[str, ...],
) -> list[TransitionRule]:
    return [
        TransitionRule(
            role=role,
            action=EventAction.APPROVE,
            sources=sources,
            target=approve_to,
            sets_stamp=stamp,
            admits_booking=True,
        ),
        TransitionRule(
            role=role,
            action=EventAction.REJECT,
            sources=sources,
            target=EventStatus.REJECTED,
            requires_remarks=True,
        ),
        TransitionRule(
            role=role,
            action=EventAction.RETURN,
            sources=sources,
            target=return_to,
            clears_stamps=return_clears,
            requires_remarks=True,
        ),
    ]


_RULES: list[TransitionRule] = [
    *_review_rules(
        UserRole.HOD,
        frozenset({EventStatus.PENDING_HOD, EventStatus.RETURNED_TO_HOD, EventStatus.RESUBMITTED}),
        approve_to=EventStatus.PENDING_DEAN,
        stamp=HOD_STAMP,
        return_to=EventStatus.RETURNED_TO_COORDINATOR,
        return_clears=(),
    ),
    # A return sends the event back one stage; that stage has to sign again.
    *_review_rules(
        UserRole.DEAN,
        frozenset({EventStatus.PENDING_DEAN, EventStatus.RETURNED_TO_DEAN}),
        approve_to=EventStatus.PENDING_PRINCIPAL,
        stamp=DEAN_STAMP,
        return_to=EventStatus.RETURNED_TO_HOD,
        return_clears=(HOD_STAMP,),
    ),
    *_review_rules(
        UserRole.PRINCIPAL,
        frozenset({EventStatus.PENDING_PRINCIPAL}),
        approve_to=EventStatus.APPROVED,
        stamp=PRINCIPAL_STAMP,
        return_to=EventStatus.RETURNED_TO_DEAN,
        return_clears=(DEAN_STAMP,),
    ),
    TransitionRule(
        role=UserRole.COORDINATOR,
        action=EventAction.RESUBMIT,
        sources=frozenset({EventStatus.RETURNED_TO_COORDINATOR}),
        target=EventStatus.PENDING_HOD,
        clears_stamps=ALL_STAMPS,
        admits_booking=True,
        owner_only=True,
        clears_remarks=True,
    ),
    TransitionRule(
        role=UserRole.COORDINATOR,
        action=EventAction.CANCEL,
        sources=NON_TERMINAL_STATUSES,
        target=EventStatus.CANCELLED,
        owner_only=True,
    ),
]

TRANSITIONS: dict[tuple[UserRole, EventAction], TransitionRule] = {
    (rule.role, rule.action): rule for rule in _RULES
}

REVOCATIONS: dict[UserRole, RevocationRule] = {
    UserRole.HOD: RevocationRule(
        role=UserRole.HOD,
        stamp=HOD_STAMP,
        target=EventStatus.PENDING_HOD,
        clears_stamps=ALL_STAMPS,
    ),
    UserRole.DEAN: RevocationRule(
        role=UserRole.DEAN,
        stamp=DEAN_STAMP,
        target=EventStatus.PENDING_DEAN,
        clears_stamps=(DEAN_STAMP, PRINCIPAL_STAMP),
    ),
    # Principal revocation goes back to the Dean, not to pending_principal.
    UserRole.PRINCIPAL: RevocationRule(
        role=UserRole.PRINCIPAL,
        stamp=PRINCIPAL_STAMP,
        target=EventStatus.PENDING_DEAN,
        clears_stamps=(PRINCIPAL_STAMP,),
    ),
}

ROLE_LABELS = {
    UserRole.COORDINATOR: "COORDINATOR",
    UserRole.HOD: "HOD",
    UserRole.DEAN: "DEAN",
    UserRole.PRINCIPAL: "PRINCIPAL",
    UserRole.ADMIN: "ADMIN",
}


def status_label(status: EventStatus) -> str:
    """Human readable status, e.g. ``pending_hod`` -> ``Pending HOD``."""

    words = status.value.split("_")
    return " ".join(word.upper() if word == "hod" else word.capitalize() for word in words)


def resolve_rule(role: UserRole, action: EventAction) -> TransitionRule:
    rule = TRANSITIONS.get((role, action))
    if rule is None:
        raise UnauthorizedRoleError(
            f"Role '{role.value}' cannot {action.value} events.",
            role=role.value,
            action=action.value,
        )
    return rule


def ensure_source(rule: TransitionRule, status: EventStatus) -> None:
    if status not in rule.sources:
        raise InvalidTransitionError(
            f"Cannot {rule.action.value} an event that is {status.value}.",
            status=status.value,
            action=rule.action.value,
        )


def ensure_remarks(rule: TransitionRule, remarks: str | None) -> None:
    if rule.requires_remarks and not (remarks or "").strip():
        raise RemarksRequiredError(action=rule.action.value)


def resolve_revocation(role: UserRole) -> RevocationRule:
    rule = REVOCATIONS.get(role)
    if rule is None:
        raise UnauthorizedRoleError(
            f"Role '{role.value}' has no approval to revoke.",
            role=role.value,
            action=EventAction.REVOKE.value,
        )
    return rule


def revocation_remarks(rule: RevocationRule) -> str:
    return (
        f"Approval revoked by {ROLE_LABELS[rule.role]}. "
        f"Status reverted to {status_label(rule.target)}."
    )


def available_actions(role: UserRole, status: EventStatus) -> list[EventAction]:
    """Actions ``role`` may attempt on an event in ``status`` (ownership aside)."""

    return [
        rule.action
        for rule in _RULES
        if rule.role == role and status in rule.sources
    ]


def review_sources(role: UserRole) -> frozenset[EventStatus]:
    """Statuses that sit in the review queue of ``role``."""

    rule = TRANSITIONS.get((role, EventAction.APPROVE))
    return rule.sources if rule else frozenset()


__all__ = [
    "ALL_STAMPS",
    "Actor",
    "NON_TERMINAL_STATUSES",
    "REVOCATIONS",
    "ROLE_LABELS",
    "RevocationRule",
    "TRANSITIONS",
    "TransitionRule",
    "available_actions",
    "ensure_remarks",
    "ensure_source",
    "resolve_revocation",
    "resolve_rule",
    "review_sources",
    "revocation_remarks",
    "status_label",
]

"""
Swap request lifecycle rules.

    pending --accept--> accepted --complete--> completed
    pending --reject--> rejected
    pending --delete--> (removed)

These checks run before any store call and raise ValidationFailure or
PermissionDenied. Concurrent changes by both parties are last-write-wins;
no version token is checked.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..core.exceptions import PermissionDenied, ValidationFailure
from ..schemas.swap import MAX_MESSAGE_LENGTH, SwapRequest, SwapRequestCreate, SwapStatus


class Actor:
    RECIPIENT = "recipient"
    EITHER = "either"


@dataclass(frozen=True)
class TransitionRule:
    source: SwapStatus
    target: SwapStatus
    actor: str


TRANSITIONS = {
    (SwapStatus.PENDING, SwapStatus.ACCEPTED): TransitionRule(SwapStatus.PENDING, SwapStatus.ACCEPTED, Actor.RECIPIENT),
    (SwapStatus.PENDING, SwapStatus.REJECTED): TransitionRule(SwapStatus.PENDING, SwapStatus.REJECTED, Actor.RECIPIENT),
    (SwapStatus.ACCEPTED, SwapStatus.COMPLETED): TransitionRule(SwapStatus.ACCEPTED, SwapStatus.COMPLETED, Actor.EITHER),
}

def validate_new_request(requester_id: str, payload: SwapRequestCreate) -> Dict[str, Any]:
    """
    Check a new request and build the row to insert.

    Raises:
        ValidationFailure: Self-request, blank fields or an over-long message
    """
    if not requester_id or not payload.to_user_id:
        raise ValidationFailure("Requester and recipient are required")

    if requester_id == payload.to_user_id:
        raise ValidationFailure("You cannot send a swap request to yourself")

    skill_offered = payload.skill_offered.strip()
    skill_wanted = payload.skill_wanted.strip()
    message = payload.message.strip()

    if not skill_offered:
        raise ValidationFailure("Choose a skill to offer")
    if not skill_wanted:
        raise ValidationFailure("Choose a skill you want")
    if not message:
        raise ValidationFailure("A message is required")
    if len(message) > MAX_MESSAGE_LENGTH:
        raise ValidationFailure(f"Message must be at most {MAX_MESSAGE_LENGTH} characters")

    return {
        "from_user_id": requester_id,
        "to_user_id": payload.to_user_id,
        "skill_offered": skill_offered,
        "skill_wanted": skill_wanted,
        "message": message,
        "status": SwapStatus.PENDING.value,
    }


def _require_party(request: SwapRequest, actor_id: str) -> None:
    if not request.involves(actor_id):
        raise PermissionDenied("You are not a party to this swap request")


def check_transition(request: SwapRequest, actor_id: str, target: SwapStatus) -> TransitionRule:
    """
    Validate moving ``request`` to ``target`` on behalf of ``actor_id``.

    Raises:
        PermissionDenied: The actor is not allowed to make this change
        ValidationFailure: The transition is not in the table
    """
    _require_party(request, actor_id)

    rule = TRANSITIONS.get((request.status, target))
    if rule is None:
        raise ValidationFailure(
            f"Cannot change status from {request.status.value} to {target.value}"
        )

    if rule.actor == Actor.RECIPIENT and actor_id != request.to_user_id:
        raise PermissionDenied(f"Only the recipient can mark a request {target.value}")

    return rule


def transition_changes(target: SwapStatus, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Column updates for a validated transition."""
    changes: Dict[str, Any] = {"status": target.value}
    if target == SwapStatus.COMPLETED:
        changes["completed_at"] = (now or datetime.now(timezone.utc)).isoformat()
    return changes


def check_delete(request: SwapRequest, actor_id: str) -> None:
    """
    Raises:
        PermissionDenied: The actor is not the requester
        ValidationFailure: The request is no longer pending
    """
    _require_party(request, actor_id)
    if actor_id != request.from_user_id:
        raise PermissionDenied("Only the requester can delete a swap request")
    if request.status != SwapStatus.PENDING:
        raise ValidationFailure(f"Cannot delete a {request.status.value} swap request")

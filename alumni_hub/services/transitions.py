"""
Guard rules for every relationship transition.

Each function looks at the current state handed to it and decides whether the
requested action may happen, returning an ``Outcome``. Nothing here touches the
database or raises for a rule violation; the action services read state, call
these functions and apply the approved change.

``propose`` is the single entry point keyed by ``TransitionAction``; the
per-variant functions are public as well so callers with typed arguments can use
them directly.
"""
import enum
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional

from alumni_hub.core.utils import as_utc, utcnow
from alumni_hub.schemas.actor import Actor
from alumni_hub.schemas.enums import (
    CampaignStatusEnum,
    ConnectionStatusEnum,
    DonationStatusEnum,
    EventStatusEnum,
    FundraiserStatusEnum,
    ModeratedItemTypeEnum,
    ModerationActionEnum,
    RegistrationStatusEnum,
    TopicStatusEnum,
)
from alumni_hub.schemas.outcome import ErrorKind, Outcome

DEFAULT_MODERATOR_ROLES = ("admin", "moderator")
DELETED = "deleted"


class TransitionAction(str, enum.Enum):
    CONNECTION_REQUEST = "connection.request"
    CONNECTION_ACCEPT = "connection.accept"
    CONNECTION_DECLINE = "connection.decline"
    CONNECTION_REMOVE = "connection.remove"
    REGISTRATION_REGISTER = "registration.register"
    REGISTRATION_UNREGISTER = "registration.unregister"
    REGISTRATION_CHECK_IN = "registration.check_in"
    FAVORITE_ADD = "favorite.add"
    FAVORITE_REMOVE = "favorite.remove"
    JOB_SAVE = "job.save"
    JOB_UNSAVE = "job.unsave"
    CONGRATULATION_ADD = "congratulation.add"
    CONGRATULATION_REMOVE = "congratulation.remove"
    FUNDRAISER_CREATE = "fundraiser.create"
    FUNDRAISER_PAUSE = "fundraiser.pause"
    FUNDRAISER_RESUME = "fundraiser.resume"
    FUNDRAISER_COMPLETE = "fundraiser.complete"
    DONATION_PLEDGE = "donation.pledge"
    DONATION_COMPLETE = "donation.complete"
    FORUM_POST = "forum.post"
    MODERATE = "moderate"
    GET_PENDING = "get_pending"


def _deadline_passed(deadline: Optional[datetime], now: datetime) -> bool:
    return deadline is not None and as_utc(deadline) < as_utc(now)


# --- Connections ---

def request_connection(actor: Actor, target_user_id: uuid.UUID, existing: Optional[Any]) -> Outcome:
    """
    Any existing row for the pair blocks a new request, whatever its status.
    Declined rows are never cleaned up, so a declined pair stays blocked.
    """
    if actor.id == target_user_id:
        return Outcome.deny(ErrorKind.SELF_REFERENCE, "You cannot connect with yourself.")
    if existing is not None:
        return Outcome.deny(ErrorKind.ALREADY_EXISTS, "A connection already exists between these users.")
    return Outcome.ok(ConnectionStatusEnum.PENDING.value, "Connection request sent.")


def _respond_to_connection(actor: Actor, connection: Any, new_status: ConnectionStatusEnum) -> Outcome:
    if actor.id != connection.recipient_id:
        return Outcome.deny(ErrorKind.FORBIDDEN, "Only the recipient can respond to this request.")
    if connection.status != ConnectionStatusEnum.PENDING:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Connection request is no longer pending.")
    return Outcome.ok(new_status.value, f"Connection request {new_status.value}.")


def accept_connection(actor: Actor, connection: Any) -> Outcome:
    return _respond_to_connection(actor, connection, ConnectionStatusEnum.ACCEPTED)


def decline_connection(actor: Actor, connection: Any) -> Outcome:
    return _respond_to_connection(actor, connection, ConnectionStatusEnum.DECLINED)


def remove_connection(actor: Actor, connection: Any) -> Outcome:
    if actor.id not in (connection.requester_id, connection.recipient_id):
        return Outcome.deny(ErrorKind.FORBIDDEN, "You are not part of this connection.")
    if connection.status != ConnectionStatusEnum.ACCEPTED:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Only accepted connections can be removed.")
    return Outcome.ok(DELETED, "Connection removed.")


# --- Event registrations ---

def register_for_event(
    actor: Actor,
    event: Any,
    existing: Optional[Any],
    now: Optional[datetime] = None,
    registration_count: Optional[int] = None,
) -> Outcome:
    now = now or utcnow()
    if registration_count is None:
        registration_count = event.attendee_count or 0

    if event.status != EventStatusEnum.PUBLISHED:
        return Outcome.deny(ErrorKind.NOT_OPEN, "Registration is not open for this event.")
    if _deadline_passed(event.registration_deadline, now):
        return Outcome.deny(ErrorKind.DEADLINE_PASSED, "The registration deadline has passed.")
    if event.max_attendees is not None and registration_count >= event.max_attendees:
        return Outcome.deny(ErrorKind.FULL, "This event is full.")
    if existing is not None:
        return Outcome.deny(ErrorKind.ALREADY_REGISTERED, "You are already registered for this event.")
    return Outcome.ok(RegistrationStatusEnum.CONFIRMED.value, "Registration confirmed.")


def unregister_from_event(actor: Actor, event: Any, existing: Optional[Any], now: Optional[datetime] = None) -> Outcome:
    now = now or utcnow()
    if existing is None:
        return Outcome.deny(ErrorKind.NOT_REGISTERED, "You are not registered for this event.")
    if existing.status == RegistrationStatusEnum.CHECKED_IN:
        return Outcome.deny(ErrorKind.INVALID_STATE, "You have already checked in to this event.")
    if _deadline_passed(event.cancellation_deadline, now):
        return Outcome.deny(ErrorKind.DEADLINE_PASSED, "The cancellation deadline has passed.")
    return Outcome.ok(DELETED, "Registration cancelled.")


def check_in(event: Any, existing: Optional[Any]) -> Outcome:
    if event.status != EventStatusEnum.PUBLISHED:
        return Outcome.deny(ErrorKind.NOT_OPEN, "Check-in is not open for this event.")
    if existing is None:
        return Outcome.deny(ErrorKind.NOT_REGISTERED, "You are not registered for this event.")
    if existing.status != RegistrationStatusEnum.CONFIRMED:
        return Outcome.deny(ErrorKind.INVALID_STATE, "You have already checked in to this event.")
    return Outcome.ok(RegistrationStatusEnum.CHECKED_IN.value, "Checked in.")


# --- Favorites and saved jobs ---

def add_favorite(existing: Optional[Any]) -> Outcome:
    if existing is not None:
        return Outcome.deny(ErrorKind.ALREADY_EXISTS, "Already in your favorites.")
    return Outcome.ok("favorited", "Added to favorites.")


def remove_favorite(existing: Optional[Any]) -> Outcome:
    if existing is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Not in your favorites.")
    return Outcome.ok(DELETED, "Removed from favorites.")


def save_job(existing: Optional[Any]) -> Outcome:
    # Find-or-create: saving twice is a success, not a conflict
    if existing is not None:
        return Outcome.ok("saved", "Job already saved.")
    return Outcome.ok("saved", "Job saved.")


def unsave_job(existing: Optional[Any]) -> Outcome:
    # Delete-if-exists: unsaving something that is not saved is a silent no-op
    return Outcome.ok(DELETED, "Job removed from saved jobs.")


# --- Congratulations ---

def add_congratulation(existing: Optional[Any]) -> Outcome:
    if existing is not None:
        return Outcome.deny(ErrorKind.ALREADY_EXISTS, "You have already congratulated this achievement.")
    return Outcome.ok("congratulated", "Congratulations sent.")


def remove_congratulation(existing: Optional[Any]) -> Outcome:
    if existing is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Congratulation not found.")
    return Outcome.ok(DELETED, "Congratulation removed.")


# --- Peer fundraisers ---

def create_fundraiser(actor: Actor, campaign: Any, existing: Optional[Any]) -> Outcome:
    if campaign.status != CampaignStatusEnum.ACTIVE:
        return Outcome.deny(ErrorKind.NOT_OPEN, "This campaign is not accepting peer fundraisers.")
    if existing is not None:
        return Outcome.deny(ErrorKind.ALREADY_EXISTS, "You already have a fundraiser for this campaign.")
    return Outcome.ok(FundraiserStatusEnum.ACTIVE.value, "Peer fundraiser created.")


def _owner_guard(actor: Actor, fundraiser: Any) -> Optional[Outcome]:
    if actor.id != fundraiser.user_id:
        return Outcome.deny(ErrorKind.FORBIDDEN, "Only the fundraiser owner can change its status.")
    return None


def pause_fundraiser(actor: Actor, fundraiser: Any) -> Outcome:
    denied = _owner_guard(actor, fundraiser)
    if denied:
        return denied
    if fundraiser.status != FundraiserStatusEnum.ACTIVE:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Only active fundraisers can be paused.")
    return Outcome.ok(FundraiserStatusEnum.PAUSED.value, "Fundraiser paused.")


def resume_fundraiser(actor: Actor, fundraiser: Any) -> Outcome:
    denied = _owner_guard(actor, fundraiser)
    if denied:
        return denied
    if fundraiser.status != FundraiserStatusEnum.PAUSED:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Only paused fundraisers can be resumed.")
    return Outcome.ok(FundraiserStatusEnum.ACTIVE.value, "Fundraiser resumed.")


def complete_fundraiser(actor: Actor, fundraiser: Any) -> Outcome:
    denied = _owner_guard(actor, fundraiser)
    if denied:
        return denied
    if fundraiser.status == FundraiserStatusEnum.COMPLETED:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Fundraiser is already completed.")
    return Outcome.ok(FundraiserStatusEnum.COMPLETED.value, "Fundraiser completed.")


def pledge_donation(fundraiser: Any) -> Outcome:
    if fundraiser.status == FundraiserStatusEnum.COMPLETED:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Fundraiser is no longer accepting donations.")
    return Outcome.ok(DonationStatusEnum.PENDING.value, "Donation pledged.")


def complete_donation(actor: Actor, donation: Optional[Any], fundraiser: Any, admin_roles: Iterable[str] = ("admin",)) -> Outcome:
    """
    Completing a donation is the only path that raises a fundraiser's total.
    Payment confirmations are recorded by admins.
    """
    if not actor.has_any_role(admin_roles):
        return Outcome.deny(ErrorKind.FORBIDDEN, "Only admins can confirm donations.")
    if donation is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Donation not found.")
    if donation.status != DonationStatusEnum.PENDING:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Donation has already been completed.")
    if fundraiser.status == FundraiserStatusEnum.COMPLETED:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Fundraiser is no longer accepting donations.")
    return Outcome.ok(DonationStatusEnum.COMPLETED.value, "Donation completed.")


# --- Moderation ---

_TOPIC_ACTIONS = {
    ModerationActionEnum.APPROVE,
    ModerationActionEnum.REJECT,
    ModerationActionEnum.PIN,
    ModerationActionEnum.UNPIN,
    ModerationActionEnum.LOCK,
    ModerationActionEnum.UNLOCK,
}
_POST_ACTIONS = {ModerationActionEnum.APPROVE, ModerationActionEnum.REJECT}


def post_to_topic(topic: Optional[Any]) -> Outcome:
    if topic is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Forum topic not found.")
    if topic.status != TopicStatusEnum.ACTIVE:
        return Outcome.deny(ErrorKind.INVALID_STATE, "This topic is not accepting new posts.")
    return Outcome.ok("posted", "Post created.")


def can_moderate(actor: Actor, moderator_roles: Iterable[str] = DEFAULT_MODERATOR_ROLES) -> Outcome:
    if not actor.has_any_role(moderator_roles):
        return Outcome.deny(ErrorKind.FORBIDDEN, "Moderator or admin role required.")
    return Outcome.ok(message="Moderation allowed.")


def moderate_content(
    actor: Actor,
    item_type: ModeratedItemTypeEnum,
    item: Optional[Any],
    action: ModerationActionEnum,
    moderator_roles: Iterable[str] = DEFAULT_MODERATOR_ROLES,
) -> Outcome:
    allowed = can_moderate(actor, moderator_roles)
    if not allowed.allow:
        return allowed
    if item is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, f"Forum {item_type.value} not found.")

    valid_actions = _TOPIC_ACTIONS if item_type == ModeratedItemTypeEnum.TOPIC else _POST_ACTIONS
    if action not in valid_actions:
        return Outcome.deny(ErrorKind.INVALID_STATE, f"Action '{action.value}' does not apply to a {item_type.value}.")

    if action == ModerationActionEnum.APPROVE:
        if item.is_approved:
            return Outcome.deny(ErrorKind.INVALID_STATE, "Content is already approved.")
        return Outcome.ok("approved", "Content approved.")
    if action == ModerationActionEnum.REJECT:
        return Outcome.ok(DELETED, "Content rejected.")
    if action == ModerationActionEnum.PIN:
        return Outcome.ok("pinned", "Topic pinned.")
    if action == ModerationActionEnum.UNPIN:
        return Outcome.ok("unpinned", "Topic unpinned.")
    if action == ModerationActionEnum.LOCK:
        if item.status == TopicStatusEnum.LOCKED:
            return Outcome.deny(ErrorKind.INVALID_STATE, "Topic is already locked.")
        return Outcome.ok(TopicStatusEnum.LOCKED.value, "Topic locked.")
    # UNLOCK
    if item.status != TopicStatusEnum.LOCKED:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Topic is not locked.")
    return Outcome.ok(TopicStatusEnum.ACTIVE.value, "Topic unlocked.")


# --- Single entry point ---

def _moderate_from_context(actor: Actor, item: Any, ctx: Dict[str, Any]) -> Outcome:
    try:
        item_type = ModeratedItemTypeEnum(ctx.get("item_type"))
        action = ModerationActionEnum(ctx.get("action"))
    except ValueError:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Moderation needs an item_type and an action.")
    return moderate_content(actor, item_type, item, action, ctx.get("moderator_roles", DEFAULT_MODERATOR_ROLES))


_Handler = Callable[[Actor, Any, Any, Dict[str, Any]], Outcome]

_HANDLERS: Dict[TransitionAction, _Handler] = {
    TransitionAction.CONNECTION_REQUEST: lambda actor, target, state, ctx: request_connection(actor, target, state),
    TransitionAction.CONNECTION_ACCEPT: lambda actor, target, state, ctx: accept_connection(actor, target),
    TransitionAction.CONNECTION_DECLINE: lambda actor, target, state, ctx: decline_connection(actor, target),
    TransitionAction.CONNECTION_REMOVE: lambda actor, target, state, ctx: remove_connection(actor, target),
    TransitionAction.REGISTRATION_REGISTER: lambda actor, target, state, ctx: register_for_event(
        actor, target, state, ctx.get("now"), ctx.get("registration_count")
    ),
    TransitionAction.REGISTRATION_UNREGISTER: lambda actor, target, state, ctx: unregister_from_event(
        actor, target, state, ctx.get("now")
    ),
    TransitionAction.REGISTRATION_CHECK_IN: lambda actor, target, state, ctx: check_in(target, state),
    TransitionAction.FAVORITE_ADD: lambda actor, target, state, ctx: add_favorite(state),
    TransitionAction.FAVORITE_REMOVE: lambda actor, target, state, ctx: remove_favorite(state),
    TransitionAction.JOB_SAVE: lambda actor, target, state, ctx: save_job(state),
    TransitionAction.JOB_UNSAVE: lambda actor, target, state, ctx: unsave_job(state),
    TransitionAction.CONGRATULATION_ADD: lambda actor, target, state, ctx: add_congratulation(state),
    TransitionAction.CONGRATULATION_REMOVE: lambda actor, target, state, ctx: remove_congratulation(state),
    TransitionAction.FUNDRAISER_CREATE: lambda actor, target, state, ctx: create_fundraiser(actor, target, state),
    TransitionAction.FUNDRAISER_PAUSE: lambda actor, target, state, ctx: pause_fundraiser(actor, target),
    TransitionAction.FUNDRAISER_RESUME: lambda actor, target, state, ctx: resume_fundraiser(actor, target),
    TransitionAction.FUNDRAISER_COMPLETE: lambda actor, target, state, ctx: complete_fundraiser(actor, target),
    TransitionAction.DONATION_PLEDGE: lambda actor, target, state, ctx: pledge_donation(target),
    TransitionAction.DONATION_COMPLETE: lambda actor, target, state, ctx: complete_donation(actor, state, target),
    TransitionAction.FORUM_POST: lambda actor, target, state, ctx: post_to_topic(target),
    TransitionAction.MODERATE: lambda actor, target, state, ctx: _moderate_from_context(actor, target, ctx),
    TransitionAction.GET_PENDING: lambda actor, target, state, ctx: can_moderate(
        actor, ctx.get("moderator_roles", DEFAULT_MODERATOR_ROLES)
    ),
}


def propose(
    actor: Actor,
    target: Any,
    action: TransitionAction,
    current_state: Any = None,
    context: Optional[Dict[str, Any]] = None,
) -> Outcome:
    """
    Decide whether ``actor`` may perform ``action`` on ``target``.

    ``target`` is the thing acted on (a user id for connection requests, the
    connection, event, job, celebration, campaign, fundraiser or forum item
    otherwise); ``current_state`` is the actor's existing relationship row, if
    any (the donation for ``donation.complete``). ``context`` carries ``now``,
    ``registration_count`` and the moderation ``item_type``/``action``.
    """
    handler = _HANDLERS[TransitionAction(action)]
    return handler(actor, target, current_state, context or {})

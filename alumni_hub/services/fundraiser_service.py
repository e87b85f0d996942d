from datetime import datetime
from decimal import Decimal
from typing import List, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alumni_hub import crud
from alumni_hub.core.utils import utcnow
from alumni_hub.db.models.fundraising import Campaign, PeerFundraiser
from alumni_hub.schemas.actor import Actor
from alumni_hub.schemas.enums import CampaignStatusEnum, FundraiserStatusEnum
from alumni_hub.schemas.fundraiser import CampaignCreate, DonationCreate, PeerFundraiserCreate
from alumni_hub.schemas.outcome import ErrorKind, Outcome
from alumni_hub.services import aggregate_counter, transitions
from alumni_hub.services.unit_of_work import require_duplicate, transaction

logger = structlog.get_logger(__name__)

ADMIN_ROLES = ("admin",)


def create_campaign(db: Session, actor: Actor, campaign_in: CampaignCreate) -> Outcome:
    if not actor.has_any_role(ADMIN_ROLES):
        return Outcome.deny(ErrorKind.FORBIDDEN, "Only admins can create campaigns.")
    with transaction(db, "campaign.create", actor_id=str(actor.id)):
        campaign = crud.campaign.create(db, obj_in=campaign_in, created_by=actor.id, status=CampaignStatusEnum.ACTIVE)
    logger.info("campaign_created", campaign_id=campaign.id, actor_id=str(actor.id))
    return Outcome.ok(CampaignStatusEnum.ACTIVE.value, "Campaign created.", record=campaign)


def create_fundraiser(db: Session, actor: Actor, fundraiser_in: PeerFundraiserCreate) -> Outcome:
    """
    Starts a peer fundraiser for the actor under a campaign.
    One per user per campaign; the unique index decides concurrent attempts.
    """
    campaign = crud.campaign.get(db, fundraiser_in.campaign_id)
    if campaign is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Campaign not found.")

    existing = crud.peer_fundraiser.get_by_user(db, campaign_id=campaign.id, user_id=actor.id)
    outcome = transitions.create_fundraiser(actor, campaign, existing)
    if not outcome.allow:
        logger.info("fundraiser_create_rejected", campaign_id=campaign.id, actor_id=str(actor.id), reason=outcome.error.value)
        return outcome

    try:
        with transaction(db, "fundraiser.create", duplicates=True, campaign_id=campaign.id, actor_id=str(actor.id)):
            record = crud.peer_fundraiser.create(
                db,
                obj_in=fundraiser_in,
                user_id=actor.id,
                raised_amount=Decimal("0"),
                status=FundraiserStatusEnum.ACTIVE,
            )
    except IntegrityError as e:
        duplicate = crud.peer_fundraiser.get_by_user(db, campaign_id=campaign.id, user_id=actor.id)
        require_duplicate(e, "fundraiser.create", duplicate is not None, campaign_id=campaign.id)
        return Outcome.deny(ErrorKind.ALREADY_EXISTS, "You already have a fundraiser for this campaign.")

    logger.info("fundraiser_created", fundraiser_id=record.id, campaign_id=campaign.id, actor_id=str(actor.id))
    return outcome.with_record(record)


# Statuses a fundraiser may be in for the compare-and-set of each change
_EXPECTED = {
    FundraiserStatusEnum.PAUSED: [FundraiserStatusEnum.ACTIVE],
    FundraiserStatusEnum.ACTIVE: [FundraiserStatusEnum.PAUSED],
    FundraiserStatusEnum.COMPLETED: [FundraiserStatusEnum.ACTIVE, FundraiserStatusEnum.PAUSED],
}

_GUARDS = {
    FundraiserStatusEnum.PAUSED: transitions.pause_fundraiser,
    FundraiserStatusEnum.ACTIVE: transitions.resume_fundraiser,
    FundraiserStatusEnum.COMPLETED: transitions.complete_fundraiser,
}


def _change_status(
    db: Session, actor: Actor, fundraiser_id: int, new_status: FundraiserStatusEnum, now: Optional[datetime]
) -> Outcome:
    fundraiser = crud.peer_fundraiser.get_for_update(db, fundraiser_id)
    if fundraiser is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Fundraiser not found.")

    outcome = _GUARDS[new_status](actor, fundraiser)
    if not outcome.allow:
        logger.info("fundraiser_status_rejected", fundraiser_id=fundraiser_id, target=new_status.value, reason=outcome.error.value)
        return outcome

    with transaction(db, f"fundraiser.{new_status.value}", fundraiser_id=fundraiser_id):
        applied = crud.peer_fundraiser.transition_status(
            db,
            fundraiser_id=fundraiser_id,
            expected=_EXPECTED[new_status],
            new_status=new_status,
            at=now or utcnow(),
        )
    if not applied:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Fundraiser status changed in the meantime.")

    db.refresh(fundraiser)
    logger.info("fundraiser_status_changed", fundraiser_id=fundraiser_id, status=new_status.value)
    return outcome.with_record(fundraiser)


def pause_fundraiser(db: Session, actor: Actor, fundraiser_id: int, now: Optional[datetime] = None) -> Outcome:
    return _change_status(db, actor, fundraiser_id, FundraiserStatusEnum.PAUSED, now)


def resume_fundraiser(db: Session, actor: Actor, fundraiser_id: int, now: Optional[datetime] = None) -> Outcome:
    return _change_status(db, actor, fundraiser_id, FundraiserStatusEnum.ACTIVE, now)


def complete_fundraiser(db: Session, actor: Actor, fundraiser_id: int, now: Optional[datetime] = None) -> Outcome:
    return _change_status(db, actor, fundraiser_id, FundraiserStatusEnum.COMPLETED, now)


def pledge_donation(db: Session, actor: Actor, fundraiser_id: int, donation_in: DonationCreate) -> Outcome:
    fundraiser = crud.peer_fundraiser.get(db, fundraiser_id)
    if fundraiser is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Fundraiser not found.")

    outcome = transitions.pledge_donation(fundraiser)
    if not outcome.allow:
        return outcome

    donor_id = None if donation_in.anonymous else actor.id
    with transaction(db, "donation.pledge", fundraiser_id=fundraiser_id):
        record = crud.donation.add(db, fundraiser_id=fundraiser_id, donor_id=donor_id, amount=donation_in.amount)
    logger.info("donation_pledged", donation_id=record.id, fundraiser_id=fundraiser_id, amount=str(record.amount))
    return outcome.with_record(record)


def complete_donation(db: Session, actor: Actor, donation_id: int, now: Optional[datetime] = None) -> Outcome:
    """
    Marks a pending donation completed and adds its amount to the fundraiser's
    raised_amount in the same transaction. The status flip is a compare-and-set,
    so a donation is counted at most once even if confirmed twice concurrently.
    """
    donation = crud.donation.get_for_update(db, donation_id)
    fundraiser = crud.peer_fundraiser.get_for_update(db, donation.fundraiser_id) if donation is not None else None
    outcome = transitions.complete_donation(actor, donation, fundraiser, admin_roles=ADMIN_ROLES)
    if not outcome.allow:
        logger.info("donation_complete_rejected", donation_id=donation_id, reason=outcome.error.value)
        return outcome

    with transaction(db, "donation.complete", donation_id=donation_id):
        applied = crud.donation.mark_completed(db, donation_id=donation_id, at=now or utcnow())
        if applied:
            aggregate_counter.increment(db, PeerFundraiser.raised_amount, fundraiser.id, donation.amount)
    if not applied:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Donation has already been completed.")

    db.refresh(donation)
    logger.info("donation_completed", donation_id=donation_id, fundraiser_id=fundraiser.id, amount=str(donation.amount))
    return outcome.with_record(donation)


def reconcile_raised_amount(db: Session, actor: Actor, fundraiser_id: int) -> Outcome:
    if not actor.has_any_role(ADMIN_ROLES):
        return Outcome.deny(ErrorKind.FORBIDDEN, "Only admins can reconcile fundraiser totals.")
    if crud.peer_fundraiser.get(db, fundraiser_id) is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Fundraiser not found.")
    with transaction(db, "fundraiser.recount", fundraiser_id=fundraiser_id):
        total = aggregate_counter.recount_raised_amount(db, fundraiser_id)
    return Outcome.ok("reconciled", "Raised amount reconciled.", record=total)


def get_fundraiser(db: Session, fundraiser_id: int) -> Optional[PeerFundraiser]:
    return crud.peer_fundraiser.get_for_update(db, fundraiser_id)


def get_campaign(db: Session, campaign_id: int) -> Optional[Campaign]:
    return crud.campaign.get(db, campaign_id)


def get_campaign_fundraisers(db: Session, campaign_id: int, skip: int = 0, limit: int = 100) -> List[PeerFundraiser]:
    return crud.peer_fundraiser.get_multi_by_campaign(db, campaign_id=campaign_id, skip=skip, limit=limit)


def get_my_fundraisers(db: Session, actor: Actor) -> List[PeerFundraiser]:
    return crud.peer_fundraiser.get_multi_by_user(db, user_id=actor.id)

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from alumni_hub import schemas
from alumni_hub.api.v1.deps import get_db, get_current_actor
from alumni_hub.api.v1.outcomes import raise_for_outcome
from alumni_hub.schemas.actor import Actor
from alumni_hub.services import fundraiser_service

router = APIRouter()
campaigns_router = APIRouter()
donations_router = APIRouter()

# --- Campaigns ---

@campaigns_router.post("/", response_model=schemas.CampaignRead, status_code=status.HTTP_201_CREATED)
def create_campaign(
    campaign_in: schemas.CampaignCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)
):
    outcome = fundraiser_service.create_campaign(db, actor, campaign_in)
    return raise_for_outcome(outcome).record

@campaigns_router.get("/{campaign_id}/fundraisers", response_model=List[schemas.PeerFundraiserRead])
def read_campaign_fundraisers(campaign_id: int, skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    """
    Peer fundraisers of a campaign, highest raised amount first.
    """
    if fundraiser_service.get_campaign(db, campaign_id) is None:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return fundraiser_service.get_campaign_fundraisers(db, campaign_id, skip=skip, limit=limit)

# --- Peer fundraisers ---

@router.post("/", response_model=schemas.PeerFundraiserRead)
def create_peer_fundraiser(
    fundraiser_in: schemas.PeerFundraiserCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)
):
    outcome = fundraiser_service.create_fundraiser(db, actor, fundraiser_in)
    return raise_for_outcome(outcome).record

@router.get("/me", response_model=List[schemas.PeerFundraiserRead])
def read_my_fundraisers(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return fundraiser_service.get_my_fundraisers(db, actor)

@router.get("/{fundraiser_id}", response_model=schemas.PeerFundraiserRead)
def read_peer_fundraiser(fundraiser_id: int, db: Session = Depends(get_db)):
    fundraiser = fundraiser_service.get_fundraiser(db, fundraiser_id)
    if fundraiser is None:
        raise HTTPException(status_code=404, detail="Fundraiser not found")
    return fundraiser

@router.post("/{fundraiser_id}/pause", response_model=schemas.PeerFundraiserRead)
def pause_peer_fundraiser(fundraiser_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return raise_for_outcome(fundraiser_service.pause_fundraiser(db, actor, fundraiser_id)).record

@router.post("/{fundraiser_id}/resume", response_model=schemas.PeerFundraiserRead)
def resume_peer_fundraiser(fundraiser_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return raise_for_outcome(fundraiser_service.resume_fundraiser(db, actor, fundraiser_id)).record

@router.post("/{fundraiser_id}/complete", response_model=schemas.PeerFundraiserRead)
def complete_peer_fundraiser(fundraiser_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return raise_for_outcome(fundraiser_service.complete_fundraiser(db, actor, fundraiser_id)).record

@router.post("/{fundraiser_id}/donations", response_model=schemas.DonationRead, status_code=status.HTTP_201_CREATED)
def pledge_donation(
    fundraiser_id: int,
    donation_in: schemas.DonationCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Pledge a donation. It counts towards the raised amount only once completed.
    """
    outcome = fundraiser_service.pledge_donation(db, actor, fundraiser_id, donation_in)
    return raise_for_outcome(outcome).record

@router.post("/{fundraiser_id}/recount", response_model=schemas.PeerFundraiserRead)
def recount_raised_amount(fundraiser_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    raise_for_outcome(fundraiser_service.reconcile_raised_amount(db, actor, fundraiser_id))
    return fundraiser_service.get_fundraiser(db, fundraiser_id)

# --- Donations ---

@donations_router.post("/{donation_id}/complete", response_model=schemas.DonationRead)
def complete_donation(donation_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    """
    Confirm a pending donation (admins only) and add it to the fundraiser's total.
    """
    return raise_for_outcome(fundraiser_service.complete_donation(db, actor, donation_id)).record

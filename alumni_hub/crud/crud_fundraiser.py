import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from alumni_hub.crud.base import CRUDBase
from alumni_hub.db.models.fundraising import Campaign, Donation, PeerFundraiser
from alumni_hub.schemas.enums import DonationStatusEnum, FundraiserStatusEnum
from alumni_hub.schemas.fundraiser import CampaignCreate, DonationCreate, PeerFundraiserCreate


class CRUDCampaign(CRUDBase[Campaign, CampaignCreate]):
    pass


class CRUDPeerFundraiser(CRUDBase[PeerFundraiser, PeerFundraiserCreate]):
    def get_by_user(self, db: Session, *, campaign_id: int, user_id: uuid.UUID) -> Optional[PeerFundraiser]:
        return db.query(PeerFundraiser).filter(
            PeerFundraiser.campaign_id == campaign_id,
            PeerFundraiser.user_id == user_id,
        ).first()

    def transition_status(
        self,
        db: Session,
        *,
        fundraiser_id: int,
        expected: List[FundraiserStatusEnum],
        new_status: FundraiserStatusEnum,
        at: datetime,
    ) -> bool:
        result = db.execute(
            update(PeerFundraiser)
            .where(PeerFundraiser.id == fundraiser_id, PeerFundraiser.status.in_(expected))
            .values(status=new_status, updated_at=at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def get_multi_by_campaign(self, db: Session, *, campaign_id: int, skip: int = 0, limit: int = 100) -> List[PeerFundraiser]:
        return (
            db.query(PeerFundraiser)
            .filter(PeerFundraiser.campaign_id == campaign_id)
            .order_by(PeerFundraiser.raised_amount.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_multi_by_user(self, db: Session, *, user_id: uuid.UUID) -> List[PeerFundraiser]:
        return (
            db.query(PeerFundraiser)
            .filter(PeerFundraiser.user_id == user_id)
            .order_by(PeerFundraiser.created_at.desc())
            .all()
        )


class CRUDDonation(CRUDBase[Donation, DonationCreate]):
    def mark_completed(self, db: Session, *, donation_id: int, at: datetime) -> bool:
        """Compare-and-set pending -> completed; False if someone else completed it first."""
        result = db.execute(
            update(Donation)
            .where(Donation.id == donation_id, Donation.status == DonationStatusEnum.PENDING)
            .values(status=DonationStatusEnum.COMPLETED, completed_at=at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def sum_completed(self, db: Session, *, fundraiser_id: int) -> Decimal:
        total = db.execute(
            select(func.coalesce(func.sum(Donation.amount), 0)).where(
                Donation.fundraiser_id == fundraiser_id,
                Donation.status == DonationStatusEnum.COMPLETED,
            )
        ).scalar_one()
        return Decimal(str(total))


campaign = CRUDCampaign(Campaign)
peer_fundraiser = CRUDPeerFundraiser(PeerFundraiser)
donation = CRUDDonation(Donation)

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Numeric, Enum as SAEnum, UniqueConstraint, Uuid

from alumni_hub.core.utils import utcnow
from alumni_hub.db.session import Base
from alumni_hub.schemas.enums import CampaignStatusEnum, FundraiserStatusEnum, DonationStatusEnum

class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, index=True)
    created_by = Column(Uuid, ForeignKey("users.id"), nullable=False)
    title = Column(String(200), nullable=False)
    goal_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(SAEnum(CampaignStatusEnum, name="campaignstatusenum_sqlalchemy"), default=CampaignStatusEnum.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class PeerFundraiser(Base):
    __tablename__ = "peer_fundraisers"

    id = Column(Integer, primary_key=True, index=True)
    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    story = Column(Text, nullable=True)
    goal_amount = Column(Numeric(12, 2), nullable=False)
    # Only ever increased by completing a donation
    raised_amount = Column(Numeric(12, 2), default=0, nullable=False)
    status = Column(SAEnum(FundraiserStatusEnum, name="fundraiserstatusenum_sqlalchemy"), default=FundraiserStatusEnum.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (UniqueConstraint('campaign_id', 'user_id', name='uq_peer_fundraiser_user'),)


class Donation(Base):
    __tablename__ = "donations"

    id = Column(Integer, primary_key=True, index=True)
    fundraiser_id = Column(Integer, ForeignKey("peer_fundraisers.id", ondelete="CASCADE"), nullable=False, index=True)
    donor_id = Column(Uuid, ForeignKey("users.id"), nullable=True) # None for anonymous donors
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(SAEnum(DonationStatusEnum, name="donationstatusenum_sqlalchemy"), default=DonationStatusEnum.PENDING, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

import uuid
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from .enums import CampaignStatusEnum, FundraiserStatusEnum, DonationStatusEnum

class CampaignCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    goal_amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)

class CampaignRead(BaseModel):
    id: int
    created_by: uuid.UUID
    title: str
    goal_amount: Decimal
    status: CampaignStatusEnum
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class PeerFundraiserCreate(BaseModel):
    campaign_id: int
    title: str = Field(..., min_length=1, max_length=200)
    story: Optional[str] = None
    goal_amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)

class PeerFundraiserRead(BaseModel):
    id: int
    campaign_id: int
    user_id: uuid.UUID
    title: str
    story: Optional[str] = None
    goal_amount: Decimal
    raised_amount: Decimal
    status: FundraiserStatusEnum
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class DonationCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    anonymous: bool = False

class DonationRead(BaseModel):
    id: int
    fundraiser_id: int
    donor_id: Optional[uuid.UUID] = None
    amount: Decimal
    status: DonationStatusEnum
    created_at: datetime
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

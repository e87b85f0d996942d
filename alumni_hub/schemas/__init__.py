from .enums import (
    ConnectionStatusEnum,
    EventStatusEnum,
    RegistrationStatusEnum,
    CheckInMethodEnum,
    FundraiserStatusEnum,
    CampaignStatusEnum,
    DonationStatusEnum,
    TopicStatusEnum,
    ModeratedItemTypeEnum,
    ModerationActionEnum,
)
from .actor import Actor
from .outcome import Outcome, ErrorKind
from .user import UserCreate, UserPublic, UserRead
from .token import Token
from .connection import ConnectionRequestCreate, ConnectionRead
from .event import (
    EventCreate,
    EventRead,
    EventRegistrationCreate,
    EventRegistrationRead,
    EventCheckInCreate,
    EventFavoriteCreate,
    EventFavoriteRead,
)
from .job import JobCreate, JobRead, SavedJobCreate, SavedJobRead
from .celebration import (
    AchievementCreate,
    AchievementRead,
    AchievementAward,
    UserAchievementCreate,
    UserAchievementRead,
    CelebrationCreate,
    CelebrationRead,
    CongratulationCreate,
    CongratulationRead,
    CongratulationResult,
)
from .fundraiser import (
    CampaignCreate,
    CampaignRead,
    PeerFundraiserCreate,
    PeerFundraiserRead,
    DonationCreate,
    DonationRead,
)
from .forum import (
    ForumTopicCreate,
    ForumTopicRead,
    ForumPostCreate,
    ForumPostRead,
    PendingModerationRead,
)
from .generic import ActionResult, CountResult

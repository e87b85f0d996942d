import enum

class ConnectionStatusEnum(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"

class EventStatusEnum(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"

class RegistrationStatusEnum(str, enum.Enum):
    # Cancelling a registration deletes the row, so there is no "cancelled" status
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"

class CheckInMethodEnum(str, enum.Enum):
    MANUAL = "manual"
    QR_CODE = "qr_code"
    NFC = "nfc"
    GEOFENCE = "geofence"

class FundraiserStatusEnum(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"

class CampaignStatusEnum(str, enum.Enum):
    ACTIVE = "active"
    ENDED = "ended"

class DonationStatusEnum(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"

class TopicStatusEnum(str, enum.Enum):
    ACTIVE = "active"
    LOCKED = "locked"
    ARCHIVED = "archived"

class ModeratedItemTypeEnum(str, enum.Enum):
    TOPIC = "topic"
    POST = "post"

class ModerationActionEnum(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"
    PIN = "pin"
    UNPIN = "unpin"
    LOCK = "lock"
    UNLOCK = "unlock"

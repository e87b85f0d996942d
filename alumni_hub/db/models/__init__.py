from .user import User
from .connection import Connection
from .event import Event, EventRegistration, EventFavorite
from .job import Job, SavedJob
from .achievement import Achievement, UserAchievement, AchievementCelebration, Congratulation
from .fundraising import Campaign, PeerFundraiser, Donation
from .forum import ForumTopic, ForumPost

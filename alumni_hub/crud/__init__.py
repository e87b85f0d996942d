from .crud_user import user
from .crud_connection import connection
from .crud_event import event, event_registration, event_favorite
from .crud_job import job, saved_job
from .crud_celebration import achievement, user_achievement, celebration, congratulation
from .crud_fundraiser import campaign, peer_fundraiser, donation
from .crud_forum import forum_topic, forum_post

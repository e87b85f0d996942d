from fastapi import APIRouter

from alumni_hub.api.v1.endpoints import auth, users, connections, events, jobs
from alumni_hub.api.v1.endpoints import celebrations, fundraisers, forums


api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(connections.router, prefix="/connections", tags=["connections"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
api_router.include_router(celebrations.achievements_router, prefix="/achievements", tags=["achievements"])
api_router.include_router(celebrations.router, prefix="/achievement-celebrations", tags=["achievements"])
api_router.include_router(fundraisers.campaigns_router, prefix="/campaigns", tags=["fundraising"])
api_router.include_router(fundraisers.router, prefix="/peer-fundraisers", tags=["fundraising"])
api_router.include_router(fundraisers.donations_router, prefix="/donations", tags=["fundraising"])
api_router.include_router(forums.router, prefix="/forums", tags=["forums"])

"""
API v1 routes.
"""

from fastapi import APIRouter, Depends

from src.api.deps import bind_user_log_context
from src.api.v1 import recent_usernames

router = APIRouter()

router.include_router(
    recent_usernames.router,
    prefix="/users/{user_id}/recent-usernames",
    tags=["Recent Usernames"],
    dependencies=[Depends(bind_user_log_context)],
)

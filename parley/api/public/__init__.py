"""
Public forum API routes.
"""

from fastapi import APIRouter

from parley.api.public import forums, members, replies, search, topics

router = APIRouter()

router.include_router(topics.router, prefix="/topics", tags=["Topics"])
router.include_router(replies.router, prefix="/replies", tags=["Replies"])
router.include_router(forums.router, prefix="/forums", tags=["Forums"])
router.include_router(members.router, prefix="/members", tags=["Members"])
router.include_router(search.router, tags=["Search"])

"""
Pydantic schemas for API request/response validation.
"""

from parley.schemas.auth import (
    UserCreate,
    UserLogin,
    UserResponse,
    TokenResponse,
    RefreshTokenRequest,
)
from parley.schemas.common import (
    PaginatedData,
    ErrorResponse,
    SuccessResponse,
    HealthResponse,
)
from parley.schemas.forums import (
    ForumModel,
    ForumTopicModel,
    ForumPageModel,
    IndexForumModel,
    IndexCategoryModel,
    IndexPageModel,
)
from parley.schemas.posts import (
    PostForumModel,
    PostTopicModel,
    PostPageModel,
    CreateTopicRequest,
    UpdateTopicRequest,
    CreateReplyRequest,
    UpdateReplyRequest,
)
from parley.schemas.search import (
    SearchPostModel,
    SearchPageModel,
    MemberModel,
    MemberPageModel,
)
from parley.schemas.topics import (
    TopicForumModel,
    TopicModel,
    ReplyModel,
    TopicPageModel,
)

__all__ = [
    # Auth
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "TokenResponse",
    "RefreshTokenRequest",
    # Common
    "PaginatedData",
    "ErrorResponse",
    "SuccessResponse",
    "HealthResponse",
    # Forums and index
    "ForumModel",
    "ForumTopicModel",
    "ForumPageModel",
    "IndexForumModel",
    "IndexCategoryModel",
    "IndexPageModel",
    # Posting
    "PostForumModel",
    "PostTopicModel",
    "PostPageModel",
    "CreateTopicRequest",
    "UpdateTopicRequest",
    "CreateReplyRequest",
    "UpdateReplyRequest",
    # Search and members
    "SearchPostModel",
    "SearchPageModel",
    "MemberModel",
    "MemberPageModel",
    # Topics
    "TopicForumModel",
    "TopicModel",
    "ReplyModel",
    "TopicPageModel",
]

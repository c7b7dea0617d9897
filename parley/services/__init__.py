"""
Forum services: request context, rendering helpers and the write-side
topic and reply commands.
"""

from parley.services.context_service import ContextService, ForumContext
from parley.services.gravatar_service import GravatarService
from parley.services.markdown_renderer import render_markdown
from parley.services.slugs import build_slug, generate_topic_slug
from parley.services.topic_service import (
    TopicService,
    CreateTopic,
    UpdateTopic,
    PinTopic,
    LockTopic,
    DeleteTopic,
)
from parley.services.reply_service import (
    ReplyService,
    CreateReply,
    UpdateReply,
    SetReplyAsAnswer,
    DeleteReply,
)

__all__ = [
    "ContextService",
    "ForumContext",
    "GravatarService",
    "render_markdown",
    "build_slug",
    "generate_topic_slug",
    "TopicService",
    "CreateTopic",
    "UpdateTopic",
    "PinTopic",
    "LockTopic",
    "DeleteTopic",
    "ReplyService",
    "CreateReply",
    "UpdateReply",
    "SetReplyAsAnswer",
    "DeleteReply",
]

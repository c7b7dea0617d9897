"""
Read-side model builders. Builders return None for absent targets and never
check permissions.
"""

from parley.builders.query_options import QueryOptions, apply_ordering, contains_text
from parley.builders.topic_model_builder import TopicModelBuilder
from parley.builders.post_model_builder import PostModelBuilder
from parley.builders.forum_model_builder import ForumModelBuilder
from parley.builders.search_model_builder import SearchModelBuilder
from parley.builders.index_model_builder import IndexModelBuilder
from parley.builders.member_model_builder import MemberModelBuilder

__all__ = [
    "QueryOptions",
    "apply_ordering",
    "contains_text",
    "TopicModelBuilder",
    "PostModelBuilder",
    "ForumModelBuilder",
    "SearchModelBuilder",
    "IndexModelBuilder",
    "MemberModelBuilder",
]

"""
Search and index endpoints. Both only ever see the forums the caller can read.
"""

from fastapi import APIRouter

from parley.api.deps import DbSession, ListOptions, ReadableForumIds, RequestContext
from parley.builders.index_model_builder import IndexModelBuilder
from parley.builders.search_model_builder import SearchModelBuilder
from parley.schemas.forums import IndexPageModel
from parley.schemas.search import SearchPageModel

router = APIRouter()


@router.get("/search", response_model=SearchPageModel)
async def search(
    context: RequestContext,
    forum_ids: ReadableForumIds,
    db: DbSession,
    options: ListOptions,
):
    """Search topic titles and post content, newest first by default."""
    return await SearchModelBuilder(db).build_search_page_model(
        context.site_id, forum_ids, options
    )


@router.get("/index-model", response_model=IndexPageModel)
async def index_model(
    context: RequestContext,
    forum_ids: ReadableForumIds,
    db: DbSession,
):
    return await IndexModelBuilder(db).build_index_page_model(context.site_id, forum_ids)

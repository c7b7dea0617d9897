"""
Ordered request pipeline for permission-gated forum endpoints.

Every gated endpoint walks the same stages:

    RESOLVE_CONTEXT -> LOAD_TARGET -> BUILD_PERMISSIONS -> AUTHORIZE -> EXECUTE -> RESPOND

Stages before EXECUTE only read. A missing target stops the walk at
LOAD_TARGET with NOT_FOUND; a failed policy stops it at AUTHORIZE with
UNAUTHORIZED. Existence is always settled before permissions are looked at,
so the two outcomes stay distinguishable.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar, Union

from parley.kernel.permissions.permission_model_builder import (
    EMPTY_PERMISSIONS,
    PermissionModelBuilder,
    PermissionSet,
)
from parley.logging_config import get_logger
from parley.services.context_service import ForumContext

logger = get_logger(__name__)

T = TypeVar("T")


class Stage(str, Enum):
    RESOLVE_CONTEXT = "resolve_context"
    LOAD_TARGET = "load_target"
    BUILD_PERMISSIONS = "build_permissions"
    AUTHORIZE = "authorize"
    EXECUTE = "execute"
    RESPOND = "respond"


class Outcome(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"


# Each stage has exactly one successor
_NEXT: Dict[Stage, Optional[Stage]] = {
    Stage.RESOLVE_CONTEXT: Stage.LOAD_TARGET,
    Stage.LOAD_TARGET: Stage.BUILD_PERMISSIONS,
    Stage.BUILD_PERMISSIONS: Stage.AUTHORIZE,
    Stage.AUTHORIZE: Stage.EXECUTE,
    Stage.EXECUTE: Stage.RESPOND,
    Stage.RESPOND: None,
}


@dataclass(frozen=True)
class PipelineResult(Generic[T]):
    """Where the walk stopped and what it produced."""

    outcome: Outcome
    stage: Stage
    value: Optional[T] = None
    permissions: PermissionSet = EMPTY_PERMISSIONS

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.OK


Loader = Callable[[], Awaitable[Optional[Any]]]
ForumIdSource = Union[uuid.UUID, Callable[[Any], uuid.UUID]]
Policy = Callable[[PermissionSet, Any], bool]
Executor = Callable[[Any], Awaitable[Any]]


class RequestPipeline:
    """
    Runs one gated request for the current context.

    Usage:
        pipeline = RequestPipeline(context, PermissionModelBuilder(db))
        result = await pipeline.run(
            load=lambda: post_builder.get_topic_info(site_id, forum_id, topic_id),
            forum_id=forum_id,
            authorize=lambda perms, info: can_delete_post(perms, info, context.member_id),
            execute=lambda info: topic_service.delete(command),
        )
    """

    def __init__(self, context: ForumContext, permission_builder: PermissionModelBuilder):
        self.context = context
        self.permission_builder = permission_builder

    async def run(
        self,
        load: Optional[Loader],
        forum_id: ForumIdSource,
        authorize: Policy,
        execute: Optional[Executor] = None,
    ) -> PipelineResult:
        """
        Walk the stages.

        Args:
            load: Fetches the target; None means the endpoint has no target to
                confirm. A loader returning None ends the walk with NOT_FOUND.
            forum_id: Forum whose permission set applies, or a function
                deriving it from the loaded target.
            authorize: Policy over (permission set, target).
            execute: Mutation or extra read run once authorized. Its return
                value becomes the result value; without it the target is.
        """
        stage = Stage.RESOLVE_CONTEXT
        self._enter(stage)

        stage = self._advance(stage)
        target = None
        if load is not None:
            target = await load()
            if target is None:
                return PipelineResult(outcome=Outcome.NOT_FOUND, stage=stage)

        stage = self._advance(stage)
        resolved_forum_id = forum_id(target) if callable(forum_id) else forum_id
        permissions = await self.permission_builder.build_permission_models_by_forum_id(
            self.context.site_id,
            resolved_forum_id,
            self.context.user,
            self.context.member,
        )

        stage = self._advance(stage)
        if not authorize(permissions, target):
            logger.warning(
                "Request not authorized",
                extra={
                    "forum_id": str(resolved_forum_id),
                    "member_id": str(self.context.member_id) if self.context.member_id else None,
                },
            )
            return PipelineResult(
                outcome=Outcome.UNAUTHORIZED,
                stage=stage,
                permissions=permissions,
            )

        stage = self._advance(stage)
        value = target
        if execute is not None:
            value = await execute(target)

        stage = self._advance(stage)
        return PipelineResult(
            outcome=Outcome.OK,
            stage=stage,
            value=value,
            permissions=permissions,
        )

    def _advance(self, stage: Stage) -> Stage:
        next_stage = _NEXT[stage]
        if next_stage is None:
            raise ValueError(f"No stage after {stage.value}")
        self._enter(next_stage)
        return next_stage

    def _enter(self, stage: Stage) -> None:
        logger.debug("Pipeline stage", extra={"stage": stage.value})

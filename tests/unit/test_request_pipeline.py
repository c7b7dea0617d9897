"""Unit tests for the request pipeline, using in-memory fakes."""

import uuid

import pytest

from parley.kernel.models.permission import PermissionType
from parley.kernel.models.site import Site
from parley.kernel.permissions.security_service import can_read
from parley.orchestration.request_pipeline import Outcome, RequestPipeline, Stage
from parley.services.context_service import ForumContext

FORUM_ID = uuid.uuid4()


class FakePermissionBuilder:
    """Returns a fixed set and remembers which forums were asked about."""

    def __init__(self, permissions):
        self.permissions = frozenset(permissions)
        self.calls = []

    async def build_permission_models_by_forum_id(self, site_id, forum_id, user, member):
        self.calls.append(forum_id)
        return self.permissions


def _pipeline(permissions):
    context = ForumContext(site=Site(id=uuid.uuid4(), name="Default", title="Test"))
    builder = FakePermissionBuilder(permissions)
    return RequestPipeline(context, builder), builder


class TestRequestPipeline:
    """Stage ordering and outcomes."""

    @pytest.mark.asyncio
    async def test_missing_target_is_not_found_before_permissions(self):
        """An absent target stops the walk before any permission lookup."""
        pipeline, builder = _pipeline({PermissionType.READ})

        async def load():
            return None

        result = await pipeline.run(load=load, forum_id=FORUM_ID, authorize=lambda p, t: True)

        assert result.outcome == Outcome.NOT_FOUND
        assert result.stage == Stage.LOAD_TARGET
        assert builder.calls == []

    @pytest.mark.asyncio
    async def test_failed_policy_is_unauthorized_and_skips_execute(self):
        pipeline, _ = _pipeline(set())
        executed = []

        async def load():
            return "target"

        async def execute(target):
            executed.append(target)

        result = await pipeline.run(
            load=load,
            forum_id=FORUM_ID,
            authorize=lambda permissions, _: can_read(permissions),
            execute=execute,
        )

        assert result.outcome == Outcome.UNAUTHORIZED
        assert result.stage == Stage.AUTHORIZE
        assert executed == []

    @pytest.mark.asyncio
    async def test_success_returns_execute_value(self):
        pipeline, _ = _pipeline({PermissionType.READ})

        async def execute(_):
            return "done"

        result = await pipeline.run(
            load=None,
            forum_id=FORUM_ID,
            authorize=lambda permissions, _: can_read(permissions),
            execute=execute,
        )

        assert result.ok
        assert result.stage == Stage.RESPOND
        assert result.value == "done"
        assert PermissionType.READ in result.permissions

    @pytest.mark.asyncio
    async def test_without_execute_the_target_is_returned(self):
        pipeline, _ = _pipeline({PermissionType.READ})

        async def load():
            return {"forum": FORUM_ID}

        result = await pipeline.run(
            load=load,
            forum_id=lambda target: target["forum"],
            authorize=lambda permissions, _: True,
        )

        assert result.value == {"forum": FORUM_ID}

    @pytest.mark.asyncio
    async def test_forum_id_can_be_derived_from_target(self):
        pipeline, builder = _pipeline({PermissionType.READ})
        derived = uuid.uuid4()

        async def load():
            return derived

        await pipeline.run(load=load, forum_id=lambda target: target, authorize=lambda p, t: True)

        assert builder.calls == [derived]

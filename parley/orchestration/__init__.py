"""Orchestration layer - the gated request pipeline."""

from parley.orchestration.request_pipeline import (
    Outcome,
    PipelineResult,
    RequestPipeline,
    Stage,
)

__all__ = [
    "Outcome",
    "PipelineResult",
    "RequestPipeline",
    "Stage",
]

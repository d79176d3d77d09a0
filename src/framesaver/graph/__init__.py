"""Pipeline graph model."""

from .schema import (
    COUNT_FRAMES,
    IMAGE_FROM_BATCH,
    SAVE_IMAGE,
    VAE_DECODE,
    GraphNode,
    InputValue,
    NodeOutputRef,
    PipelineGraph,
)

__all__ = [
    "COUNT_FRAMES",
    "IMAGE_FROM_BATCH",
    "SAVE_IMAGE",
    "VAE_DECODE",
    "GraphNode",
    "InputValue",
    "NodeOutputRef",
    "PipelineGraph",
]

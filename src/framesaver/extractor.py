"""Frame extraction graph insertion.

Appends nodes to a finished generation graph that pull frames out of the
final decoded batch and save them:

- first frame: ``ImageFromBatch(batch_index=0, length=1)``
- last frame: ``ImageFromBatch(batch_index=<frame count>, length=1)``, where
  the frame count comes from a ``SwarmCountFrames`` node evaluated at
  execution time
- frame range: ``ImageFromBatch(batch_index=start, length=end - start + 1)``

Each slice feeds its own ``SwarmSaveImageWS`` sink whose id is taken from a
reserved id range with a distinct offset per sink.
"""

from __future__ import annotations

import logging
from enum import IntEnum

from pydantic import BaseModel, Field

from .config import get_id_base
from .errors import (
    DanglingReferenceError,
    ErrorReporter,
    MissingUpstreamNodeError,
    log_error_reporter,
)
from .graph import (
    COUNT_FRAMES,
    IMAGE_FROM_BATCH,
    VAE_DECODE,
    GraphNode,
    NodeOutputRef,
    PipelineGraph,
)
from .options import GROUP_OTHER_FIXES, OptionSpec, UserInput

logger = logging.getLogger(__name__)

UNSET = -1

SAVE_FIRST_FRAME = OptionSpec(
    name="Save First Frame",
    type="bool",
    default=False,
    description="When enabled, the first frame of the video will be saved and output",
    order_priority=30,
    group=GROUP_OTHER_FIXES,
    ignore_if=False,
)
SAVE_LAST_FRAME = OptionSpec(
    name="Save Last Frame",
    type="bool",
    default=False,
    description="When enabled, the last frame of the video will be saved and output",
    order_priority=31,
    group=GROUP_OTHER_FIXES,
    ignore_if=False,
)
SAVE_RANGE_START = OptionSpec(
    name="Save Frame Range Start",
    type="int",
    default=UNSET,
    description="First frame (0-based, inclusive) of a range of frames to save and output. -1 disables the range",
    order_priority=32,
    group=GROUP_OTHER_FIXES,
    ignore_if=UNSET,
    min=UNSET,
)
SAVE_RANGE_END = OptionSpec(
    name="Save Frame Range End",
    type="int",
    default=UNSET,
    description="Last frame (0-based, inclusive) of a range of frames to save and output. -1 disables the range",
    order_priority=33,
    group=GROUP_OTHER_FIXES,
    ignore_if=UNSET,
    min=UNSET,
)

FRAME_SAVER_OPTIONS = [SAVE_FIRST_FRAME, SAVE_LAST_FRAME, SAVE_RANGE_START, SAVE_RANGE_END]


class SinkOffset(IntEnum):
    """Offset into the reserved id range for each save sink."""

    FIRST_FRAME = 0
    LAST_FRAME = 1
    FRAME_RANGE = 2


class ExtractionOptions(BaseModel):
    """Which frames to extract for one build."""

    save_first: bool = False
    save_last: bool = False
    range_start: int = Field(default=UNSET, description="-1 = unset")
    range_end: int = Field(default=UNSET, description="-1 = unset")

    @property
    def range_active(self) -> bool:
        """A range is honored only when both bounds are set and ordered."""
        return 0 <= self.range_start <= self.range_end

    @property
    def range_length(self) -> int:
        return self.range_end - self.range_start + 1 if self.range_active else 0

    @property
    def any_requested(self) -> bool:
        return self.save_first or self.save_last or self.range_active

    @classmethod
    def from_user_input(cls, user_input: UserInput) -> ExtractionOptions:
        return cls(
            save_first=user_input.get(SAVE_FIRST_FRAME, False),
            save_last=user_input.get(SAVE_LAST_FRAME, False),
            range_start=user_input.get(SAVE_RANGE_START, UNSET),
            range_end=user_input.get(SAVE_RANGE_END, UNSET),
        )


def find_decode_node(graph: PipelineGraph) -> GraphNode | None:
    """Return the last decode node in insertion order, or None.

    Only reads the graph, so repeated calls on the same graph agree.
    """
    decode_nodes = graph.nodes_of_class(VAE_DECODE)
    return decode_nodes[-1] if decode_nodes else None


def _insert_slice_and_save(
    graph: PipelineGraph,
    source: NodeOutputRef,
    batch_index: int | NodeOutputRef,
    length: int,
    id_base: int,
    sink_offset: SinkOffset,
) -> str:
    slice_id = graph.create_node(
        IMAGE_FROM_BATCH,
        {
            "batch_index": batch_index,
            "length": length,
            "image": source,
        },
    )
    # Allocated after the slice so the sequential slice id cannot take it
    sink_id = graph.get_stable_dynamic_id(id_base, sink_offset)
    return graph.create_image_save_node(
        NodeOutputRef(node_id=slice_id, slot=0), node_id=sink_id
    )


def insert_frame_extraction(
    graph: PipelineGraph,
    options: ExtractionOptions,
    report: ErrorReporter = log_error_reporter,
    id_base: int | None = None,
) -> None:
    """Append frame extraction and save nodes to ``graph``.

    Existing nodes are only read. If extraction is requested but the graph
    has no decode node, one :class:`MissingUpstreamNodeError` is passed to
    ``report`` and the graph is left untouched. The same holds, with a
    :class:`DanglingReferenceError`, when the last frame is requested and
    ``graph.final_image_out`` names a node that is not in the graph.

    Args:
        graph: Graph to extend in place
        options: Which frames to extract
        report: Receives errors instead of them being raised
        id_base: Base of the reserved sink id range (defaults to config)
    """
    if not options.any_requested:
        return

    decode_node = find_decode_node(graph)
    if decode_node is None:
        report(MissingUpstreamNodeError(VAE_DECODE))
        return

    final_out = graph.final_image_out
    if options.save_last and final_out is not None and not graph.has_node(final_out.node_id):
        report(DanglingReferenceError(final_out.node_id, "final_image_out"))
        return

    if id_base is None:
        id_base = get_id_base()
    decoded = NodeOutputRef(node_id=decode_node.id, slot=0)

    if options.save_first:
        sink_id = _insert_slice_and_save(
            graph,
            decoded,
            batch_index=0,
            length=1,
            id_base=id_base,
            sink_offset=SinkOffset.FIRST_FRAME,
        )
        logger.info(f"Saving first frame of node {decode_node.id} via node {sink_id}")

    if options.save_last:
        # Count the declared final output so post-decode transforms are included
        counted = final_out or decoded
        frame_count_id = graph.create_node(COUNT_FRAMES, {"image": counted})
        sink_id = _insert_slice_and_save(
            graph,
            decoded,
            batch_index=NodeOutputRef(node_id=frame_count_id, slot=0),
            length=1,
            id_base=id_base,
            sink_offset=SinkOffset.LAST_FRAME,
        )
        logger.info(f"Saving last frame of node {decode_node.id} via node {sink_id}")

    if options.range_active:
        sink_id = _insert_slice_and_save(
            graph,
            decoded,
            batch_index=options.range_start,
            length=options.range_length,
            id_base=id_base,
            sink_offset=SinkOffset.FRAME_RANGE,
        )
        logger.info(
            f"Saving frames {options.range_start}-{options.range_end} of node "
            f"{decode_node.id} via node {sink_id}"
        )

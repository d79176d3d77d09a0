"""Pipeline graph schema used during a workflow build.

The graph mirrors the ComfyUI API prompt format: a mapping of node id to
``{"class_type": ..., "inputs": {...}}`` where an input is either a literal
value or a reference ``[node_id, output_slot]`` to another node's output.

Example (decode followed by a save sink):

    {
      "3": {"class_type": "KSampler", "inputs": {"seed": 1, ...}},
      "8": {"class_type": "VAEDecode", "inputs": {"samples": ["3", 0], "vae": ["4", 2]}},
      "9": {"class_type": "SwarmSaveImageWS", "inputs": {"images": ["8", 0]}}
    }

References are kept symbolic: a value such as a batch size that is only
known at execution time is wired as a :class:`NodeOutputRef` and never
evaluated here.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..errors import DanglingReferenceError, DuplicateNodeIdError

logger = logging.getLogger(__name__)

# Node operation kinds used by the frame saver
VAE_DECODE = "VAEDecode"
IMAGE_FROM_BATCH = "ImageFromBatch"
COUNT_FRAMES = "SwarmCountFrames"
SAVE_IMAGE = "SwarmSaveImageWS"


class NodeOutputRef(BaseModel, frozen=True):
    """Symbolic reference to one output slot of a node."""

    node_id: str = Field(..., description="Producer node id")
    slot: int = Field(default=0, ge=0, description="Producer output slot index")

    @classmethod
    def parse(cls, value: Any) -> NodeOutputRef | None:
        """Return a reference for the ``[node_id, slot]`` wire form, else None."""
        if isinstance(value, NodeOutputRef):
            return value
        if (
            isinstance(value, (list, tuple))
            and len(value) == 2
            and isinstance(value[0], (str, int))
            and not isinstance(value[0], bool)
            and isinstance(value[1], int)
            and not isinstance(value[1], bool)
            and value[1] >= 0
        ):
            return cls(node_id=str(value[0]), slot=value[1])
        return None

    def to_wire(self) -> list[Any]:
        return [self.node_id, self.slot]


# Literal JSON value or a deferred node output
InputValue = NodeOutputRef | bool | int | float | str | list | dict | None


class GraphNode(BaseModel, extra="ignore"):
    """A node in the pipeline graph."""

    id: str = Field(..., description="Unique node id within the graph")
    class_type: str = Field(..., description="Operation kind (e.g. 'VAEDecode')")
    inputs: dict[str, InputValue] = Field(
        default_factory=dict,
        description="Input name -> literal value or reference to a node output",
    )

    @field_validator("inputs", mode="before")
    @classmethod
    def _parse_references(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        parsed = {}
        for name, item in value.items():
            ref = NodeOutputRef.parse(item)
            parsed[name] = ref if ref is not None else item
        return parsed

    def references(self) -> Iterator[tuple[str, NodeOutputRef]]:
        """Yield ``(input_name, ref)`` for every input wired to another node."""
        for name, value in self.inputs.items():
            if isinstance(value, NodeOutputRef):
                yield name, value


class PipelineGraph(BaseModel):
    """Append-only pipeline graph for a single workflow build.

    Nodes keep their insertion order, which is also the order returned by
    :meth:`nodes_of_class`. Existing nodes are never modified or removed.
    """

    nodes: list[GraphNode] = Field(default_factory=list, description="Graph nodes")
    final_image_out: NodeOutputRef | None = Field(
        default=None,
        description="The graph's declared terminal image output",
    )

    @field_validator("final_image_out", mode="before")
    @classmethod
    def _parse_final_image_out(cls, value: Any) -> Any:
        ref = NodeOutputRef.parse(value)
        return ref if ref is not None else value

    def has_node(self, node_id: str) -> bool:
        return any(n.id == node_id for n in self.nodes)

    def node_by_id(self, node_id: str) -> GraphNode | None:
        """Return the node with the given id."""
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def nodes_of_class(self, class_type: str) -> list[GraphNode]:
        """Return nodes of the given operation kind, in insertion order."""
        return [n for n in self.nodes if n.class_type == class_type]

    def _next_node_id(self) -> str:
        candidate = len(self.nodes) + 1
        while self.has_node(str(candidate)):
            candidate += 1
        return str(candidate)

    def create_node(
        self,
        class_type: str,
        inputs: Mapping[str, Any],
        node_id: str | None = None,
    ) -> str:
        """Append a node and return its id.

        Args:
            class_type: Operation kind of the new node
            inputs: Input name -> literal value, NodeOutputRef or ``[id, slot]``
            node_id: Explicit id; the next free sequential id when omitted

        Returns:
            The id of the appended node

        Raises:
            DuplicateNodeIdError: ``node_id`` is already used
            DanglingReferenceError: an input references a node not in the graph
        """
        if node_id is None:
            node_id = self._next_node_id()
        elif self.has_node(node_id):
            raise DuplicateNodeIdError(node_id)

        node = GraphNode(id=node_id, class_type=class_type, inputs=dict(inputs))
        for name, ref in node.references():
            if not self.has_node(ref.node_id):
                raise DanglingReferenceError(ref.node_id, name)

        self.nodes.append(node)
        logger.debug(f"Created node {node_id} ({class_type})")
        return node_id

    def create_image_save_node(
        self, image: NodeOutputRef, node_id: str | None = None
    ) -> str:
        """Append a save sink consuming ``image`` and return its id."""
        return self.create_node(SAVE_IMAGE, {"images": image}, node_id=node_id)

    def get_stable_dynamic_id(self, base: int, offset: int) -> str:
        """Return an unused id from the reserved range starting at ``base + offset``.

        The result only depends on ``base``, ``offset`` and the ids already in
        the graph, so equal graphs always produce equal ids.
        """
        candidate = base + offset
        while self.has_node(str(candidate)):
            candidate += 1
        return str(candidate)

    def validate_structure(self) -> list[str]:
        """Validate the graph structure and return a list of error messages.

        Checks:
        - No duplicate node IDs
        - All input references point to existing nodes
        - final_image_out points to an existing node
        """
        errors: list[str] = []

        seen: set[str] = set()
        for n in self.nodes:
            if n.id in seen:
                errors.append(f"Duplicate node ID: '{n.id}'")
            seen.add(n.id)

        for n in self.nodes:
            for name, ref in n.references():
                if ref.node_id not in seen:
                    errors.append(
                        f"Node '{n.id}' input '{name}' references non-existent node: '{ref.node_id}'"
                    )

        if self.final_image_out is not None and self.final_image_out.node_id not in seen:
            errors.append(
                f"final_image_out references non-existent node: '{self.final_image_out.node_id}'"
            )

        return errors

    def to_prompt(self) -> dict[str, dict[str, Any]]:
        """Convert to the API prompt mapping, preserving insertion order."""
        prompt: dict[str, dict[str, Any]] = {}
        for n in self.nodes:
            prompt[n.id] = {
                "class_type": n.class_type,
                "inputs": {
                    name: value.to_wire() if isinstance(value, NodeOutputRef) else value
                    for name, value in n.inputs.items()
                },
            }
        return prompt

    @classmethod
    def from_prompt(
        cls,
        prompt: Mapping[str, Mapping[str, Any]],
        final_image_out: NodeOutputRef | list | tuple | None = None,
    ) -> PipelineGraph:
        """Build a graph from an API prompt mapping.

        Unknown per-node keys (such as ``_meta``) are ignored.
        """
        nodes = [
            GraphNode(
                id=str(node_id),
                class_type=body["class_type"],
                inputs=body.get("inputs", {}),
            )
            for node_id, body in prompt.items()
        ]
        return cls(nodes=nodes, final_image_out=final_image_out)

"""Shared pytest fixtures."""

import pytest

from framesaver.graph import PipelineGraph

from graph_helpers import video_prompt


@pytest.fixture
def make_graph():
    """Factory for video graphs with a declared final image output."""

    def _make(decode_count: int = 1, post_process: bool = False) -> PipelineGraph:
        prompt = video_prompt(decode_count, post_process)
        final = prompt["20"]["inputs"]["images"]
        return PipelineGraph.from_prompt(prompt, final_image_out=final)

    return _make


@pytest.fixture
def video_graph(make_graph):
    return make_graph()


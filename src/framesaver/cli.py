"""CLI for running the framesaver build steps over an API prompt file.

All commands print JSON.
"""

import json
import sys
from pathlib import Path
from typing import Any

import click

from .build import generate
from .extractor import SAVE_FIRST_FRAME, SAVE_LAST_FRAME, SAVE_RANGE_END, SAVE_RANGE_START
from .graph import NodeOutputRef, PipelineGraph
from .logs_config import configure_logging
from .plugins import create_option_registry, load_plugins


def output(data: Any, ctx):
    if ctx.obj.get("pretty"):
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(json.dumps(data))


def parse_node_output(value: str | None) -> NodeOutputRef | None:
    """Parse ``NODE`` or ``NODE:SLOT`` into a reference."""
    if value is None:
        return None
    node_id, _, slot = value.partition(":")
    try:
        return NodeOutputRef(node_id=node_id, slot=int(slot) if slot else 0)
    except ValueError as e:
        raise click.BadParameter(f"expected NODE or NODE:SLOT, got {value!r}") from e


def load_graph(path: Path, final_out: NodeOutputRef | None) -> PipelineGraph:
    """Load a prompt file.

    Accepts a bare prompt mapping, or ``{"prompt": {...}, "final_image_out": [id, slot]}``.
    """
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise click.BadParameter(
            f"expected a JSON object, got {type(data).__name__}",
            param_hint="PROMPT_FILE",
        )
    if isinstance(data.get("prompt"), dict):
        prompt = data["prompt"]
        final_out = final_out or data.get("final_image_out")
    else:
        prompt = data
    return PipelineGraph.from_prompt(prompt, final_image_out=final_out)


@click.group()
@click.option("--pretty/--no-pretty", default=True, help="Pretty print JSON output")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.option("--no-log-file", is_flag=True, help="Do not write a log file")
@click.pass_context
def cli(ctx, pretty, verbose, no_log_file):
    """framesaver - add frame extraction nodes to pipeline graphs."""
    ctx.ensure_object(dict)
    ctx.obj["pretty"] = pretty
    configure_logging(verbose=verbose, log_to_file=not no_log_file)
    load_plugins()


@cli.command()
@click.argument("prompt_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--save-first", is_flag=True, help="Save the first decoded frame")
@click.option("--save-last", is_flag=True, help="Save the last decoded frame")
@click.option("--range-start", type=int, default=None, help="First frame of a range to save")
@click.option("--range-end", type=int, default=None, help="Last frame of a range to save")
@click.option("--final-out", default=None, help="Final image output as NODE[:SLOT]")
@click.option(
    "-o",
    "--output-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the rewritten prompt here instead of stdout",
)
@click.pass_context
def apply(ctx, prompt_file, save_first, save_last, range_start, range_end, final_out, output_file):
    """Run the build steps over PROMPT_FILE and print the rewritten prompt."""
    graph = load_graph(prompt_file, parse_node_output(final_out))

    raw_input: dict[str, Any] = {}
    if save_first:
        raw_input[SAVE_FIRST_FRAME.id] = True
    if save_last:
        raw_input[SAVE_LAST_FRAME.id] = True
    if range_start is not None:
        raw_input[SAVE_RANGE_START.id] = range_start
    if range_end is not None:
        raw_input[SAVE_RANGE_END.id] = range_end

    context = generate(graph, raw_input)
    if context.errors:
        click.echo(json.dumps({"errors": [str(e) for e in context.errors]}), err=True)
        sys.exit(1)

    prompt = graph.to_prompt()
    if output_file is not None:
        output_file.write_text(json.dumps(prompt, indent=2))
        output({"output_file": str(output_file), "nodes": len(prompt)}, ctx)
    else:
        output(prompt, ctx)


@cli.command("options")
@click.pass_context
def list_options(ctx):
    """List registered options."""
    registry = create_option_registry()
    output([o.model_dump() for o in registry.list_options()], ctx)


def main():
    cli()


if __name__ == "__main__":
    main()

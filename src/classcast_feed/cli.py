"""Command-line entry point for ClassCast Feed."""

from __future__ import annotations

import json
import logging
import sys

import click

from .commands import order as order_cmd
from .commands import window as window_cmd
from .core.config import ConfigManager, DEFAULT_CONFIG_PATH
from .core.feed_io import dump_entries

# Setup logging early so submodules inherit sane defaults
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@click.group()
@click.option(
    "--config",
    default=str(DEFAULT_CONFIG_PATH),
    show_default=True,
    help="Path to config file (defaults to data_dir/config/config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config: str, verbose: bool) -> None:
    """ClassCast Feed - ordering and windowing for long submission feeds."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


@cli.command("order")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "output_path", help="Write ordered JSON here (default: stdout)")
@click.option("--seed", type=int, help="Seed for the variety term (reproducible shuffles)")
@click.option("--variety", type=click.FloatRange(0.0, 1.0), help="Override ordering.variety_factor")
@click.pass_context
def order(
    ctx: click.Context,
    input_path: str,
    output_path: str | None,
    seed: int | None,
    variety: float | None,
) -> None:
    """Order a feed snapshot (unresolved first, cheap media first, authors spread)."""
    try:
        ordered = order_cmd.run(
            ctx.obj["config_path"],
            input_path,
            output_path,
            seed=seed,
            variety=variety,
        )
        if output_path:
            target = order_cmd.resolve_output_path(output_path)
            click.echo(f"✅ Ordered {len(ordered)} entries into {target}")
        else:
            click.echo(dump_entries(ordered))
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Order command failed: {exc}", err=True)
        sys.exit(1)


@cli.command("window")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--scroll-top", type=float, default=0.0, show_default=True, help="Scroll offset in pixels")
@click.option("--container-height", type=float, help="Viewport height override")
@click.option("--item-height", type=float, help="Item height override")
@click.option("--overscan", type=int, help="Overscan override")
@click.option("--order/--no-order", "apply_ordering", default=True, help="Order the feed before windowing")
@click.pass_context
def window(
    ctx: click.Context,
    input_path: str,
    scroll_top: float,
    container_height: float | None,
    item_height: float | None,
    overscan: int | None,
    apply_ordering: bool,
) -> None:
    """Show which entries are mounted at a scroll position."""
    try:
        report = window_cmd.run(
            ctx.obj["config_path"],
            input_path,
            scroll_top,
            container_height=container_height,
            item_height=item_height,
            overscan=overscan,
            apply_ordering=apply_ordering,
        )
        click.echo(json.dumps(report, indent=2))
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Window command failed: {exc}", err=True)
        sys.exit(1)


@cli.command("status")
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show configuration and effective options."""
    try:
        config_manager = ConfigManager(ctx.obj["config_path"])
        click.echo(f"📄 Config file: {config_manager.config_path}")

        if config_manager.validate_config():
            click.echo("✅ Configuration is valid")
        else:
            click.echo("❌ Configuration validation failed")
            return

        click.echo("🔀 Ordering:")
        for key, value in config_manager.get_ordering_options().items():
            click.echo(f"   {key}: {value}")
        click.echo("🪟 Windowing:")
        for key, value in config_manager.get_windowing_options().items():
            click.echo(f"   {key}: {value}")

    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Error checking status: {exc}", err=True)


if __name__ == "__main__":  # pragma: no cover - script entry
    cli()

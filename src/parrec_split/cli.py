from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
import nibabel as nib

from parrec_split.audit import get_logger
from parrec_split.classify import classify, detect_interleave
from parrec_split.config import SplitterConfig
from parrec_split.header import read_par_header
from parrec_split.materialize import n_volumes
from parrec_split.pipeline import ACQUISITION_ERRORS, load_pairs, split_acquisition, split_batch
from parrec_split.plan import build_split_plan, plan_frame

_existing_file = click.Path(exists=True, dir_okay=False, path_type=Path)


@click.group()
@click.option(
    "--config",
    "config_path",
    default=None,
    metavar="PATH",
    help="Path to YAML config file. Uses built-in defaults if omitted.",
)
@click.option(
    "--output-dir",
    "output_dir",
    default=None,
    metavar="DIR",
    help="Directory for split images. Overrides config file.",
)
@click.pass_context
def main(ctx: click.Context, config_path: str | None, output_dir: str | None) -> None:
    """parrec-split: split converted PAR/REC images into magnitude/phase outputs."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    ctx.ensure_object(dict)
    config = SplitterConfig.from_yaml(config_path) if config_path else SplitterConfig()
    if output_dir is not None:
        config.output_dir = Path(output_dir)
    ctx.obj["config"] = config


@main.command(name="plan")
@click.argument("nifti", type=_existing_file)
@click.argument("par", type=_existing_file)
def show_plan(nifti: Path, par: Path) -> None:
    """Show how NIFTI would be split, without writing anything."""
    try:
        header = read_par_header(par)
        volumes = n_volumes(nib.load(nifti))
        ratio, kind = classify(header.declared_dynamics, volumes)
        interleaved = detect_interleave(header.image_types, kind)
    except ACQUISITION_ERRORS as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"{nifti.name}: {volumes} volume(s), {header.declared_dynamics} dynamic(s)")
    if ratio > 1:
        layout = "interleaved" if interleaved else "block-ordered"
        click.echo(f"  ratio {ratio} -> {kind.name} ({layout})")
    else:
        click.echo(f"  ratio {ratio} -> {kind.name}")

    plan = build_split_plan(kind, interleaved, header.declared_dynamics, volumes)
    if not len(plan):
        click.echo("No split needed.")
        return
    click.echo(plan_frame(plan, volumes).to_string(index=False))


@main.command()
@click.argument("nifti", type=_existing_file)
@click.argument("par", type=_existing_file)
@click.option("--dry-run", is_flag=True, help="Print what would be written without writing.")
@click.pass_context
def split(ctx: click.Context, nifti: Path, par: Path, dry_run: bool) -> None:
    """Split one converted acquisition NIFTI using its PAR header."""
    config: SplitterConfig = ctx.obj["config"]
    audit = get_logger(config)
    try:
        record = split_acquisition(nifti, par, config, dry_run=dry_run, audit=audit)
    except ACQUISITION_ERRORS as exc:
        audit.log("error", acquisition=nifti.name, detail=str(exc), error_type=type(exc).__name__)
        raise click.ClickException(str(exc)) from exc

    if record["status"] == "no_split":
        click.echo(f"{nifti.name}: no split needed.")
        return
    prefix = "[DRY RUN] Would write" if dry_run else "Wrote"
    for out in record["outputs"]:
        click.echo(f"{prefix}: {out}")


@main.command()
@click.argument("pairs_csv", type=_existing_file)
@click.option("--dry-run", is_flag=True, help="Print what would be written without writing.")
@click.pass_context
def batch(ctx: click.Context, pairs_csv: Path, dry_run: bool) -> None:
    """Split every acquisition listed in PAIRS_CSV (columns: nifti, par)."""
    config: SplitterConfig = ctx.obj["config"]
    try:
        pairs = load_pairs(pairs_csv)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    if pairs.empty:
        click.echo("Nothing to split.")
        return

    click.echo(f"Splitting {len(pairs)} acquisition(s)…")
    results = split_batch(pairs, config, dry_run=dry_run, audit=get_logger(config))
    click.echo(results[["acquisition", "kind", "status", "error"]].to_string(index=False))

    if config.results_file is not None and not dry_run:
        config.results_file.parent.mkdir(parents=True, exist_ok=True)
        results.to_csv(config.results_file, index=False)
        click.echo(f"Results saved to {config.results_file}.")

    n_failed = int((results["status"] == "failed").sum())
    if n_failed:
        click.echo(f"{n_failed} acquisition(s) failed.", err=True)
        sys.exit(1)

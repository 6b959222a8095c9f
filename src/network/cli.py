from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
import yaml

from .config import DEFAULT_HOST_MTU, RenderOptions
from .errors import ConfigInvalidError, RenderError, SpecError, UnsafeChangeError
from .network import fill_defaults, is_change_safe, validate
from .pipeline import prepare
from .types import NetworkConfigSpec

app = typer.Typer(help="Default, validate and render the cluster network configuration.")

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


@app.command("validate")
def validate_spec(
    spec: Path = typer.Option(
        ...,
        "--spec",
        "-s",
        help="Network configuration YAML or JSON file.",
    ),
    host_mtu: int = typer.Option(
        DEFAULT_HOST_MTU,
        "--host-mtu",
        min=1,
        help="MTU of the host network; the overlay default is derived from it.",
    ),
) -> None:
    conf = fill_defaults(_load_spec(spec), None, host_mtu)
    errors = validate(conf)
    for error in errors:
        typer.echo(error, err=True)
    if errors:
        raise typer.Exit(code=1)
    typer.echo(f"{spec} is valid")


@app.command("render")
def render_spec(
    spec: Path = typer.Option(
        ...,
        "--spec",
        "-s",
        help="Network configuration YAML or JSON file.",
    ),
    manifest_dir: Path = typer.Option(
        Path("bindata"),
        "--manifest-dir",
        "-m",
        help="Directory holding the manifest templates.",
    ),
    out: Path = typer.Option(
        Path("data/manifests.yaml"),
        "--out",
        "-o",
        help="Where to write the rendered manifests.",
    ),
    previous: Optional[Path] = typer.Option(
        None,
        "--previous",
        "-p",
        help="Previously applied (defaulted) configuration; enables the change-safety gate.",
    ),
    applied_out: Optional[Path] = typer.Option(
        None,
        "--applied-out",
        help="Where to write the defaulted configuration for the next run.",
    ),
    host_mtu: int = typer.Option(
        DEFAULT_HOST_MTU,
        "--host-mtu",
        min=1,
        help="MTU of the host network; the overlay default is derived from it.",
    ),
) -> None:
    conf = _load_spec(spec)
    previous_conf = fill_defaults(_load_spec(previous), None, host_mtu) if previous is not None else None
    try:
        prepared = prepare(
            conf,
            manifest_dir,
            previous=previous_conf,
            host_mtu=host_mtu,
            options=RenderOptions.from_env(),
        )
    except (ConfigInvalidError, UnsafeChangeError) as exc:
        for error in exc.errors:
            typer.echo(error, err=True)
        raise typer.Exit(code=1) from exc
    except RenderError as exc:
        typer.echo(f"render failed: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(yaml.safe_dump_all(prepared.objects, sort_keys=False), encoding="utf-8")
    if applied_out is not None:
        applied_out.parent.mkdir(parents=True, exist_ok=True)
        applied_out.write_text(yaml.safe_dump(prepared.spec.to_dict(), sort_keys=False), encoding="utf-8")
    typer.echo(f"Rendered {len(prepared.objects)} object(s) to {out.resolve()}")


@app.command("check-change")
def check_change(
    previous: Path = typer.Option(
        ...,
        "--previous",
        "-p",
        help="Previously applied (defaulted) configuration.",
    ),
    spec: Path = typer.Option(
        ...,
        "--spec",
        "-s",
        help="Proposed configuration.",
    ),
    host_mtu: int = typer.Option(
        DEFAULT_HOST_MTU,
        "--host-mtu",
        min=1,
        help="MTU of the host network; the overlay default is derived from it.",
    ),
) -> None:
    prev_conf = fill_defaults(_load_spec(previous), None, host_mtu)
    next_conf = fill_defaults(_load_spec(spec), prev_conf, host_mtu)
    errors = is_change_safe(prev_conf, next_conf)
    for error in errors:
        typer.echo(error, err=True)
    if errors:
        raise typer.Exit(code=1)
    typer.echo("change is safe")


def _load_spec(path: Path) -> NetworkConfigSpec:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Spec file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise typer.BadParameter(f"Spec file {path} is not valid YAML: {exc}") from exc
    try:
        return NetworkConfigSpec.from_dict(data)
    except SpecError as exc:
        raise typer.BadParameter(f"Invalid spec {path}: {exc}") from exc


if __name__ == "__main__":  # pragma: no cover
    app()

"""Typer CLI entrypoint."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import typer

from nodectl.core.config import load_config
from nodectl.core.errors import NodectlError, SchemaError
from nodectl.core.model import Node
from nodectl.core.service import NodeService

app = typer.Typer(help="Managed-node registry: inspect nodes and update their hardware identity")


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", help="Path to the server config YAML"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    ctx.obj = {"config": config}


def _build_service(ctx: typer.Context) -> NodeService:
    config_path = (ctx.obj or {}).get("config")
    if config_path is None:
        return NodeService()
    return NodeService(settings=load_config(config_path))


def _parse_hw_pairs(pairs: list[str]) -> dict[str, str]:
    hw_info: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise SchemaError(f"Invalid --hw value '{pair}', expected KEY=VALUE")
        if key in hw_info:
            raise SchemaError(f"Duplicate --hw key '{key}'")
        hw_info[key] = value.strip()
    return hw_info


def _read_request(source: str) -> dict[str, Any]:
    try:
        text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaError(f"Could not read request file {source}: {exc}") from exc
    try:
        request = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SchemaError(f"Invalid JSON in {source}: {exc}") from exc
    if not isinstance(request, dict):
        raise SchemaError(f"Request in {source} must be a JSON object")
    return request


def _echo_node(node: Node) -> None:
    typer.echo(f"{node.name}")
    if not node.hw_info.facts:
        typer.echo("  <no hardware info>")
    fixed = node.hw_info.fixed_attributes()
    nets = node.hw_info.net_attributes()
    others = {k: v for k, v in node.hw_info.facts.items() if k not in fixed and k not in nets}
    for key, value in sorted(fixed.items()):
        typer.echo(f"  {key}: {value}")
    for key, value in sorted(nets.items(), key=lambda item: int(item[0][3:])):
        typer.echo(f"  {key}: {value}")
    for key, value in sorted(others.items()):
        typer.echo(f"  {key}: {value}")


@app.command("match-keys")
def match_keys(ctx: typer.Context) -> None:
    """List the configured match keys."""
    try:
        service = _build_service(ctx)
        for key in service.match_keys():
            typer.echo(key)
    except NodectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("list")
def list_nodes(ctx: typer.Context) -> None:
    """List registered nodes and their hardware info."""
    try:
        service = _build_service(ctx)
        nodes = service.list_nodes()
        if not nodes:
            typer.echo("No nodes registered")
            return

        for node in nodes:
            facts = ", ".join(f"{k}={v}" for k, v in sorted(node.hw_info.facts.items()))
            typer.echo(f"{node.name}: {facts or '<no hardware info>'}")
    except NodectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("show")
def show_node(ctx: typer.Context, node: str) -> None:
    """Show the hardware info of a node."""
    try:
        service = _build_service(ctx)
        _echo_node(service.get_node(node))
    except NodectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("register")
def register_node(
    ctx: typer.Context,
    node: str,
    hw: list[str] | None = typer.Option(None, "--hw", help="Hardware fact as KEY=VALUE, repeatable"),
) -> None:
    """Register a new node, optionally with initial hardware info."""
    try:
        service = _build_service(ctx)
        created = service.register_node(node, _parse_hw_pairs(hw or []))
        typer.echo(f"Registered {created.name}")
    except NodectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("delete")
def delete_node(ctx: typer.Context, node: str) -> None:
    """Remove a node from the registry."""
    try:
        service = _build_service(ctx)
        service.delete_node(node)
        typer.echo(f"Deleted {node}")
    except NodectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("set-hw-info")
def set_hw_info(
    ctx: typer.Context,
    node: str | None = typer.Argument(None),
    hw: list[str] | None = typer.Option(None, "--hw", help="Hardware fact as KEY=VALUE, repeatable"),
    request_file: str | None = typer.Option(None, "--json", help="JSON request file, '-' for stdin"),
) -> None:
    """Replace the hardware info of an existing node.

    Either pass NODE with one or more --hw KEY=VALUE facts, or a full JSON
    request with --json. Facts not supplied are removed from the node.
    """
    try:
        if request_file is not None:
            if hw:
                raise SchemaError("--hw cannot be combined with --json")
            payload = _read_request(request_file)
            if node is not None:
                payload["node"] = node
        else:
            if node is None:
                raise SchemaError("NODE is required unless --json is given")
            payload = {"node": node, "hw-info": _parse_hw_pairs(hw or [])}

        service = _build_service(ctx)
        updated = service.set_node_hw_info(payload)
        typer.echo(f"Updated hw-info of {updated.name}")
        _echo_node(updated)
    except NodectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("describe")
def describe(ctx: typer.Context) -> None:
    """Explain set-node-hw-info, including the match keys of this server."""
    try:
        service = _build_service(ctx)
        typer.echo(service.describe_set_node_hw_info())
    except NodectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()

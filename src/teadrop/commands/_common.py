"""Helpers shared by the CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn

import click

from ..config import DEFAULT_ENV_PATH, Settings
from ..errors import TeadropError
from ..sigil.context import SigningContext
from ..sigil.eth import get_account


def env_path_from(ctx: click.Context) -> Path:
    obj = ctx.find_root().obj or {}
    return obj.get("env_file") or DEFAULT_ENV_PATH


def load_settings(ctx: click.Context, require_key: bool = True) -> Settings:
    """Load settings, exiting with the error's code on bad configuration."""
    try:
        return Settings.from_env(env_path_from(ctx), require_key=require_key)
    except TeadropError as exc:
        fail(exc)


def build_context(settings: Settings) -> SigningContext:
    return SigningContext(get_account(settings.private_key or ""), settings.endpoint)


def fail(exc: TeadropError) -> NoReturn:
    click.secho(f"ERROR: {exc}", fg="red", err=True)
    sys.exit(exc.exit_code)


def print_header(title: str) -> None:
    click.echo(f"=== {title} ===")
    click.echo()


def print_field(label: str, value: str, **style) -> None:
    click.echo(click.style(f"  {label:<10}", dim=True) + click.style(value, **style))

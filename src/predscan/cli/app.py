"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from predscan.config import get_settings
from predscan.config.settings import configure_logging

app = typer.Typer(
    name="predscan",
    help="predscan - Scan soon-to-expire prediction markets for arbitrage and near-certain bets.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
) -> None:
    """Configure logging and store options in context."""
    try:
        settings = get_settings(profile, config_dir)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--profile") from e
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from predscan.cli import alerts, analyze, platforms, scan  # noqa: E402

app.command("scan")(scan.scan)
app.command("alerts")(alerts.alerts)
app.command("analyze")(analyze.analyze)
app.command("platforms")(platforms.list_platforms)


def run() -> None:
    app()


if __name__ == "__main__":
    run()

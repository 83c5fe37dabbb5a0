"""CLI error handling helpers."""

import click

from creditcalc.domain.errors import DomainError, ValidationError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    if isinstance(error, ValidationError) and len(error.issues) > 1:
        click.echo("Error: Invalid input:", err=True)
        for issue in error.issues:
            click.echo(f"  {issue.message}", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)

"""Main CLI entry point."""

import logging

import click

from creditcalc.cli.commands import outage, invoice, prorate


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show per-item calculation details")
@click.pass_context
def cli(ctx, verbose: bool):
    """Creditcalc - Billing credit calculator.

    Compute prorated credits for days a customer paid for but did not
    receive service, or for whole or partial invoice line items.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register all commands
outage.register_commands(cli)
invoice.register_commands(cli)
prorate.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()

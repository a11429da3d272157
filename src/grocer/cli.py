import json
import logging
import sys
from decimal import Decimal

import click

from . import __version__ as VERSION
from .config import build_catalog, build_discounts, refresh_config
from .errors import GrocerError
from .money import format_money
from .purchase import PurchaseRecord
from .rules import build_rule
from .types import PriceBreakdown

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.pass_context
@click.option("--version", is_flag=True, help="Show the version and exit.")
@click.option("--log-level", default=None, help="Logging level (overrides GROCER_LOG_LEVEL / config).")
def main(ctx, version, log_level):
    """grocer: supermarket pricing calculator"""
    try:
        config = refresh_config()
    except GrocerError as exc:
        _emit_structured_error(exc.explanation, code=exc.error_code, category=exc.category)
    ctx.obj = {"config": config}
    level = (log_level or config.log_level).upper()
    try:
        logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    except ValueError:
        raise click.BadParameter(f"Unknown log level '{level}'", param_hint="--log-level") from None

    if version:
        click.echo(f"grocer version {VERSION}")
        return
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _emit_structured_error(message: str, *, code: str, category: str, as_json: bool = False, exit_code: int = 2):
    payload = {
        "ok": False,
        "error": {
            "code": code,
            "category": category,
            "message": message,
        },
    }
    if as_json:
        click.echo(json.dumps(payload, indent=2, sort_keys=True))
    else:
        prefix = "grocer internal error" if code == "INTERNAL" else "grocer error"
        click.echo(f"{prefix} [{category}:{code}]: {message}")
    sys.exit(exit_code)


def _parse_item(item: str) -> tuple[str, int]:
    """Parse ``ID=QTY``; a bare ``ID`` means one unit."""
    product_id, sep, raw_qty = item.partition("=")
    product_id = product_id.strip().upper()
    if not product_id:
        raise click.BadParameter(f"Expected ID=QTY, got '{item}'")
    if not sep:
        return product_id, 1
    try:
        return product_id, int(raw_qty)
    except ValueError:
        raise click.BadParameter(f"Quantity for {product_id} must be an integer, got '{raw_qty}'") from None


def _jsonable(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    return value


def _print_breakdown(breakdown: PriceBreakdown, currency: str) -> None:
    click.echo(f"Rule: {breakdown['rule']}")
    click.echo("-----")
    for line in breakdown["lines"]:
        rate = "" if line["discount_rate"] == 1 else f" x{line['discount_rate']}"
        click.echo(
            f"{line['product_id']:<14} {line['quantity']:>4} @ {format_money(line['unit_price'])}{rate}"
            f" = {format_money(line['amount'])}"
        )
    click.echo(f"Subtotal: {format_money(breakdown['subtotal'], currency)}")
    for adjustment in breakdown["adjustments"]:
        click.echo(f"{adjustment['description']}: {format_money(adjustment['delta'], currency)}")
    click.echo(f"Total: {format_money(breakdown['total'], currency)}")


@main.command()
@click.argument("items", nargs=-1, required=True)
@click.option("--profile", help="Discount profile name (see 'grocer profiles list')")
@click.option("--bulk/--no-bulk", default=None, help="Apply the bulk rebate (implied by --threshold or --rebate unless --no-bulk)")
@click.option("--threshold", help="Bulk threshold (defaults to config)")
@click.option("--rebate", help="Bulk rebate (defaults to config)")
@click.option("--json", "json_output", is_flag=True, help="Emit machine-readable breakdown")
@click.pass_context
def quote(ctx, items, profile, bulk, threshold, rebate, json_output):
    """Price a purchase given as ID=QTY pairs."""
    config = ctx.obj["config"]
    parsed = [_parse_item(item) for item in items]
    try:
        product_catalog = build_catalog(config)
        discounts = build_discounts(config, profile)
        purchase = PurchaseRecord(product_catalog)
        for product_id, quantity in parsed:
            purchase.add_quantity(product_id, quantity)
        bulk_terms = None
        if bulk is True or (bulk is None and (threshold or rebate)):
            bulk_terms = (threshold or config.bulk_threshold, rebate or config.bulk_rebate)
        rule = build_rule("promotion" if discounts is not None else "standard", discounts, bulk_terms)
        breakdown = rule.explain(purchase)
    except GrocerError as exc:
        _emit_structured_error(exc.explanation, code=exc.error_code, category=exc.category, as_json=json_output)
    except Exception as exc:
        logger.exception("Unhandled grocer quote error")
        _emit_structured_error(str(exc), code="INTERNAL", category="SYSTEM", as_json=json_output)

    if json_output:
        click.echo(json.dumps({"ok": True, "currency": config.currency, **_jsonable(breakdown)}, indent=2))
    else:
        _print_breakdown(breakdown, config.currency)


@main.group()
def catalog():
    """Catalog inspection commands."""


@catalog.command("list")
@click.pass_context
def catalog_list(ctx):
    """List catalog products sorted by id."""
    config = ctx.obj["config"]
    try:
        products = build_catalog(config).list_all()
    except GrocerError as exc:
        _emit_structured_error(exc.explanation, code=exc.error_code, category=exc.category)
    for product in sorted(products, key=lambda item: item.product_id):
        category = f" [{product.category}]" if product.category else ""
        click.echo(f"{product.product_id} {product.name} {format_money(product.unit_price, config.currency)}{category}")


@main.group()
def profiles():
    """Discount profile commands."""


@profiles.command("list")
@click.pass_context
def profiles_list(ctx):
    """List discount profiles and their rates."""
    config = ctx.obj["config"]
    for name in sorted(config.discount_profiles):
        try:
            click.echo(f"{name}: {build_discounts(config, name).describe()}")
        except GrocerError as exc:
            _emit_structured_error(exc.explanation, code=exc.error_code, category=exc.category)


if __name__ == "__main__":
    main()

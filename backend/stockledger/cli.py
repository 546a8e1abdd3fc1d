# Overview: Flask CLI command group for offline inventory work.

# backend/stockledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask inventory <command> [options]
#
# Setup:
# - python -m flask inventory init-db
#   Create the kv_store table if it does not exist (idempotent).
# - python -m flask inventory reset-db --yes
#   DEV/TEST only: drop and recreate the table (deletes all data).
#
# Commands:
# - python -m flask inventory add-user --name "Ada Lovelace" --email ada@example.com
# - python -m flask inventory add-product --sku A1 --name Widget --price 9.99 --quantity 3
# - python -m flask inventory adjust <product-id> -- -2
#   Negative deltas need "--" so click does not read them as options.
#
# Inspection:
# - python -m flask inventory products
# - python -m flask inventory users
# - python -m flask inventory history --page 2
# - python -m flask inventory summary [--threshold 5]

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .services.inventory_service import get_inventory, reset_inventory
from .validation import ValidationError


@click.group('inventory')
def inventory_group():
    """Inventory and ledger commands."""


@inventory_group.command('init-db')
@with_appcontext
def init_db():
    """Create the key-value table (idempotent)."""
    db.create_all()
    reset_inventory()
    click.echo("PASS Database ready")


@inventory_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        raise click.ClickException("Refusing to reset without --yes")
    db.drop_all()
    db.create_all()
    reset_inventory()
    click.echo("PASS Database reset")


@inventory_group.command('add-user')
@click.option('--name', 'full_name', required=True, help='Full name')
@click.option('--email', required=True, help='Email address')
@with_appcontext
def add_user(full_name, email):
    """Register a user."""
    try:
        user = get_inventory().register_user(full_name, email)
    except ValidationError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Registered user {user.full_name} <{user.email}> (ID: {user.id})")


@inventory_group.command('add-product')
@click.option('--sku', required=True)
@click.option('--name', required=True)
@click.option('--price', required=True, help='Unit price, e.g. 9.99')
@click.option('--quantity', required=True, help='Initial quantity on hand')
@with_appcontext
def add_product(sku, name, price, quantity):
    """Register a product with its initial stock."""
    try:
        product = get_inventory().register_product(sku, name, price, quantity)
    except ValidationError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Registered {product.sku} {product.name} qty={product.quantity} (ID: {product.id})")


@inventory_group.command('adjust')
@click.argument('product_id')
@click.argument('delta', type=int)
@with_appcontext
def adjust(product_id, delta):
    """Apply a signed stock change to a product."""
    inventory = get_inventory()
    before = inventory.find_product(product_id)
    if before is None:
        raise click.ClickException(f"Product {product_id} not found")

    product = inventory.adjust_stock(product_id, delta)
    if product is before:
        raise click.ClickException(
            f"Rejected: {before.sku} has {before.quantity} on hand, cannot apply {delta:+d}"
        )
    click.echo(f"PASS {product.sku} quantity {before.quantity} -> {product.quantity}")


@inventory_group.command('products')
@with_appcontext
def list_products():
    """List products in registration order."""
    products = get_inventory().list_products()
    if not products:
        click.echo("No products registered.")
        return
    for p in products:
        click.echo(f"{p.id}  {p.sku:<12} {p.name:<30} {p.price:>10} qty={p.quantity}")


@inventory_group.command('users')
@with_appcontext
def list_users():
    """List registered users."""
    users = get_inventory().list_users()
    if not users:
        click.echo("No users registered.")
        return
    for u in users:
        click.echo(f"{u.id}  {u.full_name:<30} {u.email:<30} {u.created_at}")


@inventory_group.command('history')
@click.option('--page', default=1, type=int, show_default=True)
@click.option('--page-size', default=None, type=int, help='Defaults to LEDGER_PAGE_SIZE')
@with_appcontext
def history(page, page_size):
    """Show one page of the transaction ledger, newest first."""
    if page_size is None:
        page_size = current_app.config.get("LEDGER_PAGE_SIZE", 10)
    if page_size < 1:
        raise click.ClickException("--page-size must be >= 1")

    ledger = get_inventory().ledger
    page = ledger.clamp_page(page, page_size)
    click.echo(f"Page {page} of {ledger.total_pages(page_size)} ({len(ledger)} transactions)")
    for tx in ledger.page(page, page_size):
        click.echo(f"{tx.timestamp}  {tx.type.value:<8} {tx.amount:>6}  {tx.sku:<12} {tx.product_name}")


@inventory_group.command('summary')
@click.option('--threshold', default=None, type=int, help='Low-stock threshold override')
@with_appcontext
def summary(threshold):
    """Inventory totals and low-stock products."""
    inventory = get_inventory()
    stats = inventory.summary()
    click.echo(f"Products:        {stats['totalProducts']}")
    click.echo(f"Units on hand:   {stats['totalUnits']}")
    click.echo(f"Inventory value: {stats['inventoryValue']}")
    click.echo(f"Users:           {stats['totalUsers']}")
    click.echo(f"Transactions:    {stats['totalTransactions']}")

    low = inventory.low_stock(threshold)
    if not low:
        click.echo("All products are well-stocked.")
        return
    click.echo("Low stock:")
    for p in low:
        click.echo(f"  {p.sku:<12} {p.name:<30} {p.quantity} units")


def register_commands(app):
    """Register CLI commands with Flask app."""
    app.cli.add_command(inventory_group)

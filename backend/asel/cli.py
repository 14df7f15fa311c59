# Overview: Flask CLI command groups for database bootstrap, sequences, and reports.

# backend/asel/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to asel (PowerShell: $env:FLASK_APP="asel").
# - Use: python -m flask <group> <command> [options]
#
# Database:
# - python -m flask system init-db
#   Create missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Sequences:
# - python -m flask sequences next-product-code
#   Print the code the next product would get.
# - python -m flask sequences next-invoice-number [--prefix INV]
#   Consume and print the next counter-based invoice number.
#
# Reports:
# - python -m flask reports average-price 3 [--as-of 2024-01-15]
#   Print a product's average purchase price per smallest unit.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .services.counter_store import default_counter_store
from .services.formatting_service import format_currency
from .services.pricing_service import get_average_purchase_price
from .services.record_store import default_record_store
from .services.sequence_service import generate_invoice_number, generate_product_code


@click.group('system')
def system_group():
    """Database bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables are in place")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('sequences')
def sequences_group():
    """Product code and invoice number commands."""


@sequences_group.command('next-product-code')
@with_appcontext
def next_product_code():
    code = generate_product_code(records=default_record_store(), counters=default_counter_store())
    click.echo(code)


@sequences_group.command('next-invoice-number')
@click.option('--prefix', default='INV', show_default=True, help='Invoice number prefix')
@with_appcontext
def next_invoice_number(prefix):
    click.echo(generate_invoice_number(default_counter_store(), prefix=prefix))


@click.group('reports')
def reports_group():
    """Reporting commands."""


@reports_group.command('average-price')
@click.argument('product_id', type=int)
@click.option('--as-of', 'as_of', default=None, help='Cutoff date (YYYY-MM-DD), inclusive')
@click.option('--raw', is_flag=True, help='Print the plain number instead of Arabic digits')
@with_appcontext
def average_price(product_id, as_of, raw):
    price = get_average_purchase_price(product_id, as_of)
    if raw:
        click.echo(f"{price:.4f}")
        return
    click.echo(format_currency(price, current_app.config["DEFAULT_CURRENCY"]))


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(sequences_group)
    app.cli.add_command(reports_group)

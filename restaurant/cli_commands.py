"""
Flask CLI commands for database and stock management.

Commands:
- flask init-db: Create tables
- flask init-stock: Seed default dessert stock
- flask set-stock: Set one item's stock
"""

import click
from flask import current_app
from restaurant.database import get_session, create_all
from restaurant.exceptions import ValidationError
from restaurant.services import stock_service


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all database tables."""
        create_all()
        click.echo(click.style('Tables created.', fg='green'))

    @app.cli.command('init-stock')
    def init_stock():
        """Seed the default dessert stock levels (overwrites existing values)."""
        category = current_app.config.get('STOCK_CATEGORY', 'desserts')
        records = stock_service.initialize_defaults(get_session(), category)
        for record in records:
            click.echo(f'   {record.slug}: {record.stock}')
        click.echo(click.style(f'{len(records)} stock records initialized.', fg='green'))

    @app.cli.command('set-stock')
    @click.option('--slug', required=True, help='Item slug, e.g. apricot-delight')
    @click.option('--stock', required=True, type=int, help='New stock level (negative values become 0)')
    def set_stock(slug, stock):
        """Set the stock level of one item."""
        category = current_app.config.get('STOCK_CATEGORY', 'desserts')
        try:
            record = stock_service.upsert_one(get_session(), slug, max(0, stock), category)
        except ValidationError as e:
            click.echo(click.style(f'Error: {e.message}', fg='red'))
            return
        click.echo(click.style(f'{record.item} ({record.slug}) stock set to {record.stock}.', fg='green'))

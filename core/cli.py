"""
Command-line interface for the storefront backend
"""
import click

from core.config import settings
from core.exceptions import StorefrontError
from core.logging import get_logger
from database.session import init_db as create_tables
from database.session import session_scope

logger = get_logger(__name__)


@click.group()
@click.version_option(version=settings.app_version)
def cli():
    """Storefront CLI - orders, checkout and payments backend"""
    pass


@cli.command()
def init_db():
    """Initialize database with tables"""
    click.echo("Creating database tables...")
    create_tables()
    click.echo("Database initialized successfully!")


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to")
@click.option("--port", default=8000, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def runserver(host: str, port: int, reload: bool):
    """Run the FastAPI development server"""
    import uvicorn

    click.echo(f"Starting {settings.app_name} server on {host}:{port}")
    click.echo(f"Environment: {settings.environment}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command()
@click.argument("store_id")
@click.option("--days", default=None, type=int, help="Trailing window in days (default: REVENUE_WINDOW_DAYS)")
def revenue(store_id: str, days: int):
    """Print paid-order revenue for a store"""
    from storefront.catalog import CatalogReader
    from storefront.order_store import OrderStore
    from storefront.revenue import RevenueAggregator

    with session_scope() as db:
        aggregator = RevenueAggregator(
            OrderStore(db), CatalogReader(db), window_days=days or settings.revenue_window_days
        )
        try:
            report = aggregator.summarize(store_id)
        except StorefrontError as e:
            raise click.ClickException(e.message)

        click.echo(f"Store:         {store_id}")
        click.echo(f"Since:         {report.since:%Y-%m-%d %H:%M}")
        click.echo(f"Sales count:   {report.sales_count}")
        click.echo(f"Total revenue: {report.total_revenue}")


def main():
    cli()


if __name__ == "__main__":
    main()

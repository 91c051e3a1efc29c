import json
from datetime import timedelta

import click
from flask.cli import with_appcontext

from trafficlog.extensions import db
from trafficlog.services.analytics.classifier import classify_user_agent


@click.command('init-db')
@with_appcontext
def init_db_command() -> None:
    """Create the request log table if it does not exist."""
    import trafficlog.models  # noqa: F401

    db.create_all()
    click.echo('Database tables created.')


@click.command('classify-ua')
@click.argument('user_agent')
def classify_ua_command(user_agent: str) -> None:
    """Print the category and client name detected for USER_AGENT."""
    result = classify_user_agent(user_agent)
    click.echo(f'{result.category.label}\t{result.detected_client or "-"}')


@click.command('traffic-stats')
@click.option('--hours', default=24, show_default=True, type=int, help='Statistics window in hours')
@click.option('--page-size', default=10, show_default=True, type=int, help='Recent requests to include')
@with_appcontext
def traffic_stats_command(hours: int, page_size: int) -> None:
    """Print dashboard statistics as JSON."""
    from trafficlog.routes.dashboard import get_aggregator

    if hours < 1:
        raise click.ClickException('--hours must be at least 1.')

    stats = get_aggregator().aggregate(window=timedelta(hours=hours), page=1, page_size=page_size)
    click.echo(json.dumps(stats.to_dict(), indent=2))

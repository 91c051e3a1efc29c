"""Request dashboard endpoint."""

from datetime import timedelta

from flask import Blueprint, current_app, jsonify, request

from trafficlog.services.analytics.dashboard import MAX_PAGE_SIZE, DashboardAggregator
from trafficlog.services.analytics.store import SQLAlchemyRequestLogStore


dashboard_bp = Blueprint('dashboard', __name__)


def _int_arg(name, default):
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def get_aggregator() -> DashboardAggregator:
    aggregator = current_app.extensions.get('dashboard_aggregator')
    if aggregator is None:
        aggregator = DashboardAggregator(SQLAlchemyRequestLogStore())
        current_app.extensions['dashboard_aggregator'] = aggregator
    return aggregator


@dashboard_bp.route('/RequestDashboard')
def request_dashboard():
    """
    Dashboard statistics as JSON.

    Query parameters:
        page: 1-based page of the recent requests list (default 1)
        pageSize: recent requests per page (default DASHBOARD_PAGE_SIZE)
        hours: statistics window in hours (default DASHBOARD_WINDOW_HOURS)
    """
    page = max(1, _int_arg('page', 1))
    page_size = max(1, min(_int_arg('pageSize', current_app.config.get('DASHBOARD_PAGE_SIZE', 50)), MAX_PAGE_SIZE))
    hours = max(1, _int_arg('hours', current_app.config.get('DASHBOARD_WINDOW_HOURS', 24)))

    stats = get_aggregator().aggregate(
        window=timedelta(hours=hours),
        page=page,
        page_size=page_size,
    )

    payload = stats.to_dict()
    payload['page'] = page
    payload['page_size'] = page_size
    payload['window_hours'] = hours
    return jsonify(payload)

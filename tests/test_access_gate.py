"""Access gate rules for the Graph Connectors crawler."""

import pytest

from trafficlog.services.analytics import access_gate
from trafficlog.services.analytics.access_gate import (
    BLOCKED_USER_AGENT,
    DENIAL_MESSAGE,
    is_blocked_crawler,
    should_block,
)

from conftest import CHROME_UA, GRAPH_CONNECTORS_UA


@pytest.mark.parametrize('path', ['/robots.txt', '/ROBOTS.TXT', '/robots.txt/extra'])
def test_robots_is_always_allowed(path):
    assert should_block(path, GRAPH_CONNECTORS_UA) is False


@pytest.mark.parametrize('user_agent', [
    GRAPH_CONNECTORS_UA,
    BLOCKED_USER_AGENT.upper(),
    'SomethingElse graphconnectors/1.0',
])
def test_crawler_detection(user_agent):
    assert is_blocked_crawler(user_agent) is True


@pytest.mark.parametrize('user_agent', [None, '', CHROME_UA, 'curl/7.68.0'])
def test_other_clients_are_not_the_crawler(user_agent):
    assert is_blocked_crawler(user_agent) is False


@pytest.mark.parametrize('path', [
    '/RequestDashboard',
    '/requestdashboard',
    '/TestApi',
    '/Privacy',
    '/Error',
    '/css/site.css',
    '/CSS/site.css',
    '/js/site.js',
    '/lib/bootstrap/dist/css/bootstrap.min.css',
])
def test_crawler_is_denied_on_blocked_paths(path):
    assert should_block(path, GRAPH_CONNECTORS_UA) is True


@pytest.mark.parametrize('path', ['/', '/About', '/RequestDashboard/extra', '/css', None])
def test_crawler_is_allowed_elsewhere(path):
    assert should_block(path, GRAPH_CONNECTORS_UA) is False


def test_other_clients_are_never_denied():
    assert should_block('/RequestDashboard', CHROME_UA) is False
    assert should_block('/css/site.css', None) is False


def test_custom_block_lists():
    assert should_block('/admin', GRAPH_CONNECTORS_UA, blocked_paths=['/Admin'], blocked_prefixes=[]) is True
    assert should_block('/css/site.css', GRAPH_CONNECTORS_UA, blocked_paths=[], blocked_prefixes=[]) is False


def test_denied_request_gets_fixed_403(client, app):
    resp = client.get('/RequestDashboard', headers={'User-Agent': GRAPH_CONNECTORS_UA})

    assert resp.status_code == 403
    assert resp.mimetype == 'text/plain'
    assert resp.get_data(as_text=True) == DENIAL_MESSAGE


def test_denied_request_is_not_tracked(client, app, memory_store):
    app.extensions['request_tracker'].store = memory_store

    client.get('/css/site.css', headers={'User-Agent': GRAPH_CONNECTORS_UA})

    assert memory_store.records == []


def test_root_is_allowed_for_crawler(client):
    resp = client.get('/', headers={'User-Agent': GRAPH_CONNECTORS_UA})
    assert resp.status_code == 200


def test_robots_is_served_to_crawler(client):
    resp = client.get('/robots.txt', headers={'User-Agent': GRAPH_CONNECTORS_UA})
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert 'User-agent: GraphConnectors' in body
    assert 'Disallow: /RequestDashboard' in body


def test_gate_can_be_disabled(client, app):
    app.config['ACCESS_GATE_ENABLED'] = False
    resp = client.get('/RequestDashboard', headers={'User-Agent': GRAPH_CONNECTORS_UA})
    assert resp.status_code == 200


def test_gate_fault_allows_request(client, monkeypatch, caplog):
    def broken_rule(*args, **kwargs):
        raise RuntimeError('rule table unavailable')

    monkeypatch.setattr(access_gate, 'should_block', broken_rule)

    resp = client.get('/RequestDashboard', headers={'User-Agent': GRAPH_CONNECTORS_UA})

    assert resp.status_code == 200
    assert 'Access gate check failed' in caplog.text

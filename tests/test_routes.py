"""Public endpoints, health checks and CLI commands."""

import json

from conftest import CHROME_UA


def test_index(client):
    resp = client.get('/')
    assert resp.status_code == 200
    assert resp.get_json()['dashboard'] == '/RequestDashboard'


def test_robots_txt(client):
    resp = client.get('/robots.txt')
    assert resp.status_code == 200
    assert resp.mimetype == 'text/plain'
    body = resp.get_data(as_text=True)
    assert 'User-agent: *' in body
    assert 'Disallow: /css/' in body


def test_test_api_echoes_request(client):
    resp = client.get('/TestApi', headers={'User-Agent': CHROME_UA, 'X-Real-IP': '8.8.4.4'})
    payload = resp.get_json()

    assert resp.status_code == 200
    assert payload['message'] == 'Hello from the API!'
    assert payload['userAgent'] == CHROME_UA
    assert payload['ipAddress'] == '8.8.4.4'
    assert payload['method'] == 'GET'
    assert payload['path'] == '/TestApi'


def test_unknown_route_is_json_404(client):
    resp = client.get('/nope')
    assert resp.status_code == 404
    assert resp.get_json()['status'] == 404


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    assert resp.get_json()['status'] == 'healthy'


def test_readiness(client):
    resp = client.get('/health/ready')
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload['database'] == 'healthy'
    assert payload['schema'] == 'complete'


def test_classify_ua_command(runner):
    result = runner.invoke(args=['classify-ua', 'curl/7.68.0'])
    assert result.exit_code == 0
    assert result.output.strip() == 'ApiTool\tcURL'


def test_init_db_command(runner):
    result = runner.invoke(args=['init-db'])
    assert result.exit_code == 0
    assert 'created' in result.output


def test_traffic_stats_command(runner, client):
    client.get('/TestApi', headers={'User-Agent': CHROME_UA})

    result = runner.invoke(args=['traffic-stats', '--hours', '1'])

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload['total_requests'] == 1
    assert payload['category_counts'] == {'Human': 1}


def test_traffic_stats_rejects_bad_window(runner):
    result = runner.invoke(args=['traffic-stats', '--hours', '0'])
    assert result.exit_code != 0

from datetime import datetime, timezone

from trafficlog.domain import ClientCategory, RequestRecord


def test_long_strings_are_truncated():
    record = RequestRecord.build(
        timestamp=datetime(2026, 1, 1),
        method='PROPPATCHXYZ',
        path='/' + 'p' * 3000,
        ip_address='f' * 60,
        user_agent='u' * 1500,
        category=ClientCategory.HUMAN,
        detected_client='c' * 200,
        status_code=200,
        processing_time_ms=5,
        referer='r' * 2500,
        query_string='q' * 1200,
    )

    assert len(record.method) == 10
    assert len(record.path) == 2000
    assert len(record.ip_address) == 45
    assert len(record.user_agent) == 1000
    assert len(record.detected_client) == 100
    assert len(record.referer) == 2000
    assert len(record.query_string) == 1000


def test_defaults():
    record = RequestRecord.build(
        timestamp=datetime(2026, 1, 1),
        method=None,
        path=None,
        category=None,
        status_code=200,
        processing_time_ms=-3,
    )

    assert record.path == '/'
    assert record.method == 'GET'
    assert record.category is ClientCategory.UNKNOWN
    assert record.processing_time_ms == 0
    assert record.timestamp.tzinfo is timezone.utc


def test_category_labels():
    assert ClientCategory.API_TOOL.label == 'ApiTool'
    assert str(ClientCategory.SECURITY_SCANNER) == 'SecurityScanner'

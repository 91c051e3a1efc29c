"""
Database Models for the trafficlog Application

This module defines the request log table using SQLAlchemy ORM.
Timestamps are stored as naive UTC values.
"""

from datetime import datetime, timezone

from trafficlog.domain import ClientCategory, RequestRecord
from trafficlog.domain import records as limits
from trafficlog.extensions import db


class RequestLog(db.Model):
    """One tracked HTTP request."""

    __tablename__ = 'request_logs'
    __table_args__ = (
        db.Index('ix_request_logs_timestamp', 'timestamp'),
        db.Index('ix_request_logs_category', 'category'),
        db.Index('ix_request_logs_ip_address', 'ip_address'),
    )

    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    method = db.Column(db.String(limits.METHOD_MAX_LENGTH), nullable=False)
    path = db.Column(db.String(limits.PATH_MAX_LENGTH), nullable=False)
    ip_address = db.Column(db.String(limits.IP_ADDRESS_MAX_LENGTH), nullable=True)
    user_agent = db.Column(db.String(limits.USER_AGENT_MAX_LENGTH), nullable=True)
    category = db.Column(db.SmallInteger, nullable=False, default=ClientCategory.UNKNOWN.value)
    detected_client = db.Column(db.String(limits.DETECTED_CLIENT_MAX_LENGTH), nullable=True)
    status_code = db.Column(db.Integer, nullable=False)
    processing_time_ms = db.Column(db.BigInteger, nullable=False, default=0)
    referer = db.Column(db.String(limits.REFERER_MAX_LENGTH), nullable=True)
    query_string = db.Column(db.String(limits.QUERY_STRING_MAX_LENGTH), nullable=True)

    def __repr__(self):
        return f'<RequestLog {self.method} {self.path} {self.status_code}>'

    @staticmethod
    def payload_for(record: RequestRecord) -> dict:
        """Column values for inserting ``record``."""
        return {
            'timestamp': record.timestamp.astimezone(timezone.utc).replace(tzinfo=None),
            'method': record.method,
            'path': record.path,
            'ip_address': record.ip_address,
            'user_agent': record.user_agent,
            'category': record.category.value,
            'detected_client': record.detected_client,
            'status_code': record.status_code,
            'processing_time_ms': record.processing_time_ms,
            'referer': record.referer,
            'query_string': record.query_string,
        }

    @staticmethod
    def record_from_row(row) -> RequestRecord:
        """Rebuild an immutable record from a mapped row or a Core result row."""
        try:
            category = ClientCategory(row.category)
        except ValueError:
            category = ClientCategory.UNKNOWN
        return RequestRecord.build(
            id=row.id,
            timestamp=row.timestamp,
            method=row.method,
            path=row.path,
            ip_address=row.ip_address,
            user_agent=row.user_agent,
            category=category,
            detected_client=row.detected_client,
            status_code=row.status_code,
            processing_time_ms=row.processing_time_ms,
            referer=row.referer,
            query_string=row.query_string,
        )

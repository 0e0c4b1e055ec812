"""Request extraction - client address, request id and visitor metadata."""

import secrets
import time
from datetime import datetime, timezone, tzinfo
from typing import Mapping, Optional

from visitor_tracker.common.constants import GeoConstants, RequestConstants
from visitor_tracker.data.schemas.visit import VisitClassification
from visitor_tracker.data.schemas.visitor import VisitorData

UNKNOWN = GeoConstants.UNKNOWN

# e.g. "October 17, 2026, 03:04:05 PM EEST"
DISPLAY_TIME_FORMAT = "%B %d, %Y, %I:%M:%S %p %Z"


def extract_client_ip(headers: Mapping[str, str], peer: Optional[str] = None) -> str:
    """Resolve the client address from proxy headers, then the socket peer.
    
    Only the first entry of x-forwarded-for is used. Headers are trusted
    as-is; deployments behind an untrusted edge should strip them.
    """
    for header in RequestConstants.CLIENT_IP_HEADERS:
        value = headers.get(header)
        if not value:
            continue
        if header == "x-forwarded-for":
            value = value.split(",")[0]
        value = value.strip()
        if value:
            return value
    
    return peer or RequestConstants.UNKNOWN_IP


def generate_request_id() -> str:
    """``VT-{epoch_ms}-{16 hex}``, unique per request."""
    return f"{RequestConstants.REQUEST_ID_PREFIX}-{int(time.time() * 1000)}-{secrets.token_hex(8)}"


def parse_languages(accept_language: Optional[str]) -> str:
    """Language tags without quality values, e.g. ``en-US, en, fr``."""
    if not accept_language:
        return UNKNOWN
    tags = [part.split(";")[0].strip() for part in accept_language.split(",")]
    return ", ".join(tag for tag in tags if tag) or UNKNOWN


def format_timestamp(moment: datetime) -> str:
    """ISO 8601 UTC with millisecond precision and a Z suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_display_time(moment: datetime, zone: tzinfo) -> str:
    return moment.astimezone(zone).strftime(DISPLAY_TIME_FORMAT)


def build_visitor_data(
    headers: Mapping[str, str],
    ip: str,
    method: str,
    classification: VisitClassification,
    request_id: str,
    zone: tzinfo,
    now: Optional[datetime] = None,
) -> VisitorData:
    """Assemble VisitorData from lower-cased request headers.
    
    Args:
        headers: Request headers keyed by lower-case name
        ip: Resolved client address
        method: HTTP method
        classification: Visit tracker outcome for this request
        request_id: Identifier echoed in the response
        zone: Timezone for the human-readable time
        now: Observation time (defaults to current UTC time)
    """
    now = now or datetime.now(timezone.utc)
    accept_language = headers.get("accept-language")
    
    return VisitorData(
        ip=ip,
        user_agent=headers.get("user-agent") or RequestConstants.UNKNOWN_USER_AGENT,
        referrer=(
            headers.get("referer") or headers.get("referrer") or RequestConstants.DIRECT_VISIT
        ),
        accept_language=accept_language or UNKNOWN,
        accept_encoding=headers.get("accept-encoding") or UNKNOWN,
        accept_types=headers.get("accept") or UNKNOWN,
        cache_control=headers.get("cache-control"),
        connection=headers.get("connection"),
        method=method.upper(),
        protocol=headers.get("x-forwarded-proto") or "http",
        time=format_display_time(now, zone),
        timestamp=format_timestamp(now),
        request_id=request_id,
        is_unique=classification.is_unique,
        visit_count=classification.visit_count,
        languages=parse_languages(accept_language),
    )

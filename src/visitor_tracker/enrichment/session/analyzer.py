"""Session Analyzer - fingerprint, visitor hash and trust level.

The trust score is a display heuristic built from the presence of
headers that real browsers send. It is not a security control and must
not gate access.
"""

import hashlib
import time
from typing import Mapping, Optional, Tuple

from visitor_tracker.common.constants import SessionConstants
from visitor_tracker.data.schemas.session import SessionInfo
from visitor_tracker.data.schemas.visitor import VisitorData


def generate_fingerprint(
    ip: str,
    user_agent: str,
    accept_language: Optional[str],
    accept_encoding: Optional[str],
) -> str:
    """Deterministic short hash over address, user agent and accept headers."""
    data = f"{ip}:{user_agent}:{accept_language}:{accept_encoding}"
    digest = hashlib.sha256(data.encode("utf-8")).hexdigest()
    return digest[:SessionConstants.FINGERPRINT_LENGTH]


def generate_visitor_hash(ip: str, user_agent: str) -> str:
    digest = hashlib.md5(f"{ip}:{user_agent}".encode("utf-8")).hexdigest()
    return digest[:SessionConstants.VISITOR_HASH_LENGTH]


class SessionAnalyzer:
    """Combines visit classification and headers into a SessionInfo."""
    
    # Points added when a header is present.
    PRESENCE_SIGNALS: Tuple[Tuple[str, int], ...] = (
        ("sec-fetch-site", 10),
        ("sec-fetch-mode", 10),
        ("sec-fetch-dest", 10),
        ("cache-control", 5),
    )
    MULTI_LANGUAGE_POINTS = 5
    GZIP_POINTS = 5
    DO_NOT_TRACK_POINTS = 10
    
    def trust_score(self, headers: Mapping[str, str]) -> int:
        """Score the request's trust signals, starting from the baseline.
        
        Monotonic: adding a recognized header never lowers the score.
        """
        score = SessionConstants.TRUST_BASELINE
        
        for header, points in self.PRESENCE_SIGNALS:
            if headers.get(header):
                score += points
        
        if "," in (headers.get("accept-language") or ""):
            score += self.MULTI_LANGUAGE_POINTS
        if "gzip" in (headers.get("accept-encoding") or ""):
            score += self.GZIP_POINTS
        if headers.get("dnt") == "1":
            score += self.DO_NOT_TRACK_POINTS
        
        return score
    
    @staticmethod
    def trust_level(score: int) -> str:
        if score >= SessionConstants.TRUST_HIGH_THRESHOLD:
            return "High"
        if score >= SessionConstants.TRUST_MEDIUM_THRESHOLD:
            return "Medium"
        return "Low"
    
    def analyze(
        self,
        headers: Mapping[str, str],
        visitor: VisitorData,
        is_unique: bool,
    ) -> SessionInfo:
        """Build the session descriptor for a request.
        
        Args:
            headers: Request headers with lower-case keys
            visitor: Extracted visitor data
            is_unique: Classification from the visit tracker
        """
        fingerprint = generate_fingerprint(
            visitor.ip,
            visitor.user_agent,
            headers.get("accept-language"),
            headers.get("accept-encoding"),
        )
        visitor_hash = generate_visitor_hash(visitor.ip, visitor.user_agent)
        score = self.trust_score(headers)
        
        return SessionInfo(
            fingerprint=fingerprint,
            visitor_hash=visitor_hash,
            session_type=(
                SessionConstants.NEW_SESSION if is_unique
                else SessionConstants.RETURNING_SESSION
            ),
            session_id=f"{visitor_hash}-{int(time.time() * 1000)}",
            trust_score=score,
            trust_level=self.trust_level(score),
        )

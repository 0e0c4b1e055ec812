"""API module - FastAPI gateway for the tracking endpoint."""

from visitor_tracker.api.service import TrackingResult, VisitorTrackingService

__all__ = ["TrackingResult", "VisitorTrackingService"]

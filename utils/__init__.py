"""Utility modules for v1z3r monitoring."""
from utils.logger import setup_logging
from utils.clock import now_ms, to_iso, ManualClock
from utils.http_client import HTTPClient, DeliveryError

"""
Analytics module for PersonaRank Chat

Thin wrapper around PostHog. Events are only sent from AWS Lambda.
"""

from .posthog_client import capture_event, flush_events, get_posthog_client

__all__ = ["capture_event", "flush_events", "get_posthog_client"]

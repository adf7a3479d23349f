"""
Debug logging utility with timing support

Provides centralized debug logging with request timing and consistent formatting.
"""

import os
import time
from typing import Any, Optional


class DebugLogger:
    """Centralized debug logging with timing support"""

    def __init__(self):
        # Lambda (production) and local runs are toggled separately
        is_lambda = os.getenv("AWS_LAMBDA_FUNCTION_NAME") is not None

        if is_lambda:
            self.debug_enabled = os.getenv("DEBUG_LOGGING_PROD", "false").lower() == "true"
        else:
            self.debug_enabled = os.getenv("DEBUG_LOGGING_DEV", "false").lower() == "true"

    def format(self,
               request_id: Optional[str],
               service: str,
               message: str,
               request: Optional[Any] = None,
               **kwargs) -> str:
        """
        Build a log line

        Format: [DEBUG] [service] [timing] [request_id] message [context]
        """
        elapsed_seconds = None
        state = getattr(request, "state", None)
        if state is not None and hasattr(state, "start_time"):
            elapsed_seconds = f"{time.perf_counter() - state.start_time:.3f}s"

        timing_part = f" [{elapsed_seconds}]" if elapsed_seconds else ""
        context_part = f" [{request_id}]" if request_id else ""

        context_str = ""
        if kwargs:
            context_items = [f"{k}={v}" for k, v in kwargs.items()]
            context_str = f" {' '.join(context_items)}"

        return f"[DEBUG] [{service}]{timing_part}{context_part} {message}{context_str}"

    def log(self,
            request_id: Optional[str],
            service: str,
            message: str,
            request: Optional[Any] = None,
            **kwargs) -> None:
        """
        Log a debug message with optional timing information

        Args:
            request_id: Unique request identifier
            service: Service/component name (e.g., 'ROUTE', 'CHAT', 'RANK')
            message: Debug message
            request: FastAPI request object for timing
            **kwargs: Additional context to include in log
        """
        if not self.debug_enabled:
            return
        print(self.format(request_id, service, message, request, **kwargs))

    def log_route(self, request_id: Optional[str], message: str, request: Optional[Any] = None, **kwargs):
        """Log a route-related debug message"""
        self.log(request_id, "ROUTE", message, request, **kwargs)

    def log_chat(self, request_id: Optional[str], message: str, request: Optional[Any] = None, **kwargs):
        """Log a chat orchestration debug message"""
        self.log(request_id, "CHAT", message, request, **kwargs)

    def log_rank(self, request_id: Optional[str], message: str, request: Optional[Any] = None, **kwargs):
        """Log a ranking call debug message"""
        self.log(request_id, "RANK", message, request, **kwargs)

    def log_transcribe(self, request_id: Optional[str], message: str, request: Optional[Any] = None, **kwargs):
        """Log a transcription debug message"""
        self.log(request_id, "TRANSCRIBE", message, request, **kwargs)

    def log_lambda(self, request_id: Optional[str], message: str, request: Optional[Any] = None, **kwargs):
        """Log a Lambda debug message"""
        self.log(request_id, "LAMBDA", message, request, **kwargs)

    def log_timing(self, request_id: Optional[str], operation: str, duration_ms: float, **kwargs):
        """Log a specific timing measurement"""
        self.log(request_id, "TIMING", f"{operation} completed in {duration_ms:.3f}ms", **kwargs)


# Global debug logger instance
debug_logger = DebugLogger()

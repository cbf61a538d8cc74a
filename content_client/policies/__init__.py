"""Request policies and endpoint path templates."""

from content_client.policies.retry import OutcomeType, PolicyResult, RetryEvent, RetryPolicy

__all__ = [
    "OutcomeType",
    "PolicyResult",
    "RetryEvent",
    "RetryPolicy",
]

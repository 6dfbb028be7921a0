"""TLS trust override module."""
from .trust_policy import (
    TrustPolicy,
    TrustDecision,
    IssuerRejectedError,
    build_trust_policy
)

__all__ = [
    'TrustPolicy',
    'TrustDecision',
    'IssuerRejectedError',
    'build_trust_policy',
]

"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException
from .proposal import (
    ConcurrentModificationException,
    InvalidProposalStateException,
    ProposalNotFoundException,
    ValidationException,
)
from .messaging import (
    EventDecodeException,
    HandlerException,
    PublishException,
)

__all__ = [
    "DomainException",
    "ValidationException",
    "ProposalNotFoundException",
    "InvalidProposalStateException",
    "ConcurrentModificationException",
    "PublishException",
    "HandlerException",
    "EventDecodeException",
]

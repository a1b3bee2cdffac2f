"""
Input rules for proposal creation and workflow actions.

All checks run before the aggregate is touched, so a rejected request
never leaves a partially written proposal behind.
"""

from decimal import Decimal, InvalidOperation
from typing import List, Optional, Sequence

from src.domain.exceptions import ValidationException

AMOUNT_QUANTUM = Decimal("0.01")


def normalize_amount(value) -> Decimal:
    """
    Coerce a monetary amount to an exact two-place Decimal.

    Accepts Decimal, int and numeric strings. Floats are refused because
    they cannot represent most cents values exactly.

    Raises:
        ValidationException: If the amount is missing, inexact, negative,
            not finite or has more than two decimal places
    """
    if value is None:
        raise ValidationException("amount is required", field="amount")
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationException(
            "amount must be an exact decimal, not a float", field="amount"
        )

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationException(f"amount is not a decimal: {value!r}", field="amount")

    if not amount.is_finite():
        raise ValidationException("amount must be finite", field="amount")
    if amount < 0:
        raise ValidationException("amount must be non-negative", field="amount")
    if amount != amount.quantize(AMOUNT_QUANTUM):
        raise ValidationException(
            "amount must have at most two decimal places", field="amount"
        )

    return amount.quantize(AMOUNT_QUANTUM)


def require_text(value: Optional[str], field: str, max_length: int) -> str:
    """Return the trimmed value, rejecting blanks and overlong input."""
    if value is None or not value.strip():
        raise ValidationException(f"{field} is required", field=field)
    value = value.strip()
    if len(value) > max_length:
        raise ValidationException(
            f"{field} must be at most {max_length} characters", field=field
        )
    return value


def optional_text(value: Optional[str], field: str, max_length: int) -> Optional[str]:
    if value is None:
        return None
    if len(value) > max_length:
        raise ValidationException(
            f"{field} must be at most {max_length} characters", field=field
        )
    return value


def normalize_chain(
    roles: Optional[Sequence[str]],
    max_length: int,
    max_role_length: int = 100,
) -> Optional[List[str]]:
    """
    Trim an explicit chain, preserving order.

    Returns:
        The trimmed roles, or None when no chain was given (None or empty)

    Raises:
        ValidationException: If a role is blank or overlong, or the chain
            is too long
    """
    if not roles:
        return None

    chain = []
    for index, role in enumerate(roles):
        if not isinstance(role, str) or not role.strip():
            raise ValidationException(
                f"approval chain role at position {index} is blank",
                field="approval_chain",
            )
        role = role.strip()
        if len(role) > max_role_length:
            raise ValidationException(
                f"approval chain role at position {index} must be at most "
                f"{max_role_length} characters",
                field="approval_chain",
            )
        chain.append(role)

    if len(chain) > max_length:
        raise ValidationException(
            f"approval chain may have at most {max_length} roles",
            field="approval_chain",
        )
    return chain


def resolve_chain(
    override: Optional[Sequence[str]],
    stored: Optional[Sequence[str]],
    default: Sequence[str],
    max_length: int,
    max_role_length: int = 100,
) -> List[str]:
    """
    Pick the chain used by submit.

    Precedence: the override passed to submit, then the chain stored on
    the proposal at creation, then the configured default.
    """
    chain = normalize_chain(override, max_length, max_role_length)
    if chain is None:
        chain = normalize_chain(stored, max_length, max_role_length)
    if chain is None:
        chain = list(default)
    return chain

"""
Standard error codes for service layer.

These error codes allow command handlers to programmatically handle
specific error conditions without parsing error message text.

Usage:
    from services.error_codes import INSUFFICIENT_FUNDS
    from services.result import Result

    if not ledger.debit(account_id, amount):
        return Result.fail("Insufficient funds", code=INSUFFICIENT_FUNDS)
"""

# General errors
NOT_FOUND = "not_found"
VALIDATION_ERROR = "validation_error"
PERMISSION_DENIED = "permission_denied"

# Balance errors
INSUFFICIENT_FUNDS = "insufficient_funds"

# Rate limiting
COOLDOWN_ACTIVE = "cooldown_active"
DAILY_LIMIT_EXCEEDED = "daily_limit_exceeded"

# Transfer errors
SELF_TRANSFER = "self_transfer"
INVALID_RECIPIENT = "invalid_recipient"
AMOUNT_OUT_OF_RANGE = "amount_out_of_range"
QUOTE_NOT_FOUND = "quote_not_found"
QUOTE_EXPIRED = "quote_expired"
QUOTE_ALREADY_USED = "quote_already_used"

# Roulette errors
INVALID_BET = "invalid_bet"

"""
Affiliate domain exceptions.

Every business-rule failure raised by the services derives from
AffiliateError and carries a stable code plus a human-readable message.
They are converted into a failed ServiceResult at the request boundary;
database errors are not part of this hierarchy and propagate as-is.
"""


class AffiliateError(Exception):
    """Base class for recoverable affiliate errors."""

    code = "affiliate_error"
    default_message = "Affiliate operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidReferralCode(AffiliateError):
    """Referral code does not exist or belongs to an inactive program."""

    code = "invalid_referral_code"
    default_message = "Invalid referral code"


class AlreadyRegisteredAffiliate(AffiliateError):
    """User already has an affiliate program."""

    code = "already_registered"
    default_message = "Already registered as affiliate"


class CommissionNotFound(AffiliateError):
    code = "commission_not_found"
    default_message = "Commission not found"


class CommissionAlreadyProcessed(AffiliateError):
    """Approve/reject requested for a commission that is no longer PENDING."""

    code = "commission_already_processed"
    default_message = "Commission already processed"


class NotEligible(AffiliateError):
    """Monthly challenge threshold not reached."""

    code = "not_eligible"
    default_message = "Not enough qualified referrals to claim the reward"


class AlreadyClaimed(AffiliateError):
    code = "already_claimed"
    default_message = "Reward already claimed"


class NoAffiliateAccount(AffiliateError):
    code = "no_affiliate_account"
    default_message = (
        "You must have an affiliate account to claim rewards. "
        "Please register as an affiliate first."
    )


class PayoutNotFound(AffiliateError):
    code = "payout_not_found"
    default_message = "Payout not found"


class InvalidPayoutTransition(AffiliateError):
    """Requested payout status change has no defined earnings effect."""

    code = "invalid_payout_transition"
    default_message = "Payout status transition is not allowed"


class AffiliateNotFound(AffiliateError):
    code = "affiliate_not_found"
    default_message = "Affiliate program not found"


class UserNotFound(AffiliateError):
    code = "user_not_found"
    default_message = "User not found"


class InvalidAmount(AffiliateError):
    code = "invalid_amount"
    default_message = "Amount must be positive"


class InsufficientPendingEarnings(AffiliateError):
    code = "insufficient_pending_earnings"
    default_message = "Insufficient pending earnings"


class AffiliateCodeUnavailable(AffiliateError):
    """Every generated affiliate code candidate was already taken."""

    code = "affiliate_code_unavailable"
    default_message = "Could not generate a unique affiliate code"


class InvalidPayoutStatus(AffiliateError):
    """Payout status filter is not one of PENDING, COMPLETED, FAILED."""

    code = "invalid_payout_status"
    default_message = "Unknown payout status"


class InvalidMonth(AffiliateError):
    code = "invalid_month"
    default_message = "Month must be in YYYY-MM format"

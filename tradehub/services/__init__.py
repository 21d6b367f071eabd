"""
Services.

Business logic layer.
"""

# Base Service Infrastructure
from tradehub.services.base_service import (
    BaseService,
    ServiceResult,
    log_operation,
    transaction,
)

# Facade
from tradehub.services.affiliate_service import AffiliateService


__all__ = [
    "AffiliateService",
    "BaseService",
    "ServiceResult",
    "log_operation",
    "transaction",
]

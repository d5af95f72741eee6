"""Backend services for rstays booking."""

from .booking import BookingService, CancellationResult, ReviewResult
from .connections import ConnectionRegistry
from .currency import CurrencyRateService
from .dynamodb import DynamoDBService, get_dynamodb_service, reset_dynamodb_service
from .holidays import HolidayService
from .localization import LocalizationService
from .pricing import PricingService
from .refund_policy_service import RefundCalculation, RefundPolicyService
from .sessions import SessionService
from .ssm_service import SSMService, SSMServiceError, get_ssm_service
from .stripe_service import StripeService, StripeServiceError, get_stripe_service

__all__ = [
    "BookingService",
    "CancellationResult",
    "ReviewResult",
    "ConnectionRegistry",
    "CurrencyRateService",
    "DynamoDBService",
    "get_dynamodb_service",
    "reset_dynamodb_service",
    "HolidayService",
    "LocalizationService",
    "PricingService",
    "RefundCalculation",
    "RefundPolicyService",
    "SessionService",
    "SSMService",
    "SSMServiceError",
    "get_ssm_service",
    "StripeService",
    "StripeServiceError",
    "get_stripe_service",
]

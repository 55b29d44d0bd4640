# Services module
from app.services.exceptions import (
    ServiceError, NotFoundError, ConflictError, PermissionDeniedError,
    InvalidStateError, AuthenticationError, ExternalServiceError,
    MpesaError, GeminiError
)
from app.services.auth import AuthService
from app.services.catalog import CatalogService, QuoteService
from app.services.orders import OrderService
from app.services.payments import MpesaClient, PaymentService
from app.services.chat import ChatService, CropAnalysisService, GeminiClient
from app.services.blog import BlogService, ProblemService
from app.services.dashboard import DashboardService
from app.services.reports import ReportService
from app.services.seed import SeedService

__all__ = [
    "ServiceError",
    "NotFoundError",
    "ConflictError",
    "PermissionDeniedError",
    "InvalidStateError",
    "AuthenticationError",
    "ExternalServiceError",
    "MpesaError",
    "GeminiError",
    "AuthService",
    "CatalogService",
    "QuoteService",
    "OrderService",
    "MpesaClient",
    "PaymentService",
    "ChatService",
    "CropAnalysisService",
    "GeminiClient",
    "BlogService",
    "ProblemService",
    "DashboardService",
    "ReportService",
    "SeedService"
]

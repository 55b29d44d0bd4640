# Schemas module
from app.schemas.schemas import (
    CamelModel,
    UserRoleType, OrderStatusType, PostStatusType, SenderType,
    RegisterRequest, LoginRequest, UserResponse, RegisterResponse, TokenResponse,
    ProductResponse, ProductCreate, StockUpdateRequest,
    QuoteItem, QuoteRequest, QuoteResponse,
    OrderItemRequest, OrderCreate, OrderItemResponse, OrderResponse,
    StkPushRequest, StkPushResponse, CallbackItem, CallbackMetadataSchema, StkCallback,
    PaymentStatusResponse,
    NewSessionRequest, NewSessionResponse, ChatMessageRequest, ChatMessageResponse,
    ChatMessageSchema, ChatMessagesResponse, GuestHistoryItem, GuestChatRequest,
    GuestChatResponse, SessionSummary, SessionTitleUpdate, SessionResponse, SessionEnvelope,
    CropAnalysisRequest, CropAnalysisResponse,
    PostResponse, PostCreate,
    ProblemResponse,
    DashboardStats, PreferenceResponse, PreferenceUpdate,
    NotificationResponse, NotificationReadRequest,
    TransactionSchema, ChartPoint, FinancialsResponse,
    ReportTransaction, FinancialReport, InventoryReportRow,
    SeedResponse
)

__all__ = [
    "CamelModel",
    "UserRoleType", "OrderStatusType", "PostStatusType", "SenderType",
    "RegisterRequest", "LoginRequest", "UserResponse", "RegisterResponse", "TokenResponse",
    "ProductResponse", "ProductCreate", "StockUpdateRequest",
    "QuoteItem", "QuoteRequest", "QuoteResponse",
    "OrderItemRequest", "OrderCreate", "OrderItemResponse", "OrderResponse",
    "StkPushRequest", "StkPushResponse", "CallbackItem", "CallbackMetadataSchema", "StkCallback",
    "PaymentStatusResponse",
    "NewSessionRequest", "NewSessionResponse", "ChatMessageRequest", "ChatMessageResponse",
    "ChatMessageSchema", "ChatMessagesResponse", "GuestHistoryItem", "GuestChatRequest",
    "GuestChatResponse", "SessionSummary", "SessionTitleUpdate", "SessionResponse", "SessionEnvelope",
    "CropAnalysisRequest", "CropAnalysisResponse",
    "PostResponse", "PostCreate",
    "ProblemResponse",
    "DashboardStats", "PreferenceResponse", "PreferenceUpdate",
    "NotificationResponse", "NotificationReadRequest",
    "TransactionSchema", "ChartPoint", "FinancialsResponse",
    "ReportTransaction", "FinancialReport", "InventoryReportRow",
    "SeedResponse"
]

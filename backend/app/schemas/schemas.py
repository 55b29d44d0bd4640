"""
Pydantic Schemas for API validation and serialization.

These schemas define the contract between the storefront/dashboard and the backend:
- Request validation
- Response serialization (camelCase on the wire)
- M-Pesa callback parsing
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for models exchanged with the web client."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============== Enums ==============

class UserRoleType(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class OrderStatusType(str, Enum):
    """Order lifecycle states."""
    PENDING = "PENDING"
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAID = "PAID"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class PostStatusType(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class SenderType(str, Enum):
    USER = "USER"
    ASSISTANT = "ASSISTANT"


# ============== Auth ==============

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """User without credentials."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: Optional[str]
    email: str
    role: UserRoleType
    created_at: datetime

    @field_validator("role", mode="before")
    @classmethod
    def role_value(cls, v):
        return getattr(v, "value", v)


class RegisterResponse(BaseModel):
    user: UserResponse
    message: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# ============== Catalog ==============

class ProductResponse(CamelModel):
    """Storefront product card."""
    id: int
    name: str
    image_url: str = ""
    price: float
    unit: str
    category: str
    in_stock: bool
    stock_quantity: int


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=300)
    price: float = Field(..., gt=0)
    stock_quantity: int = Field(..., ge=0)
    unit: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None


class StockUpdateRequest(CamelModel):
    stock_quantity: int = Field(..., ge=0)


# ============== Quotes ==============

class QuoteItem(BaseModel):
    id: int
    quantity: int = Field(..., ge=1)


class QuoteRequest(BaseModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    message: Optional[str] = None
    items: List[QuoteItem] = Field(..., min_length=1)


class QuoteResponse(CamelModel):
    sub_total: float
    estimated_tax: float
    total: float


# ============== Orders ==============

class OrderItemRequest(CamelModel):
    product_id: int
    quantity: int = Field(..., ge=1)


class OrderCreate(CamelModel):
    items: List[OrderItemRequest] = Field(..., min_length=1)
    phone_number: Optional[str] = None


class OrderItemResponse(CamelModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: float


class OrderResponse(CamelModel):
    id: int
    status: OrderStatusType
    total_amount: float
    phone_number: Optional[str] = None
    checkout_request_id: Optional[str] = None
    items: List[OrderItemResponse] = []
    created_at: datetime


# ============== Payments ==============

class StkPushRequest(CamelModel):
    order_id: int
    amount: float = Field(..., gt=0)
    phone_number: str = Field(..., min_length=9)


class StkPushResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    checkout_request_id: str = Field(..., alias="CheckoutRequestID")
    message: str


class CallbackItem(BaseModel):
    Name: str
    Value: Optional[Any] = None


class CallbackMetadataSchema(BaseModel):
    Item: List[CallbackItem] = []


class StkCallback(BaseModel):
    """The stkCallback object posted by Daraja."""
    MerchantRequestID: Optional[str] = None
    CheckoutRequestID: Optional[str] = None
    ResultCode: int
    ResultDesc: Optional[str] = None
    CallbackMetadata: Optional[CallbackMetadataSchema] = None

    def metadata_value(self, name: str) -> Optional[Any]:
        if not self.CallbackMetadata:
            return None
        for item in self.CallbackMetadata.Item:
            if item.Name == name:
                return item.Value
        return None


class PaymentStatusResponse(CamelModel):
    order_id: int
    status: OrderStatusType
    checkout_request_id: str
    result_description: Optional[str] = None


# ============== Chat ==============

class NewSessionRequest(CamelModel):
    user_id: Optional[str] = None

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_user_id(cls, v):
        """Clients send the id as a number or a string."""
        if v is None or isinstance(v, str):
            return v
        return str(v)


class NewSessionResponse(CamelModel):
    session_id: str
    welcome_message: str


class ChatMessageRequest(CamelModel):
    session_id: str = Field(..., min_length=1)
    user_message: str = Field(..., min_length=1)
    image_url: Optional[str] = None


class ChatMessageResponse(CamelModel):
    message: str
    assistant_message: str
    message_id: str


class ChatMessageSchema(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    text: str
    image_url: Optional[str] = None
    sender: SenderType
    created_at: datetime

    @field_validator("sender", mode="before")
    @classmethod
    def sender_value(cls, v):
        return getattr(v, "value", v)


class ChatMessagesResponse(BaseModel):
    messages: List[ChatMessageSchema]


class GuestHistoryItem(BaseModel):
    sender: SenderType
    text: str


class GuestChatRequest(CamelModel):
    history: List[GuestHistoryItem] = []
    user_message: str = Field(..., min_length=1)


class GuestChatResponse(CamelModel):
    assistant_message: str
    message_id: str


class SessionSummary(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SessionTitleUpdate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)


class SessionResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[int] = None
    title: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime


class SessionEnvelope(BaseModel):
    session: SessionResponse


# ============== Crop Analysis ==============

class CropAnalysisRequest(CamelModel):
    image_data: str = Field(..., min_length=1)
    prompt: str = Field(..., min_length=1)


class CropAnalysisResponse(BaseModel):
    analysis: str


# ============== Blog ==============

class PostResponse(CamelModel):
    id: int
    slug: str
    title: str
    excerpt: str
    content: str
    author: str
    image_url: Optional[str] = None
    status: PostStatusType
    date: str  # YYYY-MM-DD


class PostCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)
    excerpt: str = Field(..., min_length=1)
    author: Optional[str] = None
    slug: Optional[str] = None
    image_url: Optional[str] = None
    status: PostStatusType = PostStatusType.PUBLISHED


# ============== Problems ==============

class ProblemResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    category: str
    severity: str
    image: Optional[str] = None
    emoji: Optional[str] = None
    cause: List[str] = []
    follow_up: List[str] = []
    time_to_fix: Optional[str] = None
    difficulty: Optional[str] = None
    action: List[str] = []

    @field_validator("severity", mode="before")
    @classmethod
    def enum_value(cls, v):
        return getattr(v, "value", v)


# ============== Dashboard ==============

class DashboardStats(CamelModel):
    total_revenue: float
    new_orders: int
    inventory_value: float
    new_customers: int


class PreferenceResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    dashboard_layout: Dict[str, Any]


class PreferenceUpdate(CamelModel):
    dashboard_layout: Dict[str, Any]


class NotificationResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    message: str
    read: bool
    created_at: datetime


class NotificationReadRequest(CamelModel):
    notification_id: int


# ============== Financials & Reports ==============

class TransactionSchema(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: int
    mpesa_receipt: str
    amount: float
    phone_number: Optional[str] = None
    transaction_date: datetime


class ChartPoint(BaseModel):
    date: str
    revenue: float


class FinancialsResponse(CamelModel):
    transactions: List[TransactionSchema]
    total_revenue: float
    chart_data: List[ChartPoint]


class ReportTransaction(CamelModel):
    date: str
    mpesa_receipt: str
    order_id: int
    amount: float


class FinancialReport(CamelModel):
    period: str
    total_revenue: float
    transactions: List[ReportTransaction]


class InventoryReportRow(CamelModel):
    id: int
    name: str
    category: str
    price: float
    stock_quantity: int
    in_stock: bool


class SeedResponse(CamelModel):
    success: bool
    categories_added: int
    products_added: int
    problems_added: int

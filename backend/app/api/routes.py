from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_admin_user, get_current_user, get_optional_user, http_error
from app.models import get_db, create_tables, PostStatus, User, UserRole
from app.schemas import (
    ProductResponse, ProductCreate, StockUpdateRequest,
    QuoteRequest, QuoteResponse,
    OrderCreate, OrderResponse,
    PostResponse, PostCreate,
    ProblemResponse,
    SeedResponse
)
from app.services import (
    BlogService, CatalogService, OrderService, ProblemService,
    QuoteService, SeedService, ServiceError
)
from app.services.catalog import to_product_response
from app.services.orders import to_order_response
from app.services.blog import to_post_response

router = APIRouter()


# ============== Health & Init ==============

@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}


@router.post("/init-db")
def initialize_database():
    """Initialize database tables."""
    try:
        create_tables()
        return {"success": True, "message": "Database tables created"}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/seed", response_model=SeedResponse)
def seed_database(
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """
    Seed the default category, produce catalog and farm doctor problems.
    Safe to call repeatedly.
    """
    result = SeedService(db).seed_all()
    return SeedResponse(success=True, **result)


# ============== Products ==============

@router.get("/products", response_model=List[ProductResponse])
def list_products(db: Session = Depends(get_db)):
    """All products, alphabetically, in storefront card shape."""
    return [to_product_response(p) for p in CatalogService(db).list_products()]


@router.post("/products", response_model=ProductResponse, status_code=201)
def create_product(
    product: ProductCreate,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Add a product. Missing unit/category fall back to the store defaults."""
    created = CatalogService(db).create_product(
        name=product.name,
        price=product.price,
        stock_quantity=product.stock_quantity,
        unit=product.unit,
        category=product.category,
        description=product.description,
        image=product.image
    )
    return to_product_response(created)


@router.patch("/products/{product_id}/stock", response_model=ProductResponse)
def update_product_stock(
    product_id: int,
    update: StockUpdateRequest,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Set the stock level after a harvest or stock take."""
    try:
        product = CatalogService(db).update_stock(product_id, update.stock_quantity)
    except ServiceError as e:
        raise http_error(e)
    return to_product_response(product)


@router.get("/inventory/low-stock", response_model=List[ProductResponse])
def get_low_stock(
    threshold: Optional[int] = Query(default=None, ge=1),
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Products below the low-stock threshold, lowest first."""
    return [to_product_response(p) for p in CatalogService(db).get_low_stock(threshold)]


# ============== Quotes ==============

@router.post("/quote", response_model=QuoteResponse, status_code=201)
def request_quote(request: QuoteRequest, db: Session = Depends(get_db)):
    """
    Price a cart and record the quote request.

    Tax is estimated at the configured VAT rate.
    """
    try:
        return QuoteService(db).create_quote(
            name=request.name,
            email=request.email,
            items=request.items,
            message=request.message
        )
    except ServiceError as e:
        raise http_error(e)


# ============== Orders ==============

@router.post("/orders", response_model=OrderResponse, status_code=201)
def create_order(
    request: OrderCreate,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Create a PENDING order ready for M-Pesa checkout."""
    service = OrderService(db)
    try:
        order = service.create_order(request.items, user=user, phone_number=request.phone_number)
    except ServiceError as e:
        raise http_error(e)
    return to_order_response(service.get_order(order.id, user))


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    try:
        order = OrderService(db).get_order(order_id, user)
    except ServiceError as e:
        raise http_error(e)
    return to_order_response(order)


# ============== Blog ==============

@router.get("/posts", response_model=List[PostResponse])
def list_posts(db: Session = Depends(get_db)):
    """Published posts, newest first."""
    return [to_post_response(p) for p in BlogService(db).list_posts()]


@router.get("/posts/{slug}", response_model=PostResponse)
def get_post(
    slug: str,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """A published post. Admins can also preview drafts."""
    is_admin = user is not None and user.role == UserRole.ADMIN
    try:
        post = BlogService(db).get_post(slug, include_drafts=is_admin)
    except ServiceError as e:
        raise http_error(e)
    return to_post_response(post)


@router.post("/posts", response_model=PostResponse, status_code=201)
def create_post(
    post: PostCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Publish (or draft) a post. The slug is derived from the title when blank."""
    try:
        created = BlogService(db).create_post(
            title=post.title,
            content=post.content,
            excerpt=post.excerpt,
            author=post.author,
            slug=post.slug,
            image_url=post.image_url,
            status=PostStatus(post.status.value),
            user=user
        )
    except ServiceError as e:
        raise http_error(e)
    return to_post_response(created)


# ============== Farm Doctor Problems ==============

@router.get("/problems", response_model=List[ProblemResponse])
def list_problems(
    category: Optional[str] = Query(default=None, description="watering, nutrients, soil or disease"),
    db: Session = Depends(get_db)
):
    return ProblemService(db).list_problems(category)

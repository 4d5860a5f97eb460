"""FastAPI application entrypoint and HTTP controllers.

Controllers are intentionally thin: FastAPI validates path, query and
body input against `company_api.schemas` before a handler runs, handlers
delegate to services, and failures are translated to HTTP in
`company_api.errors`.

Endpoints implemented:
- GET /health
- GET /api/products (optional ?name= filter)
- GET /api/products/low-stock
- GET/PUT/DELETE /api/products/{product_id}
- POST /api/products
- GET /api/users, POST /api/users
- GET/PUT/DELETE /api/users/{user_id}
"""

import json
import logging
import time
import uuid
from typing import Annotated, List, Optional

from fastapi import Depends, FastAPI, Path, Query, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from . import services
from .config import settings
from .database import create_db_and_tables, get_session
from .errors import register_exception_handlers
from .schemas import ErrorOut, ProductIn, ProductOut, UserIn, UserOut

logger = logging.getLogger("company_api.api")
if not logging.getLogger().handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(
    title="Company API",
    version="1.0.0",
    description="Product and user management service with a layered controller/service/repository design",
    license_info={"name": "MIT License", "url": "https://opensource.org/licenses/MIT"},
    openapi_tags=[
        {"name": "Products", "description": "Product management endpoints"},
        {"name": "Users", "description": "User management endpoints"},
        {"name": "Health", "description": "Liveness probe"},
    ],
)
register_exception_handlers(app)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()

# Identifiers are stored as signed 64-bit integers.
EntityId = Annotated[int, Path(ge=-(2**63), le=2**63 - 1)]

ERROR_RESPONSES = {
    400: {"model": ErrorOut, "description": "Validation failed"},
    404: {"model": ErrorOut, "description": "Resource not found"},
}


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    fields = {"request_id": req_id, "method": request.method, "path": request.url.path}
    response = await call_next(request)
    response.headers["X-Request-ID"] = req_id
    if request.url.path.startswith("/api"):
        fields["status_code"] = response.status_code
        fields["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
        logger.info("request_done %s", json.dumps(fields, ensure_ascii=True))
    return response


def get_product_service(db: Session = Depends(get_session)) -> services.ProductService:
    return services.ProductService(db)


def get_user_service(db: Session = Depends(get_session)) -> services.UserService:
    return services.UserService(db)


@app.get("/health", tags=["Health"])
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


@app.get("/api/products", response_model=List[ProductOut], tags=["Products"])
def list_products(
    name: Optional[str] = Query(None, description="Case-insensitive substring of the product name"),
    svc: services.ProductService = Depends(get_product_service),
):
    """List all products, or only those whose name contains `name`."""
    if name:
        return svc.search_products(name)
    return svc.list_products()


@app.get("/api/products/low-stock", response_model=List[ProductOut], tags=["Products"])
def list_low_stock(
    threshold: int = Query(10, ge=0),
    svc: services.ProductService = Depends(get_product_service),
):
    """List products with `stockQuantity` at or below `threshold`."""
    return svc.list_low_stock(threshold)


@app.get("/api/products/{product_id}", response_model=ProductOut, responses=ERROR_RESPONSES, tags=["Products"])
def get_product(product_id: EntityId, svc: services.ProductService = Depends(get_product_service)):
    return svc.get_product(product_id)


@app.post(
    "/api/products",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Products"],
)
def create_product(payload: ProductIn, svc: services.ProductService = Depends(get_product_service)):
    """Create a product. The identifier is assigned by the database."""
    return svc.create_product(payload)


@app.put("/api/products/{product_id}", response_model=ProductOut, responses=ERROR_RESPONSES, tags=["Products"])
def update_product(
    payload: ProductIn,
    product_id: EntityId,
    svc: services.ProductService = Depends(get_product_service),
):
    """Replace every field of an existing product except its id."""
    return svc.update_product(product_id, payload)


@app.delete(
    "/api/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    tags=["Products"],
)
def delete_product(product_id: EntityId, svc: services.ProductService = Depends(get_product_service)):
    svc.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/api/users", response_model=List[UserOut], tags=["Users"])
def list_users(svc: services.UserService = Depends(get_user_service)):
    return svc.list_users()


@app.get("/api/users/{user_id}", response_model=UserOut, responses=ERROR_RESPONSES, tags=["Users"])
def get_user(user_id: EntityId, svc: services.UserService = Depends(get_user_service)):
    return svc.get_user(user_id)


@app.post(
    "/api/users",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Users"],
)
def create_user(payload: UserIn, svc: services.UserService = Depends(get_user_service)):
    """Register a user. Fails with 400 when the email is already taken."""
    return svc.create_user(payload)


@app.put("/api/users/{user_id}", response_model=UserOut, responses=ERROR_RESPONSES, tags=["Users"])
def update_user(
    payload: UserIn,
    user_id: EntityId,
    svc: services.UserService = Depends(get_user_service),
):
    return svc.update_user(user_id, payload)


@app.delete(
    "/api/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    tags=["Users"],
)
def delete_user(user_id: EntityId, svc: services.UserService = Depends(get_user_service)):
    svc.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

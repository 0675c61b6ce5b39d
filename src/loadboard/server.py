"""
Loadboard FastAPI Server

HTTP surface over the load management services, for the marketplace
front-end (drivers, shippers, admins).

USAGE:
    Local: loadboard serve (runs on http://localhost:8000)
    Docs: http://localhost:8000/docs (Swagger UI)

The acting identity is always an explicit field of the request.
"""

import logging
from datetime import datetime
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import settings
from .db import get_repository
from .exceptions import (
    AuthError,
    Conflict,
    DuplicateKey,
    ErrorCode,
    Forbidden,
    LoadboardError,
    NotFound,
    PersistenceError,
    ValidationError,
)
from .models import (
    AdminStats,
    AuthSession,
    AuthUser,
    AvailableDriver,
    DriverDetails,
    DriverStats,
    LoadDraft,
    LoadWithOwner,
    Load,
    Profile,
    SubDriver,
    SubDriverDraft,
    Truck,
    TruckDraft,
    UserRole,
    VehicleSpec,
)
from .routing import get_routing_client
from .services import AccountService, Services, build_services

logger = logging.getLogger(__name__)


# =============================================================================
# API Models (Request/Response Schemas)
# =============================================================================

class CreateProfileRequest(BaseModel):
    """Request to create the profile of a verified identity"""
    id: str = Field(..., min_length=1, description="User id issued by the identity provider")
    full_name: str
    role: UserRole
    phone: str
    country_code: Optional[str] = None
    email: Optional[str] = None


class PostLoadRequest(LoadDraft):
    """Request to post a load"""
    shipper_id: str = Field(..., min_length=1)


class DriverActionRequest(BaseModel):
    """Accept / complete a load"""
    driver_id: str = Field(..., min_length=1)


class CancelRequest(BaseModel):
    """Release a load back to the marketplace"""
    actor_id: str = Field(..., min_length=1, description="Owner, assigned driver or admin")


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    metadata: dict = Field(default_factory=dict)


class VerifySignupRequest(BaseModel):
    """Emailed code plus the profile to create"""
    email: str = Field(..., min_length=3)
    code: str = Field(..., min_length=1)
    full_name: str
    role: UserRole
    phone: str


class SignupResponse(BaseModel):
    user: AuthUser
    profile: Profile


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    session: AuthSession
    profile: Profile


class PasswordResetRequest(BaseModel):
    email: str = Field(..., min_length=3)


class PhoneCodeRequest(BaseModel):
    phone: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    timestamp: str
    database_connected: bool


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Loadboard API",
    description=(
        "Load management service for a logistics marketplace\n\n"
        "- Profiles of drivers, shippers and admins\n"
        "- Driver vehicle registration\n"
        "- Load posting, acceptance, release and completion\n"
        "- Dashboard statistics"
    ),
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


@lru_cache
def get_services() -> Services:
    """Services bound to the cached repository."""
    return build_services(get_repository(), get_routing_client())


def get_accounts(services: Services = Depends(get_services)) -> AccountService:
    if services.accounts is None:
        raise AuthError("Identity provider is not configured (AUTH_BASE_URL / AUTH_API_KEY)")
    return services.accounts


# =============================================================================
# Error Handling
# =============================================================================

STATUS_BY_ERROR = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFound: status.HTTP_404_NOT_FOUND,
    DuplicateKey: status.HTTP_409_CONFLICT,
    Conflict: status.HTTP_409_CONFLICT,
    PersistenceError: status.HTTP_503_SERVICE_UNAVAILABLE,
    Forbidden: status.HTTP_403_FORBIDDEN,
    AuthError: status.HTTP_401_UNAUTHORIZED,
}


def _status_for(exc: LoadboardError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(LoadboardError)
async def loadboard_error_handler(request: Request, exc: LoadboardError) -> JSONResponse:
    """Render every Loadboard error in one envelope."""
    code = _status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=code, content={"success": False, **exc.to_dict()})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Same envelope as ValidationError for malformed request bodies."""
    details = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field = ".".join(str(part) for part in loc if part != "body") if loc else "unknown"
        details.append({"field": field, "message": error.get("msg", "Invalid value")})

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "message": "Validation error. Please check your input.",
            "error": {"code": ErrorCode.VALIDATION_ERROR, "details": details},
        },
    )


# =============================================================================
# Health & Status Endpoints
# =============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
def health_check(services: Services = Depends(get_services)):
    """Health check for monitoring and load balancers."""
    db_connected = services.repository.ping()
    return HealthResponse(
        status="healthy" if db_connected else "degraded",
        version=settings.APP_VERSION,
        timestamp=datetime.utcnow().isoformat(),
        database_connected=db_connected,
    )


# =============================================================================
# Account Endpoints
# =============================================================================
# Only calls that carry everything in the request. Session-bound calls
# (current user, sign-out, admin login) stay with front-end clients.

@app.post("/v1/auth/signup", response_model=AuthUser, status_code=201, tags=["Accounts"])
def signup(request: SignupRequest, accounts: AccountService = Depends(get_accounts)):
    """Start signup; the identity provider emails a one-time code."""
    return accounts.request_signup(request.email, request.password, request.metadata)


@app.post("/v1/auth/verify", response_model=SignupResponse, status_code=201, tags=["Accounts"])
def verify_signup(request: VerifySignupRequest, accounts: AccountService = Depends(get_accounts)):
    user, profile = accounts.complete_signup(
        email=request.email,
        code=request.code,
        full_name=request.full_name,
        role=request.role,
        phone=request.phone,
    )
    return SignupResponse(user=user, profile=profile)


@app.post("/v1/auth/login", response_model=LoginResponse, tags=["Accounts"])
def login(request: LoginRequest, accounts: AccountService = Depends(get_accounts)):
    session, profile = accounts.login(request.email, request.password)
    return LoginResponse(session=session, profile=profile)


@app.post("/v1/auth/recover", response_model=MessageResponse, status_code=202, tags=["Accounts"])
def forgot_password(request: PasswordResetRequest, accounts: AccountService = Depends(get_accounts)):
    accounts.forgot_password(request.email)
    return MessageResponse(message="Password recovery email sent")


@app.post("/v1/auth/phone-code", response_model=MessageResponse, status_code=202, tags=["Accounts"])
def phone_code(request: PhoneCodeRequest, accounts: AccountService = Depends(get_accounts)):
    accounts.request_phone_code(request.phone)
    return MessageResponse(message="Login code sent")


# =============================================================================
# Profile Endpoints
# =============================================================================

@app.post("/v1/profiles", response_model=Profile, status_code=201, tags=["Profiles"])
def create_profile(request: CreateProfileRequest, services: Services = Depends(get_services)):
    return services.profiles.create_profile(
        profile_id=request.id,
        full_name=request.full_name,
        role=request.role,
        phone=request.phone,
        country_code=request.country_code,
        email=request.email,
    )


@app.get("/v1/profiles/{profile_id}", response_model=Profile, tags=["Profiles"])
def get_profile(profile_id: str, services: Services = Depends(get_services)):
    return services.profiles.get_profile(profile_id)


# =============================================================================
# Driver Fleet Endpoints
# =============================================================================

@app.get("/v1/drivers", response_model=List[AvailableDriver], tags=["Drivers"])
def list_drivers(services: Services = Depends(get_services)):
    """All drivers; those without vehicle details have `details: null`."""
    return services.fleet.list_available_drivers()


@app.put("/v1/drivers/{driver_id}/details", response_model=DriverDetails, tags=["Drivers"])
def save_driver_details(driver_id: str, spec: VehicleSpec, services: Services = Depends(get_services)):
    return services.fleet.upsert_driver_details(driver_id, spec)


@app.get("/v1/drivers/{driver_id}/details", response_model=Optional[DriverDetails], tags=["Drivers"])
def get_driver_details(driver_id: str, services: Services = Depends(get_services)):
    """Vehicle details, or null while the driver's setup is pending."""
    services.profiles.get_profile(driver_id)
    return services.fleet.find_driver_details(driver_id)


@app.post("/v1/drivers/{driver_id}/trucks", response_model=Truck, status_code=201, tags=["Drivers"])
def add_truck(driver_id: str, draft: TruckDraft, services: Services = Depends(get_services)):
    return services.fleet.add_truck(driver_id, draft)


@app.get("/v1/drivers/{driver_id}/trucks", response_model=List[Truck], tags=["Drivers"])
def list_trucks(driver_id: str, services: Services = Depends(get_services)):
    return services.fleet.list_trucks(driver_id)


@app.post("/v1/drivers/{driver_id}/sub-drivers", response_model=SubDriver, status_code=201, tags=["Drivers"])
def add_sub_driver(driver_id: str, draft: SubDriverDraft, services: Services = Depends(get_services)):
    return services.fleet.add_sub_driver(driver_id, draft)


@app.get("/v1/drivers/{driver_id}/sub-drivers", response_model=List[SubDriver], tags=["Drivers"])
def list_sub_drivers(driver_id: str, services: Services = Depends(get_services)):
    return services.fleet.list_sub_drivers(driver_id)


@app.get("/v1/drivers/{driver_id}/history", response_model=List[LoadWithOwner], tags=["Drivers"])
def driver_history(driver_id: str, services: Services = Depends(get_services)):
    return services.loads.get_driver_history(driver_id)


@app.get("/v1/drivers/{driver_id}/stats", response_model=DriverStats, tags=["Stats"])
def driver_stats(driver_id: str, services: Services = Depends(get_services)):
    return services.stats.get_driver_stats(driver_id)


# =============================================================================
# Load Endpoints
# =============================================================================

@app.post("/v1/loads", response_model=Load, status_code=201, tags=["Loads"])
def post_load(request: PostLoadRequest, services: Services = Depends(get_services)):
    draft = LoadDraft.model_validate(request.model_dump(exclude={"shipper_id"}))
    return services.loads.post_load(request.shipper_id, draft)


@app.get("/v1/loads", response_model=List[LoadWithOwner], tags=["Loads"])
def list_loads(
    limit: Optional[int] = Query(default=None, ge=1, le=500, description="Max loads to return"),
    services: Services = Depends(get_services),
):
    """Available loads, newest first."""
    return services.loads.get_loads(limit=limit)


@app.get("/v1/loads/{load_id}", response_model=LoadWithOwner, tags=["Loads"])
def get_load(load_id: str, services: Services = Depends(get_services)):
    return services.loads.get_load_by_id(load_id)


@app.post("/v1/loads/{load_id}/accept", response_model=LoadWithOwner, tags=["Loads"])
def accept_load(load_id: str, request: DriverActionRequest, services: Services = Depends(get_services)):
    return services.loads.accept_load(load_id, request.driver_id)


@app.post("/v1/loads/{load_id}/cancel", response_model=LoadWithOwner, tags=["Loads"])
def cancel_load(load_id: str, request: CancelRequest, services: Services = Depends(get_services)):
    return services.loads.cancel_load(load_id, request.actor_id)


@app.post("/v1/loads/{load_id}/complete", response_model=LoadWithOwner, tags=["Loads"])
def complete_load(load_id: str, request: DriverActionRequest, services: Services = Depends(get_services)):
    return services.loads.complete_load(load_id, request.driver_id)


@app.get("/v1/shippers/{shipper_id}/loads", response_model=List[LoadWithOwner], tags=["Loads"])
def shipper_loads(shipper_id: str, services: Services = Depends(get_services)):
    return services.loads.get_shipper_loads(shipper_id)


# =============================================================================
# Statistics Endpoints
# =============================================================================

@app.get("/v1/stats/admin", response_model=AdminStats, tags=["Stats"])
def admin_stats(services: Services = Depends(get_services)):
    return services.stats.get_admin_stats()


# =============================================================================
# Server Lifecycle
# =============================================================================

@app.on_event("startup")
async def startup_event():
    """Initialize services on startup"""
    logger.info("%s API v%s starting", settings.APP_NAME, settings.APP_VERSION)


# =============================================================================
# Main Entry Point (for direct execution)
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "loadboard.server:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
        log_level="info",
    )

"""API routes for Property Portfolio."""

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Request, Response, status

from property_portfolio.api.dependencies import (
    CurrentUser,
    Services,
    Writer,
    session_token,
)
from property_portfolio.api.schemas import (
    ChangePasswordRequest,
    CompanyCreate,
    CompanyRelationCreate,
    CompanyRelationResponse,
    CompanyRelationsResponse,
    CompanyRelationUpdate,
    CompanyResponse,
    CompanyUpdate,
    DashboardStatsResponse,
    HealthResponse,
    InvitationAccept,
    InvitationAcceptedResponse,
    InvitationCreate,
    InvitationCreatedResponse,
    InvitationResponse,
    LeaseCreate,
    LeaseResponse,
    LeaseStatsResponse,
    LeaseTenantCreate,
    LeaseTenantResponse,
    LeaseTenantUpdate,
    LeaseUpdate,
    LoginRequest,
    PreferencesUpdate,
    ProfileUpdate,
    PropertyCreate,
    PropertyResponse,
    PropertyUpdate,
    SessionResponse,
    SetupNeededResponse,
    SetupRequest,
    SuccessResponse,
    TenantCreate,
    TenantResponse,
    TenantUpdate,
    UserResponse,
    UserUpdate,
)
from property_portfolio.config import get_settings
from property_portfolio.domain.companies import Company, CompanyRelation
from property_portfolio.domain.leases import Lease, Tenant
from property_portfolio.domain.properties import Property
from property_portfolio.domain.users import Invitation, User
from property_portfolio.services.portfolio_stats import PortfolioStats
from property_portfolio.services.redaction import anonymize_tenant
from property_portfolio.services.tenancy import TenancyView

# Create routers
health_router = APIRouter(tags=["health"])
setup_router = APIRouter(prefix="/api/setup", tags=["setup"])
auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
profile_router = APIRouter(prefix="/api/user", tags=["user"])
users_router = APIRouter(prefix="/api/users", tags=["users"])
company_router = APIRouter(prefix="/api/companies", tags=["companies"])
relation_router = APIRouter(prefix="/api/company-relations", tags=["companies"])
property_router = APIRouter(prefix="/api/properties", tags=["properties"])
lease_router = APIRouter(prefix="/api/leases", tags=["leases"])
tenant_router = APIRouter(prefix="/api/tenants", tags=["tenants"])
lease_tenant_router = APIRouter(prefix="/api", tags=["lease-tenants"])
dashboard_router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


# Helper functions
def _money(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def _set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def _user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        organization_id=user.organization_id,
        assigned_company_id=user.assigned_company_id,
        dashboard_view_mode=user.dashboard_view_mode,
        created_at=user.created_at,
    )


def _invitation_to_response(invitation: Invitation) -> InvitationResponse:
    return InvitationResponse(
        id=invitation.id,
        email=invitation.email,
        token=invitation.token,
        organization_id=invitation.organization_id,
        invited_by=invitation.invited_by,
        role=invitation.role,
        assigned_company_id=invitation.assigned_company_id,
        expires_at=invitation.expires_at,
        created_at=invitation.created_at,
    )


def _company_to_response(company: Company) -> CompanyResponse:
    return CompanyResponse(
        id=company.id,
        name=company.name,
        cvr_number=company.cvr_number,
        organization_id=company.organization_id,
        created_at=company.created_at,
    )


def _relation_to_response(relation: CompanyRelation) -> CompanyRelationResponse:
    return CompanyRelationResponse(
        id=relation.id,
        parent_company_id=relation.parent_company_id,
        child_company_id=relation.child_company_id,
        ownership_percentage=str(relation.ownership_percentage),
        created_at=relation.created_at,
    )


def _property_to_response(prop: Property) -> PropertyResponse:
    return PropertyResponse(
        id=prop.id,
        name=prop.name,
        address=prop.address,
        postal_code=prop.postal_code,
        city=prop.city,
        acquisition_price=str(prop.acquisition_price),
        acquisition_date=prop.acquisition_date,
        property_type=prop.property_type,
        share_numerator=prop.share_numerator,
        share_denominator=prop.share_denominator,
        owner_company_id=prop.owner_company_id,
        organization_id=prop.organization_id,
        created_at=prop.created_at,
    )


def _lease_to_response(lease: Lease, prop: Property | None = None) -> LeaseResponse:
    return LeaseResponse(
        id=lease.id,
        property_id=lease.property_id,
        name=lease.name,
        lease_type=lease.lease_type,
        registered_area=lease.registered_area,
        total_area=lease.total_area,
        vat_registered=lease.vat_registered,
        max_rent_per_sqm=_money(lease.max_rent_per_sqm),
        yield_requirement_pct=_money(lease.yield_requirement_pct),
        organization_id=lease.organization_id,
        created_at=lease.created_at,
        property=_property_to_response(prop) if prop is not None else None,
    )


def _tenant_to_response(tenant: Tenant, viewer: User) -> TenantResponse:
    shown = anonymize_tenant(tenant, viewer)
    return TenantResponse(
        id=shown.id,
        internal_number=shown.internal_number,
        name=shown.name,
        tenant_type=shown.tenant_type,
        cvr_number=shown.cvr_number,
        contact_person=shown.contact_person,
        email=shown.email,
        invoice_email=shown.invoice_email,
        phone=shown.phone,
        notes=shown.notes,
        organization_id=shown.organization_id,
        created_at=shown.created_at,
    )


def _tenancy_to_response(
    view: TenancyView, viewer: User, tenant: Tenant | None = None
) -> LeaseTenantResponse:
    lt = view.lease_tenant
    return LeaseTenantResponse(
        id=lt.id,
        lease_id=lt.lease_id,
        tenant_id=lt.tenant_id,
        rent_amount=str(lt.rent_amount),
        advance_water=_money(lt.advance_water),
        advance_heating=_money(lt.advance_heating),
        advance_electricity=_money(lt.advance_electricity),
        advance_other=_money(lt.advance_other),
        period_start=lt.period_start,
        period_end=lt.period_end,
        deposit_type=lt.deposit_type,
        deposit_amount=_money(lt.deposit_amount),
        prepaid_type=lt.prepaid_type,
        prepaid_amount=_money(lt.prepaid_amount),
        regulation_type=lt.regulation_type,
        note=lt.note,
        status=view.status,
        organization_id=lt.organization_id,
        created_at=lt.created_at,
        tenant=_tenant_to_response(tenant, viewer) if tenant is not None else None,
    )


def _tenancies_to_response(
    views: list[TenancyView], viewer: User, services: Services
) -> list[LeaseTenantResponse]:
    tenants = {t.id: t for t in services.tenant_service.list(viewer.organization_id)}
    return [
        _tenancy_to_response(view, viewer, tenants.get(view.lease_tenant.tenant_id))
        for view in views
    ]


def _stats_to_response(stats: PortfolioStats) -> DashboardStatsResponse:
    return DashboardStatsResponse(
        mode=stats.mode,
        count=float(stats.count),
        total_value=str(stats.total_value),
        latest_property=(
            _property_to_response(stats.latest_property)
            if stats.latest_property is not None
            else None
        ),
        lease_stats=LeaseStatsResponse(
            count=float(stats.lease_count),
            total_rent_capacity=str(stats.total_rent_capacity),
        ),
    )


# Health endpoints
@health_router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy")


# Setup endpoints
@setup_router.get("/needed", response_model=SetupNeededResponse)
def setup_needed() -> SetupNeededResponse:
    """Any visitor may create a new organization."""
    return SetupNeededResponse(needed=True)


@setup_router.post(
    "", response_model=SessionResponse, status_code=status.HTTP_201_CREATED
)
def setup(
    payload: SetupRequest, response: Response, services: Services
) -> SessionResponse:
    """Create an organization with its first administrator and sign them in."""
    user = services.auth_service.setup_organization(
        organization_name=payload.organization_name,
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    token = services.auth_service.create_session(user)
    _set_session_cookie(response, token)
    return SessionResponse(token=token)


# Auth endpoints
@auth_router.post("/login", response_model=SessionResponse)
def login(
    payload: LoginRequest, response: Response, services: Services
) -> SessionResponse:
    user = services.auth_service.authenticate(payload.email, payload.password)
    token = services.auth_service.create_session(user)
    _set_session_cookie(response, token)
    return SessionResponse(token=token)


@auth_router.post("/logout", response_model=SuccessResponse)
def logout(request: Request, response: Response, services: Services) -> SuccessResponse:
    services.auth_service.logout(session_token(request))
    response.delete_cookie(get_settings().session_cookie_name)
    return SuccessResponse()


@auth_router.get("/me", response_model=UserResponse)
def me(user: CurrentUser) -> UserResponse:
    return _user_to_response(user)


# Own profile endpoints
@profile_router.put("/preferences", response_model=UserResponse)
def update_preferences(
    payload: PreferencesUpdate, user: CurrentUser, services: Services
) -> UserResponse:
    updated = services.auth_service.update_preferences(user, payload.dashboard_view_mode)
    return _user_to_response(updated)


@profile_router.put("/profile", response_model=UserResponse)
def update_profile(
    payload: ProfileUpdate, user: CurrentUser, services: Services
) -> UserResponse:
    updated = services.auth_service.update_profile(
        user, name=payload.name, email=payload.email
    )
    return _user_to_response(updated)


@profile_router.post("/change-password", response_model=SuccessResponse)
def change_password(
    payload: ChangePasswordRequest, user: CurrentUser, services: Services
) -> SuccessResponse:
    services.auth_service.change_password(
        user, payload.current_password, payload.new_password
    )
    return SuccessResponse()


# User administration endpoints
@users_router.get("", response_model=list[UserResponse])
def list_users(user: CurrentUser, services: Services) -> list[UserResponse]:
    return [_user_to_response(u) for u in services.user_admin_service.list_users(user)]


@users_router.post(
    "/invite",
    response_model=InvitationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def invite_user(
    payload: InvitationCreate, request: Request, user: Writer, services: Services
) -> InvitationCreatedResponse:
    invitation = services.user_admin_service.create_invitation(
        user,
        email=payload.email,
        role=payload.role,
        assigned_company_id=payload.assigned_company_id,
    )
    base_url = str(request.base_url).rstrip("/")
    return InvitationCreatedResponse(
        invitation=_invitation_to_response(invitation),
        invitation_link=f"{base_url}/invitation/{invitation.token}",
    )


@users_router.get("/invitations", response_model=list[InvitationResponse])
def list_invitations(user: CurrentUser, services: Services) -> list[InvitationResponse]:
    return [
        _invitation_to_response(invitation)
        for invitation in services.user_admin_service.list_invitations(user)
    ]


@users_router.delete("/invitations/{invitation_id}", response_model=SuccessResponse)
def delete_invitation(
    invitation_id: UUID, user: CurrentUser, services: Services
) -> SuccessResponse:
    services.user_admin_service.delete_invitation(user, invitation_id)
    return SuccessResponse()


@users_router.get("/invitation/verify/{token}", response_model=InvitationResponse)
def verify_invitation(token: str, services: Services) -> InvitationResponse:
    return _invitation_to_response(services.user_admin_service.verify_invitation(token))


@users_router.post(
    "/invitation/accept",
    response_model=InvitationAcceptedResponse,
    status_code=status.HTTP_201_CREATED,
)
def accept_invitation(
    payload: InvitationAccept, services: Services
) -> InvitationAcceptedResponse:
    user = services.user_admin_service.accept_invitation(
        payload.token or "", payload.name or "", payload.password or ""
    )
    return InvitationAcceptedResponse(
        message="Konto oprettet", user=_user_to_response(user)
    )


@users_router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: UUID, payload: UserUpdate, user: CurrentUser, services: Services
) -> UserResponse:
    updated = services.user_admin_service.update_user(
        user,
        user_id,
        role=payload.role,
        assigned_company_id=payload.assigned_company_id,
    )
    return _user_to_response(updated)


@users_router.delete("/{user_id}", response_model=SuccessResponse)
def delete_user(user_id: UUID, user: CurrentUser, services: Services) -> SuccessResponse:
    services.user_admin_service.delete_user(user, user_id)
    return SuccessResponse()


# Company endpoints
@company_router.get("", response_model=list[CompanyResponse])
def list_companies(user: CurrentUser, services: Services) -> list[CompanyResponse]:
    companies = services.company_service.list_companies(user.organization_id)
    return [_company_to_response(c) for c in companies]


@company_router.post(
    "", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED
)
def create_company(
    payload: CompanyCreate, user: Writer, services: Services
) -> CompanyResponse:
    company = services.company_service.create_company(
        user.organization_id, name=payload.name, cvr_number=payload.cvr_number
    )
    return _company_to_response(company)


@company_router.get("/{company_id}", response_model=CompanyResponse)
def get_company(
    company_id: UUID, user: CurrentUser, services: Services
) -> CompanyResponse:
    company = services.company_service.get_company(user.organization_id, company_id)
    return _company_to_response(company)


@company_router.put("/{company_id}", response_model=CompanyResponse)
def update_company(
    company_id: UUID, payload: CompanyUpdate, user: Writer, services: Services
) -> CompanyResponse:
    company = services.company_service.update_company(
        user.organization_id, company_id, **payload.model_dump(exclude_unset=True)
    )
    return _company_to_response(company)


@company_router.delete("/{company_id}", response_model=SuccessResponse)
def delete_company(company_id: UUID, user: Writer, services: Services) -> SuccessResponse:
    services.company_service.delete_company(user.organization_id, company_id)
    return SuccessResponse()


@company_router.get("/{company_id}/parents", response_model=list[CompanyRelationResponse])
def company_parents(
    company_id: UUID, user: CurrentUser, services: Services
) -> list[CompanyRelationResponse]:
    relations = services.company_service.parent_relations(user.organization_id, company_id)
    return [_relation_to_response(r) for r in relations]


@company_router.get(
    "/{company_id}/children", response_model=list[CompanyRelationResponse]
)
def company_children(
    company_id: UUID, user: CurrentUser, services: Services
) -> list[CompanyRelationResponse]:
    relations = services.company_service.child_relations(user.organization_id, company_id)
    return [_relation_to_response(r) for r in relations]


@company_router.get("/{company_id}/relations", response_model=CompanyRelationsResponse)
def company_relations(
    company_id: UUID, user: CurrentUser, services: Services
) -> CompanyRelationsResponse:
    company_service = services.company_service
    return CompanyRelationsResponse(
        parents=[
            _relation_to_response(r)
            for r in company_service.parent_relations(user.organization_id, company_id)
        ],
        children=[
            _relation_to_response(r)
            for r in company_service.child_relations(user.organization_id, company_id)
        ],
    )


# Ownership relation endpoints
@relation_router.get("", response_model=list[CompanyRelationResponse])
def list_relations(
    user: CurrentUser, services: Services
) -> list[CompanyRelationResponse]:
    relations = services.company_service.list_relations(user.organization_id)
    return [_relation_to_response(r) for r in relations]


@relation_router.post(
    "", response_model=CompanyRelationResponse, status_code=status.HTTP_201_CREATED
)
def create_relation(
    payload: CompanyRelationCreate, user: Writer, services: Services
) -> CompanyRelationResponse:
    relation = services.company_service.create_relation(
        user.organization_id,
        payload.parent_company_id,
        payload.child_company_id,
        payload.ownership_percentage,
    )
    return _relation_to_response(relation)


@relation_router.put("/{relation_id}", response_model=CompanyRelationResponse)
def update_relation(
    relation_id: UUID,
    payload: CompanyRelationUpdate,
    user: Writer,
    services: Services,
) -> CompanyRelationResponse:
    relation = services.company_service.update_relation(
        user.organization_id, relation_id, payload.ownership_percentage
    )
    return _relation_to_response(relation)


@relation_router.delete("/{relation_id}", response_model=SuccessResponse)
def delete_relation(
    relation_id: UUID, user: Writer, services: Services
) -> SuccessResponse:
    services.company_service.delete_relation(user.organization_id, relation_id)
    return SuccessResponse()


# Property endpoints
@property_router.get("", response_model=list[PropertyResponse])
def list_properties(user: CurrentUser, services: Services) -> list[PropertyResponse]:
    return [_property_to_response(p) for p in services.property_service.list_for(user)]


@property_router.post(
    "", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED
)
def create_property(
    payload: PropertyCreate, user: Writer, services: Services
) -> PropertyResponse:
    prop = services.property_service.create(user, **payload.model_dump())
    return _property_to_response(prop)


@property_router.get("/{property_id}", response_model=PropertyResponse)
def get_property(
    property_id: UUID, user: CurrentUser, services: Services
) -> PropertyResponse:
    return _property_to_response(services.property_service.get_for(user, property_id))


@property_router.put("/{property_id}", response_model=PropertyResponse)
def update_property(
    property_id: UUID, payload: PropertyUpdate, user: Writer, services: Services
) -> PropertyResponse:
    prop = services.property_service.update(
        user, property_id, **payload.model_dump(exclude_unset=True)
    )
    return _property_to_response(prop)


@property_router.delete("/{property_id}", response_model=SuccessResponse)
def delete_property(
    property_id: UUID, user: Writer, services: Services
) -> SuccessResponse:
    services.property_service.delete(user, property_id)
    return SuccessResponse()


@property_router.get("/{property_id}/leases", response_model=list[LeaseResponse])
def property_leases(
    property_id: UUID, user: CurrentUser, services: Services
) -> list[LeaseResponse]:
    leases = services.property_service.leases_for(user, property_id)
    return [_lease_to_response(lease) for lease in leases]


# Lease endpoints
@lease_router.get("", response_model=list[LeaseResponse])
def list_leases(user: CurrentUser, services: Services) -> list[LeaseResponse]:
    properties = {p.id: p for p in services.property_service.list_for(user)}
    return [
        _lease_to_response(lease, properties.get(lease.property_id))
        for lease in services.lease_service.list_for(user)
    ]


@lease_router.post("", response_model=LeaseResponse, status_code=status.HTTP_201_CREATED)
def create_lease(payload: LeaseCreate, user: Writer, services: Services) -> LeaseResponse:
    lease = services.lease_service.create(user, **payload.model_dump())
    return _lease_to_response(lease)


@lease_router.get("/{lease_id}", response_model=LeaseResponse)
def get_lease(lease_id: UUID, user: CurrentUser, services: Services) -> LeaseResponse:
    lease = services.lease_service.get_for(user, lease_id)
    prop = services.property_service.get_for(user, lease.property_id)
    return _lease_to_response(lease, prop)


@lease_router.patch("/{lease_id}", response_model=LeaseResponse)
def update_lease(
    lease_id: UUID, payload: LeaseUpdate, user: Writer, services: Services
) -> LeaseResponse:
    lease = services.lease_service.update(
        user, lease_id, **payload.model_dump(exclude_unset=True)
    )
    return _lease_to_response(lease)


@lease_router.delete("/{lease_id}", response_model=SuccessResponse)
def delete_lease(lease_id: UUID, user: Writer, services: Services) -> SuccessResponse:
    services.lease_service.delete(user, lease_id)
    return SuccessResponse()


@lease_router.get("/{lease_id}/tenants", response_model=list[LeaseTenantResponse])
def lease_tenancies(
    lease_id: UUID, user: CurrentUser, services: Services
) -> list[LeaseTenantResponse]:
    views = services.lease_tenant_service.list_for_lease(user, lease_id)
    return _tenancies_to_response(views, user, services)


# Tenant endpoints
@tenant_router.get("", response_model=list[TenantResponse])
def list_tenants(user: CurrentUser, services: Services) -> list[TenantResponse]:
    tenants = services.tenant_service.list(user.organization_id)
    return [_tenant_to_response(t, user) for t in tenants]


@tenant_router.post("", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(payload: TenantCreate, user: Writer, services: Services) -> TenantResponse:
    tenant = services.tenant_service.create(user.organization_id, **payload.model_dump())
    return _tenant_to_response(tenant, user)


@tenant_router.get("/{tenant_id}", response_model=TenantResponse)
def get_tenant(tenant_id: UUID, user: CurrentUser, services: Services) -> TenantResponse:
    tenant = services.tenant_service.get(user.organization_id, tenant_id)
    return _tenant_to_response(tenant, user)


@tenant_router.put("/{tenant_id}", response_model=TenantResponse)
def update_tenant(
    tenant_id: UUID, payload: TenantUpdate, user: Writer, services: Services
) -> TenantResponse:
    tenant = services.tenant_service.update(
        user.organization_id, tenant_id, **payload.model_dump(exclude_unset=True)
    )
    return _tenant_to_response(tenant, user)


@tenant_router.delete("/{tenant_id}", response_model=SuccessResponse)
def delete_tenant(tenant_id: UUID, user: Writer, services: Services) -> SuccessResponse:
    services.tenant_service.delete(user.organization_id, tenant_id)
    return SuccessResponse()


# Lease tenancy endpoints
@lease_tenant_router.get("/all-lease-tenants", response_model=list[LeaseTenantResponse])
def list_all_tenancies(
    user: CurrentUser, services: Services
) -> list[LeaseTenantResponse]:
    """Tenancies on every lease the user can see."""
    views = services.lease_tenant_service.list_all(user)
    return _tenancies_to_response(views, user, services)


@lease_tenant_router.post(
    "/lease-tenants",
    response_model=LeaseTenantResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_tenancy(
    payload: LeaseTenantCreate, user: Writer, services: Services
) -> LeaseTenantResponse:
    service = services.lease_tenant_service
    lease_tenant = service.create(user, **payload.model_dump())
    return _tenancy_to_response(service.with_status([lease_tenant])[0], user)


@lease_tenant_router.patch(
    "/lease-tenants/{lease_tenant_id}", response_model=LeaseTenantResponse
)
def update_tenancy(
    lease_tenant_id: UUID,
    payload: LeaseTenantUpdate,
    user: Writer,
    services: Services,
) -> LeaseTenantResponse:
    service = services.lease_tenant_service
    lease_tenant = service.update(
        user, lease_tenant_id, **payload.model_dump(exclude_unset=True)
    )
    return _tenancy_to_response(service.with_status([lease_tenant])[0], user)


@lease_tenant_router.delete(
    "/lease-tenants/{lease_tenant_id}", response_model=SuccessResponse
)
def delete_tenancy(
    lease_tenant_id: UUID, user: Writer, services: Services
) -> SuccessResponse:
    services.lease_tenant_service.delete(user, lease_tenant_id)
    return SuccessResponse()


# Dashboard endpoints
@dashboard_router.get("/stats", response_model=DashboardStatsResponse)
def dashboard_stats(user: CurrentUser, services: Services) -> DashboardStatsResponse:
    """Total or ownership-weighted portfolio figures, depending on the user."""
    return _stats_to_response(services.stats_service.stats_for(user))


@dashboard_router.get("/recent", response_model=list[PropertyResponse])
def dashboard_recent(user: CurrentUser, services: Services) -> list[PropertyResponse]:
    return [
        _property_to_response(p) for p in services.stats_service.recent_properties(user)
    ]


__all__ = [
    "auth_router",
    "company_router",
    "dashboard_router",
    "health_router",
    "lease_router",
    "lease_tenant_router",
    "profile_router",
    "property_router",
    "relation_router",
    "setup_router",
    "tenant_router",
    "users_router",
]

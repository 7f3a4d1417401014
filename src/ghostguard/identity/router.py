"""Identity API router."""

from fastapi import APIRouter, Depends

from ghostguard.common.schemas import SuccessResponse
from ghostguard.common.security import require_admin_secret
from ghostguard.identity.schemas import (
    AddAdminRequest,
    AddAdminResponse,
    AdminListResponse,
    AdminLoginRequest,
    AdminLoginResponse,
    AdminProfile,
    CreateCustomerRequest,
    CreateCustomerResponse,
    CustomerView,
    LoginRequest,
    LoginResponse,
    OwnerRequest,
    PanelAdminView,
    RemoveAdminRequest,
    ToggleAdminRequest,
)

router = APIRouter()


def _get_service():
    from ghostguard.deps import get_account_service
    return get_account_service()


def _get_db():
    from ghostguard.deps import get_db
    return get_db()


@router.post("/api/login", response_model=LoginResponse)
async def login(body: LoginRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        customer = await svc.login(session, body.username, body.password)
        return LoginResponse(license_key=customer.license_key, token=customer.id)


@router.post("/admin/create-customer", response_model=CreateCustomerResponse)
async def create_customer(body: CreateCustomerRequest, _=Depends(require_admin_secret)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        customer = await svc.create_customer(
            session, body.username, body.password, body.license_key,
        )
        return CreateCustomerResponse(customer=CustomerView.model_validate(customer))


# ── Panel admins (owner token in body) ──

@router.post("/api/panel/admins/list", response_model=AdminListResponse)
async def list_admins(body: OwnerRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        admins = await svc.list_admins(session, body.token)
        return AdminListResponse(data=[PanelAdminView.model_validate(a) for a in admins])


@router.post("/api/panel/admins/add", response_model=AddAdminResponse)
async def add_admin(body: AddAdminRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        admin, invite_token = await svc.add_admin(
            session, body.token, body.name,
            steam=body.steam, discord=body.discord, role=body.role,
        )
        return AddAdminResponse(
            admin=PanelAdminView.model_validate(admin),
            invite_token=invite_token,
        )


@router.post("/api/panel/admins/remove", response_model=SuccessResponse)
async def remove_admin(body: RemoveAdminRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        await svc.remove_admin(session, body.token, body.id)
        return SuccessResponse()


@router.post("/api/panel/admins/toggle", response_model=SuccessResponse)
async def toggle_admin(body: ToggleAdminRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        await svc.set_admin_active(session, body.token, body.id, body.active)
        return SuccessResponse()


@router.post("/api/panel/admins/login", response_model=AdminLoginResponse)
async def admin_login(body: AdminLoginRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        identity = await svc.admin_login(session, body.token)
        return AdminLoginResponse(
            license_key=identity.license_key,
            admin=AdminProfile(
                id=identity.admin.id,
                name=identity.admin.name,
                role=identity.admin.role,
            ),
            token=body.token,
        )

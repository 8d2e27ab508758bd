"""User and authentication endpoints."""

from fastapi import APIRouter, Depends, Query

from shopdesk.api.deps import get_current_user, get_user_service, require_admin
from shopdesk.api.schemas import LoginRequest, UserCreateRequest, UserResponse
from shopdesk.domain.models import User
from shopdesk.services import UserCreate, UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/login", response_model=UserResponse)
def login(data: LoginRequest, service: UserService = Depends(get_user_service)):
    return UserResponse.model_validate(service.login(data.email, data.password))


@router.post("/logout", status_code=204)
def logout(
    service: UserService = Depends(get_user_service),
    user: User = Depends(get_current_user),
):
    service.logout(user.id, user.name, end_local_session=False)


@router.get("", response_model=list[UserResponse])
def list_users(
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    service: UserService = Depends(get_user_service),
    _: User = Depends(get_current_user),
):
    return [UserResponse.model_validate(u) for u in service.list_users(include_inactive)]


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
    _: User = Depends(get_current_user),
):
    return UserResponse.model_validate(service.get_user(user_id))


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    data: UserCreateRequest,
    service: UserService = Depends(get_user_service),
    admin: User = Depends(require_admin),
):
    created = service.add_user(
        UserCreate(
            name=data.name,
            email=data.email,
            password=data.password,
            permission_profile_id=data.permission_profile_id,
            phone=data.phone,
        ),
        actor=admin,
    )
    return UserResponse.model_validate(created)


@router.delete("/{user_id}", response_model=UserResponse)
def deactivate_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
    admin: User = Depends(require_admin),
):
    """Soft delete: the user is deactivated, never removed."""
    return UserResponse.model_validate(service.deactivate_user(user_id, admin))

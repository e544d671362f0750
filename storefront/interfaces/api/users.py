"""User API routes — signup, activation, session, profile, addresses, admin."""

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from sqlalchemy.orm import sessionmaker

from storefront.application.services import user_service
from storefront.application.services.action_log_service import LOGGED_IN, SIGNED_UP, log_user_action
from storefront.application.services.auth_service import (
    clear_session_cookie,
    create_session_token,
    set_session_cookie,
)
from storefront.domain.models.user import User
from storefront.domain.repositories.user_repository import UserRepository
from storefront.domain.schemas.user import (
    ActivationRequest,
    AddressUpsert,
    LoginRequest,
    MessageResponse,
    ResendActivationRequest,
    SessionResponse,
    SignupRequest,
    UpdateAvatarRequest,
    UpdatePasswordRequest,
    UpdateUserInfoRequest,
    UserListResponse,
    UserRead,
    UserResponse,
)
from storefront.infrastructure.image_host import ImageHost
from storefront.infrastructure.mailer import Mailer
from storefront.interfaces.api.deps import get_current_user, require_admin
from storefront.interfaces.deps import (
    get_action_log_session_factory,
    get_image_host,
    get_mailer,
    get_user_repository,
)

router = APIRouter(prefix="/user", tags=["User"])


def _start_session(user: User, response: Response) -> SessionResponse:
    token = create_session_token(user.id)
    set_session_cookie(response, token)
    return SessionResponse(user=UserRead.model_validate(user), token=token)


@router.post("/create-user", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: SignupRequest,
    background_tasks: BackgroundTasks,
    repo: UserRepository = Depends(get_user_repository),
    image_host: ImageHost = Depends(get_image_host),
    mailer: Mailer = Depends(get_mailer),
    session_factory: sessionmaker = Depends(get_action_log_session_factory),
):
    user = user_service.signup(repo, image_host, mailer, body)
    background_tasks.add_task(log_user_action, session_factory, user.id, SIGNED_UP)
    return MessageResponse(message=f"Please check your email: {user.email} to activate your account!")


@router.post("/resend-activation", response_model=MessageResponse)
def resend_activation(
    body: ResendActivationRequest,
    repo: UserRepository = Depends(get_user_repository),
    mailer: Mailer = Depends(get_mailer),
):
    user = user_service.resend_activation(repo, mailer, body.email)
    return MessageResponse(message=f"A new activation link was sent to {user.email}")


@router.post("/activation", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def activation(
    body: ActivationRequest,
    response: Response,
    repo: UserRepository = Depends(get_user_repository),
):
    user = user_service.activate(repo, body.activation_token)
    return _start_session(user, response)


@router.post("/login-user", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def login_user(
    body: LoginRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    repo: UserRepository = Depends(get_user_repository),
    session_factory: sessionmaker = Depends(get_action_log_session_factory),
):
    user = user_service.login(repo, body.email, body.password)
    background_tasks.add_task(log_user_action, session_factory, user.id, LOGGED_IN)
    return _start_session(user, response)


@router.get("/getuser", response_model=UserResponse)
def get_user(user: User = Depends(get_current_user)):
    return UserResponse(user=UserRead.model_validate(user))


@router.get("/logout", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def logout(response: Response):
    clear_session_cookie(response)
    return MessageResponse(message="Log out successful!")


@router.put("/update-user-info", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def update_user_info(
    body: UpdateUserInfoRequest,
    user: User = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repository),
):
    updated = user_service.update_user_info(repo, user, body)
    return UserResponse(user=UserRead.model_validate(updated))


@router.put("/update-avatar", response_model=UserResponse)
def update_avatar(
    body: UpdateAvatarRequest,
    user: User = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repository),
    image_host: ImageHost = Depends(get_image_host),
):
    updated = user_service.update_avatar(repo, image_host, user, body.avatar)
    return UserResponse(user=UserRead.model_validate(updated))


@router.put("/update-user-addresses", response_model=UserResponse)
def update_user_addresses(
    body: AddressUpsert,
    user: User = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repository),
):
    updated = user_service.upsert_address(repo, user, body)
    return UserResponse(user=UserRead.model_validate(updated))


@router.delete("/delete-user-address/{address_id}", response_model=UserResponse)
def delete_user_address(
    address_id: str,
    user: User = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repository),
):
    updated = user_service.delete_address(repo, user, address_id)
    return UserResponse(user=UserRead.model_validate(updated))


@router.put("/update-user-password", response_model=MessageResponse)
def update_user_password(
    body: UpdatePasswordRequest,
    user: User = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repository),
):
    user_service.change_password(repo, user, body)
    return MessageResponse(message="Password updated successfully!")


@router.get("/user-info/{user_id}", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def user_info(user_id: str, repo: UserRepository = Depends(get_user_repository)):
    user = user_service.get_user_info(repo, user_id)
    return UserResponse(user=UserRead.model_validate(user))


@router.get("/admin-all-users", response_model=UserListResponse, status_code=status.HTTP_201_CREATED)
def admin_all_users(
    admin: User = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repository),
):
    users = user_service.list_users(repo)
    return UserListResponse(users=[UserRead.model_validate(u) for u in users])


@router.delete("/delete-user/{user_id}", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repository),
    image_host: ImageHost = Depends(get_image_host),
):
    user_service.delete_user(repo, image_host, user_id)
    return MessageResponse(message="User deleted successfully!")

"""User service — account lifecycle, profile, address book and admin operations.

Accounts move from pending activation (``active=False``) to active through
an emailed activation link. Route handlers call these functions with the
repository and external clients injected by FastAPI.
"""

from typing import List

import structlog

from storefront.application.services import avatar_service
from storefront.application.services.auth_service import (
    create_activation_token,
    hash_password,
    verify_activation_token,
    verify_password,
)
from storefront.config import get_settings
from storefront.core.exceptions import (
    DuplicateUserException,
    EntityNotFoundException,
    InvalidCredentialsException,
    InvalidTokenException,
    OldPasswordIncorrectException,
    PasswordMismatchException,
    UpstreamFailureException,
    ValidationException,
)
from storefront.domain.models.user import Address, User
from storefront.domain.repositories.user_repository import UserRepository
from storefront.domain.schemas.user import (
    AddressUpsert,
    SignupRequest,
    UpdatePasswordRequest,
    UpdateUserInfoRequest,
)
from storefront.infrastructure.image_host import ImageHost
from storefront.infrastructure.mailer import Mailer

settings = get_settings()
logger = structlog.get_logger(__name__)


def send_activation_email(mailer: Mailer, user: User) -> None:
    token = create_activation_token(user.id)
    activation_url = f"{settings.FRONTEND_URL}/activation/{token}"
    mailer.send(
        email=user.email,
        subject="Activate your account",
        message=f"Hello {user.name}, please click on the link to activate your account: {activation_url}",
    )


def signup(repo: UserRepository, image_host: ImageHost, mailer: Mailer, body: SignupRequest) -> User:
    """Create an inactive account and email its activation link.

    The account is stored before the email goes out, so a mail failure leaves
    a pending account that can ask for a new link instead of no account at all.
    """
    if repo.get_by_email(body.email):
        logger.warning("Signup rejected: email already registered", email=body.email)
        raise DuplicateUserException()
    if not body.avatar:
        raise ValidationException("Avatar not provided")

    avatar = avatar_service.upload_avatar(image_host, body.avatar)
    user = User(
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
        avatar=avatar,
    )

    try:
        repo.create(user)
    except DuplicateUserException:
        avatar_service.discard_avatar(image_host, avatar)
        raise
    logger.info("User created", user_id=user.id, email=user.email)

    try:
        send_activation_email(mailer, user)
    except Exception as e:
        logger.warning("User created but activation email failed", user_id=user.id, error=str(e))

    return user


def resend_activation(repo: UserRepository, mailer: Mailer, email: str) -> User:
    user = repo.get_by_email(email)
    if not user:
        raise EntityNotFoundException("User not found")
    if user.active:
        raise ValidationException("Account is already activated")

    try:
        send_activation_email(mailer, user)
    except Exception as e:
        logger.error("Activation email resend failed", user_id=user.id, error=str(e))
        raise UpstreamFailureException("Could not send activation email")
    return user


def activate(repo: UserRepository, activation_token: str) -> User:
    user_id = verify_activation_token(activation_token)
    user = repo.get_by_id(user_id)
    if not user:
        raise InvalidTokenException()

    user.active = True
    repo.save(user)
    logger.info("User activated", user_id=user.id)
    return user


def login(repo: UserRepository, email: str | None, password: str | None) -> User:
    if not email or not password:
        raise ValidationException("Please provide all fields!")

    user = repo.get_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Login failed", email=email)
        raise InvalidCredentialsException()

    logger.info("Login successful", user_id=user.id)
    return user


def get_user_info(repo: UserRepository, user_id: str) -> User:
    user = repo.get_by_id(user_id)
    if not user:
        raise EntityNotFoundException("User not found")
    return user


def update_user_info(repo: UserRepository, user: User, body: UpdateUserInfoRequest) -> User:
    if not verify_password(body.password, user.password_hash):
        raise InvalidCredentialsException()

    if body.email != user.email:
        other = repo.get_by_email(body.email)
        if other and other.id != user.id:
            raise DuplicateUserException("Email is already in use")

    user.name = body.name
    user.email = body.email
    user.phone_number = body.phone_number
    return repo.save(user)


def update_avatar(repo: UserRepository, image_host: ImageHost, user: User, avatar: str) -> User:
    if not avatar:
        raise ValidationException("Avatar not provided")

    user.avatar = avatar_service.replace_avatar(image_host, user.avatar, avatar)
    repo.save(user)
    logger.info("Avatar updated", user_id=user.id, public_id=user.avatar.public_id)
    return user


def upsert_address(repo: UserRepository, user: User, body: AddressUpsert) -> User:
    """Add an address or replace one in place.

    A user holds at most one address per type: a body whose type is already
    taken is rejected unless it carries that same address's id.
    """
    same_type = user.find_address_by_type(body.address_type)
    if same_type and same_type.id != body.id:
        raise ValidationException(f"{body.address_type} address already exists")

    fields = body.model_dump(exclude={"id"})
    existing = user.find_address(body.id)
    if existing:
        position = next(i for i, a in enumerate(user.addresses) if a.id == existing.id)
        user.addresses[position] = Address(id=existing.id, **fields)
    else:
        user.addresses.append(Address(**fields))

    return repo.save(user)


def delete_address(repo: UserRepository, user: User, address_id: str) -> User:
    repo.pull_address(user.id, address_id)
    return repo.get_by_id(user.id) or user


def change_password(repo: UserRepository, user: User, body: UpdatePasswordRequest) -> None:
    if not verify_password(body.old_password, user.password_hash):
        raise OldPasswordIncorrectException()
    if body.new_password != body.confirm_password:
        raise PasswordMismatchException()

    user.password_hash = hash_password(body.new_password)
    repo.save(user)
    logger.info("Password changed", user_id=user.id)


def list_users(repo: UserRepository) -> List[User]:
    return repo.list_newest_first()


def delete_user(repo: UserRepository, image_host: ImageHost, user_id: str) -> None:
    user = repo.get_by_id(user_id)
    if not user:
        raise EntityNotFoundException("User is not available with this id")

    avatar_service.discard_avatar(image_host, user.avatar)
    repo.delete(user.id)
    logger.info("User deleted", user_id=user.id)

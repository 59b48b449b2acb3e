from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import InvalidCredentials, UsernameTaken
from storefront.domain.schemas import TokenOut
from storefront.repos.user_repo import UserRepo
from storefront.utils.security import TokenService, get_password_hash, verify_password
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class AuthService:
    def __init__(self, db: Session, tokens: TokenService):
        self.repo = UserRepo(db)
        self.tokens = tokens

    def signup(self, username: str, password: str) -> TokenOut:
        if self.repo.get_by_username(username):
            raise UsernameTaken(username)

        user = UserModel(
            username=username,
            password_hash=get_password_hash(password),
            is_admin=False,
        )
        try:
            created = self.repo.create_user(user)
        except IntegrityError as e:
            self.repo.db.rollback()
            raise UsernameTaken(username) from e

        logger.info(f"User {created.id} signed up")
        return TokenOut(
            message="User created",
            token=self.tokens.create_access_token(created.id, created.is_admin),
            is_admin=created.is_admin,
        )

    def login(self, username: str, password: str) -> TokenOut:
        user = self.repo.get_by_username(username)
        # same error for unknown user and wrong password
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentials()

        return TokenOut(
            message="Login successful",
            token=self.tokens.create_access_token(user.id, user.is_admin),
            is_admin=user.is_admin,
        )

    def ensure_admin(self, username: str, password: str) -> None:
        if self.repo.get_by_username(username):
            return

        admin = self.repo.create_user(
            UserModel(
                username=username,
                password_hash=get_password_hash(password),
                is_admin=True,
            )
        )
        logger.info(f"Admin user {admin.id} created")

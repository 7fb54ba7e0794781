"""
GraphQL schema: object types, input types and the query/mutation roots.

Field names are declared exactly as clients see them (snake_case object
fields, camelCase operation names), so automatic camel-casing is off.
Resolvers are async and push the blocking service calls (bcrypt, SQL) onto
the threadpool.
"""

import logging
from typing import Annotated, Any, List, Optional
import strawberry
from fastapi.concurrency import run_in_threadpool
from graphql import GraphQLError
from strawberry.schema.config import StrawberryConfig
from strawberry.types import Info
from organize_api.core.errors import AppError, AuthenticationError, ValidationError
from organize_api.models.user import User as UserModel
from organize_api.schemas.user import LoginRequest, UserCreate, UserUpdate, parse_input

logger = logging.getLogger(__name__)


@strawberry.type
class User:
    id: strawberry.ID
    username: str
    full_name: str
    email: str
    password_hash: str

    @classmethod
    def from_model(cls, user: UserModel) -> "User":
        return cls(
            id=strawberry.ID(str(user.id)),
            username=user.username,
            full_name=user.full_name,
            email=user.email,
            password_hash=user.password_hash,
        )


@strawberry.type
class RegistrationPayload:
    user: User
    token: str


@strawberry.input
class CreateUserInput:
    username: str
    full_name: str
    email: str
    # Raw secret; stored only as its hash
    password_hash: str


@strawberry.input
class UpdateUserInput:
    username: Optional[str] = strawberry.UNSET
    full_name: Optional[str] = strawberry.UNSET
    email: Optional[str] = strawberry.UNSET


@strawberry.input
class LoginInput:
    email: str
    password: str


def supplied_fields(data: Any) -> dict[str, Any]:
    """Input fields the client actually sent; explicit nulls are dropped too"""
    return {key: value for key, value in vars(data).items()
            if value is not strawberry.UNSET and value is not None}


def parse_id(value: strawberry.ID) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid user ID: {value}")


def _payload(result) -> RegistrationPayload:
    return RegistrationPayload(user=User.from_model(result.user), token=result.token)


UserId = Annotated[strawberry.ID, strawberry.argument(name="id")]


@strawberry.type
class Query:
    @strawberry.field(name="findOneUser")
    async def find_one_user(self, info: Info, user_id: UserId) -> User:
        user = await run_in_threadpool(info.context.user_service.find_one, parse_id(user_id))
        return User.from_model(user)

    @strawberry.field(name="findUsers")
    async def find_users(self, info: Info) -> List[User]:
        users = await run_in_threadpool(info.context.user_service.find_all)
        return [User.from_model(user) for user in users]

    @strawberry.field(name="usernameAvailable")
    async def username_available(self, info: Info, username: str) -> bool:
        return await run_in_threadpool(info.context.user_service.is_username_available, username)

    @strawberry.field
    async def me(self, info: Info) -> User:
        token = info.context.token
        if not token:
            raise AuthenticationError("Not authenticated")
        user = await run_in_threadpool(info.context.auth_service.current_user, token)
        return User.from_model(user)


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def register(
        self, info: Info, data: Annotated[CreateUserInput, strawberry.argument(name="input")]
    ) -> RegistrationPayload:
        user_data = parse_input(UserCreate, vars(data))
        result = await run_in_threadpool(info.context.auth_service.register, user_data)
        return _payload(result)

    @strawberry.mutation
    async def login(
        self, info: Info, data: Annotated[LoginInput, strawberry.argument(name="input")]
    ) -> RegistrationPayload:
        credentials = parse_input(LoginRequest, vars(data))
        result = await run_in_threadpool(info.context.auth_service.login, credentials)
        return _payload(result)

    @strawberry.mutation(name="updateUser")
    async def update_user(
        self,
        info: Info,
        user_id: UserId,
        data: Annotated[UpdateUserInput, strawberry.argument(name="input")],
    ) -> User:
        changes = parse_input(UserUpdate, supplied_fields(data))
        user = await run_in_threadpool(info.context.user_service.update, parse_id(user_id), changes)
        return User.from_model(user)

    @strawberry.mutation(name="removeUser")
    async def remove_user(self, info: Info, user_id: UserId) -> bool:
        await run_in_threadpool(info.context.user_service.remove, parse_id(user_id))
        return True


class Schema(strawberry.Schema):
    def process_errors(self, errors: List[GraphQLError], execution_context=None) -> None:
        # Domain errors are expected outcomes; anything else is a bug
        for error in errors:
            if isinstance(error.original_error, AppError):
                logger.info("%s: %s", error.original_error.code, error.message)
            else:
                logger.error("Unhandled GraphQL error: %s", error.message,
                             exc_info=error.original_error)


schema = Schema(
    query=Query,
    mutation=Mutation,
    config=StrawberryConfig(auto_camel_case=False),
)

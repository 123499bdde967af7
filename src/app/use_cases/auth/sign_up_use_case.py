import bcrypt

from src.app.repositories.user_repository import DuplicateUserError
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User
from src.domain.errors import Conflict
from src.domain.identity import create_identity_snapshot
from src.domain.result import Result, Return
from .dtos import SignUpCommand, SignUpResponse


class SignUpUseCase:
    """
    Sign Up Use Case

    Business Logic:
    1. Check if email already exists
    2. Hash password with bcrypt cost factor 12
    3. Create User with setup=False (no sessions until profile setup)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, command: SignUpCommand) -> Result[SignUpResponse]:
        async with self.uow:
            existing_user = await self.uow.users.get_by_email(command.email)
            if existing_user:
                return Return.err(
                    Conflict("EMAIL_ALREADY_EXISTS", "Email already exists!")
                )

            password_hash = bcrypt.hashpw(
                command.password.encode("utf-8"), bcrypt.gensalt(12)
            )

            user = User(email=command.email, password_hash=password_hash.decode("utf-8"))
            try:
                user = await self.uow.users.create(user)
            except DuplicateUserError:
                return Return.err(
                    Conflict("EMAIL_ALREADY_EXISTS", "Email already exists!")
                )

            await self.uow.commit()

            return Return.ok(SignUpResponse(identity=create_identity_snapshot(user)))

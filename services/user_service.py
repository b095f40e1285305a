import re

from tortoise.exceptions import IntegrityError

from core.exceptions import InternalError
from core.logger import db_logger
from models.user import User

MAX_USERNAME_ATTEMPTS = 20


def base_username(external_id: str, email: str | None, username: str | None) -> str:
    candidate = username or (email.split("@")[0] if email else "") or external_id
    candidate = re.sub(r"[^A-Za-z0-9_.-]", "", candidate)[:140]
    return candidate or "user"


def display_name(claims: dict) -> str:
    if claims.get("name"):
        return claims["name"]
    first, last = claims.get("given_name"), claims.get("family_name")
    if first and last:
        return f"{first} {last}"
    email = claims.get("email")
    return (
        first or last or claims.get("username")
        or (email.split("@")[0] if email else None)
        or "New User"
    )


class UserService:

    @staticmethod
    async def get_by_external_id(external_id: str) -> User | None:
        return await User.get_or_none(external_id=external_id)

    @staticmethod
    async def find_or_create(
            external_id: str,
            email: str | None = None,
            username: str | None = None,
            name: str | None = None,
    ) -> User:
        """
        Return the user of an identity provider subject, creating it on first sight.

        The unique constraints decide conflicts: a taken username is retried with
        a numeric suffix, and a concurrent request that created the same subject
        first wins.
        """
        user = await UserService.get_by_external_id(external_id)
        if user:
            return user

        base = base_username(external_id, email, username)
        for attempt in range(MAX_USERNAME_ATTEMPTS):
            candidate = base if attempt == 0 else f"{base}{attempt}"
            try:
                user = await User.create(
                    external_id=external_id,
                    username=candidate,
                    email=email,
                    name=name or candidate,
                )
            except IntegrityError:
                existing = await UserService.get_by_external_id(external_id)
                if existing:
                    return existing
                continue

            db_logger.log_create("User", {
                "id": user.id,
                "external_id": external_id,
                "username": candidate,
            })
            return user

        raise InternalError(
            "Could not provision a user account",
            {"external_id": external_id, "username": base}
        )

    @staticmethod
    async def from_claims(claims: dict) -> User:
        return await UserService.find_or_create(
            external_id=claims["sub"],
            email=claims.get("email"),
            username=claims.get("username") or claims.get("preferred_username"),
            name=display_name(claims),
        )

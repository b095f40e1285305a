from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.exceptions import AuthError
from core.security import decode_identity_token
from models.plant import Plant
from models.user import User
from services.plant_service import PlantService
from services.user_service import UserService

security = HTTPBearer(auto_error=False)


async def get_current_user(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> User:
    """Resolve the identity provider token to a local user, creating it on first sight."""
    if credentials is None or not credentials.credentials:
        raise AuthError("Missing bearer token")

    claims = decode_identity_token(credentials.credentials)
    return await UserService.from_claims(claims)


async def get_owned_plant(plant_id: int, current_user: User = Depends(get_current_user)) -> Plant:
    return await PlantService.get_owned(plant_id, current_user)

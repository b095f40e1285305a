import pytest

from core.exceptions import AuthError
from core.security import create_identity_token, decode_identity_token
from models.user import User
from services.user_service import UserService, base_username, display_name


def test_base_username():
    assert base_username("idp|1", "jane.doe@example.com", None) == "jane.doe"
    assert base_username("idp|1", None, "Plant Lover!") == "PlantLover"
    assert base_username("idp|1", None, None) == "idp1"
    assert base_username("|", None, None) == "user"


def test_display_name():
    assert display_name({"name": "Jane Doe"}) == "Jane Doe"
    assert display_name({"given_name": "Jane", "family_name": "Doe"}) == "Jane Doe"
    assert display_name({"email": "jane@example.com"}) == "jane"
    assert display_name({}) == "New User"


async def test_find_or_create_is_idempotent():
    first = await UserService.find_or_create("idp|42", email="jane@example.com", name="Jane")
    second = await UserService.find_or_create("idp|42", email="other@example.com")

    assert first.id == second.id
    assert second.email == "jane@example.com"
    assert await User.filter(external_id="idp|42").count() == 1


async def test_username_collision_gets_suffix(make_user):
    await make_user(username="jane")
    await make_user(username="jane1")

    user = await UserService.find_or_create("idp|new", email="jane@example.com")

    assert user.username == "jane2"
    assert user.name == "jane2"


async def test_from_claims():
    user = await UserService.from_claims({
        "sub": "idp|7",
        "email": "sam@example.com",
        "preferred_username": "sam",
        "given_name": "Sam",
        "family_name": "Green",
    })

    assert user.external_id == "idp|7"
    assert user.username == "sam"
    assert user.name == "Sam Green"


def test_identity_token_roundtrip():
    claims = decode_identity_token(create_identity_token("idp|9", email="x@example.com"))
    assert claims["sub"] == "idp|9"
    assert claims["email"] == "x@example.com"


@pytest.mark.parametrize("token", [
    "not-a-token",
    create_identity_token("idp|9", expire_minutes=-5),
])
def test_invalid_identity_token(token):
    with pytest.raises(AuthError):
        decode_identity_token(token)

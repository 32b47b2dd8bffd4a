"""Authentication endpoints (``/auth/*``)."""

import structlog

from marketplace_client.core.exceptions import EnvelopeError
from marketplace_client.core.logging import mask_email
from marketplace_client.domain.entities.user import ProfileUpdate, RegistrationData, UserProfile
from marketplace_client.domain.interfaces.api import IAuthApi, IssuedTokens

from .http_client import ApiClient
from .schemas import decode, unwrap
from .uploads import form_fields, image_part

logger = structlog.get_logger(__name__)


class AuthApi(IAuthApi):
    """`IAuthApi` over HTTP."""

    def __init__(self, client: ApiClient):
        self._client = client

    async def signup(self, data: RegistrationData) -> None:
        fields = form_fields(
            {
                "firstName": data.first_name,
                "lastName": data.last_name,
                "email": data.email,
                "password": data.password,
            }
        )
        files = [image_part("profileImage", data.profile_image)] if data.profile_image else None
        logger.debug("Signing up", email=mask_email(data.email), with_image=files is not None)
        await self._client.post("/auth/signup", data=fields, files=files)

    async def login(self, email: str, password: str, token_expires_in: str) -> IssuedTokens:
        envelope = await self._client.post(
            "/auth/login",
            json={"email": email, "password": password, "token_expires_in": token_expires_in},
        )
        data = envelope.data if isinstance(envelope.data, dict) else {}
        access_token = data.get("accessToken")
        refresh_token = data.get("refreshToken")
        if not access_token or not refresh_token:
            raise EnvelopeError("Login response carries no tokens")
        return IssuedTokens(access_token=access_token, refresh_token=refresh_token)

    async def verify_otp(self, email: str, otp: str) -> None:
        await self._client.post("/auth/verify-otp", json={"email": email, "otp": otp})

    async def resend_otp(self, email: str) -> None:
        await self._client.post("/auth/resend-otp", json={"email": email})

    async def forgot_password(self, email: str) -> None:
        await self._client.post("/auth/forgot-password", json={"email": email})

    async def get_profile(self) -> UserProfile:
        envelope = await self._client.get("/auth/profile", auth=True)
        return decode(UserProfile, unwrap(envelope.data, "user"))

    async def update_profile(self, data: ProfileUpdate) -> UserProfile:
        fields = form_fields({"firstName": data.first_name, "lastName": data.last_name})
        files = [image_part("profileImage", data.profile_image)] if data.profile_image else None
        envelope = await self._client.patch("/auth/profile", data=fields, files=files, auth=True)
        return decode(UserProfile, unwrap(envelope.data, "user"))

    async def get_user(self, user_id: str) -> UserProfile:
        envelope = await self._client.get(f"/auth/users/{user_id}")
        return decode(UserProfile, unwrap(envelope.data, "user"))

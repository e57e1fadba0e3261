"""
Google OAuth 2.0 client.

Handles the authorization redirect, the code-for-token exchange and the
userinfo lookup that together produce a ProviderProfile.
"""

import logging
import secrets
import time
from typing import Dict, Tuple
from urllib.parse import urlencode

import httpx

from jobtrackr.core.config import settings
from jobtrackr.services.auth_service import ProviderProfile

logger = logging.getLogger(__name__)


class OAuthError(Exception):
    """Raised when the provider rejects a request or returns unusable data."""


class GoogleOAuthService:
    """
    Google sign-in integration.

    Handles:
    - authorization URL with a CSRF state parameter
    - authorization code exchange
    - profile retrieval
    """

    PROVIDER = "google"

    AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

    SCOPES = ["openid", "email", "profile"]

    TIMEOUT = 10.0

    def __init__(self):
        self.client_id = settings.GOOGLE_CLIENT_ID
        self.client_secret = settings.GOOGLE_CLIENT_SECRET
        self.redirect_uri = settings.GOOGLE_REDIRECT_URI

    @property
    def enabled(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def get_authorization_url(self) -> Tuple[str, str]:
        """
        Generate the Google authorization URL.

        Returns:
            Tuple of (authorization_url, state)
        """
        state = secrets.token_urlsafe(32)

        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(self.SCOPES),
            "state": state,
            "prompt": "consent",
            "access_type": "offline",
        }

        return f"{self.AUTH_URL}?{urlencode(params)}", state

    async def exchange_code_for_token(self, code: str) -> Dict:
        """
        Exchange an authorization code for tokens.

        Returns:
            Token data including access_token, expires_in, id_token

        Raises:
            OAuthError: If the token exchange fails
        """
        async with httpx.AsyncClient(timeout=self.TIMEOUT) as client:
            response = await client.post(
                self.TOKEN_URL,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                },
                headers={"Accept": "application/json"},
            )

        if response.status_code != 200:
            logger.error(f"Google token exchange failed: {response.status_code} {response.text}")
            raise OAuthError(f"Token exchange failed with status {response.status_code}")

        token_data = response.json()
        if "access_token" not in token_data:
            raise OAuthError("Token response did not include an access token")

        if token_data.get("expires_in"):
            token_data["expires_at"] = int(time.time()) + int(token_data["expires_in"])

        return token_data

    async def fetch_user_profile(self, token_data: Dict) -> ProviderProfile:
        """
        Fetch the signed-in Google account.

        Raises:
            OAuthError: If the profile cannot be read or has no email
        """
        async with httpx.AsyncClient(timeout=self.TIMEOUT) as client:
            response = await client.get(
                self.USERINFO_URL,
                headers={"Authorization": f"Bearer {token_data['access_token']}"},
            )

        if response.status_code != 200:
            logger.error(f"Google userinfo request failed: {response.status_code}")
            raise OAuthError(f"Userinfo request failed with status {response.status_code}")

        info = response.json()
        if not info.get("sub") or not info.get("email"):
            raise OAuthError("Google profile is missing sub or email")

        return ProviderProfile(
            provider=self.PROVIDER,
            provider_account_id=str(info["sub"]),
            email=info["email"],
            name=info.get("name"),
            image=info.get("picture"),
            email_verified=bool(info.get("email_verified")),
            tokens={
                "access_token": token_data.get("access_token"),
                "refresh_token": token_data.get("refresh_token"),
                "expires_at": token_data.get("expires_at"),
                "token_type": token_data.get("token_type"),
                "scope": token_data.get("scope"),
                "id_token": token_data.get("id_token"),
            },
        )


google_oauth_service = GoogleOAuthService()

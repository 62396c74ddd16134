import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

import aiohttp

from lib.error_handler import (
    LYREBIRD_AUTHORIZATION_ERROR,
    SLACK_AUTHORIZATION_ERROR,
    AppError,
    ErrorHandler,
)
from lib.state_token import decode_state
from .storage import StorageService

logger = logging.getLogger(__name__)

SUCCESS_TEXT = 'You can now use your Lyrebird avatar in Slack with "/lyrebird <message>"'

class OAuthService(ABC):
    """Exchange an authorization code for an access token and store it"""

    provider = 'oauth'
    user_error_text = "An error happened while doing the Authorization, please try again"

    def __init__(self, storage_service: StorageService, token_url: str, client_id: str,
                 client_secret: str, redirect_uri: str = ''):
        self.storage = storage_service
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        logger.info(f"{self.provider} OAuth service initialized with token URL: {token_url}")

    @abstractmethod
    async def _request_token(self, session: aiohttp.ClientSession, code: str) -> Dict[str, Any]:
        """Call the provider's token endpoint and return its JSON body"""

    def failure(self, message: str) -> AppError:
        """Error for a failed flow, answered with the provider's generic text"""
        return AppError(message, user_message=self.user_error_text)

    async def exchange_code(self, code: str) -> Dict[str, Any]:
        """Exchange the code, returning the token endpoint's JSON body"""
        if not code:
            raise self.failure(f"No {self.provider} OAuth code received")

        async with aiohttp.ClientSession() as session:
            return await self._request_token(session, code)

    async def _read_json(self, response) -> Dict[str, Any]:
        if response.status != 200:
            error_text = await response.text()
            logger.error(f"{self.provider} token endpoint error {response.status}: {error_text}")
            raise self.failure(f"{self.provider} token endpoint returned {response.status}")
        return await response.json(content_type=None)

class LyrebirdOAuthService(OAuthService):
    provider = 'Lyrebird'
    user_error_text = LYREBIRD_AUTHORIZATION_ERROR

    async def _request_token(self, session, code):
        payload = {
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'code': code,
            'grant_type': 'authorization_code',
        }
        async with session.post(self.token_url, json=payload) as response:
            return await self._read_json(response)

    async def authorize_user(self, code: str, state: str) -> str:
        """Complete the Lyrebird flow for the Slack user encoded in ``state``"""
        try:
            identity = decode_state(state)
        except ValueError as e:
            raise self.failure(str(e))

        token_data = await self.exchange_code(code)
        access_token = token_data.get('access_token')
        if not access_token:
            raise self.failure("Lyrebird token response has no access_token")

        await self.storage.upsert_credentials(
            identity.team_id,
            identity.user_id,
            username=identity.username,
            access_token=access_token
        )
        logger.info(f"Stored Lyrebird token for {identity.username} ({identity.team_id}/{identity.user_id})")
        return SUCCESS_TEXT

    @staticmethod
    def error_text(error: Exception) -> str:
        return ErrorHandler.handle_lyrebird_authorization_error(error)

class SlackOAuthService(OAuthService):
    provider = 'Slack'
    user_error_text = SLACK_AUTHORIZATION_ERROR

    async def _request_token(self, session, code):
        params = {
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'code': code,
            'redirect_uri': self.redirect_uri,
        }
        async with session.get(self.token_url, params=params) as response:
            return await self._read_json(response)

    async def authorize_user(self, code: str) -> str:
        """Complete the Slack app install flow for the installing user"""
        token_data = await self.exchange_code(code)

        # Slack reports failures inside a 200 response
        if not token_data.get('ok'):
            raise self.failure(f"Slack OAuth failed: {token_data.get('error', 'unknown error')}")

        team_id = token_data.get('team_id')
        user_id = token_data.get('user_id')
        access_token = token_data.get('access_token')
        if not (team_id and user_id and access_token):
            raise self.failure("Slack OAuth response is missing team_id, user_id or access_token")

        await self.storage.upsert_credentials(
            team_id,
            user_id,
            team_name=token_data.get('team_name'),
            slack_token=access_token
        )
        logger.info(f"Stored Slack token for {team_id}/{user_id}")
        return SUCCESS_TEXT

    @staticmethod
    def error_text(error: Exception) -> str:
        return ErrorHandler.handle_slack_authorization_error(error)

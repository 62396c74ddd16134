import pytest
from unittest.mock import AsyncMock, MagicMock
import sys
from pathlib import Path

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
sys.path.append(project_root)

from lib.config import Settings
from api.routes import create_app
from api.services.commands import CommandRouter
from api.services.oauth import LyrebirdOAuthService, SlackOAuthService
from api.services.storage import CredentialRecord, StorageService
from api.services.voice import VoiceService

TEAM_ID = "T123"
USER_ID = "U456"
USERNAME = "ada"
CHANNEL_ID = "C789"

class AsyncContextManager:
    """Stands in for the object returned by aiohttp's session.get/post"""
    def __init__(self, response):
        self.response = response
    async def __aenter__(self):
        return self.response
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass

def make_http_response(status=200, json_data=None, body=b"", text=""):
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=json_data)
    response.read = AsyncMock(return_value=body)
    response.text = AsyncMock(return_value=text)
    return AsyncContextManager(response)

def make_record(slack_token=None, access_token=None):
    return CredentialRecord(
        team_id=TEAM_ID,
        user_id=USER_ID,
        username=USERNAME,
        slack_token=slack_token,
        access_token=access_token
    )

@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://test.supabase.co",
        supabase_key="test-key",
        lyrebird_app_client_id="lyre-client",
        lyrebird_app_client_secret="lyre-secret",
        lyrebird_app_redirect_uri="https://test.example.com/oauth/lyrebird",
        slack_app_client_id="slack-client",
        slack_app_client_secret="slack-secret",
        slack_app_redirect_uri="https://test.example.com/oauth/slack",
        slack_oauth_link="https://slack.com/oauth/authorize?client_id=slack-client",
        voicify_handle="https://test.example.com/voicify/handle"
    )

@pytest.fixture
def mock_storage_service():
    storage = MagicMock(spec=StorageService)
    storage.get_credentials = AsyncMock(return_value=None)
    storage.upsert_credentials = AsyncMock(return_value={})
    return storage

@pytest.fixture
def services(settings, mock_storage_service):
    voice = MagicMock(spec=VoiceService)
    voice.handle = AsyncMock()

    commands = MagicMock(spec=CommandRouter)
    commands.handle = AsyncMock(return_value=None)

    return {
        'storage': mock_storage_service,
        'voice': voice,
        'commands': commands,
        'lyrebird_oauth': LyrebirdOAuthService(
            mock_storage_service,
            token_url=settings.lyrebird_token_url,
            client_id=settings.lyrebird_app_client_id,
            client_secret=settings.lyrebird_app_client_secret
        ),
        'slack_oauth': SlackOAuthService(
            mock_storage_service,
            token_url=settings.slack_token_url,
            client_id=settings.slack_app_client_id,
            client_secret=settings.slack_app_client_secret,
            redirect_uri=settings.slack_app_redirect_uri
        ),
    }

@pytest.fixture
def test_client(settings, services):
    app = create_app(settings, services)
    app.config['TESTING'] = True
    return app.test_client()

import logging
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import aiohttp
from pydantic import BaseModel

from lib.state_token import encode_state
from .messages import ACK_TEXT, lyrebird_authorization_message, notice_message, slack_authorization_message
from .storage import CredentialRecord, StorageService
from .voice import SynthesisRequest, SynthesisStatus, VoiceService

logger = logging.getLogger(__name__)

class SlashCommand(BaseModel):
    """Fields of a Slack slash command payload used by the bridge"""
    user_id: str
    user_name: str = ''
    team_id: str
    channel_id: str = ''
    text: str = ''

class CommandAction(str, Enum):
    AUTHORIZE_LYREBIRD = "authorize_lyrebird"
    AUTHORIZE_SLACK = "authorize_slack"
    SYNTHESIZE = "synthesize"

def next_action(record: Optional[CredentialRecord]) -> CommandAction:
    """Decide what a slash command needs given the stored credentials.

    The Lyrebird token is checked before the Slack token.
    """
    if record is None or not record.has_lyrebird_token:
        return CommandAction.AUTHORIZE_LYREBIRD
    if not record.has_slack_token:
        return CommandAction.AUTHORIZE_SLACK
    return CommandAction.SYNTHESIZE

class CommandForwarder:
    """Hand a ready command over to the synthesis path.

    With a ``handle_url`` the command is POSTed to the synthesize endpoint,
    otherwise the voice service is called in-process. The returned reply is
    the notice the user should see (a declined text), or None. Failures are
    only logged.
    """

    def __init__(self, voice_service: Optional[VoiceService] = None, handle_url: str = ''):
        self.voice = voice_service
        self.handle_url = handle_url

    async def forward(self, request: SynthesisRequest) -> Optional[Dict[str, Any]]:
        try:
            if self.handle_url:
                return await self._post(request)

            result = await self.voice.handle(request)
            logger.info(f"In-process synthesis for {request.user_name} finished: {result.status.value}")
            if result.status == SynthesisStatus.DECLINED:
                return notice_message(result.message)
            return None
        except Exception as e:
            logger.error(f"Failed to forward command for {request.user_name}: {str(e)}", exc_info=True)
            return None

    async def _post(self, request: SynthesisRequest) -> Optional[Dict[str, Any]]:
        async with aiohttp.ClientSession() as session:
            async with session.post(self.handle_url, json=request.model_dump(by_alias=True)) as response:
                if response.status != 200:
                    error_text = await response.text()
                    logger.error(f"Synthesize endpoint returned {response.status}: {error_text}")
                    return None
                # Empty body once the audio is uploaded, a notice otherwise
                reply = await response.json(content_type=None)
        logger.info(f"Command for {request.user_name} forwarded to {self.handle_url}")
        return reply or None

class CommandRouter:
    def __init__(self, storage_service: StorageService, forwarder: CommandForwarder,
                 myvoice_url: str, lyrebird_client_id: str, lyrebird_redirect_uri: str,
                 slack_oauth_link: str, send_ack: bool = False):
        self.storage = storage_service
        self.forwarder = forwarder
        self.myvoice_url = myvoice_url
        self.lyrebird_client_id = lyrebird_client_id
        self.lyrebird_redirect_uri = lyrebird_redirect_uri
        self.slack_oauth_link = slack_oauth_link
        self.send_ack = send_ack

    def lyrebird_authorization_link(self, team_id: str, user_id: str, user_name: str) -> str:
        query = {
            'response_type': 'code',
            'client_id': self.lyrebird_client_id,
            'redirect_uri': self.lyrebird_redirect_uri,
            'state': encode_state(team_id, user_id, user_name),
            'scope': 'voice',
        }
        return f"{self.myvoice_url.rstrip('/')}/authorize?{urlencode(query)}"

    async def handle(self, command: SlashCommand) -> Optional[Dict[str, Any]]:
        """Return the reply for a slash command, None when the reply is empty.

        Store failures propagate to the caller.
        """
        record = await self.storage.get_credentials(command.team_id, command.user_id)
        action = next_action(record)
        logger.info(f"Command from {command.user_name} ({command.team_id}/{command.user_id}): {action.value}")

        if action == CommandAction.AUTHORIZE_LYREBIRD:
            link = self.lyrebird_authorization_link(command.team_id, command.user_id, command.user_name)
            return lyrebird_authorization_message(link)

        if action == CommandAction.AUTHORIZE_SLACK:
            return slack_authorization_message(self.slack_oauth_link)

        reply = await self.forwarder.forward(SynthesisRequest(
            user_id=command.user_id,
            user_name=command.user_name,
            team_id=command.team_id,
            channel_id=command.channel_id,
            text=command.text,
            slackToken=record.slack_token,
            accessToken=record.access_token
        ))
        if reply is not None:
            return reply
        if self.send_ack:
            return notice_message(ACK_TEXT)
        return None

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import aiohttp
from pydantic import AliasChoices, BaseModel, Field
from slack_sdk.web.async_client import AsyncWebClient

from lib.error_handler import ErrorHandler
from .messages import DECLINED_TEXT

logger = logging.getLogger(__name__)

AVATAR_FILENAME = "lyrebird_vocal_avatar.wav"
AVATAR_CONTENT_TYPE = "audio/wav"
ERRORS_REFERENCE = "http://docs.lyrebird.ai/reference-avatar/api.html#section/Errors"

class SynthesisRequest(BaseModel):
    """A slash command whose user holds both Slack and Lyrebird tokens"""
    user_id: str = Field(validation_alias=AliasChoices('user_id', 'userId'))
    user_name: str = Field(validation_alias=AliasChoices('user_name', 'username'))
    team_id: str = Field(validation_alias=AliasChoices('team_id', 'teamId'))
    channel_id: str = Field(validation_alias=AliasChoices('channel_id', 'channelId'))
    text: str
    slack_token: str = Field(
        validation_alias=AliasChoices('slackToken', 'chatToken', 'slack_token'),
        serialization_alias='slackToken'
    )
    access_token: str = Field(
        validation_alias=AliasChoices('accessToken', 'providerToken', 'access_token'),
        serialization_alias='accessToken'
    )

class SynthesisStatus(str, Enum):
    SUCCESS = "success"
    DECLINED = "declined"
    ERROR = "error"

@dataclass
class SynthesisResult:
    status: SynthesisStatus
    audio: Optional[bytes] = None
    message: Optional[str] = None
    status_code: Optional[int] = None

class VoiceService:
    def __init__(self, generate_url: str, slack_client_factory=AsyncWebClient):
        self.generate_url = generate_url
        self.slack_client_factory = slack_client_factory
        logger.info(f"Voice service initialized with generate URL: {generate_url}")

    async def synthesize(self, access_token: str, text: str) -> SynthesisResult:
        """Ask the Lyrebird vocal avatar to say ``text``"""
        headers = {'Authorization': f"Bearer {access_token}"}

        async with aiohttp.ClientSession() as session:
            async with session.post(self.generate_url, json={'text': text}, headers=headers) as response:
                if response.status == 200:
                    audio = await response.read()
                    logger.info(f"Vocal avatar generated: {len(audio)} bytes")
                    return SynthesisResult(SynthesisStatus.SUCCESS, audio=audio, status_code=200)

                if response.status == 400:
                    logger.info("Lyrebird declined the text, user probably has no voice yet")
                    return SynthesisResult(SynthesisStatus.DECLINED, message=DECLINED_TEXT, status_code=400)

                logger.error(
                    f"An error with the status code {response.status} happened, "
                    f"please check the reference docs for more details: {ERRORS_REFERENCE}"
                )
                return SynthesisResult(SynthesisStatus.ERROR, status_code=response.status)

    async def upload_avatar(self, slack_token: str, audio: bytes, channel_id: str,
                            text: str, username: str) -> Optional[str]:
        """Share the generated audio in the channel the command came from.

        Failures are logged and never raised, the user already got their reply.
        """
        title = f'"{text}" - {username}'
        try:
            client = self.slack_client_factory(token=slack_token)
            upload = await client.files_getUploadURLExternal(filename=AVATAR_FILENAME, length=len(audio))
            file_id = upload['file_id']

            async with aiohttp.ClientSession() as session:
                async with session.post(
                    upload['upload_url'],
                    data=audio,
                    headers={'Content-Type': AVATAR_CONTENT_TYPE}
                ) as response:
                    if response.status != 200:
                        raise Exception(f"Slack upload URL returned {response.status}")

            await client.files_completeUploadExternal(
                files=[{'id': file_id, 'title': title}],
                channel_id=channel_id
            )
            logger.info(f"File uploaded as Stream. File ID: {file_id}")
            return file_id
        except Exception as e:
            ErrorHandler.handle_upload_error(e)
            return None

    async def handle(self, request: SynthesisRequest) -> SynthesisResult:
        """Synthesize the command text and upload it when Lyrebird accepts it"""
        result = await self.synthesize(request.access_token, request.text)
        if result.status == SynthesisStatus.SUCCESS:
            await self.upload_avatar(
                request.slack_token,
                result.audio,
                request.channel_id,
                request.text,
                request.user_name
            )
        return result

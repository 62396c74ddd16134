import asyncio
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, field_validator

from lib.state_token import make_user_key

logger = logging.getLogger(__name__)

class CredentialRecord(BaseModel):
    """Stored credentials of one Slack user in one Slack team"""
    team_id: str
    user_id: str
    username: Optional[str] = None
    team_name: Optional[str] = None
    slack_token: Optional[str] = None
    access_token: Optional[str] = None

    @field_validator('username', 'team_name', 'slack_token', 'access_token', mode='before')
    @classmethod
    def _blank_is_absent(cls, value):
        if value == '':
            return None
        return value

    @property
    def key(self) -> str:
        return make_user_key(self.team_id, self.user_id)

    @property
    def has_lyrebird_token(self) -> bool:
        return self.access_token is not None

    @property
    def has_slack_token(self) -> bool:
        return self.slack_token is not None

class StorageService:
    def __init__(self, supabase_client, table: str = 'slack_users'):
        self.supabase = supabase_client
        self.table = table
        logger.info(f"Storage service initialized with table: {table}")

    async def get_credentials(self, team_id: str, user_id: str) -> Optional[CredentialRecord]:
        """Fetch the credential record of a Slack user, None when there is none"""
        key = make_user_key(team_id, user_id)
        try:
            result = await self._run(
                lambda: self.supabase.table(self.table).select('*').eq('id', key).limit(1).execute()
            )
        except Exception as e:
            logger.error(f"Failed to read credentials for {key}: {str(e)}")
            raise

        if not result.data:
            logger.info(f"No credentials stored for {key}")
            return None

        row = dict(result.data[0])
        row.pop('id', None)
        return CredentialRecord(**row)

    async def upsert_credentials(self, team_id: str, user_id: str, **fields: Any) -> Dict[str, Any]:
        """Write the given fields of a credential record.

        Only the columns passed here are written, existing columns (for example
        the other provider's token) are left untouched.
        """
        key = make_user_key(team_id, user_id)
        data = {'id': key, 'team_id': team_id, 'user_id': user_id}
        data.update({name: value for name, value in fields.items() if value is not None})

        logger.info(f"Storing credentials for {key}: {sorted(data)}")
        try:
            result = await self._run(
                lambda: self.supabase.table(self.table).upsert(data, on_conflict='id').execute()
            )
        except Exception as e:
            logger.error(f"Failed to store credentials for {key}: {str(e)}")
            raise

        return result.data[0] if result.data else data

    async def _run(self, call):
        # The Supabase client is blocking
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, call)

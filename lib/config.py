from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, extra='ignore')

    # Supabase settings
    supabase_url: str = ''
    supabase_key: str = ''
    credentials_table: str = 'slack_users'

    # Lyrebird settings
    lyrebird_app_client_id: str = ''
    lyrebird_app_client_secret: str = ''
    lyrebird_app_redirect_uri: str = ''
    lyrebird_avatar_url: str = 'https://avatar.lyrebird.ai'
    myvoice_url: str = 'https://myvoice.lyrebird.ai'

    # Slack settings
    slack_app_client_id: str = ''
    slack_app_client_secret: str = ''
    slack_app_redirect_uri: str = ''
    slack_oauth_link: str = ''
    slack_token_url: str = 'https://slack.com/api/oauth.access'

    # Internal synthesize endpoint, empty means synthesize in-process
    voicify_handle: str = ''
    send_ack_message: bool = False

    log_level: str = 'INFO'

    @property
    def lyrebird_token_url(self) -> str:
        return f"{self.lyrebird_avatar_url.rstrip('/')}/api/v0/token"

    @property
    def lyrebird_generate_url(self) -> str:
        return f"{self.lyrebird_avatar_url.rstrip('/')}/api/v0/generate"

def get_settings() -> Settings:
    return Settings()

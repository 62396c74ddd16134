from typing import Optional
import logging

logger = logging.getLogger(__name__)

LYREBIRD_AUTHORIZATION_ERROR = "An error happened while doing the Authorization, please try again"
SLACK_AUTHORIZATION_ERROR = "An error happened while doing the Slack Authorization, please try again"
SYNTHESIS_ERROR = "Lyrebird could not voicify your text right now. Please try again later."

class AppError(Exception):
    def __init__(self, message: str, status_code: int = 500, user_message: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.user_message = user_message or "An error occurred. Please try again later."
        super().__init__(self.message)

class ErrorHandler:
    @staticmethod
    def handle_lyrebird_authorization_error(error: Exception) -> str:
        logger.error(f"Lyrebird authorization error: {str(error)}")
        return LYREBIRD_AUTHORIZATION_ERROR

    @staticmethod
    def handle_slack_authorization_error(error: Exception) -> str:
        logger.error(f"Slack authorization error: {str(error)}")
        return SLACK_AUTHORIZATION_ERROR

    @staticmethod
    def handle_synthesis_error(error: Exception) -> str:
        logger.error(f"Synthesis error: {str(error)}")
        return SYNTHESIS_ERROR

    @staticmethod
    def handle_upload_error(error: Exception) -> None:
        # Uploads happen after the reply, nothing is sent back to the user
        logger.error(f"Slack upload error: {str(error)}")

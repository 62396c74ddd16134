from flask import Flask, request, Response, jsonify
import logging
from pydantic import ValidationError
from supabase import create_client

from lib.config import Settings, get_settings
from lib.error_handler import SYNTHESIS_ERROR, AppError, ErrorHandler
from .services.commands import CommandForwarder, CommandRouter, SlashCommand
from .services.messages import notice_message
from .services.oauth import LyrebirdOAuthService, SlackOAuthService
from .services.storage import StorageService
from .services.voice import SynthesisRequest, SynthesisStatus, VoiceService

# Create logger for this file
logger = logging.getLogger(__name__)

def build_services(settings: Settings, supabase_client=None) -> dict:
    """Build the service graph shared by every request of the process"""
    if supabase_client is None:
        logger.info("Initializing Supabase client...")
        try:
            supabase_client = create_client(settings.supabase_url, settings.supabase_key)
            logger.info("Supabase client initialized successfully")
        except Exception as e:
            logger.error(f"Error initializing Supabase client: {str(e)}")
            raise

    storage_service = StorageService(supabase_client, table=settings.credentials_table)
    voice_service = VoiceService(generate_url=settings.lyrebird_generate_url)

    if settings.voicify_handle:
        logger.info(f"Ready commands are forwarded to {settings.voicify_handle}")
    else:
        logger.info("Ready commands are synthesized in-process")

    command_router = CommandRouter(
        storage_service=storage_service,
        forwarder=CommandForwarder(voice_service=voice_service, handle_url=settings.voicify_handle),
        myvoice_url=settings.myvoice_url,
        lyrebird_client_id=settings.lyrebird_app_client_id,
        lyrebird_redirect_uri=settings.lyrebird_app_redirect_uri,
        slack_oauth_link=settings.slack_oauth_link,
        send_ack=settings.send_ack_message
    )

    lyrebird_oauth = LyrebirdOAuthService(
        storage_service,
        token_url=settings.lyrebird_token_url,
        client_id=settings.lyrebird_app_client_id,
        client_secret=settings.lyrebird_app_client_secret
    )
    slack_oauth = SlackOAuthService(
        storage_service,
        token_url=settings.slack_token_url,
        client_id=settings.slack_app_client_id,
        client_secret=settings.slack_app_client_secret,
        redirect_uri=settings.slack_app_redirect_uri
    )

    return {
        'storage': storage_service,
        'voice': voice_service,
        'commands': command_router,
        'lyrebird_oauth': lyrebird_oauth,
        'slack_oauth': slack_oauth,
    }

def create_app(settings: Settings = None, services: dict = None) -> Flask:
    settings = settings or get_settings()
    services = services or build_services(settings)

    app = Flask(__name__)
    app.extensions['voicify'] = services

    voice_service: VoiceService = services['voice']
    command_router: CommandRouter = services['commands']
    lyrebird_oauth: LyrebirdOAuthService = services['lyrebird_oauth']
    slack_oauth: SlackOAuthService = services['slack_oauth']

    def plain_text(message: str, status: int) -> Response:
        return Response(message, status=status, mimetype='text/plain')

    @app.route('/', methods=['GET'])
    def root():
        """Basic health check"""
        return jsonify({'status': 'ok'})

    @app.route('/voicify/handle', methods=['POST'])
    async def voicify_handle():
        """Synthesize a ready command and upload the audio to Slack"""
        try:
            synthesis_request = SynthesisRequest.model_validate(request.get_json(silent=True) or {})
        except ValidationError as e:
            logger.error(f"Invalid synthesize request: {e.errors()}")
            return jsonify({'status': 'error', 'message': 'Invalid request body'}), 400

        try:
            result = await voice_service.handle(synthesis_request)
        except Exception as e:
            logger.error(f"Synthesis failed: {str(e)}", exc_info=True)
            return jsonify(notice_message(ErrorHandler.handle_synthesis_error(e))), 500

        if result.status == SynthesisStatus.DECLINED:
            return jsonify(notice_message(result.message))

        if result.status == SynthesisStatus.ERROR:
            error = AppError(f"Lyrebird returned {result.status_code}", user_message=SYNTHESIS_ERROR)
            logger.error(f"Synthesis error: {error.message}")
            return jsonify(notice_message(error.user_message)), error.status_code

        return '', 200

    @app.route('/voicify/slack', methods=['POST'])
    async def voicify_slack():
        """Receive a slash command from Slack"""
        payload = request.form.to_dict() or request.get_json(silent=True) or {}
        try:
            command = SlashCommand.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Invalid slash command: {e.errors()}")
            return jsonify({'status': 'error', 'message': 'Invalid slash command'}), 400

        try:
            reply = await command_router.handle(command)
        except Exception as e:
            logger.error(f"Error handling slash command: {str(e)}", exc_info=True)
            return jsonify({'status': 'error', 'message': str(e)}), 500

        if reply is None:
            return '', 200
        return jsonify(reply)

    @app.route('/oauth/lyrebird', methods=['GET'])
    async def authorize_lyrebird_user():
        """Lyrebird OAuth redirect"""
        error = request.args.get('error')
        try:
            if error:
                raise lyrebird_oauth.failure(f"Lyrebird authorization denied: {error}")
            message = await lyrebird_oauth.authorize_user(
                request.args.get('code', ''),
                request.args.get('state', '')
            )
        except AppError as e:
            logger.error(f"Lyrebird authorization error: {e.message}")
            return plain_text(e.user_message, e.status_code)
        except Exception as e:
            return plain_text(lyrebird_oauth.error_text(e), 500)
        return plain_text(message, 200)

    @app.route('/oauth/slack', methods=['GET'])
    async def get_slack_token():
        """Slack OAuth redirect"""
        error = request.args.get('error')
        try:
            if error:
                raise slack_oauth.failure(f"Slack authorization denied: {error}")
            message = await slack_oauth.authorize_user(request.args.get('code', ''))
        except AppError as e:
            logger.error(f"Slack authorization error: {e.message}")
            return plain_text(e.user_message, e.status_code)
        except Exception as e:
            return plain_text(slack_oauth.error_text(e), 500)
        return plain_text(message, 200)

    logger.info("Flask application configured")
    return app

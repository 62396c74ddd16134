"""Slack rich messages sent back to the user.

See https://api.slack.com/docs/message-formatting
"""
from typing import Any, Dict

LYREBIRD_COLOR = "#3367d6"
SLACK_COLOR = "#3F0F3F"

DECLINED_TEXT = (
    "Lyrebird was not able to voicify your text, "
    "make sure you created a voice on https://lyrebird.ai/"
)
ACK_TEXT = (
    "Your text is being voicified, "
    "it should be ready in the next couple of milliseconds :)!"
)

def _ephemeral(attachment: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "response_type": "ephemeral",
        "attachments": [attachment],
    }

def lyrebird_authorization_message(authorization_link: str) -> Dict[str, Any]:
    """Ask the user to let Lyrebird use their vocal avatar"""
    return _ephemeral({
        "color": LYREBIRD_COLOR,
        "pretext": "Lyrebird needs your authorization to use my vocal avatar",
        "title": "Authorize Lyrebird to use your vocal avatar",
        "title_link": authorization_link,
        "text": "Make sure you created a voice on https://lyrebird.ai",
    })

def slack_authorization_message(install_link: str) -> Dict[str, Any]:
    """Ask the user to add the app to their Slack workspace"""
    return _ephemeral({
        "color": SLACK_COLOR,
        "pretext": "To use the Lyrebird command, you need to add it to your Slack workspace",
        "title": "Add Lyrebird to my Slack workspace",
        "title_link": install_link,
    })

def notice_message(text: str) -> Dict[str, Any]:
    return _ephemeral({
        "color": LYREBIRD_COLOR,
        "text": text,
    })

from api.services.messages import (
    DECLINED_TEXT,
    lyrebird_authorization_message,
    notice_message,
    slack_authorization_message,
)

def test_lyrebird_authorization_message():
    message = lyrebird_authorization_message("https://myvoice.lyrebird.ai/authorize?x=1")

    assert message["response_type"] == "ephemeral"
    assert len(message["attachments"]) == 1
    attachment = message["attachments"][0]
    assert attachment["color"] == "#3367d6"
    assert attachment["title"] == "Authorize Lyrebird to use your vocal avatar"
    assert attachment["title_link"] == "https://myvoice.lyrebird.ai/authorize?x=1"
    assert "lyrebird.ai" in attachment["text"]

def test_slack_authorization_message():
    message = slack_authorization_message("https://slack.com/oauth/authorize")

    attachment = message["attachments"][0]
    assert message["response_type"] == "ephemeral"
    assert attachment["color"] == "#3F0F3F"
    assert attachment["title"] == "Add Lyrebird to my Slack workspace"
    assert attachment["title_link"] == "https://slack.com/oauth/authorize"

def test_notice_message():
    message = notice_message(DECLINED_TEXT)
    assert message == {
        "response_type": "ephemeral",
        "attachments": [{"color": "#3367d6", "text": DECLINED_TEXT}],
    }

def test_builders_are_deterministic():
    assert lyrebird_authorization_message("l") == lyrebird_authorization_message("l")
    assert slack_authorization_message("l") == slack_authorization_message("l")
    assert notice_message("hi") == notice_message("hi")

def test_builders_do_not_share_state():
    first = notice_message("hi")
    first["attachments"][0]["text"] = "changed"
    assert notice_message("hi")["attachments"][0]["text"] == "hi"

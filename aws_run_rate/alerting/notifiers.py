"""
Slack incoming-webhook delivery for the run rate table.
"""

import json
import requests
from typing import Dict, Any, List, Optional
import logging

from ..errors import NotifyError

logger = logging.getLogger(__name__)

# Slack rejects section text above 3000 characters.
DEFAULT_MAX_CHARS = 2900

TRUNCATED_LINE = "... (truncated)"


def slack_escape(s: str) -> str:
    """Escape the characters Slack treats as control sequences in mrkdwn."""
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def render_message_text(title: str, table: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Bold title line followed by the table in a code fence.

    Trailing table lines are dropped when the text would exceed `max_chars`.
    """
    header = f"*{slack_escape(title)}*"
    lines = slack_escape(table).split("\n")

    def _join(body: List[str]) -> str:
        return f"{header}\n```" + "\n".join(body) + "```"

    full = _join(lines)
    if len(full) <= max_chars:
        return full

    kept: List[str] = []
    for line in lines:
        if len(_join(kept + [line, TRUNCATED_LINE])) > max_chars:
            break
        kept.append(line)

    logger.warning(f"Slack message truncated to {len(kept)} of {len(lines)} table lines")
    if not kept:
        return _join([TRUNCATED_LINE])[:max_chars].rstrip()
    return _join(kept + [TRUNCATED_LINE])


def build_payload(title: str, table: str, max_chars: int = DEFAULT_MAX_CHARS) -> Dict[str, Any]:
    """Build the Block Kit payload: one mrkdwn section block."""
    return {
        "blocks": [
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": render_message_text(title, table, max_chars),
                },
            }
        ]
    }


def send_slack(webhook_url: str, payload: Dict[str, Any], timeout: Optional[float] = None) -> requests.Response:
    """POST a payload to a Slack webhook.

    The response status is logged but not treated as a failure; only
    serialization and transport errors raise.
    """
    try:
        body = json.dumps(payload)
    except (TypeError, ValueError) as e:
        raise NotifyError(f"Cannot serialize Slack payload: {e}") from e

    try:
        response = requests.post(
            webhook_url,
            data=body.encode("utf-8"),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise NotifyError(f"Error sending Slack notification: {e}") from e

    if response.ok:
        logger.info("Slack notification sent successfully")
    else:
        logger.warning(f"Slack webhook answered with status {response.status_code}")
    return response


class SlackNotifier:
    """Sends the rendered table to one webhook."""

    def __init__(
        self,
        webhook_url: str,
        title: str = "AWS Run Rate",
        timeout: Optional[float] = None,
        max_chars: int = DEFAULT_MAX_CHARS,
    ):
        self.webhook_url = webhook_url
        self.title = title
        self.timeout = timeout
        self.max_chars = max_chars

    def build_payload(self, table: str) -> Dict[str, Any]:
        return build_payload(self.title, table, self.max_chars)

    def send(self, table: str) -> requests.Response:
        payload = self.build_payload(table)
        logger.debug(f"Posting {len(table)} characters of table to Slack")
        return send_slack(self.webhook_url, payload, timeout=self.timeout)

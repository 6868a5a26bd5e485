"""Integration status derived from configured credentials.

No live health checks are made: a provider counts as connected when its
credentials are present in the configuration.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from aws_chatops.config import Settings

CONNECTED = "Connected"
NOT_CONNECTED = "Not Connected"


@dataclass(frozen=True)
class IntegrationStatus:
    name: str
    status: str
    details: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def aws_status(settings: Settings) -> IntegrationStatus:
    profile = settings.aws.default_profile
    has_keys = settings.aws.access_key_id_present
    if profile:
        details = f"Using profile: {profile}"
    elif has_keys:
        details = "Using IAM access keys"
    else:
        details = "No AWS credentials configured"
    return IntegrationStatus(
        name="AWS",
        status=CONNECTED if (profile or has_keys) else NOT_CONNECTED,
        details=details,
    )


def slack_status(settings: Settings) -> IntegrationStatus:
    if settings.slack.bot_token:
        return IntegrationStatus("Slack", CONNECTED, "Bot token configured")
    return IntegrationStatus("Slack", NOT_CONNECTED, "No Slack bot token")


def integration_statuses(settings: Settings) -> list[IntegrationStatus]:
    return [aws_status(settings), slack_status(settings)]

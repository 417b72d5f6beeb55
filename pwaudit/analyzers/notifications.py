"""
Notifications: Slack, generic webhooks and email.

A dependency alone is not enough; the source has to actually use it.
"""

import re
from pathlib import Path

from pwaudit.analyzers.helpers import (
    CODE_ROOTS,
    add_finding,
    create_category,
    finalize,
    read_text,
    walk_files,
)
from pwaudit.core.models import Category


def _all(text: str, *patterns: str, flags: int = 0) -> bool:
    return all(re.search(p, text, flags) for p in patterns)


def has_email_evidence(text: str) -> bool:
    """nodemailer, SendGrid, AWS SES или SMTP_* переменные рядом с отправкой."""
    if not text:
        return False
    return (
        (_all(text, r"nodemailer", flags=re.I) and _all(text, r"createTransport\s*\(", r"sendMail\s*\("))
        or _all(text, r"@sendgrid/mail", r"setApiKey\s*\(", r"\.(send|sendMultiple)\s*\(")
        or _all(text, r"@aws-sdk/client-ses", r"(new\s+SESClient\s*\(|SendEmailCommand\s*\()")
        or (
            _all(text, r"(SMTP_HOST|SMTP_SERVER|SMTP_USER|SMTP_PASS|SMTP_PORT)", flags=re.I)
            and _all(text, r"(sendMail|send\()")
        )
    )


def has_slack_evidence(text: str) -> bool:
    """Incoming webhook URL, @slack/webhook, @slack/web-api или прямой вызов slack.com/api."""
    if not text:
        return False
    return (
        _all(text, r"https?://hooks\.slack\.com/services/[A-Z0-9/]+", flags=re.I)
        or _all(text, r"@slack/webhook", r"(new\s+IncomingWebhook\s*\(|send\s*\()")
        or _all(text, r"@slack/web-api", r"(chat\.postMessage|conversations\.|users\.)")
        or (_all(text, r"slack\.com/api/", flags=re.I) and _all(text, r"(fetch|axios|got)\s*\("))
    )


def has_webhook_evidence(text: str) -> bool:
    """POST через axios/fetch/got на нелокальный URL."""
    if not text:
        return False
    http_post = _all(
        text,
        r"(axios\.(post|request)\s*\(|fetch\s*\(|got\.\w+\s*\()",
        r"(method\s*:\s*['\"]POST['\"]|\.post\s*\()",
    )
    return http_post and _all(text, r"https?://(?!localhost|127\.0\.0\.1)", flags=re.I)


async def analyze_notifications(target_dir: str) -> Category:
    cat = create_category("notify", "Notification")

    files = []
    for root in CODE_ROOTS:
        files.extend(await walk_files(Path(target_dir) / root, limit=5000))

    slack = webhook = email = False
    for path in files:
        text = await read_text(path)
        slack = slack or has_slack_evidence(text)
        webhook = webhook or has_webhook_evidence(text)
        email = email or has_email_evidence(text)
        if slack and webhook and email:
            break

    for title, passed, msg_pass, msg_fail in (
        ("Slack notifications", slack, "Slack notifications detected",
         "No Slack notification configuration/usage was found (incoming webhook or Web API)."),
        ("Webhook notifications", webhook, "Generic webhook notifications detected",
         "No generic webhook POST usage detected (axios/fetch/got to non-local URL)."),
        ("Email notifications", email, "Email notifications detected",
         "No email notification configuration/usage found (nodemailer/sendgrid/SES)."),
    ):
        add_finding(
            cat,
            finding_id="notif-" + re.sub(r"\W+", "-", title.lower()),
            title=title,
            ok=passed,
            severity="info",
            message=msg_pass if passed else msg_fail,
        )

    return finalize(cat)

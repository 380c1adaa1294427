from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from . import config
from .email_formatter import build_message, parse_address
from .extraction import RecordExtractor
from .mailer import RelaySession, SmtpRelay, TransportError
from .models import AddressError, BatchReport, DeliveryResult, MessageBuildError, RecipientError, SendError
from .recipients import load_recipients

logger = logging.getLogger(__name__)


def run(
    settings: config.Settings,
    extractor: RecordExtractor,
    relay: Optional[RelaySession] = None,
) -> BatchReport:
    records = load_recipients(settings.recipients_file)

    if relay is None:
        relay = SmtpRelay(
            host=config.RELAY_HOST,
            username=settings.sender,
            password=settings.app_password,
            port=config.RELAY_PORT,
            timeout=config.RELAY_TIMEOUT_SECONDS,
        )
    logger.info("Using SMTP relay=%s", config.RELAY_HOST)

    try:
        relay.check_connection()
        report = send_batch(records, extractor, relay, sender=settings.sender)
    finally:
        relay.close()

    _log_batch_counts(report)
    return report


def send_batch(
    records: Sequence[Any],
    extractor: RecordExtractor,
    relay: RelaySession,
    *,
    sender: str,
    subject: str = config.EMAIL_SUBJECT,
) -> BatchReport:
    """
    Send one message per record, in order, over an already checked session.

    Per-recipient failures are recorded in the returned report and never
    stop the batch.
    """
    report = BatchReport()
    total = len(records)

    try:
        sender_address: Optional[str] = parse_address(sender)
        sender_error: Optional[str] = None
    except ValueError as exc:
        sender_address = None
        sender_error = f"Invalid sender email address: {exc}"

    for idx, record in enumerate(records):
        logger.info("Sending email: %s/%s", idx + 1, total)

        try:
            recipient_address = parse_address(extractor.extract_address(record))
        except Exception as exc:  # noqa: BLE001
            _record_failure(report, AddressError(idx, f"Invalid recipient email address: {exc}"))
            continue

        if sender_address is None:
            _record_failure(report, AddressError(idx, sender_error or "Invalid sender email address"), recipient_address)
            continue

        try:
            body = extractor.extract_body(record)
            message = build_message(sender_address, recipient_address, body, subject)
        except Exception as exc:  # noqa: BLE001
            _record_failure(report, MessageBuildError(idx, f"Failed to build email message: {exc}"), recipient_address)
            continue

        try:
            relay.send(message)
        except TransportError as exc:
            logger.error("Unable to send email %s/%s: %s", idx + 1, total, exc)
            _record_failure(report, SendError(idx, f"Failed to send email: {exc}"), recipient_address)
            continue

        report.results.append(DeliveryResult(index=idx, status="sent", address=recipient_address))

    return report


def _record_failure(report: BatchReport, error: RecipientError, address: Optional[str] = None) -> None:
    logger.warning("Recipient %s failed (%s): %s", error.index + 1, error.kind, error.message)
    report.results.append(DeliveryResult(index=error.index, status="failed", address=address, error=error))


def _log_batch_counts(report: BatchReport) -> None:
    logger.info(
        "Batch completed. Total=%s Sent=%s Failed=%s",
        report.total,
        len(report.sent),
        len(report.errors),
    )

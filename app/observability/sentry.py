# File: app/observability/sentry.py | Version: 2.0 | Title: Optional Sentry initialization
import logging
import os

log = logging.getLogger(__name__)


def init_sentry_if_configured() -> None:
    """Initialize sentry_sdk when SENTRY_DSN is set (install the 'sentry' extra)."""
    dsn = os.getenv("SENTRY_DSN", "").strip()
    if not dsn:
        log.info("Sentry disabled (no SENTRY_DSN).")
        return

    try:
        import sentry_sdk
    except ImportError:
        log.warning("SENTRY_DSN is set but sentry-sdk is not installed; error reporting is off.")
        return

    traces = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))
    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("SENTRY_ENVIRONMENT", "development"),
        traces_sample_rate=traces,
        send_default_pii=False,
    )
    log.info("Sentry initialized (traces_sample_rate=%s).", traces)

import os
from logging import ERROR as LOG_ERROR

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

# Only initialize Sentry if DSN is provided and not in test environment
sentry_dsn = os.getenv("SENTRY_DSN")
is_test_env = os.getenv("CI") == "true" or os.getenv("ENVIRONMENT") == "test"

if sentry_dsn and not is_test_env:
    sentry_sdk.init(
        dsn=sentry_dsn,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            LoggingIntegration(level=None, event_level=LOG_ERROR),
        ],
        traces_sample_rate=float(os.getenv("SENTRY_TRACE_RATE", "0.20")),
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("GIT_SHA", "dev"),
        # Webhook bodies and checkout payloads must not leave the process
        send_default_pii=False,
    )

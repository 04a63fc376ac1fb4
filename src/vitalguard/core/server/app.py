"""VitalGuard MCP server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level ``mcp`` for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from vitalguard.core.audit.logger import AuditLogger
from vitalguard.core.config.settings import Settings, get_settings
from vitalguard.core.storage.database import AssessmentDatabase, DatabaseError
from vitalguard.core.storage.encryption import EncryptionError, FieldEncryptor
from vitalguard.core.storage.repository import AssessmentRepository
from vitalguard.core.storage.store import InMemoryPredictionStore, PredictionStore
from vitalguard.domains.health.domain_logic.confidence import (
    ConfidenceSource,
    create_confidence_source,
)
from vitalguard.domains.health.domain_logic.predictor import PREDICTION_MODES, create_predictor
from vitalguard.domains.health.domain_logic.trend_analyzer import TrendAnalyzer
from vitalguard.domains.health.prompts.vitals_prompts import register_vitals_prompts
from vitalguard.domains.health.resources.model_info import register_model_info_resources
from vitalguard.domains.health.tools.risk_assessment_tools import register_risk_assessment_tools
from vitalguard.domains.health.tools.vitals_trend_tools import register_vitals_trend_tools
from vitalguard.domains.health.tools.wellness_tools import register_wellness_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "VitalGuard"
SERVER_VERSION = "0.1.0"


def create_app(
    settings: Settings | None = None,
    *,
    store_override: PredictionStore | None = None,
    repository_override: AssessmentRepository | None = None,
    audit_logger_override: AuditLogger | None = None,
    confidence_source_override: ConfidenceSource | None = None,
) -> FastMCP:
    """Create and configure the VitalGuard MCP server.

    1. Builds the confidence source and both prediction strategies
    2. Opens encrypted history if an encryption key is configured,
       otherwise keeps a bounded in-memory window
    3. Registers tools, resources, and prompts

    ``repository_override`` enables the deletion and audit tools without a
    key in the environment; ``store_override`` replaces history entirely.
    """
    settings = settings or get_settings()

    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "VitalGuard vital-sign risk assessment server. Scores heart rate, "
            "blood pressure, SpO2 and temperature with an explainable ensemble of "
            "domain models, keeps assessment history, and reports trends."
        ),
    )

    # --- Prediction strategies ---
    confidence = confidence_source_override or create_confidence_source(
        settings.confidence_mode, settings.confidence_seed
    )
    predictors = {mode: create_predictor(mode, confidence) for mode in PREDICTION_MODES}
    logger.info(
        "Prediction strategies ready (default=%s, confidence=%s)",
        settings.prediction_mode,
        settings.confidence_mode,
    )

    # --- Encrypted history ---
    repository: AssessmentRepository | None = repository_override
    audit_logger: AuditLogger | None = audit_logger_override
    if repository is None and settings.encryption_key:
        try:
            encryptor = FieldEncryptor(settings.encryption_key)
            database = AssessmentDatabase(settings.db_path)
            database.initialize()
            repository = AssessmentRepository(database, encryptor)
            audit_logger = audit_logger or AuditLogger(database)
            logger.info(
                "Assessment history initialized: %s (schema v%d)",
                settings.db_path,
                database.get_schema_version(),
            )
        except (EncryptionError, DatabaseError) as exc:
            logger.error("Failed to initialize storage: %s", exc)
            logger.warning("Continuing with in-memory history only")
    elif repository is None:
        logger.info(
            "No ENCRYPTION_KEY configured; history is kept in memory "
            "(last %d assessments).",
            settings.history_limit,
        )

    store: PredictionStore = (
        store_override or repository or InMemoryPredictionStore(settings.history_limit)
    )

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "prediction_mode": settings.prediction_mode,
            "confidence_mode": settings.confidence_mode,
            "storage_enabled": repository is not None,
            "assessments_stored": store.count(),
        }

    register_risk_assessment_tools(
        server,
        predictors,
        store,
        default_mode=settings.prediction_mode,
        audit_logger=audit_logger,
    )
    register_vitals_trend_tools(server, TrendAnalyzer(store), audit_logger)
    register_wellness_tools(
        server,
        predictors,
        default_mode=settings.prediction_mode,
        audit_logger=audit_logger,
    )
    logger.info("Risk assessment, trend and wellness tools registered")

    if repository is not None:
        from vitalguard.domains.health.tools.data_management_tools import (
            register_data_management_tools,
        )

        register_data_management_tools(server, repository, audit_logger)
        logger.info("Data management tools registered")

    if audit_logger is not None:
        from vitalguard.domains.health.tools.audit_tools import register_audit_tools

        register_audit_tools(server, audit_logger)
        logger.info("Audit tools registered")

    # --- Register resources and prompts ---
    register_model_info_resources(server, settings.prediction_mode)
    register_vitals_prompts(server)

    return server


# Module-level instance for FastMCP discovery. Lazy, so importing create_app
# in tests does not build a server from the environment.
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

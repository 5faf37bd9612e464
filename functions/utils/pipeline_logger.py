"""Assessment pipeline logging.

structlog configuration for local entry points, plus highly visible
banners for the start, end and failure of an assessment run so they stand
out in emulator and dev-server log streams.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import structlog

logger = structlog.get_logger()

BANNER_WIDTH = 80
PIPELINE_BANNER_CHAR = "█"


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog with timestamps, levels and a console or JSON renderer."""
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=False,
    )


def _create_banner(char: str, text: str, width: int = BANNER_WIDTH) -> str:
    """Create a centered banner with given character."""
    text_with_spaces = f" {text} "
    padding = (width - len(text_with_spaces)) // 2
    return char * padding + text_with_spaces + char * (width - padding - len(text_with_spaces))


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def log_assessment_start(image_count: int, program_type: str, budget_cap: Optional[float]) -> None:
    """Log assessment start with prominent banner."""
    print("\n")
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(PIPELINE_BANNER_CHAR, "HOME SAFETY ASSESSMENT STARTED"))
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Timestamp    : {_timestamp()}")
    print(f"║ Images       : {image_count}")
    print(f"║ Program      : {program_type}")
    print(f"║ Budget Cap   : {budget_cap}")
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print("\n")

    logger.info(
        "assessment_started",
        image_count=image_count,
        program_type=program_type,
        budget_cap=budget_cap,
    )


def log_assessment_complete(
    hazards: int,
    recommendations: int,
    safety_score: float,
    duration_ms: float,
) -> None:
    """Log assessment completion with summary."""
    print("\n")
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(PIPELINE_BANNER_CHAR, "✓ ASSESSMENT COMPLETED"))
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Timestamp       : {_timestamp()}")
    print(f"║ Duration        : {duration_ms:,.0f} ms ({duration_ms / 1000:.2f}s)")
    print(f"║ Hazards         : {hazards}")
    print(f"║ Recommendations : {recommendations}")
    print(f"║ Safety Score    : {safety_score:g}")
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print("\n")

    logger.info(
        "assessment_complete",
        hazards=hazards,
        recommendations=recommendations,
        safety_score=safety_score,
        duration_ms=round(duration_ms, 2),
    )


def log_assessment_failed(error: Exception, duration_ms: float) -> None:
    """Log assessment failure with details."""
    print("\n")
    print("!" * BANNER_WIDTH)
    print(_create_banner("!", "✗ ASSESSMENT FAILED"))
    print("!" * BANNER_WIDTH)
    print(f"║ Timestamp : {_timestamp()}")
    print(f"║ Error     : {type(error).__name__}: {error}")
    print("!" * BANNER_WIDTH)
    print("\n")

    logger.error(
        "assessment_failed",
        error=str(error),
        error_type=type(error).__name__,
        duration_ms=round(duration_ms, 2),
    )

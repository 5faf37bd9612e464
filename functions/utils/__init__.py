"""Utility modules for the home assessment functions."""

from utils.formatting import format_currency, format_percent, round_half_up
from utils.pipeline_logger import (
    configure_logging,
    log_assessment_start,
    log_assessment_complete,
    log_assessment_failed,
)

__all__ = [
    "format_currency",
    "format_percent",
    "round_half_up",
    "configure_logging",
    "log_assessment_start",
    "log_assessment_complete",
    "log_assessment_failed",
]

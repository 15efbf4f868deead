"""
Pipeline orchestration.

Runs the phases in order against one configuration:

    LoadSources -> RowRepair -> TableBuilder -> KeyNormalizer -> Linkage -> Export

Usage:
    from pollmerge.config import Config
    from pollmerge.pipeline import run_pipeline

    result = run_pipeline(Config(address_csv=..., polling_csv=..., ...))
    print(result.stats.summary_str())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Type

from .config import Config, get_config
from .exceptions import PollMergeError
from .logger import configure_logging, get_logger, log_timing
from .models import LinkageResult, ProcessingStats, RepairResult
from .processors import (
    BaseProcessor,
    ExportProcessor,
    KeyNormalizerProcessor,
    LinkageProcessor,
    ProcessingContext,
    RowRepairProcessor,
    SourceLoader,
    TableBuilderProcessor,
)

logger = get_logger("pipeline")

PHASES: List[Type[BaseProcessor]] = [
    SourceLoader,
    RowRepairProcessor,
    TableBuilderProcessor,
    KeyNormalizerProcessor,
    LinkageProcessor,
    ExportProcessor,
]


@dataclass
class PipelineResult:
    """Everything a finished run produced."""
    stats: ProcessingStats
    repair: RepairResult
    linkage: LinkageResult
    written_paths: List[Path] = field(default_factory=list)


def run_pipeline(config: Optional[Config] = None) -> PipelineResult:
    """
    Run the whole merge once.

    Args:
        config: Run configuration (default: global config from environment)

    Returns:
        PipelineResult with stats, repair outcome and linkage

    Raises:
        PollMergeError: a phase failed; error.phase names it. Unexpected
            exceptions are wrapped, with the original as __cause__.
    """
    config = config or get_config()
    configure_logging(config.logs_dir, debug=config.debug, log_to_file=config.log_to_file)
    context = ProcessingContext(config=config)
    context.stats.start()

    logger.info("Polling-place merge started")

    try:
        for phase in PHASES:
            phase(context).run()
    except PollMergeError as e:
        context.stats.fail(e.message, phase=e.phase or context.failed_phase or "")
        logger.error(context.stats.summary_str())
        raise
    except Exception as e:
        phase_name = context.failed_phase or ""
        context.stats.fail(str(e), phase=phase_name)
        logger.error(context.stats.summary_str())
        raise PollMergeError(
            f"Unexpected {type(e).__name__}: {e}",
            details={"phase": phase_name, "error_type": type(e).__name__},
        ) from e

    context.stats.complete()
    logger.debug(f"Run stats: {context.stats.to_dict()}")
    log_timing(logger, "Polling-place merge", context.stats.total_time_sec)
    logger.info(context.stats.summary_str())

    return PipelineResult(
        stats=context.stats,
        repair=context.repair,
        linkage=context.linkage,
        written_paths=context.written_paths,
    )

"""Pipeline for mapping biological monitoring sites, wards and rivers.

Reads ward boundaries, the site registry, biological index records and the
river network, assigns sites to wards, attaches coordinates to biological
records, selects the named river and the area's rivers, and writes the maps
and score distribution plots to FIGURES_DIR.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

# Import after path is set
import config
from logging_config import (
    setup_logging, get_logger, log_pipeline_start,
    log_pipeline_end)
from apem import ApemError, RunConfig, run_pipeline
from apem.pipeline import render_figures

PIPELINE_NAME = "Ward Maps Pipeline"


def main() -> int:
    """Main entry point for the ward maps pipeline."""
    setup_logging(
        level=config.LOG_LEVEL,
        log_file=config.LOG_FILE,
        json_format=config.LOG_JSON,
        verbose=config.LOG_VERBOSE,
    )
    logger = get_logger("apem.run_ward_maps")

    run_config = RunConfig.from_env()
    log_pipeline_start(PIPELINE_NAME)
    logger.info(f"Inputs: wards={run_config.wards_path}, sites={run_config.sites_path}, "
                f"bio={run_config.bio_path}, rivers={run_config.rivers_path}")
    logger.info(f"Biological records from {run_config.start_date} to {run_config.end_date}")

    try:
        result = run_pipeline(run_config)
    except ApemError as e:
        logger.error(f"[ERROR] Pipeline execution failed: {e}")
        log_pipeline_end(PIPELINE_NAME, success=False, error=str(e), pipeline_stage=e.stage)
        return 1

    unmatched_sites = int(result.sites[run_config.ward_code_field].isna().sum())
    unmatched_bio = int(result.bio.geometry.isna().sum())
    logger.info(f"Sites: {len(result.sites)} in area, {unmatched_sites} outside every ward")
    logger.info(f"Wards: {int((result.wards['Count'] > 0).sum())}/{len(result.wards)} with sites")
    logger.info(f"Biological records: {len(result.bio)}, {unmatched_bio} without site coordinates")
    logger.info(f"Rivers: {len(result.named_river)} '{run_config.river_name}' segments, "
                f"{len(result.area_rivers)} segments in area")

    config.ensure_dirs(config.FIGURES_DIR)
    written = render_figures(
        result,
        config.FIGURES_DIR,
        ward_code_field=run_config.ward_code_field,
        water_body_field=config.WATER_BODY_FIELD,
        score_field=config.SCORE_FIELD,
    )
    logger.info(f"Wrote {len(written)} figures to {config.FIGURES_DIR}")
    log_pipeline_end(PIPELINE_NAME, success=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())

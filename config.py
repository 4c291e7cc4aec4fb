"""
Central configuration for photojob.

Flat-constant interface. Every value is derived from the structured config
singleton in ``config_structured.py`` so there is a single source of truth.

Config Status Legend
====================
  ACTIVE      — Imported and used by running code.

Search for ``# STATUS:`` to locate all annotations.
"""
from .config_structured import get_config as _get_config

_cfg = _get_config()

# ── Output artifact naming ─────────────────────────────────────────────
OUTPUT_NAME_MAX_LENGTH = _cfg.output.max_name_length  # STATUS: ACTIVE — jobs/output.py; source name truncation
OUTPUT_SUFFIX = _cfg.output.suffix                # STATUS: ACTIVE — jobs/output.py; fixed file name suffix
OUTPUT_EXTENSION = _cfg.output.extension          # STATUS: ACTIVE — jobs/output.py; artifact extension

# ── External tool ──────────────────────────────────────────────────────
TOOL_EXECUTABLE = _cfg.tool.executable            # STATUS: ACTIVE — settings.py default executable
TOOL_BASE_ARGS = list(_cfg.tool.base_args)        # STATUS: ACTIVE — jobs/tool.py; leading CLI arguments
TOOL_INPUT_FLAG = _cfg.tool.input_flag            # STATUS: ACTIVE — jobs/tool.py
TOOL_OUTPUT_FLAG = _cfg.tool.output_flag          # STATUS: ACTIVE — jobs/tool.py
TOOL_STREAM_LIMIT = _cfg.tool.stream_limit        # STATUS: ACTIVE — jobs/tool.py; per-line buffer limit

# ── Logging ────────────────────────────────────────────────────────────
LOG_LEVEL = _cfg.logging.level                    # STATUS: ACTIVE — settings.py default level
LOG_JSON = _cfg.logging.json_logs                 # STATUS: ACTIVE — settings.py default; StructuredFormatter toggle

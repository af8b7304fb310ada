"""
Common utilities for the netanalyzer library.

This module provides shared functionality used across all other modules:
- Custom exception hierarchy
- ID mapping between node ids and contiguous integer indices
- Input validation for edge lists
- Logging configuration
"""

from .exceptions import (
    NetworkAnalysisError,
    ValidationError,
    GraphConstructionError,
    ConfigurationError,
    ComputationError,
    DataFormatError,
    validate_parameter,
    require_positive,
    require_in_range
)

from .id_mapper import IDMapper
from .validators import validate_edgelist_dataframe

from .logging_config import (
    setup_logging,
    get_logger,
    log_function_entry,
    log_performance_metric,
    LoggingTimer,
    LoggingSettings,
    JSONFormatter
)

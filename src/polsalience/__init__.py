"""
polsalience - Dictionary-based political actor salience with validation

Detects mentions of political actors in short texts with a regex
dictionary and validates the resulting labels against manually coded,
reliability-certified baselines.
"""

__version__ = "0.1.0"

from polsalience.config import Config, load_config

__all__ = [
    "__version__",
    "Config",
    "load_config",
]

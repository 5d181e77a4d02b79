"""
Assistant config: load from env.

Load from env: load_postgres_config(), load_brain_config().
"""
from aesthetica.config.brain import BrainConfig, load_brain_config
from aesthetica.config.postgres import PostgresConfig, database_configured, load_postgres_config

__all__ = [
    "BrainConfig",
    "load_brain_config",
    "PostgresConfig",
    "database_configured",
    "load_postgres_config",
]

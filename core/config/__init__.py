"""Environment configuration and downstream service URLs."""

from core.config.env import REQUIRED_ENV_VARS, check_required_env, missing_env_vars

__all__ = ["REQUIRED_ENV_VARS", "check_required_env", "missing_env_vars"]

from .logging import setup_logger
from .seed import AGENT_STREAM, ENV_STREAM, role_seed, seed32_from

__all__ = ["AGENT_STREAM", "ENV_STREAM", "role_seed", "seed32_from", "setup_logger"]

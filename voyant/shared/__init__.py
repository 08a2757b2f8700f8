"""
Shared infrastructure for the assistant.

Modules:
- config: Environment-driven configuration
- llm: OpenAI client with retry logic and JSON parsing
- logging: Logging setup and structured state-transition logs
- contracts: Route results, content classification and receipts
"""

from voyant.shared.llm.client import get_cached_client, call_llm
from voyant.shared.logging.config import setup_logging, log_state_transition

__all__ = [
    "get_cached_client",
    "call_llm",
    "setup_logging",
    "log_state_transition",
]

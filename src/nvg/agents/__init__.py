"""Agents that produce scene scripts."""

from .base import BaseAgent
from .fallback import build_fallback_script
from .script import ScriptAgent, ScriptService, ScriptParseResult, parse_script_response

__all__ = [
    "BaseAgent",
    "ScriptAgent",
    "ScriptService",
    "ScriptParseResult",
    "parse_script_response",
    "build_fallback_script",
]

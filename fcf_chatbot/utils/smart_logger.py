# fcf_chatbot/utils/smart_logger.py
"""
Smart, modular logging for the chatbot.
Provides clean, contextual logs with configurable verbosity levels.
"""

import logging
import os
import sys
from typing import Any, Dict, Optional
from enum import Enum


class LogLevel(Enum):
    MINIMAL = 1      # Only critical flow events
    STANDARD = 2     # Sessions, selections and transitions
    DETAILED = 3     # Include transcript sizes and timing
    DEBUG = 4        # Everything including tree loads and state dumps


class SmartLogger:
    def __init__(self, name: str, level: LogLevel = LogLevel.STANDARD):
        self.logger = logging.getLogger(name)
        self.level = level

    def set_level(self, level: LogLevel):
        """Change logging verbosity at runtime"""
        self.level = level

    def _should_log(self, required_level: LogLevel) -> bool:
        return self.level.value >= required_level.value

    @staticmethod
    def _short(session_id: Optional[str]) -> str:
        return session_id[-8:] if session_id else "unknown"

    def _clean_log(self, level: str, emoji: str, category: str, message: str, **kwargs):
        """Internal clean logging method"""
        details = " | ".join([f"{k}={v}" for k, v in kwargs.items() if v is not None])
        if details:
            full_message = f"{emoji} {category} | {message} | {details}"
        else:
            full_message = f"{emoji} {category} | {message}"

        getattr(self.logger, level.lower())(full_message)

    # ═══════════════════════════════════════════════════════════
    # HIGH-LEVEL FLOW EVENTS (Always shown)
    # ═══════════════════════════════════════════════════════════

    def tree_loaded(self, source: str, states: int, dangling: int):
        if not self._should_log(LogLevel.MINIMAL):
            return
        self._clean_log("info", "🌳", "TREE", "loaded", source=source, states=states, dangling=dangling)

    def tree_load_failed(self, source: str, reason: str):
        # Always logged regardless of level
        self._clean_log("error", "❌", "TREE", "load failed", source=source, reason=reason)

    def session_started(self, session_id: str, entry_point: Optional[str], ready: bool):
        if not self._should_log(LogLevel.MINIMAL):
            return
        self._clean_log("info", "🚀", "SESSION", "started",
                        sid=self._short(session_id), entry=entry_point, ready=ready)

    def flow_decision(self, session_id: str, decision: str, state: Optional[str] = None, reason: str = None):
        """Log transition decisions (scheduled / rendered / discarded / stalled)"""
        if not self._should_log(LogLevel.MINIMAL):
            return
        self._clean_log("info", "🎯", "FLOW", decision, sid=self._short(session_id), state=state, reason=reason)

    # ═══════════════════════════════════════════════════════════
    # STANDARD EVENTS
    # ═══════════════════════════════════════════════════════════

    def option_selected(self, session_id: str, label: str, current: Optional[str], target: str):
        if not self._should_log(LogLevel.STANDARD):
            return
        label_preview = label[:40] + "..." if len(label) > 40 else label
        self._clean_log("info", "👆", "SELECT", f"'{label_preview}'",
                        sid=self._short(session_id), from_state=current, to=target)

    def session_reset(self, session_id: str, generation: int, cancelled_pending: bool):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "🔄", "SESSION", "reset",
                        sid=self._short(session_id), gen=generation, cancelled=cancelled_pending)

    def session_expired(self, count: int, remaining: int):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "🧹", "SESSION", f"evicted {count}", remaining=remaining)

    def warning(self, session_id: Optional[str], warning_type: str, details: str = None):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("warning", "⚠️", "WARNING", warning_type, sid=self._short(session_id), details=details)

    def error_occurred(self, session_id: Optional[str], error_type: str, operation: str, error_msg: str = None):
        # Errors are always logged regardless of level
        self._clean_log("error", "❌", "ERROR", f"{error_type} in {operation}",
                        sid=self._short(session_id), msg=error_msg)

    # ═══════════════════════════════════════════════════════════
    # DETAILED / DEBUG EVENTS
    # ═══════════════════════════════════════════════════════════

    def transcript_change(self, session_id: str, change_type: str, entries: int):
        if not self._should_log(LogLevel.DETAILED):
            return
        self._clean_log("debug", "📝", "TRANSCRIPT", change_type, sid=self._short(session_id), entries=entries)

    def debug_state(self, session_id: Optional[str], state_name: Optional[str], state_data: Dict[str, Any]):
        """Log state information, keys and sizes only"""
        if not self._should_log(LogLevel.DEBUG):
            return
        summary = {k: len(v) if isinstance(v, (list, dict, str)) else str(v)[:20]
                   for k, v in state_data.items()}
        self._clean_log("debug", "🔍", "STATE", str(state_name), sid=self._short(session_id), **summary)

    def api_call(self, service: str, operation: str, status: str = "started"):
        if not self._should_log(LogLevel.DEBUG):
            return
        emoji = "📡" if status == "started" else "✅" if status == "success" else "❌"
        self._clean_log("debug", emoji, "API", f"{service} {operation}", status=status)


# ═══════════════════════════════════════════════════════════════════════════════
# GLOBAL LOGGER INSTANCES AND CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

_loggers: Dict[str, SmartLogger] = {}


def get_smart_logger(module_name: str, level: LogLevel = None) -> SmartLogger:
    """Get or create a smart logger for a module"""
    if module_name not in _loggers:
        default_level = getattr(LogLevel, os.getenv('BOT_LOG_LEVEL', 'STANDARD').upper(), LogLevel.STANDARD)
        _loggers[module_name] = SmartLogger(f"fcf_chatbot.{module_name}", level or default_level)

    if level:
        _loggers[module_name].set_level(level)

    return _loggers[module_name]


def configure_logging(level: LogLevel = LogLevel.STANDARD,
                      format_string: str = None,
                      silence_external: bool = True):
    """Configure the entire logging system"""
    if not format_string:
        format_string = '%(asctime)s | %(message)s'

    logging.basicConfig(
        level=logging.DEBUG if level.value >= LogLevel.DETAILED.value else logging.INFO,
        format=format_string,
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    if silence_external:
        logging.getLogger('werkzeug').setLevel(logging.WARNING)
        logging.getLogger('urllib3').setLevel(logging.WARNING)

    for smart_logger in _loggers.values():
        smart_logger.set_level(level)

    print(f"🔧 Smart logging configured at {level.name} level")

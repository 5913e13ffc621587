"""Audit logging for state-changing API calls.

Each create, update or delete sent through the transport is written as one
JSON line to ``~/.tfe/logs/audit.log``.
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from . import __version__


class AuditLogger:
    """Writes structured audit entries for mutating requests."""

    def __init__(self, log_dir: Optional[Path] = None) -> None:
        """Initialize audit logger.

        Args:
            log_dir: Directory for audit logs. Defaults to ~/.tfe/logs
        """
        if log_dir is None:
            log_dir = Path.home() / ".tfe" / "logs"

        self.log_dir = log_dir
        self.log_dir.mkdir(parents=True, exist_ok=True)
        os.chmod(self.log_dir, 0o700)

        self.audit_log_file = self.log_dir / "audit.log"
        self._setup_logging()

    def _setup_logging(self) -> None:
        """Configure the file handler."""
        # Keyed by directory: each audit file has exactly one handler.
        self.logger = logging.getLogger(f'tfe_audit.{self.log_dir.resolve()}')
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False
        self.close()

        if not self.audit_log_file.exists():
            self.audit_log_file.touch()
        os.chmod(self.audit_log_file, 0o600)

        handler = logging.FileHandler(self.audit_log_file)
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter('%(message)s'))
        self.logger.addHandler(handler)

    def _create_log_entry(
        self,
        method: str,
        path: str,
        success: bool,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "action": method.lower(),
            "resource": path,
            "result": "SUCCESS" if success else "FAILURE",
            "source": "tfe_cli",
            "version": __version__
        }

        if status_code is not None:
            entry["status_code"] = status_code
        if details:
            entry["details"] = details

        return entry

    def log_request(
        self,
        method: str,
        path: str,
        success: bool,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Record the outcome of a mutating request.

        Args:
            method: HTTP method
            path: Request path
            success: Whether the server accepted the request
            status_code: HTTP status, when a response was received
            details: Additional details
        """
        entry = self._create_log_entry(method, path, success, status_code, details)
        level = logging.INFO if success else logging.WARNING
        self.logger.log(level, json.dumps(entry, default=str))

    def close(self) -> None:
        """Flush and detach handlers."""
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

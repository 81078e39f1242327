#!/usr/bin/env python3
"""
TAML ENGINE - File Orchestrator
-------------------------------
The TamlEngine owns everything the round-trip core does not: reading files,
validating them, rewriting them in canonical form with backups and atomic
writes, and walking directories safely.

Author: TAML Core Team
Date: 2026-10-18
"""

import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from taml.core.config import EngineConfig
from taml.core.errors import TamlError
from taml.parsing.pipeline import TamlPipeline

logger = logging.getLogger("taml.engine")

BACKUP_SUFFIX = ".backup"
TEMP_SUFFIX = ".tmp"


class TamlEngine:
    """
    Principal orchestrator for TAML files inside one workspace directory.
    """

    def __init__(self, workspace_path: str, config: Optional[EngineConfig] = None):
        self.workspace = Path(workspace_path).resolve()
        self.config = config or EngineConfig()
        self.pipeline = TamlPipeline(self.config.parse, self.config.serialize)
        self._ensure_workspace()

    def _ensure_workspace(self):
        """Validates/Creates target workspace to prevent OS path errors."""
        if not self.workspace.exists():
            logger.info(f"Creating missing workspace: {self.workspace}")
            self.workspace.mkdir(parents=True, exist_ok=True)

    def _resolve(self, path: str) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.workspace / candidate
        return candidate.resolve()

    def read(self, path: str) -> str:
        """Reads a TAML file (BOM-aware)."""
        return self._resolve(path).read_text(encoding='utf-8-sig')

    def parse_file(self, path: str) -> Dict[str, Any]:
        return self.pipeline.parse(self.read(path))

    def validate_file(self, path: str):
        return self.pipeline.validate(self.read(path))

    def audit_file(self, relative_path: str, fix: bool = False,
                   dry_run: bool = False) -> Dict[str, Any]:
        """
        Validates one file and, in fix mode, rewrites it canonically.
        Invalid files are never rewritten.
        """
        full_path = self._resolve(relative_path)
        if not full_path.exists():
            return self._file_error(relative_path, "FILE_NOT_FOUND", f"Path missing: {full_path}")

        try:
            raw_text = full_path.read_text(encoding='utf-8-sig')
            validation = self.pipeline.validate(raw_text)

            formatted = None
            comments_dropped = 0
            if validation.is_valid:
                context = self.pipeline.run(raw_text)
                formatted = self.pipeline.serialize(context.tree)
                comments_dropped = context.comment_lines
        except (TamlError, UnicodeDecodeError, OSError) as e:
            logger.error(f"Error processing {relative_path}: {e}")
            return self._file_error(relative_path, "ENGINE_ERROR", str(e))

        is_modified = formatted is not None and formatted != raw_text
        result = {
            "file_path": str(relative_path),
            "status": self._derive_status(validation.is_valid, fix, is_modified, dry_run),
            "success": validation.is_valid,
            "diagnostics": validation.diagnostics,
            "error_count": len(validation.errors),
            "warning_count": len(validation.warnings),
            "original_content": raw_text if is_modified else None,
            "formatted_content": formatted if is_modified else None,
            "comments_dropped": comments_dropped if is_modified else 0,
            "written": False,
            "backup_created": None,
            "timestamp": time.time(),
        }

        if fix and not dry_run and is_modified:
            if self.config.backup:
                backup_path = self._create_unique_backup(full_path)
                try:
                    backup_path.write_bytes(full_path.read_bytes())
                    result["backup_created"] = str(backup_path.relative_to(self.workspace))
                except OSError as e:
                    result["backup_warning"] = f"Backup failed: {e}"
                    logger.warning(f"Backup of {relative_path} failed: {e}")
            try:
                self._atomic_write(full_path, formatted)
                result["written"] = True
            except OSError as e:
                result["write_error"] = str(e)
                result["success"] = False

        return result

    def scan_directory(self, fix: bool = False, dry_run: bool = True,
                       progress_callback: Optional[Callable[[int, int], None]] = None) -> List[Dict[str, Any]]:
        """
        Recursively discovers and audits all TAML files with safety gates.
        """
        extension = self.config.extension
        patterns = {f"*{extension.lower()}", f"*{extension.upper()}"}

        # Symlinks are skipped to avoid loops
        all_files = sorted({
            f for p in patterns for f in self.workspace.rglob(p)
            if f.is_file() and not f.is_symlink()
        })

        reports = []
        total_files = len(all_files)
        for processed, file_path in enumerate(all_files, 1):
            rel_path = file_path.relative_to(self.workspace)
            if len(rel_path.parts) > self.config.max_depth:
                logger.debug(f"Skipping {rel_path}: deeper than max_depth={self.config.max_depth}")
                continue
            reports.append(self.audit_file(str(rel_path), fix=fix, dry_run=dry_run))
            if progress_callback:
                progress_callback(processed, total_files)

        return reports

    def generate_summary(self, reports: List[Dict[str, Any]]) -> Dict[str, Any]:
        if not reports:
            return {
                "total_files": 0, "valid": 0, "invalid": 0, "formatted": 0,
                "system_errors": 0, "backups_created": 0,
            }

        return {
            "total_files": len(reports),
            "valid": sum(1 for r in reports if r.get("success")),
            "invalid": sum(1 for r in reports if r.get("status") == "INVALID"),
            "formatted": sum(1 for r in reports if r.get("written")),
            "system_errors": sum(1 for r in reports if r.get("status") in ("ENGINE_ERROR", "FILE_NOT_FOUND")),
            "backups_created": sum(1 for r in reports if r.get("backup_created")),
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }

    def _derive_status(self, valid: bool, fix: bool, modified: bool, dry: bool) -> str:
        if not valid:
            return "INVALID"
        if not fix:
            return "VALID"
        if not modified:
            return "UNCHANGED"
        return "PREVIEW" if dry else "FORMATTED"

    def _atomic_write(self, target_path: Path, content: str):
        if not os.access(target_path.parent, os.W_OK):
            raise PermissionError(f"No write access to {target_path.parent}")
        temp_file = target_path.with_name(target_path.name + TEMP_SUFFIX)
        try:
            temp_file.write_text(content, encoding='utf-8')
            os.replace(temp_file, target_path)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise OSError(f"Atomic write failed: {e}") from e

    def _create_unique_backup(self, target_path: Path) -> Path:
        backup_path = target_path.with_name(target_path.name + BACKUP_SUFFIX)
        counter = 1
        while backup_path.exists():
            backup_path = target_path.with_name(f"{target_path.name}-{counter}{BACKUP_SUFFIX}")
            counter += 1
        return backup_path

    def _file_error(self, path: str, status: str, error: str) -> Dict[str, Any]:
        return {
            "file_path": str(path), "status": status, "error": error,
            "success": False, "diagnostics": [], "written": False,
            "formatted_content": None, "backup_created": None,
        }

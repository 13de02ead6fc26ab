"""
Sales master storage with JSON-based persistence.

Stands in for the application's database: lookups for login, filtered
listing, and create / update / delete with sales-code and email uniqueness.
"""

import json
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional, Tuple

from dailyreport.models.sales import SalesRecord
from dailyreport.utils.exceptions import ConflictError, NotFoundError, StorageError
from dailyreport.utils.logger import get_logger

logger = get_logger(__name__)

SALES_FILENAME = "sales.json"


class SalesStore:
    """File-backed sales record store"""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = Lock()

    @classmethod
    def in_dir(cls, data_dir: Path) -> "SalesStore":
        return cls(Path(data_dir) / SALES_FILENAME)

    def load_all(self) -> List[SalesRecord]:
        """Load all sales records from storage"""
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [SalesRecord(**item) for item in data.get("sales", [])]
        except (json.JSONDecodeError, KeyError, ValueError, TypeError, AttributeError) as e:
            logger.error("Failed to load sales records", path=str(self.path), error=str(e))
            raise StorageError()

    def find_by_code(self, sales_code: str) -> Optional[SalesRecord]:
        return next((s for s in self.load_all() if s.sales_code == sales_code), None)

    def find_by_id(self, sales_id: str) -> Optional[SalesRecord]:
        return next((s for s in self.load_all() if s.id == sales_id), None)

    def list_sales(
        self,
        sales_name: Optional[str] = None,
        sales_code: Optional[str] = None,
        department: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[SalesRecord], int]:
        """
        Filtered, newest-first page of records.

        Name and code filters are case-insensitive substring matches;
        department must match exactly.

        Returns:
            Tuple of (records on the page, total matching records)
        """
        records = self.load_all()
        if sales_name:
            records = [s for s in records if sales_name.lower() in s.sales_name.lower()]
        if sales_code:
            records = [s for s in records if sales_code.lower() in s.sales_code.lower()]
        if department:
            records = [s for s in records if s.department == department]

        records.sort(key=lambda s: s.created_at, reverse=True)
        start = (page - 1) * limit
        return records[start:start + limit], len(records)

    def create(self, record: SalesRecord) -> SalesRecord:
        """Insert a record. Sales code and email must be unique."""
        with self._lock:
            records = self.load_all()
            if any(s.sales_code == record.sales_code for s in records):
                raise ConflictError("This sales code is already in use")
            self._check_email_free(records, record.email)

            records.append(record)
            self._save(records)

        logger.info("Sales record created", sales_id=record.id, sales_code=record.sales_code)
        return record

    def update(self, sales_id: str, **changes: Any) -> SalesRecord:
        """
        Replace fields of an existing record.

        The sales code is immutable. Changing the email checks it against
        every other record.

        Raises:
            NotFoundError: No record with sales_id
            ConflictError: Email already used by another record
        """
        changes.pop("sales_code", None)
        changes.pop("id", None)
        with self._lock:
            records = self.load_all()
            index = self._index_of(records, sales_id)
            current = records[index]

            email = changes.get("email")
            if email is not None and email.lower() != current.email.lower():
                self._check_email_free(records, email, exclude_id=sales_id)

            changes["updated_at"] = datetime.now(timezone.utc).isoformat()
            updated = SalesRecord(**{**current.model_dump(), **changes})
            records[index] = updated
            self._save(records)

        logger.info("Sales record updated", sales_id=sales_id, fields=sorted(changes))
        return updated

    def delete(self, sales_id: str) -> None:
        """Remove a record; subordinates lose their manager link."""
        with self._lock:
            records = self.load_all()
            index = self._index_of(records, sales_id)
            del records[index]
            records = [
                s.model_copy(update={"manager_id": None}) if s.manager_id == sales_id else s
                for s in records
            ]
            self._save(records)

        logger.info("Sales record deleted", sales_id=sales_id)

    @staticmethod
    def _index_of(records: List[SalesRecord], sales_id: str) -> int:
        for i, s in enumerate(records):
            if s.id == sales_id:
                return i
        raise NotFoundError("Sales record not found")

    @staticmethod
    def _check_email_free(
        records: List[SalesRecord], email: str, exclude_id: Optional[str] = None
    ) -> None:
        if any(s.email.lower() == email.lower() and s.id != exclude_id for s in records):
            raise ConflictError("This email address is already in use")

    def _save(self, records: List[SalesRecord]) -> None:
        self._atomic_write({"sales": [s.model_dump() for s in records]})

    def _atomic_write(self, data: Dict[str, Any]) -> None:
        """Write JSON file atomically"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w", dir=self.path.parent, delete=False, encoding="utf-8"
        ) as tf:
            json.dump(data, tf, indent=2, ensure_ascii=False)
            temp_path = Path(tf.name)

        try:
            shutil.move(str(temp_path), str(self.path))
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            logger.error("Failed to save sales records", path=str(self.path), error=str(e))
            raise StorageError()

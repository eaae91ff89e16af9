"""
Persistence backends for saved entries.

Both backends expose the same small surface: list / latest / insert / delete.
`LocalStore` keeps everything in one JSON file on disk; `DatabaseStore` keeps
one `EntryRow` per entry through the ORM.
"""
import json
import logging
import threading
from pathlib import Path

from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from .entry import Entry
from .exceptions import UploadFailure
from .models import EntryRow

logger = logging.getLogger(__name__)


class LocalStore:
    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self):
        if not self.path.exists():
            return []
        return json.loads(self.path.read_text(encoding="utf-8") or "[]")

    def _write(self, records):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)

    def _records(self, site=None, entry_date=None):
        records = self._read()
        if site is not None:
            records = [r for r in records if r["entry"].get("site") == site]
        if entry_date is not None:
            records = [r for r in records if r["entry"].get("date") == entry_date.isoformat()]
        return records

    def list(self, site=None, entry_date=None):
        # Later inserts win ties on createdAt.
        records = self._records(site, entry_date)[::-1]
        records.sort(key=lambda r: r["createdAt"], reverse=True)
        return [Entry.from_dict(r["entry"]) for r in records]

    def get(self, entry_id):
        for record in self._read():
            if record["entry"]["id"] == entry_id:
                return Entry.from_dict(record["entry"])
        return None

    def latest(self, site):
        records = self._records(site)
        if not records:
            return None
        newest = max(records, key=lambda r: (r["entry"].get("date", ""), r["createdAt"]))
        return Entry.from_dict(newest["entry"])

    def insert(self, entry):
        with self._lock:
            try:
                records = self._read()
                if any(r["entry"]["id"] == entry.id for r in records):
                    raise UploadFailure(f"Entry {entry.id} already saved.")
                records.append({"createdAt": timezone.now().isoformat(), "entry": entry.to_dict()})
                self._write(records)
            except (OSError, ValueError) as exc:
                logger.error("Local save failed for %s: %s", entry.id, exc)
                raise UploadFailure(f"Could not save entry: {exc}") from exc
        return entry

    def delete(self, entry_id):
        with self._lock:
            records = self._read()
            kept = [r for r in records if r["entry"]["id"] != entry_id]
            if len(kept) == len(records):
                return False
            self._write(kept)
        return True


class DatabaseStore:
    def _queryset(self, site=None, entry_date=None):
        qs = EntryRow.objects.all()
        if site is not None:
            qs = qs.filter(site=site)
        if entry_date is not None:
            qs = qs.filter(entry_date=entry_date)
        return qs

    def list(self, site=None, entry_date=None):
        return [row.to_entry() for row in self._queryset(site, entry_date).order_by("-created_at")]

    def get(self, entry_id):
        row = EntryRow.objects.filter(pk=entry_id).first()
        return row.to_entry() if row else None

    def latest(self, site):
        row = self._queryset(site).order_by("-entry_date", "-created_at").first()
        return row.to_entry() if row else None

    def insert(self, entry):
        if EntryRow.objects.filter(pk=entry.id).exists():
            raise UploadFailure(f"Entry {entry.id} already saved.")
        try:
            EntryRow.from_entry(entry).save(force_insert=True)
        except DatabaseError as exc:
            logger.error("Database save failed for %s: %s", entry.id, exc)
            raise UploadFailure(f"Could not save entry: {exc}") from exc
        return entry

    def delete(self, entry_id):
        deleted, _ = EntryRow.objects.filter(pk=entry_id).delete()
        return bool(deleted)


def get_store():
    backend = getattr(settings, "DAILYREPORTS_STORE", "database")
    if backend == "local":
        return LocalStore(settings.DAILYREPORTS_LOCAL_STORE_PATH)
    if backend == "database":
        return DatabaseStore()
    raise ValueError(f"Unknown DAILYREPORTS_STORE backend: {backend!r}")

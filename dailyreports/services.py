import logging
from dataclasses import dataclass, field
from typing import List, Optional

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.utils import timezone

from .entry import Entry, new_entry
from .exceptions import UploadFailure
from .images import ImageSource, data_url_to_bytes

logger = logging.getLogger(__name__)


@dataclass
class ReportSession:
    """What the page works with: the saved entries on screen and the draft being filled in."""

    store: object
    site: str
    entries: List[Entry] = field(default_factory=list)
    draft: Optional[Entry] = None
    error: str = ""


def latest_progress_for_site(store, site):
    """Copy of the newest entry's category progress for `site`, or None."""
    previous = store.latest(site)
    if previous is None:
        return None
    return dict(previous.category_progress)


def start_draft(store, site=None, today=None):
    site = site or settings.DAILYREPORTS_DEFAULT_SITE
    draft = new_entry(site=site, today=today or timezone.localdate())
    progress = latest_progress_for_site(store, site)
    if progress is not None:
        draft.category_progress = progress
    return draft


def open_session(store, site=None, today=None):
    site = site or settings.DAILYREPORTS_DEFAULT_SITE
    today = today or timezone.localdate()
    return ReportSession(
        store=store,
        site=site,
        entries=store.list(site=site, entry_date=today),
        draft=start_draft(store, site, today),
    )


PHOTO_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
}


def discard_photos(names):
    for name in names:
        try:
            default_storage.delete(name)
        except OSError as exc:
            logger.warning("Could not remove photo %s: %s", name, exc)


def upload_photos(entry):
    """
    Write inline photos to media storage.

    Returns the resulting URL list and the storage names written. Photos
    that already have a URL are kept as they are. If any upload fails the
    photos written so far are removed again.
    """
    directory = settings.DAILYREPORTS_PHOTO_DIR
    urls, saved = [], []
    for idx, value in enumerate(entry.photos):
        source = ImageSource(value)
        if source.kind != "inline":
            urls.append(value)
            continue
        try:
            data, mime = data_url_to_bytes(value)
            ext = PHOTO_EXTENSIONS.get(mime, "jpg")
            name = default_storage.save(f"{directory}/{entry.id}/{idx}.{ext}", ContentFile(data))
        except (OSError, ValueError) as exc:
            logger.error("Photo %d upload failed for %s: %s", idx, entry.id, exc)
            discard_photos(saved)
            raise UploadFailure(f"Photo {idx + 1} could not be uploaded: {exc}") from exc
        saved.append(name)
        urls.append(default_storage.url(name))
    return urls, saved


def save_entry(session, entry):
    """
    Upload photos, insert the snapshot, then put it at the top of the list
    and start a fresh draft. On failure nothing in the session changes and
    no uploaded photos are left behind.
    """
    snapshot = entry.copy()
    snapshot.photos, saved = upload_photos(snapshot)
    try:
        session.store.insert(snapshot)
    except UploadFailure:
        discard_photos(saved)
        raise
    session.entries.insert(0, snapshot)
    session.draft = new_entry(site=session.site, previous=snapshot, today=timezone.localdate())
    logger.info("Saved entry %s for %s", snapshot.id, snapshot.site)
    return snapshot


def delete_entry(session, entry_id):
    removed = session.store.delete(entry_id)
    session.entries = [e for e in session.entries if e.id != entry_id]
    if removed:
        logger.info("Deleted entry %s", entry_id)
    return removed

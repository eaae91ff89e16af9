import logging

from django.contrib import messages
from django.http import Http404, HttpResponse, JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST

from .exceptions import RenderTargetUnavailable, UploadFailure
from .exporter import ENGINE_MARKUP, ENGINE_RASTER, ReportExporter
from .forms import EntryForm, MaterialItemFormSet, apply_material_items, validate_photo
from .images import ImageSource
from .renderer import render as render_entry
from .services import delete_entry, open_session, save_entry
from .store import get_store
from .weather import weather_text

logger = logging.getLogger(__name__)

exporter = ReportExporter()


# ---------------- Helpers ----------------
def _engine(request):
    engine = request.GET.get("engine", ENGINE_RASTER)
    return engine if engine in (ENGINE_RASTER, ENGINE_MARKUP) else ENGINE_RASTER


def _page(request, session, form=None, formset=None, status=200):
    return render(request, "dailyreports/entry_list.html", {
        "page_title": f"Daily Reports - {session.site}",
        "session": session,
        "entries": session.entries,
        "form": form or EntryForm.for_entry(session.draft),
        "formset": formset or MaterialItemFormSet(prefix="materials"),
    }, status=status)


def _pdf_response(request, selection):
    try:
        export = exporter.export_pdf(
            selection,
            engine=_engine(request),
            base_url=request.build_absolute_uri("/"),
        )
    except RenderTargetUnavailable as e:
        logger.error("PDF export aborted: %s", e)
        messages.error(request, "Report area is not ready. Nothing was exported.")
        return redirect("dailyreports:entry_list")
    return export.as_response()


# ---------------- Entries ----------------
@require_GET
def entry_list(request):
    session = open_session(get_store(), site=request.GET.get("site") or None)
    return _page(request, session)


@require_POST
def entry_create(request):
    session = open_session(get_store(), site=request.POST.get("site") or None)
    form = EntryForm(request.POST)
    formset = MaterialItemFormSet(request.POST, prefix="materials")

    if not (form.is_valid() and formset.is_valid()):
        logger.warning("Entry form errors: %s %s", form.errors, formset.errors)
        messages.error(request, "Please correct the errors below.")
        return _page(request, session, form, formset, status=400)

    draft = session.draft
    form.apply_to(draft)
    apply_material_items(formset, draft)

    for upload in request.FILES.getlist("photos"):
        error = validate_photo(upload)
        if error:
            messages.error(request, error)
            continue
        draft.add_photos([ImageSource.from_upload(upload).url])

    try:
        saved = save_entry(session, draft)
    except UploadFailure as e:
        messages.error(request, f"Entry not saved: {e}")
        return _page(request, session, form, formset, status=502)

    messages.success(request, f"Report for {saved.site} on {saved.date} saved.")
    return redirect("dailyreports:entry_list")


@require_POST
def entry_delete(request, entry_id):
    session = open_session(get_store())
    if delete_entry(session, entry_id):
        messages.success(request, "Entry deleted.")
    else:
        messages.error(request, "Entry not found.")
    return redirect("dailyreports:entry_list")


def _get_entry(entry_id):
    entry = get_store().get(entry_id)
    if entry is None:
        raise Http404("Entry not found")
    return entry


@require_GET
def entry_preview(request, entry_id):
    return HttpResponse(render_entry(_get_entry(entry_id)).to_html())


@require_GET
def entry_pdf(request, entry_id):
    return _pdf_response(request, _get_entry(entry_id))


# ---------------- Exports ----------------
def _today_entries(request):
    return open_session(get_store(), site=request.GET.get("site") or None).entries


@require_GET
def export_all_pdf(request):
    entries = _today_entries(request)
    if not entries:
        messages.error(request, "No entries to export.")
        return redirect("dailyreports:entry_list")
    return _pdf_response(request, entries)


@require_GET
def export_json(request):
    return exporter.export_json(_today_entries(request)).as_response()


@require_GET
def export_xlsx(request):
    return exporter.export_xlsx(_today_entries(request)).as_response()


# ---------------- Weather ----------------
@require_GET
def weather_lookup(request):
    fallback = request.GET.get("current", "")
    try:
        lat = float(request.GET["lat"])
        lon = float(request.GET["lon"])
    except (KeyError, ValueError):
        return JsonResponse({"weather": fallback, "error": "Location unavailable."})

    text, error = weather_text(lat, lon, fallback=fallback)
    return JsonResponse({"weather": text, "error": error})

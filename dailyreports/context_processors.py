from django.conf import settings

from .entry import DEFAULT_CATEGORIES


def report_defaults(request):
    current_app = getattr(request.resolver_match, "app_name", "")
    return {
        "project_name": settings.DAILYREPORTS_DEFAULT_SITE,
        "default_categories": DEFAULT_CATEGORIES,
        "active_parent": {"dailyreports": current_app == "dailyreports"},
    }

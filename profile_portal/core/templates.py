from pathlib import Path
from fastapi import Request
from fastapi.templating import Jinja2Templates
from profile_portal.config.settings import settings
from profile_portal.core.notices import pop_notices
from typing import Any, Dict, Optional

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
):
    """Render a page, draining pending notices into the layout."""
    page = {
        "app_name": settings.app_name,
        "notices": pop_notices(request),
    }
    page.update(context or {})
    return templates.TemplateResponse(request, name, page, status_code=status_code)

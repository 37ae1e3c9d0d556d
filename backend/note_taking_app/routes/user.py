"""
Note Taking App — User Routes
===============================

What:  The router mounted at the application root.
How:   Renders pages through the templates registered as the view engine.
       No database rows are ever passed to a template.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from note_taking_app.dependencies import get_templates

router = APIRouter(tags=["User"])


@router.get(
    "/",
    response_class=HTMLResponse,
    summary="Landing page",
)
async def index(
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "index.html",
        {"title": "Note Taking App"},
    )

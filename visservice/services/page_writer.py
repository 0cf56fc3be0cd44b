from __future__ import annotations

from pathlib import Path

from fastapi.templating import Jinja2Templates

from visservice.models.schemas import ControlDescriptor

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


def write_html(
    css: str,
    js: str,
    width: int,
    height: int,
    files_location: str,
    vis_id: str,
    controls_element_id: str,
    controls: ControlDescriptor = None,
    title: str = "",
) -> str:
    """Wrap compiled JS/CSS in a standalone page that loads the support scripts from `files_location`."""
    template = templates.get_template("visualization.html")
    return template.render(
        css=css,
        js=js,
        width=width,
        height=height,
        files_location=files_location.rstrip("/"),
        vis_id=vis_id,
        controls_element_id=controls_element_id,
        has_controls=bool(controls),
        title=title or "Visualization",
    )

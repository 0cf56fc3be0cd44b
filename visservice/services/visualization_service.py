from __future__ import annotations

import structlog

from visservice.cache.data_cache import DataReadError, get_dataset
from visservice.collaborators.compiler import BuildOutput, get_compiler
from visservice.collaborators.match import get_match_engine
from visservice.config import get_settings
from visservice.data.csv_reader import DatasetReadError, read_csv
from visservice.models.schemas import Dataset, VisualizationResult
from visservice.observability.instrument import instrument_collaborator_call
from visservice.services import content_reader, page_writer
from visservice.services.errors import ErrorKind, ServiceError

logger = structlog.get_logger(__name__)

PAGE_VIS_ID = "visualization"


def _build(
    dataset: Dataset | None,
    spec_text: str | None,
    width: int,
    height: int,
    vis_id: str,
    controls_element: str | None = None,
) -> BuildOutput | ServiceError:
    """Parse, apply and build. With `controls_element` set, the controls JS is appended to the output JS."""
    if not spec_text or not spec_text.strip():
        return ServiceError(ErrorKind.INVALID_SPEC, "Could not execute visualization: no source given")

    compiler = get_compiler()
    settings = get_settings()

    def run() -> BuildOutput:
        action = compiler.parse(spec_text)
        item = compiler.apply(action, dataset)
        output = compiler.build(item, width, height, vis_id)
        if controls_element is None:
            return output
        controls_js = compiler.write_controls(output.controls, controls_element, settings.controls_factory)
        return BuildOutput(js=output.js + controls_js, css=output.css, controls=output.controls)

    try:
        return instrument_collaborator_call(operation="compiler.build", fn=run)
    except Exception as exc:  # noqa: BLE001 - any compiler failure is a bad request
        logger.warning("visualization.build_failed", spec=spec_text, vis_id=vis_id, error=str(exc))
        return ServiceError(ErrorKind.INVALID_SPEC, f"Could not execute visualization: {spec_text}: {exc}")


def _resolve_dimension(value: int, default: int) -> int:
    return value if value >= get_settings().min_dimension else default


def create_visualization(
    data: bytes | str | None,
    spec_text: str | None,
    width: int,
    height: int,
    vis_id: str | None,
) -> VisualizationResult | ServiceError:
    """
    Build D3 output for source text applied to inline CSV.

    An empty payload leaves data resolution to the source text itself.
    """
    dataset: Dataset | None = None
    if data and data.strip():
        try:
            dataset = read_csv(data)
        except DatasetReadError as exc:
            logger.info("visualization.data_rejected", error=str(exc))
            return ServiceError(ErrorKind.INVALID_DATA, "Could not create data as CSV from content")

    output = _build(dataset, spec_text, width, height, vis_id or PAGE_VIS_ID)
    if isinstance(output, ServiceError):
        return output
    return VisualizationResult(js=output.js, css=output.css or "", controls=output.controls)


def create_visualization_page(
    spec_text: str | None,
    spec_url: str | None,
    width: int,
    height: int,
    data_url: str | None,
    files_location: str | None,
) -> str | ServiceError:
    """Build a complete HTML page for source text given inline or by URL, with data read from `data_url`."""
    settings = get_settings()

    if spec_text is None:
        if not spec_url:
            return ServiceError(ErrorKind.INVALID_SPEC, "No visualization source given: set brunel_src or brunel_url")
        try:
            spec_text = content_reader.read_content_from_url(spec_url)
        except content_reader.ContentReadError as exc:
            logger.info("visualization.source_unreadable", url=spec_url, error=str(exc))
            return ServiceError(ErrorKind.UNREADABLE_URL, f"Could not read visualization source from: {spec_url}")

    dataset: Dataset | None = None
    if data_url:
        try:
            dataset = get_dataset(data_url)
        except DataReadError as exc:
            logger.info("visualization.data_unreadable", url=data_url, error=str(exc))
            return ServiceError(ErrorKind.UNREADABLE_DATA, f"Could not read data as CSV from: {data_url}")

    width = _resolve_dimension(width, settings.default_width)
    height = _resolve_dimension(height, settings.default_height)

    output = _build(
        dataset,
        spec_text,
        width,
        height,
        PAGE_VIS_ID,
        controls_element=settings.controls_element_id,
    )
    if isinstance(output, ServiceError):
        return output

    return page_writer.write_html(
        css=output.css or "",
        js=output.js,
        width=width,
        height=height,
        files_location=files_location or settings.default_files_location,
        vis_id=PAGE_VIS_ID,
        controls_element_id=settings.controls_element_id,
        controls=output.controls,
    )


def match_existing(
    original_data: str | None,
    new_data: str | None,
    spec_text: str | None,
) -> str | ServiceError:
    """
    Source text that shows an existing visualization on new data.

    With `original_data` the engine matches dataset to dataset; without it the
    original data is whatever the source text itself refers to. The new data is
    always read through the cache. The source is parsed even when the two
    datasets are equal.
    """
    try:
        new_ds = get_dataset(new_data)
        original_ds = get_dataset(original_data) if original_data is not None else None
    except DataReadError as exc:
        logger.info("match.data_unreadable", original_data=original_data, new_data=new_data, error=str(exc))
        return ServiceError(ErrorKind.UNREADABLE_DATA, f"Could not read data for match: {exc}")

    if not spec_text or not spec_text.strip():
        return ServiceError(ErrorKind.INVALID_SPEC, "Could not match visualization: no source given")

    if original_ds is not None:
        compiler = get_compiler()
        engine = get_match_engine() if original_ds != new_ds else None

        def run() -> str:
            action = compiler.parse(spec_text)
            if engine is None:
                return spec_text
            return engine.match(original_ds, new_ds, action)

    else:
        engine = get_match_engine()

        def run() -> str:
            return engine.match_source(spec_text, new_ds)

    try:
        return str(instrument_collaborator_call(operation="match", fn=run))
    except Exception as exc:  # noqa: BLE001 - any parse or engine failure is a bad request
        logger.warning("match.failed", spec=spec_text, error=str(exc))
        return ServiceError(ErrorKind.INVALID_SPEC, f"Could not match visualization: {spec_text}: {exc}")

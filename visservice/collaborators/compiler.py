from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from visservice.collaborators.loader import load_factory
from visservice.config import get_settings
from visservice.models.schemas import ControlDescriptor, Dataset


@dataclass(frozen=True)
class BuildOutput:
    js: str
    css: str = ""
    controls: ControlDescriptor = None


class VisualizationCompiler(ABC):
    """Turns visualization source text plus a dataset into D3 output.

    Any exception raised by these methods is treated as a bad request for the
    source text that was being compiled.
    """

    @abstractmethod
    def parse(self, spec_text: str) -> Any:
        """Parse source text into an action."""
        pass

    @abstractmethod
    def apply(self, action: Any, dataset: Dataset | None) -> Any:
        """Apply an action to a dataset, giving a visual item.

        With no dataset the action must name its own data.
        """
        pass

    @abstractmethod
    def build(self, item: Any, width: int, height: int, vis_id: str) -> BuildOutput:
        """Render a visual item as JS/CSS targeting the element `vis_id`."""
        pass

    @abstractmethod
    def write_controls(self, controls: ControlDescriptor, element_id: str, factory: str) -> str:
        """JS that builds the interactive controls inside `element_id` using `factory`."""
        pass


_compiler: VisualizationCompiler | None = None


def set_compiler(compiler: VisualizationCompiler | None) -> None:
    global _compiler
    _compiler = compiler


def get_compiler() -> VisualizationCompiler:
    global _compiler
    if _compiler is None:
        _compiler = load_factory(get_settings().vis_compiler, "VIS_COMPILER")
    return _compiler

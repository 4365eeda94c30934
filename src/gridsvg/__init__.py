"""gridsvg: 無限の平行線グリッドを矩形ビューポートで切り取り、SVG の線分として書き出す。"""

from gridsvg.core.assemble import assemble
from gridsvg.core.errors import DocumentError, GridError, InvalidGrid, InvalidViewport
from gridsvg.core.loader import load_collection, load_collection_text
from gridsvg.core.model import (
    GridCollection,
    GridDocument,
    GridSegments,
    GridSpec,
    Rect,
    SegmentGroup,
)
from gridsvg.core.projection import project
from gridsvg.export.svg import SvgParams, export_svg, svg_text

__all__ = [
    "DocumentError",
    "GridCollection",
    "GridDocument",
    "GridError",
    "GridSegments",
    "GridSpec",
    "InvalidGrid",
    "InvalidViewport",
    "Rect",
    "SegmentGroup",
    "SvgParams",
    "assemble",
    "export_svg",
    "load_collection",
    "load_collection_text",
    "project",
    "svg_text",
]

"""
Formula and field reference resources.

Each reference is a separate markdown file under ``references/`` so that a
client only loads the part it needs.
"""

import logging
from pathlib import Path
from typing import Callable, NamedTuple

from mcp.server.fastmcp import FastMCP

logger = logging.getLogger("aitable-mcp.resources")

REFERENCES_DIR = Path(__file__).parent / "references"


class ReferenceDocument(NamedTuple):
    name: str
    uri: str
    filename: str
    description: str


REFERENCE_DOCUMENTS = (
    ReferenceDocument(
        "formula_overview",
        "aitable://formulas/overview",
        "formula-overview.md",
        "Quick reference guide to AITable formulas including syntax rules, parameter notation, "
        "function categories, and tips",
    ),
    ReferenceDocument(
        "formula_operators",
        "aitable://formulas/operators",
        "formula-operators.md",
        "AITable formula operators including numeric (+, -, *, /), string (&), and logical "
        "(>, <, =, !=, &&, ||) operators with examples",
    ),
    ReferenceDocument(
        "formula_numeric",
        "aitable://formulas/numeric",
        "formula-numeric.md",
        "AITable numeric functions including SUM, AVERAGE, MAX, MIN, ROUND, ABS, SQRT, POWER, LOG, "
        "and more with detailed examples",
    ),
    ReferenceDocument(
        "formula_string",
        "aitable://formulas/string",
        "formula-string.md",
        "AITable string functions including CONCATENATE, FIND, SEARCH, REPLACE, LEN, UPPER, LOWER, "
        "TRIM, and more with examples",
    ),
    ReferenceDocument(
        "formula_logical",
        "aitable://formulas/logical",
        "formula-logical.md",
        "AITable logical functions including IF, SWITCH, AND, OR, XOR, NOT, BLANK, ERROR, TRUE, FALSE "
        "with practical examples",
    ),
    ReferenceDocument(
        "formula_date",
        "aitable://formulas/date",
        "formula-date.md",
        "AITable date/time functions including TODAY, NOW, DATEADD, DATETIME_DIFF, IS_AFTER, "
        "DATETIME_FORMAT, and more with format/locale tables",
    ),
    ReferenceDocument(
        "formula_array",
        "aitable://formulas/array",
        "formula-array.md",
        "AITable array functions including COUNT, COUNTA, COUNTIF, ARRAYCOMPACT, ARRAYJOIN, "
        "ARRAYUNIQUE, RECORD_ID with examples",
    ),
    ReferenceDocument(
        "field_colors",
        "aitable://reference/field-colors",
        "field-colors.md",
        "AITable field color reference showing all 50 color options (10 families x 5 shades) for "
        "single-select and multi-select field options",
    ),
)


def read_reference(document: ReferenceDocument, directory: Path = REFERENCES_DIR) -> str:
    """Return the markdown of ``document``, or an error text if it cannot be read."""
    path = directory / document.filename
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to read reference '{path}': {e}")
        return f"Error loading {document.filename}: {e}"


def _reader(document: ReferenceDocument, directory: Path) -> Callable[[], str]:
    def read() -> str:
        return read_reference(document, directory)

    read.__name__ = document.name
    return read


def register_resources(server: FastMCP, directory: Path = REFERENCES_DIR) -> None:
    """Register every reference document as a markdown resource."""
    for document in REFERENCE_DOCUMENTS:
        server.resource(
            document.uri,
            name=document.name,
            description=document.description,
            mime_type="text/markdown",
        )(_reader(document, directory))
    logger.debug(f"Registered {len(REFERENCE_DOCUMENTS)} reference resources")

"""Common literal values used across bookbinder.

These constants keep template names, anchor identifiers and page-count
assumptions centralized so the renderer, the TOC sizer, and tests can import
the same values without drifting. Intended for internal use within the
bookbinder package.

Examples
--------
>>> from bookbinder import _constants
>>> _constants.TOC_PART_ID
'toc'
>>> _constants.PAGE_FILE_TEMPLATE.format(page_id="intro")
'intro.html'
"""

from pathlib import Path

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

PAGE_STRUCT_CSS = "page-struct.css"
COVER_STRUCT_CSS = "cover-struct.css"
DEFAULT_CSS = "bookbinder.css"
HEADER_FOOTER_TEMPLATE = "header-footer.html"
COVER_TEMPLATE = "cover.html"
TOC_TEMPLATE = "toc.jinja"

COVER_PART_ID = "cover"
TOC_PART_ID = "toc"
TOC_TITLE = "Table of Contents"
MAIN_CONTENT_ID = "main"

COVER_PAGES = 1
ASSUMED_TOC_PAGES = 1

DEFAULT_LANGUAGE = "en"
DEFAULT_COVER_FOOTER = "Assembled with bookbinder"

PAGE_FILE_TEMPLATE = "{page_id}.html"
SUMMARY_FILE = "toc.html"
PAGES_DIR = "pages"

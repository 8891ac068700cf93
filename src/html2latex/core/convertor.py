"""Conversion engine turning tag events into LaTeX text.

Plain elements are converted by :meth:`Convertor.generic_element_start` and
:meth:`Convertor.generic_element_end` from the element configuration.
Anchors, tables, images, meta charset declarations, fonts and the document
body have dedicated methods.

Tables whose column specification is not given through a ``latexcols``
attribute are rendered in two steps: the rows are written to an in-memory
buffer while the widest row is measured, then the column specification is
written to the real sink followed by the buffered rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
import io
import logging
from typing import TYPE_CHECKING, Protocol

from .config import ConversionConfig, LinksConversion
from .entities import EntityTable, convert_text
from .exceptions import OutputWriteError
from .styles import StyleRegistry, make_command_definitions


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .tags import EndTag, StartTag


logger = logging.getLogger(__name__)


class TextSink(Protocol):
    """Append-only character sink."""

    def write(self, text: str, /) -> object: ...


class TableState(Enum):
    """Rendering state of the innermost open table."""

    NORMAL = auto()
    COLS_KNOWN = auto()
    COLS_UNKNOWN_BUFFERING = auto()


FONT_SIZES = {
    1: r"\tiny",
    2: r"\footnotesize",
    3: r"\normalsize",
    4: r"\large",
    5: r"\Large",
    6: r"\LARGE",
    7: r"\Huge",
}

CHARSETS = (
    ("windows-1250", "cp1250"),
    ("iso-8859-2", "latin2"),
    ("utf-8", "utf8"),
)

ROW_END = " \\\\\n"
BORDER_LINE = "\\hline"


@dataclass(slots=True)
class TableContext:
    """Bookkeeping of one open table."""

    state: TableState
    print_border: bool = False
    first_row: bool = True
    first_cell: bool = True
    columns_in_row: int = 0
    max_columns: int = 0
    buffer: io.StringIO | None = None
    real_sink: TextSink | None = None
    border_offset: int | None = None

    def column_spec(self) -> str:
        """Return the column specification of a measured table, without braces."""
        width = 0.9 / max(1, self.max_columns)
        column = f"p{{{width!r}\\textwidth}}" if width > 0.1 else "l"
        separator = "|" if self.print_border else ""
        return separator + "".join(column + separator for _ in range(self.max_columns))


class Convertor:
    """Stateful converter bound to one output sink for one document."""

    def __init__(
        self,
        sink: TextSink,
        *,
        config: ConversionConfig,
        registry: StyleRegistry | None = None,
        entities: EntityTable | None = None,
    ) -> None:
        self.config = config
        self.registry = registry if registry is not None else StyleRegistry()
        self.entities = entities if entities is not None else EntityTable(config.entities)
        self._sink: TextSink = sink
        self.leave_text_depth = 0
        self.ignore_content_depth = 0
        self.bibliography: dict[str, str] = {}
        self._tables: list[TableContext] = []
        self._closed = False

    # -- output -------------------------------------------------------------

    def _write(self, text: str) -> None:
        if not text:
            return
        try:
            self._sink.write(text)
        except (OSError, ValueError) as exc:
            raise OutputWriteError(f"Cannot write into the output: {exc}") from exc

    @property
    def table_state(self) -> TableState:
        return self._tables[-1].state if self._tables else TableState.NORMAL

    def close(self) -> None:
        """Flush tables left open and the sink itself. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        while self._tables:
            table = self._tables.pop()
            if table.buffer is not None and table.real_sink is not None:
                pending = table.buffer.getvalue()
                self._sink = table.real_sink
                table.buffer.close()
                logger.warning("Table left open at end of document; flushing its rows.")
                self._write(pending)
        flush = getattr(self._sink, "flush", None)
        if callable(flush):
            try:
                flush()
            except (OSError, ValueError) as exc:
                raise OutputWriteError(f"Cannot flush the output: {exc}") from exc

    # -- plain elements -----------------------------------------------------

    def generic_element_start(self, tag: StartTag) -> None:
        item = self.config.require_element(tag.name)
        if item.leave_text:
            self.leave_text_depth += 1
        if item.ignore_content:
            self.ignore_content_depth += 1
        self._write(item.start)

    def generic_element_end(self, tag: EndTag, start: StartTag) -> None:
        item = self.config.require_element(tag.name)
        if item.leave_text:
            self.leave_text_depth -= 1
        if item.ignore_content:
            self.ignore_content_depth -= 1
        if self.leave_text_depth < 0 or self.ignore_content_depth < 0:
            logger.warning("Unbalanced </%s>: element nesting counters went negative.", tag.name)
        self._write(item.end)
        self._process_attributes(start)

    def _process_attributes(self, start: StartTag) -> None:
        """Turn ``title`` and ``cite`` attributes into footnotes."""
        if start.name == "a":
            return
        for attribute in ("title", "cite"):
            value = start.get(attribute)
            if value is not None:
                self._write(f"\\footnote{{{value}}}")

    def characters(self, text: str) -> None:
        if self.ignore_content_depth > 0:
            return
        verbatim = self.leave_text_depth > 0
        if not verbatim:
            text = text.replace("\r", "").replace("\n", "").replace("\t", "")
        if not text.strip():
            return
        self._write(
            convert_text(
                text,
                self.entities,
                escape=not verbatim,
                legacy_accents=self.config.legacy_accents,
            )
        )

    def comment(self, text: str) -> None:
        stripped = text.strip()
        # <!-- latex: ... --> injects raw LaTeX.
        if stripped.lower().startswith("latex:"):
            self._write(stripped[6:] + "\n")
            return
        self._write("\n" + ("% " + text).replace("\n", "\n% ") + "\n")

    # -- styles -------------------------------------------------------------

    def css_style_start(self, tag: StartTag) -> None:
        styles = self.registry.find_styles_for(tag, self.config.element(tag.name))
        for style in styles:
            if style is None:
                continue
            if self.config.make_cmds_from_css:
                self._write(style.command_name + "{")
            else:
                self._write(style.start)

    def css_style_end(self, start: StartTag) -> None:
        styles = self.registry.find_styles_for(start, self.config.element(start.name))
        for style in reversed(styles):
            if style is None:
                continue
            if self.config.make_cmds_from_css:
                self._write("}")
            else:
                self._write(style.end)

    # -- anchors ------------------------------------------------------------

    def anchor_start(self, tag: StartTag) -> None:
        if self.config.links is not LinksConversion.HYPERTEX:
            return
        href = tag.get("href") or ""
        name = tag.get("name") or ""
        if href.startswith("#"):
            self._write(f"\\hyperlink{{{href[1:]}}}{{")
        elif name:
            self._write(f"\\hypertarget{{{name}}}{{")
        elif href:
            self._write(f"\\href{{{href}}}{{")

    def anchor_end(self, tag: EndTag, start: StartTag) -> None:
        href = start.get("href") or ""
        name = start.get("name") or ""
        links = self.config.links

        if links is LinksConversion.FOOTNOTES:
            if href and not href.startswith("#"):
                self._write(f"\\footnote{{{href}}}")

        elif links is LinksConversion.BIBLIO:
            if href and not href.startswith("#"):
                key = start.get("name")
                if key is None:
                    key = href
                value = f"\\verb|{href}|."
                title = start.get("title")
                if title is not None:
                    value += f" {title}"
                self.bibliography[key] = value
                self._write(f"\\cite{{{key}}}")

        elif links is LinksConversion.HYPERTEX:
            if name or href.startswith("#") or href:
                self._write("}")

    # -- tables -------------------------------------------------------------

    def _current_table(self) -> TableContext | None:
        return self._tables[-1] if self._tables else None

    def table_start(self, tag: StartTag) -> None:
        item = self.config.require_element(tag.name)
        border = tag.get("border")
        table = TableContext(
            state=TableState.COLS_UNKNOWN_BUFFERING,
            print_border=border is not None and border != "0",
        )
        self._write(item.start)
        columns = tag.get("latexcols")
        if columns is not None:
            table.state = TableState.COLS_KNOWN
            self._write(f"{{{columns}}}\n")
        self._tables.append(table)

    def _begin_buffering(self, table: TableContext) -> io.StringIO:
        # The opening brace of the column specification goes out now; the
        # specification itself follows once the widest row is known.
        self._write("{")
        table.real_sink = self._sink
        table.buffer = io.StringIO()
        table.columns_in_row = table.max_columns = 0
        self._sink = table.buffer
        return table.buffer

    def table_row_start(self, tag: StartTag) -> None:
        table = self._current_table()
        if table is None:
            return
        if table.state is TableState.COLS_UNKNOWN_BUFFERING and table.buffer is None:
            self._begin_buffering(table)
        table.columns_in_row = 0

    def table_cell_start(self, tag: StartTag) -> None:
        item = self.config.require_element(tag.name)
        table = self._current_table()
        if table is not None:
            if table.state is TableState.COLS_UNKNOWN_BUFFERING:
                table.columns_in_row += 1
            if not table.first_cell:
                self._write(" & ")
            else:
                table.first_cell = False
        self._write(item.start)

    def table_cell_end(self, tag: EndTag, start: StartTag) -> None:
        self._write(self.config.require_element(start.name).end)

    def table_row_end(self, tag: EndTag, start: StartTag) -> None:
        table = self._current_table()
        if table is None:
            return
        if table.state is TableState.COLS_UNKNOWN_BUFFERING:
            table.max_columns = max(table.max_columns, table.columns_in_row)
        table.columns_in_row = 0
        table.first_cell = True
        if table.first_row:
            table.first_row = False
            table.border_offset = None
            self._write(ROW_END + "\\midrule\n")
        elif table.print_border:
            self._write(ROW_END)
            table.border_offset = table.buffer.tell() if table.buffer is not None else None
            self._write(BORDER_LINE + "\n")
        else:
            table.border_offset = None
            self._write(ROW_END)

    def _buffered_rows(self, table: TableContext, rows: str) -> str:
        if not table.print_border:
            return rows
        if self.config.legacy_hline_search:
            position = rows.rfind(BORDER_LINE)
            return rows[:position] if position >= 0 else rows
        if table.border_offset is not None:
            offset = table.border_offset
            return rows[:offset] + rows[offset + len(BORDER_LINE) + 1 :]
        return rows

    def table_end(self, tag: EndTag, start: StartTag) -> None:
        table = self._tables.pop() if self._tables else None
        if table is not None and table.state is TableState.COLS_UNKNOWN_BUFFERING:
            buffer = table.buffer
            if buffer is None:
                buffer = self._begin_buffering(table)
            table.max_columns = max(table.max_columns, table.columns_in_row)
            rows = self._buffered_rows(table, buffer.getvalue())
            buffer.close()
            if table.real_sink is not None:
                self._sink = table.real_sink
            self._write(table.column_spec() + "}\n\\toprule\n" + rows + "\\bottomrule")
        self._write(self.config.require_element(start.name).end)

    # -- document structure -------------------------------------------------

    def body_start(self, tag: StartTag) -> None:
        item = self.config.require_element(tag.name)
        if self.config.links is LinksConversion.HYPERTEX:
            self._write("\n\\usepackage{hyperref}")
        if self.config.make_cmds_from_css:
            self._write(make_command_definitions(self.registry))
        self._write(item.start)

    def body_end(self, tag: EndTag, start: StartTag) -> None:
        if self.bibliography:
            lines = [f"\n\\begin{{thebibliography}}{{{len(self.bibliography)}}}\n"]
            lines.extend(f"\t\\bibitem{{{key}}}{value}\n" for key, value in self.bibliography.items())
            lines.append("\\end{thebibliography}")
            self._write("".join(lines))
        self.generic_element_end(tag, start)

    def image_start(self, tag: StartTag) -> None:
        src = tag.get("src")
        if src is None:
            logger.warning("Image without 'src' attribute skipped.")
            return
        self._write(f"\n\\includegraphics{{{src}}}")

    def meta_start(self, tag: StartTag) -> None:
        http_equiv = tag.get("http-equiv")
        content = tag.get("content")
        if http_equiv is None or http_equiv.lower() != "content-type" or content is None:
            return
        content = content.lower()
        for charset, option in CHARSETS:
            if charset in content:
                self._write(f"\n\\usepackage[{option}]{{inputenc}}")
                return

    def font_start(self, tag: StartTag) -> None:
        size = tag.get("size")
        if size is None:
            return
        try:
            command = FONT_SIZES.get(int(size), r"\normalsize")
        except ValueError:
            command = r"\normalsize"
        self._write(f"{{{command} ")

    def font_end(self, tag: EndTag, start: StartTag) -> None:
        if start.get("size") is not None:
            self._write("}")


__all__ = ["Convertor", "TableContext", "TableState", "TextSink"]

from __future__ import annotations

import io
import logging

import pytest

from html2latex.core.config import ConversionConfig, ElementConfig, LinksConversion
from html2latex.core.convertor import Convertor, TableState
from html2latex.core.exceptions import ConfigLookupError, OutputWriteError
from html2latex.core.styles import StyleRegistry
from html2latex.core.tags import EndTag, StartTag


def _config(**kwargs: object) -> ConversionConfig:
    elements = {
        "p": ElementConfig(start="<p>", end="</p>"),
        "pre": ElementConfig(start="<pre>", end="</pre>", leave_text=True, ignore_styles=True),
        "script": ElementConfig(ignore_content=True),
        "abbr": ElementConfig(),
        "a": ElementConfig(),
        "body": ElementConfig(start="<body>", end="</body>"),
    }
    return ConversionConfig(elements=elements, entities={"amp": "\\&", "nbsp": "~"}, **kwargs)


def _engine(
    config: ConversionConfig | None = None, registry: StyleRegistry | None = None
) -> tuple[Convertor, io.StringIO]:
    sink = io.StringIO()
    return Convertor(sink, config=config or _config(), registry=registry), sink


def _open(conv: Convertor, name: str, **attributes: str) -> StartTag:
    tag = StartTag(name, attributes)
    conv.generic_element_start(tag)
    return tag


def _close(conv: Convertor, start: StartTag) -> None:
    conv.generic_element_end(EndTag(start.name), start)


def test_generic_element_writes_configured_strings() -> None:
    conv, sink = _engine()
    start = _open(conv, "p")
    conv.characters("text")
    _close(conv, start)

    assert sink.getvalue() == "<p>text</p>"


def test_unknown_element_raises_lookup_error() -> None:
    conv, sink = _engine()
    with pytest.raises(ConfigLookupError) as excinfo:
        conv.generic_element_start(StartTag("blink"))

    assert excinfo.value.name == "blink"
    assert sink.getvalue() == ""


def test_character_data_is_normalised_and_escaped() -> None:
    conv, sink = _engine()
    conv.characters("a_b\n\tc &amp;&nbsp;d")

    assert sink.getvalue() == "a\\_bc \\&~d"


def test_whitespace_only_text_is_dropped() -> None:
    conv, sink = _engine()
    conv.characters("\n\t  \r\n")

    assert sink.getvalue() == ""


def test_leave_text_toggles_escaping() -> None:
    conv, sink = _engine()
    pre = _open(conv, "pre")
    conv.characters("a_b\n")
    assert conv.leave_text_depth == 1
    _close(conv, pre)
    conv.characters("a_b")

    assert sink.getvalue() == "<pre>a_b\n</pre>a\\_b"
    assert conv.leave_text_depth == 0


def test_ignore_content_drops_nested_text() -> None:
    conv, sink = _engine()
    script = _open(conv, "script")
    conv.characters("var x = 1;")
    _close(conv, script)
    conv.characters("after")

    assert sink.getvalue() == "after"
    assert conv.ignore_content_depth == 0


def test_nested_counters_stay_non_negative() -> None:
    conv, _ = _engine()
    outer = _open(conv, "pre")
    inner = _open(conv, "pre")
    assert conv.leave_text_depth == 2
    _close(conv, inner)
    _close(conv, outer)

    assert conv.leave_text_depth == 0
    assert conv.ignore_content_depth == 0


def test_unbalanced_end_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    conv, _ = _engine()
    with caplog.at_level(logging.WARNING, logger="html2latex.core.convertor"):
        _close(conv, StartTag("script"))

    assert conv.ignore_content_depth == -1
    assert any("Unbalanced" in record.getMessage() for record in caplog.records)


def test_title_and_cite_become_footnotes() -> None:
    conv, sink = _engine()
    abbr = _open(conv, "abbr", cite="Source", title="Long form")
    conv.characters("LF")
    _close(conv, abbr)

    assert sink.getvalue() == "LF\\footnote{Long form}\\footnote{Source}"


def test_latex_comment_is_injected_verbatim() -> None:
    conv, sink = _engine()
    conv.comment("  LaTeX:\\newpage ")

    assert sink.getvalue() == "\\newpage\n"


def test_plain_comment_becomes_latex_comment() -> None:
    conv, sink = _engine()
    conv.comment("first\nsecond")

    assert sink.getvalue() == "\n% first\n% second\n"


def test_style_wraps_nest_element_class_id() -> None:
    registry = StyleRegistry()
    registry.register_selector("p", "E(", ")E")
    registry.register_selector(".x", "C(", ")C")
    registry.register_selector("#y", "I(", ")I")
    conv, sink = _engine(registry=registry)
    tag = StartTag("p", {"class": "x", "id": "y"})

    conv.css_style_start(tag)
    conv.characters("body")
    conv.css_style_end(tag)

    assert sink.getvalue() == "E(C(I(body)I)C)E"


def test_ignore_styles_element_is_not_wrapped() -> None:
    registry = StyleRegistry()
    registry.register_selector("pre", "X", "Y")
    conv, sink = _engine(registry=registry)
    tag = StartTag("pre")

    conv.css_style_start(tag)
    conv.css_style_end(tag)

    assert sink.getvalue() == ""


def test_command_mode_uses_generated_macros() -> None:
    registry = StyleRegistry()
    registry.register_selector(".note", "\\textcolor{red}{", "}")
    conv, sink = _engine(_config(make_cmds_from_css=True), registry)
    body = StartTag("body")
    note = StartTag("p", {"class": "note"})

    conv.body_start(body)
    conv.css_style_start(note)
    conv.characters("hi")
    conv.css_style_end(note)

    assert sink.getvalue() == (
        "\n\\newcommand{\\cssNote}[1]{\\textcolor{red}{#1}}\n<body>\\cssNote{hi}"
    )


def test_command_mode_keeps_class_and_id_macros_apart() -> None:
    registry = StyleRegistry()
    registry.register_selector("p.note", "\\textbf{", "}")
    registry.register_selector("p#note", "\\textit{", "}")
    conv, sink = _engine(_config(make_cmds_from_css=True), registry)
    tag = StartTag("p", {"class": "note", "id": "note"})

    conv.body_start(StartTag("body"))
    conv.css_style_start(tag)
    conv.characters("hi")
    conv.css_style_end(tag)

    assert sink.getvalue() == (
        "\n\\newcommand{\\cssPClassNote}[1]{\\textbf{#1}}"
        "\n\\newcommand{\\cssPIdNote}[1]{\\textit{#1}}\n"
        "<body>\\cssPClassNote{\\cssPIdNote{hi}}"
    )


def test_hypertex_body_start_loads_hyperref() -> None:
    conv, sink = _engine(_config(links=LinksConversion.HYPERTEX))
    conv.body_start(StartTag("body"))

    assert sink.getvalue() == "\n\\usepackage{hyperref}<body>"


def test_image_writes_includegraphics() -> None:
    conv, sink = _engine()
    conv.image_start(StartTag("img", {"src": "figures/plot.png"}))
    conv.image_start(StartTag("img", {"alt": "no source"}))

    assert sink.getvalue() == "\n\\includegraphics{figures/plot.png}"


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        ("text/html; charset=ISO-8859-2", "\n\\usepackage[latin2]{inputenc}"),
        ("text/html; charset=utf-8", "\n\\usepackage[utf8]{inputenc}"),
        ("text/html; charset=windows-1250, utf-8", "\n\\usepackage[cp1250]{inputenc}"),
        ("text/html; charset=koi8-r", ""),
    ],
)
def test_meta_charset(content: str, expected: str) -> None:
    conv, sink = _engine()
    conv.meta_start(StartTag("meta", {"http-equiv": "Content-Type", "content": content}))

    assert sink.getvalue() == expected


def test_meta_without_content_type_is_ignored() -> None:
    conv, sink = _engine()
    conv.meta_start(StartTag("meta", {"name": "author", "content": "utf-8"}))

    assert sink.getvalue() == ""


@pytest.mark.parametrize(
    ("size", "switch"),
    [("1", "\\tiny"), ("5", "\\Large"), ("7", "\\Huge"), ("9", "\\normalsize"), ("big", "\\normalsize")],
)
def test_font_size_switch(size: str, switch: str) -> None:
    conv, sink = _engine()
    tag = StartTag("font", {"size": size})
    conv.font_start(tag)
    conv.characters("x")
    conv.font_end(EndTag("font"), tag)

    assert sink.getvalue() == f"{{{switch} x}}"


def test_font_without_size_emits_nothing() -> None:
    conv, sink = _engine()
    tag = StartTag("font", {"face": "Arial"})
    conv.font_start(tag)
    conv.font_end(EndTag("font"), tag)

    assert sink.getvalue() == ""


def test_rejected_write_raises_output_error() -> None:
    class ClosedSink:
        def write(self, text: str) -> int:
            raise OSError("disk full")

    conv = Convertor(ClosedSink(), config=_config())

    with pytest.raises(OutputWriteError, match="disk full"):
        conv.characters("text")


def test_close_flushes_open_table(caplog: pytest.LogCaptureFixture) -> None:
    config = _config()
    config.elements.update(
        {"table": ElementConfig(start="<t>", end="</t>"), "td": ElementConfig()}
    )
    conv, sink = _engine(config)
    conv.table_start(StartTag("table"))
    conv.table_row_start(StartTag("tr"))
    conv.table_cell_start(StartTag("td"))
    conv.characters("orphan")
    assert conv.table_state is TableState.COLS_UNKNOWN_BUFFERING

    with caplog.at_level(logging.WARNING, logger="html2latex.core.convertor"):
        conv.close()
        conv.close()

    assert sink.getvalue() == "<t>{orphan"
    assert conv.table_state is TableState.NORMAL
    assert len(caplog.records) == 1

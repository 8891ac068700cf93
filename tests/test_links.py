from __future__ import annotations

from html2latex import convert
from html2latex.core.config import ConversionConfig, ElementConfig, LinksConversion


def _config(links: LinksConversion) -> ConversionConfig:
    return ConversionConfig(
        links=links,
        elements={
            "body": ElementConfig(start="<body>", end="</body>"),
            "a": ElementConfig(),
            "p": ElementConfig(start="\n", end="\n"),
        },
    )


def test_hypertex_internal_link() -> None:
    latex = convert('<a href="#sec1">text</a>', config=_config(LinksConversion.HYPERTEX))

    assert latex == "\\hyperlink{sec1}{text}"


def test_hypertex_target_and_external_link() -> None:
    config = _config(LinksConversion.HYPERTEX)

    assert convert('<a name="top">Top</a>', config=config) == "\\hypertarget{top}{Top}"
    assert (
        convert('<a href="http://example.org">site</a>', config=config)
        == "\\href{http://example.org}{site}"
    )


def test_hypertex_anchor_without_target_is_plain_text() -> None:
    assert convert("<a>plain</a>", config=_config(LinksConversion.HYPERTEX)) == "plain"


def test_footnotes_for_external_links_only() -> None:
    config = _config(LinksConversion.FOOTNOTES)

    assert (
        convert('<a href="http://example.org" title="ignored">site</a>', config=config)
        == "site\\footnote{http://example.org}"
    )
    assert convert('<a href="#local">here</a>', config=config) == "here"


def test_ignore_mode_keeps_text_only() -> None:
    latex = convert(
        '<a href="http://example.org">site</a>', config=_config(LinksConversion.IGNORE)
    )

    assert latex == "site"


def test_biblio_collects_references_until_body_end() -> None:
    html = (
        "<body>"
        '<p><a href="http://x">X</a> and <a href="http://y" name="Y" title="Why">Y</a></p>'
        '<p><a href="#internal">skip</a></p>'
        "</body>"
    )

    latex = convert(html, config=_config(LinksConversion.BIBLIO))

    assert latex.count("\\cite{") == 2
    assert "X\\cite{http://x} and Y\\cite{Y}" in latex
    assert latex.endswith(
        "\n\\begin{thebibliography}{2}\n"
        "\t\\bibitem{http://x}\\verb|http://x|.\n"
        "\t\\bibitem{Y}\\verb|http://y|. Why\n"
        "\\end{thebibliography}</body>"
    )


def test_biblio_last_entry_for_a_key_wins() -> None:
    html = '<body><a href="http://a" name="k">1</a><a href="http://b" name="k">2</a></body>'

    latex = convert(html, config=_config(LinksConversion.BIBLIO))

    assert latex.count("\\bibitem") == 1
    assert "\\bibitem{k}\\verb|http://b|." in latex
    assert "\\begin{thebibliography}{1}" in latex


def test_no_bibliography_without_references() -> None:
    latex = convert("<body>text</body>", config=_config(LinksConversion.BIBLIO))

    assert latex == "<body>text</body>"

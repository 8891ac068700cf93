from __future__ import annotations

import pytest

from html2latex import convert
from html2latex.core.config import ConversionConfig, ElementConfig


ROWS_2_4_3 = (
    "<tr><td>a</td><td>b</td></tr>"
    "<tr><td>1</td><td>2</td><td>3</td><td>4</td></tr>"
    "<tr><td>x</td><td>y</td><td>z</td></tr>"
)


@pytest.fixture
def config() -> ConversionConfig:
    return ConversionConfig(
        elements={
            "table": ElementConfig(start="\\begin{tabular}", end="\n\\end{tabular}"),
            "tr": ElementConfig(),
            "td": ElementConfig(),
            "th": ElementConfig(start="\\textbf{", end="}"),
            "b": ElementConfig(start="\\textbf{", end="}"),
        },
    )


def test_column_count_inferred_from_widest_row(config: ConversionConfig) -> None:
    latex = convert(f"<table>{ROWS_2_4_3}</table>", config=config)

    assert latex == (
        "\\begin{tabular}{"
        + "p{0.225\\textwidth}" * 4
        + "}\n\\toprule\n"
        + "a & b \\\\\n\\midrule\n"
        + "1 & 2 & 3 & 4 \\\\\n"
        + "x & y & z \\\\\n"
        + "\\bottomrule"
        + "\n\\end{tabular}"
    )


def test_border_adds_pipes_and_drops_trailing_hline(config: ConversionConfig) -> None:
    latex = convert(f'<table border="1">{ROWS_2_4_3}</table>', config=config)

    assert latex == (
        "\\begin{tabular}{|"
        + "p{0.225\\textwidth}|" * 4
        + "}\n\\toprule\n"
        + "a & b \\\\\n\\midrule\n"
        + "1 & 2 & 3 & 4 \\\\\n\\hline\n"
        + "x & y & z \\\\\n"
        + "\\bottomrule"
        + "\n\\end{tabular}"
    )


def test_border_zero_means_no_border(config: ConversionConfig) -> None:
    latex = convert(f'<table border="0">{ROWS_2_4_3}</table>', config=config)

    assert "|" not in latex
    assert "\\hline" not in latex


def test_many_columns_fall_back_to_left_aligned(config: ConversionConfig) -> None:
    cells = "".join(f"<td>{index}</td>" for index in range(10))
    latex = convert(f"<table><tr>{cells}</tr></table>", config=config)

    assert latex.startswith("\\begin{tabular}{" + "l" * 10 + "}\n\\toprule\n")


def test_latexcols_skips_buffering(config: ConversionConfig) -> None:
    latex = convert(
        '<table latexcols="lr"><tr><th>k</th><td>v</td></tr><tr><td>1</td><td>2</td></tr></table>',
        config=config,
    )

    assert latex == (
        "\\begin{tabular}{lr}\n"
        "\\textbf{k} & v \\\\\n\\midrule\n"
        "1 & 2 \\\\\n"
        "\n\\end{tabular}"
    )


def test_table_without_rows(config: ConversionConfig) -> None:
    latex = convert("<table></table>", config=config)

    assert latex == "\\begin{tabular}{}\n\\toprule\n\\bottomrule\n\\end{tabular}"


def test_single_bordered_row(config: ConversionConfig) -> None:
    latex = convert('<table border="1"><tr><td>only</td></tr></table>', config=config)

    assert latex == (
        "\\begin{tabular}{|p{0.9\\textwidth}|}\n\\toprule\n"
        "only \\\\\n\\midrule\n"
        "\\bottomrule\n\\end{tabular}"
    )


def test_nested_tables_buffer_independently(config: ConversionConfig) -> None:
    latex = convert(
        "<table><tr><td>outer</td><td>"
        "<table><tr><td>i1</td><td>i2</td><td>i3</td></tr></table>"
        "</td></tr></table>",
        config=config,
    )

    inner = (
        "\\begin{tabular}{" + "p{0.3\\textwidth}" * 3 + "}\n\\toprule\n"
        "i1 & i2 & i3 \\\\\n\\midrule\n\\bottomrule\n\\end{tabular}"
    )
    assert latex == (
        "\\begin{tabular}{" + "p{0.45\\textwidth}" * 2 + "}\n\\toprule\n"
        "outer & " + inner + " \\\\\n\\midrule\n"
        "\\bottomrule\n\\end{tabular}"
    )


def test_literal_hline_in_content_survives(config: ConversionConfig) -> None:
    html = (
        '<table border="1"><tr><td>h</td></tr><tr><td>a</td></tr><tr><td>b</td></tr>'
        "<!-- latex:\\hline extra --></table>"
    )

    latex = convert(html, config=config)

    assert latex.endswith("b \\\\\n\\hline extra\n\\bottomrule\n\\end{tabular}")


def test_legacy_hline_search_truncates_at_last_literal(config: ConversionConfig) -> None:
    config.legacy_hline_search = True
    html = (
        '<table border="1"><tr><td>h</td></tr><tr><td>a</td></tr><tr><td>b</td></tr>'
        "<!-- latex:\\hline extra --></table>"
    )

    latex = convert(html, config=config)

    assert latex.endswith("b \\\\\n\\hline\n\\bottomrule\n\\end{tabular}")
    assert "extra" not in latex


def test_legacy_hline_search_matches_default_output(config: ConversionConfig) -> None:
    html = f'<table border="1">{ROWS_2_4_3}</table>'
    default = convert(html, config=config)
    config.legacy_hline_search = True

    assert convert(html, config=config) == default

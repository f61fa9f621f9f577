"""Unit tests for line extraction from rendered documents."""

from subtitle_reader.adapters.markdown_renderer import MarkdownRenderer
from subtitle_reader.core.lines import lines_of


class TestLinesOfHtml:
    """lines_of() walks text nodes in order and drops structure."""

    def test_paragraphs_become_lines(self):
        assert lines_of("<p>one</p>\n<p>two</p>") == ["one", "two"]

    def test_inline_markup_stays_on_one_line(self):
        assert lines_of("<p>Hello <strong>world</strong>.</p>") == ["Hello world."]

    def test_br_splits_lines(self):
        assert lines_of("<p>a<br>b</p>") == ["a", "b"]

    def test_embedded_newlines_split_and_trim(self):
        assert lines_of("<pre>  line one\nline two  \n\n</pre>") == ["line one", "line two"]

    def test_comments_scripts_and_styles_skipped(self):
        html = (
            "<!DOCTYPE html><p>x</p><!-- note -->"
            "<script>var a = 1;</script><style>p { color: red; }</style><p>y</p>"
        )
        assert lines_of(html) == ["x", "y"]

    def test_adjacent_blocks_without_whitespace(self):
        assert lines_of("<h1>Title</h1><p>Body</p>") == ["Title", "Body"]

    def test_empty_document(self):
        assert lines_of("") == []
        assert lines_of("<p>   </p>") == []


class TestLinesOfMarkdown:
    """lines_of() over MarkdownRenderer output."""

    def test_heading_paragraph_and_list(self):
        html = MarkdownRenderer().render("# Title\n\nHello **world**.\n\n- one\n- two\n")
        assert lines_of(html) == ["Title", "Hello world.", "one", "two"]

    def test_link_text_kept_url_dropped(self):
        html = MarkdownRenderer().render("Read [the docs](https://example.com/docs) first.")
        assert lines_of(html) == ["Read the docs first."]

    def test_source_order_preserved(self):
        html = MarkdownRenderer().render("B\n\nA\n\nC")
        assert lines_of(html) == ["B", "A", "C"]

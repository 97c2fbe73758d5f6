"""Unit tests for prompt construction and display formatting."""

import pytest

from recap.core.documents import UploadedDocument
from recap.integrations.linear_client import Issue
from recap.utils.formatting import (
    NO_ISSUES_MESSAGE,
    REVIEW_PROMPT_TEMPLATE,
    build_review_prompt,
    format_completed_date,
    format_issue_line,
    markdown_to_html,
    render_error_html,
    render_issue_html,
    render_issues_html,
)


def make_issue(identifier="ENG-1", title="Ship it", project_name=None, **kwargs):
    return Issue(
        id=kwargs.pop("id", identifier.lower()),
        identifier=identifier,
        title=title,
        completed_at=kwargs.pop("completed_at", "2024-01-05T15:30:00.000Z"),
        url=kwargs.pop("url", f"https://linear.app/acme/issue/{identifier}"),
        project_name=project_name,
        **kwargs,
    )


class TestMarkdownToHtml:
    """Test suite for the markdown subset renderer."""

    @pytest.mark.parametrize(
        "markdown,expected",
        [
            ("# Title", "<h1>Title</h1>"),
            ("## Section", "<h2>Section</h2>"),
            ("### Detail", "<h3>Detail</h3>"),
            ("**bold** and *italic*", "<strong>bold</strong> and <em>italic</em>"),
            ("- first", "<li>first</li>"),
            ("line one\nline two", "line one<br>line two"),
        ],
    )
    def test_supported_constructs(self, markdown, expected):
        assert markdown_to_html(markdown) == expected

    def test_headings_are_not_consumed_by_shallower_rules(self):
        """A level-three heading must not render as a level-one heading."""
        html = markdown_to_html("### Bug Fixes\n# Summary")

        assert html == "<h3>Bug Fixes</h3><br><h1>Summary</h1>"

    def test_bold_inside_heading(self):
        assert markdown_to_html("## **Impact**") == "<h2><strong>Impact</strong></h2>"

    def test_list_items_keep_line_breaks(self):
        html = markdown_to_html("- one\n- two")

        assert html == "<li>one</li><br><li>two</li>"

    def test_crlf_line_endings(self):
        html = markdown_to_html("### A\r\n- one\r\n- two")

        assert html == "<h3>A</h3><br><li>one</li><br><li>two</li>"

    def test_unsupported_markup_passes_through(self):
        assert markdown_to_html("1. numbered `code`") == "1. numbered `code`"

    def test_empty_input(self):
        assert markdown_to_html("") == ""


class TestReviewPrompt:
    """Test suite for prompt construction."""

    def test_issue_line_with_project(self):
        issue = make_issue("ENG-1", "Ship onboarding", project_name="Growth")

        assert format_issue_line(issue) == "- [ENG-1] Ship onboarding (Growth)"

    def test_issue_line_without_project(self):
        issue = make_issue("ENG-2", "Fix crash")

        assert format_issue_line(issue) == "- [ENG-2] Fix crash"

    def test_empty_inputs_use_none_marker(self):
        prompt = build_review_prompt([], [])

        assert prompt == REVIEW_PROMPT_TEMPLATE.format(
            issues_summary="None", documents_summary="None"
        )
        assert "## Completed Linear Issues:\nNone\n" in prompt
        assert "## Performance Documents:\nNone\n" in prompt

    def test_issues_and_documents_in_order(self):
        issues = [
            make_issue("ENG-1", "First", project_name="Alpha"),
            make_issue("ENG-2", "Second"),
        ]
        documents = [
            UploadedDocument(name="a.md", content="Alpha notes"),
            UploadedDocument(name="b.md", content="Beta notes"),
        ]

        prompt = build_review_prompt(issues, documents)

        assert "- [ENG-1] First (Alpha)\n- [ENG-2] Second\n" in prompt
        assert "### a.md\nAlpha notes\n\n### b.md\nBeta notes\n" in prompt

    def test_prompt_keeps_requirements(self):
        prompt = build_review_prompt([make_issue()], [])

        assert prompt.startswith("\nYou are a performance review expert.")
        assert (
            "1. Group by category (Feature Development, Bug Fixes, "
            "Documentation, Others)"
        ) in prompt
        assert "5. Write in a professional performance review style" in prompt


class TestIssueRendering:
    """Test suite for the issues panel markup."""

    def test_completed_date_in_utc(self):
        assert format_completed_date("2024-01-05T15:30:00.000Z") == "1/5/2024"

    def test_completed_date_converts_offsets(self):
        assert format_completed_date("2024-01-05T01:00:00+05:00") == "1/4/2024"

    def test_completed_date_passthrough_on_garbage(self):
        assert format_completed_date("yesterday") == "yesterday"
        assert format_completed_date("") == ""

    def test_issue_links_to_linear(self):
        issue = make_issue("ENG-7", "Polish settings", project_name="Core")

        html = render_issue_html(issue)

        assert 'href="https://linear.app/acme/issue/ENG-7"' in html
        assert "ENG-7" in html
        assert "Polish settings" in html
        assert "Core" in html
        assert "1/5/2024" in html

    def test_issue_title_is_escaped(self):
        html = render_issue_html(make_issue(title="<script>alert(1)</script>"))

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_labels_are_listed(self):
        html = render_issue_html(make_issue(labels=("Feature", "Frontend")))

        assert "Feature, Frontend" in html

    def test_empty_list_message(self):
        assert NO_ISSUES_MESSAGE in render_issues_html([])
        assert NO_ISSUES_MESSAGE == "No completed issues found for this period."

    def test_renders_each_issue_in_order(self):
        html = render_issues_html([make_issue("ENG-1"), make_issue("ENG-2")])

        assert html.count('<div class="issue">') == 2
        assert html.index("ENG-1") < html.index("ENG-2")

    def test_error_message(self):
        assert "Error: Invalid API key" in render_error_html("Invalid API key")

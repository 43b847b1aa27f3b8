import html

import markdown

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)

ARTICLE_EXTENSIONS = ["extra", "nl2br", "sane_lists", "toc"]
FRAGMENT_EXTENSIONS = ["extra", "nl2br", "sane_lists"]

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="zh-Hant">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{TITLE}} | {{SITE_TITLE}}</title>
    <link rel="canonical" href="{{BASE_URL}}/{{ARTICLE_ID}}.html">
    <link rel="stylesheet" href="assets/css/style.css">
</head>
<body>
    <article class="article" data-article-id="{{ARTICLE_ID}}">
        <header class="article-header">
            <h1>{{TITLE}}</h1>
            <p class="article-meta">
                <span class="article-author">{{AUTHOR}}</span>
                <span class="article-source">{{SOURCE}}</span>
                <span class="article-genre">{{GENRE}}</span>
            </p>
        </header>
        <div class="article-content">
{{CONTENT}}
        </div>
        <footer class="article-footer">{{UPDATE_DATE}}</footer>
    </article>
    <script src="assets/js/app.js"></script>
</body>
</html>"""


class ContentConverter:
    @staticmethod
    def markdown_to_html(markdown_text: str) -> str:
        """Convert an article body from markdown to an HTML fragment.

        Extensions:
        - extra: Abbreviations, attribute lists, definition lists, footnotes, tables
        - nl2br: Converts newlines to <br> tags
        - sane_lists: Better list handling
        - toc: Heading ids and permalinks

        Raw HTML blocks (including annotation placeholders) pass through untouched.

        Args:
            markdown_text: Markdown to convert

        Returns:
            HTML fragment (no <html>/<body> wrapper)
        """
        if not isinstance(markdown_text, str):
            raise TypeError(f"expected str, got {type(markdown_text).__name__}")

        if not markdown_text.strip():
            logger.warning("Empty markdown input provided")
            return ""

        md = markdown.Markdown(
            extensions=ARTICLE_EXTENSIONS,
            extension_configs={
                "toc": {
                    "permalink": True,
                    "permalink_title": "Link to this section",
                },
            },
        )
        return md.convert(markdown_text)

    @staticmethod
    def markdown_fragment(markdown_text: str) -> str:
        """Convert a short snippet (e.g. a callout body) without heading anchors."""
        if not markdown_text or not markdown_text.strip():
            return ""
        return markdown.markdown(markdown_text, extensions=FRAGMENT_EXTENSIONS)

    @staticmethod
    def render_page(meta, body_html: str, base_url: str = "", site_title: str = "",
                    update_date: str = "") -> str:
        """Wrap a converted article body in the standalone page layout."""
        variables = {
            "TITLE": html.escape(meta.title),
            "AUTHOR": html.escape(meta.author),
            "SOURCE": html.escape(meta.source),
            "GENRE": html.escape(meta.genre),
            "ARTICLE_ID": html.escape(meta.id),
            "SITE_TITLE": html.escape(site_title),
            "BASE_URL": base_url.rstrip("/"),
            "UPDATE_DATE": update_date,
        }

        page = PAGE_TEMPLATE
        for key, value in variables.items():
            page = page.replace("{{" + key + "}}", value)
        # Content last so article text is never scanned for template keys
        return page.replace("{{CONTENT}}", body_html)

    @staticmethod
    def decode_html_entities(text: str) -> str:
        """Decode named entities and numeric character references in one pass.

        "&amp;lt;" becomes "&lt;", not "<". Unknown names are left as they are.
        """
        return html.unescape(text)

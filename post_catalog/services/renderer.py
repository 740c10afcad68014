"""Rendering service.

This module renders post bodies to HTML with Python-Markdown, extracts
headings and links from the result with BeautifulSoup, and renders full pages
and the RSS feed.
"""

from dataclasses import dataclass, field
from email.utils import format_datetime
from typing import List, Optional
from urllib.parse import urljoin

import markdown
from bs4 import BeautifulSoup
from jinja2 import DictLoader, Environment, select_autoescape
from lxml import etree

from post_catalog.models.schemas import Post

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "toc"]

PAGE_TEMPLATES = {
    "base.html": """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{% block title %}{{ site.title }}{% endblock %}</title>
<link rel="alternate" type="application/rss+xml" title="{{ site.title }}" href="{{ site.url('index.xml') }}">
</head>
<body>
<header><a href="{{ site.url('') }}">{{ site.title }}</a></header>
<main>
{% block content %}{% endblock %}
</main>
</body>
</html>
""",
    "post.html": """{% extends "base.html" %}
{% block title %}{{ post.title }} | {{ site.title }}{% endblock %}
{% block content %}
<article>
<h1>{{ post.title }}</h1>
<time datetime="{{ post.date.isoformat() }}">{{ post.date.strftime("%Y-%m-%d") }}</time>
{% if rendered.headings %}
<nav class="toc">
<ul>
{% for heading in rendered.headings %}
<li class="toc-level-{{ heading.level }}"><a href="#{{ heading.anchor }}">{{ heading.text }}</a></li>
{% endfor %}
</ul>
</nav>
{% endif %}
{{ rendered.html | safe }}
</article>
{% endblock %}
""",
    "index.html": """{% extends "base.html" %}
{% block content %}
<ul class="posts">
{% for entry in entries %}
<li>
<time datetime="{{ entry.post.date.isoformat() }}">{{ entry.post.date.strftime("%Y-%m-%d") }}</time>
<a href="{{ site.post_url(entry.post) }}">{{ entry.post.title }}</a>
{% if entry.summary %}<p>{{ entry.summary }}</p>{% endif %}
</li>
{% endfor %}
</ul>
{% endblock %}
""",
}

_environment = Environment(
    loader=DictLoader(PAGE_TEMPLATES),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass
class SiteInfo:
    """Site-wide values used by the page templates and the feed."""

    title: str = "Posts"
    base_url: str = "/"
    description: str = ""

    def url(self, path: str) -> str:
        base = self.base_url if self.base_url.endswith("/") else self.base_url + "/"
        return urljoin(base, path)

    def post_url(self, post: Post) -> str:
        return self.url(f"posts/{post.slug}/")


@dataclass
class Heading:
    level: int
    text: str
    anchor: str


@dataclass
class RenderedBody:
    """HTML for a post body and what was found in it."""

    html: str
    headings: List[Heading] = field(default_factory=list)
    links: List[str] = field(default_factory=list)
    summary: str = ""


def render_markdown(body: str, summary: Optional[str] = None) -> RenderedBody:
    """Render a Markdown body to HTML.

    Args:
        body: Markdown text (without front matter)
        summary: Explicit summary; defaults to the first paragraph's text

    Returns:
        RenderedBody with html, headings, links and summary
    """
    html = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS).convert(body)

    soup = BeautifulSoup(html, "lxml")

    headings = [
        Heading(level=int(tag.name[1]), text=tag.get_text(strip=True), anchor=tag.get("id", ""))
        for tag in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])
    ]

    links = []
    seen = set()
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if href and href not in seen:
            seen.add(href)
            links.append(href)

    if summary is None:
        first_paragraph = soup.find("p")
        summary = first_paragraph.get_text(" ", strip=True) if first_paragraph else ""

    return RenderedBody(html=html, headings=headings, links=links, summary=summary)


def render_post(post: Post) -> RenderedBody:
    """Render a post body, honouring a ``summary``/``description`` front-matter value."""
    summary = post.params.get("summary") or post.params.get("description")
    return render_markdown(post.body, summary=summary if isinstance(summary, str) else None)


def render_post_page(post: Post, site: SiteInfo, rendered: Optional[RenderedBody] = None) -> str:
    rendered = rendered or render_post(post)
    return _environment.get_template("post.html").render(post=post, rendered=rendered, site=site)


def render_index_page(posts: List[Post], site: SiteInfo) -> str:
    """Render the listing page for already-selected posts (newest first)."""
    entries = [{"post": p, "summary": render_post(p).summary} for p in posts]
    return _environment.get_template("index.html").render(entries=entries, site=site)


def render_feed(posts: List[Post], site: SiteInfo) -> str:
    """Render an RSS 2.0 feed for already-selected posts."""
    rss = etree.Element("rss", version="2.0")
    channel = etree.SubElement(rss, "channel")
    etree.SubElement(channel, "title").text = site.title
    etree.SubElement(channel, "link").text = site.url("")
    etree.SubElement(channel, "description").text = site.description or site.title
    if posts:
        latest = max(p.date for p in posts)
        etree.SubElement(channel, "lastBuildDate").text = format_datetime(latest, usegmt=True)

    for post in posts:
        item = etree.SubElement(channel, "item")
        etree.SubElement(item, "title").text = post.title
        etree.SubElement(item, "link").text = site.post_url(post)
        etree.SubElement(item, "guid").text = site.post_url(post)
        etree.SubElement(item, "pubDate").text = format_datetime(post.date, usegmt=True)
        summary = render_post(post).summary
        if summary:
            etree.SubElement(item, "description").text = summary

    return etree.tostring(rss, xml_declaration=True, encoding="UTF-8", pretty_print=True).decode("utf-8")

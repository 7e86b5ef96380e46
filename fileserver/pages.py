"""HTML rendering for the browsing pages."""

import html
import posixpath
from typing import List
from urllib.parse import urlencode

from common.types import FileMetadata
from storage.extensions import FileKind, classify


def url_for(route: str, **params) -> str:
    """Build a route URL with its query string, skipping empty parameters."""
    query = urlencode({k: v for k, v in params.items() if v not in (None, "")})
    return f"{route}?{query}" if query else route


def local_url(target: str, default: str = "/list") -> str:
    """Return target if it is a same-site path, otherwise default."""
    # browsers read "/\host" like "//host"
    if not target.startswith("/") or target[1:2] in ("/", "\\"):
        return default
    return target


def parent_path(path: str) -> str:
    parent = posixpath.dirname(path.rstrip("/"))
    return "" if parent in (".", "/") else parent


def format_file_size(size: int) -> str:
    """Format file size in human-readable format."""
    if size > 1024 * 1024 * 1024:
        return f"{size / (1024*1024*1024):.1f} GB"
    elif size > 1024 * 1024:
        return f"{size / (1024*1024):.1f} MB"
    elif size > 1024:
        return f"{size / 1024:.1f} KB"
    else:
        return f"{size} bytes"


def _layout(title: str, body: str, back: str = "") -> str:
    back_link = f'<p><a href="{html.escape(local_url(back))}">&larr; Back</a></p>' if back else ""
    return f'''<!DOCTYPE html>
<html>
<head>
    <title>{html.escape(title)}</title>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <link rel="stylesheet" href="/css/style.css">
</head>
<body>
    <h1><a href="/list">Files</a></h1>
    {back_link}
    {body}
</body>
</html>'''


def _entry_row(entry: FileMetadata, listing_url: str) -> str:
    name = html.escape(entry.name)
    if entry.is_directory:
        link = f'<a href="{html.escape(url_for("/list", path=entry.path))}">{name}/</a>'
        size = "-"
    else:
        kind = classify(entry.path)
        view_route = {
            FileKind.IMAGE: "/img",
            FileKind.VIDEO: "/video",
            FileKind.TEXT: "/txt",
        }.get(kind, "/download")
        link = f'<a href="{html.escape(url_for(view_route, path=entry.path, page=listing_url))}">{name}</a>'
        size = format_file_size(entry.size)

    actions = []
    if not entry.is_directory:
        actions.append(f'<a href="{html.escape(url_for("/download", path=entry.path))}">download</a>')
    actions.append(f'<a href="{html.escape(url_for("/del", path=entry.path, page=listing_url))}">delete</a>')

    modified = entry.modified_at.strftime("%Y-%m-%d %H:%M:%S")
    return (
        f"<tr><td>{link}</td><td>{size}</td><td>{modified}</td>"
        f"<td>{' | '.join(actions)}</td></tr>"
    )


def render_listing(path: str, page: int, entries: List[FileMetadata], has_next: bool) -> str:
    """
    Render one page of a directory listing with paging and upload controls.

    Args:
        path: Logical directory path
        page: Zero-based page number
        entries: Entries on this page
        has_next: Whether a following page exists
    """
    listing_url = url_for("/list", path=path, p=page or None)
    rows = "\n".join(_entry_row(entry, listing_url) for entry in entries)
    if not rows:
        rows = '<tr><td colspan="4">Empty</td></tr>'

    nav = []
    if path:
        nav.append(f'<a href="{html.escape(url_for("/list", path=parent_path(path)))}">Up</a>')
    if page > 0:
        nav.append(f'<a href="{html.escape(url_for("/list", path=path, p=page - 1 or None))}">Previous</a>')
    if has_next:
        nav.append(f'<a href="{html.escape(url_for("/list", path=path, p=page + 1))}">Next</a>')

    body = f'''<h2>/{html.escape(path)}</h2>
    <table>
        <tr><th>Name</th><th>Size</th><th>Modified</th><th></th></tr>
        {rows}
    </table>
    <p>{" | ".join(nav)}</p>
    <form action="/upload" method="post" enctype="multipart/form-data">
        <input type="hidden" name="path" value="{html.escape(path)}">
        <input type="file" name="file">
        <input type="submit" value="Upload">
    </form>'''
    return _layout(f"/{path}", body)


def render_image(path: str, back: str) -> str:
    src = html.escape(url_for("/download", path=path))
    return _layout(posixpath.basename(path), f'<img src="{src}" alt="{html.escape(path)}">', back)


def render_video(path: str, back: str) -> str:
    src = html.escape(url_for("/download", path=path))
    body = f'<video src="{src}" controls preload="metadata">Your browser does not support video.</video>'
    return _layout(posixpath.basename(path), body, back)


def render_text(path: str, back: str, content: str) -> str:
    gbk = html.escape(url_for("/txt", path=path, page=back, encode="gbk"))
    utf8 = html.escape(url_for("/txt", path=path, page=back))
    body = f'''<p><a href="{utf8}">UTF-8</a> | <a href="{gbk}">GBK</a></p>
    <pre>{html.escape(content)}</pre>'''
    return _layout(posixpath.basename(path), body, back)


def render_delete_confirm(path: str, back: str) -> str:
    confirm = html.escape(url_for("/del", path=path, page=back, confirm="yes"))
    body = f'''<p>Delete <strong>{html.escape(path)}</strong>?</p>
    <p><a href="{confirm}">Yes, delete</a> | <a href="{html.escape(local_url(back))}">Cancel</a></p>'''
    return _layout(f"Delete {posixpath.basename(path)}", body, back)

"""Atlassian Document Format conversion.

Jira REST API v3 takes rich text (comments, worklog comments, descriptions)
as ADF documents. Input typed in menus is Markdown; it is converted to HTML
with the markdown library and the HTML is then walked into ADF nodes.
"""

import re
from html.parser import HTMLParser
from typing import Any

import markdown


def empty_doc() -> dict:
    return {"version": 1, "type": "doc", "content": []}


def _text_node(text: str, marks: list[dict] | None = None) -> dict:
    node: dict[str, Any] = {"type": "text", "text": text}
    if marks:
        node["marks"] = [dict(m) for m in marks]
    return node


def text_to_adf(text: str) -> dict:
    """Convert plain text to an ADF document.

    Blank lines separate paragraphs; single newlines become hard breaks.
    """
    doc = empty_doc()
    for block in re.split(r"\n\s*\n", text.strip()):
        if not block.strip():
            continue
        content: list[dict] = []
        for i, line in enumerate(block.split("\n")):
            if i:
                content.append({"type": "hardBreak"})
            if line:
                content.append(_text_node(line))
        doc["content"].append({"type": "paragraph", "content": content})
    return doc


HEADINGS = {f"h{n}": n for n in range(1, 7)}

MARK_TAGS = {
    "strong": "strong",
    "b": "strong",
    "em": "em",
    "i": "em",
    "del": "strike",
    "s": "strike",
}

# Nodes whose children are blocks; everything else that is open holds inline content
BLOCK_CONTAINERS = {"doc", "listItem", "blockquote"}
LIST_TYPES = {"bulletList", "orderedList"}


class _AdfBuilder(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.doc = empty_doc()
        self.stack: list[dict] = [self.doc]
        self.marks: list[dict] = []
        self.implicit: set[int] = set()  # ids of paragraphs opened for bare text
        self.in_pre = False

    def _current(self) -> dict:
        return self.stack[-1]

    def _open(self, node: dict) -> dict:
        node.setdefault("content", [])
        self._current()["content"].append(node)
        self.stack.append(node)
        return node

    def _close(self, node_type: str) -> None:
        if not any(n["type"] == node_type for n in self.stack[1:]):
            return
        while len(self.stack) > 1:
            node = self.stack.pop()
            self.implicit.discard(id(node))
            if node["type"] == node_type:
                return

    def _close_implicit(self) -> None:
        if id(self._current()) in self.implicit:
            self._close("paragraph")

    def _inline_target(self) -> dict:
        current = self._current()
        if current["type"] in BLOCK_CONTAINERS:
            para = self._open({"type": "paragraph"})
            self.implicit.add(id(para))
            return para
        return current

    def handle_starttag(self, tag, attrs):
        attrs_dict = dict(attrs)
        if tag == "p":
            self._close_implicit()
            self._open({"type": "paragraph"})
        elif tag in HEADINGS:
            self._close_implicit()
            self._open({"type": "heading", "attrs": {"level": HEADINGS[tag]}})
        elif tag == "ul":
            self._close_implicit()
            self._open({"type": "bulletList"})
        elif tag == "ol":
            self._close_implicit()
            node = self._open({"type": "orderedList"})
            start = attrs_dict.get("start")
            if start and start.isdigit() and int(start) != 1:
                node["attrs"] = {"order": int(start)}
        elif tag == "li":
            self._open({"type": "listItem"})
        elif tag == "blockquote":
            self._close_implicit()
            self._open({"type": "blockquote"})
        elif tag == "pre":
            self._close_implicit()
            self._open({"type": "codeBlock"})
            self.in_pre = True
        elif tag == "code":
            if self.in_pre:
                match = re.match(r"language-(\S+)", attrs_dict.get("class") or "")
                if match:
                    self._current()["attrs"] = {"language": match.group(1)}
            else:
                self.marks.append({"type": "code"})
        elif tag in MARK_TAGS:
            self.marks.append({"type": MARK_TAGS[tag]})
        elif tag == "a":
            self.marks.append({"type": "link", "attrs": {"href": attrs_dict.get("href", "")}})
        elif tag == "br":
            self._inline_target()["content"].append({"type": "hardBreak"})
        elif tag == "hr":
            self._close_implicit()
            self._current()["content"].append({"type": "rule"})

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag):
        if tag == "p":
            self._close("paragraph")
        elif tag in HEADINGS:
            self._close("heading")
        elif tag == "ul":
            self._close("bulletList")
        elif tag == "ol":
            self._close("orderedList")
        elif tag == "li":
            self._close("listItem")
        elif tag == "blockquote":
            self._close("blockquote")
        elif tag == "pre":
            self._finish_code_block()
        elif tag == "code" and not self.in_pre:
            self._pop_mark("code")
        elif tag in MARK_TAGS:
            self._pop_mark(MARK_TAGS[tag])
        elif tag == "a":
            self._pop_mark("link")

    def _pop_mark(self, mark_type: str) -> None:
        for i in range(len(self.marks) - 1, -1, -1):
            if self.marks[i]["type"] == mark_type:
                del self.marks[i]
                return

    def _finish_code_block(self) -> None:
        self.in_pre = False
        node = self._current()
        if node["type"] != "codeBlock":
            return
        text = "".join(c["text"] for c in node["content"]).rstrip("\n")
        node["content"] = [_text_node(text)] if text else []
        self._close("codeBlock")

    def handle_data(self, data):
        if self.in_pre:
            self._current()["content"].append(_text_node(data))
            return
        current_type = self._current()["type"]
        if current_type in LIST_TYPES:
            return
        if current_type in BLOCK_CONTAINERS and not data.strip():
            return
        target = self._inline_target()
        text = data.replace("\n", " ")
        content = target["content"]
        if not content or content[-1]["type"] == "hardBreak":
            text = text.lstrip()
        if text:
            content.append(_text_node(text, self.marks))


def markdown_to_adf(text: str) -> dict:
    """Convert Markdown to an ADF document.

    Supports paragraphs, headings, lists, fenced code, blockquotes, rules
    and strong/em/code/link marks. Single newlines are kept as hard breaks.
    """
    if not text.strip():
        return empty_doc()
    html = markdown.markdown(text, extensions=["fenced_code", "sane_lists", "nl2br"])
    builder = _AdfBuilder()
    builder.feed(html)
    builder.close()
    return builder.doc


def _render_inline(nodes: list[dict]) -> str:
    parts = []
    for node in nodes:
        node_type = node.get("type")
        attrs = node.get("attrs", {})
        if node_type == "text":
            text = node.get("text", "")
            for mark in node.get("marks", []):
                mark_type = mark.get("type")
                if mark_type == "strong":
                    text = f"**{text}**"
                elif mark_type == "em":
                    text = f"*{text}*"
                elif mark_type == "code":
                    text = f"`{text}`"
                elif mark_type == "strike":
                    text = f"~~{text}~~"
                elif mark_type == "link":
                    text = f"[{text}]({mark.get('attrs', {}).get('href', '')})"
            parts.append(text)
        elif node_type == "hardBreak":
            parts.append("\n")
        elif node_type == "mention":
            parts.append(attrs.get("text") or f"@{attrs.get('id', '?')}")
        elif node_type == "emoji":
            parts.append(attrs.get("text") or attrs.get("shortName", ""))
        elif node_type in {"inlineCard", "blockCard"}:
            parts.append(attrs.get("url", ""))
        elif node_type == "date":
            parts.append(str(attrs.get("timestamp", "")))
        elif node_type == "status":
            parts.append(f"[{attrs.get('text', '')}]")
        elif "content" in node:
            parts.append(_render_inline(node["content"]))
    return "".join(parts)


def _indent(text: str, prefix: str, first: str | None = None) -> str:
    lines = text.split("\n")
    head = first if first is not None else prefix
    return "\n".join([head + lines[0]] + [prefix + line if line else line for line in lines[1:]])


def _render_block(node: dict) -> str:
    node_type = node.get("type")
    attrs = node.get("attrs", {})
    content = node.get("content", [])

    if node_type == "paragraph":
        return _render_inline(content)
    if node_type == "heading":
        return "#" * int(attrs.get("level", 1)) + " " + _render_inline(content)
    if node_type == "bulletList":
        return "\n".join(_indent(_render_blocks(item.get("content", []), "\n"), "  ", "- ") for item in content)
    if node_type == "orderedList":
        start = int(attrs.get("order", 1))
        items = []
        for i, item in enumerate(content):
            marker = f"{start + i}. "
            items.append(_indent(_render_blocks(item.get("content", []), "\n"), " " * len(marker), marker))
        return "\n".join(items)
    if node_type == "codeBlock":
        lang = attrs.get("language", "") or ""
        return f"```{lang}\n{_render_inline(content)}\n```"
    if node_type == "blockquote":
        return _indent(_render_blocks(content), "> ")
    if node_type == "rule":
        return "---"
    if node_type in {"mediaSingle", "mediaGroup", "media"}:
        return "[attachment]"
    if node_type == "table":
        rows = []
        for row in content:
            cells = [_render_blocks(cell.get("content", []), " ") for cell in row.get("content", [])]
            rows.append("| " + " | ".join(cells) + " |")
        return "\n".join(rows)
    if node_type in {"panel", "expand", "nestedExpand", "listItem", "doc"}:
        return _render_blocks(content)
    if node_type == "text" or node_type == "hardBreak":
        return _render_inline([node])
    return _render_inline(content)


def _render_blocks(nodes: list[dict], separator: str = "\n\n") -> str:
    return separator.join(_render_block(n) for n in nodes)


def adf_to_text(doc: dict | str | None) -> str:
    """Render an ADF document as readable Markdown-like text.

    Plain strings (API v2 bodies) are returned unchanged.
    """
    if not doc:
        return ""
    if isinstance(doc, str):
        return doc
    text = _render_block(doc) if doc.get("type") else _render_inline(doc.get("content", []))
    return re.sub(r"\n{3,}", "\n\n", text).strip()

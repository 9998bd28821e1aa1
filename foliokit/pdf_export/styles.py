"""Stylesheet attached to every exported folio."""

from __future__ import annotations

DEFAULT_EXPORT_STYLES = """
* {
  margin: 0;
  padding: 0;
  box-sizing: border-box;
}

.editor-content {
  font-family: 'Times New Roman', Times, serif;
  font-size: 12pt;
  line-height: 1.5;
  color: #000;
}

p { margin-bottom: 0.5em; }

h1 { font-size: 24pt; font-weight: bold; margin: 12pt 0; }
h2 { font-size: 18pt; font-weight: bold; margin: 10pt 0; }
h3 { font-size: 14pt; font-weight: bold; margin: 8pt 0; }
h4 { font-size: 12pt; font-weight: bold; margin: 6pt 0; }

ul, ol { margin-left: 20pt; margin-bottom: 0.5em; }
li { margin-bottom: 0.25em; }

table { border-collapse: collapse; width: 100%; margin-bottom: 1em; }
th, td { border: 1px solid #000; padding: 6pt; text-align: left; vertical-align: top; }
th { font-weight: bold; background-color: #f5f5f5; }

img { max-width: 100%; height: auto; }

.slot-placeholder { color: #666; font-style: italic; }

.article-title { font-weight: bold; text-transform: uppercase; margin: 1em 0 0.5em; }
.clause { margin-left: 20pt; }
.signature-block { margin-top: 2em; page-break-inside: avoid; }
""".strip()

__all__ = ["DEFAULT_EXPORT_STYLES"]

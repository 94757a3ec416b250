from .writers import render_html, render_sarif, render_text, render_xml, write_reports

__all__ = [
    'render_html',
    'render_sarif',
    'render_text',
    'render_xml',
    'write_reports',
]

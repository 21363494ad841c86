"""
Minimal HTML pages for the one-click links opened from emails.
"""

from html import escape

from fastapi.responses import HTMLResponse

_ERROR_COLOR = "#dc3545"
_OK_COLOR = "#28a745"


def page(title: str, message: str, status_code: int = 200) -> HTMLResponse:
    color = _OK_COLOR if status_code < 400 else _ERROR_COLOR
    body = (
        '<html><body style="font-family: Arial; text-align: center; padding: 50px;">'
        f'<h1 style="color: {color};">{escape(title)}</h1>'
        f"<p>{escape(message)}</p>"
        "</body></html>"
    )
    return HTMLResponse(content=body, status_code=status_code)

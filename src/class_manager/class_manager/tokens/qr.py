from __future__ import annotations

import io
from typing import Optional

import qrcode


def scan_url(base_url: Optional[str], token: str) -> str:
    """What the printed QR encodes: the raw token, or a scan link when a public URL is set."""
    if not base_url:
        return token
    return f"{base_url.rstrip('/')}/scan/{token}"


def render_png(content: str, *, box_size: int = 8, border: int = 2) -> bytes:
    qr = qrcode.QRCode(box_size=box_size, border=border)
    qr.add_data(content)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()

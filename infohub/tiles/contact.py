"""Contact card whose email and phone are kept out of the static markup.

The values are XOR-ed with a fixed key and base64-encoded into a data attribute.
That only keeps naive address harvesters away; anyone running the page script
can read them.
"""

from __future__ import annotations

import base64
from typing import Any, Mapping

from infohub.escaping import esc, safe_href
from infohub.tiles.base import IMAGE_EXTENSIONS, Field, TileType, flag, text_of

XOR_KEY = "InfoHub2026"

CONTACT_CSS = """
.contact-content { display: flex; align-items: center; gap: 16px; }
.contact-image img { width: 80px; height: 80px; object-fit: cover; border-radius: 50%; }
.contact-info h3.contact-name { margin-bottom: 4px; }
.contact-role { color: var(--text-light); font-size: 0.9rem; }
.contact-actions { display: flex; flex-wrap: wrap; gap: 8px; margin-top: 8px; }
.contact-reveal-btn, .contact-revealed { display: inline-flex; align-items: center; gap: 6px; padding: 6px 12px; border-radius: 8px; border: 1px solid rgba(0,0,0,0.12); background: transparent; font: inherit; color: inherit; cursor: pointer; }
""".strip()

CONTACT_JS = f"""
function initContactReveal() {{
    const XOR_KEY = '{XOR_KEY}';

    function decode(encoded) {{
        const raw = atob(encoded);
        let result = '';
        for (let i = 0; i < raw.length; i++) {{
            result += String.fromCharCode(raw.charCodeAt(i) ^ XOR_KEY.charCodeAt(i % XOR_KEY.length));
        }}
        return new TextDecoder().decode(Uint8Array.from(result, c => c.charCodeAt(0)));
    }}

    document.querySelectorAll('.contact-reveal-btn[data-contact-value]').forEach(button => {{
        button.addEventListener('click', () => {{
            const value = decode(button.dataset.contactValue);
            const link = document.createElement('a');
            link.className = 'contact-revealed';
            if (button.dataset.contactType === 'phone') {{
                link.href = 'tel:' + value.replace(/[^\\d+]/g, '');
            }} else {{
                link.href = 'mailto:' + value;
            }}
            link.textContent = value;
            button.replaceWith(link);
        }});
    }});
}}
""".strip()


def _xor(raw: bytes) -> bytes:
    key = XOR_KEY.encode("ascii")
    return bytes(b ^ key[i % len(key)] for i, b in enumerate(raw))


def encode_contact(value: str) -> str:
    return base64.b64encode(_xor(value.encode("utf-8"))).decode("ascii")


def decode_contact(encoded: str) -> str:
    return _xor(base64.b64decode(encoded)).decode("utf-8")


class ContactTile(TileType):
    key = "contact"
    name = "Contact"
    description = "Contact person with protected email and phone"
    fields = (
        Field("title", "text", "Internal title", required=True, placeholder='e.g. "Contact pastor"'),
        Field("name", "text", "Name", required=True, max_length=100, placeholder="First and last name"),
        Field("role", "text", "Role", max_length=100, placeholder='e.g. "Youth leader"'),
        Field("image", "image", "Profile picture", extensions=IMAGE_EXTENSIONS),
        Field("email", "email", "Email address", placeholder="name@example.com"),
        Field("phone", "tel", "Phone number", placeholder="+49 123 456789"),
        Field("showEmailButton", "checkbox", '"Show email" button', default=True),
        Field("showPhoneButton", "checkbox", '"Show phone" button', default=True),
    )

    def _reveal_button(self, kind: str, value: str, icon: str, label: str) -> str:
        return (
            f'<button type="button" class="contact-reveal-btn" data-contact-type="{kind}" '
            f'data-contact-value="{esc(encode_contact(value))}">\n'
            f'    <span class="contact-icon">{icon}</span>\n'
            f'    <span class="contact-label">{label}</span>\n'
            "</button>\n"
        )

    def render(self, data: Mapping[str, Any]) -> str:
        name = esc(text_of(data, "name"))
        role = text_of(data, "role")
        image = text_of(data, "image").strip()
        email = text_of(data, "email").strip()
        phone = text_of(data, "phone").strip()

        html_out = '<div class="contact-content">\n'
        if image:
            html_out += (
                '<div class="contact-image">\n'
                f'    <img src="{safe_href(image, placeholder="")}" alt="{name}" loading="lazy">\n'
                "</div>\n"
            )
        html_out += '<div class="contact-info">\n'
        html_out += f'<h3 class="contact-name">{name}</h3>\n'
        if role:
            html_out += f'<p class="contact-role">{esc(role)}</p>\n'

        html_out += '<div class="contact-actions">\n'
        if email and flag(data, "showEmailButton", True):
            html_out += self._reveal_button("email", email, "\U0001f4e7", "Show email")
        if phone and flag(data, "showPhoneButton", True):
            html_out += self._reveal_button("phone", phone, "\U0001f4de", "Show phone")
        html_out += "</div>\n</div>\n</div>\n"
        return html_out

    def css(self) -> str:
        return CONTACT_CSS

    def js(self) -> str:
        return CONTACT_JS

    def init_function(self) -> str | None:
        return "initContactReveal"

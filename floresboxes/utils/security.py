"""Security helpers: PII masking and safe logging (minimal)."""
import re

_PHONE = re.compile(r"\+?\d[\d\s-]{6,}(\d{3})")
_EMAIL = re.compile(r"([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*(@[A-Za-z0-9.-]+)")


def mask_pii(text: str) -> str:
    # Keep the last three digits of phone numbers and the first letter of emails
    if not text:
        return text
    masked = _PHONE.sub(lambda m: "[REDACTED]" + m.group(1), text)
    masked = _EMAIL.sub(lambda m: m.group(1) + "***" + m.group(2), masked)
    return masked

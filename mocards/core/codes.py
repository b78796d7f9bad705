# mocards/core/codes.py
"""Formatting and normalization of card codes.

Legacy control numbers look like ``PHL-BATCH-001-0001``, V2 control numbers
like ``MOC-01-0007-00001`` and passcodes like ``CAV-1234``.
"""

import re
import time

V2_PREFIX = "MOC"
BATCH_PREFIX = "BATCH"
BATCH_SEQUENCE_MAX = 999
V2_CLINIC_NUMBER_MAX = 9999
V2_CARD_NUMBER_MAX = 99999

_WHITESPACE = re.compile(r"\s+")
_BATCH_SEQUENCE = re.compile(r"^BATCH-(\d{3})$")
_V2_CONTROL_NUMBER = re.compile(r"^MOC-\d{2}-\d{4}-\d{5}$")
_TRAILING_DIGITS = re.compile(r"(\d+)$")


def format_control_number(prefix: str, batch_label: str, sequence_number: int) -> str:
    return f"{prefix}-{batch_label}-{sequence_number:04d}"


def format_control_number_v2(location_number: str, clinic_number: int, card_number: int) -> str:
    """V2 numbers are fixed width, so clinic and card numbers past their field size are rejected."""
    if not 0 < clinic_number <= V2_CLINIC_NUMBER_MAX:
        raise ValueError(f"Clinic number {clinic_number} does not fit a V2 control number")
    if not 0 < card_number <= V2_CARD_NUMBER_MAX:
        raise ValueError(f"Card number {card_number} does not fit a V2 control number")
    return f"{V2_PREFIX}-{int(location_number):02d}-{clinic_number:04d}-{card_number:05d}"


def format_passcode(location_code: str, digits: int) -> str:
    return f"{location_code}-{digits:04d}"


def format_batch_number(sequence: int) -> str:
    return f"{BATCH_PREFIX}-{sequence:03d}"


def fallback_batch_number(now_ms: int | None = None) -> str:
    """Timestamp based batch number used once the sequential range is used up."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"BTH{str(now_ms)[-6:]}"


def batch_sequence(batch_number: str) -> int | None:
    match = _BATCH_SEQUENCE.match(batch_number or "")
    return int(match.group(1)) if match else None


def card_sequence(control_number: str) -> int:
    match = _TRAILING_DIGITS.search(control_number)
    if not match:
        raise ValueError(f"Control number {control_number!r} has no sequence part")
    return int(match.group(1))


def is_v2_control_number(value: str) -> bool:
    return bool(_V2_CONTROL_NUMBER.match(value))


def normalize_control_number(raw: str) -> str:
    cleaned = _WHITESPACE.sub("", raw).upper()
    if "-" not in cleaned and len(cleaned) >= 8:
        return f"{cleaned[:3]}-{cleaned[3:7]}-{cleaned[7:]}"
    return cleaned


def normalize_passcode(raw: str) -> str:
    cleaned = _WHITESPACE.sub("", raw).upper()
    if "-" not in cleaned and len(cleaned) >= 6:
        return f"{cleaned[:3]}-{cleaned[3:]}"
    return cleaned

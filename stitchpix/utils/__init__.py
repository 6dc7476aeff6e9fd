"""Shared helpers."""

from .data_url import decode_data_url, encode_data_url, sniff_image_type
from .liveness import TicketCounter

__all__ = [
    "decode_data_url",
    "encode_data_url",
    "sniff_image_type",
    "TicketCounter",
]

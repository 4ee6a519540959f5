"""Protocol layer: code tables, framing, payload decoders and streaming."""

from .commands import Command, Status, ProtocolRevision, get_revision
from .framing import build_request, read_response_header

from __future__ import annotations

import uuid
from typing import Optional


class SessionResolver:
    """Correlate anonymous clients with their cart and wishlist.

    Identifiers are random uuid4 strings. Nothing is stored here and sessions
    never expire; the client is expected to send the identifier back.
    """

    def __init__(self, header: str = "sessionid") -> None:
        self.header = header

    def generate(self) -> str:
        return str(uuid.uuid4())

    def resolve(self, presented: Optional[str] = None) -> str:
        if presented is not None and presented.strip():
            return presented.strip()
        return self.generate()

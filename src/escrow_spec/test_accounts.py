"""Named test identities: 32-byte addresses derived from their labels."""

from __future__ import annotations

from blake3 import blake3


def address(label: str) -> bytes:
    return blake3(label.encode("utf-8")).digest()


CLIENT = address("client")
FREELANCER = address("freelancer")
ARBITRATOR = address("arbitrator")
CUSTODY = address("custody")
OUTSIDER = address("outsider")
SECOND_CLIENT = address("second-client")

NAMES: dict[bytes, str] = {
    CLIENT: "client",
    FREELANCER: "freelancer",
    ARBITRATOR: "arbitrator",
    CUSTODY: "custody",
    OUTSIDER: "outsider",
    SECOND_CLIENT: "second-client",
}

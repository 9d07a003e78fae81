"""Identities, clock and record builders shared by the tests."""
from encrypted_storage import Record

OWNER = "0x1111111111111111111111111111111111111111"
ALICE = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
BOB = "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
CAROL = "0xcccccccccccccccccccccccccccccccccccccccc"

FEE = 10 ** 15
START = 1_700_000_000


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, now: int = START):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def make_record(n: int = 0) -> Record:
    return Record(
        name=f"site-{n}".encode(),
        description=f"login for site {n}".encode(),
        value=f"{n:02x}deadbeef".encode(),
    )

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple

from .errors import InvalidInput

PICKS = 6
MIN_NUMBER = 1
MAX_NUMBER = 45
MAX_TICKETS_PER_PURCHASE = 5
TICKET_PRICE = 1000
SLOTS: Tuple[str, ...] = ("A", "B", "C", "D", "E")

MODE_AUTO_LABEL = "자동"
MODE_SEMI_AUTO_LABEL = "반자동"
MODE_MANUAL_LABEL = "수동"
MODE_UNKNOWN_LABEL = "알 수 없음"


class TicketMode(Enum):
    AUTO = "0"
    MANUAL = "1"
    SEMI_AUTO = "2"

    @property
    def gen_type(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return MODE_LABELS[self]


MODE_LABELS: Dict[TicketMode, str] = {
    TicketMode.AUTO: MODE_AUTO_LABEL,
    TicketMode.MANUAL: MODE_MANUAL_LABEL,
    TicketMode.SEMI_AUTO: MODE_SEMI_AUTO_LABEL,
}


class Rank(IntEnum):
    FIRST = 1
    SECOND = 2
    THIRD = 3
    FOURTH = 4
    FIFTH = 5
    NONE = 6

    @property
    def label(self) -> str:
        if self is Rank.NONE:
            return "낙첨"
        return f"{self.value}등"


def validate_numbers(numbers: Sequence[int]) -> None:
    if len(numbers) != PICKS:
        raise InvalidInput(f"번호는 정확히 {PICKS}개여야 합니다: {list(numbers)}")
    if len(set(numbers)) != len(numbers):
        raise InvalidInput(f"중복된 번호가 있습니다: {list(numbers)}")
    out_of_range = [n for n in numbers if n < MIN_NUMBER or n > MAX_NUMBER]
    if out_of_range:
        raise InvalidInput(f"번호는 {MIN_NUMBER}-{MAX_NUMBER} 범위여야 합니다. 오류: {out_of_range}")


@dataclass(frozen=True)
class TicketRequest:
    mode: TicketMode
    numbers: Tuple[int, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.mode, TicketMode):
            raise InvalidInput(f"올바르지 않은 모드입니다: {self.mode!r}")
        try:
            numbers = tuple(int(n) for n in self.numbers)
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"번호를 정수로 읽을 수 없습니다: {self.numbers!r}") from exc
        object.__setattr__(self, "numbers", numbers)

        if self.mode is TicketMode.AUTO:
            if numbers:
                raise InvalidInput("자동 모드에는 번호를 지정할 수 없습니다.")
            return
        validate_numbers(numbers)

    @classmethod
    def auto(cls) -> "TicketRequest":
        return cls(mode=TicketMode.AUTO)

    @classmethod
    def manual(cls, numbers: Sequence[int]) -> "TicketRequest":
        return cls(mode=TicketMode.MANUAL, numbers=tuple(numbers))

    @classmethod
    def semi_auto(cls, numbers: Sequence[int]) -> "TicketRequest":
        return cls(mode=TicketMode.SEMI_AUTO, numbers=tuple(numbers))


def auto_tickets(count: int) -> List[TicketRequest]:
    return [TicketRequest.auto() for _ in range(count)]


@dataclass(frozen=True)
class PurchasedTicket:
    round: int
    slot: str
    numbers: Tuple[int, ...]
    mode: str


@dataclass(frozen=True)
class PurchaseSummary:
    order_no: str
    barcode: str
    issue_no: str


@dataclass(frozen=True)
class PurchaseOrder:
    round: int
    order_no: str
    tickets: Tuple[PurchasedTicket, ...]


@dataclass(frozen=True)
class PrizeInfo:
    winner_count: int
    amount_per_winner: int
    total_amount: int


@dataclass(frozen=True)
class WinningNumbers:
    round: int
    draw_date: date | None
    numbers: Tuple[int, ...]
    bonus_number: int
    prizes: Mapping[Rank, PrizeInfo]

    def __post_init__(self) -> None:
        object.__setattr__(self, "numbers", tuple(self.numbers))
        object.__setattr__(self, "prizes", MappingProxyType(dict(self.prizes)))


@dataclass(frozen=True)
class TicketResult:
    slot: str
    mode: str
    numbers: Tuple[int, ...]
    rank: Rank
    prize_amount: int

    @property
    def winning(self) -> bool:
        return self.rank is not Rank.NONE


@dataclass
class CheckSummary:
    round: int
    draw_date: date | None
    winning_numbers: Tuple[int, ...]
    bonus_number: int
    prizes: Mapping[Rank, PrizeInfo]
    tickets: List[TicketResult] = field(default_factory=list)

    @classmethod
    def for_draw(cls, winning: WinningNumbers) -> "CheckSummary":
        return cls(
            round=winning.round,
            draw_date=winning.draw_date,
            winning_numbers=winning.numbers,
            bonus_number=winning.bonus_number,
            prizes=winning.prizes,
        )

    def add_ticket(self, result: TicketResult) -> None:
        self.tickets.append(result)

    def has_winner(self) -> bool:
        return any(ticket.winning for ticket in self.tickets)

    def winning_tickets(self) -> List[TicketResult]:
        return [ticket for ticket in self.tickets if ticket.winning]

    def total_prize_amount(self) -> int:
        return sum(ticket.prize_amount for ticket in self.tickets)

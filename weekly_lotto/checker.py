from __future__ import annotations

import re
from typing import Iterable, List, Sequence

from .errors import InvalidInput, NoDataFound
from .models import (
    PICKS,
    CheckSummary,
    PurchasedTicket,
    PurchaseOrder,
    Rank,
    TicketResult,
    WinningNumbers,
    validate_numbers,
)

FULLWIDTH_DIGITS = str.maketrans("０１２３４５６７８９", "0123456789")


def _normalize_number_token(token: str) -> int:
    normalized = token.translate(FULLWIDTH_DIGITS)
    match = re.search(r"\d+", normalized)
    if not match:
        raise InvalidInput(f"숫자를 읽을 수 없습니다: {token}")
    return int(match.group(0))


def parse_ticket_numbers(raw_input: str) -> List[int]:
    if not raw_input.strip():
        raise InvalidInput("번호가 입력되지 않았습니다.")

    tokens = [token for token in re.split(r"[\s,;/]+", raw_input.strip()) if token]
    if len(tokens) != PICKS:
        raise InvalidInput(f"정확히 {PICKS}개의 번호를 입력해야 합니다: {raw_input!r}")

    numbers = [_normalize_number_token(token) for token in tokens]
    validate_numbers(numbers)
    return sorted(numbers)


def _intersection(first: Iterable[int], second: Iterable[int]) -> List[int]:
    return sorted(set(first).intersection(second))


def _determine_rank(main_hits: int, bonus_hit: bool) -> Rank:
    if main_hits == 6:
        return Rank.FIRST
    if main_hits == 5 and bonus_hit:
        return Rank.SECOND
    if main_hits == 5:
        return Rank.THIRD
    if main_hits == 4:
        return Rank.FOURTH
    if main_hits == 3:
        return Rank.FIFTH
    return Rank.NONE


def evaluate_rank(numbers: Sequence[int], winning: WinningNumbers) -> Rank:
    matched = _intersection(numbers, winning.numbers)
    return _determine_rank(len(matched), winning.bonus_number in numbers)


def prize_for_rank(winning: WinningNumbers, rank: Rank) -> int:
    if rank is Rank.NONE:
        return 0
    prize = winning.prizes.get(rank)
    return prize.amount_per_winner if prize else 0


def build_summary(winning: WinningNumbers, tickets: Iterable[PurchasedTicket]) -> CheckSummary:
    summary = CheckSummary.for_draw(winning)
    for ticket in tickets:
        rank = evaluate_rank(ticket.numbers, winning)
        summary.add_ticket(
            TicketResult(
                slot=ticket.slot,
                mode=ticket.mode,
                numbers=ticket.numbers,
                rank=rank,
                prize_amount=prize_for_rank(winning, rank),
            )
        )
    return summary


def select_round_tickets(orders: Iterable[PurchaseOrder], round_no: int) -> List[PurchasedTicket]:
    tickets: List[PurchasedTicket] = []
    for order in orders:
        if order.round == round_no:
            tickets.extend(order.tickets)
    if not tickets:
        raise NoDataFound(f"{round_no}회차 구매 내역을 찾을 수 없습니다.")
    return tickets

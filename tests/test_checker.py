import itertools

import pytest

from weekly_lotto.checker import (
    build_summary,
    evaluate_rank,
    parse_ticket_numbers,
    prize_for_rank,
    select_round_tickets,
)
from weekly_lotto.errors import InvalidInput, NoDataFound
from weekly_lotto.models import PrizeInfo, PurchasedTicket, PurchaseOrder, Rank, WinningNumbers

WINNING_SET = (1, 2, 3, 4, 5, 6)
BONUS = 7
OUTSIDE = (20, 21, 22, 23, 24, 25)


def _winning(prizes: dict | None = None) -> WinningNumbers:
    if prizes is None:
        prizes = {
            rank: PrizeInfo(winner_count=1, amount_per_winner=rank.value * 1000, total_amount=rank.value * 1000)
            for rank in (Rank.FIRST, Rank.SECOND, Rank.THIRD, Rank.FOURTH, Rank.FIFTH)
        }
    return WinningNumbers(round=1102, draw_date=None, numbers=WINNING_SET, bonus_number=BONUS, prizes=prizes)


def _ticket(numbers, slot: str = "A", round_no: int = 1102) -> PurchasedTicket:
    return PurchasedTicket(round=round_no, slot=slot, numbers=tuple(numbers), mode="자동")


def _numbers(matches: int, with_bonus: bool) -> list[int]:
    picked = list(WINNING_SET[:matches])
    filler = ([BONUS] if with_bonus else []) + list(OUTSIDE)
    return picked + filler[: 6 - matches]


def test_parse_ticket_numbers_sorts_and_validates():
    assert parse_ticket_numbers("9, 1, 3, 2, 45, 4") == [1, 2, 3, 4, 9, 45]
    assert parse_ticket_numbers("１０ ２ 3;4/5 6") == [2, 3, 4, 5, 6, 10]


@pytest.mark.parametrize("raw", ["", "1 2 3 4 5", "1 1 2 3 4 5", "0 1 2 3 4 5", "1 2 3 4 5 46", "a b c d e f"])
def test_parse_ticket_numbers_rejects(raw: str):
    with pytest.raises(InvalidInput):
        parse_ticket_numbers(raw)


@pytest.mark.parametrize(
    "matches, with_bonus, expected",
    [
        (6, False, Rank.FIRST),
        (5, True, Rank.SECOND),
        (5, False, Rank.THIRD),
        (4, True, Rank.FOURTH),
        (4, False, Rank.FOURTH),
        (3, True, Rank.FIFTH),
        (3, False, Rank.FIFTH),
        (2, True, Rank.NONE),
        (1, False, Rank.NONE),
        (0, False, Rank.NONE),
    ],
)
def test_rank_table(matches: int, with_bonus: bool, expected: Rank):
    assert evaluate_rank(_numbers(matches, with_bonus), _winning()) is expected


def test_only_full_match_is_first_rank():
    pool = WINNING_SET + (BONUS,) + OUTSIDE[:2]
    for combo in itertools.combinations(pool, 6):
        rank = evaluate_rank(combo, _winning())
        assert (rank is Rank.FIRST) == (set(combo) == set(WINNING_SET))


def test_rank_ignores_prize_table():
    numbers = _numbers(5, True)
    assert evaluate_rank(numbers, _winning()) is evaluate_rank(numbers, _winning(prizes={}))


def test_prize_for_rank():
    assert prize_for_rank(_winning(), Rank.SECOND) == 2000
    assert prize_for_rank(_winning(), Rank.NONE) == 0
    assert prize_for_rank(_winning(prizes={}), Rank.FIRST) == 0


def test_build_summary_preserves_order_and_prizes():
    tickets = [
        _ticket(_numbers(0, False), slot="A"),
        _ticket(_numbers(3, False), slot="B"),
        _ticket(_numbers(5, True), slot="C"),
    ]
    summary = build_summary(_winning(), tickets)

    assert summary.round == 1102
    assert summary.winning_numbers == WINNING_SET
    assert summary.bonus_number == BONUS
    assert [t.slot for t in summary.tickets] == ["A", "B", "C"]
    assert [t.rank for t in summary.tickets] == [Rank.NONE, Rank.FIFTH, Rank.SECOND]
    assert [t.prize_amount for t in summary.tickets] == [0, 5000, 2000]
    assert summary.has_winner() is True
    assert summary.total_prize_amount() == 7000
    assert [t.slot for t in summary.winning_tickets()] == ["B", "C"]


def test_build_summary_without_winner():
    summary = build_summary(_winning(), [_ticket(OUTSIDE), _ticket(_numbers(2, True), slot="B")])
    assert summary.has_winner() is False
    assert summary.total_prize_amount() == 0


def test_build_summary_missing_prize_row():
    summary = build_summary(_winning(prizes={}), [_ticket(_numbers(3, False))])
    assert summary.tickets[0].rank is Rank.FIFTH
    assert summary.tickets[0].prize_amount == 0
    assert summary.has_winner() is True


def test_select_round_tickets():
    orders = [
        PurchaseOrder(round=1103, order_no="3", tickets=(_ticket(OUTSIDE, round_no=1103),)),
        PurchaseOrder(round=1102, order_no="2", tickets=(_ticket(OUTSIDE, slot="A"), _ticket(OUTSIDE, slot="B"))),
        PurchaseOrder(round=1102, order_no="1", tickets=(_ticket(OUTSIDE, slot="C"),)),
    ]
    assert [t.slot for t in select_round_tickets(orders, 1102)] == ["A", "B", "C"]


def test_select_round_tickets_without_match():
    orders = [PurchaseOrder(round=1101, order_no="1", tickets=(_ticket(OUTSIDE, round_no=1101),))]
    with pytest.raises(NoDataFound):
        select_round_tickets(orders, 1102)

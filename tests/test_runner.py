from typing import Any, List

import pytest

from weekly_lotto.config import Settings
from weekly_lotto.errors import AuthenticationFailed, NoDataFound, PurchaseRejected
from weekly_lotto.models import (
    PrizeInfo,
    PurchasedTicket,
    PurchaseOrder,
    Rank,
    TicketMode,
    WinningNumbers,
)
from weekly_lotto.notify import Notifier
from weekly_lotto.runner import BUY_OPERATION, CHECK_OPERATION, run_buy, run_check

SETTINGS = Settings(username="user", password="secret", ticket_count=2, manual_tickets=((1, 2, 3, 4, 5, 6),))

WINNING = WinningNumbers(
    round=1102,
    draw_date=None,
    numbers=(1, 2, 3, 4, 5, 6),
    bonus_number=7,
    prizes={Rank.FIFTH: PrizeInfo(winner_count=1, amount_per_winner=5000, total_amount=5000)},
)


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.events: List[tuple] = []

    def notify_purchase(self, tickets) -> None:
        self.events.append(("purchase", list(tickets)))

    def notify_result(self, summary) -> None:
        self.events.append(("result", summary))

    def notify_failure(self, operation, error) -> None:
        self.events.append(("failure", operation, error))


class FakeClient:
    def __init__(self, username: str, password: str, *, timeout_seconds: Any = None) -> None:
        self.username = username
        self.timeout_seconds = timeout_seconds
        self.bought: List[Any] = []
        self.orders: List[PurchaseOrder] = []
        self.buy_error: Exception | None = None

    def buy_tickets(self, tickets):
        if self.buy_error:
            raise self.buy_error
        self.bought = list(tickets)
        return [
            PurchasedTicket(round=1102, slot="AB"[i], numbers=(1, 2, 3, 4, 5, 6), mode="수동")
            for i in range(len(tickets))
        ]

    def get_winning_numbers(self) -> WinningNumbers:
        return WINNING

    def get_recent_purchases(self, days: int) -> List[PurchaseOrder]:
        return self.orders


def _factory(configure=None):
    created: List[FakeClient] = []

    def factory(username, password, **kwargs):
        client = FakeClient(username, password, **kwargs)
        if configure:
            configure(client)
        created.append(client)
        return client

    return factory, created


def test_run_buy_notifies_purchase():
    notifier = RecordingNotifier()
    factory, created = _factory()

    purchased = run_buy(SETTINGS, notifier, client_factory=factory)

    assert len(purchased) == 2
    assert [t.mode for t in created[0].bought] == [TicketMode.MANUAL, TicketMode.AUTO]
    assert notifier.events == [("purchase", purchased)]


def test_run_buy_reports_failure_and_reraises():
    notifier = RecordingNotifier()
    error = PurchaseRejected("판매 시간이 아닙니다.", result_code="-1")

    def configure(client: FakeClient) -> None:
        client.buy_error = error

    factory, _ = _factory(configure)
    with pytest.raises(PurchaseRejected):
        run_buy(SETTINGS, notifier, client_factory=factory)
    assert notifier.events == [("failure", BUY_OPERATION, error)]


def test_run_buy_login_failure():
    notifier = RecordingNotifier()

    def factory(username, password, **kwargs):
        raise AuthenticationFailed("bad credentials", operation="login")

    with pytest.raises(AuthenticationFailed):
        run_buy(SETTINGS, notifier, client_factory=factory)
    assert notifier.events[0][:2] == ("failure", BUY_OPERATION)


def test_run_check_builds_summary_for_draw_round():
    notifier = RecordingNotifier()

    def configure(client: FakeClient) -> None:
        client.orders = [
            PurchaseOrder(
                round=1103,
                order_no="new",
                tickets=(PurchasedTicket(round=1103, slot="A", numbers=(1, 2, 3, 4, 5, 6), mode="자동"),),
            ),
            PurchaseOrder(
                round=1102,
                order_no="old",
                tickets=(PurchasedTicket(round=1102, slot="A", numbers=(1, 2, 3, 10, 11, 12), mode="자동"),),
            ),
        ]

    factory, _ = _factory(configure)
    summary = run_check(SETTINGS, notifier, client_factory=factory)

    assert summary.round == 1102
    assert [t.rank for t in summary.tickets] == [Rank.FIFTH]
    assert summary.tickets[0].prize_amount == 5000
    assert notifier.events == [("result", summary)]


def test_run_check_without_round_purchase():
    notifier = RecordingNotifier()

    def configure(client: FakeClient) -> None:
        client.orders = [
            PurchaseOrder(
                round=1101,
                order_no="old",
                tickets=(PurchasedTicket(round=1101, slot="A", numbers=(1, 2, 3, 4, 5, 6), mode="자동"),),
            )
        ]

    factory, _ = _factory(configure)
    with pytest.raises(NoDataFound):
        run_check(SETTINGS, notifier, client_factory=factory)
    assert notifier.events[0][:2] == ("failure", CHECK_OPERATION)

from __future__ import annotations

import logging
from typing import Any, Callable, List

from .checker import build_summary, select_round_tickets
from .client import DhLotteryClient
from .config import Settings
from .errors import LotteryError
from .models import CheckSummary, PurchasedTicket
from .notify import Notifier

LOGGER = logging.getLogger(__name__)

BUY_OPERATION = "로또 구매"
CHECK_OPERATION = "당첨 확인"

ClientFactory = Callable[..., Any]


def _connect(settings: Settings, client_factory: ClientFactory) -> DhLotteryClient:
    return client_factory(
        settings.username,
        settings.password,
        timeout_seconds=settings.timeout_seconds,
    )


def run_buy(
    settings: Settings,
    notifier: Notifier,
    client_factory: ClientFactory = DhLotteryClient,
) -> List[PurchasedTicket]:
    try:
        client = _connect(settings, client_factory)
        requests = settings.ticket_requests()
        LOGGER.info("Buying %d ticket(s)", len(requests))
        purchased = client.buy_tickets(requests)
    except LotteryError as exc:
        notifier.notify_failure(BUY_OPERATION, exc)
        raise

    for ticket in purchased:
        LOGGER.info("Slot %s (%s): %s", ticket.slot, ticket.mode, list(ticket.numbers))
    notifier.notify_purchase(purchased)
    return purchased


def run_check(
    settings: Settings,
    notifier: Notifier,
    client_factory: ClientFactory = DhLotteryClient,
) -> CheckSummary:
    try:
        client = _connect(settings, client_factory)
        winning = client.get_winning_numbers()
        orders = client.get_recent_purchases(settings.history_days)
        tickets = select_round_tickets(orders, winning.round)
    except LotteryError as exc:
        notifier.notify_failure(CHECK_OPERATION, exc)
        raise

    summary = build_summary(winning, tickets)
    LOGGER.info(
        "Round %s: %d ticket(s), %d winner(s)",
        summary.round,
        len(summary.tickets),
        len(summary.winning_tickets()),
    )
    notifier.notify_result(summary)
    return summary

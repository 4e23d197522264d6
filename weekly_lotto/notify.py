from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import List, Sequence, Tuple

from .errors import InvalidInput
from .models import CheckSummary, PurchasedTicket

LOGGER = logging.getLogger(__name__)

SUBJECT_PREFIX = "[weekly-lotto]"


def _format_numbers(numbers: Sequence[int]) -> str:
    return " ".join(f"{n:02d}" for n in numbers)


def format_purchase_message(tickets: Sequence[PurchasedTicket]) -> Tuple[str, str]:
    if not tickets:
        raise InvalidInput("구매한 티켓이 없습니다.")
    round_no = tickets[0].round
    subject = f"{SUBJECT_PREFIX} {round_no}회 로또 {len(tickets)}장 구매 완료"
    lines = [f"{round_no}회 로또 {len(tickets)}장을 구매했습니다.", ""]
    for ticket in tickets:
        lines.append(f"{ticket.slot} ({ticket.mode}): {_format_numbers(ticket.numbers)}")
    return subject, "\n".join(lines)


def format_result_message(summary: CheckSummary) -> Tuple[str, str]:
    subject = f"{SUBJECT_PREFIX} {summary.round}회 당첨 결과"
    draw_date = summary.draw_date.isoformat() if summary.draw_date else "-"
    lines: List[str] = [
        f"{summary.round}회 ({draw_date}) 당첨 번호: "
        f"{_format_numbers(summary.winning_numbers)} + {summary.bonus_number:02d}",
        "",
    ]
    for ticket in summary.tickets:
        line = f"{ticket.slot} ({ticket.mode}): {_format_numbers(ticket.numbers)} -> {ticket.rank.label}"
        if ticket.prize_amount:
            line += f" ({ticket.prize_amount:,}원)"
        lines.append(line)
    lines.append("")
    if summary.has_winner():
        lines.append(f"총 당첨금: {summary.total_prize_amount():,}원")
    else:
        lines.append("당첨된 티켓이 없습니다.")
    return subject, "\n".join(lines)


def format_failure_message(operation: str, error: BaseException) -> Tuple[str, str]:
    subject = f"{SUBJECT_PREFIX} ❌ {operation} 실패"
    body = f"{operation} 작업이 실패했습니다.\n\n{type(error).__name__}: {error}"
    return subject, body


class Notifier(ABC):
    """Receives finished purchases, check summaries and failures."""

    @abstractmethod
    def notify_purchase(self, tickets: Sequence[PurchasedTicket]) -> None:
        pass

    @abstractmethod
    def notify_result(self, summary: CheckSummary) -> None:
        pass

    @abstractmethod
    def notify_failure(self, operation: str, error: BaseException) -> None:
        pass


class LogNotifier(Notifier):
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or LOGGER

    def notify_purchase(self, tickets: Sequence[PurchasedTicket]) -> None:
        subject, body = format_purchase_message(tickets)
        self._logger.info("%s\n%s", subject, body)

    def notify_result(self, summary: CheckSummary) -> None:
        subject, body = format_result_message(summary)
        self._logger.info("%s\n%s", subject, body)

    def notify_failure(self, operation: str, error: BaseException) -> None:
        subject, body = format_failure_message(operation, error)
        self._logger.error("%s\n%s", subject, body)

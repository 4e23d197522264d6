from .checker import build_summary, evaluate_rank, parse_ticket_numbers, prize_for_rank, select_round_tickets
from .client import DhLotteryClient
from .config import Settings, load_settings
from .errors import (
    AuthenticationFailed,
    InvalidInput,
    LotteryError,
    NoDataFound,
    ParseError,
    PurchaseRejected,
    SiteUnavailable,
    TransportError,
)
from .models import (
    CheckSummary,
    PrizeInfo,
    PurchasedTicket,
    PurchaseOrder,
    PurchaseSummary,
    Rank,
    TicketMode,
    TicketRequest,
    TicketResult,
    WinningNumbers,
    auto_tickets,
)
from .notify import LogNotifier, Notifier
from .runner import run_buy, run_check

__all__ = [
    "AuthenticationFailed",
    "CheckSummary",
    "DhLotteryClient",
    "InvalidInput",
    "LogNotifier",
    "LotteryError",
    "NoDataFound",
    "Notifier",
    "ParseError",
    "PrizeInfo",
    "PurchaseOrder",
    "PurchaseRejected",
    "PurchaseSummary",
    "PurchasedTicket",
    "Rank",
    "Settings",
    "SiteUnavailable",
    "TicketMode",
    "TicketRequest",
    "TicketResult",
    "TransportError",
    "WinningNumbers",
    "auto_tickets",
    "build_summary",
    "evaluate_rank",
    "load_settings",
    "parse_ticket_numbers",
    "prize_for_rank",
    "run_buy",
    "run_check",
    "select_round_tickets",
]

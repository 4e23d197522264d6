from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import List, Mapping, Tuple

from dotenv import load_dotenv

from .checker import parse_ticket_numbers
from .errors import InvalidInput
from .models import TicketRequest

DEFAULT_TICKET_COUNT = 5
DEFAULT_HISTORY_DAYS = 7


@dataclass(frozen=True)
class Settings:
    username: str
    password: str = field(repr=False)
    ticket_count: int = DEFAULT_TICKET_COUNT
    manual_tickets: Tuple[Tuple[int, ...], ...] = ()
    history_days: int = DEFAULT_HISTORY_DAYS
    timeout_seconds: float | None = None

    def ticket_requests(self) -> List[TicketRequest]:
        requests = [TicketRequest.manual(numbers) for numbers in self.manual_tickets]
        while len(requests) < self.ticket_count:
            requests.append(TicketRequest.auto())
        return requests


def _int_value(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise InvalidInput(f"{name} 값은 정수여야 합니다: {raw!r}") from exc
    if value < minimum:
        raise InvalidInput(f"{name} 값은 {minimum} 이상이어야 합니다: {value}")
    return value


def _timeout_value(env: Mapping[str, str]) -> float | None:
    raw = env.get("LOTTO_TIMEOUT_SECONDS", "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise InvalidInput(f"LOTTO_TIMEOUT_SECONDS 값은 숫자여야 합니다: {raw!r}") from exc
    if value <= 0:
        raise InvalidInput(f"LOTTO_TIMEOUT_SECONDS 값은 0보다 커야 합니다: {value}")
    return value


def _manual_tickets(env: Mapping[str, str]) -> Tuple[Tuple[int, ...], ...]:
    raw = env.get("LOTTO_MANUAL_TICKETS", "").strip()
    if not raw:
        return ()
    return tuple(tuple(parse_ticket_numbers(part)) for part in raw.split("|") if part.strip())


def load_settings(env: Mapping[str, str] | None = None, dotenv_path: str | None = None) -> Settings:
    if env is None:
        load_dotenv(dotenv_path, override=False)
        env = os.environ

    username = env.get("LOTTO_USERNAME", "").strip()
    password = env.get("LOTTO_PASSWORD", "")
    if not username or not password:
        raise InvalidInput("LOTTO_USERNAME / LOTTO_PASSWORD 환경 변수가 필요합니다.")

    manual = _manual_tickets(env)
    ticket_count = _int_value(env, "LOTTO_TICKET_COUNT", DEFAULT_TICKET_COUNT, minimum=1)
    ticket_count = max(ticket_count, len(manual))

    return Settings(
        username=username,
        password=password,
        ticket_count=ticket_count,
        manual_tickets=manual,
        history_days=_int_value(env, "LOTTO_HISTORY_DAYS", DEFAULT_HISTORY_DAYS, minimum=0),
        timeout_seconds=_timeout_value(env),
    )

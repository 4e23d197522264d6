"""Decoders for the dhlottery.co.kr pages and JSON endpoints.

The site has no published API. Everything here mirrors the markup and JSON the
site served when this module was written, so a ``ParseError`` most often means
the markup changed or the session silently expired.
"""

from __future__ import annotations

from datetime import date
import json
import re
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from bs4 import BeautifulSoup

from .errors import AuthenticationFailed, InvalidInput, ParseError, PurchaseRejected
from .models import (
    MAX_NUMBER,
    MAX_TICKETS_PER_PURCHASE,
    MIN_NUMBER,
    MODE_AUTO_LABEL,
    MODE_MANUAL_LABEL,
    MODE_SEMI_AUTO_LABEL,
    MODE_UNKNOWN_LABEL,
    SLOTS,
    PrizeInfo,
    PurchasedTicket,
    PurchaseSummary,
    Rank,
    TicketMode,
    TicketRequest,
    WinningNumbers,
    validate_numbers,
)

LOGIN_FAILURE_MARKER = "아이디 또는 비밀번호를 다시 확인"
BUY_SUCCESS_CODE = "100"

# Trailing digit of an arrGameChoiceNum line.
MODE_DIGITS: Dict[str, str] = {
    "1": MODE_MANUAL_LABEL,
    "2": MODE_SEMI_AUTO_LABEL,
    "3": MODE_AUTO_LABEL,
}

DETAIL_POP_PATTERN = re.compile(r"detailPop\(\s*'([^']*)'\s*,\s*'([^']*)'\s*,\s*'([^']*)'\s*\)")
ROUND_TEXT_PATTERN = re.compile(r"제\s*(\d+)\s*회")
DRAW_DATE_PATTERN = re.compile(r"(\d{4})\s*년\s*(\d{1,2})\s*월\s*(\d{1,2})\s*일")
RANK_LABEL_PATTERN = re.compile(r"([1-5])\s*등")


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _digits(text: str) -> str:
    return "".join(ch for ch in text if ch.isdigit())


def _parse_amount(text: str) -> int:
    digits = _digits(text)
    return int(digits) if digits else 0


def _load_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except ValueError as exc:
        raise ParseError(f"{what} 응답이 JSON 형식이 아닙니다.") from exc


def parse_login_result(html: str) -> None:
    if LOGIN_FAILURE_MARKER in html:
        raise AuthenticationFailed("아이디 또는 비밀번호가 올바르지 않습니다.")


def parse_current_round(html: str) -> int:
    """Return the next purchasable round; the main page shows the last drawn one."""
    found = _soup(html).find("strong", id="lottoDrwNo")
    if found is None:
        raise ParseError("메인 페이지에서 회차 정보를 찾을 수 없습니다.")
    text = found.get_text(strip=True)
    if not text.isdigit():
        raise ParseError(f"회차 정보가 숫자가 아닙니다: {text!r}")
    return int(text) + 1


def parse_ready_ip(text: str) -> str:
    data = _load_json(text, "ready socket")
    ready_ip = data.get("ready_ip") if isinstance(data, dict) else None
    if not isinstance(ready_ip, str) or not ready_ip.strip():
        raise ParseError("ready_ip 값이 응답에 없습니다.")
    return ready_ip


def encode_buy_param(tickets: Sequence[TicketRequest]) -> str:
    if len(tickets) > MAX_TICKETS_PER_PURCHASE:
        raise InvalidInput(f"최대 {MAX_TICKETS_PER_PURCHASE}장까지만 구매 가능합니다.")

    slots: List[Dict[str, Any]] = []
    for index, ticket in enumerate(tickets):
        if ticket.mode is TicketMode.AUTO:
            choice = None
        else:
            choice = ",".join(str(n) for n in ticket.numbers)
        slots.append(
            {
                "genType": ticket.mode.gen_type,
                "arrGameChoiceNum": choice,
                "alpabet": SLOTS[index],
            }
        )
    return json.dumps(slots, separators=(",", ":"))


def parse_purchased_line(line: str, round_no: int) -> PurchasedTicket | None:
    """Decode one ``"A|01|02|04|27|39|443"`` line.

    The mode digit is fused onto the last number, so the outer slot and mode
    characters are stripped first and only the remainder is split on ``|``.
    Tokens that are not integers are dropped. Lines too short to hold a slot,
    separator and mode digit yield ``None``.
    """
    if len(line) < 3:
        return None

    slot = line[0]
    mode_digit = line[-1]
    numbers_section = line[2:-1]

    numbers: List[int] = []
    for token in numbers_section.split("|"):
        try:
            numbers.append(int(token))
        except ValueError:
            continue

    return PurchasedTicket(
        round=round_no,
        slot=slot,
        numbers=tuple(numbers),
        mode=MODE_DIGITS.get(mode_digit, MODE_UNKNOWN_LABEL),
    )


def parse_purchased_numbers(lines: Iterable[str], round_no: int) -> List[PurchasedTicket]:
    tickets: List[PurchasedTicket] = []
    for line in lines:
        ticket = parse_purchased_line(str(line), round_no)
        if ticket is not None:
            tickets.append(ticket)
    return tickets


def parse_buy_result(text: str, round_no: int) -> List[PurchasedTicket]:
    data = _load_json(text, "구매")
    result = data.get("result") if isinstance(data, dict) else None
    if not isinstance(result, dict):
        raise ParseError("구매 응답에 result 항목이 없습니다.")

    result_code = str(result.get("resultCode", ""))
    if result_code != BUY_SUCCESS_CODE:
        raise PurchaseRejected(str(result.get("resultMsg") or ""), result_code=result_code)

    lines = result.get("arrGameChoiceNum") or []
    if not isinstance(lines, list):
        raise ParseError("arrGameChoiceNum 항목이 배열이 아닙니다.")
    return parse_purchased_numbers(lines, round_no)


def _parse_draw_date(text: str) -> date | None:
    match = DRAW_DATE_PATTERN.search(text)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    return date(year, month, day)


def _ball_numbers(container: Any) -> List[int]:
    if container is None:
        return []
    numbers: List[int] = []
    for span in container.find_all("span"):
        digits = _digits(span.get_text(strip=True))
        if digits:
            numbers.append(int(digits))
    return numbers


def _parse_prize_table(soup: BeautifulSoup) -> Dict[Rank, PrizeInfo]:
    prizes: Dict[Rank, PrizeInfo] = {}
    for row in soup.select("table.tbl_data tbody tr"):
        cells = [cell.get_text(strip=True) for cell in row.find_all("td")]
        if len(cells) < 4:
            continue
        match = RANK_LABEL_PATTERN.search(cells[0])
        if not match:
            continue
        rank = Rank(int(match.group(1)))
        prizes[rank] = PrizeInfo(
            winner_count=_parse_amount(cells[2]),
            amount_per_winner=_parse_amount(cells[3]),
            total_amount=_parse_amount(cells[1]),
        )
    return prizes


def _check_winning_balls(numbers: List[int], bonus: int) -> None:
    try:
        validate_numbers(numbers)
    except InvalidInput as exc:
        raise ParseError(f"당첨 번호가 올바르지 않습니다: {exc.message}") from exc
    if bonus < MIN_NUMBER or bonus > MAX_NUMBER or bonus in numbers:
        raise ParseError(f"보너스 번호가 올바르지 않습니다: {bonus}")


def parse_winning_numbers(html: str) -> WinningNumbers:
    soup = _soup(html)
    result = soup.select_one("div.win_result")
    if result is None:
        raise ParseError("당첨 결과 영역을 찾을 수 없습니다.")

    round_tag = result.select_one("h4 strong")
    round_digits = _digits(round_tag.get_text(strip=True)) if round_tag else ""
    if not round_digits:
        raise ParseError("당첨 회차를 찾을 수 없습니다.")

    desc = result.select_one("p.desc")
    draw_date = _parse_draw_date(desc.get_text(strip=True)) if desc else None

    numbers = _ball_numbers(result.select_one("div.num.win"))
    bonus = _ball_numbers(result.select_one("div.num.bonus"))
    if len(numbers) != 6 or len(bonus) != 1:
        raise ParseError(f"당첨 번호를 읽을 수 없습니다: {numbers} + {bonus}")
    _check_winning_balls(numbers, bonus[0])

    return WinningNumbers(
        round=int(round_digits),
        draw_date=draw_date,
        numbers=tuple(numbers),
        bonus_number=bonus[0],
        prizes=_parse_prize_table(soup),
    )


def parse_purchase_list(html: str) -> List[PurchaseSummary]:
    summaries: List[PurchaseSummary] = []
    for order_no, barcode, issue_no in DETAIL_POP_PATTERN.findall(html):
        summaries.append(PurchaseSummary(order_no=order_no, barcode=barcode, issue_no=issue_no))
    return summaries


def _parse_detail_round(soup: BeautifulSoup) -> int:
    header = soup.select_one("div.date-info")
    if header is None:
        return 0
    match = ROUND_TEXT_PATTERN.search(header.get_text(" ", strip=True))
    return int(match.group(1)) if match else 0


def parse_purchase_detail(html: str) -> Tuple[int, List[PurchasedTicket]]:
    """Return the order's round (0 when not shown) and its ticket rows."""
    soup = _soup(html)
    round_no = _parse_detail_round(soup)

    tickets: List[PurchasedTicket] = []
    for item in soup.select("div.selected li"):
        labels = [span.get_text(strip=True) for span in item.select("strong span")]
        labels = [re.sub(r"\s+", "", label) for label in labels if label]
        if not labels:
            continue
        slot = labels[0]
        mode = labels[1] if len(labels) > 1 else MODE_UNKNOWN_LABEL
        numbers = _ball_numbers(item.select_one("div.nums"))
        tickets.append(
            PurchasedTicket(
                round=round_no,
                slot=slot,
                numbers=tuple(numbers),
                mode=mode,
            )
        )
    return round_no, tickets

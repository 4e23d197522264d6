from __future__ import annotations

from contextlib import contextmanager
from datetime import date, timedelta
import logging
from typing import Any, Callable, Dict, Iterator, List, Sequence, Tuple

import requests

from .errors import InvalidInput, LotteryError, NoDataFound, ParseError, SiteUnavailable, TransportError
from .models import (
    MAX_TICKETS_PER_PURCHASE,
    TICKET_PRICE,
    PurchasedTicket,
    PurchaseOrder,
    PurchaseSummary,
    TicketRequest,
    WinningNumbers,
)
from . import parser

LOGGER = logging.getLogger(__name__)

SESSION_URL = "https://dhlottery.co.kr/gameResult.do?method=byWin&wiselog=H_C_1_1"
SYSTEM_CHECK_URL = "https://dhlottery.co.kr/index_check.html"
MAIN_URL = "https://www.dhlottery.co.kr/common.do?method=main"
LOGIN_URL = "https://www.dhlottery.co.kr/userSsl.do?method=login"
READY_SOCKET_URL = "https://ol.dhlottery.co.kr/olotto/game/egovUserReadySocket.json"
BUY_LOTTO645_URL = "https://ol.dhlottery.co.kr/olotto/game/execBuy.do"
WINNING_URL = "https://dhlottery.co.kr/gameResult.do?method=byWin"
BUY_LIST_URL = "https://www.dhlottery.co.kr/myPage.do?method=lottoBuyList"
DETAIL_URL = "https://www.dhlottery.co.kr/myPage.do?method=lotto645Detail"

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/91.0.4472.77 Safari/537.36"
    ),
    "Connection": "keep-alive",
    "Cache-Control": "max-age=0",
    "Upgrade-Insecure-Requests": "1",
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "ko,en-US;q=0.9,en;q=0.8,ko-KR;q=0.7",
    "Referer": "https://dhlottery.co.kr",
}
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"


@contextmanager
def _operation(name: str) -> Iterator[None]:
    try:
        yield
    except LotteryError as exc:
        exc.add_operation(name)
        raise
    except requests.RequestException as exc:
        raise TransportError(f"요청 실패: {exc}", operation=name) from exc


class DhLotteryClient:
    """Authenticated session against dhlottery.co.kr.

    Construction warms up a session cookie and logs in; a client object only
    exists once both succeeded. One instance holds one cookie jar and must not
    be shared between concurrent callers.
    """

    def __init__(
        self,
        username: str,
        password: str,
        *,
        timeout_seconds: float | None = None,
        session: requests.Session | None = None,
        today_fn: Callable[[], date] | None = None,
    ) -> None:
        self._timeout = timeout_seconds
        self._today_fn = today_fn or date.today
        self._session = session or requests.Session()
        self._session.headers.update(DEFAULT_HEADERS)

        with _operation("session init"):
            self._init_session()
        with _operation("login"):
            self._login(username, password)
        LOGGER.info("Logged in to dhlottery")

    def _init_session(self) -> None:
        response = self._request("GET", SESSION_URL)
        if response.url == SYSTEM_CHECK_URL:
            raise SiteUnavailable("동행복권 사이트가 현재 시스템 점검중입니다.")

    def _login(self, username: str, password: str) -> None:
        form = {
            "returnUrl": MAIN_URL,
            "userId": username,
            "password": password,
            "checkSave": "off",
            "newsEventYn": "",
        }
        response = self._request(
            "POST",
            LOGIN_URL,
            data=form,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        parser.parse_login_result(self._decode(response))

    def get_current_round(self) -> int:
        with _operation("current round"):
            response = self._request("GET", MAIN_URL)
            round_no = parser.parse_current_round(self._decode(response))
        LOGGER.info("Next purchasable round: %s", round_no)
        return round_no

    def buy_tickets(self, tickets: Sequence[TicketRequest]) -> List[PurchasedTicket]:
        with _operation("buy_tickets"):
            self._validate_tickets(tickets)

            with _operation("ready socket"):
                ready_ip = self._get_ready_ip()
            round_no = self.get_current_round()
            with _operation("encode param"):
                param = parser.encode_buy_param(tickets)

            form = {
                "round": str(round_no),
                "direct": ready_ip,
                "nBuyAmount": str(TICKET_PRICE * len(tickets)),
                "param": param,
                "gameCnt": str(len(tickets)),
            }
            with _operation("purchase"):
                response = self._request(
                    "POST",
                    BUY_LOTTO645_URL,
                    data=form,
                    headers={
                        "Content-Type": FORM_CONTENT_TYPE,
                        "X-Requested-With": "XMLHttpRequest",
                    },
                )
                purchased = parser.parse_buy_result(self._decode(response), round_no)

        LOGGER.info("Bought %d ticket(s) for round %s", len(purchased), round_no)
        return purchased

    @staticmethod
    def _validate_tickets(tickets: Sequence[TicketRequest]) -> None:
        if not tickets:
            raise InvalidInput("구매할 티켓이 없습니다.")
        if len(tickets) > MAX_TICKETS_PER_PURCHASE:
            raise InvalidInput(
                f"최대 {MAX_TICKETS_PER_PURCHASE}장까지만 구매 가능합니다. 요청: {len(tickets)}장"
            )
        for ticket in tickets:
            if not isinstance(ticket, TicketRequest):
                raise InvalidInput(f"올바르지 않은 티켓 요청입니다: {ticket!r}")

    def _get_ready_ip(self) -> str:
        response = self._request("POST", READY_SOCKET_URL)
        return parser.parse_ready_ip(self._decode(response))

    def get_winning_numbers(self) -> WinningNumbers:
        with _operation("winning numbers"):
            response = self._request("GET", WINNING_URL)
            winning = parser.parse_winning_numbers(self._decode(response))
        LOGGER.info("Fetched winning numbers for round %s", winning.round)
        return winning

    def get_recent_purchases(self, days: int) -> List[PurchaseOrder]:
        with _operation("recent purchases"):
            if days < 0:
                raise InvalidInput(f"조회 기간은 0일 이상이어야 합니다: {days}")
            end = self._today_fn()
            start = end - timedelta(days=days)

            with _operation("purchase list"):
                summaries = self._fetch_purchase_summaries(start, end)

            orders: List[PurchaseOrder] = []
            for summary in summaries:
                with _operation(f"purchase detail (orderNo: {summary.order_no})"):
                    round_no, tickets = self._fetch_purchase_tickets(summary)
                    if round_no == 0:
                        raise ParseError("구매 상세에서 회차를 확인할 수 없습니다.")
                orders.append(PurchaseOrder(round=round_no, order_no=summary.order_no, tickets=tuple(tickets)))

            if not orders:
                raise NoDataFound(f"최근 {days}일 동안의 구매 내역을 찾을 수 없습니다.")

        LOGGER.info("Found %d order(s) in the last %d day(s)", len(orders), days)
        return orders

    def _fetch_purchase_summaries(self, start: date, end: date) -> List[PurchaseSummary]:
        form = {
            "nowPage": "1",
            "searchStartDate": start.strftime("%Y%m%d"),
            "searchEndDate": end.strftime("%Y%m%d"),
            "lottoId": "",
            "winGrade": "2",
            "calendarStartDt": start.strftime("%Y-%m-%d"),
            "calendarEndDt": end.strftime("%Y-%m-%d"),
            "sortOrder": "DESC",
        }
        response = self._request("POST", BUY_LIST_URL, data=form, headers={"Content-Type": FORM_CONTENT_TYPE})
        return parser.parse_purchase_list(self._decode(response))

    def _fetch_purchase_tickets(self, summary: PurchaseSummary) -> Tuple[int, List[PurchasedTicket]]:
        params = {
            "orderNo": summary.order_no,
            "barcode": summary.barcode,
            "issueNo": summary.issue_no,
        }
        response = self._request("GET", DETAIL_URL, params=params)
        return parser.parse_purchase_detail(self._decode(response))

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        LOGGER.debug("%s %s", method, url)
        response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        response.raise_for_status()
        return response

    @staticmethod
    def _decode(response: requests.Response) -> str:
        content = response.content
        for encoding in ("utf-8", "cp949"):
            try:
                return content.decode(encoding)
            except UnicodeDecodeError:
                continue
        raise ParseError(f"응답 본문을 디코딩할 수 없습니다: {response.url}")

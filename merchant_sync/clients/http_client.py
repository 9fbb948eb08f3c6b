"""
Async HTTP Client

httpx 기반 비동기 HTTP 클라이언트
자동 재시도 및 에러 처리 포함
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

import httpx

from merchant_sync.core.exceptions import TransportError, TransportNetworkError

logger = logging.getLogger(__name__)


def _decode_error_body(response: httpx.Response) -> Dict[str, Any]:
    """에러 응답 바디를 dict로 디코딩 (JSON이 아니면 text만 보존)"""
    try:
        body = response.json()
    except ValueError:
        return {"text": response.text[:500]}
    return body if isinstance(body, dict) else {"data": body}


class AsyncHTTPClient:
    """
    비동기 HTTP 클라이언트

    Features:
    - httpx.AsyncClient 래퍼 (단일 타임아웃)
    - 5xx 및 네트워크 에러 재시도 (exponential backoff)
    - 4xx는 재시도하지 않고 TransportError로 즉시 전달
    - Authorization 헤더 주입 (token_provider)
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        max_retries: int = 2,
        base_delay: float = 1.0,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: 상대 경로 기준 URL
            timeout: 요청 타임아웃 (초)
            max_retries: 최대 시도 횟수
            base_delay: 기본 재시도 지연 (초)
            token_provider: 인증 토큰 반환 함수
            transport: httpx transport (테스트에서 MockTransport 주입)
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay
        self.token_provider = token_provider
        self.client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

        logger.debug(
            f"AsyncHTTPClient initialized: "
            f"timeout={timeout}s, max_retries={self.max_retries}"
        )

    def _build_headers(self, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
        merged = {"Accept": "application/json"}
        if self.token_provider:
            token = self.token_provider()
            if token:
                merged["Authorization"] = f"Bearer {token}"
        if headers:
            merged.update(headers)
        return merged

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        HTTP 요청 실행 (재시도 포함)

        Returns:
            응답 JSON

        Raises:
            TransportError: non-2xx 응답 (5xx는 재시도 소진 후)
            TransportNetworkError: 네트워크 에러 (재시도 소진 후)
        """
        last_exception: Optional[Exception] = None

        for attempt in range(self.max_retries):
            if attempt > 0:
                delay = self.base_delay * (2 ** (attempt - 1))
                logger.info(
                    f"Retry attempt {attempt}/{self.max_retries - 1} in {delay}s: "
                    f"{method} {url}"
                )
                await asyncio.sleep(delay)

            try:
                response = await self.client.request(
                    method=method,
                    url=url,
                    headers=self._build_headers(headers),
                    params=params,
                    json=json,
                )
            except httpx.TimeoutException as e:
                logger.warning(f"Timeout: {method} {url}")
                last_exception = TransportNetworkError(
                    message=f"Request timeout: {url}",
                    details={"url": url, "method": method, "error": str(e)}
                )
                continue
            except httpx.RequestError as e:
                logger.warning(f"Network error: {method} {url} - {e}")
                last_exception = TransportNetworkError(
                    message=f"Network error: {url}",
                    details={"url": url, "method": method, "error": str(e)}
                )
                continue

            logger.debug(
                f"{method} {url} -> {response.status_code} "
                f"({len(response.content)} bytes)"
            )

            # 성공 (2xx)
            if 200 <= response.status_code < 300:
                if not response.content:
                    return {}
                return response.json()

            body = _decode_error_body(response)

            # 클라이언트 에러 (4xx) - 재시도 불필요
            if 400 <= response.status_code < 500:
                logger.error(
                    f"API error {response.status_code}: {method} {url} "
                    f"code={body.get('code')}"
                )
                raise TransportError(
                    message=f"API error: {response.status_code}",
                    status_code=response.status_code,
                    body=body,
                    details={"url": url, "method": method}
                )

            # 서버 에러 (5xx) - 재시도 가능
            logger.warning(f"Server error {response.status_code}: {method} {url}")
            last_exception = TransportError(
                message=f"Server error: {response.status_code}",
                status_code=response.status_code,
                body=body,
                details={"url": url, "method": method}
            )

        logger.error(f"Max retries exceeded for {method} {url}")
        if last_exception:
            raise last_exception

        raise TransportNetworkError(
            message="Max retries exceeded",
            details={"url": url, "method": method}
        )

    async def get(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """GET 요청"""
        return await self.request("GET", url, headers=headers, params=params)

    async def post(
        self,
        url: str,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """POST 요청"""
        return await self.request("POST", url, headers=headers, json=json)

    async def put(
        self,
        url: str,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """PUT 요청"""
        return await self.request("PUT", url, headers=headers, json=json)

    async def close(self) -> None:
        """클라이언트 종료"""
        await self.client.aclose()
        logger.debug("AsyncHTTPClient closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

# @FEAT:payment-announcement @COMP:service @TYPE:helper
"""
결제 완료 음성 안내

TTS 엔진은 외부 협력자. 실패는 상태에 영향을 주지 않는다.
"""

import logging
from typing import Callable, Dict, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

DEFAULT_PHRASES: Dict[str, str] = {
    "en": "Payment of {amount} {currency} received",
    "ko": "{amount} {currency} 결제가 완료되었습니다",
}


@runtime_checkable
class Announcer(Protocol):
    async def speak(self, text: str, language: str, pitch: float = 0.8, rate: float = 0.8) -> None:
        ...


class LoggingAnnouncer:
    """TTS 엔진이 없는 환경용: 안내 문구를 로그로 남긴다"""

    async def speak(self, text: str, language: str, pitch: float = 0.8, rate: float = 0.8) -> None:
        logger.info(f"🔊 [{language}] {text}")


def build_payment_phrase(
    amount: float,
    currency: str,
    language: str,
    phrases: Optional[Dict[str, str]] = None,
) -> str:
    """언어별 결제 완료 문구 (지원하지 않는 언어는 영어)"""
    table = phrases or DEFAULT_PHRASES
    base_language = (language or "en").split("-")[0].lower()
    template = table.get(language) or table.get(base_language) or DEFAULT_PHRASES["en"]
    return template.format(amount=amount, currency=currency)


async def announce_payment(
    announcer: Announcer,
    amount: float,
    currency: str,
    language: str,
    on_end: Optional[Callable[[], None]] = None,
) -> bool:
    """결제 완료 안내 (실패는 로그만 남김)

    Returns:
        안내 성공 여부
    """
    text = build_payment_phrase(amount, currency, language)
    try:
        await announcer.speak(text, language, pitch=0.8, rate=0.8)
    except Exception as e:
        logger.warning(f"⚠️ 결제 음성 안내 실패: {e}")
        return False

    if on_end:
        on_end()
    return True

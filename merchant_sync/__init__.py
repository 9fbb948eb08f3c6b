"""
Merchant POS 결제/입금 상태 동기화 코어

캐시된 금융 엔티티(주문, 입금, 환율, 머천트 프로필)와 실시간 이벤트 버스를
하나의 일관된 상태 뷰로 조정합니다.
"""

__version__ = "1.0.0"

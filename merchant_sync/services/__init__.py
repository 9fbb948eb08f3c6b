"""
서비스 패키지

=== 서비스 의존성 계층 구조 ===

Level 1 (Infrastructure Layer)
  - storage.ttl_cache        : TTL 캐시 스토어
  - notification_service     : 사용자 메시지 출력 (토스트)
  - speech_service           : 결제 완료 음성 안내

Level 2 (Domain Layer)
  - exchange_rate_cache      : 일 단위 환율 캐시
  - entity_cache             : 주문/입금/프로필 cache-aside 조회
  - merchant_status          : 머천트 상태 에러 분류 및 강제 로그아웃 정책
  - realtime_channel         : 머천트 채널 구독 세션

Level 3 (Application Layer)
  - status_synchronizer      : 폴링 + 실시간 이벤트 상태 조정
  - background.cache_sweeper : 만료 캐시 주기 정리

의존성 규칙:
1. 상위 레벨 → 하위 레벨 의존만 허용
2. 서비스 인스턴스는 container.build_container()에서만 생성
"""

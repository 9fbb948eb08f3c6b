"""
Core 모듈

예외 정의와 로깅 설정을 제공합니다.
"""

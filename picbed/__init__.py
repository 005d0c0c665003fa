"""
picbed
여러 원격 저장소(S3, OSS, COS, Telegram)에 미디어 파일을 업로드하는 통합 계층
"""

__version__ = "1.0.0"

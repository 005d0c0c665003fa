"""
Upload Feature
파일 검증, 경로 생성, 저장소 생성
"""

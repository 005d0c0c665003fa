"""
Core Module
설정, 로깅, 예외 등 공통 기반
"""

"""Shared module - 공통 모델, 설정, 외부 서비스 어댑터."""
